#!/usr/bin/env python3
"""
Complete booking lifecycle flow script.

DO NOT ADD BUSINESS LOGIC HERE.
This script only orchestrates API calls.
All rules live in the backend.

Tokens are minted locally with the shared JWT secret, standing in for the
identity service.

Usage:
    python scripts/flow_book_and_checkout.py --room-id 1 --check-in 2026-04-01 --check-out 2026-04-04

Flow:
    1. Check availability
    2. Quote the stay
    3. Create booking (customer)
    4. Try to double-book the same dates (expect 409)
    5. Confirm booking (customer)
    6. Check-in guest (admin)
    7. Check-out guest (admin)
    8. Show status history
"""

import argparse
import json
import sys

import httpx

from app.core.security import create_access_token

BASE_URL = "http://localhost:8000"


def mint_token(user_id: int, role: str) -> str:
    """Issue a token the API will accept."""
    return create_access_token({"sub": str(user_id), "role": role})


def api_request(token: str, method: str, endpoint: str, data: dict | None = None) -> dict:
    """Make authenticated API request."""
    headers = {"Authorization": f"Bearer {token}"}
    url = f"{BASE_URL}{endpoint}"

    if method == "GET":
        response = httpx.get(url, headers=headers, timeout=10.0, follow_redirects=True)
    elif method == "POST":
        response = httpx.post(url, headers=headers, json=data or {}, timeout=10.0, follow_redirects=True)
    else:
        raise ValueError(f"Unknown method: {method}")

    return {"status": response.status_code, "data": response.json() if response.text else {}}


def print_step(step: int, title: str):
    """Print step header."""
    print(f"\n{'='*60}")
    print(f"STEP {step}: {title}")
    print("="*60)


def print_result(result: dict, fields: list[str] | None = None):
    """Print result, optionally filtering fields."""
    if result["status"] >= 400:
        print(f"ERROR ({result['status']}): {json.dumps(result['data'], indent=2)}")
        return False

    print(f"Status: {result['status']}")
    data = result["data"]
    if fields and isinstance(data, dict):
        data = {k: data.get(k) for k in fields if k in data}
    print(json.dumps(data, indent=2))
    return True


def main():
    parser = argparse.ArgumentParser(description="Complete booking lifecycle flow")
    parser.add_argument("--room-id", type=int, required=True, help="Room ID")
    parser.add_argument("--check-in", required=True, help="Check-in date (YYYY-MM-DD)")
    parser.add_argument("--check-out", required=True, help="Check-out date (YYYY-MM-DD)")
    parser.add_argument("--guests", type=int, default=2, help="Number of guests")
    parser.add_argument("--customer-id", type=int, default=1001, help="Customer user ID")
    parser.add_argument("--admin-id", type=int, default=1, help="Admin user ID")
    args = parser.parse_args()

    customer_token = mint_token(args.customer_id, "customer")
    admin_token = mint_token(args.admin_id, "admin")
    stay = f"check_in={args.check_in}&check_out={args.check_out}"

    # Step 1: Availability
    print_step(1, "Check availability")
    availability = api_request(customer_token, "GET", f"/api/v1/rooms/{args.room_id}/availability?{stay}")
    if not print_result(availability):
        sys.exit(1)
    if not availability["data"]["available"]:
        print("ERROR: Room is not available for these dates")
        sys.exit(1)

    # Step 2: Quote
    print_step(2, "Quote the stay")
    quote = api_request(customer_token, "GET", f"/api/v1/rooms/{args.room_id}/quote?{stay}")
    if not print_result(quote):
        sys.exit(1)

    # Step 3: Create booking
    print_step(3, "Create booking")
    booking_result = api_request(customer_token, "POST", "/api/v1/bookings", {
        "room_id": args.room_id,
        "check_in": args.check_in,
        "check_out": args.check_out,
        "guests": args.guests,
    })
    if not print_result(booking_result, ["id", "nights", "total_price", "currency", "status"]):
        sys.exit(1)
    booking_id = booking_result["data"]["id"]

    # Step 4: Double booking is refused
    print_step(4, "Attempt to double-book (expect 409)")
    duplicate = api_request(mint_token(args.customer_id + 1, "customer"), "POST", "/api/v1/bookings", {
        "room_id": args.room_id,
        "check_in": args.check_in,
        "check_out": args.check_out,
        "guests": 1,
    })
    print(f"Status: {duplicate['status']}")
    print(json.dumps(duplicate["data"], indent=2))
    if duplicate["status"] != 409:
        print("ERROR: Expected a conflict")
        sys.exit(1)

    # Step 5: Confirm
    print_step(5, "Confirm booking (customer)")
    confirm_result = api_request(customer_token, "POST", f"/api/v1/bookings/{booking_id}/confirm")
    if not print_result(confirm_result, ["id", "status", "confirmed_at"]):
        sys.exit(1)

    # Step 6: Check-in
    print_step(6, "Check-in guest (admin)")
    checkin_result = api_request(admin_token, "POST", f"/api/v1/admin/bookings/{booking_id}/check-in")
    if not print_result(checkin_result, ["id", "status", "checked_in_at"]):
        sys.exit(1)

    # Step 7: Check-out
    print_step(7, "Check-out guest (admin)")
    checkout_result = api_request(admin_token, "POST", f"/api/v1/admin/bookings/{booking_id}/check-out")
    if not print_result(checkout_result, ["id", "status", "checked_out_at"]):
        sys.exit(1)

    # Step 8: History
    print_step(8, "Status history")
    history = api_request(customer_token, "GET", f"/api/v1/bookings/{booking_id}/history")
    if not print_result(history):
        sys.exit(1)

    print("\n" + "="*60)
    print("FULL FLOW COMPLETE")
    print("="*60)
    print(f"Booking:     {booking_id}")
    print(f"Total Price: {booking_result['data']['total_price']} {booking_result['data']['currency']}")


if __name__ == "__main__":
    main()
