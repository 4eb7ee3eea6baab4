from app.core.permissions import Principal, UserRole
from app.core.security import create_access_token

ADMIN = Principal(user_id=1, role=UserRole.ADMIN)
ALICE = Principal(user_id=101, role=UserRole.CUSTOMER)
BOB = Principal(user_id=102, role=UserRole.CUSTOMER)


def auth_header(principal: Principal) -> dict[str, str]:
    token = create_access_token({"sub": str(principal.user_id), "role": principal.role.value})
    return {"Authorization": f"Bearer {token}"}


def book(client, room_id: int, check_in: str, check_out: str, principal: Principal = ALICE, **extra):
    return client.post(
        "/api/v1/bookings/",
        json={"room_id": room_id, "check_in": check_in, "check_out": check_out, **extra},
        headers=auth_header(principal),
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_rooms_catalog(client, rooms):
    response = client.get("/api/v1/rooms/")
    assert response.status_code == 200
    numbers = [room["room_number"] for room in response.json()]
    assert numbers == ["101", "102"]

    in_maintenance = client.get("/api/v1/rooms/", params={"status": "maintenance"}).json()
    assert [room["room_number"] for room in in_maintenance] == ["301"]

    room = client.get(f"/api/v1/rooms/{rooms['301']}").json()
    assert room["room_type"]["name"] == "Suite"
    assert room["is_available"] is False

    assert client.get("/api/v1/rooms/9999").status_code == 404


def test_quote(client, rooms):
    response = client.get(
        f"/api/v1/rooms/{rooms['101']}/quote?check_in=2024-05-01&check_out=2024-05-04"
    )
    assert response.status_code == 200
    body = response.json()
    assert body["nights"] == 3
    assert body["total_price"] == "300.00"

    invalid = client.get(
        f"/api/v1/rooms/{rooms['101']}/quote?check_in=2024-05-01&check_out=2024-05-01"
    )
    assert invalid.status_code == 422
    assert invalid.json()["code"] == "invalid_input"


def test_booking_flow(client, rooms):
    created = book(client, rooms["101"], "2024-06-01", "2024-06-05", guests=2)
    assert created.status_code == 201
    booking = created.json()
    assert booking["status"] == "unpaid"
    assert booking["total_price"] == "400.00"

    availability = client.get(
        f"/api/v1/rooms/{rooms['101']}/availability?check_in=2024-06-03&check_out=2024-06-07"
    )
    assert availability.status_code == 200
    assert availability.json()["available"] is False
    assert [c["id"] for c in availability.json()["conflicts"]] == [booking["id"]]

    confirmed = client.post(f"/api/v1/bookings/{booking['id']}/confirm", headers=auth_header(ALICE))
    assert confirmed.status_code == 200
    assert confirmed.json()["status"] == "confirmed"

    conflict = book(client, rooms["101"], "2024-06-03", "2024-06-07", principal=BOB)
    assert conflict.status_code == 409
    assert conflict.json()["code"] == "conflict"
    assert conflict.json()["conflicting_booking_ids"] == [booking["id"]]

    adjacent = book(client, rooms["101"], "2024-06-05", "2024-06-07", principal=BOB)
    assert adjacent.status_code == 201

    cancelled = client.post(
        f"/api/v1/bookings/{booking['id']}/cancel",
        json={"reason": "Change of plans"},
        headers=auth_header(ALICE),
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["cancellation_reason"] == "Change of plans"

    rebooked = book(client, rooms["101"], "2024-06-01", "2024-06-05", principal=BOB)
    assert rebooked.status_code == 201

    history = client.get(f"/api/v1/bookings/{booking['id']}/history", headers=auth_header(ALICE))
    assert [h["to_status"] for h in history.json()] == ["unpaid", "confirmed", "cancelled"]


def test_status_endpoint(client, rooms):
    booking = book(client, rooms["101"], "2024-06-01", "2024-06-05").json()

    response = client.post(
        f"/api/v1/bookings/{booking['id']}/status",
        json={"status": "cancelled"},
        headers=auth_header(ALICE),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    again = client.post(
        f"/api/v1/bookings/{booking['id']}/status",
        json={"status": "confirmed"},
        headers=auth_header(ALICE),
    )
    assert again.status_code == 409
    body = again.json()
    assert body["code"] == "illegal_transition"
    assert body["current_status"] == "cancelled"
    assert body["requested_status"] == "confirmed"


def test_unknown_status_rejected_by_schema(client, rooms):
    booking = book(client, rooms["101"], "2024-06-01", "2024-06-05").json()
    response = client.post(
        f"/api/v1/bookings/{booking['id']}/status",
        json={"status": "paid"},
        headers=auth_header(ALICE),
    )
    assert response.status_code == 422


def test_other_customer_is_forbidden(client, rooms):
    booking = book(client, rooms["101"], "2024-06-01", "2024-06-05").json()

    confirm = client.post(f"/api/v1/bookings/{booking['id']}/confirm", headers=auth_header(BOB))
    assert confirm.status_code == 403
    assert confirm.json()["code"] == "forbidden"
    assert confirm.json()["role"] == "customer"

    read = client.get(f"/api/v1/bookings/{booking['id']}", headers=auth_header(BOB))
    assert read.status_code == 403


def test_invalid_input(client, rooms):
    inverted = book(client, rooms["101"], "2024-06-05", "2024-06-01")
    assert inverted.status_code == 422
    assert inverted.json()["code"] == "invalid_input"

    no_guests = book(client, rooms["101"], "2024-06-01", "2024-06-05", guests=0)
    assert no_guests.status_code == 422

    missing_room = book(client, 9999, "2024-06-01", "2024-06-05")
    assert missing_room.status_code == 404
    assert missing_room.json()["code"] == "not_found"


def test_authentication_required(client, rooms):
    response = client.post(
        "/api/v1/bookings/",
        json={"room_id": rooms["101"], "check_in": "2024-06-01", "check_out": "2024-06-05"},
    )
    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"

    bad = client.get("/api/v1/bookings/", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401


def test_list_my_bookings(client, rooms):
    book(client, rooms["101"], "2024-06-01", "2024-06-05")
    book(client, rooms["102"], "2024-06-01", "2024-06-05", principal=BOB)

    mine = client.get("/api/v1/bookings/", headers=auth_header(ALICE))
    assert mine.status_code == 200
    assert mine.json()["total"] == 1
    assert mine.json()["bookings"][0]["user_id"] == ALICE.user_id

    snooping = client.get(
        f"/api/v1/bookings/?user_id={BOB.user_id}", headers=auth_header(ALICE)
    )
    assert snooping.status_code == 403


def test_response_headers(client):
    response = client.get("/health", headers={"X-Request-ID": "req-1"})
    assert response.headers["X-Request-ID"] == "req-1"
    assert "X-Response-Time" in response.headers
    assert response.headers["X-Content-Type-Options"] == "nosniff"
