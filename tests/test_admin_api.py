from app.core.permissions import Principal, UserRole
from app.core.security import create_access_token

ADMIN = Principal(user_id=1, role=UserRole.ADMIN)
ALICE = Principal(user_id=101, role=UserRole.CUSTOMER)
BOB = Principal(user_id=102, role=UserRole.CUSTOMER)


def auth_header(principal: Principal) -> dict[str, str]:
    token = create_access_token({"sub": str(principal.user_id), "role": principal.role.value})
    return {"Authorization": f"Bearer {token}"}


def create_booking(client, room_id: int, principal: Principal = ALICE) -> dict:
    response = client.post(
        "/api/v1/bookings/",
        json={"room_id": room_id, "check_in": "2024-06-01", "check_out": "2024-06-05"},
        headers=auth_header(principal),
    )
    assert response.status_code == 201
    return response.json()


def test_front_desk_flow(client, rooms):
    booking = create_booking(client, rooms["101"])
    admin_headers = auth_header(ADMIN)

    early = client.post(f"/api/v1/admin/bookings/{booking['id']}/check-in", headers=admin_headers)
    assert early.status_code == 409
    assert early.json()["current_status"] == "unpaid"

    client.post(f"/api/v1/bookings/{booking['id']}/confirm", headers=auth_header(ALICE))

    checked_in = client.post(f"/api/v1/admin/bookings/{booking['id']}/check-in", headers=admin_headers)
    assert checked_in.status_code == 200
    assert checked_in.json()["status"] == "checked_in"

    cancel = client.post(f"/api/v1/admin/bookings/{booking['id']}/cancel", headers=admin_headers)
    assert cancel.status_code == 409
    assert cancel.json()["code"] == "illegal_transition"

    checked_out = client.post(f"/api/v1/admin/bookings/{booking['id']}/check-out", headers=admin_headers)
    assert checked_out.status_code == 200
    assert checked_out.json()["status"] == "checked_out"

    history = client.get(f"/api/v1/bookings/{booking['id']}/history", headers=admin_headers).json()
    assert [h["forced"] for h in history] == [False, False, True, True]


def test_force_cancel_any_booking(client, rooms):
    booking = create_booking(client, rooms["101"])

    response = client.post(
        f"/api/v1/admin/bookings/{booking['id']}/cancel",
        json={"reason": "Overbooked by phone"},
        headers=auth_header(ADMIN),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert response.json()["cancellation_reason"] == "Overbooked by phone"


def test_set_status(client, rooms):
    booking = create_booking(client, rooms["101"])

    response = client.put(
        f"/api/v1/admin/bookings/{booking['id']}",
        json={"status": "confirmed"},
        headers=auth_header(ADMIN),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"

    illegal = client.put(
        f"/api/v1/admin/bookings/{booking['id']}",
        json={"status": "unpaid"},
        headers=auth_header(ADMIN),
    )
    assert illegal.status_code == 409


def test_customers_cannot_use_admin_routes(client, rooms):
    booking = create_booking(client, rooms["101"])
    headers = auth_header(ALICE)

    assert client.get("/api/v1/admin/bookings", headers=headers).status_code == 403
    assert client.post(f"/api/v1/admin/bookings/{booking['id']}/cancel", headers=headers).status_code == 403
    assert client.put(
        f"/api/v1/admin/bookings/{booking['id']}", json={"status": "confirmed"}, headers=headers
    ).status_code == 403


def test_list_all_bookings(client, rooms):
    create_booking(client, rooms["101"])
    create_booking(client, rooms["102"], principal=BOB)

    everything = client.get("/api/v1/admin/bookings", headers=auth_header(ADMIN))
    assert everything.status_code == 200
    assert everything.json()["total"] == 2

    bobs = client.get(f"/api/v1/admin/bookings?user_id={BOB.user_id}", headers=auth_header(ADMIN))
    assert bobs.json()["total"] == 1

    paged = client.get("/api/v1/admin/bookings?page=1&page_size=1", headers=auth_header(ADMIN))
    assert len(paged.json()["bookings"]) == 1

    too_big = client.get("/api/v1/admin/bookings?page_size=1000", headers=auth_header(ADMIN))
    assert too_big.status_code == 422


def test_unknown_booking(client, rooms):
    response = client.post("/api/v1/admin/bookings/9999/check-in", headers=auth_header(ADMIN))
    assert response.status_code == 404
