import pytest
from fastapi.testclient import TestClient

from dormhub.dependencies import get_session_factory
from dormhub.main import app
from dormhub.schemas.common.enums import UserRole

API = "/api/v1"


@pytest.fixture
def client(session_factory):
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(seed, auth_headers):
    return auth_headers(seed.admin.id, UserRole.ADMIN)


@pytest.fixture
def student_headers(seed, auth_headers):
    return [auth_headers(user.id, UserRole.STUDENT) for user in seed.users]


def test_health(client):
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_missing_token_is_unauthorized(client, seed):
    response = client.get(f"{API}/rooms")

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "UNAUTHORIZED"


def test_garbage_token_is_unauthorized(client, seed):
    response = client.get(f"{API}/rooms", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_student_cannot_use_admin_routes(client, student_headers):
    response = client.post(
        f"{API}/rooms",
        json={"room_type": "shared", "total_beds": 2, "bed_price": "100.00"},
        headers=student_headers[0],
    )

    assert response.status_code == 403
    assert response.json()["error"] == "FORBIDDEN"


def test_create_room_envelope(client, admin_headers, seed):
    response = client.post(
        f"{API}/rooms",
        json={
            "room_number": "101",
            "room_type": "shared",
            "total_beds": 2,
            "bed_price": "120.00",
            "service_ids": [seed.services.wifi.id],
        },
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Room created successfully"
    room = body["data"]
    assert room["room_number"] == "101"
    assert room["status"] == "available"
    assert room["available_beds"] == 2
    assert room["bed_price"] == "120.00"
    assert room["services"][0]["name"] == "WiFi"


def test_business_validation_error_envelope(client, admin_headers, seed):
    response = client.post(
        f"{API}/rooms",
        json={"room_type": "single", "total_beds": 1},
        headers=admin_headers,
    )

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "VALIDATION_ERROR"
    assert body["details"]["field"] == "room_price"


def test_request_validation_error_envelope(client, admin_headers, seed):
    response = client.post(
        f"{API}/rooms",
        json={"room_type": "penthouse", "total_beds": 0},
        headers=admin_headers,
    )

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "VALIDATION_ERROR"
    fields = {err["field"] for err in body["details"]["errors"]}
    assert {"room_type", "total_beds"} <= fields


def test_assign_until_full(client, admin_headers, make_room, seed):
    room = make_room("102", total_beds=1)

    first = client.post(
        f"{API}/rooms/assign",
        json={"room_id": room.id, "student_id": seed.students[0].id},
        headers=admin_headers,
    )
    assert first.status_code == 201
    data = first.json()["data"]
    assert data["room"]["status"] == "reserved"
    assert data["payment"]["amount_due"] == "150.00"
    assert data["payment"]["status"] == "unpaid"

    second = client.post(
        f"{API}/rooms/assign",
        json={"room_id": room.id, "student_id": seed.students[1].id},
        headers=admin_headers,
    )
    assert second.status_code == 409
    assert second.json()["error"] == "CAPACITY_EXCEEDED"


def test_my_room_without_assignment_is_not_found(client, student_headers):
    response = client.get(f"{API}/rooms/my-room", headers=student_headers[0])

    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


def test_request_and_accept_flow(client, admin_headers, student_headers, make_room, seed):
    room = make_room("103")

    created = client.post(f"{API}/room-requests", json={"room_id": room.id}, headers=student_headers[0])
    assert created.status_code == 201
    request_id = created.json()["data"]["id"]

    duplicate = client.post(f"{API}/room-requests", json={"room_id": room.id}, headers=student_headers[0])
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "CONFLICT"

    accepted = client.put(f"{API}/room-requests/{request_id}/accept", headers=admin_headers)
    assert accepted.status_code == 200
    decision = accepted.json()["data"]
    assert decision["request"]["status"] == "accepted"
    assert decision["assignment"]["room_id"] == room.id

    again = client.put(f"{API}/room-requests/{request_id}/accept", headers=admin_headers)
    assert again.status_code == 409
    assert again.json()["error"] == "INVALID_STATE"

    mine = client.get(f"{API}/rooms/my-room", headers=student_headers[0])
    assert mine.json()["data"]["room"]["room_number"] == "103"


def test_notification_inbox(client, admin_headers, student_headers, make_room, seed):
    room = make_room("104")
    created = client.post(f"{API}/room-requests", json={"room_id": room.id}, headers=student_headers[0])
    client.put(f"{API}/room-requests/{created.json()['data']['id']}/reject", headers=admin_headers)

    count = client.get(f"{API}/notifications/unread-count", headers=student_headers[0])
    assert count.json()["data"] == {"unread_count": 1}

    inbox = client.get(f"{API}/notifications", headers=student_headers[0]).json()["data"]
    assert inbox["items"][0]["type"] == "room_request_rejected"
    notification_id = inbox["items"][0]["id"]

    foreign = client.put(f"{API}/notifications/{notification_id}/read", headers=student_headers[1])
    assert foreign.status_code == 404

    cleared = client.put(f"{API}/notifications/read-all", headers=student_headers[0])
    assert cleared.json()["data"] == {"updated": 1}


def test_preferences_round_trip(client, student_headers, seed):
    empty = client.get(f"{API}/preferences", headers=student_headers[0])
    assert empty.json()["data"]["preferred_services"] == []

    saved = client.put(
        f"{API}/preferences",
        json={"room_type": "shared", "preferred_services": [seed.services.ac.id]},
        headers=student_headers[0],
    )
    assert saved.status_code == 200
    assert saved.json()["data"]["room_type"] == "shared"
    assert saved.json()["data"]["preferred_services"] == [seed.services.ac.id]


def test_qr_scan_endpoint(client, admin_headers, seed):
    qr = client.get(f"{API}/check-in-out/qr/{seed.students[0].id}", headers=admin_headers)
    payload = qr.json()["data"]["payload"]

    scanned = client.post(f"{API}/check-in-out/scan", json={"payload": payload}, headers=admin_headers)
    assert scanned.status_code == 200
    assert scanned.json()["data"]["status"] == "checked_in"

    bad = client.post(f"{API}/check-in-out/scan", json={"payload": "{}"}, headers=admin_headers)
    assert bad.status_code == 422


def test_delete_notification_is_owner_scoped(client, admin_headers, student_headers, make_room, seed):
    room = make_room("105")
    created = client.post(f"{API}/room-requests", json={"room_id": room.id}, headers=student_headers[0])
    client.put(f"{API}/room-requests/{created.json()['data']['id']}/reject", headers=admin_headers)
    notification_id = client.get(f"{API}/notifications", headers=student_headers[0]).json()["data"]["items"][0]["id"]

    foreign = client.delete(f"{API}/notifications/{notification_id}", headers=student_headers[1])
    assert foreign.status_code == 404

    deleted = client.delete(f"{API}/notifications/{notification_id}", headers=student_headers[0])
    assert deleted.status_code == 200
    assert client.get(f"{API}/notifications", headers=student_headers[0]).json()["data"]["items"] == []

    again = client.delete(f"{API}/notifications/{notification_id}", headers=student_headers[0])
    assert again.status_code == 404


def test_check_in_views(client, admin_headers, student_headers, seed):
    status_before = client.get(f"{API}/check-in-out/current-status", headers=student_headers[0])
    assert status_before.json()["data"]["is_checked_in"] is False

    client.post(f"{API}/check-in-out/check-in", json={"student_id": seed.students[0].id}, headers=admin_headers)

    status_after = client.get(f"{API}/check-in-out/current-status", headers=student_headers[0])
    assert status_after.json()["data"]["is_checked_in"] is True
    assert status_after.json()["data"]["status"] == "checked_in"

    history = client.get(f"{API}/check-in-out/my-history", headers=student_headers[0]).json()["data"]
    assert history["meta"]["total_items"] == 1

    today = client.get(f"{API}/check-in-out/today", headers=admin_headers).json()["data"]
    assert [entry["student_id"] for entry in today] == [seed.students[0].id]

    foreign = client.get(f"{API}/check-in-out/student/{seed.students[0].id}", headers=student_headers[1])
    assert foreign.status_code == 403


def test_search_students_endpoint(client, admin_headers, student_headers, seed):
    found = client.get(f"{API}/check-in-out/search-students", params={"q": "student"}, headers=admin_headers)
    assert [s["name"] for s in found.json()["data"]] == ["Student 1", "Student 2", "Student 3"]

    short = client.get(f"{API}/check-in-out/search-students", params={"q": "s"}, headers=admin_headers)
    assert short.json()["data"] == []

    denied = client.get(f"{API}/check-in-out/search-students", params={"q": "student"}, headers=student_headers[0])
    assert denied.status_code == 403


def test_save_payment_endpoint(client, admin_headers, make_room, seed):
    room = make_room("106")
    assigned = client.post(
        f"{API}/rooms/assign",
        json={"room_id": room.id, "student_id": seed.students[0].id},
        headers=admin_headers,
    )
    assignment = assigned.json()["data"]

    saved = client.post(
        f"{API}/payments",
        json={"assignment_id": assignment["id"], "amount_paid": "150.00"},
        headers=admin_headers,
    )
    assert saved.status_code == 200
    assert saved.json()["data"]["id"] == assignment["payment"]["id"]
    assert saved.json()["data"]["status"] == "paid"

    missing = client.post(f"{API}/payments", json={"assignment_id": 4242}, headers=admin_headers)
    assert missing.status_code == 404
