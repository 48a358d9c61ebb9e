# mypy: ignore-errors
"""Tests for user management endpoints."""

from fastapi import status


def test_user_management_listing(client, make_user, make_note) -> None:
    make_user("writer")
    make_note(author_id="writer")

    response = client.get("/api/v1/users/management", params={"limit": 5})

    assert response.status_code == status.HTTP_200_OK
    [row] = response.json()
    assert row["uid"] == "writer"
    assert row["notes_count"] == 1
    assert row["comments_count"] == 0
    assert row["status"] == "active"


def test_update_user_status(client, make_user, security_events) -> None:
    make_user("troll")

    response = client.patch(
        "/api/v1/users/troll/status",
        json={"status": "banned", "reason": "spam wave", "admin_id": "admin-1"},
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["status"] == "banned"
    assert body["status_reason"] == "spam wave"
    assert len(security_events("USER_STATUS_CHANGED")) == 1


def test_update_user_status_errors(client, make_user) -> None:
    make_user("u1")

    missing = client.patch(
        "/api/v1/users/ghost/status",
        json={"status": "banned", "admin_id": "admin-1"},
    )
    assert missing.status_code == status.HTTP_404_NOT_FOUND

    unknown_status = client.patch(
        "/api/v1/users/u1/status",
        json={"status": "deleted", "admin_id": "admin-1"},
    )
    assert unknown_status.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    reserved = client.patch(
        "/api/v1/users/u1/status",
        json={"status": "banned", "admin_id": "system"},
    )
    assert reserved.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
