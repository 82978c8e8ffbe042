# tests/v1/test_reports.py
"""Tests for report intake endpoints."""

from datetime import timedelta

from fastapi import status

from barter_moderation.models import Report


def test_create_report(client, user_headers, db_session) -> None:
    response = client.post(
        "/api/v1/report-create",
        json={
            "targetType": "item",
            "targetId": "item-77",
            "category": " Spam ",
            "description": "Same listing posted 40 times",
            "metadata": {"screen": "listing"},
        },
        headers=user_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()["report"]
    assert body["status"] == "pending"
    assert set(body) == {"id", "status", "createdAt"}

    stored = db_session.get(Report, body["id"])
    assert stored.reporter_id == "user-1"
    assert stored.category == "spam"
    assert stored.needs_action_by - stored.created_at == timedelta(hours=24)


def test_create_report_requires_auth(client) -> None:
    response = client.post(
        "/api/v1/report-create",
        json={"targetType": "item", "targetId": "item-1", "category": "spam"},
    )
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_report_missing_target_id(client, user_headers) -> None:
    response = client.post(
        "/api/v1/report-create",
        json={"targetType": "item", "category": "spam"},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_create_report_unknown_target_type(client, user_headers) -> None:
    response = client.post(
        "/api/v1/report-create",
        json={"targetType": "listing", "targetId": "x", "category": "spam"},
        headers=user_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "targetType" in response.json()["error"]


def test_list_categories(client) -> None:
    response = client.get("/api/v1/report-categories")

    assert response.status_code == status.HTTP_200_OK
    ids = [category["id"] for category in response.json()]
    assert ids == ["harassment", "spam", "inappropriate", "illegal", "self-harm", "other"]
