"""HTTP tests for the finance blueprint."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from fintrack.models import FinanceRecord
from fintrack.services import auth

BASE = "/api/finances"


@pytest.fixture
def alice(auth_headers_for):
    return auth_headers_for("alice")


@pytest.fixture
def store_records(app_session_factory):
    def _store(owner_id: int, *rows: tuple[str, str, str, str, datetime]) -> None:
        with app_session_factory() as session:
            for title, amount, record_type, category, created_at in rows:
                session.add(
                    FinanceRecord(
                        user_id=owner_id,
                        title=title,
                        amount=Decimal(amount),
                        type=record_type,
                        category=category,
                        created_at=created_at,
                    )
                )

    return _store


def test_requests_without_token_are_rejected(client):
    response = client.get(f"{BASE}/")

    assert response.status_code == 401
    assert response.get_json()["message"] == "Missing bearer token"


def test_requests_with_bad_token_are_rejected(client):
    response = client.get(f"{BASE}/summary", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_token_signed_with_other_secret_is_rejected(client, alice):
    user_id, _ = alice
    token = auth.issue_token(user_id, "another-secret", expires_in=timedelta(minutes=5))

    response = client.get(f"{BASE}/", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_create_and_list(client, alice):
    user_id, headers = alice

    created = client.post(
        f"{BASE}/",
        json={"title": "Lunch", "amount": 12.5, "type": "expense", "category": "food"},
        headers=headers,
    )

    assert created.status_code == 201
    body = created.get_json()
    assert body["user"] == user_id
    assert body["amount"] == 12.5
    assert body["createdAt"].endswith("Z")

    listed = client.get(f"{BASE}/", headers=headers).get_json()
    assert [row["id"] for row in listed] == [body["id"]]


def test_create_missing_fields(client, alice):
    _, headers = alice

    response = client.post(f"{BASE}/", json={"title": "Lunch"}, headers=headers)

    assert response.status_code == 400
    assert response.get_json()["details"]["fields"] == ["amount", "type", "category"]


def test_create_rejects_non_object_body(client, alice):
    _, headers = alice

    response = client.post(f"{BASE}/", json=["not", "an", "object"], headers=headers)

    assert response.status_code == 400


def test_update_and_delete(client, alice):
    _, headers = alice
    record_id = client.post(
        f"{BASE}/",
        json={"title": "Rent", "amount": "900", "type": "expense", "category": "utilities"},
        headers=headers,
    ).get_json()["id"]

    updated = client.put(f"{BASE}/{record_id}", json={"amount": "950"}, headers=headers)
    assert updated.status_code == 200
    assert updated.get_json()["amount"] == 950.0
    assert updated.get_json()["updatedAt"] is not None

    deleted = client.delete(f"{BASE}/{record_id}", headers=headers)
    assert deleted.get_json() == {"message": "Record deleted", "id": record_id}

    assert client.delete(f"{BASE}/{record_id}", headers=headers).status_code == 404


def test_records_of_other_users_are_not_found(client, auth_headers_for, store_records):
    bob_id, _ = auth_headers_for("bob")
    _, alice_headers = auth_headers_for("alice")
    store_records(bob_id, ("Bob salary", "100", "income", "salary", datetime(2024, 1, 1)))

    assert client.get(f"{BASE}/", headers=alice_headers).get_json() == []
    assert client.put(f"{BASE}/1", json={"title": "x"}, headers=alice_headers).status_code == 404
    assert client.delete(f"{BASE}/1", headers=alice_headers).status_code == 404


def test_filter_and_stats(client, alice, store_records):
    user_id, headers = alice
    store_records(
        user_id,
        ("Salary", "2000", "income", "salary", datetime(2024, 3, 1)),
        ("Groceries", "150", "expense", "food", datetime(2024, 3, 5)),
        ("Doctor", "60", "expense", "health", datetime(2024, 4, 2)),
        ("Old salary", "1800", "income", "salary", datetime(2023, 12, 1)),
    )

    filtered = client.get(f"{BASE}/filter?type=expense&year=2024", headers=headers).get_json()
    assert [row["title"] for row in filtered] == ["Doctor", "Groceries"]

    by_keyword = client.get(f"{BASE}/filter?keyword=SALARY", headers=headers).get_json()
    assert {row["title"] for row in by_keyword} == {"Salary", "Old salary"}

    summary = client.get(f"{BASE}/summary", headers=headers).get_json()
    assert summary == {"totalIncome": 3800.0, "totalExpense": 210.0, "balance": 3590.0}

    categories = client.get(f"{BASE}/category-stats", headers=headers).get_json()
    assert categories[0] == {"category": "salary", "total": 3800.0}

    months = client.get(f"{BASE}/monthly-stats?year=2024", headers=headers).get_json()
    assert len(months) == 12
    assert months[2] == {"month": 3, "totalIncome": 2000.0, "totalExpense": 150.0, "balance": 1850.0}

    report = client.get(
        f"{BASE}/report?startDate=2024-03-01&endDate=2024-03-31", headers=headers
    ).get_json()
    assert report == {
        "startDate": "2024-03-01",
        "endDate": "2024-03-31",
        "totalIncome": 2000.0,
        "totalExpense": 150.0,
        "balance": 1850.0,
    }


@pytest.mark.parametrize(
    "path",
    [
        "/filter?minAmount=abc",
        "/monthly-stats",
        "/monthly-stats?year=soon",
        "/report?startDate=2024-01-01",
        "/report?startDate=2024-02-01&endDate=2024-01-01",
        "/filter?month=99999999999999999999",
        "/category-stats?month=99999999999999999999",
    ],
)
def test_bad_query_parameters(client, alice, path):
    _, headers = alice

    response = client.get(f"{BASE}{path}", headers=headers)

    assert response.status_code == 400
    assert "message" in response.get_json()


def test_store_failure_maps_to_503(client, alice, monkeypatch):
    _, headers = alice

    def _boom(self, predicate):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    monkeypatch.setattr(
        "fintrack.infra.repositories.finance.SQLModelFinanceRepository.find", _boom
    )

    response = client.get(f"{BASE}/summary", headers=headers)

    assert response.status_code == 503
    assert response.get_json()["message"] == "Record store is unavailable"
