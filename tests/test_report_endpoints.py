import pytest


@pytest.fixture
def history(client, authed):
    rows = [
        ("income", 1000.50, "salary", "2025-01-01"),
        ("income", 200.25, "freelance", "2025-01-05"),
        ("expense", 100.10, "food", "2025-01-02"),
        ("expense", 50.00, "transport", "2025-02-03"),
    ]
    for type_, amount, category, day in rows:
        res = client.post(
            "/api/operations",
            json={"type": type_, "amount": amount, "category": category, "date": day},
            headers=authed,
        )
        assert res.status_code == 201
    return authed


def test_reports_require_auth(client):
    assert client.get("/api/reports").status_code == 401


def test_full_report(client, history):
    res = client.get("/api/reports", headers=history)
    assert res.status_code == 200

    data = res.json()
    assert data["totalIncome"] == 1200.75
    assert data["totalExpense"] == 150.10
    assert data["net"] == 1050.65

    income = data["byCategory"]["income"]
    assert [row["category"] for row in income] == ["salary", "freelance", "investment", "other"]
    assert income[2] == {"category": "investment", "amount": 0}


def test_full_report_matches_balance(client, history):
    report = client.get("/api/reports", headers=history).json()
    balance = client.get("/api/auth/me", headers=history).json()["balance"]
    assert round(report["totalIncome"] - report["totalExpense"], 2) == balance


def test_ranged_report(client, history):
    res = client.get(
        "/api/reports",
        params={"startDate": "2025-01-01", "endDate": "2025-01-31"},
        headers=history,
    )
    data = res.json()
    assert data["totalIncome"] == 1200.75
    assert data["totalExpense"] == 100.10
    assert data["startDate"] == "2025-01-01"
    assert data["endDate"] == "2025-01-31"

    expense = {row["category"]: row["amount"] for row in data["byCategory"]["expense"]}
    assert expense["transport"] == 0


def test_report_with_only_start_date_uses_everything(client, history):
    res = client.get("/api/reports", params={"startDate": "2025-02-01"}, headers=history)
    assert res.json()["totalExpense"] == 150.10
