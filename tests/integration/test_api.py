"""Integration tests for API endpoints"""

import logging
import pytest
from datetime import timedelta
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from rosca_ledger.infrastructure.database.repositories import LedgerRepository


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient, seeded_cycle: str):
    """Test Prometheus metrics endpoint"""
    client.get(f"/v1/cycles/{seeded_cycle}/summary")

    response = client.get("/metrics")
    assert response.status_code == 200
    assert "rosca_ledger_computation" in response.text


def test_request_id_header_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_cycle_summary(client: TestClient, seeded_cycle: str):
    """Test capital = 3000 saved + 1190 paid in - 1000 disbursed"""
    response = client.get(f"/v1/cycles/{seeded_cycle}/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Harvest Circle"
    assert data["capital"] == pytest.approx(3190)
    assert data["total_saved"] == 3000
    assert data["total_loans"] == 1000
    assert data["total_repayments"] == 1090
    assert data["member_count"] == 2


def test_cycle_not_found(client: TestClient):
    response = client.get("/v1/cycles/missing/summary")
    assert response.status_code == 404


def test_member_exposure(client: TestClient, seeded_cycle: str):
    response = client.get(f"/v1/cycles/{seeded_cycle}/members")

    assert response.status_code == 200
    members = {m["user_id"]: m for m in response.json()["members"]}
    assert members["user_a"]["total_saved"] == 1000
    assert members["user_a"]["loan_balance"] == pytest.approx(10)
    assert members["user_a"]["membership_paid"] is True
    assert members["user_b"]["loan_balance"] == 0


def test_member_loans_resolve_overdue(client: TestClient, seeded_cycle: str):
    """Test the 31-day-old loan with 10 left to pay reports OVERDUE"""
    response = client.get(f"/v1/cycles/{seeded_cycle}/members/user_a/loans")

    assert response.status_code == 200
    loans = response.json()["loans"]
    assert len(loans) == 1
    loan = loans[0]
    assert loan["loan_id"] == "loan_a"
    assert loan["principal"] == 1000
    assert loan["payable"] == pytest.approx(1100)
    assert loan["total_repaid"] == 1090
    assert loan["balance"] == pytest.approx(10)
    assert loan["status"] == "OVERDUE"
    assert loan["is_overdue"] is True


def test_member_payout(client: TestClient, seeded_cycle: str):
    """Test 1000 + 600 interest - 10 loan balance - 25 unpaid loss"""
    response = client.get(f"/v1/cycles/{seeded_cycle}/members/user_a/payout")

    assert response.status_code == 200
    data = response.json()
    assert data["total_saved"] == 1000
    assert data["total_interest"] == 600
    assert data["loan_balance"] == pytest.approx(10)
    assert data["unpaid_loss"] == 25
    assert data["net_payout"] == pytest.approx(1565)


def test_payout_for_non_member(client: TestClient, seeded_cycle: str):
    response = client.get(f"/v1/cycles/{seeded_cycle}/members/user_z/payout")
    assert response.status_code == 404


def test_share_out(client: TestClient, seeded_cycle: str):
    response = client.get(f"/v1/cycles/{seeded_cycle}/share-out")

    assert response.status_code == 200
    data = response.json()
    assert data["currency"] == "USD"
    payouts = {p["user_id"]: p["net_payout"] for p in data["payouts"]}
    assert payouts["user_a"] == pytest.approx(1565)
    assert payouts["user_b"] == pytest.approx(3175)


def test_borrowing_power(client: TestClient, seeded_cycle: str):
    response = client.get(f"/v1/cycles/{seeded_cycle}/members/user_a/borrowing-power")

    assert response.status_code == 200
    data = response.json()
    assert data["borrowing_power"] == 3000
    assert data["unbounded"] is False
    assert data["outstanding_balance"] == pytest.approx(10)


def test_borrowing_power_unbounded(client: TestClient, db: Session):
    """Test a zero ratio serialises as unbounded instead of infinity"""
    repo = LedgerRepository(db)
    repo.add_cycle(id="open_cycle", name="Open", interest_rate=0.05, duration_months=12, borrowing_limit_ratio=0)
    repo.add_member("open_cycle", "user_a")
    db.commit()

    response = client.get("/v1/cycles/open_cycle/members/user_a/borrowing-power")

    assert response.status_code == 200
    data = response.json()
    assert data["borrowing_power"] is None
    assert data["unbounded"] is True


@pytest.mark.parametrize(
    "amount, top_up, approved",
    [
        (2990, 0, True),  # 2990 + 10 owed == 3000 power
        (2500, 490, True),
        (3000, 0, False),
    ],
)
def test_loan_eligibility(client: TestClient, seeded_cycle: str, amount, top_up, approved):
    response = client.post(
        f"/v1/cycles/{seeded_cycle}/members/user_a/loan-eligibility",
        json={"amount": amount, "top_up_amount": top_up},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["approved"] is approved
    assert data["requested_principal"] == amount + top_up
    assert data["headroom"] == pytest.approx(2990)


def test_loan_eligibility_zero_principal_not_approved(client: TestClient, seeded_cycle: str):
    response = client.post(
        f"/v1/cycles/{seeded_cycle}/members/user_a/loan-eligibility",
        json={"amount": 0, "top_up_amount": 0},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["approved"] is False
    assert data["requested_principal"] == 0


def test_stored_paid_loan_still_owing_counts_as_outstanding(client: TestClient, db: Session, seeded_cycle: str, now):
    """Test loans, borrowing power and eligibility agree on a stale PAID status"""
    LedgerRepository(db).add_loan(
        id="loan_b", cycle_id=seeded_cycle, user_id="user_b", amount=500,
        status="PAID", created_at=now - timedelta(days=45),
    )
    db.commit()
    base = f"/v1/cycles/{seeded_cycle}/members/user_b"

    loan = client.get(f"{base}/loans").json()["loans"][0]
    power = client.get(f"{base}/borrowing-power").json()
    eligibility = client.post(f"{base}/loan-eligibility", json={"amount": 5500}).json()

    assert loan["status"] == "OVERDUE"
    assert loan["balance"] == pytest.approx(550)
    assert power["outstanding_balance"] == pytest.approx(550)
    assert eligibility["outstanding_balance"] == pytest.approx(550)
    assert eligibility["approved"] is False


def test_loan_eligibility_rejects_negative_amount(client: TestClient, seeded_cycle: str):
    response = client.post(
        f"/v1/cycles/{seeded_cycle}/members/user_a/loan-eligibility",
        json={"amount": -5},
    )
    assert response.status_code == 422


def test_saving_interest_quote(client: TestClient, seeded_cycle: str):
    response = client.post(
        f"/v1/cycles/{seeded_cycle}/saving-interest",
        json={"amount": 1000, "period_index": 0},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["expected_interest_at_end"] == pytest.approx(600)
    assert data["interest_per_month"] == pytest.approx(100)


def test_saving_interest_quote_after_cycle_end(client: TestClient, seeded_cycle: str):
    response = client.post(
        f"/v1/cycles/{seeded_cycle}/saving-interest",
        json={"amount": 1000, "period_index": 6},
    )
    assert response.status_code == 422


def test_loss_recovery_quote(client: TestClient, seeded_cycle: str):
    """Test 4000 idle at 10% split over 2 members"""
    response = client.post(
        f"/v1/cycles/{seeded_cycle}/loss-recovery",
        json={"unborrowed_capital": 4000},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["member_count"] == 2
    assert data["shared_per_user"] == pytest.approx(200)


def test_loss_recovery_quote_defaults_to_capital(client: TestClient, seeded_cycle: str):
    response = client.post(f"/v1/cycles/{seeded_cycle}/loss-recovery", json={})

    assert response.status_code == 200
    data = response.json()
    assert data["unborrowed_capital"] == pytest.approx(3190)
    assert data["shared_per_user"] == pytest.approx(159.5)


def test_orphan_diagnostics(client: TestClient, db: Session, seeded_cycle: str):
    """Test records pointing at a missing cycle are reported by the service"""
    assert client.get("/v1/diagnostics/orphans").json() == {"clean": True, "orphans": {}}

    LedgerRepository(db).add_loan(cycle_id="ghost", user_id="user_a", amount=100)
    db.commit()

    response = client.get("/v1/diagnostics/orphans")
    assert response.status_code == 200
    assert response.json() == {"clean": False, "orphans": {"loan": 1}}


@pytest.mark.parametrize(
    "method, path, body, step",
    [
        ("get", "/summary", None, "summary"),
        ("get", "/members", None, "members"),
        ("get", "/share-out", None, "share_out"),
        ("post", "/saving-interest", {"amount": 1000, "period_index": 0}, "saving_interest"),
        ("post", "/loss-recovery", {}, "loss_recovery"),
        ("get", "/members/user_a/payout", None, "payout"),
        ("get", "/members/user_a/loans", None, "loans"),
        ("get", "/members/user_a/borrowing-power", None, "borrowing_power"),
        ("post", "/members/user_a/loan-eligibility", {"amount": 100}, "loan_eligibility"),
    ],
)
def test_every_endpoint_logs_its_computation(client: TestClient, seeded_cycle: str, caplog, method, path, body, step):
    url = f"/v1/cycles/{seeded_cycle}{path}"
    with caplog.at_level(logging.INFO):
        if method == "get":
            response = client.get(url)
        else:
            response = client.post(url, json=body)

    assert response.status_code == 200
    logged = [r for r in caplog.records if r.getMessage() == "Ledger computation completed"]
    assert [r.step for r in logged] == [step]
    assert logged[0].cycle_id == seeded_cycle
    assert logged[0].duration_ms >= 0
