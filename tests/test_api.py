"""
Tests for the Flask API – entry-point calls, error mapping and reports.
"""

import threading

import pytest

import wellness.billing as billing
from wellness.api.app import create_app
from wellness.api.routes import error_status
from wellness.database import init_engine
from wellness.engine import LedgerEngine
from wellness.errors import LedgerError
from wellness.requests import AddBill, BatchPayBills, GetBill

DEPLOYER = "deployer"


@pytest.fixture
def ledger():
    ledger = LedgerEngine(init_engine("sqlite://"), strict_writes=False)
    ledger.initialize(DEPLOYER)
    return ledger


@pytest.fixture
def client(ledger):
    app = create_app(ledger)
    app.config["TESTING"] = True
    return app.test_client()


def call(client, entry_point, caller, **args):
    return client.post(
        f"/api/call/{entry_point}", json=args, headers={"X-Caller-Identity": caller}
    )


# ── Tests: info ──────────────────────────────────────────────────────

def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.get_json()["service"] == "Wellness Ledger API"


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "healthy"
    assert body["checks"] == {"database": True, "schema": True}


def test_entry_points_listing(client):
    body = client.get("/api/entry-points").get_json()
    assert body["entry_points"]["pay-bill"] == ["service_id", "amount"]
    assert "revoke-user" in body["entry_points"]


# ── Tests: calls ─────────────────────────────────────────────────────

def test_add_and_get_medical_record(client):
    resp = call(client, "add-medical-record", "wallet_1", patient_id=2, record="New medical record")
    assert resp.status_code == 200
    assert resp.get_json()["result"] == 2

    resp = call(client, "get-medical-record", DEPLOYER, patient_id=2)
    assert resp.get_json()["result"] == "New medical record"


def test_policy_details_shape(client):
    resp = call(client, "get-policy-details", DEPLOYER, policy_id="TEST-POLICY-1")
    assert resp.get_json()["result"] == {"coverage": 10000, "premium": 100, "active": True}


def test_batch_pay_bills(client):
    resp = call(client, "batch-pay-bills", DEPLOYER, service_ids=["TEST-SERVICE-1", "GHOST"])
    assert resp.status_code == 200
    result = resp.get_json()["result"]
    assert result["settled"] == ["TEST-SERVICE-1"]
    assert result["failed"] == ["GHOST"]

    bill = call(client, "get-bill", DEPLOYER, service_id="TEST-SERVICE-1").get_json()["result"]
    assert bill == {"amount": 500, "paid": True}


def test_visits_and_contact_serialized(client):
    call(client, "add-patient-visit", "wallet_1", patient_id=3, diagnosis="flu")
    visits = call(client, "get-patient-visits", "wallet_1", patient_id=3).get_json()["result"]
    assert visits == [{"diagnosis": "flu", "seq": 1}]

    assert call(client, "get-emergency-contact", "wallet_1", patient_id=3).get_json()["result"] is None
    call(client, "add-emergency-contact", "wallet_1", patient_id=3, name="Jane", phone="555")
    contact = call(client, "get-emergency-contact", "wallet_1", patient_id=3).get_json()["result"]
    assert contact == {"name": "Jane", "phone": "555"}


def test_submit_claim(client):
    assert call(client, "submit-claim", "wallet_1", amount=500).get_json()["result"] == 375


def test_is_admin_open_to_any_caller(client):
    resp = call(client, "is-admin", "wallet_9", identity=DEPLOYER)
    assert resp.get_json()["result"] is True


# ── Tests: error mapping ─────────────────────────────────────────────

def test_missing_caller_header(client):
    resp = client.post("/api/call/is-admin", json={"identity": DEPLOYER})
    assert resp.status_code == 401


def test_unauthorized_maps_to_403(client):
    resp = call(client, "add-admin", "wallet_1", target="wallet_2")
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "Unauthorized"


def test_not_found_maps_to_404(client):
    resp = call(client, "get-bill", DEPLOYER, service_id="NOPE")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "NotFound"


def test_amount_mismatch_maps_to_409(client):
    resp = call(client, "pay-bill", DEPLOYER, service_id="TEST-SERVICE-1", amount=1)
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "AmountMismatch"


def test_invalid_argument_maps_to_400(client):
    resp = call(client, "add-medical-record", DEPLOYER, patient_id=-1, record="x")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "InvalidArgument"


def test_unknown_entry_point_is_400(client):
    resp = call(client, "mint-tokens", DEPLOYER)
    assert resp.status_code == 400


def test_non_json_body_uses_error_shape(client):
    resp = client.post(
        "/api/call/is-admin", data="identity=deployer",
        headers={"X-Caller-Identity": DEPLOYER, "Content-Type": "text/plain"},
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "InvalidArgument"
    assert "application/json" in body["details"]


def test_malformed_json_uses_error_shape(client):
    resp = client.post(
        "/api/call/is-admin", data="{not json",
        headers={"X-Caller-Identity": DEPLOYER, "Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    body = resp.get_json()
    assert body["success"] is False
    assert body["error"] == "InvalidArgument"
    assert body["details"] == "Request body is not valid JSON"


def test_unmapped_ledger_error_is_500():
    assert error_status(LedgerError("unexpected")) == 500


def test_unknown_route_is_404(client):
    assert client.get("/api/nothing-here").status_code == 404


# ── Tests: report ────────────────────────────────────────────────────

def test_bill_report(client):
    call(client, "add-bill", DEPLOYER, service_id="S-2", amount=100)
    call(client, "pay-bill", DEPLOYER, service_id="S-2", amount=100)
    body = client.get("/api/bills/report").get_json()
    assert body["totals"] == {
        "bill_count": 2, "paid_count": 1, "unpaid_count": 1,
        "settled_amount": 100, "outstanding_amount": 500,
    }
    assert {b["service_id"] for b in body["bills"]} == {"S-2", "TEST-SERVICE-1"}


def test_report_during_call_sees_committed_state_only(ledger, client, monkeypatch):
    ledger.execute(DEPLOYER, AddBill("S-1", 10))
    ledger.execute(DEPLOYER, AddBill("S-2", 20))
    paused, resume = threading.Event(), threading.Event()
    real_settle = billing._settle

    def slow_settle(conn, service_id):
        real_settle(conn, service_id)
        if service_id == "S-1":
            paused.set()
            resume.wait(5)

    monkeypatch.setattr(billing, "_settle", slow_settle)
    worker = threading.Thread(
        target=ledger.execute, args=(DEPLOYER, BatchPayBills(("S-1", "S-2")))
    )
    worker.start()
    assert paused.wait(5)

    seen = {}
    reader = threading.Thread(
        target=lambda: seen.update(body=client.get("/api/bills/report").get_json())
    )
    reader.start()
    reader.join(0.3)
    assert reader.is_alive()

    resume.set()
    worker.join(5)
    reader.join(5)
    assert ledger.execute(DEPLOYER, GetBill("S-1")).paid is True
    assert ledger.execute(DEPLOYER, GetBill("S-2")).paid is True
    assert seen["body"]["totals"]["settled_amount"] == 30
