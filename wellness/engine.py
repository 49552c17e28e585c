"""
Ledger engine – the single entry point for every state transition.

Each call runs inside one database transaction and under the engine lock:
it either commits all of its writes or, on any failure, none of them.
"""

import threading
from typing import Dict, Optional

import pandas as pd
from sqlalchemy import text
from sqlalchemy.engine import Engine

from wellness import billing, claims, policies, rbac, records, reports
from wellness.config import (
    STRICT_WRITES,
    SEED_POLICY_ID,
    SEED_POLICY,
    SEED_SERVICE_ID,
    SEED_BILL_AMOUNT,
    SEED_PATIENT_ID,
    SEED_MEDICAL_RECORD,
)
from wellness.database import init_engine, missing_tables
from wellness.errors import InvalidArgument
from wellness.requests import (
    AddAdmin, IsAdmin, AuthorizeUser, RevokeUser, IsUserAuthorized,
    AddMedicalRecord, GetMedicalRecord, AddPatientVisit, GetPatientVisits,
    AddEmergencyContact, GetEmergencyContact,
    AddPolicy, GetPolicyDetails, SubmitClaim,
    AddBill, PayBill, BatchPayBills, GetBill,
)
from wellness.validation import check_identity


class LedgerEngine:
    """Owns the store and applies requests to it one at a time."""

    def __init__(self, db: Optional[Engine] = None, strict_writes: Optional[bool] = None):
        self.db = db if db is not None else init_engine()
        self.strict_writes = STRICT_WRITES if strict_writes is None else strict_writes
        self._lock = threading.Lock()

    # ── Bootstrap ────────────────────────────────────────────────────

    def initialize(self, deployer: str) -> None:
        """Genesis: make *deployer* admin and seed the sample policy, bill and record."""
        with self._lock, self.db.begin() as conn:
            rbac.grant_genesis_admin(conn, deployer)
            if not policies.policy_exists(conn, SEED_POLICY_ID):
                policies.add_policy(conn, SEED_POLICY_ID, **SEED_POLICY)
            if not _row_exists(conn, "bills", "service_id", SEED_SERVICE_ID):
                billing.add_bill(conn, SEED_SERVICE_ID, SEED_BILL_AMOUNT)
            if not _row_exists(conn, "medical_records", "patient_id", SEED_PATIENT_ID):
                records.add_medical_record(conn, SEED_PATIENT_ID, SEED_MEDICAL_RECORD)

    # ── Locked reads ─────────────────────────────────────────────────

    def load_bills(self) -> pd.DataFrame:
        """All bills as a DataFrame, read between calls, never during one."""
        with self._lock:
            return reports.load_bills(self.db)

    def check_health(self) -> Dict[str, bool]:
        """Connection and schema checks, run under the engine lock."""
        checks = {"database": False, "schema": False}
        with self._lock:
            with self.db.connect() as conn:
                conn.execute(text("SELECT 1"))
            checks["database"] = True
            checks["schema"] = not missing_tables(self.db)
        return checks

    # ── Dispatch ─────────────────────────────────────────────────────

    def execute(self, caller: str, request):
        """Apply *request* on behalf of *caller* and return its result."""
        caller = check_identity("caller", caller)
        with self._lock, self.db.begin() as conn:
            return self._dispatch(conn, caller, request)

    def _dispatch(self, conn, caller: str, req):
        # Identity & roles
        if isinstance(req, AddAdmin):
            rbac.add_admin(conn, caller, req.target)
            return None
        if isinstance(req, IsAdmin):
            return rbac.is_admin(conn, req.identity)
        if isinstance(req, AuthorizeUser):
            rbac.authorize_user(conn, caller, req.target, req.role)
            return None
        if isinstance(req, RevokeUser):
            rbac.revoke_user(conn, caller, req.target, req.role)
            return None
        if isinstance(req, IsUserAuthorized):
            return rbac.is_user_authorized(conn, req.identity, req.role)

        # Records
        if isinstance(req, AddMedicalRecord):
            self._guard_medical(conn, caller)
            return records.add_medical_record(conn, req.patient_id, req.record)
        if isinstance(req, GetMedicalRecord):
            return records.get_medical_record(conn, req.patient_id)
        if isinstance(req, AddPatientVisit):
            self._guard_medical(conn, caller)
            return records.add_patient_visit(conn, req.patient_id, req.diagnosis)
        if isinstance(req, GetPatientVisits):
            return records.get_patient_visits(conn, req.patient_id)
        if isinstance(req, AddEmergencyContact):
            self._guard_medical(conn, caller)
            records.add_emergency_contact(conn, req.patient_id, req.name, req.phone)
            return None
        if isinstance(req, GetEmergencyContact):
            return records.get_emergency_contact(conn, req.patient_id)

        # Policies & claims
        if isinstance(req, AddPolicy):
            rbac.require_admin(conn, caller)
            return policies.add_policy(conn, req.policy_id, req.coverage, req.premium, req.active)
        if isinstance(req, GetPolicyDetails):
            return policies.get_policy_details(conn, req.policy_id)
        if isinstance(req, SubmitClaim):
            return claims.compute_reimbursement(req.amount)

        # Billing
        if isinstance(req, AddBill):
            self._guard_billing(conn, caller)
            return billing.add_bill(conn, req.service_id, req.amount)
        if isinstance(req, PayBill):
            self._guard_billing(conn, caller)
            return billing.pay_bill(conn, req.service_id, req.amount)
        if isinstance(req, BatchPayBills):
            self._guard_billing(conn, caller)
            return billing.batch_pay_bills(conn, req.service_ids)
        if isinstance(req, GetBill):
            return billing.get_bill(conn, req.service_id)

        raise InvalidArgument(f"Unsupported request type: {type(req).__name__}")

    # ── Write guards ─────────────────────────────────────────────────

    def _guard_medical(self, conn, caller: str) -> None:
        if self.strict_writes:
            rbac.require_medical_writer(conn, caller)

    def _guard_billing(self, conn, caller: str) -> None:
        if self.strict_writes:
            rbac.require_admin(conn, caller)


def _row_exists(conn, table: str, column: str, key) -> bool:
    # table/column come from the fixed seed list above, never from callers
    row = conn.execute(
        text(f"SELECT 1 FROM {table} WHERE {column} = :k"), {"k": key}
    ).first()
    return row is not None
