"""
Centralised configuration constants and environment helpers.
"""

import os
import sys

from dotenv import load_dotenv

load_dotenv()

# ── Storage ──────────────────────────────────────────────────────────
DB_URI = os.getenv("WELLNESS_DB_URI", "sqlite://")

# ── Integer / text bounds ────────────────────────────────────────────
MAX_UINT = 2 ** 63 - 1

MAX_RECORD_LENGTH = 256
MAX_DIAGNOSIS_LENGTH = 256
MAX_CONTACT_NAME_LENGTH = 100
MAX_PHONE_LENGTH = 20
MAX_IDENTITY_LENGTH = 128
MAX_ROLE_LENGTH = 32
MAX_POLICY_ID_LENGTH = 32
MAX_SERVICE_ID_LENGTH = 64
MAX_BATCH_SIZE = 10

# ── Claims ───────────────────────────────────────────────────────────
REIMBURSEMENT_RATE_PERCENT = 75

# ── Authorization ────────────────────────────────────────────────────
# When set, medical writes need admin or DOCTOR_ROLE and billing writes need admin.
STRICT_WRITES = os.getenv("WELLNESS_STRICT_WRITES", "0").strip().lower() in {"1", "true", "yes"}
DOCTOR_ROLE = "doctor"

# ── Genesis seed ─────────────────────────────────────────────────────
DEPLOYER = os.getenv("WELLNESS_DEPLOYER", "deployer")

SEED_POLICY_ID = "TEST-POLICY-1"
SEED_POLICY = {"coverage": 10000, "premium": 100, "active": True}

SEED_SERVICE_ID = "TEST-SERVICE-1"
SEED_BILL_AMOUNT = 500

SEED_PATIENT_ID = 1
SEED_MEDICAL_RECORD = "Test medical record"

# ── API server ───────────────────────────────────────────────────────
CALLER_HEADER = "X-Caller-Identity"


def get_env(name: str) -> str:
    """Return an environment variable or exit with an error message."""
    value = os.getenv(name)
    if not value:
        print(f"ERROR: env var {name} is not set", file=sys.stderr)
        sys.exit(1)
    return value
