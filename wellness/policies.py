"""
Insurance policy catalog. Policies are created by administrators and are
immutable afterwards.
"""

from sqlalchemy import text

from wellness.config import MAX_POLICY_ID_LENGTH
from wellness.errors import NotFound, InvalidArgument
from wellness.models import PolicyDetails
from wellness.validation import check_key, check_uint, check_bool


def policy_exists(conn, policy_id: str) -> bool:
    row = conn.execute(
        text("SELECT 1 FROM policies WHERE policy_id = :p"), {"p": policy_id}
    ).first()
    return row is not None


def add_policy(conn, policy_id: str, coverage: int, premium: int, active: bool = True) -> str:
    """Create a policy. Admin checks happen in the engine before this runs."""
    policy_id = check_key("policy_id", policy_id, MAX_POLICY_ID_LENGTH)
    coverage = check_uint("coverage", coverage)
    premium = check_uint("premium", premium)
    active = check_bool("active", active)
    if policy_exists(conn, policy_id):
        raise InvalidArgument(f"Policy '{policy_id}' already exists and cannot be changed.")
    conn.execute(
        text(
            "INSERT INTO policies (policy_id, coverage, premium, active) "
            "VALUES (:p, :c, :pr, :a)"
        ),
        {"p": policy_id, "c": coverage, "pr": premium, "a": active},
    )
    return policy_id


def get_policy_details(conn, policy_id: str) -> PolicyDetails:
    policy_id = check_key("policy_id", policy_id, MAX_POLICY_ID_LENGTH)
    row = conn.execute(
        text("SELECT coverage, premium, active FROM policies WHERE policy_id = :p"),
        {"p": policy_id},
    ).mappings().first()
    if row is None:
        raise NotFound(f"Unknown policy '{policy_id}'.")
    return PolicyDetails(
        coverage=int(row["coverage"]),
        premium=int(row["premium"]),
        active=bool(row["active"]),
    )
