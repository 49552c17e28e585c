"""
Role-Based Access Control – administrator set and per-identity role grants.

All functions take an open SQLAlchemy connection; the caller owns the
transaction.
"""

from sqlalchemy import text

from wellness.config import MAX_ROLE_LENGTH, DOCTOR_ROLE
from wellness.errors import Unauthorized
from wellness.validation import check_identity, check_key


# ── Lookups ──────────────────────────────────────────────────────────

def is_admin(conn, identity: str) -> bool:
    """True if *identity* is in the administrator set. Never fails."""
    if not isinstance(identity, str):
        return False
    row = conn.execute(
        text("SELECT 1 FROM admins WHERE identity = :i"), {"i": identity}
    ).first()
    return row is not None


def is_user_authorized(conn, identity: str, role: str) -> bool:
    """True if *identity* holds *role*. Never fails."""
    if not isinstance(identity, str) or not isinstance(role, str):
        return False
    row = conn.execute(
        text("SELECT 1 FROM role_grants WHERE identity = :i AND role = :r"),
        {"i": identity, "r": role},
    ).first()
    return row is not None


# ── Guards ───────────────────────────────────────────────────────────

def require_admin(conn, caller: str) -> None:
    if not is_admin(conn, caller):
        raise Unauthorized(f"'{caller}' is not an administrator.")


def require_admin_or_role(conn, caller: str, role: str) -> None:
    """Admins pass every role check; everyone else needs the grant."""
    if is_admin(conn, caller) or is_user_authorized(conn, caller, role):
        return
    raise Unauthorized(f"'{caller}' does not hold the '{role}' role.")


def require_medical_writer(conn, caller: str) -> None:
    require_admin_or_role(conn, caller, DOCTOR_ROLE)


# ── Mutations ────────────────────────────────────────────────────────

def grant_genesis_admin(conn, deployer: str) -> None:
    """Seed the deploying identity as the first administrator."""
    deployer = check_identity("deployer", deployer)
    if not is_admin(conn, deployer):
        conn.execute(text("INSERT INTO admins (identity) VALUES (:i)"), {"i": deployer})


def add_admin(conn, caller: str, target: str) -> None:
    """Add *target* to the administrator set. Idempotent."""
    require_admin(conn, caller)
    target = check_identity("target", target)
    if not is_admin(conn, target):
        conn.execute(text("INSERT INTO admins (identity) VALUES (:i)"), {"i": target})


def authorize_user(conn, caller: str, target: str, role: str) -> None:
    """Grant *role* to *target*. Idempotent."""
    require_admin(conn, caller)
    target = check_identity("target", target)
    role = check_key("role", role, MAX_ROLE_LENGTH)
    if not is_user_authorized(conn, target, role):
        conn.execute(
            text("INSERT INTO role_grants (identity, role) VALUES (:i, :r)"),
            {"i": target, "r": role},
        )


def revoke_user(conn, caller: str, target: str, role: str) -> None:
    """Remove *role* from *target*; a no-op when the grant is absent."""
    require_admin(conn, caller)
    target = check_identity("target", target)
    role = check_key("role", role, MAX_ROLE_LENGTH)
    conn.execute(
        text("DELETE FROM role_grants WHERE identity = :i AND role = :r"),
        {"i": target, "r": role},
    )
