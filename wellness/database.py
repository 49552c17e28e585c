"""
Database engine initialisation and ledger schema.

Each store is a small key-value table. All SQL is plain text so the same
statements run on SQLite (the default, in-memory) and on PostgreSQL.
"""

import sys
from typing import List, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from wellness.config import DB_URI


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS admins (
        identity VARCHAR(128) PRIMARY KEY
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS role_grants (
        identity VARCHAR(128) NOT NULL,
        role VARCHAR(32) NOT NULL,
        PRIMARY KEY (identity, role)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS medical_records (
        patient_id BIGINT PRIMARY KEY,
        record VARCHAR(256) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS visits (
        patient_id BIGINT NOT NULL,
        seq BIGINT NOT NULL,
        diagnosis VARCHAR(256) NOT NULL,
        PRIMARY KEY (patient_id, seq)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS emergency_contacts (
        patient_id BIGINT PRIMARY KEY,
        name VARCHAR(100) NOT NULL,
        phone VARCHAR(20) NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS policies (
        policy_id VARCHAR(32) PRIMARY KEY,
        coverage BIGINT NOT NULL,
        premium BIGINT NOT NULL,
        active BOOLEAN NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS bills (
        service_id VARCHAR(64) PRIMARY KEY,
        amount BIGINT NOT NULL,
        paid BOOLEAN NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS counters (
        name VARCHAR(32) PRIMARY KEY,
        value BIGINT NOT NULL
    )
    """,
]

LEDGER_TABLES = {
    "admins", "role_grants", "medical_records", "visits",
    "emergency_contacts", "policies", "bills", "counters",
}


def init_engine(db_uri: Optional[str] = None) -> Engine:
    """Create a SQLAlchemy engine, verify the connection and create the schema."""
    db_uri = db_uri or DB_URI
    if db_uri in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every thread sees its own empty database.
        engine = create_engine(
            db_uri, echo=False, future=True,
            poolclass=StaticPool, connect_args={"check_same_thread": False},
        )
    else:
        engine = create_engine(db_uri, echo=False, future=True)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as e:
        print("ERROR: could not connect to DB:", e, file=sys.stderr)
        sys.exit(1)
    create_schema(engine)
    print("[init] Connected to DB.")
    return engine


def create_schema(engine: Engine) -> None:
    """Create the ledger tables if they do not exist yet."""
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))


def missing_tables(engine: Engine) -> List[str]:
    """Return the ledger tables absent from the database, sorted."""
    present = set(inspect(engine).get_table_names())
    return sorted(LEDGER_TABLES - present)
