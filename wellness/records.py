"""
Patient record store – medical records, visit logs and emergency contacts.
"""

from typing import List, Optional

from sqlalchemy import text

from wellness.config import (
    MAX_RECORD_LENGTH,
    MAX_DIAGNOSIS_LENGTH,
    MAX_CONTACT_NAME_LENGTH,
    MAX_PHONE_LENGTH,
)
from wellness.errors import NotFound
from wellness.models import Visit, EmergencyContact
from wellness.validation import check_uint, check_text

VISIT_COUNTER = "visit_seq"


# ── Medical records ──────────────────────────────────────────────────

def add_medical_record(conn, patient_id: int, record: str) -> int:
    """Write (or overwrite) the record for *patient_id* and echo the id back."""
    patient_id = check_uint("patient_id", patient_id)
    record = check_text("record", record, MAX_RECORD_LENGTH)
    updated = conn.execute(
        text("UPDATE medical_records SET record = :r WHERE patient_id = :p"),
        {"p": patient_id, "r": record},
    ).rowcount
    if not updated:
        conn.execute(
            text("INSERT INTO medical_records (patient_id, record) VALUES (:p, :r)"),
            {"p": patient_id, "r": record},
        )
    return patient_id


def get_medical_record(conn, patient_id: int) -> str:
    patient_id = check_uint("patient_id", patient_id)
    row = conn.execute(
        text("SELECT record FROM medical_records WHERE patient_id = :p"),
        {"p": patient_id},
    ).first()
    if row is None:
        raise NotFound(f"No medical record for patient {patient_id}.")
    return row[0]


# ── Visits ───────────────────────────────────────────────────────────

def next_sequence(conn, name: str) -> int:
    """Bump and return the named counter (first value is 1)."""
    current = conn.execute(
        text("SELECT value FROM counters WHERE name = :n"), {"n": name}
    ).scalar()
    if current is None:
        conn.execute(text("INSERT INTO counters (name, value) VALUES (:n, 1)"), {"n": name})
        return 1
    conn.execute(
        text("UPDATE counters SET value = :v WHERE name = :n"),
        {"n": name, "v": current + 1},
    )
    return current + 1


def add_patient_visit(conn, patient_id: int, diagnosis: str) -> int:
    """Append a visit to the patient's log and return its sequence number."""
    patient_id = check_uint("patient_id", patient_id)
    diagnosis = check_text("diagnosis", diagnosis, MAX_DIAGNOSIS_LENGTH)
    seq = next_sequence(conn, VISIT_COUNTER)
    conn.execute(
        text("INSERT INTO visits (patient_id, seq, diagnosis) VALUES (:p, :s, :d)"),
        {"p": patient_id, "s": seq, "d": diagnosis},
    )
    return seq


def get_patient_visits(conn, patient_id: int) -> List[Visit]:
    """Visits in insertion order; an empty list when none were recorded."""
    patient_id = check_uint("patient_id", patient_id)
    rows = conn.execute(
        text("SELECT diagnosis, seq FROM visits WHERE patient_id = :p ORDER BY seq"),
        {"p": patient_id},
    ).mappings().all()
    return [Visit(diagnosis=r["diagnosis"], seq=int(r["seq"])) for r in rows]


# ── Emergency contacts ───────────────────────────────────────────────

def add_emergency_contact(conn, patient_id: int, name: str, phone: str) -> None:
    patient_id = check_uint("patient_id", patient_id)
    name = check_text("name", name, MAX_CONTACT_NAME_LENGTH)
    phone = check_text("phone", phone, MAX_PHONE_LENGTH)
    updated = conn.execute(
        text("UPDATE emergency_contacts SET name = :n, phone = :ph WHERE patient_id = :p"),
        {"p": patient_id, "n": name, "ph": phone},
    ).rowcount
    if not updated:
        conn.execute(
            text("INSERT INTO emergency_contacts (patient_id, name, phone) VALUES (:p, :n, :ph)"),
            {"p": patient_id, "n": name, "ph": phone},
        )


def get_emergency_contact(conn, patient_id: int) -> Optional[EmergencyContact]:
    """The patient's contact, or None when it was never set."""
    patient_id = check_uint("patient_id", patient_id)
    row = conn.execute(
        text("SELECT name, phone FROM emergency_contacts WHERE patient_id = :p"),
        {"p": patient_id},
    ).mappings().first()
    if row is None:
        return None
    return EmergencyContact(name=row["name"], phone=row["phone"])
