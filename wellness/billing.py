"""
Billing ledger – service bills and their settlement.

A bill moves from unpaid to paid exactly once; nothing moves it back.
"""

from typing import List

from sqlalchemy import text

from wellness.config import MAX_SERVICE_ID_LENGTH, MAX_BATCH_SIZE
from wellness.errors import NotFound, InvalidArgument, AmountMismatch, LedgerError
from wellness.models import Bill, BatchItem, BatchResult
from wellness.validation import check_key, check_uint


def check_service_id(service_id) -> str:
    return check_key("service_id", service_id, MAX_SERVICE_ID_LENGTH)


def add_bill(conn, service_id: str, amount: int) -> str:
    """
    Create (or overwrite) an unpaid bill and echo the service id back.

    A paid bill is settled for good and cannot be replaced.
    """
    service_id = check_service_id(service_id)
    amount = check_uint("amount", amount)
    paid = conn.execute(
        text("SELECT paid FROM bills WHERE service_id = :s"), {"s": service_id}
    ).scalar()
    if paid:
        raise InvalidArgument(f"Bill '{service_id}' is already paid and cannot be replaced.")
    updated = conn.execute(
        text("UPDATE bills SET amount = :a, paid = :paid WHERE service_id = :s"),
        {"s": service_id, "a": amount, "paid": False},
    ).rowcount
    if not updated:
        conn.execute(
            text("INSERT INTO bills (service_id, amount, paid) VALUES (:s, :a, :paid)"),
            {"s": service_id, "a": amount, "paid": False},
        )
    return service_id


def get_bill(conn, service_id: str) -> Bill:
    service_id = check_service_id(service_id)
    row = conn.execute(
        text("SELECT amount, paid FROM bills WHERE service_id = :s"),
        {"s": service_id},
    ).mappings().first()
    if row is None:
        raise NotFound(f"No bill for service '{service_id}'.")
    return Bill(amount=int(row["amount"]), paid=bool(row["paid"]))


def _settle(conn, service_id: str) -> None:
    conn.execute(
        text("UPDATE bills SET paid = :paid WHERE service_id = :s"),
        {"s": service_id, "paid": True},
    )


def pay_bill(conn, service_id: str, amount: int) -> bool:
    """Settle a bill when *amount* matches the recorded amount exactly."""
    service_id = check_service_id(service_id)
    amount = check_uint("amount", amount)
    bill = get_bill(conn, service_id)
    if amount != bill.amount:
        raise AmountMismatch(service_id, bill.amount, amount)
    if not bill.paid:
        _settle(conn, service_id)
    return True


def batch_pay_bills(conn, service_ids: List[str]) -> BatchResult:
    """
    Settle each bill at its own recorded amount, in the given order.

    A bad entry is reported on its item and does not stop the rest of the
    batch. Only a malformed batch (not a list, or too long) fails the call.
    """
    if not isinstance(service_ids, (list, tuple)):
        raise InvalidArgument("service_ids must be a list of service ids.")
    if len(service_ids) > MAX_BATCH_SIZE:
        raise InvalidArgument(
            f"Batch holds {len(service_ids)} bills, the limit is {MAX_BATCH_SIZE}."
        )

    result = BatchResult()
    for service_id in service_ids:
        try:
            bill = get_bill(conn, service_id)
        except LedgerError as e:
            result.items.append(BatchItem(service_id=str(service_id), settled=False, error=e.kind))
            continue
        if not bill.paid:
            _settle(conn, service_id)
        result.items.append(BatchItem(service_id=service_id, settled=True))
    return result
