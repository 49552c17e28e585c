"""
Unit tests for the billing ledger.
"""

import pytest

from wellness.billing import add_bill, get_bill, pay_bill, batch_pay_bills
from wellness.config import MAX_BATCH_SIZE
from wellness.database import init_engine
from wellness.errors import NotFound, InvalidArgument, AmountMismatch
from wellness.models import Bill, BatchItem


@pytest.fixture
def conn():
    engine = init_engine("sqlite://")
    with engine.begin() as c:
        yield c


# ── Tests: single bills ──────────────────────────────────────────────

def test_get_bill_before_add_fails(conn):
    with pytest.raises(NotFound):
        get_bill(conn, "S-1")


def test_bill_lifecycle(conn):
    assert add_bill(conn, "S-1", 100) == "S-1"
    assert get_bill(conn, "S-1") == Bill(amount=100, paid=False)

    assert pay_bill(conn, "S-1", 100) is True
    assert get_bill(conn, "S-1").paid is True

    with pytest.raises(AmountMismatch) as e:
        pay_bill(conn, "S-1", 99)
    assert e.value.expected == 100
    assert e.value.offered == 99
    assert get_bill(conn, "S-1") == Bill(amount=100, paid=True)


def test_mismatched_payment_leaves_bill_unpaid(conn):
    add_bill(conn, "S-1", 100)
    with pytest.raises(AmountMismatch, match="is for 100"):
        pay_bill(conn, "S-1", 50)
    assert get_bill(conn, "S-1").paid is False


def test_pay_unknown_bill(conn):
    with pytest.raises(NotFound):
        pay_bill(conn, "S-404", 10)


def test_paying_twice_with_matching_amount_stays_paid(conn):
    add_bill(conn, "S-1", 100)
    pay_bill(conn, "S-1", 100)
    assert pay_bill(conn, "S-1", 100) is True
    assert get_bill(conn, "S-1").paid is True


def test_add_bill_overwrites(conn):
    add_bill(conn, "S-1", 100)
    add_bill(conn, "S-1", 250)
    assert get_bill(conn, "S-1") == Bill(amount=250, paid=False)


def test_add_bill_cannot_replace_paid_bill(conn):
    add_bill(conn, "S-1", 100)
    pay_bill(conn, "S-1", 100)
    with pytest.raises(InvalidArgument, match="already paid"):
        add_bill(conn, "S-1", 300)
    assert get_bill(conn, "S-1") == Bill(amount=100, paid=True)


def test_add_bill_validation(conn):
    with pytest.raises(InvalidArgument):
        add_bill(conn, "", 10)
    with pytest.raises(InvalidArgument):
        add_bill(conn, "S" * 65, 10)
    with pytest.raises(InvalidArgument):
        add_bill(conn, "S-1", -10)


# ── Tests: batch settlement ──────────────────────────────────────────

def test_batch_settles_all_known_bills(conn):
    add_bill(conn, "S-1", 100)
    add_bill(conn, "S-2", 200)
    result = batch_pay_bills(conn, ["S-1", "S-2"])
    assert result.settled == ["S-1", "S-2"]
    assert result.failed == []
    assert get_bill(conn, "S-1").paid is True
    assert get_bill(conn, "S-2").paid is True


def test_batch_unknown_id_does_not_abort_others(conn):
    add_bill(conn, "S-1", 100)
    add_bill(conn, "S-2", 200)
    result = batch_pay_bills(conn, ["S-1", "GHOST", "S-2"])
    assert result.settled == ["S-1", "S-2"]
    assert result.failed == ["GHOST"]
    assert result.items[1] == BatchItem(service_id="GHOST", settled=False, error="NotFound")
    assert get_bill(conn, "S-1").paid is True
    assert get_bill(conn, "S-2").paid is True


def test_batch_reports_items_in_input_order(conn):
    add_bill(conn, "B", 1)
    add_bill(conn, "A", 1)
    result = batch_pay_bills(conn, ["B", "X", "A"])
    assert [i.service_id for i in result.items] == ["B", "X", "A"]


def test_batch_malformed_entry_is_per_item(conn):
    add_bill(conn, "S-1", 100)
    result = batch_pay_bills(conn, [42, "S-1"])
    assert result.items[0].error == "InvalidArgument"
    assert result.settled == ["S-1"]


def test_batch_of_already_paid_bill_stays_paid(conn):
    add_bill(conn, "S-1", 100)
    pay_bill(conn, "S-1", 100)
    assert batch_pay_bills(conn, ["S-1"]).settled == ["S-1"]
    assert get_bill(conn, "S-1").paid is True


def test_empty_batch(conn):
    assert batch_pay_bills(conn, []).to_dict() == {"settled": [], "failed": [], "items": []}


def test_batch_too_large_applies_nothing(conn):
    ids = [f"S-{i}" for i in range(MAX_BATCH_SIZE + 1)]
    for sid in ids:
        add_bill(conn, sid, 1)
    with pytest.raises(InvalidArgument, match="limit is 10"):
        batch_pay_bills(conn, ids)
    assert not any(get_bill(conn, sid).paid for sid in ids)


def test_batch_requires_a_list(conn):
    with pytest.raises(InvalidArgument):
        batch_pay_bills(conn, "S-1")
