"""
Claims calculator – reimbursement is a fixed share of the submitted amount.
"""

from wellness.config import REIMBURSEMENT_RATE_PERCENT
from wellness.validation import check_uint


def compute_reimbursement(amount: int) -> int:
    """floor(amount * 75 / 100) in integer arithmetic; never exceeds *amount*."""
    amount = check_uint("amount", amount)
    return amount * REIMBURSEMENT_RATE_PERCENT // 100
