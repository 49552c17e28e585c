"""
Entry-point requests – one frozen dataclass per ledger operation.

``ENTRY_POINTS`` maps the public operation names to request classes so
adapters (HTTP, CLI) can turn a name plus arguments into a request.
"""

from dataclasses import dataclass, fields
from typing import Dict, Tuple, Type

from wellness.errors import InvalidArgument


# ── Identity & roles ─────────────────────────────────────────────────

@dataclass(frozen=True)
class AddAdmin:
    target: str


@dataclass(frozen=True)
class IsAdmin:
    identity: str


@dataclass(frozen=True)
class AuthorizeUser:
    target: str
    role: str


@dataclass(frozen=True)
class RevokeUser:
    target: str
    role: str


@dataclass(frozen=True)
class IsUserAuthorized:
    identity: str
    role: str


# ── Records ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AddMedicalRecord:
    patient_id: int
    record: str


@dataclass(frozen=True)
class GetMedicalRecord:
    patient_id: int


@dataclass(frozen=True)
class AddPatientVisit:
    patient_id: int
    diagnosis: str


@dataclass(frozen=True)
class GetPatientVisits:
    patient_id: int


@dataclass(frozen=True)
class AddEmergencyContact:
    patient_id: int
    name: str
    phone: str


@dataclass(frozen=True)
class GetEmergencyContact:
    patient_id: int


# ── Policies & claims ────────────────────────────────────────────────

@dataclass(frozen=True)
class AddPolicy:
    policy_id: str
    coverage: int
    premium: int
    active: bool = True


@dataclass(frozen=True)
class GetPolicyDetails:
    policy_id: str


@dataclass(frozen=True)
class SubmitClaim:
    amount: int


# ── Billing ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class AddBill:
    service_id: str
    amount: int


@dataclass(frozen=True)
class PayBill:
    service_id: str
    amount: int


@dataclass(frozen=True)
class BatchPayBills:
    service_ids: Tuple[str, ...]


@dataclass(frozen=True)
class GetBill:
    service_id: str


ENTRY_POINTS: Dict[str, Type] = {
    "add-admin": AddAdmin,
    "is-admin": IsAdmin,
    "authorize-user": AuthorizeUser,
    "revoke-user": RevokeUser,
    "is-user-authorized": IsUserAuthorized,
    "add-medical-record": AddMedicalRecord,
    "get-medical-record": GetMedicalRecord,
    "add-patient-visit": AddPatientVisit,
    "get-patient-visits": GetPatientVisits,
    "add-emergency-contact": AddEmergencyContact,
    "get-emergency-contact": GetEmergencyContact,
    "add-policy": AddPolicy,
    "get-policy-details": GetPolicyDetails,
    "submit-claim": SubmitClaim,
    "add-bill": AddBill,
    "pay-bill": PayBill,
    "batch-pay-bills": BatchPayBills,
    "get-bill": GetBill,
}


def argument_names(name: str) -> Tuple[str, ...]:
    """Field names of the request behind entry point *name*."""
    if name not in ENTRY_POINTS:
        raise InvalidArgument(f"Unknown entry point '{name}'.")
    return tuple(f.name for f in fields(ENTRY_POINTS[name]))


def build_request(name: str, args: dict):
    """Build the request for entry point *name* from keyword arguments."""
    if name not in ENTRY_POINTS:
        raise InvalidArgument(f"Unknown entry point '{name}'.")
    if not isinstance(args, dict):
        raise InvalidArgument("Arguments must be an object of name/value pairs.")
    cls = ENTRY_POINTS[name]
    args = dict(args)
    if cls is BatchPayBills and isinstance(args.get("service_ids"), list):
        args["service_ids"] = tuple(args["service_ids"])
    try:
        return cls(**args)
    except TypeError as e:
        raise InvalidArgument(f"Bad arguments for '{name}': {e}") from e
