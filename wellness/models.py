"""
Domain dataclasses used across the application.
"""

from dataclasses import dataclass, field, asdict
from typing import List


@dataclass(frozen=True)
class Visit:
    """One entry of a patient's append-only visit log."""
    diagnosis: str
    seq: int        # engine-wide logical sequence number


@dataclass(frozen=True)
class EmergencyContact:
    name: str
    phone: str


@dataclass(frozen=True)
class PolicyDetails:
    """Insurance policy terms keyed by policy id."""
    coverage: int
    premium: int
    active: bool


@dataclass(frozen=True)
class Bill:
    amount: int
    paid: bool


@dataclass(frozen=True)
class BatchItem:
    """Outcome of settling one service id inside a batch."""
    service_id: str
    settled: bool
    error: str = ""  # error kind when not settled


@dataclass
class BatchResult:
    """Per-item report of a batch settlement, in input order."""
    items: List[BatchItem] = field(default_factory=list)

    @property
    def settled(self) -> List[str]:
        return [i.service_id for i in self.items if i.settled]

    @property
    def failed(self) -> List[str]:
        return [i.service_id for i in self.items if not i.settled]

    def to_dict(self) -> dict:
        return {
            "settled": self.settled,
            "failed": self.failed,
            "items": [asdict(i) for i in self.items],
        }


def to_plain(value):
    """Convert an entry-point result into JSON-friendly builtins."""
    if isinstance(value, BatchResult):
        return value.to_dict()
    if isinstance(value, (Visit, EmergencyContact, PolicyDetails, Bill, BatchItem)):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value
