from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class Listing:
    url: str  # natural key
    title: str
    salary: str = ""
    company: str = ""
    address: str = ""
    education: str = ""
    contact_name: str = ""
    contact_phone: str = ""


@dataclass(frozen=True)
class LedgerRow:
    row: int
    url: str
    claimant: Optional[str] = None

    @property
    def claimed(self) -> bool:
        return bool(self.claimant)


class ClaimResult(Enum):
    GRANTED = "granted"
    ALREADY_CLAIMED = "already_claimed"
    UNKNOWN_ROW = "unknown_row"


APPLY_PREFIX = "apply"
NOOP_DATA = "noop"


def apply_payload(row: int) -> str:
    return f"{APPLY_PREFIX}|{row}"


def parse_apply_payload(data: Optional[str]) -> Optional[int]:
    """'apply|7' -> 7; anything else -> None"""
    parts = (data or "").split("|")
    if len(parts) != 2 or parts[0] != APPLY_PREFIX:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None
