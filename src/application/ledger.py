import asyncio
import re
from datetime import datetime
from typing import Dict, Optional
from ..domain.models import ClaimResult, LedgerRow, Listing
from ..domain.ports import LedgerBackendPort

# Columns I:J hold url and claimant; data starts under the header row.
EXISTING_RANGE = "I2:J"
FIRST_DATA_ROW = 2
CLAIMANT_COLUMN = "J"

_ROW_RE = re.compile(r"![A-Z]+(\d+)")


def parse_row(updated_range: str) -> Optional[int]:
    """'Sheet1!A12:J12' -> 12"""
    m = _ROW_RE.search(updated_range or "")
    if not m:
        return None
    row = int(m.group(1))
    return row if row >= FIRST_DATA_ROW else None


def listing_to_values(listing: Listing, today: Optional[datetime] = None) -> list:
    day = (today or datetime.now()).strftime("%d.%m.%Y")
    return [
        day,
        listing.title,
        listing.salary,
        listing.company,
        listing.address,
        listing.education,
        listing.contact_name,
        listing.contact_phone,
        listing.url,
        "",
    ]


class LedgerStore:
    """In-memory url->row and row->claimant maps mirrored to a durable backend.

    The in-memory maps are the source of truth; the backend is written after
    the in-memory state changes and its failures never roll it back.
    """

    def __init__(self, backend: LedgerBackendPort) -> None:
        self._backend = backend
        self._url_to_row: Dict[str, int] = {}
        self._row_to_url: Dict[int, str] = {}
        self._claimants: Dict[int, str] = {}
        self._lock = asyncio.Lock()
        self._insert_lock = asyncio.Lock()

    def load(self) -> int:
        values = self._backend.read_range(EXISTING_RANGE)
        for i, cells in enumerate(values):
            row = i + FIRST_DATA_ROW
            if len(cells) > 0 and cells[0]:
                self._url_to_row[cells[0]] = row
                self._row_to_url[row] = cells[0]
            if len(cells) > 1 and cells[1]:
                self._claimants[row] = cells[1]
        print(f"[ledger] Loaded {len(self._url_to_row)} rows, {len(self._claimants)} claimed")
        return len(self._url_to_row)

    def lookup_row(self, url: str) -> Optional[int]:
        return self._url_to_row.get(url)

    def is_claimed(self, row: int) -> bool:
        return row in self._claimants

    def claimant(self, row: int) -> Optional[str]:
        return self._claimants.get(row)

    def get(self, row: int) -> Optional[LedgerRow]:
        url = self._row_to_url.get(row)
        if url is None:
            return None
        return LedgerRow(row=row, url=url, claimant=self._claimants.get(row))

    def knows_row(self, row: int) -> bool:
        return row in self._row_to_url

    async def insert_row(self, listing: Listing) -> Optional[int]:
        values = listing_to_values(listing)
        try:
            updated_range = await asyncio.to_thread(self._backend.append_row, values)
        except Exception as e:
            print(f"[ledger] Append failed for {listing.url}: {e}")
            return None
        row = parse_row(updated_range)
        if row is None:
            print(f"[ledger] Could not parse row from {updated_range!r} for {listing.url}")
            return None
        async with self._lock:
            self._url_to_row[listing.url] = row
            self._row_to_url[row] = listing.url
        print(f"[ledger] Recorded {listing.url} at row {row}")
        return row

    async def lookup_or_insert(self, listing: Listing) -> Optional[int]:
        async with self._insert_lock:
            row = self.lookup_row(listing.url)
            if row is not None:
                return row
            return await self.insert_row(listing)

    async def claim(self, row: int, claimant: str) -> ClaimResult:
        async with self._lock:
            if not self.knows_row(row):
                return ClaimResult.UNKNOWN_ROW
            if row in self._claimants:
                return ClaimResult.ALREADY_CLAIMED
            self._claimants[row] = claimant
        print(f"[ledger] Row {row} claimed by {claimant}")
        try:
            await asyncio.to_thread(self._backend.update_cell, f"{CLAIMANT_COLUMN}{row}", claimant)
        except Exception as e:
            print(f"[ledger] Failed to persist claimant for row {row}: {e}")
        return ClaimResult.GRANTED
