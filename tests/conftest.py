# tests/conftest.py
from typing import List, Optional

import pytest

from src.application.identity import IdentityDirectory
from src.application.ledger import LedgerStore
from src.application.service import VacancyService
from src.domain.models import Listing
from src.domain.ports import LedgerBackendPort, ListingsScraperPort, NotifierPort


class FakeBackend(LedgerBackendPort):
    """In-memory sheet: rows[0] is sheet row 2."""

    def __init__(self, rows: Optional[List[List[str]]] = None) -> None:
        self.rows: List[List[str]] = [list(r) for r in (rows or [])]
        self.appended: List[List[str]] = []
        self.updates: List[tuple] = []
        self.fail_append = False
        self.fail_update = False

    def read_range(self, a1_range: str) -> List[List[str]]:
        assert a1_range == "I2:J"
        return [r[8:10] for r in self.rows]

    def append_row(self, values: List[str]) -> str:
        if self.fail_append:
            raise RuntimeError("quota exceeded")
        self.rows.append(list(values))
        self.appended.append(list(values))
        row = len(self.rows) + 1
        return f"Sheet1!A{row}:J{row}"

    def update_cell(self, a1_cell: str, value: str) -> None:
        if self.fail_update:
            raise RuntimeError("quota exceeded")
        self.updates.append((a1_cell, value))


class FakeScraper(ListingsScraperPort):
    def __init__(self, listings: List[Listing]) -> None:
        self.listings = listings
        self.calls = 0

    def fetch(self, query: Optional[str] = None) -> List[Listing]:
        self.calls += 1
        return list(self.listings)


class FakeNotifier(NotifierPort):
    def __init__(self) -> None:
        self.sent: List[tuple] = []
        self.pending: List[tuple] = []

    async def send_listing(self, chat_id, listing, row, claimed) -> None:
        self.sent.append((chat_id, listing.url, row, claimed))

    async def show_pending(self, chat_id, message_id, row) -> None:
        self.pending.append((chat_id, message_id, row))


def sheet_row(url: str, claimant: str = "") -> List[str]:
    return ["01.01.2026", "t", "", "", "", "", "", "", url, claimant]


def make_listing(url: str = "https://gsz.gov.by/x/1", title: str = "Техник-программист") -> Listing:
    return Listing(
        url=url,
        title=title,
        salary="1500 BYN",
        company="ОАО Завод",
        address="г. Минск, ул. Ленина, 1",
        education="Среднее специальное",
        contact_name="Иванова Анна",
        contact_phone="+375 17 000-00-00",
    )


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def ledger(backend):
    store = LedgerStore(backend)
    store.load()
    return store


@pytest.fixture
def identities():
    return IdentityDirectory({1414802865: "Подтероб Юлия Сергеевна", 741457312: "Сасим Ярослав Сергеевич"})


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_service(notifier, identities):
    def _make(ledger, listings, **kwargs):
        return VacancyService(FakeScraper(listings), ledger, notifier, identities, **kwargs)

    return _make
