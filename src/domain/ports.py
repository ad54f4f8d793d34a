from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Set
from .models import Listing


class ListingsScraperPort(ABC):
    @abstractmethod
    def fetch(self, query: Optional[str] = None) -> List[Listing]:
        ...


class LedgerBackendPort(ABC):
    """Durable, append-only tabular store the ledger is mirrored to."""

    @abstractmethod
    def read_range(self, a1_range: str) -> List[List[str]]:
        ...

    @abstractmethod
    def append_row(self, values: List[str]) -> str:
        """Append a row and return the A1 range it was written to."""
        ...

    @abstractmethod
    def update_cell(self, a1_cell: str, value: str) -> None:
        ...


class NotifierPort(ABC):
    @abstractmethod
    async def send_listing(self, chat_id: int, listing: Listing, row: Optional[int], claimed: bool) -> None:
        ...

    @abstractmethod
    async def show_pending(self, chat_id: int, message_id: int, row: int) -> None:
        ...


class SubscriberRepositoryPort(ABC):
    @abstractmethod
    def load(self) -> Set[int]:
        ...

    @abstractmethod
    def save(self, chat_ids: Iterable[int]) -> None:
        ...
