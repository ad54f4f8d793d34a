import asyncio
from typing import Dict, List, Optional, Set
from ..domain.models import NOOP_DATA, ClaimResult, Listing, parse_apply_payload
from ..domain.ports import ListingsScraperPort, NotifierPort, SubscriberRepositoryPort
from .identity import IdentityDirectory
from .ledger import LedgerStore


class VacancyService:
    def __init__(
        self,
        scraper: ListingsScraperPort,
        ledger: LedgerStore,
        notifier: NotifierPort,
        identities: IdentityDirectory,
        subscriber_repo: Optional[SubscriberRepositoryPort] = None,
        max_concurrent_cycles: int = 3,
    ) -> None:
        self.scraper = scraper
        self.ledger = ledger
        self.notifier = notifier
        self.identities = identities
        self.subscriber_repo = subscriber_repo
        self._subscribers: Set[int] = subscriber_repo.load() if subscriber_repo else set()
        self._cycles = asyncio.Semaphore(max_concurrent_cycles)
        self._chat_locks: Dict[int, asyncio.Lock] = {}

    @property
    def subscribers(self) -> List[int]:
        return sorted(self._subscribers)

    def subscribe(self, chat_id: int) -> bool:
        """Register a chat; returns True only on its first interaction."""
        if chat_id in self._subscribers:
            return False
        self._subscribers.add(chat_id)
        print(f"[service] New subscriber {chat_id} ({len(self._subscribers)} total)")
        if self.subscriber_repo is not None:
            try:
                self.subscriber_repo.save(self._subscribers)
            except OSError as e:
                print(f"[service] Failed to persist subscribers: {e}")
        return True

    async def _deliver(self, chat_id: int, listing: Listing) -> None:
        row = await self.ledger.lookup_or_insert(listing)
        claimed = row is not None and self.ledger.is_claimed(row)
        try:
            await self.notifier.send_listing(chat_id, listing, row, claimed)
        except Exception as e:
            print(f"[service] Failed to send {listing.url} to {chat_id}: {e}")

    async def run_cycle(self, chat_id: int) -> int:
        """Fetch current listings and send each of them to one chat."""
        lock = self._chat_locks.setdefault(chat_id, asyncio.Lock())
        async with lock, self._cycles:
            print(f"[service] Cycle for {chat_id} started")
            listings = await asyncio.to_thread(self.scraper.fetch)
            for listing in listings:
                await self._deliver(chat_id, listing)
            print(f"[service] Cycle for {chat_id} done: {len(listings)} listings")
            return len(listings)

    async def broadcast(self) -> None:
        chat_ids = self.subscribers
        print(f"[service] Daily broadcast to {len(chat_ids)} chats")
        results = await asyncio.gather(*(self.run_cycle(c) for c in chat_ids), return_exceptions=True)
        for chat_id, result in zip(chat_ids, results):
            if isinstance(result, Exception):
                print(f"[service] Cycle for {chat_id} failed: {result}")

    async def handle_claim(self, user_id: int, chat_id: int, message_id: int, data: Optional[str]) -> Optional[ClaimResult]:
        if data == NOOP_DATA:
            return None
        row = parse_apply_payload(data)
        if row is None:
            print(f"[service] Ignoring callback data {data!r}")
            return None
        result = await self.ledger.claim(row, self.identities.display_name(user_id))
        if result is not ClaimResult.GRANTED:
            print(f"[service] Claim on row {row} by {user_id} ignored: {result.value}")
            return result
        try:
            await self.notifier.show_pending(chat_id, message_id, row)
        except Exception as e:
            print(f"[service] Failed to update control for row {row}: {e}")
        return result
