import json
import os
from typing import Iterable, Set
from ...domain.ports import SubscriberRepositoryPort
from ...infrastructure.config import settings


class JsonSubscriberRepository(SubscriberRepositoryPort):
    def __init__(self, path: str = settings.subscribers_file) -> None:
        self.path = os.path.abspath(path)

    def load(self) -> Set[int]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return {int(chat_id) for chat_id in raw}
        except FileNotFoundError:
            return set()

    def save(self, chat_ids: Iterable[int]) -> None:
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(sorted(chat_ids), f, ensure_ascii=False, indent=2)
