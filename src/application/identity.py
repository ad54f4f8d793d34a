import json
from typing import Dict, Mapping, Optional
from ..infrastructure.config import ConfigError


class IdentityDirectory:
    """Telegram user id -> display name written into the claimant column."""

    def __init__(self, names: Optional[Mapping[int, str]] = None) -> None:
        self._names: Dict[int, str] = dict(names or {})

    @classmethod
    def from_file(cls, path: str) -> "IdentityDirectory":
        # {"1414802865": "Подтероб Юлия Сергеевна", ...}
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            print(f"[identity] {path} not found; claimants will be shown as chat ids")
            return cls()
        except json.JSONDecodeError as e:
            raise ConfigError(f"{path} is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must map user ids to names")
        try:
            names = {int(user_id): str(name) for user_id, name in raw.items() if str(name).strip()}
        except ValueError as e:
            raise ConfigError(f"{path} has a non-numeric user id: {e}") from e
        print(f"[identity] Loaded {len(names)} names from {path}")
        return cls(names)

    def display_name(self, user_id: int) -> str:
        return self._names.get(user_id) or f"chat:{user_id}"

    def __len__(self) -> int:
        return len(self._names)
