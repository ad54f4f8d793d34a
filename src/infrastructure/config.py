import os
import sys
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

DEFAULT_SPREADSHEET_ID = "1QOd0QpM-QKhRuQn1pvSgbmzxGcRUKbN47gU5u_oT2Xg"
DEFAULT_SEARCH_URL = "https://gsz.gov.by/registration/vacancy-search/?profession=техник-программист&paginate_by=10"


class ConfigError(RuntimeError):
    pass


def _int_env(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    bot_token: str = field(default_factory=lambda: os.getenv("BOT_TOKEN", ""))
    creds_file: str = field(default_factory=lambda: os.getenv("CREDS_FILE", "credentials.json"))
    spreadsheet_id: str = field(default_factory=lambda: os.getenv("SPREADSHEET_ID", DEFAULT_SPREADSHEET_ID))
    base_url: str = field(default_factory=lambda: os.getenv("BASE_URL", "https://gsz.gov.by"))
    search_url: str = field(default_factory=lambda: os.getenv("SEARCH_URL", DEFAULT_SEARCH_URL))
    user_agent: str = field(default_factory=lambda: os.getenv("USER_AGENT", "gsz-vacancy-bot/1.0"))
    max_items: int = field(default_factory=lambda: _int_env("MAX_ITEMS", "5"))
    send_hour: int = field(default_factory=lambda: _int_env("SEND_HOUR", "17"))
    send_minute: int = field(default_factory=lambda: _int_env("SEND_MINUTE", "0"))
    timezone: Optional[str] = field(default_factory=lambda: os.getenv("TIMEZONE") or None)
    max_concurrent_cycles: int = field(default_factory=lambda: _int_env("MAX_CONCURRENT_CYCLES", "3"))
    users_file: str = field(default_factory=lambda: os.getenv("USERS_FILE", "users.json"))
    subscribers_file: str = field(default_factory=lambda: os.getenv("SUBSCRIBERS_FILE", os.path.join("data", "subscribers.json")))

    @property
    def sheet_url(self) -> str:
        return f"https://docs.google.com/spreadsheets/d/{self.spreadsheet_id}"

    def validate(self) -> None:
        """Fail fast on settings the bot cannot start without."""
        if not self.bot_token:
            raise ConfigError("BOT_TOKEN is not set")
        if not os.path.isfile(self.creds_file):
            raise ConfigError(f"credentials file not found: {self.creds_file}")
        if self.max_concurrent_cycles < 1:
            raise ConfigError("MAX_CONCURRENT_CYCLES must be >= 1")
        if self.max_items < 1:
            raise ConfigError("MAX_ITEMS must be >= 1")
        if not (0 <= self.send_hour <= 23 and 0 <= self.send_minute <= 59):
            raise ConfigError(f"invalid send time {self.send_hour}:{self.send_minute:02d}")


try:
    settings = Settings()
except ConfigError as e:
    print(f"[config] Fatal: {e}")
    sys.exit(1)
