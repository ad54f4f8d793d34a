from typing import Optional
from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup
from ...domain.models import NOOP_DATA, Listing, apply_payload
from ...domain.ports import NotifierPort
from ...infrastructure.config import settings

EMPTY_SALARY = "не указано"


def _or_empty(value: str) -> str:
    return value if value.strip() else EMPTY_SALARY


def render_listing(l: Listing) -> str:
    return (
        f"📌 {l.title}\n"
        f"💰 {_or_empty(l.salary)}\n"
        f"🏢 {l.company}\n"
        f"📍 {l.address}\n"
        f"🎓 {l.education}\n"
        f"👤 {l.contact_name}\n"
        f"📞 {l.contact_phone}\n"
        f"🔗 {l.url}"
    )


def build_keyboard(row: Optional[int], claimed: bool, sheet_url: str = settings.sheet_url) -> InlineKeyboardMarkup:
    sheet_button = [InlineKeyboardButton("📊 Таблица", url=sheet_url)]
    if row is None:
        # not recorded in the ledger, nothing to claim
        return InlineKeyboardMarkup([sheet_button])
    if claimed:
        action = InlineKeyboardButton("🕓 На рассмотрении", callback_data=NOOP_DATA)
    else:
        action = InlineKeyboardButton("✅ Откликнуться", callback_data=apply_payload(row))
    return InlineKeyboardMarkup([[action], sheet_button])


class TelegramNotifier(NotifierPort):
    def __init__(self, bot: Bot, sheet_url: str = settings.sheet_url) -> None:
        self.bot = bot
        self.sheet_url = sheet_url

    async def send_listing(self, chat_id: int, listing: Listing, row: Optional[int], claimed: bool) -> None:
        print(f"[telegram] Sending {listing.url} (row {row}) to {chat_id}")
        await self.bot.send_message(
            chat_id=chat_id,
            text=render_listing(listing),
            reply_markup=build_keyboard(row, claimed, self.sheet_url),
        )

    async def show_pending(self, chat_id: int, message_id: int, row: int) -> None:
        print(f"[telegram] Marking message {message_id} in {chat_id} as pending (row {row})")
        await self.bot.edit_message_reply_markup(
            chat_id=chat_id,
            message_id=message_id,
            reply_markup=build_keyboard(row, True, self.sheet_url),
        )
