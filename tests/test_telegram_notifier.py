# tests/test_telegram_notifier.py
import asyncio
from unittest import mock

from src.adapters.notifier.telegram_notifier import TelegramNotifier, build_keyboard, render_listing
from src.domain.models import Listing, apply_payload, parse_apply_payload

from conftest import make_listing

SHEET = "https://docs.google.com/spreadsheets/d/abc"


def _buttons(markup):
    return [[(b.text, b.callback_data, b.url) for b in row] for row in markup.inline_keyboard]


def test_render_listing_fields_in_order():
    text = render_listing(make_listing())
    assert text.splitlines() == [
        "📌 Техник-программист",
        "💰 1500 BYN",
        "🏢 ОАО Завод",
        "📍 г. Минск, ул. Ленина, 1",
        "🎓 Среднее специальное",
        "👤 Иванова Анна",
        "📞 +375 17 000-00-00",
        "🔗 https://gsz.gov.by/x/1",
    ]


def test_render_listing_empty_salary():
    text = render_listing(Listing(url="u", title="t", salary="  "))
    assert "💰 не указано" in text


def test_keyboard_open_row():
    assert _buttons(build_keyboard(7, False, SHEET)) == [
        [("✅ Откликнуться", "apply|7", None)],
        [("📊 Таблица", None, SHEET)],
    ]


def test_keyboard_claimed_row():
    assert _buttons(build_keyboard(7, True, SHEET)) == [
        [("🕓 На рассмотрении", "noop", None)],
        [("📊 Таблица", None, SHEET)],
    ]


def test_keyboard_without_row_has_no_claim_button():
    assert _buttons(build_keyboard(None, False, SHEET)) == [[("📊 Таблица", None, SHEET)]]


def test_apply_payload_roundtrip_and_rejects():
    assert parse_apply_payload(apply_payload(12)) == 12
    assert parse_apply_payload("apply|") is None
    assert parse_apply_payload("apply|1|2") is None
    assert parse_apply_payload("other|1") is None


def test_send_listing_and_show_pending_use_bot():
    bot = mock.AsyncMock()
    notifier = TelegramNotifier(bot, SHEET)

    asyncio.run(notifier.send_listing(10, make_listing(), 7, False))
    kwargs = bot.send_message.await_args.kwargs
    assert kwargs["chat_id"] == 10
    assert kwargs["text"].startswith("📌 ")
    assert _buttons(kwargs["reply_markup"])[0][0][1] == "apply|7"

    asyncio.run(notifier.show_pending(10, 99, 7))
    kwargs = bot.edit_message_reply_markup.await_args.kwargs
    assert (kwargs["chat_id"], kwargs["message_id"]) == (10, 99)
    assert _buttons(kwargs["reply_markup"])[0][0][0] == "🕓 На рассмотрении"
