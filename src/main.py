import sys
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from telegram import Update
from telegram.ext import Application, CallbackQueryHandler, CommandHandler, ContextTypes, MessageHandler, filters
from src.adapters.scraper.gsz_scraper import GszScraper
from src.adapters.notifier.telegram_notifier import TelegramNotifier
from src.adapters.state.sheets_ledger_backend import SheetsLedgerBackend
from src.adapters.state.json_subscriber_repo import JsonSubscriberRepository
from src.application.identity import IdentityDirectory
from src.application.ledger import LedgerStore
from src.application.service import VacancyService
from src.infrastructure.config import ConfigError, Settings, settings

SERVICE_KEY = "service"
DAILY_JOB_ID = "daily"


def build_scheduler(service: VacancyService, cfg: Settings) -> AsyncIOScheduler:
    # In-memory job store: the next fire time is recomputed from "now" at startup.
    scheduler = AsyncIOScheduler(timezone=cfg.timezone) if cfg.timezone else AsyncIOScheduler()
    scheduler.add_job(
        service.broadcast,
        "cron",
        hour=cfg.send_hour,
        minute=cfg.send_minute,
        id=DAILY_JOB_ID,
        coalesce=True,
        misfire_grace_time=60,
    )
    return scheduler


def _service(context: ContextTypes.DEFAULT_TYPE) -> VacancyService:
    return context.application.bot_data[SERVICE_KEY]


async def on_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat = update.effective_chat
    if chat is None:
        return
    service = _service(context)
    if service.subscribe(chat.id):
        context.application.create_task(service.run_cycle(chat.id))


async def on_vacancies(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    chat = update.effective_chat
    if chat is None:
        return
    service = _service(context)
    service.subscribe(chat.id)
    context.application.create_task(service.run_cycle(chat.id))


async def on_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    if query is None:
        return
    try:
        await query.answer()
    except Exception as e:
        print(f"[telegram] Failed to answer callback {query.data!r}: {e}")
    if query.message is None:
        return
    service = _service(context)
    service.subscribe(query.message.chat.id)
    await service.handle_claim(query.from_user.id, query.message.chat.id, query.message.message_id, query.data)


async def on_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    print(f"[telegram] Handler error: {context.error}")


def build_application(cfg: Settings) -> Application:
    cfg.validate()
    backend = SheetsLedgerBackend.open(cfg.creds_file, cfg.spreadsheet_id)
    ledger = LedgerStore(backend)
    try:
        ledger.load()
    except Exception as e:
        raise ConfigError(f"cannot read existing ledger rows: {e}") from e

    scheduler_ref = {}

    async def post_init(app: Application) -> None:
        scheduler = build_scheduler(app.bot_data[SERVICE_KEY], cfg)
        scheduler.start()
        scheduler_ref["scheduler"] = scheduler
        job = scheduler.get_job(DAILY_JOB_ID)
        print(f"[main] Daily broadcast scheduled, next run at {job.next_run_time}")

    async def post_shutdown(app: Application) -> None:
        scheduler = scheduler_ref.get("scheduler")
        if scheduler is not None:
            scheduler.shutdown(wait=False)

    app = (
        Application.builder()
        .token(cfg.bot_token)
        .concurrent_updates(True)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )
    app.bot_data[SERVICE_KEY] = VacancyService(
        scraper=GszScraper(cfg.base_url, cfg.search_url, cfg.max_items, cfg.user_agent),
        ledger=ledger,
        notifier=TelegramNotifier(app.bot, cfg.sheet_url),
        identities=IdentityDirectory.from_file(cfg.users_file),
        subscriber_repo=JsonSubscriberRepository(cfg.subscribers_file),
        max_concurrent_cycles=cfg.max_concurrent_cycles,
    )

    app.add_handler(CommandHandler("vacancies", on_vacancies))
    app.add_handler(MessageHandler(filters.ALL, on_message))
    app.add_handler(CallbackQueryHandler(on_callback))
    app.add_error_handler(on_error)
    return app


def main() -> None:
    try:
        app = build_application(settings)
    except ConfigError as e:
        print(f"[main] Fatal: {e}")
        sys.exit(1)
    masked = settings.bot_token[:4] + "…"
    print(f"[main] Bot started (token={masked})")
    app.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
