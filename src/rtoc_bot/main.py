"""Entry point for the RTOC bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Any, Dict, Optional

import structlog
from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from pydantic import ValidationError

from .config import Settings
from .lookup import OffenceLookupClient
from .schedule import DailyTrigger
from .scheduler import SweepScheduler
from .sequencer import VehicleSequencer
from .telegram import BOT_COMMANDS, create_notifier, create_router


def configure_logging(level: int = logging.INFO) -> None:
    """Configure structlog + stdlib logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stdout,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


LOGGER = structlog.get_logger(__name__)


async def run(settings: Settings) -> None:
    """Start the daily scheduler and serve operator commands until interrupted."""
    bot = Bot(
        token=settings.bot_token.get_secret_value(),
        default=DefaultBotProperties(parse_mode=ParseMode.MARKDOWN),
    )
    notify = create_notifier(bot, settings.master_id, attempts=settings.notify_attempts)
    sequencer = VehicleSequencer(OffenceLookupClient.from_settings(settings), notify)
    scheduler = SweepScheduler(
        sequencer,
        settings.vehicle_list,
        trigger=DailyTrigger.from_settings(settings),
        cooldown=settings.sweep_cooldown_seconds,
    )

    dispatcher = Dispatcher(sequencer=sequencer, settings=settings)
    dispatcher.include_router(create_router(settings.master_id))

    LOGGER.info(
        "bot.vehicles_loaded",
        count=len(settings.vehicle_list),
        vehicles=settings.vehicle_list,
    )

    scheduler_task = asyncio.create_task(scheduler.run())
    try:
        try:
            await bot.set_my_commands(BOT_COMMANDS)
        except TelegramAPIError as exc:
            LOGGER.warning("bot.set_commands_failed", error=str(exc))
        await dispatcher.start_polling(bot, close_bot_session=False)
    finally:
        LOGGER.info("bot.shutdown")
        await sequencer.drain()
        await scheduler_task
        await bot.session.close()


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """CLI argument parsing; flags override environment variables."""
    parser = argparse.ArgumentParser(description="Notify the operator about road traffic offences via Telegram.")
    parser.add_argument("--bot-token", dest="bot_token", help="Telegram bot token (TG_BOT_TOKEN).")
    parser.add_argument("--vehicles", help="Comma separated registrations (VEHICLES).")
    parser.add_argument("--master-id", dest="master_id", help="Operator chat id (MASTER_ID).")
    parser.add_argument("--api-url", dest="api_url", help="Offence lookup endpoint (RTOC_API_URL).")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (RTOC_LOG_LEVEL).")
    return parser.parse_args(argv)


def settings_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Map the flags that were actually given onto their environment aliases."""
    fields = Settings.model_fields
    return {
        fields[key].alias or key: value
        for key, value in vars(args).items()
        if value is not None
    }


def cli(argv: Optional[list[str]] = None) -> None:
    """Console script entrypoint."""
    args = parse_args(argv)
    configure_logging()

    try:
        settings = Settings(**settings_overrides(args))
    except ValidationError as exc:
        LOGGER.error("settings.error", error=str(exc))
        raise SystemExit(2) from exc

    logging.getLogger().setLevel(settings.log_level.upper())

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:  # pragma: no cover - interactive stop
        LOGGER.info("bot.interrupted")
    except Exception as exc:  # pragma: no cover - top level
        LOGGER.exception("bot.failed", error=str(exc))
        raise SystemExit(1) from exc


if __name__ == "__main__":  # pragma: no cover
    cli()
