"""Telegram messaging helpers and operator command handlers."""

from __future__ import annotations

from typing import List, Optional, Sequence

import structlog
from aiogram import Bot, F, Router
from aiogram.exceptions import (
    TelegramAPIError,
    TelegramNetworkError,
    TelegramRetryAfter,
    TelegramServerError,
)
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import BotCommand, Message
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .config import Settings
from .sequencer import Notifier, VehicleSequencer

LOGGER = structlog.get_logger(__name__)

START_TEXT = (
    "Use /check to check for vehicle road traffic offences or wait for "
    "vehicle road traffic offences notifications for listed vehicles."
)
HELP_TEXT = "\n".join(
    [
        "Commands for this bot are:",
        "",
        "/start  start the bot",
        "/help  show this message",
        "/check  check all listed vehicles",
        "/check <REG>  check a specific vehicle e.g. /check T945CEP",
    ]
)
UNKNOWN_COMMAND = "I don't know that command"

BOT_COMMANDS = [
    BotCommand(command="start", description="Start the bot"),
    BotCommand(command="help", description="List commands"),
    BotCommand(command="check", description="Check all vehicles or one registration"),
]

RETRYABLE_ERRORS = (TelegramNetworkError, TelegramRetryAfter, TelegramServerError)


def create_notifier(
    bot: Bot,
    chat_id: int,
    *,
    attempts: int = 3,
    backoff_seconds: float = 2.0,
) -> Notifier:
    """Build the sink that delivers a text to the operator chat.

    Transient Telegram failures are retried with exponential backoff. The sink
    never raises: it returns ``False`` once every attempt has failed.
    """

    async def notify(text: str) -> bool:
        LOGGER.info("telegram.send.start", chat_id=chat_id, length=len(text))
        try:
            async for attempt in AsyncRetrying(
                wait=wait_exponential(multiplier=backoff_seconds, max=30),
                stop=stop_after_attempt(attempts),
                retry=retry_if_exception_type(RETRYABLE_ERRORS),
                reraise=True,
            ):
                with attempt:
                    await bot.send_message(chat_id=chat_id, text=text)
        except TelegramAPIError as exc:
            LOGGER.error("telegram.send.failed", chat_id=chat_id, error=str(exc))
            return False
        LOGGER.info("telegram.send.success", chat_id=chat_id)
        return True

    return notify


def resolve_registrations(args: Optional[str], configured: Sequence[str]) -> List[str]:
    """Vehicles targeted by ``/check``: the argument if given, else the configured list."""
    requested = (args or "").strip()
    if requested:
        return [requested.upper()]
    return list(configured)


async def cmd_start(message: Message) -> None:
    """Reply with the introduction text."""
    await message.answer(START_TEXT)


async def cmd_help(message: Message) -> None:
    """Reply with the list of commands."""
    await message.answer(HELP_TEXT)


async def cmd_check(
    message: Message,
    command: CommandObject,
    sequencer: VehicleSequencer,
    settings: Settings,
) -> None:
    """Acknowledge the request and queue the lookups in the background."""
    registrations = resolve_registrations(command.args, settings.vehicle_list)
    LOGGER.info("telegram.check.requested", registrations=registrations)
    try:
        await message.answer(f"🔎 Checking {len(registrations)} vehicle(s)...")
    except TelegramAPIError as exc:
        LOGGER.error("telegram.reply.failed", error=str(exc))
    sequencer.submit(
        registrations,
        cooldown=settings.check_cooldown_seconds,
        label="on-demand",
    )


async def cmd_unknown(message: Message) -> None:
    """Reply to any command we do not handle."""
    await message.answer(UNKNOWN_COMMAND)


def create_router(operator_id: int) -> Router:
    """Router that only reacts to commands sent from the operator chat."""
    router = Router(name="operator")
    router.message.filter(F.chat.id == operator_id)

    router.message.register(cmd_start, CommandStart())
    router.message.register(cmd_help, Command("help"))
    router.message.register(cmd_check, Command("check"))
    # Must stay last so that known commands match first.
    router.message.register(cmd_unknown, F.text.startswith("/"))
    return router
