"""aiogram message handlers.

Every incoming message gets exactly one reply: the translated query, a one-line explanation and,
when the request was ambiguous, alternative queries. Commands and empty messages get a usage hint;
internal errors get a fixed apology and are logged.
"""

from __future__ import annotations

import asyncio
import logging
from time import monotonic

from aiogram.types import Message

from src.app import App
from src.pipeline.schema import PipelineResult

logger = logging.getLogger(__name__)

USAGE_REPLY = (
    "Describe the cards you are looking for, e.g. \"budget board wipes under $5\" "
    "or \"mono red creatures with haste\", and I will reply with a search query."
)
ERROR_REPLY = "Sorry, something went wrong while translating your request. Please try again."


def _is_command_text(text: str) -> bool:
    return text.lstrip().startswith("/")


def format_reply(result: PipelineResult) -> str:
    """Render a pipeline result as a plain-text chat reply."""

    lines = [result.final_query or "(no query)", "", result.explanation.readable]
    if result.suggestions:
        lines.append("")
        lines.append("Did you mean:")
        lines.extend(f"- {s.label}: {s.query}" for s in result.suggestions)
    return "\n".join(lines)


async def handle_message(message: Message, app: App) -> None:
    """Handle any incoming Telegram message and reply with a translated query."""

    started = monotonic()
    raw_text = message.text or message.caption or ""
    if not raw_text.strip() or _is_command_text(raw_text):
        await message.answer(USAGE_REPLY)
        return

    # noinspection PyBroadException
    try:
        result = await asyncio.to_thread(app.translate, raw_text)
        reply = format_reply(result)

        latency_ms = int((monotonic() - started) * 1000)
        logger.info(
            "handled source=%s confidence=%.2f latency_ms=%d",
            result.source,
            result.explanation.confidence,
            latency_ms,
        )
    except Exception:
        # Handler boundary: details stay in the log.
        logger.exception("handler failed")
        reply = ERROR_REPLY

    await message.answer(reply)


async def handle_help(message: Message) -> None:
    """Reply to /start and /help with the usage hint."""

    await message.answer(USAGE_REPLY)
