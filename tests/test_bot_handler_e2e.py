"""Tests for the aiogram message handler reply contract.

Every incoming message gets exactly one reply: a translated query with its explanation, a usage hint
for commands and empty messages, or a fixed apology when translation fails.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from src.bot.handlers import ERROR_REPLY, USAGE_REPLY, format_reply, handle_help, handle_message
from src.pipeline.runner import run_pipeline


class _FakeMessage:
    def __init__(self, text: str | None, caption: str | None = None) -> None:
        self.text = text
        self.caption = caption
        self.answers: list[str] = []

    async def answer(self, text: str) -> None:
        """Record the outgoing bot reply (aiogram's `Message.answer` substitute)."""
        self.answers.append(text)


def _make_app(translate: Any = None) -> Any:
    return SimpleNamespace(translate=translate or (lambda text: run_pipeline(text)))


@pytest.mark.asyncio
async def test_handler_replies_usage_for_empty_text() -> None:
    message = _FakeMessage(text=None)

    await handle_message(message, _make_app())  # type: ignore[arg-type]

    assert message.answers == [USAGE_REPLY]


@pytest.mark.asyncio
async def test_handler_replies_usage_for_command() -> None:
    message = _FakeMessage(text="/start")

    await handle_message(message, _make_app())  # type: ignore[arg-type]

    assert message.answers == [USAGE_REPLY]


@pytest.mark.asyncio
async def test_handler_replies_with_translated_query() -> None:
    message = _FakeMessage(text="mono red creatures")

    await handle_message(message, _make_app())  # type: ignore[arg-type]

    assert len(message.answers) == 1
    assert message.answers[0].splitlines()[0] == "ci=r t:creature"


@pytest.mark.asyncio
async def test_handler_uses_caption() -> None:
    message = _FakeMessage(text=None, caption="creatures")

    await handle_message(message, _make_app())  # type: ignore[arg-type]

    assert message.answers[0].startswith("t:creature")


@pytest.mark.asyncio
async def test_handler_apologizes_on_internal_error() -> None:
    def _boom(_text: str) -> Any:
        raise RuntimeError("pipeline exploded")

    message = _FakeMessage(text="mono red creatures")

    await handle_message(message, _make_app(_boom))  # type: ignore[arg-type]

    assert message.answers == [ERROR_REPLY]


def test_reply_lists_suggestions() -> None:
    reply = format_reply(run_pipeline("counterspell"))

    assert "Did you mean:" in reply
    assert '- Counterspell (the card): !"Counterspell"' in reply


@pytest.mark.asyncio
async def test_help_command_replies_usage() -> None:
    message = _FakeMessage(text="/help")

    await handle_help(message)  # type: ignore[arg-type]

    assert message.answers == [USAGE_REPLY]
