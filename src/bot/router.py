"""Bot router composition.

Commands are registered before the catch-all text handler; aiogram dispatches to the first match.
"""

from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command

from src.bot.handlers import handle_help, handle_message

HELP_COMMANDS: tuple[str, ...] = ("start", "help")

router = Router(name="translator")
router.message.register(handle_help, Command(*HELP_COMMANDS))
router.message.register(handle_message)
