"""Telegram transport helpers shared by handlers."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress
from typing import Optional

from telegram import Message, Update
from telegram.constants import ChatAction


async def _send(
    update: Update,
    text: str,
    *,
    parse_mode: Optional[str] = None,
) -> Optional[Message]:
    message = update.effective_message
    if message is None:
        return None
    return await message.reply_text(
        text=text,
        parse_mode=parse_mode,
        disable_web_page_preview=True,
    )


@asynccontextmanager
async def _typing(
    update: Update,
    context,
    *,
    interval_seconds: float = 4.0,
):
    chat = update.effective_chat
    if not chat:
        yield
        return

    # Telegram drops the typing indicator after ~5 seconds, keep refreshing it.
    try:
        await context.bot.send_chat_action(chat_id=chat.id, action=ChatAction.TYPING)
    except Exception:
        pass

    stop_event = asyncio.Event()

    async def _loop() -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=max(interval_seconds, 1.0))
                break
            except asyncio.TimeoutError:
                pass
            try:
                await context.bot.send_chat_action(chat_id=chat.id, action=ChatAction.TYPING)
            except Exception:
                pass

    task = asyncio.create_task(_loop())
    try:
        yield
    finally:
        stop_event.set()
        with suppress(Exception):
            await asyncio.wait_for(task, timeout=1.5)


__all__ = [
    "_send",
    "_typing",
]
