"""Conversion of context chat history into role/content chat messages."""

from __future__ import annotations

from collections.abc import Iterable

from .context import Context, MessageRole, SerializableMessage

__all__ = [
    "to_chat_message",
    "to_chat_messages",
    "get_chat_messages",
    "get_last_chat_messages",
]

_SYSTEM_PREFIX = "[SYSTEM] "


def to_chat_message(message: SerializableMessage) -> dict[str, str]:
    """Convert a stored message to a ``{"role", "content"}`` chat message.

    Only user and assistant roles are produced; a system message becomes a
    user message whose content is prefixed with ``[SYSTEM]``.
    """
    if message.role is MessageRole.ASSISTANT:
        return {"role": "assistant", "content": message.content}
    if message.role is MessageRole.SYSTEM:
        return {"role": "user", "content": _SYSTEM_PREFIX + message.content}
    return {"role": "user", "content": message.content}


def to_chat_messages(messages: Iterable[SerializableMessage]) -> list[dict[str, str]]:
    """Convert stored messages in order."""
    return [to_chat_message(message) for message in messages]


async def get_chat_messages(context: Context) -> list[dict[str, str]]:
    """The whole chat history of ``context`` as chat messages."""
    return to_chat_messages(await context.get_all_messages())


async def get_last_chat_messages(context: Context, n: int) -> list[dict[str, str]]:
    """The last ``n`` messages of ``context`` as chat messages."""
    return to_chat_messages(await context.get_last_messages(n))