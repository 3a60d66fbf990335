"""Shared key/value context and chat history passed between tasks."""

from __future__ import annotations

import copy
import dataclasses
import json
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

__all__ = ["MessageRole", "SerializableMessage", "ChatHistory", "Context"]


class MessageRole(Enum):
    """Role of a message in a conversation."""

    USER = "User"
    ASSISTANT = "Assistant"
    SYSTEM = "System"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(text: str) -> datetime:
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


@dataclass(frozen=True)
class SerializableMessage:
    """A single chat message with its role and creation time."""

    role: MessageRole
    content: str
    timestamp: datetime = field(default_factory=_utc_now)

    @classmethod
    def user(cls, content: str) -> SerializableMessage:
        return cls(MessageRole.USER, content)

    @classmethod
    def assistant(cls, content: str) -> SerializableMessage:
        return cls(MessageRole.ASSISTANT, content)

    @classmethod
    def system(cls, content: str) -> SerializableMessage:
        return cls(MessageRole.SYSTEM, content)

    def to_dict(self) -> dict[str, Any]:
        return {
            "role": self.role.value,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SerializableMessage:
        return cls(
            role=MessageRole(data["role"]),
            content=data["content"],
            timestamp=_parse_timestamp(data["timestamp"]),
        )


class ChatHistory:
    """Ordered chat messages, optionally capped to the most recent ones."""

    def __init__(
        self,
        max_messages: int | None = None,
        messages: list[SerializableMessage] | None = None,
    ) -> None:
        self.max_messages = max_messages
        self._messages: list[SerializableMessage] = list(messages or [])
        self._trim()

    def _trim(self) -> None:
        if self.max_messages is not None and len(self._messages) > self.max_messages:
            del self._messages[: len(self._messages) - self.max_messages]

    def _add(self, message: SerializableMessage) -> None:
        self._messages.append(message)
        self._trim()

    def add_user_message(self, content: str) -> None:
        self._add(SerializableMessage.user(content))

    def add_assistant_message(self, content: str) -> None:
        self._add(SerializableMessage.assistant(content))

    def add_system_message(self, content: str) -> None:
        self._add(SerializableMessage.system(content))

    def clear(self) -> None:
        self._messages.clear()

    def is_empty(self) -> bool:
        return not self._messages

    def messages(self) -> list[SerializableMessage]:
        """All messages, oldest first."""
        return list(self._messages)

    def last_messages(self, n: int) -> list[SerializableMessage]:
        """The last ``n`` messages, oldest first."""
        if n <= 0:
            return []
        return self._messages[-n:]

    def copy(self) -> ChatHistory:
        return ChatHistory(self.max_messages, self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[SerializableMessage]:
        return iter(list(self._messages))

    def __repr__(self) -> str:
        return f"ChatHistory(max_messages={self.max_messages!r}, messages={self._messages!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            "messages": [message.to_dict() for message in self._messages],
            "max_messages": self.max_messages,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatHistory:
        return cls(
            max_messages=data.get("max_messages"),
            messages=[SerializableMessage.from_dict(m) for m in data.get("messages", [])],
        )


def _encode(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"value of type {type(obj).__name__} is not JSON serializable")


def _to_json_value(value: Any) -> Any:
    return json.loads(json.dumps(value, default=_encode))


class Context:
    """Thread-safe data shared between the tasks of one graph execution.

    Copies of a value are stored and returned, so callers never share
    mutable state with the context through a value they set or got.
    """

    def __init__(
        self,
        data: dict[str, Any] | None = None,
        chat_history: ChatHistory | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._data: dict[str, Any] = {
            key: _to_json_value(value) for key, value in (data or {}).items()
        }
        self._chat_history = chat_history if chat_history is not None else ChatHistory()

    @classmethod
    def with_max_chat_messages(cls, max_messages: int) -> Context:
        return cls(chat_history=ChatHistory(max_messages=max_messages))

    def set_sync(self, key: str, value: Any) -> None:
        """Store a JSON-compatible copy of ``value``; raises TypeError otherwise."""
        converted = _to_json_value(value)
        with self._lock:
            self._data[key] = converted

    def get_sync(self, key: str, default: Any = None) -> Any:
        with self._lock:
            if key not in self._data:
                return default
            return copy.deepcopy(self._data[key])

    async def set(self, key: str, value: Any) -> None:
        self.set_sync(key, value)

    async def get(self, key: str, default: Any = None) -> Any:
        return self.get_sync(key, default)

    async def remove(self, key: str) -> Any:
        """Remove ``key`` and return its value, or None if it was absent."""
        with self._lock:
            return self._data.pop(key, None)

    async def clear(self) -> None:
        """Remove all data; the chat history is left untouched."""
        with self._lock:
            self._data.clear()

    async def add_user_message(self, content: str) -> None:
        with self._lock:
            self._chat_history.add_user_message(content)

    async def add_assistant_message(self, content: str) -> None:
        with self._lock:
            self._chat_history.add_assistant_message(content)

    async def add_system_message(self, content: str) -> None:
        with self._lock:
            self._chat_history.add_system_message(content)

    async def get_chat_history(self) -> ChatHistory:
        with self._lock:
            return self._chat_history.copy()

    async def clear_chat_history(self) -> None:
        with self._lock:
            self._chat_history.clear()

    async def chat_history_len(self) -> int:
        with self._lock:
            return len(self._chat_history)

    async def is_chat_history_empty(self) -> bool:
        with self._lock:
            return self._chat_history.is_empty()

    async def get_last_messages(self, n: int) -> list[SerializableMessage]:
        with self._lock:
            return self._chat_history.last_messages(n)

    async def get_all_messages(self) -> list[SerializableMessage]:
        with self._lock:
            return self._chat_history.messages()

    def to_dict(self) -> dict[str, Any]:
        with self._lock:
            return {
                "data": copy.deepcopy(self._data),
                "chat_history": self._chat_history.to_dict(),
            }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Context:
        return cls(
            data=data.get("data", {}),
            chat_history=ChatHistory.from_dict(data.get("chat_history", {})),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> Context:
        return cls.from_dict(json.loads(text))

    def __repr__(self) -> str:
        with self._lock:
            return f"Context(data={self._data!r}, chat_history={self._chat_history!r})"