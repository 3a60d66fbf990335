"""Sessions and the stores that keep graphs and sessions between requests."""

from __future__ import annotations

import dataclasses
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .context import Context

if TYPE_CHECKING:
    from .graph import Graph

__all__ = [
    "Session",
    "GraphStorage",
    "SessionStorage",
    "InMemoryGraphStorage",
    "InMemorySessionStorage",
]


@dataclass
class Session:
    """Where one conversation stands in a graph, with its context."""

    id: str
    graph_id: str
    current_task_id: str
    status_message: str | None = None
    context: Context = field(default_factory=Context)

    @classmethod
    def new_from_task(cls, session_id: str, task_id: str) -> Session:
        """A fresh session for the ``default`` graph, positioned at ``task_id``."""
        return cls(id=session_id, graph_id="default", current_task_id=task_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "graph_id": self.graph_id,
            "current_task_id": self.current_task_id,
            "status_message": self.status_message,
            "context": self.context.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        return cls(
            id=data["id"],
            graph_id=data["graph_id"],
            current_task_id=data["current_task_id"],
            status_message=data.get("status_message"),
            context=Context.from_dict(data.get("context", {})),
        )


class GraphStorage(ABC):
    """Store of graphs by id."""

    @abstractmethod
    async def save(self, graph_id: str, graph: Graph) -> None: ...

    @abstractmethod
    async def get(self, graph_id: str) -> Graph | None: ...

    @abstractmethod
    async def delete(self, graph_id: str) -> None: ...


class SessionStorage(ABC):
    """Store of sessions by id."""

    @abstractmethod
    async def save(self, session: Session) -> None: ...

    @abstractmethod
    async def get(self, session_id: str) -> Session | None: ...

    @abstractmethod
    async def delete(self, session_id: str) -> None: ...


class InMemoryGraphStorage(GraphStorage):
    """Graphs kept in a dictionary for the life of the process."""

    def __init__(self) -> None:
        self._graphs: dict[str, Graph] = {}
        self._lock = threading.Lock()

    async def save(self, graph_id: str, graph: Graph) -> None:
        with self._lock:
            self._graphs[graph_id] = graph

    async def get(self, graph_id: str) -> Graph | None:
        with self._lock:
            return self._graphs.get(graph_id)

    async def delete(self, graph_id: str) -> None:
        with self._lock:
            self._graphs.pop(graph_id, None)


class InMemorySessionStorage(SessionStorage):
    """Sessions kept in a dictionary for the life of the process.

    Sessions are copied on save and on get; the context object itself is
    shared between the copies.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    async def save(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.id] = dataclasses.replace(session)

    async def get(self, session_id: str) -> Session | None:
        with self._lock:
            stored = self._sessions.get(session_id)
        return dataclasses.replace(stored) if stored is not None else None

    async def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)