"""Exceptions raised while building, running or storing task graphs."""

from __future__ import annotations

__all__ = [
    "GraphError",
    "TaskExecutionFailed",
    "GraphNotFound",
    "InvalidEdge",
    "TaskNotFound",
    "ContextError",
    "StorageError",
]


class GraphError(Exception):
    """Base class for every error raised by the graph engine."""

    prefix: str = ""

    def __init__(self, detail: object = "") -> None:
        self.detail = str(detail)
        message = f"{self.prefix}: {self.detail}" if self.prefix else self.detail
        super().__init__(message)


class TaskExecutionFailed(GraphError):
    """A task could not complete its work."""

    prefix = "Task execution failed"


class GraphNotFound(GraphError):
    """No graph is stored under the requested id."""

    prefix = "Graph not found"


class InvalidEdge(GraphError):
    """An edge refers to something that cannot be connected."""

    prefix = "Invalid edge"


class TaskNotFound(GraphError):
    """No task with the requested id exists in the graph."""

    prefix = "Task not found"


class ContextError(GraphError):
    """A value a task needs is missing from the context."""

    prefix = "Context error"


class StorageError(GraphError):
    """A storage backend failed to save, load or delete data."""

    prefix = "Storage error"