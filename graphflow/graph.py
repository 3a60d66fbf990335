"""Task graphs: tasks joined by plain and conditional edges, and their execution."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from .context import Context
from .errors import TaskNotFound
from .task import ActionKind, Task, TaskResult

if TYPE_CHECKING:
    from .storage import Session

__all__ = [
    "EdgeCondition",
    "Edge",
    "ExecutionStatus",
    "ExecutionResult",
    "Graph",
    "GraphBuilder",
]

EdgeCondition = Callable[[Context], bool]


@dataclass(frozen=True)
class Edge:
    """A link from one task to another, taken when its condition holds."""

    source: str
    target: str
    condition: EdgeCondition | None = None


class ExecutionStatus(Enum):
    """State of a session after one execution step."""

    WAITING_FOR_INPUT = "WaitingForInput"
    COMPLETED = "Completed"
    ERROR = "Error"


@dataclass
class ExecutionResult:
    """Response and status returned by ``Graph.execute_session``."""

    response: str | None
    status: ExecutionStatus
    error: str | None = None


class Graph:
    """A set of tasks and the edges between them."""

    def __init__(self, graph_id: str) -> None:
        self.id = graph_id
        self._tasks: dict[str, Task] = {}
        self._edges: list[Edge] = []
        self._start_task_id: str | None = None
        self._lock = threading.RLock()

    def add_task(self, task: Task) -> Graph:
        """Add ``task``; the first task added becomes the start task."""
        task_id = task.id()
        with self._lock:
            is_first = not self._tasks
            self._tasks[task_id] = task
            if is_first:
                self._start_task_id = task_id
        return self

    def set_start_task(self, task_id: str) -> Graph:
        """Make ``task_id`` the start task if the graph holds such a task."""
        with self._lock:
            if task_id in self._tasks:
                self._start_task_id = task_id
        return self

    def add_edge(self, source: str, target: str) -> Graph:
        with self._lock:
            self._edges.append(Edge(source, target))
        return self

    def add_conditional_edge(
        self,
        source: str,
        condition: EdgeCondition,
        yes: str,
        no: str,
    ) -> Graph:
        """Go to ``yes`` when ``condition(context)`` is true, otherwise to ``no``."""
        with self._lock:
            self._edges.append(Edge(source, yes, condition))
            self._edges.append(Edge(source, no))
        return self

    def _lookup(self, task_id: str) -> Task:
        with self._lock:
            task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task

    def _has_task(self, task_id: str) -> bool:
        with self._lock:
            return task_id in self._tasks

    async def _run_task(self, task_id: str, context: Context) -> TaskResult:
        task = self._lookup(task_id)
        result = await task.run(context)
        result.task_id = task_id
        return result

    async def execute_session(self, session: Session) -> ExecutionResult:
        """Run the session's current task and move the session along the graph.

        Tasks ending with ``CONTINUE_AND_EXECUTE`` run their successor at once;
        every other action stops after one task.
        """
        while True:
            result = await self._run_task(session.current_task_id, session.context)
            session.status_message = result.status_message
            action = result.next_action
            kind = action.kind

            if kind is ActionKind.CONTINUE_AND_EXECUTE:
                next_id = self.find_next_task(result.task_id, session.context)
                if next_id is not None:
                    session.current_task_id = next_id
                    continue
                session.current_task_id = result.task_id
                return ExecutionResult(result.response, ExecutionStatus.WAITING_FOR_INPUT)

            if kind is ActionKind.CONTINUE:
                next_id = self.find_next_task(result.task_id, session.context)
                session.current_task_id = next_id if next_id is not None else result.task_id
                return ExecutionResult(result.response, ExecutionStatus.WAITING_FOR_INPUT)

            if kind is ActionKind.GO_TO:
                target = action.target
                if target is None or not self._has_task(target):
                    raise TaskNotFound(target)
                session.current_task_id = target
                return ExecutionResult(result.response, ExecutionStatus.WAITING_FOR_INPUT)

            session.current_task_id = result.task_id
            status = (
                ExecutionStatus.COMPLETED
                if kind is ActionKind.END
                else ExecutionStatus.WAITING_FOR_INPUT
            )
            return ExecutionResult(result.response, status)

    async def execute(self, task_id: str, context: Context) -> TaskResult:
        """Run from ``task_id``, following edges until a task yields a stopping result."""
        while True:
            result = await self._run_task(task_id, context)
            action = result.next_action
            if action.kind is ActionKind.CONTINUE:
                if result.response is not None:
                    return result
                next_id = self.find_next_task(task_id, context)
                if next_id is None:
                    return result
                task_id = next_id
            elif action.kind is ActionKind.GO_TO:
                target = action.target
                if target is None or not self._has_task(target):
                    raise TaskNotFound(target)
                task_id = target
            else:
                return result

    def find_next_task(self, current_task_id: str, context: Context) -> str | None:
        """First conditional edge whose condition holds, else the first plain edge."""
        with self._lock:
            edges = [edge for edge in self._edges if edge.source == current_task_id]
        fallback: str | None = None
        for edge in edges:
            if edge.condition is not None:
                if edge.condition(context):
                    return edge.target
            elif fallback is None:
                fallback = edge.target
        return fallback

    def start_task_id(self) -> str | None:
        with self._lock:
            return self._start_task_id

    def get_task(self, task_id: str) -> Task | None:
        with self._lock:
            return self._tasks.get(task_id)

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"Graph(id={self.id!r}, tasks={list(self._tasks)!r}, "
                f"start_task_id={self._start_task_id!r})"
            )


class GraphBuilder:
    """Fluent builder for a ``Graph``."""

    def __init__(self, graph_id: str) -> None:
        self._graph = Graph(graph_id)

    def add_task(self, task: Task) -> GraphBuilder:
        self._graph.add_task(task)
        return self

    def add_edge(self, source: str, target: str) -> GraphBuilder:
        self._graph.add_edge(source, target)
        return self

    def add_conditional_edge(
        self,
        source: str,
        condition: EdgeCondition,
        yes: str,
        no: str,
    ) -> GraphBuilder:
        self._graph.add_conditional_edge(source, condition, yes, no)
        return self

    def set_start_task(self, task_id: str) -> GraphBuilder:
        self._graph.set_start_task(task_id)
        return self

    def build(self) -> Graph:
        return self._graph