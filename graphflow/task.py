"""Task interface, task results and the actions that follow a task."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from .context import Context

__all__ = ["ActionKind", "NextAction", "TaskResult", "Task"]


class ActionKind(Enum):
    """What the engine does once a task has finished."""

    CONTINUE = "Continue"
    CONTINUE_AND_EXECUTE = "ContinueAndExecute"
    GO_TO = "GoTo"
    GO_BACK = "GoBack"
    END = "End"
    WAIT_FOR_INPUT = "WaitForInput"


@dataclass(frozen=True)
class NextAction:
    """An action kind, with a target task id for ``GO_TO``."""

    kind: ActionKind
    target: str | None = None

    CONTINUE: ClassVar[NextAction]
    CONTINUE_AND_EXECUTE: ClassVar[NextAction]
    GO_BACK: ClassVar[NextAction]
    END: ClassVar[NextAction]
    WAIT_FOR_INPUT: ClassVar[NextAction]

    def __post_init__(self) -> None:
        if (self.kind is ActionKind.GO_TO) != (self.target is not None):
            raise ValueError("a target is required for GO_TO and only for GO_TO")

    @classmethod
    def go_to(cls, target: str) -> NextAction:
        return cls(ActionKind.GO_TO, target)


NextAction.CONTINUE = NextAction(ActionKind.CONTINUE)
NextAction.CONTINUE_AND_EXECUTE = NextAction(ActionKind.CONTINUE_AND_EXECUTE)
NextAction.GO_BACK = NextAction(ActionKind.GO_BACK)
NextAction.END = NextAction(ActionKind.END)
NextAction.WAIT_FOR_INPUT = NextAction(ActionKind.WAIT_FOR_INPUT)


@dataclass
class TaskResult:
    """Outcome of running a task; ``task_id`` is filled in by the graph."""

    response: str | None
    next_action: NextAction
    task_id: str = ""
    status_message: str | None = None

    @classmethod
    def with_status(
        cls,
        response: str | None,
        next_action: NextAction,
        status_message: str | None,
    ) -> TaskResult:
        return cls(response, next_action, status_message=status_message)

    @classmethod
    def move_to_next(cls) -> TaskResult:
        return cls(None, NextAction.CONTINUE)

    @classmethod
    def move_to_next_direct(cls) -> TaskResult:
        return cls(None, NextAction.CONTINUE_AND_EXECUTE)


class Task(ABC):
    """A unit of work in a graph."""

    def id(self) -> str:
        """Unique identifier; defaults to the qualified class name."""
        cls = type(self)
        return f"{cls.__module__}.{cls.__qualname__}"

    @abstractmethod
    async def run(self, context: Context) -> TaskResult:
        """Do the task's work against ``context``."""