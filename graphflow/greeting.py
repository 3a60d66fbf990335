"""A two-step greeting workflow driven through session storage."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TextIO

from .context import Context
from .errors import ContextError, StorageError
from .graph import ExecutionStatus, Graph, GraphBuilder
from .storage import InMemoryGraphStorage, InMemorySessionStorage, Session
from .task import NextAction, Task, TaskResult

__all__ = [
    "HelloTask",
    "ExcitementTask",
    "build_greeting_graph",
    "run_workflow",
    "main",
]

GRAPH_ID = "greeting_workflow"
SESSION_ID = "session_001"


class HelloTask(Task):
    """Greets the user whose name is stored under ``name``."""

    def id(self) -> str:
        return super().id()

    async def run(self, context: Context) -> TaskResult:
        name = context.get_sync("name")
        if not isinstance(name, str):
            raise ContextError("name not found")
        greeting = f"Hello, {name}"
        await context.set("greeting", greeting)
        # Advance one step and hand control back to the caller.
        return TaskResult(greeting, NextAction.CONTINUE)


class ExcitementTask(Task):
    """Adds excitement to the stored greeting and ends the workflow."""

    def id(self) -> str:
        return super().id()

    async def run(self, context: Context) -> TaskResult:
        greeting = context.get_sync("greeting")
        if not isinstance(greeting, str):
            raise ContextError("greeting not found")
        return TaskResult(f"{greeting} !!!", NextAction.END)


def build_greeting_graph() -> Graph:
    """The greeting graph: ``HelloTask`` followed by ``ExcitementTask``."""
    hello = HelloTask()
    excitement = ExcitementTask()
    return (
        GraphBuilder(GRAPH_ID)
        .add_task(hello)
        .add_task(excitement)
        .add_edge(hello.id(), excitement.id())
        .build()
    )


async def run_workflow(name: str = "Batman", out: TextIO | None = None) -> Session:
    """Run the greeting workflow to completion, reporting each step to ``out``.

    Returns the final session as loaded from storage.
    """
    stream = out if out is not None else sys.stdout

    def say(text: str = "") -> None:
        print(text, file=stream)

    session_storage = InMemorySessionStorage()
    graph_storage = InMemoryGraphStorage()

    graph = build_greeting_graph()
    await graph_storage.save(GRAPH_ID, graph)

    async def load() -> Session:
        loaded = await session_storage.get(SESSION_ID)
        if loaded is None:
            raise StorageError("Session not found")
        return loaded

    session = Session.new_from_task(SESSION_ID, HelloTask().id())
    await session.context.set("name", name)
    await session_storage.save(session)

    say("Starting simple workflow with session management\n")
    say(f"Session ID: {session.id}")
    say(f"Initial task: {session.current_task_id}\n")

    while True:
        current = await load()
        say("-------")
        say(f"Executing task: {current.current_task_id}")

        result = await graph.execute_session(current)
        await session_storage.save(current)

        if result.response is not None:
            say(f"Task response: {result.response}")
        if current.status_message is not None:
            say(f"Status: {current.status_message}")
        say(f"Execution status: {result.status.value}")
        say(f"Next task: {current.current_task_id}\n")

        if result.status is ExecutionStatus.COMPLETED:
            say("Workflow completed successfully!")
            break
        if result.status is ExecutionStatus.ERROR:
            say(f"Error occurred: {result.error}")
            break
        say("Workflow is waiting for input. Please provide the next input.")

    final = await load()
    say("\nFinal session state:")
    say(f"Session ID: {final.id}")
    say(f"Current task: {final.current_task_id}")
    if final.status_message is not None:
        say(f"Final status: {final.status_message}")

    greeting = await final.context.get("greeting")
    if isinstance(greeting, str):
        say(f"Stored greeting: {greeting}")

    say("\nWorkflow execution finished")
    return final


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the greeting workflow.")
    parser.add_argument("--name", default="Batman", help="name to greet")
    args = parser.parse_args(argv)
    asyncio.run(run_workflow(args.name))
    return 0


if __name__ == "__main__":
    sys.exit(main())