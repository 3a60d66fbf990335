# graphflow

graphflow runs workflows built as graphs of tasks. Each task reads from and writes to a shared
`Context`, and returns a `TaskResult` that says what happens next. A workflow can carry on
straight away, stop and wait for more user input, jump to a named task, or finish. Because a
workflow's position is stored in a `Session`, it can be paused between requests and resumed
later. This makes it a good fit for chat-style, multi-turn processes.

## Installation

```
pip install graphflow
```

The core library uses only the standard library.

## Core concepts

- **Context** (`graphflow.context`): a key/value store that the tasks of one session share. It
  also holds a `ChatHistory` of `SerializableMessage` entries with user, assistant and system
  roles. The history can be capped with `Context.with_max_chat_messages`. A context converts to
  and from JSON with `to_json` / `from_json`.
- **Task** (`graphflow.task`): subclass `Task`, give it an `id()`, and implement an async
  `run(context)` that returns a `TaskResult`. The next action is described by `NextAction`.
  `NextAction.go_to(target)` jumps to a specific task. `TaskResult.move_to_next()` advances one
  step and hands control back. `TaskResult.move_to_next_direct()` runs the next task at once.
- **Graph** (`graphflow.graph`): built with `GraphBuilder`, which provides `add_task`,
  `add_edge`, `add_conditional_edge(source, condition, yes, no)`, `set_start_task` and `build`.
  - `Graph.execute_session(session)` runs the session's current task, moves the session along
    the edges, and returns an `ExecutionResult` with an `ExecutionStatus`.
  - `Graph.execute(task_id, context)` runs a chain of tasks directly.
- **Storage** (`graphflow.storage`): `Session`, and the `GraphStorage` / `SessionStorage`
  interfaces with the in-memory implementations `InMemoryGraphStorage` and
  `InMemorySessionStorage`.

Failures raise subclasses of `graphflow.errors.GraphError`: `TaskExecutionFailed`,
`GraphNotFound`, `InvalidEdge`, `TaskNotFound`, `ContextError` and `StorageError`.

## A small workflow

```python
import asyncio

from graphflow.context import Context
from graphflow.graph import GraphBuilder
from graphflow.task import Task, TaskResult


class Greet(Task):
    def id(self):
        return "greet"

    async def run(self, context):
        name = context.get_sync("name", "world")
        context.set_sync("greeting", f"Hello, {name}")
        return TaskResult.move_to_next()


class Shout(Task):
    def id(self):
        return "shout"

    async def run(self, context):
        context.set_sync("greeting", context.get_sync("greeting", "") + " !!!")
        return TaskResult.move_to_next()


graph = (
    GraphBuilder("greeting")
    .add_task(Greet())
    .add_task(Shout())
    .add_edge("greet", "shout")
    .build()
)

context = Context()
context.set_sync("name", "Batman")
asyncio.run(graph.execute("greet", context))
print(context.get_sync("greeting"))
```

Conditional routing takes a predicate over the context. The `yes` branch is taken when the
predicate returns true, and the `no` branch otherwise:

```python
builder.add_conditional_edge(
    "classify",
    lambda ctx: ctx.get_sync("insurance_type") == "car",
    "car_details",
    "apartment_details",
)
```

## Insurance-claim tasks

`graphflow.claims` contains ready-made tasks for a claims workflow:

- `ClaimDetails` and `ClaimDecision` are the data records. `SessionKeys` names the context keys
  the tasks use.
- `SmartClaimValidatorTask` approves claims under 1000 automatically. Larger claims wait until
  the user replies with "approved".
- `FinalSummaryTask` writes the approval or rejection summary and ends the workflow.

For chat integrations, `graphflow.chat_bridge` turns stored messages into plain chat messages
with `to_chat_message`, `to_chat_messages`, `get_chat_messages` and `get_last_chat_messages`.
System messages are sent with the user role and a `[SYSTEM]` prefix.

## Commands

Run the two-step greeting workflow on in-memory session storage:

```
graphflow-greeting
```

Chat with a workflow service that accepts JSON at an `/execute` endpoint. The default endpoint
is `http://localhost:3000/execute`:

```
graphflow-client --content "Hi, I want to file a claim."
```

At the `You:` prompt:

- type `session` to show the current session id;
- type `exit` to quit.