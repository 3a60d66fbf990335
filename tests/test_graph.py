import pytest

from graphflow.context import Context
from graphflow.errors import TaskNotFound
from graphflow.graph import (
    Edge,
    ExecutionResult,
    ExecutionStatus,
    Graph,
    GraphBuilder,
)
from graphflow.storage import Session
from graphflow.task import NextAction, Task, TaskResult


class ProcessingTask(Task):
    def __init__(self, task_id):
        self._id = task_id

    def id(self):
        return self._id

    async def run(self, context):
        value = await context.get("input", "")
        await context.set("output", f"Processed: {value}")
        return TaskResult("Task completed", NextAction.END)


class ScriptedTask(Task):
    def __init__(self, task_id, response=None, action=NextAction.CONTINUE, status=None):
        self._id = task_id
        self.response = response
        self.action = action
        self.status = status
        self.calls = 0

    def id(self):
        return self._id

    async def run(self, context):
        self.calls += 1
        visited = await context.get("visited", [])
        visited.append(self._id)
        await context.set("visited", visited)
        return TaskResult.with_status(self.response, self.action, self.status)


def make_session(task_id):
    return Session.new_from_task("s1", task_id)


@pytest.mark.asyncio
async def test_simple_graph_execution():
    graph = GraphBuilder("test_graph").add_task(ProcessingTask("test_task")).build()
    context = Context()
    await context.set("input", "Hello, World!")

    result = await graph.execute("test_task", context)

    assert result.response == "Task completed"
    assert result.next_action == NextAction.END
    assert result.task_id == "test_task"
    assert await context.get("output") == "Processed: Hello, World!"


def test_first_task_is_start_task():
    graph = Graph("g").add_task(ScriptedTask("a")).add_task(ScriptedTask("b"))
    assert graph.start_task_id() == "a"


def test_empty_graph_has_no_start_task():
    assert Graph("g").start_task_id() is None


def test_set_start_task_ignores_unknown_ids():
    graph = Graph("g").add_task(ScriptedTask("a")).add_task(ScriptedTask("b"))
    graph.set_start_task("missing")
    assert graph.start_task_id() == "a"
    graph.set_start_task("b")
    assert graph.start_task_id() == "b"


def test_builder_set_start_task():
    graph = (
        GraphBuilder("g")
        .add_task(ScriptedTask("a"))
        .add_task(ScriptedTask("b"))
        .set_start_task("b")
        .build()
    )
    assert graph.id == "g"
    assert graph.start_task_id() == "b"


def test_get_task():
    task = ScriptedTask("a")
    graph = Graph("g").add_task(task)
    assert graph.get_task("a") is task
    assert graph.get_task("zzz") is None


def test_find_next_task_plain_edge():
    graph = Graph("g").add_edge("a", "b")
    assert graph.find_next_task("a", Context()) == "b"
    assert graph.find_next_task("b", Context()) is None


def test_find_next_task_first_plain_edge_wins():
    graph = Graph("g").add_edge("a", "b").add_edge("a", "c")
    assert graph.find_next_task("a", Context()) == "b"


def test_conditional_edge_branches():
    graph = Graph("g").add_conditional_edge(
        "classify", lambda ctx: ctx.get_sync("kind") == "car", "car", "apartment"
    )
    context = Context()
    assert graph.find_next_task("classify", context) == "apartment"
    context.set_sync("kind", "car")
    assert graph.find_next_task("classify", context) == "car"


def test_true_condition_beats_earlier_plain_edge():
    graph = (
        Graph("g")
        .add_edge("a", "plain")
        .add_conditional_edge("a", lambda ctx: True, "yes", "no")
    )
    assert graph.find_next_task("a", Context()) == "yes"


def test_edge_defaults_to_unconditional():
    edge = Edge("a", "b")
    assert edge.condition is None
    assert (edge.source, edge.target) == ("a", "b")


@pytest.mark.asyncio
async def test_session_continue_moves_without_running_next():
    second = ScriptedTask("b", action=NextAction.END)
    graph = (
        GraphBuilder("g")
        .add_task(ScriptedTask("a", response="hi", status="step one"))
        .add_task(second)
        .add_edge("a", "b")
        .build()
    )
    session = make_session("a")

    result = await graph.execute_session(session)

    assert result == ExecutionResult("hi", ExecutionStatus.WAITING_FOR_INPUT)
    assert session.current_task_id == "b"
    assert session.status_message == "step one"
    assert second.calls == 0


@pytest.mark.asyncio
async def test_session_continue_without_edge_stays():
    graph = Graph("g").add_task(ScriptedTask("a", response="r"))
    session = make_session("a")
    result = await graph.execute_session(session)
    assert result.status is ExecutionStatus.WAITING_FOR_INPUT
    assert session.current_task_id == "a"


@pytest.mark.asyncio
async def test_session_continue_and_execute_runs_chain():
    graph = (
        GraphBuilder("g")
        .add_task(ScriptedTask("a", response="first", action=NextAction.CONTINUE_AND_EXECUTE))
        .add_task(ScriptedTask("b", response="done", action=NextAction.END, status="end"))
        .add_edge("a", "b")
        .build()
    )
    session = make_session("a")

    result = await graph.execute_session(session)

    assert result.response == "done"
    assert result.status is ExecutionStatus.COMPLETED
    assert session.current_task_id == "b"
    assert session.status_message == "end"
    assert await session.context.get("visited") == ["a", "b"]


@pytest.mark.asyncio
async def test_session_continue_and_execute_without_edge_waits():
    graph = Graph("g").add_task(
        ScriptedTask("a", response="x", action=NextAction.CONTINUE_AND_EXECUTE)
    )
    session = make_session("a")
    result = await graph.execute_session(session)
    assert result == ExecutionResult("x", ExecutionStatus.WAITING_FOR_INPUT)
    assert session.current_task_id == "a"


@pytest.mark.asyncio
async def test_session_wait_for_input_stays():
    graph = (
        GraphBuilder("g")
        .add_task(ScriptedTask("a", response="?", action=NextAction.WAIT_FOR_INPUT))
        .add_task(ScriptedTask("b"))
        .add_edge("a", "b")
        .build()
    )
    session = make_session("a")
    result = await graph.execute_session(session)
    assert result.status is ExecutionStatus.WAITING_FOR_INPUT
    assert session.current_task_id == "a"


@pytest.mark.asyncio
async def test_session_go_back_stays():
    graph = Graph("g").add_task(ScriptedTask("a", action=NextAction.GO_BACK))
    session = make_session("a")
    result = await graph.execute_session(session)
    assert result.status is ExecutionStatus.WAITING_FOR_INPUT
    assert session.current_task_id == "a"


@pytest.mark.asyncio
async def test_session_go_to_known_task():
    target = ScriptedTask("c")
    graph = (
        Graph("g")
        .add_task(ScriptedTask("a", action=NextAction.go_to("c")))
        .add_task(target)
    )
    session = make_session("a")
    result = await graph.execute_session(session)
    assert result.status is ExecutionStatus.WAITING_FOR_INPUT
    assert session.current_task_id == "c"
    assert target.calls == 0


@pytest.mark.asyncio
async def test_session_go_to_unknown_task_raises():
    graph = Graph("g").add_task(ScriptedTask("a", action=NextAction.go_to("nowhere")))
    with pytest.raises(TaskNotFound) as info:
        await graph.execute_session(make_session("a"))
    assert str(info.value) == "Task not found: nowhere"


@pytest.mark.asyncio
async def test_session_unknown_current_task_raises():
    with pytest.raises(TaskNotFound):
        await Graph("g").execute_session(make_session("ghost"))


@pytest.mark.asyncio
async def test_session_conditional_routing_uses_context():
    graph = (
        GraphBuilder("g")
        .add_task(ScriptedTask("classify"))
        .add_task(ScriptedTask("car"))
        .add_task(ScriptedTask("apartment"))
        .add_conditional_edge(
            "classify", lambda ctx: ctx.get_sync("kind") == "car", "car", "apartment"
        )
        .build()
    )
    session = make_session("classify")
    await session.context.set("kind", "car")
    await graph.execute_session(session)
    assert session.current_task_id == "car"


@pytest.mark.asyncio
async def test_execute_follows_edges_when_no_response():
    graph = (
        GraphBuilder("g")
        .add_task(ScriptedTask("a"))
        .add_task(ScriptedTask("b"))
        .add_task(ScriptedTask("c", response="end", action=NextAction.END))
        .add_edge("a", "b")
        .add_edge("b", "c")
        .build()
    )
    context = Context()
    result = await graph.execute("a", context)
    assert result.task_id == "c"
    assert result.response == "end"
    assert await context.get("visited") == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_execute_stops_at_response():
    graph = (
        GraphBuilder("g")
        .add_task(ScriptedTask("a", response="stop here"))
        .add_task(ScriptedTask("b"))
        .add_edge("a", "b")
        .build()
    )
    context = Context()
    result = await graph.execute("a", context)
    assert result.task_id == "a"
    assert await context.get("visited") == ["a"]


@pytest.mark.asyncio
async def test_execute_follows_go_to():
    graph = (
        Graph("g")
        .add_task(ScriptedTask("a", action=NextAction.go_to("z")))
        .add_task(ScriptedTask("z", response="z", action=NextAction.END))
    )
    result = await graph.execute("a", Context())
    assert result.task_id == "z"


@pytest.mark.asyncio
async def test_execute_go_to_unknown_raises():
    graph = Graph("g").add_task(ScriptedTask("a", action=NextAction.go_to("q")))
    with pytest.raises(TaskNotFound):
        await graph.execute("a", Context())


@pytest.mark.asyncio
async def test_execute_unknown_task_raises():
    with pytest.raises(TaskNotFound) as info:
        await Graph("g").execute("missing", Context())
    assert info.value.detail == "missing"