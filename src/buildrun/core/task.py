"""Task, TaskResult dataclass, and TaskState enum."""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from buildrun.errors import TaskExecutionError, TaskStateError

Action = Callable[["Task"], Awaitable[None] | None]


class TaskState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def terminal(self) -> bool:
        return self in (TaskState.SUCCEEDED, TaskState.FAILED, TaskState.SKIPPED)


_TRANSITIONS: dict[TaskState, frozenset[TaskState]] = {
    TaskState.PENDING: frozenset({TaskState.RUNNING, TaskState.SKIPPED}),
    TaskState.RUNNING: frozenset({TaskState.SUCCEEDED, TaskState.FAILED}),
}


@dataclass
class TaskResult:
    state: TaskState
    error: TaskExecutionError | None = None
    reason: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


async def invoke(callback: Callable[..., Any], *args: Any) -> None:
    """Call a sync or async callback without blocking the event loop.

    Coroutine functions are awaited; plain callables run in a worker thread.
    """
    if inspect.iscoroutinefunction(callback):
        await callback(*args)
        return
    result = await asyncio.to_thread(callback, *args)
    if inspect.isawaitable(result):
        await result


class Task:
    """A named unit of build work.

    Actions run in order and receive the task itself. Dependencies are task
    names; ``required_by`` declares the reverse edge (the named tasks depend
    on this one).
    """

    def __init__(
        self,
        name: str,
        *,
        description: str | None = None,
        group: str | None = None,
        project: Any = None,
    ) -> None:
        self.name = name
        self.project = project
        self.description = description
        self.group = group
        self.actions: list[Action] = []
        self.dependencies: dict[str, None] = {}
        self.successors: dict[str, None] = {}
        self._state = TaskState.PENDING
        self.result: TaskResult | None = None

    @property
    def state(self) -> TaskState:
        return self._state

    def depends_on(self, *names: str) -> "Task":
        for name in names:
            self.dependencies[name] = None
        return self

    def required_by(self, *names: str) -> "Task":
        for name in names:
            self.successors[name] = None
        return self

    def do_first(self, action: Action) -> "Task":
        self.actions.insert(0, action)
        return self

    def do_last(self, action: Action) -> "Task":
        self.actions.append(action)
        return self

    def transition(self, new_state: TaskState) -> None:
        allowed = _TRANSITIONS.get(self._state, frozenset())
        if new_state not in allowed:
            raise TaskStateError(
                f"Task {self.name!r} cannot move from {self._state.value} to {new_state.value}"
            )
        self._state = new_state

    def skip(self, reason: str, **metadata: Any) -> TaskResult:
        self.transition(TaskState.SKIPPED)
        self.result = TaskResult(state=TaskState.SKIPPED, reason=reason, metadata=metadata)
        return self.result

    async def execute(self) -> TaskResult:
        """Run every action with timing metadata.

        The first action that raises fails the task; later actions do not run.
        """
        self.transition(TaskState.RUNNING)
        start = time.monotonic()
        error: TaskExecutionError | None = None
        try:
            for action in self.actions:
                await invoke(action, self)
        except Exception as e:
            error = TaskExecutionError(self.name, e)
            error.__cause__ = e
        elapsed_ms = round((time.monotonic() - start) * 1000, 1)

        state = TaskState.FAILED if error else TaskState.SUCCEEDED
        self.transition(state)
        self.result = TaskResult(state=state, error=error, metadata={"duration_ms": elapsed_ms})
        return self.result

    def __repr__(self) -> str:
        return f"Task({self.name!r}, state={self._state.value})"
