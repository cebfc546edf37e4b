"""TaskRegistry — the tasks declared in one project."""

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from buildrun.core.task import Action, Task
from buildrun.errors import DuplicateTaskError, UnknownTaskError

logger = logging.getLogger(__name__)


class TaskRegistry:
    def __init__(self, project: Any = None) -> None:
        self._project = project
        self._tasks: dict[str, Task] = {}

    def register(
        self,
        name: str,
        action: Action | None = None,
        depends_on: Iterable[str] = (),
        *,
        description: str | None = None,
        group: str | None = None,
    ) -> Task:
        """Declare a new task and return it for further configuration."""
        if name in self._tasks:
            raise DuplicateTaskError(name)
        task = Task(name, description=description, group=group, project=self._project)
        if action is not None:
            task.do_last(action)
        task.depends_on(*depends_on)
        self._tasks[name] = task
        logger.debug("Registered task %s", name)
        return task

    def lookup(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    @property
    def names(self) -> list[str]:
        return list(self._tasks)

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks.values())

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskRegistry({self.names!r})"
