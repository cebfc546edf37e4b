"""TaskGraph — DAG of the tasks selected for one build."""

from collections import deque
from collections.abc import Iterable
from typing import Self

from buildrun.core.registry import TaskRegistry
from buildrun.core.task import Task
from buildrun.errors import CyclicDependencyError, UnknownTaskError

_VISITING = 1
_DONE = 2


class TaskGraph:
    """Directed graph of tasks with dependency edges.

    ``add_edge(dependency, dependent)`` means *dependency must succeed
    before dependent starts*. Edges and roots keep insertion order so that
    the topological order is deterministic.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._edges: dict[str, dict[str, None]] = {}  # name -> successors
        self._reverse: dict[str, dict[str, None]] = {}  # name -> predecessors
        self.requested: list[str] = []

    def add_task(self, task: Task) -> Self:
        self._tasks[task.name] = task
        self._edges.setdefault(task.name, {})
        self._reverse.setdefault(task.name, {})
        return self

    def add_edge(self, dependency: str, dependent: str) -> Self:
        if dependency not in self._tasks:
            raise UnknownTaskError(dependency, required_by=dependent)
        if dependent not in self._tasks:
            raise UnknownTaskError(dependent)
        self._edges[dependency][dependent] = None
        self._reverse[dependent][dependency] = None
        return self

    def get_task(self, name: str) -> Task:
        try:
            return self._tasks[name]
        except KeyError:
            raise UnknownTaskError(name) from None

    def predecessors(self, name: str) -> list[str]:
        return list(self._reverse.get(name, {}))

    def successors(self, name: str) -> list[str]:
        return list(self._edges.get(name, {}))

    def dependents(self, name: str) -> set[str]:
        """All tasks that transitively depend on *name*."""
        seen: set[str] = set()
        queue: deque[str] = deque(self._edges.get(name, {}))
        while queue:
            nid = queue.popleft()
            if nid in seen:
                continue
            seen.add(nid)
            queue.extend(self._edges.get(nid, {}))
        return seen

    @property
    def task_names(self) -> list[str]:
        return list(self._tasks)

    def topological_order(self) -> list[str]:
        """Depth-first topological sort: every task comes after its dependencies.

        Requested tasks are visited first, in request order, and each task's
        dependencies in declaration order. Raises ``CyclicDependencyError``
        naming the cycle.
        """
        order: list[str] = []
        marks: dict[str, int] = {}
        roots = list(dict.fromkeys([*self.requested, *self._tasks]))

        for root in roots:
            if root in marks:
                continue
            marks[root] = _VISITING
            path = [root]
            stack = [iter(self._reverse[root])]
            while stack:
                for dep in stack[-1]:
                    mark = marks.get(dep)
                    if mark == _VISITING:
                        raise CyclicDependencyError(path[path.index(dep) :] + [dep])
                    if mark is None:
                        marks[dep] = _VISITING
                        path.append(dep)
                        stack.append(iter(self._reverse[dep]))
                        break
                else:
                    stack.pop()
                    done = path.pop()
                    marks[done] = _DONE
                    order.append(done)
        return order

    @property
    def levels(self) -> list[list[str]]:
        """Kahn's algorithm grouping tasks into levels that could run concurrently."""
        self.topological_order()
        in_degree = {nid: len(self._reverse[nid]) for nid in self._tasks}
        queue: deque[str] = deque(nid for nid, deg in in_degree.items() if deg == 0)
        levels: list[list[str]] = []

        while queue:
            level: list[str] = []
            for _ in range(len(queue)):
                nid = queue.popleft()
                level.append(nid)
                for succ in self._edges[nid]:
                    in_degree[succ] -= 1
                    if in_degree[succ] == 0:
                        queue.append(succ)
            levels.append(level)
        return levels

    def __contains__(self, name: str) -> bool:
        return name in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def __repr__(self) -> str:
        return f"TaskGraph(tasks={len(self._tasks)}, edges={sum(len(s) for s in self._edges.values())})"


def build_graph(registry: TaskRegistry, requested: Iterable[str]) -> TaskGraph:
    """Select the requested tasks and everything they depend on.

    ``required_by`` declarations are folded in as dependency edges of the
    named task. Unknown task names raise ``UnknownTaskError`` and cycles
    raise ``CyclicDependencyError``, both before anything runs.
    """
    requested = list(dict.fromkeys(requested))

    declared_by: dict[str, list[str]] = {}
    for task in registry:
        for succ in task.successors:
            if succ not in registry:
                raise UnknownTaskError(succ)
            declared_by.setdefault(succ, []).append(task.name)

    def deps_of(task: Task) -> list[str]:
        return list(dict.fromkeys([*task.dependencies, *declared_by.get(task.name, [])]))

    graph = TaskGraph()
    graph.requested = requested
    queue: deque[Task] = deque(registry.lookup(name) for name in requested)
    while queue:
        task = queue.popleft()
        if task.name in graph:
            continue
        graph.add_task(task)
        for dep in deps_of(task):
            if dep not in registry:
                raise UnknownTaskError(dep, required_by=task.name)
            queue.append(registry.lookup(dep))

    for name in graph.task_names:
        for dep in deps_of(graph.get_task(name)):
            graph.add_edge(dep, name)

    graph.topological_order()
    return graph
