"""Scheduler — runs a TaskGraph on a bounded pool of concurrent tasks."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from buildrun.core.graph import TaskGraph
from buildrun.core.task import TaskResult, TaskState
from buildrun.errors import TaskExecutionError

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    results: dict[str, TaskResult] = field(default_factory=dict)
    executed: list[str] = field(default_factory=list)
    duration_ms: float = 0.0

    @property
    def success(self) -> bool:
        return not self.failed_tasks

    @property
    def failed_tasks(self) -> list[str]:
        return [name for name, r in self.results.items() if r.state == TaskState.FAILED]

    @property
    def failures(self) -> list[TaskExecutionError]:
        return [r.error for r in self.results.values() if r.error is not None]

    def states(self) -> dict[str, TaskState]:
        return {name: r.state for name, r in self.results.items()}

    def summary(self) -> dict[str, Any]:
        by_state: dict[str, int] = {}
        for r in self.results.values():
            by_state[r.state.value] = by_state.get(r.state.value, 0) + 1
        return {
            "total": len(self.results),
            "by_state": by_state,
            "duration_ms": self.duration_ms,
            "success": self.success,
        }


class Scheduler:
    """Execute a task graph, starting each task once all its dependencies succeeded.

    At most ``max_workers`` tasks run at the same time. When a task fails,
    every task depending on it is skipped and independent tasks keep running,
    unless ``fail_fast`` is set, in which case nothing new is started.
    """

    def __init__(self, *, max_workers: int = 4, fail_fast: bool = False, dry_run: bool = False) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.fail_fast = fail_fast
        self.dry_run = dry_run

    async def run(self, graph: TaskGraph) -> RunReport:
        report = RunReport()
        start = time.monotonic()
        order = graph.topological_order()

        if self.dry_run:
            for name in order:
                report.results[name] = graph.get_task(name).skip("dry run", dry_run=True)
            report.duration_ms = round((time.monotonic() - start) * 1000, 1)
            return report

        waiting = list(order)
        running: dict[asyncio.Task[TaskResult], str] = {}
        stopped = False

        while waiting or running:
            for name in list(waiting):
                blocked = self._blocked_by(name, graph, report)
                if blocked is not None or stopped:
                    reason = "build stopped after failure" if stopped else f"dependency {blocked!r} did not succeed"
                    report.results[name] = graph.get_task(name).skip(reason, blocked_by=blocked)
                    waiting.remove(name)
                    logger.info("Skipped %s: %s", name, reason)
                elif len(running) < self.max_workers and self._ready(name, graph, report):
                    waiting.remove(name)
                    running[asyncio.create_task(self._run_task(name, graph))] = name
                    report.executed.append(name)

            if not running:
                break

            done, _ = await asyncio.wait(running, return_when=asyncio.FIRST_COMPLETED)
            for finished in done:
                name = running.pop(finished)
                result = finished.result()
                report.results[name] = result
                if result.state == TaskState.FAILED and self.fail_fast and not stopped:
                    logger.warning("Fail-fast triggered by %s", name)
                    stopped = True

        report.duration_ms = round((time.monotonic() - start) * 1000, 1)
        return report

    def _blocked_by(self, name: str, graph: TaskGraph, report: RunReport) -> str | None:
        """Return the first dependency that failed or was skipped, if any."""
        for pred in graph.predecessors(name):
            result = report.results.get(pred)
            if result and result.state in (TaskState.FAILED, TaskState.SKIPPED):
                return pred
        return None

    def _ready(self, name: str, graph: TaskGraph, report: RunReport) -> bool:
        return all(
            pred in report.results and report.results[pred].state == TaskState.SUCCEEDED
            for pred in graph.predecessors(name)
        )

    async def _run_task(self, name: str, graph: TaskGraph) -> TaskResult:
        task = graph.get_task(name)
        logger.info("> Task :%s", name)
        result = await task.execute()
        if result.error is not None:
            logger.error("Task %s failed: %s", name, result.error.cause)
        else:
            logger.debug("Finished %s in %.1fms", name, result.metadata.get("duration_ms", 0.0))
        return result
