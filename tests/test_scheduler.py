"""Tests for Scheduler."""

import asyncio

import pytest

from buildrun.core.graph import build_graph
from buildrun.core.registry import TaskRegistry
from buildrun.core.scheduler import Scheduler
from buildrun.core.task import TaskState


def fail(task):
    raise RuntimeError(f"{task.name} broke")


class Recorder:
    """Async action that records start/finish order and tracks concurrency."""

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.started: list[str] = []
        self.finished: list[str] = []
        self.active = 0
        self.peak = 0

    async def __call__(self, task) -> None:
        self.started.append(task.name)
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(self.delay)
        self.active -= 1
        self.finished.append(task.name)


class TestSchedulerBasic:
    @pytest.mark.asyncio
    async def test_single_task_success(self):
        reg = TaskRegistry()
        reg.register("ok")
        report = await Scheduler().run(build_graph(reg, ["ok"]))
        assert report.success
        assert report.results["ok"].state == TaskState.SUCCEEDED
        assert report.executed == ["ok"]

    @pytest.mark.asyncio
    async def test_single_task_failure(self):
        reg = TaskRegistry()
        reg.register("fail", fail)
        report = await Scheduler().run(build_graph(reg, ["fail"]))
        assert not report.success
        assert report.failed_tasks == ["fail"]
        assert "fail broke" in str(report.results["fail"].error)
        assert report.failures[0].task_name == "fail"

    @pytest.mark.asyncio
    async def test_empty_graph(self):
        report = await Scheduler().run(build_graph(TaskRegistry(), []))
        assert report.success
        assert report.results == {}

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError):
            Scheduler(max_workers=0)


class TestSchedulerOrdering:
    @pytest.mark.asyncio
    async def test_dependencies_finish_before_dependents_start(self):
        rec = Recorder(delay=0.01)
        reg = TaskRegistry()
        reg.register("a", rec)
        reg.register("b", rec, depends_on=["a"])
        reg.register("c", rec, depends_on=["a"])
        reg.register("d", rec, depends_on=["b", "c"])
        graph = build_graph(reg, ["d"])
        report = await Scheduler(max_workers=4).run(graph)
        assert report.success
        for name in graph.task_names:
            for pred in graph.predecessors(name):
                assert rec.finished.index(pred) < rec.started.index(name)

    @pytest.mark.asyncio
    async def test_independent_tasks_run_concurrently(self):
        rec = Recorder(delay=0.05)
        reg = TaskRegistry()
        for name in ["p1", "p2", "p3"]:
            reg.register(name, rec)
        report = await Scheduler(max_workers=3).run(build_graph(reg, ["p1", "p2", "p3"]))
        assert report.success
        assert rec.peak == 3

    @pytest.mark.asyncio
    async def test_worker_limit_respected(self):
        rec = Recorder(delay=0.01)
        reg = TaskRegistry()
        names = [f"t{i}" for i in range(6)]
        for name in names:
            reg.register(name, rec)
        report = await Scheduler(max_workers=2).run(build_graph(reg, names))
        assert report.success
        assert rec.peak == 2
        assert report.executed == names


class TestSchedulerFailures:
    @pytest.mark.asyncio
    async def test_dependents_skipped_transitively(self):
        reg = TaskRegistry()
        reg.register("a", fail)
        reg.register("b", depends_on=["a"])
        reg.register("c", depends_on=["b"])
        report = await Scheduler().run(build_graph(reg, ["c"]))
        assert report.results["a"].state == TaskState.FAILED
        assert report.results["b"].state == TaskState.SKIPPED
        assert report.results["c"].state == TaskState.SKIPPED
        assert report.results["b"].metadata["blocked_by"] == "a"
        assert report.executed == ["a"]

    @pytest.mark.asyncio
    async def test_independent_branch_continues(self):
        rec = Recorder()
        reg = TaskRegistry()
        reg.register("bad", fail)
        reg.register("after_bad", rec, depends_on=["bad"])
        reg.register("good", rec)
        reg.register("after_good", rec, depends_on=["good"])
        report = await Scheduler().run(build_graph(reg, ["after_bad", "after_good"]))
        assert not report.success
        assert report.results["after_bad"].state == TaskState.SKIPPED
        assert report.results["good"].state == TaskState.SUCCEEDED
        assert report.results["after_good"].state == TaskState.SUCCEEDED
        assert rec.started == ["good", "after_good"]

    @pytest.mark.asyncio
    async def test_every_failure_aggregated(self):
        reg = TaskRegistry()
        reg.register("x", fail)
        reg.register("y", fail)
        report = await Scheduler().run(build_graph(reg, ["x", "y"]))
        assert sorted(report.failed_tasks) == ["x", "y"]
        assert len(report.failures) == 2

    @pytest.mark.asyncio
    async def test_fail_fast_starts_nothing_new(self):
        rec = Recorder()
        reg = TaskRegistry()
        reg.register("bad", fail)
        reg.register("later", rec)
        report = await Scheduler(max_workers=1, fail_fast=True).run(build_graph(reg, ["bad", "later"]))
        assert report.results["bad"].state == TaskState.FAILED
        assert report.results["later"].state == TaskState.SKIPPED
        assert rec.started == []


class TestSchedulerDryRun:
    @pytest.mark.asyncio
    async def test_dry_run_skips_all(self):
        rec = Recorder()
        reg = TaskRegistry()
        reg.register("a", rec)
        reg.register("b", rec, depends_on=["a"])
        report = await Scheduler(dry_run=True).run(build_graph(reg, ["b"]))
        assert report.results["a"].state == TaskState.SKIPPED
        assert report.results["b"].state == TaskState.SKIPPED
        assert report.results["a"].metadata.get("dry_run") is True
        assert rec.started == []


class TestRunReport:
    @pytest.mark.asyncio
    async def test_summary(self):
        reg = TaskRegistry()
        reg.register("a")
        reg.register("b", fail)
        reg.register("c", depends_on=["b"])
        report = await Scheduler().run(build_graph(reg, ["a", "c"]))
        s = report.summary()
        assert s["total"] == 3
        assert s["by_state"] == {"succeeded": 1, "failed": 1, "skipped": 1}
        assert s["success"] is False
        assert report.states() == {
            "a": TaskState.SUCCEEDED,
            "b": TaskState.FAILED,
            "c": TaskState.SKIPPED,
        }
