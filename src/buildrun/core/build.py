"""Build — one invocation: configure the project, then run the requested tasks."""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from buildrun.config import BuildConfig
from buildrun.core.graph import TaskGraph, build_graph
from buildrun.core.plugins import PluginRegistry
from buildrun.core.project import Project
from buildrun.core.scheduler import RunReport, Scheduler
from buildrun.core.task import invoke
from buildrun.errors import BuildError, BuildFailure

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Outcome of the requested tasks.

    ``failure`` is set when configuration, graph resolution or any task
    failed; ``report`` is ``None`` when nothing got to run.
    """

    requested: list[str]
    report: RunReport | None = None
    failure: BuildError | None = None
    listener_errors: list[Exception] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.failure is None


class Build:
    def __init__(self, config: BuildConfig, plugins: PluginRegistry) -> None:
        self.config = config
        self.plugins = plugins
        self.project: Project | None = None
        self.graph: TaskGraph | None = None

    def configure(self) -> Project:
        """Create the project and apply every configured plugin, in order."""
        self.project = Project(self.config)
        for plugin_id in self.config.plugins:
            self.plugins.apply(plugin_id, self.project)
        logger.debug("Configured %r", self.project)
        return self.project

    async def run(self, requested: Iterable[str]) -> BuildResult:
        """Configure, resolve and execute.

        Configuration and graph errors are re-raised after build-finished
        listeners have seen them; task failures are reported in the result.
        A dry run does not notify listeners once the graph is resolved.
        """
        requested = list(requested)
        start = time.monotonic()
        try:
            project = self.configure()
            self.graph = build_graph(project.tasks, requested)
        except BuildError as e:
            logger.error("Build failed before execution: %s", e)
            await self._notify(BuildResult(requested=requested, failure=e))
            raise

        scheduler = Scheduler(
            max_workers=self.config.max_workers,
            fail_fast=self.config.fail_fast,
            dry_run=self.config.dry_run,
        )
        report = await scheduler.run(self.graph)
        failure = None if report.success else BuildFailure(report.failures)
        result = BuildResult(requested=requested, report=report, failure=failure)

        elapsed = (time.monotonic() - start) * 1000
        if failure:
            logger.error("BUILD FAILED in %.0fms", elapsed)
        else:
            logger.info("BUILD SUCCESSFUL in %.0fms", elapsed)
        if self.config.dry_run:
            logger.debug("Dry run: build-finished listeners not notified")
            return result
        await self._notify(result)
        return result

    async def _notify(self, result: BuildResult) -> None:
        if self.project is None:
            return
        for listener in self.project.build_listeners:
            try:
                await invoke(listener, result)
            except Exception as e:
                logger.exception("Build-finished listener %r failed", listener)
                result.listener_errors.append(e)
