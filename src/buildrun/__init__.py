"""Plugin-based task graph runner."""

from buildrun.config import BuildConfig, load_config
from buildrun.core.build import Build, BuildResult
from buildrun.core.graph import TaskGraph, build_graph
from buildrun.core.plugins import Plugin, PluginDescriptor, PluginRegistry
from buildrun.core.project import Project
from buildrun.core.properties import Properties
from buildrun.core.registry import TaskRegistry
from buildrun.core.scheduler import RunReport, Scheduler
from buildrun.core.task import Task, TaskResult, TaskState

__all__ = [
    "Build",
    "BuildConfig",
    "BuildResult",
    "Plugin",
    "PluginDescriptor",
    "PluginRegistry",
    "Project",
    "Properties",
    "RunReport",
    "Scheduler",
    "Task",
    "TaskGraph",
    "TaskRegistry",
    "TaskResult",
    "TaskState",
    "build_graph",
    "load_config",
]
