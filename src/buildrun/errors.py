"""Exception hierarchy for configuration, graph and execution failures."""


class BuildError(Exception):
    """Base class for all build errors."""


class ConfigurationError(BuildError):
    """The configuration phase failed; no task has run."""


class PluginNotFoundError(ConfigurationError):
    def __init__(self, plugin_id: str) -> None:
        super().__init__(f"Plugin with id {plugin_id!r} not found")
        self.plugin_id = plugin_id


class PluginApplyError(ConfigurationError):
    """Raised when a plugin fails while configuring a project.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, plugin_id: str, cause: BaseException) -> None:
        super().__init__(f"Failed to apply plugin {plugin_id!r}: {cause}")
        self.plugin_id = plugin_id
        self.cause = cause


class DuplicateTaskError(ConfigurationError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Task with name {name!r} already exists")
        self.name = name


class GraphError(BuildError):
    """The task graph could not be built."""


class UnknownTaskError(GraphError):
    def __init__(self, name: str, required_by: str | None = None) -> None:
        msg = f"Task {name!r} not found"
        if required_by:
            msg += f" (required by {required_by!r})"
        super().__init__(msg)
        self.name = name
        self.required_by = required_by


class CyclicDependencyError(GraphError):
    def __init__(self, cycle: list[str]) -> None:
        super().__init__("Circular dependency between tasks: " + " -> ".join(cycle))
        self.cycle = cycle


class TaskExecutionError(BuildError):
    """A task action raised; wraps the original exception."""

    def __init__(self, task_name: str, cause: BaseException) -> None:
        super().__init__(f"Execution failed for task {task_name!r}: {cause}")
        self.task_name = task_name
        self.cause = cause


class TaskStateError(BuildError):
    """Illegal task state transition."""


class BuildFailure(BuildError):
    """Aggregate of every task failure of one build."""

    def __init__(self, failures: list[TaskExecutionError]) -> None:
        names = ", ".join(repr(f.task_name) for f in failures)
        super().__init__(f"Build failed with {len(failures)} failing task(s): {names}")
        self.failures = failures
