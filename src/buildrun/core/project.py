"""Project — the mutable object plugins configure during the configuration phase."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from buildrun.config import BuildConfig
from buildrun.core.properties import Properties
from buildrun.core.registry import TaskRegistry

logger = logging.getLogger(__name__)

BuildListener = Callable[[Any], Any]


def require(condition: bool, message: str) -> None:
    """Raise ``ValueError`` with *message* unless *condition* holds."""
    if not condition:
        raise ValueError(message)


class SharedServices:
    """Named build services, created lazily and shared by every plugin of a build."""

    def __init__(self) -> None:
        self._factories: dict[str, Callable[[], Any]] = {}
        self._instances: dict[str, Any] = {}

    def register_if_absent(self, name: str, factory: Callable[[], Any]) -> None:
        self._factories.setdefault(name, factory)

    def get(self, name: str) -> Any:
        if name not in self._instances:
            try:
                factory = self._factories[name]
            except KeyError:
                raise KeyError(f"No build service registered as {name!r}") from None
            self._instances[name] = factory()
        return self._instances[name]

    def __contains__(self, name: str) -> bool:
        return name in self._factories


class Project:
    """Tasks, properties, services and listeners of one build.

    Created at build start from a ``BuildConfig`` and thrown away when the
    build ends.
    """

    def __init__(self, config: BuildConfig) -> None:
        self.name = config.project_name
        self.project_dir = Path(config.project_dir)
        self.properties = Properties(config.properties.snapshot())
        self.tasks = TaskRegistry(project=self)
        self.services = SharedServices()
        self.applied_plugins: list[str] = []
        self._listeners: list[BuildListener] = []

    def has_property(self, key: str) -> bool:
        return self.properties.has(key)

    def find_property(self, key: str, default: Any = None) -> Any:
        return self.properties.get(key, default)

    def file(self, path: str | Path) -> Path:
        """Resolve *path* against the project directory."""
        return self.project_dir / path

    def on_build_finished(self, listener: BuildListener) -> None:
        """Run *listener* with the ``BuildResult`` at the end of every build, failed or not."""
        self._listeners.append(listener)

    @property
    def build_listeners(self) -> list[BuildListener]:
        return list(self._listeners)

    def __repr__(self) -> str:
        return f"Project({self.name!r}, tasks={len(self.tasks)})"
