"""Plugin loader — explicit table of plugin ids and the factories that build them."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from buildrun.core.project import Project
from buildrun.errors import PluginApplyError, PluginNotFoundError

logger = logging.getLogger(__name__)


class Plugin(ABC):
    """Abstract base class for all plugins."""

    @abstractmethod
    def apply(self, project: Project) -> None: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@dataclass(frozen=True)
class PluginDescriptor:
    plugin_id: str
    factory: Callable[[], Plugin]
    description: str = ""


class PluginRegistry:
    """Maps plugin ids to factories.

    Populated once at startup; lookups never import or reflect on anything.
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, PluginDescriptor] = {}

    def register(self, plugin_id: str, factory: Callable[[], Plugin], description: str = "") -> PluginDescriptor:
        if plugin_id in self._descriptors:
            raise ValueError(f"Plugin {plugin_id!r} is already registered")
        descriptor = PluginDescriptor(plugin_id, factory, description)
        self._descriptors[plugin_id] = descriptor
        return descriptor

    def resolve(self, plugin_id: str) -> PluginDescriptor:
        try:
            return self._descriptors[plugin_id]
        except KeyError:
            raise PluginNotFoundError(plugin_id) from None

    def apply(self, plugin_id: str, project: Project) -> None:
        """Apply a plugin to *project*, once.

        Any error raised while the plugin configures the project is wrapped in
        ``PluginApplyError``.
        """
        descriptor = self.resolve(plugin_id)
        if plugin_id in project.applied_plugins:
            logger.debug("Plugin %s already applied to %s", plugin_id, project.name)
            return

        logger.info("Applying plugin %s", plugin_id)
        try:
            plugin = descriptor.factory()
            plugin.apply(project)
        except Exception as e:
            raise PluginApplyError(plugin_id, e) from e
        project.applied_plugins.append(plugin_id)

    @property
    def plugin_ids(self) -> list[str]:
        return list(self._descriptors)

    def __contains__(self, plugin_id: str) -> bool:
        return plugin_id in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)
