"""Built-in plugins and the default plugin table."""

from buildrun.core.plugins import PluginRegistry
from buildrun.plugins.lavalamp import LavaLampPlugin
from buildrun.plugins.sample import SamplePlugin
from buildrun.plugins.soundfeedback import SoundFeedbackPlugin


def default_registry() -> PluginRegistry:
    registry = PluginRegistry()
    registry.register("soundfeedback", SoundFeedbackPlugin, "Plays a sound at the end of the build")
    registry.register("lavalamp", LavaLampPlugin, "Shines a lava lamp green or red at the end of the build")
    registry.register("sample", SamplePlugin, "Tasks 'ok' and 'fail'; -PfailConfig aborts configuration")
    return registry


__all__ = [
    "LavaLampPlugin",
    "SamplePlugin",
    "SoundFeedbackPlugin",
    "default_registry",
]
