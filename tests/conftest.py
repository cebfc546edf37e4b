import pytest

from buildrun.config import BuildConfig
from buildrun.core.plugins import PluginRegistry
from buildrun.core.properties import Properties
from buildrun.plugins import default_registry


@pytest.fixture
def plugins() -> PluginRegistry:
    return default_registry()


@pytest.fixture
def make_config(tmp_path):
    def _make(*plugin_ids: str, **properties) -> BuildConfig:
        return BuildConfig(
            project_name="project-with-lavalamp",
            project_dir=tmp_path,
            properties=Properties(properties),
            plugins=list(plugin_ids),
            max_workers=2,
        )

    return _make
