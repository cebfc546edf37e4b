"""Build configuration — explicit settings struct and YAML loader."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from buildrun.core.properties import Properties
from buildrun.errors import ConfigurationError

DEFAULT_CONFIG_FILE = "buildrun.yaml"


def _default_workers() -> int:
    return os.cpu_count() or 4


@dataclass
class BuildConfig:
    """Everything a build needs to know before the configuration phase starts."""

    project_name: str = "root"
    project_dir: Path = field(default_factory=Path.cwd)
    properties: Properties = field(default_factory=Properties)
    plugins: list[str] = field(default_factory=list)
    max_workers: int = field(default_factory=_default_workers)
    fail_fast: bool = False
    dry_run: bool = False

    def __post_init__(self) -> None:
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")


def _as_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key) or []
    if not isinstance(value, list):
        raise ConfigurationError(f"{key!r} must be a list, got {type(value).__name__}")
    return [str(v) for v in value]


def load_config(path: str | Path) -> BuildConfig:
    """Load a ``BuildConfig`` from a YAML file.

    Recognized keys: ``project``, ``plugins``, ``properties``,
    ``max_workers``, ``fail_fast``. The project directory is the directory
    holding the file.
    """
    config_path = Path(path)
    try:
        data = yaml.safe_load(config_path.read_text())
    except OSError as e:
        raise ConfigurationError(f"Could not read {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a mapping")

    properties = data.get("properties") or {}
    if not isinstance(properties, dict):
        raise ConfigurationError("'properties' must be a mapping")

    project_dir = config_path.resolve().parent
    kwargs: dict[str, Any] = {
        "project_name": str(data.get("project") or project_dir.name),
        "project_dir": project_dir,
        "properties": Properties({str(k): "" if v is None else v for k, v in properties.items()}),
        "plugins": _as_list(data, "plugins"),
        "fail_fast": bool(data.get("fail_fast", False)),
    }
    if data.get("max_workers") is not None:
        try:
            kwargs["max_workers"] = int(data["max_workers"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid max_workers: {data['max_workers']!r}") from e
    return BuildConfig(**kwargs)
