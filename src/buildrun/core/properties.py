"""Properties — project-level key/value settings passed in from the command line."""

import re
from collections.abc import Iterable
from typing import Any

_TEMPLATE_RE = re.compile(r"\{([^{}]+)\}")


class Properties:
    """Flat key-value store of project properties.

    A property may be present with an empty value (``-PfailConfig``);
    ``has`` only checks presence.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial) if initial else {}

    @classmethod
    def from_pairs(cls, pairs: Iterable[str]) -> "Properties":
        """Parse ``key=value`` strings. A bare ``key`` maps to an empty string."""
        props = cls()
        for pair in pairs:
            key, _, value = pair.partition("=")
            key = key.strip()
            if not key:
                raise ValueError(f"Invalid property: {pair!r}")
            props.set(key, value)
        return props

    def has(self, key: str) -> bool:
        return key in self._data

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def update(self, other: "Properties | dict[str, Any]") -> None:
        data = other.snapshot() if isinstance(other, Properties) else other
        self._data.update(data)

    def format_template(self, template: str) -> str:
        """Replace ``{key}`` placeholders with property values.

        Missing keys are left as-is.
        """

        def _replace(match: re.Match[str]) -> str:
            key = match.group(1)
            if key in self._data:
                return str(self._data[key])
            return match.group(0)

        return _TEMPLATE_RE.sub(_replace, template)

    def snapshot(self) -> dict[str, Any]:
        """Return a shallow copy of all properties."""
        return dict(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Properties({self._data!r})"
