"""Host state accessor for one resource or data-source instance.

The host hands every lifecycle function an object satisfying
``ResourceData``. ``ResourceState`` is the in-process implementation used by
host adapters and by the test suite.
"""

from __future__ import annotations

import copy
from typing import Any, Protocol, runtime_checkable

from .schema import apply_defaults


@runtime_checkable
class ResourceData(Protocol):
    """Loosely typed view over desired configuration and last-known state."""

    @property
    def id(self) -> str: ...

    def set_id(self, value: str) -> None: ...

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def has_change(self, key: str) -> bool: ...


def _project(desired: Any, current: Any) -> Any:
    """Reduce ``current`` to the shape of ``desired`` for change detection.

    Nested list entries in state carry computed keys (``template``) that the
    configuration never has; only keys the configuration sets are compared.
    """
    if isinstance(desired, list) and isinstance(current, list):
        if len(desired) != len(current):
            return current
        return [_project(d, c) for d, c in zip(desired, current)]
    if isinstance(desired, dict) and isinstance(current, dict):
        return {k: current.get(k) for k in desired}
    return current


class ResourceState:
    """``ResourceData`` backed by two plain dicts.

    Args:
        config: Desired configuration as written by the user (defaults may be
                already applied by the host).
        state:  Last-known state from the previous refresh, or ``None`` for a
                resource that does not exist yet.
        id:     Instance identity; an empty string means absent.
        schema: When given, its declared defaults are filled into
                ``config`` the way a host does before planning, and every
                attribute it does not mark ``readOnly`` is read from
                ``config`` only.
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        state: dict[str, Any] | None = None,
        id: str = "",
        schema: dict[str, Any] | None = None,
    ) -> None:
        config = config or {}
        self._config = apply_defaults(schema, config) if schema else copy.deepcopy(config)
        self._prior = copy.deepcopy(state or {})
        self._state = copy.deepcopy(state or {})
        self._id = id
        self._owned = frozenset(
            name for name, prop in (schema or {}).get("properties", {}).items() if not prop.get("readOnly")
        )

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str) -> None:
        self._id = value or ""

    @property
    def config(self) -> dict[str, Any]:
        return copy.deepcopy(self._config)

    @property
    def state(self) -> dict[str, Any]:
        """Current state as written by the lifecycle functions."""
        return copy.deepcopy(self._state)

    def get(self, key: str) -> Any:
        """Configured value when set, otherwise the stored state value.

        Configuration-owned attributes never fall back to state: removing one
        from configuration reads as unset.
        """
        if key in self._owned or self._config.get(key) is not None:
            return copy.deepcopy(self._config.get(key))
        return copy.deepcopy(self._state.get(key))

    def set(self, key: str, value: Any) -> None:
        self._state[key] = copy.deepcopy(value)

    def has_change(self, key: str) -> bool:
        """True when the configured value differs from the prior state."""
        desired = self._config.get(key)
        current = _project(desired, self._prior.get(key))
        if desired in (None, []) and current in (None, []):
            return False
        return desired != current
