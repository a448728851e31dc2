"""
Provider base interfaces: lifecycle function signature and the definitions the
provider registers for each resource and data source type.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from .diagnostics import Diagnostic
from .schema import force_new_attributes
from .state import ResourceData

# fn(d, meta) -> diagnostics; meta is the configured FMailerClient
LifecycleFunc = Callable[[ResourceData, Any], list[Diagnostic]]


@dataclass(frozen=True)
class ResourceDefinition:
    type_name: str
    schema: Callable[[], dict[str, Any]]
    create: LifecycleFunc
    read: LifecycleFunc
    update: LifecycleFunc
    delete: LifecycleFunc
    importer: Optional[LifecycleFunc] = None

    def requires_replacement(self, d: ResourceData) -> list[str]:
        """Attributes whose pending change forces destroy-then-create."""
        if not d.id:
            return []
        return [name for name in force_new_attributes(self.schema()) if d.has_change(name)]


@dataclass(frozen=True)
class DataSourceDefinition:
    type_name: str
    schema: Callable[[], dict[str, Any]]
    read: LifecycleFunc
