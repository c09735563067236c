"""Name-keyed arena of rendered type definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional


class TypeStatus(str, Enum):
    PENDING = "pending"
    RENDERED = "rendered"
    UNRESOLVED = "unresolved-external"


@dataclass
class TypeDefinition:
    """One named type and the text rendered for it."""

    name: str
    status: TypeStatus
    text: str = ""
    references: List[str] = field(default_factory=list)
    origin: Optional[Path] = None


class TypeTable:
    """Tracks every named type requested during a run.

    A name is ``pending`` from the moment its definition starts rendering
    until the text is complete. Requests that meet a pending name treat it
    as satisfied, which is what stops recursive types from looping.
    Unresolved names may be retried, since a later reference can come from
    a module that imports them locally.
    """

    def __init__(self) -> None:
        self._definitions: Dict[str, TypeDefinition] = {}

    def status(self, name: str) -> Optional[TypeStatus]:
        definition = self._definitions.get(name)
        return definition.status if definition is not None else None

    def is_settled(self, name: str) -> bool:
        """Return True when ``name`` is rendered or currently rendering."""
        return self.status(name) in {TypeStatus.PENDING, TypeStatus.RENDERED}

    def begin(self, name: str, origin: Optional[Path] = None) -> TypeDefinition:
        if self.is_settled(name):
            raise ValueError(f"Type '{name}' is already {self.status(name).value}")  # type: ignore[union-attr]
        definition = self._definitions.get(name)
        if definition is None:
            definition = TypeDefinition(name=name, status=TypeStatus.PENDING, origin=origin)
            self._definitions[name] = definition
        else:
            definition.status = TypeStatus.PENDING
            definition.origin = origin
        return definition

    def complete(self, name: str, text: str, references: List[str]) -> TypeDefinition:
        definition = self._definitions.get(name)
        if definition is None or definition.status is not TypeStatus.PENDING:
            raise ValueError(f"Type '{name}' is not pending")
        definition.status = TypeStatus.RENDERED
        definition.text = text
        definition.references = list(references)
        return definition

    def mark_unresolved(self, name: str) -> TypeDefinition:
        definition = self._definitions.get(name)
        if definition is None:
            definition = TypeDefinition(name=name, status=TypeStatus.UNRESOLVED)
            self._definitions[name] = definition
        elif definition.status is TypeStatus.RENDERED:
            raise ValueError(f"Type '{name}' is already rendered")
        else:
            definition.status = TypeStatus.UNRESOLVED
        return definition

    def get(self, name: str) -> Optional[TypeDefinition]:
        return self._definitions.get(name)

    def rendered(self) -> List[TypeDefinition]:
        """Rendered definitions in first-reference order."""
        return [
            definition
            for definition in self._definitions.values()
            if definition.status is TypeStatus.RENDERED
        ]

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[TypeDefinition]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)


__all__ = ["TypeDefinition", "TypeStatus", "TypeTable"]
