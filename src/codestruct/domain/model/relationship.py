"""Relationship views over the catalog."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codestruct.domain.model.enums import RelationshipType
    from codestruct.domain.model.module import Module


@dataclass(frozen=True, slots=True)
class Relationship:
    """Children and referrers of one entry.

    Attributes:
        hierarchical_name: Subject entry
        children: Local names of direct children
        references: Hierarchical names of entries whose type-bearing
            fields mention the subject's name
    """

    hierarchical_name: str
    children: tuple[str, ...]
    references: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ModuleRelationship:
    """Directed edge between two entries (or an entry and a type name).

    Attributes:
        source: Hierarchical name of the referring entry
        target: Hierarchical name or type name referred to
        relationship_type: Edge kind
        description: Human-readable explanation
    """

    source: str
    target: str
    relationship_type: RelationshipType
    description: str = ""

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.source:
            raise ValueError("source must not be empty")
        if not self.target:
            raise ValueError("target must not be empty")


@dataclass(frozen=True, slots=True)
class TypeStructure:
    """Where a type lives and who uses it.

    Attributes:
        type_name: Queried type name
        hierarchy: Root-first ancestor chain ending at the entry named
            type_name; empty when no such entry exists
        related_modules: Name matches plus referrers, without duplicates
        relationships: Reference and parent-child edges
    """

    type_name: str
    hierarchy: tuple[str, ...]
    related_modules: tuple[Module, ...]
    relationships: tuple[ModuleRelationship, ...]
