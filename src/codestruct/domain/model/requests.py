"""Inputs to catalog operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from codestruct.domain.model.enums import AccessModifier, ModuleKind

if TYPE_CHECKING:
    from codestruct.domain.model.parameter import Parameter

DEFAULT_LIMIT = 50


@dataclass(frozen=True, slots=True)
class CreateRequest:
    """Request to create a catalog entry.

    `type` is kept as given (str or ModuleKind) so an unknown tag reaches
    Catalog.create and is reported as UNSUPPORTED_TYPE instead of failing here.
    Variant fields not relevant to `type` are ignored.

    Attributes:
        name: Local name
        type: Variant tag
        parent: Hierarchical name of parent, None for roots
        file_path: Source file; also selects the storage collection
        access_modifier: Declared visibility
        description: Free-form documentation
        inheritance, interfaces: class fields
        parameters, return_type, is_async: function fields
        data_type, initial_value, is_constant: variable fields
        functions: functionGroup field
    """

    name: str
    type: ModuleKind | str
    parent: str | None = None
    file_path: str = ""
    access_modifier: AccessModifier = AccessModifier.PUBLIC
    description: str = ""
    inheritance: tuple[str, ...] = ()
    interfaces: tuple[str, ...] = ()
    parameters: tuple[Parameter, ...] = ()
    return_type: str | None = None
    is_async: bool = False
    data_type: str = "any"
    initial_value: str | None = None
    is_constant: bool = False
    functions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class SearchCriteria:
    """Filter and pagination for catalog search.

    Unset (None) fields impose no constraint; set fields are combined with AND.

    Attributes:
        name: Case-insensitive substring of local name; enables ranking
        type: Exact kind
        parent: Exact parent hierarchical name
        file_path: Case-insensitive substring of file path
        access_modifier: Exact visibility
        description: Case-insensitive substring of description
        hierarchical_name: Exact primary key (direct lookup)
        limit: Page size
        offset: Entries to skip after ranking
    """

    name: str | None = None
    type: ModuleKind | None = None
    parent: str | None = None
    file_path: str | None = None
    access_modifier: AccessModifier | None = None
    description: str | None = None
    hierarchical_name: str | None = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")
        if self.offset < 0:
            raise ValueError(f"offset must be >= 0, got {self.offset}")

    @property
    def is_direct_lookup(self) -> bool:
        """Only hierarchical_name is constrained."""
        return self.hierarchical_name is not None and not any(
            (
                self.name,
                self.type,
                self.parent,
                self.file_path,
                self.access_modifier,
                self.description,
            )
        )
