"""Outputs of catalog operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codestruct.domain.exceptions import CatalogError, ErrorKind
    from codestruct.domain.model.module import Module
    from codestruct.domain.model.requests import SearchCriteria


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a mutating catalog operation.

    Invariants (FAIL-FIRST):
    - success implies error_kind is None
    - failure implies error_kind is set

    Attributes:
        success: Operation committed
        value: Operation payload (hierarchical name for create/update/delete)
        error_kind: Failure category, None on success
        message: Human-readable outcome
    """

    success: bool
    value: str | None = None
    error_kind: ErrorKind | None = None
    message: str = ""

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.success and self.error_kind is not None:
            raise ValueError("successful result must not carry error_kind")
        if not self.success and self.error_kind is None:
            raise ValueError("failed result requires error_kind")

    @classmethod
    def ok(cls, value: str, message: str = "") -> OperationResult:
        """Successful result."""
        return cls(success=True, value=value, message=message)

    @classmethod
    def failure(cls, error: CatalogError) -> OperationResult:
        """Failed result built from a catalog error."""
        return cls(success=False, error_kind=error.kind, message=str(error))

    def to_dict(self) -> dict[str, object]:
        """Transport-neutral shape: {success, error_kind, message} or {success, value}."""
        if self.success or self.error_kind is None:
            return {"success": True, "value": self.value, "message": self.message}
        return {"success": False, "error_kind": self.error_kind.value, "message": self.message}


@dataclass(frozen=True, slots=True)
class SearchResult:
    """One page of ranked search results.

    Attributes:
        modules: Page of matches, best first
        total: Match count before pagination
        query: Criteria that produced the page
    """

    modules: tuple[Module, ...]
    total: int
    query: SearchCriteria

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.total < len(self.modules):
            raise ValueError(f"total {self.total} smaller than page size {len(self.modules)}")

    @property
    def page_count(self) -> int:
        """Pages needed for total at the query's limit."""
        return -(-self.total // self.query.limit)

    @property
    def page_number(self) -> int:
        """1-based page index of this result."""
        return self.query.offset // self.query.limit + 1

    @property
    def has_more(self) -> bool:
        """More matches exist after this page."""
        return self.query.offset + len(self.modules) < self.total
