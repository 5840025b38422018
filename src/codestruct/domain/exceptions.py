"""Domain exceptions: all public errors of codestruct.

Hexagonal architecture: all exceptions visible to users defined in domain.
Every CatalogError carries the ErrorKind that Catalog reports at its boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Sequence


class ErrorKind(Enum):
    """Failure category reported by catalog operations."""

    INVALID_NAME = "invalid_name"
    INVALID_DEPTH = "invalid_depth"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    CIRCULAR_REFERENCE = "circular_reference"
    HAS_CHILDREN = "has_children"
    IMMUTABLE_FIELD = "immutable_field"
    UNSUPPORTED_TYPE = "unsupported_type"
    VALIDATION_ERROR = "validation_error"
    IO_ERROR = "io_error"


class CodestructError(Exception):
    """Base for all codestruct exceptions.

    Allows: except CodestructError to catch all library errors.
    """


class CatalogError(CodestructError):
    """Base for errors that map to an ErrorKind.

    Attributes:
        kind: Failure category (class attribute).
    """

    kind: ClassVar[ErrorKind]


class InvalidNameError(CatalogError, ValueError):
    """Name or path segment violates naming rules.

    Attributes:
        name: Rejected name.
        reason: Which rule was violated.
    """

    kind = ErrorKind.INVALID_NAME

    def __init__(self, name: str, reason: str) -> None:
        """Initialize with rejected name and reason."""
        self.name = name
        self.reason = reason
        super().__init__(f"invalid name {name!r}: {reason}")


class InvalidDepthError(CatalogError, ValueError):
    """Hierarchical name has too many segments.

    Attributes:
        path: Rejected hierarchical name.
        depth: Actual segment count.
        max_depth: Allowed segment count.
    """

    kind = ErrorKind.INVALID_DEPTH

    def __init__(self, path: str, depth: int, max_depth: int) -> None:
        """Initialize with path and depths."""
        self.path = path
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(f"{path!r} has {depth} levels, at most {max_depth} allowed")


class ConflictError(CatalogError):
    """Hierarchical name already taken.

    Attributes:
        hierarchical_name: Duplicated name.
    """

    kind = ErrorKind.CONFLICT

    def __init__(self, hierarchical_name: str) -> None:
        """Initialize with duplicated name."""
        self.hierarchical_name = hierarchical_name
        super().__init__(f"module {hierarchical_name!r} already exists")


class EntryNotFoundError(CatalogError, LookupError):
    """Referenced module does not exist.

    Attributes:
        hierarchical_name: Missing name.
        role: What was looked up ("module" or "parent").
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, hierarchical_name: str, role: str = "module") -> None:
        """Initialize with missing name and lookup role."""
        self.hierarchical_name = hierarchical_name
        self.role = role
        super().__init__(f"{role} {hierarchical_name!r} does not exist")


class CircularReferenceError(CatalogError, ValueError):
    """Parent assignment would create a cycle.

    Attributes:
        hierarchical_name: Module being placed.
        parent: Proposed parent.
    """

    kind = ErrorKind.CIRCULAR_REFERENCE

    def __init__(self, hierarchical_name: str, parent: str) -> None:
        """Initialize with module and proposed parent."""
        self.hierarchical_name = hierarchical_name
        self.parent = parent
        if hierarchical_name == parent:
            msg = f"module {hierarchical_name!r} cannot be its own parent"
        else:
            msg = f"parent {parent!r} would make {hierarchical_name!r} its own ancestor"
        super().__init__(msg)


class HasChildrenError(CatalogError):
    """Module still has children and cannot be deleted.

    Attributes:
        hierarchical_name: Module to delete.
        children: Local names of its children.
    """

    kind = ErrorKind.HAS_CHILDREN

    def __init__(self, hierarchical_name: str, children: Sequence[str]) -> None:
        """Initialize with module and its children."""
        if not children:
            raise ValueError("HasChildrenError requires at least one child")

        self.hierarchical_name = hierarchical_name
        self.children = tuple(children)
        super().__init__(
            f"cannot delete {hierarchical_name!r}: it has {len(self.children)} child module(s)"
        )


class ImmutableFieldError(CatalogError, ValueError):
    """Patch touches identity or type fields.

    Attributes:
        fields: Rejected field names, sorted.
    """

    kind = ErrorKind.IMMUTABLE_FIELD

    def __init__(self, fields: Sequence[str]) -> None:
        """Initialize with rejected fields."""
        if not fields:
            raise ValueError("ImmutableFieldError requires at least one field")

        self.fields = tuple(sorted(fields))
        super().__init__(f"fields cannot be changed after creation: {', '.join(self.fields)}")


class UnsupportedTypeError(CatalogError, ValueError):
    """Module type tag is not one of the supported kinds.

    Attributes:
        type_name: Rejected tag.
    """

    kind = ErrorKind.UNSUPPORTED_TYPE

    def __init__(self, type_name: str) -> None:
        """Initialize with rejected tag."""
        self.type_name = type_name
        super().__init__(f"unsupported module type {type_name!r}")


class DocumentValidationError(CatalogError, ValueError):
    """Document or patch fails schema validation.

    Aggregates every violation, not just the first.

    Attributes:
        source: Collection id or other subject of validation.
        errors: All violations found.
    """

    kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, source: str, errors: Sequence[str]) -> None:
        """Initialize with subject and violations."""
        if not errors:
            raise ValueError("DocumentValidationError requires at least one error")

        self.source = source
        self.errors = tuple(errors)
        super().__init__(f"{source}: {'; '.join(self.errors)}")


class StorageIOError(CatalogError):
    """Reading or writing a document failed at the OS or parser level.

    Attributes:
        path: File involved.
        reason: Underlying error description.
    """

    kind = ErrorKind.IO_ERROR

    def __init__(self, path: str, reason: str) -> None:
        """Initialize with path and reason."""
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ConfigError(CodestructError, ValueError):
    """Configuration source is malformed.

    Attributes:
        source: Config file or environment variable.
        reason: What is wrong.
    """

    def __init__(self, source: str, reason: str) -> None:
        """Initialize with source and reason."""
        self.source = source
        self.reason = reason
        super().__init__(f"invalid configuration in {source}: {reason}")
