"""Domain enumerations."""

from __future__ import annotations

from enum import Enum

from codestruct.domain.exceptions import UnsupportedTypeError


class ModuleKind(Enum):
    """Catalog entry variant.

    Values are the type tags stored on disk.
    """

    CLASS = "class"
    FUNCTION = "function"
    VARIABLE = "variable"
    FILE = "file"
    FUNCTION_GROUP = "functionGroup"

    @classmethod
    def parse(cls, value: str | ModuleKind) -> ModuleKind:
        """Resolve type tag to kind.

        Raises:
            UnsupportedTypeError: tag is not one of the five kinds
        """
        if isinstance(value, ModuleKind):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedTypeError(str(value)) from None


class AccessModifier(Enum):
    """Declared visibility of a catalog entry."""

    PUBLIC = "public"
    PRIVATE = "private"
    PROTECTED = "protected"


class RelationshipType(Enum):
    """Kind of edge between two catalog entries."""

    PARENT_CHILD = "parent-child"
    INHERITANCE = "inheritance"
    INTERFACE = "interface"
    DEPENDENCY = "dependency"
    REFERENCE = "reference"


class IssueType(Enum):
    """Integrity problem category."""

    MISSING_REFERENCE = "missing_reference"
    CIRCULAR_DEPENDENCY = "circular_dependency"
    INVALID_DATA = "invalid_data"
    ORPHANED_DATA = "orphaned_data"
    CORRUPTED_FILE = "corrupted_file"


class IssueSeverity(Enum):
    """Integrity problem severity, lowest first."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"
