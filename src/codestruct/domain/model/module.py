"""Catalog entry entities.

Module is a tagged union: one frozen dataclass per ModuleKind, each carrying
only its own fields on top of the shared identity/description fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from codestruct.domain.model.enums import AccessModifier, ModuleKind, RelationshipType
from codestruct.domain.naming import SEPARATOR, depth_of, local_name_of

if TYPE_CHECKING:
    from datetime import datetime

    from codestruct.domain.model.parameter import Parameter


@dataclass(frozen=True, slots=True)
class BaseModule:
    """Fields shared by every catalog entry.

    Attributes:
        name: Local identifier, unique only among siblings
        hierarchical_name: Dotted unique path (primary key)
        created_at: Creation time (timezone-aware)
        updated_at: Last modification time (timezone-aware)
        parent: Hierarchical name of enclosing entry, None for roots
        description: Free-form documentation
        file_path: Source file the element lives in
        access_modifier: Declared visibility
    """

    kind: ClassVar[ModuleKind]

    name: str
    hierarchical_name: str
    created_at: datetime
    updated_at: datetime
    parent: str | None = None
    description: str = ""
    file_path: str = ""
    access_modifier: AccessModifier = AccessModifier.PUBLIC

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("module name must not be empty")

        if not self.hierarchical_name:
            raise ValueError("hierarchical_name must not be empty")

        if local_name_of(self.hierarchical_name) != self.name:
            raise ValueError(
                f"hierarchical_name '{self.hierarchical_name}' must end with name '{self.name}'"
            )

        if self.parent is not None and self.parent == self.hierarchical_name:
            raise ValueError(f"module '{self.hierarchical_name}' cannot be its own parent")

    @property
    def depth(self) -> int:
        """Number of segments in hierarchical_name."""
        return depth_of(self.hierarchical_name)

    @property
    def is_root(self) -> bool:
        """Entry has no parent."""
        return self.parent is None

    def is_child_of(self, hierarchical_name: str) -> bool:
        """Check parent pointer."""
        return self.parent == hierarchical_name

    def is_descendant_path_of(self, hierarchical_name: str) -> bool:
        """Check whether the path nests under another path by prefix."""
        return self.hierarchical_name.startswith(hierarchical_name + SEPARATOR)


@dataclass(frozen=True, slots=True)
class ClassModule(BaseModule):
    """Class entry.

    Attributes:
        inheritance: Base class names
        interfaces: Implemented interface names
    """

    kind: ClassVar[ModuleKind] = ModuleKind.CLASS

    inheritance: tuple[str, ...] = ()
    interfaces: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class FunctionModule(BaseModule):
    """Function entry.

    Attributes:
        parameters: Declared parameters in order
        return_type: Declared return type, None if unspecified
        is_async: Coroutine function
    """

    kind: ClassVar[ModuleKind] = ModuleKind.FUNCTION

    parameters: tuple[Parameter, ...] = ()
    return_type: str | None = None
    is_async: bool = False

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        BaseModule.__post_init__(self)

        seen: set[str] = set()
        for param in self.parameters:
            if param.name in seen:
                raise ValueError(
                    f"function '{self.hierarchical_name}' has duplicate parameter '{param.name}'"
                )
            seen.add(param.name)


@dataclass(frozen=True, slots=True)
class VariableModule(BaseModule):
    """Variable entry.

    Attributes:
        data_type: Declared type
        initial_value: Initializer as source text
        is_constant: Never reassigned
    """

    kind: ClassVar[ModuleKind] = ModuleKind.VARIABLE

    data_type: str = "any"
    initial_value: str | None = None
    is_constant: bool = False


@dataclass(frozen=True, slots=True)
class FileModule(BaseModule):
    """Source file entry. No extra fields."""

    kind: ClassVar[ModuleKind] = ModuleKind.FILE


@dataclass(frozen=True, slots=True)
class FunctionGroupModule(BaseModule):
    """Named group of functions.

    Attributes:
        functions: Hierarchical names of member functions
    """

    kind: ClassVar[ModuleKind] = ModuleKind.FUNCTION_GROUP

    functions: tuple[str, ...] = ()


Module = ClassModule | FunctionModule | VariableModule | FileModule | FunctionGroupModule

MODULE_CLASSES: dict[ModuleKind, type[Module]] = {
    ModuleKind.CLASS: ClassModule,
    ModuleKind.FUNCTION: FunctionModule,
    ModuleKind.VARIABLE: VariableModule,
    ModuleKind.FILE: FileModule,
    ModuleKind.FUNCTION_GROUP: FunctionGroupModule,
}

# Fields every variant shares; anything else is variant-specific.
COMMON_FIELDS = frozenset(
    {
        "name",
        "hierarchical_name",
        "created_at",
        "updated_at",
        "parent",
        "description",
        "file_path",
        "access_modifier",
    }
)

VARIANT_FIELDS: dict[ModuleKind, frozenset[str]] = {
    ModuleKind.CLASS: frozenset({"inheritance", "interfaces"}),
    ModuleKind.FUNCTION: frozenset({"parameters", "return_type", "is_async"}),
    ModuleKind.VARIABLE: frozenset({"data_type", "initial_value", "is_constant"}),
    ModuleKind.FILE: frozenset(),
    ModuleKind.FUNCTION_GROUP: frozenset({"functions"}),
}


def get_module_kind(module: Module) -> ModuleKind:
    """Get ModuleKind for module.

    Exhaustive match on Module union.
    """
    match module:
        case ClassModule():
            return ModuleKind.CLASS
        case FunctionModule():
            return ModuleKind.FUNCTION
        case VariableModule():
            return ModuleKind.VARIABLE
        case FileModule():
            return ModuleKind.FILE
        case FunctionGroupModule():
            return ModuleKind.FUNCTION_GROUP


def type_references(module: Module) -> tuple[tuple[str, RelationshipType], ...]:
    """Type names this entry refers to, with the kind of reference.

    Classes refer through bases and interfaces, functions through return
    and parameter types, variables through their data type.
    """
    match module:
        case ClassModule(inheritance=bases, interfaces=interfaces):
            return tuple((b, RelationshipType.INHERITANCE) for b in bases) + tuple(
                (i, RelationshipType.INTERFACE) for i in interfaces
            )
        case FunctionModule(parameters=params, return_type=return_type):
            refs = [(p.data_type, RelationshipType.REFERENCE) for p in params]
            if return_type:
                refs.append((return_type, RelationshipType.REFERENCE))
            return tuple(refs)
        case VariableModule(data_type=data_type):
            return ((data_type, RelationshipType.REFERENCE),)
        case FileModule() | FunctionGroupModule():
            return ()


def references_type(module: Module, type_name: str) -> bool:
    """Check whether entry refers to type_name."""
    return any(ref == type_name for ref, _ in type_references(module))
