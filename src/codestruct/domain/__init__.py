"""codestruct domain layer.

Pure domain logic with no external dependencies.
Only imports: typing, abc, dataclasses, datetime, enum, pathlib, re, types, collections.abc
"""

from codestruct.domain.exceptions import (
    CatalogError,
    CircularReferenceError,
    CodestructError,
    ConfigError,
    ConflictError,
    DocumentValidationError,
    EntryNotFoundError,
    ErrorKind,
    HasChildrenError,
    ImmutableFieldError,
    InvalidDepthError,
    InvalidNameError,
    StorageIOError,
    UnsupportedTypeError,
)
from codestruct.domain.model import (
    AccessModifier,
    CatalogConfig,
    CreateRequest,
    Document,
    HierarchyGraph,
    Module,
    ModuleKind,
    OperationResult,
    Parameter,
    SearchCriteria,
    SearchResult,
)
from codestruct.domain.ports import ModuleStorePort

__all__ = [
    # Exceptions
    "CodestructError",
    "CatalogError",
    "ConfigError",
    "ErrorKind",
    "InvalidNameError",
    "InvalidDepthError",
    "ConflictError",
    "EntryNotFoundError",
    "CircularReferenceError",
    "HasChildrenError",
    "ImmutableFieldError",
    "UnsupportedTypeError",
    "DocumentValidationError",
    "StorageIOError",
    # Model
    "AccessModifier",
    "CatalogConfig",
    "CreateRequest",
    "Document",
    "HierarchyGraph",
    "Module",
    "ModuleKind",
    "OperationResult",
    "Parameter",
    "SearchCriteria",
    "SearchResult",
    # Ports
    "ModuleStorePort",
]
