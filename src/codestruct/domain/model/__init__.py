"""Domain model: entities, value objects, and the hierarchy index."""

from codestruct.domain.model.configuration import (
    CacheConfig,
    CatalogConfig,
    StorageConfig,
    ValidationConfig,
)
from codestruct.domain.model.document import (
    BackupInfo,
    Document,
    DocumentMetadata,
    StorageStats,
)
from codestruct.domain.model.enums import (
    AccessModifier,
    IssueSeverity,
    IssueType,
    ModuleKind,
    RelationshipType,
)
from codestruct.domain.model.hierarchy import HierarchyGraph
from codestruct.domain.model.integrity import IntegrityIssue, IntegrityReport
from codestruct.domain.model.module import (
    MODULE_CLASSES,
    BaseModule,
    ClassModule,
    FileModule,
    FunctionGroupModule,
    FunctionModule,
    Module,
    VariableModule,
    get_module_kind,
    references_type,
    type_references,
)
from codestruct.domain.model.parameter import Parameter
from codestruct.domain.model.relationship import ModuleRelationship, Relationship, TypeStructure
from codestruct.domain.model.requests import CreateRequest, SearchCriteria
from codestruct.domain.model.results import OperationResult, SearchResult

__all__ = [
    # Entities
    "BaseModule",
    "ClassModule",
    "FunctionModule",
    "VariableModule",
    "FileModule",
    "FunctionGroupModule",
    "Module",
    "MODULE_CLASSES",
    "Parameter",
    "get_module_kind",
    "type_references",
    "references_type",
    # Enums
    "ModuleKind",
    "AccessModifier",
    "RelationshipType",
    "IssueType",
    "IssueSeverity",
    # Requests / results
    "CreateRequest",
    "SearchCriteria",
    "OperationResult",
    "SearchResult",
    "Relationship",
    "ModuleRelationship",
    "TypeStructure",
    # Persistence
    "Document",
    "DocumentMetadata",
    "BackupInfo",
    "StorageStats",
    # Integrity
    "IntegrityIssue",
    "IntegrityReport",
    # Index
    "HierarchyGraph",
    # Configuration
    "CatalogConfig",
    "StorageConfig",
    "CacheConfig",
    "ValidationConfig",
]
