"""Module <-> plain-data conversion.

Plain data is what YAML (and JSON) can hold: dicts, lists, str, int, bool,
None. Timestamps are written as ISO-8601 strings and read back from either
strings or the datetime objects YAML produces for unquoted timestamps.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from codestruct.domain.model.document import DOCUMENT_VERSION, Document, DocumentMetadata
from codestruct.domain.model.enums import AccessModifier, ModuleKind
from codestruct.domain.model.module import (
    ClassModule,
    FileModule,
    FunctionGroupModule,
    FunctionModule,
    Module,
    VariableModule,
    get_module_kind,
)
from codestruct.domain.model.parameter import Parameter

if TYPE_CHECKING:
    from collections.abc import Mapping

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Older documents used "parent_module" and "id"
LEGACY_PARENT_KEY = "parent_module"
LEGACY_ID_KEY = "id"


def format_timestamp(value: datetime) -> str:
    """ISO-8601 with offset, microsecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat(timespec="microseconds")


def parse_timestamp(value: object, default: datetime = EPOCH) -> datetime:
    """Parse ISO string or datetime; naive values are taken as UTC.

    Raises:
        ValueError: Unparseable string or unexpected type
    """
    if value is None or value == "":
        return default
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value)
    else:
        raise ValueError(f"timestamp must be string or datetime, got {type(value).__name__}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def parameter_to_dict(param: Parameter) -> dict[str, object]:
    """Convert Parameter to dict."""
    return {
        "name": param.name,
        "data_type": param.data_type,
        "default_value": param.default_value,
        "is_required": param.is_required,
        "description": param.description,
    }


def parameter_from_dict(raw: Mapping[str, Any]) -> Parameter:
    """Convert dict to Parameter."""
    default = raw.get("default_value")
    return Parameter(
        name=str(raw["name"]),
        data_type=str(raw.get("data_type") or "any"),
        default_value=None if default is None else str(default),
        is_required=bool(raw.get("is_required", True)),
        description=str(raw.get("description") or ""),
    )


def module_to_dict(module: Module) -> dict[str, object]:
    """Convert Module to dict in on-disk field order."""
    data: dict[str, object] = {
        "name": module.name,
        "hierarchical_name": module.hierarchical_name,
        "type": get_module_kind(module).value,
    }
    if module.parent is not None:
        data["parent"] = module.parent
    data["description"] = module.description
    data["file_path"] = module.file_path
    data["access_modifier"] = module.access_modifier.value
    data["created_at"] = format_timestamp(module.created_at)
    data["updated_at"] = format_timestamp(module.updated_at)

    match module:
        case ClassModule():
            data["inheritance"] = list(module.inheritance)
            data["interfaces"] = list(module.interfaces)
        case FunctionModule():
            data["parameters"] = [parameter_to_dict(p) for p in module.parameters]
            data["return_type"] = module.return_type
            data["is_async"] = module.is_async
        case VariableModule():
            data["data_type"] = module.data_type
            data["initial_value"] = module.initial_value
            data["is_constant"] = module.is_constant
        case FileModule():
            pass
        case FunctionGroupModule():
            data["functions"] = list(module.functions)
    return data


def _str_tuple(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, list | tuple):
        raise ValueError(f"expected a list of strings, got {type(value).__name__}")
    return tuple(str(v) for v in value)


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def module_from_dict(raw: Mapping[str, Any], key: str | None = None) -> Module:
    """Convert dict to Module.

    Args:
        raw: Entry mapping
        key: Document key, used when the entry lacks hierarchical_name

    Raises:
        UnsupportedTypeError: Unknown type tag
        KeyError: Required field missing
        ValueError: Field has wrong shape or breaks entity invariants
    """
    kind = ModuleKind.parse(raw["type"])
    name = str(raw["name"])
    hierarchical_name = str(raw.get("hierarchical_name") or key or name)
    parent = raw.get("parent", raw.get(LEGACY_PARENT_KEY)) or None
    created_at = parse_timestamp(raw.get("created_at"))
    common: dict[str, Any] = {
        "name": name,
        "hierarchical_name": hierarchical_name,
        "created_at": created_at,
        "updated_at": parse_timestamp(raw.get("updated_at"), default=created_at),
        "parent": None if parent is None else str(parent),
        "description": str(raw.get("description") or ""),
        "file_path": str(raw.get("file_path") or ""),
        "access_modifier": AccessModifier(raw.get("access_modifier") or "public"),
    }

    match kind:
        case ModuleKind.CLASS:
            return ClassModule(
                **common,
                inheritance=_str_tuple(raw.get("inheritance")),
                interfaces=_str_tuple(raw.get("interfaces")),
            )
        case ModuleKind.FUNCTION:
            return FunctionModule(
                **common,
                parameters=tuple(parameter_from_dict(p) for p in raw.get("parameters") or ()),
                return_type=_optional_str(raw.get("return_type")),
                is_async=bool(raw.get("is_async", False)),
            )
        case ModuleKind.VARIABLE:
            return VariableModule(
                **common,
                data_type=str(raw.get("data_type") or "any"),
                initial_value=_optional_str(raw.get("initial_value")),
                is_constant=bool(raw.get("is_constant", False)),
            )
        case ModuleKind.FILE:
            return FileModule(**common)
        case ModuleKind.FUNCTION_GROUP:
            return FunctionGroupModule(**common, functions=_str_tuple(raw.get("functions")))


def normalize_modules(raw_modules: object) -> dict[str, Any]:
    """Normalize array- or map-shaped `modules` to a map keyed by hierarchical name.

    Array entries are keyed by hierarchical_name, falling back to the legacy id.
    Map entries are re-keyed by their own hierarchical_name when present.
    Entries without any usable key are kept under a positional placeholder
    so validation can report them.

    Raises:
        ValueError: raw_modules is neither list nor mapping
    """
    if raw_modules is None:
        return {}

    normalized: dict[str, Any] = {}
    if isinstance(raw_modules, list):
        for index, entry in enumerate(raw_modules):
            key = None
            if isinstance(entry, dict):
                key = entry.get("hierarchical_name") or entry.get(LEGACY_ID_KEY)
            normalized[str(key) if key else f"#{index}"] = entry
        return normalized

    if isinstance(raw_modules, dict):
        for key, entry in raw_modules.items():
            own = entry.get("hierarchical_name") if isinstance(entry, dict) else None
            normalized[str(own or key)] = entry
        return normalized

    raise ValueError(f"modules must be a list or mapping, got {type(raw_modules).__name__}")


def metadata_to_dict(metadata: DocumentMetadata) -> dict[str, object]:
    """Convert DocumentMetadata to dict."""
    return {
        "version": metadata.version,
        "created_at": None if metadata.created_at is None else format_timestamp(metadata.created_at),
        "updated_at": None if metadata.updated_at is None else format_timestamp(metadata.updated_at),
        "total_modules": metadata.total_modules,
    }


def metadata_from_dict(raw: object) -> DocumentMetadata:
    """Convert dict to DocumentMetadata; missing or malformed header yields defaults."""
    if not isinstance(raw, dict):
        return DocumentMetadata()
    created = raw.get("created_at")
    updated = raw.get("updated_at")
    return DocumentMetadata(
        version=str(raw.get("version") or DOCUMENT_VERSION),
        created_at=None if created is None else parse_timestamp(created),
        updated_at=None if updated is None else parse_timestamp(updated),
        total_modules=int(raw.get("total_modules") or 0),
    )


def document_to_dict(document: Document) -> dict[str, object]:
    """Convert Document to on-disk dict."""
    return {
        "metadata": metadata_to_dict(document.metadata),
        "modules": {key: module_to_dict(m) for key, m in document.modules.items()},
    }
