"""Construct new entries and apply patches to existing ones."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from codestruct.domain.exceptions import DocumentValidationError, ImmutableFieldError
from codestruct.domain.model.enums import AccessModifier, ModuleKind
from codestruct.domain.model.module import (
    VARIANT_FIELDS,
    ClassModule,
    FileModule,
    FunctionGroupModule,
    FunctionModule,
    VariableModule,
    get_module_kind,
)
from codestruct.domain.model.parameter import Parameter

if TYPE_CHECKING:
    from datetime import datetime

    from codestruct.domain.model.module import Module
    from codestruct.domain.model.requests import CreateRequest

IMMUTABLE_FIELDS = frozenset({"name", "hierarchical_name", "type"})
PATCHABLE_COMMON_FIELDS = frozenset({"parent", "description", "file_path", "access_modifier"})


def build_module(request: CreateRequest, hierarchical_name: str, now: datetime) -> Module:
    """Build the variant named by request.type.

    Visibility and variant fields go through the same coercion as update
    patches, so enum values, list fields and parameter mappings are accepted.
    Fields of other variants are ignored.

    Raises:
        UnsupportedTypeError: request.type is not a ModuleKind
        DocumentValidationError: Field value of the wrong shape, or the
            entry violates its own invariants (e.g. duplicate parameters)
    """
    kind = ModuleKind.parse(request.type)
    raw = {"access_modifier": request.access_modifier}
    raw.update({key: getattr(request, key) for key in sorted(VARIANT_FIELDS[kind])})
    values = _coerce_fields(hierarchical_name, raw)

    common: dict[str, Any] = {
        "name": request.name,
        "hierarchical_name": hierarchical_name,
        "created_at": now,
        "updated_at": now,
        "parent": request.parent,
        "description": request.description,
        "file_path": request.file_path,
        "access_modifier": values.pop("access_modifier"),
    }

    try:
        match kind:
            case ModuleKind.CLASS:
                return ClassModule(**common, **values)
            case ModuleKind.FUNCTION:
                return FunctionModule(**common, **values)
            case ModuleKind.VARIABLE:
                return VariableModule(**common, **values)
            case ModuleKind.FILE:
                return FileModule(**common)
            case ModuleKind.FUNCTION_GROUP:
                return FunctionGroupModule(**common, **values)
    except ValueError as e:
        raise DocumentValidationError(hierarchical_name, [str(e)]) from e


def patchable_fields(kind: ModuleKind) -> frozenset[str]:
    """Fields an update may set for a variant."""
    return PATCHABLE_COMMON_FIELDS | VARIANT_FIELDS[kind]


def check_patch(module: Module, patch: Mapping[str, object]) -> None:
    """Reject patches touching identity or fields the variant lacks.

    Raises:
        ImmutableFieldError: name, hierarchical_name or type in patch
        DocumentValidationError: key not defined for the variant
    """
    immutable = IMMUTABLE_FIELDS & patch.keys()
    if immutable:
        raise ImmutableFieldError(sorted(immutable))

    kind = get_module_kind(module)
    unknown = sorted(set(patch) - patchable_fields(kind))
    if unknown:
        raise DocumentValidationError(
            module.hierarchical_name,
            [f"field {key!r} is not defined for {kind.value} modules" for key in unknown],
        )


def _coerce_parameter(value: object) -> Parameter:
    if isinstance(value, Parameter):
        return value
    if isinstance(value, Mapping):
        return Parameter(**value)
    raise TypeError(f"parameter must be Parameter or mapping, got {type(value).__name__}")


def _coerce_strings(value: object) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, list | tuple):
        raise TypeError(f"expected a list of strings, got {type(value).__name__}")
    return tuple(str(v) for v in value)


def _coerce(key: str, value: object) -> object:
    match key:
        case "access_modifier":
            return AccessModifier(value)
        case "parent" | "return_type" | "initial_value":
            return None if value is None or value == "" else str(value)
        case "inheritance" | "interfaces" | "functions":
            return _coerce_strings(value)
        case "parameters":
            if not isinstance(value, list | tuple):
                raise TypeError(f"parameters must be a list, got {type(value).__name__}")
            return tuple(_coerce_parameter(p) for p in value)
        case "is_async" | "is_constant":
            if not isinstance(value, bool):
                raise TypeError(f"expected a boolean, got {type(value).__name__}")
            return value
        case _:
            return "" if value is None else str(value)


def _coerce_fields(source: str, fields: Mapping[str, object]) -> dict[str, Any]:
    """Coerce every field; all shape errors are reported together."""
    errors: list[str] = []
    values: dict[str, Any] = {}
    for key, value in fields.items():
        try:
            values[key] = _coerce(key, value)
        except (TypeError, ValueError) as e:
            errors.append(f"{key}: {e}")
    if errors:
        raise DocumentValidationError(source, errors)
    return values


def apply_patch(module: Module, patch: Mapping[str, object], now: datetime) -> Module:
    """Merge patch into module and stamp updated_at.

    Args:
        module: Current entry
        patch: Field -> new value (already checked with check_patch)
        now: Modification time

    Returns:
        New entry; created_at and identity unchanged

    Raises:
        ImmutableFieldError: See check_patch
        DocumentValidationError: Unknown key or value of the wrong shape
    """
    check_patch(module, patch)
    changes = _coerce_fields(module.hierarchical_name, patch)

    try:
        return dataclasses.replace(module, **changes, updated_at=now)
    except ValueError as e:
        raise DocumentValidationError(module.hierarchical_name, [str(e)]) from e
