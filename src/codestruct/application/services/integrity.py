"""Consistency checks over the in-memory entry set."""

from __future__ import annotations

import dataclasses
import hashlib
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from codestruct.domain.exceptions import InvalidDepthError, InvalidNameError
from codestruct.domain.model.configuration import ValidationConfig
from codestruct.domain.model.enums import IssueSeverity, IssueType, ModuleKind
from codestruct.domain.model.integrity import IntegrityIssue, IntegrityReport
from codestruct.domain.model.module import FunctionGroupModule, get_module_kind
from codestruct.domain.naming import validate_hierarchical_name, validate_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from codestruct.domain.model.module import Module


def checksum(modules: Iterable[Module]) -> str:
    """sha256 over the canonical JSON of entries sorted by hierarchical name."""
    canonical = [
        {"type": get_module_kind(m).value, **dataclasses.asdict(m)}
        for m in sorted(modules, key=lambda m: m.hierarchical_name)
    ]
    payload = json.dumps(canonical, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(payload.encode()).hexdigest()


@dataclass(frozen=True, slots=True)
class IntegrityChecker:
    """Finds dangling parents, parent loops, invalid names and orphaned members.

    Attributes:
        validation: Naming limits used for invalid_data checks
    """

    validation: ValidationConfig = field(default_factory=ValidationConfig)

    def check(self, modules: Iterable[Module]) -> IntegrityReport:
        """Run every check.

        Args:
            modules: Entry set to examine

        Returns:
            IntegrityReport; checked_items = number of entries
        """
        by_name = {m.hierarchical_name: m for m in modules}
        issues: list[IntegrityIssue] = []
        issues.extend(self._invalid_data(by_name))
        issues.extend(self._missing_references(by_name))
        issues.extend(self._cycles(by_name))
        issues.extend(self._orphaned_members(by_name))
        return IntegrityReport(
            issues=tuple(issues),
            checked_items=len(by_name),
            checksum=checksum(by_name.values()),
        )

    def _invalid_data(self, by_name: Mapping[str, Module]) -> list[IntegrityIssue]:
        issues = []
        for hn, module in by_name.items():
            try:
                validate_name(module.name, max_length=self.validation.max_name_length)
                validate_hierarchical_name(
                    hn,
                    max_depth=self.validation.max_depth,
                    max_length=self.validation.max_name_length,
                )
            except (InvalidNameError, InvalidDepthError) as e:
                issues.append(
                    IntegrityIssue(
                        issue_type=IssueType.INVALID_DATA,
                        severity=IssueSeverity.CRITICAL,
                        description=str(e),
                        affected=(hn,),
                        suggested_fix="rename or move the module",
                    )
                )
        return issues

    def _missing_references(self, by_name: Mapping[str, Module]) -> list[IntegrityIssue]:
        return [
            IntegrityIssue(
                issue_type=IssueType.MISSING_REFERENCE,
                severity=IssueSeverity.HIGH,
                description=f"parent {m.parent!r} of {hn!r} does not exist",
                affected=(hn, m.parent),
                suggested_fix=f"create {m.parent!r} or clear the parent of {hn!r}",
            )
            for hn, m in by_name.items()
            if m.parent is not None and m.parent not in by_name
        ]

    def _cycles(self, by_name: Mapping[str, Module]) -> list[IntegrityIssue]:
        """Report each parent loop once, members in walk order."""
        issues = []
        seen: set[frozenset[str]] = set()
        for start in by_name:
            path: list[str] = []
            visited: set[str] = set()
            current: str | None = start
            while current is not None and current in by_name and current not in visited:
                visited.add(current)
                path.append(current)
                current = by_name[current].parent
            if current is None or current not in visited:
                continue

            loop = path[path.index(current) :]
            members = frozenset(loop)
            if members in seen:
                continue
            seen.add(members)
            issues.append(
                IntegrityIssue(
                    issue_type=IssueType.CIRCULAR_DEPENDENCY,
                    severity=IssueSeverity.CRITICAL,
                    description="parent chain loops: " + " -> ".join([*loop, loop[0]]),
                    affected=tuple(loop),
                    suggested_fix="clear the parent of one module in the loop",
                )
            )
        return issues

    def _orphaned_members(self, by_name: Mapping[str, Module]) -> list[IntegrityIssue]:
        functions = {
            name
            for hn, m in by_name.items()
            if get_module_kind(m) == ModuleKind.FUNCTION
            for name in (hn, m.name)
        }
        issues = []
        for hn, module in by_name.items():
            if not isinstance(module, FunctionGroupModule):
                continue
            missing = [f for f in module.functions if f not in functions]
            if missing:
                issues.append(
                    IntegrityIssue(
                        issue_type=IssueType.ORPHANED_DATA,
                        severity=IssueSeverity.MEDIUM,
                        description=(
                            f"function group {hn!r} lists unknown functions: {', '.join(missing)}"
                        ),
                        affected=(hn,),
                        suggested_fix="create the functions or remove them from the group",
                    )
                )
        return issues
