"""JSON reporter: search results, integrity reports and operation results -> JSON string."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from codestruct.domain.serialization import module_to_dict

if TYPE_CHECKING:
    from codestruct.domain.model.integrity import IntegrityIssue, IntegrityReport
    from codestruct.domain.model.requests import SearchCriteria
    from codestruct.domain.model.results import OperationResult, SearchResult


class JsonReporter:
    """JSON reporter: outputs machine-readable JSON.

    Entries use the same field layout as the stored documents.
    """

    def __init__(self, *, indent: int | None = 2) -> None:
        """Initialize reporter.

        Args:
            indent: JSON indentation. None for compact output.
        """
        self._indent = indent

    def report_search(self, result: SearchResult) -> str:
        """Format one search page with pagination info."""
        data = {
            "query": _criteria_to_dict(result.query),
            "total": result.total,
            "page": result.page_number,
            "pages": result.page_count,
            "has_more": result.has_more,
            "modules": [module_to_dict(m) for m in result.modules],
        }
        return json.dumps(data, indent=self._indent)

    def report_integrity(self, report: IntegrityReport) -> str:
        """Format integrity report with per-severity summary."""
        by_severity: dict[str, int] = {}
        for issue in report.issues:
            by_severity[issue.severity.value] = by_severity.get(issue.severity.value, 0) + 1

        data = {
            "is_valid": report.is_valid,
            "checked_items": report.checked_items,
            "checksum": report.checksum,
            "summary": {"total": len(report.issues), "by_severity": by_severity},
            "issues": [_issue_to_dict(i) for i in report.issues],
        }
        return json.dumps(data, indent=self._indent)

    def report_operation(self, result: OperationResult) -> str:
        """Format operation outcome."""
        return json.dumps(result.to_dict(), indent=self._indent)


def _criteria_to_dict(criteria: SearchCriteria) -> dict[str, object]:
    """Convert SearchCriteria to dict, unset filters omitted."""
    filters = {
        "name": criteria.name,
        "type": None if criteria.type is None else criteria.type.value,
        "parent": criteria.parent,
        "file_path": criteria.file_path,
        "access_modifier": (
            None if criteria.access_modifier is None else criteria.access_modifier.value
        ),
        "description": criteria.description,
        "hierarchical_name": criteria.hierarchical_name,
    }
    data: dict[str, object] = {k: v for k, v in filters.items() if v is not None}
    data["limit"] = criteria.limit
    data["offset"] = criteria.offset
    return data


def _issue_to_dict(issue: IntegrityIssue) -> dict[str, object]:
    """Convert IntegrityIssue to dict."""
    return {
        "type": issue.issue_type.value,
        "severity": issue.severity.value,
        "description": issue.description,
        "affected": list(issue.affected),
        "suggested_fix": issue.suggested_fix,
    }
