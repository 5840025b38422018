"""Integrity check results."""

from __future__ import annotations

from dataclasses import dataclass

from codestruct.domain.model.enums import IssueSeverity, IssueType


@dataclass(frozen=True, slots=True)
class IntegrityIssue:
    """One consistency problem.

    Attributes:
        issue_type: Problem category
        severity: How bad it is
        description: Human-readable explanation
        affected: Hierarchical names or file paths involved
        suggested_fix: What an operator could do, None if unknown
    """

    issue_type: IssueType
    severity: IssueSeverity
    description: str
    affected: tuple[str, ...]
    suggested_fix: str | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.description:
            raise ValueError("description must not be empty")
        if not self.affected:
            raise ValueError("issue must name at least one affected item")

    def __str__(self) -> str:
        """Format as [SEVERITY] type: description."""
        return f"[{self.severity.name}] {self.issue_type.value}: {self.description}"


@dataclass(frozen=True, slots=True)
class IntegrityReport:
    """Aggregate result of an integrity check.

    Attributes:
        issues: All problems found
        checked_items: Entries (and files) examined
        checksum: sha256 of the canonical entry set
    """

    issues: tuple[IntegrityIssue, ...]
    checked_items: int
    checksum: str

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.checked_items < 0:
            raise ValueError(f"checked_items must be >= 0, got {self.checked_items}")

    @property
    def is_valid(self) -> bool:
        """No issues found."""
        return not self.issues

    def by_severity(self, severity: IssueSeverity) -> tuple[IntegrityIssue, ...]:
        """Issues of one severity."""
        return tuple(i for i in self.issues if i.severity == severity)

    def by_type(self, issue_type: IssueType) -> tuple[IntegrityIssue, ...]:
        """Issues of one category."""
        return tuple(i for i in self.issues if i.issue_type == issue_type)

    def merged_with(self, issues: tuple[IntegrityIssue, ...], checked: int) -> IntegrityReport:
        """Copy with extra issues and checked count added."""
        return IntegrityReport(
            issues=self.issues + issues,
            checked_items=self.checked_items + checked,
            checksum=self.checksum,
        )
