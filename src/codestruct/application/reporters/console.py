"""Console reporter: search results and integrity reports -> rich formatted string."""

from __future__ import annotations

from dataclasses import dataclass
from io import StringIO
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from codestruct.domain.model.enums import IssueSeverity
from codestruct.domain.model.module import get_module_kind

if TYPE_CHECKING:
    from codestruct.domain.model.integrity import IntegrityReport
    from codestruct.domain.model.results import OperationResult, SearchResult

_SEVERITY_STYLE = {
    IssueSeverity.LOW: "dim",
    IssueSeverity.MEDIUM: "yellow",
    IssueSeverity.HIGH: "red",
    IssueSeverity.CRITICAL: "bold red",
}


@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    """Configuration for console reporter.

    All fields have defaults. Immutable (frozen dataclass).

    Attributes:
        width: Console width in characters.
        show_description: Add a description column to search tables.
        show_fixes: Show suggested fixes under integrity issues.
        min_severity: Hide issues below this severity. None = show all.
    """

    width: int = 120
    show_description: bool = True
    show_fixes: bool = True
    min_severity: IssueSeverity | None = None

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if self.width < 40:
            raise ValueError(f"width must be >= 40, got {self.width}")


class ConsoleReporter:
    """Console reporter: outputs rich formatted text.

    Output is str, not print(). Caller decides destination.
    """

    def __init__(self, config: ConsoleConfig | None = None) -> None:
        """Initialize reporter.

        Args:
            config: Reporter configuration. Uses defaults if None.
        """
        self._config = config or ConsoleConfig()

    def _console(self, output: StringIO) -> Console:
        return Console(file=output, force_terminal=True, width=self._config.width)

    def report_search(self, result: SearchResult) -> str:
        """Format one search page as a table.

        Args:
            result: Search page to format.

        Returns:
            Formatted string with header and table.
        """
        output = StringIO()
        console = self._console(output)

        console.print()
        console.rule("[bold]SEARCH RESULT[/bold]")
        console.print()
        console.print(
            f"[bold]Matches:[/bold] {result.total}  "
            f"[bold]Page:[/bold] {result.page_number}/{max(result.page_count, 1)}"
        )
        console.print()

        if not result.modules:
            console.print("[dim]No modules found.[/dim]")
            return output.getvalue()

        table = Table(show_header=True, header_style="bold")
        table.add_column("Hierarchical name", style="cyan")
        table.add_column("Type")
        table.add_column("Access")
        table.add_column("File")
        if self._config.show_description:
            table.add_column("Description", overflow="fold")

        for module in result.modules:
            row = [
                module.hierarchical_name,
                get_module_kind(module).value,
                module.access_modifier.value,
                escape(module.file_path) or "-",
            ]
            if self._config.show_description:
                row.append(escape(module.description))
            table.add_row(*row)

        console.print(table)
        if result.has_more:
            remaining = result.total - result.query.offset - len(result.modules)
            console.print(f"[dim]{remaining} more[/dim]")
        return output.getvalue()

    def report_integrity(self, report: IntegrityReport) -> str:
        """Format integrity report as summary plus issue table.

        Args:
            report: Integrity report to format.

        Returns:
            Formatted string with colors and tables.
        """
        output = StringIO()
        console = self._console(output)

        console.print()
        console.rule("[bold]INTEGRITY REPORT[/bold]")
        console.print()

        status = "[bold green]VALID[/bold green]" if report.is_valid else "[bold red]INVALID[/bold red]"
        console.print(
            f"{status}  [bold]Checked:[/bold] {report.checked_items}  "
            f"[bold]Issues:[/bold] {len(report.issues)}"
        )
        console.print(f"[dim]checksum {report.checksum}[/dim]")
        console.print()

        issues = report.issues
        if self._config.min_severity is not None:
            order = list(IssueSeverity)
            floor = order.index(self._config.min_severity)
            issues = tuple(i for i in issues if order.index(i.severity) >= floor)
        if not issues:
            return output.getvalue()

        table = Table(show_header=True, header_style="bold")
        table.add_column("Severity")
        table.add_column("Type")
        table.add_column("Affected", style="cyan")
        table.add_column("Description", overflow="fold")

        for issue in issues:
            style = _SEVERITY_STYLE[issue.severity]
            description = escape(issue.description)
            if self._config.show_fixes and issue.suggested_fix:
                description += f"\n[dim]fix: {escape(issue.suggested_fix)}[/dim]"
            table.add_row(
                f"[{style}]{issue.severity.name}[/{style}]",
                issue.issue_type.value,
                escape(", ".join(issue.affected)),
                description,
            )

        console.print(table)
        return output.getvalue()

    def report_operation(self, result: OperationResult) -> str:
        """Format operation outcome as one line."""
        output = StringIO()
        console = self._console(output)
        if result.success or result.error_kind is None:
            console.print(f"[green]OK[/green] {escape(result.message or result.value or '')}")
        else:
            kind = escape(f"[{result.error_kind.value}]")
            console.print(f"[red]FAILED[/red] {kind} {escape(result.message)}")
        return output.getvalue()
