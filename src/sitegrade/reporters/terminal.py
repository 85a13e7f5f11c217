"""Rich terminal reporter."""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from sitegrade.models import CheckStatus, ComplianceStatus, Grade, Priority, ScanResult

STATUS_COLORS = {
    CheckStatus.PASS: "green",
    CheckStatus.WARN: "yellow",
    CheckStatus.FAIL: "bold red",
    CheckStatus.INFO: "dim",
}

PRIORITY_COLORS = {
    Priority.CRITICAL: "bold red",
    Priority.HIGH: "red",
    Priority.MEDIUM: "yellow",
    Priority.LOW: "cyan",
}

COMPLIANCE_COLORS = {
    ComplianceStatus.COMPLIANT: "green",
    ComplianceStatus.PARTIAL: "yellow",
    ComplianceStatus.NON_COMPLIANT: "red",
}

GRADE_COLORS = {
    Grade.A: "bold green",
    Grade.B: "green",
    Grade.C: "yellow",
    Grade.D: "red",
    Grade.F: "bold red",
}


def render_terminal(result: ScanResult, console: Console) -> None:
    """Render scan results to terminal using Rich."""
    console.print()

    color = GRADE_COLORS[result.grade]
    console.print(Panel(
        f"[{color}]Grade {result.grade.value}[/]  "
        f"{result.overall_score:g}/{result.max_score:g} ({result.percentage:.0f}%)",
        title=f"[bold]Security Scan — {result.url}[/]",
        subtitle=f"{result.timestamp:%Y-%m-%d %H:%M UTC}",
    ))
    if result.blocked_redirect:
        console.print(f"[yellow]Redirect to {result.blocked_redirect} was not followed[/yellow]")

    table = Table(show_header=True, header_style="bold", expand=True)
    table.add_column("Category", ratio=2)
    table.add_column("Check", ratio=2)
    table.add_column("Status", width=6)
    table.add_column("Value", ratio=3)
    table.add_column("Weight", width=6, justify="right")

    for category in result.categories:
        for i, c in enumerate(category.checks):
            status_color = STATUS_COLORS[c.status]
            table.add_row(
                f"{category.name} ({category.score:g}/{category.max_score:g})" if i == 0 else "",
                c.display_name,
                f"[{status_color}]{c.status.value.upper()}[/]",
                c.observed_value[:80],
                f"{c.weight:g}",
            )
        table.add_section()

    console.print(table)

    if result.recommendations:
        recs = Table(show_header=True, header_style="bold", expand=True, title="Recommendations")
        recs.add_column("Priority", width=9)
        recs.add_column("Recommendation", ratio=3)
        recs.add_column("Reference", ratio=2)
        for r in result.recommendations:
            pc = PRIORITY_COLORS[r.priority]
            recs.add_row(f"[{pc}]{r.priority.value.upper()}[/]", r.title, r.regulatory_citation)
        console.print(recs)

    compliance = Table(show_header=True, header_style="bold", expand=True, title="Compliance")
    compliance.add_column("Catalog", width=8)
    compliance.add_column("Requirement", ratio=3)
    compliance.add_column("Status", width=14)
    for catalog, entries in (
        ("OWASP", result.owasp_mapping),
        ("FSTEK", result.fstek_mapping),
        ("GOST", result.gost_mapping),
    ):
        for e in entries:
            cc = COMPLIANCE_COLORS[e.status]
            compliance.add_row(catalog, e.requirement_label, f"[{cc}]{e.status.value}[/]")
    console.print(compliance)
