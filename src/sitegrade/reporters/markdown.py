"""Markdown report generator."""

from __future__ import annotations

from sitegrade.models import CheckStatus, ComplianceEntry, ScanResult

STATUS_MARK = {
    CheckStatus.PASS: "PASS",
    CheckStatus.WARN: "WARN",
    CheckStatus.FAIL: "FAIL",
    CheckStatus.INFO: "INFO",
}


def render_markdown(result: ScanResult) -> str:
    """Render scan results as Markdown."""
    lines: list[str] = []

    lines.append("# Website Security Report")
    lines.append("")
    lines.append(f"- **URL**: {result.url}")
    lines.append(f"- **Date**: {result.timestamp:%Y-%m-%d %H:%M UTC}")
    lines.append(
        f"- **Grade**: {result.grade.value} "
        f"({result.overall_score:g}/{result.max_score:g}, {result.percentage:.0f}%)"
    )
    if len(result.redirect_chain) > 1:
        lines.append(f"- **Redirects**: {' -> '.join(result.redirect_chain)}")
    if result.blocked_redirect:
        lines.append(f"- **Blocked redirect**: {result.blocked_redirect}")
    lines.append("")

    for category in result.categories:
        lines.append(f"## {category.name} ({category.score:g}/{category.max_score:g})")
        lines.append("")
        lines.append("| Status | Check | Value | Weight |")
        lines.append("|--------|-------|-------|-------:|")
        for c in category.checks:
            value = c.observed_value.replace("|", "\\|")[:60]
            lines.append(f"| {STATUS_MARK[c.status]} | {c.display_name} | {value} | {c.weight:g} |")
        lines.append("")

    if result.recommendations:
        lines.append("## Recommendations")
        lines.append("")
        lines.append("| Priority | Recommendation | Reference |")
        lines.append("|----------|----------------|-----------|")
        for r in result.recommendations:
            lines.append(f"| {r.priority.value.upper()} | {r.title} | {r.regulatory_citation} |")
        lines.append("")

    lines.append("## Compliance")
    lines.append("")
    _compliance_table(lines, "OWASP Top 10", result.owasp_mapping)
    _compliance_table(lines, "ФСТЭК Приказ 21", result.fstek_mapping)
    _compliance_table(lines, "ГОСТ Р 57580", result.gost_mapping)

    return "\n".join(lines)


def _compliance_table(lines: list[str], title: str, entries: list[ComplianceEntry]) -> None:
    lines.append(f"### {title}")
    lines.append("")
    lines.append("| Requirement | Status | Checks |")
    lines.append("|-------------|--------|--------|")
    for e in entries:
        checks = ", ".join(e.related_check_ids) or "-"
        lines.append(f"| {e.requirement_label} | {e.status.value} | {checks} |")
    lines.append("")
