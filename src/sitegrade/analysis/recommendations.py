"""Remediation items for every check that did not pass."""

from __future__ import annotations

from sitegrade.models import (
    CheckStatus,
    Priority,
    Recommendation,
    SecurityCategory,
    SecurityCheck,
)

DEFAULT_CITATION = "OWASP Top 10:2025"

CITATIONS: dict[str, str] = {
    "hsts": "ФСТЭК Приказ 21, ЗИС.3; ГОСТ Р 57580, ЗИ",
    "x-frame-options": "ФСТЭК Приказ 21, ЗИС.17; OWASP A01:2025",
    "x-content-type-options": "OWASP A05:2025; ФСТЭК Приказ 21, ЗИС.17",
    "referrer-policy": "OWASP A05:2025",
    "permissions-policy": "OWASP A05:2025",
    "csp-present": "ФСТЭК Приказ 21, ЗИС.17; ГОСТ Р 57580, СМЭ; OWASP A05:2025",
    "csp-unsafe-inline": "OWASP A03:2025; ФСТЭК ЗИС.17",
    "csp-unsafe-eval": "OWASP A03:2025; ФСТЭК ЗИС.17",
    "csp-default-src": "OWASP A05:2025; ФСТЭК ЗИС.17",
    "cookie-secure": "ФСТЭК Приказ 21, ЗИС.3; OWASP A02:2025",
    "cookie-httponly": "ФСТЭК Приказ 21, ЗИС.17; OWASP A07:2025",
    "cookie-samesite": "OWASP A01:2025; ГОСТ Р 57580",
    "tls-version": "ФСТЭК Приказ 21, ЗИС.3; ГОСТ Р 57580, ЗИ; OWASP A02:2025",
    "tls-cert-valid": "152-ФЗ; ФСТЭК Приказ 21, ИАФ.6",
    "tls-cert-expiry": "152-ФЗ; ФСТЭК Приказ 21, ИАФ.6",
    "tls-cipher": "ФСТЭК Приказ 21, ЗИС.3; OWASP A02:2025",
    "cors-origin": "OWASP A01:2025; A05:2025",
    "cors-credentials-wildcard": "OWASP A01:2025; A05:2025",
}


def citation_for(check_id: str) -> str:
    return CITATIONS.get(check_id, DEFAULT_CITATION)


def priority_for(check: SecurityCheck) -> Priority:
    if check.status == CheckStatus.FAIL:
        if check.weight >= 10:
            return Priority.CRITICAL
        if check.weight >= 5:
            return Priority.HIGH
    elif check.status == CheckStatus.WARN and check.weight >= 8:
        return Priority.HIGH
    return Priority.MEDIUM


def generate_recommendations(categories: list[SecurityCategory]) -> list[Recommendation]:
    recommendations = []
    for category in categories:
        for check in category.checks:
            if not check.status.needs_action:
                continue
            verb = "Fix" if check.status == CheckStatus.FAIL else "Improve"
            recommendations.append(
                Recommendation(
                    priority=priority_for(check),
                    title=f"{verb}: {check.display_name}",
                    description=check.description,
                    regulatory_citation=citation_for(check.id),
                    category=category.name,
                    check_id=check.id,
                )
            )
    # sorted() is stable: equal priorities keep check order
    return sorted(recommendations, key=lambda r: r.priority.rank)
