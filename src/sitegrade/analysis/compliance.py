"""Projection of check results onto compliance catalogs.

Each catalog is static data. A requirement's verdict depends only on the
checks listed as related to it: all passing is compliant, none passing is
non-compliant, anything else (including no related check observed) is partial.
"""

from __future__ import annotations

from dataclasses import dataclass

from sitegrade.models import (
    CheckStatus,
    ComplianceEntry,
    ComplianceStatus,
    SecurityCategory,
    SecurityCheck,
)


@dataclass(frozen=True)
class Requirement:
    id: str
    area: str
    label: str
    related_check_ids: tuple[str, ...] = ()


OWASP_TOP10: tuple[Requirement, ...] = (
    Requirement(
        "A01", "A01", "Broken Access Control",
        ("cors-origin", "cors-credentials-wildcard", "x-frame-options"),
    ),
    Requirement(
        "A02", "A02", "Cryptographic Failures",
        ("tls-version", "tls-cert-valid", "tls-cipher", "cookie-secure"),
    ),
    Requirement(
        "A05", "A05", "Security Misconfiguration",
        ("hsts", "x-content-type-options", "permissions-policy"),
    ),
    Requirement(
        "A07", "A07", "Authentication Failures",
        ("cookie-httponly", "cookie-samesite", "cookie-secure"),
    ),
    Requirement("A09", "A09", "Logging & Monitoring Failures"),
)

FSTEK_21: tuple[Requirement, ...] = (
    Requirement(
        "ИАФ.6", "ИАФ", "ИАФ.6 — Идентификация и аутентификация (сетевой уровень)",
        ("tls-version", "tls-cert-valid"),
    ),
    Requirement(
        "ЗИС.3", "ЗИС", "ЗИС.3 — Обеспечение защиты информации при передаче",
        ("hsts", "tls-version", "cookie-secure"),
    ),
    Requirement(
        "ЗИС.17", "ЗИС", "ЗИС.17 — Защита от XSS/Clickjacking",
        ("csp-present", "x-frame-options", "x-xss-protection"),
    ),
    Requirement("РСБ.1", "РСБ", "РСБ.1 — Определение событий безопасности"),
    Requirement("АНЗ.1", "АНЗ", "АНЗ.1 — Выявление уязвимостей"),
)

GOST_57580: tuple[Requirement, ...] = (
    Requirement(
        "СМЭ", "СМЭ", "Сетевой мониторинг и экранирование",
        ("csp-present", "cors-origin"),
    ),
    Requirement(
        "ЗИ", "ЗИ", "Защита информации при передаче",
        ("tls-version", "hsts", "cookie-secure"),
    ),
    Requirement(
        "ЗВК", "ЗВК", "Защита внутренних каналов",
        ("cookie-httponly", "cookie-samesite"),
    ),
)

CATALOGS: dict[str, tuple[Requirement, ...]] = {
    "owasp": OWASP_TOP10,
    "fstek": FSTEK_21,
    "gost": GOST_57580,
}


def verdict(related: list[SecurityCheck]) -> ComplianceStatus:
    if not related:
        return ComplianceStatus.PARTIAL
    passed = sum(1 for c in related if c.status == CheckStatus.PASS)
    if passed == len(related):
        return ComplianceStatus.COMPLIANT
    if passed == 0:
        return ComplianceStatus.NON_COMPLIANT
    return ComplianceStatus.PARTIAL


def map_catalog(
    catalog: tuple[Requirement, ...], checks: list[SecurityCheck]
) -> list[ComplianceEntry]:
    entries = []
    for req in catalog:
        related = [c for c in checks if c.id in req.related_check_ids]
        entries.append(
            ComplianceEntry(
                requirement_id=req.id,
                catalog_area=req.area,
                requirement_label=req.label,
                status=verdict(related),
                related_check_ids=list(req.related_check_ids),
            )
        )
    return entries


def map_all(categories: list[SecurityCategory]) -> dict[str, list[ComplianceEntry]]:
    """Map every catalog; keys match CATALOGS."""
    checks = [check for category in categories for check in category.checks]
    return {name: map_catalog(catalog, checks) for name, catalog in CATALOGS.items()}
