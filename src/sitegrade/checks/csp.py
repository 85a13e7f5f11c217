"""Content-Security-Policy analysis."""

from __future__ import annotations

from sitegrade.checks.base import ABSENT
from sitegrade.headers import HeaderMap
from sitegrade.models import CheckStatus, SecurityCategory, SecurityCheck


def directives(policy: str) -> dict[str, list[str]]:
    """Split a policy into ``{directive: [sources]}``; first occurrence wins."""
    parsed: dict[str, list[str]] = {}
    for chunk in policy.split(";"):
        tokens = chunk.split()
        if tokens:
            parsed.setdefault(tokens[0].lower(), tokens[1:])
    return parsed


def check_csp(headers: HeaderMap) -> SecurityCategory:
    policy = headers.get("content-security-policy")
    checks = [
        SecurityCheck(
            id="csp-present",
            display_name="CSP Present",
            localized_name="Наличие CSP",
            status=CheckStatus.PASS if policy else CheckStatus.FAIL,
            observed_value="Set" if policy else ABSENT,
            description=(
                "A Content-Security-Policy header should restrict script and resource origins"
            ),
            weight=10,
        )
    ]

    if policy:
        lowered = policy.lower()
        unsafe_inline = "'unsafe-inline'" in lowered
        unsafe_eval = "'unsafe-eval'" in lowered
        has_default = "default-src" in directives(policy)
        checks += [
            SecurityCheck(
                id="csp-unsafe-inline",
                display_name="No unsafe-inline",
                localized_name="Отсутствие unsafe-inline",
                status=CheckStatus.WARN if unsafe_inline else CheckStatus.PASS,
                observed_value="Contains 'unsafe-inline'" if unsafe_inline else "Not used",
                description="Avoid 'unsafe-inline'; it re-enables inline script injection",
                weight=8,
            ),
            SecurityCheck(
                id="csp-unsafe-eval",
                display_name="No unsafe-eval",
                localized_name="Отсутствие unsafe-eval",
                status=CheckStatus.FAIL if unsafe_eval else CheckStatus.PASS,
                observed_value="Contains 'unsafe-eval'" if unsafe_eval else "Not used",
                description="Remove 'unsafe-eval'; it lets injected strings run as code",
                weight=10,
            ),
            SecurityCheck(
                id="csp-default-src",
                display_name="default-src defined",
                localized_name="Определён default-src",
                status=CheckStatus.PASS if has_default else CheckStatus.WARN,
                observed_value="Defined" if has_default else ABSENT,
                description=(
                    "Define a default-src fallback for resource types not listed explicitly"
                ),
                weight=5,
            ),
        ]

    return SecurityCategory.from_checks(
        "Content Security Policy", "Политика безопасности контента (CSP)", checks
    )
