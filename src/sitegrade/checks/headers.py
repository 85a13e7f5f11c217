"""HTTP security response headers."""

from __future__ import annotations

import re

from sitegrade.checks.base import ABSENT
from sitegrade.headers import HeaderMap
from sitegrade.models import CheckStatus, SecurityCategory, SecurityCheck

HSTS_MIN_MAX_AGE = 31536000  # one year

_MAX_AGE_RE = re.compile(r"max-age\s*=\s*\"?(\d+)", re.IGNORECASE)


def hsts_max_age(value: str) -> int | None:
    match = _MAX_AGE_RE.search(value)
    return int(match.group(1)) if match else None


def check_http_headers(headers: HeaderMap) -> SecurityCategory:
    checks = [
        _hsts(headers.get("strict-transport-security")),
        SecurityCheck(
            id="x-frame-options",
            display_name="X-Frame-Options",
            localized_name="Защита от Clickjacking",
            status=CheckStatus.PASS if "x-frame-options" in headers else CheckStatus.WARN,
            observed_value=headers.get("x-frame-options", ABSENT),
            description="Prevents the page from being framed by other sites (clickjacking)",
            weight=5,
        ),
        _content_type_options(headers.get("x-content-type-options")),
        SecurityCheck(
            id="referrer-policy",
            display_name="Referrer-Policy",
            localized_name="Политика реферера",
            status=CheckStatus.PASS if "referrer-policy" in headers else CheckStatus.WARN,
            observed_value=headers.get("referrer-policy", ABSENT),
            description="Controls how much referrer information is sent with requests",
            weight=3,
        ),
        _optional(
            headers.get("permissions-policy") or headers.get("feature-policy"),
            id="permissions-policy",
            display_name="Permissions-Policy",
            localized_name="Политика разрешений",
            description="Restricts browser features such as camera and microphone",
            weight=3,
        ),
        _optional(
            headers.get("x-xss-protection"),
            id="x-xss-protection",
            display_name="X-XSS-Protection",
            localized_name="Защита от XSS",
            description="Legacy browser XSS filter",
            weight=2,
        ),
    ]
    return SecurityCategory.from_checks("HTTP Headers", "HTTP-заголовки безопасности", checks)


def _hsts(value: str | None) -> SecurityCheck:
    if value is None:
        status = CheckStatus.FAIL
    else:
        max_age = hsts_max_age(value) or 0
        if max_age >= HSTS_MIN_MAX_AGE:
            status = CheckStatus.PASS
        elif max_age > 0:
            status = CheckStatus.WARN
        else:
            # max-age=0 tells browsers to forget the policy
            status = CheckStatus.FAIL
    return SecurityCheck(
        id="hsts",
        display_name="HSTS",
        localized_name="HTTP Strict Transport Security",
        status=status,
        observed_value=value or ABSENT,
        description=(
            "Strict-Transport-Security should be set with max-age of at least "
            f"{HSTS_MIN_MAX_AGE} seconds"
        ),
        weight=10,
    )


def _content_type_options(value: str | None) -> SecurityCheck:
    return SecurityCheck(
        id="x-content-type-options",
        display_name="X-Content-Type-Options",
        localized_name="Запрет MIME-сниффинга",
        status=(
            CheckStatus.PASS
            if value == "nosniff"
            else CheckStatus.FAIL
        ),
        observed_value=value or ABSENT,
        description="Must be 'nosniff' to stop browsers guessing content types",
        weight=5,
    )


def _optional(value: str | None, *, weight: float, **fields: str) -> SecurityCheck:
    """Headers that earn credit when present and cost nothing when absent."""
    if value is None:
        return SecurityCheck(
            status=CheckStatus.INFO, observed_value=ABSENT, weight=0, **fields
        )
    return SecurityCheck(status=CheckStatus.PASS, observed_value=value, weight=weight, **fields)
