"""Set-Cookie attribute checks.

Attributes are matched as case-insensitive substrings of the raw header text,
so one flagged cookie among several is enough to pass.
"""

from __future__ import annotations

from sitegrade.headers import HeaderMap
from sitegrade.models import CheckStatus, SecurityCategory, SecurityCheck

SET = "Set"
MISSING = "Missing"


def check_cookies(headers: HeaderMap) -> SecurityCategory:
    raw = headers.get("set-cookie", "")
    if not raw:
        checks = [
            SecurityCheck(
                id="cookie-none",
                display_name="No cookies",
                localized_name="Cookies не обнаружены",
                status=CheckStatus.INFO,
                observed_value="No cookies set on the initial response",
                description="No Set-Cookie header was observed; nothing to evaluate",
                weight=0,
            )
        ]
        return SecurityCategory.from_checks("Cookie Security", "Безопасность Cookies", checks)

    lowered = raw.lower()
    secure = "secure" in lowered
    httponly = "httponly" in lowered
    samesite = "samesite" in lowered
    checks = [
        SecurityCheck(
            id="cookie-secure",
            display_name="Secure flag",
            localized_name="Флаг Secure",
            status=CheckStatus.PASS if secure else CheckStatus.FAIL,
            observed_value=SET if secure else MISSING,
            description="Cookies should carry the Secure flag so they are only sent over HTTPS",
            weight=8,
        ),
        SecurityCheck(
            id="cookie-httponly",
            display_name="HttpOnly flag",
            localized_name="Флаг HttpOnly",
            status=CheckStatus.PASS if httponly else CheckStatus.WARN,
            observed_value=SET if httponly else MISSING,
            description="Cookies should carry HttpOnly so scripts cannot read them",
            weight=8,
        ),
        SecurityCheck(
            id="cookie-samesite",
            display_name="SameSite attribute",
            localized_name="Атрибут SameSite",
            status=CheckStatus.PASS if samesite else CheckStatus.WARN,
            observed_value=SET if samesite else MISSING,
            description="Cookies should declare SameSite to limit cross-site request forgery",
            weight=5,
        ),
    ]
    return SecurityCategory.from_checks("Cookie Security", "Безопасность Cookies", checks)
