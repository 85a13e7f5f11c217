"""CORS response header checks."""

from __future__ import annotations

from sitegrade.headers import HeaderMap
from sitegrade.models import CheckStatus, SecurityCategory, SecurityCheck


def check_cors(headers: HeaderMap) -> SecurityCategory:
    origin = headers.get("access-control-allow-origin")
    credentials = headers.get("access-control-allow-credentials", "")
    wildcard = origin is not None and origin.strip() == "*"

    checks = [
        SecurityCheck(
            id="cors-origin",
            display_name="CORS Origin",
            localized_name="CORS: разрешённые источники",
            status=CheckStatus.FAIL if wildcard else CheckStatus.PASS,
            observed_value=origin if origin is not None else "Not set (denied by default)",
            description="Access-Control-Allow-Origin should name trusted origins, not '*'",
            weight=8,
        )
    ]

    if wildcard and credentials.strip().lower() == "true":
        checks.append(
            SecurityCheck(
                id="cors-credentials-wildcard",
                display_name="CORS Credentials + Wildcard",
                localized_name="CORS: credentials с wildcard",
                status=CheckStatus.FAIL,
                observed_value=(
                    "Access-Control-Allow-Origin: * with Access-Control-Allow-Credentials: true"
                ),
                description="Never combine a wildcard origin with credentialed requests",
                weight=10,
            )
        )

    return SecurityCategory.from_checks("CORS Configuration", "Настройки CORS", checks)
