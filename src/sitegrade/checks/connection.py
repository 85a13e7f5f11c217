"""Synthetic category for a target that could not be fetched."""

from __future__ import annotations

from sitegrade.models import CheckStatus, SecurityCategory, SecurityCheck


def connection_failure(message: str) -> SecurityCategory:
    check = SecurityCheck(
        id="connection-error",
        display_name="Connection",
        localized_name="Подключение",
        status=CheckStatus.FAIL,
        observed_value=message,
        description=f"Failed to connect to the site: {message}",
        weight=10,
    )
    return SecurityCategory.from_checks("Connection", "Подключение", [check])
