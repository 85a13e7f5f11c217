"""Check registry: stateless analysers over headers and TLS facts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sitegrade.checks.connection import connection_failure
from sitegrade.checks.cookies import check_cookies
from sitegrade.checks.cors import check_cors
from sitegrade.checks.csp import check_csp
from sitegrade.checks.headers import check_http_headers
from sitegrade.checks.tls import check_tls

if TYPE_CHECKING:
    from sitegrade.checks.base import HeaderCheck
    from sitegrade.headers import HeaderMap
    from sitegrade.models import SecurityCategory

HEADER_CHECKS: dict[str, HeaderCheck] = {
    "headers": check_http_headers,
    "csp": check_csp,
    "cookies": check_cookies,
    "cors": check_cors,
}


def run_header_checks(headers: HeaderMap) -> list[SecurityCategory]:
    return [check(headers) for check in HEADER_CHECKS.values()]


__all__ = [
    "HEADER_CHECKS",
    "check_cookies",
    "check_cors",
    "check_csp",
    "check_http_headers",
    "check_tls",
    "connection_failure",
    "run_header_checks",
]
