"""Refusals raised by the SSRF guard.

These are the only exceptions that abort a scan. Everything that can go wrong
after a target has been vetted is reported inside the ScanResult instead.
"""

from __future__ import annotations

from enum import StrEnum


class GuardRule(StrEnum):
    INVALID_URL = "invalid_url"
    SCHEME = "scheme"
    PORT = "port"
    LITERAL_HOST = "literal_host"
    OBFUSCATED_HOST = "obfuscated_host"
    DNS_PRIVATE = "dns_private"
    DNS_UNRESOLVED = "dns_unresolved"


class GuardError(ValueError):
    """The target was refused before any connection to it was made."""

    def __init__(self, rule: GuardRule, message: str, url: str = "") -> None:
        super().__init__(message)
        self.rule = rule
        self.message = message
        self.url = url

    def __str__(self) -> str:
        return f"{self.message} [{self.rule.value}]"


class UnsafeHostError(GuardError):
    """The hostname itself names a local or internal address."""


class DnsRebindingError(GuardError):
    """A public-looking hostname resolves to an internal address."""

    def __init__(self, message: str, url: str = "", address: str = "") -> None:
        super().__init__(GuardRule.DNS_PRIVATE, message, url)
        self.address = address


class DnsResolutionError(GuardError):
    """The hostname has no A/AAAA records and the guard fails closed."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(GuardRule.DNS_UNRESOLVED, message, url)
