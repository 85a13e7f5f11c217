"""URL normalisation and SSRF guard.

Every URL is vetted twice: once textually (scheme, port, literal host) and once
after DNS resolution, so that a public-looking hostname pointing at an internal
address is refused as well.
"""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import re
from collections.abc import Awaitable, Callable
from urllib.parse import urlsplit

import dns.asyncresolver
import dns.exception

from sitegrade.errors import (
    DnsRebindingError,
    DnsResolutionError,
    GuardError,
    GuardRule,
    UnsafeHostError,
)
from sitegrade.models import ScanTarget

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})
ALLOWED_PORTS = frozenset({80, 443, 8080, 8443})

BLOCKED_NETWORKS = (
    ipaddress.ip_network("0.0.0.0/8"),        # "This" network
    ipaddress.ip_network("10.0.0.0/8"),       # Private (RFC 1918)
    ipaddress.ip_network("100.64.0.0/10"),    # Carrier-grade NAT
    ipaddress.ip_network("127.0.0.0/8"),      # Loopback
    ipaddress.ip_network("169.254.0.0/16"),   # Link-local / cloud metadata
    ipaddress.ip_network("172.16.0.0/12"),    # Private (RFC 1918)
    ipaddress.ip_network("192.168.0.0/16"),   # Private (RFC 1918)
    ipaddress.ip_network("::/128"),           # Unspecified
    ipaddress.ip_network("::1/128"),          # Loopback
    ipaddress.ip_network("fc00::/7"),         # Unique local
    ipaddress.ip_network("fe80::/10"),        # Link-local
)

DNS_TIMEOUT = 5.0

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://")
_NUMERIC_LABEL_RE = re.compile(r"^(0x[0-9a-f]*|[0-9]+)$")

Resolver = Callable[[str], Awaitable[list[str]]]


def normalize_url(raw: str) -> str:
    """Canonicalise user input into a URL string."""
    url = raw.strip().lower()
    if not _SCHEME_RE.match(url):
        url = "https://" + url
    scheme, rest = url.split("://", 1)
    rest = rest.removeprefix("www.")
    return f"{scheme}://{rest}".removesuffix("/")


def extract_domain(url: str) -> str:
    """Return the bare hostname of a URL, or "" when it has none."""
    try:
        return urlsplit(normalize_url(url)).hostname or ""
    except ValueError:
        return ""


def is_private_address(value: str) -> bool:
    """True when ``value`` is an IP address inside a blocked range."""
    try:
        addr = ipaddress.ip_address(value)
    except ValueError:
        return False
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        addr = addr.ipv4_mapped
    return any(addr in network for network in BLOCKED_NETWORKS)


def is_unsafe_host(hostname: str) -> bool:
    """Textual check only; does not resolve."""
    try:
        _check_literal_host(hostname, hostname)
    except GuardError:
        return True
    return False


async def resolve_addresses(hostname: str) -> list[str]:
    """Resolve A and AAAA records; lookup failures count as no answer."""
    resolver = dns.asyncresolver.Resolver()
    resolver.lifetime = DNS_TIMEOUT

    async def _query(rtype: str) -> list[str]:
        try:
            answer = await resolver.resolve(hostname, rtype)
        except dns.exception.DNSException as exc:
            logger.debug("DNS %s lookup for %s failed: %s", rtype, hostname, exc)
            return []
        return [rdata.to_text() for rdata in answer]

    v4, v6 = await asyncio.gather(_query("A"), _query("AAAA"))
    return v4 + v6


async def normalize_and_guard(
    raw: str,
    *,
    fail_closed: bool = True,
    resolver: Resolver | None = None,
) -> ScanTarget:
    """Turn raw input into a vetted ScanTarget or raise GuardError.

    ``fail_closed`` (default True) refuses hostnames that resolve to nothing.
    ``resolver`` replaces the DNS lookup, mainly for tests.
    """
    return await guard_url(normalize_url(raw), fail_closed=fail_closed, resolver=resolver)


async def guard_url(
    url: str,
    *,
    fail_closed: bool = True,
    resolver: Resolver | None = None,
) -> ScanTarget:
    """Vet an already-canonical URL, e.g. a redirect target."""
    try:
        parts = urlsplit(url)
    except ValueError:
        raise GuardError(GuardRule.INVALID_URL, "Malformed URL", url) from None

    if parts.scheme not in ALLOWED_SCHEMES:
        raise GuardError(GuardRule.SCHEME, "Only http and https URLs are allowed", url)
    if parts.username is not None or parts.password is not None:
        raise GuardError(
            GuardRule.INVALID_URL, "URLs with embedded credentials are not allowed", url
        )
    try:
        port = parts.port
    except ValueError:
        raise GuardError(GuardRule.INVALID_URL, "Invalid port in URL", url) from None
    if port is not None and port not in ALLOWED_PORTS:
        raise GuardError(GuardRule.PORT, f"Non-standard port {port} is not allowed", url)

    hostname = parts.hostname
    if not hostname:
        raise GuardError(GuardRule.INVALID_URL, "URL has no hostname", url)

    try:
        literal = _check_literal_host(hostname, url)
    except GuardError as exc:
        logger.warning("Refusing %s: %s", url, exc.message)
        raise
    if literal is not None:
        return ScanTarget(
            url=url,
            scheme=parts.scheme,
            hostname=hostname,
            port=port,
            addresses=(literal,),
            is_ip_literal=True,
        )

    addresses = await (resolver or resolve_addresses)(hostname)
    if not addresses:
        if fail_closed:
            logger.warning("Refusing %s: hostname does not resolve", url)
            raise DnsResolutionError(f"DNS resolution failed for {hostname}", url)
        logger.warning("No DNS answers for %s, continuing (fail_closed disabled)", hostname)

    for address in addresses:
        if is_private_address(address):
            logger.warning("Refusing %s: %s resolves to %s", url, hostname, address)
            raise DnsRebindingError(
                f"DNS for {hostname} resolves to internal address {address}",
                url,
                address=address,
            )

    return ScanTarget(
        url=url,
        scheme=parts.scheme,
        hostname=hostname,
        port=port,
        addresses=tuple(addresses),
    )


def _check_literal_host(hostname: str, url: str) -> str | None:
    """Refuse local names and private IP literals without logging.

    Returns the address when the hostname is a public IP literal, else None.
    """
    host = hostname.strip("[]").lower().rstrip(".")

    if host == "localhost" or host.endswith(".localhost"):
        raise UnsafeHostError(
            GuardRule.LITERAL_HOST, "Internal/local address forbidden", url
        )

    try:
        addr = ipaddress.ip_address(host)
    except ValueError:
        addr = None

    if addr is not None:
        if is_private_address(host):
            raise UnsafeHostError(
                GuardRule.LITERAL_HOST, "Internal/local address forbidden", url
            )
        return str(addr)

    labels = host.split(".")
    if all(_NUMERIC_LABEL_RE.match(label) for label in labels):
        raise UnsafeHostError(
            GuardRule.OBFUSCATED_HOST,
            "Numeric or hex-encoded hostnames are forbidden",
            url,
        )

    return None
