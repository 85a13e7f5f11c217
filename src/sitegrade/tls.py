"""Raw TLS handshake inspection.

The inspector first connects with full certificate verification. Only when
verification itself fails does it reconnect without verification, and only to
read protocol, cipher and certificate metadata for the report. Facts from that
second handshake always carry ``valid_cert=False``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import ssl

from cryptography import x509
from cryptography.x509.oid import NameOID

from sitegrade.models import TlsFacts

logger = logging.getLogger(__name__)

TLS_PORT = 443
DEFAULT_TIMEOUT = 10.0
DEFAULT_FALLBACK_TIMEOUT = 5.0


async def inspect_tls(
    hostname: str,
    *,
    port: int = TLS_PORT,
    timeout: float = DEFAULT_TIMEOUT,
    fallback_timeout: float = DEFAULT_FALLBACK_TIMEOUT,
) -> TlsFacts:
    """Handshake with ``hostname:port`` and report what was negotiated.

    Never raises for network or TLS problems; returns
    ``TlsFacts.unavailable(...)`` instead.
    """
    try:
        return await _handshake(hostname, port, ssl.create_default_context(), timeout)
    except ssl.SSLCertVerificationError as exc:
        logger.info("Certificate for %s failed verification: %s", hostname, exc)
        try:
            return await _diagnostic_handshake(hostname, port, fallback_timeout)
        except (OSError, TimeoutError) as fallback_exc:
            logger.warning("Diagnostic TLS handshake with %s failed: %s", hostname, fallback_exc)
            return TlsFacts.unavailable(f"TLS handshake failed: {fallback_exc}")
    except (OSError, TimeoutError) as exc:
        logger.warning("TLS handshake with %s failed: %r", hostname, exc)
        return TlsFacts.unavailable(f"TLS handshake failed: {exc!r}")


async def _handshake(
    hostname: str, port: int, context: ssl.SSLContext, timeout: float
) -> TlsFacts:
    async with asyncio.timeout(timeout):
        _, writer = await asyncio.open_connection(
            hostname, port, ssl=context, server_hostname=hostname
        )
    try:
        ssl_object = writer.get_extra_info("ssl_object")
        cipher = ssl_object.cipher()
        return facts_from_certificate(
            protocol=ssl_object.version(),
            cipher=cipher[0] if cipher else None,
            der=ssl_object.getpeercert(binary_form=True),
            valid_cert=context.verify_mode == ssl.CERT_REQUIRED,
        )
    finally:
        writer.close()
        with contextlib.suppress(OSError, TimeoutError):
            async with asyncio.timeout(1.0):
                await writer.wait_closed()


async def _diagnostic_handshake(hostname: str, port: int, timeout: float) -> TlsFacts:
    # Unverified: the result must never be read as a trust signal.
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    facts = await _handshake(hostname, port, context, timeout)
    return facts.model_copy(update={"valid_cert": False})


def facts_from_certificate(
    *,
    protocol: str | None,
    cipher: str | None,
    der: bytes | None,
    valid_cert: bool,
) -> TlsFacts:
    """Build TlsFacts from handshake output and a DER-encoded certificate."""
    expiry = None
    issuer_org = None
    if der:
        try:
            cert = x509.load_der_x509_certificate(der)
        except ValueError as exc:
            logger.debug("Could not parse peer certificate: %s", exc)
        else:
            expiry = cert.not_valid_after_utc
            orgs = cert.issuer.get_attributes_for_oid(NameOID.ORGANIZATION_NAME)
            if orgs:
                issuer_org = str(orgs[0].value)

    return TlsFacts(
        protocol_version=protocol or "none",
        cipher_name=cipher or "none",
        valid_cert=valid_cert,
        cert_expiry=expiry,
        cert_issuer_org=issuer_org,
    )
