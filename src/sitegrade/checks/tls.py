"""TLS configuration checks over facts gathered by the TLS inspector."""

from __future__ import annotations

from datetime import UTC, datetime

from sitegrade.models import CheckStatus, SecurityCategory, SecurityCheck, TlsFacts

EXPIRY_WARN_DAYS = 30
EXPIRY_FAIL_DAYS = 7


def days_until(expiry: datetime, now: datetime) -> int:
    return (expiry - now).days


def expiry_status(days_left: int) -> CheckStatus:
    if days_left > EXPIRY_WARN_DAYS:
        return CheckStatus.PASS
    if days_left > EXPIRY_FAIL_DAYS:
        return CheckStatus.WARN
    return CheckStatus.FAIL


def version_status(protocol: str) -> CheckStatus:
    if protocol == "TLSv1.3":
        return CheckStatus.PASS
    if protocol == "TLSv1.2":
        return CheckStatus.WARN
    return CheckStatus.FAIL


def check_tls(facts: TlsFacts, now: datetime | None = None) -> SecurityCategory:
    now = now or datetime.now(UTC)
    checks = [
        SecurityCheck(
            id="tls-version",
            display_name="TLS Version",
            localized_name="Версия TLS",
            status=version_status(facts.protocol_version),
            observed_value=facts.protocol_version,
            description=f"Negotiated {facts.protocol_version}; TLS 1.3 is recommended",
            weight=10,
        ),
        SecurityCheck(
            id="tls-cert-valid",
            display_name="Certificate valid",
            localized_name="Валидность сертификата",
            status=CheckStatus.PASS if facts.valid_cert else CheckStatus.FAIL,
            observed_value="Valid" if facts.valid_cert else "Invalid, untrusted or self-signed",
            description="The certificate should chain to a trusted CA and match the hostname",
            weight=10,
        ),
    ]

    if facts.cert_expiry is not None:
        days_left = days_until(facts.cert_expiry, now)
        checks.append(
            SecurityCheck(
                id="tls-cert-expiry",
                display_name="Certificate expiry",
                localized_name="Срок действия сертификата",
                status=expiry_status(days_left),
                observed_value=f"{days_left} days left ({facts.cert_expiry:%Y-%m-%d})",
                description=f"Certificate expires in {days_left} days; renew well before expiry",
                weight=5,
            )
        )

    has_cipher = facts.cipher_name not in ("", "none")
    checks.append(
        SecurityCheck(
            id="tls-cipher",
            display_name="Cipher suite",
            localized_name="Набор шифров",
            status=CheckStatus.PASS if has_cipher else CheckStatus.FAIL,
            observed_value=facts.cipher_name,
            description="A named cipher suite should be negotiated",
            weight=5,
        )
    )

    return SecurityCategory.from_checks("SSL/TLS Configuration", "Конфигурация SSL/TLS", checks)
