"""Value objects produced by a scan."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import assert_never

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ValueModel(BaseModel):
    """Immutable model serialised with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CheckStatus(StrEnum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"
    INFO = "info"

    @property
    def credit(self) -> float:
        """Fraction of a check's weight earned by this status."""
        match self:
            case CheckStatus.PASS:
                return 1.0
            case CheckStatus.WARN:
                return 0.5
            case CheckStatus.FAIL | CheckStatus.INFO:
                return 0.0
            case _:
                assert_never(self)

    @property
    def needs_action(self) -> bool:
        return self in (CheckStatus.FAIL, CheckStatus.WARN)


class ComplianceStatus(StrEnum):
    COMPLIANT = "compliant"
    PARTIAL = "partial"
    NON_COMPLIANT = "non_compliant"


class Priority(StrEnum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return {
            Priority.CRITICAL: 0,
            Priority.HIGH: 1,
            Priority.MEDIUM: 2,
            Priority.LOW: 3,
        }[self]


class Grade(StrEnum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class ScanTarget(ValueModel):
    """A URL that passed the SSRF guard."""

    url: str = Field(description="Canonical URL")
    scheme: str
    hostname: str
    port: int | None = None
    addresses: tuple[str, ...] = Field(
        default=(), description="Addresses the hostname resolved to at vetting time"
    )
    is_ip_literal: bool = False

    @property
    def is_https(self) -> bool:
        return self.scheme == "https"


class TlsFacts(ValueModel):
    """What a TLS handshake revealed about the server."""

    protocol_version: str = "none"
    cipher_name: str = "none"
    valid_cert: bool = False
    cert_expiry: datetime | None = Field(default=None, alias="certExpiryUTC")
    cert_issuer_org: str | None = None
    error: str | None = None

    @classmethod
    def unavailable(cls, reason: str) -> TlsFacts:
        return cls(error=reason)


class SecurityCheck(ValueModel):
    """A single observation with its scoring weight."""

    id: str
    display_name: str
    localized_name: str
    status: CheckStatus
    observed_value: str = ""
    description: str = ""
    weight: float = Field(default=0.0, ge=0.0)

    @property
    def earned(self) -> float:
        return self.weight * self.status.credit


class SecurityCategory(ValueModel):
    name: str
    localized_name: str
    checks: list[SecurityCheck] = Field(default_factory=list)
    score: float = 0.0
    max_score: float = 0.0

    @classmethod
    def from_checks(
        cls, name: str, localized_name: str, checks: list[SecurityCheck]
    ) -> SecurityCategory:
        return cls(
            name=name,
            localized_name=localized_name,
            checks=checks,
            score=sum(c.earned for c in checks),
            max_score=sum(c.weight for c in checks),
        )


class ComplianceEntry(ValueModel):
    requirement_id: str
    catalog_area: str
    requirement_label: str
    status: ComplianceStatus
    related_check_ids: list[str] = Field(default_factory=list)


class Recommendation(ValueModel):
    priority: Priority
    title: str
    description: str = ""
    regulatory_citation: str
    category: str
    check_id: str


class ScanResult(ValueModel):
    """Complete, serialisable outcome of one scan."""

    target: ScanTarget
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), alias="timestampUTC"
    )
    categories: list[SecurityCategory] = Field(default_factory=list)
    overall_score: float = 0.0
    max_score: float = 0.0
    grade: Grade = Grade.F
    recommendations: list[Recommendation] = Field(default_factory=list)
    owasp_mapping: list[ComplianceEntry] = Field(default_factory=list)
    fstek_mapping: list[ComplianceEntry] = Field(default_factory=list)
    gost_mapping: list[ComplianceEntry] = Field(default_factory=list)
    redirect_chain: list[str] = Field(default_factory=list)
    blocked_redirect: str | None = None

    @property
    def url(self) -> str:
        return self.target.url

    @property
    def percentage(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return self.overall_score / self.max_score * 100.0

    def all_checks(self) -> list[SecurityCheck]:
        return [check for category in self.categories for check in category.checks]

    def failed_checks(self) -> list[SecurityCheck]:
        return [c for c in self.all_checks() if c.status == CheckStatus.FAIL]
