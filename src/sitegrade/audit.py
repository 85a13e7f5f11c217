"""One-way scan completion notifications for security auditing."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from pydantic import BaseModel

from sitegrade.models import CheckStatus, ScanResult

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("sitegrade.audit.events")


class ScanAuditEvent(BaseModel):
    action: str = "security_scan_completed"
    url: str
    grade: str
    score: float
    max_score: float
    checks_total: int
    failed_checks: int

    @classmethod
    def from_result(cls, result: ScanResult) -> ScanAuditEvent:
        checks = result.all_checks()
        return cls(
            url=result.url,
            grade=result.grade.value,
            score=result.overall_score,
            max_score=result.max_score,
            checks_total=len(checks),
            failed_checks=sum(1 for c in checks if c.status == CheckStatus.FAIL),
        )


AuditSink = Callable[[ScanAuditEvent], None]


def log_sink(event: ScanAuditEvent) -> None:
    audit_logger.info(json.dumps(event.model_dump(), ensure_ascii=False, sort_keys=True))


def notify_scan_completed(result: ScanResult, sink: AuditSink | None = None) -> None:
    """Hand a summary of ``result`` to the audit sink; failures are only logged."""
    event = ScanAuditEvent.from_result(result)
    try:
        (sink or log_sink)(event)
    except Exception:
        logger.exception("Audit sink failed for %s", event.url)
