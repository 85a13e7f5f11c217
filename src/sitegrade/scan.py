"""Scan pipeline: guard, concurrent fetch and TLS inspection, analysis."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from urllib.parse import urljoin

from sitegrade.analysis.compliance import map_all
from sitegrade.analysis.recommendations import generate_recommendations
from sitegrade.analysis.scorer import summarize
from sitegrade.audit import AuditSink, notify_scan_completed
from sitegrade.checks import check_tls, connection_failure, run_header_checks
from sitegrade.config import ScanConfig
from sitegrade.fetcher import FetchError, FetchErrorKind, HeaderResponse, fetch_headers
from sitegrade.guard import guard_url, normalize_and_guard
from sitegrade.models import ScanResult, ScanTarget, SecurityCategory, TlsFacts
from sitegrade.tls import inspect_tls

logger = logging.getLogger(__name__)


@dataclass
class _FetchOutcome:
    response: HeaderResponse | FetchError
    chain: list[str] = field(default_factory=list)
    blocked_redirect: str | None = None


async def run_security_scan(
    url: str,
    config: ScanConfig | None = None,
    *,
    audit_sink: AuditSink | None = None,
) -> ScanResult:
    """Scan ``url`` and return a graded result.

    Raises GuardError when the target is refused. Network failures after
    that point are reported inside the result.
    """
    cfg = config or ScanConfig()
    logger.info("Starting scan for %s", url)

    target = await normalize_and_guard(url, fail_closed=cfg.fail_closed)

    fetch_task = asyncio.create_task(_fetch_with_redirects(target, cfg))
    tls_task = None
    if target.is_https:
        tls_task = asyncio.create_task(
            inspect_tls(
                target.hostname,
                timeout=cfg.tls_timeout,
                fallback_timeout=cfg.tls_fallback_timeout,
            )
        )

    tasks = [t for t in (fetch_task, tls_task) if t is not None]
    try:
        _, pending = await asyncio.wait(tasks, timeout=cfg.deadline)
    finally:
        # Also reached when the caller cancels the scan mid-wait.
        await _cancel_unfinished(tasks)
    if pending:
        logger.warning("Scan deadline of %gs exceeded for %s", cfg.deadline, target.url)
    deadline_message = f"Scan deadline of {cfg.deadline:g}s exceeded"

    if fetch_task in pending:
        outcome = _FetchOutcome(
            FetchError(FetchErrorKind.TIMEOUT, deadline_message), chain=[target.url]
        )
    else:
        outcome = fetch_task.result()

    categories: list[SecurityCategory] = []
    if isinstance(outcome.response, FetchError):
        categories.append(connection_failure(outcome.response.message))
    else:
        categories.extend(run_header_checks(outcome.response.headers))

    if tls_task is not None:
        if tls_task in pending:
            facts = TlsFacts.unavailable(deadline_message)
        else:
            facts = tls_task.result()
        categories.append(check_tls(facts))

    overall, maximum, grade = summarize(categories)
    mappings = map_all(categories)

    result = ScanResult(
        target=target,
        categories=categories,
        overall_score=overall,
        max_score=maximum,
        grade=grade,
        recommendations=generate_recommendations(categories),
        owasp_mapping=mappings["owasp"],
        fstek_mapping=mappings["fstek"],
        gost_mapping=mappings["gost"],
        redirect_chain=outcome.chain,
        blocked_redirect=outcome.blocked_redirect,
    )

    notify_scan_completed(result, audit_sink)
    logger.info(
        "Scan completed for %s: %s (%g/%g)", target.url, grade.value, overall, maximum
    )
    return result


async def _cancel_unfinished(tasks: list[asyncio.Task]) -> None:
    for task in tasks:
        if not task.done():
            task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


async def _fetch_with_redirects(target: ScanTarget, cfg: ScanConfig) -> _FetchOutcome:
    """Fetch ``target``, re-vetting every redirect hop with the guard."""
    current = target
    outcome = _FetchOutcome(
        await fetch_headers(current, timeout=cfg.timeout, user_agent=cfg.user_agent),
        chain=[current.url],
    )

    while (
        isinstance(outcome.response, HeaderResponse)
        and outcome.response.redirect_location
        and len(outcome.chain) <= cfg.max_redirects
    ):
        location = outcome.response.redirect_location
        try:
            next_url = urljoin(current.url, location)
        except ValueError as exc:
            logger.warning("Not following malformed redirect %r: %s", location, exc)
            outcome.blocked_redirect = location
            break
        if next_url.rstrip("/") in {u.rstrip("/") for u in outcome.chain}:
            logger.info("Redirect loop at %s, stopping", next_url)
            break
        try:
            current = await guard_url(next_url, fail_closed=cfg.fail_closed)
        except ValueError as exc:
            # GuardError subclasses ValueError
            logger.warning("Not following redirect to %s: %s", next_url, exc)
            outcome.blocked_redirect = next_url
            break
        outcome.chain.append(current.url)
        outcome.response = await fetch_headers(
            current, timeout=cfg.timeout, user_agent=cfg.user_agent
        )

    return outcome
