from datetime import UTC, datetime

import pytest

from sitegrade.analysis.compliance import map_all
from sitegrade.analysis.recommendations import generate_recommendations
from sitegrade.analysis.scorer import summarize
from sitegrade.checks import check_tls, run_header_checks
from sitegrade.headers import HeaderMap
from sitegrade.models import ScanResult, ScanTarget, TlsFacts


def _make_result(headers=None, tls=None, **overrides) -> ScanResult:
    target = ScanTarget(
        url="https://example.com",
        scheme="https",
        hostname="example.com",
        addresses=("93.184.216.34",),
    )
    categories = run_header_checks(HeaderMap(headers or {}))
    categories.append(check_tls(tls or TlsFacts.unavailable("no handshake")))
    overall, maximum, grade = summarize(categories)
    mappings = map_all(categories)
    fields = dict(
        target=target,
        timestamp=datetime(2026, 1, 15, 12, 0, tzinfo=UTC),
        categories=categories,
        overall_score=overall,
        max_score=maximum,
        grade=grade,
        recommendations=generate_recommendations(categories),
        owasp_mapping=mappings["owasp"],
        fstek_mapping=mappings["fstek"],
        gost_mapping=mappings["gost"],
        redirect_chain=[target.url],
    )
    fields.update(overrides)
    return ScanResult(**fields)


@pytest.fixture
def make_result():
    return _make_result
