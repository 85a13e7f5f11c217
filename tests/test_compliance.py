"""Tests for compliance catalog mapping."""

from sitegrade.analysis.compliance import (
    CATALOGS,
    FSTEK_21,
    GOST_57580,
    OWASP_TOP10,
    map_all,
    map_catalog,
    verdict,
)
from sitegrade.models import CheckStatus, ComplianceStatus, SecurityCategory, SecurityCheck


def _check(id: str, status: CheckStatus) -> SecurityCheck:
    return SecurityCheck(id=id, display_name=id, localized_name=id, status=status, weight=5)


def _entry(entries, requirement_id):
    return next(e for e in entries if e.requirement_id == requirement_id)


def test_verdict_rules():
    assert verdict([_check("a", CheckStatus.PASS), _check("b", CheckStatus.PASS)]) == (
        ComplianceStatus.COMPLIANT
    )
    assert verdict([_check("a", CheckStatus.FAIL), _check("b", CheckStatus.WARN)]) == (
        ComplianceStatus.NON_COMPLIANT
    )
    assert verdict([_check("a", CheckStatus.PASS), _check("b", CheckStatus.FAIL)]) == (
        ComplianceStatus.PARTIAL
    )
    assert verdict([]) == ComplianceStatus.PARTIAL


def test_info_counts_as_not_passing():
    assert verdict([_check("a", CheckStatus.INFO)]) == ComplianceStatus.NON_COMPLIANT


def test_unmeasured_requirements_are_partial():
    entries = map_catalog(OWASP_TOP10, [_check("hsts", CheckStatus.PASS)])
    a09 = _entry(entries, "A09")
    assert a09.status == ComplianceStatus.PARTIAL
    assert a09.related_check_ids == []

    fstek = map_catalog(FSTEK_21, [])
    assert _entry(fstek, "АНЗ.1").status == ComplianceStatus.PARTIAL
    assert _entry(fstek, "РСБ.1").status == ComplianceStatus.PARTIAL


def test_requirement_with_no_observed_checks_is_partial():
    # cookie checks are absent when a site sets no cookies
    entries = map_catalog(GOST_57580, [_check("cookie-none", CheckStatus.INFO)])
    assert _entry(entries, "ЗВК").status == ComplianceStatus.PARTIAL


def test_only_related_checks_considered():
    checks = [
        _check("tls-version", CheckStatus.PASS),
        _check("tls-cert-valid", CheckStatus.PASS),
        _check("hsts", CheckStatus.FAIL),
    ]
    fstek = map_catalog(FSTEK_21, checks)
    assert _entry(fstek, "ИАФ.6").status == ComplianceStatus.COMPLIANT
    assert _entry(fstek, "ЗИС.3").status == ComplianceStatus.PARTIAL


def test_map_all_covers_three_catalogs():
    category = SecurityCategory.from_checks(
        "CORS", "CORS", [_check("cors-origin", CheckStatus.FAIL)]
    )
    mapped = map_all([category])
    assert set(mapped) == set(CATALOGS) == {"owasp", "fstek", "gost"}
    assert len(mapped["owasp"]) == len(OWASP_TOP10)
    assert len(mapped["fstek"]) == len(FSTEK_21)
    assert len(mapped["gost"]) == len(GOST_57580)
    assert _entry(mapped["owasp"], "A01").status == ComplianceStatus.NON_COMPLIANT


def test_catalog_related_ids_are_known_checks():
    known = {
        "hsts", "x-frame-options", "x-content-type-options", "referrer-policy",
        "permissions-policy", "x-xss-protection", "csp-present", "csp-unsafe-inline",
        "csp-unsafe-eval", "csp-default-src", "cookie-secure", "cookie-httponly",
        "cookie-samesite", "cors-origin", "cors-credentials-wildcard", "tls-version",
        "tls-cert-valid", "tls-cert-expiry", "tls-cipher",
    }
    for catalog in CATALOGS.values():
        for req in catalog:
            assert set(req.related_check_ids) <= known
