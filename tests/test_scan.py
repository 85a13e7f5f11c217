"""End-to-end scan pipeline tests with the network replaced by fakes."""

import asyncio
from datetime import UTC, datetime, timedelta

import pytest

from sitegrade import guard, scan
from sitegrade.config import ScanConfig
from sitegrade.errors import DnsRebindingError, GuardError, GuardRule
from sitegrade.fetcher import FetchError, FetchErrorKind, HeaderResponse
from sitegrade.headers import HeaderMap
from sitegrade.models import CheckStatus, ComplianceStatus, Grade, TlsFacts
from sitegrade.scan import run_security_scan

HARDENED = {
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains",
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=()",
    "X-XSS-Protection": "0",
    "Content-Security-Policy": "default-src 'self'",
    "Set-Cookie": "sid=1; Secure; HttpOnly; SameSite=Strict",
}

GOOD_TLS = TlsFacts(
    protocol_version="TLSv1.3",
    cipher_name="TLS_AES_256_GCM_SHA384",
    valid_cert=True,
    cert_expiry=datetime.now(UTC) + timedelta(days=200),
    cert_issuer_org="Test CA",
)


def _response(status=200, headers=None, location=None):
    return HeaderResponse(
        status_code=status,
        headers=HeaderMap(headers or {}),
        redirect_location=location,
    )


class FakeNetwork:
    """Stands in for DNS, the header fetcher and the TLS inspector."""

    def __init__(self, monkeypatch, *, dns=None, responses=None, tls=GOOD_TLS):
        self.dns = dns if dns is not None else {"example.com": ["93.184.216.34"]}
        self.responses = responses or {}
        self.tls = tls
        self.fetched: list[str] = []
        self.inspected: list[str] = []
        monkeypatch.setattr(guard, "resolve_addresses", self.resolve)
        monkeypatch.setattr(scan, "fetch_headers", self.fetch)
        monkeypatch.setattr(scan, "inspect_tls", self.inspect)

    async def resolve(self, hostname):
        return list(self.dns.get(hostname, []))

    async def fetch(self, target, **kwargs):
        self.fetched.append(target.url)
        outcome = self.responses.get(target.url, _response(headers=HARDENED))
        if callable(outcome):
            return await outcome()
        return outcome

    async def inspect(self, hostname, **kwargs):
        self.inspected.append(hostname)
        return self.tls


def _scan(url, config=None, **kwargs):
    return asyncio.run(run_security_scan(url, config, **kwargs))


def test_hardened_site_grades_a(monkeypatch):
    net = FakeNetwork(monkeypatch)
    result = _scan("Example.com")

    assert result.url == "https://example.com"
    assert net.fetched == ["https://example.com"]
    assert net.inspected == ["example.com"]
    assert result.grade == Grade.A
    assert result.failed_checks() == []
    assert [c.name for c in result.categories] == [
        "HTTP Headers",
        "Content Security Policy",
        "Cookie Security",
        "CORS Configuration",
        "SSL/TLS Configuration",
    ]
    assert result.overall_score == pytest.approx(sum(c.score for c in result.categories))
    assert result.max_score == pytest.approx(sum(c.max_score for c in result.categories))
    assert result.recommendations == []
    assert {e.requirement_id for e in result.owasp_mapping} >= {"A01", "A02", "A05", "A07", "A09"}


@pytest.mark.parametrize("url", ["127.0.0.1", "http://localhost", "https://10.0.0.5/admin"])
def test_private_target_refused_before_any_network(monkeypatch, url):
    net = FakeNetwork(monkeypatch)
    with pytest.raises(GuardError) as info:
        _scan(url)
    assert info.value.rule == GuardRule.LITERAL_HOST
    assert net.fetched == []
    assert net.inspected == []


def test_dns_rebinding_refused(monkeypatch):
    net = FakeNetwork(monkeypatch, dns={"rebind.example.com": ["93.184.216.34", "169.254.169.254"]})
    with pytest.raises(DnsRebindingError) as info:
        _scan("rebind.example.com")
    assert info.value.address == "169.254.169.254"
    assert net.fetched == []


def test_unresolved_host(monkeypatch):
    FakeNetwork(monkeypatch, dns={})
    with pytest.raises(GuardError) as info:
        _scan("nowhere.example.com")
    assert info.value.rule == GuardRule.DNS_UNRESOLVED


def test_unresolved_host_allowed_when_fail_open(monkeypatch):
    net = FakeNetwork(monkeypatch, dns={})
    result = _scan("nowhere.example.com", ScanConfig(fail_closed=False))
    assert result.target.addresses == ()
    assert net.fetched == ["https://nowhere.example.com"]


def test_scan_is_deterministic(monkeypatch):
    FakeNetwork(monkeypatch)
    first = _scan("https://example.com")
    second = _scan("https://example.com")
    assert first.model_dump(exclude={"timestamp"}) == second.model_dump(exclude={"timestamp"})


def test_no_cookies_contributes_nothing(monkeypatch):
    headers = {k: v for k, v in HARDENED.items() if k != "Set-Cookie"}
    FakeNetwork(monkeypatch, responses={"https://example.com": _response(headers=headers)})
    result = _scan("example.com")

    cookies = next(c for c in result.categories if c.name == "Cookie Security")
    assert [(c.id, c.status) for c in cookies.checks] == [("cookie-none", CheckStatus.INFO)]
    assert cookies.score == cookies.max_score == 0
    assert result.grade == Grade.A


def test_fetch_failure_still_inspects_tls(monkeypatch):
    error = FetchError(FetchErrorKind.CONNECT, "Connection failed: refused")
    net = FakeNetwork(monkeypatch, responses={"https://example.com": error})
    result = _scan("example.com")

    names = [c.name for c in result.categories]
    assert names[0] == "Connection"
    assert result.categories[0].checks[0].observed_value == "Connection failed: refused"
    assert len(result.categories) == 2
    assert net.inspected == ["example.com"]


def test_plain_http_skips_tls(monkeypatch):
    net = FakeNetwork(monkeypatch)
    result = _scan("http://example.com")
    assert result.target.scheme == "http"
    assert net.inspected == []
    assert len(result.categories) == 4


def test_deadline_degrades_slow_fetch(monkeypatch):
    async def slow():
        await asyncio.sleep(10)
        return _response(headers=HARDENED)

    FakeNetwork(monkeypatch, responses={"https://example.com": slow})
    result = _scan("example.com", ScanConfig(deadline=0.05))

    connection = result.categories[0]
    assert connection.checks[0].id == "connection-error"
    assert "deadline" in connection.checks[0].observed_value
    # TLS finished in time and is still reported
    assert result.categories[-1].checks[0].status == CheckStatus.PASS


def test_redirects_are_followed_and_vetted(monkeypatch):
    net = FakeNetwork(
        monkeypatch,
        dns={"example.com": ["93.184.216.34"], "login.example.com": ["93.184.216.35"]},
        responses={
            "https://example.com": _response(301, location="https://login.example.com/start"),
            "https://login.example.com/start": _response(headers=HARDENED),
        },
    )
    result = _scan("example.com")

    assert result.redirect_chain == ["https://example.com", "https://login.example.com/start"]
    assert net.fetched == result.redirect_chain
    assert result.blocked_redirect is None
    assert result.grade == Grade.A


def test_relative_redirect(monkeypatch):
    FakeNetwork(
        monkeypatch,
        responses={"https://example.com": _response(302, location="/home")},
    )
    result = _scan("example.com")
    assert result.redirect_chain == ["https://example.com", "https://example.com/home"]


def test_redirect_to_internal_address_is_not_followed(monkeypatch):
    net = FakeNetwork(
        monkeypatch,
        responses={"https://example.com": _response(302, location="http://127.0.0.1/admin")},
    )
    result = _scan("example.com")

    assert result.blocked_redirect == "http://127.0.0.1/admin"
    assert net.fetched == ["https://example.com"]
    assert result.redirect_chain == ["https://example.com"]
    # The redirect response itself is still graded.
    hsts = next(c for c in result.all_checks() if c.id == "hsts")
    assert hsts.status == CheckStatus.FAIL


def test_redirect_limit(monkeypatch):
    responses = {
        f"https://example.com/{i}": _response(302, location=f"/{i + 1}") for i in range(10)
    }
    responses["https://example.com"] = _response(302, location="/0")
    FakeNetwork(monkeypatch, responses=responses)

    result = _scan("example.com", ScanConfig(max_redirects=2))
    assert len(result.redirect_chain) == 3


def test_redirect_loop_stops(monkeypatch):
    net = FakeNetwork(
        monkeypatch,
        responses={
            "https://example.com": _response(301, location="/a"),
            "https://example.com/a": _response(301, location="https://example.com/"),
        },
    )
    result = _scan("example.com")
    assert net.fetched == ["https://example.com", "https://example.com/a"]


def test_audit_sink_receives_event(monkeypatch):
    FakeNetwork(monkeypatch, responses={"https://example.com": _response(headers={})})
    events = []
    result = _scan("example.com", audit_sink=events.append)

    assert len(events) == 1
    event = events[0]
    assert event.url == "https://example.com"
    assert event.grade == result.grade.value
    assert event.failed_checks == len(result.failed_checks()) > 0


def test_insecure_site_compliance(monkeypatch):
    FakeNetwork(
        monkeypatch,
        responses={"https://example.com": _response(headers={})},
        tls=TlsFacts.unavailable("handshake failed"),
    )
    result = _scan("example.com")

    assert result.grade == Grade.F
    fstek = {e.requirement_id: e.status for e in result.fstek_mapping}
    assert fstek["ИАФ.6"] == ComplianceStatus.NON_COMPLIANT
    assert result.recommendations[0].priority.value == "critical"


def test_malformed_redirect_is_recorded_not_raised(monkeypatch):
    net = FakeNetwork(
        monkeypatch,
        responses={"https://example.com": _response(301, location="http://[oops/")},
    )
    result = _scan("example.com")

    assert result.blocked_redirect == "http://[oops/"
    assert result.redirect_chain == ["https://example.com"]
    assert net.fetched == ["https://example.com"]


def test_caller_cancellation_stops_fetch_and_tls(monkeypatch):
    FakeNetwork(monkeypatch)
    cancelled = {"fetch": False, "tls": False}

    async def hanging_fetch(target, **kwargs):
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled["fetch"] = True
            raise
        return _response(headers=HARDENED)

    async def hanging_tls(hostname, **kwargs):
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled["tls"] = True
            raise
        return GOOD_TLS

    monkeypatch.setattr(scan, "fetch_headers", hanging_fetch)
    monkeypatch.setattr(scan, "inspect_tls", hanging_tls)

    async def scan_with_outer_timeout():
        with pytest.raises(TimeoutError):
            async with asyncio.timeout(0.1):
                await run_security_scan("example.com", ScanConfig(deadline=30))
        # checked before the event loop shuts down and cancels leftovers itself
        return dict(cancelled)

    assert asyncio.run(scan_with_outer_timeout()) == {"fetch": True, "tls": True}
