"""Single-request HTTP header fetcher."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum

import httpx

from sitegrade import __version__
from sitegrade.headers import HeaderMap
from sitegrade.models import ScanTarget

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = f"sitegrade/{__version__}"


class FetchErrorKind(StrEnum):
    TIMEOUT = "timeout"
    CONNECT = "connect"
    PROTOCOL = "protocol"


@dataclass(frozen=True)
class HeaderResponse:
    status_code: int
    headers: HeaderMap
    redirect_location: str | None = None
    body: str | None = None


@dataclass(frozen=True)
class FetchError:
    kind: FetchErrorKind
    message: str


async def fetch_headers(
    target: ScanTarget,
    *,
    with_body: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> HeaderResponse | FetchError:
    """Fetch response headers for a vetted target.

    Uses HEAD unless ``with_body`` is set. Redirects are reported, not
    followed. Failures are returned as FetchError, never raised.
    """
    method = "GET" if with_body else "HEAD"
    try:
        async with asyncio.timeout(timeout):
            async with httpx.AsyncClient(
                timeout=timeout,
                follow_redirects=False,
                headers={"User-Agent": user_agent},
                transport=transport,
            ) as client:
                resp = await client.request(method, target.url)
    except (TimeoutError, httpx.TimeoutException):
        logger.warning("%s %s timed out after %gs", method, target.url, timeout)
        return FetchError(FetchErrorKind.TIMEOUT, f"Request timed out after {timeout:g}s")
    except httpx.ConnectError as exc:
        logger.warning("%s %s: connection failed: %s", method, target.url, exc)
        return FetchError(FetchErrorKind.CONNECT, f"Connection failed: {exc}")
    except httpx.HTTPError as exc:
        logger.warning("%s %s failed: %s", method, target.url, exc)
        return FetchError(FetchErrorKind.PROTOCOL, f"Request failed: {exc}")

    headers = HeaderMap.from_pairs(resp.headers.multi_items())
    location = headers.get("location") if resp.is_redirect else None
    logger.debug("%s %s -> %d (%d headers)", method, target.url, resp.status_code, len(headers))

    return HeaderResponse(
        status_code=resp.status_code,
        headers=headers,
        redirect_location=location,
        body=resp.text if with_body else None,
    )
