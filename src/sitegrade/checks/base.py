"""Check module protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sitegrade.headers import HeaderMap
from sitegrade.models import SecurityCategory

ABSENT = "Absent"


@runtime_checkable
class HeaderCheck(Protocol):
    def __call__(self, headers: HeaderMap) -> SecurityCategory:
        """Evaluate response headers into one scored category."""
        ...
