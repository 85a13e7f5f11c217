"""TOML configuration loader."""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from sitegrade.fetcher import DEFAULT_USER_AGENT

DEFAULT_CONFIG_PATHS = [
    Path("sitegrade.toml"),
    Path.home() / ".config" / "sitegrade" / "config.toml",
    Path("/etc/sitegrade/config.toml"),
]


class ScanConfig(BaseModel):
    """Configuration for a scan run."""

    timeout: float = Field(default=10.0, gt=0, description="Header fetch timeout (seconds)")
    tls_timeout: float = Field(default=10.0, gt=0, description="Verified TLS handshake timeout")
    tls_fallback_timeout: float = Field(
        default=5.0, gt=0, description="Diagnostic (unverified) TLS handshake timeout"
    )
    deadline: float = Field(
        default=20.0, gt=0, description="Budget shared by the concurrent fetch and TLS steps"
    )
    fail_closed: bool = Field(
        default=True, description="Refuse hostnames that resolve to no address"
    )
    max_redirects: int = Field(default=3, ge=0, description="Redirect hops to re-vet and follow")
    user_agent: str = Field(default=DEFAULT_USER_AGENT)

    format: str = Field(default="terminal", description="Output format")
    output: str | None = Field(default=None, description="Output file path")
    log_level: str = Field(default="WARNING")


def load_config(config_path: Path | None = None) -> ScanConfig:
    """Load config from TOML file, falling back to defaults."""
    if config_path and config_path.exists():
        return _parse_toml(config_path)

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return _parse_toml(path)

    return ScanConfig()


def _parse_toml(path: Path) -> ScanConfig:
    data = tomllib.loads(path.read_text())
    scan_data = data.get("scan", {})
    return ScanConfig(**scan_data)
