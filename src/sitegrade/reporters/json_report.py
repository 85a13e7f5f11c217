"""JSON report exporter."""

from __future__ import annotations

import json

from sitegrade.models import ScanResult


def render_json(result: ScanResult) -> str:
    """Render scan results as JSON string with camelCase keys."""
    data = result.model_dump(mode="json", by_alias=True)
    return json.dumps(data, indent=2, ensure_ascii=False)
