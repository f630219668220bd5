"""Minimal CLI JSON output wrapper.

Wraps CLI JSON outputs with schema metadata (schema_id, schema_version,
producer, produced_at) so scripted callers can detect format changes.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from sigcommit import __version__


def json_response(
    schema_id: str,
    schema_version: int,
    **data: Any,
) -> str:
    """Create schema-wrapped JSON response for CLI output.

    Args:
        schema_id: Identifier for the output type (e.g., "bootstrap_results").
        schema_version: Integer version for backward compatibility.
        **data: Payload data to include in the response.

    Returns:
        JSON string with schema metadata and payload.

    Example:
        >>> json_response("bootstrap_results", 1, results=[])
        {
          "schema_id": "bootstrap_results",
          "schema_version": 1,
          "producer": "sigcommit-0.1.0",
          "produced_at": "2026-10-19T10:30:00+00:00",
          "results": []
        }
    """
    wrapped = {
        "schema_id": schema_id,
        "schema_version": schema_version,
        "producer": f"sigcommit-{__version__}",
        "produced_at": datetime.now(UTC).isoformat(),
        **data,
    }
    return json.dumps(wrapped, indent=2, default=str)
