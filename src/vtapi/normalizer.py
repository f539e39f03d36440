"""Rewrite engine verdict maps into lists.

file/report and url/report answer with ``scans`` as an object keyed by engine
name::

    {"scans": {"EngineA": {"detected": true, "version": "1"}}}

:class:`vtapi.models.Report` models it as a list where each verdict carries
its own name::

    {"scans": [{"name": "EngineA", "detected": true, "version": "1"}]}
"""

from __future__ import annotations

import json
from typing import Any

from vtapi.exceptions import SerializationError

SCANS_FIELD = "scans"


def _scans_to_list(report: Any) -> Any:
    if not isinstance(report, dict):
        return report
    scans = report.get(SCANS_FIELD)
    if not isinstance(scans, dict) or not all(isinstance(v, dict) for v in scans.values()):
        return report
    return {
        **report,
        SCANS_FIELD: [{"name": engine, **verdict} for engine, verdict in scans.items()],
    }


def normalize_scans(value: Any) -> Any:
    """Convert ``scans`` maps to lists on a report or a list of reports.

    Values without a ``scans`` map are returned unchanged, so running it
    twice is harmless.
    """
    if isinstance(value, list):
        return [_scans_to_list(item) for item in value]
    return _scans_to_list(value)


def load_body(body: str | bytes, normalize: bool = False) -> Any:
    """Parse a response body, optionally normalizing engine verdicts.

    Raises:
        SerializationError: If the body is not valid JSON.
    """
    try:
        value = json.loads(body)
    except ValueError as exc:
        msg = f"Response is not valid JSON: {exc}"
        raise SerializationError(msg) from exc
    return normalize_scans(value) if normalize else value
