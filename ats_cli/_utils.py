"""
Shared pure-utility functions for ats-cli.

These helpers have no business logic and no side effects.
"""

from datetime import datetime


def _parse_iso_timestamp(ts):
    """Parse an ISO timestamp from the API into a datetime."""
    if not ts:
        return None
    try:
        # Handle both "2026-01-15T10:30:00Z" and "2026-01-15T10:30:00.000Z"
        clean = ts.replace("Z", "+00:00")
        return datetime.fromisoformat(clean)
    except (ValueError, TypeError, AttributeError):
        return None


def format_timestamp(ts):
    """Render an API timestamp in local time; unknown formats pass through."""
    if not ts:
        return ""
    parsed = _parse_iso_timestamp(ts)
    if parsed is None:
        return str(ts)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone()
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


def unwrap(result, key):
    """Return ``result[key]`` when the API wraps its payload, else *result*."""
    if isinstance(result, dict) and key in result:
        return result[key]
    return result
