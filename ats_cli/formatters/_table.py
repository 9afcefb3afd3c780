"""Low-level table rendering helpers (stdlib only)."""

import re
import sys

_CONTROL_RE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]|[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_STATUS_COLORS = {
    "pending": "33",
    "in_progress": "36",
    "completed": "32",
    "cancelled": "90",
    "failed": "31",
    "rejected": "35",
}


def _trunc(s, maxlen):
    """Truncate string with ellipsis indicator."""
    if not s:
        return ""
    return s[: maxlen - 1] + "…" if len(s) > maxlen else s


def _sanitize_str(s):
    """Strip ANSI escape sequences and control chars from table output.
    Preserves newlines (\\n) and tabs (\\t)."""
    if not s:
        return s
    return _CONTROL_RE.sub("", str(s))


def _use_color():
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _paint(text, code):
    if not code or not _use_color():
        return text
    return f"\x1b[{code}m{text}\x1b[0m"


def color_status(status):
    status = status or "-"
    return _paint(status, _STATUS_COLORS.get(status))


def color_priority(priority):
    if priority is None or priority == "":
        return "-"
    try:
        level = int(priority)
    except (TypeError, ValueError):
        return str(priority)
    if level >= 8:
        return _paint(str(level), "31")
    if level >= 5:
        return _paint(str(level), "33")
    return _paint(str(level), "32")


def _table(columns, rows, footer=None):
    """Build a formatted table string.
    columns: list of (name, width) tuples. Last column has no width (fills).
    rows: list of tuples matching columns.
    footer: optional footer line."""
    parts = []
    for i, (name, width) in enumerate(columns):
        if i == len(columns) - 1:
            parts.append(name)
        else:
            parts.append(f"{name:<{width}}")
    header = " ".join(parts)
    sep = "-" * max(len(header), 80)
    lines = [header, sep]
    for row in rows:
        parts = []
        for i, val in enumerate(row):
            safe = _sanitize_str(val) if isinstance(val, str) else str(val)
            if i == len(columns) - 1:
                parts.append(safe)
            else:
                parts.append(f"{safe:<{columns[i][1]}}")
        lines.append(" ".join(parts))
    if footer:
        lines.append(f"\n{footer}")
    return "\n".join(lines)
