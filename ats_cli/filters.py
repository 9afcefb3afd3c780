"""
Filter parsing for task queries: time expressions, priority specs, sort fields.

Pure functions with no side effects. Each grammar is an ordered table of
(pattern, builder) pairs; the first matching pattern wins. Adding a time unit
or a priority shape means appending one row.
"""

import calendar
import re
from datetime import datetime, time, timedelta, timezone

from ats_cli.exceptions import FormatError

PRIORITY_MIN = 1
PRIORITY_MAX = 10

SORT_FIELDS = {
    "created": "created_at",
    "updated": "updated_at",
    "priority": "priority",
    "title": "title",
}
SORT_ORDERS = ("asc", "desc")

# ---------------------------------------------------------------------------
# Time expressions
# ---------------------------------------------------------------------------


def _to_iso(dt):
    """Render an aware datetime as UTC ISO 8601 with milliseconds and 'Z'."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _local_naive(now):
    return now.astimezone().replace(tzinfo=None)


def _ago(now, **delta):
    return now.astimezone(timezone.utc) - timedelta(**delta)


def _months_ago(now, months):
    local = _local_naive(now)
    total = local.year * 12 + (local.month - 1) - months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(local.day, calendar.monthrange(year, month)[1])
    return local.replace(year=year, month=month, day=day).astimezone()


def _local_midnight(now, days_back):
    day = _local_naive(now).date() - timedelta(days=days_back)
    return datetime.combine(day, time.min).astimezone()


def _iso_date(raw):
    return datetime.strptime(raw, "%Y-%m-%d").astimezone()


def _iso_timestamp(raw):
    parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


_TIME_PATTERNS = (
    (re.compile(r"^(\d+)m$", re.ASCII), lambda m, now: _ago(now, minutes=int(m[1]))),
    (re.compile(r"^(\d+)h$", re.ASCII), lambda m, now: _ago(now, hours=int(m[1]))),
    (re.compile(r"^(\d+)d$", re.ASCII), lambda m, now: _ago(now, days=int(m[1]))),
    (re.compile(r"^(\d+)w$", re.ASCII), lambda m, now: _ago(now, weeks=int(m[1]))),
    (re.compile(r"^(\d+)M$", re.ASCII), lambda m, now: _months_ago(now, int(m[1]))),
    (re.compile(r"^today$"), lambda m, now: _local_midnight(now, 0)),
    (re.compile(r"^yesterday$"), lambda m, now: _local_midnight(now, 1)),
    (re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII), lambda m, now: _iso_date(m[0])),
    (
        re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}", re.ASCII),
        lambda m, now: _iso_timestamp(m.string),
    ),
)


def parse_time_string(value, now=None):
    """Parse a relative or absolute time expression.

    Accepts ``30m``, ``4h``, ``1d``, ``2w``, ``3M`` (months), ``today``,
    ``yesterday``, ``YYYY-MM-DD`` or a full ISO timestamp. Returns a UTC ISO
    8601 string, or None for empty input.

    *now* defaults to the current local time and exists for tests.
    """
    if not value:
        return None
    if now is None:
        now = datetime.now().astimezone()
    for pattern, build in _TIME_PATTERNS:
        match = pattern.match(value)
        if not match:
            continue
        try:
            return _to_iso(build(match, now))
        except (ValueError, OverflowError):
            break
    raise FormatError(
        f"[ERROR] Invalid time format '{value}'. "
        "Use 30m, 4h, 1d, 2w, 3M, today, yesterday, YYYY-MM-DD or an ISO timestamp.",
        raw=value,
    )


# ---------------------------------------------------------------------------
# Priority specs
# ---------------------------------------------------------------------------


def _invalid_priority(raw):
    return FormatError(
        f"[ERROR] Invalid priority '{raw}'. "
        f"Use N, N+ or N-M with values from {PRIORITY_MIN} to {PRIORITY_MAX}.",
        raw=raw,
    )


def _checked_bound(number, raw):
    if not PRIORITY_MIN <= number <= PRIORITY_MAX:
        raise FormatError(
            f"[ERROR] Priority must be between {PRIORITY_MIN} and {PRIORITY_MAX}, got '{raw}'.",
            raw=raw,
        )
    return number


def _exact_priority(match, raw):
    number = int(match[1])
    if not PRIORITY_MIN <= number <= PRIORITY_MAX:
        raise _invalid_priority(raw)
    return {"priority": number}


def _min_priority(match, raw):
    return {"min_priority": _checked_bound(int(match[1]), raw)}


def _priority_range(match, raw):
    low = _checked_bound(int(match[1]), raw)
    high = _checked_bound(int(match[2]), raw)
    if low > high:
        raise FormatError(
            f"[ERROR] Invalid priority range '{raw}': min must be <= max.",
            raw=raw,
        )
    return {"min_priority": low, "max_priority": high}


_PRIORITY_PATTERNS = (
    (re.compile(r"^(\d+)$", re.ASCII), _exact_priority),
    (re.compile(r"^(\d+)\+$", re.ASCII), _min_priority),
    (re.compile(r"^(\d+)-(\d+)$", re.ASCII), _priority_range),
)


def parse_priority(value):
    """Parse ``8``, ``7+`` or ``5-8`` into query keys. Empty input -> {}."""
    if not value:
        return {}
    for pattern, build in _PRIORITY_PATTERNS:
        match = pattern.match(value)
        if not match:
            continue
        try:
            return build(match, value)
        except ValueError:
            raise _invalid_priority(value) from None
    raise _invalid_priority(value)


# ---------------------------------------------------------------------------
# Sort fields
# ---------------------------------------------------------------------------


def parse_sort_field(value):
    """Map a user-facing sort alias to the API field name."""
    try:
        return SORT_FIELDS[value]
    except (KeyError, TypeError):
        raise FormatError(
            f"[ERROR] Invalid sort field '{value}'. Must be one of: {', '.join(SORT_FIELDS)}",
            raw=value,
        ) from None


def parse_sort_order(value):
    if value not in SORT_ORDERS:
        raise FormatError(
            f"[ERROR] Invalid sort order '{value}'. Must be one of: {', '.join(SORT_ORDERS)}",
            raw=value,
        )
    return value


# ---------------------------------------------------------------------------
# Task list query
# ---------------------------------------------------------------------------

# (option name, query parameter) pairs passed through unchanged.
_PASSTHROUGH_FILTERS = (
    ("type", "type"),
    ("channel", "channel"),
    ("assignee", "assignee_id"),
    ("limit", "limit"),
    ("offset", "offset"),
)

_TIME_FILTERS = (
    ("since", "created_after"),
    ("until", "created_before"),
    ("updated-since", "updated_after"),
)


def build_task_query(options, show_all=False, now=None):
    """Build ordered query pairs for ``ats list`` from its options.

    Without *show_all* or an explicit ``status`` the list is limited to
    pending tasks.
    """
    params = []
    status = options.get("status")
    if status:
        params.append(("status", status))
    elif not show_all:
        params.append(("status", "pending"))

    for option, param in _PASSTHROUGH_FILTERS:
        value = options.get(option)
        if value:
            params.append((param, value))

    params.extend((key, str(val)) for key, val in parse_priority(options.get("priority")).items())

    for option, param in _TIME_FILTERS:
        stamp = parse_time_string(options.get(option), now=now)
        if stamp:
            params.append((param, stamp))

    if options.get("sort"):
        params.append(("sort_by", parse_sort_field(options["sort"])))
    if options.get("order"):
        params.append(("order", parse_sort_order(options["order"])))
    return params
