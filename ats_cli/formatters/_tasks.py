"""Task-specific formatters: list table, detail view, stats, messages."""

import json

from ats_cli._utils import format_timestamp
from ats_cli.formatters._table import _table, _trunc, color_priority, color_status
from ats_cli.types import Message, Task

_STATUS_ORDER = ("pending", "in_progress", "completed", "cancelled", "failed", "rejected")
_ALWAYS_SHOWN = {"pending", "in_progress", "completed"}
_RULE = "─" * 52


def _section(title):
    return f"├─ {title} " + "─" * max(0, 49 - len(title))


def format_tasks_table(tasks: list[Task]) -> str:
    """Format a task list as a readable table."""
    if not tasks:
        return "No tasks found."
    cols = [
        ("ID", 6),
        ("Title", 40),
        ("Status", 12),
        ("Pri", 4),
        ("Type", 10),
        ("Channel", 12),
        ("Assignee", 14),
        ("Created", 0),
    ]
    rows = []
    for task in tasks:
        rows.append(
            (
                str(task.get("id", "")),
                _trunc(task.get("title") or "", 40),
                task.get("status") or "",
                str(task.get("priority") if task.get("priority") is not None else "-"),
                _trunc(task.get("type") or "", 10),
                _trunc(task.get("channel") or "", 12),
                _trunc(task.get("assignee_name") or "-", 14),
                format_timestamp(task.get("created_at")),
            )
        )
    return _table(cols, rows)


def format_task_detail(task: Task | None) -> str:
    """Format a single task with description, payload, outputs and messages."""
    if not task:
        return "Task not found."
    lines = ["", "┌─ Task Details " + "─" * 37]
    lines.append(f"│ ID:          {task.get('id', '')}")
    lines.append(f"│ Title:       {task.get('title', '')}")
    lines.append(f"│ Status:      {color_status(task.get('status'))}")
    lines.append(f"│ Priority:    {color_priority(task.get('priority'))}")
    lines.append(f"│ Type:        {task.get('type') or '-'}")
    lines.append(f"│ Channel:     {task.get('channel') or '-'}")
    lines.append(
        f"│ Source:      {task.get('source_name') or '-'} ({task.get('source_type') or '-'})"
    )
    lines.append(
        f"│ Assignee:    {task.get('assignee_name') or '-'} ({task.get('assignee_type') or '-'})"
    )
    lines.append(f"│ Created:     {format_timestamp(task.get('created_at'))}")
    lines.append(f"│ Updated:     {format_timestamp(task.get('updated_at'))}")
    if task.get("lease_expires"):
        lines.append(f"│ Lease:       {format_timestamp(task['lease_expires'])}")
    lines.append(_section("Description"))
    lines.append(f"│ {task.get('description') or '(no description)'}")
    for title, key in (("Payload", "payload"), ("Outputs", "outputs")):
        value = task.get(key)
        if value:
            lines.append(_section(title))
            dumped = json.dumps(value, indent=2, ensure_ascii=False)
            lines.extend(f"│ {line}" for line in dumped.split("\n"))
    messages = task.get("messages") or []
    if messages:
        lines.append(_section("Messages"))
        for msg in messages:
            parts = msg.get("parts") or [{}]
            content = parts[0].get("content") or "[non-text]"
            lines.append(f"│ [{msg.get('actor_name', '?')}] {content}")
    lines.append("└" + _RULE)
    return "\n".join(lines)


def format_stats(stats):
    """Format the task statistics overview."""
    by_status = stats.get("by_status") or {}
    lines = ["", "┌─ Task Statistics " + "─" * 34]
    lines.append(f"│ Total Tasks:          {stats.get('total', 0)}")
    lines.append(_section("By Status"))
    for status in _STATUS_ORDER:
        count = by_status.get(status, 0)
        if count or status in _ALWAYS_SHOWN:
            lines.append(f"│   {status:<20} {count}")
    lines.append(_section("By Channel"))
    channels = list((stats.get("by_channel") or {}).items())[:5]
    if not channels:
        lines.append("│   (none)")
    for channel, count in channels:
        lines.append(f"│   {channel:<20} {count}")
    lines.append(_section("Performance"))
    avg_seconds = stats.get("avg_completion_seconds")
    avg_minutes = f"{avg_seconds / 60:.1f}" if avg_seconds else "0"
    lines.append(f"│   Avg Completion:     {avg_minutes} minutes")
    lines.append(f"│   Completed Tasks:    {stats.get('completed_count', 0)}")
    recent = stats.get("recent") or {}
    lines.append(_section("Recent Activity"))
    lines.append(f"│   Created (24h):      {recent.get('created_24h', 0)}")
    lines.append(f"│   Completed (24h):    {recent.get('completed_24h', 0)}")
    lines.append(f"│   Created (7d):       {recent.get('created_7d', 0)}")
    lines.append(f"│   Completed (7d):     {recent.get('completed_7d', 0)}")
    lines.append("└" + _RULE)
    return "\n".join(lines)


def _message_preview(parts):
    if not parts:
        return ""
    first = parts[0]
    if first.get("type") == "text":
        return _trunc(first.get("content") or "", 50)
    return f"[{first.get('type')}]"


def format_message_row(message: Message) -> str:
    """One-line table for a freshly added message."""
    cols = [("ID", 6), ("From", 16), ("Content", 52), ("Time", 0)]
    row = (
        str(message.get("id", "")),
        _trunc(message.get("actor_name") or "", 16),
        _message_preview(message.get("parts")),
        format_timestamp(message.get("created_at")),
    )
    return _table(cols, [row])


def format_messages(messages: list[Message], task_id=None) -> str:
    """Format a task's message thread."""
    if not messages:
        return "No messages found."
    lines = [f"\n─── Messages for Task {task_id} ───\n"]
    for msg in messages:
        actor = f"{msg.get('actor_name') or 'Unknown'} ({msg.get('actor_type', '?')})"
        lines.append(f"[{format_timestamp(msg.get('created_at'))}] {actor}:")
        for part in msg.get("parts") or []:
            if part.get("type") == "text":
                lines.append(f"  {part.get('content', '')}")
            else:
                lines.append(
                    f"  [{part.get('type')}]: {part.get('url') or part.get('data') or '(binary)'}"
                )
        lines.append("")
    lines.append(f"{len(messages)} message(s)")
    return "\n".join(lines)
