"""Output formatting package for ats-cli.

Re-exports all public names so consumers can do:
    from ats_cli.formatters import format_tasks_table
"""

from ats_cli.formatters._core import confirm, output, pretty_print
from ats_cli.formatters._repos import (
    format_repo_config,
    format_repos_table,
    repo_config_report,
)
from ats_cli.formatters._table import (
    _CONTROL_RE,
    _sanitize_str,
    _table,
    _trunc,
    color_priority,
    color_status,
)
from ats_cli.formatters._tasks import (
    format_message_row,
    format_messages,
    format_stats,
    format_task_detail,
    format_tasks_table,
)

__all__ = [
    "_CONTROL_RE",
    "_sanitize_str",
    "_table",
    "_trunc",
    "color_priority",
    "color_status",
    "confirm",
    "format_message_row",
    "format_messages",
    "format_repo_config",
    "format_repos_table",
    "format_stats",
    "format_task_detail",
    "format_tasks_table",
    "output",
    "pretty_print",
    "repo_config_report",
]
