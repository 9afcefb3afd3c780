"""Tests for formatters — table helpers and task/repo output formatters."""

import json
import re
from unittest.mock import patch

import pytest

from ats_cli.config import Actor, EffectiveConfig, LoadedConfig
from ats_cli.formatters import (
    _sanitize_str,
    _table,
    _trunc,
    color_priority,
    color_status,
    confirm,
    format_message_row,
    format_messages,
    format_repo_config,
    format_repos_table,
    format_stats,
    format_task_detail,
    format_tasks_table,
    output,
    repo_config_report,
)

# ---------------------------------------------------------------------------
# _trunc / _table / _sanitize_str
# ---------------------------------------------------------------------------


class TestTrunc:
    def test_short_string_unchanged(self):
        assert _trunc("hello", 10) == "hello"

    def test_truncates_with_ellipsis(self):
        result = _trunc("hello world", 6)
        assert result == "hello…"
        assert len(result) == 6

    def test_none(self):
        assert _trunc(None, 10) == ""


class TestTable:
    def test_basic_table(self):
        cols = [("Name", 10), ("Value", 0)]
        rows = [("Alice", "100"), ("Bob", "200")]
        lines = _table(cols, rows).split("\n")
        assert "Name" in lines[0]
        assert lines[1].startswith("---")
        assert lines[2].startswith("Alice")
        assert "Bob" in lines[3]

    def test_footer(self):
        assert _table([("A", 5), ("B", 0)], [("1", "2")], footer="Total: 1").endswith(
            "\nTotal: 1"
        )

    def test_table_sanitizes_cell_values(self):
        result = _table([("Name", 10), ("Title", 0)], [("\x1b[1mEvil\x1b[0m", "Normal")])
        assert "\x1b" not in result
        assert "Evil" in result


class TestSanitizeStr:
    def test_strips_ansi_color(self):
        assert _sanitize_str("\x1b[31mRed\x1b[0m") == "Red"

    def test_strips_null_and_control_chars(self):
        assert _sanitize_str("A\x00B\x07C\x7fD") == "ABCD"

    def test_preserves_newlines_and_tabs(self):
        assert _sanitize_str("A\nB\tC") == "A\nB\tC"

    def test_none_returns_none(self):
        assert _sanitize_str(None) is None


class TestColors:
    def test_plain_when_not_a_tty(self):
        assert color_status("failed") == "failed"
        assert color_priority(9) == "9"

    def test_status_painted_on_tty(self):
        with patch("ats_cli.formatters._table._use_color", return_value=True):
            assert color_status("completed") == "\x1b[32mcompleted\x1b[0m"
            assert color_status("unknown") == "unknown"

    @pytest.mark.parametrize("level,code", [(9, "31"), (5, "33"), (2, "32")])
    def test_priority_bands(self, level, code):
        with patch("ats_cli.formatters._table._use_color", return_value=True):
            assert color_priority(level) == f"\x1b[{code}m{level}\x1b[0m"

    def test_missing_priority(self):
        assert color_priority(None) == "-"
        assert color_status(None) == "-"


# ---------------------------------------------------------------------------
# Core output
# ---------------------------------------------------------------------------


class TestOutput:
    def test_table_uses_formatter(self, capsys):
        output({"a": 1}, lambda d: "formatted", "table")
        assert capsys.readouterr().out == "formatted\n"

    def test_json_ignores_formatter(self, capsys):
        output({"a": 1}, lambda d: "formatted", "json")
        assert json.loads(capsys.readouterr().out) == {"a": 1}

    def test_json_keeps_unicode(self, capsys):
        output({"title": "café"}, None, "json")
        assert "café" in capsys.readouterr().out

    def test_confirm(self, capsys):
        confirm("Task 1 claimed")
        assert capsys.readouterr().out == "✓ Task 1 claimed\n"


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


class TestTasksTable:
    def test_empty(self):
        assert format_tasks_table([]) == "No tasks found."

    def test_rows(self):
        result = format_tasks_table(
            [
                {"id": 1, "title": "A" * 60, "status": "pending", "priority": 8},
                {"id": 2, "title": "Second", "status": "failed", "assignee_name": "bot"},
            ]
        )
        lines = result.split("\n")
        assert lines[0].startswith("ID")
        assert "Assignee" in lines[0]
        assert "A" * 39 + "…" in lines[2]
        assert " - " in lines[3]
        assert "bot" in lines[3]


class TestTaskDetail:
    def test_not_found(self):
        assert format_task_detail(None) == "Task not found."

    def test_full_task(self):
        result = format_task_detail(
            {
                "id": 42,
                "title": "Deploy",
                "status": "in_progress",
                "priority": 7,
                "payload": {"env": "prod"},
                "messages": [{"actor_name": "alice", "parts": [{"type": "text", "content": "hi"}]}],
            }
        )
        assert re.search(r"ID:\s+42", result)
        assert "(no description)" in result
        assert '│   "env": "prod"' in result
        assert "│ [alice] hi" in result
        assert "Outputs" not in result


class TestStats:
    def test_minimal(self):
        result = format_stats({"total": 0})
        assert "(none)" in result
        assert re.search(r"Avg Completion:\s+0 minutes", result)
        assert "failed" not in result

    def test_full(self):
        result = format_stats(
            {
                "total": 9,
                "by_status": {"pending": 4, "failed": 1},
                "by_channel": {"ops": 5},
                "avg_completion_seconds": 150,
            }
        )
        assert re.search(r"Avg Completion:\s+2.5 minutes", result)
        assert "failed" in result
        assert "ops" in result


class TestMessages:
    def test_empty(self):
        assert format_messages([], 3) == "No messages found."

    def test_thread(self):
        result = format_messages(
            [
                {
                    "actor_name": "alice",
                    "actor_type": "human",
                    "parts": [{"type": "text", "content": "hi"}],
                },
                {"actor_type": "agent", "parts": [{"type": "file", "url": "http://x/f.txt"}]},
            ],
            3,
        )
        assert "Messages for Task 3" in result
        assert "alice (human):" in result
        assert "Unknown (agent):" in result
        assert "  [file]: http://x/f.txt" in result
        assert result.endswith("2 message(s)")

    def test_message_row(self):
        row = format_message_row({"id": 5, "actor_name": "bob", "parts": [{"type": "data"}]})
        assert "[data]" in row.split("\n")[2]


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


def _cfg(**overrides):
    values = {
        "base_url": "http://ats.test",
        "organization": "acme",
        "project": "web",
        "use_project_scope": True,
        "actor": Actor("agent", "bot-1", "Bot"),
    }
    values.update(overrides)
    return EffectiveConfig(**values)


class TestReposTable:
    def test_empty(self):
        assert format_repos_table([]).startswith("No repositories found.")

    def test_rows_and_footer(self):
        result = format_repos_table(
            [
                {
                    "repo": "acme/web *",
                    "name": "Website",
                    "pending_count": 2,
                    "in_progress_count": 1,
                    "total_count": 9,
                }
            ]
        )
        assert "acme/web *" in result
        assert result.endswith("1 repository(s) (* = current)")


class TestRepoConfig:
    def test_report_without_local(self):
        loaded = LoadedConfig({"organization": "g", "project": "p"}, None, {}, None)
        report = repo_config_report(_cfg(), loaded, "/home/u/.ats/config")
        assert report["current"] == "acme/web"
        assert report["global"] == {"path": "/home/u/.ats/config", "repo": "g/p", "url": None}
        assert report["local"] is None
        assert report["effective"]["actor"] == {"type": "agent", "id": "bot-1", "name": "Bot"}

    def test_report_with_local(self):
        local = {"organization": "acme", "url": "http://local"}
        loaded = LoadedConfig({}, local, local, "/code/.ats/config")
        report = repo_config_report(_cfg(), loaded, "/g")
        assert report["local"] == {
            "path": "/code/.ats/config",
            "repo": None,
            "url": "http://local",
        }

    def test_format(self):
        loaded = LoadedConfig({}, None, {}, None)
        text = format_repo_config(repo_config_report(_cfg(use_project_scope=False), loaded, "/g"))
        assert "(no local config found)" in text
        assert re.search(r"Repository:\s+\(not set\)", text)
        assert "Scoped routes: no" in text
        assert re.search(r"Actor:\s+Bot \(agent\)", text)
