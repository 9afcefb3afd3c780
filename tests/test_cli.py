"""Tests for cli.py — entry point, help/version, and error exit codes."""

import urllib.error
from unittest.mock import patch

import pytest

from ats_cli import config
from ats_cli.cli import HELP_TEXT, main


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestHelpAndVersion:
    @pytest.mark.parametrize("argv", [["--help"], ["-h"], ["help"], ["list", "--help"]])
    def test_help_exits_zero(self, argv, capsys):
        assert _exit_code(argv) == 0
        assert "USAGE:" in capsys.readouterr().out

    def test_no_command_prints_help_and_fails(self, capsys):
        assert _exit_code([]) == 1
        assert "USAGE:" in capsys.readouterr().out

    @pytest.mark.parametrize("argv", [["--version"], ["version"]])
    def test_version(self, argv, capsys):
        assert _exit_code(argv) == 0
        assert capsys.readouterr().out.strip() == f"ats-cli v{config.VERSION}"

    def test_help_mentions_every_command(self):
        for name in ("create", "list", "claim", "message add", "repo init", "watch", "stats"):
            assert name in HELP_TEXT


class TestErrors:
    def test_unknown_command(self, capsys):
        assert _exit_code(["frobnicate"]) == 1
        err = capsys.readouterr().err
        assert "[ERROR] Unknown command: frobnicate" in err
        assert "Traceback" not in err

    def test_missing_subcommand(self, capsys):
        assert _exit_code(["repo"]) == 1
        assert "Subcommand required for: repo" in capsys.readouterr().err

    def test_invalid_format(self, capsys):
        assert _exit_code(["list", "--format", "xml"]) == 1
        assert "Invalid format 'xml'" in capsys.readouterr().err

    def test_invalid_filter(self, capsys):
        with patch("ats_cli.commands.request") as mock_request:
            assert _exit_code(["list", "--since", "soon"]) == 1
        mock_request.assert_not_called()
        assert "Invalid time format 'soon'" in capsys.readouterr().err

    def test_verbose_prints_traceback(self, capsys):
        assert _exit_code(["frobnicate", "--verbose"]) == 1
        assert "Traceback" in capsys.readouterr().err


class TestRunsCommands:
    @patch("ats_cli.commands.request")
    def test_global_route_by_default(self, mock_request, capsys):
        mock_request.return_value = {"tasks": []}
        main(["list"])
        cfg, method, path = mock_request.call_args.args
        assert cfg.use_project_scope is False
        assert path == "/tasks?status=pending"

    @patch("ats_cli.commands.request")
    def test_org_option_scopes_routes(self, mock_request, capsys):
        mock_request.return_value = {"tasks": []}
        main(["--org", "team", "list", "--all"])
        assert mock_request.call_args.args[2] == "/orgs/team/projects/main/tasks"

    @patch("ats_cli.commands.request")
    def test_env_scopes_routes(self, mock_request, monkeypatch):
        monkeypatch.setenv("ATS_PROJECT", "api")
        mock_request.return_value = {"task": {"id": 1}}
        main(["get", "1", "--format", "json"])
        assert mock_request.call_args.args[2] == "/orgs/default/projects/api/tasks/1"

    @patch("ats_cli.commands.request")
    def test_actor_options_reach_config(self, mock_request):
        mock_request.return_value = {"status": "ok"}
        main(["health", "--actor-type", "agent", "--actor-id", "bot-1", "-u", "http://local"])
        cfg = mock_request.call_args.args[0]
        assert cfg.actor.type == "agent"
        assert cfg.actor.id == "bot-1"
        assert cfg.base_url == "http://local"

    @patch("ats_cli.commands.request")
    def test_namespaced_command(self, mock_request, capsys):
        mock_request.return_value = {"messages": []}
        main(["message", "list", "9"])
        assert mock_request.call_args.args[2] == "/tasks/9/messages"
        assert "No messages found." in capsys.readouterr().out


class TestPackageExports:
    def test_all_names_importable(self):
        import ats_cli

        for name in ats_cli.__all__:
            assert hasattr(ats_cli, name), name
        assert ats_cli.VERSION == config.VERSION


class TestBadInputExitsCleanly:
    def test_huge_priority(self, capsys):
        with patch("ats_cli.commands.request") as mock_request:
            assert _exit_code(["list", "--priority", "9" * 5000]) == 1
        mock_request.assert_not_called()
        assert "[ERROR]" in capsys.readouterr().err

    @patch("ats_cli.api.urllib.request.urlopen")
    def test_task_id_with_space(self, mock_urlopen, capsys):
        mock_urlopen.side_effect = urllib.error.URLError("Connection refused")
        assert _exit_code(["get", "1 2", "-u", "http://127.0.0.1:9"]) == 1
        assert mock_urlopen.call_args.args[0].full_url == "http://127.0.0.1:9/tasks/1%202"
        assert "Cannot connect to ATS" in capsys.readouterr().err
