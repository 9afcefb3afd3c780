"""Tests for dispatch.py — flat and namespaced command resolution."""

import pytest

from ats_cli.args import tokenize
from ats_cli.cli import build_registry
from ats_cli.dispatch import dispatch
from ats_cli.exceptions import CliError, DispatchError


def _recorder(calls, label):
    def handler(invocation, config):
        calls.append((label, invocation))
        return label

    return handler


@pytest.fixture
def calls():
    return []


@pytest.fixture
def registry(calls):
    return {
        "get": _recorder(calls, "get"),
        "list": _recorder(calls, "list"),
        "message": {
            "add": _recorder(calls, "message add"),
            "list": _recorder(calls, "message list"),
        },
    }


class TestFlatCommands:
    def test_runs_handler(self, registry, calls, cfg):
        assert dispatch(tokenize(["list"]), cfg, registry) == "list"
        assert calls[0][0] == "list"

    def test_subcommand_becomes_first_positional(self, registry, calls, cfg):
        dispatch(tokenize(["get", "42", "extra"]), cfg, registry)
        invocation = calls[0][1]
        assert invocation.subcommand is None
        assert invocation.positional == ("42", "extra")

    def test_handler_receives_config(self, cfg):
        seen = {}

        def handler(invocation, config):
            seen["config"] = config

        dispatch(tokenize(["x"]), cfg, {"x": handler})
        assert seen["config"] is cfg


class TestNamespacedCommands:
    def test_runs_subcommand_handler(self, registry, calls, cfg):
        dispatch(tokenize(["message", "add", "7", "hello"]), cfg, registry)
        label, invocation = calls[0]
        assert label == "message add"
        assert invocation.positional == ("7", "hello")

    def test_same_subcommand_name_in_two_families(self, registry, calls, cfg):
        dispatch(tokenize(["message", "list", "7"]), cfg, registry)
        assert calls[0][0] == "message list"

    def test_missing_subcommand(self, registry, calls, cfg):
        with pytest.raises(DispatchError) as exc_info:
            dispatch(tokenize(["message"]), cfg, registry)
        assert "Subcommand required for: message" in str(exc_info.value)
        assert exc_info.value.alternatives == ("add", "list")
        assert calls == []

    def test_unknown_subcommand(self, registry, calls, cfg):
        with pytest.raises(DispatchError) as exc_info:
            dispatch(tokenize(["message", "delete"]), cfg, registry)
        message = str(exc_info.value)
        assert "Unknown subcommand: message delete" in message
        assert "Available subcommands: add, list" in message
        assert calls == []


class TestUnknownCommand:
    def test_unknown_command(self, registry, calls, cfg):
        with pytest.raises(DispatchError) as exc_info:
            dispatch(tokenize(["frobnicate"]), cfg, registry)
        assert "Unknown command: frobnicate" in str(exc_info.value)
        assert exc_info.value.alternatives == ("get", "list", "message")
        assert calls == []

    def test_dispatch_error_is_cli_error(self, registry, cfg):
        with pytest.raises(CliError) as exc_info:
            dispatch(tokenize(["nope"]), cfg, registry)
        assert exc_info.value.exit_code == 1


class TestRegistry:
    def test_flat_commands(self):
        registry = build_registry()
        for name in (
            "health",
            "stats",
            "create",
            "get",
            "list",
            "update",
            "claim",
            "complete",
            "cancel",
            "fail",
            "reject",
            "watch",
        ):
            assert callable(registry[name]), name

    def test_message_family(self):
        assert set(build_registry()["message"]) == {"add", "list"}

    def test_repo_family(self):
        assert set(build_registry()["repo"]) == {
            "init",
            "list",
            "create",
            "rename",
            "switch",
            "current",
            "show",
        }
