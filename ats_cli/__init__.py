"""ats-cli — command line client for the Agent Task Service."""

from ats_cli.args import ParsedInvocation, tokenize
from ats_cli.config import VERSION, Actor, EffectiveConfig, resolve_config
from ats_cli.dispatch import dispatch
from ats_cli.exceptions import CliError, DispatchError, FormatError
from ats_cli.filters import parse_priority, parse_sort_field, parse_time_string
from ats_cli.routes import build_route, task_path
from ats_cli.types import (
    ActorLayer,
    ConfigLayer,
    Message,
    MessagePart,
    RepoRow,
    Task,
)

__all__ = [
    "VERSION",
    "Actor",
    "ActorLayer",
    "CliError",
    "ConfigLayer",
    "DispatchError",
    "EffectiveConfig",
    "FormatError",
    "Message",
    "MessagePart",
    "ParsedInvocation",
    "RepoRow",
    "Task",
    "build_route",
    "dispatch",
    "parse_priority",
    "parse_sort_field",
    "parse_time_string",
    "resolve_config",
    "task_path",
    "tokenize",
]
