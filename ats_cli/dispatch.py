"""
Command dispatch for ats-cli.

A registry maps a command name to either a handler (flat command) or a
mapping of subcommand name to handler (namespaced command, e.g. ``message``
and ``repo``). Handlers are called as ``handler(invocation, config)``.
"""

from collections.abc import Mapping
from dataclasses import replace

from ats_cli.exceptions import DispatchError


def dispatch(invocation, config, registry):
    """Resolve *invocation* against *registry* and run the handler."""
    name = invocation.command
    entry = registry.get(name)

    if entry is None:
        raise DispatchError(
            f"[ERROR] Unknown command: {name}\nRun \"ats --help\" for usage information.",
            alternatives=sorted(registry),
        )

    if isinstance(entry, Mapping):
        available = ", ".join(entry)
        if invocation.subcommand is None:
            raise DispatchError(
                f"[ERROR] Subcommand required for: {name}\nAvailable subcommands: {available}",
                alternatives=entry,
            )
        handler = entry.get(invocation.subcommand)
        if handler is None:
            raise DispatchError(
                f"[ERROR] Unknown subcommand: {name} {invocation.subcommand}\n"
                f"Available subcommands: {available}",
                alternatives=entry,
            )
        return handler(invocation, config)

    # Flat command: whatever was parsed as a subcommand is data.
    if invocation.subcommand is not None:
        invocation = replace(
            invocation,
            subcommand=None,
            positional=(invocation.subcommand, *invocation.positional),
        )
    return entry(invocation, config)
