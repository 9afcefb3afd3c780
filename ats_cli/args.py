"""
Argument tokenizer for ats-cli.

Splits raw argv tokens into command, subcommand, positional values,
boolean flags and valued options. Standalone module (no project imports).

A token starting with "-" is never consumed as an option value, so negative
numbers have to be passed as ``--limit=-5``.
"""

from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class ParsedInvocation:
    """One tokenized command line. Immutable after construction."""

    command: str | None = None
    subcommand: str | None = None
    positional: tuple[str, ...] = ()
    flags: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))
    options: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    def option(self, *names, default=None):
        """First valued option among *names* (e.g. ``"format", "f"``)."""
        for name in names:
            if name in self.options:
                return self.options[name]
        return default

    def flag(self, *names):
        """True if any of *names* was given as a flag or valued option."""
        return any(name in self.flags or name in self.options for name in names)

    def merged_options(self):
        """Options and flags in one dict; flags win on name clashes."""
        return {**self.options, **self.flags}


def _takes_value(tokens, i):
    return i + 1 < len(tokens) and not tokens[i + 1].startswith("-")


def tokenize(tokens):
    """Classify *tokens* left to right into a ParsedInvocation."""
    command = None
    subcommand = None
    positional = []
    flags = {}
    options = {}

    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.startswith("--"):
            key = token[2:]
            if "=" in key:
                name, value = key.split("=", 1)
                options[name] = value
            elif _takes_value(tokens, i):
                options[key] = tokens[i + 1]
                i += 1
            else:
                flags[key] = True
        elif token.startswith("-") and len(token) == 2:
            key = token[1:]
            if _takes_value(tokens, i):
                options[key] = tokens[i + 1]
                i += 1
            else:
                flags[key] = True
        elif command is None:
            command = token
        elif subcommand is None:
            subcommand = token
        else:
            positional.append(token)
        i += 1

    return ParsedInvocation(
        command=command,
        subcommand=subcommand,
        positional=tuple(positional),
        flags=MappingProxyType(flags),
        options=MappingProxyType(options),
    )
