"""
ats-cli exception hierarchy.

All custom exceptions live here to avoid circular imports.
"""


class CliError(Exception):
    """Exit code 1 — validation, dispatch, network, parse errors."""

    exit_code = 1


class FormatError(CliError):
    """Malformed filter input (time, priority, sort, order)."""

    def __init__(self, message, raw=None):
        super().__init__(message)
        self.raw = raw


class DispatchError(CliError):
    """Unknown command, unknown subcommand, or missing subcommand."""

    def __init__(self, message, alternatives=()):
        super().__init__(message)
        self.alternatives = tuple(alternatives)


class HTTPError(Exception):
    """Raised by _http_request for HTTP errors that callers want to handle."""

    def __init__(self, code, reason, body, headers=None):
        self.code = code
        self.reason = reason
        self.body = body
        self.headers = headers or {}
