"""
HTTP request layer and safety helpers for ats-cli.
"""

import json
import re
import sys
import time
import urllib.error
import urllib.request
import uuid

from ats_cli import config
from ats_cli.exceptions import CliError, HTTPError

# ---------------------------------------------------------------------------
# Safety helpers
# ---------------------------------------------------------------------------


def _safe_json_parse(text, context="input"):
    """Parse JSON with friendly error message on failure."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CliError(f"[ERROR] Invalid JSON in {context}: {e.msg} at position {e.pos}") from None


def _sanitize_error(body, max_len=500):
    """Truncate and clean error body for safe display."""
    if not body:
        return ""
    cleaned = re.sub(r"<[^>]+>", "", body)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()
    if len(cleaned) > max_len:
        return cleaned[:max_len] + "... [truncated]"
    return cleaned


def _try_call(fn, *args, **kwargs):
    """Call a function that might raise CliError, returning None on failure."""
    try:
        return fn(*args, **kwargs)
    except CliError:
        return None


def _server_message(body):
    """Pull ``error`` or ``message`` out of a JSON error body, if present."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return None
    if isinstance(data, dict):
        return data.get("error") or data.get("message")
    return None


# ---------------------------------------------------------------------------
# HTTP request layer
# ---------------------------------------------------------------------------


def _log_http_event(enabled, **fields):
    """Emit structured HTTP logs to stderr when enabled."""
    if not (enabled or config.HTTP_LOG_ENABLED):
        return
    print("[HTTP] " + json.dumps(fields, ensure_ascii=False, sort_keys=True), file=sys.stderr)


def _http_request(url, data=None, headers=None, method="GET", log=False):
    """Make one HTTP request and return the parsed JSON body.

    Raises HTTPError for HTTP status errors (caller maps them to messages) and
    CliError for timeouts, oversized or undecodable responses. URLError is
    left to the caller, which knows the base URL to report.
    """
    body = json.dumps(data).encode("utf-8") if data is not None else None
    request_id = (headers or {}).get("X-Request-Id")
    timeout = max(1, config.HTTP_TIMEOUT_SECONDS)
    start = time.perf_counter()
    req = urllib.request.Request(url, data=body, headers=headers or {}, method=method)
    _log_http_event(log, phase="request", method=method, url=url, request_id=request_id)
    if log and data is not None:
        print(f"  Body: {json.dumps(data, indent=2, ensure_ascii=False)}", file=sys.stderr)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            content_type = resp.headers.get("Content-Type", "")
            raw = resp.read(config.HTTP_MAX_RESPONSE_BYTES + 1)
            if len(raw) > config.HTTP_MAX_RESPONSE_BYTES:
                raise CliError(
                    "[ERROR] Response too large from ATS "
                    f"(>{config.HTTP_MAX_RESPONSE_BYTES} bytes)."
                )
            _log_http_event(
                log,
                phase="response",
                method=method,
                url=url,
                status=getattr(resp, "status", 200),
                bytes=len(raw),
                latency_ms=round((time.perf_counter() - start) * 1000, 2),
                request_id=request_id,
            )
            if not raw:
                return {}
            try:
                return json.loads(raw.decode("utf-8"))
            except (json.JSONDecodeError, UnicodeDecodeError):
                if content_type and "json" not in content_type.lower():
                    raise CliError(
                        f"[ERROR] Unexpected Content-Type from server "
                        f"({content_type}). This may be a proxy or "
                        "network issue."
                    ) from None
                raise CliError("[ERROR] Unexpected response from ATS (not valid JSON).") from None
    except urllib.error.HTTPError as e:
        error_body = (
            e.read(config.HTTP_MAX_RESPONSE_BYTES).decode("utf-8", errors="replace")
            if e.fp
            else ""
        )
        _log_http_event(
            log,
            phase="response",
            method=method,
            url=url,
            status=e.code,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
            request_id=request_id,
        )
        raise HTTPError(e.code, e.reason, error_body, headers=e.headers) from e
    except TimeoutError as e:
        raise CliError(
            f"[ERROR] Request timed out after {timeout} seconds. Is ATS reachable?"
        ) from e


def build_headers(cfg):
    return {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "X-Actor-Type": cfg.actor.type,
        "X-Actor-ID": cfg.actor.id,
        "X-Actor-Name": cfg.actor.name,
        "X-Request-Id": str(uuid.uuid4()),
    }


def request(cfg, method, path, body=None):
    """Call the ATS API at ``cfg.base_url + path`` and return the JSON body."""
    url = cfg.base_url.rstrip("/") + path
    try:
        return _http_request(url, body, build_headers(cfg), method, log=cfg.verbose)
    except HTTPError as e:
        server_msg = _server_message(e.body)
        if server_msg:
            raise CliError(f"[ERROR] {server_msg} (status={e.code})") from e
        detail = _sanitize_error(e.body)
        message = f"[ERROR] HTTP {e.code}: {e.reason}"
        if detail:
            message += f"\n{detail}"
        raise CliError(message) from e
    except urllib.error.URLError as e:
        raise CliError(
            f"[ERROR] Cannot connect to ATS at {cfg.base_url}. Is the server running? ({e.reason})"
        ) from e
    except ValueError as e:
        raise CliError(f"[ERROR] Invalid request URL {url}: {e}") from e
