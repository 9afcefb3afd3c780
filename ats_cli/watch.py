"""
Real-time event watching over the ATS WebSocket endpoint.

One connection per invocation; no reconnection. Ctrl+C closes the socket.
"""

import asyncio
import contextlib
import json
import urllib.parse
from datetime import datetime

import websockets
from websockets.exceptions import WebSocketException

from ats_cli import config
from ats_cli.exceptions import CliError
from ats_cli.formatters import color_status

_SILENT_TYPES = frozenset({"pong", "connected", "subscribed"})


def build_ws_url(cfg):
    """``https://host`` -> ``wss://host/ws?actor_type=...``."""
    base = cfg.base_url.rstrip("/")
    if base.startswith("http"):
        base = "ws" + base[len("http") :]
    params = urllib.parse.urlencode(
        {"actor_type": cfg.actor.type, "actor_id": cfg.actor.id, "actor_name": cfg.actor.name}
    )
    return f"{base}/ws?{params}"


def build_subscription(channel=None, task_type=None, events=None):
    subscription = {"type": "subscribe", "id": "cli-sub-1"}
    if channel:
        subscription["channels"] = [channel]
    if task_type:
        subscription["task_types"] = [task_type]
    if events:
        subscription["event_types"] = [e.strip() for e in events.split(",") if e.strip()]
    return subscription


def format_event(msg, now=None):
    """Render one decoded frame, or None for keep-alive/ack frames."""
    stamp = (now or datetime.now()).strftime("%H:%M:%S")
    if not isinstance(msg, dict):
        return f"[{stamp}] {json.dumps(msg, ensure_ascii=False)}"
    kind = msg.get("type")
    if kind in _SILENT_TYPES:
        return None
    if isinstance(kind, str) and kind.startswith("task."):
        data = msg.get("data") if isinstance(msg.get("data"), dict) else {}
        task = data.get("task") or msg.get("task") or {}
        lines = [
            f"[{stamp}] {kind}",
            f"  Task #{task.get('id')}: {task.get('title') or '(no title)'}",
            f"  Status: {color_status(task.get('status'))}, Channel: {task.get('channel') or '-'}",
        ]
        if msg.get("actor_name"):
            lines.append(f"  By: {msg['actor_name']}")
        lines.append("")
        return "\n".join(lines)
    return f"[{stamp}] {kind}: {json.dumps(msg, ensure_ascii=False)}"


async def _keepalive(ws, interval):
    while True:
        await asyncio.sleep(interval)
        await ws.send(json.dumps({"type": "ping"}))


async def watch_events(cfg, subscription, emit=print):
    url = build_ws_url(cfg)
    emit(f"Connecting to {url}...")
    async with websockets.connect(url) as ws:
        emit("✓ Connected")
        await ws.send(json.dumps(subscription))
        emit("Watching for events... (Ctrl+C to stop)\n")
        pinger = asyncio.create_task(_keepalive(ws, config.WATCH_PING_SECONDS))
        try:
            async for raw in ws:
                try:
                    msg = json.loads(raw)
                except ValueError:
                    emit(f"[{datetime.now():%H:%M:%S}] {raw}")
                    continue
                line = format_event(msg)
                if line is not None:
                    emit(line)
        finally:
            pinger.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await pinger
    emit("\nConnection closed")


def run_watch(cfg, subscription):
    """Block until the server closes the socket or the user hits Ctrl+C."""
    try:
        asyncio.run(watch_events(cfg, subscription))
    except KeyboardInterrupt:
        print("\nClosing connection...")
    except (OSError, WebSocketException) as e:
        raise CliError(f"[ERROR] WebSocket error: {e}") from e
