"""Typed shapes for config layers and ATS API payloads.

Annotations only: config layers and API responses stay plain dicts at runtime.
"""

from __future__ import annotations

from typing import TypedDict

# ---------------------------------------------------------------------------
# Config file schema (global ~/.ats/config and project .ats/config)
# ---------------------------------------------------------------------------


class ActorLayer(TypedDict, total=False):
    type: str
    id: str
    name: str


class ConfigLayer(TypedDict, total=False):
    """One on-disk config file. Every key is optional."""

    organization: str
    project: str
    url: str
    actor: ActorLayer


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


class MessagePart(TypedDict, total=False):
    type: str
    content: str
    url: str
    data: str


class Message(TypedDict, total=False):
    id: int
    task_id: int
    actor_type: str
    actor_name: str
    parts: list[MessagePart]
    created_at: str


class Task(TypedDict, total=False):
    """Task row as returned by the ATS API."""

    id: int
    title: str
    description: str | None
    status: str
    priority: int
    type: str
    channel: str
    payload: dict
    outputs: list
    source_type: str | None
    source_name: str | None
    assignee_type: str | None
    assignee_name: str | None
    lease_expires: str | None
    created_at: str
    updated_at: str
    messages: list[Message]


class RepoRow(TypedDict):
    """Flattened org/project row built by ``repo list``."""

    repo: str
    name: str
    pending_count: int
    in_progress_count: int
    total_count: int
    org_slug: str
    project_slug: str
