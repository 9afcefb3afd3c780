"""
Command implementations for ats-cli.
Each cmd_*() function receives a ParsedInvocation and an EffectiveConfig and
handles one CLI command (or one subcommand of the message/repo families).

Request paths come from ats_cli.routes; the HTTP call goes through
ats_cli.api.request; output goes through ats_cli.formatters.
"""

import os
import urllib.parse

from ats_cli import config
from ats_cli._utils import format_timestamp, unwrap
from ats_cli.api import _safe_json_parse, _try_call, request
from ats_cli.exceptions import CliError
from ats_cli.filters import build_task_query, parse_priority
from ats_cli.formatters import (
    confirm,
    format_message_row,
    format_messages,
    format_repo_config,
    format_repos_table,
    format_stats,
    format_task_detail,
    format_tasks_table,
    output,
    pretty_print,
    repo_config_report,
)
from ats_cli.routes import org_path, parse_repo_string, quote_segment, task_path
from ats_cli.watch import build_subscription, run_watch

# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _usage_error(message, *usage):
    lines = [f"[ERROR] {message}"]
    if usage:
        lines.append(f"Usage: {usage[0]}")
        lines.extend(f"       {u}" for u in usage[1:])
    return CliError("\n".join(lines))


def _task_id(inv, usage):
    task_id = inv.positional[0] if inv.positional else inv.option("id")
    if not task_id:
        raise _usage_error("Task ID is required", usage)
    return task_id


def _priority_value(raw):
    """Exact task priority (1-10) for create/update bodies."""
    spec = parse_priority(raw)
    if "priority" not in spec:
        raise CliError(f"[ERROR] Invalid priority '{raw}'. Use a single value from 1 to 10.")
    return spec["priority"]


def _int_option(inv, name):
    raw = inv.option(name)
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise CliError(f"[ERROR] --{name} must be an integer, got '{raw}'.") from None


def _body_from_options(inv, keys):
    return {key: inv.options[key] for key in keys if inv.option(key)}


def _task_route(cfg, task_id, action=""):
    return task_path(cfg, f"/{quote_segment(task_id)}{action}")


# ---------------------------------------------------------------------------
# Service commands
# ---------------------------------------------------------------------------


def cmd_health(inv, cfg):
    data = request(cfg, "GET", "/health")
    if cfg.format == "json":
        pretty_print(data)
        return
    print(f"✓ Service is {data.get('status', 'unknown')}")
    print(f"  Timestamp: {data.get('timestamp', '-')}")


def cmd_stats(inv, cfg):
    stats = unwrap(request(cfg, "GET", "/tasks/stats"), "stats")
    output(stats, format_stats, cfg.format)


# ---------------------------------------------------------------------------
# Task commands
# ---------------------------------------------------------------------------


def cmd_create(inv, cfg):
    title = inv.positional[0] if inv.positional else inv.option("title")
    if not title:
        raise CliError(
            "[ERROR] Title is required\n"
            "Usage: ats create <title> [options]\n"
            "  --type <type>        Task type\n"
            "  --channel <channel>  Task channel\n"
            "  --priority <1-10>    Priority (default: 5)\n"
            "  --description <text> Task description\n"
            "  --payload <json>     Task payload as JSON"
        )
    body = {
        "title": title,
        "type": inv.option("type") or "task",
        "channel": inv.option("channel") or "default",
        "priority": _priority_value(inv.option("priority")) if inv.option("priority") else 5,
    }
    if inv.option("description"):
        body["description"] = inv.option("description")
    if inv.option("payload"):
        body["payload"] = _safe_json_parse(inv.option("payload"), "--payload")

    task = unwrap(request(cfg, "POST", task_path(cfg), body), "task")
    confirm(f"Task created with ID: {task.get('id')}")
    output(task, format_task_detail, cfg.format)


def cmd_get(inv, cfg):
    task_id = _task_id(inv, "ats get <id>")
    task = unwrap(request(cfg, "GET", _task_route(cfg, task_id)), "task")
    output(task, format_task_detail, cfg.format)


def cmd_list(inv, cfg):
    show_all = inv.flag("all")
    params = build_task_query(inv.options, show_all=show_all)
    query = urllib.parse.urlencode(params)
    result = request(cfg, "GET", task_path(cfg, f"?{query}" if query else ""))
    tasks = unwrap(result, "tasks") or []
    count = (result.get("count") if isinstance(result, dict) else None) or len(tasks)
    pending_only = not show_all and not inv.option("status")

    if cfg.format == "json":
        pretty_print(tasks)
        return
    if not tasks:
        if pending_only:
            print("No pending tasks. Use --all to see all tasks.")
        else:
            print("No tasks found.")
        return
    print(format_tasks_table(tasks))
    note = " (pending only, use --all for all)" if pending_only else ""
    print(f"\n{count} task(s) found{note}")


def cmd_update(inv, cfg):
    task_id = _task_id(inv, "ats update <id> [options]")
    body = _body_from_options(inv, ("title", "description", "status", "type", "channel"))
    if inv.option("priority"):
        body["priority"] = _priority_value(inv.option("priority"))
    if inv.option("payload"):
        body["payload"] = _safe_json_parse(inv.option("payload"), "--payload")
    if not body:
        raise CliError("[ERROR] No updates specified")

    task = unwrap(request(cfg, "PATCH", _task_route(cfg, task_id), body), "task")
    confirm(f"Task {task_id} updated")
    output(task, format_task_detail, cfg.format)


def cmd_claim(inv, cfg):
    task_id = _task_id(inv, "ats claim <id> [--lease <duration_ms>]")
    body = {}
    if inv.option("lease"):
        body["lease_duration"] = _int_option(inv, "lease")
    task = unwrap(request(cfg, "POST", _task_route(cfg, task_id, "/claim"), body), "task")
    confirm(f"Task {task_id} claimed")
    print(f"  Assignee: {task.get('assignee_name') or '-'}")
    print(f"  Lease expires: {format_timestamp(task.get('lease_expires'))}")


def cmd_complete(inv, cfg):
    task_id = _task_id(inv, "ats complete <id> [--outputs <json>]")
    body = {}
    if inv.option("outputs"):
        parsed = _safe_json_parse(inv.option("outputs"), "--outputs")
        body["outputs"] = parsed if isinstance(parsed, list) else [parsed]
    request(cfg, "POST", _task_route(cfg, task_id, "/complete"), body)
    confirm(f"Task {task_id} completed")


def cmd_cancel(inv, cfg):
    task_id = _task_id(inv, "ats cancel <id>")
    request(cfg, "POST", _task_route(cfg, task_id, "/cancel"))
    confirm(f"Task {task_id} cancelled")


def _reasoned_action(inv, cfg, action, done_message):
    task_id = _task_id(inv, f"ats {action} <id> [--reason <text>]")
    body = _body_from_options(inv, ("reason",))
    request(cfg, "POST", _task_route(cfg, task_id, f"/{action}"), body)
    confirm(done_message.format(task_id=task_id))


def cmd_fail(inv, cfg):
    _reasoned_action(inv, cfg, "fail", "Task {task_id} marked as failed")


def cmd_reject(inv, cfg):
    _reasoned_action(inv, cfg, "reject", "Task {task_id} rejected")


# ---------------------------------------------------------------------------
# Message commands
# ---------------------------------------------------------------------------


def cmd_message_add(inv, cfg):
    task_id = inv.positional[0] if inv.positional else inv.option("task")
    content = inv.positional[1] if len(inv.positional) > 1 else inv.option("content")
    if not task_id or not content:
        raise CliError(
            "[ERROR] Task ID and content are required\n"
            "Usage: ats message add <task_id> <content>\n"
            "  --type <type>  Content type (default: text)"
        )
    body = {"parts": [{"type": inv.option("type") or "text", "content": content}]}
    message = unwrap(
        request(cfg, "POST", _task_route(cfg, task_id, "/messages"), body), "message"
    )
    confirm(f"Message added to task {task_id}")
    output(message, format_message_row, cfg.format)


def cmd_message_list(inv, cfg):
    task_id = inv.positional[0] if inv.positional else inv.option("task")
    if not task_id:
        raise _usage_error("Task ID is required", "ats message list <task_id>")
    messages = unwrap(request(cfg, "GET", _task_route(cfg, task_id, "/messages")), "messages")
    output(messages, lambda m: format_messages(m, task_id), cfg.format)


# ---------------------------------------------------------------------------
# Repository (org/project) commands
# ---------------------------------------------------------------------------

_REPO_FORMAT_HINT = "Repository required in org/project format"


def _repo_arg(inv, *usage):
    parsed = parse_repo_string(inv.positional[0] if inv.positional else None)
    if parsed is None:
        raise _usage_error(_REPO_FORMAT_HINT, *usage)
    return parsed


def cmd_repo_init(inv, cfg):
    repo_arg = inv.positional[0] if inv.positional else None
    if repo_arg:
        parsed = parse_repo_string(repo_arg)
        if parsed is None:
            raise _usage_error(
                _REPO_FORMAT_HINT,
                "ats repo init <org/project>",
                "ats repo init --org <org> --project <project>",
            )
        org, project = parsed
    else:
        org = inv.option("org") or cfg.organization
        project = inv.option("project") or cfg.project

    existing = os.path.join(os.getcwd(), config.PROJECT_CONFIG_NAME)
    if os.path.exists(existing) and not inv.flag("force"):
        raise CliError(
            f"[ERROR] Repository config already exists at {existing}\nUse --force to overwrite."
        )

    if not inv.flag("no-verify"):
        try:
            request(cfg, "GET", org_path(org, project))
        except CliError as e:
            raise CliError(
                f"[ERROR] Could not verify repository {org}/{project}: {e}\n"
                "Use --no-verify to skip verification."
            ) from e

    layer = {"organization": org, "project": project}
    url = inv.option("url", "u")
    if url and url != config.DEFAULT_BASE_URL:
        layer["url"] = url

    saved = config.save_project_config(layer)
    confirm(f"Directory bound to repository: {org}/{project}")
    print(f"  Config: {saved}")
    print("\nAll ats commands in this directory will now use this repository.")


def cmd_repo_list(inv, cfg):
    orgs = request(cfg, "GET", "/orgs").get("organizations") or []
    repos = []
    for org in orgs:
        slug = org.get("slug")
        listing = request(cfg, "GET", org_path(slug, subpath="/projects?counts=true"))
        projects = listing.get("projects") or []
        for proj in projects:
            repos.append(
                {
                    "repo": f"{slug}/{proj.get('slug')}",
                    "name": proj.get("name") or proj.get("slug"),
                    "pending_count": proj.get("pending_count") or 0,
                    "in_progress_count": proj.get("in_progress_count") or 0,
                    "total_count": proj.get("total_count") or 0,
                    "org_slug": slug,
                    "project_slug": proj.get("slug"),
                }
            )

    for repo in repos:
        if repo["repo"] == cfg.repo:
            repo["repo"] += " *"
    output(repos, format_repos_table, cfg.format)


def cmd_repo_create(inv, cfg):
    org, project = _repo_arg(
        inv, 'ats repo create <org/project> [--name "Project Name"] [--description "..."]'
    )
    if _try_call(request, cfg, "GET", org_path(org)) is None:
        print(f"Creating organization: {org}")
        request(cfg, "POST", "/orgs", {"slug": org, "name": org})

    body = {"slug": project, "name": inv.option("name") or project}
    if inv.option("description"):
        body["description"] = inv.option("description")
    proj = unwrap(request(cfg, "POST", org_path(org, subpath="/projects"), body), "project")
    confirm(f"Repository created: {org}/{proj.get('slug') or project}")


def cmd_repo_switch(inv, cfg):
    org, project = _repo_arg(inv, "ats repo switch <org/project>")
    request(cfg, "GET", org_path(org, project))
    layer = config.load_global_config()
    layer.update(organization=org, project=project)
    config.save_global_config(layer)
    confirm(f"Switched to repository: {org}/{project}")


def cmd_repo_current(inv, cfg):
    print(f"Current repository: {cfg.repo}")
    print(f"  Source: {cfg.source_project_config_path or 'global config'}")


def cmd_repo_show(inv, cfg):
    report = repo_config_report(cfg, config.load_config(), config.GLOBAL_CONFIG_PATH)
    output(report, format_repo_config, cfg.format)


def _rename_target(target, org, project):
    """Resolve the second ``repo rename`` argument into (new_org, new_project)."""
    if not target:
        return None, None
    if "/" not in target:
        return None, target
    parsed = parse_repo_string(target)
    if parsed is None:
        return None, None
    new_org, new_project = parsed
    return (new_org if new_org != org else None), (new_project if new_project != project else None)


def cmd_repo_rename(inv, cfg):
    usage = (
        "ats repo rename <org/project> <new-org/new-project>",
        "ats repo rename <org/project> --slug <new-project-slug>",
        "ats repo rename <org/project> --name <display-name>",
    )
    org, project = _repo_arg(inv, *usage)
    target = inv.positional[1] if len(inv.positional) > 1 else None
    new_org, new_project = _rename_target(target, org, project)
    new_project = new_project or inv.option("slug")
    new_name = inv.option("name")
    if not new_org and not new_project and not new_name:
        raise _usage_error("Must specify target org/project, --slug, or --name", *usage)

    final_org, final_project = org, project
    if new_org:
        updated = unwrap(request(cfg, "PATCH", org_path(org), {"slug": new_org}), "organization")
        final_org = updated.get("slug") or new_org
        confirm(f"Organization renamed: {org} → {final_org}")

    if new_project or new_name:
        body = {}
        if new_project:
            body["slug"] = new_project
        if new_name:
            body["name"] = new_name
        updated = unwrap(
            request(cfg, "PATCH", org_path(final_org, project), body), "project"
        )
        final_project = updated.get("slug") or new_project or project
        confirm(f"Project renamed: {project} → {final_project}")
        if new_name:
            print(f"  Name: {updated.get('name') or new_name}")

    confirm(f"Repository: {final_org}/{final_project}")
    if not (new_org or new_project):
        return

    # Keep config files that pointed at the old repository in sync.
    loaded = config.load_config()
    renamed = {"organization": final_org, "project": final_project}
    local = loaded.project_layer
    if local and local.get("organization") == org and local.get("project") == project:
        project_dir = os.path.dirname(os.path.dirname(loaded.project_path))
        config.save_project_config({**local, **renamed}, project_dir)
        print(f"  Updated local config: {loaded.project_path}")
    glob = loaded.global_layer
    if glob.get("organization") == org and glob.get("project") == project:
        config.save_global_config({**glob, **renamed})
        print(f"  Updated global config: {config.GLOBAL_CONFIG_PATH}")


# ---------------------------------------------------------------------------
# Watch
# ---------------------------------------------------------------------------


def cmd_watch(inv, cfg):
    subscription = build_subscription(
        channel=inv.option("channel"),
        task_type=inv.option("type"),
        events=inv.option("events"),
    )
    run_watch(cfg, subscription)
