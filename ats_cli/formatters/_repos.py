"""Formatters for repositories (org/project pairs) and config sources."""

from ats_cli.formatters._table import _table, _trunc
from ats_cli.types import RepoRow

_RULE = "─" * 52


def _section(title):
    return f"├─ {title} " + "─" * max(0, 49 - len(title))


def format_repos_table(repos: list[RepoRow]) -> str:
    """Format the flattened org/project list; the current repo is starred."""
    if not repos:
        return "No repositories found. Create one with: ats repo create <org/project>"
    cols = [("Repository", 32), ("Name", 24), ("Pending", 8), ("Active", 8), ("Total", 0)]
    rows = [
        (
            _trunc(r["repo"], 32),
            _trunc(r["name"], 24),
            str(r["pending_count"]),
            str(r["in_progress_count"]),
            str(r["total_count"]),
        )
        for r in repos
    ]
    return _table(cols, rows, f"{len(repos)} repository(s) (* = current)")


def _layer_repo(layer):
    if layer and layer.get("organization") and layer.get("project"):
        return f"{layer['organization']}/{layer['project']}"
    return None


def repo_config_report(cfg, loaded, global_path):
    """JSON-friendly view of where the effective repository comes from."""
    return {
        "current": cfg.repo,
        "global": {
            "path": global_path,
            "repo": _layer_repo(loaded.global_layer),
            "url": loaded.global_layer.get("url"),
        },
        "local": (
            {
                "path": loaded.project_path,
                "repo": _layer_repo(loaded.project_layer),
                "url": loaded.project_layer.get("url"),
            }
            if loaded.project_path
            else None
        ),
        "effective": {
            "repo": cfg.repo,
            "url": cfg.base_url,
            "scoped": cfg.use_project_scope,
            "actor": {"type": cfg.actor.type, "id": cfg.actor.id, "name": cfg.actor.name},
        },
    }


def format_repo_config(report):
    """Format the output of repo_config_report() as boxed text."""
    lines = ["", "┌─ Repository Configuration " + "─" * 25]
    lines.append(f"│ Current:       {report['current']}")
    lines.append(_section("Global Config"))
    lines.append(f"│ Path:          {report['global']['path']}")
    lines.append(f"│ Repository:    {report['global']['repo'] or '(not set)'}")
    lines.append(f"│ URL:           {report['global']['url'] or '(default)'}")
    lines.append(_section("Local Config"))
    local = report["local"]
    if local:
        lines.append(f"│ Path:          {local['path']}")
        lines.append(f"│ Repository:    {local['repo'] or '(not set)'}")
        lines.append(f"│ URL:           {local['url'] or '(inherited)'}")
    else:
        lines.append("│ (no local config found)")
    effective = report["effective"]
    lines.append(_section("Effective Settings"))
    lines.append(f"│ Repository:    {effective['repo']}")
    lines.append(f"│ URL:           {effective['url']}")
    lines.append(f"│ Scoped routes: {'yes' if effective['scoped'] else 'no'}")
    actor = effective["actor"]
    lines.append(f"│ Actor:         {actor['name']} ({actor['type']})")
    lines.append("└" + _RULE)
    return "\n".join(lines)
