"""API route construction: global vs. organization/project-scoped paths."""

import urllib.parse


def quote_segment(value):
    """Percent-encode one path segment (ids, slugs); ``/`` included."""
    return urllib.parse.quote(str(value), safe="")


def build_route(config, resource_kind, subpath=""):
    """Path for *resource_kind* under the scope chosen by *config*.

    *subpath* is appended as-is (ids, actions and query string included), so
    callers quote user-supplied segments with quote_segment().
    """
    if config.use_project_scope and config.organization and config.project:
        scope = org_path(config.organization, config.project)
        return f"{scope}/{resource_kind}{subpath}"
    return f"/{resource_kind}{subpath}"


def task_path(config, subpath=""):
    return build_route(config, "tasks", subpath)


def org_path(org, project=None, subpath=""):
    """``/orgs/<org>[/projects/<project>]<subpath>`` with quoted slugs."""
    path = f"/orgs/{quote_segment(org)}"
    if project is not None:
        path += f"/projects/{quote_segment(project)}"
    return path + subpath


def parse_repo_string(value):
    """Split ``org/project`` into (org, project). Returns None if malformed.

    Anything after a second slash is ignored.
    """
    if not value or "/" not in value:
        return None
    org, project = value.split("/")[:2]
    if not org or not project:
        return None
    return org, project
