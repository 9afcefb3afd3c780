"""
ats-cli configuration: constants, config file discovery, and layered resolution.

Effective settings come from five sources, lowest to highest precedence:
built-in defaults, global file (~/.ats/config), project file (.ats/config in
the working directory or the closest ancestor), environment variables, and
CLI options. Malformed config files are treated as empty, never as errors.
"""

import json
import os
import tempfile
from dataclasses import dataclass

from ats_cli.exceptions import CliError
from ats_cli.types import ConfigLayer

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

VERSION = "1.0.1"

DEFAULT_BASE_URL = "https://ats.difflab.ai"
DEFAULT_ORGANIZATION = "default"
DEFAULT_PROJECT = "main"
DEFAULT_ACTOR_TYPE = "human"
DEFAULT_FORMAT = "table"
VALID_FORMATS = ("table", "json")

GLOBAL_CONFIG_PATH = os.path.join(os.path.expanduser("~"), ".ats", "config")
PROJECT_CONFIG_NAME = os.path.join(".ats", "config")

ENV_URL = "ATS_URL"
ENV_ORG = "ATS_ORG"
ENV_PROJECT = "ATS_PROJECT"
ENV_ACTOR_TYPE = "ATS_ACTOR_TYPE"
ENV_ACTOR_ID = "ATS_ACTOR_ID"
ENV_ACTOR_NAME = "ATS_ACTOR_NAME"

_LAYER_KEYS = ("organization", "project", "url")
_ACTOR_KEYS = ("type", "id", "name")


def _env_bool(key, default=False):
    """Parse common boolean env formats."""
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key, default):
    """Parse integer env values with fallback."""
    raw = os.environ.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


HTTP_TIMEOUT_SECONDS = _env_int("ATS_HTTP_TIMEOUT_SECONDS", 30)
HTTP_MAX_RESPONSE_BYTES = _env_int("ATS_HTTP_MAX_RESPONSE_BYTES", 5_000_000)
HTTP_LOG_ENABLED = _env_bool("ATS_HTTP_LOG", False)
WATCH_PING_SECONDS = 30

# ---------------------------------------------------------------------------
# Effective configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Actor:
    type: str
    id: str
    name: str


@dataclass(frozen=True)
class EffectiveConfig:
    """Settings for one invocation. Derived, never persisted."""

    base_url: str
    organization: str
    project: str
    use_project_scope: bool
    actor: Actor
    format: str = DEFAULT_FORMAT
    verbose: bool = False
    source_project_config_path: str | None = None

    @property
    def repo(self):
        return f"{self.organization}/{self.project}"


@dataclass(frozen=True)
class LoadedConfig:
    """On-disk layers as found, plus their merge."""

    global_layer: ConfigLayer
    project_layer: ConfigLayer | None
    merged: ConfigLayer
    project_path: str | None


# ---------------------------------------------------------------------------
# Reading layers
# ---------------------------------------------------------------------------


def read_text(path):
    """Default filesystem reader: file contents, or None if unreadable."""
    try:
        with open(path, encoding="utf-8") as f:
            return f.read()
    except OSError:
        return None


def parse_layer(text: str | None) -> ConfigLayer | None:
    """Parse config file text into a layer dict.

    Returns None when the text is missing, is not valid JSON, or is not a JSON
    object. Unknown keys and non-string values are dropped.
    """
    if text is None:
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    layer = {k: data[k] for k in _LAYER_KEYS if isinstance(data.get(k), str) and data[k]}
    actor = data.get("actor")
    if isinstance(actor, dict):
        actor_layer = {
            k: actor[k] for k in _ACTOR_KEYS if isinstance(actor.get(k), str) and actor[k]
        }
        if actor_layer:
            layer["actor"] = actor_layer
    return layer


def load_global_config(path=None, reader=None):
    """Load ~/.ats/config. Missing or malformed files give an empty layer."""
    reader = reader or read_text
    return parse_layer(reader(path or GLOBAL_CONFIG_PATH)) or {}


def find_project_config(cwd=None, reader=None, global_path=None):
    """Walk up from *cwd* looking for .ats/config.

    Returns (path, layer) for the closest readable file, or None. Malformed
    files are skipped and the walk continues upward. The global config file is
    never treated as a project file.
    """
    reader = reader or read_text
    global_path = os.path.abspath(global_path or GLOBAL_CONFIG_PATH)
    directory = os.path.abspath(cwd or os.getcwd())
    while True:
        candidate = os.path.join(directory, PROJECT_CONFIG_NAME)
        if candidate != global_path:
            layer = parse_layer(reader(candidate))
            if layer is not None:
                return candidate, layer
        parent = os.path.dirname(directory)
        if parent == directory:
            return None
        directory = parent


def merge_layers(lower: ConfigLayer, upper: ConfigLayer) -> ConfigLayer:
    """Overlay *upper* on *lower*; the actor sub-object merges per field."""
    merged = {**lower, **upper}
    actor = {**lower.get("actor", {}), **upper.get("actor", {})}
    if actor:
        merged["actor"] = actor
    return merged


def load_config(cwd=None, global_path=None, reader=None):
    global_layer = load_global_config(global_path, reader)
    found = find_project_config(cwd, reader, global_path)
    if found is None:
        return LoadedConfig(global_layer, None, global_layer, None)
    project_path, project_layer = found
    return LoadedConfig(
        global_layer,
        project_layer,
        merge_layers(global_layer, project_layer),
        project_path,
    )


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def _first(*candidates, default=None):
    """First non-empty string among *candidates*. Boolean flags are skipped."""
    for value in candidates:
        if isinstance(value, str) and value:
            return value
    return default


def resolve_config(options, environ=None, cwd=None, global_path=None, reader=None):
    """Build the EffectiveConfig for one invocation.

    *options* is the merged option/flag mapping of the parsed invocation.
    *environ*, *cwd*, *global_path* and *reader* default to the real process
    environment and filesystem.
    """
    environ = os.environ if environ is None else environ
    loaded = load_config(cwd=cwd, global_path=global_path, reader=reader)
    file_layer = loaded.merged
    file_actor = file_layer.get("actor", {})

    org_signal = _first(options.get("org"), environ.get(ENV_ORG), file_layer.get("organization"))
    project_signal = _first(
        options.get("project"), environ.get(ENV_PROJECT), file_layer.get("project")
    )

    fmt = _first(options.get("format"), options.get("f"), default=DEFAULT_FORMAT)
    if fmt not in VALID_FORMATS:
        raise CliError(f"[ERROR] Invalid format '{fmt}'. Use: {', '.join(VALID_FORMATS)}")

    user = environ.get("USER")
    actor = Actor(
        type=_first(
            options.get("actor-type"),
            environ.get(ENV_ACTOR_TYPE),
            file_actor.get("type"),
            default=DEFAULT_ACTOR_TYPE,
        ),
        id=_first(
            options.get("actor-id"),
            environ.get(ENV_ACTOR_ID),
            file_actor.get("id"),
            default=f"cli-{user or 'user'}",
        ),
        name=_first(
            options.get("actor-name"),
            environ.get(ENV_ACTOR_NAME),
            file_actor.get("name"),
            user,
            default="CLI User",
        ),
    )

    return EffectiveConfig(
        base_url=_first(
            options.get("url"),
            options.get("u"),
            environ.get(ENV_URL),
            file_layer.get("url"),
            default=DEFAULT_BASE_URL,
        ),
        organization=org_signal or DEFAULT_ORGANIZATION,
        project=project_signal or DEFAULT_PROJECT,
        use_project_scope=bool(org_signal or project_signal),
        actor=actor,
        format=fmt,
        verbose=bool(options.get("verbose") or options.get("v")),
        source_project_config_path=loaded.project_path,
    )


# ---------------------------------------------------------------------------
# Writing layers
# ---------------------------------------------------------------------------


def _write_json_atomic(path, data):
    """Write JSON to *path* (write-then-rename), creating parent dirs."""
    directory = os.path.dirname(path) or "."
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".config_tmp_")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.remove(tmp_path)
        except OSError:
            pass
        raise


def save_global_config(layer, path=None):
    """Write the global config file. Returns its path."""
    path = path or GLOBAL_CONFIG_PATH
    _write_json_atomic(path, layer)
    return path


def save_project_config(layer, directory=None):
    """Write .ats/config under *directory* (default: cwd). Returns its path."""
    path = os.path.join(os.path.abspath(directory or os.getcwd()), PROJECT_CONFIG_NAME)
    _write_json_atomic(path, layer)
    return path
