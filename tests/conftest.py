"""
Shared test fixtures for ats-cli tests.
Points config paths at a temp dir and clears ATS_* variables so tests never
read the real ~/.ats/config or the developer's environment.
"""

import os
import sys

import pytest

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

_ENV_KEYS = (
    "ATS_URL",
    "ATS_ORG",
    "ATS_PROJECT",
    "ATS_ACTOR_TYPE",
    "ATS_ACTOR_ID",
    "ATS_ACTOR_NAME",
)


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Every test gets an empty home, an empty working dir and no ATS_* env."""
    from ats_cli import config

    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setattr(config, "GLOBAL_CONFIG_PATH", str(home / ".ats" / "config"))
    monkeypatch.setattr(config, "HTTP_LOG_ENABLED", False)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("USER", "tester")
    monkeypatch.chdir(work)


@pytest.fixture
def cfg():
    """Scoped EffectiveConfig for handler tests."""
    from ats_cli.config import Actor, EffectiveConfig

    return EffectiveConfig(
        base_url="http://ats.test",
        organization="acme",
        project="web",
        use_project_scope=True,
        actor=Actor(type="human", id="cli-tester", name="tester"),
    )
