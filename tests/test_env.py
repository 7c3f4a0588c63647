from __future__ import annotations

import os
from pathlib import Path

import pytest

from webresources.config import ProcessorSettings
from webresources.utils import env


def _unset(monkeypatch: pytest.MonkeyPatch, *names: str) -> None:
    """Remove ``names`` now and again after the test."""
    for name in names:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


def test_load_dotenv_populates_environment(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text("WEBRES_CONTEXT_PATH=/shop\n# comment\nEMPTY=\n")

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(env, "_ENV_LOADED", False)
    _unset(monkeypatch, "WEBRES_CONTEXT_PATH", "EMPTY")

    env.load_dotenv()

    assert os.environ["WEBRES_CONTEXT_PATH"] == "/shop"
    assert os.environ["EMPTY"] == ""


def test_load_dotenv_is_idempotent(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    dotenv = tmp_path / ".env"
    dotenv.write_text("WEBRES_CONTEXT_PATH=/first\n")

    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(env, "_ENV_LOADED", False)
    monkeypatch.setenv("WEBRES_CONTEXT_PATH", "/existing")

    env.load_dotenv()
    env.load_dotenv()  # Second call should be a no-op.

    assert os.environ["WEBRES_CONTEXT_PATH"] == "/existing"


def test_parse_line_helpers() -> None:
    assert env._parse_line("KEY=value") == ("KEY", "value")
    assert env._parse_line("   # comment") is None
    assert env._parse_line("   ") is None
    assert env._parse_line("INVALID") is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("Yes", True), (" on ", True), ("0", False), (None, False)],
)
def test_truthy(raw, expected: bool) -> None:
    assert env._truthy(raw) is expected


def test_settings_from_env_applies_overrides() -> None:
    settings = env.settings_from_env(
        environ={
            "WEBRES_PRODUCTION": "false",
            "WEBRES_SERVLET_PATH": " /res ",
            "WEBRES_CONTEXT_PATH": "/shop",
            "WEBRES_CACHE_SECONDS": "600",
            "WEBRES_JS_LINEBREAK": "0",
            "WEBRES_IGNORE_REORDER": "/app/a.js, ,/app/b.js",
        }
    )

    assert settings.production is False
    assert settings.resource_servlet_path == "/res"
    assert settings.context_path == "/shop"
    assert settings.cache_seconds == 600
    assert settings.js_line_break == 0
    assert settings.css_line_break == 120
    assert settings.ignore_from_reordering == frozenset(
        {"/app/a.js", "/app/b.js"}
    )


def test_settings_from_env_keeps_base_for_bad_values() -> None:
    base = ProcessorSettings(cache_seconds=5)

    settings = env.settings_from_env(
        base, environ={"WEBRES_CACHE_SECONDS": "soon"}
    )

    assert settings is base


def test_settings_from_env_reads_process_environment(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("WEBRES_CONFIG_NAME", "assets.txt")

    assert env.settings_from_env().config_name == "assets.txt"
