"""Shared fixtures for the web resource pipeline tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from webresources.errors import CompressionError
from webresources.utils import env


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer ``.env`` files and WEBRES_* variables out of tests."""
    monkeypatch.setattr(env, "_ENV_LOADED", True)
    for name in list(os.environ):
        if name.startswith("WEBRES_"):
            monkeypatch.delenv(name, raising=False)


class StubMinifier:
    """Minifier that strips surrounding whitespace and records its input."""

    def __init__(self, reject: str = "BROKEN") -> None:
        self.reject = reject
        self.js_calls: List[Tuple[str, Tuple]] = []
        self.css_calls: List[Tuple[str, int]] = []

    def minify_js(
        self,
        source: str,
        line_break: int,
        munge: bool,
        verbose: bool,
        preserve_semicolons: bool,
        disable_optimizations: bool,
    ) -> str:
        self.js_calls.append(
            (
                source,
                (
                    line_break,
                    munge,
                    verbose,
                    preserve_semicolons,
                    disable_optimizations,
                ),
            )
        )
        if self.reject in source:
            raise CompressionError("unexpected token")
        return source.strip()

    def minify_css(self, source: str, line_break: int) -> str:
        self.css_calls.append((source, line_break))
        if self.reject in source:
            raise CompressionError("unexpected token")
        return source.strip()


@pytest.fixture()
def stub_minifier() -> StubMinifier:
    return StubMinifier()


SiteWriter = Callable[[Dict[str, str], Optional[str], Optional[str]], Path]


@pytest.fixture()
def write_site(tmp_path: Path) -> SiteWriter:
    """Create a content root with files, a config and a variables file."""

    def _write(
        files: Dict[str, str],
        config: Optional[str] = None,
        properties: Optional[str] = None,
    ) -> Path:
        root = tmp_path / "site"
        root.mkdir(exist_ok=True)
        for name, content in files.items():
            target = root / name.lstrip("/")
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        if config is not None:
            (root / "webresources.txt").write_text(config, encoding="utf-8")
        if properties is not None:
            (root / "version.properties").write_text(
                properties, encoding="utf-8"
            )
        return root

    return _write
