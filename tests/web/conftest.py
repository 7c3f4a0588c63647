from __future__ import annotations

import dataclasses
from typing import Any, Callable, Dict, Generator

import pytest
from flask import Flask

from webresources.config import ProcessorSettings
from webresources.webapp import create_app

SITE_FILES = {
    "app/a.js": "Ext.define('App.A', {extend: 'App.B'});\n",
    "app/b.js": "Ext.define('App.B', {});\n",
    "css/site.css": "a {\n  background: url(img/x.png);\n}\n",
}

SITE_CONFIG = "app_js:\n  /app/[pd]\nsite_css:\n  /css/site.css[pd]\n"

AppFactory = Callable[..., Flask]


@pytest.fixture()
def make_app(write_site) -> AppFactory:
    """Build an app over a freshly written site; kwargs tweak settings."""

    def _make(
        files: Dict[str, str] = SITE_FILES,
        config: str = SITE_CONFIG,
        **overrides: Any,
    ) -> Flask:
        root = write_site(files, config)
        settings = dataclasses.replace(ProcessorSettings(), **overrides)
        return create_app(
            {
                "TESTING": True,
                "WEBRESOURCES_ROOT": str(root),
                "WEBRESOURCES_SETTINGS": settings,
            }
        )

    return _make


@pytest.fixture()
def web_app(make_app: AppFactory) -> Generator[Flask, None, None]:
    """Provide a production-mode application with both groups bundled."""
    yield make_app()


@pytest.fixture()
def client(web_app: Flask):
    """Flask test client fixture."""
    return web_app.test_client()


@pytest.fixture()
def site_files() -> Dict[str, str]:
    """A copy of the default site contents that tests may extend."""
    return dict(SITE_FILES)
