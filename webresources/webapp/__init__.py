"""Flask application factory publishing bundles at startup."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

from flask import Flask, current_app
from markupsafe import Markup

from ..bundler import WebResourceProcessor
from ..config import ProcessorSettings
from ..errors import CompressionError
from ..storage.content import LocalContentProvider
from ..utils.env import settings_from_env
from .artifacts import (FlaskRoutePublisher, SourceFileRoutes,
                        cacheable_response)


def create_app(config: Dict[str, Any] | None = None) -> Flask:
    """Create the app, bundle every configured group and install its tags.

    ``WEBRESOURCES_ROOT`` is the content root (default: working directory).
    In development mode the literal files named by the tags are served from
    that root; nothing else below it is reachable.
    """
    options = dict(config or {})
    root = Path(options.get("WEBRESOURCES_ROOT") or os.getcwd())
    settings = options.get("WEBRESOURCES_SETTINGS")
    if not isinstance(settings, ProcessorSettings):
        settings = settings_from_env()

    app = Flask(__name__, static_folder=None)
    app.config.setdefault("JSON_SORT_KEYS", False)
    app.config.update(options)

    publisher = FlaskRoutePublisher(app, logger=app.logger)
    processor = WebResourceProcessor(
        LocalContentProvider(root),
        settings,
        config_dir=options.get("WEBRESOURCES_CONFIG_DIR") or root,
        publisher=publisher,
        logger=app.logger,
    )

    tags: Dict[str, str] = {}

    def _install(group: str, html: str) -> None:
        tags[group] = html
        app.jinja_env.globals[group] = Markup(html)

    try:
        processor.process(installer=_install)
    except CompressionError as exc:
        app.logger.error("Web resource bundling incomplete: %s", exc)

    report = processor.last_report
    failed = sorted(report.errors) if report is not None else []
    if report is not None and not settings.production:
        sources = SourceFileRoutes(app, root, logger=app.logger)
        for paths in report.outputs.values():
            for path in paths:
                sources.register(path)
    app.config["WEBRESOURCES_SETTINGS"] = settings
    app.config["WEBRESOURCES_PUBLISHER"] = publisher
    app.config["WEBRESOURCES_TAGS"] = tags
    app.config["WEBRESOURCES_FAILED_GROUPS"] = failed

    from .api import api_bp

    app.register_blueprint(api_bp, url_prefix="/_webresources")
    return app


def get_tags(app: Flask | None = None) -> Dict[str, str]:
    """Rendered tags per group for the given (or current) app."""
    ctx_app = app or current_app
    return dict(ctx_app.config.get("WEBRESOURCES_TAGS", {}))


__all__ = [
    "FlaskRoutePublisher",
    "SourceFileRoutes",
    "cacheable_response",
    "create_app",
    "get_tags",
]
