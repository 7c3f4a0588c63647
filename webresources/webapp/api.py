"""Diagnostics blueprint listing what the processor published."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from .artifacts import FlaskRoutePublisher

api_bp = Blueprint("webresources_api", __name__)


def _get_publisher() -> FlaskRoutePublisher:
    publisher = current_app.config.get("WEBRESOURCES_PUBLISHER")
    if not isinstance(publisher, FlaskRoutePublisher):
        raise RuntimeError(
            "WEBRESOURCES_PUBLISHER config must be a FlaskRoutePublisher"
        )
    return publisher


@api_bp.get("/health")
def healthcheck():
    """Readiness probe; reports groups that failed to bundle."""
    failed = sorted(current_app.config.get("WEBRESOURCES_FAILED_GROUPS", []))
    status = "ok" if not failed else "degraded"
    return jsonify({"status": status, "failed_groups": failed}), 200


@api_bp.get("/artifacts")
def list_artifacts():
    """Return every published artifact with its caching metadata."""
    registry = _get_publisher().registry
    items = []
    for path in registry.paths():
        artifact = registry.get(path)
        if artifact is None:
            continue
        items.append(
            {
                "path": artifact.path,
                "etag": artifact.etag,
                "content_type": artifact.content_type,
                "cache_seconds": artifact.cache_seconds,
                "bytes": len(artifact.content),
            }
        )
    return jsonify(
        {
            "artifacts": items,
            "groups": sorted(current_app.config.get("WEBRESOURCES_TAGS", {})),
        }
    ), 200
