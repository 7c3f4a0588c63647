"""Helpers for loading processor settings from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple, Union

from ..config import ProcessorSettings

_ENV_LOADED = False

_LOGGER = logging.getLogger(__name__)


def load_dotenv(dotenv_path: Union[str, Path] = ".env") -> None:
    """Load environment variables from a simple ``.env`` file if present."""
    global _ENV_LOADED
    if _ENV_LOADED:
        return

    path = Path(dotenv_path)
    if path.exists():
        for line in path.read_text(encoding="utf-8").splitlines():
            parsed = _parse_line(line)
            if parsed:
                key, value = parsed
                os.environ.setdefault(key, value)

    _ENV_LOADED = True


def _parse_line(line: str) -> Optional[Tuple[str, str]]:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    if "=" not in stripped:
        return None

    key, value = stripped.split("=", 1)
    return (key.strip(), value.strip())


def _truthy(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _int_value(environ: Mapping[str, str], name: str) -> Optional[int]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        _LOGGER.warning("Ignoring %s=%r: not an integer", name, raw)
        return None


def settings_from_env(
    base: Optional[ProcessorSettings] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProcessorSettings:
    """Apply ``WEBRES_*`` overrides on top of ``base``.

    Reads ``.env`` once before consulting ``os.environ``. Unset variables
    keep the value from ``base``.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    settings = base or ProcessorSettings()
    overrides: Dict[str, object] = {}

    if "WEBRES_PRODUCTION" in environ:
        overrides["production"] = _truthy(environ["WEBRES_PRODUCTION"])
    for env_name, field_name in (
        ("WEBRES_SERVLET_PATH", "resource_servlet_path"),
        ("WEBRES_CONTEXT_PATH", "context_path"),
        ("WEBRES_CONFIG_NAME", "config_name"),
        ("WEBRES_PROPERTIES_NAME", "properties_name"),
    ):
        if env_name in environ:
            overrides[field_name] = environ[env_name].strip()
    for env_name, field_name in (
        ("WEBRES_CACHE_SECONDS", "cache_seconds"),
        ("WEBRES_JS_LINEBREAK", "js_line_break"),
        ("WEBRES_CSS_LINEBREAK", "css_line_break"),
    ):
        value = _int_value(environ, env_name)
        if value is not None:
            overrides[field_name] = value
    ignore_raw = environ.get("WEBRES_IGNORE_REORDER")
    if ignore_raw:
        overrides["ignore_from_reordering"] = frozenset(
            item.strip() for item in ignore_raw.split(",") if item.strip()
        )

    if not overrides:
        return settings
    return replace(settings, **overrides)  # type: ignore[arg-type]
