"""Default settings for the web resource processor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

DEFAULT_CONFIG_NAME = "webresources.txt"
"""Resource configuration file, resolved against the config directory."""

DEFAULT_PROPERTIES_NAME = "version.properties"
"""Variables file used for ``{key}`` substitution."""

ONE_YEAR_IN_SECONDS = 31536000


@dataclass(frozen=True)
class ProcessorSettings:
    """Switches for one processing run; see ``dataclasses.replace``."""

    production: bool = True
    config_name: str = DEFAULT_CONFIG_NAME
    properties_name: Optional[str] = DEFAULT_PROPERTIES_NAME
    cache_seconds: int = ONE_YEAR_IN_SECONDS
    css_line_break: int = 120
    js_line_break: int = 120
    js_munge: bool = False
    js_verbose: bool = False
    js_preserve_semicolons: bool = True
    js_disable_optimizations: bool = True
    resource_servlet_path: Optional[str] = None
    context_path: str = ""
    digest_algorithm: str = "md5"
    ignore_from_reordering: FrozenSet[str] = field(default_factory=frozenset)
