"""Source text transformations applied before minification."""

from __future__ import annotations

import posixpath
import re
from typing import Iterable

from .resources import GroupKind

DEBUG_BLOCK_PATTERN = re.compile(
    r"/\* <debug> \*/.*?/\* </debug> \*/", re.DOTALL
)
REQUIRES_DIRECTIVE_PATTERN = re.compile(
    r"\brequires\s*?:\s*?\[.*?\]\s*?,", re.DOTALL
)
USES_DIRECTIVE_PATTERN = re.compile(r"\buses\s*?:\s*?\[.*?\]\s*?,", re.DOTALL)

CSS_URL_PATTERN = re.compile(
    r"(\burl\s*\(\s*['\"]?)(.*?)(\?.*?)??(['\"]?\s*\))", re.IGNORECASE
)
_URL_SCHEME = re.compile(r"^[a-z][a-z0-9+.\-]*:", re.IGNORECASE)
VML_BEHAVIOR = "#default#VML"

JAVASCRIPT_TAG = '<script src="{}"></script>'
CSS_LINK_TAG = '<link rel="stylesheet" href="{}">'


def clean_code(source: str) -> str:
    """Drop debug-only blocks and Ext JS loader directives."""
    source = DEBUG_BLOCK_PATTERN.sub("", source)
    source = REQUIRES_DIRECTIVE_PATTERN.sub("", source)
    return USES_DIRECTIVE_PATTERN.sub("", source)


def rewrite_css_urls(css: str, css_path: str, context_path: str = "") -> str:
    """Resolve relative ``url(...)`` references against ``css_path``.

    ``url(../img/x.png)`` inside ``a/b/c.css`` becomes ``url(a/img/x.png)``.
    Query strings survive; ``#default#VML``, URLs with a scheme and
    fragment-only references are left alone.
    """
    base_dir = posixpath.dirname(context_path + css_path)

    def _replace(match: "re.Match[str]") -> str:
        url = match.group(2).strip()
        if (
            not url
            or url == VML_BEHAVIOR
            or url.startswith("#")
            or _URL_SCHEME.match(url)
        ):
            return match.group(0)
        resolved = posixpath.normpath(posixpath.join(base_dir, url))
        return "".join(
            (match.group(1), resolved, match.group(3) or "", match.group(4))
        )

    return CSS_URL_PATTERN.sub(_replace, css)


def render_tags(
    kind: GroupKind, paths: Iterable[str], context_path: str = ""
) -> str:
    """Render one ``<script>`` or ``<link>`` tag per path."""
    template = JAVASCRIPT_TAG if kind is GroupKind.JS else CSS_LINK_TAG
    return "".join(template.format(context_path + path) for path in paths)
