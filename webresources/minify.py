"""JavaScript and CSS minification backed by ``rjsmin`` and ``rcssmin``."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import rcssmin
import rjsmin

from .errors import CompressionError

_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%<>~^")
_REGEX_KEYWORDS = frozenset(
    {
        "return",
        "typeof",
        "case",
        "do",
        "else",
        "in",
        "instanceof",
        "new",
        "delete",
        "void",
        "throw",
    }
)


class Minifier(Protocol):
    """Minification capability consumed by the bundler."""

    def minify_js(
        self,
        source: str,
        line_break: int,
        munge: bool,
        verbose: bool,
        preserve_semicolons: bool,
        disable_optimizations: bool,
    ) -> str:
        """Return minified JavaScript or raise CompressionError."""

    def minify_css(self, source: str, line_break: int) -> str:
        """Return minified CSS or raise CompressionError."""


class RjsminMinifier:
    """Whitespace and comment stripping minifier.

    ``rjsmin`` neither renames identifiers nor rewrites expressions, so the
    ``munge`` and ``disable_optimizations`` switches have no effect beyond a
    debug message. Lines are wrapped after ``;`` or ``}`` (JS) and ``}``
    (CSS) once they reach ``line_break`` characters; ``line_break <= 0``
    keeps everything on one line.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(__name__)

    def minify_js(
        self,
        source: str,
        line_break: int = 120,
        munge: bool = False,
        verbose: bool = False,
        preserve_semicolons: bool = True,
        disable_optimizations: bool = True,
    ) -> str:
        if munge:
            self._logger.debug("rjsmin does not mangle names; ignoring munge")
        try:
            minified = rjsmin.jsmin(source, keep_bang_comments=False)
        except Exception as exc:  # noqa: BLE001 - backend specific errors
            raise CompressionError(
                f"JavaScript minification failed: {exc}"
            ) from exc
        if verbose:
            self._logger.debug(
                "Minified JavaScript from %d to %d characters",
                len(source),
                len(minified),
            )
        return wrap_javascript(minified, line_break)

    def minify_css(self, source: str, line_break: int = 120) -> str:
        try:
            minified = rcssmin.cssmin(source, keep_bang_comments=False)
        except Exception as exc:  # noqa: BLE001 - backend specific errors
            raise CompressionError(f"CSS minification failed: {exc}") from exc
        check_css_braces(minified)
        return wrap_css(minified, line_break)


def check_css_braces(css: str) -> None:
    """Raise CompressionError when ``{``/``}`` outside strings do not pair."""
    depth = 0
    quote: Optional[str] = None
    index = 0
    while index < len(css):
        char = css[index]
        if quote:
            if char == "\\":
                index += 1
            elif char == quote:
                quote = None
        elif char in "'\"":
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                raise CompressionError(
                    f"Unexpected '}}' at offset {index} in CSS"
                )
        index += 1
    if quote:
        raise CompressionError("Unterminated string in CSS")
    if depth:
        raise CompressionError(f"{depth} unclosed '{{' block(s) in CSS")


def wrap_css(css: str, line_break: int) -> str:
    if line_break <= 0:
        return css
    output: List[str] = []
    line_length = 0
    quote: Optional[str] = None
    escaped = False
    for char in css:
        output.append(char)
        line_length += 1
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in "'\"":
            quote = char
        elif char == "}" and line_length >= line_break:
            output.append("\n")
            line_length = 0
    return "".join(output)


def wrap_javascript(script: str, line_break: int) -> str:
    """Insert newlines after statement ends outside literals."""
    if line_break <= 0:
        return script
    output: List[str] = []
    line_length = 0
    index = 0
    length = len(script)
    while index < length:
        char = script[index]
        if char in "'\"`":
            end = _skip_string(script, index)
        elif char == "/" and _starts_regex(output):
            end = _skip_regex(script, index)
        else:
            output.append(char)
            line_length = 0 if char == "\n" else line_length + 1
            index += 1
            if char in ";}" and line_length >= line_break:
                output.append("\n")
                line_length = 0
            continue
        literal = script[index:end]
        output.append(literal)
        if "\n" in literal:
            line_length = len(literal) - literal.rfind("\n") - 1
        else:
            line_length += len(literal)
        index = end
    return "".join(output)


def _skip_string(script: str, start: int) -> int:
    quote = script[start]
    index = start + 1
    while index < len(script):
        char = script[index]
        if char == "\\":
            index += 2
            continue
        index += 1
        if char == quote:
            break
    return min(index, len(script))


def _starts_regex(output: List[str]) -> bool:
    text = "".join(output[-16:]).rstrip()
    if not text:
        return True
    previous = text[-1]
    if previous in _REGEX_PRECEDERS:
        return True
    if previous.isalnum() or previous in "_$":
        word: List[str] = []
        for char in reversed(text):
            if not (char.isalnum() or char in "_$"):
                break
            word.append(char)
        return "".join(reversed(word)) in _REGEX_KEYWORDS
    return False


def _skip_regex(script: str, start: int) -> int:
    index = start + 1
    in_class = False
    while index < len(script):
        char = script[index]
        if char == "\\":
            index += 2
            continue
        if char == "\n":
            break
        index += 1
        if in_class:
            if char == "]":
                in_class = False
        elif char == "[":
            in_class = True
        elif char == "/":
            break
    return min(index, len(script))
