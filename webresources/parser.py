"""Parser for the line-oriented web resource configuration format.

Example::

    # comment
    app_js:
      /lib/{extjs.version}/ext-all.js[s]
      /app/
      /app/debug.js[d]
    app_css:
      /css/app.css[dp]

A line ending in ``:`` opens a group. ``{key}`` placeholders are replaced
from the variables file first. An optional ``[...]`` suffix holds mode
letters: ``p`` production, ``d`` development, ``s`` literal tag.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple, Union

from .errors import ConfigReadError
from .resources import (MODE_DEVELOPMENT, MODE_PRODUCTION,
                        MODE_SCRIPT_OR_LINK, GroupKind, ResourceGroups,
                        WebResource)

_LOGGER = logging.getLogger(__name__)

_PROPERTY_SEPARATOR = re.compile(r"(?<!\\)[=:\s]")
_PROPERTY_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def load_properties(path: Union[Path, str]) -> Dict[str, str]:
    """Read a Java-style ``.properties`` file into a flat dictionary."""
    properties_file = Path(path)
    try:
        text = properties_file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigReadError(
            f"Properties file {properties_file} is unreadable: {exc}"
        ) from exc
    return parse_properties(text)


def parse_properties(text: str) -> Dict[str, str]:
    properties: Dict[str, str] = {}
    for logical_line in _logical_lines(text):
        parsed = _parse_property(logical_line)
        if parsed:
            key, value = parsed
            properties[key] = value
    return properties


def _logical_lines(text: str) -> List[str]:
    lines: List[str] = []
    pending = ""
    for raw in text.splitlines():
        line = raw.lstrip() if pending else raw.strip()
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending += line[:-1]
            continue
        lines.append(pending + line)
        pending = ""
    if pending:
        lines.append(pending)
    return lines


def _parse_property(line: str) -> Optional[Tuple[str, str]]:
    stripped = line.strip()
    if not stripped:
        return None
    match = _PROPERTY_SEPARATOR.search(stripped)
    if match is None:
        return (_unescape(stripped), "")
    key = stripped[: match.start()]
    rest = stripped[match.start():].lstrip()
    if rest[:1] in ("=", ":"):
        rest = rest[1:].lstrip()
    return (_unescape(key), _unescape(rest))


def _unescape(value: str) -> str:
    result: List[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char != "\\" or index + 1 == len(value):
            result.append(char)
            index += 1
            continue
        escaped = value[index + 1]
        if escaped == "u" and index + 6 <= len(value):
            try:
                result.append(chr(int(value[index + 2:index + 6], 16)))
                index += 6
                continue
            except ValueError:
                pass
        result.append(_PROPERTY_ESCAPES.get(escaped, escaped))
        index += 2
    return "".join(result)


def replace_variables(line: str, variables: Mapping[str, str]) -> str:
    """Substitute every ``{key}`` placeholder found in ``variables``."""
    for key, value in variables.items():
        line = line.replace("{" + key + "}", value)
    return line


def split_mode(line: str) -> Tuple[str, str]:
    """Split ``path[mode]`` into ``(path, mode)``; default mode is ``p``."""
    if line.endswith("]"):
        position = line.rfind("[")
        if position != -1:
            return line[:position].rstrip(), line[position + 1:-1]
    return line, MODE_PRODUCTION


class ConfigParser:
    """Turn a resource configuration file into ordered resource groups.

    Entries are filtered for the active mode: a development run keeps
    entries flagged ``d`` as literal references, a production run keeps
    entries flagged ``p`` as bundle candidates (literals when ``s`` is
    also present). Directory entries still end in ``/``.
    """

    def __init__(
        self,
        config_file: Union[Path, str],
        *,
        variables: Optional[Mapping[str, str]] = None,
        production: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config_file = Path(config_file)
        self._variables = dict(variables or {})
        self._production = production
        self._logger = logger or _LOGGER

    def parse(self) -> ResourceGroups:
        groups: ResourceGroups = {}
        group: Optional[str] = None
        skipped_groups = set()

        for raw_line in self._read_lines():
            line = raw_line.strip()
            if not line or line.startswith("#"):
                continue

            if line.endswith(":"):
                group = line[:-1].strip()
                if GroupKind.from_group_name(group) is None:
                    self._logger.warning(
                        "Group '%s' ends in neither _js nor _css; skipping",
                        group,
                    )
                    skipped_groups.add(group)
                continue

            if group is None or group in skipped_groups:
                continue

            resource = self._parse_entry(group, line)
            if resource is not None:
                groups.setdefault(group, []).append(resource)

        self._logger.info(
            "Parsed %d resource groups from %s",
            len(groups),
            self._config_file,
        )
        return groups

    def _parse_entry(self, group: str, line: str) -> Optional[WebResource]:
        path, mode = split_mode(replace_variables(line, self._variables))
        if not path:
            return None

        if not self._production:
            if MODE_DEVELOPMENT in mode:
                return WebResource(group, path, minify=False)
            return None

        if MODE_PRODUCTION not in mode:
            return None
        return WebResource(
            group, path, minify=MODE_SCRIPT_OR_LINK not in mode
        )

    def _read_lines(self) -> List[str]:
        try:
            with self._config_file.open("r", encoding="utf-8") as handle:
                lines = [line.rstrip("\n") for line in handle]
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigReadError(
                f"Resource configuration {self._config_file} is unreadable: "
                f"{exc}"
            ) from exc
        self._logger.debug(
            "Read %d raw lines from %s", len(lines), self._config_file
        )
        return lines
