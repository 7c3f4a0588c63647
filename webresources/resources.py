"""Configured resource entries and group naming conventions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

MODE_PRODUCTION = "p"
MODE_DEVELOPMENT = "d"
MODE_SCRIPT_OR_LINK = "s"

JS_GROUP_SUFFIX = "_js"
CSS_GROUP_SUFFIX = "_css"


class GroupKind(str, Enum):
    """Asset type of a resource group, derived from its name suffix."""

    JS = "js"
    CSS = "css"

    @classmethod
    def from_group_name(cls, group: str) -> Optional["GroupKind"]:
        if group.endswith(JS_GROUP_SUFFIX):
            return cls.JS
        if group.endswith(CSS_GROUP_SUFFIX):
            return cls.CSS
        return None

    @property
    def group_suffix(self) -> str:
        return JS_GROUP_SUFFIX if self is GroupKind.JS else CSS_GROUP_SUFFIX

    @property
    def file_suffix(self) -> str:
        return f".{self.value}"

    @property
    def content_type(self) -> str:
        if self is GroupKind.JS:
            return "application/javascript"
        return "text/css"

    def group_root(self, group: str) -> str:
        return group[: len(group) - len(self.group_suffix)]


@dataclass(frozen=True)
class WebResource:
    """One configured entry: a bundle candidate or a literal reference."""

    group: str
    path: str
    minify: bool

    @property
    def is_directory(self) -> bool:
        return self.path.endswith("/")


ResourceGroups = Dict[str, List[WebResource]]
