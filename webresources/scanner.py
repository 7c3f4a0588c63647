"""Best-effort static scan of Ext JS class declarations and references.

This is pattern matching over source text, not a JavaScript parser. A file
is assumed to define at most one primary class; only the first
``Ext.define`` is reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Set

DEFINE_PATTERN = re.compile(r"Ext\.define\s*?\(\s*?['\"](.*?)['\"]")

SINGLE_REFERENCE_PATTERNS = (
    re.compile(r"extend\s*?:\s*?['\"](.*?)['\"]"),
    re.compile(r"controller\s*?:\s*?['\"](.*?)['\"]"),
    re.compile(r"model\s*?:\s*?['\"](.*?)['\"]"),
)

LIST_REFERENCE_PATTERNS = (
    re.compile(r"requires\s*?:\s*?\[(.*?)\]", re.DOTALL),
    re.compile(r"uses\s*?:\s*?\[(.*?)\]", re.DOTALL),
)

QUOTED_NAME_PATTERN = re.compile(r"['\"](.*?)['\"]", re.DOTALL)


@dataclass(frozen=True)
class ScanResult:
    """Class defined by a source file and the class names it references."""

    defined_class: Optional[str] = None
    references: FrozenSet[str] = field(default_factory=frozenset)


class SourceReferenceScanner:
    """Extract ``Ext.define`` names and their dependency references."""

    def scan(self, source: str) -> ScanResult:
        match = DEFINE_PATTERN.search(source)
        defined_class = match.group(1) if match else None

        references: Set[str] = set()
        for pattern in SINGLE_REFERENCE_PATTERNS:
            match = pattern.search(source)
            if match:
                references.add(match.group(1))

        for pattern in LIST_REFERENCE_PATTERNS:
            match = pattern.search(source)
            if match:
                references.update(
                    name.group(1)
                    for name in QUOTED_NAME_PATTERN.finditer(match.group(1))
                )

        return ScanResult(
            defined_class=defined_class,
            references=frozenset(references),
        )
