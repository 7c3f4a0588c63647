"""Expansion of directory declarations into concrete resource paths."""

from __future__ import annotations

import logging
from typing import List, Optional

from .storage.content import ContentProvider


class ResourceEnumerator:
    """Collect files ending in a suffix below directory-style paths.

    Results follow the provider's listing order.
    """

    def __init__(
        self,
        provider: ContentProvider,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._provider = provider
        self._logger = logger or logging.getLogger(__name__)

    def enumerate(self, path: str, suffix: str) -> List[str]:
        if not path.endswith("/"):
            return [path] if path.endswith(suffix) else []

        resources: List[str] = []
        children = self._provider.list_directory(path)
        if not children:
            self._logger.debug("No resources below %s", path)
        for child in children:
            resources.extend(self.enumerate(child, suffix))
        return resources
