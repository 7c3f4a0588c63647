"""Bundling engine and the processor facade built on top of it."""

from __future__ import annotations

import base64
import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set, Tuple, Union

from .config import ProcessorSettings
from .enumerator import ResourceEnumerator
from .errors import (CompressionError, ConfigReadError, DigestUnavailable,
                     ResourceReadError)
from .minify import Minifier, RjsminMinifier
from .ordering import ResourceOrderer
from .parser import ConfigParser, load_properties
from .resources import GroupKind, ResourceGroups, WebResource
from .rewrite import clean_code, render_tags, rewrite_css_urls
from .storage.content import ContentProvider
from .storage.publisher import InMemoryArtifactRegistry, Publisher

Installer = Callable[[str, str], None]


def compute_digest(content: bytes, algorithm: str = "md5") -> str:
    """Return the unpadded base64url digest of ``content``."""
    try:
        digest = hashlib.new(algorithm, usedforsecurity=False)
    except (ValueError, TypeError) as exc:
        raise DigestUnavailable(
            f"Hash algorithm '{algorithm}' is not available"
        ) from exc
    digest.update(content)
    return base64.urlsafe_b64encode(digest.digest()).rstrip(b"=").decode(
        "ascii"
    )


@dataclass(frozen=True)
class BundledArtifact:
    """Concatenated, minified content of one group."""

    group: str
    filename: str
    path: str
    content: bytes
    digest: str
    content_type: str


@dataclass
class BundleReport:
    """Per-group resource paths plus any groups aborted by the minifier."""

    outputs: Dict[str, List[str]] = field(default_factory=dict)
    kinds: Dict[str, GroupKind] = field(default_factory=dict)
    artifacts: List[BundledArtifact] = field(default_factory=list)
    errors: Dict[str, CompressionError] = field(default_factory=dict)

    def first_error(self) -> Optional[CompressionError]:
        return next(iter(self.errors.values()), None)

    def raise_first_error(self) -> None:
        error = self.first_error()
        if error is not None:
            raise error

    def resource_paths(self) -> List[str]:
        """CSS paths followed by JS paths, each in group order."""
        css_resources: List[str] = []
        js_resources: List[str] = []
        for group, paths in self.outputs.items():
            if self.kinds[group] is GroupKind.JS:
                js_resources.extend(paths)
            else:
                css_resources.extend(paths)
        return css_resources + js_resources


class Bundler:
    """Turn resource groups into published, content-addressed artifacts."""

    def __init__(
        self,
        provider: ContentProvider,
        settings: ProcessorSettings,
        *,
        minifier: Optional[Minifier] = None,
        publisher: Optional[Publisher] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._provider = provider
        self._settings = settings
        self._logger = logger or logging.getLogger(__name__)
        self._minifier = minifier or RjsminMinifier(logger=self._logger)
        self._publisher = publisher

    def bundle(
        self, groups: ResourceGroups, *, publish: bool = True
    ) -> BundleReport:
        publisher = self._publisher if publish else None
        if publish and publisher is None:
            raise ValueError("publishing requires a publisher")

        report = BundleReport()
        for group, resources in groups.items():
            kind = GroupKind.from_group_name(group)
            if kind is None:
                self._logger.warning("Skipping unknown group type: %s", group)
                continue
            try:
                paths, artifact = self._bundle_group(
                    group, kind, resources, publisher
                )
            except CompressionError as exc:
                exc.group = exc.group or group
                self._logger.error("Bundling of %s aborted: %s", group, exc)
                report.errors[group] = exc
                continue
            if artifact is not None:
                report.artifacts.append(artifact)
            if paths:
                report.outputs[group] = paths
                report.kinds[group] = kind
        return report

    def _bundle_group(
        self,
        group: str,
        kind: GroupKind,
        resources: List[WebResource],
        publisher: Optional[Publisher],
    ) -> Tuple[List[str], Optional[BundledArtifact]]:
        paths: List[str] = []
        processed: List[str] = []
        for resource in resources:
            if not resource.minify:
                paths.append(resource.path)
                continue
            text = self._process_source(kind, resource)
            if text is not None:
                processed.append(text)

        content = "\n".join(processed)
        if not content:
            return paths, None

        artifact = self.build_artifact(group, kind, content.encode("utf-8"))
        if publisher is not None:
            publisher.publish(
                artifact.path,
                artifact.content,
                etag=artifact.digest,
                cache_seconds=self._settings.cache_seconds,
                content_type=artifact.content_type,
            )
            self._logger.info(
                "Published %s (%d bytes)", artifact.path, len(artifact.content)
            )
        paths.append(artifact.path)
        return paths, artifact

    def _process_source(
        self, kind: GroupKind, resource: WebResource
    ) -> Optional[str]:
        try:
            source = self._provider.read_bytes(resource.path).decode("utf-8")
        except (ResourceReadError, UnicodeDecodeError) as exc:
            self._logger.error(
                "web resource processing: %s: %s", resource.path, exc
            )
            return None

        settings = self._settings
        try:
            if kind is GroupKind.JS:
                return self._minifier.minify_js(
                    clean_code(source),
                    settings.js_line_break,
                    settings.js_munge,
                    settings.js_verbose,
                    settings.js_preserve_semicolons,
                    settings.js_disable_optimizations,
                )
            return self._minifier.minify_css(
                rewrite_css_urls(source, resource.path, settings.context_path),
                settings.css_line_break,
            )
        except CompressionError as exc:
            exc.path = exc.path or resource.path
            raise

    def build_artifact(
        self, group: str, kind: GroupKind, content: bytes
    ) -> BundledArtifact:
        digest = compute_digest(content, self._settings.digest_algorithm)
        filename = f"{kind.group_root(group)}{digest}{kind.file_suffix}"
        return BundledArtifact(
            group=group,
            filename=filename,
            path=self.servlet_path(filename),
            content=content,
            digest=digest,
            content_type=kind.content_type,
        )

    def servlet_path(self, filename: str) -> str:
        root = (self._settings.resource_servlet_path or "").strip()
        if not root:
            return "/" + filename
        if not root.endswith("/"):
            root += "/"
        return root + filename


class WebResourceProcessor:
    """Read the resource configuration and bundle every group.

    ``process`` publishes artifacts and installs rendered tags per group;
    ``get_js_and_css_resources`` publishes nothing and returns the paths
    for callers composing pages themselves.
    """

    def __init__(
        self,
        provider: ContentProvider,
        settings: Optional[ProcessorSettings] = None,
        *,
        config_dir: Union[Path, str] = ".",
        minifier: Optional[Minifier] = None,
        publisher: Optional[Publisher] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._provider = provider
        self._settings = settings or ProcessorSettings()
        self._config_dir = Path(config_dir)
        self._minifier = minifier
        self._publisher = publisher or InMemoryArtifactRegistry()
        self._logger = logger or logging.getLogger(__name__)
        self._ignored: Set[str] = set(self._settings.ignore_from_reordering)
        self.last_report: Optional[BundleReport] = None

    @property
    def settings(self) -> ProcessorSettings:
        return self._settings

    @property
    def publisher(self) -> Publisher:
        return self._publisher

    def ignore_js_resource_from_reordering(self, resource: str) -> None:
        self._ignored.add(resource)

    def process(self, installer: Optional[Installer] = None) -> Dict[str, str]:
        report = self._bundler().bundle(self.read_groups(), publish=True)
        self.last_report = report
        tags: Dict[str, str] = {}
        for group, paths in report.outputs.items():
            html = render_tags(
                report.kinds[group], paths, self._settings.context_path
            )
            tags[group] = html
            if installer is not None:
                installer(group, html)
        report.raise_first_error()
        return tags

    def get_js_and_css_resources(self) -> List[str]:
        """Return CSS then JS paths without publishing anything.

        A CompressionError is raised after the other groups ran; its
        ``resources`` attribute holds the paths of the groups that succeeded.
        """
        report = self._bundler().bundle(self.read_groups(), publish=False)
        self.last_report = report
        resources = report.resource_paths()
        error = report.first_error()
        if error is not None:
            error.resources = resources
            raise error
        return resources

    def read_groups(self) -> ResourceGroups:
        """Parse the configuration and expand it into concrete resources."""
        parser = ConfigParser(
            self._config_dir / self._settings.config_name,
            variables=self._read_variables(),
            production=self._settings.production,
            logger=self._logger,
        )
        try:
            declared = parser.parse()
        except ConfigReadError as exc:
            self._logger.error("read web resource config: %s", exc)
            return {}

        enumerator = ResourceEnumerator(self._provider, logger=self._logger)
        orderer = ResourceOrderer(
            self._provider,
            ignore=frozenset(self._ignored),
            logger=self._logger,
        )
        groups: ResourceGroups = {}
        for group, resources in declared.items():
            kind = GroupKind.from_group_name(group)
            if kind is None:
                continue
            expanded: List[WebResource] = []
            for resource in resources:
                if not (resource.minify or resource.is_directory):
                    expanded.append(resource)
                    continue
                paths = enumerator.enumerate(resource.path, kind.file_suffix)
                if kind is GroupKind.JS and len(paths) > 1:
                    paths = orderer.reorder(paths)
                expanded.extend(
                    WebResource(group, path, resource.minify) for path in paths
                )
            if expanded:
                groups[group] = expanded
        return groups

    def _read_variables(self) -> Dict[str, str]:
        name = self._settings.properties_name
        if not name:
            return {}
        properties_file = self._config_dir / name
        if not properties_file.exists():
            self._logger.debug("No variables file at %s", properties_file)
            return {}
        try:
            return load_properties(properties_file)
        except ConfigReadError as exc:
            self._logger.error("read variables from property: %s", exc)
            return {}

    def _bundler(self) -> Bundler:
        return Bundler(
            self._provider,
            self._settings,
            minifier=self._minifier,
            publisher=self._publisher,
            logger=self._logger,
        )
