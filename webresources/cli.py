"""Command line entry point: bundle and publish, or serve via Flask.

``build`` reads sources from a local root or, with ``--base-url``, over
HTTP, and publishes to a directory or, with ``--s3-bucket``, to S3.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from .bundler import WebResourceProcessor
from .config import ProcessorSettings
from .errors import CompressionError, WebResourceError
from .logging_config import configure_logging
from .storage.content import (ContentProvider, HttpContentProvider,
                              LocalContentProvider)
from .storage.publisher import (LocalDirectoryPublisher, Publisher,
                                S3ArtifactPublisher)
from .utils.env import settings_from_env

logger = logging.getLogger(__name__)


def _settings_from_args(args: argparse.Namespace) -> ProcessorSettings:
    settings = settings_from_env()
    overrides = {}
    if args.development:
        overrides["production"] = False
    if getattr(args, "config", None):
        overrides["config_name"] = args.config
    if getattr(args, "properties", None):
        overrides["properties_name"] = args.properties
    if getattr(args, "servlet_path", None) is not None:
        overrides["resource_servlet_path"] = args.servlet_path
    if getattr(args, "context_path", None) is not None:
        overrides["context_path"] = args.context_path
    if getattr(args, "cache_seconds", None) is not None:
        overrides["cache_seconds"] = args.cache_seconds
    ignored = getattr(args, "ignore_reorder", None)
    if ignored:
        overrides["ignore_from_reordering"] = (
            settings.ignore_from_reordering | frozenset(ignored)
        )
    return replace(settings, **overrides) if overrides else settings


def _build_provider(args: argparse.Namespace) -> ContentProvider:
    if args.base_url:
        return HttpContentProvider(args.base_url)
    return LocalContentProvider(args.root)


def _build_publisher(args: argparse.Namespace) -> Publisher:
    if args.s3_bucket:
        return S3ArtifactPublisher(
            args.s3_bucket, object_prefix=args.s3_prefix or ""
        )
    return LocalDirectoryPublisher(args.out)


def run_build(args: argparse.Namespace) -> int:
    """Bundle every group and publish to ``--out`` or ``--s3-bucket``."""
    if not (args.out or args.s3_bucket):
        print("Either --out or --s3-bucket is required", file=sys.stderr)
        return 2
    settings = _settings_from_args(args)
    try:
        processor = WebResourceProcessor(
            _build_provider(args),
            settings,
            config_dir=args.config_dir or args.root,
            publisher=_build_publisher(args),
        )
        processor.process()
    except CompressionError as exc:
        print(f"Bundling failed for {exc.group}: {exc}", file=sys.stderr)
        return 1
    except WebResourceError as exc:
        print(f"Bundling failed: {exc}", file=sys.stderr)
        return 1

    report = processor.last_report
    if report is not None:
        for paths in report.outputs.values():
            for path in paths:
                print(path)
    return 0


def run_serve(args: argparse.Namespace) -> int:
    """Start the Flask development server over ``args.root``."""
    from .webapp import create_app

    app = create_app(
        {
            "WEBRESOURCES_ROOT": str(args.root),
            "WEBRESOURCES_CONFIG_DIR": str(args.config_dir or args.root),
            "WEBRESOURCES_SETTINGS": _settings_from_args(args),
        }
    )
    app.run(host=args.host, port=args.port)
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    argument_parser = argparse.ArgumentParser(
        prog="webresources",
        description=(
            "Bundle, minify and publish configured JavaScript/CSS groups."
        ),
    )
    subcommands = argument_parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "root",
        type=Path,
        help="Content root that logical resource paths are resolved against.",
    )
    common.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding the config and variables files "
        "(default: ROOT).",
    )
    common.add_argument("--config", help="Resource configuration file name.")
    common.add_argument("--properties", help="Variables file name.")
    common.add_argument(
        "--development",
        action="store_true",
        help="Emit literal tags for development entries instead of bundles.",
    )
    common.add_argument("--servlet-path", default=None)
    common.add_argument("--context-path", default=None)
    common.add_argument(
        "--ignore-reorder",
        action="append",
        default=[],
        metavar="PATH",
        help="JS resource kept out of dependency reordering (repeatable).",
    )

    build = subcommands.add_parser(
        "build", parents=[common], help="Write bundles to a directory."
    )
    build.add_argument("--out", type=Path, default=None)
    build.add_argument(
        "--base-url",
        default=None,
        help="Read sources over HTTP; directory entries are not expanded.",
    )
    build.add_argument("--s3-bucket", default=None)
    build.add_argument("--s3-prefix", default="")
    build.add_argument("--cache-seconds", type=int, default=None)
    build.set_defaults(handler=run_build)

    serve = subcommands.add_parser(
        "serve", parents=[common], help="Serve bundles with Flask."
    )
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    serve.add_argument("--cache-seconds", type=int, default=None)
    serve.set_defaults(handler=run_serve)
    return argument_parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure_logging()
    argument_parser = build_arg_parser()
    parsed_args = argument_parser.parse_args(argv)
    return parsed_args.handler(parsed_args)


if __name__ == "__main__":
    sys.exit(main())
