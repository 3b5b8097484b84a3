"""CLI entry point for the OS image package resolver."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .config import load_config
from .exceptions import MetadataFetchError, ResolutionError
from .logging_utils import configure_logging
from .metadata import CatalogProvider, load_catalog_file
from .models import PackageInfo, ResolutionReport
from .report import generate_dot, generate_json, generate_text
from .solver import ResolverOptions, resolve, resolve_top_package_conflicts

logger = logging.getLogger(__name__)


def _add_common_cache_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--cache-root",
        default=None,
        help="Directory where fetched catalog snapshots are cached (default: cache)",
    )


def cmd_update_cache(args: argparse.Namespace) -> int:
    try:
        config = load_config(Path(args.config))
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    cache_root = Path(args.cache_root or config.options.cache_root or "cache")
    provider = CatalogProvider(cache_root)
    try:
        processed: List[str] = []
        for source in config.enabled_catalogs():
            count = provider.refresh(source)
            processed.append(f"{source.url or source.path} ({count} packages)")
        if processed:
            print("Refreshed catalog snapshots:")
            for item in processed:
                print(f"  - {item}")
        else:
            print("No catalog snapshots updated.")
        return 0
    except (MetadataFetchError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        provider.close()


def cmd_solve(args: argparse.Namespace) -> int:
    try:
        config = load_config(Path(args.config))
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    cache_root = Path(args.cache_root or config.options.cache_root or "cache")
    provider = CatalogProvider(cache_root, max_age=config.options.cache_max_age)
    report = ResolutionReport(
        project=config.name,
        ecosystem=config.ecosystem,
        requested=[package.name for package in config.packages],
    )
    exit_code = 0
    try:
        catalog = provider.load_all(config.enabled_catalogs())
        requested = [PackageInfo(name=package.name, version=package.version or "") for package in config.packages]
        options = ResolverOptions(
            prefer_same_repository=config.options.prefer_same_repository and not args.no_repo_affinity,
        )
        report.packages = resolve(requested, catalog, ecosystem=config.ecosystem, options=options)
    except (MetadataFetchError, ResolutionError, ValueError) as exc:
        report.error = str(exc)
        print(f"error: {exc}", file=sys.stderr)
        exit_code = 1
    finally:
        provider.close()

    # the error already went to stderr; JSON keeps it for machine readers
    if args.format == "json":
        print(generate_json(report))
    elif not report.error:
        print(generate_text(report))

    dot_file = args.dot or config.options.dot_file
    if dot_file and not report.error:
        try:
            Path(dot_file).write_text(generate_dot(report.packages, config.ecosystem), encoding="utf-8")
        except OSError as exc:
            print(f"error: cannot write {dot_file}: {exc}", file=sys.stderr)
            return 1
        logger.info("Wrote dependency graph to %s", dot_file)
    return exit_code


def cmd_top(args: argparse.Namespace) -> int:
    try:
        catalog = load_catalog_file(args.catalog)
        package, found = resolve_top_package_conflicts(args.name, catalog, ecosystem=args.ecosystem)
    except (MetadataFetchError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    if not found:
        print(f"error: {args.name}: package not found in catalog", file=sys.stderr)
        return 1
    print(f"{package.name} {package.version} {package.url}".rstrip())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Resolve package sets for OS image templates")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Also write log records to this file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    solve = subparsers.add_parser("solve", help="Resolve the package closure for a project config")
    _add_common_cache_argument(solve)
    solve.add_argument("config", help="Path to the project configuration file")
    solve.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    solve.add_argument("--dot", help="Write the resolved dependency graph to this Graphviz file")
    solve.add_argument(
        "--no-repo-affinity",
        action="store_true",
        help="Do not prefer candidates from the requiring package's repository",
    )
    solve.set_defaults(func=cmd_solve)

    top = subparsers.add_parser("top", help="Show the highest catalog version of one package")
    top.add_argument("name", help="Package name")
    top.add_argument("--catalog", required=True, help="Catalog snapshot (JSON or YAML)")
    top.add_argument("--ecosystem", default="deb", help="Package ecosystem (default: %(default)s)")
    top.set_defaults(func=cmd_top)

    update = subparsers.add_parser("update-cache", help="Re-download remote catalog snapshots")
    _add_common_cache_argument(update)
    update.add_argument("config", help="Project configuration file listing the catalogs")
    update.set_defaults(func=cmd_update_cache)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
