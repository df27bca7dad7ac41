"""
Resource catalog CLI.

Usage:
    resource-catalog website-data               # Write website JSON data
    resource-catalog readme                     # Regenerate docs/README.*.md
    resource-catalog readme --no-registry       # ... without MCP registry links
    resource-catalog marketplace                # Write marketplace.json
    resource-catalog validate-plugins           # Validate every plugin
    resource-catalog materialize                # Copy plugin sources into plugins
    resource-catalog clean-plugins              # Remove materialized copies
    resource-catalog create-plugin NAME         # Scaffold a new plugin
    resource-catalog build                      # validate + website-data + readme + marketplace

Global options:
    --log-level LEVEL                           # DEBUG, INFO, WARNING, ERROR
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from resource_catalog.config import Settings, get_settings
from resource_catalog.core.aggregator import write_website_data
from resource_catalog.core.marketplace import write_marketplace
from resource_catalog.core.materialize import clean_materialized_plugins, materialize_plugins
from resource_catalog.core.plugins import validate_plugins
from resource_catalog.core.readme import generate_readmes
from resource_catalog.core.registry import fetch_registry
from resource_catalog.core.scaffold import create_plugin
from resource_catalog.lib.errors import CatalogError
from resource_catalog.lib.logger import setup_logging
from resource_catalog.models.registry import RegistryCatalog

logger = logging.getLogger(__name__)


# --- Helpers ---


def _load_registry(settings: Settings, enabled: bool = True) -> RegistryCatalog:
    """Fetch the registry once for this run; empty when disabled."""
    if not enabled or not settings.registry_enabled:
        logger.info("MCP registry lookup disabled")
        return RegistryCatalog()
    return asyncio.run(fetch_registry(settings.registry_url, timeout=settings.registry_timeout))


def _validate(settings: Settings) -> bool:
    report = validate_plugins(settings.plugins_dir, settings.repo_root)
    if report.ok:
        logger.info(f"All {len(report.results)} plugins are valid")
        return True
    logger.error(
        f"Plugin validation failed: {len(report.failed)} invalid, {len(report.duplicates)} duplicate"
    )
    return False


# --- Commands ---


def cmd_website_data(args: argparse.Namespace, settings: Settings) -> None:
    write_website_data(settings)


def cmd_readme(args: argparse.Namespace, settings: Settings) -> None:
    catalog = _load_registry(settings, enabled=not args.no_registry)
    generate_readmes(settings, catalog)


def cmd_marketplace(args: argparse.Namespace, settings: Settings) -> None:
    write_marketplace(settings)


def cmd_validate_plugins(args: argparse.Namespace, settings: Settings) -> None:
    if not _validate(settings):
        sys.exit(1)


def cmd_materialize(args: argparse.Namespace, settings: Settings) -> None:
    report = materialize_plugins(settings)
    if not report.ok:
        sys.exit(1)


def cmd_clean_plugins(args: argparse.Namespace, settings: Settings) -> None:
    clean_materialized_plugins(settings)


def cmd_create_plugin(args: argparse.Namespace, settings: Settings) -> None:
    plugin_dir = create_plugin(
        settings.plugins_dir,
        args.name,
        display_name=args.display_name,
        description=args.description,
        keywords=args.keywords,
        marketplace=settings.marketplace_name,
    )
    print(f"Created plugin: {plugin_dir}")
    print("Next steps:")
    print(f"  1. Add agents, commands, or skills to {plugin_dir}/.github/plugin/plugin.json")
    print(f"  2. Edit {plugin_dir}/README.md to describe your plugin")
    print("  3. Run 'resource-catalog build' to regenerate documentation")


def cmd_build(args: argparse.Namespace, settings: Settings) -> None:
    valid = _validate(settings)
    write_website_data(settings)
    generate_readmes(settings, _load_registry(settings, enabled=not args.no_registry))
    write_marketplace(settings)
    if not valid:
        sys.exit(1)


COMMANDS = {
    "website-data": cmd_website_data,
    "readme": cmd_readme,
    "marketplace": cmd_marketplace,
    "validate-plugins": cmd_validate_plugins,
    "materialize": cmd_materialize,
    "clean-plugins": cmd_clean_plugins,
    "create-plugin": cmd_create_plugin,
    "build": cmd_build,
}


# --- CLI entry point ---


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="resource-catalog",
        description="Build website data, READMEs and plugin manifests from a resource repository",
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Log level (default: from settings, INFO)",
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("website-data", help="Write website JSON data files")

    readme_parser = subparsers.add_parser("readme", help="Regenerate README tables")
    readme_parser.add_argument(
        "--no-registry", action="store_true",
        help="Skip the MCP registry fetch (servers render unlinked)",
    )

    subparsers.add_parser("marketplace", help="Write the plugin marketplace manifest")
    subparsers.add_parser("validate-plugins", help="Validate every plugin descriptor")
    subparsers.add_parser("materialize", help="Copy referenced sources into plugin folders")
    subparsers.add_parser("clean-plugins", help="Remove materialized files from plugin folders")

    create_parser = subparsers.add_parser("create-plugin", help="Scaffold a new plugin")
    create_parser.add_argument("name", help="Plugin ID (lowercase, hyphens only)")
    create_parser.add_argument("--keywords", "--tags", help="Comma-separated keywords")
    create_parser.add_argument("--description", help="Plugin description")
    create_parser.add_argument("--display-name", help="Display name used in the README")

    build_cmd_parser = subparsers.add_parser("build", help="Validate, then generate every artifact")
    build_cmd_parser.add_argument(
        "--no-registry", action="store_true",
        help="Skip the MCP registry fetch (servers render unlinked)",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return

    setup_logging(level=args.log_level)
    settings = get_settings()

    try:
        command(args, settings)
    except CatalogError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
