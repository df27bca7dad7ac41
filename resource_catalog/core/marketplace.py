"""
Plugin marketplace manifest (.github/plugin/marketplace.json).
"""

import json
import logging
from pathlib import Path
from typing import Any

from resource_catalog.config import Settings
from resource_catalog.core.plugins import read_plugin_descriptor
from resource_catalog.lib.errors import MissingDirectoryError
from resource_catalog.lib.fs_utils import list_subdirectories, write_if_changed

logger = logging.getLogger(__name__)

DEFAULT_PLUGIN_VERSION = "1.0.0"


def build_marketplace(settings: Settings) -> dict[str, Any]:
    """Marketplace document listing every plugin with a readable descriptor."""
    plugins_dir = settings.plugins_dir
    if not plugins_dir.is_dir():
        raise MissingDirectoryError(plugins_dir, "Plugins directory")

    plugin_dirs = list_subdirectories(plugins_dir)
    logger.info(f"Found {len(plugin_dirs)} plugin directories")

    plugins = []
    for plugin_dir in plugin_dirs:
        descriptor = read_plugin_descriptor(plugin_dir)
        if descriptor is None:
            logger.warning(f"Skipped: {plugin_dir.name} (no valid plugin.json)")
            continue
        plugins.append({
            "name": descriptor.name or plugin_dir.name,
            "source": f"./{plugins_dir.name}/{plugin_dir.name}",
            "description": descriptor.description,
            "version": descriptor.version or DEFAULT_PLUGIN_VERSION,
        })
        logger.debug(f"Added plugin: {descriptor.name or plugin_dir.name}")

    return {
        "name": settings.marketplace_name,
        "metadata": {
            "description": settings.marketplace_description,
            "version": settings.marketplace_version,
            "pluginRoot": f"./{plugins_dir.name}",
        },
        "owner": {
            "name": settings.owner_name,
            "email": settings.owner_email,
        },
        "plugins": plugins,
    }


def write_marketplace(settings: Settings) -> Path:
    """Build and write the marketplace manifest; returns its path."""
    marketplace = build_marketplace(settings)
    path = settings.marketplace_path
    write_if_changed(path, json.dumps(marketplace, indent=2, ensure_ascii=False) + "\n")
    logger.info(f"Generated marketplace.json with {len(marketplace['plugins'])} plugins")
    return path
