"""
New plugin scaffolding.

Creates plugins/<id>/.github/plugin/plugin.json and plugins/<id>/README.md
with sensible defaults. The result passes validation once the folder name
and descriptor agree, which they do by construction.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from resource_catalog.core.extractors import title_case_name
from resource_catalog.core.plugins import DESCRIPTOR_PATH, NAME_PATTERN, PLUGIN_README
from resource_catalog.lib.errors import PluginScaffoldError
from resource_catalog.lib.fs_utils import write_if_changed

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"
DEFAULT_AUTHOR = {"name": "Awesome Copilot Community"}
DEFAULT_REPOSITORY = "https://github.com/github/awesome-copilot"
DEFAULT_LICENSE = "MIT"
DEFAULT_KEYWORD_COUNT = 3

README_TEMPLATE = """# {display_name} Plugin

{description}

## Installation

```bash
copilot plugin install {plugin_id}@{marketplace}
```

## What's Included

_Add your plugin contents here._

## License

{license}
"""


def parse_keywords(keywords: Union[str, list[str], None], plugin_id: str) -> list[str]:
    """Comma-separated or list keywords; the first id segments when empty."""
    if isinstance(keywords, str):
        keywords = keywords.split(",")
    cleaned = [k.strip() for k in keywords or [] if k and k.strip()]
    return cleaned or plugin_id.split("-")[:DEFAULT_KEYWORD_COUNT]


def create_plugin(
    plugins_dir: Path,
    plugin_id: str,
    display_name: Optional[str] = None,
    description: Optional[str] = None,
    keywords: Union[str, list[str], None] = None,
    marketplace: str = "awesome-copilot",
) -> Path:
    """Scaffold a new plugin folder and return its path.

    Raises PluginScaffoldError for an invalid id or an existing folder.
    """
    if not plugin_id:
        raise PluginScaffoldError("Plugin ID is required")
    if not NAME_PATTERN.match(plugin_id):
        raise PluginScaffoldError("Plugin ID must contain only lowercase letters, numbers, and hyphens")

    plugin_dir = plugins_dir / plugin_id
    if plugin_dir.exists():
        raise PluginScaffoldError(f"Plugin {plugin_id} already exists at {plugin_dir}")

    display_name = (display_name or "").strip() or title_case_name(plugin_id)
    description = (description or "").strip() or f"A plugin for {display_name.lower()}."

    descriptor = {
        "name": plugin_id,
        "description": description,
        "version": DEFAULT_VERSION,
        "keywords": parse_keywords(keywords, plugin_id),
        "author": DEFAULT_AUTHOR,
        "repository": DEFAULT_REPOSITORY,
        "license": DEFAULT_LICENSE,
    }
    write_if_changed(plugin_dir / DESCRIPTOR_PATH, json.dumps(descriptor, indent=2) + "\n")
    write_if_changed(
        plugin_dir / PLUGIN_README,
        README_TEMPLATE.format(
            display_name=display_name,
            description=description,
            plugin_id=plugin_id,
            marketplace=marketplace,
            license=DEFAULT_LICENSE,
        ),
    )

    logger.info(f"Created plugin: {plugin_dir}")
    return plugin_dir
