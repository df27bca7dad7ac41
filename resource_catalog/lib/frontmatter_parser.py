"""
Frontmatter parsing for resource documents.

A resource document may start with a YAML metadata block:

    ---
    name: my-agent
    description: What it does
    tools: [read, edit]
    ---

    # Body...

The parser returns the decoded mapping, or None when the block is absent
or malformed. It never raises; failures are logged so the caller can fall
back to defaults.
"""

import logging
import re
from pathlib import Path
from typing import Any, Optional

import frontmatter
import yaml

logger = logging.getLogger(__name__)

_handler = frontmatter.YAMLHandler()

# Serializers often leave block-scalar newlines at the end of these fields
_TRAILING_NEWLINES = re.compile(r"[\r\n]+$")
_TRAILING_WHITESPACE = re.compile(r"\s+$")


class _PlainScalarLoader(yaml.SafeLoader):
    """SafeLoader that leaves unquoted timestamps as strings (JSON-safe)."""


_PlainScalarLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def _split(text: str) -> Optional[tuple[str, str]]:
    """Split a document into (metadata text, body), or None without a block."""
    text = text.lstrip("\ufeff")
    if not _handler.detect(text):
        return None
    try:
        metadata_text, body = _handler.split(text)
    except ValueError:
        # Opening delimiter without a closing one
        return None
    return metadata_text, body


def normalize_frontmatter(data: dict[str, Any]) -> dict[str, Any]:
    """Trim whitespace-sensitive string fields in place and return the mapping.

    name/title lose trailing newline runs and surrounding whitespace;
    description only loses trailing whitespace so embedded line breaks and
    indentation survive.
    """
    for key in ("name", "title"):
        value = data.get(key)
        if isinstance(value, str):
            data[key] = _TRAILING_NEWLINES.sub("", value).strip()

    description = data.get("description")
    if isinstance(description, str):
        data["description"] = _TRAILING_WHITESPACE.sub("", description)

    return data


def parse_frontmatter_text(text: str, source: Optional[str] = None) -> Optional[dict[str, Any]]:
    """Parse the metadata block at the start of ``text``.

    Args:
        text: Full document text
        source: Label used in log messages (usually the file path)

    Returns:
        The normalized mapping, or None if there is no block or it does
        not decode to a mapping.
    """
    label = source or "<text>"
    parts = _split(text)
    if parts is None:
        logger.debug(f"No frontmatter in {label}")
        return None

    try:
        data = _handler.load(parts[0])
    except yaml.YAMLError as e:
        logger.warning(f"Invalid YAML frontmatter in {label}: {e}")
        return None

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Frontmatter in {label} is not a mapping, ignoring")
        return None

    return normalize_frontmatter(data)


def parse_frontmatter(path: Path) -> Optional[dict[str, Any]]:
    """Read a file and parse its frontmatter. Unreadable files yield None."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Error reading {path}: {e}")
        return None
    return parse_frontmatter_text(content, source=str(path))


def document_body(text: str) -> str:
    """Return the text after the metadata block (the whole text if none)."""
    parts = _split(text)
    if parts is None:
        return text.lstrip("\ufeff")
    return parts[1]


def load_yaml_file(path: Path) -> Optional[Any]:
    """Parse a standalone YAML file (e.g. tools.yml). None on any failure.

    Dates stay strings so the result can go straight to json.dumps.
    """
    try:
        with open(path, encoding="utf-8") as f:
            return yaml.load(f, Loader=_PlainScalarLoader)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Error parsing YAML file {path}: {e}")
        return None
