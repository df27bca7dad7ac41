"""
Plugin descriptor reading and validation.

A plugin folder is valid when:
1. .github/plugin/plugin.json exists and parses as a JSON object
2. README.md exists
3. name is a 1-50 char lowercase-alnum-hyphen string equal to the folder name
4. description is a 1-500 char string, version is a string
5. keywords (or legacy tags) is an array of at most 10 strings, each
   1-30 chars lowercase-alnum-hyphen
6. every agents/commands/skills reference has the right shape and points
   at an existing repository source

Validation collects every violation for a plugin instead of stopping at the
first one. Only a missing or unparseable manifest ends it early.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from pydantic import ValidationError

from resource_catalog.models.plugin import (
    PluginDescriptor,
    PluginValidationReport,
    PluginValidationResult,
)

logger = logging.getLogger(__name__)

DESCRIPTOR_PATH = Path(".github") / "plugin" / "plugin.json"
PLUGIN_README = "README.md"

NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
NAME_MAX_LENGTH = 50
DESCRIPTION_MAX_LENGTH = 500
MAX_KEYWORDS = 10
KEYWORD_MAX_LENGTH = 30


@dataclass(frozen=True)
class ReferenceRule:
    """How a plugin path reference maps onto a repository source."""

    field: str
    prefix: str  # Required reference prefix, e.g. "./agents/"
    suffix: str  # Required reference suffix, e.g. ".md"
    source_dir: str  # Repository directory holding the sources
    source_suffix: str = ""  # Appended to the base name (file sources)
    source_file: Optional[str] = None  # File inside the source folder (folder sources)

    def base_name(self, ref: str) -> str:
        return ref[len(self.prefix): len(ref) - len(self.suffix)]

    def source_path(self, ref: str, repo_root: Path) -> Path:
        """The repository file or folder a well-formed reference points at."""
        base = self.base_name(ref)
        if self.source_file:
            return repo_root / self.source_dir / base
        return repo_root / self.source_dir / f"{base}{self.source_suffix}"

    def required_file(self, ref: str, repo_root: Path) -> Path:
        """The file that must exist for the reference to be satisfied."""
        source = self.source_path(ref, repo_root)
        return source / self.source_file if self.source_file else source

    def display_source(self, ref: str) -> str:
        base = self.base_name(ref)
        if self.source_file:
            return f"{self.source_dir}/{base}/{self.source_file}"
        return f"{self.source_dir}/{base}{self.source_suffix}"


REFERENCE_RULES: dict[str, ReferenceRule] = {
    "agents": ReferenceRule("agents", "./agents/", ".md", "agents", source_suffix=".agent.md"),
    "commands": ReferenceRule("commands", "./commands/", ".md", "prompts", source_suffix=".prompt.md"),
    "skills": ReferenceRule("skills", "./skills/", "/", "skills", source_file="SKILL.md"),
}


def descriptor_path(plugin_dir: Path) -> Path:
    return plugin_dir / DESCRIPTOR_PATH


def resolve_reference(field: str, ref: str, repo_root: Path) -> Optional[Path]:
    """Source path for a plugin reference, or None if its shape is wrong."""
    rule = REFERENCE_RULES.get(field)
    if rule is None or not ref.startswith(rule.prefix) or not ref.endswith(rule.suffix):
        return None
    if not rule.base_name(ref):
        return None
    return rule.source_path(ref, repo_root)


def read_plugin_descriptor(plugin_dir: Path) -> Optional[PluginDescriptor]:
    """Read a plugin.json leniently. None if missing or unreadable."""
    path = descriptor_path(plugin_dir)
    if not path.exists():
        logger.warning(f"No plugin.json found for {plugin_dir.name}")
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return PluginDescriptor.model_validate(data)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError, ValidationError) as e:
        logger.warning(f"Failed to read plugin.json for {plugin_dir.name}: {e}")
        return None


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def validate_name(name: Any, folder_name: str) -> list[str]:
    if not name or not isinstance(name, str):
        return ["name is required and must be a string"]
    errors = []
    if not 1 <= len(name) <= NAME_MAX_LENGTH:
        errors.append(f"name must be between 1 and {NAME_MAX_LENGTH} characters")
    if not NAME_PATTERN.match(name):
        errors.append("name must contain only lowercase letters, numbers, and hyphens")
    if name != folder_name:
        errors.append(f'name "{name}" must match folder name "{folder_name}"')
    return errors


def validate_description(description: Any) -> list[str]:
    if not description or not isinstance(description, str):
        return ["description is required and must be a string"]
    if len(description) > DESCRIPTION_MAX_LENGTH:
        return [f"description must be between 1 and {DESCRIPTION_MAX_LENGTH} characters"]
    return []


def validate_version(version: Any) -> list[str]:
    if not version or not isinstance(version, str):
        return ["version is required and must be a string"]
    return []


def validate_keywords(keywords: Any) -> list[str]:
    if keywords is None:
        return []
    if not isinstance(keywords, list):
        return ["keywords must be an array"]

    errors = []
    if len(keywords) > MAX_KEYWORDS:
        errors.append(f"maximum {MAX_KEYWORDS} keywords allowed")
    for keyword in keywords:
        if not isinstance(keyword, str):
            errors.append("all keywords must be strings")
            continue
        if not NAME_PATTERN.match(keyword):
            errors.append(f'keyword "{keyword}" must contain only lowercase letters, numbers, and hyphens')
        if not 1 <= len(keyword) <= KEYWORD_MAX_LENGTH:
            errors.append(f'keyword "{keyword}" must be between 1 and {KEYWORD_MAX_LENGTH} characters')
    return errors


def validate_references(descriptor: dict[str, Any], repo_root: Path) -> list[str]:
    """Check agents/commands/skills references.

    Each entry stops at its first broken rule and checking moves on to the
    next entry.
    """
    errors = []
    for field, rule in REFERENCE_RULES.items():
        refs = descriptor.get(field)
        if refs is None:
            continue
        if not isinstance(refs, list):
            errors.append(f"{field} must be an array")
            continue

        for i, ref in enumerate(refs):
            label = f"{field}[{i}]"
            if not isinstance(ref, str):
                errors.append(f"{label} must be a string")
            elif not ref.startswith("./"):
                errors.append(f'{label} must start with "./"')
            elif not ref.startswith(rule.prefix):
                errors.append(f'{label} must start with "{rule.prefix}"')
            elif not ref.endswith(rule.suffix):
                errors.append(f'{label} must end with "{rule.suffix}"')
            elif not rule.required_file(ref, repo_root).exists():
                errors.append(f"{label} source not found: {rule.display_source(ref)}")
    return errors


def validate_plugin(plugin_dir: Path, repo_root: Path) -> PluginValidationResult:
    """Validate one plugin folder and collect every violation."""
    result = PluginValidationResult(plugin=plugin_dir.name)

    manifest = descriptor_path(plugin_dir)
    if not manifest.exists():
        result.errors.append("missing required file: .github/plugin/plugin.json")
        return result

    if not (plugin_dir / PLUGIN_README).exists():
        result.errors.append(f"missing required file: {PLUGIN_README}")

    try:
        descriptor = json.loads(manifest.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        result.errors.append(f"failed to parse plugin.json: {e}")
        return result
    if not isinstance(descriptor, dict):
        result.errors.append("failed to parse plugin.json: top level must be an object")
        return result

    keywords = descriptor.get("keywords")
    if keywords is None:
        keywords = descriptor.get("tags")

    result.errors.extend(validate_name(descriptor.get("name"), plugin_dir.name))
    result.errors.extend(validate_description(descriptor.get("description")))
    result.errors.extend(validate_version(descriptor.get("version")))
    result.errors.extend(validate_keywords(keywords))
    result.errors.extend(validate_references(descriptor, repo_root))
    return result


def validate_plugin_dirs(plugin_dirs: Iterable[Path], repo_root: Path) -> PluginValidationReport:
    """Validate plugin folders, flagging folder names seen more than once."""
    report = PluginValidationReport()
    seen: set[str] = set()

    for plugin_dir in plugin_dirs:
        result = validate_plugin(plugin_dir, repo_root)
        report.results.append(result)

        if result.valid:
            logger.info(f"✅ {result.plugin} is valid")
        else:
            logger.error(f"❌ {result.plugin}:")
            for error in result.errors:
                logger.error(f"   - {error}")

        if plugin_dir.name in seen:
            logger.error(f'❌ Duplicate plugin name "{plugin_dir.name}"')
            report.duplicates.append(plugin_dir.name)
        else:
            seen.add(plugin_dir.name)

    return report


def validate_plugins(plugins_dir: Path, repo_root: Path) -> PluginValidationReport:
    """Validate every plugin folder under ``plugins_dir``.

    A missing or empty plugins directory is reported as a clean scan.
    """
    if not plugins_dir.is_dir():
        logger.info("No plugins directory found - validation skipped")
        return PluginValidationReport()

    plugin_dirs = sorted((p for p in plugins_dir.iterdir() if p.is_dir()), key=lambda p: p.name)
    if not plugin_dirs:
        logger.info("No plugin directories found - validation skipped")
        return PluginValidationReport()

    logger.info(f"Validating {len(plugin_dirs)} plugins...")
    return validate_plugin_dirs(plugin_dirs, repo_root)
