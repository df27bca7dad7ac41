"""
Plugin materialization.

Copies the agents, commands and skills a plugin references into the plugin
folder so it can be installed on its own:

  ./agents/foo.md   <- agents/foo.agent.md
  ./commands/bar.md <- prompts/bar.prompt.md
  ./skills/baz/     <- skills/baz/

``clean_materialized_plugins`` removes those copies again.
"""

import json
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from resource_catalog.config import Settings
from resource_catalog.core.plugins import REFERENCE_RULES, descriptor_path, resolve_reference
from resource_catalog.lib.errors import MissingDirectoryError
from resource_catalog.lib.fs_utils import count_files, list_subdirectories

logger = logging.getLogger(__name__)

MATERIALIZED_DIRS = ("agents", "commands", "skills")


@dataclass
class MaterializeReport:
    """Copy counts and problems from one materialization run."""

    agents: int = 0
    commands: int = 0
    skills: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _require_plugins_dir(settings: Settings) -> Path:
    plugins_dir = settings.plugins_dir
    if not plugins_dir.is_dir():
        raise MissingDirectoryError(plugins_dir, "Plugins directory")
    return plugins_dir


def _warn(report: MaterializeReport, message: str) -> None:
    logger.warning(message)
    report.warnings.append(message)


def _copy_reference(plugin_dir: Path, plugin_name: str, field_name: str, ref, repo_root: Path,
                    report: MaterializeReport) -> bool:
    source = resolve_reference(field_name, ref, repo_root) if isinstance(ref, str) else None
    if source is None:
        _warn(report, f"{plugin_name}: Unknown path format: {ref}")
        return False

    dest = plugin_dir / ref[2:].rstrip("/")
    if REFERENCE_RULES[field_name].source_file:
        if not source.is_dir():
            _warn(report, f"{plugin_name}: Source directory not found: {source}")
            return False
        shutil.copytree(source, dest, dirs_exist_ok=True)
    else:
        if not source.is_file():
            _warn(report, f"{plugin_name}: Source not found: {source}")
            return False
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
    return True


def materialize_plugin(plugin_dir: Path, repo_root: Path, report: MaterializeReport) -> None:
    """Copy one plugin's referenced sources into its folder."""
    manifest = descriptor_path(plugin_dir)
    if not manifest.exists():
        return

    try:
        metadata = json.loads(manifest.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        message = f"Failed to parse {manifest}: {e}"
        logger.error(message)
        report.errors.append(message)
        return
    if not isinstance(metadata, dict):
        message = f"Failed to parse {manifest}: top level must be an object"
        logger.error(message)
        report.errors.append(message)
        return

    plugin_name = metadata.get("name") or plugin_dir.name
    copied = {}
    for field_name in MATERIALIZED_DIRS:
        refs = metadata.get(field_name)
        if not isinstance(refs, list):
            continue
        copied[field_name] = sum(
            _copy_reference(plugin_dir, plugin_name, field_name, ref, repo_root, report) for ref in refs
        )
        setattr(report, field_name, getattr(report, field_name) + copied[field_name])

    summary = ", ".join(f"{count} {name}" for name, count in copied.items() if count)
    if summary:
        logger.info(f"✓ {plugin_name}: {summary}")


def materialize_plugins(settings: Settings) -> MaterializeReport:
    """Materialize every plugin under the plugins directory."""
    plugins_dir = _require_plugins_dir(settings)
    report = MaterializeReport()

    for plugin_dir in list_subdirectories(plugins_dir):
        materialize_plugin(plugin_dir, settings.repo_root, report)

    logger.info(
        f"Copied {report.agents} agents, {report.commands} commands, {report.skills} skills "
        f"({len(report.warnings)} warnings, {len(report.errors)} errors)"
    )
    return report


def clean_plugin(plugin_dir: Path) -> int:
    """Remove materialized folders from one plugin; returns files removed."""
    removed = 0
    for subdir in MATERIALIZED_DIRS:
        target = plugin_dir / subdir
        if target.is_dir():
            count = count_files(target)
            shutil.rmtree(target)
            removed += count
            logger.info(f"Removed {plugin_dir.name}/{subdir}/ ({count} files)")
    return removed


def clean_materialized_plugins(settings: Settings) -> int:
    """Remove materialized copies from every plugin; returns files removed."""
    plugins_dir = _require_plugins_dir(settings)
    total = sum(clean_plugin(plugin_dir) for plugin_dir in list_subdirectories(plugins_dir))

    if total == 0:
        logger.info("No materialized files found. Plugins are already clean.")
    else:
        logger.info(f"Removed {total} materialized file(s) from plugins.")
    return total
