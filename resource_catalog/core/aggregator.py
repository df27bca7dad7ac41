"""
Aggregator: merges extractor output into website data.

Produces, per kind, ``{items, filters}`` collections sorted by title, plus
a cross-kind search index and a manifest with counts. Everything is written
to the website data directory as JSON.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from resource_catalog.config import Settings
from resource_catalog.core.extractors import (
    GitDates,
    scan_agents,
    scan_hooks,
    scan_instructions,
    scan_prompts,
    scan_skills,
    scan_workflows,
)
from resource_catalog.core.plugins import read_plugin_descriptor
from resource_catalog.lib.errors import MissingDirectoryError
from resource_catalog.lib.frontmatter_parser import load_yaml_file
from resource_catalog.lib.fs_utils import list_subdirectories, write_if_changed
from resource_catalog.lib.git_dates import get_git_file_dates, latest_date_under
from resource_catalog.models.resources import (
    AgentRecord,
    AnyResourceRecord,
    HookRecord,
    InstructionRecord,
    PromptRecord,
    SkillRecord,
    WorkflowRecord,
)

logger = logging.getLogger(__name__)

NO_VALUE = "(none)"
TOOLS_FILE = "tools.yml"

# Flat-file kinds the website cannot be built without
REQUIRED_DIRS = ("agents", "prompts", "instructions")

# Directories whose history feeds lastUpdated
TRACKED_DIRS = ["agents/", "prompts/", "instructions/", "hooks/", "workflows/", "skills/", "plugins/"]


@dataclass
class ResourceSet:
    """Every extracted record, one title-sorted list per kind."""

    agents: list[AgentRecord] = field(default_factory=list)
    prompts: list[PromptRecord] = field(default_factory=list)
    instructions: list[InstructionRecord] = field(default_factory=list)
    skills: list[SkillRecord] = field(default_factory=list)
    hooks: list[HookRecord] = field(default_factory=list)
    workflows: list[WorkflowRecord] = field(default_factory=list)

    def all_records(self) -> list[AnyResourceRecord]:
        return [
            *self.agents,
            *self.prompts,
            *self.instructions,
            *self.hooks,
            *self.workflows,
            *self.skills,
        ]


def by_title(records: Iterable[AnyResourceRecord]) -> list:
    return sorted(records, key=lambda r: r.title.casefold())


def scan_resources(root: Path, git_dates: Optional[GitDates] = None) -> ResourceSet:
    """Run every extractor over the repository at ``root``."""
    return ResourceSet(
        agents=by_title(scan_agents(root, git_dates)),
        prompts=by_title(scan_prompts(root, git_dates)),
        instructions=by_title(scan_instructions(root, git_dates)),
        skills=by_title(scan_skills(root, git_dates)),
        hooks=by_title(scan_hooks(root, git_dates)),
        workflows=by_title(scan_workflows(root, git_dates)),
    )


def _unique_sorted(values: Iterable[str]) -> list[str]:
    return sorted(set(values))


# ---------------------------------------------------------------------------
# Per-kind collections
# ---------------------------------------------------------------------------


def agents_data(agents: list[AgentRecord]) -> dict[str, Any]:
    return {
        "items": [a.to_item() for a in agents],
        "filters": {
            "models": [NO_VALUE, *_unique_sorted(a.model for a in agents if a.model)],
            "tools": _unique_sorted(t for a in agents for t in a.tools),
        },
    }


def prompts_data(prompts: list[PromptRecord]) -> dict[str, Any]:
    return {
        "items": [p.to_item() for p in prompts],
        "filters": {"tools": _unique_sorted(t for p in prompts for t in p.tools)},
    }


def instructions_data(instructions: list[InstructionRecord]) -> dict[str, Any]:
    return {
        "items": [i.to_item() for i in instructions],
        "filters": {
            "patterns": _unique_sorted(p for i in instructions for p in i.apply_to_patterns),
            "extensions": [NO_VALUE, *_unique_sorted(e for i in instructions for e in i.extensions)],
        },
    }


def skills_data(skills: list[SkillRecord]) -> dict[str, Any]:
    return {
        "items": [s.to_item() for s in skills],
        "filters": {
            "categories": _unique_sorted(s.category for s in skills),
            "hasAssets": ["Yes", "No"],
        },
    }


def hooks_data(hooks: list[HookRecord]) -> dict[str, Any]:
    return {
        "items": [h.to_item() for h in hooks],
        "filters": {
            "hooks": _unique_sorted(e for h in hooks for e in h.hooks),
            "tags": _unique_sorted(t for h in hooks for t in h.tags),
        },
    }


def workflows_data(workflows: list[WorkflowRecord]) -> dict[str, Any]:
    return {
        "items": [w.to_item() for w in workflows],
        "filters": {
            "triggers": _unique_sorted(t for w in workflows for t in w.triggers),
            "tags": _unique_sorted(t for w in workflows for t in w.tags),
        },
    }


def plugins_data(plugins_dir: Path, root: Path, git_dates: Optional[GitDates] = None) -> dict[str, Any]:
    """Plugin items read from each plugin's descriptor, sorted by name."""
    plugins = []
    for plugin_dir in list_subdirectories(plugins_dir):
        descriptor = read_plugin_descriptor(plugin_dir)
        if descriptor is None:
            continue

        rel_path = f"{plugins_dir.relative_to(root).as_posix()}/{plugin_dir.name}"
        name = descriptor.name or plugin_dir.name
        items = [
            *({"kind": "agent", "path": p} for p in descriptor.agents),
            *({"kind": "prompt", "path": p} for p in descriptor.commands),
            *({"kind": "skill", "path": p} for p in descriptor.skills),
        ]
        tags = descriptor.keywords
        plugins.append({
            "id": plugin_dir.name,
            "name": name,
            "description": descriptor.description,
            "path": rel_path,
            "tags": tags,
            "itemCount": len(items),
            "items": items,
            "lastUpdated": latest_date_under(git_dates or {}, rel_path),
            "searchText": f"{name} {descriptor.description} {' '.join(tags)}".lower(),
        })

    plugins.sort(key=lambda p: p["name"].casefold())
    return {
        "items": plugins,
        "filters": {"tags": _unique_sorted(t for p in plugins for t in p["tags"])},
    }


def tools_data(tools_file: Path) -> dict[str, Any]:
    """Tool listings from website/data/tools.yml, featured first."""
    empty = {"items": [], "filters": {"categories": [], "tags": []}}
    if not tools_file.exists():
        logger.warning(f"No {TOOLS_FILE} file found at {tools_file}")
        return empty

    data = load_yaml_file(tools_file)
    if not isinstance(data, dict) or not isinstance(data.get("tools"), list):
        return empty

    tools = []
    for tool in data["tools"]:
        if not isinstance(tool, dict):
            continue
        tools.append({
            "id": tool.get("id"),
            "name": str(tool.get("name") or ""),
            "description": tool.get("description") or "",
            "category": tool.get("category") or "Other",
            "featured": bool(tool.get("featured", False)),
            "requirements": tool.get("requirements") or [],
            "features": tool.get("features") or [],
            "links": tool.get("links") or {},
            "configuration": tool.get("configuration"),
            "tags": tool.get("tags") or [],
        })

    tools.sort(key=lambda t: (not t["featured"], t["name"].casefold()))
    return {
        "items": tools,
        "filters": {
            "categories": _unique_sorted(t["category"] for t in tools),
            "tags": _unique_sorted(str(tag) for t in tools for tag in t["tags"]),
        },
    }


# ---------------------------------------------------------------------------
# Search index
# ---------------------------------------------------------------------------


def _words(*parts: Any) -> str:
    return " ".join(str(p) for p in parts).lower()


SearchTextBuilder = Callable[[Any], str]

SEARCH_TEXT_BUILDERS: dict[str, SearchTextBuilder] = {
    "agent": lambda r: _words(r.title, r.description, " ".join(r.tools)),
    "prompt": lambda r: _words(r.title, r.description),
    "instruction": lambda r: _words(r.title, r.description, ", ".join(r.apply_to_patterns)),
    "hook": lambda r: _words(r.title, r.description, " ".join(r.hooks), " ".join(r.tags)),
    "workflow": lambda r: _words(r.title, r.description, " ".join(r.triggers), " ".join(r.tags)),
    "skill": lambda r: _words(r.title, r.description),
}


def _search_path(record: AnyResourceRecord) -> str:
    if isinstance(record, HookRecord):
        return record.readme_file
    if isinstance(record, SkillRecord):
        return record.skill_file
    return record.path


def search_entry(record: AnyResourceRecord) -> dict[str, Any]:
    """Search index entry for one record."""
    builder = SEARCH_TEXT_BUILDERS.get(record.kind)
    if builder is None:
        raise ValueError(f"No search text builder for resource kind: {record.kind}")
    return {
        "type": record.kind,
        "id": record.id,
        "title": record.title,
        "description": record.description,
        "path": _search_path(record),
        "lastUpdated": record.last_updated,
        "searchText": builder(record),
    }


def build_search_index(resources: ResourceSet, plugins: list[dict[str, Any]]) -> list[dict[str, Any]]:
    index = [search_entry(record) for record in resources.all_records()]
    for plugin in plugins:
        index.append({
            "type": "plugin",
            "id": plugin["id"],
            "title": plugin["name"],
            "description": plugin["description"],
            "path": plugin["path"],
            "tags": plugin["tags"],
            "lastUpdated": plugin["lastUpdated"],
            "searchText": plugin["searchText"],
        })
    return index


# ---------------------------------------------------------------------------
# Website data
# ---------------------------------------------------------------------------


def build_website_data(settings: Settings, git_dates: Optional[GitDates] = None) -> dict[str, Any]:
    """Build every website data document, keyed by output file stem."""
    root = settings.repo_root
    resources = scan_resources(root, git_dates)

    data: dict[str, Any] = {
        "agents": agents_data(resources.agents),
        "hooks": hooks_data(resources.hooks),
        "workflows": workflows_data(resources.workflows),
        "prompts": prompts_data(resources.prompts),
        "instructions": instructions_data(resources.instructions),
        "skills": skills_data(resources.skills),
        "plugins": plugins_data(settings.plugins_dir, root, git_dates),
        "tools": tools_data(settings.website_source_data_path / TOOLS_FILE),
    }
    search_index = build_search_index(resources, data["plugins"]["items"])
    data["search-index"] = search_index

    counts = {
        kind: len(data[kind]["items"])
        for kind in ("agents", "prompts", "instructions", "skills", "hooks", "workflows", "plugins", "tools")
    }
    counts["total"] = len(search_index)
    data["manifest"] = {
        "generated": datetime.now(timezone.utc).isoformat(),
        "counts": counts,
    }

    for kind, count in counts.items():
        logger.debug(f"{kind}: {count}")
    return data


def write_website_data(settings: Settings, git_dates: Optional[GitDates] = None) -> dict[str, Any]:
    """Generate and write every website JSON file; returns the manifest.

    Raises MissingDirectoryError when agents/, prompts/ or instructions/ is absent.
    """
    for name in REQUIRED_DIRS:
        directory = settings.repo_root / name
        if not directory.is_dir():
            raise MissingDirectoryError(directory, f"{name.capitalize()} directory")

    if git_dates is None:
        logger.info("Loading git history for last updated dates...")
        git_dates = get_git_file_dates(TRACKED_DIRS, settings.repo_root)
        logger.info(f"Loaded dates for {len(git_dates)} files")

    data = build_website_data(settings, git_dates)
    out_dir = settings.website_data_path
    for stem, document in data.items():
        write_if_changed(out_dir / f"{stem}.json", json.dumps(document, indent=2, ensure_ascii=False) + "\n")

    counts = data["manifest"]["counts"]
    logger.info(f"Generated website data for {counts['total']} items in {out_dir}")
    return data["manifest"]
