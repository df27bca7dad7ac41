"""
Resource metadata extractors.

One extractor per resource kind turns a file (agent, prompt, instruction,
workflow) or folder (skill, hook) into a record. Extractors never raise:
unreadable or invalid input is logged and yields None, or a degraded record
for the document kinds.

Layout handled:
- agents/{id}.agent.md
- prompts/{id}.prompt.md
- instructions/{id}.instructions.md
- skills/{id}/SKILL.md (+ bundled assets)
- hooks/{id}/README.md (+ hooks.json, bundled assets)
- workflows/{id}.md
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from resource_catalog.lib.frontmatter_parser import document_body, parse_frontmatter_text
from resource_catalog.lib.fs_utils import list_files_with_sizes, relative_posix, walk_assets
from resource_catalog.models.resources import (
    KNOWN_HOOK_EVENTS,
    AgentRecord,
    Handoff,
    HookRecord,
    InstructionRecord,
    McpServerConfig,
    PromptRecord,
    SkillRecord,
    WorkflowRecord,
)

logger = logging.getLogger(__name__)

GitDates = dict[str, str]

AGENT_SUFFIX = ".agent.md"
PROMPT_SUFFIX = ".prompt.md"
INSTRUCTION_SUFFIX = ".instructions.md"
WORKFLOW_SUFFIX = ".md"
SKILL_MANIFEST = "SKILL.md"
HOOK_MANIFEST = "README.md"
HOOK_CONFIG = "hooks.json"

_DOCUMENT_SUFFIXES = (AGENT_SUFFIX, PROMPT_SUFFIX, INSTRUCTION_SUFFIX, WORKFLOW_SUFFIX)

# Ordered (category, keywords) rules; first substring hit wins
SKILL_CATEGORY_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("Azure", ("azure", "appinsights")),
    ("Git & GitHub", ("github", "gh-cli", "git-commit", "git ")),
    ("VS Code", ("vscode", "vs code")),
    ("Testing", ("test", "qa", "playwright")),
    ("Microsoft", ("microsoft", "m365", "workiq")),
    ("CLI Tools", ("cli", "command")),
    ("Diagrams", ("diagram", "plantuml", "visual")),
    (".NET", ("nuget", "dotnet", ".net")),
]
DEFAULT_SKILL_CATEGORY = "Other"

_SINGLE_EXTENSION = re.compile(r"\*\.(\w+)$")
_BRACE_EXTENSIONS = re.compile(r"\*\.\{([^}]+)\}$")
_WORD_START = re.compile(r"\b\w")
_FENCES = ("```", "~~~")


# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def string_list(value: Any) -> list[str]:
    """Ordered, de-duplicated list of strings from a scalar or list field."""
    if value is None:
        return []
    if isinstance(value, str):
        items: Iterable[Any] = [value]
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    return list(dict.fromkeys(str(item) for item in items if item is not None))


def parse_apply_to(apply_to: Any) -> list[str]:
    """Normalize ``applyTo`` (comma-separated string or list) to patterns."""
    if isinstance(apply_to, str):
        raw: Iterable[Any] = apply_to.split(",")
    elif isinstance(apply_to, list):
        raw = apply_to
    else:
        return []
    patterns = (str(p).strip() for p in raw if p is not None)
    return list(dict.fromkeys(p for p in patterns if p))


def extensions_from_pattern(pattern: str) -> list[str]:
    """File extensions named by a glob: ``**/*.py`` or ``**/*.{ts,tsx}``."""
    match = _SINGLE_EXTENSION.search(pattern)
    if match:
        return [f".{match.group(1)}"]
    match = _BRACE_EXTENSIONS.search(pattern)
    if match:
        return [f".{ext.strip()}" for ext in match.group(1).split(",") if ext.strip()]
    return []


def categorize_skill(name: str, description: str) -> str:
    text = f"{name} {description}".lower()
    for category, keywords in SKILL_CATEGORY_RULES:
        if any(keyword in text for keyword in keywords):
            return category
    return DEFAULT_SKILL_CATEGORY


def _mcp_server_configs(raw: Any) -> list[McpServerConfig]:
    """Typed configs from an ``mcp-servers`` mapping, dropping mistyped fields."""
    if not isinstance(raw, dict):
        return []
    configs = []
    for name, cfg in raw.items():
        cfg = cfg if isinstance(cfg, dict) else {}
        configs.append(McpServerConfig(
            name=str(name),
            type=cfg.get("type") if isinstance(cfg.get("type"), str) else None,
            command=cfg.get("command") if isinstance(cfg.get("command"), str) else None,
            args=cfg.get("args") if isinstance(cfg.get("args"), list) else None,
            url=cfg.get("url") if isinstance(cfg.get("url"), str) else None,
            headers=cfg.get("headers") if isinstance(cfg.get("headers"), dict) else None,
            env=cfg.get("env") if isinstance(cfg.get("env"), dict) else None,
        ))
    return configs


def _handoffs(raw: Any) -> list[Handoff]:
    if not isinstance(raw, list):
        return []
    return [
        Handoff(label=str(h.get("label") or ""), agent=str(h.get("agent") or ""))
        for h in raw
        if isinstance(h, dict)
    ]


# ---------------------------------------------------------------------------
# Title derivation
# ---------------------------------------------------------------------------


def title_case_name(name: str) -> str:
    """"my-cool-agent" -> "My Cool Agent" (only first letters change)."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def humanize_filename(stem: str) -> str:
    """"my_cool-agent" -> "My Cool Agent"."""
    return _WORD_START.sub(lambda m: m.group(0).upper(), re.sub(r"[-_]", " ", stem))


def first_heading(body: str) -> Optional[str]:
    """First ``# `` heading in ``body``, skipping ``` and ~~~ fenced blocks."""
    fence = None
    for line in body.splitlines():
        marker = line.strip()[:3]
        if marker in _FENCES:
            if fence is None:
                fence = marker
            elif marker == fence:
                fence = None
            continue
        if fence is None and line.startswith("# "):
            heading = line[2:].strip()
            if heading:
                return heading
    return None


def strip_resource_suffix(filename: str) -> str:
    for suffix in _DOCUMENT_SUFFIXES:
        if filename.endswith(suffix):
            return filename[: -len(suffix)]
    return filename


TitleStrategy = Callable[[Optional[dict[str, Any]], str, str], Optional[str]]


def _title_from_field(frontmatter, body, stem):
    return _optional_str((frontmatter or {}).get("title"))


def _title_from_name(frontmatter, body, stem):
    name = _optional_str((frontmatter or {}).get("name"))
    return title_case_name(name) if name else None


def _title_from_heading(frontmatter, body, stem):
    return first_heading(body)


def _title_from_filename(frontmatter, body, stem):
    return humanize_filename(stem)


TITLE_STRATEGIES: list[TitleStrategy] = [
    _title_from_field,
    _title_from_name,
    _title_from_heading,
    _title_from_filename,
]


def derive_title(frontmatter: Optional[dict[str, Any]], body: str, stem: str) -> str:
    """Run the title strategies in order; the filename one always answers."""
    for strategy in TITLE_STRATEGIES:
        title = strategy(frontmatter, body, stem)
        if title:
            return title
    return stem


# ---------------------------------------------------------------------------
# Shared reading
# ---------------------------------------------------------------------------


class _Document:
    """A resource document read once: frontmatter, body and repo paths."""

    def __init__(self, path: Path, root: Path, stem: str):
        self.path = path
        self.stem = stem
        self.relative_path = relative_posix(path, root)
        text = path.read_text(encoding="utf-8")
        self.frontmatter = parse_frontmatter_text(text, source=str(path))
        self.body = document_body(text)

    @property
    def meta(self) -> dict[str, Any]:
        return self.frontmatter or {}

    @property
    def title(self) -> str:
        return derive_title(self.frontmatter, self.body, self.stem)

    @property
    def description(self) -> str:
        return _optional_str(self.meta.get("description")) or ""


def _read_document(path: Path, root: Path, stem: str) -> Optional[_Document]:
    try:
        return _Document(path, root, stem)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Error reading {path}: {e}")
        return None


def _has_required_fields(doc: _Document, label: str, where: Path) -> bool:
    if not _optional_str(doc.meta.get("name")) or not _optional_str(doc.meta.get("description")):
        logger.warning(f"Invalid {label} at {where}: missing name or description in frontmatter")
        return False
    return True


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def extract_agent(path: Path, root: Path, git_dates: Optional[GitDates] = None) -> Optional[AgentRecord]:
    """Extract an agent record from ``agents/{id}.agent.md``."""
    doc = _read_document(path, root, strip_resource_suffix(path.name))
    if doc is None:
        return None

    meta = doc.meta
    configs = _mcp_server_configs(meta.get("mcp-servers"))
    handoffs = _handoffs(meta.get("handoffs"))
    return AgentRecord(
        id=doc.stem,
        title=doc.title,
        description=doc.description,
        path=doc.relative_path,
        last_updated=(git_dates or {}).get(doc.relative_path),
        model=_optional_str(meta.get("model")),
        tools=string_list(meta.get("tools")),
        has_handoffs=bool(handoffs),
        handoffs=handoffs,
        mcp_servers=[c.name for c in configs],
        mcp_server_configs=configs,
        filename=path.name,
    )


def extract_prompt(path: Path, root: Path, git_dates: Optional[GitDates] = None) -> Optional[PromptRecord]:
    """Extract a prompt record from ``prompts/{id}.prompt.md``."""
    doc = _read_document(path, root, strip_resource_suffix(path.name))
    if doc is None:
        return None

    meta = doc.meta
    return PromptRecord(
        id=doc.stem,
        title=doc.title,
        description=doc.description,
        path=doc.relative_path,
        last_updated=(git_dates or {}).get(doc.relative_path),
        agent=_optional_str(meta.get("agent")),
        model=_optional_str(meta.get("model")),
        tools=string_list(meta.get("tools")),
        filename=path.name,
    )


def extract_instruction(
    path: Path, root: Path, git_dates: Optional[GitDates] = None
) -> Optional[InstructionRecord]:
    """Extract an instruction record from ``instructions/{id}.instructions.md``."""
    doc = _read_document(path, root, strip_resource_suffix(path.name))
    if doc is None:
        return None

    apply_to = doc.meta.get("applyTo")
    patterns = parse_apply_to(apply_to)
    extensions: list[str] = []
    for pattern in patterns:
        extensions.extend(extensions_from_pattern(pattern))

    return InstructionRecord(
        id=doc.stem,
        title=doc.title,
        description=doc.description,
        path=doc.relative_path,
        last_updated=(git_dates or {}).get(doc.relative_path),
        apply_to=apply_to if isinstance(apply_to, (str, list)) else None,
        apply_to_patterns=patterns,
        extensions=list(dict.fromkeys(extensions)),
        filename=path.name,
    )


def extract_skill(folder: Path, root: Path, git_dates: Optional[GitDates] = None) -> Optional[SkillRecord]:
    """Extract a skill record from ``skills/{id}/``.

    Returns None when SKILL.md is missing or lacks name/description.
    """
    manifest = folder / SKILL_MANIFEST
    if not manifest.is_file():
        logger.debug(f"Skipping {folder}: no {SKILL_MANIFEST}")
        return None

    doc = _read_document(manifest, root, folder.name)
    if doc is None or not _has_required_fields(doc, "skill", folder):
        return None

    try:
        assets = walk_assets(folder, exclude=SKILL_MANIFEST)
        relative_path = relative_posix(folder, root)
        files = list_files_with_sizes(folder, relative_path)
    except OSError as e:
        logger.warning(f"Error listing skill assets in {folder}: {e}")
        return None

    name = doc.meta["name"]
    return SkillRecord(
        id=folder.name,
        name=name,
        title=doc.title,
        description=doc.description,
        path=relative_path,
        last_updated=(git_dates or {}).get(doc.relative_path),
        assets=assets,
        has_assets=bool(assets),
        asset_count=len(assets),
        category=categorize_skill(name, doc.description),
        skill_file=doc.relative_path,
        files=files,
    )


def read_hook_events(config_path: Path) -> list[str]:
    """Event names bound in a hooks.json; [] if missing or unparseable."""
    if not config_path.exists():
        return []
    try:
        config = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return []

    hooks = config.get("hooks") if isinstance(config, dict) else None
    if not isinstance(hooks, dict):
        return []

    events = [str(event) for event in hooks]
    unknown = [e for e in events if e not in KNOWN_HOOK_EVENTS]
    if unknown:
        logger.warning(f"Unknown hook events in {config_path}: {', '.join(unknown)}")
    return events


def extract_hook(folder: Path, root: Path, git_dates: Optional[GitDates] = None) -> Optional[HookRecord]:
    """Extract a hook record from ``hooks/{id}/``.

    Returns None when README.md is missing or lacks name/description.
    A broken hooks.json only costs the event list.
    """
    manifest = folder / HOOK_MANIFEST
    if not manifest.is_file():
        logger.debug(f"Skipping {folder}: no {HOOK_MANIFEST}")
        return None

    doc = _read_document(manifest, root, folder.name)
    if doc is None or not _has_required_fields(doc, "hook", folder):
        return None

    try:
        assets = walk_assets(folder, exclude=HOOK_MANIFEST)
    except OSError as e:
        logger.warning(f"Error listing hook assets in {folder}: {e}")
        return None

    return HookRecord(
        id=folder.name,
        name=doc.meta["name"],
        title=doc.title,
        description=doc.description,
        path=relative_posix(folder, root),
        last_updated=(git_dates or {}).get(doc.relative_path),
        hooks=read_hook_events(folder / HOOK_CONFIG),
        tags=string_list(doc.meta.get("tags")),
        assets=assets,
        readme_file=doc.relative_path,
    )


def extract_workflow(path: Path, root: Path, git_dates: Optional[GitDates] = None) -> Optional[WorkflowRecord]:
    """Extract a workflow record from ``workflows/{id}.md``."""
    if not path.is_file():
        return None

    doc = _read_document(path, root, path.name[: -len(WORKFLOW_SUFFIX)])
    if doc is None or not _has_required_fields(doc, "workflow", path):
        return None

    return WorkflowRecord(
        id=doc.stem,
        name=doc.meta["name"],
        title=doc.title,
        description=doc.description,
        path=doc.relative_path,
        last_updated=(git_dates or {}).get(doc.relative_path),
        triggers=string_list(doc.meta.get("triggers")),
        tags=string_list(doc.meta.get("tags")),
    )


# ---------------------------------------------------------------------------
# Directory scanners
# ---------------------------------------------------------------------------


def _scan_files(directory: Path, suffix: str, extractor, root: Path, git_dates):
    if not directory.is_dir():
        logger.debug(f"Directory does not exist: {directory}")
        return []
    records = []
    for path in sorted(directory.iterdir()):
        if path.is_file() and path.name.endswith(suffix):
            record = extractor(path, root, git_dates)
            if record is not None:
                records.append(record)
    return records


def _scan_folders(directory: Path, extractor, root: Path, git_dates):
    if not directory.is_dir():
        logger.debug(f"Directory does not exist: {directory}")
        return []
    records = []
    for path in sorted(directory.iterdir()):
        if path.is_dir():
            record = extractor(path, root, git_dates)
            if record is not None:
                records.append(record)
    return records


def scan_agents(root: Path, git_dates: Optional[GitDates] = None) -> list[AgentRecord]:
    return _scan_files(root / "agents", AGENT_SUFFIX, extract_agent, root, git_dates)


def scan_prompts(root: Path, git_dates: Optional[GitDates] = None) -> list[PromptRecord]:
    return _scan_files(root / "prompts", PROMPT_SUFFIX, extract_prompt, root, git_dates)


def scan_instructions(root: Path, git_dates: Optional[GitDates] = None) -> list[InstructionRecord]:
    return _scan_files(root / "instructions", INSTRUCTION_SUFFIX, extract_instruction, root, git_dates)


def scan_skills(root: Path, git_dates: Optional[GitDates] = None) -> list[SkillRecord]:
    return _scan_folders(root / "skills", extract_skill, root, git_dates)


def scan_hooks(root: Path, git_dates: Optional[GitDates] = None) -> list[HookRecord]:
    return _scan_folders(root / "hooks", extract_hook, root, git_dates)


def scan_workflows(root: Path, git_dates: Optional[GitDates] = None) -> list[WorkflowRecord]:
    return _scan_files(root / "workflows", WORKFLOW_SUFFIX, extract_workflow, root, git_dates)
