"""
Generated README tables.

Writes one docs/README.<kind>.md per resource kind plus the plugins list,
and refreshes the featured-plugins section of the main README.md. Agent
tables link declared MCP servers to the registry when the catalog knows
them.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Optional
from urllib.parse import quote

from resource_catalog.config import Settings
from resource_catalog.core.aggregator import ResourceSet, scan_resources
from resource_catalog.core.plugins import read_plugin_descriptor
from resource_catalog.lib.fs_utils import list_subdirectories, write_if_changed
from resource_catalog.models.plugin import PluginDescriptor
from resource_catalog.models.registry import RegistryCatalog
from resource_catalog.models.resources import McpServerConfig

logger = logging.getLogger(__name__)

EMPTY_FALLBACK = "_No entries found yet._"

FEATURED_START_MARKER = "## 🌟 Featured Plugins"
FEATURED_END_MARKER = "## MCP Server"

VSCODE_INSTALL_IMAGE = (
    "https://img.shields.io/badge/VS_Code-Install-0098FF?style=flat-square&logo=visualstudiocode&logoColor=white"
)
VSCODE_INSIDERS_INSTALL_IMAGE = (
    "https://img.shields.io/badge/VS_Code_Insiders-Install-24bfa5?style=flat-square&logo=visualstudiocode&logoColor=white"
)

AKA_INSTALL_URLS = {
    "instructions": "https://aka.ms/awesome-copilot/install/instructions",
    "prompt": "https://aka.ms/awesome-copilot/install/prompt",
    "agent": "https://aka.ms/awesome-copilot/install/agent",
    "hook": "https://aka.ms/awesome-copilot/install/hook",
}

MCP_BADGES = [
    (
        "https://img.shields.io/badge/Install-VS_Code-0098FF?style=flat-square",
        "https://aka.ms/awesome-copilot/install/mcp-vscode?name={name}&config={config}",
    ),
    (
        "https://img.shields.io/badge/Install-VS_Code_Insiders-24bfa5?style=flat-square",
        "https://aka.ms/awesome-copilot/install/mcp-vscodeinsiders?name={name}&config={config}",
    ),
    (
        "https://img.shields.io/badge/Install-Visual_Studio-C16FDE?style=flat-square",
        "https://aka.ms/awesome-copilot/install/mcp-visualstudio/mcp-install?{config}",
    ),
]

# (heading, blurb, usage) per generated README
SECTIONS: dict[str, tuple[str, str, str]] = {
    "instructions": (
        "📋 Custom Instructions",
        "Team and project-specific instructions to enhance GitHub Copilot's behavior for specific "
        "technologies and coding practices.",
        "### How to Use Custom Instructions\n\n"
        "**To Install:**\n"
        "- Click the **VS Code** or **VS Code Insiders** install button for the instruction you want to use\n"
        "- Download the `*.instructions.md` file and manually add it to your project's instruction collection\n\n"
        "**To Use/Apply:**\n"
        "- Copy these instructions to your `.github/copilot-instructions.md` file in your workspace\n"
        "- Create task-specific `*.instructions.md` files in your workspace's `.github/instructions/` folder\n"
        "- Instructions automatically apply to Copilot behavior once installed in your workspace",
    ),
    "prompts": (
        "🎯 Reusable Prompts",
        "Ready-to-use prompt templates for specific development scenarios and tasks, defining prompt "
        "text with a specific mode, model, and available set of tools.",
        "### How to Use Reusable Prompts\n\n"
        "**To Install:**\n"
        "- Click the **VS Code** or **VS Code Insiders** install button for the prompt you want to use\n"
        "- Download the `*.prompt.md` file and manually add it to your prompt collection\n\n"
        "**To Run/Execute:**\n"
        "- Use `/prompt-name` in VS Code chat after installation\n"
        "- Run the `Chat: Run Prompt` command from the Command Palette",
    ),
    "agents": (
        "🤖 Custom Agents",
        "Custom agents for GitHub Copilot, making it easy for users and organizations to \"specialize\" "
        "their Copilot coding agent (CCA) through simple file-based configuration.",
        "### How to Use Custom Agents\n\n"
        "**To Install:**\n"
        "- Click the **VS Code** or **VS Code Insiders** install button for the agent you want to use\n"
        "- Download the `*.agent.md` file and add it to your repository\n\n"
        "**MCP Server Setup:**\n"
        "- Each agent may require one or more MCP servers to function\n"
        "- Click the MCP server to view it on the GitHub MCP registry\n"
        "- Follow the guide on how to add the MCP server to your repository",
    ),
    "hooks": (
        "🪝 Hooks",
        "Hooks enable automated workflows triggered by specific events during GitHub Copilot coding "
        "agent sessions, such as session start, session end, user prompts, and tool usage.",
        "### How to Use Hooks\n\n"
        "**To Install:**\n"
        "- Copy the hook folder to your repository's `.github/hooks/` directory\n"
        "- Ensure any bundled scripts are executable (`chmod +x script.sh`)\n"
        "- Commit the hook to your repository's default branch\n\n"
        "**Available events:** `sessionStart`, `sessionEnd`, `userPromptSubmitted`, `preToolUse`, "
        "`postToolUse`, `errorOccurred`",
    ),
    "workflows": (
        "⚡ Agentic Workflows",
        "[Agentic Workflows](https://github.github.com/gh-aw) are AI-powered repository automations that "
        "run coding agents in GitHub Actions.",
        "### How to Use Agentic Workflows\n\n"
        "**To Install:**\n"
        "- Install the `gh aw` CLI extension: `gh extension install github/gh-aw`\n"
        "- Copy the workflow `.md` file to your repository's `.github/workflows/` directory\n"
        "- Compile with `gh aw compile` to generate the `.lock.yml` file",
    ),
    "skills": (
        "🎯 Agent Skills",
        "Agent Skills are self-contained folders with instructions and bundled resources that enhance "
        "AI capabilities for specialized tasks. Each skill contains a `SKILL.md` file with detailed "
        "instructions that agents load on-demand.",
        "### How to Use Agent Skills\n\n"
        "**What's Included:**\n"
        "- Each skill is a folder containing a `SKILL.md` instruction file\n"
        "- Skills may include helper scripts, code templates, or reference data\n\n"
        "**Usage:**\n"
        "- Copy the skill folder to your local skills directory\n"
        "- Reference skills in your prompts or let the agent discover them automatically",
    ),
    "plugins": (
        "🔌 Plugins",
        "Curated plugins of related prompts, agents, and skills organized around specific themes, "
        "workflows, or use cases. Plugins can be installed directly via GitHub Copilot CLI.",
        "### How to Use Plugins\n\n"
        "**Browse Plugins:**\n"
        "- ⭐ Featured plugins are highlighted and appear at the top of the list\n"
        "- Each plugin includes prompts, agents, and skills for specific workflows\n\n"
        "**Install Plugins:**\n"
        "- Use `copilot plugin install <plugin-name>@awesome-copilot` to install a plugin",
    ),
}

FEATURED_BLURB = (
    "Discover our curated plugins of prompts, agents, and skills organized around specific themes and workflows."
)


# ---------------------------------------------------------------------------
# Cell formatting
# ---------------------------------------------------------------------------


def format_table_cell(text: Optional[str]) -> str:
    """Make multiline text safe inside one markdown table cell.

    Lines are trimmed, runs of blank lines collapse to one, pipes are
    escaped and line breaks become ``<br />``.
    """
    if text is None:
        return ""
    lines = [line.strip() for line in str(text).replace("\r\n", "\n").split("\n")]
    kept: list[str] = []
    for i, line in enumerate(lines):
        if line == "" and i > 0 and lines[i - 1] == "":
            continue
        kept.append(line)
    cell = "\n".join(kept).replace("|", "&#124;").replace("\n", "<br />")
    return cell.strip()


def _encode_component(value: str) -> str:
    """URL-encode like JavaScript's encodeURIComponent."""
    return quote(value, safe="-_.!~*'()")


def make_badges(link: str, badge_type: str, repo_base_url: str) -> str:
    aka = AKA_INSTALL_URLS.get(badge_type, AKA_INSTALL_URLS["instructions"])
    target = f"{repo_base_url}/{link}"
    vscode_url = f"{aka}?url={_encode_component(f'vscode:chat-{badge_type}/install?url={target}')}"
    insiders_url = f"{aka}?url={_encode_component(f'vscode-insiders:chat-{badge_type}/install?url={target}')}"
    return (
        f"[![Install in VS Code]({VSCODE_INSTALL_IMAGE})]({vscode_url})<br />"
        f"[![Install in VS Code Insiders]({VSCODE_INSIDERS_INSTALL_IMAGE})]({insiders_url})"
    )


def mcp_install_payload(config: McpServerConfig) -> dict[str, Any]:
    """Config-only JSON for install links: url+headers (http) or command+args+env."""
    if config.is_http:
        return {"url": config.url or "", "headers": config.headers or {}}
    return {
        "command": config.command or "",
        "args": [_encode_component(str(a)) for a in (config.args or [])],
        "env": config.env or {},
    }


def mcp_server_links(configs: list[McpServerConfig], catalog: RegistryCatalog) -> str:
    """MCP Servers cell: registry link (or raw name) and install badges per server."""
    cells = []
    for config in configs:
        name = config.name.strip()
        payload = json.dumps(mcp_install_payload(config), separators=(",", ":"))
        encoded = _encode_component(payload)
        badges = "<br />".join(
            f"[![Install MCP]({image})]({url.format(name=name, config=encoded)})"
            for image, url in MCP_BADGES
        )
        entry = catalog.match(name)
        label = f"[{name}]({entry.link})" if entry else name
        cells.append(f"{label}<br />{badges}")
    return "<br />".join(cells)


def _assets_cell(assets: list[str]) -> str:
    return "<br />".join(f"`{a}`" for a in assets) if assets else "None"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


def instructions_table(resources: ResourceSet, repo_base_url: str) -> str:
    rows = ["| Title | Description |", "| ----- | ----------- |"]
    for record in resources.instructions:
        link = quote(record.path)
        badges = make_badges(link, "instructions", repo_base_url)
        if record.description:
            description = format_table_cell(record.description)
        else:
            topic = re.sub(r"s$", "", record.title.split(" ")[-1])
            description = f"{topic} specific coding standards and best practices"
        rows.append(f"| [{record.title}](../{link})<br />{badges} | {description} |")
    return "\n".join(rows) + "\n"


def prompts_table(resources: ResourceSet, repo_base_url: str) -> str:
    rows = ["| Title | Description |", "| ----- | ----------- |"]
    for record in resources.prompts:
        link = quote(record.path)
        badges = make_badges(link, "prompt", repo_base_url)
        rows.append(f"| [{record.title}](../{link})<br />{badges} | {format_table_cell(record.description)} |")
    return "\n".join(rows) + "\n"


def agents_table(resources: ResourceSet, repo_base_url: str, catalog: RegistryCatalog) -> str:
    rows = ["| Title | Description | MCP Servers |", "| ----- | ----------- | ----------- |"]
    for record in resources.agents:
        link = quote(record.path)
        badges = make_badges(link, "agent", repo_base_url)
        servers = mcp_server_links(record.mcp_server_configs, catalog)
        rows.append(
            f"| [{record.title}](../{link})<br />{badges} | {format_table_cell(record.description)} | {servers} |"
        )
    return "\n".join(rows) + "\n"


def hooks_table(resources: ResourceSet) -> str:
    rows = [
        "| Name | Description | Events | Bundled Assets |",
        "| ---- | ----------- | ------ | -------------- |",
    ]
    for record in sorted(resources.hooks, key=lambda h: h.name.casefold()):
        events = ", ".join(record.hooks) if record.hooks else "N/A"
        rows.append(
            f"| [{record.name}](../{record.readme_file}) | {format_table_cell(record.description)} "
            f"| {events} | {_assets_cell(record.assets)} |"
        )
    return "\n".join(rows) + "\n"


def workflows_table(resources: ResourceSet) -> str:
    rows = ["| Name | Description | Triggers |", "| ---- | ----------- | -------- |"]
    for record in sorted(resources.workflows, key=lambda w: w.name.casefold()):
        triggers = ", ".join(record.triggers) if record.triggers else "N/A"
        rows.append(f"| [{record.name}](../{record.path}) | {format_table_cell(record.description)} | {triggers} |")
    return "\n".join(rows) + "\n"


def skills_table(resources: ResourceSet) -> str:
    rows = ["| Name | Description | Bundled Assets |", "| ---- | ----------- | -------------- |"]
    for record in sorted(resources.skills, key=lambda s: s.name.casefold()):
        rows.append(
            f"| [{record.name}](../{record.skill_file}) | {format_table_cell(record.description)} "
            f"| {_assets_cell(record.assets)} |"
        )
    return "\n".join(rows) + "\n"


def load_plugins(plugins_dir: Path) -> list[tuple[str, PluginDescriptor]]:
    """(folder name, descriptor) for every readable plugin, featured first then by name."""
    plugins = []
    for plugin_dir in list_subdirectories(plugins_dir):
        descriptor = read_plugin_descriptor(plugin_dir)
        if descriptor is not None:
            plugins.append((plugin_dir.name, descriptor))
    plugins.sort(key=lambda p: (not p[1].featured, (p[1].name or p[0]).casefold()))
    return plugins


def _plugin_row(folder: str, plugin: PluginDescriptor, link_prefix: str, star: bool) -> str:
    name = plugin.name or folder
    label = f"⭐ {name}" if star and plugin.featured else name
    description = format_table_cell(plugin.description or "No description")
    keywords = ", ".join(plugin.keywords)
    return f"| [{label}]({link_prefix}plugins/{folder}/README.md) | {description} | {plugin.item_count} items | {keywords} |"


PLUGIN_TABLE_HEADER = ["| Name | Description | Items | Tags |", "| ---- | ----------- | ----- | ---- |"]


def plugins_table(plugins: list[tuple[str, PluginDescriptor]]) -> str:
    rows = PLUGIN_TABLE_HEADER + [_plugin_row(folder, p, "../", star=True) for folder, p in plugins]
    return "\n".join(rows) + "\n"


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def category_readme(kind: str, table: Optional[str]) -> str:
    """A standalone README for one kind; the fallback text when it has no entries."""
    heading, blurb, usage = SECTIONS[kind]
    if table:
        return f"# {heading}\n\n{blurb}\n{usage}\n\n{table}"
    return f"# {heading}\n\n{blurb}\n\n{usage}\n\n{EMPTY_FALLBACK}"


def featured_plugins_section(plugins: list[tuple[str, PluginDescriptor]]) -> str:
    """Featured plugins block for the main README; empty when none are featured."""
    featured = [(folder, p) for folder, p in plugins if p.featured]
    if not featured:
        return ""
    rows = PLUGIN_TABLE_HEADER + [_plugin_row(folder, p, "", star=False) for folder, p in featured]
    return f"{FEATURED_START_MARKER}\n\n{FEATURED_BLURB}\n\n" + "\n".join(rows) + "\n"


def insert_featured_section(readme: str, section: str) -> str:
    """Replace the featured section, or insert it before the MCP Server heading.

    The README is returned unchanged when neither marker is found.
    """
    start = readme.find(FEATURED_START_MARKER)
    if start != -1:
        end = readme.find(FEATURED_END_MARKER, start)
        if end != -1:
            return readme[:start] + section + "\n\n" + readme[end:]
        return readme

    mcp = readme.find(FEATURED_END_MARKER)
    if mcp != -1:
        return readme[:mcp] + section + "\n\n" + readme[mcp:]
    return readme


def build_readmes(settings: Settings, catalog: RegistryCatalog, resources: ResourceSet) -> dict[str, str]:
    """README contents keyed by kind."""
    base = settings.repo_base_url
    plugins = load_plugins(settings.plugins_dir)
    tables = {
        "instructions": instructions_table(resources, base) if resources.instructions else None,
        "prompts": prompts_table(resources, base) if resources.prompts else None,
        "agents": agents_table(resources, base, catalog) if resources.agents else None,
        "hooks": hooks_table(resources) if resources.hooks else None,
        "workflows": workflows_table(resources) if resources.workflows else None,
        "skills": skills_table(resources) if resources.skills else None,
        "plugins": plugins_table(plugins) if plugins else None,
    }
    for kind, table in tables.items():
        logger.debug(f"README.{kind}.md: {'table' if table else 'no entries'}")
    return {kind: category_readme(kind, table) for kind, table in tables.items()}


def update_main_readme(readme_path: Path, plugins: list[tuple[str, PluginDescriptor]]) -> bool:
    """Refresh the featured plugins section of the main README."""
    section = featured_plugins_section(plugins)
    if not section:
        logger.info("No featured plugins found to add to README.md")
        return False
    if not readme_path.exists():
        logger.warning("README.md not found, skipping featured plugins update")
        return False

    content = readme_path.read_text(encoding="utf-8")
    return write_if_changed(readme_path, insert_featured_section(content, section))


def generate_readmes(settings: Settings, catalog: Optional[RegistryCatalog] = None) -> list[Path]:
    """Write docs/README.<kind>.md files and update the main README.

    Returns the paths that were (re)written.
    """
    catalog = catalog or RegistryCatalog()
    resources = scan_resources(settings.repo_root)
    written = []
    for kind, content in build_readmes(settings, catalog, resources).items():
        path = settings.docs_path / f"README.{kind}.md"
        if write_if_changed(path, content):
            written.append(path)

    main_readme = settings.repo_root / "README.md"
    if update_main_readme(main_readme, load_plugins(settings.plugins_dir)):
        written.append(main_readme)

    logger.info(f"Generated README files ({len(written)} changed)")
    return written
