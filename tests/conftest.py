"""
Pytest configuration and fixtures.
"""

import json
import os
from pathlib import Path
from typing import Any, Optional

import pytest

from resource_catalog.config import Settings

# Set test environment
os.environ["CATALOG_LOG_LEVEL"] = "WARNING"
os.environ["CATALOG_REGISTRY_ENABLED"] = "false"


def write_file(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_doc(path: Path, frontmatter: Optional[str], body: str = "") -> Path:
    """Write a markdown document with an optional raw YAML frontmatter block."""
    if frontmatter is None:
        return write_file(path, body)
    return write_file(path, f"---\n{frontmatter.strip()}\n---\n{body}")


def write_plugin(repo: Path, folder: str, descriptor: Any, readme: bool = True) -> Path:
    """Write plugins/<folder>/.github/plugin/plugin.json (+ README.md)."""
    plugin_dir = repo / "plugins" / folder
    content = descriptor if isinstance(descriptor, str) else json.dumps(descriptor, indent=2)
    write_file(plugin_dir / ".github" / "plugin" / "plugin.json", content)
    if readme:
        write_file(plugin_dir / "README.md", f"# {folder}\n")
    return plugin_dir


@pytest.fixture
def test_repo(tmp_path: Path) -> Path:
    """Create a small resource repository for each test."""
    repo = tmp_path / "repo"
    repo.mkdir()

    write_doc(
        repo / "agents" / "azure-helper.agent.md",
        """
name: azure-helper
description: Helps with Azure resources
model: gpt-4.1
tools: [read, search]
mcp-servers:
  apify:
    type: local
    command: npx
    args: ["-y", "@apify/mcp"]
  unknown-tool:
    type: http
    url: https://example.com/mcp
""",
        "\n# Azure Helper Agent\n\nDoes Azure things.\n",
    )
    write_doc(
        repo / "prompts" / "write-tests.prompt.md",
        """
description: Write unit tests
agent: agent
tools: [edit]
""",
        "\n# Write Unit Tests\n",
    )
    write_doc(
        repo / "instructions" / "typescript.instructions.md",
        """
description: TypeScript conventions
applyTo: "**/*.ts, **/*.tsx"
""",
        "\n# TypeScript\n",
    )
    write_doc(
        repo / "skills" / "git-commit" / "SKILL.md",
        """
name: git-commit
description: Write conventional git commit messages
""",
        "\n# Git Commit\n",
    )
    write_file(repo / "skills" / "git-commit" / "scripts" / "check.sh", "#!/bin/sh\n")
    write_doc(
        repo / "hooks" / "session-logger" / "README.md",
        """
name: Session Logger
description: Logs agent sessions
tags: [logging]
""",
        "\n# Session Logger\n",
    )
    write_file(
        repo / "hooks" / "session-logger" / "hooks.json",
        json.dumps({"version": 1, "hooks": {"sessionStart": [], "sessionEnd": []}}),
    )
    write_file(repo / "hooks" / "session-logger" / "log.sh", "#!/bin/sh\n")
    write_doc(
        repo / "workflows" / "daily-report.md",
        """
name: Daily Report
description: Posts a daily status report
triggers: [schedule]
tags: [reporting]
""",
        "\nInstructions.\n",
    )

    write_plugin(repo, "azure-kit", {
        "name": "azure-kit",
        "description": "Azure tooling",
        "version": "1.2.0",
        "keywords": ["azure", "cloud"],
        "agents": ["./agents/azure-helper.md"],
        "commands": ["./commands/write-tests.md"],
        "skills": ["./skills/git-commit/"],
        "featured": True,
    })

    return repo


@pytest.fixture
def settings(test_repo: Path) -> Settings:
    """Settings rooted at the test repository."""
    return Settings(repo_root=test_repo)
