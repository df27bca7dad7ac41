"""
Unit tests for plugin descriptor reading and validation.
"""

from pathlib import Path

from conftest import write_plugin
from resource_catalog.core.plugins import (
    read_plugin_descriptor,
    resolve_reference,
    validate_keywords,
    validate_name,
    validate_plugin,
    validate_plugin_dirs,
    validate_plugins,
)


def _descriptor(**overrides):
    data = {
        "name": "my-plugin",
        "description": "A plugin",
        "version": "1.0.0",
        "keywords": ["testing"],
    }
    data.update(overrides)
    return data


class TestFieldRules:
    """Tests for individual field validators."""

    def test_valid_name(self):
        assert validate_name("my-plugin", "my-plugin") == []

    def test_uppercase_name_reports_charset_and_folder_mismatch(self):
        errors = validate_name("My-Plugin", "my-plugin")
        assert any("lowercase letters" in e for e in errors)
        assert any("must match folder name" in e for e in errors)
        assert len(errors) == 2

    def test_long_name(self):
        name = "a" * 51
        errors = validate_name(name, name)
        assert errors == ["name must be between 1 and 50 characters"]

    def test_missing_name(self):
        assert validate_name(None, "x") == ["name is required and must be a string"]

    def test_keywords_collects_every_violation(self):
        errors = validate_keywords(["ok", "Bad Keyword", "x" * 31] + ["k"] * 8)
        assert "maximum 10 keywords allowed" in errors
        assert any('"Bad Keyword"' in e for e in errors)
        assert any("between 1 and 30" in e for e in errors)

    def test_keywords_must_be_array(self):
        assert validate_keywords("azure") == ["keywords must be an array"]


class TestValidatePlugin:
    """Tests for whole-plugin validation."""

    def test_valid_plugin(self, test_repo: Path):
        result = validate_plugin(test_repo / "plugins" / "azure-kit", test_repo)
        assert result.valid, result.errors

    def test_missing_manifest_is_terminal(self, test_repo: Path):
        plugin_dir = test_repo / "plugins" / "empty"
        plugin_dir.mkdir(parents=True)
        result = validate_plugin(plugin_dir, test_repo)
        assert result.errors == ["missing required file: .github/plugin/plugin.json"]

    def test_unparseable_manifest_is_terminal(self, test_repo: Path):
        plugin_dir = write_plugin(test_repo, "broken", "{not json")
        result = validate_plugin(plugin_dir, test_repo)
        assert len(result.errors) == 1
        assert result.errors[0].startswith("failed to parse plugin.json")

    def test_missing_readme_is_reported(self, test_repo: Path):
        plugin_dir = write_plugin(test_repo, "my-plugin", _descriptor(), readme=False)
        result = validate_plugin(plugin_dir, test_repo)
        assert result.errors == ["missing required file: README.md"]

    def test_errors_accumulate_across_fields(self, test_repo: Path):
        plugin_dir = write_plugin(
            test_repo, "my-plugin", _descriptor(name="My-Plugin", description="", version=None)
        )
        result = validate_plugin(plugin_dir, test_repo)
        assert len(result.errors) == 4  # charset, folder mismatch, description, version

    def test_legacy_tags_are_validated(self, test_repo: Path):
        data = _descriptor()
        del data["keywords"]
        data["tags"] = ["Not Valid"]
        plugin_dir = write_plugin(test_repo, "my-plugin", data)
        result = validate_plugin(plugin_dir, test_repo)
        assert any('keyword "Not Valid"' in e for e in result.errors)

    def test_missing_source_reported_once_and_checking_continues(self, test_repo: Path):
        plugin_dir = write_plugin(test_repo, "my-plugin", _descriptor(
            agents=["./agents/missing.md", "./agents/azure-helper.md", "agents/no-dot.md"],
        ))
        result = validate_plugin(plugin_dir, test_repo)
        assert result.errors == [
            "agents[0] source not found: agents/missing.agent.md",
            'agents[2] must start with "./"',
        ]

    def test_reference_shape_rules(self, test_repo: Path):
        plugin_dir = write_plugin(test_repo, "my-plugin", _descriptor(
            commands=["./prompts/write-tests.md", "./commands/write-tests.prompt"],
            skills=["./skills/git-commit", "./skills/missing/", 7],
        ))
        result = validate_plugin(plugin_dir, test_repo)
        assert result.errors == [
            'commands[0] must start with "./commands/"',
            'commands[1] must end with ".md"',
            'skills[0] must end with "/"',
            "skills[1] source not found: skills/missing/SKILL.md",
            "skills[2] must be a string",
        ]


class TestValidatePlugins:
    """Tests for scanning a plugins directory."""

    def test_missing_directory_is_clean(self, tmp_path: Path):
        report = validate_plugins(tmp_path / "plugins", tmp_path)
        assert report.ok
        assert report.results == []

    def test_report_collects_failures(self, test_repo: Path):
        write_plugin(test_repo, "bad", _descriptor(name="other"))
        report = validate_plugins(test_repo / "plugins", test_repo)
        assert not report.ok
        assert [r.plugin for r in report.failed] == ["bad"]

    def test_duplicate_folder_names_flagged(self, test_repo: Path):
        plugin_dir = test_repo / "plugins" / "azure-kit"
        report = validate_plugin_dirs([plugin_dir, plugin_dir], test_repo)
        assert report.duplicates == ["azure-kit"]
        assert not report.ok


class TestReading:
    """Tests for lenient descriptor reading."""

    def test_read_descriptor(self, test_repo: Path):
        descriptor = read_plugin_descriptor(test_repo / "plugins" / "azure-kit")
        assert descriptor.name == "azure-kit"
        assert descriptor.featured is True
        assert descriptor.item_count == 3

    def test_read_descriptor_tags_fallback(self, test_repo: Path):
        plugin_dir = write_plugin(test_repo, "legacy", {"name": "legacy", "tags": ["old"]})
        assert read_plugin_descriptor(plugin_dir).keywords == ["old"]

    def test_read_descriptor_coerces_loose_fields(self, test_repo: Path):
        plugin_dir = write_plugin(test_repo, "loose", {
            "name": "loose",
            "description": None,
            "version": 2,
            "keywords": [1, "ok"],
            "agents": None,
            "skills": ["./skills/a/", 7],
            "featured": "yes",
            "author": {"name": "Someone", "url": "https://example.com"},
            "license": {"type": "MIT"},
        })
        descriptor = read_plugin_descriptor(plugin_dir)

        assert descriptor.description == ""
        assert descriptor.version is None
        assert descriptor.keywords == ["ok"]
        assert descriptor.agents == []
        assert descriptor.item_count == 1
        assert descriptor.featured is False
        assert descriptor.author["name"] == "Someone"

    def test_read_non_object_descriptor(self, test_repo: Path):
        plugin_dir = write_plugin(test_repo, "listy", "[1, 2]")
        assert read_plugin_descriptor(plugin_dir) is None

    def test_read_missing_descriptor(self, tmp_path: Path):
        assert read_plugin_descriptor(tmp_path) is None

    def test_resolve_reference(self, test_repo: Path):
        assert resolve_reference("agents", "./agents/x.md", test_repo) == test_repo / "agents" / "x.agent.md"
        assert resolve_reference("commands", "./commands/y.md", test_repo) == test_repo / "prompts" / "y.prompt.md"
        assert resolve_reference("skills", "./skills/z/", test_repo) == test_repo / "skills" / "z"
        assert resolve_reference("agents", "./commands/x.md", test_repo) is None
