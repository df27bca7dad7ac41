"""Tests for layered settings: catalog.yaml, env vars and explicit values."""

from pathlib import Path

import pytest

from resource_catalog.config import Settings, _load_yaml_config, reload_settings


@pytest.fixture
def repo(tmp_path):
    return tmp_path


def _write_config(repo: Path, content: str) -> None:
    (repo / "catalog.yaml").write_text(content, encoding="utf-8")


class TestYamlConfig:
    def test_missing_file(self, repo):
        assert _load_yaml_config(repo) == {}

    def test_malformed_yaml_ignored(self, repo):
        _write_config(repo, "marketplace_name: [unclosed\n")
        assert _load_yaml_config(repo) == {}

    def test_non_mapping_ignored(self, repo):
        _write_config(repo, "- a\n- b\n")
        assert _load_yaml_config(repo) == {}

    def test_yaml_values_applied(self, repo):
        _write_config(repo, "marketplace_name: house-plugins\nowner_name: Platform Team\n")
        settings = Settings(repo_root=repo)
        assert settings.marketplace_name == "house-plugins"
        assert settings.owner_name == "Platform Team"


class TestPrecedence:
    def test_env_beats_yaml(self, repo, monkeypatch):
        _write_config(repo, "marketplace_name: from-yaml\n")
        monkeypatch.setenv("CATALOG_MARKETPLACE_NAME", "from-env")
        assert Settings(repo_root=repo).marketplace_name == "from-env"

    def test_explicit_value_beats_yaml(self, repo):
        _write_config(repo, "marketplace_name: from-yaml\n")
        assert Settings(repo_root=repo, marketplace_name="explicit").marketplace_name == "explicit"

    def test_env_bool_not_overridden_by_yaml(self, repo):
        # conftest sets CATALOG_REGISTRY_ENABLED=false
        _write_config(repo, "registry_enabled: true\n")
        assert Settings(repo_root=repo).registry_enabled is False

    def test_repo_root_from_env(self, repo, monkeypatch):
        monkeypatch.setenv("CATALOG_REPO_ROOT", str(repo))
        assert Settings().repo_root.resolve() == repo.resolve()


class TestPaths:
    def test_defaults_resolve_against_repo_root(self, repo):
        settings = Settings(repo_root=repo)
        assert settings.plugins_dir == repo / "plugins"
        assert settings.website_data_path == repo / "website" / "public" / "data"
        assert settings.website_source_data_path == repo / "website" / "data"
        assert settings.docs_path == repo / "docs"
        assert settings.marketplace_path == repo / ".github" / "plugin" / "marketplace.json"

    def test_relative_override_from_yaml(self, repo):
        _write_config(repo, "docs_dir: build/docs\n")
        assert Settings(repo_root=repo).docs_path == repo / "build" / "docs"

    def test_absolute_override_kept(self, repo, tmp_path_factory):
        elsewhere = tmp_path_factory.mktemp("out")
        assert Settings(repo_root=repo, docs_dir=elsewhere).docs_path == elsewhere


def test_reload_settings_applies_overrides(repo, monkeypatch):
    monkeypatch.setattr("resource_catalog.config._settings", None)
    settings = reload_settings(repo_root=repo, owner_email="team@example.com")
    assert settings.owner_email == "team@example.com"
    assert settings.repo_root == repo
