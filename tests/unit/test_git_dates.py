"""Tests for git-derived last-modified dates."""

import subprocess

from resource_catalog.lib.git_dates import get_git_file_dates, latest_date_under, parse_git_log

LOG_OUTPUT = """__commit__ 2024-05-02T10:00:00+00:00

agents/a.agent.md
plugins/p/README.md
__commit__ 2024-01-01T00:00:00+00:00

agents/a.agent.md
plugins/p/.github/plugin/plugin.json
plugins/pp/README.md
"""


class TestParseGitLog:
    def test_newest_commit_wins(self):
        dates = parse_git_log(LOG_OUTPUT)
        assert dates["agents/a.agent.md"] == "2024-05-02T10:00:00+00:00"
        assert dates["plugins/p/.github/plugin/plugin.json"] == "2024-01-01T00:00:00+00:00"

    def test_empty_output(self):
        assert parse_git_log("") == {}

    def test_files_before_any_commit_ignored(self):
        assert parse_git_log("stray.md\n") == {}


class TestLatestDateUnder:
    def test_newest_date_in_folder(self):
        dates = parse_git_log(LOG_OUTPUT)
        assert latest_date_under(dates, "plugins/p") == "2024-05-02T10:00:00+00:00"

    def test_prefix_matches_whole_segment(self):
        dates = {"plugins/pp/README.md": "2024-01-01T00:00:00+00:00"}
        assert latest_date_under(dates, "plugins/p") is None

    def test_compares_instants_not_strings(self):
        dates = {
            "x/a.md": "2024-01-01T12:00:00+05:00",
            "x/b.md": "2024-01-01T08:00:00+00:00",
        }
        assert latest_date_under(dates, "x/") == "2024-01-01T08:00:00+00:00"


class TestGetGitFileDates:
    def test_git_failure_yields_empty_mapping(self, tmp_path, monkeypatch):
        def fake_run(cmd, **kwargs):
            return subprocess.CompletedProcess(cmd, 128, stdout="", stderr="not a git repository")

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert get_git_file_dates(["agents/"], tmp_path) == {}

    def test_missing_git_yields_empty_mapping(self, tmp_path, monkeypatch):
        def fake_run(cmd, **kwargs):
            raise FileNotFoundError("git")

        monkeypatch.setattr(subprocess, "run", fake_run)
        assert get_git_file_dates(["agents/"], tmp_path) == {}

    def test_parses_output(self, tmp_path, monkeypatch):
        calls = []

        def fake_run(cmd, **kwargs):
            calls.append((cmd, kwargs["cwd"]))
            return subprocess.CompletedProcess(cmd, 0, stdout=LOG_OUTPUT, stderr="")

        monkeypatch.setattr(subprocess, "run", fake_run)
        dates = get_git_file_dates(["agents/", "plugins/"], tmp_path)

        assert dates["plugins/p/README.md"] == "2024-05-02T10:00:00+00:00"
        cmd, cwd = calls[0]
        assert cmd[:2] == ["git", "log"]
        assert cmd[-2:] == ["agents/", "plugins/"]
        assert cwd == tmp_path
