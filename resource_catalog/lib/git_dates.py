"""
Last-modified timestamps from git history.

One ``git log`` call walks history newest-first; the first commit that
mentions a file is its last modification.
"""

import logging
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Sequence

logger = logging.getLogger(__name__)

_COMMIT_MARKER = "__commit__ "


def parse_git_log(output: str) -> dict[str, str]:
    """Map each file to the date of the newest commit listing it.

    Expects ``git log --format=__commit__ %cI --name-only`` output.
    """
    dates: dict[str, str] = {}
    current: str | None = None
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        if line.startswith(_COMMIT_MARKER):
            current = line[len(_COMMIT_MARKER):].strip()
            continue
        if current and line not in dates:
            dates[line] = current
    return dates


def get_git_file_dates(paths: Sequence[str], cwd: Path) -> dict[str, str]:
    """Return ``{relative_path: ISO-8601 commit date}`` for files under ``paths``.

    Paths are repository-relative with forward slashes. Without git, or
    outside a repository, the mapping is empty.
    """
    cmd = [
        "git", "log",
        f"--format={_COMMIT_MARKER}%cI",
        "--name-only",
        "--diff-filter=AMR",
        "--",
        *paths,
    ]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=120,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Could not read git history: {e}")
        return {}

    if result.returncode != 0:
        logger.warning(f"git log failed: {result.stderr.strip()}")
        return {}

    return parse_git_log(result.stdout)


def latest_date_under(git_dates: dict[str, str], prefix: str) -> str | None:
    """Newest date among files whose path starts with ``prefix/``."""
    prefix = prefix.rstrip("/") + "/"
    dates = [date for path, date in git_dates.items() if path.startswith(prefix)]
    return max(dates, key=datetime.fromisoformat) if dates else None
