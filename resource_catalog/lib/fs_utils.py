"""
Filesystem helpers shared by the extractors and generators.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


def relative_posix(path: Path, root: Path) -> str:
    """Path of ``path`` relative to ``root`` with forward slashes."""
    return Path(os.path.relpath(path, root)).as_posix()


def iter_files(folder: Path) -> Iterator[Path]:
    """Yield every file under ``folder``, recursively."""
    for dirpath, _dirnames, filenames in os.walk(folder):
        for filename in filenames:
            yield Path(dirpath) / filename


def walk_assets(folder: Path, exclude: Optional[str] = None) -> list[str]:
    """List files under ``folder`` as sorted forward-slash relative paths.

    ``exclude`` names one file, relative to the folder root, to leave out
    (the folder's manifest, e.g. SKILL.md). Nested files with the same name
    are kept.
    """
    assets = [relative_posix(path, folder) for path in iter_files(folder)]
    return sorted(a for a in assets if a != exclude)


def list_files_with_sizes(folder: Path, prefix: str) -> list[dict[str, Any]]:
    """Describe every file under ``folder`` as ``{path, name, size}``.

    ``name`` is relative to the folder, ``path`` is ``prefix/name``.
    """
    files: list[dict[str, Any]] = []
    for path in iter_files(folder):
        name = relative_posix(path, folder)
        files.append({
            "path": f"{prefix}/{name}",
            "name": name,
            "size": path.stat().st_size,
        })
    return sorted(files, key=lambda f: f["name"])


def count_files(folder: Path) -> int:
    """Count files under ``folder``, recursively."""
    return sum(1 for _ in iter_files(folder))


def list_subdirectories(folder: Path) -> list[Path]:
    """Immediate subdirectories of ``folder`` sorted by name; [] if missing."""
    if not folder.is_dir():
        return []
    return sorted((p for p in folder.iterdir() if p.is_dir()), key=lambda p: p.name)


def write_if_changed(path: Path, content: str) -> bool:
    """Atomically write ``content`` unless the file already holds it.

    Returns True when the file was written.
    """
    existed = path.exists()
    if existed:
        try:
            if path.read_text(encoding="utf-8") == content:
                logger.debug(f"{path.name} is already up to date")
                return False
        except (OSError, UnicodeDecodeError):
            pass  # rewrite unreadable files

    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp", prefix=f".{path.stem}-")
    closed = False
    try:
        os.write(fd, content.encode("utf-8"))
        os.close(fd)
        closed = True
        os.replace(tmp_path, path)
    except Exception:
        if not closed:
            os.close(fd)
        if Path(tmp_path).exists():
            os.unlink(tmp_path)
        raise

    logger.info(f"{path.name} {'updated' if existed else 'created'}")
    return True
