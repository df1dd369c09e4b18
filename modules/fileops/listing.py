"""
Recursive file listing for filekit.
"""

import os
from pathlib import Path
from typing import Callable, Iterator, List

from core.errors import InvalidArgumentError
from .streams import PathLike, require_path

# (path, is_directory) -> keep?
FileFilter = Callable[[Path, bool], bool]


def suffix_filter(suffix: str) -> FileFilter:
    """
    Build a filter that accepts directories and files ending in ``.suffix``.

    The comparison ignores case, so ``suffix_filter("txt")`` accepts
    ``notes.TXT``.
    """
    ending = ("." + suffix).lower()

    def accept(path: Path, is_dir: bool) -> bool:
        if is_dir:
            return True
        return path.name.lower().endswith(ending)

    return accept


def _walk(directory: Path, predicate: FileFilter) -> Iterator[Path]:
    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError:
        # Unlistable subdirectories are skipped
        return

    for entry in entries:
        path = Path(entry.path)
        is_dir = entry.is_dir()
        if not predicate(path, is_dir):
            continue
        if is_dir:
            yield from _walk(path, predicate)
        else:
            yield path


def iter_files(directory: PathLike, predicate: FileFilter) -> Iterator[Path]:
    """
    Lazily walk ``directory`` depth-first, yielding files the predicate keeps.

    Directories are only descended into, never yielded. A directory the
    predicate rejects is not descended into.

    Raises:
        InvalidArgumentError: If ``directory`` is not a directory
    """
    root = require_path(directory, "directory")
    if not root.is_dir():
        raise InvalidArgumentError(f"'{root}' is not a directory", path=str(root))
    return _walk(root, predicate)


def list_files(directory: PathLike, suffix: str) -> List[Path]:
    """List every file under ``directory``, at any depth, ending in ``.suffix``."""
    return list(iter_files(directory, suffix_filter(suffix)))
