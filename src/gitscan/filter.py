"""
Include/exclude path filter for repository-relative paths.
"""

from __future__ import annotations

import fnmatch
import posixpath
from typing import Iterable, Optional


class PathFilter:
    """Decide whether a repository path passes include and exclude patterns.

    A pattern matches a path when it equals it, names one of its leading
    directories, or glob-matches the full path or (for patterns without a
    slash) the file name.
    """

    def __init__(self, include: Optional[Iterable[str]] = None, exclude: Optional[Iterable[str]] = None) -> None:
        self.include = _clean(include)
        self.exclude = _clean(exclude)

    def allows(self, path: str) -> bool:
        path = path.lstrip("/")
        if self.include and not any(_matches(path, pattern) for pattern in self.include):
            return False
        return not any(_matches(path, pattern) for pattern in self.exclude)

    def __bool__(self) -> bool:
        return bool(self.include or self.exclude)

    def __repr__(self) -> str:
        return f"PathFilter(include={self.include!r}, exclude={self.exclude!r})"


def _clean(patterns: Optional[Iterable[str]]) -> list[str]:
    if not patterns:
        return []
    cleaned = []
    for pattern in patterns:
        pattern = pattern.strip()
        if pattern:
            cleaned.append(pattern.lstrip("/"))
    return cleaned


def _matches(path: str, pattern: str) -> bool:
    directory = pattern.rstrip("/")
    if path == directory or path.startswith(directory + "/"):
        return True
    if fnmatch.fnmatchcase(path, pattern):
        return True
    if "/" not in directory:
        if fnmatch.fnmatchcase(posixpath.basename(path), pattern):
            return True
        return any(fnmatch.fnmatchcase(part, directory) for part in path.split("/")[:-1])
    return fnmatch.fnmatchcase(path, directory + "/*")
