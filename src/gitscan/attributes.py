"""
Minimal ``.gitattributes`` evaluation for the ``filter=lfs`` attribute.
"""

from __future__ import annotations

import fnmatch
import posixpath
from dataclasses import dataclass
from typing import Optional

LFS_FILTER = "lfs"


@dataclass(frozen=True)
class AttributeRule:
    """One pattern line that sets or unsets the filter attribute."""

    base: str
    pattern: str
    tracked: bool

    def matches(self, path: str) -> bool:
        if self.base:
            if not path.startswith(self.base + "/"):
                return False
            relative = path[len(self.base) + 1 :]
        else:
            relative = path
        pattern = self.pattern
        if pattern.startswith("/") or "/" in pattern.rstrip("/"):
            return _glob(relative, pattern.lstrip("/"))
        return _glob(posixpath.basename(relative), pattern)


class LfsAttributes:
    """Answer whether a path is routed through the LFS filter in one tree."""

    def __init__(self) -> None:
        self._rules: list[AttributeRule] = []

    def add_file(self, attributes_path: str, content: bytes) -> None:
        """Load the rules of one ``.gitattributes`` blob found at ``attributes_path``."""
        base = posixpath.dirname(attributes_path)
        for raw_line in content.decode("utf-8", errors="replace").splitlines():
            rule = _parse_line(base, raw_line)
            if rule is not None:
                self._rules.append(rule)
        # Deeper files take precedence over shallower ones.
        self._rules.sort(key=lambda rule: rule.base.count("/") + (1 if rule.base else 0))

    def is_tracked(self, path: str) -> bool:
        tracked = False
        for rule in self._rules:
            if rule.matches(path):
                tracked = rule.tracked
        return tracked

    def __bool__(self) -> bool:
        return bool(self._rules)


def _parse_line(base: str, raw_line: str) -> Optional[AttributeRule]:
    line = raw_line.strip()
    if not line or line.startswith("#") or line.startswith("[attr]"):
        return None
    parts = line.split()
    pattern, attrs = parts[0], parts[1:]
    tracked: Optional[bool] = None
    for attr in attrs:
        if attr == f"filter={LFS_FILTER}":
            tracked = True
        elif attr in ("-filter", "!filter") or attr.startswith("filter="):
            tracked = False
    if tracked is None:
        return None
    return AttributeRule(base=base, pattern=pattern, tracked=tracked)


def _glob(value: str, pattern: str) -> bool:
    if pattern.endswith("/"):
        return False
    if "**/" in pattern and fnmatch.fnmatchcase(value, pattern.replace("**/", "")):
        return True
    return fnmatch.fnmatchcase(value, pattern)
