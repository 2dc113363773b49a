"""
Turn the command's positional argument into a scan range.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from gitscan.repository import GitRepository


class ScanRangeError(ValueError):
    """Raised when the positional argument is not a ref or a ref range."""


@dataclass(frozen=True)
class ScanRange:
    """History to examine: ``start`` (exclusive) to ``end``, plus the index."""

    end: str
    start: Optional[str] = None
    use_index: bool = False

    def describe(self) -> str:
        span = f"{self.start}..{self.end}" if self.start else self.end
        return f"{span} + index" if self.use_index else span


def resolve_scan_range(args: Sequence[str], repository: GitRepository) -> ScanRange:
    """Resolve ``[]``, ``[<ref>]`` or ``[<ref1>..<ref2>]`` into a ScanRange.

    Resolution failures raise RefResolutionError; nothing is skipped.
    """
    if len(args) > 1:
        raise ScanRangeError(f"expected at most one ref or range, got {len(args)}")
    if not args:
        return ScanRange(end=repository.resolve_current_ref(), use_index=True)

    pieces = [piece for piece in args[0].split("..", 1) if piece]
    if not pieces:
        raise ScanRangeError(f"invalid ref range: {args[0]!r}")
    refs = repository.resolve_refs(pieces)
    if len(refs) == 2 and refs[0] != refs[1]:
        return ScanRange(start=refs[0], end=refs[1])
    return ScanRange(end=refs[-1])
