"""
Git access: ref resolution, pointer decoding, and pointer scan feeds.
"""

from .filter import PathFilter
from .pointer import NotAPointerError, Pointer, decode_pointer, is_canonical
from .repository import GitCommandError, GitRepository, RefResolutionError
from .scanner import GitScanner, PointerRecord, PointerScanError, ScanResult

__all__ = [
    "GitCommandError",
    "GitRepository",
    "GitScanner",
    "NotAPointerError",
    "PathFilter",
    "Pointer",
    "PointerRecord",
    "PointerScanError",
    "RefResolutionError",
    "ScanResult",
    "decode_pointer",
    "is_canonical",
]
