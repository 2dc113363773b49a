"""
Object and pointer integrity verification.
"""

from .models import FatalScanError, Finding, FindingKind, VerificationRun
from .objects import ObjectCheckStats, ObjectVerifier
from .pointers import PointerCheckStats, PointerChecker
from .quarantine import QuarantineError, QuarantineMover, QuarantineStats
from .report import Reporter, write_json_report
from .scan_range import ScanRange, ScanRangeError, resolve_scan_range

__all__ = [
    "FatalScanError",
    "Finding",
    "FindingKind",
    "ObjectCheckStats",
    "ObjectVerifier",
    "PointerCheckStats",
    "PointerChecker",
    "QuarantineError",
    "QuarantineMover",
    "QuarantineStats",
    "Reporter",
    "ScanRange",
    "ScanRangeError",
    "VerificationRun",
    "resolve_scan_range",
    "write_json_report",
]
