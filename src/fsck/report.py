"""
Line-oriented diagnostics and the optional JSON run report.
"""

from __future__ import annotations

import json
import sys
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

from fsck.models import Finding, VerificationRun
from fsck.scan_range import ScanRange

OK_MESSAGE = "Git LFS fsck OK"


class Reporter:
    """Write whole diagnostic lines to the command's output stream."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream
        self._lock = threading.Lock()

    def line(self, message: str) -> None:
        stream = self.stream or sys.stdout
        with self._lock:
            stream.write(message + "\n")
            stream.flush()

    def finding(self, finding: Finding) -> None:
        self.line(finding.report_line())

    def success(self) -> None:
        self.line(OK_MESSAGE)


def write_json_report(report_path: Path, run: VerificationRun, scan_range: ScanRange) -> Path:
    """Persist the run's findings as JSON and return the written path."""
    report_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "scan_range": {
            "start": scan_range.start,
            "end": scan_range.end,
            "use_index": scan_range.use_index,
        },
        **run.to_dict(),
    }
    report_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return report_path
