"""
fileproc/validation/virus_scanner.py

Mock malware scanner.

Flags payloads containing the EICAR test markers or the demo trigger words.
A stand-in for a real antivirus engine, not a security control.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from fileproc.core.constants import SCANNER_ENGINE, SUSPICIOUS_PATTERNS
from fileproc.core.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScanResult:
    clean: bool
    engine: str
    scan_date: datetime
    threat: Optional[str] = None


class VirusScanner:
    def __init__(self, patterns: Sequence[bytes] = SUSPICIOUS_PATTERNS) -> None:
        self._patterns = tuple(patterns)

    def scan(self, data: bytes) -> ScanResult:
        now = datetime.now(timezone.utc)
        for pattern in self._patterns:
            if pattern in data:
                logger.debug("Scanner matched a suspicious pattern (%d bytes).", len(pattern))
                return ScanResult(
                    clean=False,
                    engine=SCANNER_ENGINE,
                    scan_date=now,
                    threat="Test virus pattern detected",
                )
        return ScanResult(clean=True, engine=SCANNER_ENGINE, scan_date=now)
