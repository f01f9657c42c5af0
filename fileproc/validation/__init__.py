"""fileproc/validation/__init__.py — public API of the validation package."""

from fileproc.validation.file_validator import (
    FileValidator,
    ValidationReport,
    generate_secure_filename,
    header_matches,
)
from fileproc.validation.virus_scanner import ScanResult, VirusScanner

__all__ = [
    "FileValidator",
    "ScanResult",
    "ValidationReport",
    "VirusScanner",
    "generate_secure_filename",
    "header_matches",
]
