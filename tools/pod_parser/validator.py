"""
POD File Validator

Checks a file for signs of truncation or a malformed data section:
- Unknown extension or short header
- Partial chunk at the end of the data section
- Missing end-of-data marker (CPOD)
- Clicks logged before the first minute boundary
- Chunks with unrecognised tags (FPOD)
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .errors import PodParserError
from .formats import FileFormat
from .parser import PodFile


@dataclass
class ValidationReport:
    """Results of file validation"""
    filepath: str
    format: Optional[str] = None
    is_valid: bool = True
    header_valid: bool = True
    end_marker_found: bool = False
    trailing_bytes: int = 0

    chunk_count: int = 0
    click_count: int = 0
    minute_count: int = 0
    unknown_chunks: int = 0
    dangling_tags: int = 0
    clicks_before_first_minute: int = 0

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, msg: str):
        """Add an error and mark as invalid"""
        self.errors.append(msg)
        self.is_valid = False

    def add_warning(self, msg: str):
        """Add a warning (doesn't affect validity)"""
        self.warnings.append(msg)

    def summary(self) -> str:
        """Generate human-readable summary"""
        lines = [
            f"Validation Report: {self.filepath}",
            "=" * 50,
            f"Status: {'VALID' if self.is_valid else 'INVALID'}",
            f"Format: {self.format or 'unknown'}",
            f"",
            f"Header:  {'OK' if self.header_valid else 'INVALID'}",
        ]

        if self.format in ('CP1', 'CP3'):
            lines.append(f"End marker: {'OK' if self.end_marker_found else 'MISSING'}")

        lines.extend([
            f"",
            f"Chunks:  {self.chunk_count:,}",
            f"Clicks:  {self.click_count:,}",
            f"Minutes: {self.minute_count:,}",
        ])

        if self.trailing_bytes:
            lines.append(f"Trailing bytes: {self.trailing_bytes}")

        if self.errors:
            lines.extend(["", "Errors:"])
            for err in self.errors:
                lines.append(f"  - {err}")

        if self.warnings:
            lines.extend(["", "Warnings:"])
            for warn in self.warnings:
                lines.append(f"  - {warn}")

        return "\n".join(lines)


def validate_file(filepath: str) -> ValidationReport:
    """
    Validate a POD data file.

    Args:
        filepath: Path to the file

    Returns:
        ValidationReport with detailed results
    """
    report = ValidationReport(filepath=filepath)
    path = Path(filepath)

    if not path.exists():
        report.add_error(f"File not found: {filepath}")
        return report

    try:
        report.format = FileFormat.from_path(path).extension
        data = PodFile(path, amp='raw').read()
    except PodParserError as e:
        report.header_valid = False
        report.add_error(str(e))
        return report

    stats = data.stats
    report.chunk_count = stats.chunks
    report.click_count = data.click_count
    report.minute_count = data.minute_count
    report.unknown_chunks = stats.unknown_chunks
    report.dangling_tags = stats.dangling_tags
    report.trailing_bytes = stats.trailing_bytes
    report.end_marker_found = stats.end_marker
    report.clicks_before_first_minute = sum(1 for c in data.clicks if c.minute < 0)

    if report.trailing_bytes:
        report.add_warning(f"Data ends with a partial chunk ({report.trailing_bytes} bytes) "
                           f"- file may be truncated")

    if data.format.is_cpod and not report.end_marker_found:
        report.add_warning("No end-of-data marker - file may be truncated")

    if data.clicks and report.clicks_before_first_minute == data.click_count:
        report.add_error("No click follows a minute boundary - data section is malformed")
    elif report.clicks_before_first_minute:
        report.add_warning(f"{report.clicks_before_first_minute} clicks before "
                           f"the first minute boundary")

    if report.unknown_chunks:
        report.add_warning(f"{report.unknown_chunks} chunks with unrecognised tags")

    if report.dangling_tags:
        report.add_warning(f"{report.dangling_tags} train/WAV chunks after the last click")

    return report
