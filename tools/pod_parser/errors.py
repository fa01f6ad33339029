"""
Exceptions raised while reading POD data files.

Truncated data at the end of a file is not an error; these are only raised
for conditions that make the whole decode impossible.
"""

from typing import Optional


class PodParserError(Exception):
    """Base class for all pod_parser errors"""

    def __init__(self, message: str, filename: Optional[str] = None):
        super().__init__(message)
        self.filename = filename


class FileAccessError(PodParserError):
    """The file could not be opened"""

    def __init__(self, filename: str, reason: str = ''):
        message = f"Unable to open file {filename}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, filename)


class TruncatedHeaderError(PodParserError):
    """Fewer bytes available than the header needs"""

    def __init__(self, filename: str, expected: int, actual: int):
        super().__init__(
            f"Unable to read header from {filename}: "
            f"expected {expected} bytes, got {actual}",
            filename,
        )
        self.expected = expected
        self.actual = actual


class UnsupportedFormatError(PodParserError, ValueError):
    """File extension is not one of CP1, CP3, FP1, FP3"""

    def __init__(self, filename: str, extension: str):
        super().__init__(f"Unknown file type: {extension!r} ({filename})", filename)
        self.extension = extension
