"""
File format detection.

The extension of a POD file decides everything about its layout: which
device family wrote it, whether the KERNO classifier has run over it, the
header size and the size of each data chunk.

    Ext   Family  Classified  Header  Chunk
    ---   ------  ----------  ------  -----
    CP1   CPOD    no          360     10
    CP3   CPOD    yes         720     40
    FP1   FPOD    no          1024    16
    FP3   FPOD    yes         1024    16
"""

from enum import Enum
from pathlib import Path
from typing import Union

from .errors import UnsupportedFormatError


class Family(Enum):
    """Device family"""
    CPOD = 'CPOD'
    FPOD = 'FPOD'


class FileFormat(Enum):
    """Supported file formats, keyed by upper-case extension"""
    CP1 = ('CP1', Family.CPOD, False, 360, 10)
    CP3 = ('CP3', Family.CPOD, True, 720, 40)
    FP1 = ('FP1', Family.FPOD, False, 1024, 16)
    FP3 = ('FP3', Family.FPOD, True, 1024, 16)

    def __init__(self, extension: str, family: Family, classified: bool,
                 header_size: int, chunk_size: int):
        self.extension = extension
        self.family = family
        self.classified = classified
        self.header_size = header_size
        self.chunk_size = chunk_size

    @property
    def is_fpod(self) -> bool:
        return self.family is Family.FPOD

    @property
    def is_cpod(self) -> bool:
        return self.family is Family.CPOD

    @classmethod
    def from_extension(cls, extension: str, filename: str = '') -> 'FileFormat':
        """Look up a format from an extension such as '.fp3' or 'CP1'"""
        ext = extension.lstrip('.').upper()
        for fmt in cls:
            if fmt.extension == ext:
                return fmt
        raise UnsupportedFormatError(filename or extension, ext)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'FileFormat':
        """Look up a format from a file path (case-insensitive)"""
        path = Path(path)
        return cls.from_extension(path.suffix, str(path))
