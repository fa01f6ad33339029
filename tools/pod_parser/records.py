"""
Binary record layouts for FPOD and CPOD files.

HEADER
------
All numeric header fields are big-endian. Text fields are fixed width and
kept as stored, including trailing padding.

    FPOD (1024 bytes)                  CPOD (360 / 720 bytes)
    Offset  Size  Field                Offset  Size  Field
    3       2     pod id (100*hi+lo)   164     4     pod id (text)
    37      1     PIC version          29      2     deployment depth
    39      2     FPGA version         31      2     water depth
    129     2     deployment depth     13      8     latitude
    131     2     water depth          21      8     longitude
    133     11    latitude             33      31    location
    145     11    longitude            211     50    notes
    157     30    location             128     4     clicks in CP1 (CP3)
    188     43    notes                256     4     first logged minute
    231     8     clicks in FP1 (FP3)  260     4     last logged minute
    232     11    GMT offset
    256     4     first logged minute
    260     4     last logged minute

DATA CHUNKS
-----------
FPOD chunks are 16 bytes and tagged by their first byte:

    < 184   click
    249     train classification for the next click
    250     pseudo-WAV samples for the next click
    254     minute boundary with temperature and battery readings

CPOD chunks are 10 (CP1) or 40 (CP3) bytes, tagged by their last byte:
254 is a minute boundary, anything else is a click.
"""

import struct
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

from .formats import FileFormat
from .species import species_from_code

# FPOD chunk tags
CLICK_TAG_LIMIT = 184
TRAIN_TAG = 249
WAV_TAG = 250
MINUTE_TAG = 254

# CPOD
CPOD_MINUTE_TAG = 254
FILL_BYTE = 0xFF
FILL_TOLERANCE = 5

TICKS_PER_MS = 200.0
MIN_AMPLITUDE = 2
WAV_PAIRS = 7
OLD_BATTERY_LAYOUT_PIC = 28
EXTENDED_IPI_FPGA = 801


def _text(data: bytes, offset: int, length: int) -> str:
    return data[offset:offset + length].decode('latin-1')


def _uint(data: bytes, offset: int, length: int) -> int:
    return int.from_bytes(data[offset:offset + length], 'big')


def ticks_to_microsec(data: bytes) -> int:
    """Convert the 3-byte tick counter at the start of a chunk to microseconds"""
    ticks = _uint(data, 0, 3)
    return int(ticks / TICKS_PER_MS * 1000.0)


@dataclass(frozen=True)
class FileHeader:
    """Fields shared by both header layouts"""
    format: FileFormat
    first_logged_min: int
    last_logged_min: int
    water_depth: int
    deployment_depth: int
    lat_text: str
    lon_text: str
    location_text: str
    notes_text: str

    def to_dict(self, filename: Optional[str] = None) -> Dict[str, Any]:
        """Header as a plain mapping, with the source filename if given"""
        result = asdict(self)
        result['format'] = self.format.extension
        if filename is not None:
            result['filename'] = filename
        return result


@dataclass(frozen=True)
class FPODHeader(FileHeader):
    """FPOD file header (1024 bytes)"""
    pod_id: int = 0
    gmt_text: str = ''
    pic_ver: int = 0
    fpga_ver: int = 0
    extended_amps: bool = False
    clicks_in_fp1: Optional[int] = None

    @property
    def uses_ipi_at_max(self) -> bool:
        """Newer FPGA firmware measures frequency at the peak cycle"""
        return self.fpga_ver > EXTENDED_IPI_FPGA

    @classmethod
    def from_bytes(cls, data: bytes, fmt: FileFormat = FileFormat.FP1) -> 'FPODHeader':
        """Parse header from bytes"""
        if len(data) < fmt.header_size:
            raise ValueError(f"Header too short: {len(data)} < {fmt.header_size}")

        first_min, last_min = struct.unpack_from('>ii', data, 256)
        fpga_ver = _uint(data, 39, 2)

        clicks_in_fp1 = None
        if fmt is FileFormat.FP3:
            clicks_in_fp1 = struct.unpack_from('>q', data, 231)[0]

        return cls(
            format=fmt,
            first_logged_min=first_min,
            last_logged_min=last_min,
            water_depth=_uint(data, 131, 2),
            deployment_depth=_uint(data, 129, 2),
            lat_text=_text(data, 133, 11),
            lon_text=_text(data, 145, 11),
            location_text=_text(data, 157, 30),
            notes_text=_text(data, 188, 43),
            pod_id=100 * data[3] + data[4],
            gmt_text=_text(data, 232, 11),
            pic_ver=data[37],
            fpga_ver=fpga_ver,
            extended_amps=fpga_ver > 0,
            clicks_in_fp1=clicks_in_fp1,
        )


@dataclass(frozen=True)
class CPODHeader(FileHeader):
    """CPOD file header (360 bytes for CP1, 720 for CP3)"""
    pod_id: str = ''
    clicks_in_cp1: Optional[int] = None

    @classmethod
    def from_bytes(cls, data: bytes, fmt: FileFormat = FileFormat.CP1) -> 'CPODHeader':
        """Parse header from bytes"""
        if len(data) < fmt.header_size:
            raise ValueError(f"Header too short: {len(data)} < {fmt.header_size}")

        first_min, last_min = struct.unpack_from('>ii', data, 256)

        clicks_in_cp1 = None
        if fmt is FileFormat.CP3:
            clicks_in_cp1 = struct.unpack_from('>I', data, 128)[0]

        return cls(
            format=fmt,
            first_logged_min=first_min,
            last_logged_min=last_min,
            water_depth=_uint(data, 31, 2),
            deployment_depth=_uint(data, 29, 2),
            lat_text=_text(data, 13, 8),
            lon_text=_text(data, 21, 8),
            location_text=_text(data, 33, 31),
            notes_text=_text(data, 211, 50),
            pod_id=_text(data, 164, 4),
            clicks_in_cp1=clicks_in_cp1,
        )


def parse_header(data: bytes, fmt: FileFormat) -> Union[FPODHeader, CPODHeader]:
    """Parse the header layout that matches the file format"""
    if fmt.is_fpod:
        return FPODHeader.from_bytes(data, fmt)
    return CPODHeader.from_bytes(data, fmt)


# ---------------------------------------------------------------------------
# Decoded rows
# ---------------------------------------------------------------------------

@dataclass
class TrainClassification:
    """KERNO classifier output for one click"""
    train_id: int
    species: str
    quality_level: int
    echo: Optional[bool] = None


@dataclass
class ClickRecord:
    """One detected click"""
    minute: int
    microsec: int
    click_no: int
    ncyc: int
    amp_at_max: Optional[int]
    pkat: Optional[int] = None
    clk_ipi_range: Optional[int] = None
    ipi_pre_max: Optional[int] = None
    ipi_at_max: Optional[int] = None
    khz: Optional[int] = None
    amp_reversals: Optional[int] = None
    duration: Optional[float] = None
    has_wav: bool = False
    train_id: Optional[int] = None
    species: Optional[str] = None
    quality_level: Optional[int] = None
    echo: Optional[bool] = None

    def apply_train(self, train: TrainClassification) -> None:
        self.train_id = train.train_id
        self.species = train.species
        self.quality_level = train.quality_level
        self.echo = train.echo


@dataclass
class WavRow:
    """One pseudo-WAV sample"""
    click_no: int
    ipi: int
    amp: int


@dataclass
class WavSequence:
    """Pseudo-WAV samples for a single click, one entry per WAV chunk"""
    click_no: int
    chunks: List[List[WavRow]] = field(default_factory=list)

    def extend(self, pairs) -> None:
        self.chunks.append([WavRow(self.click_no, ipi, amp) for ipi, amp in pairs])

    def rows(self) -> List[WavRow]:
        """Samples in output order (the pod writes chunks newest first)"""
        return [row for chunk in reversed(self.chunks) for row in chunk]

    def __len__(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)


@dataclass
class EnvSample:
    """Environment readings logged at a minute boundary"""
    minute: int
    temp_deg_c: int
    bat1: int   # 10 mV units
    bat2: int


# ---------------------------------------------------------------------------
# Chunk types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClickChunk:
    """FPOD click chunk (first byte < 184)"""
    microsec: int
    ncyc: int
    pkat: int
    clk_ipi_range: int
    ipi_pre_max: int
    ipi_at_max: int
    amp_at_max: int
    amp_reversals: int
    duration: int

    @staticmethod
    def ipi_range(nibble: int) -> int:
        """Decode the 4-bit IPI range code"""
        if nibble == 15:
            return 65
        if nibble & 0x8:
            return ((nibble & 0x7) + 1) << 3
        return nibble & 0x7

    @classmethod
    def from_bytes(cls, data: bytes) -> 'ClickChunk':
        return cls(
            microsec=ticks_to_microsec(data),
            ncyc=data[3],
            pkat=(data[4] & 0xF0) >> 4,
            clk_ipi_range=cls.ipi_range(data[4] & 0x0F),
            ipi_pre_max=data[5] + 1,
            ipi_at_max=data[6] + 1,
            amp_at_max=max(MIN_AMPLITUDE, data[10]),
            amp_reversals=data[13] & 0x0F,
            duration=((data[13] & 0xF0) * 16 + data[14]) // 5,
        )


@dataclass(frozen=True)
class TrainChunk:
    """FPOD train classification chunk (tag 249)"""
    train_id: int
    species_code: int
    quality_level: int
    echo: bool

    @classmethod
    def from_bytes(cls, data: bytes) -> 'TrainChunk':
        flags = data[14]
        return cls(
            train_id=data[15],
            species_code=(flags >> 2) & 0x3,
            quality_level=flags & 0x3,
            echo=bool(flags & 0x20),
        )

    def classification(self, fmt: FileFormat) -> TrainClassification:
        return TrainClassification(
            train_id=self.train_id,
            species=species_from_code(self.species_code, fmt),
            quality_level=self.quality_level,
            echo=self.echo,
        )


@dataclass(frozen=True)
class WavChunk:
    """FPOD pseudo-WAV chunk (tag 250), seven (ipi, amp) pairs"""
    pairs: tuple

    @classmethod
    def from_bytes(cls, data: bytes) -> 'WavChunk':
        # Pairs are stored back to front
        offsets = range(2 * (WAV_PAIRS - 1), -1, -2)
        return cls(pairs=tuple((data[pos + 1], data[pos + 2]) for pos in offsets))


@dataclass(frozen=True)
class MinuteChunk:
    """FPOD minute boundary (tag 254)"""
    temp_deg_c: int
    bat1: int
    bat2: int

    @classmethod
    def from_bytes(cls, data: bytes, pic_ver: int) -> 'MinuteChunk':
        # Early PIC firmware stored the battery readings one byte later
        if pic_ver < OLD_BATTERY_LAYOUT_PIC and data[11] == 0 and data[13]:
            bat1, bat2 = data[12], data[13]
        else:
            bat1, bat2 = data[11], data[12]
        return cls(temp_deg_c=data[7], bat1=bat1, bat2=bat2)


@dataclass(frozen=True)
class CPODClickChunk:
    """CPOD click chunk (last byte != 254)"""
    microsec: int
    ncyc: int
    khz: int
    duration: Optional[float]
    train: Optional[TrainClassification] = None

    @classmethod
    def from_bytes(cls, data: bytes, fmt: FileFormat) -> 'CPODClickChunk':
        ncyc = data[3]
        khz = data[5]
        train = None
        if fmt.classified:
            train = TrainClassification(
                train_id=data[39],
                species=species_from_code(data[36] >> 3, fmt),
                quality_level=data[36] & 0x3,
            )
        return cls(
            microsec=ticks_to_microsec(data),
            ncyc=ncyc,
            khz=khz,
            duration=ncyc / khz if khz > 0 else None,
            train=train,
        )


@dataclass(frozen=True)
class CPODMinuteChunk:
    """CPOD minute boundary (last byte 254), carries no readings"""


FPODChunk = Union[ClickChunk, TrainChunk, WavChunk, MinuteChunk]
CPODChunk = Union[CPODClickChunk, CPODMinuteChunk]


def parse_fpod_chunk(data: bytes, fmt: FileFormat = FileFormat.FP1,
                     pic_ver: int = 0) -> Optional[FPODChunk]:
    """
    Classify and decode one FPOD chunk.

    Returns None for tags that carry nothing this parser reads.
    """
    tag = data[0]
    if tag < CLICK_TAG_LIMIT:
        return ClickChunk.from_bytes(data)
    if tag == TRAIN_TAG:
        return TrainChunk.from_bytes(data)
    if tag == WAV_TAG:
        return WavChunk.from_bytes(data)
    if tag == MINUTE_TAG:
        return MinuteChunk.from_bytes(data, pic_ver)
    return None


def is_filled(data: bytes) -> bool:
    """True if a CPOD chunk is (almost) all 0xFF, the end-of-data filler"""
    return data.count(FILL_BYTE) >= len(data) - FILL_TOLERANCE


def parse_cpod_chunk(data: bytes, fmt: FileFormat = FileFormat.CP1) -> CPODChunk:
    """Classify and decode one CPOD chunk"""
    if data[-1] == CPOD_MINUTE_TAG:
        return CPODMinuteChunk()
    return CPODClickChunk.from_bytes(data, fmt)
