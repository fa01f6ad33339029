"""
POD File Reader

Reads FPOD (FP1, FP3) and CPOD (CP1, CP3) click logger files into a
PodData bundle: the header, one row per click, and for FPODs the
per-minute environment readings and pseudo-WAV samples.
"""

import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Union

from .amplitude import calibrate_clicks
from .decoder import DecodeStats, StreamDecoder, make_decoder
from .errors import FileAccessError, TruncatedHeaderError
from .formats import FileFormat
from .records import (
    ClickRecord, CPODHeader, EnvSample, FPODHeader, WavRow, parse_header,
)
from .tables import ConversionTables, DEFAULT_TABLES

logger = logging.getLogger(__name__)

AMP_EXTENDED = 'extended'
AMP_RAW = 'raw'

TRAIN_COLUMNS = ['train_id', 'species', 'quality_level', 'echo']
CPOD_TRAIN_COLUMNS = ['train_id', 'species', 'quality_level']

FPOD_COLUMNS = ['ncyc', 'pkat', 'clk_ipi_range', 'ipi_pre_max', 'ipi_at_max',
                'khz', 'amp_at_max', 'amp_reversals', 'duration', 'has_wav']
CPOD_COLUMNS = ['ncyc', 'khz', 'amp_at_max', 'duration']

# Dropped by simplify=True
DETAIL_COLUMNS = ('clk_ipi_range', 'ipi_pre_max', 'ipi_at_max', 'amp_reversals', 'duration')

ENV_COLUMNS = ['minute', 'temp_deg_c', 'bat1', 'bat2']
WAV_COLUMNS = ['click_no', 'ipi', 'amp']

Header = Union[FPODHeader, CPODHeader]


def click_columns(fmt: FileFormat, simplify: bool = False) -> List[str]:
    """Click columns produced for a file format"""
    columns = ['minute', 'microsec', 'click_no']
    if fmt.is_fpod:
        if fmt.classified:
            columns += TRAIN_COLUMNS
        columns += FPOD_COLUMNS
    else:
        if fmt.classified:
            columns += CPOD_TRAIN_COLUMNS
        columns += CPOD_COLUMNS
    if simplify:
        columns = [c for c in columns if c not in DETAIL_COLUMNS]
    return columns


@dataclass
class PodData:
    """Everything decoded from one file"""
    filename: str
    header: Header
    clicks: List[ClickRecord]
    env: List[EnvSample]
    wav: List[WavRow]
    stats: DecodeStats

    @property
    def format(self) -> FileFormat:
        return self.header.format

    @property
    def header_dict(self) -> Dict[str, Any]:
        return self.header.to_dict(self.filename)

    @property
    def click_count(self) -> int:
        return len(self.clicks)

    @property
    def minute_count(self) -> int:
        """Number of minute boundaries seen"""
        return self.stats.minutes

    def click_columns(self, simplify: bool = False) -> List[str]:
        return click_columns(self.format, simplify)

    def click_rows(self, simplify: bool = False) -> List[Dict[str, Any]]:
        """Clicks as a list of dicts holding only this format's columns"""
        columns = self.click_columns(simplify)
        return [{c: getattr(click, c) for c in columns} for click in self.clicks]

    def click_table(self, simplify: bool = False) -> Dict[str, list]:
        """Clicks as columns"""
        columns = self.click_columns(simplify)
        return {c: [getattr(click, c) for click in self.clicks] for c in columns}

    def env_table(self) -> Dict[str, list]:
        return {c: [getattr(e, c) for e in self.env] for c in ENV_COLUMNS}

    def wav_table(self) -> Dict[str, list]:
        return {c: [getattr(w, c) for w in self.wav] for c in WAV_COLUMNS}

    def to_dict(self, simplify: bool = False) -> Dict[str, Any]:
        """Header plus columnar click, env and wav data"""
        return {
            'header': self.header_dict,
            'clicks': self.click_table(simplify),
            'env': self.env_table(),
            'wav': self.wav_table(),
        }

    def stats_dict(self) -> Dict[str, Any]:
        return asdict(self.stats)


def assemble(filename: str, header: Header, decoder: StreamDecoder,
             amp: str = AMP_EXTENDED,
             tables: ConversionTables = DEFAULT_TABLES) -> PodData:
    """
    Package decoder output into a PodData bundle.

    FPOD clicks get their kHz from the IPI table and, with amp='extended',
    their amplitudes extrapolated.
    """
    clicks = decoder.clicks
    if header.format.is_fpod:
        calibrate_clicks(clicks, header, extended=(amp == AMP_EXTENDED), tables=tables)

    wav = [row for seq in decoder.wav for row in seq.rows()]

    return PodData(
        filename=filename,
        header=header,
        clicks=clicks,
        env=list(decoder.env),
        wav=wav,
        stats=decoder.stats,
    )


class PodFile:
    """
    FPOD/CPOD data file reader.

    The format is taken from the extension and the header is read on
    construction; clicks are decoded on first access.

    Example:
        pod = PodFile('site1 2023 09 01.FP3')
        print(pod.header.pod_id, pod.click_count)
        for click in pod.clicks:
            print(click.minute, click.microsec, click.species)
    """

    def __init__(self, filepath: Union[str, Path], amp: str = AMP_EXTENDED,
                 tables: ConversionTables = DEFAULT_TABLES):
        if amp not in (AMP_EXTENDED, AMP_RAW):
            raise ValueError(f"Unknown amp mode: {amp}")

        self.filepath = Path(filepath)
        self.format = FileFormat.from_path(self.filepath)
        self.amp = amp
        self.tables = tables
        self._data: Optional[PodData] = None

        with self._open() as f:
            self._header = self._read_header(f)

    def _open(self) -> BinaryIO:
        try:
            return open(self.filepath, 'rb')
        except OSError as e:
            raise FileAccessError(self.filepath.name, e.strerror or str(e)) from e

    def _read_header(self, f: BinaryIO) -> Header:
        size = self.format.header_size
        data = f.read(size)
        if len(data) < size:
            raise TruncatedHeaderError(self.filepath.name, size, len(data))
        return parse_header(data, self.format)

    @property
    def header(self) -> Header:
        """File header"""
        return self._header

    def read(self) -> PodData:
        """Decode the whole file"""
        with self._open() as f:
            header = self._read_header(f)
            decoder = make_decoder(self.format, pic_ver=getattr(header, 'pic_ver', 0))
            decoder.decode(f)

        data = assemble(str(self.filepath), header, decoder, self.amp, self.tables)
        logger.info("Read %s: %d clicks, %d minutes",
                    self.filepath.name, data.click_count, data.minute_count)
        return data

    @property
    def data(self) -> PodData:
        """Decoded data (decodes on first access)"""
        if self._data is None:
            self._data = self.read()
        return self._data

    @property
    def clicks(self) -> List[ClickRecord]:
        return self.data.clicks

    @property
    def env(self) -> List[EnvSample]:
        return self.data.env

    @property
    def wav(self) -> List[WavRow]:
        return self.data.wav

    @property
    def click_count(self) -> int:
        return self.data.click_count

    def __repr__(self) -> str:
        return f"PodFile('{self.filepath.name}', format={self.format.extension})"


def read_pod(filepath: Union[str, Path], amp: str = AMP_EXTENDED,
             tables: ConversionTables = DEFAULT_TABLES) -> PodData:
    """
    Read an FPOD or CPOD file.

    Args:
        filepath: Path to a .FP1, .FP3, .CP1 or .CP3 file
        amp: 'extended' to extrapolate FPOD amplitudes, 'raw' to keep the
             compressed codes
        tables: Lookup tables for kHz and amplitude conversion. The
                built-in amplitude tables approximate the pod's curves;
                pass load_tables(directory) for calibrated amplitudes.

    Returns:
        PodData

    Raises:
        UnsupportedFormatError: unknown extension
        FileAccessError: file cannot be opened
        TruncatedHeaderError: file shorter than its header
    """
    return PodFile(filepath, amp=amp, tables=tables).read()
