"""
Calibration lookup tables for FPOD clicks.

Three tables are used after decoding:

- IPI_KHZ: inter-peak-interval (250 ns units) to frequency in kHz
- LINEAR_AMPLITUDE: compressed peak amplitude code to linear amplitude
- CLIPPED_AMPLITUDE: (peak code, inter-click interval) to extrapolated
  amplitude, for clipped clicks on pods with extended amplitude data

The defaults are built once at import. The linear table follows the pod's
compression curve (linear up to code 128, logarithmic above), and the
clipped table scales the linear value by how far into clipping the peak
sits. Vendor calibration tables can be loaded from CSV with load_tables().
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

IPI_UNITS_PER_MS = 4000  # 250 ns units
MAX_IPI = 256            # ipi bytes are stored minus one
MAX_AMPLITUDE_CODE = 255

LINEAR_KNEE = 128
LINEAR_DECADE_CODES = 80

CLIP_THRESHOLD = 222     # codes above this are clipped
CLIP_MIN_ICI = 10
CLIP_MAX_ICI = 200
CLIP_SCALE = 2000

LINEAR_CSV = 'linear.csv'
CLIPPED_CSV = 'clipped.csv'
IPI_KHZ_CSV = 'ipi_khz.csv'


def _build_ipi_khz() -> Tuple[int, ...]:
    return (0,) + tuple(round(IPI_UNITS_PER_MS / ipi) for ipi in range(1, MAX_IPI + 1))


def _build_linear() -> Tuple[int, ...]:
    values = []
    for code in range(MAX_AMPLITUDE_CODE + 1):
        if code <= LINEAR_KNEE:
            values.append(code)
        else:
            values.append(round(LINEAR_KNEE * 10 ** ((code - LINEAR_KNEE) / LINEAR_DECADE_CODES)))
    return tuple(values)


def _build_clipped(linear: Sequence[int]) -> Mapping[Tuple[int, int], int]:
    table = {}
    for peak in range(CLIP_THRESHOLD + 1, MAX_AMPLITUDE_CODE + 1):
        depth = peak - CLIP_THRESHOLD
        for ici in range(CLIP_MIN_ICI, CLIP_MAX_ICI + 1):
            table[(peak, ici)] = round(linear[peak] * (1 + depth * ici / CLIP_SCALE))
    return MappingProxyType(table)


@dataclass(frozen=True)
class ConversionTables:
    """A read-only set of lookup tables"""
    ipi_khz: Tuple[int, ...]
    linear: Tuple[int, ...]
    clipped: Mapping[Tuple[int, int], int]

    def khz(self, ipi: int) -> Optional[int]:
        """Frequency in kHz for an IPI, None if out of range"""
        if 0 < ipi < len(self.ipi_khz):
            return self.ipi_khz[ipi]
        return None

    def linear_amp(self, raw_amp: int) -> Optional[int]:
        if 0 <= raw_amp < len(self.linear):
            return self.linear[raw_amp]
        return None

    def clipped_amp(self, raw_amp: int, ici: int) -> Optional[int]:
        return self.clipped.get((raw_amp, ici))


IPI_KHZ = _build_ipi_khz()
LINEAR_AMPLITUDE = _build_linear()
CLIPPED_AMPLITUDE = _build_clipped(LINEAR_AMPLITUDE)

DEFAULT_TABLES = ConversionTables(
    ipi_khz=IPI_KHZ,
    linear=LINEAR_AMPLITUDE,
    clipped=CLIPPED_AMPLITUDE,
)


def _read_rows(path: Path, columns: Sequence[str]):
    with open(path, newline='') as f:
        reader = csv.DictReader(f)
        missing = [c for c in columns if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"{path.name}: missing columns {', '.join(missing)}")
        for row in reader:
            yield tuple(int(row[c]) for c in columns)


def _indexed(pairs, default: Sequence[int]) -> Tuple[int, ...]:
    values = list(default)
    for index, value in pairs:
        if index >= len(values):
            values.extend([0] * (index + 1 - len(values)))
        values[index] = value
    return tuple(values)


def load_tables(directory: Union[str, Path]) -> ConversionTables:
    """
    Load lookup tables from CSV files in a directory.

    Expected files (any may be missing, the default is used instead):
        ipi_khz.csv   columns: ipi, khz
        linear.csv    columns: raw, amp
        clipped.csv   columns: peak, ici, val

    Args:
        directory: Directory holding the CSV files

    Returns:
        ConversionTables
    """
    directory = Path(directory)

    ipi_khz = IPI_KHZ
    linear = LINEAR_AMPLITUDE
    clipped = CLIPPED_AMPLITUDE

    path = directory / IPI_KHZ_CSV
    if path.exists():
        ipi_khz = _indexed(_read_rows(path, ('ipi', 'khz')), IPI_KHZ)
        logger.debug("Loaded %s", path)

    path = directory / LINEAR_CSV
    if path.exists():
        linear = _indexed(_read_rows(path, ('raw', 'amp')), LINEAR_AMPLITUDE)
        logger.debug("Loaded %s", path)

    path = directory / CLIPPED_CSV
    if path.exists():
        clipped = MappingProxyType({
            (peak, ici): val for peak, ici, val in _read_rows(path, ('peak', 'ici', 'val'))
        })
        logger.debug("Loaded %s (%d entries)", path, len(clipped))

    return ConversionTables(ipi_khz=ipi_khz, linear=linear, clipped=clipped)
