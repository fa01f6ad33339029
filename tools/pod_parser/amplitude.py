"""
Amplitude extrapolation and frequency derivation for FPOD clicks.

FPODs store the peak amplitude as a compressed 8-bit code. Pods with
extended amplitude data (non-zero FPGA version) also allow clipped clicks
to be extrapolated from the clipping depth and the inter-click interval.
"""

import logging
from typing import Iterable, Optional

from .records import ClickRecord, FPODHeader
from .tables import ConversionTables, DEFAULT_TABLES, CLIP_THRESHOLD, CLIP_MIN_ICI

logger = logging.getLogger(__name__)

SILENT_AMPLITUDE = 1

_default_tables_warned = False


def extrapolate_amplitude(raw_amp: int, ipi: int, extended: bool,
                          tables: ConversionTables = DEFAULT_TABLES) -> Optional[int]:
    """
    Refine a compressed amplitude code.

    Args:
        raw_amp: Compressed peak amplitude code
        ipi: Interval used for the clipped lookup
        extended: Whether the pod records extended amplitude data
        tables: Lookup tables to use

    Returns:
        Linear amplitude, or None if a clipped click has no table entry
    """
    if raw_amp == 0:
        return SILENT_AMPLITUDE
    if extended and ipi >= CLIP_MIN_ICI and raw_amp > CLIP_THRESHOLD:
        return tables.clipped_amp(raw_amp, ipi)
    return tables.linear_amp(raw_amp)


def _warn_default_tables() -> None:
    global _default_tables_warned
    if not _default_tables_warned:
        logger.warning("Extrapolating amplitudes with the built-in approximate tables, "
                       "load vendor tables with load_tables() for calibrated values")
        _default_tables_warned = True


def local_ipi(click: ClickRecord, header: FPODHeader) -> Optional[int]:
    """IPI that represents the click's frequency for this firmware"""
    if header.uses_ipi_at_max:
        return click.ipi_at_max
    return click.ipi_pre_max


def calibrate_clicks(clicks: Iterable[ClickRecord], header: FPODHeader,
                     extended: bool = True,
                     tables: ConversionTables = DEFAULT_TABLES) -> None:
    """
    Fill in kHz and, if requested, extrapolated amplitudes in place.

    Args:
        clicks: Decoded FPOD clicks
        header: File header (selects the IPI and extended amplitude support)
        extended: Replace amp_at_max with the extrapolated amplitude
        tables: Lookup tables to use
    """
    if extended and tables is DEFAULT_TABLES:
        _warn_default_tables()

    use_clipped = header.extended_amps
    for click in clicks:
        ipi = local_ipi(click, header)
        click.khz = tables.khz(ipi)
        if extended:
            click.amp_at_max = extrapolate_amplitude(click.amp_at_max, ipi, use_clipped, tables)
