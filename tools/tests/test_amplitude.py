"""
Tests for kHz conversion, amplitude extrapolation and the lookup tables.
"""

import logging

import pytest

from pod_parser import amplitude
from pod_parser.amplitude import calibrate_clicks, extrapolate_amplitude
from pod_parser.formats import FileFormat
from pod_parser.records import ClickRecord, FPODHeader
from pod_parser.tables import (
    CLIPPED_AMPLITUDE, DEFAULT_TABLES, IPI_KHZ, LINEAR_AMPLITUDE,
    ConversionTables, load_tables,
)

from pod_builders import fpod_header


def make_click(amp=100, ipi_pre=30, ipi_at=40):
    return ClickRecord(minute=0, microsec=0, click_no=1, ncyc=8, amp_at_max=amp,
                       ipi_pre_max=ipi_pre, ipi_at_max=ipi_at)


class TestDefaultTables:
    """Built-in lookup tables."""

    def test_ipi_khz(self):
        assert IPI_KHZ[30] == 133
        assert IPI_KHZ[40] == 100
        assert IPI_KHZ[256] == 16
        assert len(IPI_KHZ) == 257

    def test_linear_below_knee(self):
        assert LINEAR_AMPLITUDE[0] == 0
        assert LINEAR_AMPLITUDE[100] == 100
        assert LINEAR_AMPLITUDE[128] == 128

    def test_linear_increasing(self):
        assert all(b > a for a, b in zip(LINEAR_AMPLITUDE[128:], LINEAR_AMPLITUDE[129:]))
        assert LINEAR_AMPLITUDE[208] == 1280

    def test_clipped_keys(self):
        assert (223, 10) in CLIPPED_AMPLITUDE
        assert (255, 200) in CLIPPED_AMPLITUDE
        assert (222, 10) not in CLIPPED_AMPLITUDE
        assert (223, 9) not in CLIPPED_AMPLITUDE
        assert (223, 201) not in CLIPPED_AMPLITUDE

    def test_lookup_bounds(self):
        assert DEFAULT_TABLES.khz(0) is None
        assert DEFAULT_TABLES.khz(257) is None
        assert DEFAULT_TABLES.linear_amp(256) is None


class TestExtrapolateAmplitude:
    """Amplitude refinement rules."""

    def test_zero_is_silent(self):
        assert extrapolate_amplitude(0, 50, extended=True) == 1
        assert extrapolate_amplitude(0, 50, extended=False) == 1

    def test_short_interval_uses_linear(self):
        assert extrapolate_amplitude(223, 9, extended=True) == LINEAR_AMPLITUDE[223]

    def test_clipped(self):
        value = extrapolate_amplitude(223, 10, extended=True)
        assert value == CLIPPED_AMPLITUDE[(223, 10)]
        assert value != LINEAR_AMPLITUDE[223]

    def test_threshold_not_clipped(self):
        assert extrapolate_amplitude(222, 10, extended=True) == LINEAR_AMPLITUDE[222]

    def test_not_extended_uses_linear(self):
        assert extrapolate_amplitude(240, 50, extended=False) == LINEAR_AMPLITUDE[240]

    def test_missing_clipped_entry(self):
        """A clipped click outside the table has no amplitude."""
        assert extrapolate_amplitude(230, 250, extended=True) is None

    def test_custom_tables(self):
        tables = ConversionTables(ipi_khz=IPI_KHZ, linear=LINEAR_AMPLITUDE,
                                  clipped={(230, 50): 99999})
        assert extrapolate_amplitude(230, 50, extended=True, tables=tables) == 99999
        assert extrapolate_amplitude(230, 51, extended=True, tables=tables) is None


class TestCalibrateClicks:
    """kHz and amplitude filled in after decoding."""

    def _header(self, fpga_ver):
        return FPODHeader.from_bytes(fpod_header(fpga_ver=fpga_ver), FileFormat.FP1)

    def test_old_fpga_uses_ipi_pre_max(self):
        click = make_click()
        calibrate_clicks([click], self._header(801))
        assert click.khz == IPI_KHZ[30]

    def test_new_fpga_uses_ipi_at_max(self):
        click = make_click()
        calibrate_clicks([click], self._header(802))
        assert click.khz == IPI_KHZ[40]

    def test_clipped_needs_extended_amps(self):
        clipped = make_click(amp=230)
        calibrate_clicks([clipped], self._header(802))
        assert clipped.amp_at_max == CLIPPED_AMPLITUDE[(230, 40)]

        plain = make_click(amp=230)
        calibrate_clicks([plain], self._header(0))
        assert plain.amp_at_max == LINEAR_AMPLITUDE[230]

    def test_raw_amplitude_kept(self):
        click = make_click(amp=230)
        calibrate_clicks([click], self._header(802), extended=False)
        assert click.amp_at_max == 230
        assert click.khz == IPI_KHZ[40]

    def test_default_tables_warn_once(self, monkeypatch, caplog):
        """Extrapolating with the built-in tables logs a single warning."""
        monkeypatch.setattr(amplitude, '_default_tables_warned', False)
        with caplog.at_level(logging.WARNING, logger='pod_parser.amplitude'):
            calibrate_clicks([make_click()], self._header(0))
            calibrate_clicks([make_click()], self._header(0))
        warnings = [r for r in caplog.records if 'load_tables' in r.getMessage()]
        assert len(warnings) == 1

    def test_no_warning_for_loaded_tables(self, monkeypatch, caplog, tmp_path):
        monkeypatch.setattr(amplitude, '_default_tables_warned', False)
        with caplog.at_level(logging.WARNING, logger='pod_parser.amplitude'):
            calibrate_clicks([make_click()], self._header(0), tables=load_tables(tmp_path))
            calibrate_clicks([make_click()], self._header(0), extended=False)
        assert not [r for r in caplog.records if 'load_tables' in r.getMessage()]


class TestLoadTables:
    """Loading replacement tables from CSV."""

    def test_empty_directory_gives_defaults(self, tmp_path):
        tables = load_tables(tmp_path)
        assert tables.ipi_khz == IPI_KHZ
        assert tables.linear == LINEAR_AMPLITUDE
        assert tables.clipped == CLIPPED_AMPLITUDE

    def test_overrides(self, tmp_path):
        (tmp_path / 'linear.csv').write_text("raw,amp\n200,5000\n201,5100\n")
        (tmp_path / 'clipped.csv').write_text("peak,ici,val\n230,40,77777\n")
        (tmp_path / 'ipi_khz.csv').write_text("ipi,khz\n30,130\n")

        tables = load_tables(tmp_path)
        assert tables.linear_amp(200) == 5000
        assert tables.linear_amp(199) == LINEAR_AMPLITUDE[199]
        assert tables.clipped_amp(230, 40) == 77777
        assert tables.clipped_amp(230, 41) is None
        assert tables.khz(30) == 130
        assert tables.khz(40) == IPI_KHZ[40]

    def test_missing_columns(self, tmp_path):
        (tmp_path / 'linear.csv').write_text("code,value\n1,2\n")
        with pytest.raises(ValueError, match="missing columns"):
            load_tables(tmp_path)
