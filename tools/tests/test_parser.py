"""
Tests for reading complete files.
"""

import pytest

from pod_parser import (
    FileAccessError, PodFile, PodParserError, TruncatedHeaderError,
    UnsupportedFormatError, read_pod,
)
from pod_parser.tables import CLIPPED_AMPLITUDE, IPI_KHZ

from pod_builders import (
    fpod_header, fpod_click, fpod_minute, cpod_header, cpod_click, cpod_minute, write_pod,
)
from conftest import WAV_A, WAV_B


class TestErrors:
    """Conditions that stop a decode."""

    def test_unknown_extension(self, tmp_path):
        """The extension is checked before the file is opened."""
        with pytest.raises(UnsupportedFormatError):
            read_pod(tmp_path / 'missing.WAV')

    def test_unknown_extension_is_value_error(self, tmp_path):
        with pytest.raises(ValueError):
            read_pod(tmp_path / 'data.txt')

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileAccessError) as exc_info:
            read_pod(tmp_path / 'missing.FP1')
        assert exc_info.value.filename == 'missing.FP1'
        assert 'Unable to open file' in str(exc_info.value)

    @pytest.mark.parametrize("name, size", [
        ('short.FP1', 1023), ('short.FP3', 10), ('short.CP1', 359), ('short.CP3', 700),
    ])
    def test_truncated_header(self, tmp_path, name, size):
        path = tmp_path / name
        path.write_bytes(b'\x00' * size)
        with pytest.raises(TruncatedHeaderError) as exc_info:
            read_pod(path)
        assert exc_info.value.actual == size
        assert isinstance(exc_info.value, PodParserError)

    def test_empty_data_section(self, tmp_path):
        path = write_pod(tmp_path / 'empty.CP1', cpod_header(), [])
        data = read_pod(path)
        assert data.clicks == []
        assert data.minute_count == 0

    def test_bad_amp_mode(self, fp1_file):
        with pytest.raises(ValueError):
            PodFile(fp1_file, amp='linear')


class TestReadFP1:
    """Unclassified FPOD file."""

    def test_header(self, fp1_file):
        data = read_pod(fp1_file)
        assert data.header.pod_id == 1203
        assert data.header.clicks_in_fp1 is None
        assert data.filename == str(fp1_file)

    def test_clicks(self, fp1_file):
        data = read_pod(fp1_file)
        assert [c.minute for c in data.clicks] == [0, 0, 1]
        assert [c.microsec for c in data.clicks] == [1000, 2000, 3000]
        assert [c.click_no for c in data.clicks] == [1, 2, 3]
        assert [c.ncyc for c in data.clicks] == [4, 5, 6]

    def test_khz_and_amplitude(self, fp1_file):
        click = read_pod(fp1_file).clicks[0]
        assert click.khz == IPI_KHZ[30]
        assert click.amp_at_max == 100

    def test_unclassified(self, fp1_file):
        assert all(c.species is None for c in read_pod(fp1_file).clicks)

    def test_env(self, fp1_file):
        data = read_pod(fp1_file)
        assert [(e.minute, e.temp_deg_c, e.bat1, e.bat2) for e in data.env] == [
            (1, 11, 150, 149), (2, 12, 148, 147)]
        assert data.minute_count == 2

    def test_no_wav(self, fp1_file):
        assert read_pod(fp1_file).wav == []


class TestReadFP3:
    """Classified FPOD file with train and WAV data."""

    def test_header(self, fp3_file):
        assert read_pod(fp3_file).header.clicks_in_fp1 == 1234

    def test_classification(self, fp3_file):
        clicks = read_pod(fp3_file).clicks
        assert [(c.train_id, c.species, c.quality_level, c.echo) for c in clicks] == [
            (7, 'NBHF', 3, False),
            (None, None, None, None),
            (8, 'OtherCet', 2, True),
        ]

    def test_wav(self, fp3_file):
        data = read_pod(fp3_file)
        assert [c.has_wav for c in data.clicks] == [True, False, True]
        first = [(w.ipi, w.amp) for w in data.wav if w.click_no == 1]
        third = [(w.ipi, w.amp) for w in data.wav if w.click_no == 3]
        assert first == WAV_B + WAV_A
        assert third == WAV_A
        assert len(data.wav) == 21

    def test_columns(self, fp3_file):
        data = read_pod(fp3_file)
        assert data.click_columns() == [
            'minute', 'microsec', 'click_no', 'train_id', 'species', 'quality_level',
            'echo', 'ncyc', 'pkat', 'clk_ipi_range', 'ipi_pre_max', 'ipi_at_max',
            'khz', 'amp_at_max', 'amp_reversals', 'duration', 'has_wav']
        assert data.click_columns(simplify=True) == [
            'minute', 'microsec', 'click_no', 'train_id', 'species', 'quality_level',
            'echo', 'ncyc', 'pkat', 'khz', 'amp_at_max', 'has_wav']

    def test_to_dict(self, fp3_file):
        result = read_pod(fp3_file).to_dict(simplify=True)
        assert result['header']['pod_id'] == 2001
        assert result['header']['format'] == 'FP3'
        assert result['clicks']['click_no'] == [1, 2, 3]
        assert 'duration' not in result['clicks']
        assert result['env']['minute'] == [1, 2]
        assert len(result['wav']['click_no']) == 21


class TestReadCPOD:
    """CPOD files."""

    def test_cp1(self, cp1_file):
        data = read_pod(cp1_file)
        assert data.header.pod_id == '1234'
        assert [c.khz for c in data.clicks] == [5, 0]
        assert [c.amp_at_max for c in data.clicks] == [5, 0]
        assert [c.duration for c in data.clicks] == [2.0, None]
        assert data.stats.end_marker
        assert data.env == []
        assert data.wav == []
        assert data.minute_count == 1

    def test_minute_count_includes_trailing_minutes(self, tmp_path):
        chunks = [cpod_minute(), cpod_click(), cpod_minute(), cpod_minute()]
        path = write_pod(tmp_path / 'tail.CP1', cpod_header(), chunks)
        assert read_pod(path).minute_count == 3

    def test_minute_count_without_clicks(self, tmp_path):
        path = write_pod(tmp_path / 'quiet.CP1', cpod_header(), [cpod_minute(), cpod_minute()])
        data = read_pod(path)
        assert data.clicks == []
        assert data.minute_count == 2

    def test_cp1_columns(self, cp1_file):
        assert read_pod(cp1_file).click_columns() == [
            'minute', 'microsec', 'click_no', 'ncyc', 'khz', 'amp_at_max', 'duration']

    def test_cp3(self, cp3_file):
        data = read_pod(cp3_file)
        assert data.header.clicks_in_cp1 == 99
        assert [(c.train_id, c.species, c.quality_level) for c in data.clicks] == [
            (17, 'NBHF', 3), (18, 'Sonar', 1)]

    def test_cpod_amp_modes_agree(self, cp1_file):
        """CPOD clicks are never calibrated."""
        extended = read_pod(cp1_file, amp='extended')
        raw = read_pod(cp1_file, amp='raw')
        assert extended.clicks == raw.clicks


class TestAmplitudeModes:
    """Extended vs raw FPOD amplitudes."""

    def _file(self, tmp_path):
        chunks = [fpod_minute(), fpod_click(amp=230, ipi_at=30)]
        return write_pod(tmp_path / 'clip.FP1', fpod_header(fpga_ver=802), chunks)

    def test_extended(self, tmp_path):
        click = read_pod(self._file(tmp_path)).clicks[0]
        assert click.amp_at_max == CLIPPED_AMPLITUDE[(230, 31)]
        assert click.khz == IPI_KHZ[31]

    def test_raw(self, tmp_path):
        click = read_pod(self._file(tmp_path), amp='raw').clicks[0]
        assert click.amp_at_max == 230
        assert click.khz == IPI_KHZ[31]


class TestPodFile:
    """Lazy reader object."""

    def test_header_without_decoding(self, fp3_file):
        pod = PodFile(fp3_file)
        assert pod.header.pod_id == 2001
        assert pod._data is None

    def test_data_cached(self, fp3_file):
        pod = PodFile(fp3_file)
        assert pod.click_count == 3
        assert pod.data is pod.data
        assert len(pod.wav) == 21
        assert len(pod.env) == 2

    def test_reads_identical(self, fp3_file):
        """Decoding is deterministic."""
        assert read_pod(fp3_file) == read_pod(fp3_file)

    def test_repr(self, fp3_file):
        assert repr(PodFile(fp3_file)) == "PodFile('site2.FP3', format=FP3)"
