"""
FPOD / CPOD Click Logger File Parser

A Python library for reading the binary data files written by FPOD and
CPOD cetacean click loggers (.FP1, .FP3, .CP1, .CP3).

Example usage:
    from pod_parser import (read_pod, species_counts,
                            detection_positive_minutes, to_dataframe)

    data = read_pod('helga period 1.FP3')
    print(data.header.pod_id, data.click_count)

    # Tally clicks per species group
    print(species_counts(data))

    # Detection positive minutes per day for porpoises
    dpm = detection_positive_minutes(data, species='NBHF')

    # Export to pandas
    clicks = to_dataframe(data, 'clicks', simplify=True)
"""

from .errors import (
    PodParserError, FileAccessError, TruncatedHeaderError, UnsupportedFormatError,
)
from .formats import Family, FileFormat
from .records import (
    FileHeader, FPODHeader, CPODHeader,
    ClickRecord, TrainClassification, WavSequence, WavRow, EnvSample,
)
from .decoder import FPODDecoder, CPODDecoder, DecoderState, DecodeStats
from .parser import PodFile, PodData, read_pod
from .amplitude import extrapolate_amplitude
from .species import species_from_code
from .tables import ConversionTables, DEFAULT_TABLES, load_tables
from .validator import ValidationReport, validate_file
from .analysis import (
    click_times, species_counts, detection_positive_minutes, trim_wav,
)
from .export import to_csv, to_json, to_dataframe, to_numpy

__version__ = '1.0.0'
__all__ = [
    'PodParserError',
    'FileAccessError',
    'TruncatedHeaderError',
    'UnsupportedFormatError',
    'Family',
    'FileFormat',
    'FileHeader',
    'FPODHeader',
    'CPODHeader',
    'ClickRecord',
    'TrainClassification',
    'WavSequence',
    'WavRow',
    'EnvSample',
    'FPODDecoder',
    'CPODDecoder',
    'DecoderState',
    'DecodeStats',
    'PodFile',
    'PodData',
    'read_pod',
    'extrapolate_amplitude',
    'species_from_code',
    'ConversionTables',
    'DEFAULT_TABLES',
    'load_tables',
    'ValidationReport',
    'validate_file',
    'click_times',
    'species_counts',
    'detection_positive_minutes',
    'trim_wav',
    'to_csv',
    'to_json',
    'to_dataframe',
    'to_numpy',
]
