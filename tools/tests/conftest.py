"""
pytest configuration and fixtures for pod_parser tests.

Sample files are built from the helpers in pod_builders.py so the tests
need no real pod data.
"""

import sys
from pathlib import Path

# Add tools directory to path for pod_parser import
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from pod_builders import (
    fpod_header, fpod_click, fpod_train, fpod_wav, fpod_minute,
    cpod_header, cpod_click, cpod_minute, cpod_fill, write_pod,
)

WAV_A = [(10, 20), (11, 21), (12, 22), (13, 23), (14, 24), (15, 25), (16, 26)]
WAV_B = [(30, 40), (31, 41), (32, 42), (33, 43), (34, 44), (35, 45), (36, 46)]


@pytest.fixture
def fp1_file(tmp_path):
    """FP1 file: two minutes, three clicks"""
    chunks = [
        fpod_minute(temp=11, b11=150, b12=149),
        fpod_click(ticks=200, ncyc=4),
        fpod_click(ticks=400, ncyc=5),
        fpod_minute(temp=12, b11=148, b12=147),
        fpod_click(ticks=600, ncyc=6),
    ]
    return write_pod(tmp_path / 'site1.FP1', fpod_header(pod_id=1203), chunks)


@pytest.fixture
def fp3_file(tmp_path):
    """
    FP3 file with a train tag and WAV data in front of click 1 and
    another WAV chunk in front of click 3.
    """
    chunks = [
        fpod_minute(temp=10, b11=150, b12=149),
        fpod_train(train_id=7, species_code=0, quality=3),
        fpod_wav(WAV_A),
        fpod_wav(WAV_B),
        fpod_click(ticks=1000, ncyc=9),
        fpod_click(ticks=2000, ncyc=3),
        fpod_minute(temp=11, b11=150, b12=149),
        fpod_train(train_id=8, species_code=1, quality=2, echo=True),
        fpod_wav(WAV_A),
        fpod_click(ticks=3000, ncyc=2),
    ]
    header = fpod_header(pod_id=2001, clicks_in_fp1=1234)
    return write_pod(tmp_path / 'site2.FP3', header, chunks)


@pytest.fixture
def cp1_file(tmp_path):
    """CP1 file: one minute, two clicks, end marker, then junk"""
    chunks = [
        cpod_minute(),
        cpod_click(ticks=200, ncyc=10, khz=5),
        cpod_click(ticks=400, ncyc=12, khz=0),
        cpod_fill(),
        cpod_fill(),
        cpod_click(ticks=600),
    ]
    return write_pod(tmp_path / 'site3.CP1', cpod_header(pod_id='1234'), chunks)


@pytest.fixture
def cp3_file(tmp_path):
    """CP3 file: one minute, two classified clicks, end marker"""
    chunks = [
        cpod_minute(size=40),
        cpod_click(ticks=200, ncyc=10, khz=5, size=40,
                   species_byte=(0 << 3) | 3, train_id=17),
        cpod_click(ticks=400, ncyc=12, khz=6, size=40,
                   species_byte=(6 << 3) | 1, train_id=18),
        cpod_fill(size=40),
        cpod_fill(size=40),
    ]
    header = cpod_header(pod_id='0815', size=720, clicks_in_cp1=99)
    return write_pod(tmp_path / 'site4.CP3', header, chunks)
