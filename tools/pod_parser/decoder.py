"""
Streaming record decoders.

A decoder consumes the data section of a file one fixed-size chunk at a
time. Everything it carries from one chunk to the next lives in a
DecoderState: the number of the last click emitted, the current minute and
any train/WAV data waiting for the click that follows it.

Decoders can be fed from a file:

    decoder = FPODDecoder(FileFormat.FP3, pic_ver=header.pic_ver)
    decoder.decode(f)

or chunk by chunk:

    for chunk in chunks:
        if not decoder.feed(chunk):
            break
    decoder.finish()
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from .formats import FileFormat
from .records import (
    ClickChunk, TrainChunk, WavChunk, MinuteChunk,
    CPODClickChunk, CPODMinuteChunk,
    ClickRecord, EnvSample, TrainClassification, WavSequence,
    parse_fpod_chunk, parse_cpod_chunk, is_filled,
)

logger = logging.getLogger(__name__)


@dataclass
class DecodeStats:
    """Counters collected while decoding"""
    chunks: int = 0
    unknown_chunks: int = 0
    trailing_bytes: int = 0     # size of a final partial chunk
    end_marker: bool = False    # CPOD double fill chunk seen
    dangling_tags: int = 0      # train/WAV data with no following click
    minutes: int = 0            # minute boundaries seen


@dataclass
class DecoderState:
    """State carried across chunks"""
    click_no: int = 0           # last click emitted, 0 before the first
    minute: int = -1            # -1 until the first minute boundary
    pending_train: Optional[TrainClassification] = None
    pending_wav: Optional[WavSequence] = None
    held_fill: Optional[bytes] = None   # CPOD fill chunk awaiting its neighbour


class StreamDecoder(ABC):
    """Common chunk loop for both families"""

    def __init__(self, fmt: FileFormat):
        self.fmt = fmt
        self.state = DecoderState()
        self.stats = DecodeStats()
        self.clicks: List[ClickRecord] = []
        self.env: List[EnvSample] = []
        self.wav: List[WavSequence] = []

    @property
    def chunk_size(self) -> int:
        return self.fmt.chunk_size

    @abstractmethod
    def feed(self, data: bytes) -> bool:
        """Process one chunk. Returns False once the stream has ended."""

    def finish(self) -> None:
        """Flush anything still pending at the end of the stream"""
        logger.debug("%s: %d chunks, %d clicks, %d minutes",
                     self.fmt.extension, self.stats.chunks,
                     len(self.clicks), self.stats.minutes)

    def decode(self, f: BinaryIO) -> 'StreamDecoder':
        """
        Decode chunks from a file positioned at the start of the data section.

        Reading stops at the first short read, or when feed() reports an end
        marker.
        """
        size = self.chunk_size
        while True:
            data = f.read(size)
            if len(data) < size:
                self.stats.trailing_bytes = len(data)
                break
            if not self.feed(data):
                break
        self.finish()
        return self

    def _new_click(self, microsec: int, ncyc: int, amp_at_max: Optional[int]) -> ClickRecord:
        self.state.click_no += 1
        click = ClickRecord(
            minute=self.state.minute,
            microsec=microsec,
            click_no=self.state.click_no,
            ncyc=ncyc,
            amp_at_max=amp_at_max,
        )
        self.clicks.append(click)
        return click


class FPODDecoder(StreamDecoder):
    """Decoder for FP1/FP3 data"""

    def __init__(self, fmt: FileFormat = FileFormat.FP1, pic_ver: int = 0):
        super().__init__(fmt)
        self.pic_ver = pic_ver

    def feed(self, data: bytes) -> bool:
        self.stats.chunks += 1
        chunk = parse_fpod_chunk(data, self.fmt, self.pic_ver)
        if chunk is None:
            self.stats.unknown_chunks += 1
        else:
            self.step(chunk)
        return True

    def step(self, chunk) -> None:
        """Apply one decoded chunk to the state and output rows"""
        state = self.state

        if isinstance(chunk, ClickChunk):
            click = self._new_click(chunk.microsec, chunk.ncyc, chunk.amp_at_max)
            click.pkat = chunk.pkat
            click.clk_ipi_range = chunk.clk_ipi_range
            click.ipi_pre_max = chunk.ipi_pre_max
            click.ipi_at_max = chunk.ipi_at_max
            click.amp_reversals = chunk.amp_reversals
            click.duration = chunk.duration
            if state.pending_train is not None:
                click.apply_train(state.pending_train)
                state.pending_train = None
            if state.pending_wav is not None:
                click.has_wav = True
                state.pending_wav = None

        elif isinstance(chunk, TrainChunk):
            # Describes the click that comes next
            state.pending_train = chunk.classification(self.fmt)

        elif isinstance(chunk, WavChunk):
            if state.pending_wav is None:
                state.pending_wav = WavSequence(click_no=state.click_no + 1)
                self.wav.append(state.pending_wav)
            state.pending_wav.extend(chunk.pairs)

        elif isinstance(chunk, MinuteChunk):
            state.minute += 1
            self.stats.minutes += 1
            # Env rows count minutes from 1
            self.env.append(EnvSample(
                minute=state.minute + 1,
                temp_deg_c=chunk.temp_deg_c,
                bat1=chunk.bat1,
                bat2=chunk.bat2,
            ))

        else:
            raise TypeError(f"Not an FPOD chunk: {chunk!r}")

    def finish(self) -> None:
        state = self.state
        if state.pending_train is not None:
            self.stats.dangling_tags += 1
            state.pending_train = None
        if state.pending_wav is not None:
            self.stats.dangling_tags += 1
            self.wav.pop()
            state.pending_wav = None
        if self.stats.dangling_tags:
            logger.debug("Dropped %d train/WAV chunks after the last click",
                         self.stats.dangling_tags)
        super().finish()


class CPODDecoder(StreamDecoder):
    """Decoder for CP1/CP3 data"""

    def feed(self, data: bytes) -> bool:
        self.stats.chunks += 1
        state = self.state

        # Two fill chunks in a row mark the end of the data
        if is_filled(data):
            if state.held_fill is not None:
                state.held_fill = None
                self.stats.end_marker = True
                return False
            state.held_fill = data
            return True

        if state.held_fill is not None:
            held, state.held_fill = state.held_fill, None
            self.step(parse_cpod_chunk(held, self.fmt))

        self.step(parse_cpod_chunk(data, self.fmt))
        return True

    def step(self, chunk) -> None:
        """Apply one decoded chunk to the state and output rows"""
        if isinstance(chunk, CPODClickChunk):
            click = self._new_click(chunk.microsec, chunk.ncyc, chunk.khz)
            click.khz = chunk.khz
            click.duration = chunk.duration
            if chunk.train is not None:
                click.apply_train(chunk.train)

        elif isinstance(chunk, CPODMinuteChunk):
            self.state.minute += 1
            self.stats.minutes += 1

        else:
            raise TypeError(f"Not a CPOD chunk: {chunk!r}")

    def finish(self) -> None:
        if self.state.held_fill is not None:
            logger.debug("Ignoring single fill chunk at end of file")
            self.state.held_fill = None
        super().finish()


def make_decoder(fmt: FileFormat, pic_ver: int = 0) -> StreamDecoder:
    """Create the decoder for a file format"""
    if fmt.is_fpod:
        return FPODDecoder(fmt, pic_ver=pic_ver)
    return CPODDecoder(fmt)
