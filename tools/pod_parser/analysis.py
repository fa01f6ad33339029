"""
Data Analysis Module

Click timestamps, species tallies, detection positive minutes and simple
statistics over decoded POD data.
"""

from collections import Counter, OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from itertools import groupby
from typing import Dict, List, Optional

from .parser import PodData
from .records import ClickRecord, WavRow

# Logged minutes count from midnight, 1 January 1900
POD_EPOCH = datetime(1900, 1, 1)


@dataclass
class Statistics:
    """Statistical summary of data"""
    count: int = 0
    mean: float = 0.0
    std: float = 0.0
    min_val: float = 0.0
    max_val: float = 0.0


def click_time(click: ClickRecord, first_logged_min: int,
               tz: Optional[tzinfo] = None) -> datetime:
    """Wall-clock time of a click"""
    epoch = POD_EPOCH if tz is None else POD_EPOCH.replace(tzinfo=tz)
    return epoch + timedelta(minutes=first_logged_min + click.minute,
                             microseconds=click.microsec)


def click_times(data: PodData, tz: Optional[tzinfo] = None) -> List[datetime]:
    """Wall-clock times of all clicks, in click order"""
    first = data.header.first_logged_min
    return [click_time(c, first, tz) for c in data.clicks]


def species_counts(data: PodData) -> Dict[str, int]:
    """
    Number of clicks per species group.

    Clicks without a classification are counted under ''.
    """
    return dict(Counter(c.species or '' for c in data.clicks))


def clicks_per_minute(data: PodData) -> Dict[int, int]:
    """Click count for each minute index that has clicks"""
    return dict(Counter(c.minute for c in data.clicks))


def detection_positive_minutes(data: PodData, species: str = 'NBHF',
                               min_quality: int = 1,
                               tz: Optional[tzinfo] = None) -> Dict[date, int]:
    """
    Count detection positive minutes (DPM) per day.

    A minute is detection positive if it holds at least one click of the
    species with at least the given quality level.

    Args:
        data: Decoded classified file
        species: Species group label
        min_quality: Lowest quality level to accept (1=Lo, 2=Mod, 3=Hi)
        tz: Time zone for day boundaries

    Returns:
        Ordered mapping of day to number of positive minutes
    """
    first = data.header.first_logged_min
    minutes_by_day: Dict[date, set] = OrderedDict()

    for click in data.clicks:
        if click.species != species:
            continue
        if (click.quality_level or 0) < min_quality:
            continue
        day = click_time(click, first, tz).date()
        minutes_by_day.setdefault(day, set()).add(click.minute)

    return OrderedDict((day, len(minutes)) for day, minutes in minutes_by_day.items())


def trim_wav(data: PodData) -> List[WavRow]:
    """
    Keep only the last ncyc pseudo-WAV samples of each click.

    The pod may record more samples than the click has cycles; the extra
    leading samples belong to the noise before the click.
    """
    ncyc = {c.click_no: c.ncyc for c in data.clicks}
    result = []
    for click_no, group in groupby(data.wav, key=lambda w: w.click_no):
        rows = list(group)
        cycles = ncyc.get(click_no)
        if cycles is None:
            result.extend(rows)
            continue
        result.extend(rows[max(0, len(rows) - cycles):])
    return result


def compute_statistics(values: List[float]) -> Statistics:
    """
    Compute statistical summary of values.

    Args:
        values: List of numeric values

    Returns:
        Statistics dataclass
    """
    if not values:
        return Statistics()

    n = len(values)
    mean = sum(values) / n
    variance = sum((x - mean) ** 2 for x in values) / n

    return Statistics(
        count=n,
        mean=mean,
        std=variance ** 0.5,
        min_val=min(values),
        max_val=max(values),
    )


def get_amplitude_statistics(data: PodData, species: Optional[str] = None) -> Statistics:
    """
    Statistics of click peak amplitude.

    Args:
        data: Decoded file
        species: Restrict to one species group

    Returns:
        Statistics over amp_at_max (clicks with no amplitude are skipped)
    """
    values = [c.amp_at_max for c in data.clicks
              if c.amp_at_max is not None and (species is None or c.species == species)]
    return compute_statistics(values)


def get_khz_statistics(data: PodData) -> Statistics:
    """Statistics of click frequency in kHz"""
    return compute_statistics([c.khz for c in data.clicks if c.khz is not None])
