"""
Data Export Module

Export decoded POD data to CSV, JSON, pandas DataFrame and numpy arrays.
"""

import csv
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .analysis import click_times, species_counts, trim_wav
from .parser import PodData, ENV_COLUMNS, WAV_COLUMNS

TABLES = ('clicks', 'env', 'wav')


def _table(data: PodData, table: str, simplify: bool = False,
           trim: bool = False):
    """Column names and row dicts for one table"""
    if table == 'clicks':
        return data.click_columns(simplify), data.click_rows(simplify)
    if table == 'env':
        return list(ENV_COLUMNS), [{c: getattr(e, c) for c in ENV_COLUMNS} for e in data.env]
    if table == 'wav':
        wav = trim_wav(data) if trim else data.wav
        return list(WAV_COLUMNS), [{c: getattr(w, c) for c in WAV_COLUMNS} for w in wav]
    raise ValueError(f"Unknown table: {table}")


def to_csv(data: PodData, output_path: str,
           table: str = 'clicks',
           simplify: bool = False,
           include_time: bool = True,
           trim: bool = False,
           progress_callback: Optional[Callable[[int, int], None]] = None) -> int:
    """
    Export one table to CSV format.

    Args:
        data: Decoded file
        output_path: Output CSV file path
        table: 'clicks', 'env' or 'wav'
        simplify: Drop the detail click columns
        include_time: Prepend a wall-clock time column to clicks
        trim: Trim pseudo-WAV samples to the click's cycle count
        progress_callback: Optional callback(current, total) for progress

    Returns:
        Number of rows written
    """
    columns, rows = _table(data, table, simplify, trim)

    times = None
    if table == 'clicks' and include_time:
        times = click_times(data)
        columns = ['time'] + columns

    total = len(rows)
    rows_written = 0

    with open(Path(output_path), 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(columns)

        for i, row in enumerate(rows):
            values = [row[c] for c in columns if c != 'time']
            if times is not None:
                values.insert(0, times[i].isoformat(sep=' '))
            writer.writerow(['' if v is None else v for v in values])
            rows_written += 1

            if progress_callback and i % 10000 == 0:
                progress_callback(i, total)

    return rows_written


def summary(data: PodData) -> Dict[str, Any]:
    """Header and record counts as a JSON-friendly dict"""
    result = {
        'file': {
            'path': data.filename,
            'format': data.format.extension,
        },
        'header': data.header_dict,
        'summary': {
            'clicks': data.click_count,
            'minutes': data.minute_count,
            'env_rows': len(data.env),
            'wav_rows': len(data.wav),
        },
        'decode': data.stats_dict(),
    }
    if data.format.classified:
        result['species'] = species_counts(data)
    return result


def to_json(data: PodData, output_path: str,
            include_data: bool = False,
            simplify: bool = False) -> None:
    """
    Export header, summary and optionally all data to JSON format.

    Args:
        data: Decoded file
        output_path: Output JSON file path
        include_data: Whether to include every row (can be large!)
        simplify: Drop the detail click columns
    """
    result = summary(data)

    if include_data:
        result['clicks'] = data.click_rows(simplify)
        result['env'] = _table(data, 'env')[1]
        result['wav'] = _table(data, 'wav')[1]

    with open(output_path, 'w') as f:
        json.dump(result, f, indent=2)


def to_dataframe(data: PodData,
                 table: str = 'clicks',
                 simplify: bool = False,
                 trim: bool = False,
                 tz: Optional[str] = None):
    """
    Convert one table to a pandas DataFrame.

    Args:
        data: Decoded file
        table: 'clicks', 'env' or 'wav'
        simplify: Drop the detail click columns
        trim: Trim pseudo-WAV samples to the click's cycle count
        tz: Time zone name for the clicks 'time' column

    Returns:
        pandas DataFrame

    Raises:
        ImportError if pandas is not installed
    """
    try:
        import pandas as pd
    except ImportError:
        raise ImportError("pandas is required for DataFrame export. "
                        "Install with: pip install pandas")

    columns, rows = _table(data, table, simplify, trim)
    df = pd.DataFrame(rows, columns=columns)

    if table == 'clicks':
        time = pd.to_datetime(click_times(data))
        if tz is not None:
            time = time.tz_localize(tz)
        df.insert(0, 'time', time)

    return df


def to_numpy(data: PodData, table: str = 'clicks') -> Dict[str, Any]:
    """
    Convert one table to numpy arrays.

    Integer columns that hold missing values become float arrays with NaN.

    Args:
        data: Decoded file
        table: 'clicks', 'env' or 'wav'

    Returns:
        Dictionary of numpy arrays

    Raises:
        ImportError if numpy is not installed
    """
    try:
        import numpy as np
    except ImportError:
        raise ImportError("numpy is required for numpy export. "
                        "Install with: pip install numpy")

    columns, rows = _table(data, table)
    result = {}
    for column in columns:
        values: List[Any] = [row[column] for row in rows]
        if any(isinstance(v, str) for v in values):
            result[column] = np.array(['' if v is None else v for v in values], dtype=object)
        elif any(v is None for v in values):
            result[column] = np.array([np.nan if v is None else v for v in values], dtype=float)
        else:
            result[column] = np.array(values)
    return result
