"""
Visualization Module

Generate plots of POD click and environment data using matplotlib.
"""

from typing import Optional, Tuple

from .analysis import clicks_per_minute, species_counts, get_amplitude_statistics
from .parser import PodData


def _check_matplotlib():
    """Check if matplotlib is available"""
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError:
        raise ImportError("matplotlib is required for plotting. "
                        "Install with: pip install matplotlib")


def _finish(plt, output_path: Optional[str], **savefig_kwargs) -> None:
    if output_path:
        plt.savefig(output_path, dpi=150, **savefig_kwargs)
        plt.close()
    else:
        plt.show()


def plot_clicks_per_minute(data: PodData,
                           output_path: Optional[str] = None,
                           title: str = "Clicks per Minute",
                           figsize: Tuple[int, int] = (12, 6)) -> None:
    """
    Plot the number of clicks logged in each minute.

    Args:
        data: Decoded file
        output_path: Optional path to save figure (shows if None)
        title: Plot title
        figsize: Figure size (width, height)
    """
    plt = _check_matplotlib()

    counts = clicks_per_minute(data)
    minutes = sorted(counts)

    fig, ax = plt.subplots(figsize=figsize)
    ax.bar(minutes, [counts[m] for m in minutes], width=1.0, color='#2196F3')

    ax.set_xlabel('Minute')
    ax.set_ylabel('Clicks')
    ax.set_title(title)
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    _finish(plt, output_path)


def plot_env(data: PodData,
             output_path: Optional[str] = None,
             title: str = "Environment",
             figsize: Tuple[int, int] = (12, 8)) -> None:
    """
    Plot temperature and battery readings per minute (FPOD only).

    Args:
        data: Decoded file
        output_path: Optional path to save figure
        title: Plot title
        figsize: Figure size
    """
    plt = _check_matplotlib()

    minutes = [e.minute for e in data.env]

    fig, (ax_temp, ax_bat) = plt.subplots(2, 1, figsize=figsize, sharex=True)

    ax_temp.plot(minutes, [e.temp_deg_c for e in data.env], linewidth=0.8, color='#E91E63')
    ax_temp.set_ylabel('Temperature (°C)')
    ax_temp.set_title(title)
    ax_temp.grid(True, alpha=0.3)

    # Battery readings are stored in 10 mV units
    ax_bat.plot(minutes, [e.bat1 / 100.0 for e in data.env], label='Battery 1', linewidth=0.8)
    ax_bat.plot(minutes, [e.bat2 / 100.0 for e in data.env], label='Battery 2', linewidth=0.8)
    ax_bat.set_xlabel('Minute')
    ax_bat.set_ylabel('Voltage (V)')
    ax_bat.legend(loc='upper right')
    ax_bat.grid(True, alpha=0.3)

    plt.tight_layout()
    _finish(plt, output_path)


def plot_wav(data: PodData, click_no: int,
             output_path: Optional[str] = None,
             figsize: Tuple[int, int] = (10, 5)) -> None:
    """
    Plot the pseudo-WAV samples of one click.

    Each sample is drawn as a peak one IPI after the previous one, with
    alternating sign.

    Args:
        data: Decoded FPOD file
        click_no: Click to plot
        output_path: Optional path to save figure
        figsize: Figure size
    """
    plt = _check_matplotlib()

    samples = [w for w in data.wav if w.click_no == click_no]
    if not samples:
        raise ValueError(f"No pseudo-WAV data for click {click_no}")

    t = [0.0]
    y = [0.0]
    sign = 1
    for sample in samples:
        t.append(t[-1] + sample.ipi * 0.25)  # 250 ns units
        y.append(sign * sample.amp)
        sign = -sign

    fig, ax = plt.subplots(figsize=figsize)
    ax.plot(t, y, color='#2196F3')
    ax.set_xlabel('Time (µs)')
    ax.set_ylabel('Amplitude')
    ax.set_title(f"Click {click_no}")
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    _finish(plt, output_path)


def plot_summary(data: PodData,
                 output_path: Optional[str] = None,
                 figsize: Tuple[int, int] = (14, 10)) -> None:
    """
    Generate summary plot with click rate, amplitude, frequency and statistics.

    Args:
        data: Decoded file
        output_path: Optional path to save figure
        figsize: Figure size
    """
    plt = _check_matplotlib()

    fig = plt.figure(figsize=figsize)
    gs = fig.add_gridspec(3, 2, height_ratios=[2, 2, 1], hspace=0.3, wspace=0.3)

    # Click rate (top, full width)
    ax_rate = fig.add_subplot(gs[0, :])
    counts = clicks_per_minute(data)
    minutes = sorted(counts)
    ax_rate.bar(minutes, [counts[m] for m in minutes], width=1.0, color='#2196F3')
    ax_rate.set_ylabel('Clicks')
    ax_rate.set_title('Clicks per Minute')
    ax_rate.grid(True, alpha=0.3)

    # Amplitude histogram (middle left)
    ax_amp = fig.add_subplot(gs[1, 0])
    amps = [c.amp_at_max for c in data.clicks if c.amp_at_max is not None]
    ax_amp.hist(amps, bins=50, color='#E91E63')
    ax_amp.set_xlabel('Peak amplitude')
    ax_amp.set_title('Amplitude')
    ax_amp.grid(True, alpha=0.3)

    # Frequency histogram (middle right)
    ax_khz = fig.add_subplot(gs[1, 1])
    khz = [c.khz for c in data.clicks if c.khz is not None]
    ax_khz.hist(khz, bins=50, color='#4CAF50')
    ax_khz.set_xlabel('Frequency (kHz)')
    ax_khz.set_title('Frequency')
    ax_khz.grid(True, alpha=0.3)

    # Statistics text (bottom)
    ax_stats = fig.add_subplot(gs[2, :])
    ax_stats.axis('off')

    amp_stats = get_amplitude_statistics(data)
    stats_text = (
        f"File: {data.filename}\n"
        f"Clicks: {data.click_count:,} | Minutes: {data.minute_count:,}\n"
        f"Amplitude: mean {amp_stats.mean:.1f}, max {amp_stats.max_val:.0f}"
    )
    if data.format.classified:
        tally = ', '.join(f"{k or 'none'}: {v:,}" for k, v in sorted(species_counts(data).items()))
        stats_text += f"\nSpecies: {tally}"

    ax_stats.text(0.5, 0.5, stats_text, transform=ax_stats.transAxes,
                  fontsize=11, verticalalignment='center', horizontalalignment='center',
                  fontfamily='monospace',
                  bbox=dict(boxstyle='round', facecolor='wheat', alpha=0.5))

    plt.suptitle(f"POD {data.header.pod_id} ({data.format.extension})", fontsize=14)

    _finish(plt, output_path, bbox_inches='tight')
