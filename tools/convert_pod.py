#!/usr/bin/env python3
"""
POD File Converter

Converts FPOD/CPOD data files to CSV or JSON for analysis in spreadsheet
applications or other tools.

Usage:
    python convert_pod.py <input.FP3> [output.csv]
    python convert_pod.py <input.FP3> --table env
    python convert_pod.py <input.CP1> --json   # Header and summary as JSON
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from pod_parser import PodFile, PodParserError, to_csv, to_json
from pod_parser.logger import setup_logging


def progress_bar(current: int, total: int, width: int = 50):
    """Print a progress bar"""
    if total == 0:
        return
    percent = current / total
    filled = int(width * percent)
    bar = '█' * filled + '░' * (width - filled)
    sys.stdout.write(f'\r[{bar}] {percent*100:.1f}%')
    sys.stdout.flush()


def main():
    parser = argparse.ArgumentParser(
        description='Convert FPOD/CPOD data files to CSV/JSON',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Convert clicks to CSV (auto-named)
    python convert_pod.py "data/helga period 1.FP3"

    # Convert to specific output file, without detail columns
    python convert_pod.py data/site1.FP1 output/clicks.csv --simplify

    # Export temperature and battery readings
    python convert_pod.py data/site1.FP1 --table env

    # Export header and summary as JSON
    python convert_pod.py data/site1.CP3 --json
"""
    )

    parser.add_argument('input', help='Input .FP1/.FP3/.CP1/.CP3 file')
    parser.add_argument('output', nargs='?', help='Output file path')
    parser.add_argument('--json', '-j', action='store_true',
                       help='Export as JSON instead of CSV')
    parser.add_argument('--table', '-t', choices=['clicks', 'env', 'wav'], default='clicks',
                       help='Table to write as CSV (default: clicks)')
    parser.add_argument('--simplify', '-s', action='store_true',
                       help='Drop detail click columns (IPIs, reversals, duration)')
    parser.add_argument('--raw-amp', action='store_true',
                       help='Keep compressed FPOD amplitude codes')
    parser.add_argument('--trim-wav', action='store_true',
                       help='Keep only the last ncyc pseudo-WAV samples per click')
    parser.add_argument('--include-data', action='store_true',
                       help='Include all rows in JSON output')
    parser.add_argument('--plot', metavar='PNG',
                       help='Also save a summary plot (needs matplotlib)')
    parser.add_argument('--quiet', '-q', action='store_true',
                       help='Suppress progress output')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Log decoding progress')
    parser.add_argument('--debug', action='store_true',
                       help='Log decoding details')

    args = parser.parse_args()
    setup_logging(level='INFO' if args.verbose else 'WARNING', debug=args.debug)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(1)

    # Determine output path
    if args.output:
        output_path = Path(args.output)
    elif args.json:
        output_path = input_path.with_suffix('.json')
    else:
        output_path = input_path.with_name(f"{input_path.stem}_{args.table}.csv")

    if not args.quiet:
        print(f"Reading: {input_path}")

    try:
        pod = PodFile(input_path, amp='raw' if args.raw_amp else 'extended')
        data = pod.data
    except PodParserError as e:
        print(f"Error parsing file: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print(f"  Format: {data.format.extension}")
        print(f"  Clicks: {data.click_count:,}")
        print(f"  Minutes: {data.minute_count:,}")

    if not args.quiet:
        print(f"Writing: {output_path}")

    try:
        if args.json:
            to_json(data, str(output_path), include_data=args.include_data,
                    simplify=args.simplify)
        else:
            callback = None if args.quiet else lambda c, t: progress_bar(c, t)
            rows = to_csv(data, str(output_path),
                          table=args.table,
                          simplify=args.simplify,
                          trim=args.trim_wav,
                          progress_callback=callback)
            if not args.quiet:
                print()  # Newline after progress bar
                print(f"  Wrote {rows:,} rows")
    except OSError as e:
        print(f"\nError writing output: {e}", file=sys.stderr)
        sys.exit(1)

    if args.plot:
        from pod_parser.plots import plot_summary
        plot_summary(data, output_path=args.plot)
        if not args.quiet:
            print(f"Plot: {args.plot}")

    if not args.quiet:
        print("Done!")


if __name__ == '__main__':
    main()
