#!/usr/bin/env python3
"""
POD File Validation Tool

Checks FPOD/CPOD data files for signs of truncation:
- Header present and complete
- Partial chunk at the end of the data
- CPOD end-of-data marker
- Clicks before the first minute boundary

Usage:
    python validate_pod.py <file.FP3> [--json]
    python validate_pod.py --batch <directory> [--json]
"""

import argparse
import sys
import json
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from pod_parser import FileFormat, validate_file
from pod_parser.logger import setup_logging

POD_EXTENSIONS = {fmt.extension for fmt in FileFormat}


def main():
    parser = argparse.ArgumentParser(
        description='Validate FPOD/CPOD data files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Validate a single file
    python validate_pod.py data/site1.FP3

    # Validate all POD files in a directory
    python validate_pod.py --batch data/

    # Output as JSON
    python validate_pod.py data/site1.CP1 --json
"""
    )

    parser.add_argument('filepath', nargs='?', help='Path to POD file')
    parser.add_argument('--batch', '-b', metavar='DIR',
                       help='Validate all POD files in directory')
    parser.add_argument('--json', '-j', action='store_true',
                       help='Output results as JSON')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Log decoding progress')

    args = parser.parse_args()
    setup_logging(level='INFO' if args.verbose else 'WARNING')

    if not args.filepath and not args.batch:
        parser.print_help()
        sys.exit(1)

    # Collect files to validate
    files = []
    if args.batch:
        batch_dir = Path(args.batch)
        if not batch_dir.is_dir():
            print(f"Error: {args.batch} is not a directory", file=sys.stderr)
            sys.exit(1)
        files = sorted(p for p in batch_dir.iterdir()
                       if p.suffix.lstrip('.').upper() in POD_EXTENSIONS)
        if not files:
            print(f"No POD files found in {args.batch}", file=sys.stderr)
            sys.exit(1)
    else:
        files = [Path(args.filepath)]

    results = []
    all_valid = True

    for filepath in files:
        report = validate_file(str(filepath))
        results.append(report)
        if not report.is_valid:
            all_valid = False

    if args.json:
        output = []
        for r in results:
            output.append({
                'filepath': r.filepath,
                'format': r.format,
                'is_valid': r.is_valid,
                'header_valid': r.header_valid,
                'end_marker_found': r.end_marker_found,
                'trailing_bytes': r.trailing_bytes,
                'chunk_count': r.chunk_count,
                'click_count': r.click_count,
                'minute_count': r.minute_count,
                'unknown_chunks': r.unknown_chunks,
                'dangling_tags': r.dangling_tags,
                'clicks_before_first_minute': r.clicks_before_first_minute,
                'errors': r.errors,
                'warnings': r.warnings,
            })
        print(json.dumps(output if len(output) > 1 else output[0], indent=2))
    else:
        for report in results:
            print(report.summary())
            print()

    sys.exit(0 if all_valid else 1)


if __name__ == '__main__':
    main()
