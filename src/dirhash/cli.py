import argparse
import logging
import sys
import textwrap
from pathlib import Path

from . import Processor, Scanner, Settings, SettingsError, parse_extensions, select_records, write_report
from .settings import (
    SETTING_ALGORITHM, SETTING_CHUNK_SIZE, SETTING_DUPLICATES_ONLY, SETTING_EXTENSIONS, SETTING_JOBS,
    SETTING_LOG_LEVEL, SETTING_LOG_PATH, SETTING_SORT)
from .utils.processor import DEFAULT_CHUNK_SIZE, DEFAULT_HASH_ALGORITHM, HASH_ALGORITHMS
from .utils.profiling import profiled

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dirhash',
        description='Scan a directory, compute a content digest for every file and report the files or only the '
                    'duplicates as CSV.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              dirhash /home/user/photos
              dirhash --dupes --exts jpg,png,mp4 /home/user/photos
              dirhash --dupes --sort --output dupes.csv /data

            Output columns: size,sha256,path
            ''').strip())
    parser.add_argument(
        'path',
        metavar='PATH',
        help='Directory to scan, or a single file')
    parser.add_argument(
        '--exts',
        metavar='LIST',
        help='Only files with these extensions, comma-separated and case-insensitive (e.g. "jpg,png,mp4")')
    parser.add_argument(
        '--dupes',
        action='store_true',
        default=None,
        help='Output duplicates only')
    parser.add_argument(
        '--sort',
        action='store_true',
        default=None,
        help='Order duplicate groups by size and digest and rows by path (default: unordered)')
    parser.add_argument(
        '--jobs',
        type=_positive_int,
        metavar='N',
        help='Number of worker processes (default: number of CPUs)')
    parser.add_argument(
        '--algorithm',
        choices=HASH_ALGORITHMS,
        help=f'Hash algorithm (default: {DEFAULT_HASH_ALGORITHM})')
    parser.add_argument(
        '--chunk-size',
        type=_positive_int,
        metavar='BYTES',
        help=f'Read size used while hashing (default: {DEFAULT_CHUNK_SIZE})')
    parser.add_argument(
        '--output',
        metavar='FILE',
        help='Write the report to FILE instead of standard output')
    parser.add_argument(
        '--config',
        metavar='PATH',
        help='Path to a TOML settings file. If not provided, uses the DIRHASH_CONFIG environment variable.')
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log progress information to standard error')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file. If not provided, uses logging.path from the settings file or standard error.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=LOG_LEVELS,
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO when logging to a file.')
    return parser


def configure_logging(args, settings: Settings):
    log_file = args.log_file or settings.get(SETTING_LOG_PATH)
    log_level = args.log_level or settings.get(SETTING_LOG_LEVEL)

    if log_level is not None and str(log_level).upper() not in LOG_LEVELS:
        raise SettingsError(f"invalid logging level: {log_level}")

    if log_file:
        logging.basicConfig(
            filename=str(log_file),
            level=getattr(logging, str(log_level or 'INFO').upper()),
            format=LOG_FORMAT)
    else:
        default_level = 'INFO' if args.verbose else 'WARNING'
        logging.basicConfig(
            stream=sys.stderr,
            level=getattr(logging, str(log_level or default_level).upper()),
            format=LOG_FORMAT)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _setting(value, settings: Settings, key: str, default):
    """Resolve an option: command line first, then the settings file, then the default."""
    if value is not None:
        return value
    return settings.get(key, default)


@profiled('main')
def dirhash_main(argv: list[str] | None = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.locate(args.config)
        configure_logging(args, settings)
    except (OSError, SettingsError) as e:
        parser.error(str(e))

    extensions = parse_extensions(_setting(args.exts, settings, SETTING_EXTENSIONS, None))
    duplicates_only = _setting(args.dupes, settings, SETTING_DUPLICATES_ONLY, False)
    sort = _setting(args.sort, settings, SETTING_SORT, False)
    jobs = _setting(args.jobs, settings, SETTING_JOBS, None)
    algorithm = _setting(args.algorithm, settings, SETTING_ALGORITHM, DEFAULT_HASH_ALGORITHM)
    chunk_size = _setting(args.chunk_size, settings, SETTING_CHUNK_SIZE, DEFAULT_CHUNK_SIZE)

    if not isinstance(duplicates_only, bool):
        parser.error(f"duplicates_only must be true or false: {duplicates_only!r}")
    if not isinstance(sort, bool):
        parser.error(f"sort must be true or false: {sort!r}")
    if algorithm not in HASH_ALGORITHMS:
        parser.error(f"unsupported hash algorithm: {algorithm}")
    if jobs is not None and not _is_positive_int(jobs):
        parser.error(f"jobs must be a positive integer: {jobs}")
    if not _is_positive_int(chunk_size):
        parser.error(f"chunk size must be a positive integer: {chunk_size}")

    with Processor(jobs) as processor:
        result = Scanner(processor, algorithm, chunk_size).scan(Path(args.path), extensions)

    rows = select_records(result.records, duplicates_only=duplicates_only, sort=sort)

    if args.output:
        with open(args.output, 'w', newline='', encoding='utf-8') as output:
            write_report(output, rows, algorithm)
    else:
        write_report(sys.stdout, rows, algorithm)

    return 0


if __name__ == '__main__':
    dirhash_main()
