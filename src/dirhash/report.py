"""CSV rendering of scan results."""
import csv
from typing import Iterable, TextIO

from .record import FileRecord
from .utils.processor import DEFAULT_HASH_ALGORITHM


def header(algorithm: str = DEFAULT_HASH_ALGORITHM) -> list[str]:
    return ['size', algorithm, 'path']


def write_report(output: TextIO, records: Iterable[FileRecord], algorithm: str = DEFAULT_HASH_ALGORITHM) -> int:
    """Write a header row followed by one row per record.

    Paths are quoted only when they contain a comma, a double quote or a line
    break; embedded double quotes are doubled.

    Returns:
        Number of data rows written
    """
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')
    writer.writerow(header(algorithm))

    count = 0
    for record in records:
        writer.writerow([record.size, record.digest, record.path])
        count += 1

    return count
