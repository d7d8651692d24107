import asyncio
import logging
import os
from asyncio import TaskGroup
from pathlib import Path
from typing import Iterable, NamedTuple

from .record import FileRecord
from .utils.processor import Processor, DEFAULT_CHUNK_SIZE, DEFAULT_HASH_ALGORITHM, new_hash
from .utils.throttler import Throttler
from .utils.walker import collect_files

logger = logging.getLogger(__name__)


def display_path(path: Path) -> str:
    """Render a path as text that is always valid UTF-8.

    Undecodable bytes in a file name become U+FFFD instead of lone surrogates,
    so the report can be written whatever the file names contain.
    """
    return os.fsencode(path).decode("utf-8", "replace")


class ScanResult(NamedTuple):
    """Outcome of hashing a set of files.

    Attributes:
        records: One record per file that was read to the end
        skipped: Files that could not be opened or read
    """
    records: list[FileRecord]
    skipped: list[Path]


class Scanner:
    """Hashes files in parallel on a Processor and collects the records.

    Files are independent: each one is hashed by its own task, and a file that
    cannot be read is logged and left out without affecting the others. Results
    are gathered only after every task has finished.
    """

    def __init__(self, processor: Processor, algorithm: str = DEFAULT_HASH_ALGORITHM,
                 chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Args:
            processor: Worker pool used for hashing
            algorithm: hashlib algorithm name
            chunk_size: Bytes read per call while hashing

        Raises:
            ValueError: Unknown algorithm or non-positive chunk size
        """
        new_hash(algorithm)
        if chunk_size <= 0:
            raise ValueError(f"chunk size must be positive: {chunk_size}")

        self._processor = processor
        self._algorithm = algorithm
        self._chunk_size = chunk_size

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def scan(self, root: Path, extensions: frozenset[str] | None = None) -> ScanResult:
        """Hash every regular file under root that passes the extension filter."""
        return asyncio.run(self.scan_files(collect_files(root, extensions)))

    async def scan_files(self, paths: Iterable[Path]) -> ScanResult:
        tasks: list[tuple[Path, asyncio.Task]] = []

        async with TaskGroup() as tg:
            throttler = Throttler(tg, self._processor.concurrency * 2)

            for path in paths:
                tasks.append((path, await throttler.schedule(self._hash_file(path))))

        records = []
        skipped = []
        for path, task in tasks:
            record = task.result()
            if record is None:
                skipped.append(path)
            else:
                records.append(record)

        logger.info(f"Hashed {len(records)} files, skipped {len(skipped)}")
        return ScanResult(records, skipped)

    async def _hash_file(self, path: Path) -> FileRecord | None:
        try:
            size, digest = await self._processor.digest(path, self._algorithm, self._chunk_size)
        except OSError as e:
            logger.warning(f"Skipping unreadable file {path}: {e}")
            return None

        return FileRecord(size, digest, display_path(path))
