import asyncio
import hashlib
import logging
import multiprocessing
from multiprocessing.pool import Pool
import pathlib
from typing import Awaitable

from .profiling import profiled

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 128 * 1024

# All offered algorithms produce 256-bit digests.
HASH_ALGORITHMS = ('sha256', 'sha3_256', 'blake2s')
DEFAULT_HASH_ALGORITHM = 'sha256'


def new_hash(algorithm: str):
    if algorithm not in HASH_ALGORITHMS:
        raise ValueError(f"unsupported hash algorithm: {algorithm}")
    return hashlib.new(algorithm)


@profiled("digest")
def digest_file(path: pathlib.Path, algorithm: str = DEFAULT_HASH_ALGORITHM,
                chunk_size: int = DEFAULT_CHUNK_SIZE) -> tuple[int, str]:
    """Hash a file by streaming it in fixed-size chunks.

    :return: (number of bytes read, lowercase hex digest)"""
    if chunk_size <= 0:
        raise ValueError(f"chunk size must be positive: {chunk_size}")

    hasher = new_hash(algorithm)
    size = 0
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
            size += len(chunk)

    return size, hasher.hexdigest()


class Processor:
    def __init__(self, concurrency: int | None = None):
        if concurrency is None:
            concurrency = multiprocessing.cpu_count()

        if concurrency <= 0:
            raise ValueError(f"concurrency must be positive: {concurrency}")

        self._concurrency = concurrency
        self._pool: Pool = Pool(self._concurrency)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self._pool.close()
        self._pool.join()

    @property
    def concurrency(self):
        return self._concurrency

    def digest(self, path: pathlib.Path, algorithm: str = DEFAULT_HASH_ALGORITHM,
               chunk_size: int = DEFAULT_CHUNK_SIZE) -> Awaitable[tuple[int, str]]:
        logger.debug(f"Starting hash computation for: {path}")

        async def log_and_compute():
            result = await self._evaluate(digest_file, path, algorithm, chunk_size)
            logger.debug(f"Completed hash computation for: {path}")
            return result

        return log_and_compute()

    def _evaluate(self, func, *args):
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        self._pool.apply_async(func, args=args,
                               callback=lambda v: loop.call_soon_threadsafe(future.set_result, v),
                               error_callback=lambda e: loop.call_soon_threadsafe(future.set_exception, e))

        return future
