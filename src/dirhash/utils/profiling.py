"""Optional cProfile output for a dirhash run.

DIRHASH_PROFILE names a directory to collect profiles in. A run writes into one
session subdirectory, {start_ms}_{pid}, chosen by the first process that asks
for it and passed on to the hashing workers through the environment. Each
profiled call dumps {role}_{pid}_{seq}.prof there.
"""
import contextlib
import cProfile
import functools
import itertools
import os
import time
from pathlib import Path

PROFILE_ENV = 'DIRHASH_PROFILE'
SESSION_ENV = '_DIRHASH_PROFILE_SESSION'

_sequence = itertools.count()


def session_directory() -> Path | None:
    root = os.environ.get(PROFILE_ENV)
    if not root:
        return None

    session = os.environ.get(SESSION_ENV)
    if not session:
        # Set before the worker pool starts so every worker inherits it.
        session = os.environ[SESSION_ENV] = f"{int(time.time() * 1000)}_{os.getpid()}"

    return Path(root) / session


@contextlib.contextmanager
def profiling(role: str):
    """Profile the enclosed block when DIRHASH_PROFILE is set.

    The dump is written even when the block raises.
    """
    directory = session_directory()
    if directory is None:
        yield None
        return

    directory.mkdir(parents=True, exist_ok=True)
    profiler = cProfile.Profile()
    profiler.enable()
    try:
        yield profiler
    finally:
        profiler.disable()
        profiler.dump_stats(str(directory / f"{role}_{os.getpid()}_{next(_sequence)}.prof"))


def profiled(role: str):
    """Decorator form of profiling(): `@profiled('main')`, `@profiled('digest')`."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with profiling(role):
                return func(*args, **kwargs)

        return wrapper

    return decorator
