import logging
import stat
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)


def parse_extensions(text: str | Iterable[str] | None) -> frozenset[str] | None:
    """Normalize an extension allow-list.

    Accepts a comma-separated string ("jpg, .PNG,mp4") or an iterable of
    entries. Entries are stripped, lower-cased and lose a leading dot; empty
    entries are dropped.

    Returns:
        The set of extensions, or None when nothing remains, meaning no
        filtering at all.
    """
    if text is None:
        return None

    entries = text.split(',') if isinstance(text, str) else text
    extensions = frozenset(
        normalized for normalized in (entry.strip().lower().removeprefix('.') for entry in entries)
        if normalized)

    return extensions or None


def matches_extension(path: Path, extensions: frozenset[str] | None) -> bool:
    """Check a path against an allow-list built by parse_extensions().

    Only the final suffix counts, compared case-insensitively. With an active
    filter, a file without an extension never matches.
    """
    if extensions is None:
        return True

    suffix = path.suffix
    if not suffix:
        return False

    return suffix[1:].lower() in extensions


def walk(path: Path) -> Iterator[tuple[Path, Path]]:
    """Recursively yield (entry, root-relative path) for everything below path.

    Symlinked directories are reported but not descended into. Directories that
    cannot be listed are logged and skipped.
    """
    yield from _walk(path, None)


def _walk(path: Path, relative: Path | None) -> Iterator[tuple[Path, Path]]:
    try:
        children = list(path.iterdir())
    except OSError as e:
        logger.warning(f"Cannot list directory {path}: {e}")
        return

    for child in children:
        child_relative = Path(child.name) if relative is None else relative / child.name
        yield child, child_relative

        try:
            st = child.stat(follow_symlinks=False)
        except OSError:
            continue

        if stat.S_ISDIR(st.st_mode):
            yield from _walk(child, child_relative)


def collect_files(root: Path, extensions: frozenset[str] | None = None) -> Iterator[Path]:
    """Yield the regular files under root that pass the extension filter.

    A symlink pointing at a regular file counts as a file. A root that is itself
    a regular file is yielded when it passes the filter. A root that does not
    exist yields nothing.
    """
    if root.is_file():
        if matches_extension(root, extensions):
            yield root
        return

    if not root.is_dir():
        logger.warning(f"Scan root is not a directory: {root}")
        return

    for file_path, _ in walk(root):
        if not matches_extension(file_path, extensions):
            continue

        if file_path.is_file():
            yield file_path
