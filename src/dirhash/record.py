"""Records produced by a scan and the key used to match duplicates."""
from typing import NamedTuple


class DuplicateKey(NamedTuple):
    """Exact-match key for content equivalence.

    Two files are duplicates iff both the size and the digest are equal. Keeping
    both fields in one tuple means they are always compared together.
    """
    size: int
    digest: str


class FileRecord(NamedTuple):
    """Size and content digest of one file that was read successfully.

    Attributes:
        size: Number of bytes read from the file.
        digest: Lowercase hexadecimal content digest.
        path: Path of the file as a string. Only reported, never matched on.
    """
    size: int
    digest: str
    path: str

    @property
    def key(self) -> DuplicateKey:
        return DuplicateKey(self.size, self.digest)


class DuplicateGroup(NamedTuple):
    """All records sharing one DuplicateKey."""
    key: DuplicateKey
    records: tuple[FileRecord, ...]

    @property
    def is_duplicate(self) -> bool:
        return len(self.records) > 1
