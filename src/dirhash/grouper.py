from collections import defaultdict
from typing import Iterable

from .record import DuplicateGroup, DuplicateKey, FileRecord


def group_records(records: Iterable[FileRecord], sort: bool = False) -> list[DuplicateGroup]:
    """Partition records into groups of equal (size, digest).

    Every record ends up in exactly one group. Without sort, neither the order
    of groups nor the order of records inside a group is meaningful. With sort,
    groups are ordered by key and records by path.
    """
    by_key: dict[DuplicateKey, list[FileRecord]] = defaultdict(list)
    for record in records:
        by_key[record.key].append(record)

    if sort:
        return [
            DuplicateGroup(key, tuple(sorted(members, key=lambda r: r.path)))
            for key, members in sorted(by_key.items())
        ]

    return [DuplicateGroup(key, tuple(members)) for key, members in by_key.items()]


def find_duplicates(records: Iterable[FileRecord], sort: bool = False) -> list[DuplicateGroup]:
    """Return only the groups with more than one member, each one complete."""
    return [group for group in group_records(records, sort=sort) if group.is_duplicate]


def select_records(records: Iterable[FileRecord], duplicates_only: bool = False,
                   sort: bool = False) -> list[FileRecord]:
    """Pick the rows of a report.

    The full listing is every record. In duplicates-only mode it is every member
    of every duplicate group, with singletons left out.
    """
    if duplicates_only:
        return [record for group in find_duplicates(records, sort=sort) for record in group.records]

    if sort:
        return sorted(records, key=lambda r: r.path)

    return list(records)
