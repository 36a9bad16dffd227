"""Lazy, forward-only row iteration across result partitions"""

from typing import Any, Callable, Iterator, Optional, Sequence

from .codec import ValueCodec
from .columns import ColumnMeta

PartitionFetcher = Callable[[str, int], list[list[Any]]]
Row = dict[str, Any]


class ResultSet:
    """Single-pass iterator over the typed rows of every partition.

    Rows of the first partition come from the initial response. Partitions
    1..N-1 are fetched one at a time through ``partition_fetcher`` only when
    iteration reaches them, so at most one partition is held in memory. Each
    row is decoded as it is yielded.

    The iterator cannot be restarted: once consumed, run the statement again.

    Example:
        >>> result = executor.execute("SELECT id, name FROM users")
        >>> for row in result.result_set:
        ...     print(row["ID"], row["NAME"])
    """

    def __init__(
        self,
        initial_data: Sequence[Sequence[Any]],
        columns: Sequence[ColumnMeta],
        partition_count: int,
        statement_handle: str,
        partition_fetcher: PartitionFetcher,
        codec: Optional[ValueCodec] = None,
    ):
        self._columns = list(columns)
        self._partition_count = max(1, partition_count)
        self._statement_handle = statement_handle
        self._partition_fetcher = partition_fetcher
        self._codec = codec or ValueCodec()

        self._current: Sequence[Sequence[Any]] = initial_data
        self._position = 0
        self._next_partition = 1

    @property
    def columns(self) -> list[ColumnMeta]:
        return self._columns

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self._columns]

    @property
    def partition_count(self) -> int:
        return self._partition_count

    def _advance_partition(self) -> bool:
        """Replace the resident partition with the next one; False when none remain"""
        if self._next_partition >= self._partition_count:
            return False
        index = self._next_partition
        self._next_partition += 1
        self._current = self._partition_fetcher(self._statement_handle, index) or []
        self._position = 0
        return True

    def _decode(self, raw_row: Sequence[Any]) -> Row:
        return self._codec.decode_row(raw_row, self._columns)

    def __iter__(self) -> "ResultSet":
        return self

    def __next__(self) -> Row:
        while self._position >= len(self._current):
            if not self._advance_partition():
                raise StopIteration
        raw_row = self._current[self._position]
        self._position += 1
        return self._decode(raw_row)

    def partitions(self) -> Iterator[list[Row]]:
        """Yield the rest of each partition as a list of decoded rows.

        Shares position with row iteration: rows already consumed from the
        resident partition are not repeated. Empty partitions are skipped.
        """
        while True:
            if self._position >= len(self._current) and not self._advance_partition():
                return
            remaining = self._current[self._position:]
            self._position = len(self._current)
            if remaining:
                yield [self._decode(raw_row) for raw_row in remaining]

    def fetch_one(self) -> Optional[Row]:
        """Next row, or None when exhausted"""
        return next(self, None)

    def fetch_all(self) -> list[Row]:
        """All remaining rows. Loads them into memory; prefer iteration for large results"""
        return list(self)
