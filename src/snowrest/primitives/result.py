"""A unified, simplified interface for SQL API statement results"""
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import pandas as pd

from .codec import ValueCodec
from .columns import ColumnMeta
from .result_set import PartitionFetcher, ResultSet, Row

_DML_STATS = ("numRowsInserted", "numRowsUpdated", "numRowsDeleted", "numDmlDuplicates")


@dataclass
class StatementResult:
    """A completed statement: metadata, the first partition and a fetcher for the rest"""
    _response: dict[str, Any]
    _partition_fetcher: PartitionFetcher
    sql: str = ""
    _codec: ValueCodec = field(default_factory=ValueCodec, repr=False)
    _result_set: Optional[ResultSet] = field(default=None, init=False, repr=False)

    @property
    def _metadata(self) -> dict[str, Any]:
        return self._response.get("resultSetMetaData") or {}

    @property
    def statement_handle(self) -> str:
        """The statement handle used for partition fetches and cancellation"""
        return self._response.get("statementHandle") or ""

    @property
    def query_id(self) -> str:
        """Alias of statement_handle (the Snowflake query ID)"""
        return self.statement_handle

    @property
    def rowcount(self) -> int:
        """Total rows in the result across all partitions"""
        return int(self._metadata.get("numRows") or 0)

    @property
    def rows_affected(self) -> int:
        """Rows changed by a DML statement, falling back to rowcount"""
        stats = self._response.get("stats") or {}
        counted = [int(stats[key]) for key in _DML_STATS if key in stats]
        return sum(counted) if counted else self.rowcount

    @property
    def rows_in_first_partition(self) -> int:
        return len(self._response.get("data") or [])

    @property
    def columns(self) -> list[ColumnMeta]:
        """Column metadata from resultSetMetaData.rowType"""
        return [ColumnMeta.from_dict(col) for col in self._metadata.get("rowType") or []]

    @property
    def column_names(self) -> list[str]:
        return [col.name for col in self.columns]

    @property
    def partition_info(self) -> list[dict[str, Any]]:
        return list(self._metadata.get("partitionInfo") or [])

    @property
    def partition_count(self) -> int:
        """Number of partitions; a result without partitionInfo has one"""
        return max(1, len(self.partition_info))

    @property
    def raw_response(self) -> dict[str, Any]:
        """JSON body of the completing response, row values as sent on the wire"""
        return self._response

    def has_rows(self) -> bool:
        return self.rowcount > 0

    def is_select_result(self) -> bool:
        """True when the response carries row data or a row type"""
        return "data" in self._response or "rowType" in self._metadata

    @property
    def result_set(self) -> ResultSet:
        """The lazy row iterator (created once; single pass)"""
        if self._result_set is None:
            self._result_set = ResultSet(
                initial_data=self._response.get("data") or [],
                columns=self.columns,
                partition_count=self.partition_count,
                statement_handle=self.statement_handle,
                partition_fetcher=self._partition_fetcher,
                codec=self._codec,
            )
        return self._result_set

    def fetch_one(self) -> Optional[Row]:
        """Fetch the next row of the result"""
        return self.result_set.fetch_one()

    def fetch_all(self) -> list[Row]:
        """Fetch all remaining rows of the result"""
        return self.result_set.fetch_all()

    def fetch_batches(self, lowercase_columns: bool = True) -> Generator[pd.DataFrame, None, None]:
        """Yield one DataFrame per partition with optional column casing"""
        names = self.column_names
        for rows in self.result_set.partitions():
            yield self._frame(rows, names, lowercase_columns)

    def to_df(self, lowercase_columns: bool = True) -> pd.DataFrame:
        """Fetch all remaining rows as a single DataFrame with optional column casing"""
        return self._frame(self.fetch_all(), self.column_names, lowercase_columns)

    @staticmethod
    def _frame(rows: list[Row], names: list[str], lowercase_columns: bool) -> pd.DataFrame:
        df = pd.DataFrame(rows, columns=names)
        if lowercase_columns and len(df.columns) > 0:
            df.columns = df.columns.str.lower()
        return df

    def stats(self) -> dict[str, Any]:
        return {
            "rowCount": self.rowcount,
            "partitionCount": self.partition_count,
            "statementHandle": self.statement_handle,
        }

    def __repr__(self) -> str:
        """String representation"""
        return (
            f"StatementResult(statement_handle='{self.statement_handle}', "
            f"rowcount={self.rowcount})"
        )
