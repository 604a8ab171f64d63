"""
Row Store - Original CRM Records

Holds the raw rows of one ingested CRM export, each tagged with a synthetic
row id under the reserved ROW_ID_KEY column. The id equals the row's position
in the ingested file and never changes for the lifetime of the store.

Rows are only ever added (prepended for deals created from transcripts);
there is no deletion. A new ingestion replaces the store wholesale.
"""

from typing import Iterable, Iterator, Mapping, Optional

import pandas as pd

from ..errors import DuplicateRowId
from .entities import ROW_ID_KEY, Row
from .log import get_logger

logger = get_logger(__name__)


class RowStore:
    """Ordered, id-indexed collection of raw CRM rows."""

    def __init__(self):
        self._rows: list[Row] = []
        self._index: dict[int, Row] = {}

    @classmethod
    def ingest(cls, raw_rows: Iterable[Mapping[str, str]]) -> "RowStore":
        """Build a store, assigning each row its zero-based position as id."""
        store = cls()
        for position, raw in enumerate(raw_rows):
            row = {str(key): "" if value is None else str(value) for key, value in raw.items()}
            row[ROW_ID_KEY] = str(position)
            store._rows.append(row)
            store._index[position] = row
        logger.info("rows_ingested", count=len(store._rows))
        return store

    def lookup(self, row_id: int) -> Optional[Row]:
        return self._index.get(row_id)

    def insert_front(self, row: Mapping[str, str], row_id: int) -> Row:
        """Prepend a row under an id the caller guarantees to be unused."""
        if row_id in self._index:
            raise DuplicateRowId(f"Row id {row_id} is already in use")
        new_row = {str(key): str(value) for key, value in row.items()}
        new_row[ROW_ID_KEY] = str(row_id)
        self._rows.insert(0, new_row)
        self._index[row_id] = new_row
        return new_row

    def find_or_placeholder(self, row_id: int) -> Row:
        """Row for a deal's detail view, degrading to an explanatory placeholder."""
        row = self.lookup(row_id)
        if row is not None:
            return row
        logger.warning("row_not_found", row_id=row_id)
        return {"Error": f"Could not find original data for row ID {row_id}"}

    def ids(self) -> set[int]:
        return set(self._index)

    def columns(self) -> list[str]:
        """Display columns in first-seen order, without the reserved id column."""
        seen: dict[str, None] = {}
        for row in self._rows:
            for key in row:
                if key != ROW_ID_KEY:
                    seen.setdefault(key, None)
        return list(seen)

    def display_rows(self) -> list[Row]:
        """Rows without the reserved id column, in store order."""
        return [
            {key: value for key, value in row.items() if key != ROW_ID_KEY}
            for row in self._rows
        ]

    def to_csv(self) -> str:
        """Serialize rows, id column included, as CSV text for the model."""
        if not self._rows:
            return ""
        frame = pd.DataFrame(self._rows).fillna("")
        return frame.to_csv(index=False)

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __getitem__(self, position: int) -> Row:
        return self._rows[position]
