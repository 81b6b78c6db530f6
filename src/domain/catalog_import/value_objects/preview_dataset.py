"""
PreviewDataset Value Object

Bounded row sample of a sheet plus the derived column headers.
"""

from typing import Any, Mapping, Sequence

from pydantic import BaseModel, ConfigDict

PreviewRow = dict[str, Any]


class PreviewDataset(BaseModel):
    """
    Rows returned by the preview endpoint and their column headers.

    Column headers are taken strictly from the keys of the first row, in
    their original order. Zero rows means zero columns (not an error).

    Examples:
        >>> dataset = PreviewDataset.from_rows([{"SKU": "A1", "Price": 9.5}])
        >>> dataset.columns
        ('SKU', 'Price')
        >>> PreviewDataset.from_rows([]).columns
        ()
    """

    rows: tuple[PreviewRow, ...] = ()
    columns: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_rows(cls, rows: Sequence[Mapping[str, Any]]) -> "PreviewDataset":
        materialized = tuple(dict(row) for row in rows)
        columns = tuple(materialized[0].keys()) if materialized else ()
        return cls(rows=materialized, columns=columns)

    @classmethod
    def empty(cls) -> "PreviewDataset":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def __len__(self) -> int:
        return len(self.rows)
