"""Data schemas for the cell cache.

Classes:
    GridRange: A rectangular, possibly unbounded, range of cells.
    CellRect: A bounded rectangle of 1-based cell coordinates.

Example:
    >>> from sheetfeed.cells.schemas import CellRect
    >>> rect = CellRect.enclosing([(2, 4), (5, 1)])
    >>> rect.query_params()
    {'return-empty': 'true', 'min-row': '2', 'max-row': '5', 'min-col': '1', 'max-col': '4'}
"""

from collections.abc import Iterable

from pydantic import BaseModel, Field


class GridRange(BaseModel):
    """Represents a rectangular range of cells.

    Indices are 0-based and the end indices are exclusive, as produced by
    ``gspread.utils.a1_range_to_grid_range``.

    Attributes:
        startRowIndex: The start row (inclusive). None means the first row.
        endRowIndex: The end row (exclusive). None means the last populated row.
        startColumnIndex: The start column (inclusive). None means column A.
        endColumnIndex: The end column (exclusive). None means the last
            populated column.

    Example:
        >>> # A1:E10
        >>> GridRange(startRowIndex=0, endRowIndex=10, startColumnIndex=0, endColumnIndex=5)
    """

    startRowIndex: int | None = Field(default=None, ge=0)
    endRowIndex: int | None = Field(default=None, ge=0)
    startColumnIndex: int | None = Field(default=None, ge=0)
    endColumnIndex: int | None = Field(default=None, ge=0)


class CellRect(BaseModel):
    """A bounded rectangle of cells, 1-based and inclusive on both ends."""

    min_row: int = Field(gt=0)
    max_row: int = Field(gt=0)
    min_col: int = Field(gt=0)
    max_col: int = Field(gt=0)

    @classmethod
    def enclosing(cls, coords: Iterable[tuple[int, int]]) -> "CellRect":
        """Smallest rectangle containing every coordinate.

        Raises:
            ValueError: If ``coords`` is empty.
        """
        coords = list(coords)
        if not coords:
            raise ValueError("Cannot compute the bounds of no cells")
        rows = [row for row, _ in coords]
        cols = [col for _, col in coords]
        return cls(
            min_row=min(rows), max_row=max(rows), min_col=min(cols), max_col=max(cols)
        )

    def query_params(self) -> dict[str, str]:
        """Cells feed query asking for every cell of the rectangle, empty or not."""
        return {
            "return-empty": "true",
            "min-row": str(self.min_row),
            "max-row": str(self.max_row),
            "min-col": str(self.min_col),
            "max-col": str(self.max_col),
        }
