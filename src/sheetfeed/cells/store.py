"""Local cell cache of one worksheet.

The store is a sparse grid: only populated cells have keys. It records the
coordinates written since the last save and the declared grid size. It never
performs I/O; loading and saving are the job of ``SyncEngine``.

Example:
    >>> store = CellStore()
    >>> store.replace_all({(1, 1): "3"}, {(1, 1): "3"}, 100, 20)
    >>> store.set((1, 3), "=A1+B1")
    >>> store.get((1, 3))
    '=A1+B1'
    >>> store.populated_extent()
    (1, 3)
"""

from collections.abc import Mapping

Coord = tuple[int, int]


class CellStore:
    """Sparse mapping of cell coordinates to displayed and input values.

    Attributes:
        max_rows: Declared number of rows, including empty trailing rows.
        max_cols: Declared number of columns, including empty trailing ones.
        loaded: Whether the store was filled from the server at least once.
        meta_dirty: Whether the title or the declared size changed locally.
    """

    def __init__(self) -> None:
        self._displayed: dict[Coord, str] = {}
        self._input: dict[Coord, str] = {}
        self._dirty: set[Coord] = set()
        self.max_rows: int = 0
        self.max_cols: int = 0
        self.loaded: bool = False
        self.meta_dirty: bool = False

    def get(self, coord: Coord) -> str:
        """Displayed value of the cell, or ``""`` when it is not populated."""
        return self._displayed.get(coord, "")

    def get_input(self, coord: Coord) -> str:
        """Input value (the formula, if any) of the cell, or ``""``."""
        return self._input.get(coord, "")

    def set(self, coord: Coord, value: str) -> None:
        """Write a cell locally and mark it dirty.

        Both the displayed and the input value take ``value`` until the next
        reload, since only the server evaluates formulas. The declared bounds
        grow to include ``coord``; they never shrink here. Growing them marks
        the metadata dirty so the server grid is resized on the next save.

        Raises:
            ValueError: If the coordinate is not 1-based.
        """
        row, col = coord
        if row < 1 or col < 1:
            raise ValueError(f"Cell coordinates are 1-based, got ({row}, {col})")
        self._displayed[coord] = value
        self._input[coord] = value
        self._dirty.add(coord)
        if row > self.max_rows:
            self.max_rows = row
            self.meta_dirty = True
        if col > self.max_cols:
            self.max_cols = col
            self.meta_dirty = True

    def bounds(self) -> tuple[int, int]:
        return (self.max_rows, self.max_cols)

    def set_bounds(self, rows: int, cols: int) -> None:
        self.max_rows = rows
        self.max_cols = cols
        self.meta_dirty = True

    def populated_extent(self) -> tuple[int, int]:
        """Bottom-most populated row and right-most populated column.

        The two maxima are computed independently, so they need not belong to
        the same cell. ``(0, 0)`` for an empty store.
        """
        if not self._displayed:
            return (0, 0)
        return (
            max(row for row, _ in self._displayed),
            max(col for _, col in self._displayed),
        )

    def replace_all(
        self,
        displayed: Mapping[Coord, str],
        input_values: Mapping[Coord, str],
        rows: int,
        cols: int,
    ) -> None:
        """Replace the whole store with freshly loaded server state.

        Raises:
            ValueError: If the two mappings do not cover the same cells.
        """
        if displayed.keys() != input_values.keys():
            raise ValueError("Displayed and input values must cover the same cells")
        self._displayed = dict(displayed)
        self._input = dict(input_values)
        self._dirty = set()
        self.max_rows = rows
        self.max_cols = cols
        self.meta_dirty = False
        self.loaded = True

    def dirty_coords(self) -> list[Coord]:
        """Coordinates modified since the last save, in ascending order."""
        return sorted(self._dirty)

    def is_dirty(self) -> bool:
        return bool(self._dirty)

    def clear_dirty(self) -> None:
        self._dirty.clear()

    def mark_meta_dirty(self) -> None:
        self.meta_dirty = True

    def clear_meta_dirty(self) -> None:
        self.meta_dirty = False

    def __len__(self) -> int:
        return len(self._displayed)

    def __contains__(self, coord: object) -> bool:
        return coord in self._displayed
