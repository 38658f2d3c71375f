"""Utility functions for the cell cache.

Functions:
    a1_range_to_grid_range_custom: Convert A1 notation to GridRange objects.
"""

from gspread.utils import a1_range_to_grid_range

from .schemas import GridRange


def a1_range_to_grid_range_custom(a1_range: str) -> GridRange:
    """Convert an A1 notation range string to a GridRange object.

    Args:
        a1_range: A range such as ``"A1:B10"``, ``"A:A"``, ``"1:1"``, ``"B5"``
            or the unbounded ``"A1:B"``.

    Returns:
        A GridRange with 0-based, half-open indices. Unbounded sides are None.

    Example:
        >>> a1_range_to_grid_range_custom("A1:B10").endColumnIndex
        2
        >>> a1_range_to_grid_range_custom("A:A").startRowIndex is None
        True
    """
    grid_range_dict = a1_range_to_grid_range(a1_range)
    return GridRange(**grid_range_dict)
