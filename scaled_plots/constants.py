# scaled_plots/constants.py
"""
Project-wide small constants & enums.

Import examples:
    from ..constants import LegendPosition, LabelPosition, MarkerNamingScheme
"""

from typing import Final, Tuple, Set


# --------- Function legends ---------

class LegendPosition:
    """Where a function's formula label is drawn along its visible curve."""
    START: Final[str] = "start"   # where the curve enters the viewport (left side)
    END: Final[str] = "end"       # where the curve leaves the viewport (right side)
    NONE: Final[str] = "none"

    ALL: Final[Set[str]] = {START, END, NONE}


# --------- Area point labels (Plotly textposition values) ---------

class LabelPosition:
    """Compass placement of an area-point label relative to its vertex."""
    TOP_LEFT: Final[str] = "top left"
    TOP_CENTER: Final[str] = "top center"
    TOP_RIGHT: Final[str] = "top right"
    MIDDLE_LEFT: Final[str] = "middle left"
    MIDDLE_RIGHT: Final[str] = "middle right"
    BOTTOM_LEFT: Final[str] = "bottom left"
    BOTTOM_CENTER: Final[str] = "bottom center"
    BOTTOM_RIGHT: Final[str] = "bottom right"

    # Placement computed from the polygon centroid
    AUTO: Final[str] = "auto"

    DIRECTIONS: Final[Tuple[str, ...]] = (
        MIDDLE_RIGHT, TOP_RIGHT, TOP_CENTER, TOP_LEFT,
        MIDDLE_LEFT, BOTTOM_LEFT, BOTTOM_CENTER, BOTTOM_RIGHT,
    )
    ALL: Final[Set[str]] = set(DIRECTIONS) | {AUTO}


# --------- Marker naming ---------

class MarkerNamingScheme:
    ALPHABETIC: Final[str] = "alphabetic"   # A, B, ..., Z, AA, AB, ...
    NUMERIC: Final[str] = "numeric"         # P1, P2, ...

    ALL: Final[Set[str]] = {ALPHABETIC, NUMERIC}
