"""Print-scaled math function plots: geometry, layout and rendering."""

__version__ = "1.5.1"
