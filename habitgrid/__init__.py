"""habitgrid: monthly habit grid with mood tracking, streaks and achievements."""

__version__ = "1.0.0"
