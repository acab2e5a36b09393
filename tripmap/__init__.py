"""Trip map engine: day schedules, map markers and location search for trips."""

__version__ = "0.1.0"
