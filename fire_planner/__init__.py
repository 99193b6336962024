"""FIRE planner: retirement plan projection and actual-vs-planned tracking."""

__version__ = "0.1.0"
