"""Roster: filter state and query synchronization for the employee listing."""

__version__ = "1.0.0"
