"""Extract calendar events from course syllabi."""

__version__ = "0.1.0"
