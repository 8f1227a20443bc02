"""Desktop week-view widget for Google Calendar and Google Tasks."""

__version__ = "0.1.0"
