"""Mission control job store: records and mutates job metadata."""

__version__ = "0.1.0"
