"""Route group exports."""

from . import health, records, sessions

__all__ = ["health", "records", "sessions"]
