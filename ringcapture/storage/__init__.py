"""Storage sinks for encoded recordings."""

from .file_manager import FileManager

__all__ = ["FileManager"]
