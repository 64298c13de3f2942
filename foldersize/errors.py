"""Exception hierarchy for foldersize.

Only ValidationError, ConfigError and RenderError reach callers. The
traversal errors are raised and recovered inside the scanner.
"""

from __future__ import annotations


class FolderSizeError(Exception):
    """Base class for all foldersize errors."""


class ValidationError(FolderSizeError, ValueError):
    """Invalid scan arguments, detected before any traversal starts."""


class ConfigError(FolderSizeError, ValueError):
    """Unreadable or invalid configuration."""


class SubtreeEnumerationError(FolderSizeError):
    """A directory's children could not be listed."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"cannot list {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class FileSizeError(FolderSizeError):
    """A file's size could not be read."""

    def __init__(self, path: str, cause: OSError):
        super().__init__(f"cannot stat {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class RenderError(FolderSizeError):
    """The report could not be written."""
