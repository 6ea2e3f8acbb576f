"""Exception types raised by catmatch."""

from __future__ import annotations


class CatmatchError(Exception):
    """Base class for catmatch errors."""


class InvalidRequestError(CatmatchError, ValueError):
    """A requested-item record is malformed and cannot be scored."""


class CatalogLoadError(CatmatchError):
    """A catalog or synonym file could not be read or contains invalid data."""


class InputFileError(CatmatchError):
    """A requested-item file has an unsupported format or cannot be parsed."""
