"""Build error taxonomy. Every error is fatal to the current build."""

from pathlib import Path
from typing import Optional, Union


class BuildError(Exception):
    """Base class for content errors; carries the offending path and a readable cause."""

    def __init__(self, cause: str, path: Optional[Union[str, Path]] = None):
        self.cause = cause
        self.path = str(path) if path is not None else None
        super().__init__(f"{self.path}: {cause}" if self.path else cause)


class MissingFrontMatter(BuildError):
    """File does not open with a front matter delimiter line."""


class MalformedFrontMatter(BuildError):
    """Front matter is unterminated, invalid YAML, or not a mapping."""


class ValidationError(BuildError):
    """A front matter field is missing or has an invalid value."""


class DuplicateIdentifier(BuildError):
    """Two items share an identifier within one collection."""


class PathCollision(BuildError):
    """Two output documents resolve to the same path."""


class MissingRenderContext(BuildError):
    """A template variable required for rendering is absent."""
