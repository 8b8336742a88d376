"""
Error types raised by the favicon pipeline.

Every failure is fatal and deterministic, so nothing here is retried.
``main.py`` turns a ``FaviconError`` into a non-zero exit status and a
``UserAbort`` into a clean exit.
"""


class FaviconError(Exception):
    """Base class for all fatal pipeline errors."""

    def __init__(self, message, path=None):
        super().__init__(message)
        self.path = path

    def __str__(self):
        message = super().__str__()
        if self.path is not None:
            return f"`{self.path}`: {message}"
        return message


class InputError(FaviconError):
    """The input path is missing, unreadable or not a regular file."""


class DecodeError(FaviconError):
    """The input bytes are not a recognised image."""


class PathConflictError(FaviconError):
    """A path that should be a file is a directory, or vice versa."""


class RenderError(FaviconError):
    """The image engine failed while producing a specific artifact."""


class IoError(FaviconError):
    """Creating the output directory or writing a file failed."""


class EngineError(FaviconError):
    """A native library the image engine needs, such as cairo, cannot be loaded."""


class UserAbort(Exception):
    """The user declined to overwrite existing files. Not a failure."""
