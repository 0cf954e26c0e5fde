"""
Error taxonomy for stackmirror.

Every failure the sync can hit is raised as a subclass of MirrorError so the
controller can decide between skipping one post and aborting the run.
"""

from typing import Optional


class MirrorError(Exception):
    """Base class for all stackmirror failures."""


class ArgumentError(MirrorError):
    """Bad or missing command-line input. The run never starts."""


class TransportError(MirrorError):
    """Network failure or non-success HTTP response."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(MirrorError):
    """Response payload could not be decoded into the expected record."""


class ConversionError(MirrorError):
    """HTML to Markdown conversion failed."""


class WriteError(MirrorError):
    """Output file could not be written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
