"""Exception types raised by chatdoc."""

from typing import Optional


class ChatDocError(Exception):
    """Base class for all chatdoc errors."""


class TranscriptParseError(ChatDocError, ValueError):
    """A transcript is structurally malformed.

    Args:
        message: Human-readable description of the problem
        line_no: 1-based line number of the offending line, if known
    """

    def __init__(self, message: str, line_no: Optional[int] = None):
        self.message = message
        self.line_no = line_no
        if line_no is not None:
            super().__init__(f"line {line_no}: {message}")
        else:
            super().__init__(message)


class AuthConfigError(ChatDocError):
    """Authentication is required but no credential could be resolved."""


class ServerRequestError(ChatDocError):
    """A server request could not be built, sent, or understood."""


class ConfigError(ChatDocError):
    """A configuration value from the environment or repo config is invalid."""
