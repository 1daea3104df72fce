"""Resolve the credential to send with a request."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .errors import AuthConfigError
from .transcript.models import ParseResult

logger = logging.getLogger(__name__)

# Returned when no credential should be attached.
NO_AUTH = None


def _read_credential_file(path: Path) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            first_line = f.readline()
    except OSError as e:
        raise AuthConfigError(f"Cannot read auth token file {path}: {e}") from e
    return first_line.strip() or None


def resolve_auth(
    result: ParseResult,
    local_override: Optional[str] = None,
    default_credential_path: Optional[Union[str, Path]] = None,
) -> Optional[str]:
    """Resolve the credential for a parsed transcript.

    Precedence:

    1. ``Use Auth Token: false`` disables auth outright.
    2. Without an explicit ``Use Auth Token:``, an ``Auth Token:`` in the
       transcript implies auth and is returned as is.
    3. Otherwise auth is required when declared ``true``, or when a default
       credential file is configured.
    4. A required credential comes from the transcript, then
       ``local_override``, then the first line of the default file.

    Args:
        result: Parsed transcript
        local_override: Caller-local credential
        default_credential_path: File whose first line holds the default credential

    Returns:
        The credential, or NO_AUTH

    Raises:
        AuthConfigError: If auth is required and nothing yields a credential
    """
    header = result.header

    if header.use_auth is False:
        logger.debug("Auth disabled by transcript header")
        return NO_AUTH

    if header.use_auth is None and header.auth_key:
        logger.debug("Auth inferred from transcript auth token")
        return header.auth_key

    requires_auth = header.use_auth if header.use_auth is not None else default_credential_path is not None
    if not requires_auth:
        return NO_AUTH

    if header.auth_key:
        logger.debug("Using auth token from transcript header")
        return header.auth_key
    if local_override:
        logger.debug("Using caller-local auth token")
        return local_override
    if default_credential_path is not None:
        token = _read_credential_file(Path(default_credential_path).expanduser())
        if token:
            logger.debug(f"Using auth token from {default_credential_path}")
            return token

    raise AuthConfigError(
        "Authentication is required but no token was found. Add 'Auth Token:' to the "
        "transcript, set CHATDOC_AUTH_TOKEN, or point CHATDOC_AUTH_TOKEN_FILE at a token file."
    )
