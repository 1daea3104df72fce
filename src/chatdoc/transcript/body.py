"""State machine parsing the user/assistant messages below the separator."""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Optional, Sequence

from ..errors import TranscriptParseError
from .escape import unescape
from .lines import LineKind, classify_body_line, open_token_text, resource_body, strip_eol
from .models import Interaction, ParseFlag, ResourceKind, ResourceReference

logger = logging.getLogger(__name__)

# A run of blank source lines is kept as one paragraph break through the space-join.
PARAGRAPH_BREAK = "\n\n"
_PARAGRAPH_RE = re.compile(r" *\n\n *")
_RESOURCE_PREFIX_RE = re.compile(r"^([fc]):(.*)$", re.IGNORECASE)
_RESOURCE_KINDS = {"f": ResourceKind.FILE, "c": ResourceKind.COLLECTION}


class BodyState(Enum):
    IDLE = "idle"
    IN_USER = "in_user"
    IN_ASSISTANT = "in_assistant"


def parse_resource_reference(body: str, line_no: int) -> ResourceReference:
    """Parse the inside of a ``[f:ID]`` or ``[c:ID]`` line."""
    m = _RESOURCE_PREFIX_RE.match(body)
    if not m:
        raise TranscriptParseError(
            f"Resource reference must start with 'f:' or 'c:', got [{body}]", line_no
        )
    resource_id = m.group(2).strip()
    if not resource_id:
        raise TranscriptParseError(f"Resource reference [{body}] has no id", line_no)
    return ResourceReference(kind=_RESOURCE_KINDS[m.group(1).lower()], id=resource_id)


def join_message(parts: Sequence[str]) -> str:
    """Join accumulated message lines into the final message text."""
    text = _PARAGRAPH_RE.sub(PARAGRAPH_BREAK, " ".join(parts))
    return unescape(text.strip())


class BodyParser:
    """Line-at-a-time parser for the transcript body.

    Feed lines with :meth:`feed`, then call :meth:`finish` once the input is
    exhausted. A parser instance handles a single document.
    """

    def __init__(self) -> None:
        self.state = BodyState.IDLE
        self.interactions: list[Interaction] = []
        self.flags: set[ParseFlag] = set()
        self._buffer: list[str] = []
        self._user_message: Optional[str] = None
        self._resources: list[ResourceReference] = []

    def feed(self, line: str, line_no: int) -> None:
        line = strip_eol(line)
        kind = classify_body_line(line)
        if self.state is BodyState.IDLE:
            self._feed_idle(line, kind, line_no)
        elif self.state is BodyState.IN_USER:
            self._feed_user(line, kind, line_no)
        else:
            self._feed_assistant(line, kind, line_no)

    def _feed_idle(self, line: str, kind: LineKind, line_no: int) -> None:
        if kind in (LineKind.COMMENT, LineKind.BLANK, LineKind.DIVIDER):
            return
        if kind is LineKind.USER_OPEN:
            if self._user_message is not None:
                raise TranscriptParseError(
                    "New user message opened before the previous one was answered", line_no
                )
            self._start(BodyState.IN_USER, open_token_text(line))
        elif kind is LineKind.ASSISTANT_OPEN:
            if self._user_message is None:
                raise TranscriptParseError("Assistant message has no preceding user message", line_no)
            self._start(BodyState.IN_ASSISTANT, open_token_text(line))
        else:
            raise TranscriptParseError(f"Unrecognized body line: {line.strip()!r}", line_no)

    def _feed_user(self, line: str, kind: LineKind, line_no: int) -> None:
        if kind is LineKind.USER_CLOSE:
            self._close_user()
        elif kind is LineKind.RESOURCE:
            self._resources.append(parse_resource_reference(resource_body(line), line_no))
        else:
            self._accumulate(line)

    def _feed_assistant(self, line: str, kind: LineKind, line_no: int) -> None:
        if kind is not LineKind.ASSISTANT_CLOSE:
            self._accumulate(line)
            return
        text = join_message(self._buffer)
        if not text:
            raise TranscriptParseError("Assistant message is empty", line_no)
        self.interactions.append(
            Interaction(
                user_message=self._user_message,
                resources=tuple(self._resources),
                assistant_message=text,
            )
        )
        self._buffer = []
        self._user_message = None
        self._resources = []
        self.state = BodyState.IDLE

    def _start(self, state: BodyState, trailing: Optional[str]) -> None:
        self._buffer = []
        if trailing and trailing.strip():
            self._buffer.append(trailing.strip())
        self.state = state

    def _accumulate(self, line: str) -> None:
        if line.strip():
            self._buffer.append(line.strip())
        elif not self._buffer or self._buffer[-1] != PARAGRAPH_BREAK:
            self._buffer.append(PARAGRAPH_BREAK)

    def _close_user(self) -> None:
        self._user_message = join_message(self._buffer)
        self._buffer = []
        self.state = BodyState.IDLE

    def finish(self, line_no: int) -> tuple[list[Interaction], set[ParseFlag]]:
        """Resolve end of input.

        Args:
            line_no: Line number reported if the document ends mid-message

        Returns:
            (interactions in document order, leniency flags)

        Raises:
            TranscriptParseError: If an assistant message was left open
        """
        if self.state is BodyState.IN_ASSISTANT:
            raise TranscriptParseError("Assistant message was never closed with '<<='", line_no)

        if self.state is BodyState.IN_USER:
            if join_message(self._buffer) or self._resources:
                self._close_user()
            self.state = BodyState.IDLE
            self.flags.add(ParseFlag.UNCLOSED_USER_MESSAGE)
            logger.debug("Trailing user message has no closing '<<<' token")

        if self._user_message is not None:
            self.interactions.append(
                Interaction(user_message=self._user_message, resources=tuple(self._resources))
            )
            self._user_message = None
            self._resources = []
        return self.interactions, self.flags


def parse_body(lines: Sequence[str], start: int = 0) -> tuple[list[Interaction], set[ParseFlag]]:
    """Parse body lines from ``start`` to the end of the document."""
    parser = BodyParser()
    for i in range(start, len(lines)):
        parser.feed(lines[i], i + 1)
    return parser.finish(len(lines))
