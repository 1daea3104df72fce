"""Pydantic models for parsed chat transcripts."""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class ResourceKind(str, Enum):
    """Kind of server-side resource a user message can reference."""

    FILE = "file"
    COLLECTION = "collection"


class ParseFlag(str, Enum):
    """Leniency conditions recorded while parsing."""

    UNCLOSED_USER_MESSAGE = "unclosed_user_message"


class Header(BaseModel):
    """Settings declared above the separator line."""

    server_type: str = Field(..., min_length=1, description="Server flavour, e.g. 'Ollama'")
    server_url: str = Field(..., min_length=1, description="Base URL of the server")
    model_id: str = Field(..., min_length=1, description="Model identifier")
    use_auth: Optional[bool] = Field(None, description="Explicit auth requirement, unset if None")
    auth_key: Optional[str] = Field(None, description="Credential declared in the transcript")
    system_prompt: Optional[str] = Field(None, description="System prompt, joined to one line")
    show_thinking: Optional[str] = Field(None, description="Reasoning setting relayed to the server")
    options: Mapping[str, str] = Field(
        default_factory=dict,
        validate_default=True,
        description="Option name to raw literal value",
    )

    model_config = {"frozen": True}

    @field_validator("options", mode="after")
    @classmethod
    def _read_only_options(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))


class ResourceReference(BaseModel):
    """An uploaded file or collection attached to a user message."""

    kind: ResourceKind
    id: str = Field(..., min_length=1)

    model_config = {"frozen": True}


class Interaction(BaseModel):
    """One user message and, once answered, the assistant reply."""

    user_message: str
    resources: tuple[ResourceReference, ...] = ()
    assistant_message: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_open(self) -> bool:
        """True while the interaction is still waiting for a reply."""
        return self.assistant_message is None


class ParseResult(BaseModel):
    """Everything parsed from one transcript."""

    header: Header
    interactions: tuple[Interaction, ...] = ()
    flags: frozenset[ParseFlag] = frozenset()

    model_config = {"frozen": True}

    @property
    def pending(self) -> Optional[Interaction]:
        """The trailing interaction if it awaits a reply."""
        if self.interactions and self.interactions[-1].is_open:
            return self.interactions[-1]
        return None
