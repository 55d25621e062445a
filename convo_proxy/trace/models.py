"""
Trace Event Models

The agent runtime answers every interaction with an ordered list of
"traces": small tagged events that each carry one kind of output. One wire
format carries several payload shapes, so each kind this layer understands
gets its own model, discriminated by the `type` tag:

- text          -> display message
- speak         -> display message plus a spoken-audio URL
- end           -> conversation finished
- profile_data  -> structured profile fields emitted out-of-band

Everything else (visual, choice, unknown tags, or a known tag with an
unusable payload) parses to IgnoredTrace, so the normalizer handles it as an
explicit case rather than by fallthrough.
"""

import logging
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class TraceType(str, Enum):
    """Trace kinds with meaning for normalization."""
    TEXT = "text"
    SPEAK = "speak"
    END = "end"
    PROFILE_DATA = "profile_data"


class MessagePayload(BaseModel):
    message: str | None = None


class SpeakPayload(BaseModel):
    message: str | None = None
    src: str | None = Field(
        default=None,
        description="URL of the synthesized audio for the message"
    )


class ProfileDataPayload(BaseModel):
    data: dict[str, Any] | None = Field(
        default=None,
        description="Partial profile fields extracted by the agent"
    )


class TextTrace(BaseModel):
    type: Literal["text"] = "text"
    payload: MessagePayload = Field(default_factory=MessagePayload)


class SpeakTrace(BaseModel):
    type: Literal["speak"] = "speak"
    payload: SpeakPayload = Field(default_factory=SpeakPayload)


class EndTrace(BaseModel):
    type: Literal["end"] = "end"


class ProfileDataTrace(BaseModel):
    type: Literal["profile_data"] = "profile_data"
    payload: ProfileDataPayload = Field(default_factory=ProfileDataPayload)


class IgnoredTrace(BaseModel):
    """A trace kind this layer does not act on (visual, choice, ...)."""
    type: str
    payload: Any = None


KnownTrace = Annotated[
    Union[TextTrace, SpeakTrace, EndTrace, ProfileDataTrace],
    Field(discriminator="type"),
]

Trace = Union[TextTrace, SpeakTrace, EndTrace, ProfileDataTrace, IgnoredTrace]

_KNOWN_TYPES = {t.value for t in TraceType}
_known_trace_adapter: TypeAdapter = TypeAdapter(KnownTrace)


def parse_trace(raw: Any) -> Trace:
    """
    Parse one raw trace into its typed variant.

    Never raises: anything unusable becomes an IgnoredTrace.
    """
    if not isinstance(raw, dict):
        return IgnoredTrace(type="invalid", payload=raw)

    kind = raw.get("type")
    if kind in _KNOWN_TYPES:
        candidate = {k: v for k, v in raw.items() if not (k == "payload" and v is None)}
        try:
            return _known_trace_adapter.validate_python(candidate)
        except ValidationError as e:
            logger.debug(f"Ignoring malformed '{kind}' trace: {e.error_count()} error(s)")

    return IgnoredTrace(
        type=kind if isinstance(kind, str) else "unknown",
        payload=raw.get("payload"),
    )


def parse_traces(raws: Any) -> list[Trace]:
    """
    Parse a raw trace batch.

    A body that is not a list (error objects, empty bodies) yields an empty batch.
    """
    if not isinstance(raws, list):
        if raws:
            logger.warning(
                f"Expected a list of traces, got {type(raws).__name__}; treating as empty"
            )
        return []
    return [parse_trace(raw) for raw in raws]
