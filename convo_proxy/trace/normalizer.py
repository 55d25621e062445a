"""
Trace Normalizer

Folds an ordered batch of trace events into the stable shape consumed by the
UI and the profile-persistence layer. Pure: no I/O, no state kept between
calls, input order preserved.
"""

from typing import Any, Iterable

from pydantic import BaseModel, Field

from convo_proxy.trace.models import (
    EndTrace,
    IgnoredTrace,
    ProfileDataTrace,
    SpeakTrace,
    TextTrace,
    Trace,
)


class NormalizedTrace(BaseModel):
    """
    Flattened result of one trace batch.

    `messages` and `audio_refs` are index-aligned; `audio_refs[i]` is "" when
    message i has no spoken rendition.
    """
    messages: list[str] = Field(default_factory=list)
    audio_refs: list[str] = Field(default_factory=list)
    extracted_data: dict[str, Any] = Field(default_factory=dict)
    is_complete: bool = False


def normalize_traces(traces: Iterable[Trace]) -> NormalizedTrace:
    """
    Fold a trace batch into a NormalizedTrace.

    - text/speak with a message append to messages and audio_refs together
    - end marks the conversation complete; later traces are still folded
    - profile_data is shallow-merged into extracted_data, later keys win
    - ignored kinds contribute nothing

    Args:
        traces: Parsed traces in emission order

    Returns:
        NormalizedTrace for the batch
    """
    messages: list[str] = []
    audio_refs: list[str] = []
    extracted: dict[str, Any] = {}
    is_complete = False

    for trace in traces:
        if isinstance(trace, TextTrace):
            if trace.payload.message:
                messages.append(trace.payload.message)
                audio_refs.append("")

        elif isinstance(trace, SpeakTrace):
            if trace.payload.message:
                messages.append(trace.payload.message)
                audio_refs.append(trace.payload.src or "")

        elif isinstance(trace, EndTrace):
            is_complete = True

        elif isinstance(trace, ProfileDataTrace):
            if trace.payload.data:
                extracted = {**extracted, **trace.payload.data}

        elif isinstance(trace, IgnoredTrace):
            continue

        else:
            raise TypeError(f"Unhandled trace variant: {type(trace).__name__}")

    return NormalizedTrace(
        messages=messages,
        audio_refs=audio_refs,
        extracted_data=extracted,
        is_complete=is_complete,
    )
