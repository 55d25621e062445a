# Agent Traces
# Typed trace variants and the normalizing fold

from convo_proxy.trace.models import (
    TraceType,
    Trace,
    TextTrace,
    SpeakTrace,
    EndTrace,
    ProfileDataTrace,
    IgnoredTrace,
    parse_trace,
    parse_traces,
)
from convo_proxy.trace.normalizer import NormalizedTrace, normalize_traces

__all__ = [
    "TraceType",
    "Trace",
    "TextTrace",
    "SpeakTrace",
    "EndTrace",
    "ProfileDataTrace",
    "IgnoredTrace",
    "parse_trace",
    "parse_traces",
    "NormalizedTrace",
    "normalize_traces",
]
