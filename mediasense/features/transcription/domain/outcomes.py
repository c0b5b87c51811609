# File: mediasense/features/transcription/domain/outcomes.py
"""
Tagged results returned by speech back-ends instead of sentinel strings.

A back-end answers every call with exactly one of:
    Ok(value)                 the call worked; value is a payload or an operation handle
    NeedsFallback(reason)     the request is valid but this path cannot serve it
    Fatal(error)              nothing downstream should be attempted on this path
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class FallbackReason(str, Enum):
    AUDIO_TOO_LONG = "audio_too_long"      # sync endpoint refused, long-running may work
    INLINE_LIMIT = "inline_limit"          # long-running wants a bucket URI, not inline bytes
    TRANSIENT = "transient"                # 5xx / rate limit


@dataclass(frozen=True)
class Ok:
    value: Any


@dataclass(frozen=True)
class NeedsFallback:
    reason: FallbackReason
    detail: str = ""


@dataclass(frozen=True)
class Fatal:
    error: Exception


Outcome = Union[Ok, NeedsFallback, Fatal]


@dataclass(frozen=True)
class PollStatus:
    """
    One observation of a long-running operation.
    outcome is set only when done is True.
    """
    done: bool
    outcome: Optional[Outcome] = None
