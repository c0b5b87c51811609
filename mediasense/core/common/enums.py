# File: mediasense/core/common/enums.py

from enum import Enum, unique

@unique
class MediaType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    UNKNOWN = "unknown"

@unique
class TranscriptionProvider(str, Enum):
    """What the caller asked for."""
    AUTO = "auto"
    GOOGLE = "google"
    OPENAI = "openai"

@unique
class ProviderUsed(str, Enum):
    """Which back-end path actually produced the transcript."""
    GOOGLE_SYNC = "GoogleSync"
    GOOGLE_LONG_RUNNING = "GoogleLongRunning"
    WHISPER_DIRECT = "WhisperDirect"
    WHISPER_CHUNKED = "WhisperChunked"

@unique
class RouterState(str, Enum):
    IDLE = "Idle"
    ROUTING = "Routing"
    GOOGLE_SYNC = "GoogleSync"
    GOOGLE_LONG_RUNNING = "GoogleLongRunning"
    WHISPER_DIRECT = "WhisperDirect"
    WHISPER_CHUNKED = "WhisperChunked"
    DONE = "Done"
    FAILED = "Failed"
