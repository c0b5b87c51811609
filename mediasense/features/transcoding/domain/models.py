from dataclasses import dataclass, field
from typing import Optional, Tuple

# Speech-tuned filter chain for the Google recogniser: cut rumble, keep the voice band, lift the level.
GOOGLE_SPEECH_FILTERS: Tuple[str, ...] = ("highpass=f=200", "lowpass=f=3000", "volume=1.5")

@dataclass(frozen=True)
class AudioProfile:
    """
    Encoding parameters for extracted or re-encoded audio.
    Defaults to LINEAR16 16kHz mono WAV, accepted by both speech back-ends.
    """
    codec: str = "pcm_s16le"
    sample_rate_hz: int = 16000
    channels: int = 1
    format: str = "wav"
    filters: Tuple[str, ...] = field(default_factory=tuple)

@dataclass(frozen=True)
class ProbeResult:
    """
    Container-level facts reported by ffprobe.
    """
    duration_seconds: float
    size_bytes: int
    sample_rate: Optional[int] = None
    channels: Optional[int] = None
    bit_rate: Optional[int] = None
    has_audio: bool = False
    has_video: bool = False
    width: Optional[int] = None
    height: Optional[int] = None
