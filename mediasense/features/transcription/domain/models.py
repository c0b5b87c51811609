# File: mediasense/features/transcription/domain/models.py
from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
from mediasense.core.common.enums import ProviderUsed

# Warning texts surfaced on TranscriptResult.warnings
WARNING_FALLBACK_NO_DIARIZATION = "Used OpenAI Whisper as fallback (no speaker diarization available)"
WARNING_LONG_AUDIO_WHISPER = "Used OpenAI Whisper for optimal transcription of long audio"
WARNING_NO_RESULTS = "No transcription results returned"

@dataclass(frozen=True)
class TranscriptWord:
    """
    Atomic unit of recognised speech.
    Times are seconds from the start of the *whole* recording once stitched.
    """
    text: str
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    confidence: Optional[float] = None
    speaker_tag: Optional[int] = None

    def shifted(self, offset_seconds: float) -> "TranscriptWord":
        if offset_seconds == 0:
            return self
        return TranscriptWord(
            text=self.text,
            start_time=None if self.start_time is None else self.start_time + offset_seconds,
            end_time=None if self.end_time is None else self.end_time + offset_seconds,
            confidence=self.confidence,
            speaker_tag=self.speaker_tag,
        )

@dataclass(frozen=True)
class SpeakerSegment:
    """
    A contiguous run of words attributed to one diarized speaker.
    """
    speaker_tag: int
    start_time: float
    end_time: float
    word_count: int

@dataclass(frozen=True)
class RecognitionPayload:
    """
    What one provider call produced, before routing decides what it means.
    texts keeps the provider's result order.
    """
    texts: List[str] = field(default_factory=list)
    words: List[TranscriptWord] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not any(t.strip() for t in self.texts) and not self.words

@dataclass(frozen=True)
class SpeechRequest:
    """
    Recognition settings sent to the diarizing back-end.
    """
    language_code: str = "en-US"
    sample_rate_hz: int = 16000
    model: str = "latest_long"
    enable_word_time_offsets: bool = True
    enable_automatic_punctuation: bool = True
    use_enhanced: bool = True
    min_speakers: int = 1
    max_speakers: int = 10

@dataclass
class TranscriptResult:
    """
    The single output of a routed transcription.
    full_text follows chunk index order, not timestamp order.
    """
    full_text: str
    provider_used: ProviderUsed
    words: List[TranscriptWord] = field(default_factory=list)
    speaker_segments: List[SpeakerSegment] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    # Header Metadata
    duration_seconds: float = 0.0
    state_trace: List[str] = field(default_factory=list)
    dropped_chunks: List[int] = field(default_factory=list)

    @property
    def has_diarization(self) -> bool:
        return any(w.speaker_tag is not None for w in self.words)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["provider_used"] = self.provider_used.value
        return data
