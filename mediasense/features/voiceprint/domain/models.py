# File: mediasense/features/voiceprint/domain/models.py
import hashlib
import json
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

@dataclass(frozen=True)
class VoiceCharacteristics:
    """
    Coarse audio facts about one speaker's span.
    The categorical estimates are buckets, not measurements.
    """
    duration_seconds: float
    sample_rate: int = 16000
    channels: int = 1
    bit_rate: int = 0
    mean_volume_db: Optional[float] = None
    pitch: str = "medium"      # low | medium | high
    tempo: str = "normal"      # slow | normal | fast
    clarity: str = "clear"     # clear | muffled | unclear
    volume: str = "normal"     # quiet | normal | loud

@dataclass(frozen=True)
class SpeakingStyle:
    """
    Text-derived statistics for one speaker.
    """
    words_per_minute: float
    average_word_length: float
    vocabulary_diversity: float
    formality: str = "neutral"   # simple | neutral | sophisticated
    pace: str = "normal"         # slow | normal | fast
    word_count: int = 0
    average_sentence_length: float = 0.0
    description: str = ""

@dataclass(frozen=True)
class VoiceFingerprint:
    """
    The comparable feature vector. Matching uses the fields; the hash is informational.
    """
    pitch: str
    tempo: str
    clarity: str
    volume: str
    words_per_minute: float
    avg_word_length: float
    vocabulary_diversity: float
    formality: str
    pace: str

    @property
    def hash(self) -> str:
        canonical = json.dumps(asdict(self), sort_keys=True)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoiceFingerprint":
        return cls(
            pitch=data.get("pitch", "medium"),
            tempo=data.get("tempo", "normal"),
            clarity=data.get("clarity", "clear"),
            volume=data.get("volume", "normal"),
            words_per_minute=float(data.get("words_per_minute", 0) or 0),
            avg_word_length=float(data.get("avg_word_length", 0) or 0),
            vocabulary_diversity=float(data.get("vocabulary_diversity", 0) or 0),
            formality=data.get("formality", "neutral"),
            pace=data.get("pace", "normal"),
        )

@dataclass
class SpeakerRecord:
    """
    A persisted speaker identity. Owned exclusively by the store.
    """
    speaker_id: str
    fingerprint: VoiceFingerprint
    characteristics: Dict[str, Any] = field(default_factory=dict)
    speaking_style: Dict[str, Any] = field(default_factory=dict)
    profile: Dict[str, Any] = field(default_factory=dict)
    first_seen: str = ""
    last_seen: str = ""
    encounter_count: int = 0
    observations: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["fingerprint"] = self.fingerprint.to_dict()
        return data

    @classmethod
    def from_dict(cls, speaker_id: str, data: Dict[str, Any]) -> "SpeakerRecord":
        return cls(
            speaker_id=speaker_id,
            fingerprint=VoiceFingerprint.from_dict(data.get("fingerprint", {})),
            characteristics=data.get("characteristics", {}),
            speaking_style=data.get("speaking_style", {}),
            profile=data.get("profile", {}),
            first_seen=data.get("first_seen", ""),
            last_seen=data.get("last_seen", ""),
            encounter_count=int(data.get("encounter_count", 0)),
            observations=list(data.get("observations", [])),
        )

@dataclass(frozen=True)
class SpeakerMatch:
    speaker_id: str
    similarity: float
    record: SpeakerRecord

@dataclass(frozen=True)
class SpeakerSearchHit:
    speaker_id: str
    match_score: int
    record: SpeakerRecord

@dataclass
class IdentifiedSpeaker:
    """
    One speaker resolved in one file.
    """
    speaker_id: str
    source_tag: str
    name: str
    is_recognized: bool
    confidence: float
    start_time: float
    end_time: float
    word_count: int
    fingerprint_hash: str
    characteristics: Dict[str, Any] = field(default_factory=dict)
    speaking_style: Dict[str, Any] = field(default_factory=dict)
    match_similarity: Optional[float] = None
    note: str = ""

@dataclass
class SpeakerIdentificationResult:
    speakers: List[IdentifiedSpeaker] = field(default_factory=list)
    summary: str = ""
    database_stats: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
