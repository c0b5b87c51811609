# File: mediasense/features/ocr_captions/domain/models.py
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional
from mediasense.features.vision.domain.models import TextAnnotation

@dataclass(frozen=True)
class FrameSamplingOptions:
    frame_interval: float = 2.0
    max_frames: int = 30
    min_interval: float = 1.0
    start_time: float = 0.0
    end_time: Optional[float] = None   # None = until the end of the video

@dataclass(frozen=True)
class OCROptions:
    confidence_threshold: float = 0.5
    filter_short_text: bool = True
    min_text_length: int = 3
    sampling: FrameSamplingOptions = field(default_factory=FrameSamplingOptions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OCROptions":
        sampling_keys = {"frame_interval", "max_frames", "min_interval", "start_time", "end_time"}
        sampling = FrameSamplingOptions(**{k: v for k, v in data.items() if k in sampling_keys})
        return cls(
            confidence_threshold=float(data.get("confidence_threshold", 0.5)),
            filter_short_text=bool(data.get("filter_short_text", True)),
            min_text_length=int(data.get("min_text_length", 3)),
            sampling=sampling,
        )

@dataclass(frozen=True)
class SampledFrame:
    """frame_index is 1-based."""
    frame_index: int
    timestamp_seconds: float
    file_path: Path

@dataclass(frozen=True)
class OCRCaptionEntry:
    """
    Immutable once built. The backing frame file is gone by the time anyone reads this.
    """
    frame_index: int
    timestamp_seconds: float
    text: str
    detections: List[TextAnnotation] = field(default_factory=list)
    confidence: float = 1.0

@dataclass
class CaptionTrack:
    entries: List[OCRCaptionEntry] = field(default_factory=list)
    all_text: str = ""
    text_by_timestamp: Dict[str, str] = field(default_factory=dict)
    frames_sampled: int = 0
    frame_interval: float = 0.0
    duration_seconds: float = 0.0
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
