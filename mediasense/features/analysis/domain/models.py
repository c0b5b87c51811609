# File: mediasense/features/analysis/domain/models.py
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional
from mediasense.core.common.enums import MediaType, TranscriptionProvider
from mediasense.features.ocr_captions.domain.models import OCROptions

@dataclass(frozen=True)
class AnalysisOptions:
    provider: TranscriptionProvider = TranscriptionProvider.AUTO
    include_transcription: bool = True
    identify_speakers: bool = True
    include_ocr: bool = True
    include_objects: bool = True
    ocr: OCROptions = field(default_factory=OCROptions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisOptions":
        return cls(
            provider=TranscriptionProvider(data.get("provider", TranscriptionProvider.AUTO.value)),
            include_transcription=bool(data.get("include_transcription", True)),
            identify_speakers=bool(data.get("identify_speakers", True)),
            include_ocr=bool(data.get("include_ocr", True)),
            include_objects=bool(data.get("include_objects", True)),
            ocr=OCROptions.from_dict(data.get("ocr", {})),
        )

@dataclass
class AnalysisResult:
    """
    Whatever could be produced for one file. Stage failures land in warnings, never as exceptions.
    """
    file_path: str
    media_type: MediaType
    metadata: Dict[str, Any] = field(default_factory=dict)
    transcription: Optional[Dict[str, Any]] = None
    speakers: Optional[Dict[str, Any]] = None
    ocr_captions: Optional[Dict[str, Any]] = None
    vision: Optional[Dict[str, Any]] = None
    warnings: List[str] = field(default_factory=list)
    processing_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["media_type"] = self.media_type.value
        return data
