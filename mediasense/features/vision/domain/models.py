from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Tuple

Vertex = Tuple[float, float]

@dataclass(frozen=True)
class TextAnnotation:
    """One detected text block. Pixel-space bounding polygon."""
    text: str
    confidence: float = 1.0
    bounding_box: List[Vertex] = field(default_factory=list)

@dataclass(frozen=True)
class TextDetectionResult:
    """
    full_text is the provider's aggregate reading of the image;
    detections are the individual blocks that compose it.
    """
    full_text: str = ""
    detections: List[TextAnnotation] = field(default_factory=list)

@dataclass(frozen=True)
class DetectedObject:
    """Localized object. Normalized (0..1) bounding polygon."""
    name: str
    confidence: float
    bounding_box: List[Vertex] = field(default_factory=list)

@dataclass(frozen=True)
class ImageLabel:
    description: str
    score: float
    topicality: float = 0.0

@dataclass
class ImageAnalysis:
    objects: List[DetectedObject] = field(default_factory=list)
    labels: List[ImageLabel] = field(default_factory=list)
    text: TextDetectionResult = field(default_factory=TextDetectionResult)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
