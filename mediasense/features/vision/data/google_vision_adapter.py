# File: mediasense/features/vision/data/google_vision_adapter.py
import logging
from pathlib import Path
from typing import List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import vision

from mediasense.core.errors import ConfigurationError, ProviderError, TransientProviderError
from ..domain.interfaces import IVisionAnalyzer
from ..domain.models import DetectedObject, ImageLabel, TextAnnotation, TextDetectionResult

logger = logging.getLogger(__name__)


def _translate(e: google_exceptions.GoogleAPICallError, action: str) -> Exception:
    if isinstance(e, (google_exceptions.ServerError, google_exceptions.TooManyRequests)):
        return TransientProviderError(f"Vision {action} temporarily unavailable: {e}", provider="google")
    if isinstance(e, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return ConfigurationError(f"Vision credentials rejected: {e}")
    return ProviderError(f"Vision {action} failed: {e}", provider="google")


class GoogleVisionAdapter(IVisionAnalyzer):

    def __init__(self, client: Optional[vision.ImageAnnotatorClient] = None):
        self._client = client

    @property
    def client(self) -> vision.ImageAnnotatorClient:
        if self._client is None:
            try:
                self._client = vision.ImageAnnotatorClient()
            except auth_exceptions.DefaultCredentialsError as e:
                raise ConfigurationError(
                    "Google Vision credentials not found; set GOOGLE_APPLICATION_CREDENTIALS"
                ) from e
        return self._client

    def _annotate(self, method_name: str, image_path: Path, action: str):
        image = vision.Image(content=image_path.read_bytes())
        try:
            response = getattr(self.client, method_name)(image=image)
        except google_exceptions.GoogleAPICallError as e:
            raise _translate(e, action) from e

        if response.error.message:
            raise ProviderError(f"Vision {action} failed: {response.error.message}", provider="google")
        return response

    def text_detection(self, image_path: Path) -> TextDetectionResult:
        response = self._annotate("text_detection", image_path, "text detection")
        annotations = list(response.text_annotations)
        if not annotations:
            return TextDetectionResult()

        # First annotation is the aggregate; the rest are individual blocks.
        detections = [
            TextAnnotation(
                text=a.description,
                confidence=float(a.confidence) if a.confidence else 1.0,
                bounding_box=[(float(v.x), float(v.y)) for v in a.bounding_poly.vertices],
            )
            for a in annotations[1:]
        ]
        return TextDetectionResult(full_text=annotations[0].description or "", detections=detections)

    def object_localization(self, image_path: Path) -> List[DetectedObject]:
        response = self._annotate("object_localization", image_path, "object localization")
        return [
            DetectedObject(
                name=o.name,
                confidence=float(o.score),
                bounding_box=[(float(v.x), float(v.y)) for v in o.bounding_poly.normalized_vertices],
            )
            for o in response.localized_object_annotations
        ]

    def label_detection(self, image_path: Path) -> List[ImageLabel]:
        response = self._annotate("label_detection", image_path, "label detection")
        return [
            ImageLabel(description=l.description, score=float(l.score), topicality=float(l.topicality))
            for l in response.label_annotations
        ]
