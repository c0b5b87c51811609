from abc import ABC, abstractmethod
from pathlib import Path
from typing import List
from .models import DetectedObject, ImageLabel, TextDetectionResult

class IVisionAnalyzer(ABC):
    """
    Contract for still-image analysis.
    Implementations raise ConfigurationError / TransientProviderError / ProviderError.
    """
    @abstractmethod
    def text_detection(self, image_path: Path) -> TextDetectionResult:
        pass

    @abstractmethod
    def object_localization(self, image_path: Path) -> List[DetectedObject]:
        pass

    @abstractmethod
    def label_detection(self, image_path: Path) -> List[ImageLabel]:
        pass
