import logging
from pathlib import Path

from mediasense.core.common.enums import MediaType
from mediasense.core.errors import UnsupportedInputError
from .api import VisionService

logger = logging.getLogger(__name__)

class ObjectDetectionHandler:
    """
    Worker for JOB_TYPE.OBJECT_DETECTION.
    Images are analyzed whole; videos on one representative frame.
    """

    def __init__(self, service: VisionService = None):
        self.service = service or VisionService()

    def handle(self, file_path: str, media_type: MediaType, params: dict) -> dict:
        logger.info(f"Processing Object Detection for {file_path}")
        source = Path(file_path)

        if media_type == MediaType.IMAGE:
            analysis = self.service.analyze_image(source, include_text=bool(params.get("include_text", True)))
        elif media_type == MediaType.VIDEO:
            analysis = self.service.analyze_video_frame(source, float(params.get("timestamp", 0.5)))
        else:
            raise UnsupportedInputError(f"Object detection needs an image or video, got {media_type.value}")

        return analysis.to_dict()
