import logging
from pathlib import Path

from mediasense.core.common.enums import MediaType
from mediasense.core.errors import UnsupportedInputError
from ..domain.models import OCROptions
from .api import OCRCaptionService

logger = logging.getLogger(__name__)

class OCRCaptionHandler:
    """
    Worker for JOB_TYPE.OCR_CAPTIONS.
    """

    def __init__(self, service: OCRCaptionService = None):
        self.service = service or OCRCaptionService()

    def handle(self, file_path: str, media_type: MediaType, params: dict) -> dict:
        if media_type != MediaType.VIDEO:
            raise UnsupportedInputError(f"OCR captions need a video, got {media_type.value}")

        logger.info(f"Processing OCR Captions for {file_path}")
        track = self.service.extract_captions(Path(file_path), OCROptions.from_dict(params))
        return track.to_dict()
