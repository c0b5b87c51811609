# File: mediasense/features/vision/service/api.py
import logging
import uuid
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from mediasense.core.config.settings import settings
from mediasense.features.transcoding.data.ffmpeg_adapter import FFmpegAdapter
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from ..data.google_vision_adapter import GoogleVisionAdapter
from ..domain.interfaces import IVisionAnalyzer
from ..domain.models import ImageAnalysis

logger = logging.getLogger(__name__)

VIDEO_PROBE_TIMESTAMP = 0.5


class VisionService:
    """
    Facade for object, label and text detection on images and on a representative video frame.
    """

    def __init__(self, analyzer: Optional[IVisionAnalyzer] = None, transcoder: Optional[IMediaTranscoder] = None,
                 max_workers: int = 3):
        self.analyzer = analyzer or GoogleVisionAdapter()
        self.transcoder = transcoder or FFmpegAdapter()
        self.max_workers = max_workers

    def analyze_image(self, image_path: Path, include_text: bool = True) -> ImageAnalysis:
        """
        Runs the detections concurrently. One failing detection becomes a warning.
        """
        analysis = ImageAnalysis()
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                "object detection": pool.submit(self.analyzer.object_localization, image_path),
                "label detection": pool.submit(self.analyzer.label_detection, image_path),
            }
            if include_text:
                futures["text detection"] = pool.submit(self.analyzer.text_detection, image_path)

            for stage, future in futures.items():
                try:
                    value = future.result()
                except Exception as e:
                    logger.warning(f"{stage} failed for {image_path.name}: {e}")
                    analysis.warnings.append(f"{stage.capitalize()} failed: {e}")
                    continue
                if stage == "object detection":
                    analysis.objects = value
                elif stage == "label detection":
                    analysis.labels = value
                else:
                    analysis.text = value

        logger.info(f"Vision: {len(analysis.objects)} objects, {len(analysis.labels)} labels in {image_path.name}")
        return analysis

    def analyze_video_frame(self, video_path: Path, timestamp: float = VIDEO_PROBE_TIMESTAMP) -> ImageAnalysis:
        """Extracts one frame and runs object and label detection on it."""
        frame_path = settings.TEMP_DIR / f"{video_path.stem}_{uuid.uuid4().hex[:8]}_probe.jpg"
        self.transcoder.extract_frame(video_path, timestamp, frame_path)
        try:
            return self.analyze_image(frame_path, include_text=False)
        finally:
            frame_path.unlink(missing_ok=True)
