# File: mediasense/features/ocr_captions/service/api.py
from pathlib import Path
from typing import Optional

from mediasense.features.transcoding.data.ffmpeg_adapter import FFmpegAdapter
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from mediasense.features.vision.data.google_vision_adapter import GoogleVisionAdapter
from mediasense.features.vision.domain.interfaces import IVisionAnalyzer
from ..domain.models import CaptionTrack, OCROptions
from .caption_builder import CaptionBuilder
from .frame_sampler import FrameSampler


class OCRCaptionService:
    """
    Facade for the OCR Captions Feature: probe, sample, detect, assemble.
    """

    def __init__(self, transcoder: Optional[IMediaTranscoder] = None,
                 analyzer: Optional[IVisionAnalyzer] = None,
                 frames_dir: Optional[Path] = None):
        self.transcoder = transcoder or FFmpegAdapter()
        self.sampler = FrameSampler(self.transcoder, frames_dir)
        self.builder = CaptionBuilder(analyzer or GoogleVisionAdapter())

    def extract_captions(self, video_path: Path, options: Optional[OCROptions] = None,
                         duration_seconds: Optional[float] = None) -> CaptionTrack:
        options = options or OCROptions()
        if duration_seconds is None:
            duration_seconds = self.transcoder.probe(video_path).duration_seconds

        frames = self.sampler.sample(video_path, duration_seconds, options.sampling)
        return self.builder.build(frames, options, duration_seconds)


def extract_video_captions(video_path: str, **options) -> CaptionTrack:
    """Standalone API with the production vision and ffmpeg adapters."""
    return OCRCaptionService().extract_captions(Path(video_path), OCROptions.from_dict(options))
