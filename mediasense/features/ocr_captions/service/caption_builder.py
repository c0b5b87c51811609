# File: mediasense/features/ocr_captions/service/caption_builder.py
import logging
from typing import Iterable, List, Optional

from mediasense.features.vision.domain.interfaces import IVisionAnalyzer
from mediasense.features.vision.domain.models import TextAnnotation, TextDetectionResult
from ..domain.models import CaptionTrack, OCRCaptionEntry, OCROptions, SampledFrame

logger = logging.getLogger(__name__)


def keep_detection(detection: TextAnnotation, options: OCROptions) -> bool:
    if detection.confidence < options.confidence_threshold:
        return False
    if options.filter_short_text and len(detection.text.strip()) < options.min_text_length:
        return False
    return True


class CaptionBuilder:
    """
    Runs text detection per sampled frame and assembles a time-indexed caption track.
    Caption text is rebuilt from the detections that survive filtering.
    """

    def __init__(self, analyzer: IVisionAnalyzer):
        self.analyzer = analyzer

    def caption_for(self, frame: SampledFrame, result: TextDetectionResult,
                    options: OCROptions) -> Optional[OCRCaptionEntry]:
        if not result.full_text.strip():
            return None

        raw = list(result.detections)
        if not raw:
            # No per-block breakdown; score the aggregate word by word.
            raw = [TextAnnotation(text=token) for token in result.full_text.split()]

        kept = [d for d in raw if keep_detection(d, options)]
        text = " ".join(d.text.strip() for d in kept).strip()
        if not text:
            return None

        confidence = sum(d.confidence for d in raw) / len(raw) if raw else 1.0
        return OCRCaptionEntry(
            frame_index=frame.frame_index,
            timestamp_seconds=frame.timestamp_seconds,
            text=text,
            detections=kept,
            confidence=confidence,
        )

    def build(self, frames: Iterable[SampledFrame], options: OCROptions,
              duration_seconds: float = 0.0) -> CaptionTrack:
        track = CaptionTrack(frame_interval=options.sampling.frame_interval, duration_seconds=duration_seconds)
        entries: List[OCRCaptionEntry] = []

        for frame in frames:
            track.frames_sampled += 1
            try:
                result = self.analyzer.text_detection(frame.file_path)
            except Exception as e:
                logger.warning(f"OCR failed for frame {frame.frame_index} at {frame.timestamp_seconds:.2f}s: {e}")
                track.warnings.append(f"OCR failed for frame {frame.frame_index}: {e}")
                continue

            entry = self.caption_for(frame, result, options)
            if entry is None:
                logger.debug(f"No text kept in frame {frame.frame_index}")
                continue

            entries.append(entry)
            track.text_by_timestamp[f"{entry.timestamp_seconds:.2f}"] = entry.text

        track.entries = entries
        track.all_text = " ".join(e.text for e in entries).strip()
        logger.info(f"OCR extraction complete: {len(entries)} captions from {track.frames_sampled} frames")
        return track
