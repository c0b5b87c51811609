# File: mediasense/features/ocr_captions/service/frame_sampler.py
import logging
import math
import uuid
from pathlib import Path
from typing import Iterator, List, Optional

from mediasense.core.config.settings import settings
from mediasense.core.errors import UnsupportedInputError
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from ..domain.models import FrameSamplingOptions, SampledFrame

logger = logging.getLogger(__name__)


def plan_timestamps(duration_seconds: float, options: FrameSamplingOptions) -> List[float]:
    """
    frame_count = min(max_frames, floor(window / min_interval)), spread evenly from start_time.
    A non-empty window shorter than min_interval still gets one frame.
    """
    end = duration_seconds if options.end_time is None else min(options.end_time, duration_seconds)
    window = end - options.start_time
    if window <= 0:
        return []

    # No spacing floor: max_frames alone decides the count.
    by_interval = math.floor(window / options.min_interval) if options.min_interval > 0 else options.max_frames
    frame_count = min(options.max_frames, by_interval)
    frame_count = max(frame_count, 1)
    interval = window / frame_count
    return [options.start_time + interval * i for i in range(frame_count)]


class FrameSampler:
    """
    Pulls frames one at a time. Each frame file is deleted as soon as the
    consumer moves past it, and the frames directory is removed once empty.
    """

    def __init__(self, transcoder: IMediaTranscoder, frames_dir: Optional[Path] = None):
        self.transcoder = transcoder
        self.frames_dir = frames_dir or settings.OCR_FRAMES_DIR

    def sample(self, video_path: Path, duration_seconds: float,
               options: FrameSamplingOptions) -> Iterator[SampledFrame]:
        timestamps = plan_timestamps(duration_seconds, options)
        if not timestamps:
            raise UnsupportedInputError(
                f"No sampling window in {video_path.name} (duration {duration_seconds:.2f}s, start {options.start_time}s)"
            )

        interval = timestamps[1] - timestamps[0] if len(timestamps) > 1 else 0.0
        logger.info(f"Sampling {len(timestamps)} frames from {video_path.name} at {interval:.2f}s intervals")

        self.frames_dir.mkdir(parents=True, exist_ok=True)
        run_tag = uuid.uuid4().hex[:8]
        extracted = 0

        try:
            for i, timestamp in enumerate(timestamps):
                frame_path = self.frames_dir / f"{video_path.stem}_{run_tag}_ocr_frame_{i + 1}.jpg"
                try:
                    self.transcoder.extract_frame(video_path, timestamp, frame_path)
                except Exception as e:
                    logger.warning(f"Frame {i + 1}/{len(timestamps)} extraction failed at {timestamp:.2f}s: {e}")
                    frame_path.unlink(missing_ok=True)
                    continue

                extracted += 1
                try:
                    yield SampledFrame(frame_index=i + 1, timestamp_seconds=timestamp, file_path=frame_path)
                finally:
                    frame_path.unlink(missing_ok=True)
        finally:
            self._remove_dir_if_empty()

        if extracted == 0:
            raise UnsupportedInputError(f"No frames could be extracted from {video_path.name}")

    def _remove_dir_if_empty(self) -> None:
        try:
            if self.frames_dir.exists() and not any(self.frames_dir.iterdir()):
                self.frames_dir.rmdir()
        except OSError as e:
            logger.warning(f"Could not clean up frames directory {self.frames_dir}: {e}")
