import logging
import math
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional

from mediasense.core.config.settings import settings
from mediasense.core.errors import ChunkingFailed
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from ..domain.models import AudioChunk, ChunkPlan

logger = logging.getLogger(__name__)

# Shorter trailing remainders are folded into the previous chunk.
_MIN_TAIL_SECONDS = 0.1


def chunk_count(duration_seconds: float, chunk_seconds: float) -> int:
    count = math.ceil(duration_seconds / chunk_seconds)
    if count > 1 and duration_seconds - (count - 1) * chunk_seconds < _MIN_TAIL_SECONDS:
        count -= 1
    return max(count, 1)


class ChunkSplitter:
    """
    Splits long audio into ordered fixed-duration WAV segments.

    Conversions run on a bounded pool, but each task writes into the slot
    matching its index, so completion order never affects chunk order.
    """

    def __init__(self, transcoder: IMediaTranscoder, max_workers: Optional[int] = None):
        self.transcoder = transcoder
        self.max_workers = max_workers or settings.CHUNK_CONVERSION_WORKERS

    def split(self, source_path: Path, duration_seconds: float, chunk_seconds: float,
              output_dir: Path) -> ChunkPlan:
        if chunk_seconds <= 0:
            raise ValueError("chunk_seconds must be positive")

        count = chunk_count(duration_seconds, chunk_seconds)
        if count == 1:
            logger.info(f"{source_path.name} fits in one chunk ({duration_seconds:.1f}s)")
            return ChunkPlan(
                chunks=[AudioChunk(0, source_path, 0.0, duration_seconds, is_source=True)],
                expected_count=1,
                chunk_seconds=chunk_seconds,
                source_duration_seconds=duration_seconds,
            )

        output_dir.mkdir(parents=True, exist_ok=True)
        run_tag = uuid.uuid4().hex[:8]

        logger.info(f"Splitting {source_path.name} ({duration_seconds:.1f}s) into {count} chunks of {chunk_seconds:.0f}s")

        slots: List[Optional[AudioChunk]] = [None] * count

        def convert(index: int) -> AudioChunk:
            start = index * chunk_seconds
            length = chunk_seconds if index < count - 1 else duration_seconds - start
            target = output_dir / f"{source_path.stem}_{run_tag}_chunk_{index:03d}.wav"
            self.transcoder.split_segment(source_path, start, length, target)
            return AudioChunk(index, target, start, length)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {pool.submit(convert, i): i for i in range(count)}
            for future in as_completed(futures):
                index = futures[future]
                try:
                    slots[index] = future.result()
                except Exception as e:
                    logger.warning(f"Chunk {index + 1}/{count} failed to convert: {e}")

        chunks = [c for c in slots if c is not None]
        if not chunks:
            raise ChunkingFailed(f"All {count} chunks failed to create for {source_path.name}")

        if len(chunks) < count:
            logger.warning(f"{count - len(chunks)} of {count} chunks were dropped")

        return ChunkPlan(
            chunks=chunks,
            expected_count=count,
            chunk_seconds=chunk_seconds,
            source_duration_seconds=duration_seconds,
        )

    @staticmethod
    def cleanup(plan: ChunkPlan) -> None:
        """Deletes chunk files produced by split(); never the source."""
        for chunk in plan.chunks:
            if chunk.is_source:
                continue
            try:
                chunk.file_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete chunk {chunk.file_path}: {e}")
