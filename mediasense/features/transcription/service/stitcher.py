# File: mediasense/features/transcription/service/stitcher.py
import logging
from dataclasses import dataclass, field
from typing import Dict, List

from mediasense.features.chunking.domain.models import ChunkPlan
from ..domain.models import RecognitionPayload, SpeakerSegment, TranscriptWord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StitchedTranscript:
    full_text: str
    words: List[TranscriptWord] = field(default_factory=list)
    missing_indices: List[int] = field(default_factory=list)


class TranscriptStitcher:
    """
    Reassembles per-chunk recognition into one continuous transcript.

    Chunks are consumed strictly by index. The time offset advances by the
    nominal chunk duration for every index, so a dropped chunk leaves a gap
    in time instead of pulling later words earlier.
    """

    def stitch(self, plan: ChunkPlan, results: Dict[int, RecognitionPayload]) -> StitchedTranscript:
        texts: List[str] = []
        words: List[TranscriptWord] = []
        missing: List[int] = []

        offset = 0.0
        for index in range(plan.expected_count):
            payload = results.get(index)
            if payload is None:
                missing.append(index)
            else:
                chunk_text = " ".join(t.strip() for t in payload.texts if t.strip())
                if chunk_text:
                    texts.append(chunk_text)
                words.extend(w.shifted(offset) for w in payload.words)
            offset += plan.chunk_seconds

        if missing:
            logger.warning(f"Stitched transcript is missing chunk(s) {missing}")

        return StitchedTranscript(full_text=" ".join(texts), words=words, missing_indices=missing)


def join_provider_results(payload: RecognitionPayload) -> str:
    """Multi-result responses are newline-joined in API order, without re-timing."""
    return "\n".join(t for t in payload.texts if t.strip())


def build_speaker_segments(words: List[TranscriptWord]) -> List[SpeakerSegment]:
    """Collapses consecutive words with the same speaker tag into segments."""
    segments: List[SpeakerSegment] = []
    current_tag = None
    start = end = None
    count = 0

    for word in words:
        if word.speaker_tag is None or word.start_time is None or word.end_time is None:
            continue
        if word.speaker_tag != current_tag:
            if current_tag is not None:
                segments.append(SpeakerSegment(current_tag, start, end, count))
            current_tag, start, count = word.speaker_tag, word.start_time, 0
        end = word.end_time
        count += 1

    if current_tag is not None:
        segments.append(SpeakerSegment(current_tag, start, end, count))

    return segments
