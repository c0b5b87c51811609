# File: mediasense/features/voiceprint/service/api.py
import logging
import uuid
from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Optional

from mediasense.core.config.settings import settings
from mediasense.core.errors import UnsupportedInputError
from mediasense.core.shared_types import TimeRange
from mediasense.features.transcoding.data.ffmpeg_adapter import FFmpegAdapter
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from mediasense.features.transcription.domain.models import TranscriptResult, TranscriptWord
from ..data.json_store import JsonVoicePrintStore
from ..domain.models import IdentifiedSpeaker, SpeakerIdentificationResult
from .fingerprint import FingerprintEngine
from .matcher import SpeakerMatcher, mint_speaker_id

logger = logging.getLogger(__name__)

_store_singleton: Optional[JsonVoicePrintStore] = None


def default_store() -> JsonVoicePrintStore:
    """One in-process store per database file, loaded once."""
    global _store_singleton
    if _store_singleton is None or _store_singleton.path != settings.VOICE_PRINT_DB_PATH:
        _store_singleton = JsonVoicePrintStore(settings.VOICE_PRINT_DB_PATH)
    return _store_singleton


class SpeakerIdentificationService:
    """
    Turns a transcript into stable speaker identities.

    With diarization, each speaker tag is analysed on its own time span.
    Without it, the whole file is treated as a single speaker.
    """

    def __init__(self,
                 transcoder: Optional[IMediaTranscoder] = None,
                 matcher: Optional[SpeakerMatcher] = None,
                 engine: Optional[FingerprintEngine] = None,
                 work_dir: Optional[Path] = None):
        self.transcoder = transcoder or FFmpegAdapter()
        self.matcher = matcher or SpeakerMatcher(default_store())
        self.engine = engine or FingerprintEngine()
        self.work_dir = work_dir or settings.TEMP_DIR / "speakers"

    def identify(self, audio_path: Path, transcript: TranscriptResult) -> SpeakerIdentificationResult:
        if transcript.has_diarization:
            speakers = self._identify_diarized(audio_path, transcript)
            summary = (
                f"Analyzed {len(speakers)} unique voice prints" if speakers
                else "No valid speaker segments found for voice print analysis"
            )
        else:
            speakers = [self._identify_whole_file(audio_path, transcript)]
            summary = (
                f"Recognized existing speaker: {speakers[0].name}" if speakers[0].is_recognized
                else "Basic voice print analysis completed for 1 new speaker"
            )

        return SpeakerIdentificationResult(
            speakers=speakers,
            summary=summary,
            database_stats=self.matcher.stats(),
        )

    # ---------------------------------------------------------------- helpers

    def _file_words_per_minute(self, transcript: TranscriptResult, duration: float) -> float:
        count = len(transcript.words) or len(transcript.full_text.split())
        return count / duration * 60 if duration > 0 else 0.0

    def _resolve(self, source_tag: str, span: TimeRange, word_count: int,
                 characteristics, style, default_note: str) -> IdentifiedSpeaker:
        fingerprint = self.engine.fingerprint(characteristics, style)
        match = self.matcher.match(fingerprint)

        if match:
            speaker_id = match.speaker_id
            name = match.record.profile.get("name") or f"Speaker {source_tag}"
            confidence = match.similarity
            note = f"Recognized from database ({match.similarity * 100:.1f}% match)"
        else:
            speaker_id = mint_speaker_id(source_tag)
            name = f"Speaker {source_tag}"
            confidence = settings.SPEAKER_SIMILARITY_THRESHOLD
            note = default_note

        characteristics_dict, style_dict = self.engine.as_dicts(characteristics, style)
        profile = {
            "name": name,
            "word_count": word_count,
            "speaking_time": round(span.duration, 2),
            "words_per_minute": style.words_per_minute,
            "average_word_length": style.average_word_length,
            "description": style.description,
            "confidence": confidence,
            "is_recognized": match is not None,
        }
        self.matcher.upsert(speaker_id, fingerprint, profile, characteristics_dict, style_dict)

        return IdentifiedSpeaker(
            speaker_id=speaker_id,
            source_tag=source_tag,
            name=name,
            is_recognized=match is not None,
            confidence=confidence,
            start_time=span.start_seconds,
            end_time=span.end_seconds,
            word_count=word_count,
            fingerprint_hash=fingerprint.hash,
            characteristics=characteristics_dict,
            speaking_style=style_dict,
            match_similarity=match.similarity if match else None,
            note=note,
        )

    def _identify_diarized(self, audio_path: Path, transcript: TranscriptResult) -> List[IdentifiedSpeaker]:
        groups: Dict[int, List[TranscriptWord]] = OrderedDict()
        for word in transcript.words:
            if word.speaker_tag is not None:
                groups.setdefault(word.speaker_tag, []).append(word)

        file_wpm = self._file_words_per_minute(transcript, transcript.duration_seconds)
        identified = []

        for tag, words in groups.items():
            span = TimeRange.spanning((w.start_time for w in words), (w.end_time for w in words))
            if span is None:
                logger.warning(f"No valid time range for Speaker {tag}, skipping")
                continue

            segment_path = self.work_dir / f"{audio_path.stem}_{uuid.uuid4().hex[:8]}_speaker_{tag}.wav"
            try:
                self.transcoder.split_segment(audio_path, span.start_seconds, span.duration, segment_path)
                probe = self.transcoder.probe(segment_path)
                loudness = self.transcoder.measure_loudness(segment_path)

                characteristics = self.engine.characteristics(
                    probe, loudness, file_wpm, duration_seconds=span.duration
                )
                style = self.engine.speaking_style([w.text for w in words], span.duration, characteristics)
                identified.append(self._resolve(str(tag), span, len(words), characteristics, style, ""))
            except Exception as e:
                logger.warning(f"Error analyzing Speaker {tag}: {e}")
            finally:
                segment_path.unlink(missing_ok=True)

        return identified

    def _identify_whole_file(self, audio_path: Path, transcript: TranscriptResult) -> IdentifiedSpeaker:
        probe = self.transcoder.probe(audio_path)
        duration = probe.duration_seconds or transcript.duration_seconds
        if duration <= 0:
            raise UnsupportedInputError(f"{audio_path.name} has no measurable duration")
        loudness = self.transcoder.measure_loudness(audio_path)

        characteristics = self.engine.characteristics(
            probe, loudness, self._file_words_per_minute(transcript, duration), duration_seconds=duration
        )
        tokens = [w.text for w in transcript.words] or transcript.full_text.split()
        style = self.engine.speaking_style(tokens, duration, characteristics, text=transcript.full_text)

        span = TimeRange(0.0, duration)
        return self._resolve(
            "1", span, style.word_count, characteristics, style,
            "Basic analysis (no speaker diarization available)",
        )


def identify_speakers(audio_path: str, transcript: TranscriptResult) -> SpeakerIdentificationResult:
    """Standalone API using the default on-disk voice print store."""
    return SpeakerIdentificationService().identify(Path(audio_path), transcript)
