# File: mediasense/features/transcription/service/router.py
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from mediasense.core.common.enums import ProviderUsed, RouterState, TranscriptionProvider
from mediasense.core.config.settings import settings
from mediasense.core.errors import (
    ConfigurationError,
    OperationCancelled,
    ProviderError,
    TranscriptionTimeoutError,
    UnsupportedInputError,
)
from mediasense.features.chunking.service.splitter import ChunkSplitter
from ..domain.interfaces import IGoogleSpeechBackend, IWhisperBackend
from ..domain.models import (
    WARNING_FALLBACK_NO_DIARIZATION,
    WARNING_LONG_AUDIO_WHISPER,
    WARNING_NO_RESULTS,
    RecognitionPayload,
    SpeechRequest,
    TranscriptResult,
)
from ..domain.outcomes import FallbackReason, NeedsFallback, Ok, Outcome
from .stitcher import TranscriptStitcher, build_speaker_segments, join_provider_results

logger = logging.getLogger(__name__)

_TERMINAL = (RouterState.DONE, RouterState.FAILED)


@dataclass
class _Run:
    """Mutable bookkeeping for one pass through the state machine."""
    audio_path: Path
    provider: TranscriptionProvider
    size_bytes: int
    duration_seconds: float
    cancel_event: threading.Event
    warnings: List[str] = field(default_factory=list)
    trace: List[str] = field(default_factory=list)
    result: Optional[TranscriptResult] = None
    error: Optional[Exception] = None

    def warn(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)


class ProviderRouter:
    """
    Chooses a speech back-end, and whether chunking is needed, by walking an
    explicit state machine:

        Idle -> Routing -> {GoogleSync, GoogleLongRunning, WhisperDirect, WhisperChunked} -> Done | Failed

    Produces exactly one TranscriptResult or raises exactly one terminal error.
    """

    def __init__(self,
                 google: IGoogleSpeechBackend,
                 whisper: IWhisperBackend,
                 splitter: ChunkSplitter,
                 stitcher: Optional[TranscriptStitcher] = None,
                 speech_request: Optional[SpeechRequest] = None,
                 chunk_seconds: Optional[float] = None,
                 poll_interval: Optional[float] = None,
                 max_polls: Optional[int] = None,
                 work_dir: Optional[Path] = None):
        self.google = google
        self.whisper = whisper
        self.splitter = splitter
        self.stitcher = stitcher or TranscriptStitcher()
        self.speech_request = speech_request or SpeechRequest(
            language_code=settings.SPEECH_LANGUAGE_CODE,
            model=settings.GOOGLE_SPEECH_MODEL,
            min_speakers=settings.MIN_DIARIZATION_SPEAKERS,
            max_speakers=settings.MAX_DIARIZATION_SPEAKERS,
        )
        self.chunk_seconds = chunk_seconds or settings.CHUNK_SECONDS
        self.poll_interval = settings.LONG_RUNNING_POLL_INTERVAL if poll_interval is None else poll_interval
        self.max_polls = max_polls or settings.LONG_RUNNING_MAX_POLLS
        self.work_dir = work_dir or settings.TEMP_DIR / "chunks"

    # ------------------------------------------------------------------ public

    def transcribe(self,
                   audio_path: Path,
                   provider: TranscriptionProvider,
                   size_bytes: int,
                   duration_seconds: float,
                   cancel_event: Optional[threading.Event] = None) -> TranscriptResult:
        run = _Run(
            audio_path=audio_path,
            provider=TranscriptionProvider(provider),
            size_bytes=size_bytes,
            duration_seconds=duration_seconds,
            cancel_event=cancel_event or threading.Event(),
        )

        handlers = {
            RouterState.IDLE: lambda r: RouterState.ROUTING,
            RouterState.ROUTING: self._route,
            RouterState.GOOGLE_SYNC: self._google_sync,
            RouterState.GOOGLE_LONG_RUNNING: self._google_long_running,
            RouterState.WHISPER_DIRECT: self._whisper_direct,
            RouterState.WHISPER_CHUNKED: self._whisper_chunked,
        }

        state = RouterState.IDLE
        while True:
            run.trace.append(state.value)
            if state in _TERMINAL:
                break
            try:
                next_state = handlers[state](run)
            except Exception as e:
                run.error = e
                next_state = RouterState.FAILED
            logger.debug(f"Router {state.value} -> {next_state.value}")
            state = next_state

        if state == RouterState.FAILED:
            logger.error(f"Transcription failed for {audio_path.name} via {' -> '.join(run.trace)}: {run.error}")
            raise run.error

        result = run.result
        if not result.full_text.strip() and not result.words:
            run.warn(WARNING_NO_RESULTS)
        result.warnings = list(run.warnings)
        result.state_trace = list(run.trace)
        result.duration_seconds = duration_seconds

        logger.info(f"Transcribed {audio_path.name} with {result.provider_used.value} ({len(result.words)} words)")
        return result

    # ----------------------------------------------------------------- routing

    def _whisper_state(self, run: _Run) -> RouterState:
        if run.size_bytes > settings.WHISPER_MAX_BYTES or run.duration_seconds > settings.WHISPER_MAX_SECONDS:
            return RouterState.WHISPER_CHUNKED
        return RouterState.WHISPER_DIRECT

    def _route(self, run: _Run) -> RouterState:
        if run.size_bytes < settings.MIN_AUDIO_BYTES:
            raise UnsupportedInputError(
                f"Audio file too small ({run.size_bytes} bytes), likely corrupted or empty"
            )

        if run.provider == TranscriptionProvider.OPENAI:
            return self._whisper_state(run)

        too_big_for_google = (
            run.duration_seconds > settings.GOOGLE_SYNC_MAX_SECONDS
            or run.size_bytes > settings.GOOGLE_SYNC_MAX_BYTES
        )
        if too_big_for_google:
            logger.info(
                f"{run.audio_path.name} is {run.duration_seconds:.1f}s / {run.size_bytes} bytes; "
                f"skipping Google for Whisper"
            )
            run.warn(WARNING_LONG_AUDIO_WHISPER)
            return self._whisper_state(run)

        return RouterState.GOOGLE_SYNC

    def _fall_back_to_whisper(self, run: _Run, why: str) -> RouterState:
        logger.warning(f"Falling back to Whisper: {why}")
        run.warn(WARNING_FALLBACK_NO_DIARIZATION)
        return self._whisper_state(run)

    def _on_google_outcome(self, run: _Run, outcome: Outcome, provider_used: ProviderUsed) -> RouterState:
        """Shared handling for the terminal outcome of either Google path."""
        if isinstance(outcome, Ok):
            payload: RecognitionPayload = outcome.value
            run.result = TranscriptResult(
                full_text=join_provider_results(payload),
                provider_used=provider_used,
                words=list(payload.words),
                speaker_segments=build_speaker_segments(payload.words),
            )
            return RouterState.DONE

        if isinstance(outcome, NeedsFallback):
            if outcome.reason == FallbackReason.AUDIO_TOO_LONG and provider_used == ProviderUsed.GOOGLE_SYNC:
                logger.info("Audio too long for sync API, switching to LongRunningRecognize")
                return RouterState.GOOGLE_LONG_RUNNING
            if outcome.reason == FallbackReason.TRANSIENT:
                run.warn(f"Google Speech temporarily unavailable: {outcome.detail}")
            return self._fall_back_to_whisper(run, f"{outcome.reason.value} {outcome.detail}".strip())

        error = outcome.error
        fallback_allowed = (
            run.provider == TranscriptionProvider.AUTO
            and isinstance(error, (ProviderError, ConfigurationError))
        )
        if fallback_allowed:
            run.warn(f"Google Speech failed: {error}")
            return self._fall_back_to_whisper(run, str(error))
        raise error

    # ------------------------------------------------------------------ google

    def _google_sync(self, run: _Run) -> RouterState:
        audio = run.audio_path.read_bytes()
        outcome = self.google.recognize(audio, self.speech_request)
        return self._on_google_outcome(run, outcome, ProviderUsed.GOOGLE_SYNC)

    def _google_long_running(self, run: _Run) -> RouterState:
        audio = run.audio_path.read_bytes()
        started = self.google.start_long_running(audio, self.speech_request)
        if not isinstance(started, Ok):
            return self._on_google_outcome(run, started, ProviderUsed.GOOGLE_LONG_RUNNING)

        handle = started.value
        for attempt in range(1, self.max_polls + 1):
            if run.cancel_event.wait(self.poll_interval):
                self._abort_operation(handle)
                raise OperationCancelled("Long-running recognition cancelled by caller")

            status = self.google.poll_operation(handle)
            if status.done:
                return self._on_google_outcome(run, status.outcome, ProviderUsed.GOOGLE_LONG_RUNNING)

            logger.info(f"LongRunningRecognize in progress... (attempt {attempt}/{self.max_polls})")

        self._abort_operation(handle)
        raise TranscriptionTimeoutError(
            f"LongRunningRecognize did not finish after {self.max_polls} polls "
            f"({self.max_polls * self.poll_interval:.0f}s)"
        )

    def _abort_operation(self, handle) -> None:
        try:
            self.google.cancel_operation(handle)
        except Exception as e:
            logger.warning(f"Remote cancel of long-running operation failed: {e}")

    # ----------------------------------------------------------------- whisper

    def _whisper_direct(self, run: _Run) -> RouterState:
        payload = self.whisper.transcribe(run.audio_path, timestamp_granularity="word")
        run.result = TranscriptResult(
            full_text=" ".join(t for t in payload.texts if t.strip()),
            provider_used=ProviderUsed.WHISPER_DIRECT,
            words=list(payload.words),
        )
        return RouterState.DONE

    def _whisper_chunked(self, run: _Run) -> RouterState:
        plan = self.splitter.split(run.audio_path, run.duration_seconds, self.chunk_seconds, self.work_dir)

        results: Dict[int, RecognitionPayload] = {}
        failures: Dict[int, Exception] = {}
        try:
            # Index order is the text order.
            for chunk in plan.chunks:
                if run.cancel_event.is_set():
                    raise OperationCancelled("Chunked transcription cancelled by caller")
                try:
                    results[chunk.index] = self.whisper.transcribe(chunk.file_path, timestamp_granularity="word")
                    logger.info(f"Chunk {chunk.index + 1}/{plan.expected_count} transcribed")
                except ConfigurationError:
                    raise
                except ProviderError as e:
                    failures[chunk.index] = e
                    logger.warning(f"Chunk {chunk.index + 1}/{plan.expected_count} failed to transcribe: {e}")

            if not results:
                first = next(iter(failures.values()), None)
                raise ProviderError(f"All {plan.expected_count} chunks failed to transcribe: {first}", provider="openai")

            stitched = self.stitcher.stitch(plan, results)
        finally:
            ChunkSplitter.cleanup(plan)

        if stitched.missing_indices:
            run.warn(f"{len(stitched.missing_indices)} of {plan.expected_count} audio chunks could not be transcribed")

        run.result = TranscriptResult(
            full_text=stitched.full_text,
            provider_used=ProviderUsed.WHISPER_CHUNKED,
            words=stitched.words,
            dropped_chunks=stitched.missing_indices,
        )
        return RouterState.DONE
