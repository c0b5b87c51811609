# File: mediasense/features/transcription/data/google_speech_adapter.py
import logging
from datetime import timedelta
from typing import Any, List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import speech_v1 as speech

from mediasense.core.errors import ConfigurationError, ProviderError
from ..domain.interfaces import IGoogleSpeechBackend
from ..domain.models import RecognitionPayload, SpeechRequest, TranscriptWord
from ..domain.outcomes import Fatal, FallbackReason, NeedsFallback, Ok, Outcome, PollStatus

logger = logging.getLogger(__name__)

_TOO_LONG_MARKERS = ("too long", "LongRunningRecognize")
_INLINE_LIMIT_MARKERS = ("Inline audio exceeds duration limit", "GCS URI")


def _seconds(value: Any) -> Optional[float]:
    """proto-plus hands Durations back as timedelta; raw protobuf as seconds/nanos."""
    if value is None:
        return None
    if isinstance(value, timedelta):
        return value.total_seconds()
    if hasattr(value, "seconds"):
        return float(value.seconds) + float(getattr(value, "nanos", 0)) / 1e9
    return float(value)


def payload_from_results(results) -> RecognitionPayload:
    """
    Flattens recognition results in API order.
    With diarization on, the final result repeats every word with its speaker tag,
    so that list wins over the untagged per-result words.
    """
    texts: List[str] = []
    per_result_words: List[List[TranscriptWord]] = []

    for result in results:
        if not result.alternatives:
            continue
        alternative = result.alternatives[0]
        if alternative.transcript and alternative.transcript.strip():
            texts.append(alternative.transcript.strip())

        words = []
        for w in alternative.words:
            words.append(TranscriptWord(
                text=w.word,
                start_time=_seconds(w.start_time),
                end_time=_seconds(w.end_time),
                confidence=float(w.confidence) if w.confidence else None,
                speaker_tag=int(w.speaker_tag) if w.speaker_tag else None,
            ))
        per_result_words.append(words)

    if per_result_words and per_result_words[-1] and all(w.speaker_tag for w in per_result_words[-1]):
        words = per_result_words[-1]
    else:
        words = [w for chunk in per_result_words for w in chunk]

    return RecognitionPayload(texts=texts, words=words)


def classify_api_error(e: Exception) -> Outcome:
    """Maps a google.api_core exception onto a routing outcome."""
    message = str(e)

    if isinstance(e, google_exceptions.InvalidArgument):
        if any(marker in message for marker in _INLINE_LIMIT_MARKERS):
            return NeedsFallback(FallbackReason.INLINE_LIMIT, message)
        if any(marker in message for marker in _TOO_LONG_MARKERS):
            return NeedsFallback(FallbackReason.AUDIO_TOO_LONG, message)
        return Fatal(ProviderError(f"Google Speech rejected the request: {message}", provider="google"))

    if isinstance(e, (google_exceptions.ServerError, google_exceptions.TooManyRequests)):
        return NeedsFallback(FallbackReason.TRANSIENT, message)

    if isinstance(e, (google_exceptions.Unauthenticated, google_exceptions.PermissionDenied)):
        return Fatal(ConfigurationError(f"Google Speech credentials rejected: {message}"))

    return Fatal(ProviderError(f"Google Speech error: {message}", provider="google"))


class GoogleSpeechAdapter(IGoogleSpeechBackend):
    """
    google-cloud-speech v1 client wrapped into tagged outcomes.
    """

    def __init__(self, client: Optional[speech.SpeechClient] = None):
        self._client = client

    @property
    def client(self) -> speech.SpeechClient:
        if self._client is None:
            try:
                self._client = speech.SpeechClient()
            except auth_exceptions.DefaultCredentialsError as e:
                raise ConfigurationError(
                    "Google Speech credentials not found; set GOOGLE_APPLICATION_CREDENTIALS"
                ) from e
        return self._client

    def _build_config(self, request: SpeechRequest) -> speech.RecognitionConfig:
        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=request.sample_rate_hz,
            language_code=request.language_code,
            enable_word_time_offsets=request.enable_word_time_offsets,
            enable_automatic_punctuation=request.enable_automatic_punctuation,
            model=request.model,
            use_enhanced=request.use_enhanced,
            diarization_config=speech.SpeakerDiarizationConfig(
                enable_speaker_diarization=True,
                min_speaker_count=request.min_speakers,
                max_speaker_count=request.max_speakers,
            ),
        )

    def recognize(self, audio: bytes, request: SpeechRequest) -> Outcome:
        try:
            response = self.client.recognize(
                config=self._build_config(request),
                audio=speech.RecognitionAudio(content=audio),
            )
        except ConfigurationError as e:
            return Fatal(e)
        except google_exceptions.GoogleAPICallError as e:
            logger.warning(f"Google sync recognize failed: {e}")
            return classify_api_error(e)

        return Ok(payload_from_results(response.results))

    def start_long_running(self, audio: bytes, request: SpeechRequest) -> Outcome:
        try:
            operation = self.client.long_running_recognize(
                config=self._build_config(request),
                audio=speech.RecognitionAudio(content=audio),
            )
        except ConfigurationError as e:
            return Fatal(e)
        except google_exceptions.GoogleAPICallError as e:
            logger.warning(f"Google long-running start failed: {e}")
            return classify_api_error(e)

        logger.info(f"LongRunningRecognize operation started: {operation.operation.name}")
        return Ok(operation)

    def poll_operation(self, handle: Any) -> PollStatus:
        try:
            if not handle.done():
                return PollStatus(done=False)
        except (google_exceptions.ServerError, google_exceptions.TooManyRequests) as e:
            logger.warning(f"Transient error while polling; will retry: {e}")
            return PollStatus(done=False)
        except google_exceptions.GoogleAPICallError as e:
            return PollStatus(done=True, outcome=classify_api_error(e))

        error = handle.exception()
        if error is not None:
            if isinstance(error, google_exceptions.GoogleAPICallError):
                return PollStatus(done=True, outcome=classify_api_error(error))
            return PollStatus(done=True, outcome=Fatal(ProviderError(
                f"LongRunningRecognize operation failed: {error}", provider="google"
            )))

        return PollStatus(done=True, outcome=Ok(payload_from_results(handle.result().results)))

    def cancel_operation(self, handle: Any) -> None:
        handle.cancel()
