# File: mediasense/features/transcription/data/openai_whisper_adapter.py
import logging
import uuid
from pathlib import Path
from typing import Optional

import openai
from openai import OpenAI

from mediasense.core.config.settings import settings
from mediasense.core.errors import ConfigurationError, ProviderError, TransientProviderError
from mediasense.features.transcoding.data.ffmpeg_adapter import FFmpegAdapter
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from mediasense.features.transcoding.domain.models import AudioProfile
from mediasense.features.transcoding.service.api import WHISPER_NATIVE_EXTENSIONS
from ..domain.interfaces import IWhisperBackend
from ..domain.models import RecognitionPayload, TranscriptWord

logger = logging.getLogger(__name__)


class OpenAIWhisperAdapter(IWhisperBackend):
    """
    Hosted Whisper via the openai SDK. Word timestamps, no diarization.
    """

    def __init__(self, client: Optional[OpenAI] = None, transcoder: Optional[IMediaTranscoder] = None):
        self._client = client
        self.transcoder = transcoder or FFmpegAdapter()

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not settings.OPENAI_API_KEY:
                raise ConfigurationError("OPENAI_API_KEY is not set")
            self._client = OpenAI(api_key=settings.OPENAI_API_KEY)
        return self._client

    def _ensure_supported_format(self, audio_path: Path) -> Optional[Path]:
        """Re-encodes to 16kHz mono WAV when the extension is not accepted upstream."""
        if audio_path.suffix.lower() in WHISPER_NATIVE_EXTENSIONS:
            return None
        target = settings.TEMP_DIR / f"{audio_path.stem}_{uuid.uuid4().hex[:8]}_whisper.wav"
        logger.info(f"Converting {audio_path.name} to WAV for Whisper")
        return self.transcoder.extract_audio(audio_path, target, AudioProfile())

    def transcribe(self, audio_path: Path, timestamp_granularity: str = "word") -> RecognitionPayload:
        client = self.client
        converted = self._ensure_supported_format(audio_path)
        upload_path = converted or audio_path

        logger.info(f"Requesting Whisper ({settings.WHISPER_MODEL_NAME}) for {upload_path.name}...")

        try:
            with open(upload_path, "rb") as f:
                response = client.audio.transcriptions.create(
                    model=settings.WHISPER_MODEL_NAME,
                    file=f,
                    response_format="verbose_json",
                    timestamp_granularities=[timestamp_granularity],
                )
        except openai.AuthenticationError as e:
            raise ConfigurationError(f"OpenAI rejected the API key: {e}") from e
        except (openai.RateLimitError, openai.InternalServerError, openai.APIConnectionError) as e:
            raise TransientProviderError(f"Whisper temporarily unavailable: {e}", provider="openai") from e
        except openai.APIError as e:
            raise ProviderError(f"Whisper transcription failed: {e}", provider="openai") from e
        finally:
            if converted is not None:
                converted.unlink(missing_ok=True)

        words = [
            TranscriptWord(text=w.word.strip(), start_time=float(w.start), end_time=float(w.end))
            for w in (getattr(response, "words", None) or [])
        ]
        text = (getattr(response, "text", "") or "").strip()

        return RecognitionPayload(texts=[text] if text else [], words=words)
