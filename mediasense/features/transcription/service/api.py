# File: mediasense/features/transcription/service/api.py
import logging
import threading
import uuid
from pathlib import Path
from typing import Optional

from mediasense.core.common.enums import TranscriptionProvider
from mediasense.core.config.settings import settings
from mediasense.features.chunking.service.splitter import ChunkSplitter
from mediasense.features.transcoding.data.ffmpeg_adapter import FFmpegAdapter
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from mediasense.features.transcoding.service.api import speech_profile
from ..data.google_speech_adapter import GoogleSpeechAdapter
from ..data.openai_whisper_adapter import OpenAIWhisperAdapter
from ..domain.models import TranscriptResult
from .router import ProviderRouter

logger = logging.getLogger(__name__)


def build_router(transcoder: Optional[IMediaTranscoder] = None) -> ProviderRouter:
    """Wires the production back-ends into a router."""
    transcoder = transcoder or FFmpegAdapter()
    return ProviderRouter(
        google=GoogleSpeechAdapter(),
        whisper=OpenAIWhisperAdapter(transcoder=transcoder),
        splitter=ChunkSplitter(transcoder),
    )


class TranscriptionService:
    """
    Facade for the Transcription Feature.
    Probes the audio, then lets the router pick the back-end.
    """

    def __init__(self, router: Optional[ProviderRouter] = None, transcoder: Optional[IMediaTranscoder] = None):
        self.transcoder = transcoder or FFmpegAdapter()
        self.router = router or build_router(self.transcoder)

    def extract_speech_audio(self, video_path: Path, provider: TranscriptionProvider) -> Path:
        """Demuxes a video's audio track into TEMP_DIR, tuned for the requested provider."""
        output = settings.TEMP_DIR / f"{video_path.stem}_{uuid.uuid4().hex[:8]}.wav"
        return self.transcoder.extract_audio(video_path, output, speech_profile(provider))

    def transcribe_file(self,
                        audio_path: Path,
                        provider: TranscriptionProvider = TranscriptionProvider.AUTO,
                        cancel_event: Optional[threading.Event] = None) -> TranscriptResult:
        probe = self.transcoder.probe(audio_path)
        logger.info(f"Transcribing {audio_path.name}: {probe.duration_seconds:.1f}s, {probe.size_bytes} bytes, provider={provider}")
        return self.router.transcribe(
            audio_path,
            TranscriptionProvider(provider),
            size_bytes=probe.size_bytes,
            duration_seconds=probe.duration_seconds,
            cancel_event=cancel_event,
        )


def transcribe_audio(audio_path: str, provider: str = "auto") -> TranscriptResult:
    """
    Standalone API for running transcription directly.
    Useful for testing or CLI tools without the full Job system.
    """
    return TranscriptionService().transcribe_file(Path(audio_path), TranscriptionProvider(provider))
