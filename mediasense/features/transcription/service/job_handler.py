# File: mediasense/features/transcription/service/job_handler.py
import logging
from pathlib import Path

from mediasense.core.common.enums import MediaType, TranscriptionProvider
from mediasense.core.errors import UnsupportedInputError
from .api import TranscriptionService

logger = logging.getLogger(__name__)

class TranscriptionHandler:
    """
    Worker class responsible for executing TRANSCRIPTION jobs.
    Accepts audio directly, or demuxes the audio track of a video first.
    """

    def __init__(self, service: TranscriptionService = None):
        self.service = service or TranscriptionService()

    def handle(self, file_path: str, media_type: MediaType, params: dict) -> dict:
        logger.info(f"Processing Transcription for {file_path}")

        provider = TranscriptionProvider(params.get("provider", TranscriptionProvider.AUTO.value))
        source = Path(file_path)

        if media_type == MediaType.AUDIO:
            result = self.service.transcribe_file(source, provider)
        elif media_type == MediaType.VIDEO:
            audio_path = self.service.extract_speech_audio(source, provider)
            try:
                result = self.service.transcribe_file(audio_path, provider)
            finally:
                audio_path.unlink(missing_ok=True)
        else:
            raise UnsupportedInputError(f"Cannot transcribe media of type {media_type.value}")

        logger.info(f"Transcription finished via {result.provider_used.value}: {len(result.words)} words")
        return result.to_dict()
