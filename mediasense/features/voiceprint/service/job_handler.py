# File: mediasense/features/voiceprint/service/job_handler.py
import logging
from pathlib import Path

from mediasense.core.common.enums import MediaType, TranscriptionProvider
from mediasense.core.errors import UnsupportedInputError
from mediasense.features.transcription.service.api import TranscriptionService
from .api import SpeakerIdentificationService

logger = logging.getLogger(__name__)

class SpeakerIdentificationHandler:
    """
    Worker for JOB_TYPE.SPEAKER_IDENTIFICATION.
    Transcribes first, since both diarization and speaking style come from the transcript.
    """

    def __init__(self, transcription: TranscriptionService = None, speakers: SpeakerIdentificationService = None):
        self.transcription = transcription or TranscriptionService()
        self.speakers = speakers or SpeakerIdentificationService(transcoder=self.transcription.transcoder)

    def handle(self, file_path: str, media_type: MediaType, params: dict) -> dict:
        logger.info(f"Processing Speaker Identification for {file_path}")
        provider = TranscriptionProvider(params.get("provider", TranscriptionProvider.AUTO.value))
        source = Path(file_path)

        if media_type == MediaType.AUDIO:
            audio_path, owned = source, False
        elif media_type == MediaType.VIDEO:
            audio_path, owned = self.transcription.extract_speech_audio(source, provider), True
        else:
            raise UnsupportedInputError(f"Cannot identify speakers in media of type {media_type.value}")

        try:
            transcript = self.transcription.transcribe_file(audio_path, provider)
            result = self.speakers.identify(audio_path, transcript)
        finally:
            if owned:
                audio_path.unlink(missing_ok=True)

        return {
            "provider_used": transcript.provider_used.value,
            "warnings": transcript.warnings,
            **result.to_dict(),
        }
