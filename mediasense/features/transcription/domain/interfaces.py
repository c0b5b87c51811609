from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any
from .models import RecognitionPayload, SpeechRequest
from .outcomes import Outcome, PollStatus

class IGoogleSpeechBackend(ABC):
    """
    Contract for the diarizing speech back-end.
    Never raises for provider rejections; they come back as tagged outcomes.
    """
    @abstractmethod
    def recognize(self, audio: bytes, request: SpeechRequest) -> Outcome:
        """
        Synchronous recognition of short inline audio.

        Returns:
            Ok(RecognitionPayload), NeedsFallback(AUDIO_TOO_LONG | TRANSIENT) or Fatal.
        """
        pass

    @abstractmethod
    def start_long_running(self, audio: bytes, request: SpeechRequest) -> Outcome:
        """
        Starts asynchronous recognition.

        Returns:
            Ok(operation handle), NeedsFallback(INLINE_LIMIT | TRANSIENT) or Fatal.
        """
        pass

    @abstractmethod
    def poll_operation(self, handle: Any) -> PollStatus:
        pass

    @abstractmethod
    def cancel_operation(self, handle: Any) -> None:
        """Best-effort remote abort."""
        pass

class IWhisperBackend(ABC):
    """
    Contract for the non-diarizing speech back-end.
    Allows us to swap the hosted Whisper endpoint for another word-timestamp ASR later.
    """
    @abstractmethod
    def transcribe(self, audio_path: Path, timestamp_granularity: str = "word") -> RecognitionPayload:
        """
        Transcribes the audio file at the given path.

        Raises:
            ConfigurationError: credentials missing.
            TransientProviderError: 5xx / rate limited.
            ProviderError: any other rejection.
        """
        pass
