from pathlib import Path
from mediasense.core.common.enums import TranscriptionProvider
from ..domain.models import AudioProfile, GOOGLE_SPEECH_FILTERS
from ..data.ffmpeg_adapter import FFmpegAdapter

# Extensions the Whisper endpoint accepts without re-encoding.
WHISPER_NATIVE_EXTENSIONS = frozenset({".mp3", ".mp4", ".mpeg", ".mpga", ".m4a", ".wav", ".webm"})


def speech_profile(provider: TranscriptionProvider) -> AudioProfile:
    """LINEAR16 16kHz mono, with the speech filter chain when Google will hear it."""
    if provider == TranscriptionProvider.GOOGLE:
        return AudioProfile(filters=GOOGLE_SPEECH_FILTERS)
    return AudioProfile()


def extract_audio_from_video(video_path: str, output_path: str,
                             provider: TranscriptionProvider = TranscriptionProvider.AUTO) -> Path:
    """
    Standalone API: extracts a speech-ready audio track from a video file.
    """
    adapter = FFmpegAdapter()
    return adapter.extract_audio(Path(video_path), Path(output_path), speech_profile(provider))
