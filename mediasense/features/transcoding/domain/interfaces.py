from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from .models import AudioProfile, ProbeResult

class IMediaTranscoder(ABC):
    """
    Contract for the transcode/demux collaborator.
    Every operation writes to an explicit output path and returns it.
    """
    @abstractmethod
    def probe(self, path: Path) -> ProbeResult:
        """
        Reads duration, audio stream parameters and size.

        Raises:
            UnsupportedInputError: if the file cannot be parsed as media.
        """
        pass

    @abstractmethod
    def extract_audio(self, video_path: Path, output_path: Path, profile: AudioProfile) -> Path:
        """
        Demuxes and re-encodes the audio track of a video.

        Args:
            video_path: Path to the source video.
            output_path: Where the audio file should be written.
            profile: Codec, rate, channel and filter settings.

        Returns:
            The output path.
        """
        pass

    @abstractmethod
    def split_segment(self, path: Path, start_seconds: float, duration_seconds: float, output_path: Path) -> Path:
        """Cuts [start, start+duration) into a 16kHz mono WAV."""
        pass

    @abstractmethod
    def extract_frame(self, video_path: Path, timestamp_seconds: float, output_path: Path,
                      width: int = 1920, height: int = 1080) -> Path:
        """Grabs one JPEG frame, letterboxed to width x height."""
        pass

    @abstractmethod
    def measure_loudness(self, path: Path) -> Optional[float]:
        """Mean volume in dBFS, or None if it could not be measured."""
        pass
