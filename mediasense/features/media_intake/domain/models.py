from dataclasses import dataclass
from pathlib import Path
from mediasense.core.common.enums import MediaType

VIDEO_EXTENSIONS = frozenset({".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv"})
AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".m4a", ".aac", ".ogg", ".flac", ".wma"})
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".bmp", ".webp"})

@dataclass(frozen=True)
class MediaSource:
    """
    A validated local media file ready for analysis.
    """
    path: Path
    media_type: MediaType
    file_hash: str
    size_bytes: int
    downloaded: bool = False
