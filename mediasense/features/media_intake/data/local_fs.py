import mimetypes
from pathlib import Path
from mediasense.core.common.enums import MediaType
from mediasense.core.errors import UnsupportedInputError
from ..domain.interfaces import IMediaInspector
from ..domain.models import VIDEO_EXTENSIONS, AUDIO_EXTENSIONS, IMAGE_EXTENSIONS

class LocalMediaInspector(IMediaInspector):

    def determine_media_type(self, path: Path) -> MediaType:
        extension = path.suffix.lower()
        if extension in VIDEO_EXTENSIONS:
            return MediaType.VIDEO
        if extension in AUDIO_EXTENSIONS:
            return MediaType.AUDIO
        if extension in IMAGE_EXTENSIONS:
            return MediaType.IMAGE

        mime, _ = mimetypes.guess_type(path)
        if not mime:
            return MediaType.UNKNOWN

        if mime.startswith("video"):
            return MediaType.VIDEO
        if mime.startswith("audio"):
            return MediaType.AUDIO
        if mime.startswith("image"):
            return MediaType.IMAGE

        return MediaType.UNKNOWN

    def validate(self, path: Path) -> MediaType:
        if not path.exists() or not path.is_file():
            raise UnsupportedInputError(f"Media file not found: {path}")

        if path.stat().st_size == 0:
            raise UnsupportedInputError(f"Media file is empty: {path}")

        media_type = self.determine_media_type(path)
        if media_type == MediaType.UNKNOWN:
            raise UnsupportedInputError(f"Unsupported file format: {path.suffix or path.name}")

        return media_type
