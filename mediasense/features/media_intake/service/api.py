import logging
from pathlib import Path
from typing import Optional

from mediasense.core.config.settings import settings
from ..domain.models import MediaSource
from ..data.hasher import SHA256Hasher
from ..data.local_fs import LocalMediaInspector
from ..data.http_downloader import RequestsDownloader

logger = logging.getLogger(__name__)

class MediaIntakeService:
    """
    Facade for the Intake Feature.
    Resolves a local path or URL into a validated, hashed MediaSource.
    """
    def __init__(self, downloader=None, inspector=None, hasher=None):
        self.downloader = downloader or RequestsDownloader()
        self.inspector = inspector or LocalMediaInspector()
        self.hasher = hasher or SHA256Hasher()

    def resolve(self, location: str, download_dir: Optional[Path] = None) -> MediaSource:
        downloaded = False
        if location.startswith(("http://", "https://")):
            path = self.downloader.download(location, download_dir or settings.TEMP_DIR / "downloads")
            downloaded = True
        else:
            path = Path(location)

        media_type = self.inspector.validate(path)
        file_hash = self.hasher.calculate_sha256(path)

        logger.info(f"Intake: {path.name} [{media_type.value}] sha256={file_hash[:12]}")

        return MediaSource(
            path=path,
            media_type=media_type,
            file_hash=file_hash,
            size_bytes=path.stat().st_size,
            downloaded=downloaded
        )
