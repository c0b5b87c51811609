import logging
import uuid
from pathlib import Path
from urllib.parse import urlparse

import requests

from mediasense.core.config.settings import settings
from mediasense.core.errors import TransientProviderError, UnsupportedInputError
from ..domain.interfaces import IMediaDownloader

logger = logging.getLogger(__name__)

class RequestsDownloader(IMediaDownloader):
    def __init__(self, timeout: float = None, session: requests.Session = None):
        self.timeout = timeout if timeout is not None else settings.DOWNLOAD_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def download(self, url: str, dest_dir: Path) -> Path:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https"):
            raise UnsupportedInputError(f"Unsupported URL scheme: {url}")

        dest_dir.mkdir(parents=True, exist_ok=True)
        name = Path(parsed.path).name or "download"
        output_path = dest_dir / f"{uuid.uuid4().hex[:8]}_{name}"

        logger.info(f"Downloading {url} -> {output_path}")

        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with open(output_path, "wb") as f:
                    for block in response.iter_content(chunk_size=65536):
                        if block:
                            f.write(block)
        except requests.HTTPError as e:
            output_path.unlink(missing_ok=True)
            status = e.response.status_code if e.response is not None else 0
            if status == 429 or status >= 500:
                raise TransientProviderError(f"Download failed ({status}): {url}", provider="http") from e
            raise UnsupportedInputError(f"Download rejected ({status}): {url}") from e
        except (requests.ConnectionError, requests.Timeout) as e:
            output_path.unlink(missing_ok=True)
            raise TransientProviderError(f"Download failed: {e}", provider="http") from e

        logger.info(f"Downloaded {output_path.stat().st_size} bytes from {url}")
        return output_path
