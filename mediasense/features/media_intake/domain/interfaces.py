from abc import ABC, abstractmethod
from pathlib import Path
from mediasense.core.common.enums import MediaType

class IHasher(ABC):
    @abstractmethod
    def calculate_sha256(self, file_path: Path) -> str:
        pass

class IMediaInspector(ABC):
    """
    Classifies and validates local media files.
    """
    @abstractmethod
    def determine_media_type(self, path: Path) -> MediaType:
        pass

    @abstractmethod
    def validate(self, path: Path) -> MediaType:
        """
        Ensures the file exists, is non-empty and has a supported format.

        Raises:
            UnsupportedInputError: when any of those checks fail.
        """
        pass

class IMediaDownloader(ABC):
    @abstractmethod
    def download(self, url: str, dest_dir: Path) -> Path:
        """
        Fetches a remote media file into dest_dir and returns the local path.
        """
        pass
