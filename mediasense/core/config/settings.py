# File: mediasense/core/config/settings.py

import os
import shutil
from pathlib import Path


class Settings:
    # --- Paths ---
    # mediasense/core/config/settings.py -> config -> core -> mediasense -> ROOT
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent.parent
    DATA_DIR: Path = Path(os.getenv("MEDIASENSE_DATA_DIR", str(BASE_DIR / "data")))
    ARTIFACTS_DIR: Path = DATA_DIR / "artifacts"
    TEMP_DIR: Path = DATA_DIR / "tmp"
    OCR_FRAMES_DIR: Path = TEMP_DIR / "ocr_frames"
    VOICE_PRINT_DB_PATH: Path = Path(os.getenv("VOICE_PRINT_DB_PATH", str(DATA_DIR / "voice_prints.json")))

    # --- Database ---
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "password")
    POSTGRES_SERVER: str = os.getenv("POSTGRES_SERVER", "localhost")
    POSTGRES_PORT: str = os.getenv("POSTGRES_PORT", "5432")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "mediasense_db")

    @property
    def DATABASE_URL(self) -> str:
        explicit = os.getenv("DATABASE_URL")
        if explicit:
            return explicit

        if os.getenv("USE_SQLITE", "false").lower() == "true":
            return "sqlite:///./test_mediasense.db"

        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # --- External Tools ---
    FFMPEG_BINARY: str = os.getenv("FFMPEG_BINARY_PATH", shutil.which("ffmpeg") or "ffmpeg")
    FFPROBE_BINARY: str = os.getenv("FFPROBE_BINARY_PATH", shutil.which("ffprobe") or "ffprobe")

    # --- Credentials ---
    # Read lazily so tests and CLI runs can export them after import.
    @property
    def OPENAI_API_KEY(self) -> str:
        return os.getenv("OPENAI_API_KEY", "")

    @property
    def GOOGLE_APPLICATION_CREDENTIALS(self) -> str:
        return os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "")

    # --- Speech Providers ---
    WHISPER_MODEL_NAME: str = os.getenv("WHISPER_MODEL_NAME", "whisper-1")
    SPEECH_LANGUAGE_CODE: str = os.getenv("SPEECH_LANGUAGE_CODE", "en-US")
    GOOGLE_SPEECH_MODEL: str = os.getenv("GOOGLE_SPEECH_MODEL", "latest_long")
    MIN_DIARIZATION_SPEAKERS: int = int(os.getenv("MIN_DIARIZATION_SPEAKERS", "1"))
    MAX_DIARIZATION_SPEAKERS: int = int(os.getenv("MAX_DIARIZATION_SPEAKERS", "10"))

    # --- Provider Routing ---
    GOOGLE_SYNC_MAX_SECONDS: float = 30.0
    GOOGLE_SYNC_MAX_BYTES: int = 5 * 1024 * 1024
    WHISPER_MAX_BYTES: int = 25 * 1024 * 1024
    WHISPER_MAX_SECONDS: float = 600.0
    CHUNK_SECONDS: float = float(os.getenv("CHUNK_SECONDS", "120"))
    LONG_RUNNING_POLL_INTERVAL: float = float(os.getenv("LONG_RUNNING_POLL_INTERVAL", "5"))
    LONG_RUNNING_MAX_POLLS: int = int(os.getenv("LONG_RUNNING_MAX_POLLS", "60"))
    MIN_AUDIO_BYTES: int = 1000

    # --- Concurrency ---
    CHUNK_CONVERSION_WORKERS: int = int(os.getenv("CHUNK_CONVERSION_WORKERS", "4"))
    ANALYSIS_STAGE_WORKERS: int = int(os.getenv("ANALYSIS_STAGE_WORKERS", "4"))

    # --- Network ---
    DOWNLOAD_TIMEOUT_SECONDS: float = float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "30"))

    # --- Speaker Matching ---
    SPEAKER_SIMILARITY_THRESHOLD: float = 0.75

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def ensure_dirs(self):
        """Creates necessary data directories if they don't exist."""
        self.DATA_DIR.mkdir(parents=True, exist_ok=True)
        self.ARTIFACTS_DIR.mkdir(parents=True, exist_ok=True)
        self.TEMP_DIR.mkdir(parents=True, exist_ok=True)
        self.OCR_FRAMES_DIR.mkdir(parents=True, exist_ok=True)


settings = Settings()
