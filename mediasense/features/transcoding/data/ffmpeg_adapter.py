import json
import re
import subprocess
import logging
from pathlib import Path
from typing import List, Optional
from mediasense.core.config.settings import settings
from mediasense.core.errors import UnsupportedInputError
from ..domain.interfaces import IMediaTranscoder
from ..domain.models import AudioProfile, ProbeResult

logger = logging.getLogger(__name__)

_MEAN_VOLUME = re.compile(r"mean_volume:\s*(-?[\d.]+) dB")


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class FFmpegAdapter(IMediaTranscoder):

    def _run(self, cmd: List[str], action: str) -> subprocess.CompletedProcess:
        logger.debug(f"{action}: {' '.join(cmd)}")
        try:
            return subprocess.run(
                cmd,
                check=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE
            )
        except FileNotFoundError as e:
            raise RuntimeError(f"{action} failed: binary not found ({cmd[0]})") from e
        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.decode(errors="replace") if e.stderr else str(e)
            logger.error(f"FFmpeg failed during {action}: {error_msg[-500:]}")
            raise RuntimeError(f"{action} failed: {error_msg[-500:]}") from e

    def probe(self, path: Path) -> ProbeResult:
        if not path.exists():
            raise FileNotFoundError(f"Media not found: {path}")

        cmd = [
            settings.FFPROBE_BINARY,
            "-v", "error",
            "-print_format", "json",
            "-show_format",
            "-show_streams",
            str(path)
        ]
        try:
            completed = self._run(cmd, "Probe")
            meta = json.loads(completed.stdout.decode() or "{}")
        except (RuntimeError, ValueError) as e:
            raise UnsupportedInputError(f"Could not read media metadata for {path.name}: {e}") from e

        fmt = meta.get("format", {})
        streams = meta.get("streams", [])
        audio = next((s for s in streams if s.get("codec_type") == "audio"), None)
        video = next((s for s in streams if s.get("codec_type") == "video"), None)

        try:
            duration = float(fmt.get("duration") or (audio or video or {}).get("duration") or 0.0)
        except ValueError:
            duration = 0.0

        return ProbeResult(
            duration_seconds=duration,
            size_bytes=_to_int(fmt.get("size")) or path.stat().st_size,
            sample_rate=_to_int(audio.get("sample_rate")) if audio else None,
            channels=_to_int(audio.get("channels")) if audio else None,
            bit_rate=_to_int((audio or {}).get("bit_rate")) or _to_int(fmt.get("bit_rate")),
            has_audio=audio is not None,
            has_video=video is not None,
            width=_to_int(video.get("width")) if video else None,
            height=_to_int(video.get("height")) if video else None,
        )

    def extract_audio(self, video_path: Path, output_path: Path, profile: AudioProfile) -> Path:
        if not video_path.exists():
            raise FileNotFoundError(f"Video not found: {video_path}")

        output_path.parent.mkdir(parents=True, exist_ok=True)

        # -vn: Disable video, -y: Overwrite output
        cmd = [
            settings.FFMPEG_BINARY,
            "-y",
            "-i", str(video_path),
            "-vn",
            "-acodec", profile.codec,
            "-ar", str(profile.sample_rate_hz),
            "-ac", str(profile.channels),
        ]
        if profile.filters:
            cmd += ["-af", ",".join(profile.filters)]
        cmd += ["-f", profile.format, str(output_path)]

        logger.info(f"Extracting audio: {video_path.name} -> {output_path.name}")
        self._run(cmd, "Audio extraction")
        return output_path

    def split_segment(self, path: Path, start_seconds: float, duration_seconds: float, output_path: Path) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = [
            settings.FFMPEG_BINARY,
            "-y",
            "-ss", f"{start_seconds:.3f}",
            "-t", f"{duration_seconds:.3f}",
            "-i", str(path),
            "-vn",
            "-acodec", "pcm_s16le",
            "-ar", "16000",
            "-ac", "1",
            "-f", "wav",
            str(output_path)
        ]
        self._run(cmd, "Segment split")
        return output_path

    def extract_frame(self, video_path: Path, timestamp_seconds: float, output_path: Path,
                      width: int = 1920, height: int = 1080) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        scale = (
            f"scale={width}:{height}:force_original_aspect_ratio=decrease,"
            f"pad={width}:{height}:(ow-iw)/2:(oh-ih)/2"
        )
        cmd = [
            settings.FFMPEG_BINARY,
            "-y",
            "-ss", f"{timestamp_seconds:.3f}",
            "-i", str(video_path),
            "-vframes", "1",
            "-q:v", "2",
            "-vf", scale,
            str(output_path)
        ]
        self._run(cmd, "Frame extraction")
        if not output_path.exists():
            # ffmpeg exits 0 when seeking past the last frame.
            raise RuntimeError(f"Frame extraction produced no image at {timestamp_seconds:.2f}s")
        return output_path

    def measure_loudness(self, path: Path) -> Optional[float]:
        cmd = [
            settings.FFMPEG_BINARY,
            "-i", str(path),
            "-af", "volumedetect",
            "-vn",
            "-f", "null",
            "-"
        ]
        try:
            completed = self._run(cmd, "Loudness measurement")
        except RuntimeError as e:
            logger.warning(f"Loudness unavailable for {path.name}: {e}")
            return None

        match = _MEAN_VOLUME.search(completed.stderr.decode(errors="replace"))
        return float(match.group(1)) if match else None
