# File: tests/fakes.py
"""
In-memory stand-ins for the external collaborators (ffmpeg, Google, OpenAI).
They implement the same interfaces as the production adapters.
"""
import random
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

from mediasense.core.errors import ProviderError
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from mediasense.features.transcoding.domain.models import AudioProfile, ProbeResult
from mediasense.features.transcription.domain.interfaces import IGoogleSpeechBackend, IWhisperBackend
from mediasense.features.transcription.domain.models import RecognitionPayload, TranscriptWord
from mediasense.features.transcription.domain.outcomes import Ok, PollStatus
from mediasense.features.vision.domain.interfaces import IVisionAnalyzer
from mediasense.features.vision.domain.models import TextDetectionResult


class FakeTranscoder(IMediaTranscoder):
    def __init__(self, probe_result: Optional[ProbeResult] = None, fail_segments=(),
                 fail_frames=(), jitter: bool = False, loudness: Optional[float] = -20.0):
        self.probe_result = probe_result or ProbeResult(
            duration_seconds=10.0, size_bytes=320_000, sample_rate=16000, channels=1,
            bit_rate=256_000, has_audio=True,
        )
        self.fail_segments = set(fail_segments)
        self.fail_frames = set(fail_frames)
        self.jitter = jitter
        self.loudness = loudness
        self.segments: List[tuple] = []
        self.frames: List[float] = []
        self.extracted: List[Path] = []
        self._lock = threading.Lock()

    def probe(self, path: Path) -> ProbeResult:
        return self.probe_result

    def extract_audio(self, video_path: Path, output_path: Path, profile: AudioProfile) -> Path:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"RIFF" + b"\x00" * 4096)
        self.extracted.append(output_path)
        return output_path

    def split_segment(self, path: Path, start_seconds: float, duration_seconds: float, output_path: Path) -> Path:
        if self.jitter:
            # Later chunks finish first
            time.sleep(random.uniform(0, 0.02))
        with self._lock:
            self.segments.append((start_seconds, duration_seconds))
        if start_seconds in self.fail_segments:
            raise RuntimeError(f"FFmpeg failed for segment at {start_seconds}")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"RIFF" + b"\x00" * 2048)
        return output_path

    def extract_frame(self, video_path: Path, timestamp_seconds: float, output_path: Path,
                      width: int = 1920, height: int = 1080) -> Path:
        with self._lock:
            self.frames.append(timestamp_seconds)
        if timestamp_seconds in self.fail_frames:
            raise RuntimeError(f"No frame at {timestamp_seconds}")
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(b"\xff\xd8\xff" + b"\x00" * 64)
        return output_path

    def measure_loudness(self, path: Path) -> Optional[float]:
        return self.loudness


class FakeGoogleBackend(IGoogleSpeechBackend):
    """
    Scripted responses: `recognize_outcome`, `start_outcome`, and a list of
    PollStatus values consumed one per poll (the last one repeats).
    """
    def __init__(self, recognize_outcome=None, start_outcome=None, polls=None):
        self.recognize_outcome = recognize_outcome
        self.start_outcome = start_outcome or Ok("operation-1")
        self.polls = list(polls or [PollStatus(done=False)])
        self.recognize_calls = 0
        self.start_calls = 0
        self.poll_calls = 0
        self.cancelled: List[object] = []

    def recognize(self, audio: bytes, request) -> object:
        self.recognize_calls += 1
        return self.recognize_outcome

    def start_long_running(self, audio: bytes, request) -> object:
        self.start_calls += 1
        return self.start_outcome

    def poll_operation(self, handle) -> PollStatus:
        self.poll_calls += 1
        if len(self.polls) > 1:
            return self.polls.pop(0)
        return self.polls[0]

    def cancel_operation(self, handle) -> None:
        self.cancelled.append(handle)


class FakeWhisperBackend(IWhisperBackend):
    """
    Returns one word per call, timed at 1.0-2.0s local to the file it was given.
    Files whose name contains any string in `fail_on` raise ProviderError.
    """
    def __init__(self, fail_on=(), error: Exception = None, empty: bool = False):
        self.fail_on = tuple(fail_on)
        self.error = error
        self.empty = empty
        self.calls: List[Path] = []

    def transcribe(self, audio_path: Path, timestamp_granularity: str = "word") -> RecognitionPayload:
        self.calls.append(audio_path)
        if self.error is not None:
            raise self.error
        if any(token in audio_path.name for token in self.fail_on):
            raise ProviderError(f"rejected {audio_path.name}", provider="openai")
        if self.empty:
            return RecognitionPayload()
        label = f"part{len(self.calls) - 1}"
        return RecognitionPayload(
            texts=[label],
            words=[TranscriptWord(text=label, start_time=1.0, end_time=2.0)],
        )


def diarized_payload(words: Dict[int, List[tuple]]) -> RecognitionPayload:
    """Builds a payload from {speaker_tag: [(text, start, end), ...]}."""
    flat = [
        TranscriptWord(text=t, start_time=s, end_time=e, confidence=0.9, speaker_tag=tag)
        for tag, items in words.items()
        for (t, s, e) in items
    ]
    flat.sort(key=lambda w: w.start_time)
    return RecognitionPayload(texts=[" ".join(w.text for w in flat)], words=flat)


class FakeVisionAnalyzer(IVisionAnalyzer):
    def __init__(self, text_by_call: Optional[List[TextDetectionResult]] = None,
                 objects=None, labels=None, fail_text_calls=(), fail_objects: Exception = None):
        self.text_by_call = list(text_by_call or [])
        self.objects = list(objects or [])
        self.labels = list(labels or [])
        self.fail_text_calls = set(fail_text_calls)
        self.fail_objects = fail_objects
        self.text_calls = 0
        self.seen_paths: List[Path] = []
        self._lock = threading.Lock()

    def text_detection(self, image_path: Path) -> TextDetectionResult:
        with self._lock:
            call = self.text_calls
            self.text_calls += 1
            self.seen_paths.append(image_path)
        assert image_path.exists()
        if call in self.fail_text_calls:
            raise ProviderError("vision quota", provider="google")
        if call < len(self.text_by_call):
            return self.text_by_call[call]
        return TextDetectionResult()

    def object_localization(self, image_path: Path):
        if self.fail_objects is not None:
            raise self.fail_objects
        return self.objects

    def label_detection(self, image_path: Path):
        return self.labels
