# File: mediasense/features/analysis/service/orchestrator.py
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict
from pathlib import Path
from typing import Any, Callable, List, Optional

from mediasense.core.common.enums import MediaType
from mediasense.core.config.settings import settings
from mediasense.core.errors import MediaSenseError
from mediasense.features.ocr_captions.service.api import OCRCaptionService
from mediasense.features.transcoding.data.ffmpeg_adapter import FFmpegAdapter
from mediasense.features.transcoding.domain.interfaces import IMediaTranscoder
from mediasense.features.transcription.service.api import TranscriptionService
from mediasense.features.vision.service.api import VisionService
from mediasense.features.voiceprint.service.api import SpeakerIdentificationService
from ..domain.models import AnalysisOptions, AnalysisResult

logger = logging.getLogger(__name__)


class MultimediaAnalyzer:
    """
    The entry point for one media file.
    Runs every requested stage, turning each stage failure into a warning so
    that partial results always come back.
    """

    def __init__(self,
                 transcoder: Optional[IMediaTranscoder] = None,
                 transcription: Optional[TranscriptionService] = None,
                 speakers: Optional[SpeakerIdentificationService] = None,
                 ocr: Optional[OCRCaptionService] = None,
                 vision: Optional[VisionService] = None,
                 max_workers: Optional[int] = None):
        self.transcoder = transcoder or FFmpegAdapter()
        self.transcription = transcription or TranscriptionService(transcoder=self.transcoder)
        self.speakers = speakers or SpeakerIdentificationService(transcoder=self.transcoder)
        self.ocr = ocr or OCRCaptionService(transcoder=self.transcoder)
        self.vision = vision or VisionService(transcoder=self.transcoder)
        self.max_workers = max_workers or settings.ANALYSIS_STAGE_WORKERS

    def analyze(self, path: Path, media_type: MediaType, options: Optional[AnalysisOptions] = None,
                cancel_event: Optional[threading.Event] = None) -> AnalysisResult:
        options = options or AnalysisOptions()
        started = time.monotonic()
        result = AnalysisResult(file_path=str(path), media_type=media_type)
        logger.info(f"Analyzing {path.name} as {media_type.value}")

        if media_type == MediaType.VIDEO:
            self._analyze_video(path, options, result, cancel_event)
        elif media_type == MediaType.AUDIO:
            self._probe(path, result)
            if options.include_transcription:
                self._audio_stage(path, options, result, result.warnings, cancel_event)
        elif media_type == MediaType.IMAGE:
            self._analyze_image(path, result)
        else:
            result.warnings.append(f"Unsupported media type: {media_type.value}")

        result.processing_seconds = round(time.monotonic() - started, 3)
        logger.info(f"Analysis of {path.name} finished in {result.processing_seconds}s with {len(result.warnings)} warning(s)")
        return result

    # ----------------------------------------------------------------- stages

    @staticmethod
    def _merge_warnings(result: AnalysisResult, warnings: List[str]) -> None:
        result.warnings.extend(w for w in warnings if w not in result.warnings)

    def _stage(self, name: str, warnings: List[str], fn: Callable[[], Any]) -> Any:
        try:
            return fn()
        except MediaSenseError as e:
            logger.warning(f"{name} failed: {e}")
            warnings.append(f"{name} failed: {e}")
        except Exception as e:
            logger.exception(f"{name} failed unexpectedly: {e}")
            warnings.append(f"{name} failed: {e}")
        return None

    def _probe(self, path: Path, result: AnalysisResult):
        probe = self._stage("Metadata extraction", result.warnings, lambda: self.transcoder.probe(path))
        if probe is not None:
            result.metadata = asdict(probe)
        return probe

    def _audio_stage(self, audio_path: Path, options: AnalysisOptions, result: AnalysisResult,
                     warnings: List[str], cancel_event: Optional[threading.Event]) -> None:
        transcript = self._stage(
            "Transcription", warnings,
            lambda: self.transcription.transcribe_file(audio_path, options.provider, cancel_event),
        )
        if transcript is None:
            return

        result.transcription = transcript.to_dict()
        warnings.extend(w for w in transcript.warnings if w not in warnings)

        if options.identify_speakers:
            speakers = self._stage(
                "Speaker identification", warnings,
                lambda: self.speakers.identify(audio_path, transcript),
            )
            if speakers is not None:
                result.speakers = speakers.to_dict()

    def _video_audio_stage(self, video_path: Path, options: AnalysisOptions, result: AnalysisResult,
                           warnings: List[str], cancel_event: Optional[threading.Event]) -> None:
        audio_path = self._stage(
            "Audio extraction", warnings,
            lambda: self.transcription.extract_speech_audio(video_path, options.provider),
        )
        if audio_path is None:
            return
        try:
            self._audio_stage(audio_path, options, result, warnings, cancel_event)
        finally:
            audio_path.unlink(missing_ok=True)

    def _analyze_video(self, path: Path, options: AnalysisOptions, result: AnalysisResult,
                       cancel_event: Optional[threading.Event]) -> None:
        probe = self._probe(path, result)
        duration = probe.duration_seconds if probe else None

        if options.include_transcription and probe is not None and not probe.has_audio:
            result.warnings.append("Transcription skipped: video has no audio track")

        # Workers never touch result.warnings; their lists are merged in a fixed order after the join.
        audio_warnings: List[str] = []
        ocr_warnings: List[str] = []
        vision_warnings: List[str] = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = []
            if options.include_transcription and (probe is None or probe.has_audio):
                futures.append(pool.submit(self._video_audio_stage, path, options, result, audio_warnings, cancel_event))
            if options.include_ocr:
                futures.append(pool.submit(self._ocr_stage, path, options, result, ocr_warnings, duration))
            if options.include_objects:
                futures.append(pool.submit(self._vision_stage, path, result, vision_warnings))

            for future in futures:
                future.result()

        for warnings in (audio_warnings, ocr_warnings, vision_warnings):
            self._merge_warnings(result, warnings)

    def _ocr_stage(self, path: Path, options: AnalysisOptions, result: AnalysisResult,
                   warnings: List[str], duration: Optional[float]) -> None:
        track = self._stage("OCR captions", warnings, lambda: self.ocr.extract_captions(path, options.ocr, duration))
        if track is not None:
            result.ocr_captions = track.to_dict()

    def _vision_stage(self, path: Path, result: AnalysisResult, warnings: List[str]) -> None:
        analysis = self._stage("Object detection", warnings, lambda: self.vision.analyze_video_frame(path))
        if analysis is not None:
            result.vision = analysis.to_dict()
            warnings.extend(analysis.warnings)

    def _analyze_image(self, path: Path, result: AnalysisResult) -> None:
        analysis = self._stage("Image analysis", result.warnings,
                               lambda: self.vision.analyze_image(path, include_text=True))
        if analysis is not None:
            result.vision = analysis.to_dict()
            self._merge_warnings(result, analysis.warnings)
