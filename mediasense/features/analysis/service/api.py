# File: mediasense/features/analysis/service/api.py
import logging
from typing import Optional

from mediasense.features.media_intake.service.api import MediaIntakeService
from ..domain.models import AnalysisOptions, AnalysisResult
from .orchestrator import MultimediaAnalyzer

logger = logging.getLogger(__name__)


def analyze_media(location: str, options: Optional[AnalysisOptions] = None,
                  analyzer: Optional[MultimediaAnalyzer] = None,
                  intake: Optional[MediaIntakeService] = None) -> AnalysisResult:
    """
    Standalone API: resolves a local path or URL and analyzes it.
    Downloaded files are removed afterwards; local files are never touched.
    """
    intake = intake or MediaIntakeService()
    analyzer = analyzer or MultimediaAnalyzer()

    source = intake.resolve(location)
    try:
        return analyzer.analyze(source.path, source.media_type, options)
    finally:
        if source.downloaded:
            source.path.unlink(missing_ok=True)
            logger.debug(f"Removed downloaded file {source.path}")
