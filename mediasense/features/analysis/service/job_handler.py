import logging
from pathlib import Path

from mediasense.core.common.enums import MediaType
from ..domain.models import AnalysisOptions
from .orchestrator import MultimediaAnalyzer

logger = logging.getLogger(__name__)

class AnalysisHandler:
    """
    Worker for JOB_TYPE.MULTIMEDIA_ANALYSIS.
    """

    def __init__(self, analyzer: MultimediaAnalyzer = None):
        self.analyzer = analyzer or MultimediaAnalyzer()

    def handle(self, file_path: str, media_type: MediaType, params: dict) -> dict:
        logger.info(f"Processing Multimedia Analysis for {file_path}")
        result = self.analyzer.analyze(Path(file_path), media_type, AnalysisOptions.from_dict(params))
        return result.to_dict()
