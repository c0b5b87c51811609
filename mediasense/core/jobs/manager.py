# File: mediasense/core/jobs/manager.py

import logging
from typing import Optional
from uuid import UUID
from datetime import datetime, timezone
from mediasense.core.database.connection import SessionLocal
from mediasense.core.errors import ConfigurationError
from .models import JobModel
from .types import JobType, JobStatus
from .domain.models import JobSubmission
from .domain.interfaces import IJobRepository
from .data.repository import SqlJobRepo

logger = logging.getLogger(__name__)

class JobManager:
    """
    The Central Dispatcher.
    It doesn't know *how* to analyze media, but it knows *who* can.
    Also handles 'Smart Deduplication' of compute through completed sibling jobs.
    """

    def __init__(self, repo: Optional[IJobRepository] = None):
        self.repo = repo or SqlJobRepo()

    def submit_job(self, submission: JobSubmission) -> UUID:
        """
        Submits a job for processing.
        Checks if the work has already been done for the same content.

        Returns:
            UUID of the job (either new pending, or new completed-cached).
        """
        if submission.file_hash:
            cached_job = self.repo.find_completed_sibling(
                file_hash=submission.file_hash,
                job_type=submission.job_type,
                payload=submission.payload
            )
            if cached_job:
                logger.info(f"CACHE HIT: Reusing result from Job {cached_job.id} for {submission.file_path}")
                return self.repo.create_job(
                    submission=submission,
                    is_cached=True,
                    cached_meta=cached_job.result_meta
                )

        job_id = self.repo.create_job(submission=submission, is_cached=False)
        logger.info(f"Job Submitted: {job_id} [{submission.job_type.value}]")
        return job_id

    def run_job(self, job_id: UUID):
        """
        Executes a specific job by routing it to the appropriate feature handler.
        """
        with SessionLocal() as db:
            job = db.get(JobModel, job_id)
            if not job:
                logger.error(f"Job {job_id} not found.")
                return

            if job.status != JobStatus.PENDING:
                logger.info(f"Job {job_id} is {job.status.value}; nothing to run.")
                return

            job.status = JobStatus.PROCESSING
            job.started_at = datetime.now(timezone.utc)
            db.commit()

            try:
                logger.info(f"Starting Job {job_id} ({job.job_type.value})...")

                result = self._route_to_feature(job)

                job.result_meta = result
                job.status = JobStatus.COMPLETED
                logger.info(f"Job {job_id} Completed successfully.")

            except (NotImplementedError, ConfigurationError) as e:
                job.status = JobStatus.FAILED
                job.error_message = f"Configuration Error: {str(e)}"
                logger.error(f"Job {job_id} Failed: {e}")

            except Exception as e:
                job.status = JobStatus.FAILED
                job.error_message = str(e)
                logger.exception(f"Job {job_id} Failed: {e}")

            finally:
                job.finished_at = datetime.now(timezone.utc)
                db.commit()

    def cancel_job(self, job_id: UUID) -> bool:
        """Marks a PENDING job as CANCELLED. Running jobs are left alone."""
        with SessionLocal() as db:
            job = db.get(JobModel, job_id)
            if not job or job.status != JobStatus.PENDING:
                return False
            job.status = JobStatus.CANCELLED
            job.finished_at = datetime.now(timezone.utc)
            db.commit()
            logger.info(f"Job {job_id} cancelled.")
            return True

    def _route_to_feature(self, job: JobModel) -> dict:
        """
        Routes the job to the correct Feature Handler.
        Uses lazy imports to prevent circular dependencies.
        """
        if job.job_type == JobType.MULTIMEDIA_ANALYSIS:
            from mediasense.features.analysis.service.job_handler import AnalysisHandler
            return AnalysisHandler().handle(job.file_path, job.media_type, job.payload or {})

        elif job.job_type == JobType.TRANSCRIPTION:
            from mediasense.features.transcription.service.job_handler import TranscriptionHandler
            return TranscriptionHandler().handle(job.file_path, job.media_type, job.payload or {})

        elif job.job_type == JobType.SPEAKER_IDENTIFICATION:
            from mediasense.features.voiceprint.service.job_handler import SpeakerIdentificationHandler
            return SpeakerIdentificationHandler().handle(job.file_path, job.media_type, job.payload or {})

        elif job.job_type == JobType.OCR_CAPTIONS:
            from mediasense.features.ocr_captions.service.job_handler import OCRCaptionHandler
            return OCRCaptionHandler().handle(job.file_path, job.media_type, job.payload or {})

        elif job.job_type == JobType.OBJECT_DETECTION:
            from mediasense.features.vision.service.job_handler import ObjectDetectionHandler
            return ObjectDetectionHandler().handle(job.file_path, job.media_type, job.payload or {})

        raise NotImplementedError(f"No handler registered for JobType: {job.job_type.value}")
