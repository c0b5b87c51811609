from typing import Optional, Dict, Any
from uuid import UUID

from mediasense.core.database.connection import SessionLocal
from ..models import JobModel
from ..types import JobStatus, JobType
from ..domain.interfaces import IJobRepository
from ..domain.models import JobSubmission

class SqlJobRepo(IJobRepository):

    def find_completed_sibling(self,
                               file_hash: str,
                               job_type: JobType,
                               payload: Dict[str, Any]) -> Optional[JobModel]:
        """
        Queries the DB for any job that:
        1. Ran on content with the same hash.
        2. Has the same JobType.
        3. Is COMPLETED.
        4. Has the same options (payload).
        """
        with SessionLocal() as db:
            candidates = (
                db.query(JobModel)
                .filter(
                    JobModel.file_hash == file_hash,
                    JobModel.job_type == job_type,
                    JobModel.status == JobStatus.COMPLETED
                )
                .order_by(JobModel.created_at.desc())
                .all()
            )

            # JSON columns are not comparable in SQL on every dialect.
            for job in candidates:
                if (job.payload or {}) == payload:
                    db.expunge(job)
                    return job

            return None

    def create_job(self, submission: JobSubmission, is_cached: bool = False, cached_meta: dict = None) -> UUID:
        with SessionLocal() as db:
            new_job = JobModel(
                file_path=submission.file_path,
                file_hash=submission.file_hash,
                media_type=submission.media_type,
                job_type=submission.job_type,
                payload=submission.payload,
                status=JobStatus.COMPLETED if is_cached else JobStatus.PENDING,
                result_meta=cached_meta if cached_meta else {}
            )
            db.add(new_job)
            db.flush()

            if is_cached:
                new_job.finished_at = new_job.created_at # Instant finish

            db.commit()
            db.refresh(new_job)
            return new_job.id
