from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from mediasense.core.common.enums import MediaType
from ..types import JobType

@dataclass(frozen=True)
class JobSubmission:
    """
    DTO for requesting a new job against a local media file.
    """
    file_path: str
    job_type: JobType
    media_type: MediaType = MediaType.UNKNOWN
    file_hash: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
