from enum import Enum

class JobType(str, Enum):
    MULTIMEDIA_ANALYSIS = "multimedia_analysis"
    TRANSCRIPTION = "transcription"
    SPEAKER_IDENTIFICATION = "speaker_identification"
    OCR_CAPTIONS = "ocr_captions"
    OBJECT_DETECTION = "object_detection"

class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
