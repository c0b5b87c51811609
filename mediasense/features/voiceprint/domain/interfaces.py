from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from .models import SpeakerRecord, VoiceFingerprint

class IVoicePrintStore(ABC):
    """
    Contract for the persisted speaker map.
    Writes are serialised; in-memory state stays authoritative when persistence fails.
    """
    @abstractmethod
    def get(self, speaker_id: str) -> Optional[SpeakerRecord]:
        pass

    @abstractmethod
    def list_records(self) -> List[SpeakerRecord]:
        """Snapshot copies, safe to read while another thread writes."""
        pass

    @abstractmethod
    def upsert(self,
               speaker_id: str,
               fingerprint: VoiceFingerprint,
               characteristics: Dict[str, Any],
               speaking_style: Dict[str, Any],
               profile: Dict[str, Any],
               confidence: float) -> SpeakerRecord:
        """
        Creates the record (encounter_count=1) or refreshes it (encounter_count += 1,
        last_seen updated, observation appended), then rewrites the whole store.
        """
        pass
