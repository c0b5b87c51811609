# File: mediasense/features/voiceprint/data/json_store.py
import copy
import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..domain.interfaces import IVoicePrintStore
from ..domain.models import SpeakerRecord, VoiceFingerprint

logger = logging.getLogger(__name__)

STORE_VERSION = "1.0"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonVoicePrintStore(IVoicePrintStore):
    """
    Speaker map held in memory and rewritten wholesale to one JSON file after every write.

    Document shape:
        {"speakers": {id: record}, "metadata": {"totalSpeakers", "lastUpdated", "version"}}
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._speakers: Dict[str, SpeakerRecord] = self._load()

    def _load(self) -> Dict[str, SpeakerRecord]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
            speakers = {
                speaker_id: SpeakerRecord.from_dict(speaker_id, data)
                for speaker_id, data in document.get("speakers", {}).items()
            }
            logger.info(f"Loaded {len(speakers)} voice prints from {self.path}")
            return speakers
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Could not load voice print database {self.path}: {e}; starting empty")
            return {}

    def _save(self) -> None:
        """Atomic rewrite. Caller holds the lock. Failure is logged, never raised."""
        document = {
            "speakers": {sid: record.to_dict() for sid, record in self._speakers.items()},
            "metadata": {
                "totalSpeakers": len(self._speakers),
                "lastUpdated": utc_now_iso(),
                "version": STORE_VERSION,
            },
        }
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2)
            os.replace(tmp_path, self.path)
            logger.debug(f"Voice print database saved with {len(self._speakers)} speakers")
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Could not save voice print database {self.path}: {e}")

    def get(self, speaker_id: str) -> Optional[SpeakerRecord]:
        with self._lock:
            record = self._speakers.get(speaker_id)
            return copy.deepcopy(record) if record else None

    def list_records(self) -> List[SpeakerRecord]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._speakers.values()]

    def upsert(self,
               speaker_id: str,
               fingerprint: VoiceFingerprint,
               characteristics: Dict[str, Any],
               speaking_style: Dict[str, Any],
               profile: Dict[str, Any],
               confidence: float) -> SpeakerRecord:
        now = utc_now_iso()
        observation = {"timestamp": now, "confidence": confidence}

        with self._lock:
            record = self._speakers.get(speaker_id)
            if record:
                record.fingerprint = fingerprint
                record.characteristics = characteristics
                record.speaking_style = speaking_style
                record.profile = profile
                record.last_seen = now
                record.encounter_count += 1
                record.observations.append(observation)
                logger.info(f"Updated existing speaker {speaker_id} (encounters={record.encounter_count})")
            else:
                record = SpeakerRecord(
                    speaker_id=speaker_id,
                    fingerprint=fingerprint,
                    characteristics=characteristics,
                    speaking_style=speaking_style,
                    profile=profile,
                    first_seen=now,
                    last_seen=now,
                    encounter_count=1,
                    observations=[observation],
                )
                self._speakers[speaker_id] = record
                logger.info(f"Added new speaker {speaker_id}")

            self._save()
            return copy.deepcopy(record)
