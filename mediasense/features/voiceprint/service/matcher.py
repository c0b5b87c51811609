# File: mediasense/features/voiceprint/service/matcher.py
import logging
import uuid
from typing import Any, Dict, List, Optional

from mediasense.core.config.settings import settings
from ..domain.interfaces import IVoicePrintStore
from ..domain.models import SpeakerMatch, SpeakerRecord, SpeakerSearchHit, VoiceFingerprint

logger = logging.getLogger(__name__)

# (field, weight) for exact-match categorical features
CATEGORICAL_WEIGHTS = (
    ("pitch", 0.2),
    ("tempo", 0.15),
    ("clarity", 0.15),
    ("volume", 0.1),
    ("formality", 0.05),
    ("pace", 0.05),
)

# (field, tolerance, weight) for continuous features
CONTINUOUS_WEIGHTS = (
    ("words_per_minute", 50.0, 0.15),
    ("avg_word_length", 2.0, 0.1),
    ("vocabulary_diversity", 0.3, 0.1),
)


def similarity(a: VoiceFingerprint, b: VoiceFingerprint) -> float:
    """Weighted similarity in [0, 1]. Identical fingerprints score 1.0."""
    score = 0.0
    total_weight = 0.0

    for name, weight in CATEGORICAL_WEIGHTS:
        if getattr(a, name) == getattr(b, name):
            score += weight
        total_weight += weight

    for name, tolerance, weight in CONTINUOUS_WEIGHTS:
        delta = abs(getattr(a, name) - getattr(b, name))
        score += max(0.0, 1.0 - delta / tolerance) * weight
        total_weight += weight

    return score / total_weight


def mint_speaker_id(source_tag: str) -> str:
    return f"Speaker_{uuid.uuid4().hex[:12]}_{source_tag}"


class SpeakerMatcher:
    """
    Resolves fingerprints to speaker identities held in a voice print store.
    """

    def __init__(self, store: IVoicePrintStore, threshold: Optional[float] = None):
        self.store = store
        self.threshold = settings.SPEAKER_SIMILARITY_THRESHOLD if threshold is None else threshold

    def match(self, fingerprint: VoiceFingerprint) -> Optional[SpeakerMatch]:
        best: Optional[SpeakerMatch] = None
        best_score = 0.0

        for record in self.store.list_records():
            score = similarity(fingerprint, record.fingerprint)
            if score > best_score and score >= self.threshold:
                best_score = score
                best = SpeakerMatch(record.speaker_id, score, record)

        if best:
            logger.info(f"Recognized existing speaker {best.speaker_id} ({best.similarity:.1%} match)")
        return best

    def upsert(self,
               speaker_id: str,
               fingerprint: VoiceFingerprint,
               profile: Dict[str, Any],
               characteristics: Optional[Dict[str, Any]] = None,
               speaking_style: Optional[Dict[str, Any]] = None) -> SpeakerRecord:
        return self.store.upsert(
            speaker_id,
            fingerprint,
            characteristics or {},
            speaking_style or {},
            profile,
            confidence=float(profile.get("confidence", self.threshold)),
        )

    def stats(self) -> Dict[str, Any]:
        records = self.store.list_records()
        if not records:
            return {"total_speakers": 0, "most_frequent": None, "recently_seen": [], "average_encounters": 0.0}

        most_frequent = max(records, key=lambda r: r.encounter_count)
        recent = sorted(records, key=lambda r: r.last_seen, reverse=True)[:5]
        return {
            "total_speakers": len(records),
            "most_frequent": most_frequent.speaker_id,
            "recently_seen": [r.speaker_id for r in recent],
            "average_encounters": sum(r.encounter_count for r in records) / len(records),
        }

    def search(self, criteria: Dict[str, str]) -> List[SpeakerSearchHit]:
        """
        Scores records against pitch/tempo/formality (1 point each) and a name substring (2 points).
        """
        hits = []
        name = (criteria.get("name") or "").lower()
        for record in self.store.list_records():
            score = 0
            for key in ("pitch", "tempo", "formality"):
                if criteria.get(key) and getattr(record.fingerprint, key) == criteria[key]:
                    score += 1
            if name and name in str(record.profile.get("name", "")).lower():
                score += 2
            if score > 0:
                hits.append(SpeakerSearchHit(record.speaker_id, score, record))

        return sorted(hits, key=lambda h: h.match_score, reverse=True)
