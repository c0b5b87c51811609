# File: mediasense/features/voiceprint/service/fingerprint.py
"""
Deterministic feature extraction for speaker matching.
Nothing here touches the filesystem or the network.
"""
import re
from dataclasses import asdict
from typing import List, Optional

from mediasense.features.transcoding.domain.models import ProbeResult
from ..domain.models import SpeakingStyle, VoiceCharacteristics, VoiceFingerprint

_SENTENCE_SPLIT = re.compile(r"[.!?]+")

SLOW_WPM = 120
FAST_WPM = 180


def rate_bucket(words_per_minute: float) -> str:
    if words_per_minute < SLOW_WPM:
        return "slow"
    if words_per_minute > FAST_WPM:
        return "fast"
    return "normal"


def formality_bucket(vocabulary_diversity: float) -> str:
    if vocabulary_diversity > 0.7:
        return "sophisticated"
    if vocabulary_diversity < 0.4:
        return "simple"
    return "neutral"


def clarity_bucket(sample_rate: int) -> str:
    if sample_rate < 8000:
        return "unclear"
    if sample_rate < 16000:
        return "muffled"
    return "clear"


def volume_bucket(mean_volume_db: Optional[float]) -> str:
    if mean_volume_db is None:
        return "normal"
    if mean_volume_db < -35.0:
        return "quiet"
    if mean_volume_db > -15.0:
        return "loud"
    return "normal"


def describe_style(words_per_minute: float, average_word_length: float, characteristics: VoiceCharacteristics) -> str:
    parts = []
    if words_per_minute < SLOW_WPM:
        parts.append("slow speaker")
    elif words_per_minute > FAST_WPM:
        parts.append("fast speaker")
    else:
        parts.append("moderate pace")

    if average_word_length > 8:
        parts.append("uses complex vocabulary")
    elif average_word_length < 4:
        parts.append("uses simple vocabulary")
    else:
        parts.append("balanced vocabulary")

    if characteristics.pitch == "high":
        parts.append("higher pitched voice")
    elif characteristics.pitch == "low":
        parts.append("deeper voice")

    return ", ".join(parts)


class FingerprintEngine:

    def characteristics(self,
                        probe: ProbeResult,
                        mean_volume_db: Optional[float] = None,
                        file_words_per_minute: float = 0.0,
                        duration_seconds: Optional[float] = None) -> VoiceCharacteristics:
        """
        Buckets probe facts into categorical estimates.
        Tempo comes from the whole file's word rate; pitch has no estimator and stays medium.
        """
        sample_rate = probe.sample_rate or 16000
        return VoiceCharacteristics(
            duration_seconds=probe.duration_seconds if duration_seconds is None else duration_seconds,
            sample_rate=sample_rate,
            channels=probe.channels or 1,
            bit_rate=probe.bit_rate or 0,
            mean_volume_db=mean_volume_db,
            pitch="medium",
            tempo=rate_bucket(file_words_per_minute) if file_words_per_minute else "normal",
            clarity=clarity_bucket(sample_rate),
            volume=volume_bucket(mean_volume_db),
        )

    def speaking_style(self, tokens: List[str], duration_seconds: float,
                       characteristics: VoiceCharacteristics, text: Optional[str] = None) -> SpeakingStyle:
        words = [t for t in (tok.strip() for tok in tokens) if t]
        word_count = len(words)

        wpm = round(word_count / duration_seconds * 60) if duration_seconds > 0 else 0
        avg_len = sum(len(w) for w in words) / word_count if word_count else 0.0
        diversity = len({w.lower() for w in words}) / word_count if word_count else 0.0

        sentences = [s for s in _SENTENCE_SPLIT.split(text or " ".join(words)) if s.strip()]
        avg_sentence = (
            sum(len(s.split()) for s in sentences) / len(sentences) if sentences else 0.0
        )

        return SpeakingStyle(
            words_per_minute=wpm,
            average_word_length=round(avg_len, 1),
            vocabulary_diversity=round(diversity, 2),
            formality=formality_bucket(diversity),
            pace=rate_bucket(wpm),
            word_count=word_count,
            average_sentence_length=round(avg_sentence, 1),
            description=describe_style(wpm, avg_len, characteristics),
        )

    def fingerprint(self, characteristics: VoiceCharacteristics, style: SpeakingStyle) -> VoiceFingerprint:
        return VoiceFingerprint(
            pitch=characteristics.pitch,
            tempo=characteristics.tempo,
            clarity=characteristics.clarity,
            volume=characteristics.volume,
            words_per_minute=float(style.words_per_minute),
            avg_word_length=float(style.average_word_length),
            vocabulary_diversity=float(style.vocabulary_diversity),
            formality=style.formality,
            pace=style.pace,
        )

    @staticmethod
    def as_dicts(characteristics: VoiceCharacteristics, style: SpeakingStyle):
        return asdict(characteristics), asdict(style)
