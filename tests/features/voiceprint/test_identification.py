import pytest

from mediasense.core.common.enums import ProviderUsed
from mediasense.features.transcription.domain.models import TranscriptResult, TranscriptWord
from mediasense.features.transcoding.domain.models import ProbeResult
from mediasense.features.voiceprint.data.json_store import JsonVoicePrintStore
from mediasense.features.voiceprint.service.api import SpeakerIdentificationService
from mediasense.features.voiceprint.service.fingerprint import FingerprintEngine, formality_bucket, rate_bucket
from mediasense.features.voiceprint.service.matcher import SpeakerMatcher
from fakes import FakeTranscoder

def _diarized_transcript():
    slow = [
        TranscriptWord("extraordinary", 0.0, 2.0, speaker_tag=1),
        TranscriptWord("unbelievable", 2.0, 4.0, speaker_tag=1),
        TranscriptWord("magnificent", 4.0, 6.0, speaker_tag=1),
    ]
    fast = [TranscriptWord("go", 6.0 + i * 0.2, 6.2 + i * 0.2, speaker_tag=2) for i in range(10)]
    words = slow + fast
    return TranscriptResult(
        full_text=" ".join(w.text for w in words),
        provider_used=ProviderUsed.GOOGLE_SYNC,
        words=words,
        duration_seconds=10.0,
    )

@pytest.fixture
def service(tmp_path):
    store = JsonVoicePrintStore(tmp_path / "voice_prints.json")
    return SpeakerIdentificationService(
        transcoder=FakeTranscoder(),
        matcher=SpeakerMatcher(store),
        work_dir=tmp_path / "speakers",
    )

def test_style_buckets():
    assert rate_bucket(90) == "slow"
    assert rate_bucket(150) == "normal"
    assert rate_bucket(200) == "fast"
    assert formality_bucket(0.8) == "sophisticated"
    assert formality_bucket(0.2) == "simple"

def test_speaking_style_statistics():
    engine = FingerprintEngine()
    characteristics = engine.characteristics(ProbeResult(duration_seconds=60.0, size_bytes=1), -20.0, 150.0)
    style = engine.speaking_style(["the", "cat", "saw", "the", "dog"], 60.0, characteristics, text="The cat saw. The dog!")

    assert style.words_per_minute == 5
    assert style.average_word_length == 3.0
    assert style.vocabulary_diversity == 0.8
    assert style.formality == "sophisticated"
    assert style.pace == "slow"
    assert style.average_sentence_length == 2.5
    assert characteristics.tempo == "normal"
    assert characteristics.clarity == "clear"

def test_diarized_speakers_are_identified_and_recognized_later(service, tmp_path):
    first = service.identify(tmp_path / "meeting.wav", _diarized_transcript())

    assert [s.source_tag for s in first.speakers] == ["1", "2"]
    assert not any(s.is_recognized for s in first.speakers)
    assert first.speakers[0].speaker_id != first.speakers[1].speaker_id
    assert first.speakers[0].start_time == 0.0 and first.speakers[0].end_time == 6.0
    assert first.database_stats["total_speakers"] == 2

    # Segment files are temporary
    assert list((tmp_path / "speakers").glob("*.wav")) == []

    second = service.identify(tmp_path / "other_meeting.wav", _diarized_transcript())

    assert all(s.is_recognized for s in second.speakers)
    assert [s.speaker_id for s in second.speakers] == [s.speaker_id for s in first.speakers]
    assert second.speakers[0].match_similarity == pytest.approx(1.0)
    assert second.database_stats["total_speakers"] == 2
    record = service.matcher.store.get(first.speakers[0].speaker_id)
    assert record.encounter_count == 2
    print(f"✅ Recognized {len(second.speakers)} returning speakers")

def test_failed_speaker_is_skipped(tmp_path):
    service = SpeakerIdentificationService(
        transcoder=FakeTranscoder(fail_segments={6.0}),
        matcher=SpeakerMatcher(JsonVoicePrintStore(tmp_path / "vp.json")),
        work_dir=tmp_path / "speakers",
    )
    result = service.identify(tmp_path / "meeting.wav", _diarized_transcript())

    assert [s.source_tag for s in result.speakers] == ["1"]

def test_undiarized_transcript_is_one_speaker(service, tmp_path):
    transcript = TranscriptResult(
        full_text="ask not what your country can do for you",
        provider_used=ProviderUsed.WHISPER_DIRECT,
        words=[TranscriptWord(t, i * 0.5, i * 0.5 + 0.4) for i, t in enumerate("ask not what your country can do for you".split())],
        duration_seconds=10.0,
    )
    result = service.identify(tmp_path / "speech.wav", transcript)

    assert len(result.speakers) == 1
    speaker = result.speakers[0]
    assert speaker.source_tag == "1"
    assert speaker.name == "Speaker 1"
    assert speaker.note == "Basic analysis (no speaker diarization available)"
    assert speaker.word_count == 9
    assert result.to_dict()["speakers"][0]["speaker_id"] == speaker.speaker_id
