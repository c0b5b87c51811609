import json
import itertools
import pytest
from dataclasses import replace

from mediasense.features.voiceprint.data.json_store import JsonVoicePrintStore
from mediasense.features.voiceprint.domain.models import VoiceFingerprint
from mediasense.features.voiceprint.service.matcher import SpeakerMatcher, mint_speaker_id, similarity

BASE = VoiceFingerprint(
    pitch="medium", tempo="normal", clarity="clear", volume="normal",
    words_per_minute=150.0, avg_word_length=4.5, vocabulary_diversity=0.6,
    formality="neutral", pace="normal",
)

VARIANTS = [
    BASE,
    replace(BASE, pitch="low", tempo="slow", words_per_minute=90.0, pace="slow"),
    replace(BASE, pitch="high", tempo="fast", words_per_minute=200.0, pace="fast"),
    replace(BASE, clarity="muffled", volume="quiet", avg_word_length=9.0, vocabulary_diversity=0.1, formality="simple"),
    replace(BASE, words_per_minute=0.0, avg_word_length=0.0, vocabulary_diversity=0.0),
]

@pytest.fixture
def store(tmp_path):
    return JsonVoicePrintStore(tmp_path / "voice_prints.json")

# --- Similarity ---

def test_similarity_is_bounded_and_symmetric():
    for a, b in itertools.product(VARIANTS, repeat=2):
        score = similarity(a, b)
        assert 0.0 <= score <= 1.0
        assert score == pytest.approx(similarity(b, a))

def test_identical_fingerprints_score_one():
    for fp in VARIANTS:
        assert similarity(fp, fp) == pytest.approx(1.0)

def test_slow_and_fast_speakers_do_not_match():
    slow, fast = VARIANTS[1], VARIANTS[2]
    assert similarity(slow, fast) < 0.75

# --- Matching ---

def test_distinct_speakers_get_distinct_records(store):
    matcher = SpeakerMatcher(store)
    slow, fast = VARIANTS[1], VARIANTS[2]

    assert matcher.match(slow) is None
    matcher.upsert(mint_speaker_id("1"), slow, {"name": "Speaker 1"})

    assert matcher.match(fast) is None
    matcher.upsert(mint_speaker_id("1"), fast, {"name": "Speaker 1"})

    records = store.list_records()
    assert len(records) == 2
    assert all(r.encounter_count == 1 for r in records)

def test_close_fingerprint_matches_best_record(store):
    matcher = SpeakerMatcher(store)
    matcher.upsert("Speaker_a_1", BASE, {"name": "Alice"})
    matcher.upsert("Speaker_b_1", VARIANTS[2], {"name": "Bob"})

    probe = replace(BASE, words_per_minute=155.0)
    match = matcher.match(probe)

    assert match is not None
    assert match.speaker_id == "Speaker_a_1"
    assert match.similarity >= 0.75
    assert match.record.profile["name"] == "Alice"

def test_threshold_is_inclusive(store):
    matcher = SpeakerMatcher(store, threshold=1.0)
    matcher.upsert("Speaker_exact_1", BASE, {})
    assert matcher.match(BASE).speaker_id == "Speaker_exact_1"

# --- Store ---

def test_upsert_is_idempotent_on_identity(store):
    first = store.upsert("Speaker_x_1", BASE, {}, {}, {"name": "X"}, confidence=0.75)
    second = store.upsert("Speaker_x_1", BASE, {}, {}, {"name": "X"}, confidence=0.9)
    third = store.upsert("Speaker_x_1", BASE, {}, {}, {"name": "X"}, confidence=0.9)

    assert [first.encounter_count, second.encounter_count, third.encounter_count] == [1, 2, 3]
    assert third.first_seen == first.first_seen
    assert len(third.observations) == 3
    assert len(store.list_records()) == 1

def test_store_persists_whole_document(tmp_path):
    path = tmp_path / "voice_prints.json"
    JsonVoicePrintStore(path).upsert("Speaker_p_1", BASE, {"sample_rate": 16000}, {"pace": "normal"}, {"name": "P"}, 0.8)

    document = json.loads(path.read_text())
    assert document["metadata"]["totalSpeakers"] == 1
    assert document["metadata"]["version"] == "1.0"
    assert "Speaker_p_1" in document["speakers"]

    reloaded = JsonVoicePrintStore(path).get("Speaker_p_1")
    assert reloaded.fingerprint == BASE
    assert reloaded.profile["name"] == "P"
    assert reloaded.encounter_count == 1

def test_corrupt_store_starts_empty(tmp_path):
    path = tmp_path / "voice_prints.json"
    path.write_text("{not json")

    store = JsonVoicePrintStore(path)
    assert store.list_records() == []

    store.upsert("Speaker_c_1", BASE, {}, {}, {}, 0.75)
    assert json.loads(path.read_text())["metadata"]["totalSpeakers"] == 1

def test_save_failure_is_not_fatal(tmp_path):
    # A directory in the file's place makes every save fail
    path = tmp_path / "voice_prints.json"
    path.mkdir()
    store = JsonVoicePrintStore(path)

    record = store.upsert("Speaker_m_1", BASE, {}, {}, {}, 0.75)
    assert record.encounter_count == 1
    assert store.get("Speaker_m_1") is not None

def test_returned_records_are_copies(store):
    store.upsert("Speaker_q_1", BASE, {}, {}, {"name": "Q"}, 0.75)
    record = store.get("Speaker_q_1")
    record.profile["name"] = "mutated"
    assert store.get("Speaker_q_1").profile["name"] == "Q"

# --- Stats / search ---

def test_stats_and_search(store):
    matcher = SpeakerMatcher(store)
    assert matcher.stats()["total_speakers"] == 0

    matcher.upsert("Speaker_a_1", BASE, {"name": "Alice Smith"})
    matcher.upsert("Speaker_a_1", BASE, {"name": "Alice Smith"})
    matcher.upsert("Speaker_b_1", VARIANTS[3], {"name": "Bob"})

    stats = matcher.stats()
    assert stats["total_speakers"] == 2
    assert stats["most_frequent"] == "Speaker_a_1"
    assert stats["average_encounters"] == pytest.approx(1.5)
    assert set(stats["recently_seen"]) == {"Speaker_a_1", "Speaker_b_1"}

    hits = matcher.search({"name": "alice", "pitch": "medium"})
    assert hits[0].speaker_id == "Speaker_a_1"
    assert hits[0].match_score == 3
    assert [h.speaker_id for h in matcher.search({"formality": "simple"})] == ["Speaker_b_1"]
    assert matcher.search({"pitch": "high"}) == []
