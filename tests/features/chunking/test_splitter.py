import pytest
from mediasense.core.errors import ChunkingFailed
from mediasense.features.chunking.service.splitter import ChunkSplitter
from fakes import FakeTranscoder

def test_short_audio_is_a_single_source_chunk(tmp_path, audio_file):
    transcoder = FakeTranscoder()
    plan = ChunkSplitter(transcoder).split(audio_file, 90.0, 120.0, tmp_path / "chunks")

    assert plan.expected_count == 1
    assert plan.chunks[0].is_source
    assert plan.chunks[0].file_path == audio_file
    assert transcoder.segments == []

    ChunkSplitter.cleanup(plan)
    assert audio_file.exists(), "cleanup must never delete the source"

def test_chunks_keep_index_order_under_shuffled_completion(tmp_path, audio_file):
    """
    Conversions finish in random order; the plan is still ordered by index
    with offsets on the 120s grid.
    """
    transcoder = FakeTranscoder(jitter=True)
    plan = ChunkSplitter(transcoder, max_workers=8).split(audio_file, 2400.0, 120.0, tmp_path / "chunks")

    assert plan.expected_count == 20
    assert [c.index for c in plan.chunks] == list(range(20))
    assert [c.start_offset_seconds for c in plan.chunks] == [i * 120.0 for i in range(20)]
    assert all(c.file_path.exists() for c in plan.chunks)
    print(f"✅ {len(plan.chunks)} chunks in order")

    ChunkSplitter.cleanup(plan)
    assert not any(c.file_path.exists() for c in plan.chunks)

def test_last_chunk_is_shorter(tmp_path, audio_file):
    plan = ChunkSplitter(FakeTranscoder()).split(audio_file, 250.0, 120.0, tmp_path / "chunks")

    assert plan.expected_count == 3
    assert plan.chunks[-1].start_offset_seconds == 240.0
    assert plan.chunks[-1].duration_seconds == pytest.approx(10.0)

def test_tiny_tail_is_folded_into_the_previous_chunk(tmp_path, audio_file):
    transcoder = FakeTranscoder()
    plan = ChunkSplitter(transcoder).split(audio_file, 600.024, 120.0, tmp_path / "chunks")

    assert plan.expected_count == 5
    assert plan.chunks[-1].start_offset_seconds == 480.0
    assert plan.chunks[-1].duration_seconds == pytest.approx(120.024)
    assert plan.dropped_indices == []

    single = ChunkSplitter(transcoder).split(audio_file, 120.05, 120.0, tmp_path / "chunks")
    assert single.expected_count == 1
    assert single.chunks[0].is_source

def test_partial_failure_drops_only_the_failed_chunk(tmp_path, audio_file):
    transcoder = FakeTranscoder(fail_segments={240.0})
    plan = ChunkSplitter(transcoder).split(audio_file, 600.0, 120.0, tmp_path / "chunks")

    assert plan.expected_count == 5
    assert [c.index for c in plan.chunks] == [0, 1, 3, 4]
    assert plan.dropped_indices == [2]

def test_all_chunks_failing_raises(tmp_path, audio_file):
    transcoder = FakeTranscoder(fail_segments={0.0, 120.0, 240.0})

    with pytest.raises(ChunkingFailed, match="All 3 chunks failed"):
        ChunkSplitter(transcoder).split(audio_file, 300.0, 120.0, tmp_path / "chunks")

def test_rejects_non_positive_chunk_length(tmp_path, audio_file):
    with pytest.raises(ValueError):
        ChunkSplitter(FakeTranscoder()).split(audio_file, 300.0, 0, tmp_path / "chunks")
