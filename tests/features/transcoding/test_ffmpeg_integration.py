import shutil
import subprocess
import pytest
from pathlib import Path

from mediasense.core.common.enums import TranscriptionProvider
from mediasense.core.errors import UnsupportedInputError
from mediasense.features.chunking.service.splitter import ChunkSplitter
from mediasense.features.transcoding.data.ffmpeg_adapter import FFmpegAdapter
from mediasense.features.transcoding.service.api import extract_audio_from_video, speech_profile

pytestmark = pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")

# Define paths for test artifacts
TEST_DIR = Path(__file__).parent.parent.parent / "temp_artifacts"
TEST_VIDEO = TEST_DIR / "src_transcode_test.mp4"

@pytest.fixture(scope="module", autouse=True)
def setup_teardown():
    """
    Creates a synthetic 5-second video with a sine wave audio track.
    """
    if shutil.which("ffmpeg") is None:
        yield
        return

    TEST_DIR.mkdir(parents=True, exist_ok=True)
    cmd = [
        "ffmpeg", "-y",
        "-f", "lavfi", "-i", "testsrc=duration=5:size=320x240:rate=30",
        "-f", "lavfi", "-i", "sine=frequency=440:duration=5",
        "-c:v", "libx264", "-pix_fmt", "yuv420p", "-c:a", "aac",
        "-shortest",
        str(TEST_VIDEO)
    ]
    # Set up the fixture independently of the adapter under test
    subprocess.run(cmd, check=True, capture_output=True)

    yield

    if TEST_VIDEO.exists():
        TEST_VIDEO.unlink()

def test_probe_reads_streams():
    probe = FFmpegAdapter().probe(TEST_VIDEO)

    assert probe.duration_seconds == pytest.approx(5.0, abs=0.3)
    assert probe.has_audio and probe.has_video
    assert (probe.width, probe.height) == (320, 240)
    assert probe.size_bytes == TEST_VIDEO.stat().st_size

def test_probe_rejects_non_media(tmp_path):
    junk = tmp_path / "junk.mp4"
    junk.write_bytes(b"definitely not a video")
    with pytest.raises(UnsupportedInputError):
        FFmpegAdapter().probe(junk)

def test_extract_speech_audio(tmp_path):
    output = tmp_path / "speech.wav"
    extract_audio_from_video(str(TEST_VIDEO), str(output), TranscriptionProvider.GOOGLE)

    probe = FFmpegAdapter().probe(output)
    assert probe.sample_rate == 16000
    assert probe.channels == 1
    assert not probe.has_video
    print(f"✅ Created audio file: {output}")

def test_split_into_ordered_chunks(tmp_path):
    adapter = FFmpegAdapter()
    audio = adapter.extract_audio(TEST_VIDEO, tmp_path / "full.wav", speech_profile(TranscriptionProvider.OPENAI))

    plan = ChunkSplitter(adapter).split(audio, 5.0, 2.0, tmp_path / "chunks")

    assert [c.index for c in plan.chunks] == [0, 1, 2]
    durations = [adapter.probe(c.file_path).duration_seconds for c in plan.chunks]
    assert durations[0] == pytest.approx(2.0, abs=0.1)
    assert durations[2] == pytest.approx(1.0, abs=0.1)

    ChunkSplitter.cleanup(plan)
    assert audio.exists()

def test_extract_frame_and_loudness(tmp_path):
    adapter = FFmpegAdapter()

    frame = adapter.extract_frame(TEST_VIDEO, 1.0, tmp_path / "frame.jpg", width=640, height=360)
    assert frame.stat().st_size > 0

    with pytest.raises(RuntimeError):
        adapter.extract_frame(TEST_VIDEO, 60.0, tmp_path / "past_end.jpg")

    loudness = adapter.measure_loudness(TEST_VIDEO)
    assert loudness is not None and loudness < 0
