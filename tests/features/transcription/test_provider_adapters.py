import pytest
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

from google.api_core import exceptions as google_exceptions

from mediasense.core.errors import ConfigurationError, ProviderError
from mediasense.features.transcription.data.google_speech_adapter import (
    GoogleSpeechAdapter,
    classify_api_error,
    payload_from_results,
)
from mediasense.features.transcription.data.openai_whisper_adapter import OpenAIWhisperAdapter
from mediasense.features.transcription.domain.models import SpeechRequest
from mediasense.features.transcription.domain.outcomes import Fatal, FallbackReason, NeedsFallback, Ok
from fakes import FakeTranscoder

def _word(text, start, end, tag=0, confidence=0.9):
    return SimpleNamespace(
        word=text, start_time=timedelta(seconds=start), end_time=timedelta(seconds=end),
        confidence=confidence, speaker_tag=tag,
    )

def _result(transcript, words):
    return SimpleNamespace(alternatives=[SimpleNamespace(transcript=transcript, words=words)])

# --- Google payload parsing ---

def test_diarized_final_result_supplies_the_words():
    results = [
        _result("hello there", [_word("hello", 0, 0.4), _word("there", 0.5, 0.9)]),
        _result("", [_word("hello", 0, 0.4, tag=1), _word("there", 0.5, 0.9, tag=2)]),
    ]
    payload = payload_from_results(results)

    assert payload.texts == ["hello there"]
    assert [(w.text, w.speaker_tag) for w in payload.words] == [("hello", 1), ("there", 2)]
    assert payload.words[1].start_time == pytest.approx(0.5)

def test_untagged_results_are_flattened_in_order():
    results = [
        _result("one", [_word("one", 0, 0.3)]),
        SimpleNamespace(alternatives=[]),
        _result("two", [_word("two", 5, 5.3)]),
    ]
    payload = payload_from_results(results)

    assert payload.texts == ["one", "two"]
    assert [w.text for w in payload.words] == ["one", "two"]
    assert all(w.speaker_tag is None for w in payload.words)

# --- Google error classification ---

def test_classify_api_errors():
    too_long = classify_api_error(google_exceptions.InvalidArgument("Sync input too long. For audio longer than 1 min use LongRunningRecognize"))
    inline = classify_api_error(google_exceptions.InvalidArgument("Inline audio exceeds duration limit. Please use a GCS URI."))
    bad = classify_api_error(google_exceptions.InvalidArgument("Invalid sample rate"))
    transient = classify_api_error(google_exceptions.ServiceUnavailable("try later"))
    denied = classify_api_error(google_exceptions.PermissionDenied("no access"))

    assert isinstance(too_long, NeedsFallback) and too_long.reason == FallbackReason.AUDIO_TOO_LONG
    assert isinstance(inline, NeedsFallback) and inline.reason == FallbackReason.INLINE_LIMIT
    assert isinstance(bad, Fatal) and isinstance(bad.error, ProviderError)
    assert isinstance(transient, NeedsFallback) and transient.reason == FallbackReason.TRANSIENT
    assert isinstance(denied, Fatal) and isinstance(denied.error, ConfigurationError)

def test_recognize_wraps_client_errors_as_outcomes():
    client = MagicMock()
    client.recognize.side_effect = google_exceptions.InvalidArgument("audio too long")

    outcome = GoogleSpeechAdapter(client=client).recognize(b"\x00" * 10, SpeechRequest())

    assert isinstance(outcome, NeedsFallback)
    assert outcome.reason == FallbackReason.AUDIO_TOO_LONG

def test_recognize_success_and_request_config():
    client = MagicMock()
    client.recognize.return_value = SimpleNamespace(results=[_result("hi", [_word("hi", 0, 0.2, tag=1)])])

    outcome = GoogleSpeechAdapter(client=client).recognize(b"\x00" * 10, SpeechRequest(max_speakers=4))

    assert isinstance(outcome, Ok)
    assert outcome.value.words[0].speaker_tag == 1
    config = client.recognize.call_args.kwargs["config"]
    assert config.diarization_config.enable_speaker_diarization is True
    assert config.diarization_config.max_speaker_count == 4
    assert config.sample_rate_hertz == 16000

def test_poll_operation_states():
    adapter = GoogleSpeechAdapter(client=MagicMock())

    pending = MagicMock()
    pending.done.return_value = False
    assert adapter.poll_operation(pending).done is False

    flaky = MagicMock()
    flaky.done.side_effect = google_exceptions.ServiceUnavailable("blip")
    assert adapter.poll_operation(flaky).done is False

    finished = MagicMock()
    finished.done.return_value = True
    finished.exception.return_value = None
    finished.result.return_value = SimpleNamespace(results=[_result("done", [_word("done", 0, 0.3)])])
    status = adapter.poll_operation(finished)
    assert status.done and isinstance(status.outcome, Ok)
    assert status.outcome.value.texts == ["done"]

    failed = MagicMock()
    failed.done.return_value = True
    failed.exception.return_value = RuntimeError("operation aborted")
    status = adapter.poll_operation(failed)
    assert status.done and isinstance(status.outcome, Fatal)

# --- Whisper adapter ---

def test_whisper_requires_api_key(monkeypatch, audio_file):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError):
        OpenAIWhisperAdapter(transcoder=FakeTranscoder()).transcribe(audio_file)

def test_whisper_parses_verbose_json_words(audio_file):
    client = MagicMock()
    client.audio.transcriptions.create.return_value = SimpleNamespace(
        text=" ask not what your country ",
        words=[SimpleNamespace(word=" ask", start=0.0, end=0.3), SimpleNamespace(word="not", start=0.3, end=0.5)],
    )

    payload = OpenAIWhisperAdapter(client=client, transcoder=FakeTranscoder()).transcribe(audio_file)

    assert payload.texts == ["ask not what your country"]
    assert [(w.text, w.start_time, w.end_time) for w in payload.words] == [("ask", 0.0, 0.3), ("not", 0.3, 0.5)]
    kwargs = client.audio.transcriptions.create.call_args.kwargs
    assert kwargs["response_format"] == "verbose_json"
    assert kwargs["timestamp_granularities"] == ["word"]

def test_whisper_converts_unsupported_extensions(tmp_path):
    source = tmp_path / "talk.aiff"
    source.write_bytes(b"\x00" * 2048)
    transcoder = FakeTranscoder()
    client = MagicMock()
    client.audio.transcriptions.create.return_value = SimpleNamespace(text="hi", words=[])

    OpenAIWhisperAdapter(client=client, transcoder=transcoder).transcribe(source)

    assert len(transcoder.extracted) == 1
    assert transcoder.extracted[0].suffix == ".wav"
    assert not transcoder.extracted[0].exists(), "temporary conversion must be removed"
