"""Tests for speech capability helpers."""

from psaich_shared import Language
from psaich_chat.speech import (
    RECOGNITION_ERROR_MARKERS,
    NullSpeechOutput,
    Playback,
    RecognitionSession,
    Voice,
    merge_transcript,
    select_voice,
)

VOICES = [
    Voice("Alex", "en-US"),
    Voice("Samantha", "en-US"),
    Voice("Luciana", "pt-BR"),
    Voice("Google português female", "pt-BR"),
    Voice("Joana", "pt-PT"),
]


class TestSelectVoice:
    def test_portuguese_prefers_female_brazilian_voice(self) -> None:
        assert select_voice(VOICES, Language.PT_BR) == Voice("Google português female", "pt-BR")

    def test_portuguese_falls_back_to_any_brazilian_voice(self) -> None:
        voices = [Voice("Luciana", "pt-BR"), Voice("Joana", "pt-PT")]
        assert select_voice(voices, Language.PT_BR) == Voice("Luciana", "pt-BR")

    def test_portuguese_falls_back_to_any_portuguese_voice(self) -> None:
        voices = [Voice("Alex", "en-US"), Voice("Joana", "pt-PT")]
        assert select_voice(voices, Language.PT_BR) == Voice("Joana", "pt-PT")

    def test_english_prefers_samantha(self) -> None:
        assert select_voice(VOICES, Language.EN_US) == Voice("Samantha", "en-US")

    def test_english_falls_back_to_any_us_voice(self) -> None:
        assert select_voice([Voice("Alex", "en-US")], Language.EN_US) == Voice("Alex", "en-US")

    def test_no_match_uses_default(self) -> None:
        assert select_voice([Voice("Anna", "de-DE")], Language.PT_BR) is None
        assert select_voice([], Language.EN_US) is None


class TestMergeTranscript:
    def test_appends_to_existing_input(self) -> None:
        assert merge_transcript("hello", "there friend") == "hello there friend"

    def test_drops_repeated_words(self) -> None:
        assert merge_transcript("", "I I feel feel tired") == "I feel tired"

    def test_repeats_are_case_insensitive(self) -> None:
        assert merge_transcript("", "Today today was long") == "Today was long"


class FakeRecognizer:
    def __init__(self) -> None:
        self.starts = 0
        self.stops = 0
        self.on_result = None
        self.on_error = None

    def start(self, language, on_result, on_error) -> None:
        self.starts += 1
        self.on_result = on_result
        self.on_error = on_error

    def stop(self) -> None:
        self.stops += 1


class FakeTimer:
    created: list["FakeTimer"] = []

    def __init__(self, delay, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.callback()


class TestRecognitionSession:
    def setup_method(self) -> None:
        FakeTimer.created = []
        self.recognizer = FakeRecognizer()
        self.session = RecognitionSession(
            self.recognizer, Language.EN_US, timer_factory=FakeTimer
        )

    def test_final_results_fill_input(self) -> None:
        self.session.start()
        self.recognizer.on_result("I feel", "")
        self.recognizer.on_result("", "interim only")
        self.recognizer.on_result("better now", "")

        assert self.session.input_text == "I feel better now"

    def test_error_schedules_one_restart(self) -> None:
        self.session.start()
        self.recognizer.on_error("network")
        self.recognizer.on_error("network")

        assert len(FakeTimer.created) == 1
        timer = FakeTimer.created[0]
        assert timer.started
        assert timer.delay == 1.0
        assert self.session.input_text.endswith(RECOGNITION_ERROR_MARKERS[Language.EN_US])

        timer.fire()
        assert self.recognizer.starts == 2
        assert self.session.is_recording

    def test_no_restart_after_stop(self) -> None:
        self.session.start()
        self.recognizer.on_error("aborted")
        timer = FakeTimer.created[0]

        self.session.stop()
        assert timer.cancelled

        timer.fire()
        assert self.recognizer.starts == 1
        assert not self.session.is_recording


class RecordingOutput(NullSpeechOutput):
    def __init__(self, voices: list[Voice] | None = None) -> None:
        self.available = voices or []
        self.spoken: list[str] = []
        self.voices_used: list[Voice | None] = []

    def voices(self) -> list[Voice]:
        return self.available

    def speak(self, text: str, language: Language, voice: Voice | None) -> None:
        self.spoken.append(text)
        self.voices_used.append(voice)


class TestPlayback:
    def test_playback_stops_dictation(self) -> None:
        recognizer = FakeRecognizer()
        recognition = RecognitionSession(recognizer, Language.PT_BR, timer_factory=FakeTimer)
        recognition.start()
        output = RecordingOutput()

        playback = Playback(output, Language.PT_BR, recognition)
        playback.play("1", "Olá")

        assert output.spoken == ["Olá"]
        assert not recognition.is_recording
        assert playback.playing_message_id is None

    def test_playback_uses_voice_for_language(self) -> None:
        voices = [Voice("Samantha", "en-US"), Voice("Luciana Female", "pt-BR")]
        output = RecordingOutput(voices)

        Playback(output, Language.PT_BR).play("1", "Olá")
        Playback(output, Language.EN_US).play("2", "Hello")

        assert output.voices_used == [voices[1], voices[0]]

    def test_playback_without_voices_uses_engine_default(self) -> None:
        output = RecordingOutput()

        Playback(output, Language.EN_US).play("1", "Hello")

        assert output.voices_used == [None]
