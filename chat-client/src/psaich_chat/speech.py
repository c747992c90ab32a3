"""Speech input and output capabilities.

Real speech engines only exist in browsers and desktop environments. The
headless client ships no-op implementations so the chat flow runs anywhere.
"""

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

from psaich_shared import Language

logger = logging.getLogger(__name__)

RESTART_DELAY_SECONDS = 1.0

RECOGNITION_ERROR_MARKERS = {
    Language.PT_BR: "[Erro no reconhecimento de voz. Por favor, tente novamente.]",
    Language.EN_US: "[Speech recognition error. Please try again.]",
}


@dataclass(frozen=True)
class Voice:
    name: str
    lang: str


ResultCallback = Callable[[str, str], None]
ErrorCallback = Callable[[str], None]


class SpeechOutput(Protocol):
    def voices(self) -> Sequence[Voice]: ...

    def speak(self, text: str, language: Language, voice: Voice | None) -> None: ...

    def stop(self) -> None: ...


class SpeechInput(Protocol):
    def start(
        self,
        language: Language,
        on_result: ResultCallback,
        on_error: ErrorCallback,
    ) -> None: ...

    def stop(self) -> None: ...


class NullSpeechOutput:
    """Speech output for environments without a synthesizer."""

    def voices(self) -> Sequence[Voice]:
        return []

    def speak(self, text: str, language: Language, voice: Voice | None) -> None:
        logger.debug("Speech output not available, skipping %d chars", len(text))

    def stop(self) -> None:
        pass


class NullSpeechInput:
    """Speech input for environments without a recognizer."""

    def start(
        self,
        language: Language,
        on_result: ResultCallback,
        on_error: ErrorCallback,
    ) -> None:
        logger.warning("Speech recognition is not available in this environment")

    def stop(self) -> None:
        pass


def select_voice(voices: Sequence[Voice], language: Language) -> Voice | None:
    """Pick the synthesizer voice for a language.

    Returns None to let the engine use its default voice.
    """
    if language == Language.PT_BR:
        for matches in (
            lambda v: v.lang == "pt-BR" and "female" in v.name.lower(),
            lambda v: v.lang == "pt-BR",
            lambda v: v.lang.startswith("pt"),
        ):
            voice = next((v for v in voices if matches(v)), None)
            if voice is not None:
                return voice
        return None

    voice = next((v for v in voices if v.name == "Samantha"), None)
    if voice is None:
        voice = next((v for v in voices if v.lang == "en-US"), None)
    return voice


def merge_transcript(current: str, final: str) -> str:
    """Append a final transcript to the input, dropping repeated words."""
    seen: set[str] = set()
    words: list[str] = []
    for word in final.split(" "):
        key = word.lower()
        if key in seen:
            continue
        seen.add(key)
        words.append(word)
    return (current + " " + " ".join(words)).strip()


class RecognitionSession:
    """Dictation into the chat input with one restart per recognition error."""

    def __init__(
        self,
        recognizer: SpeechInput,
        language: Language,
        restart_delay: float = RESTART_DELAY_SECONDS,
        timer_factory: Callable[..., threading.Timer] = threading.Timer,
    ):
        self._recognizer = recognizer
        self._language = language
        self._restart_delay = restart_delay
        self._timer_factory = timer_factory
        self._restart_timer: threading.Timer | None = None
        self.input_text = ""
        self.is_recording = False

    def start(self) -> None:
        logger.info("Starting recording. Language: %s", self._language)
        self._recognizer.start(self._language, self._handle_result, self._handle_error)
        self.is_recording = True

    def stop(self) -> None:
        self._recognizer.stop()
        self.is_recording = False
        if self._restart_timer is not None:
            self._restart_timer.cancel()
            self._restart_timer = None

    def _handle_result(self, final: str, interim: str) -> None:
        if final:
            self.input_text = merge_transcript(self.input_text, final)

    def _handle_error(self, error: str) -> None:
        logger.error("Speech recognition error: %s", error)
        marker = RECOGNITION_ERROR_MARKERS[self._language]
        self.input_text = (self.input_text + " " + marker).strip()

        if self._restart_timer is not None:
            return
        self._restart_timer = self._timer_factory(self._restart_delay, self._restart)
        self._restart_timer.start()

    def _restart(self) -> None:
        self._restart_timer = None
        if self.is_recording:
            self.stop()
            self.start()


class Playback:
    """Reads replies aloud, one message at a time.

    Dictation is stopped before playback starts. The voice is chosen from
    the ones the output offers for the session language.
    """

    def __init__(
        self,
        output: SpeechOutput,
        language: Language,
        recognition: RecognitionSession | None = None,
    ):
        self._output = output
        self._language = language
        self._recognition = recognition
        self.playing_message_id: str | None = None

    def play(self, message_id: str, text: str) -> None:
        self.stop()
        if self._recognition is not None and self._recognition.is_recording:
            self._recognition.stop()

        self.playing_message_id = message_id
        try:
            voice = select_voice(self._output.voices(), self._language)
            self._output.speak(text, self._language, voice)
        finally:
            self.playing_message_id = None

    def stop(self) -> None:
        if self.playing_message_id is not None:
            self._output.stop()
            self.playing_message_id = None
