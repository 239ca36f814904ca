"""
Console Speech Implementations

Stand-ins used by the console driver and tests: "speaking" prints the
sentence, "listening" just flips a flag.
"""

from typing import Callable

from shopsahai.models.command import Locale
from shopsahai.services.speech.interface import SpeechListener, SpeechSynthesizer


class ConsoleSpeaker(SpeechSynthesizer):
    """Prints prompts and reports completion immediately."""

    def __init__(self, prefix: str = "assistant> "):
        self._prefix = prefix
        self.spoken: list[str] = []

    def speak(self, text: str, locale: Locale, on_done: Callable[[], None]) -> None:
        self.spoken.append(text)
        print(f"{self._prefix}{text}")
        on_done()


class ConsoleListener(SpeechListener):
    """Tracks whether a listen cycle is open."""

    def __init__(self):
        self.is_listening = False
        self.start_count = 0

    def start_listening(self, locale: Locale) -> None:
        self.is_listening = True
        self.start_count += 1

    def stop_listening(self) -> None:
        self.is_listening = False
