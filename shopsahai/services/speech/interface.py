"""
Abstract Speech Interfaces

Speech-to-text and text-to-speech are external capabilities. The voice
engine only needs two things from them:
1. A way to (re)start a listening cycle in a given language
2. A way to speak a sentence and be told, exactly once, when it finished

Decoded transcripts are pushed into the SessionController by the host;
recognition errors arrive as plain strings, not exceptions.
"""

from abc import ABC, abstractmethod
from typing import Callable

from shopsahai.models.command import Locale


class SpeechSynthesizer(ABC):
    """Text-to-speech collaborator."""

    @abstractmethod
    def speak(self, text: str, locale: Locale, on_done: Callable[[], None]) -> None:
        """
        Start speaking text.

        Args:
            text: Sentence to speak
            locale: Language of the sentence
            on_done: Must be called exactly once when speech ends or fails
        """
        pass


class SpeechListener(ABC):
    """Speech-to-text collaborator (only the listen-cycle controls)."""

    @abstractmethod
    def start_listening(self, locale: Locale) -> None:
        """Open the microphone for one recognition cycle."""
        pass

    @abstractmethod
    def stop_listening(self) -> None:
        """Close the microphone if it is open."""
        pass
