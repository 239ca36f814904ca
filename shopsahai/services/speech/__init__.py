"""Speech collaborator interfaces and console stand-ins."""

from shopsahai.services.speech.interface import SpeechListener, SpeechSynthesizer
from shopsahai.services.speech.console import ConsoleListener, ConsoleSpeaker

__all__ = [
    "ConsoleListener",
    "ConsoleSpeaker",
    "SpeechListener",
    "SpeechSynthesizer",
]
