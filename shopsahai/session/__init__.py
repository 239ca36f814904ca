"""Voice session package: routing, speaking and listening."""

from shopsahai.session.controller import SessionController
from shopsahai.session.scheduler import OneShotTimer, VoiceScheduler

__all__ = ["OneShotTimer", "SessionController", "VoiceScheduler"]
