"""Guided Borrow / Purchase dialogues."""

from shopsahai.dialogue.engine import DialogueMachine

__all__ = ["DialogueMachine"]
