"""Validation gates package."""

from shopsahai.validation.validator import CommandValidator

__all__ = ["CommandValidator"]
