"""Utility functions for the export reader."""

from .validation import ValidationUtils

__all__ = ["ValidationUtils"]
