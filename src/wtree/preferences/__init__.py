"""Persisted run preferences."""

from .models import Preferences
from .store import PreferenceLoadError, PreferenceStore

__all__ = ["PreferenceLoadError", "PreferenceStore", "Preferences"]
