"""Persistent stores used by bridgedoc."""

from .model_cache import ModelCache, fingerprint

__all__ = ["ModelCache", "fingerprint"]
