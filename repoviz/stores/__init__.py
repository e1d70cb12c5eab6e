"""Persistence helpers for repoviz."""

from .analysis_cache import AnalysisCache, fingerprint

__all__ = ["AnalysisCache", "fingerprint"]
