"""Utility functions for the backend."""

from app.utils.normalizers import normalize_gem, normalize_gems, parse_coordinate

__all__ = ["normalize_gem", "normalize_gems", "parse_coordinate"]
