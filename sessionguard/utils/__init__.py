"""Utility functions for sessionguard."""

from sessionguard.utils.helpers import ensure_dir, safe_filename

__all__ = ["ensure_dir", "safe_filename"]
