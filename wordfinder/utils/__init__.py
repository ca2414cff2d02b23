# WordFinder Utilities Package
"""
Shared utility functions for WordFinder and its consumers.
"""

from .helpers import diff_results, is_right_to_left, load_settings

__all__ = ["load_settings", "diff_results", "is_right_to_left"]
