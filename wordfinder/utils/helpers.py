"""
Helper utilities for WordFinder.

Provides:
- Settings loading (TOML merged over defaults)
- Snapshot diffing for result list widgets
- Text direction detection for result alignment
"""

import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import toml
from loguru import logger

from wordfinder.search.dictionary import CandidateMatch


DEFAULT_SETTINGS: Dict[str, Any] = {
    "word_finder": {
        "max_results": 50,
        "max_workers": 8,
        "update_interval_ms": 100,
        "search_timeout_ms": 10000,
        "batch_size": 64,
    },
    "fuzzy": {
        "threshold": 70,
        "limit": 10,
    },
}


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load WordFinder settings from a TOML file.

    Args:
        path: Settings file; defaults to data/settings.toml in the package

    Returns:
        Dictionary containing settings with defaults applied

    Example settings structure:
        {
            "word_finder": {
                "max_results": 50,
                "update_interval_ms": 100
            },
            "fuzzy": {
                "threshold": 70,
                "limit": 10
            }
        }
    """
    settings_path = Path(path) if path else Path(__file__).parent.parent / "data" / "settings.toml"

    if not settings_path.exists():
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    try:
        loaded = toml.load(str(settings_path))
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning(f"Could not load settings from {settings_path}: {e}; using defaults")
        return _deep_merge(DEFAULT_SETTINGS, {})

    return _deep_merge(DEFAULT_SETTINGS, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence, base is not mutated)
    """
    result = {
        key: _deep_merge(value, {}) if isinstance(value, dict) else value
        for key, value in base.items()
    }

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


@dataclass
class ResultDiff:
    """In-place edits that turn one displayed snapshot into the next."""
    changed: list[tuple[int, CandidateMatch]] = field(default_factory=list)
    truncate_to: int = 0
    removed: int = 0

    def is_empty(self) -> bool:
        return not self.changed and not self.removed


def diff_results(old: Sequence[CandidateMatch], new: Sequence[CandidateMatch]) -> ResultDiff:
    """
    Compute row updates for a list widget showing `old` so it shows `new`.

    Rows whose text and uncertainty are unchanged are left alone, which
    avoids flicker while a search streams in.

    Returns:
        ResultDiff with (index, entry) replacements or appends, and the
        row count to truncate to afterwards
    """
    diff = ResultDiff(truncate_to=len(new), removed=max(0, len(old) - len(new)))
    for index, entry in enumerate(new):
        if index >= len(old) or old[index] != entry:
            diff.changed.append((index, entry))
    return diff


def is_right_to_left(text: str) -> bool:
    """
    True if the first strongly-directional character is right-to-left.

    Consumers use this to right-align Hebrew, Arabic and similar entries.
    """
    for char in text:
        direction = unicodedata.bidirectional(char)
        if direction in ("R", "AL"):
            return True
        if direction == "L":
            return False
    return False
