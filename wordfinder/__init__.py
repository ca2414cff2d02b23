# WordFinder Package
"""
Incremental prefix search across many dictionaries.

Modules:
  - search: Coordinator, worker adapter and result merger
  - search.dictionaries: In-memory and adapter dictionary backends
  - utils: Settings loading and helpers for result list consumers
"""

from .search import CandidateMatch, Dictionary, WordFinder

__version__ = "0.1.0-dev"

__all__ = ["WordFinder", "CandidateMatch", "Dictionary"]
