"""
Search package - Prefix search coordination across dictionary backends.

Provides the WordFinder coordinator, the worker adapter that runs one
dictionary lookup, and the merger that folds candidates into one snapshot.
"""

from .dictionary import CandidateMatch, Dictionary
from .finder import SearchState, WordFinder
from .merger import ResultMerger
from .worker import LookupWorker, WorkerReport

__all__ = [
    "WordFinder",
    "SearchState",
    "CandidateMatch",
    "Dictionary",
    "ResultMerger",
    "LookupWorker",
    "WorkerReport",
]
