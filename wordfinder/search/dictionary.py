"""
Dictionary capability - The interface every searchable backend exposes.

A dictionary only has to answer one question: which headwords match this
prefix? Each answer is a CandidateMatch; `uncertain` marks fuzzy, stemmed or
alternate-form hits that the UI renders differently from exact prefix hits.

The finder duck-types dictionaries (anything with a `lookup` method works),
so the ABC below documents the contract rather than enforcing it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Union


@dataclass(frozen=True)
class CandidateMatch:
    """A single headword offered for the typed prefix."""
    text: str
    uncertain: bool = False


# What lookup() may yield: a CandidateMatch, a (text, uncertain) pair, or a bare exact string
LookupItem = Union[CandidateMatch, tuple[str, bool], str]


class Dictionary(ABC):
    """Base class for dictionary backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Dictionary identifier, used in logs."""
        ...

    @abstractmethod
    def lookup(self, prefix: str) -> Iterable[LookupItem]:
        """
        Return candidates for the prefix.

        May be called concurrently from several threads, may be slow, and may
        legitimately return nothing. Returning a generator lets the caller
        stop consuming early once the search is abandoned.
        """
        ...


def to_candidate(item: LookupItem) -> CandidateMatch:
    """Normalize one lookup item into a CandidateMatch."""
    if isinstance(item, CandidateMatch):
        return item
    if isinstance(item, str):
        return CandidateMatch(text=item)
    text, uncertain = item
    return CandidateMatch(text=str(text), uncertain=bool(uncertain))


def dictionary_name(dictionary) -> str:
    """Best-effort display name for any dictionary-like object."""
    name = getattr(dictionary, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(dictionary).__name__
