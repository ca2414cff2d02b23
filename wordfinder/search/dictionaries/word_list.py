"""
Word List Dictionary - Exact prefix search over an in-memory headword list.

Headwords are de-duplicated and kept sorted by their casefolded form, so a
prefix lookup is two bisects and a slice regardless of list size.
"""

from bisect import bisect_left
from typing import Iterable

from loguru import logger

from wordfinder.search.dictionary import CandidateMatch, Dictionary


class WordListDictionary(Dictionary):
    """Case-insensitive prefix matching against a fixed set of headwords."""

    def __init__(self, name: str, words: Iterable[str], max_matches: int | None = None):
        self._name = name
        self.max_matches = max_matches

        unique = {w.strip() for w in words if w and w.strip()}
        self._words = sorted(unique, key=lambda w: (w.casefold(), w))
        self._folded = [w.casefold() for w in self._words]
        logger.debug(f"Dictionary '{name}' loaded with {len(self._words)} headwords")

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return len(self._words)

    def lookup(self, prefix: str) -> list[CandidateMatch]:
        return [CandidateMatch(text=w) for w in self._prefix_run(prefix)]

    def _prefix_run(self, prefix: str) -> list[str]:
        """Headwords starting with prefix, in sorted order."""
        folded = prefix.strip().casefold()
        if not folded:
            return []

        start = bisect_left(self._folded, folded)
        end = start
        while end < len(self._folded) and self._folded[end].startswith(folded):
            if self.max_matches is not None and end - start >= self.max_matches:
                break
            end += 1

        return self._words[start:end]
