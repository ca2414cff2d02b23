"""
Fuzzy Word List Dictionary - Prefix search with typo-tolerant suggestions.

Yields the exact prefix run first, then rapidfuzz suggestions for headwords
that do not start with the query. Suggestions are flagged uncertain so the
UI can render them apart from exact hits.

Lookup is a generator: the caller may stop consuming between items once the
search has been superseded, and the fuzzy pass is never computed then.
"""

from typing import Iterable, Iterator

from loguru import logger
from rapidfuzz import fuzz, process

from wordfinder.search.dictionaries.word_list import WordListDictionary
from wordfinder.search.dictionary import CandidateMatch


class FuzzyWordListDictionary(WordListDictionary):
    """Exact prefix matches plus weighted-ratio fuzzy suggestions."""

    def __init__(
        self,
        name: str,
        words: Iterable[str],
        threshold: int = 70,
        limit: int = 10,
        max_matches: int | None = None,
    ):
        super().__init__(name, words, max_matches=max_matches)
        self.threshold = threshold
        self.limit = limit

    @classmethod
    def from_settings(cls, name: str, words: Iterable[str], settings: dict | None = None):
        """Build from the [fuzzy] settings section."""
        if settings is None:
            from wordfinder.utils.helpers import load_settings
            settings = load_settings()
        fuzzy = settings.get("fuzzy", {})
        return cls(
            name,
            words,
            threshold=fuzzy.get("threshold", 70),
            limit=fuzzy.get("limit", 10),
        )

    def lookup(self, prefix: str) -> Iterator[CandidateMatch]:
        query = prefix.strip()
        if not query:
            return

        for word in self._prefix_run(query):
            yield CandidateMatch(text=word)

        yield from self._suggestions(query)

    def _suggestions(self, query: str) -> Iterator[CandidateMatch]:
        """Fuzzy matches against headwords that do not start with the query."""
        if self.limit <= 0 or not self._words:
            return

        folded = query.casefold()
        matches = process.extract(
            folded,
            self._folded,
            scorer=fuzz.WRatio,
            limit=None,
            score_cutoff=self.threshold,
        )

        # matches: list of (matched_string, score, index), best first
        count = 0
        for matched, _score, index in matches:
            # Prefix hits are exact even when max_matches left them out
            if matched.startswith(folded):
                continue
            yield CandidateMatch(text=self._words[index], uncertain=True)
            count += 1
            if count >= self.limit:
                break

        logger.debug(f"Dictionary '{self.name}' offered {count} fuzzy suggestions for '{query}'")
