"""
Result Merger - Folds per-dictionary candidates into one ranked snapshot.

Merge policy:
  1. Deduplicate by exact text. The first report sets the uncertain flag,
     but a later exact report for the same text upgrades it. Exact is never
     downgraded back to uncertain.
  2. Sort case-insensitively by text, breaking ties on the raw text so the
     order is total. New entries land in sorted position, which keeps
     consecutive snapshots cheap to diff.
  3. Keep at most max_results entries. Anything past the ceiling is pruned
     from the working set as well, so memory stays bounded no matter how
     many dictionaries report.
"""

from typing import Iterable

from wordfinder.search.dictionary import CandidateMatch


def sort_key(text: str) -> tuple[str, str]:
    """Display order for merged results."""
    return (text.casefold(), text)


class ResultMerger:
    """Accumulates candidates for one search generation."""

    def __init__(self, max_results: int = 50):
        if max_results <= 0:
            raise ValueError(f"max_results must be positive, got {max_results}")
        self.max_results = max_results
        self._entries: dict[str, bool] = {}  # text -> uncertain
        self._snapshot: tuple[CandidateMatch, ...] = ()
        self.saw_exact = False
        self.saw_uncertain = False

    @property
    def snapshot(self) -> tuple[CandidateMatch, ...]:
        return self._snapshot

    def add(self, candidates: Iterable[CandidateMatch]) -> tuple[CandidateMatch, ...]:
        """
        Merge a batch and return the new snapshot.

        Args:
            candidates: Candidates from one dictionary report

        Returns:
            The new immutable snapshot (the previous one is left untouched)
        """
        changed = False
        for candidate in candidates:
            if candidate.uncertain:
                self.saw_uncertain = True
            else:
                self.saw_exact = True

            current = self._entries.get(candidate.text)
            if current is None:
                self._entries[candidate.text] = candidate.uncertain
                changed = True
            elif current and not candidate.uncertain:
                # Exact outranks uncertain for the same text
                self._entries[candidate.text] = False
                changed = True

        if changed:
            self._rebuild()
        return self._snapshot

    def _rebuild(self) -> None:
        ordered = sorted(self._entries, key=sort_key)[:self.max_results]
        self._entries = {text: self._entries[text] for text in ordered}
        self._snapshot = tuple(
            CandidateMatch(text=text, uncertain=self._entries[text])
            for text in ordered
        )
