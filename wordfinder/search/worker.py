"""
Lookup Worker - Runs one dictionary lookup on behalf of a search generation.

Workers never touch finder state. They post WorkerReports through the
`deliver` callable (the finder's inbox) and ask `is_current` whether their
generation is still wanted:
  - before calling the dictionary at all (queued work for a superseded
    search is skipped outright)
  - between streamed batches of `batch_size` candidates
  - before the final report

A lookup that raises is logged and reported as failed with no candidates;
the search carries on with the other dictionaries.
"""

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from wordfinder.search.dictionary import CandidateMatch, dictionary_name, to_candidate


@dataclass(frozen=True)
class WorkerReport:
    """One message from a worker to the finder."""
    generation: int
    dictionary: str
    candidates: tuple[CandidateMatch, ...] = ()
    final: bool = False
    failed: bool = False


class LookupWorker:
    """Looks up one query in one dictionary for one generation."""

    def __init__(
        self,
        dictionary,
        query: str,
        generation: int,
        deliver: Callable[[WorkerReport], None],
        is_current: Callable[[int], bool],
        batch_size: int = 64,
    ):
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.dictionary = dictionary
        self.query = query
        self.generation = generation
        self.batch_size = batch_size
        self.name = dictionary_name(dictionary)
        self._deliver = deliver
        self._is_current = is_current

    def run(self) -> None:
        """Execute the lookup. Safe to call from any thread."""
        if not self._still_wanted("before lookup"):
            return

        batch: list[CandidateMatch] = []
        try:
            for item in self.dictionary.lookup(self.query) or ():
                batch.append(to_candidate(item))
                if len(batch) >= self.batch_size:
                    if not self._still_wanted("mid-stream"):
                        return
                    self._post(tuple(batch))
                    batch = []
        except Exception:
            logger.exception(f"Lookup of '{self.query}' in '{self.name}' failed")
            self._post((), final=True, failed=True)
            return

        if not self._still_wanted("after lookup"):
            return
        self._post(tuple(batch), final=True)

    def _still_wanted(self, stage: str) -> bool:
        if self._is_current(self.generation):
            return True
        logger.debug(f"Dropping stale lookup in '{self.name}' (generation {self.generation}, {stage})")
        return False

    def _post(self, candidates: tuple[CandidateMatch, ...], final: bool = False, failed: bool = False) -> None:
        self._deliver(WorkerReport(
            generation=self.generation,
            dictionary=self.name,
            candidates=candidates,
            final=final,
            failed=failed,
        ))
