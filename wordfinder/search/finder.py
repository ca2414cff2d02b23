"""
Word Finder - Incremental prefix search across many dictionaries.

Every prefix_match() call starts a new search generation. One LookupWorker
per dictionary runs on a thread pool and posts WorkerReports to the finder's
inbox. The dispatcher takes reports off the inbox, drops any whose generation
is no longer current, merges the rest and notifies subscribers:

    updated(generation, results)   zero or more times, throttled
    finished(generation, results)  exactly once, always last

A later prefix_match(), cancel() or clear() supersedes the running
generation: its remaining reports are discarded and nothing more is emitted
for it. Workers are never interrupted; they notice they are stale and stop.

Dispatch modes:
  - auto_dispatch=True: a daemon thread drains the inbox. Callbacks run on
    that thread while the finder lock is held, so they must not wait on the
    thread that calls prefix_match().
  - auto_dispatch=False: nothing runs until the owner calls
    process_pending(), typically from a GUI event loop timer. Callbacks then
    run on the owner's thread.
"""

import queue
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from loguru import logger

from wordfinder.search.dictionary import CandidateMatch
from wordfinder.search.merger import ResultMerger
from wordfinder.search.worker import LookupWorker, WorkerReport

SIGNALS = ("updated", "finished")

# Inbox control messages
_STOP = object()
_WAKE = object()

Callback = Callable[[int, tuple[CandidateMatch, ...]], None]


@dataclass
class SearchState:
    """Bookkeeping for one generation. Only mutated under the finder lock."""
    generation: int
    query: str = ""
    merger: ResultMerger = field(default_factory=ResultMerger)
    results: tuple[CandidateMatch, ...] = ()
    outstanding: int = 0
    failed: int = 0
    uncertain: bool = False
    done: bool = True
    cancelled: bool = False
    dirty: bool = False
    deadline: Optional[float] = None
    last_update: float = float("-inf")


class WordFinder:
    """
    Coordinates prefix lookups, merging and stale-result suppression.

    Args:
        max_results: Ceiling on merged entries per snapshot
        max_workers: Thread pool size for lookups (ignored with executor)
        update_interval_ms: Minimum spacing between "updated" notifications
        search_timeout_ms: Give up on slow dictionaries after this long (0 = never)
        batch_size: Candidates per report when a dictionary streams results
        executor: Run lookups here instead of an owned thread pool
        auto_dispatch: Drain the inbox on a background thread

    The dispatcher thread starts with the first search and keeps the finder
    alive until close() is called, so use close() or a with block.
    """

    def __init__(
        self,
        max_results: int = 50,
        max_workers: int = 8,
        update_interval_ms: int = 100,
        search_timeout_ms: int = 10000,
        batch_size: int = 64,
        executor: Executor | None = None,
        auto_dispatch: bool = True,
    ):
        if max_results <= 0:
            raise ValueError(f"max_results must be positive, got {max_results}")
        if max_workers <= 0:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if update_interval_ms < 0 or search_timeout_ms < 0:
            raise ValueError("update_interval_ms and search_timeout_ms must not be negative")

        self.max_results = max_results
        self.max_workers = max_workers
        self.update_interval = update_interval_ms / 1000
        self.search_timeout = search_timeout_ms / 1000
        self.batch_size = batch_size

        self._lock = threading.RLock()
        self._finished_cond = threading.Condition(self._lock)
        self._inbox: queue.Queue = queue.Queue()
        self._handlers: dict[str, dict[int, Callback]] = {name: {} for name in SIGNALS}
        self._next_handler_id = 1

        self._generation = 0
        self._state = SearchState(generation=0, merger=ResultMerger(max_results))

        self._executor = executor
        self._owns_executor = executor is None
        self._closed = False

        # Started by the first prefix_match()
        self._auto_dispatch = auto_dispatch
        self._dispatcher: threading.Thread | None = None

    @classmethod
    def from_settings(cls, settings: dict | None = None, **kwargs) -> "WordFinder":
        """Build a finder from the [word_finder] settings section."""
        if settings is None:
            from wordfinder.utils.helpers import load_settings
            settings = load_settings()

        section = settings.get("word_finder", {})
        options = {
            key: section[key]
            for key in ("max_results", "max_workers", "update_interval_ms",
                        "search_timeout_ms", "batch_size")
            if key in section
        }
        options.update(kwargs)
        return cls(**options)

    # Subscription

    def connect(self, signal: str, callback: Callback) -> int:
        """
        Subscribe to "updated" or "finished".

        Returns:
            Handler ID for disconnect()
        """
        if signal not in SIGNALS:
            raise ValueError(f"Unknown signal '{signal}', expected one of {SIGNALS}")

        with self._lock:
            handler_id = self._next_handler_id
            self._next_handler_id += 1
            self._handlers[signal][handler_id] = callback
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        """Remove a subscription. Unknown IDs are ignored."""
        with self._lock:
            for handlers in self._handlers.values():
                if handlers.pop(handler_id, None) is not None:
                    return
        logger.debug(f"disconnect: no handler with id {handler_id}")

    # Public search contract

    def prefix_match(self, query: str, dictionaries: Iterable) -> None:
        """
        Start a new search generation, superseding the current one.

        An empty (or whitespace-only) query, or an empty dictionary set,
        finishes synchronously with no results and no lookups.
        """
        query = (query or "").strip()
        dictionaries = list(dictionaries or ())

        with self._lock:
            self._check_open()
            self._ensure_dispatcher()
            self._generation += 1
            generation = self._generation
            state = SearchState(
                generation=generation,
                query=query,
                merger=ResultMerger(self.max_results),
                done=False,
            )
            self._state = state

            if not query or not dictionaries:
                self._finish(state)
                return

            state.outstanding = len(dictionaries)
            if self.search_timeout:
                state.deadline = time.monotonic() + self.search_timeout

            executor = self._get_executor()
            for dictionary in dictionaries:
                worker = LookupWorker(
                    dictionary,
                    query,
                    generation,
                    deliver=self._inbox.put,
                    is_current=self._is_current,
                    batch_size=self.batch_size,
                )
                executor.submit(worker.run)

            logger.debug(f"Generation {generation}: '{query}' dispatched to {len(dictionaries)} dictionaries")

        # Let the dispatcher pick up the new deadline
        if self._auto_dispatch:
            self._inbox.put(_WAKE)

    def cancel(self) -> None:
        """
        Retire the current generation without waiting for its workers.

        Once this returns, nothing more is emitted for that generation and
        get_results() keeps the snapshot it had.
        """
        with self._lock:
            self._generation += 1
            self._retire(self._state)

    def clear(self) -> None:
        """Cancel any running search and drop its results."""
        with self._lock:
            self._generation += 1
            self._retire(self._state)
            self._state = SearchState(
                generation=self._generation,
                merger=ResultMerger(self.max_results),
            )

    def get_results(self) -> tuple[CandidateMatch, ...]:
        """Current snapshot of the latest generation, possibly still in progress."""
        with self._lock:
            return self._state.results

    def was_search_uncertain(self) -> bool:
        """
        Whether the latest finished search found nothing with confidence.

        True when no dictionary reported an exact match, yet something
        uncertain turned up or some dictionary failed or timed out.
        Only meaningful once "finished" has fired.
        """
        with self._lock:
            return self._state.uncertain

    def no_results_mark(self) -> bool:
        """True when a finished, non-empty query found nothing at all."""
        with self._lock:
            state = self._state
            return (state.done and not state.cancelled and bool(state.query)
                    and not state.results and not state.uncertain)

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def query(self) -> str:
        with self._lock:
            return self._state.query

    def is_finished(self) -> bool:
        """True once the latest generation finished or was superseded."""
        with self._lock:
            return self._state.done

    def wait_finished(self, timeout: float | None = None) -> bool:
        """
        Block until the latest generation is finished or superseded.

        In manual dispatch mode this pumps the inbox itself. Do not call it
        from a notification callback.

        Returns:
            False if the timeout expired first
        """
        if self._auto_dispatch:
            with self._finished_cond:
                return self._finished_cond.wait_for(lambda: self._state.done, timeout)

        deadline = None if timeout is None else time.monotonic() + timeout
        while not self.is_finished():
            remaining = None if deadline is None else deadline - time.monotonic()
            if remaining is not None and remaining <= 0:
                return False
            self.process_pending(timeout=0.05 if remaining is None else min(0.05, remaining))
        return True

    def process_pending(self, timeout: float = 0.0) -> int:
        """
        Apply queued worker reports (manual dispatch mode only).

        Args:
            timeout: Seconds to wait for the first report; 0 returns at once

        Returns:
            Number of reports accepted for the current generation
        """
        if self._auto_dispatch:
            raise RuntimeError("process_pending() is only available with auto_dispatch=False")

        items, _stop = self._collect(timeout)
        return self._handle(items)

    # Lifecycle

    def close(self) -> None:
        """Cancel the current search, stop the dispatcher and release the pool."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._generation += 1
            self._retire(self._state)

        dispatcher = self._dispatcher
        if dispatcher is not None:
            self._inbox.put(_STOP)
            if dispatcher is not threading.current_thread():
                dispatcher.join()
            self._dispatcher = None

        if self._owns_executor and self._executor is not None:
            # Running lookups notice they are stale and return on their own
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def __enter__(self) -> "WordFinder":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Internals

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("WordFinder is closed")

    def _get_executor(self) -> Executor:
        """Lazily create the owned thread pool."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="wordfinder",
            )
        return self._executor

    def _ensure_dispatcher(self) -> None:
        """Start the dispatcher thread if auto-dispatching. Caller holds the lock."""
        if self._auto_dispatch and self._dispatcher is None:
            self._dispatcher = threading.Thread(
                target=self._dispatch_loop,
                name="wordfinder-dispatch",
                daemon=True,
            )
            self._dispatcher.start()

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _retire(self, state: SearchState) -> None:
        """Mark a generation superseded. Caller holds the lock."""
        if not state.done:
            logger.debug(f"Generation {state.generation}: '{state.query}' superseded")
            state.cancelled = True
        state.done = True
        state.dirty = False
        self._finished_cond.notify_all()

    def _dispatch_loop(self) -> None:
        while True:
            with self._lock:
                timeout = self._next_wakeup()
            items, stop = self._collect(timeout)
            self._handle(items)
            if stop:
                return

    def _collect(self, timeout: float | None) -> tuple[list[WorkerReport], bool]:
        """Wait up to timeout for one inbox message, then take everything queued."""
        messages = []
        try:
            if timeout is not None and timeout <= 0:
                messages.append(self._inbox.get_nowait())
            else:
                messages.append(self._inbox.get(timeout=timeout))
            while True:
                messages.append(self._inbox.get_nowait())
        except queue.Empty:
            pass

        reports = [m for m in messages if isinstance(m, WorkerReport)]
        return reports, any(m is _STOP for m in messages)

    def _handle(self, reports: list[WorkerReport]) -> int:
        with self._lock:
            accepted = sum(1 for report in reports if self._accept(report))
            self._flush(time.monotonic())
        return accepted

    def _next_wakeup(self) -> float | None:
        """Seconds until a throttled update or deadline is due. Caller holds the lock."""
        state = self._state
        if state.done:
            return None

        now = time.monotonic()
        waits = []
        if state.dirty:
            waits.append(state.last_update + self.update_interval - now)
        if state.deadline is not None:
            waits.append(state.deadline - now)
        return max(0.0, min(waits)) if waits else None

    def _accept(self, report: WorkerReport) -> bool:
        """Generation gate and merge. Caller holds the lock."""
        state = self._state
        if report.generation != self._generation or state.done:
            logger.debug(f"Discarding report from '{report.dictionary}' for stale generation {report.generation}")
            return False

        if report.candidates:
            before = state.results
            state.results = state.merger.add(report.candidates)
            if state.results is not before:
                state.dirty = True
        if report.failed:
            state.failed += 1
        if report.final:
            state.outstanding -= 1
        return True

    def _flush(self, now: float) -> None:
        """Emit whatever the current state calls for. Caller holds the lock."""
        state = self._state
        if state.done:
            return

        if state.outstanding > 0 and state.deadline is not None and now >= state.deadline:
            logger.warning(
                f"Search for '{state.query}' timed out waiting on {state.outstanding} dictionaries"
            )
            state.failed += state.outstanding
            state.outstanding = 0

        if state.outstanding <= 0:
            self._finish(state)
            return

        if state.dirty and now - state.last_update >= self.update_interval:
            state.dirty = False
            state.last_update = now
            self._emit("updated", state.generation, state.results)

    def _finish(self, state: SearchState) -> None:
        """Close out a generation and emit "finished". Caller holds the lock."""
        merger = state.merger
        state.uncertain = not merger.saw_exact and (merger.saw_uncertain or state.failed > 0)
        state.done = True
        state.dirty = False
        logger.debug(
            f"Generation {state.generation}: '{state.query}' finished with "
            f"{len(state.results)} results (uncertain={state.uncertain})"
        )
        self._finished_cond.notify_all()
        self._emit("finished", state.generation, state.results)

    def _emit(self, signal: str, generation: int, results: tuple[CandidateMatch, ...]) -> None:
        for handler_id, callback in list(self._handlers[signal].items()):
            try:
                callback(generation, results)
            except Exception:
                logger.exception(f"'{signal}' handler {handler_id} raised")
