"""
Shared test fixtures for the WordFinder test suite.

Provides real settings files, executors that make dispatch deterministic,
and small dictionary stand-ins (no mocking of the finder internals).
"""

import threading
import time
from concurrent.futures import Executor, Future

import pytest
import toml

from wordfinder.search.dictionary import CandidateMatch
from wordfinder.search.finder import WordFinder


class ImmediateExecutor(Executor):
    """Runs submitted work inline, so lookups finish inside prefix_match()."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, /, *args, **kwargs):
        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class DeferredExecutor(Executor):
    """Holds submitted work until the test runs it, one job at a time."""

    def __init__(self):
        self.pending = []

    @property
    def submitted(self):
        return len(self.pending)

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def run_next(self):
        future, fn, args, kwargs = self.pending.pop(0)
        future.set_result(fn(*args, **kwargs))

    def run_all(self):
        while self.pending:
            self.run_next()


class StubDictionary:
    """Returns a fixed candidate list; counts calls."""

    def __init__(self, name, entries):
        self.name = name
        self.entries = [
            e if isinstance(e, CandidateMatch) else CandidateMatch(*e) if isinstance(e, tuple) else CandidateMatch(e)
            for e in entries
        ]
        self.calls = 0

    def lookup(self, prefix):
        self.calls += 1
        return [e for e in self.entries if e.uncertain or e.text.startswith(prefix)]


class FailingDictionary:
    """Raises on every lookup."""

    name = "broken"

    def lookup(self, prefix):
        raise OSError("dictionary file vanished")


class SlowDictionary:
    """Sleeps before answering, to measure parallelism."""

    def __init__(self, name, words, delay):
        self.name = name
        self.words = words
        self.delay = delay

    def lookup(self, prefix):
        time.sleep(self.delay)
        return [w for w in self.words if w.startswith(prefix)]


class GatedDictionary:
    """Blocks inside lookup until the test opens the gate."""

    def __init__(self, name, words):
        self.name = name
        self.words = words
        self.gate = threading.Event()
        self.entered = threading.Event()

    def lookup(self, prefix):
        self.entered.set()
        self.gate.wait(timeout=5)
        return [w for w in self.words if w.startswith(prefix)]


class Recorder:
    """Collects (signal, generation, results) tuples from a finder."""

    def __init__(self, finder):
        self.events = []
        self._lock = threading.Lock()
        finder.connect("updated", lambda g, r: self._add("updated", g, r))
        finder.connect("finished", lambda g, r: self._add("finished", g, r))

    def _add(self, signal, generation, results):
        with self._lock:
            self.events.append((signal, generation, results))

    def signals(self):
        with self._lock:
            return [(signal, generation) for signal, generation, _ in self.events]

    def finished(self):
        with self._lock:
            return [e for e in self.events if e[0] == "finished"]


@pytest.fixture
def immediate_executor():
    return ImmediateExecutor()


@pytest.fixture
def deferred_executor():
    return DeferredExecutor()


@pytest.fixture
def manual_finder(immediate_executor):
    """Finder driven by process_pending(), with lookups run inline."""
    finder = WordFinder(
        executor=immediate_executor,
        auto_dispatch=False,
        update_interval_ms=0,
    )
    yield finder
    finder.close()


@pytest.fixture
def deferred_finder(deferred_executor):
    """Finder driven by process_pending(), with lookups run on demand."""
    finder = WordFinder(
        executor=deferred_executor,
        auto_dispatch=False,
        update_interval_ms=0,
    )
    yield finder
    finder.close()


@pytest.fixture
def threaded_finder():
    """Finder with its own thread pool and dispatcher thread."""
    finder = WordFinder(max_workers=8, update_interval_ms=0, search_timeout_ms=5000)
    yield finder
    finder.close()


@pytest.fixture
def tmp_settings(tmp_path):
    """Create a real settings TOML file with all sections."""
    settings_path = tmp_path / "settings.toml"
    data = {
        "word_finder": {
            "max_results": 20,
            "max_workers": 4,
            "update_interval_ms": 50,
            "search_timeout_ms": 2000,
            "batch_size": 16,
        },
        "fuzzy": {"threshold": 80, "limit": 5},
    }
    settings_path.write_text(toml.dumps(data))
    return settings_path
