"""
Tests for LookupWorker.

Workers are run directly on the test thread with a list as the inbox and a
mutable "current generation" to simulate supersession.
"""

import pytest

from conftest import FailingDictionary, StubDictionary
from wordfinder.search.dictionaries import FunctionDictionary
from wordfinder.search.dictionary import CandidateMatch
from wordfinder.search.worker import LookupWorker, WorkerReport


class Harness:
    """Inbox plus a settable current generation."""

    def __init__(self, current=1):
        self.reports: list[WorkerReport] = []
        self.current = current

    def worker(self, dictionary, query="ca", generation=1, batch_size=64):
        return LookupWorker(
            dictionary,
            query,
            generation,
            deliver=self.reports.append,
            is_current=lambda g: g == self.current,
            batch_size=batch_size,
        )


class TestLookupWorker:
    """Reporting, batching and staleness checks."""

    def test_single_final_report_tagged_with_generation(self):
        harness = Harness(current=7)
        harness.worker(StubDictionary("d1", ["cat", "car"]), generation=7).run()

        assert harness.reports == [WorkerReport(
            generation=7,
            dictionary="d1",
            candidates=(CandidateMatch("cat"), CandidateMatch("car")),
            final=True,
        )]

    def test_empty_lookup_still_reports_final(self):
        harness = Harness()
        harness.worker(StubDictionary("d1", [])).run()
        assert len(harness.reports) == 1
        assert harness.reports[0].final
        assert harness.reports[0].candidates == ()

    def test_streaming_lookup_is_batched(self):
        harness = Harness()

        def stream(prefix):
            for i in range(5):
                yield f"{prefix}{i}"

        harness.worker(FunctionDictionary("stream", stream), batch_size=2).run()

        assert [len(r.candidates) for r in harness.reports] == [2, 2, 1]
        assert [r.final for r in harness.reports] == [False, False, True]

    def test_stale_worker_never_calls_lookup(self):
        harness = Harness(current=2)
        d1 = StubDictionary("d1", ["cat"])
        harness.worker(d1, generation=1).run()
        assert d1.calls == 0
        assert harness.reports == []

    def test_stream_stops_once_superseded(self):
        harness = Harness()
        produced = []

        def stream(prefix):
            for i in range(100):
                produced.append(i)
                if i == 3:
                    harness.current = 2  # a newer search started
                yield f"{prefix}{i}"

        harness.worker(FunctionDictionary("stream", stream), batch_size=2).run()

        assert len(harness.reports) == 1  # first batch only
        assert len(produced) < 100

    def test_failure_reported_without_candidates(self):
        harness = Harness()
        harness.worker(FailingDictionary()).run()

        assert harness.reports == [WorkerReport(
            generation=1, dictionary="broken", final=True, failed=True,
        )]

    def test_tuple_and_string_items_normalized(self):
        harness = Harness()
        dictionary = FunctionDictionary("mixed", lambda p: ["cat", ("cats", True), CandidateMatch("car")])
        harness.worker(dictionary).run()

        assert harness.reports[0].candidates == (
            CandidateMatch("cat", False),
            CandidateMatch("cats", True),
            CandidateMatch("car", False),
        )

    def test_invalid_batch_size(self):
        with pytest.raises(ValueError):
            Harness().worker(StubDictionary("d1", []), batch_size=0)
