#!/usr/bin/env python3
"""Benchmark WordFinder search latency.

Compares a full prefix search across N slow dictionaries against looking
them up one after another, then measures how fast a superseded search is
abandoned while the user keeps typing. Prints a markdown report and saves it
to data/bench-search/benchmark-report.md.

Usage:
    python3 scripts/bench-search.py [DICTIONARIES]
    # Default: 6 dictionaries, 50ms per lookup
"""

import math
import os
import sys
import time

from loguru import logger

from wordfinder.search.dictionaries import FunctionDictionary
from wordfinder.search.finder import WordFinder

RUNS = 20
DICTIONARIES = int(sys.argv[1]) if len(sys.argv) > 1 else 6
LOOKUP_DELAY = 0.05
WORDS = [f"word{i:04d}" for i in range(2000)]

# Output directory for the markdown report
OUT_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "data", "bench-search")

# Collect all output for the markdown report
report_lines = []


def log(line=""):
    """Print to terminal and buffer for report."""
    print(line)
    report_lines.append(line)


def stats(values):
    """Compute min, max, avg, median, p5, p95, stddev from a list of floats."""
    s = sorted(values)
    n = len(s)
    avg = sum(s) / n
    variance = sum((x - avg) ** 2 for x in s) / n
    return {
        "min": s[0],
        "max": s[-1],
        "avg": avg,
        "median": s[n // 2] if n % 2 else (s[n // 2 - 1] + s[n // 2]) / 2,
        "p5": s[max(0, int(n * 0.05))],
        "p95": s[min(n - 1, int(n * 0.95))],
        "stddev": math.sqrt(variance),
        "n": n,
    }


def make_dictionary(index):
    """A dictionary whose every lookup costs LOOKUP_DELAY."""
    def lookup(prefix):
        time.sleep(LOOKUP_DELAY)
        return [w for w in WORDS if w.startswith(prefix)]
    return FunctionDictionary(f"slow-{index}", lookup)


def bench_sequential(dictionaries, runs=RUNS):
    """Baseline: one lookup after another on the calling thread."""
    times = []
    for _ in range(runs):
        start = time.perf_counter()
        for d in dictionaries:
            list(d.lookup("word1"))
        times.append((time.perf_counter() - start) * 1000)
    return stats(times)


def bench_finder(dictionaries, runs=RUNS):
    """Full WordFinder search until "finished"."""
    times = []
    with WordFinder(max_workers=len(dictionaries)) as finder:
        for _ in range(runs):
            start = time.perf_counter()
            finder.prefix_match("word1", dictionaries)
            finder.wait_finished(timeout=10)
            times.append((time.perf_counter() - start) * 1000)
    return stats(times)


def bench_typing(dictionaries, runs=RUNS):
    """Type "word12" one key at a time; only the last search should finish."""
    times = []
    finished = []
    with WordFinder(max_workers=len(dictionaries)) as finder:
        finder.connect("finished", lambda g, r: finished.append(g))
        for _ in range(runs):
            finished.clear()
            start = time.perf_counter()
            for end in range(1, len("word12") + 1):
                finder.prefix_match("word12"[:end], dictionaries)
            finder.wait_finished(timeout=10)
            times.append((time.perf_counter() - start) * 1000)
            if finished != [finder.generation]:
                logger.warning(f"Unexpected finished generations: {finished}")
    return stats(times)


def format_row(label, s):
    return (f"| {label} | {s['avg']:.1f} | {s['median']:.1f} | {s['p95']:.1f} "
            f"| {s['min']:.1f} | {s['max']:.1f} | {s['stddev']:.1f} |")


def main():
    dictionaries = [make_dictionary(i) for i in range(DICTIONARIES)]

    log(f"# WordFinder benchmark ({DICTIONARIES} dictionaries, {LOOKUP_DELAY * 1000:.0f}ms lookups, {RUNS} runs)")
    log()
    log("| Mode | avg ms | median | p95 | min | max | stddev |")
    log("|---|---|---|---|---|---|---|")
    log(format_row("sequential", bench_sequential(dictionaries)))
    log(format_row("word finder", bench_finder(dictionaries)))
    log(format_row("typing (6 keys)", bench_typing(dictionaries)))

    os.makedirs(OUT_DIR, exist_ok=True)
    report_path = os.path.join(OUT_DIR, "benchmark-report.md")
    with open(report_path, "w") as f:
        f.write("\n".join(report_lines) + "\n")
    print(f"\nReport saved to: {report_path}")


if __name__ == "__main__":
    main()
