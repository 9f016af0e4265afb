"""
Frequency analyses over a loaded log corpus, for triaging an unfamiliar log file:

- top_patterns - the most frequent normalized line patterns
- rare_patterns - patterns that occur only once or twice
- longest_lines - the longest raw lines
- suspicious - the most recent lines matching failure/severity keywords
- ngrams - the most frequent 2-, 3-, and 4-word phrases of the normalized lines

Each analysis is a pure function of the lines and their normalized patterns, so
iter_analysis() can run them concurrently and hand back each result as soon as it
is ready.
"""
from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Generator, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
import heapq
import logging
import re
from typing import Any, NamedTuple, Optional

from logsift.corpus import LogCorpus
from logsift.normalizing import normalize_line

logger = logging.getLogger(__name__)

TOP_PATTERN_COUNT = 7
RARE_PATTERN_COUNT = 5
RARE_PATTERN_MAX_OCCURRENCES = 2
LONGEST_LINE_COUNT = 5
SUSPICIOUS_MATCH_LIMIT = 3
NGRAM_SIZES = (2, 3, 4)
TOP_NGRAM_COUNT = 10


class PatternStat(NamedTuple):
    pattern: str
    count: int
    example: str


class SuspiciousPattern(NamedTuple):
    label: str
    regex: re.Pattern


class SuspiciousMatch(NamedTuple):
    line_index: int
    line: str


class NGramStat(NamedTuple):
    phrase: str
    count: int


SUSPICIOUS_PATTERNS = tuple(
    SuspiciousPattern(label, re.compile(pattern, re.IGNORECASE))
    for label, pattern in [
        ("fail", r"\bfail(ed|ing|s)?\b"),
        ("exception", r"\bexceptions?\b"),
        ("panic", r"\bpanic(s|ed|ing)?\b"),
        ("critical", r"\bcritical\b"),
        ("abort", r"\babort(ed|ing|s)?\b"),
        ("timeout", r"\btime\s?out(s|ed|ing)?\b"),
        ("traceback", r"\btraceback\b"),
        ("unreachable", r"\bunreachable\b"),
        ("unhandled", r"\bunhandled\b"),
        ("fatal", r"\bfatal\b"),
        ("segfault", r"\bsegfault\b"),
        ("stacktrace", r"\bstack\s?trace\b"),
        # phrases
        ("not found", r"not found"),
        ("could not", r"could not"),
        ("no such file", r"no such file"),
        ("connection refused", r"connection refused"),
        ("permission denied", r"permission denied"),
        ("out of memory", r"out of memory"),
        ("disk full", r"disk full"),
        ("broken pipe", r"broken pipe"),
    ]
)


def pattern_stats(lines: Sequence[str], normalized: Optional[Sequence[str]] = None) -> list[PatternStat]:
    """
    Group lines by normalized pattern; returns one PatternStat per distinct pattern,
    in order of first appearance, with the first raw line seen as the example.
    """
    if normalized is None:
        normalized = [normalize_line(line) for line in lines]

    counts = Counter(normalized)
    examples = {}
    for pattern, line in zip(normalized, lines):
        examples.setdefault(pattern, line)
    return [PatternStat(pattern, counts[pattern], example) for pattern, example in examples.items()]


def top_patterns(stats: Sequence[PatternStat], n: int = TOP_PATTERN_COUNT) -> list[PatternStat]:
    # sorted() is stable, so equal counts keep their first-appearance order
    return sorted(stats, key=lambda stat: stat.count, reverse=True)[:n]


def rare_patterns(
        stats: Sequence[PatternStat],
        n: int = RARE_PATTERN_COUNT,
        max_occurrences: int = RARE_PATTERN_MAX_OCCURRENCES,
) -> list[PatternStat]:
    rare = [stat for stat in stats if stat.count <= max_occurrences]
    return sorted(rare, key=lambda stat: stat.count)[:n]


def longest_lines(lines: Sequence[str], n: int = LONGEST_LINE_COUNT) -> list[str]:
    return heapq.nlargest(n, lines, key=len)


def suspicious_lines(
        lines: Sequence[str],
        patterns: Sequence[SuspiciousPattern] = SUSPICIOUS_PATTERNS,
        limit: int = SUSPICIOUS_MATCH_LIMIT,
) -> list[tuple[str, list[SuspiciousMatch]]]:
    """
    For each keyword pattern, find the last `limit` matching lines, returned in file
    order. Patterns with no matches are omitted. A line may be reported under more
    than one pattern.
    """
    results = []
    for label, regex in patterns:
        matches = []
        for line_index in range(len(lines) - 1, -1, -1):
            if regex.search(lines[line_index]):
                matches.append(SuspiciousMatch(line_index, lines[line_index]))
                if len(matches) == limit:
                    break
        if matches:
            matches.reverse()
            results.append((label, matches))
    return results


def ngram_table(normalized: Sequence[str], n: int) -> Counter:
    table = Counter()
    for pattern in normalized:
        words = pattern.split()
        table.update(" ".join(words[i:i + n]) for i in range(len(words) - n + 1))
    return table


def top_ngrams(normalized: Sequence[str], n: int, count: int = TOP_NGRAM_COUNT) -> list[NGramStat]:
    # most_common() keeps first-seen order for equal counts
    return [NGramStat(phrase, freq) for phrase, freq in ngram_table(normalized, n).most_common(count)]


AnalysisFunction = Callable[[Sequence[str], Sequence[str]], Any]

# analysis name -> function(lines, normalized lines)
ANALYSES: dict[str, AnalysisFunction] = {
    "top_patterns": lambda lines, normalized: top_patterns(pattern_stats(lines, normalized)),
    "rare_patterns": lambda lines, normalized: rare_patterns(pattern_stats(lines, normalized)),
    "longest_lines": lambda lines, normalized: longest_lines(lines),
    "suspicious": lambda lines, normalized: suspicious_lines(lines),
    "ngrams": lambda lines, normalized: {n: top_ngrams(normalized, n) for n in NGRAM_SIZES},
}


def iter_analysis(
        corpus: LogCorpus,
        max_workers: Optional[int] = None,
) -> Generator[tuple[str, Any], None, None]:
    """
    Run all analyses concurrently, yielding (analysis name, result) tuples in order
    of completion.
    """
    lines = corpus.lines
    normalized = corpus.normalized_lines()

    with ThreadPoolExecutor(max_workers=max_workers or len(ANALYSES)) as executor:
        futures = {
            executor.submit(analysis_fn, lines, normalized): name
            for name, analysis_fn in ANALYSES.items()
        }
        for future in as_completed(futures):
            name = futures[future]
            logger.debug("analysis %s complete", name)
            yield name, future.result()


def run_analysis(corpus: LogCorpus) -> dict[str, Any]:
    """
    Run all analyses, and return their results keyed by analysis name (in ANALYSES order).
    """
    results = dict(iter_analysis(corpus))
    return {name: results[name] for name in ANALYSES}
