import pytest

from logsift.analysis import (
    ANALYSES,
    PatternStat,
    SUSPICIOUS_PATTERNS,
    iter_analysis,
    longest_lines,
    ngram_table,
    pattern_stats,
    rare_patterns,
    run_analysis,
    suspicious_lines,
    top_ngrams,
    top_patterns,
)
from logsift.corpus import LogCorpus

from .logsift_testing import sample_corpus


@pytest.fixture(scope="module")
def corpus():
    return sample_corpus()


def test_pattern_stats_partition_the_corpus(corpus):
    stats = pattern_stats(corpus.lines, corpus.normalized_lines())

    assert sum(stat.count for stat in stats) == corpus.total_lines
    assert len({stat.pattern for stat in stats}) == len(stats)


def test_pattern_stats_keep_first_example():
    lines = ["took 5 ms", "took 17 ms", "done"]
    assert pattern_stats(lines) == [
        PatternStat("took <NUM> ms", 2, "took 5 ms"),
        PatternStat("done", 1, "done"),
    ]


def test_top_patterns(corpus):
    top = top_patterns(pattern_stats(corpus.lines, corpus.normalized_lines()))

    assert len(top) == 7
    assert [(stat.pattern, stat.count) for stat in top[:3]] == [
        ("INFO connected to <IP> in <NUM> ms", 3),
        ("INFO request <UUID> handled in <NUM> ms", 3),
        ("INFO service starting version=<NUM>.<NUM>.<NUM> pid=<NUM>", 1),
    ]
    assert top[0].example == "2024-03-05 09:58:12,120 INFO  connected to 10.0.0.5 in 12 ms"


def test_top_patterns_fewer_than_limit():
    stats = pattern_stats(["a", "b", "a"])
    assert [(stat.pattern, stat.count) for stat in top_patterns(stats)] == [("a", 2), ("b", 1)]


def test_rare_patterns(corpus):
    rare = rare_patterns(pattern_stats(corpus.lines, corpus.normalized_lines()))

    assert len(rare) == 5
    assert all(stat.count <= 2 for stat in rare)
    assert [stat.pattern for stat in rare] == [
        "INFO service starting version=<NUM>.<NUM>.<NUM> pid=<NUM>",
        "WARN cache miss for key <HEX>",
        "ERROR connection refused by <IP>",
        "ERROR Traceback follows",
        "Traceback (most recent call last):",
    ]


def test_rare_patterns_prefer_lower_counts():
    lines = ["x 1", "x 2", "y", "z", "z", "z"]
    rare = rare_patterns(pattern_stats(lines))
    assert [(stat.pattern, stat.count) for stat in rare] == [("y", 1), ("x <NUM>", 2)]


def test_longest_lines(corpus):
    longest = longest_lines(corpus.lines)

    assert len(longest) == 5
    assert [len(line) for line in longest] == sorted((len(line) for line in corpus.lines), reverse=True)[:5]
    assert longest[0] == max(corpus.lines, key=len)


def test_longest_lines_ties_keep_file_order():
    assert longest_lines(["bb", "aa", "c", "dd"], 2) == ["bb", "aa"]


def test_suspicious_lines(corpus):
    found = dict(suspicious_lines(corpus.lines))

    assert list(found) == ["timeout", "traceback", "connection refused"]
    assert [match.line_index for match in found["traceback"]] == [7, 8]
    assert [match.line_index for match in found["connection refused"]] == [6, 10]
    assert found["timeout"][0].line == "2024-03-05 10:01:20,000 INFO  request timeout after 30000 ms"


def test_suspicious_returns_most_recent_in_file_order():
    lines = [f"2024-01-01 10:00:00 line {i}" for i in range(1000)]
    for i in (10, 200, 500, 750, 990):
        lines[i] = f"2024-01-01 10:00:00 kernel panic at line {i}"

    found = dict(suspicious_lines(lines))
    assert [match.line_index for match in found["panic"]] == [500, 750, 990]
    assert found["panic"][-1].line == "2024-01-01 10:00:00 kernel panic at line 990"


def test_suspicious_patterns_are_word_bounded():
    found = dict(suspicious_lines([
        "Failed to start",
        "failover complete",
        "unhandled exception",
        "Time out waiting",
    ]))
    assert [match.line for match in found["fail"]] == ["Failed to start"]
    assert "exception" in found
    assert "unhandled" in found
    assert [match.line for match in found["timeout"]] == ["Time out waiting"]


def test_suspicious_labels_are_unique():
    labels = [pattern.label for pattern in SUSPICIOUS_PATTERNS]
    assert len(labels) == len(set(labels))


def test_ngrams(corpus):
    normalized = corpus.normalized_lines()

    bigrams = top_ngrams(normalized, 2)
    assert len(bigrams) == 10
    assert bigrams[:2] == [("in <NUM>", 7), ("<NUM> ms", 7)]

    assert ngram_table(normalized, 3)["in <NUM> ms"] == 6
    assert ngram_table(normalized, 4)["INFO connected to <IP>"] == 3


def test_ngrams_skip_short_lines():
    table = ngram_table(["one", "one two", "one two three"], 3)
    assert table == {"one two three": 1}


def test_iter_analysis_yields_every_analysis(corpus):
    results = dict(iter_analysis(corpus, max_workers=2))

    assert set(results) == set(ANALYSES)
    assert set(results["ngrams"]) == {2, 3, 4}


def test_run_analysis_matches_sequential_results(corpus):
    results = run_analysis(corpus)
    normalized = corpus.normalized_lines()

    assert list(results) == list(ANALYSES)
    assert results["top_patterns"] == top_patterns(pattern_stats(corpus.lines, normalized))
    assert results["rare_patterns"] == rare_patterns(pattern_stats(corpus.lines, normalized))
    assert results["longest_lines"] == longest_lines(corpus.lines)
    assert results["suspicious"] == suspicious_lines(corpus.lines)
    assert results["ngrams"][3] == top_ngrams(normalized, 3)


def test_analysis_of_empty_corpus():
    results = run_analysis(LogCorpus([]))
    assert results["top_patterns"] == []
    assert results["rare_patterns"] == []
    assert results["longest_lines"] == []
    assert results["suspicious"] == []
    assert results["ngrams"] == {2: [], 3: [], 4: []}
