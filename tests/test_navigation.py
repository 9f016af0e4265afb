import pytest

from datetime import datetime

from logsift.corpus import LogCorpus
from logsift.navigation import (
    FormatUndetermined,
    InvalidFilterExpression,
    InvalidGotoTimestamp,
    filter_lines,
    goto,
    locate_nearest,
)

SCENARIO_LINES = [
    "2024-01-01 10:00:00 INFO start",
    "2024-01-01 10:00:30 ERROR boom id=42",
    "2024-01-01 10:01:00 INFO done",
]


@pytest.fixture
def corpus():
    return LogCorpus(SCENARIO_LINES)


@pytest.mark.parametrize(
    "typed, expected_line_index",
    [
        ("2024-01-01 10:00:40", 1),
        # equidistant from 10:00:30 and 10:01:00 - the later line wins
        ("2024-01-01 10:00:45", 2),
        ("2024-01-01 10:00:15", 1),
        ("2024-01-01 10:00:14", 0),
        ("2024-01-01 10:00:00", 0),
        ("2023-12-31 23:59:59", 0),
        ("2024-01-01 23:00:00", 2),
        # partial timestamps are completed from the layout template
        ("2024-01-01 10:01", 2),
        ("2024-01-01", 0),
    ]
)
def test_goto(corpus, typed, expected_line_index):
    result = goto(corpus, typed)
    assert result.found
    assert result.line_index == expected_line_index


def test_goto_reports_target(corpus):
    result = goto(corpus, "2024-01-01 10:00")
    assert result.target == datetime(2024, 1, 1, 10, 0)


def test_locate_nearest_prefers_first_of_duplicate_timestamps():
    corpus = LogCorpus([
        "2024-01-01 10:00:00 a",
        "2024-01-01 10:00:10 b",
        "2024-01-01 10:00:10 c",
        "2024-01-01 10:00:20 d",
    ])
    assert locate_nearest(corpus, datetime(2024, 1, 1, 10, 0, 9)) == 1
    assert locate_nearest(corpus, datetime(2024, 1, 1, 10, 0, 15)) == 3


def test_locate_nearest_ignores_other_formats():
    corpus = LogCorpus([
        "2024-01-01 10:00:00 main format",
        "2024-01-01T10:00:29Z other format",
        "2024-01-01 10:01:00 main format",
    ])
    assert locate_nearest(corpus, datetime(2024, 1, 1, 10, 0, 29)) == 0


def test_goto_without_main_format():
    corpus = LogCorpus(["no timestamps", "anywhere"])
    with pytest.raises(FormatUndetermined):
        goto(corpus, "2024-01-01 10:00:00")


@pytest.mark.parametrize("typed", ["tomorrow", "2024-13-01", "2024-01-01 99:00"])
def test_goto_invalid_timestamp(corpus, typed):
    with pytest.raises(InvalidGotoTimestamp):
        goto(corpus, typed)


def test_filter_lines(corpus):
    result = filter_lines(corpus, r"INFO\s+\w+")
    assert result.line_indexes == [0, 2]
    assert result.lines == [SCENARIO_LINES[0], SCENARIO_LINES[2]]

    assert filter_lines(corpus, "nothing matches this").lines == []
    assert filter_lines(corpus, "").line_indexes == [0, 1, 2]


def test_filter_is_case_sensitive_unless_asked(corpus):
    assert filter_lines(corpus, "error").lines == []
    assert filter_lines(corpus, "(?i)error").line_indexes == [1]


def test_filter_invalid_expression(corpus):
    with pytest.raises(InvalidFilterExpression):
        filter_lines(corpus, "ERROR[")
