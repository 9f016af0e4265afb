from __future__ import annotations

from datetime import datetime
import re
from typing import NamedTuple, Optional

from logsift.corpus import LogCorpus
from logsift.timestamp_wrapper import parse_user_timestamp


class InvalidFilterExpression(ValueError):
    pass


class FormatUndetermined(ValueError):
    pass


class InvalidGotoTimestamp(ValueError):
    pass


class FilterResult(NamedTuple):
    expression: str
    line_indexes: list[int]
    lines: list[str]


class GotoResult(NamedTuple):
    target: datetime
    line_index: Optional[int]

    @property
    def found(self) -> bool:
        return self.line_index is not None


def filter_lines(corpus: LogCorpus, expression: str) -> FilterResult:
    try:
        regex = re.compile(expression)
    except re.error as exc:
        raise InvalidFilterExpression(f"invalid regular expression {expression!r}: {exc}") from exc

    line_indexes = [i for i, line in enumerate(corpus.lines) if regex.search(line)]
    return FilterResult(expression, line_indexes, [corpus.lines[i] for i in line_indexes])


def locate_nearest(corpus: LogCorpus, target: datetime) -> Optional[int]:
    """
    Return the index of the line whose main-format timestamp is closest to target.
    When two lines are equally close, the one after the target wins; among lines with
    the same timestamp, the first one in the file wins.
    """
    best_index = None
    best_key = None
    for line_index, ts in corpus.main_format_timestamps:
        # False sorts before True, so a timestamp after the target beats one before it
        key = (abs(ts - target), ts <= target)
        if best_key is None or key < best_key:
            best_index, best_key = line_index, key
    return best_index


def goto(corpus: LogCorpus, timestamp_str: str) -> GotoResult:
    """
    Parse a (possibly partial) user-typed timestamp using the corpus's main format, and
    find the nearest log line.
    """
    if corpus.main_format is None:
        raise FormatUndetermined("timestamp format undetermined - no line in the file has a recognized timestamp")

    try:
        target = parse_user_timestamp(timestamp_str, corpus.main_format, corpus.default_year)
    except (ValueError, OverflowError) as exc:
        raise InvalidGotoTimestamp(
            f"cannot parse {timestamp_str!r} as a timestamp like {corpus.main_format.template!r}"
        ) from exc

    return GotoResult(target, locate_nearest(corpus, target))
