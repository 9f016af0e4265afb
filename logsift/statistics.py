from __future__ import annotations

from datetime import datetime
import re
from typing import NamedTuple, Optional

from logsift.corpus import LogCorpus

BUSIEST_MINUTE_COUNT = 3

error_warning_match = re.compile(r"\b(err|wrn|error|warn)\b", re.IGNORECASE).search


class StatisticsReport(NamedTuple):
    first_timestamp: Optional[datetime]
    last_timestamp: Optional[datetime]
    total_lines: int
    timestamped_lines: int
    untimestamped_lines: int
    busiest_minutes: list[tuple[str, int]]
    error_warning_lines: int
    other_lines: int
    average_lines_per_minute: float

    @property
    def error_warning_percent(self) -> float:
        if not self.total_lines:
            return 0.0
        return self.error_warning_lines / self.total_lines * 100


def build_statistics(corpus: LogCorpus) -> StatisticsReport:
    first, last = corpus.min_timestamp, corpus.max_timestamp

    average_per_minute = 0.0
    if first is not None and last > first:
        average_per_minute = corpus.timestamped_line_count / ((last - first).total_seconds() / 60)

    error_warning_lines = sum(1 for line in corpus.lines if error_warning_match(line))

    return StatisticsReport(
        first_timestamp=first,
        last_timestamp=last,
        total_lines=corpus.total_lines,
        timestamped_lines=corpus.timestamped_line_count,
        untimestamped_lines=corpus.untimestamped_line_count,
        busiest_minutes=corpus.histogram.busiest(BUSIEST_MINUTE_COUNT),
        error_warning_lines=error_warning_lines,
        other_lines=corpus.total_lines - error_warning_lines,
        average_lines_per_minute=average_per_minute,
    )
