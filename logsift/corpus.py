from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from functools import cached_property
import logging
from typing import NamedTuple, Optional

from logsift.file_reading import FileReader
from logsift.histogram import MinuteHistogram
from logsift.normalizing import normalize_line
from logsift.timestamp_formats import TimestampLayout
from logsift.timestamp_wrapper import LineTimestamp, TimestampExtractor, detect_main_format

logger = logging.getLogger(__name__)


class LogLoadError(OSError):
    pass


class LoadResult(NamedTuple):
    source: str
    total_lines: int
    min_timestamp: Optional[datetime]
    max_timestamp: Optional[datetime]
    main_format: Optional[TimestampLayout]


class LogCorpus:
    """
    The lines of a loaded log file, in file order, each paired with the timestamp found at
    the start of the line (or None). Built once per load and not modified afterwards.
    """
    def __init__(self, lines: Iterable[str], source: str = "<lines>", default_year: Optional[int] = None):
        self.source = source
        self.default_year = default_year
        self.lines: list[str] = []
        self.line_timestamps: list[Optional[LineTimestamp]] = []
        self.histogram = MinuteHistogram()
        self.min_timestamp: Optional[datetime] = None
        self.max_timestamp: Optional[datetime] = None
        self.main_format: Optional[TimestampLayout] = None

        extractor = TimestampExtractor(default_year=default_year)
        for line in lines:
            found = extractor(line)
            self.lines.append(line)
            self.line_timestamps.append(found)
            if found is None:
                continue

            ts = found.timestamp
            if self.min_timestamp is None or ts < self.min_timestamp:
                self.min_timestamp = ts
            if self.max_timestamp is None or ts > self.max_timestamp:
                self.max_timestamp = ts
            self.histogram.add(ts)

        # only the lines already found to carry a timestamp need to be offered
        self.main_format = detect_main_format(
            (line for line, found in zip(self.lines, self.line_timestamps) if found is not None),
            default_year,
        )

        logger.debug(
            "%s: main timestamp format %s",
            self.source,
            self.main_format.name if self.main_format else "undetermined",
        )

    @classmethod
    def load(cls, file_name: str, encoding: str = "utf-8") -> LogCorpus:
        try:
            with FileReader.get_reader(file_name, encoding) as reader:
                corpus = cls(reader, source=file_name, default_year=reader.file_year)
        except (OSError, EOFError, LookupError) as exc:
            raise LogLoadError(f"cannot read log file {file_name!r}: {exc}") from exc

        logger.info(
            "loaded %d lines from %s (%d with timestamps)",
            corpus.total_lines, file_name, corpus.timestamped_line_count,
        )
        return corpus

    def __len__(self):
        return len(self.lines)

    @property
    def total_lines(self) -> int:
        return len(self.lines)

    @property
    def timestamped_line_count(self) -> int:
        return sum(self.histogram.values())

    @property
    def untimestamped_line_count(self) -> int:
        return self.total_lines - self.timestamped_line_count

    @property
    def load_result(self) -> LoadResult:
        return LoadResult(
            self.source,
            self.total_lines,
            self.min_timestamp,
            self.max_timestamp,
            self.main_format,
        )

    @cached_property
    def main_format_timestamps(self) -> list[tuple[int, datetime]]:
        """
        (line index, timestamp) for every line whose leading tokens parse under the main
        format specifically - lines that matched some other catalog layout are not included.
        """
        if self.main_format is None:
            return []
        extractor = TimestampExtractor([self.main_format], self.default_year)
        return [
            (line_index, found.timestamp)
            for line_index, found in enumerate(map(extractor, self.lines))
            if found is not None
        ]

    def normalized_lines(self) -> list[str]:
        return [
            normalize_line(line, found.token_count if found is not None else 0)
            for line, found in zip(self.lines, self.line_timestamps)
        ]
