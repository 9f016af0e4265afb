from __future__ import annotations

from collections.abc import Generator, Iterable, Sequence
from datetime import datetime
import itertools
from typing import NamedTuple, Optional

from logsift.timestamp_formats import FORMAT_CATALOG, TimestampLayout, TimestampNotRecognized

# no catalog layout used at the start of a line spans more than 3 whitespace-separated fields
MAX_TIMESTAMP_TOKENS = 3


class LineTimestamp(NamedTuple):
    timestamp: datetime
    token_count: int
    layout: TimestampLayout


def recognize(
        candidate: str,
        layouts: Sequence[TimestampLayout] = FORMAT_CATALOG,
        default_year: Optional[int] = None,
) -> tuple[datetime, TimestampLayout]:
    """
    Try each layout in priority order, and return the parsed timestamp and the first
    layout that accepts the candidate string.
    """
    for layout in layouts:
        try:
            return layout.parse(candidate, default_year), layout
        except (ValueError, OverflowError):
            continue
    raise TimestampNotRecognized(f"no timestamp layout matches {candidate!r}")


def candidate_prefixes(line: str) -> Generator[tuple[int, str], None, None]:
    """
    Generate (token count, candidate) tuples for the leading 1, 2, and 3 whitespace-separated
    tokens of a line, joined with single spaces.
    """
    tokens = line.split(maxsplit=MAX_TIMESTAMP_TOKENS)
    for token_count in range(1, min(len(tokens), MAX_TIMESTAMP_TOKENS) + 1):
        yield token_count, " ".join(tokens[:token_count])


class TimestampExtractor:
    """
    Callable class to find the timestamp at the start of a log line, using a given set of
    layouts (the full catalog when detecting formats, or just the file's main format when
    navigating to a timestamp).
    """
    def __init__(
            self,
            layouts: Sequence[TimestampLayout] = FORMAT_CATALOG,
            default_year: Optional[int] = None,
    ):
        self.layouts = tuple(layouts)
        self.default_year = default_year

    def __call__(self, line: str) -> Optional[LineTimestamp]:
        for token_count, candidate in candidate_prefixes(line):
            try:
                timestamp, layout = recognize(candidate, self.layouts, self.default_year)
            except TimestampNotRecognized:
                continue
            return LineTimestamp(timestamp, token_count, layout)

        # no leading timestamp
        return None


def extract_timestamp(
        line: str,
        layouts: Sequence[TimestampLayout] = FORMAT_CATALOG,
        default_year: Optional[int] = None,
) -> Optional[LineTimestamp]:
    return TimestampExtractor(layouts, default_year)(line)


def detect_main_format(
        lines: Iterable[str],
        default_year: Optional[int] = None,
) -> Optional[TimestampLayout]:
    """
    Return the layout of the first line (in file order) that has a recognizable timestamp,
    or None if no line has one.
    """
    extractor = TimestampExtractor(FORMAT_CATALOG, default_year)
    for line in lines:
        found = extractor(line)
        if found is not None:
            return found.layout
    return None


def complete_timestamp(s: str, layout: TimestampLayout) -> str:
    """
    Pad a partially-typed timestamp with the missing trailing text of the layout's template,
    token by token. For a layout with template "2006-01-02 00:00:00.000000", the
    input "2024-04-22 12:00" is completed to "2024-04-22 12:00:00.000000".

    This is purely textual - input that does not line up with the template's tokens gives
    a string that will fail to parse.
    """
    completed = []
    for token, template_token in itertools.zip_longest(s.split(), layout.template.split(), fillvalue=""):
        completed.append(token + template_token[len(token):])
    return " ".join(completed)


def parse_user_timestamp(
        s: str,
        layout: TimestampLayout,
        default_year: Optional[int] = None,
) -> datetime:
    return layout.parse(complete_timestamp(s, layout), default_year)


if __name__ == '__main__':
    sample_lines = [
        "2023-07-14 08:00:01,123 WARN   Connection lost due to timeout",
        "Jul 14 08:00:01 myhost sshd[1234]: Accepted publickey",
        "1694561169.550987 Log",
        "no timestamp here",
    ]
    for ln in sample_lines:
        print(extract_timestamp(ln))
