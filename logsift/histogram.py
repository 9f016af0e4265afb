from __future__ import annotations

from collections import Counter
from datetime import datetime, timedelta
from typing import NamedTuple, Optional

HISTOGRAM_HEIGHT = 5
MINUTE_KEY_FORMAT = "%Y-%m-%d %H:%M"
BAR_CHAR = "█"


def minute_key(ts: datetime) -> str:
    # format fields explicitly, strftime does not zero-pad years before 1000 on all platforms
    return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d} {ts.hour:02d}:{ts.minute:02d}"


def parse_minute_key(key: str) -> datetime:
    return datetime.strptime(key, MINUTE_KEY_FORMAT)


class RenderHistogram(NamedTuple):
    counts: list[int]
    heights: list[int]
    start_label: str
    mid_label: str
    end_label: str
    height: int = HISTOGRAM_HEIGHT

    @property
    def width(self) -> int:
        return len(self.counts)

    def label_row(self) -> str:
        width = self.width
        row = [" "] * width

        def place(label: str, pos: int) -> None:
            row[pos:pos + len(label)] = label
            del row[width:]

        place(self.start_label, 0)
        end_pos = width - len(self.end_label)
        if end_pos >= 0:
            place(self.end_label, end_pos)

        # midpoint label only goes where it has a space on either side
        mid_pos = width // 2 - len(self.mid_label) // 2
        if len(self.start_label) < mid_pos and mid_pos + len(self.mid_label) < end_pos:
            place(self.mid_label, mid_pos)
        return "".join(row)

    def as_text(self, bar: str = BAR_CHAR) -> str:
        rows = [
            "".join(bar if bar_height > level else " " for bar_height in self.heights)
            for level in reversed(range(self.height))
        ]
        rows.append(self.label_row())
        return "\n".join(rows)


class MinuteHistogram(Counter):
    """
    Counts of timestamped log lines per minute, keyed by "YYYY-MM-DD HH:MM" strings.
    """
    def add(self, ts: datetime) -> None:
        self[minute_key(ts)] += 1

    def busiest(self, n: int) -> list[tuple[str, int]]:
        # ties go to the earlier minute
        return sorted(self.items(), key=lambda item: (-item[1], item[0]))[:n]

    def render(self, width: int, height: int = HISTOGRAM_HEIGHT) -> Optional[RenderHistogram]:
        """
        Redistribute the minute counts into `width` equal-duration bins spanning the first
        through last minute, and scale each bin to a bar height of at most `height`.
        Returns None if there are no timestamped lines to show.
        """
        if width < 2:
            raise ValueError(f"histogram width must be at least 2, got {width}")
        if not self:
            return None

        minutes = {key: parse_minute_key(key) for key in self}
        start_time = min(minutes.values())
        end_time = max(minutes.values())
        total_duration = (end_time - start_time) or timedelta(minutes=1)
        bin_duration = (total_duration / width) or timedelta(microseconds=1)

        counts = [0] * width
        for key, minute_start in minutes.items():
            bin_index = min((minute_start - start_time) // bin_duration, width - 1)
            counts[bin_index] += self[key]

        max_count = max(counts) or 1
        # a non-empty bin always gets at least one row
        heights = [max(count * height // max_count, 1) if count else 0 for count in counts]

        return RenderHistogram(
            counts,
            heights,
            minute_key(start_time),
            minute_key(start_time + total_duration / 2),
            minute_key(end_time),
            height,
        )
