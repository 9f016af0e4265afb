"""
Plain-text renderings of engine results, for display in the log pane.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from logsift.corpus import LoadResult
from logsift.statistics import StatisticsReport

TIMESTAMP_DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"

COMMAND_HELP = [
    "Available commands:",
    "  list     - show all log lines",
    "  goto     - jump to the line nearest a timestamp",
    "  filter   - show lines matching a regular expression",
    "  stat     - show statistics for the log file",
    "  analyse  - show frequent, rare and suspicious message patterns",
    "  quit     - exit",
    "  help     - show this list",
]

SECTION_TITLES = {
    "top_patterns": "Most frequent message patterns",
    "rare_patterns": "Rare (unique or nearly unique) message patterns",
    "longest_lines": "Longest messages",
    "suspicious": "Suspicious messages by keyword",
    "ngrams": "Most frequent phrases",
}


def _format_timestamp(ts: Optional[datetime]) -> str:
    return ts.strftime(TIMESTAMP_DISPLAY_FORMAT) if ts is not None else "-"


def format_load_result(result: LoadResult) -> list[str]:
    main_format = result.main_format.template if result.main_format else "undetermined"
    return [
        f"Loaded log file: {result.source}",
        f"{result.total_lines:,} lines",
        f"Time range: {_format_timestamp(result.min_timestamp)} - {_format_timestamp(result.max_timestamp)}",
        f"Timestamp format: {main_format}",
        "",
        *COMMAND_HELP,
    ]


def format_statistics(report: StatisticsReport) -> list[str]:
    ret = ["Log file statistics:"]
    if report.first_timestamp is not None:
        ret.append(f"1. First timestamp: {_format_timestamp(report.first_timestamp)}")
        ret.append(f"2. Last timestamp: {_format_timestamp(report.last_timestamp)}")
    else:
        ret.append("1-2. No lines with a recognized timestamp")
    ret.append(
        f"3. Lines: {report.total_lines} (with timestamp: {report.timestamped_lines},"
        f" without timestamp: {report.untimestamped_lines})"
    )
    ret.append("4. Busiest minutes:")
    ret.extend(f"   {minute} - {count} lines" for minute, count in report.busiest_minutes)
    ret.append(
        f"5. Error/warning lines vs. other lines: {report.error_warning_lines} / {report.other_lines}"
        f" ({report.error_warning_percent:.2f}%)"
    )
    ret.append(f"6. Average lines per minute: {report.average_lines_per_minute:.2f}")
    return ret


def format_analysis_section(name: str, result: Any) -> list[str]:
    ret = ["", f"{SECTION_TITLES.get(name, name)}:"]

    if name in ("top_patterns", "rare_patterns"):
        if not result:
            ret.append("  (none)")
        for i, stat in enumerate(result, start=1):
            ret.append(f"{i}. [{stat.count} times]")
            ret.append(f"   Pattern: {stat.pattern}")
            ret.append(f"   Example: {stat.example}")

    elif name == "longest_lines":
        for i, line in enumerate(result, start=1):
            ret.append(f"{i}. [{len(line)} chars]")
            ret.append(f"   {line}")

    elif name == "suspicious":
        if not result:
            ret.append("  No suspicious messages found.")
        for label, matches in result:
            ret.append(f"  {label} (last {len(matches)}):")
            ret.extend(f"    {match.line}" for match in matches)

    elif name == "ngrams":
        for n, ngrams in result.items():
            ret.append(f"  {n}-word phrases:")
            ret.extend(f"  {i}. [{ngram.count}] {ngram.phrase}" for i, ngram in enumerate(ngrams, start=1))

    else:
        ret.append(f"  {result}")

    return ret
