"""
Reduce log lines to structural patterns, so that lines that differ only in their
timestamps, counters, ids, and addresses collapse to the same string.
"""
from __future__ import annotations

import re
from typing import Optional

from logsift.timestamp_wrapper import extract_timestamp

# ASCII-only, applied in this order - UUIDs, addresses and hex literals must be replaced
# before the generic number rule breaks up their digit runs
PLACEHOLDER_SUBSTITUTIONS = (
    (re.compile(r"\b[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\b", re.ASCII), "<UUID>"),
    (re.compile(r"\b\d{1,3}(?:\.\d{1,3}){3}\b", re.ASCII), "<IP>"),
    (re.compile(r"\b0x[0-9a-fA-F]+\b", re.ASCII), "<HEX>"),
    (re.compile(r"\b\d+\b", re.ASCII), "<NUM>"),
)


def strip_timestamp_prefix(line: str, token_count: Optional[int] = None) -> str:
    """
    Remove the leading timestamp tokens from a line. If token_count is not given,
    the line is scanned for a timestamp using the full format catalog.
    """
    if token_count is None:
        found = extract_timestamp(line)
        token_count = found.token_count if found is not None else 0
    if not token_count:
        return line
    return " ".join(line.split()[token_count:])


def normalize_line(line: str, token_count: Optional[int] = None) -> str:
    pattern = strip_timestamp_prefix(line, token_count)
    for regex, placeholder in PLACEHOLDER_SUBSTITUTIONS:
        pattern = regex.sub(placeholder, pattern)
    return pattern
