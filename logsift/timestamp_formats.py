"""
Catalog of the timestamp layouts that logsift can recognize at the start of a log line.

Each layout is a subclass of TimestampLayout. The catalog order is the order in which
the subclasses are defined in this module, and that order is the recognition priority:
the first layout that accepts a candidate string wins. Reordering the classes changes
which layout is reported for ambiguous strings.
"""
from __future__ import annotations

from datetime import datetime, timedelta
import re
from typing import Optional


# all parsed timestamps are normalized to naive datetimes in UTC
_EPOCH = datetime(1970, 1, 1)

# offsets in hours for zone abbreviations; unknown abbreviations are taken as UTC
_ZONE_ABBREVIATIONS = {
    "Z": 0,
    "UT": 0,
    "UTC": 0,
    "GMT": 0,
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
}

MONTH = r"[A-Z][a-z]{2}"
WEEKDAY = r"[A-Z][a-z]{2}"
HMS = r"\d{2}:\d{2}:\d{2}"


class TimestampNotRecognized(ValueError):
    pass


def zone_offset(zone: str) -> timedelta:
    """
    Convert a zone designator ("Z", "+0200", "-07:00", "-07", "MST") to its offset from UTC.
    """
    zone = zone.strip()
    if zone[:1] in ("+", "-"):
        digits = zone[1:].replace(":", "")
        hours, minutes = int(digits[:2]), int(digits[2:] or "0")
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid zone offset {zone!r}")
        offset = timedelta(hours=hours, minutes=minutes)
        return -offset if zone[0] == "-" else offset
    return timedelta(hours=_ZONE_ABBREVIATIONS.get(zone, 0))


def fraction_to_microseconds(fraction: str) -> int:
    # fraction includes its leading separator; digits past microseconds are truncated
    return int(fraction[1:7].ljust(6, "0"))


class TimestampLayout:
    """
    Base class for a single timestamp layout.

    Subclasses define:
    - timestamp_pattern - regex that must match the whole candidate string; an optional
      named group "frac" captures fractional seconds (with the separator), an optional
      named group "tz" captures the zone designator
    - strptime_format - format for the candidate once the "frac" and "tz" groups are
      removed; if it has no year directive, the year is supplied by the caller
    - template - the layout rendered for 2006-01-02 00:00:00 UTC (a Monday), used to
      complete partially-typed timestamps
    """
    timestamp_pattern = ""
    strptime_format = ""
    template = ""
    fullmatch = lambda s: None

    def __init_subclass__(cls):
        cls.fullmatch = re.compile(cls.timestamp_pattern).fullmatch

    @property
    def name(self) -> str:
        return type(self).__name__

    @property
    def token_count(self) -> int:
        return len(self.template.split())

    def __repr__(self):
        return f"{self.name}({self.template!r})"

    def parse(self, s: str, default_year: Optional[int] = None) -> datetime:
        m = self.fullmatch(s)
        if m is None:
            raise TimestampNotRecognized(f"{s!r} does not match timestamp layout {self.name}")
        return self.str_to_time(m, default_year)

    def str_to_time(self, m: re.Match, default_year: Optional[int]) -> datetime:
        text = m.string
        fraction, zone = m.groupdict().get("frac"), m.groupdict().get("tz")

        # clip the zone first, it always follows the fraction
        for group_value, group_name in ((zone, "tz"), (fraction, "frac")):
            if group_value is not None:
                start, end = m.span(group_name)
                text = text[:start] + text[end:]

        strptime_format = self.strptime_format
        if "%Y" not in strptime_format and "%y" not in strptime_format:
            # this format does not have a year, so use the one given by the caller
            year = default_year if default_year is not None else datetime.now().year
            text, strptime_format = f"{year:04d} {text}", f"%Y {strptime_format}"

        dt = datetime.strptime(text, strptime_format)
        if fraction:
            dt = dt.replace(microsecond=fraction_to_microseconds(fraction))
        if zone:
            dt -= zone_offset(zone)
        return dt


class SlashYMDHMSmicro(TimestampLayout):
    # "2006/01/02 15:04:05.000000"
    timestamp_pattern = fr"\d{{4}}/\d{{2}}/\d{{2}} {HMS}(?P<frac>[.,]\d{{6}})"
    strptime_format = "%Y/%m/%d %H:%M:%S"
    template = "2006/01/02 00:00:00.000000"


class YMDHMSnano(TimestampLayout):
    # "2006-01-02 15:04:05,000000000"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<frac>[.,]\d{{9}})"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00,000000000"


class YMDHMSmicro(TimestampLayout):
    # "2006-01-02 15:04:05.000000"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<frac>[.,]\d{{6}})"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00.000000"


class SlashYMDHMSmilli(TimestampLayout):
    # "2006/01/02 15:04:05.000"
    timestamp_pattern = fr"\d{{4}}/\d{{2}}/\d{{2}} {HMS}(?P<frac>[.,]\d{{3}})"
    strptime_format = "%Y/%m/%d %H:%M:%S"
    template = "2006/01/02 00:00:00.000"


class YMDHMSmilli(TimestampLayout):
    # "2006-01-02 15:04:05,000" (default Python logging asctime format)
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<frac>[.,]\d{{3}})"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00,000"


class YMDTHMSmicro(TimestampLayout):
    # "2006-01-02T15:04:05.000000"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}}T{HMS}(?P<frac>[.,]\d{{6}})"
    strptime_format = "%Y-%m-%dT%H:%M:%S"
    template = "2006-01-02T00:00:00.000000"


class YMDTHMSmilli(TimestampLayout):
    # "2006-01-02T15:04:05.000"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}}T{HMS}(?P<frac>[.,]\d{{3}})"
    strptime_format = "%Y-%m-%dT%H:%M:%S"
    template = "2006-01-02T00:00:00.000"


class YMDHMS(TimestampLayout):
    # "2006-01-02 15:04:05", also accepting any number of fractional digits
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<frac>[.,]\d{{1,9}})?"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00"


class YMDTHMSZ(TimestampLayout):
    # "2006-01-02T15:04:05Z"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}}T{HMS}(?P<tz>Z)"
    strptime_format = "%Y-%m-%dT%H:%M:%S"
    template = "2006-01-02T00:00:00Z"


class YMDTHMSmilliZ(TimestampLayout):
    # "2006-01-02T15:04:05.000Z"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}}T{HMS}(?P<frac>[.,]\d{{3}})(?P<tz>Z)"
    strptime_format = "%Y-%m-%dT%H:%M:%S"
    template = "2006-01-02T00:00:00.000Z"


class YMDTHMSmicroZ(TimestampLayout):
    # "2006-01-02T15:04:05.000000Z"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}}T{HMS}(?P<frac>[.,]\d{{6}})(?P<tz>Z)"
    strptime_format = "%Y-%m-%dT%H:%M:%S"
    template = "2006-01-02T00:00:00.000000Z"


class DotYMDHMSmilli(TimestampLayout):
    # "2006.01.02 15:04:05.000"
    timestamp_pattern = fr"\d{{4}}\.\d{{2}}\.\d{{2}} {HMS}(?P<frac>[.,]\d{{3}})"
    strptime_format = "%Y.%m.%d %H:%M:%S"
    template = "2006.01.02 00:00:00.000"


class BDHMSmilliY(TimestampLayout):
    # "Jan 2 15:04:05.000 2006"
    timestamp_pattern = fr"{MONTH} \d{{1,2}} {HMS}(?P<frac>[.,]\d{{3}}) \d{{4}}"
    strptime_format = "%b %d %H:%M:%S %Y"
    template = "Jan 2 00:00:00.000 2006"


class DBYHMSmilli(TimestampLayout):
    # "02/Jan/2006 15:04:05.000"
    timestamp_pattern = fr"\d{{2}}/{MONTH}/\d{{4}} {HMS}(?P<frac>[.,]\d{{3}})"
    strptime_format = "%d/%b/%Y %H:%M:%S"
    template = "02/Jan/2006 00:00:00.000"


class HttpServerAccessLog(TimestampLayout):
    # "02/Jan/2006:15:04:05 -0700"
    timestamp_pattern = fr"\d{{2}}/{MONTH}/\d{{4}}:{HMS}(?P<tz> [+-]\d{{4}})"
    strptime_format = "%d/%b/%Y:%H:%M:%S"
    template = "02/Jan/2006:00:00:00 +0000"


class ABDHMSY(TimestampLayout):
    # "Mon Jan 2 15:04:05 2006" (also covers ANSIC "Mon Jan _2 15:04:05 2006")
    timestamp_pattern = fr"{WEEKDAY} {MONTH} \d{{1,2}} {HMS} \d{{4}}"
    strptime_format = "%a %b %d %H:%M:%S %Y"
    template = "Mon Jan 2 00:00:00 2006"


class DBYHMS(TimestampLayout):
    # "2 Jan 2006 15:04:05"
    timestamp_pattern = fr"\d{{1,2}} {MONTH} \d{{4}} {HMS}"
    strptime_format = "%d %b %Y %H:%M:%S"
    template = "2 Jan 2006 00:00:00"


class YMDHMSmilliZ(TimestampLayout):
    # "2006-01-02 15:04:05.000+0000"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<frac>[.,]\d{{3}})(?P<tz>[+-]\d{{4}})"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00.000+0000"


class YMDHMSZ(TimestampLayout):
    # "2006-01-02 15:04:05-0700"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<tz>[+-]\d{{4}})"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00+0000"


class RFC3339(TimestampLayout):
    # "2006-01-02T15:04:05-07:00"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}}T{HMS}(?P<tz>[+-]\d{{2}}:\d{{2}})"
    strptime_format = "%Y-%m-%dT%H:%M:%S"
    template = "2006-01-02T00:00:00+00:00"


class RFC3339Nano(TimestampLayout):
    # "2006-01-02T15:04:05.999999999Z07:00"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}}T{HMS}(?P<frac>[.,]\d{{1,9}})?(?P<tz>Z|[+-]\d{{2}}:\d{{2}})"
    strptime_format = "%Y-%m-%dT%H:%M:%S"
    template = "2006-01-02T00:00:00.000000000Z"


class RFC1123(TimestampLayout):
    # "Mon, 02 Jan 2006 15:04:05 MST"
    timestamp_pattern = fr"{WEEKDAY}, \d{{2}} {MONTH} \d{{4}} {HMS}(?P<tz> [A-Z]{{1,4}})"
    strptime_format = "%a, %d %b %Y %H:%M:%S"
    template = "Mon, 02 Jan 2006 00:00:00 UTC"


class RFC1123Z(TimestampLayout):
    # "Mon, 02 Jan 2006 15:04:05 -0700"
    timestamp_pattern = fr"{WEEKDAY}, \d{{2}} {MONTH} \d{{4}} {HMS}(?P<tz> [+-]\d{{4}})"
    strptime_format = "%a, %d %b %Y %H:%M:%S"
    template = "Mon, 02 Jan 2006 00:00:00 +0000"


class RFC822(TimestampLayout):
    # "02 Jan 06 15:04 MST"
    timestamp_pattern = fr"\d{{2}} {MONTH} \d{{2}} \d{{2}}:\d{{2}}(?P<tz> [A-Z]{{1,4}})"
    strptime_format = "%d %b %y %H:%M"
    template = "02 Jan 06 00:00 UTC"


class RFC822Z(TimestampLayout):
    # "02 Jan 06 15:04 -0700"
    timestamp_pattern = fr"\d{{2}} {MONTH} \d{{2}} \d{{2}}:\d{{2}}(?P<tz> [+-]\d{{4}})"
    strptime_format = "%d %b %y %H:%M"
    template = "02 Jan 06 00:00 +0000"


class RFC850(TimestampLayout):
    # "Monday, 02-Jan-06 15:04:05 MST"
    timestamp_pattern = fr"[A-Z][a-z]+day, \d{{2}}-{MONTH}-\d{{2}} {HMS}(?P<tz> [A-Z]{{1,4}})"
    strptime_format = "%A, %d-%b-%y %H:%M:%S"
    template = "Monday, 02-Jan-06 00:00:00 UTC"


class UnixDate(TimestampLayout):
    # "Mon Jan _2 15:04:05 MST 2006"
    timestamp_pattern = fr"{WEEKDAY} {MONTH} \d{{1,2}} {HMS}(?P<tz> [A-Z]{{1,4}}) \d{{4}}"
    strptime_format = "%a %b %d %H:%M:%S %Y"
    template = "Mon Jan 2 00:00:00 UTC 2006"


class RubyDate(TimestampLayout):
    # "Mon Jan 02 15:04:05 -0700 2006"
    timestamp_pattern = fr"{WEEKDAY} {MONTH} \d{{2}} {HMS}(?P<tz> [+-]\d{{4}}) \d{{4}}"
    strptime_format = "%a %b %d %H:%M:%S %Y"
    template = "Mon Jan 02 00:00:00 +0000 2006"


class BDHMS(TimestampLayout):
    # syslog files with timestamp "Jan _2 15:04:05"
    # (note, year is omitted so it is supplied by the caller)
    timestamp_pattern = fr"{MONTH} \d{{1,2}} {HMS}"
    strptime_format = "%b %d %H:%M:%S"
    template = "Jan 2 00:00:00"


class BDHMSmilli(TimestampLayout):
    # "Jan _2 15:04:05.000"
    timestamp_pattern = fr"{MONTH} \d{{1,2}} {HMS}(?P<frac>[.,]\d{{3}})"
    strptime_format = "%b %d %H:%M:%S"
    template = "Jan 2 00:00:00.000"


class BDHMSmicro(TimestampLayout):
    # "Jan _2 15:04:05.000000"
    timestamp_pattern = fr"{MONTH} \d{{1,2}} {HMS}(?P<frac>[.,]\d{{6}})"
    strptime_format = "%b %d %H:%M:%S"
    template = "Jan 2 00:00:00.000000"


class BDHMSnano(TimestampLayout):
    # "Jan _2 15:04:05.000000000"
    timestamp_pattern = fr"{MONTH} \d{{1,2}} {HMS}(?P<frac>[.,]\d{{9}})"
    strptime_format = "%b %d %H:%M:%S"
    template = "Jan 2 00:00:00.000000000"


class PostgresTimestamp(TimestampLayout):
    # "2006-01-02 15:04:05.999999-07"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<frac>[.,]\d{{1,9}})?(?P<tz>[+-]\d{{2}})"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00.000000+00"


class CompactYMDHMS(TimestampLayout):
    # "20060102150405"
    timestamp_pattern = r"\d{14}"
    strptime_format = "%Y%m%d%H%M%S"
    template = "20060102000000"


class CompactYMDHMSZ(TimestampLayout):
    # "20060102150405-0700"
    timestamp_pattern = r"\d{14}(?P<tz>[+-]\d{4})"
    strptime_format = "%Y%m%d%H%M%S"
    template = "20060102000000+0000"


class YMDHMSnanoZ(TimestampLayout):
    # "2006-01-02 15:04:05.999999999 -0700"
    timestamp_pattern = fr"\d{{4}}-\d{{2}}-\d{{2}} {HMS}(?P<frac>[.,]\d{{1,9}})?(?P<tz> [+-]\d{{4}})"
    strptime_format = "%Y-%m-%d %H:%M:%S"
    template = "2006-01-02 00:00:00.000000000 +0000"


class FloatSecondsSinceEpoch(TimestampLayout):
    # log files with timestamp "1694561169.550987" or "1694561169.550"
    timestamp_pattern = r"\d{10}\.\d+"
    template = "1136160000.000000"

    def str_to_time(self, m: re.Match, default_year: Optional[int]) -> datetime:
        seconds, _, fraction = m.string.partition(".")
        return _EPOCH + timedelta(
            seconds=int(seconds),
            microseconds=fraction_to_microseconds(f".{fraction}"),
        )


class MilliSecondsSinceEpoch(TimestampLayout):
    # log files with 13-digit timestamp "1694561169550"
    timestamp_pattern = r"\d{13}"
    template = "1136160000000"

    def str_to_time(self, m: re.Match, default_year: Optional[int]) -> datetime:
        return _EPOCH + timedelta(milliseconds=int(m.string))


class SecondsSinceEpoch(TimestampLayout):
    # log files with 10-digit timestamp "1694561169"
    timestamp_pattern = r"\d{10}"
    template = "1136160000"

    def str_to_time(self, m: re.Match, default_year: Optional[int]) -> datetime:
        return _EPOCH + timedelta(seconds=int(m.string))


# process-wide, read-only, in priority order
FORMAT_CATALOG: tuple[TimestampLayout, ...] = tuple(
    layout_class() for layout_class in TimestampLayout.__subclasses__()
)


def layout_by_name(name: str) -> TimestampLayout:
    for layout in FORMAT_CATALOG:
        if layout.name == name:
            return layout
    raise KeyError(f"no timestamp layout named {name!r}")
