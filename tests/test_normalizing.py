import pytest

from logsift.normalizing import normalize_line, strip_timestamp_prefix


@pytest.mark.parametrize(
    "line, expected",
    [
        ("2024-01-01 10:00:30 ERROR boom id=42", "ERROR boom id=<NUM>"),
        (
            "2023-07-14T08:00:01Z request 6f1c2a9e-3b4d-4c5e-8f90-a1b2c3d4e5f6 done",
            "request <UUID> done",
        ),
        ("Jul 14 08:00:01 host connect from 192.168.1.20 port 22", "host connect from <IP> port <NUM>"),
        ("1694561169 flags=0x1F3a mask=0xff", "flags=<HEX> mask=<HEX>"),
        ("no timestamp, 3 retries", "no timestamp, <NUM> retries"),
        ("version 2.4.1 is not an address", "version <NUM>.<NUM>.<NUM> is not an address"),
        ("2024-01-01 10:00:30", ""),
        ("", ""),
    ]
)
def test_normalize_line(line, expected):
    assert normalize_line(line) == expected


def test_uuid_replaced_before_numbers():
    assert normalize_line("id 12345678-1234-1234-1234-123456789012") == "id <UUID>"


def test_normalize_is_idempotent_on_placeholders():
    pattern = normalize_line("2024-01-01 10:00:30 from 10.0.0.1 took 35 ms code 0xdead")
    assert pattern == "from <IP> took <NUM> ms code <HEX>"
    assert normalize_line(pattern) == pattern


def test_strip_timestamp_prefix_with_known_token_count():
    assert strip_timestamp_prefix("a b c d", 2) == "c d"
    assert strip_timestamp_prefix("  untouched  spacing ", 0) == "  untouched  spacing "

    # without a token count, the catalog decides how much to strip
    assert strip_timestamp_prefix("2024-01-01 10:00:30   INFO  ok") == "INFO ok"
    assert strip_timestamp_prefix("INFO 2024-01-01 10:00:30 ok") == "INFO 2024-01-01 10:00:30 ok"


def test_only_ascii_digits_are_numbers():
    # a letter outside ASCII does not join a digit run into a word, and non-ASCII digits are left alone
    assert normalize_line("user é42 took ٣ ms") == "user é<NUM> took ٣ ms"
