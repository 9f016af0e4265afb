from logsift import __version__
from logsift.timestamp_formats import FORMAT_CATALOG


def _format_table() -> str:
    rows = [
        "| Layout | Example | Fields |",
        "|--------|---------|:------:|",
    ]
    rows.extend(
        f"| {layout.name} | `{layout.template}` | {layout.token_count} |"
        for layout in FORMAT_CATALOG
    )
    return "\n".join(rows)


text = r"""
# logsift

The `logsift` utility loads a single log file, finds the timestamp at the start of each line, and
helps you find your way around an unfamiliar log: a per-minute activity histogram, jumping to the
line nearest a given time, regex filtering, summary statistics, and an analysis of the most frequent,
rarest, and most suspicious message patterns.

## Commands

Type a command at the `cmd` prompt and press Enter:

| Command  | Function                                                                                       |
|----------|------------------------------------------------------------------------------------------------|
| list     | show all log lines                                                                             |
| filter   | prompt (`flt`) for a regular expression, and show only the lines that match it                 |
| goto     | prompt (`gto`) for a timestamp, and show the log from the line nearest that time               |
| stat     | show first/last timestamps, line counts, busiest minutes, and error/warning counts             |
| analyse  | show frequent and rare message patterns, longest lines, suspicious lines, and common phrases   |
| help     | list the available commands                                                                    |
| quit     | exit (also `exit`)                                                                             |

`filter` and `goto` also accept their value on the same line, as in `filter timeout|refused`.

| Key    | Function                                   |
|:------:|--------------------------------------------|
| Esc    | cancel a pending `filter` or `goto` prompt |
| F1     | display this helpful text                  |
| ^S     | save a screenshot                          |
| ^Q     | quit                                       |

## Going to a timestamp

The timestamp for `goto` is entered in the same format as the log file's main timestamp format
(the format of the first timestamped line in the file). It can be abbreviated: any fields left off
the end are taken from the time 2006-01-02 00:00:00, so with a main format of
`2006-01-02 15:04:05`, entering `2024-03-05` goes to the line nearest midnight of March 5.
If two lines are equally near, the later one is chosen.

## Pattern analysis

Before lines are compared, the leading timestamp is removed and UUIDs, IP addresses, hex
values, and numbers are replaced by `<UUID>`, `<IP>`, `<HEX>`, and `<NUM>`, so that
`connected to 10.0.0.5 in 12 ms` and `connected to 10.0.0.9 in 7 ms` count as the same pattern.

## Supported timestamp formats

Timestamps are recognized in the first 1, 2, or 3 whitespace-separated fields of each line, and are
converted to UTC. Layouts are tried in the order listed. Formats with no year take the year that the
log file was created. Layouts with more than 3 fields are only recognized when entered for `goto`.

{format_table}

## Command line options

| Option            | Description                                                             |
|-------------------|-------------------------------------------------------------------------|
| --encoding, -enc  | encoding to use when reading the log file                               |
| --width, -w       | histogram width (defaults to the screen width)                          |
| --report, -r      | print the statistics and analysis as tables instead of running the TUI  |
| --verbose, -v     | write debug messages to the log                                         |
| --log-file        | file to write diagnostic log messages to                                |

`logsift` can read directly from `.gz` gzip'ped files (such as those gzip'ped by logrotate).

## About logsift

logsift version {version}

MIT License
""".replace("{format_table}", _format_table()).replace("{version}", __version__)
