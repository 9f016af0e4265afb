#
# logsift.py
#
# Utility for finding your way around a single, unfamiliar log file.
#

import argparse
import logging
import shutil
import sys

import littletable as lt
from rich.markup import escape

from logsift import reports
from logsift.analysis import run_analysis
from logsift.corpus import LogCorpus, LogLoadError
from logsift.histogram import HISTOGRAM_HEIGHT
from logsift.statistics import build_statistics

logger = logging.getLogger(__name__)


def _rich_escape(s: str) -> str:
    # log text must not be taken as rich markup when presented in tables
    return escape(s)


def make_argument_parser():
    epilog_notes = """
    Timestamps are recognized in the first 1, 2, or 3 whitespace-separated fields of each
    log line, in any of the supported layouts (press F1 in interactive mode for the list).
    The first timestamp found in the file determines the file's main timestamp format,
    which is the format used when entering a timestamp for the "goto" command.
    """

    parser = argparse.ArgumentParser(prog="logsift", epilog=epilog_notes)
    parser.add_argument("file", help="log file to be analysed")
    parser.add_argument(
        "--encoding", "-enc",
        type=str,
        default=sys.getfilesystemencoding(),
        help="encoding to use when reading the log file (defaults to the system default encoding)")
    parser.add_argument(
        "--width", "-w",
        type=int,
        help="histogram width (defaults to current screen width)",
        default=0
    )
    parser.add_argument(
        "--report", "-r",
        action="store_true",
        help="print statistics and analysis as tables instead of starting the interactive TUI"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="log debug messages")
    parser.add_argument("--log-file", help="file to write diagnostic log messages to")

    return parser


class LogSiftApplication:
    def __init__(self, config: argparse.Namespace):
        self.config = config

        self.fname = config.file
        self.encoding = config.encoding
        self.histogram_width = config.width
        self.report_output = config.report

    def run(self):
        corpus = LogCorpus.load(self.fname, self.encoding)

        if self.report_output:
            self._present_report(corpus)
        else:
            self._browse_interactively(corpus)

    def _present_report(self, corpus: LogCorpus):
        print("\n".join(reports.format_load_result(corpus.load_result)[:4]))
        print()

        # leave room for the 4-column border of the interactive histogram box
        width = self.histogram_width or shutil.get_terminal_size().columns - 4
        rendered = corpus.histogram.render(max(width, 2), HISTOGRAM_HEIGHT)
        if rendered is not None:
            print(rendered.as_text())
            print()

        stats = build_statistics(corpus)
        summary_table = lt.Table("Statistics")
        summary_table.insert_many([
            {"statistic": "first timestamp", "value": str(stats.first_timestamp or "-")},
            {"statistic": "last timestamp", "value": str(stats.last_timestamp or "-")},
            {"statistic": "total lines", "value": f"{stats.total_lines:,}"},
            {"statistic": "lines with timestamp", "value": f"{stats.timestamped_lines:,}"},
            {"statistic": "lines without timestamp", "value": f"{stats.untimestamped_lines:,}"},
            {"statistic": "error/warning lines", "value": f"{stats.error_warning_lines:,}"},
            {"statistic": "other lines", "value": f"{stats.other_lines:,}"},
            {"statistic": "error/warning %", "value": f"{stats.error_warning_percent:.2f}"},
            {"statistic": "lines per minute", "value": f"{stats.average_lines_per_minute:.2f}"},
        ])
        summary_table.present()

        self._present_table(
            "Busiest minutes",
            [{"minute": minute, "lines": count} for minute, count in stats.busiest_minutes],
        )

        results = run_analysis(corpus)
        for name in ("top_patterns", "rare_patterns"):
            self._present_table(
                reports.SECTION_TITLES[name],
                [
                    {"count": stat.count, "pattern": _rich_escape(stat.pattern), "example": _rich_escape(stat.example)}
                    for stat in results[name]
                ],
            )
        self._present_table(
            reports.SECTION_TITLES["longest_lines"],
            [{"length": len(line), "line": _rich_escape(line)} for line in results["longest_lines"]],
        )
        self._present_table(
            reports.SECTION_TITLES["suspicious"],
            [
                {"keyword": label, "line": match.line_index + 1, "text": _rich_escape(match.line)}
                for label, matches in results["suspicious"]
                for match in matches
            ],
        )
        for n, ngrams in results["ngrams"].items():
            self._present_table(
                f"{reports.SECTION_TITLES['ngrams']} ({n} words)",
                [{"phrase": _rich_escape(ngram.phrase), "count": ngram.count} for ngram in ngrams],
            )

    @staticmethod
    def _present_table(title: str, rows: list[dict]):
        if not rows:
            print(f"{title}: (none)")
            return
        table = lt.Table(title)
        table.insert_many(rows)
        table.present()

    def _browse_interactively(self, corpus: LogCorpus):
        from logsift.interactive_viewing import InteractiveLogSiftApp

        app = InteractiveLogSiftApp()
        app.config(corpus=corpus, display_width=self.histogram_width)
        app.run()


def configure_logging(verbose: bool, log_file: str = None, interactive: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    log_format = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    if log_file:
        logging.basicConfig(filename=log_file, level=level, format=log_format)
    elif interactive:
        # nothing may be written to the terminal while the TUI is running
        logging.getLogger().addHandler(logging.NullHandler())
    else:
        logging.basicConfig(level=level, format=log_format)


def main():

    parser = make_argument_parser()
    args_ns = parser.parse_args()

    configure_logging(args_ns.verbose, args_ns.log_file, interactive=not args_ns.report)

    app = LogSiftApplication(args_ns)
    try:
        app.run()
    except LogLoadError as exc:
        print(f"logsift: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
