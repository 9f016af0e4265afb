from datetime import datetime
import logging

from rich.text import Text
from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Input, Label, Log, Static

from logsift.corpus import LogCorpus
from logsift.histogram import HISTOGRAM_HEIGHT
from logsift.reports import format_analysis_section, format_load_result
from logsift.session import LogSession, SessionState

logger = logging.getLogger(__name__)

HISTOGRAM_COLOR = "#874BFD"


class HistogramView(Static):
    """
    Minute-by-minute activity histogram, re-binned to the widget's width whenever it is resized.
    """
    DEFAULT_CSS = f"""
    HistogramView {{
        height: {HISTOGRAM_HEIGHT + 3};
        border: round {HISTOGRAM_COLOR};
        padding: 0 1;
    }}
    """

    def __init__(self, corpus: LogCorpus, width: int = 0, **kwargs):
        super().__init__(**kwargs)
        self.corpus = corpus
        self.fixed_width = width

    def on_mount(self) -> None:
        self.refresh_histogram()

    def on_resize(self, event: events.Resize) -> None:
        self.refresh_histogram()

    def refresh_histogram(self) -> None:
        width = self.fixed_width or self.content_size.width
        if width < 2:
            return

        rendered = self.corpus.histogram.render(width, HISTOGRAM_HEIGHT)
        if rendered is None:
            self.update(Text("no timestamped lines", style="dim"))
        else:
            self.update(Text(rendered.as_text(), style=HISTOGRAM_COLOR, no_wrap=True, overflow="crop"))


class InteractiveLogSiftApp(App):
    """
    Class to browse and analyse a single log file using textual TUI.
    """
    TITLE = "logsift"

    DEFAULT_CSS = """
    #command {
        height: 3;
    }

    #prompt {
        width: 6;
        padding: 1 1;
        text-style: bold;
    }

    #command Input {
        width: 1fr;
    }

    Log {
        border: round $primary;
    }
    """

    BINDINGS = [
        Binding(key="escape", action="cancel", description="Cancel"),
        Binding(key="f1", action="help_about", description="Help/About"),
        Binding(key="ctrl+s", action="take_screenshot", description="Screenshot"),
        Binding(key="ctrl+q", action="quit", description="Quit"),
    ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.corpus: LogCorpus = None  # noqa
        self.session: LogSession = None  # noqa
        self.display_width: int = 0

    def config(self, *, corpus: LogCorpus, display_width: int = 0) -> None:
        self.corpus = corpus
        self.session = LogSession(corpus)
        self.display_width = display_width

    def compose(self) -> ComposeResult:
        yield HistogramView(self.corpus, self.display_width)
        with Horizontal(id="command"):
            yield Label(self.session.prompt, id="prompt")
            yield Input(placeholder="list, filter, goto, stat, analyse, help, quit")
        yield Log(highlight=False)
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = self.corpus.source
        self.show_lines(format_load_result(self.corpus.load_result))
        self.query_one(Input).focus()

    def show_lines(self, lines: list[str]) -> None:
        log = self.query_one(Log)
        log.clear()
        log.write_lines(lines)
        log.scroll_home(animate=False)

    def append_lines(self, lines: list[str]) -> None:
        self.query_one(Log).write_lines(lines)

    def update_prompt(self) -> None:
        self.query_one("#prompt", Label).update(self.session.prompt)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.input.value = ""

        result = self.session.submit(event.value)
        self.update_prompt()

        if result.quit:
            self.exit()
            return

        if result.lines is not None:
            self.show_lines(result.lines)

        if result.message:
            if result.is_error:
                self.bell()
                self.notify(result.message, severity="error")
            else:
                self.notify(result.message)

        if result.start_analysis:
            self.run_analysis()

    #
    # methods to support analysis
    #

    @work(thread=True, exclusive=True)
    def run_analysis(self) -> None:
        start = datetime.now()
        try:
            for name, result in self.session.iter_analysis():
                self.call_from_thread(self.append_lines, format_analysis_section(name, result))
        except Exception as exc:
            logger.exception("analysis failed")
            self.call_from_thread(self.notify, f"analysis failed: {exc}", severity="error")
        else:
            elapsed = (datetime.now() - start).total_seconds()
            self.call_from_thread(self.notify, f"Analysis complete ({elapsed:.1f} seconds)")
        finally:
            self.call_from_thread(self.update_prompt)

    #
    # methods to support cancelling filter/goto input
    #

    def action_cancel(self) -> None:
        if self.session.cancel():
            self.update_prompt()
            self.notify("cancelled")
        elif self.session.state is SessionState.ANALYSIS_RUNNING:
            self.bell()

    #
    # methods to support screenshotting
    #

    def action_take_screenshot(self) -> None:
        now = datetime.now()
        filename = self.app.save_screenshot(
            f"logsift_{now:%Y%m%d_%H%M%S}_screenshot.svg"
        )
        self.notify(f"Screenshot saved to {filename}")

    #
    # methods to support help/about
    #

    def action_help_about(self) -> None:
        from logsift.about import text
        from logsift.tui.dialogs import HelpDialog

        self.app.push_screen(HelpDialog(text))
