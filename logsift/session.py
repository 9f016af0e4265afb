"""
Command handling for an interactive log session.

The session holds a loaded LogCorpus and a SessionState. Commands typed at the prompt
are passed to LogSession.submit(), which returns a CommandResult describing what the
log pane should show next. Commands that need a second line of input ("filter",
"goto") move the session into an awaiting state; the next submitted text is taken as
the regex or timestamp, and the session goes back to IDLE whether or not it was valid.
"""
from __future__ import annotations

from collections.abc import Generator
import enum
import logging
from typing import Any, NamedTuple, Optional

from logsift import reports
from logsift.analysis import iter_analysis
from logsift.corpus import LogCorpus
from logsift.navigation import InvalidFilterExpression, InvalidGotoTimestamp, filter_lines, goto
from logsift.statistics import build_statistics

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    # values are the prompt labels shown in front of the command input
    IDLE = "cmd"
    AWAITING_FILTER_INPUT = "flt"
    AWAITING_GOTO_INPUT = "gto"
    ANALYSIS_RUNNING = "run"

    @property
    def prompt(self) -> str:
        return self.value


_TRANSITIONS = {
    SessionState.IDLE: {
        SessionState.IDLE,
        SessionState.AWAITING_FILTER_INPUT,
        SessionState.AWAITING_GOTO_INPUT,
        SessionState.ANALYSIS_RUNNING,
    },
    SessionState.AWAITING_FILTER_INPUT: {SessionState.IDLE},
    SessionState.AWAITING_GOTO_INPUT: {SessionState.IDLE},
    SessionState.ANALYSIS_RUNNING: {SessionState.IDLE},
}


class InvalidTransition(RuntimeError):
    pass


class CommandResult(NamedTuple):
    # lines to show in the log pane; None leaves the current view as it is
    lines: Optional[list[str]] = None
    message: str = ""
    is_error: bool = False
    quit: bool = False
    start_analysis: bool = False


class LogSession:
    def __init__(self, corpus: LogCorpus):
        self.corpus = corpus
        self.state = SessionState.IDLE
        self.commands = {
            "list": self._list,
            "filter": self._filter,
            "goto": self._goto,
            "stat": self._stat,
            "analyse": self._analyse,
            "analyze": self._analyse,
            "help": self._help,
            "quit": self._quit,
            "exit": self._quit,
        }

    def _transition(self, new_state: SessionState):
        if new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"cannot change session state from {self.state.name} to {new_state.name}")
        logger.debug("session state %s -> %s", self.state.name, new_state.name)
        self.state = new_state

    @property
    def prompt(self) -> str:
        return self.state.prompt

    def submit(self, text: str) -> CommandResult:
        text = text.strip()

        if self.state is SessionState.AWAITING_FILTER_INPUT:
            self._transition(SessionState.IDLE)
            return self._apply_filter(text)

        if self.state is SessionState.AWAITING_GOTO_INPUT:
            self._transition(SessionState.IDLE)
            return self._apply_goto(text)

        if self.state is SessionState.ANALYSIS_RUNNING:
            return CommandResult(message="analysis in progress, please wait", is_error=True)

        if not text:
            return CommandResult()

        command, _, argument = text.partition(" ")
        handler = self.commands.get(command.lower())
        if handler is None:
            return CommandResult(message=f"unknown command {command!r} - type 'help' for a list of commands", is_error=True)
        return handler(argument.strip())

    def cancel(self) -> bool:
        """
        Abandon a pending filter or goto prompt. Returns False if there was nothing to cancel.
        """
        if self.state in (SessionState.AWAITING_FILTER_INPUT, SessionState.AWAITING_GOTO_INPUT):
            self._transition(SessionState.IDLE)
            return True
        return False

    def iter_analysis(self) -> Generator[tuple[str, Any], None, None]:
        """
        Run the analyses for an "analyse" command, yielding (name, result) as each completes.
        The session returns to IDLE when the analyses are done, or if they fail.
        """
        if self.state is not SessionState.ANALYSIS_RUNNING:
            raise InvalidTransition("analysis was not started with the 'analyse' command")
        try:
            yield from iter_analysis(self.corpus)
        finally:
            self._transition(SessionState.IDLE)

    # command handlers

    def _list(self, argument: str) -> CommandResult:
        return CommandResult(lines=list(self.corpus.lines), message=f"{self.corpus.total_lines:,} lines")

    def _filter(self, argument: str) -> CommandResult:
        if argument:
            return self._apply_filter(argument)
        self._transition(SessionState.AWAITING_FILTER_INPUT)
        return CommandResult(message="enter a regular expression to filter by (Esc to cancel)")

    def _apply_filter(self, expression: str) -> CommandResult:
        if not expression:
            return CommandResult(message="filter cancelled - empty expression")
        try:
            result = filter_lines(self.corpus, expression)
        except InvalidFilterExpression as exc:
            return CommandResult(message=str(exc), is_error=True)
        return CommandResult(lines=result.lines, message=f"{len(result.lines):,} lines match {expression!r}")

    def _goto(self, argument: str) -> CommandResult:
        if self.corpus.main_format is None:
            return CommandResult(message="timestamp format undetermined - goto is not available", is_error=True)
        if argument:
            return self._apply_goto(argument)
        self._transition(SessionState.AWAITING_GOTO_INPUT)
        return CommandResult(
            message=f"enter a timestamp like {self.corpus.main_format.template!r} (Esc to cancel)"
        )

    def _apply_goto(self, timestamp_str: str) -> CommandResult:
        if not timestamp_str:
            return CommandResult(message="goto cancelled - empty timestamp")
        try:
            result = goto(self.corpus, timestamp_str)
        except InvalidGotoTimestamp as exc:
            return CommandResult(message=str(exc), is_error=True)
        if not result.found:
            return CommandResult(message=f"no line found near {result.target}", is_error=True)
        return CommandResult(
            lines=self.corpus.lines[result.line_index:],
            message=f"line {result.line_index + 1:,} is nearest to {result.target}",
        )

    def _stat(self, argument: str) -> CommandResult:
        return CommandResult(lines=reports.format_statistics(build_statistics(self.corpus)))

    def _analyse(self, argument: str) -> CommandResult:
        self._transition(SessionState.ANALYSIS_RUNNING)
        return CommandResult(lines=["Analysing log file..."], start_analysis=True)

    def _help(self, argument: str) -> CommandResult:
        return CommandResult(lines=list(reports.COMMAND_HELP))

    def _quit(self, argument: str) -> CommandResult:
        return CommandResult(quit=True)
