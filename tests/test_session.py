import pytest

from logsift.corpus import LogCorpus
from logsift.reports import COMMAND_HELP
from logsift.session import InvalidTransition, LogSession, SessionState

SCENARIO_LINES = [
    "2024-01-01 10:00:00 INFO start",
    "2024-01-01 10:00:30 ERROR boom id=42",
    "2024-01-01 10:01:00 INFO done",
]


@pytest.fixture
def session():
    return LogSession(LogCorpus(SCENARIO_LINES))


def test_initial_state(session):
    assert session.state is SessionState.IDLE
    assert session.prompt == "cmd"


def test_list(session):
    result = session.submit("list")
    assert result.lines == SCENARIO_LINES
    assert session.state is SessionState.IDLE


def test_empty_input_is_ignored(session):
    result = session.submit("   ")
    assert result.lines is None
    assert not result.is_error


def test_unknown_command(session):
    result = session.submit("frobnicate")
    assert result.is_error
    assert "help" in result.message
    assert result.lines is None


@pytest.mark.parametrize("command", ["help", "HELP"])
def test_help(session, command):
    assert session.submit(command).lines == COMMAND_HELP


@pytest.mark.parametrize("command", ["quit", "exit"])
def test_quit(session, command):
    assert session.submit(command).quit


def test_filter_prompts_for_expression(session):
    result = session.submit("filter")
    assert session.state is SessionState.AWAITING_FILTER_INPUT
    assert session.prompt == "flt"
    assert result.lines is None

    result = session.submit("INFO")
    assert session.state is SessionState.IDLE
    assert result.lines == [SCENARIO_LINES[0], SCENARIO_LINES[2]]


def test_filter_inline_expression(session):
    result = session.submit("filter boom|done")
    assert session.state is SessionState.IDLE
    assert result.lines == SCENARIO_LINES[1:]


def test_invalid_filter_keeps_view_and_returns_to_idle(session):
    session.submit("filter")
    result = session.submit("ERROR[")

    assert result.is_error
    assert result.lines is None
    assert session.state is SessionState.IDLE


def test_goto_prompts_for_timestamp(session):
    result = session.submit("goto")
    assert session.state is SessionState.AWAITING_GOTO_INPUT
    assert session.prompt == "gto"
    assert "2006-01-02 00:00:00" in result.message

    result = session.submit("2024-01-01 10:00:40")
    assert session.state is SessionState.IDLE
    assert result.lines == SCENARIO_LINES[1:]
    assert result.message.startswith("line 2 ")


def test_goto_inline_timestamp(session):
    result = session.submit("goto 2024-01-01 10:00:45")
    assert result.lines == SCENARIO_LINES[2:]


def test_invalid_goto_timestamp(session):
    session.submit("goto")
    result = session.submit("not a time")

    assert result.is_error
    assert result.lines is None
    assert session.state is SessionState.IDLE


def test_goto_refused_without_main_format():
    session = LogSession(LogCorpus(["no", "timestamps"]))
    result = session.submit("goto")

    assert result.is_error
    assert session.state is SessionState.IDLE


def test_cancel(session):
    assert not session.cancel()

    session.submit("filter")
    assert session.cancel()
    assert session.state is SessionState.IDLE

    session.submit("goto")
    assert session.cancel()
    assert session.state is SessionState.IDLE


def test_stat(session):
    result = session.submit("stat")
    assert result.lines[0] == "Log file statistics:"
    assert any("Busiest minutes" in line for line in result.lines)


@pytest.mark.parametrize("command", ["analyse", "analyze"])
def test_analysis_lifecycle(session, command):
    result = session.submit(command)
    assert result.start_analysis
    assert session.state is SessionState.ANALYSIS_RUNNING
    assert session.prompt == "run"

    # commands are refused while analysis is running
    busy = session.submit("list")
    assert busy.is_error
    assert busy.lines is None
    assert not session.cancel()

    sections = dict(session.iter_analysis())
    assert set(sections) == {"top_patterns", "rare_patterns", "longest_lines", "suspicious", "ngrams"}
    assert session.state is SessionState.IDLE


def test_analysis_must_be_started_by_command(session):
    with pytest.raises(InvalidTransition):
        list(session.iter_analysis())
    assert session.state is SessionState.IDLE


def test_illegal_transition(session):
    session.submit("filter")
    with pytest.raises(InvalidTransition):
        session._transition(SessionState.AWAITING_GOTO_INPUT)
