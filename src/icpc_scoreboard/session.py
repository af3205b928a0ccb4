import typing
import warnings

from .board import Level, Message, Output
from .commands import (
    AddTeam,
    Command,
    End,
    Flush,
    Freeze,
    QueryRanking,
    QuerySubmission,
    Scroll,
    Start,
    Submit,
    parse_command,
)
from .contest import Contest
from .model import ContestError

# Names used in "<operation> failed" error lines
OPERATIONS: dict[type, str] = {
    AddTeam: "Add",
    Start: "Start",
    Submit: "Submit",
    Flush: "Flush",
    Freeze: "Freeze",
    Scroll: "Scroll",
    QueryRanking: "Query ranking",
    QuerySubmission: "Query submission",
    End: "End",
}

FROZEN_RANKING_WARNING = "Scoreboard is frozen. The ranking may be inaccurate until it were scrolled."


def info(text: str) -> Message:
    return Message(Level.INFO, text)


class Session:
    """Feeds commands to a contest, one at a time, and collects what they report"""

    def __init__(self, contest: Contest | None = None) -> None:
        self.contest = contest if contest is not None else Contest()
        self.finished = False

    def execute(self, command: Command) -> list[Output]:
        try:
            return self._dispatch(command)
        except ContestError as error:
            return [Message(Level.ERROR, f"{OPERATIONS[type(command)]} failed: {error}.")]

    def run(self, lines: typing.Iterable[str]) -> typing.Iterator[Output]:
        """Processes input lines until END (or the end of the input)"""
        for number, line in enumerate(lines, start=1):
            try:
                command = parse_command(line)
            except ValueError as error:
                warnings.warn(f"Skipping line {number}: {error}")
                continue
            if command is None:
                continue
            yield from self.execute(command)
            if self.finished:
                return

    def _dispatch(self, command: Command) -> list[Output]:
        contest = self.contest
        match command:
            case AddTeam(name=name):
                contest.add_team(name)
                return [info("Add successfully.")]
            case Start(duration=duration, problem_count=problem_count):
                contest.start(duration, problem_count)
                return [info("Competition starts.")]
            case Submit(problem=problem, team=team, verdict=verdict, time=time):
                contest.submit(problem, team, verdict, time)
                return []
            case Flush():
                scoreboard = contest.flush()
                if contest.rules.flush_board:
                    return [info("Flush scoreboard."), scoreboard]
                return [info("Flush scoreboard.")]
            case Freeze():
                contest.freeze()
                return [info("Freeze scoreboard.")]
            case Scroll():
                report = contest.scroll()
                return [info("Scroll scoreboard."), report.before, *report.changes, report.after]
            case QueryRanking(team=team):
                result = contest.query_ranking(team)
                outputs: list[Output] = [info("Complete query ranking.")]
                if result.frozen:
                    outputs.append(Message(Level.WARNING, FROZEN_RANKING_WARNING))
                outputs.append(result)
                return outputs
            case QuerySubmission(team=team, problem=problem, verdict=verdict):
                result = contest.query_submission(team, problem, verdict)
                return [info("Complete query submission."), result]
            case End():
                self.finished = True
                return [info("Competition ends.")]
        raise TypeError(f"Unsupported command {command!r}")
