import dataclasses
import enum
import frozendict
import typing

from .model import ProblemId, ProblemStatus, Submission, Team, TeamName


def cell(status: ProblemStatus | None) -> str:
    """Encodes the public state of one problem

    `.` untouched, `+`/`+N` solved after N wrong attempts, `-N` unsolved with N wrong
    attempts, `-N/M` (or `0/M` without earlier wrong attempts) frozen with M hidden
    submissions.
    """
    if status is None or not status.touched:
        return "."
    if status.frozen:
        before = f"-{status.wrong_before_freeze}" if status.wrong_before_freeze else "0"
        return f"{before}/{status.frozen_count}"
    if status.solved:
        return f"+{status.wrong_before_solve}" if status.wrong_before_solve else "+"
    return f"-{status.wrong_count}"


@dataclasses.dataclass(frozen=True)
class BoardRow:
    """One team's line on the scoreboard"""

    team: TeamName
    rank: int
    solved: int
    penalty: int
    cells: typing.Mapping[ProblemId, str]

    def __post_init__(self):
        object.__setattr__(self, "cells", frozendict.frozendict(self.cells))

    @classmethod
    def of(cls, team: Team, problems: typing.Iterable[ProblemId]) -> typing.Self:
        return cls(
            team=team.name,
            rank=team.rank,
            solved=team.solved_count,
            penalty=team.penalty_time,
            cells={problem: cell(team.problems.get(problem)) for problem in problems},
        )


@dataclasses.dataclass(frozen=True)
class Scoreboard:
    """A snapshot of the scoreboard, best team first"""

    problems: tuple[ProblemId, ...]
    rows: tuple[BoardRow, ...]

    @classmethod
    def capture(
        cls,
        teams: typing.Iterable[Team],
        problems: typing.Sequence[ProblemId],
    ) -> typing.Self:
        return cls(
            problems=tuple(problems),
            rows=tuple(BoardRow.of(team, problems) for team in teams),
        )

    @property
    def order(self) -> list[TeamName]:
        return [row.team for row in self.rows]


class Level(enum.Enum):
    INFO = "Info"
    WARNING = "Warning"
    ERROR = "Error"


@dataclasses.dataclass(frozen=True)
class Message:
    level: Level
    text: str


@dataclasses.dataclass(frozen=True)
class RankChange:
    """A revealed acceptance moved `team` up, past `replaced`"""

    team: TeamName
    replaced: TeamName
    solved: int
    penalty: int


@dataclasses.dataclass(frozen=True)
class RankingResult:
    team: TeamName
    rank: int
    frozen: bool  # Frozen problems may still change the rank


@dataclasses.dataclass(frozen=True)
class SubmissionResult:
    team: TeamName
    submission: Submission | None  # None if nothing matched


Output: typing.TypeAlias = Message | Scoreboard | RankChange | RankingResult | SubmissionResult
"""Anything a command can report back"""
