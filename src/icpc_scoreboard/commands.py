import dataclasses
import typing

from .model import Minutes, ProblemId, TeamName, Verdict

WILDCARD = "ALL"


@dataclasses.dataclass(frozen=True)
class AddTeam:
    name: TeamName


@dataclasses.dataclass(frozen=True)
class Start:
    duration: Minutes
    problem_count: int


@dataclasses.dataclass(frozen=True)
class Submit:
    problem: ProblemId
    team: TeamName
    verdict: Verdict
    time: Minutes


@dataclasses.dataclass(frozen=True)
class Flush:
    pass


@dataclasses.dataclass(frozen=True)
class Freeze:
    pass


@dataclasses.dataclass(frozen=True)
class Scroll:
    pass


@dataclasses.dataclass(frozen=True)
class QueryRanking:
    team: TeamName


@dataclasses.dataclass(frozen=True)
class QuerySubmission:
    team: TeamName
    problem: ProblemId | None = None  # None matches any problem
    verdict: Verdict | str | None = None  # None matches any, an unknown status matches nothing


@dataclasses.dataclass(frozen=True)
class End:
    pass


Command: typing.TypeAlias = (
    AddTeam | Start | Submit | Flush | Freeze | Scroll | QueryRanking | QuerySubmission | End
)


def parse_command(line: str) -> Command | None:
    """Parses one input line, returns None for blank lines

    Raises ValueError for anything that is not a well-formed command.
    """
    match line.split():
        case []:
            return None
        case ["ADDTEAM", name]:
            return AddTeam(TeamName(name))
        case ["START", "DURATION", duration, "PROBLEM", count]:
            return Start(Minutes(_integer(duration, "duration")), _integer(count, "problem count"))
        case ["SUBMIT", problem, "BY", team, "WITH", status, "AT", time]:
            return Submit(_problem(problem), TeamName(team), _verdict(status), Minutes(_integer(time, "time")))
        case ["FLUSH"]:
            return Flush()
        case ["FREEZE"]:
            return Freeze()
        case ["SCROLL"]:
            return Scroll()
        case ["QUERY_RANKING", team]:
            return QueryRanking(TeamName(team))
        case ["QUERY_SUBMISSION", team, "WHERE", problem_filter, "AND", status_filter]:
            problem = _filter(problem_filter, "PROBLEM")
            status = _filter(status_filter, "STATUS")
            return QuerySubmission(
                TeamName(team),
                ProblemId(problem) if problem is not None else None,
                _status_filter(status) if status is not None else None,
            )
        case ["END"]:
            return End()
        case [keyword, *_]:
            raise ValueError(f"Malformed command {keyword!r}: {line.strip()!r}")


def _integer(token: str, label: str) -> int:
    try:
        value = int(token)
    except ValueError:
        raise ValueError(f"Expected an integer {label}, got {token!r}") from None
    if value < 0:
        raise ValueError(f"Expected a non-negative {label}, got {value}")
    return value


def _problem(token: str) -> ProblemId:
    if len(token) != 1 or not "A" <= token <= "Z":
        raise ValueError(f"Problems are single capital letters, got {token!r}")
    return ProblemId(token)


def _verdict(token: str) -> Verdict:
    try:
        return Verdict(token)
    except ValueError:
        raise ValueError(f"Unknown submission status {token!r}") from None


def _status_filter(token: str) -> Verdict | str:
    try:
        return Verdict(token)
    except ValueError:
        return token


def _filter(token: str, key: str) -> str | None:
    name, separator, value = token.partition("=")
    if name != key or not separator or not value:
        raise ValueError(f"Expected {key}=<value>, got {token!r}")
    return None if value == WILDCARD else value
