import dataclasses
import enum
import typing

from .util import problem_letters

TeamName = typing.NewType("TeamName", str)
ProblemId = typing.NewType("ProblemId", str)
Minutes = typing.NewType("Minutes", int)


class Verdict(enum.Enum):
    """The judge result of a submission"""

    ACCEPTED = "Accepted"
    WRONG_ANSWER = "Wrong_Answer"
    RUNTIME_ERROR = "Runtime_Error"
    TIME_LIMIT_EXCEEDED = "Time_Limit_Exceed"

    def __str__(self):
        return self.value

    @property
    def accepted(self) -> bool:
        return self is Verdict.ACCEPTED


class ContestError(RuntimeError):
    """A command rejected by the contest (rejected commands have no effect)"""

    reason: str = "invalid command"

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(reason if reason is not None else self.reason)


class DuplicateTeam(ContestError):
    reason = "duplicated team name"


class ContestStarted(ContestError):
    reason = "competition has started"


class ContestNotStarted(ContestError):
    reason = "competition has not started"


class AlreadyFrozen(ContestError):
    reason = "scoreboard has been frozen"


class NotFrozen(ContestError):
    reason = "scoreboard has not been frozen"


class UnknownTeam(ContestError):
    reason = "cannot find the team"


class UnknownProblem(ContestError):
    reason = "cannot find the problem"


class InvalidProblemCount(ContestError):
    reason = "invalid problem count"


@dataclasses.dataclass(kw_only=True)
class Rules:
    """Scoring and reporting rules shared by all contests"""

    penalty: int = 20  # Penalty minutes per wrong attempt on a solved problem
    max_problems: int = 26  # Problems are single letters
    flush_board: bool = True  # Print the scoreboard on FLUSH


@dataclasses.dataclass(frozen=True)
class ContestConfig:
    """Parameters fixed when the contest starts"""

    duration: Minutes
    problem_count: int

    @property
    def problems(self) -> tuple[ProblemId, ...]:
        """Problems are named A, B, C, ... in order"""
        return tuple(ProblemId(letter) for letter in problem_letters(self.problem_count))


@dataclasses.dataclass(frozen=True, slots=True)
class Submission:
    """A single submission, as it appears in a team's log"""

    problem: ProblemId
    verdict: Verdict
    time: Minutes


@dataclasses.dataclass
class ProblemStatus:
    """Solve state of one problem for one team

    While the scoreboard is frozen, submissions on an unsolved problem only touch
    the shadow fields below `frozen`. They become visible when the problem is
    revealed during a scroll.
    """

    solved: bool = False
    solve_time: Minutes = Minutes(0)
    wrong_before_solve: int = 0
    wrong_count: int = 0

    frozen: bool = False
    wrong_before_freeze: int = 0
    frozen_count: int = 0  # Submissions received while frozen
    first_accepted_in_freeze: Minutes | None = None
    wrongs_in_freeze: int = 0  # Only counts up to the first acceptance

    @property
    def touched(self) -> bool:
        return self.solved or self.frozen or self.wrong_count > 0

    def penalty(self, rules: Rules) -> int:
        if not self.solved:
            return 0
        return rules.penalty * self.wrong_before_solve + self.solve_time

    def record(self, verdict: Verdict, time: Minutes, *, frozen: bool) -> bool:
        """Accounts for a submission, returns whether it solved the problem right away"""
        if self.solved:
            return False

        if not frozen:
            if verdict.accepted:
                self._solve(time, self.wrong_count)
                return True
            self.wrong_count += 1
            return False

        if not self.frozen:
            self.frozen = True
            self.wrong_before_freeze = self.wrong_count
        self.frozen_count += 1
        if self.first_accepted_in_freeze is None:
            if verdict.accepted:
                self.first_accepted_in_freeze = time
            else:
                self.wrongs_in_freeze += 1
        return False

    def reveal(self) -> bool:
        """Applies the submissions hidden by the freeze, returns whether the problem got solved"""
        if not self.frozen:
            raise ValueError("Cannot reveal a problem that is not frozen")

        accepted_at = self.first_accepted_in_freeze
        wrongs = self.wrong_before_freeze + self.wrongs_in_freeze

        self.frozen = False
        self.wrong_before_freeze = 0
        self.frozen_count = 0
        self.first_accepted_in_freeze = None
        self.wrongs_in_freeze = 0

        if accepted_at is None:
            self.wrong_count = wrongs
            return False
        self._solve(accepted_at, wrongs)
        return True

    def _solve(self, time: Minutes, wrongs: int) -> None:
        self.solved = True
        self.solve_time = time
        self.wrong_before_solve = wrongs
        self.wrong_count = wrongs


@dataclasses.dataclass
class Team:
    """A registered team, with its per-problem state and submission log"""

    name: TeamName
    problems: dict[ProblemId, ProblemStatus] = dataclasses.field(default_factory=dict)
    submissions: list[Submission] = dataclasses.field(default_factory=list)
    solved_count: int = 0
    penalty_time: int = 0
    solve_times: list[Minutes] = dataclasses.field(default_factory=list)  # Descending
    rank: int = 0

    def submit(self, submission: Submission, *, frozen: bool, rules: Rules) -> None:
        self.submissions.append(submission)
        status = self.problems.setdefault(submission.problem, ProblemStatus())
        if status.record(submission.verdict, submission.time, frozen=frozen):
            self._credit(status, rules)

    def reveal(self, problem: ProblemId, rules: Rules) -> bool:
        """Reveals one frozen problem, returns whether solved count and penalty changed"""
        status = self.problems[problem]
        if status.reveal():
            self._credit(status, rules)
            return True
        return False

    @property
    def frozen_problems(self) -> list[ProblemId]:
        return sorted(problem for problem, status in self.problems.items() if status.frozen)

    def _credit(self, status: ProblemStatus, rules: Rules) -> None:
        self.solved_count += 1
        self.penalty_time += status.penalty(rules)
        self.solve_times.append(status.solve_time)
        self.solve_times.sort(reverse=True)
