import dataclasses
import enum
import warnings

from .board import RankChange, RankingResult, Scoreboard, SubmissionResult
from .model import (
    AlreadyFrozen,
    ContestConfig,
    ContestNotStarted,
    ContestStarted,
    DuplicateTeam,
    InvalidProblemCount,
    Minutes,
    NotFrozen,
    ProblemId,
    Rules,
    Submission,
    Team,
    TeamName,
    UnknownProblem,
    UnknownTeam,
    Verdict,
)
from .ranking import rank_teams


class Phase(enum.Enum):
    """Global state of the contest"""

    REGISTRATION = "REGISTRATION"  # Teams may still be added
    OPEN = "OPEN"  # Running, results are public
    FROZEN = "FROZEN"  # Running, new results are hidden until the next scroll


@dataclasses.dataclass(frozen=True)
class ScrollReport:
    """Everything a scroll reveals"""

    before: Scoreboard
    changes: tuple[RankChange, ...]
    after: Scoreboard


class Contest:
    """A contest: the registry of all teams plus the freeze/scroll state machine

    The contest owns every team record. Rejected operations raise a `ContestError`
    before touching any state.
    """

    def __init__(self, rules: Rules | None = None) -> None:
        self.rules = rules if rules is not None else Rules()
        self.phase = Phase.REGISTRATION
        self.config: ContestConfig | None = None
        self._teams: dict[TeamName, Team] = {}
        self._order: list[TeamName] = []

    @property
    def started(self) -> bool:
        return self.phase is not Phase.REGISTRATION

    @property
    def frozen(self) -> bool:
        return self.phase is Phase.FROZEN

    @property
    def problems(self) -> tuple[ProblemId, ...]:
        if self.config is None:
            return ()
        return self.config.problems

    @property
    def teams(self) -> list[Team]:
        """All teams, in the order of the last ranking"""
        return [self._teams[name] for name in self._order]

    def team(self, name: TeamName) -> Team:
        try:
            return self._teams[name]
        except KeyError:
            raise UnknownTeam() from None

    def scoreboard(self) -> Scoreboard:
        """The scoreboard as of the last ranking (does not re-rank)"""
        return Scoreboard.capture(self.teams, self.problems)

    def add_team(self, name: TeamName) -> Team:
        if self.started:
            raise ContestStarted()
        if name in self._teams:
            raise DuplicateTeam()
        team = self._teams[name] = Team(name)
        # Without any results, this is simply alphabetical
        self._rerank()
        return team

    def start(self, duration: Minutes, problem_count: int) -> ContestConfig:
        if self.started:
            raise ContestStarted()
        if not 1 <= problem_count <= self.rules.max_problems:
            raise InvalidProblemCount(
                f"problem count must be between 1 and {self.rules.max_problems}"
            )
        self.config = ContestConfig(duration, problem_count)
        self.phase = Phase.OPEN
        self._rerank()
        return self.config

    def submit(
        self, problem: ProblemId, team_name: TeamName, verdict: Verdict, time: Minutes
    ) -> Submission:
        self._require_started()
        team = self.team(team_name)
        if problem not in self.problems:
            raise UnknownProblem()
        assert self.config is not None
        if time > self.config.duration:
            warnings.warn(
                f"Submission by {team_name} at {time} is after the end of the contest ({self.config.duration})"
            )
        submission = Submission(problem, verdict, time)
        team.submit(submission, frozen=self.frozen, rules=self.rules)
        return submission

    def flush(self) -> Scoreboard:
        self._require_started()
        self._rerank()
        return self.scoreboard()

    def freeze(self) -> None:
        self._require_started()
        if self.frozen:
            raise AlreadyFrozen()
        self.phase = Phase.FROZEN

    def scroll(self) -> ScrollReport:
        """Reveals all frozen problems, then reopens the scoreboard

        Reveals happen one problem at a time: always the lowest ranked team that still
        has frozen problems, and within that team the smallest problem letter. Both
        are re-evaluated after every reveal.
        """
        self._require_started()
        if not self.frozen:
            raise NotFrozen()
        before = self.flush()
        changes = []
        while (step := self.reveal_next()) is not None:
            _, _, change = step
            if change is not None:
                changes.append(change)
        self.phase = Phase.OPEN
        return ScrollReport(before, tuple(changes), self.scoreboard())

    def next_frozen(self) -> tuple[Team, ProblemId] | None:
        """The team and problem that the next reveal step would pick"""
        for name in reversed(self._order):
            team = self._teams[name]
            if frozen := team.frozen_problems:
                return team, frozen[0]
        return None

    def reveal_next(self) -> tuple[TeamName, ProblemId, RankChange | None] | None:
        """Reveals a single frozen problem, returns None if there is nothing left"""
        if not self.frozen:
            raise NotFrozen()
        # Rank changes are measured against the current standings
        self._rerank()
        pick = self.next_frozen()
        if pick is None:
            return None
        team, problem = pick

        previous_order = list(self._order)
        previous_rank = team.rank
        if not team.reveal(problem, self.rules):
            # Only wrong attempts: solved count and penalty are unchanged
            return team.name, problem, None

        self._rerank()
        if team.rank >= previous_rank:
            return team.name, problem, None
        # Only this team's key changed, so everyone it overtook moved down by one place:
        # the team that held the new rank before is the one directly below it now.
        replaced = previous_order[team.rank - 1]
        return team.name, problem, RankChange(team.name, replaced, team.solved_count, team.penalty_time)

    def query_ranking(self, name: TeamName) -> RankingResult:
        team = self.team(name)
        return RankingResult(team.name, team.rank, self.frozen)

    def query_submission(
        self,
        name: TeamName,
        problem: ProblemId | None = None,
        verdict: Verdict | str | None = None,
    ) -> SubmissionResult:
        """Finds the latest submission of a team, optionally filtered

        None matches everything, a status that is not a known verdict matches nothing.
        """
        team = self.team(name)
        for submission in reversed(team.submissions):
            if problem is not None and submission.problem != problem:
                continue
            if verdict is not None and str(submission.verdict) != str(verdict):
                continue
            return SubmissionResult(team.name, submission)
        return SubmissionResult(team.name, None)

    def _require_started(self) -> None:
        if not self.started:
            raise ContestNotStarted()

    def _rerank(self) -> None:
        self._order = rank_teams(self._teams.values())
