import pytest

from icpc_scoreboard.board import RankChange
from icpc_scoreboard.contest import Contest, Phase
from icpc_scoreboard.model import (
    AlreadyFrozen,
    ContestNotStarted,
    ContestStarted,
    DuplicateTeam,
    InvalidProblemCount,
    Minutes,
    NotFrozen,
    ProblemId,
    Rules,
    TeamName,
    UnknownProblem,
    UnknownTeam,
    Verdict,
)
from icpc_scoreboard.ranking import rank_teams

AC = Verdict.ACCEPTED
WA = Verdict.WRONG_ANSWER


def make_contest(*names: str, problems: int = 2, duration: int = 300) -> Contest:
    contest = Contest()
    for name in names:
        contest.add_team(TeamName(name))
    contest.start(Minutes(duration), problems)
    return contest


def submit(contest: Contest, problem: str, team: str, verdict: Verdict, time: int) -> None:
    contest.submit(ProblemId(problem), TeamName(team), verdict, Minutes(time))


def assert_consistent(contest: Contest) -> None:
    for team in contest.teams:
        solved = [status for status in team.problems.values() if status.solved]
        assert team.solved_count == len(solved)
        assert team.penalty_time == sum(status.penalty(contest.rules) for status in solved)
        assert not any(status.solved and status.frozen for status in team.problems.values())


def cells(contest: Contest, team: str) -> list[str]:
    row = next(row for row in contest.scoreboard().rows if row.team == team)
    return [row.cells[problem] for problem in contest.problems]


def test_flush_ranks_by_solves_and_penalty():
    contest = make_contest("A", "B", problems=1)
    submit(contest, "A", "A", WA, 10)
    submit(contest, "A", "A", AC, 20)
    submit(contest, "A", "B", AC, 5)
    board = contest.flush()
    assert board.order == ["B", "A"]
    assert [(row.solved, row.penalty) for row in board.rows] == [(1, 5), (1, 40)]
    assert contest.team(TeamName("B")).rank == 1
    assert contest.team(TeamName("A")).rank == 2
    assert_consistent(contest)


def test_ranks_only_change_on_flush():
    contest = make_contest("a", "b")
    assert contest.team(TeamName("b")).rank == 2
    submit(contest, "A", "b", AC, 10)
    assert contest.team(TeamName("b")).rank == 2
    contest.flush()
    assert contest.team(TeamName("b")).rank == 1


def test_initial_ranking_is_alphabetical():
    contest = Contest()
    for name in ("charlie", "alpha", "bravo"):
        contest.add_team(TeamName(name))
    assert [team.name for team in contest.teams] == ["alpha", "bravo", "charlie"]
    contest.start(Minutes(300), 3)
    assert contest.query_ranking(TeamName("charlie")).rank == 3


def test_registration_errors():
    contest = Contest()
    contest.add_team(TeamName("a"))
    with pytest.raises(DuplicateTeam):
        contest.add_team(TeamName("a"))
    contest.start(Minutes(300), 1)
    with pytest.raises(ContestStarted):
        contest.add_team(TeamName("b"))
    with pytest.raises(ContestStarted):
        contest.start(Minutes(300), 1)
    assert [team.name for team in contest.teams] == ["a"]


def test_problem_count_is_bounded():
    contest = Contest()
    with pytest.raises(InvalidProblemCount, match="between 1 and 26"):
        contest.start(Minutes(300), 27)
    with pytest.raises(InvalidProblemCount):
        contest.start(Minutes(300), 0)
    assert not contest.started
    contest = Contest(Rules(max_problems=3))
    with pytest.raises(InvalidProblemCount, match="between 1 and 3"):
        contest.start(Minutes(300), 4)


def test_operations_before_start_are_rejected():
    contest = Contest()
    contest.add_team(TeamName("a"))
    with pytest.raises(ContestNotStarted):
        submit(contest, "A", "a", AC, 1)
    with pytest.raises(ContestNotStarted):
        contest.flush()
    with pytest.raises(ContestNotStarted):
        contest.freeze()
    with pytest.raises(ContestNotStarted):
        contest.scroll()
    assert contest.team(TeamName("a")).submissions == []


def test_unknown_team():
    contest = make_contest("a")
    with pytest.raises(UnknownTeam):
        submit(contest, "A", "b", AC, 1)
    with pytest.raises(UnknownTeam):
        contest.query_ranking(TeamName("b"))
    with pytest.raises(UnknownTeam):
        contest.query_submission(TeamName("b"))


def test_late_submission_warns():
    contest = make_contest("a", duration=100)
    with pytest.warns(UserWarning, match="after the end of the contest"):
        submit(contest, "A", "a", AC, 150)
    assert contest.team(TeamName("a")).solved_count == 1


def test_freeze_state_machine():
    contest = make_contest("a")
    assert contest.phase is Phase.OPEN
    with pytest.raises(NotFrozen):
        contest.scroll()
    contest.freeze()
    assert contest.phase is Phase.FROZEN
    with pytest.raises(AlreadyFrozen):
        contest.freeze()
    contest.scroll()
    assert contest.phase is Phase.OPEN
    with pytest.raises(NotFrozen):
        contest.scroll()
    contest.freeze()
    assert contest.frozen


def test_frozen_wrong_attempt_is_revealed_without_event():
    contest = make_contest("A", "B")
    submit(contest, "A", "A", AC, 10)
    contest.freeze()
    submit(contest, "B", "A", WA, 100)
    assert cells(contest, "A") == ["+", "0/1"]

    report = contest.scroll()
    assert [row.cells["B"] for row in report.before.rows if row.team == "A"] == ["0/1"]
    assert report.changes == ()
    assert cells(contest, "A") == ["+", "-1"]
    assert_consistent(contest)


def test_frozen_cell_counts_earlier_wrong_attempts():
    contest = make_contest("a")
    submit(contest, "B", "a", WA, 10)
    submit(contest, "B", "a", WA, 20)
    contest.freeze()
    submit(contest, "B", "a", WA, 200)
    submit(contest, "B", "a", AC, 210)
    submit(contest, "A", "a", AC, 220)
    assert cells(contest, "a") == ["0/1", "-2/2"]
    contest.scroll()
    assert cells(contest, "a") == ["+", "+3"]
    assert contest.team(TeamName("a")).penalty_time == 220 + (3 * 20 + 210)


def test_frozen_submissions_do_not_change_ranking():
    contest = make_contest("a", "b")
    submit(contest, "A", "a", AC, 10)
    contest.freeze()
    submit(contest, "A", "b", AC, 20)
    submit(contest, "B", "b", AC, 30)
    board = contest.flush()
    assert board.order == ["a", "b"]
    assert contest.team(TeamName("b")).solved_count == 0
    assert contest.query_ranking(TeamName("b")).frozen


def scroll_contest() -> Contest:
    contest = make_contest("alpha", "bravo", "charlie")
    submit(contest, "A", "alpha", AC, 10)
    submit(contest, "A", "bravo", AC, 20)
    contest.flush()
    contest.freeze()
    submit(contest, "A", "charlie", AC, 30)
    submit(contest, "B", "charlie", AC, 40)
    submit(contest, "B", "bravo", WA, 50)
    submit(contest, "B", "bravo", AC, 60)
    return contest


def test_scroll_reports_rank_changes():
    report = scroll_contest().scroll()
    assert report.before.order == ["alpha", "bravo", "charlie"]
    assert report.changes == (
        RankChange(TeamName("charlie"), TeamName("alpha"), 2, 70),
        RankChange(TeamName("bravo"), TeamName("alpha"), 2, 100),
    )
    assert report.after.order == ["charlie", "bravo", "alpha"]
    assert [row.rank for row in report.after.rows] == [1, 2, 3]
    assert [list(row.cells.values()) for row in report.after.rows] == [
        ["+", "+"],
        ["+", "+1"],
        ["+", "."],
    ]


def test_reveal_order_is_lowest_rank_then_smallest_problem():
    contest = scroll_contest()
    contest.flush()
    steps = []
    while (step := contest.reveal_next()) is not None:
        team, problem, _ = step
        steps.append((team, problem))
    assert steps == [("charlie", "A"), ("charlie", "B"), ("bravo", "B")]
    assert contest.next_frozen() is None
    assert_consistent(contest)


def test_reveal_order_follows_new_ranks():
    # Once "c" jumps to the top, "b" is the lowest ranked team with frozen problems
    contest = make_contest("a", "b", "c", problems=3)
    submit(contest, "A", "a", AC, 10)
    submit(contest, "A", "b", AC, 20)
    contest.freeze()
    submit(contest, "A", "c", AC, 5)
    submit(contest, "B", "c", AC, 6)
    submit(contest, "C", "c", WA, 7)
    submit(contest, "B", "b", AC, 30)
    contest.flush()
    steps = []
    while (step := contest.reveal_next()) is not None:
        steps.append(step[:2])
    assert steps == [("c", "A"), ("b", "B"), ("c", "B"), ("c", "C")]
    assert [team.name for team in contest.teams] == ["c", "b", "a"]


def test_scroll_result_matches_external_ranking():
    contest = scroll_contest()
    report = contest.scroll()
    assert rank_teams(contest.teams) == report.after.order
    assert_consistent(contest)


def test_scroll_without_acceptance_keeps_order():
    contest = make_contest("a", "b")
    submit(contest, "A", "a", AC, 10)
    contest.freeze()
    submit(contest, "A", "b", WA, 20)
    submit(contest, "B", "b", WA, 25)
    report = contest.scroll()
    assert report.changes == ()
    assert report.before.order == report.after.order == ["a", "b"]
    assert cells(contest, "b") == ["-1", "-1"]


def test_query_submission_filters():
    contest = make_contest("a")
    submit(contest, "A", "a", WA, 10)
    submit(contest, "B", "a", AC, 20)
    submit(contest, "A", "a", AC, 30)
    contest.freeze()
    submit(contest, "B", "a", WA, 40)

    def latest(problem=None, verdict=None):
        result = contest.query_submission(TeamName("a"), problem, verdict)
        return result.submission.time if result.submission is not None else None

    assert latest() == 40
    assert latest(problem=ProblemId("A")) == 30
    assert latest(verdict=WA) == 40
    assert latest(ProblemId("A"), WA) == 10
    assert latest(ProblemId("B"), AC) == 20
    assert latest(ProblemId("C")) is None
    assert latest(verdict=Verdict.RUNTIME_ERROR) is None
    assert latest(verdict="Accepted") == 30
    assert latest(verdict="Compile_Error") is None
    assert latest(problem=ProblemId("AB")) is None


def test_problems_outside_the_contest_are_rejected():
    contest = make_contest("a", "b", problems=1)
    with pytest.raises(UnknownProblem):
        submit(contest, "Z", "b", AC, 1)
    with pytest.raises(UnknownProblem):
        submit(contest, "B", "b", AC, 2)
    board = contest.flush()
    assert board.order == ["a", "b"]
    assert contest.team(TeamName("b")).solved_count == 0
    assert contest.team(TeamName("b")).submissions == []


def test_reveal_measures_against_current_standings():
    # No flush between the last open submission and the reveal
    contest = make_contest("a", "b", "c")
    submit(contest, "A", "b", AC, 10)
    contest.freeze()
    submit(contest, "B", "c", AC, 20)
    team, problem, change = contest.reveal_next()
    assert (team, problem) == ("c", "B")
    assert change == RankChange(TeamName("c"), TeamName("a"), 1, 20)
    assert [t.name for t in contest.teams] == ["b", "c", "a"]


def test_second_freeze_cycle():
    contest = make_contest("a", "b")
    submit(contest, "A", "a", AC, 10)
    contest.freeze()
    submit(contest, "A", "b", AC, 5)
    report = contest.scroll()
    assert report.changes == (RankChange(TeamName("b"), TeamName("a"), 1, 5),)

    submit(contest, "B", "b", WA, 50)
    submit(contest, "B", "a", AC, 60)
    assert contest.flush().order == ["a", "b"]

    contest.freeze()
    submit(contest, "B", "b", AC, 100)
    assert cells(contest, "b") == ["+", "-1/1"]
    report = contest.scroll()
    assert report.before.order == ["a", "b"]
    assert report.changes == ()
    assert report.after.order == ["a", "b"]
    assert cells(contest, "b") == ["+", "+1"]
    assert contest.team(TeamName("b")).penalty_time == 5 + (20 + 100)
    assert not contest.frozen
    assert_consistent(contest)
