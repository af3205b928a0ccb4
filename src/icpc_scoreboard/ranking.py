import typing

from .model import Minutes, Team, TeamName


def ranking_key(team: Team) -> tuple[int, int, tuple[Minutes, ...], TeamName]:
    """Sort key for the scoreboard order (smaller keys rank better)

    1. more solved problems
    2. less penalty time
    3. the solve times, latest first: the team whose latest solve is earlier wins,
       then the second latest, and so on
    4. team name, ascending

    Teams with the same solved count have the same number of solve times, so the
    tuple comparison in (3) never falls back to comparing lengths. The name makes
    the order strict: two distinct teams never compare equal.
    """
    return (-team.solved_count, team.penalty_time, tuple(team.solve_times), team.name)


def rank_teams(teams: typing.Iterable[Team]) -> list[TeamName]:
    """Orders the teams best first and assigns dense ranks 1..N"""
    ordered = sorted(teams, key=ranking_key)
    for position, team in enumerate(ordered, start=1):
        team.rank = position
    return [team.name for team in ordered]
