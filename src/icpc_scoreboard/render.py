import enum
import msgspec
import tabulate
import typing

from .board import (
    Message,
    Output,
    RankChange,
    RankingResult,
    Scoreboard,
    SubmissionResult,
)


class OutputFormat(enum.Enum):
    TEXT = "text"
    TABLE = "table"
    JSON = "json"

    def __str__(self):
        return self.value


def text_lines(output: Output) -> list[str]:
    """The plain line format, one record per line"""
    match output:
        case Message(level=level, text=text):
            return [f"[{level.value}]{text}"]
        case Scoreboard(problems=problems, rows=rows):
            return [
                " ".join((row.team, str(row.rank), str(row.solved), str(row.penalty), *(row.cells[problem] for problem in problems)))
                for row in rows
            ]
        case RankChange(team=team, replaced=replaced, solved=solved, penalty=penalty):
            return [f"{team} {replaced} {solved} {penalty}"]
        case RankingResult(team=team, rank=rank):
            return [f"{team} NOW AT RANKING {rank}"]
        case SubmissionResult(submission=None):
            return ["Cannot find any submission."]
        case SubmissionResult(team=team, submission=submission):
            assert submission is not None
            return [f"{team} {submission.problem} {submission.verdict} {submission.time}"]
    raise TypeError(f"Cannot render {output!r}")


def table_lines(output: Output) -> list[str]:
    """Like text_lines, but scoreboards become tables"""
    if not isinstance(output, Scoreboard):
        return text_lines(output)
    data = [
        (row.rank, row.team, row.solved, row.penalty, *(row.cells[problem] for problem in output.problems))
        for row in output.rows
    ]
    table = tabulate.tabulate(
        data,
        headers=("Rank", "Team", "Solved", "Penalty", *output.problems),
        tablefmt="simple_grid",
        disable_numparse=True,
    )
    return table.splitlines()


def _encode_unsupported(obj: typing.Any) -> typing.Any:
    # frozendict is not always a dict subclass
    if isinstance(obj, typing.Mapping):
        return dict(obj)
    raise NotImplementedError(f"Cannot encode objects of type {type(obj)}")


def json_lines(output: Output) -> list[str]:
    """One JSON object per record, tagged with the record type"""
    record = msgspec.to_builtins(output, enc_hook=_encode_unsupported)
    return [msgspec.json.encode({"type": type(output).__name__, **record}).decode()]


renderers: dict[OutputFormat, typing.Callable[[Output], list[str]]] = {
    OutputFormat.TEXT: text_lines,
    OutputFormat.TABLE: table_lines,
    OutputFormat.JSON: json_lines,
}


def render(outputs: typing.Iterable[Output], output_format: OutputFormat = OutputFormat.TEXT) -> typing.Iterator[str]:
    renderer = renderers[output_format]
    for output in outputs:
        yield from renderer(output)
