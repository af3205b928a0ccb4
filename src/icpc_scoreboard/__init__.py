import argparse
import contextlib
import dataclasses
import pathlib
import sys
import typing
import warnings

from .contest import Contest
from .model import Rules
from .render import OutputFormat, render
from .session import Session


def build_options_parser(root: argparse.ArgumentParser, title: str, ty: type) -> None:
    """Adds one --option per dataclass field of `ty`"""
    hints = typing.get_type_hints(ty)
    group = root.add_argument_group(title)
    for field in dataclasses.fields(ty):
        if field.name.startswith('_'):
            continue
        argument_type = hints.get(field.name, str)
        if not isinstance(argument_type, type):
            warnings.warn(f'Cannot handle type hint {argument_type} for {ty.__name__}.{field.name}, falling back to str')
            argument_type = str

        help_text = None
        if field.default is not dataclasses.MISSING:
            help_text = f'(default: {field.default!r})'

        if argument_type is bool:
            group.add_argument(
                '--' + field.name.replace('_', '-'),
                action=argparse.BooleanOptionalAction,
                default=argparse.SUPPRESS,
                dest=field.name,
                help=help_text,
            )
        else:
            group.add_argument(
                '--' + field.name.replace('_', '-'),
                default=argparse.SUPPRESS,
                dest=field.name,
                help=help_text,
                required=field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING,
                type=argument_type,
            )


T = typing.TypeVar('T')


def configure(ty: type[T], options: argparse.Namespace) -> T:
    return ty(**{
        field.name: getattr(options, field.name)
        for field in dataclasses.fields(typing.cast(typing.Any, ty))
        if field.name in options
    })


def show_warning(message, category, filename, lineno, file=None, line=None) -> None:
    print('\x1b[33m' + str(message) + '\x1b[0m', file=sys.stderr)


def __main__() -> None:
    parser = argparse.ArgumentParser(
        allow_abbrev=False,
        description='Replays contest commands (teams, submissions, freeze and scroll) and prints the scoreboard',
    )
    parser.add_argument('input', help='File with one command per line (default: stdin)', type=pathlib.Path, nargs='?')
    parser.add_argument('--output-format', help='Output format', type=OutputFormat, choices=list(OutputFormat), default=OutputFormat.TEXT)
    build_options_parser(parser, 'contest rules', Rules)
    options = parser.parse_args()

    warnings.showwarning = show_warning
    session = Session(Contest(configure(Rules, options)))

    source = options.input.open() if options.input is not None else contextlib.nullcontext(sys.stdin)
    with source as file:
        for line in render(session.run(file), options.output_format):
            print(line)
