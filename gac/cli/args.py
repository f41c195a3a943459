"""CLI Argument Parsing"""

import argparse
import argcomplete

from gac import ENGINES, STYLES, __version__


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{value}'")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def _positive_int(value: str) -> int:
    number = _non_negative_int(value)
    if number == 0:
        raise argparse.ArgumentTypeError("must be > 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='gac',
        description='Smart, succinct Git commit messages',
        epilog='Example: gac --style conv --engine none'
    )

    parser.add_argument('-v', '--version', action='version', version=f'%(prog)s {__version__}')

    # Generation options
    parser.add_argument('--prefix', type=str, metavar='TEXT', help='Prefix for the commit message (e.g. "JIRA-123: ")')
    parser.add_argument('-s', '--style', type=str, choices=STYLES, help='Message style')
    parser.add_argument('--max-len', type=_positive_int, metavar='N', help='Max subject length (default: 72)')
    parser.add_argument('--regen', type=_non_negative_int, metavar='N', help='Start at regeneration variant N')

    # Engine options
    parser.add_argument('-e', '--engine', type=str, choices=ENGINES, help='Generation engine (none = offline heuristic)')
    parser.add_argument('-m', '--model', type=str, metavar='MODEL', help='Model name')

    # Commit options
    parser.add_argument('-a', '--all', action='store_true', help='Stage all tracked changes first (git add -u)')
    parser.add_argument('--dry-run', action='store_true', help='Show the message without committing')
    parser.add_argument('--verbose', action='store_true', help='Show debug logging')

    # Setup/config
    parser.add_argument('--init', action='store_true', help='Create a .gacrc in the current directory')
    parser.add_argument('--display-config', action='store_true', help='Show current configuration')
    parser.add_argument('--install-completion', action='store_true', help='Install shell tab completion')

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    argcomplete.autocomplete(parser)
    return parser.parse_args(argv)
