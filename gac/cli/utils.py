"""CLI Utility Functions"""

import re

from gac.output import dim, format_candidate, highlight, info, error

TICKET_PATTERN = re.compile(r'\b([A-Z]{2,}-\d{1,7})\b')


def detect_ticket_prefix(branch: str) -> str:
    """'feature/ABC-123-login' -> 'ABC-123: '; '' when the branch names no ticket."""
    match = TICKET_PATTERN.search(branch or '')
    return f"{match.group(1)}: " if match else ''


def normalize_prefix(prefix: str) -> str:
    """Make sure a non-empty prefix is separated from the subject."""
    prefix = prefix.strip()
    if not prefix:
        return ''
    if prefix.endswith(':'):
        return prefix + ' '
    return prefix + ': '


def apply_prefix(prefix: str, message: str) -> str:
    if prefix and message.startswith(prefix):
        return message
    return f"{prefix}{message}"


ACTIONS = {
    'r': 'regenerate',
    'p': 'prefix',
    'q': 'quit',
}


def display_options(options: list[str], prefix: str = '', limit: int | None = None) -> str | int:
    """Show candidates and read a choice.

    Returns the selected index, or one of 'regenerate', 'prefix', 'quit'.
    """
    print()
    for i, opt in enumerate(options, 1):
        print(format_candidate(apply_prefix(prefix, opt), i, limit))
    print()
    print(f"  {info('r')} {dim('regenerate')}   {highlight('p')} {dim('set prefix')}   {error('q')} {dim('quit')}")
    print()

    while True:
        try:
            choice = input(f"Select [1-{len(options)}], r, p or q: ").strip().lower()
        except (KeyboardInterrupt, EOFError):
            return 'quit'
        if choice in ACTIONS:
            return ACTIONS[choice]
        if choice.isdigit() and 1 <= int(choice) <= len(options):
            return int(choice) - 1
        print(f"Enter 1-{len(options)}, r, p or q")


def confirm(question: str, default: bool = True) -> bool:
    hint = '[Y/n]' if default else '[y/N]'
    try:
        answer = input(f"{question} {hint} ").strip().lower()
    except (KeyboardInterrupt, EOFError):
        return False
    if not answer:
        return default
    return answer in ('y', 'yes')
