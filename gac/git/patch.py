"""Unified diff helpers shared by the analyzer, the diff processor and the heuristic engine."""

import re

_DIFF_HEADER = re.compile(r'^diff --git a/(.+?) b/(.+)$')


def split_diff_by_file(diff: str) -> dict[str, str]:
    """Split a multi-file unified diff into {destination path: file diff}."""
    files = {}
    current_file = None
    current_lines = []

    for line in diff.split('\n'):
        if line.startswith('diff --git'):
            if current_file:
                files[current_file] = '\n'.join(current_lines)
            match = _DIFF_HEADER.match(line)
            current_file = match.group(2) if match else None
            current_lines = [line]
        elif current_file:
            current_lines.append(line)

    if current_file:
        files[current_file] = '\n'.join(current_lines)

    return files


def changed_lines(diff: str):
    """Yield (marker, content) for every added or removed line, skipping file headers."""
    for line in diff.split('\n'):
        if line.startswith(('+++', '---')):
            continue
        if line.startswith(('+', '-')):
            yield line[0], line[1:]


def added_lines(diff: str) -> list[str]:
    return [content for marker, content in changed_lines(diff) if marker == '+']


def diff_slice(diff: str, paths) -> str:
    """Only the per-file sections of `diff` whose destination path is in `paths`."""
    wanted = set(paths)
    sections = split_diff_by_file(diff)
    if not sections:
        # Headerless hunks can't be attributed to a file; keep them whole
        return diff
    return '\n'.join(section for path, section in sections.items() if path in wanted)
