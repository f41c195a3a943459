"""Diff Entity Extractor - declarations, error handling and manifest dependencies."""

import re

from gac.git.analyzer import ChangeStatus, FileChange
from gac.git.patch import split_diff_by_file, added_lines
from gac.heuristic.models import ExtractedEntities

# JS/TS functions and arrow-function bindings may be UI components when PascalCase
JS_FUNCTION_PATTERNS = [
    re.compile(r'\bfunction\s*\*?\s*([A-Za-z_$][\w$]*)\s*[(<]'),
    re.compile(
        r'\b(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]+)?=\s*(?:async\s+)?'
        r'(?:\([^)]*\)|[A-Za-z_$][\w$]*)\s*(?::\s*[^=]+?)?=>'
    ),
]

OTHER_FUNCTION_PATTERNS = [
    re.compile(r'\bdef\s+([A-Za-z_]\w*)\s*\('),
    re.compile(r'\bfunc\s+(?:\([^)]*\)\s*)?([A-Za-z_]\w*)\s*\('),
    re.compile(r'\bfn\s+([A-Za-z_]\w*)\s*[(<]'),
]

CLASS_PATTERN = re.compile(r'\bclass\s+([A-Za-z_$][\w$]*)')
VARIABLE_PATTERN = re.compile(r'\b(?:const|let|var)\s+([A-Za-z_$][\w$]*)\s*(?::[^=]+)?=(?!=)')
COMPONENT_NAME = re.compile(r'^[A-Z][a-z0-9]\w*$')

ERROR_HANDLING_PATTERN = re.compile(
    r'\btry\s*[:{]|\bcatch\s*[({]|\.catch\(|\bexcept\b|\bthrow\s+new\b|'
    r'\braise\s+\w|\bif\s+err\s*!=\s*nil|\bfinally\s*[:{]'
)

MANIFEST_NAME = 'package.json'
DEPENDENCY_BLOCK_HEADER = re.compile(r'^\s*"(\w*[dD]ependencies)"\s*:\s*\{')
DEPENDENCY_ENTRY = re.compile(r'^\s*"([^"]+)"\s*:\s*"([^"]*)"')


def _add(target: list[str], name: str) -> None:
    if name not in target:
        target.append(name)


def _is_component_name(name: str) -> bool:
    return bool(COMPONENT_NAME.match(name))


def _scan_declarations(line: str, entities: ExtractedEntities) -> None:
    declared = set()

    for pattern in JS_FUNCTION_PATTERNS:
        for match in pattern.finditer(line):
            name = match.group(1)
            declared.add(name)
            _add(entities.components if _is_component_name(name) else entities.functions, name)

    for pattern in OTHER_FUNCTION_PATTERNS:
        for match in pattern.finditer(line):
            declared.add(match.group(1))
            _add(entities.functions, match.group(1))

    for match in CLASS_PATTERN.finditer(line):
        declared.add(match.group(1))
        _add(entities.classes, match.group(1))

    for match in VARIABLE_PATTERN.finditer(line):
        name = match.group(1)
        if name in declared:
            continue
        _add(entities.components if _is_component_name(name) else entities.variables, name)


def _scan_manifest(file_diff: str) -> tuple[dict[str, str], dict[str, str]]:
    """Walk a package.json diff tracking whether each line sits in a dependency block.

    Returns ({name: version} added, {name: version} removed).
    """
    added, removed = {}, {}
    depth = 0  # brace depth inside a dependency block; 0 means outside

    for line in file_diff.split('\n'):
        if line.startswith(('+++', '---', 'diff --git', 'index ')):
            continue
        if line.startswith('@@'):
            # Hunk context after the second @@ names the enclosing line when git can find one
            context = line.split('@@')[2] if line.count('@@') >= 2 else ''
            depth = 1 if DEPENDENCY_BLOCK_HEADER.search(context) else 0
            continue

        marker, content = (line[0], line[1:]) if line[:1] in ('+', '-', ' ') else (' ', line)

        if depth == 0:
            if DEPENDENCY_BLOCK_HEADER.match(content):
                depth = max(0, content.count('{') - content.count('}'))
            continue

        if DEPENDENCY_BLOCK_HEADER.match(content):
            continue

        entry = DEPENDENCY_ENTRY.match(content)
        if entry and depth == 1:
            if marker == '+':
                added[entry.group(1)] = entry.group(2)
            elif marker == '-':
                removed[entry.group(1)] = entry.group(2)

        depth += content.count('{') - content.count('}')
        if depth <= 0:
            depth = 0

    return added, removed


def extract_entities(diff: str, files: list[FileChange]) -> ExtractedEntities:
    """Scan diff text for added declarations and manifest dependency changes.

    Never raises: lines that match nothing are skipped.
    """
    entities = ExtractedEntities()
    if not diff:
        return entities

    sections = split_diff_by_file(diff)
    # A bare hunk without a "diff --git" header is scanned as one anonymous file
    if not sections:
        sections = {'': diff}

    doc_paths = {f.path for f in files if f.is_doc}
    dep_added, dep_removed = {}, {}

    for path, section in sections.items():
        if path.rsplit('/', 1)[-1] == MANIFEST_NAME:
            added, removed = _scan_manifest(section)
            dep_added.update(added)
            dep_removed.update(removed)
            continue
        if path in doc_paths:
            continue
        for line in added_lines(section):
            _scan_declarations(line, entities)
            if not entities.has_error_handling and ERROR_HANDLING_PATTERN.search(line):
                entities.has_error_handling = True

    for name, version in dep_added.items():
        if name in dep_removed and dep_removed[name] == version:
            # Same entry re-emitted (e.g. trailing comma added); not a dependency change
            continue
        entities.dependencies_added.append(name)
    for name in dep_removed:
        # Added and removed in one diff is a version bump, reported as an addition
        if name not in dep_added:
            entities.dependencies_removed.append(name)

    return entities


def find_replacements(files: list[FileChange]) -> list[tuple[FileChange, FileChange]]:
    """Pair deleted files with added files in the same directory."""
    deleted = [f for f in files if f.status is ChangeStatus.DELETED]
    added = [f for f in files if f.status is ChangeStatus.ADDED]
    pairs = []
    used = set()

    for old in deleted:
        for new in added:
            if new.path in used or new.parent != old.parent:
                continue
            pairs.append((old, new))
            used.add(new.path)
            break

    return pairs
