"""Change-Type Classifier - resolve one commit type from an ordered rule table.

Rules run top to bottom and the first match wins, so a weak late signal
(a lint keyword, a lockfile) never overrides an earlier strong one.
"""

import re
from dataclasses import dataclass
from functools import cached_property

from gac.git.analyzer import FileChange
from gac.git.patch import changed_lines
from gac.heuristic.categorizer import categorize_file, is_lockfile
from gac.heuristic.entities import find_replacements
from gac.heuristic.models import ExtractedEntities, FocusKind, PrimaryFocus

FIX_KEYWORDS = re.compile(
    r'\b(fix(e[sd])?|bug(fix)?|issue|resolve[sd]?|crash(es|ed)?|hotfix|regression|patch(ed)?)\b',
    re.IGNORECASE,
)
TEST_KEYWORDS = re.compile(r'\b(describe|it|test)\s*\(|\bexpect\s*\(|\bassert\b|\bpytest\b|\bunittest\b')
REFACTOR_KEYWORDS = re.compile(
    r'\b(refactor(ed|ing)?|restructure[sd]?|reorganiz(e|ed|ing)|clean\s?up|simplif(y|ied)|extract(ed)?)\b',
    re.IGNORECASE,
)
STYLE_KEYWORDS = re.compile(r'\b(prettier|eslint|stylelint|lint(ing)?|format(ting)?|whitespace|indent(ation)?)\b',
                            re.IGNORECASE)

NEW_ENGINE_FOCI = frozenset({FocusKind.NEW_ENGINE, FocusKind.MULTI_ENGINE})


@dataclass
class ClassifierInput:
    files: list[FileChange]
    diff: str
    entities: ExtractedEntities
    focus: PrimaryFocus

    @cached_property
    def changed_text(self) -> str:
        return '\n'.join(content for _, content in changed_lines(self.diff))


def _all_docs(c: ClassifierInput) -> bool:
    return bool(c.files) and all(f.is_doc for f in c.files)


def _has_new_code(c: ClassifierInput) -> bool:
    return any(f.is_new and not f.is_doc for f in c.files) or c.entities.has_new_declarations


def _has_test_evidence(c: ClassifierInput) -> bool:
    return any(categorize_file(f) == 'tests' for f in c.files) or bool(TEST_KEYWORDS.search(c.changed_text))


def _has_style_evidence(c: ClassifierInput) -> bool:
    return any(categorize_file(f) == 'styles' for f in c.files) or bool(STYLE_KEYWORDS.search(c.changed_text))


TYPE_RULES = [
    (_all_docs, 'docs'),
    (lambda c: c.focus.is_architectural, 'refactor'),
    (lambda c: c.focus.kind in NEW_ENGINE_FOCI, 'feat'),
    (lambda c: c.entities.has_dependency_changes, 'chore'),
    (lambda c: bool(find_replacements(c.files)), 'refactor'),
    (_has_new_code, 'feat'),
    (lambda c: bool(FIX_KEYWORDS.search(c.changed_text)), 'fix'),
    (_has_test_evidence, 'test'),
    (lambda c: bool(REFACTOR_KEYWORDS.search(c.changed_text)), 'refactor'),
    (_has_style_evidence, 'style'),
    (lambda c: any(is_lockfile(f) for f in c.files), 'chore'),
]


def default_type(files: list[FileChange]) -> str:
    return 'feat' if files and files[0].is_new else 'chore'


def classify_change(
    files: list[FileChange],
    diff: str,
    entities: ExtractedEntities,
    focus: PrimaryFocus,
) -> str:
    """Return one of feat/fix/refactor/docs/test/style/chore."""
    context = ClassifierInput(files=files, diff=diff, entities=entities, focus=focus)
    for matches, change_type in TYPE_RULES:
        if matches(context):
            return change_type
    return default_type(files)
