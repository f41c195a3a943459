"""Documentation-Significance Evaluator and docs topic detection."""

import re

from gac.git.analyzer import FileChange
from gac.git.patch import added_lines, diff_slice
from gac.heuristic.models import PrimaryFocus

DOCS_THRESHOLD = 0.4
ARCHITECTURAL_DOCS_THRESHOLD = 0.6

HEADING = re.compile(r'^\s*#{1,6}\s+(.+?)\s*#*\s*$')

# Ordered keyword cues: first cue found in the added doc text names the topic
TOPIC_CUES = [
    (re.compile(r'\binstall', re.IGNORECASE), 'installation guide'),
    (re.compile(r'\busage\b', re.IGNORECASE), 'usage docs'),
    (re.compile(r'\bapi\b', re.IGNORECASE), 'API reference'),
    (re.compile(r'\bconfig', re.IGNORECASE), 'configuration docs'),
    (re.compile(r'\bcontribut', re.IGNORECASE), 'contributing guide'),
]

MAX_HEADING_LENGTH = 40


def churn(files: list[FileChange]) -> int:
    return sum(f.weight for f in files)


def is_docs_significant(
    doc_files: list[FileChange],
    code_files: list[FileChange],
    focus: PrimaryFocus,
    threshold: float = DOCS_THRESHOLD,
    architectural_threshold: float = ARCHITECTURAL_DOCS_THRESHOLD,
) -> bool:
    """Whether documentation carries enough of the churn to shape the message."""
    if not doc_files:
        return False
    if not code_files:
        return True
    doc_churn = churn(doc_files)
    total = doc_churn + churn(code_files)
    bar = architectural_threshold if focus.is_architectural else threshold
    return doc_churn / total >= bar


def _first_heading(lines: list[str]) -> str:
    for line in lines:
        match = HEADING.match(line)
        if match:
            heading = match.group(1).strip()
            if heading and len(heading) <= MAX_HEADING_LENGTH:
                return heading
    return ''


def detect_docs_topic(diff: str, doc_files: list[FileChange]) -> str:
    """Name what the documentation change is about, e.g. 'Installation section'."""
    lines = added_lines(diff_slice(diff, [f.path for f in doc_files]))

    heading = _first_heading(lines)
    if heading:
        return f"{heading} section"

    text = '\n'.join(lines)
    for cue, topic in TOPIC_CUES:
        if cue.search(text):
            return topic

    if any(f.stem.lower() == 'readme' for f in doc_files):
        return 'README'
    return 'documentation'
