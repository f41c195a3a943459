"""Primary-Focus Detector - classify the architectural shape of a change set.

Rules are an ordered table of (kind, predicate, detail builder) evaluated
first-match-wins, most specific first. Each kind carries a fixed weight
(see ``FOCUS_WEIGHTS``) that later decides which description leads.
"""

import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import PurePosixPath

from gac.git.analyzer import ChangeStatus, FileChange
from gac.heuristic.categorizer import categorize_files, rank_categories, pretty_category
from gac.heuristic.models import FocusKind, PrimaryFocus

ENGINE_DIRS = frozenset({'engines', 'engine', 'providers', 'backends', 'adapters'})
SHARED_STEMS = frozenset({'shared', 'utils', 'util', 'common', 'helpers', 'helper', 'base', 'types', 'index'})
GENERIC_DIRS = frozenset({'src', 'lib', 'app', 'pkg', 'internal'})

ACRONYMS = {
    'openai': 'OpenAI', 'llm': 'LLM', 'api': 'API', 'ai': 'AI', 'gpt': 'GPT',
    'http': 'HTTP', 'cli': 'CLI', 'ui': 'UI', 'sql': 'SQL', 'aws': 'AWS', 'gcp': 'GCP',
}

SCOPE_DOMINANCE = 0.6
MIN_PEERS_FOR_REFACTOR = 2
MIN_PEERS_FOR_MULTI_ENGINE = 3
MIN_FILES_FOR_CORE_REFACTOR = 3


def display_name(stem: str) -> str:
    """'gemini' -> 'Gemini', 'llm-client' -> 'LLM Client', 'openai' -> 'OpenAI'."""
    parts = [p for p in re.split(r'[-_.\s]+', stem) if p]
    return ' '.join(ACRONYMS.get(p.lower(), p[:1].upper() + p[1:]) for p in parts)


def join_names(names: list[str]) -> str:
    if not names:
        return ''
    if len(names) == 1:
        return names[0]
    if len(names) == 2:
        return f"{names[0]} and {names[1]}"
    return f"{', '.join(names[:-1])}, and {names[-1]}"


def _in_engine_dir(file: FileChange) -> bool:
    return PurePosixPath(file.path).parent.name.lower() in ENGINE_DIRS


def _is_shared(file: FileChange) -> bool:
    return file.stem.lower() in SHARED_STEMS


def engine_peers(files: list[FileChange]) -> list[FileChange]:
    """Engine modules proper (not shared helpers) sitting in an engines-style directory."""
    return [f for f in files if _in_engine_dir(f) and not _is_shared(f)]


def engine_phrase(files: list[FileChange]) -> str:
    """'Gemini and Ollama engines' from the peers present, or '' when none are."""
    names = list(dict.fromkeys(display_name(f.stem) for f in engine_peers(files)))
    if not names:
        return ''
    if len(names) > 3:
        return f"{len(names)} engines"
    return f"{join_names(names)} engine{'s' if len(names) > 1 else ''}"


def dominant_directory(files: list[FileChange]) -> tuple[str, float]:
    """Most common meaningful top-level directory and the share of files under it."""
    dirs = [f.directory for f in files if '/' in f.path]
    dirs = [d for d in dirs if d.lower() not in GENERIC_DIRS]
    if not dirs or not files:
        return '', 0.0
    directory, count = Counter(dirs).most_common(1)[0]
    return directory, count / len(files)


@dataclass
class ChangeShape:
    """Pre-computed facts about a change set that the focus rules test."""
    files: list[FileChange]
    categories: dict[str, int]
    scope_dominance: float = SCOPE_DOMINANCE
    added_peers: list[FileChange] = field(default_factory=list)
    modified_peers: list[FileChange] = field(default_factory=list)
    shrinking_peers: list[FileChange] = field(default_factory=list)
    engine_shared_added: bool = False
    shared_added: bool = False

    @classmethod
    def of(cls, files: list[FileChange], categories: dict[str, int], scope_dominance: float) -> 'ChangeShape':
        peers = engine_peers(files)
        modified = [f for f in peers if f.status is ChangeStatus.MODIFIED]
        return cls(
            files=files,
            categories=categories,
            scope_dominance=scope_dominance,
            added_peers=[f for f in peers if f.is_new],
            modified_peers=modified,
            # Peers that lost more than they gained: code moved out into shared modules
            shrinking_peers=[f for f in modified if f.deletions > f.additions],
            engine_shared_added=any(f.is_new and _in_engine_dir(f) and _is_shared(f) for f in files),
            shared_added=any(f.is_new and _is_shared(f) for f in files),
        )

    @property
    def added_names(self) -> list[str]:
        return list(dict.fromkeys(display_name(f.stem) for f in self.added_peers))

    @property
    def modified_names(self) -> list[str]:
        return list(dict.fromkeys(display_name(f.stem) for f in self.modified_peers))

    @property
    def modified_count(self) -> int:
        return sum(1 for f in self.files if f.status is ChangeStatus.MODIFIED)


def _is_engine_refactor(s: ChangeShape) -> bool:
    if s.added_peers:
        return s.engine_shared_added or len(s.shrinking_peers) >= MIN_PEERS_FOR_REFACTOR
    return s.engine_shared_added and len(s.modified_peers) >= MIN_PEERS_FOR_REFACTOR


def _engine_refactor_detail(s: ChangeShape) -> str:
    if s.added_names:
        return f"engines to integrate {join_names(s.added_names)}"
    return "engines around shared utilities"


def _is_core_refactor(s: ChangeShape) -> bool:
    if s.shared_added and s.modified_count >= MIN_PEERS_FOR_REFACTOR:
        return True
    no_additions = not any(f.is_new for f in s.files)
    shrinking = sum(f.deletions for f in s.files) > sum(f.additions for f in s.files)
    return no_additions and shrinking and s.modified_count >= MIN_FILES_FOR_CORE_REFACTOR


def _core_refactor_detail(s: ChangeShape) -> str:
    directory, _ = dominant_directory(s.files)
    return f"{directory} modules" if directory else "core modules"


def _new_engine_detail(s: ChangeShape) -> str:
    names = s.added_names
    return f"{join_names(names)} engine{'s' if len(names) > 1 else ''}"


def _multi_engine_detail(s: ChangeShape) -> str:
    names = s.modified_names
    if len(names) > 3:
        return f"{len(names)} engines"
    return f"{join_names(names)} engines"


def _single_file_detail(s: ChangeShape) -> str:
    file = s.files[0]
    if file.summary:
        identifier = file.summary.split(',')[0].strip()
        if identifier and identifier != file.stem:
            return f"{identifier} in {file.stem}"
    return file.stem


def _is_scope_specific(s: ChangeShape) -> bool:
    _, share = dominant_directory(s.files)
    return len(s.files) > 1 and share >= s.scope_dominance


def _multi_category_detail(s: ChangeShape) -> str:
    phrase = engine_phrase(s.files)
    top = rank_categories(s.categories)[:2]
    return join_names([pretty_category(c, phrase) for c in top])


FOCUS_RULES = [
    (FocusKind.ENGINE_REFACTOR, _is_engine_refactor, _engine_refactor_detail),
    (FocusKind.CORE_REFACTOR, _is_core_refactor, _core_refactor_detail),
    (FocusKind.NEW_ENGINE, lambda s: bool(s.added_peers), _new_engine_detail),
    (FocusKind.MULTI_ENGINE,
     lambda s: len(s.modified_peers) >= MIN_PEERS_FOR_MULTI_ENGINE and not s.added_peers,
     _multi_engine_detail),
    (FocusKind.DEPS, lambda s: set(s.categories) == {'dependencies'}, lambda s: "dependencies"),
    (FocusKind.SINGLE_FILE, lambda s: len(s.files) == 1, _single_file_detail),
    (FocusKind.SCOPE_SPECIFIC, _is_scope_specific, lambda s: f"{dominant_directory(s.files)[0]} module"),
    (FocusKind.MULTI_CATEGORY, lambda s: len(s.categories) >= 2, _multi_category_detail),
]


def detect_primary_focus(
    files: list[FileChange],
    categories: dict[str, int] | None = None,
    scope_dominance: float = SCOPE_DOMINANCE,
) -> PrimaryFocus:
    """Classify the (code-only) change set; GENERIC when no rule matches."""
    if not files:
        return PrimaryFocus.of(FocusKind.GENERIC, "changes")

    if categories is None:
        categories = categorize_files(files)
    shape = ChangeShape.of(files, categories, scope_dominance)

    for kind, matches, detail in FOCUS_RULES:
        if matches(shape):
            return PrimaryFocus.of(kind, detail(shape))

    return PrimaryFocus.of(FocusKind.GENERIC, f"{len(files)} files")
