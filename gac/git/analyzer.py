"""Git Analyzer - Extract staged changes from git."""

import fnmatch
import re
import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePosixPath

from gac.git.patch import split_diff_by_file, changed_lines
from gac.logging import get_logger

logger = get_logger("git")


class InvalidInputError(ValueError):
    """Raised when a change record or engine option is malformed."""
    pass


class GitError(Exception):
    """Raised when git operations fail."""
    pass


class ChangeStatus(Enum):
    """Staged file status as reported by `git diff --name-status`."""
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"
    COPIED = "C"

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @classmethod
    def parse(cls, value) -> 'ChangeStatus':
        """Accept a ChangeStatus, a status letter, or a status label."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value:
            text = value.strip()
            for status in cls:
                if text.upper() == status.value or text.lower() == status.name.lower():
                    return status
        raise InvalidInputError(f"Invalid file status: {value!r}")


# Typechange (file <-> symlink) is staged as a modification; unmerged and unknown paths are skipped
STATUS_ALIASES = {'T': 'M'}
SKIPPED_STATUSES = frozenset('UXB')


DOC_EXTENSIONS = ('.md', '.mdx', '.markdown', '.txt', '.rst', '.adoc')


@dataclass(frozen=True)
class FileChange:
    """Represents a single file's staged change."""
    path: str
    status: ChangeStatus = ChangeStatus.MODIFIED
    additions: int = 0
    deletions: int = 0
    summary: str = ""
    is_ignored: bool = False

    def __post_init__(self):
        if not isinstance(self.path, str) or not self.path.strip():
            raise InvalidInputError("File path must be a non-empty string")
        object.__setattr__(self, 'path', self.path.strip().replace('\\', '/'))
        object.__setattr__(self, 'status', ChangeStatus.parse(self.status))
        for name in ('additions', 'deletions'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidInputError(f"{name} must be a non-negative integer, got {value!r}")

    @property
    def total_changes(self) -> int:
        return self.additions + self.deletions

    @property
    def weight(self) -> int:
        """Churn with a floor of one, so pure renames still count."""
        return max(1, self.total_changes)

    @property
    def is_new(self) -> bool:
        return self.status is ChangeStatus.ADDED

    @property
    def name(self) -> str:
        return PurePosixPath(self.path).name

    @property
    def stem(self) -> str:
        name = self.name
        # Strip compound suffixes too: "app.test.ts" -> "app"
        return name.split('.')[0] if not name.startswith('.') else name

    @property
    def parent(self) -> str:
        return str(PurePosixPath(self.path).parent)

    @property
    def is_doc(self) -> bool:
        return self.path.lower().endswith(DOC_EXTENSIONS)

    @property
    def directory(self) -> str:
        """Extract the top-level directory for scope detection."""
        parts = PurePosixPath(self.path).parts
        if len(parts) > 2 and parts[0] in ('src', 'lib', 'app'):
            return parts[1]
        return parts[0] if parts else ''


@dataclass
class ChangeSet:
    """Complete picture of what's staged for commit."""
    files: list[FileChange] = field(default_factory=list)
    diff: str = ""
    repo_name: str = ""
    branch: str = ""

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)

    @property
    def active_files(self) -> list[FileChange]:
        return [f for f in self.files if not f.is_ignored]

    @property
    def is_empty(self) -> bool:
        return len(self.files) == 0


IDENTIFIER_PATTERNS = [
    re.compile(r'\b(?:function|class|const|let|var|interface|type|enum)\s+([A-Za-z_$][\w$]*)'),
    re.compile(r'\bdef\s+([A-Za-z_]\w*)'),
    re.compile(r'\bfunc\s+(?:\([^)]*\)\s*)?([A-Za-z_]\w*)'),
]

MAX_SUMMARY_IDENTIFIERS = 5


def summarize_identifiers(file_diff: str) -> str:
    """Comma-joined names declared on the changed lines of one file's diff."""
    found = {}
    for _, content in changed_lines(file_diff):
        for pattern in IDENTIFIER_PATTERNS:
            for match in pattern.finditer(content):
                found.setdefault(match.group(1), None)
    return ', '.join(list(found)[:MAX_SUMMARY_IDENTIFIERS])


def is_ignored_path(path: str, patterns: list[str]) -> bool:
    name = PurePosixPath(path).name
    for pattern in patterns:
        pattern = pattern.rstrip('/')
        if fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(name, pattern):
            return True
        if path.startswith(pattern + '/'):
            return True
    return False


class GitAnalyzer:
    """Extracts staged changes from git."""

    def __init__(self, ignored_patterns: list[str] | None = None):
        self.ignored_patterns = list(ignored_patterns or [])
        self._verify_git_available()
        self._verify_in_repo()

    def _run_git(self, *args: str) -> str:
        """Run a git command and return stdout."""
        try:
            result = subprocess.run(
                ['git', *args],
                capture_output=True,
                text=True,
                check=True,
                encoding='utf-8',
                errors='replace'
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            raise GitError(f"Git command failed: git {' '.join(args)}\n{e.stderr}")
        except FileNotFoundError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_git_available(self) -> None:
        """Fail fast if git isn't available."""
        try:
            self._run_git('--version')
        except GitError:
            raise GitError("Git is not installed or not in PATH")

    def _verify_in_repo(self) -> None:
        """Fail fast if we're not in a git repository."""
        try:
            self._run_git('rev-parse', '--git-dir')
        except GitError:
            raise GitError("Not inside a git repository")

    def get_staged_changes(self) -> ChangeSet:
        """Get staged changes only."""
        name_status = self._run_git('diff', '--cached', '--name-status')
        if not name_status.strip():
            return ChangeSet()

        diff = self._run_git('diff', '--cached', '--unified=3')
        counts = self._parse_numstat(self._run_git('diff', '--cached', '--numstat'))
        files = self.parse_name_status(name_status, counts, diff)
        return ChangeSet(
            files=files,
            diff=diff,
            repo_name=self._get_repo_name(),
            branch=self.get_branch(),
        )

    def parse_name_status(self, output: str, counts: dict[str, tuple[int, int]], diff: str) -> list[FileChange]:
        """Parse 'git diff --cached --name-status' output into FileChange records."""
        file_diffs = split_diff_by_file(diff)
        files = []
        for line in output.strip().split('\n'):
            parts = line.split('\t')
            if len(parts) < 2 or not parts[0]:
                continue
            letter = STATUS_ALIASES.get(parts[0][0], parts[0][0])
            if letter in SKIPPED_STATUSES:
                logger.debug("skipping %s with status %s", parts[-1], parts[0])
                continue
            # Renames and copies list "R100\told\tnew"; the destination is what's staged
            path = parts[-1]
            additions, deletions = counts.get(path, (0, 0))
            files.append(FileChange(
                path=path,
                status=letter,
                additions=additions,
                deletions=deletions,
                summary=summarize_identifiers(file_diffs.get(path, '')),
                is_ignored=is_ignored_path(path, self.ignored_patterns),
            ))
        return files

    @staticmethod
    def _parse_numstat(output: str) -> dict[str, tuple[int, int]]:
        """Parse 'git diff --numstat' output; binary files report '-'."""
        counts = {}
        for line in output.strip().split('\n'):
            parts = line.split('\t')
            if len(parts) >= 3:
                additions = int(parts[0]) if parts[0].isdigit() else 0
                deletions = int(parts[1]) if parts[1].isdigit() else 0
                path = parts[-1]
                # "src/{old => new}.py" style rename paths
                if '=>' in path:
                    path = re.sub(r'\{[^{}]*=> ([^{}]*)\}', r'\1', path)
                    path = path.split(' => ')[-1].replace('//', '/')
                counts[path] = (additions, deletions)
        return counts

    def get_branch(self) -> str:
        try:
            return self._run_git('rev-parse', '--abbrev-ref', 'HEAD').strip()
        except GitError:
            return ''

    def _get_repo_name(self) -> str:
        try:
            remote = self._run_git('config', '--get', 'remote.origin.url').strip()
            match = re.search(r'/([^/]+?)(\.git)?$', remote)
            if match:
                return match.group(1)
        except GitError:
            pass
        try:
            toplevel = self._run_git('rev-parse', '--show-toplevel').strip()
            return PurePosixPath(toplevel.replace('\\', '/')).name or 'repo'
        except GitError:
            return 'repo'

    def commit(self, message: str) -> None:
        self._run_git('commit', '-m', message)

    def stage_all_tracked(self) -> None:
        self._run_git('add', '-u')
