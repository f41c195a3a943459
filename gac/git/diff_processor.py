"""Diff Processor - Transform staged changes into compact LLM context."""

from dataclasses import dataclass
from enum import IntEnum
import re

from gac.git.analyzer import ChangeStatus, FileChange, ChangeSet
from gac.git.patch import split_diff_by_file


class Priority(IntEnum):
    """File priority for inclusion in LLM context."""
    SOURCE = 1
    TEST = 2
    CONFIG = 3
    DOCS = 4
    NOISE = 99


@dataclass
class ProcessedDiff:
    """LLM-ready representation of staged changes."""
    summary: str
    detailed_diff: str
    repo_name: str = ""
    branch: str = ""
    total_files: int = 0
    included_files: int = 0
    filtered_files: int = 0
    truncated: bool = False

    @property
    def estimated_tokens(self) -> int:
        """Rough token estimate (~4 chars per token)."""
        return (len(self.summary) + len(self.detailed_diff)) // 4


@dataclass
class ProcessorConfig:
    """Tunable settings for diff processing."""
    max_tokens: int = 3000
    max_lines_per_file: int = 200
    max_summary_files: int = 10
    large_file_threshold: int = 100
    medium_file_threshold: int = 20


class DiffProcessor:
    """Transforms staged changes into the context block network engines see."""

    NOISE_PATTERNS: list[str] = [
        r'package-lock\.json$', r'yarn\.lock$', r'pnpm-lock\.yaml$',
        r'poetry\.lock$', r'Cargo\.lock$', r'Gemfile\.lock$', r'composer\.lock$',
        r'\.min\.js$', r'\.min\.css$', r'\.map$', r'\.pyc$', r'__pycache__',
        r'dist/', r'build/', r'\.egg-info/', r'node_modules/', r'vendor/',
    ]

    TEST_PATTERNS: list[str] = [
        r'test[s]?/', r'spec[s]?/', r'__tests__/',
        r'\.test\.', r'\.spec\.', r'_test\.', r'_spec\.',
    ]

    CONFIG_PATTERNS: list[str] = [
        r'\.json$', r'\.ya?ml$', r'\.toml$', r'\.ini$', r'\.env',
        r'\.config\.', r'config/', r'Makefile$', r'Dockerfile$',
    ]

    DOCS_PATTERNS: list[str] = [
        r'\.md$', r'\.rst$', r'\.txt$', r'docs/', r'README', r'CHANGELOG',
    ]

    def __init__(self, config: ProcessorConfig | None = None):
        self.config = config or ProcessorConfig()
        self._noise_re = [re.compile(p, re.IGNORECASE) for p in self.NOISE_PATTERNS]
        self._test_re = [re.compile(p, re.IGNORECASE) for p in self.TEST_PATTERNS]
        self._config_re = [re.compile(p, re.IGNORECASE) for p in self.CONFIG_PATTERNS]
        self._docs_re = [re.compile(p, re.IGNORECASE) for p in self.DOCS_PATTERNS]

    def process(self, changes: ChangeSet) -> ProcessedDiff:
        """Main entry point: staged changes -> LLM-ready context."""
        files = changes.active_files
        classified = [(f, self._get_priority(f.path)) for f in files]
        filtered = [(f, p) for f, p in classified if p != Priority.NOISE]
        noise_count = len(changes.files) - len(filtered)

        filtered.sort(key=lambda x: (x[1], -x[0].total_changes))

        summary = self._build_summary([f for f, _ in filtered], noise_count)
        detailed_diff, included_count, truncated = self._build_detailed_diff(filtered, changes.diff)

        return ProcessedDiff(
            summary=summary,
            detailed_diff=detailed_diff,
            repo_name=changes.repo_name,
            branch=changes.branch,
            total_files=len(changes.files),
            included_files=included_count,
            filtered_files=noise_count,
            truncated=truncated
        )

    def _get_priority(self, path: str) -> Priority:
        if any(p.search(path) for p in self._noise_re):
            return Priority.NOISE
        if any(p.search(path) for p in self._test_re):
            return Priority.TEST
        if any(p.search(path) for p in self._docs_re):
            return Priority.DOCS
        if any(p.search(path) for p in self._config_re):
            return Priority.CONFIG
        return Priority.SOURCE

    def _size_indicator(self, file: FileChange) -> str:
        if file.total_changes > self.config.large_file_threshold:
            return " (large)"
        if file.total_changes > self.config.medium_file_threshold:
            return " (medium)"
        return ""

    def _build_summary(self, files: list[FileChange], noise_count: int) -> str:
        limit = self.config.max_summary_files
        lines = []

        for file in files[:limit]:
            lines.append(f"{file.status.label}: {file.path} (+{file.additions}/-{file.deletions}){self._size_indicator(file)}")
            if file.summary and file.status in (ChangeStatus.ADDED, ChangeStatus.MODIFIED):
                lines.append(f"  Key changes: {file.summary}")

        if len(files) > limit:
            lines.append(f"... and {len(files) - limit} more files")
        if noise_count > 0:
            lines.append(f"[Filtered: {noise_count} files (lock files, generated code, ignored)]")

        return "\n".join(lines)

    def _build_detailed_diff(self, files: list[tuple[FileChange, Priority]], full_diff: str) -> tuple[str, int, bool]:
        if not full_diff:
            return "", 0, False

        file_diffs = split_diff_by_file(full_diff)
        result_parts = []
        tokens_used = 0
        files_included = 0
        truncated = False

        for file, _ in files:
            if file.path not in file_diffs:
                continue

            file_diff = self._truncate_file_diff(file_diffs[file.path], file.path)
            diff_tokens = len(file_diff) // 4

            if tokens_used + diff_tokens > self.config.max_tokens:
                truncated = True
                break

            result_parts.append(file_diff)
            tokens_used += diff_tokens
            files_included += 1

        return "\n".join(result_parts), files_included, truncated

    def _truncate_file_diff(self, diff: str, path: str) -> str:
        lines = diff.split('\n')
        if len(lines) <= self.config.max_lines_per_file:
            return diff

        truncated_lines = lines[:self.config.max_lines_per_file]
        truncated_lines.append(f"\n... [{len(lines) - self.config.max_lines_per_file} more lines truncated from {path}]")
        return '\n'.join(truncated_lines)
