"""Git Operations Package"""

from gac.git.analyzer import (
    GitAnalyzer, GitError, InvalidInputError, ChangeStatus, FileChange, ChangeSet,
)
from gac.git.diff_processor import DiffProcessor, ProcessedDiff, ProcessorConfig, Priority
from gac.git.patch import split_diff_by_file, changed_lines, added_lines

__all__ = [
    "GitAnalyzer",
    "GitError",
    "InvalidInputError",
    "ChangeStatus",
    "FileChange",
    "ChangeSet",
    "DiffProcessor",
    "ProcessedDiff",
    "ProcessorConfig",
    "Priority",
    "split_diff_by_file",
    "changed_lines",
    "added_lines",
]
