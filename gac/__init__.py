"""
gac - Smart, succinct Git commit messages

Commit subject generation from staged git changes, with a deterministic
offline engine and optional local or remote language-model engines.
"""

__version__ = "1.0.0"

# Centralized commit types - single source of truth
# Used by: heuristic classifier/renderer, llm parsing, output colors
COMMIT_TYPES = {
    'feat': 'A new feature or capability',
    'fix': 'A bug fix',
    'refactor': 'Code restructuring without behavior change',
    'docs': 'Documentation only changes',
    'test': 'Adding or updating tests',
    'style': 'Formatting, whitespace, no code change',
    'chore': 'Maintenance tasks, dependencies, tooling',
}

COMMIT_TYPE_NAMES = list(COMMIT_TYPES.keys())

STYLES = ("plain", "conv", "gitmoji", "mix")
ENGINES = ("ollama", "openai", "anthropic", "gemini", "none")
