"""File Categorizer - assign each changed file one semantic category, weighted by churn."""

import re
from types import MappingProxyType

from gac.git.analyzer import FileChange

MANIFEST_FILES = frozenset({
    'package.json', 'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml', 'npm-shrinkwrap.json',
    'requirements.txt', 'pipfile', 'pipfile.lock', 'poetry.lock', 'pyproject.toml',
    'cargo.toml', 'cargo.lock', 'go.mod', 'go.sum', 'gemfile', 'gemfile.lock',
    'composer.json', 'composer.lock',
})

LOCKFILES = frozenset({
    'package-lock.json', 'yarn.lock', 'pnpm-lock.yaml', 'npm-shrinkwrap.json',
    'pipfile.lock', 'poetry.lock', 'cargo.lock', 'go.sum', 'gemfile.lock', 'composer.lock',
})

SOURCE_EXTENSIONS = re.compile(
    r'\.(ts|js|mjs|cjs|py|go|rs|java|kt|rb|php|c|cc|cpp|h|hpp|cs|swift|m|scala|sh|lua|dart)$'
)

# Ordered first-match-wins: (category, predicate over lower-cased path)
CATEGORY_RULES = [
    ('dependencies', lambda p: p.rsplit('/', 1)[-1] in MANIFEST_FILES),
    ('styles', lambda p: re.search(r'\.(css|scss|sass|less|styl)$', p)),
    ('engine', lambda p: re.search(r'(^|/)engines?/', p)),
    ('tests', lambda p: re.search(r'(^|/)(tests?|__tests__|specs?)/|\.(test|spec)\.|_test\.|(^|/)test_[^/]*$', p)),
    ('docs', lambda p: re.search(r'\.(md|mdx|markdown|txt|rst|adoc)$|(^|/)docs?/', p)),
    ('ci', lambda p: re.search(r'(^|/)\.github/|\.gitlab-ci|(^|/)\.circleci/|jenkinsfile', p)),
    ('config', lambda p: re.search(r'\.(json|ya?ml|toml|ini|cfg|env)$|(^|/)\.[^/]*rc$|config', p)),
    ('cli', lambda p: re.search(r'(^|/)(cli|bin|commands?)(/|\.)', p)),
    ('api', lambda p: re.search(r'(^|/)(api|routes?|endpoints?|handlers?)(/|\.)', p)),
    ('ui', lambda p: re.search(r'\.(tsx|jsx|vue|svelte)$|(^|/)(components|ui|views|pages)/', p)),
    ('code', lambda p: SOURCE_EXTENSIONS.search(p)),
]

FALLBACK_CATEGORY = 'files'

# Tie-break order when two categories carry equal weight
CATEGORY_PRIORITY = (
    'engine', 'cli', 'api', 'ui', 'code', 'tests', 'styles',
    'config', 'ci', 'dependencies', 'docs', 'files',
)

NEW_FILE_MULTIPLIER = 2


def categorize_file(file: FileChange) -> str:
    path = file.path.lower()
    for category, matches in CATEGORY_RULES:
        if matches(path):
            return category
    return FALLBACK_CATEGORY


def file_weight(file: FileChange) -> int:
    """Churn weight; new files count double as architectural additions."""
    weight = file.weight
    return weight * NEW_FILE_MULTIPLIER if file.is_new else weight


def categorize_files(files: list[FileChange]) -> dict[str, int]:
    weights: dict[str, int] = {}
    for file in files:
        category = categorize_file(file)
        weights[category] = weights.get(category, 0) + file_weight(file)
    return weights


def _priority(category: str) -> int:
    try:
        return CATEGORY_PRIORITY.index(category)
    except ValueError:
        return len(CATEGORY_PRIORITY)


def rank_categories(weights: dict[str, int]) -> list[str]:
    """Categories by descending weight; ties resolved by CATEGORY_PRIORITY."""
    return sorted(weights, key=lambda c: (-weights[c], _priority(c)))


def is_lockfile(file: FileChange) -> bool:
    return file.name.lower() in LOCKFILES


CATEGORY_NOUNS = MappingProxyType({
    'engine': 'engines',
    'cli': 'CLI',
    'api': 'API',
    'ui': 'UI components',
    'code': 'core logic',
    'tests': 'tests',
    'styles': 'styles',
    'config': 'configuration',
    'ci': 'CI workflows',
    'dependencies': 'dependencies',
    'docs': 'documentation',
    'files': 'files',
})


def pretty_category(category: str, engine_phrase: str = '') -> str:
    """Readable noun for a category; engines use a detected name phrase when given."""
    if category == 'engine' and engine_phrase:
        return engine_phrase
    return CATEGORY_NOUNS.get(category, category)
