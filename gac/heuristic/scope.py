"""Scope Detector - pick one short scope token for a change set."""

import re
from pathlib import PurePosixPath

from gac.git.analyzer import FileChange

_SEP = r'[/_.\-]'


def _words(*words: str) -> str:
    """Match any of the words as a whole path segment or name part."""
    return rf'(?:^|{_SEP})(?:{"|".join(words)})(?:{_SEP}|$)'


# Ordered: on equal weight the earlier domain wins
DOMAIN_PATTERNS = {
    'engine': re.compile(_words('engines?')),
    'cli': re.compile(_words('cli', 'commands?', 'bin')),
    'api': re.compile(_words('api', 'routes?', 'endpoints?', 'handlers?')),
    'auth': re.compile(_words(r'auth\w*', 'login', 'logout', 'session', 'oauth', 'jwt', 'permissions?')),
    'db': re.compile(_words('db', 'database', 'migrations?', 'models?', 'schema', 'sql', 'repositor(?:y|ies)')),
    'config': re.compile(_words(r'config\w*', 'settings', 'env') + r'|(?:^|/)\.[^/]*rc$'),
    'build': re.compile(_words('webpack', 'vite', 'rollup', 'tsconfig', 'makefile', 'dockerfile', 'build', 'esbuild')),
    'test': re.compile(_words('tests?', 'specs?', '__tests__') + r'|(?:^|/)test_'),
    'ui': re.compile(_words('components?', 'ui', 'views?', 'pages?', 'widgets?') + r'|\.(?:tsx|jsx|vue|svelte)$'),
    'docs': re.compile(_words('docs?', 'readme', 'changelog', 'guides?') + r'|\.(?:md|mdx|rst|adoc)$'),
    'styles': re.compile(_words('styles?', 'css') + r'|\.(?:css|scss|sass|less|styl)$'),
    'theme': re.compile(_words('themes?', 'colors?', 'palette')),
    'ci': re.compile(r'(?:^|/)\.github/|' + _words('workflows?', 'circleci') + r'|\.gitlab-ci'),
}

GENERIC_SEGMENTS = frozenset({
    'src', 'lib', 'libs', 'dist', 'build', 'app', 'apps', 'pkg', 'packages',
    'internal', 'source', 'sources', 'main', 'java', 'python', '.',
})

MIN_SCOPE_WEIGHT = 10
CODE_SHARE = 0.5
MAX_SCOPE_LENGTH = 15


def normalize_path(path: str) -> str:
    return path.replace('\\', '/').lower()


def domain_weights(files: list[FileChange]) -> dict[str, int]:
    """Accumulated churn per domain; docs count only when every file is a doc."""
    weights = {domain: 0 for domain in DOMAIN_PATTERNS}
    for file in files:
        path = normalize_path(file.path)
        for domain, pattern in DOMAIN_PATTERNS.items():
            if pattern.search(path):
                weights[domain] += file.weight
    if any(not f.is_doc for f in files):
        weights['docs'] = 0
    return weights


def _meaningful(parts) -> list[str]:
    return [p for p in parts if p.lower() not in GENERIC_SEGMENTS]


def _path_scope(files: list[FileChange]) -> str:
    dirs = [PurePosixPath(f.path).parts[:-1] for f in files]
    if len(files) == 1:
        meaningful = _meaningful(dirs[0])
        return meaningful[-1] if meaningful else ''

    common = []
    for segments in zip(*dirs):
        if all(s == segments[0] for s in segments):
            common.append(segments[0])
        else:
            break
    meaningful = _meaningful(common)
    return meaningful[-1] if meaningful else ''


def detect_scope(
    files: list[FileChange],
    min_weight: int = MIN_SCOPE_WEIGHT,
    max_length: int = MAX_SCOPE_LENGTH,
) -> str:
    """Return a single lexical scope token, or '' when nothing fits."""
    if not files:
        return ''

    weights = domain_weights(files)
    best_domain, best_weight = '', 0
    for domain, weight in weights.items():
        if weight > best_weight:
            best_domain, best_weight = domain, weight

    code_churn = sum(f.weight for f in files if not f.is_doc)
    if best_weight > 0 and (best_weight >= min_weight or best_weight >= code_churn * CODE_SHARE):
        scope = best_domain
    else:
        scope = _path_scope(files)

    return scope if len(scope) <= max_length else ''
