"""Candidate Renderer - turn descriptions into 1-3 styled commit subjects.

All verb, emoji and alternative-phrase choices go through ``seeded_choice``,
so a given (type, variant) always renders the same way and bumping the
variant walks each pool in a fixed order.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType

from gac import COMMIT_TYPE_NAMES
from gac.heuristic.models import Description
from gac.heuristic.seeded import salt_for, seeded_choice, seeded_index

VERB_POOLS = MappingProxyType({
    'feat': ('add', 'introduce', 'implement'),
    'fix': ('fix', 'resolve', 'correct'),
    'refactor': ('refactor', 'restructure', 'simplify'),
    'docs': ('update', 'clarify', 'improve', 'expand'),
    'test': ('update', 'extend', 'improve'),
    'style': ('format', 'tidy', 'polish'),
    'chore': ('update', 'maintain', 'refresh'),
})

EMOJI_POOLS = MappingProxyType({
    'feat': ('✨', '🚀', '🎉'),
    'fix': ('🐛', '🩹', '🚑'),
    'refactor': ('♻️', '🏗️', '🔨'),
    'docs': ('📝', '📚'),
    'test': ('✅', '🧪'),
    'style': ('💄', '🎨'),
    'chore': ('🔧', '🔨', '📦'),
})

DOCS_EMOJI = '📝'

ALT_PHRASES = MappingProxyType({
    'feat': ('add new functionality to {target}', 'extend {target} capabilities', 'introduce {target} improvements'),
    'fix': ('fix issues in {target}', 'resolve problems in {target}', 'correct {target} behavior'),
    'refactor': ('restructure {target}', 'simplify {target} internals', 'clean up {target}'),
    'docs': ('update {target} documentation', 'improve {target} docs', 'clarify {target} documentation'),
    'test': ('update {target} tests', 'extend test coverage for {target}', 'improve {target} tests'),
    'style': ('format {target}', 'tidy {target} code style', 'polish {target} formatting'),
    'chore': ('update {target}', 'maintain {target}', 'refresh {target} setup'),
})

SINGLE_STYLES = ('conv', 'plain', 'gitmoji')
MAX_CANDIDATES = 3
FALLBACK_CANDIDATE = 'Update files'

CONVENTIONAL_PREFIX = re.compile(rf"^({'|'.join(COMMIT_TYPE_NAMES)})(\([^)]*\))?!?: ")
# Emoji and optional "scope: " ahead of the gitmoji subject text
GITMOJI_PREFIX = re.compile(r'^[^\w\s]+\s+(?:[\w./-]+:\s+)?')


@dataclass(frozen=True)
class RenderContext:
    """Everything the renderer needs from the analysis stage."""
    change_type: str
    scope: str
    descriptions: tuple[Description, ...]
    docs_significant: bool = False
    has_code: bool = True
    docs_topic: str = 'documentation'
    variant: int = 0


def expand_style(style: str) -> tuple[str, ...]:
    return SINGLE_STYLES if style == 'mix' else (style,)


def sanitize_candidate(candidate: str) -> str:
    """Trim, drop trailing periods and capitalize unless it is a conventional subject.

    Gitmoji subjects capitalize the first letter after the emoji and scope.
    """
    text = candidate.strip().rstrip('.').rstrip()
    if not text or CONVENTIONAL_PREFIX.match(text):
        return text
    match = GITMOJI_PREFIX.match(text)
    start = match.end() if match else 0
    return text[:start] + text[start:start + 1].upper() + text[start + 1:]


def choose_verb(change_type: str, description: Description, variant: int) -> str:
    """Swap a stock type verb for its seeded pool entry; keep specific verbs like 'replace'."""
    pool = VERB_POOLS.get(change_type, ())
    if description.verb in pool:
        return seeded_choice(pool, variant, salt_for('verb', change_type, description.noun))
    return description.verb


def choose_emoji(change_type: str, scope: str, variant: int) -> str:
    pool = EMOJI_POOLS.get(change_type, EMOJI_POOLS['chore'])
    return seeded_choice(pool, variant, salt_for('emoji', change_type, scope))


def phrase(change_type: str, description: Description, variant: int) -> str:
    return f"{choose_verb(change_type, description, variant)} {description.noun}"


def render_single(style: str, change_type: str, scope: str, text: str, variant: int) -> str:
    if style == 'conv':
        return f"{change_type}({scope}): {text}" if scope else f"{change_type}: {text}"
    if style == 'gitmoji':
        emoji = choose_emoji(change_type, scope, variant)
        return f"{emoji} {scope}: {text}" if scope else f"{emoji} {text}"
    return text[:1].upper() + text[1:]


def render_compound(style: str, change_type: str, scope: str, code_text: str, docs_text: str, variant: int) -> str:
    if style == 'conv':
        head = f"{change_type}({scope})" if scope else change_type
        return f"{head}: {code_text}; {docs_text}"
    if style == 'gitmoji':
        emoji = choose_emoji(change_type, scope, variant)
        head = f"{emoji} {scope}:" if scope else emoji
        return f"{head} {code_text}; {DOCS_EMOJI} {docs_text}"
    return f"{code_text[:1].upper() + code_text[1:]} and {docs_text}"


def docs_phrase(topic: str, variant: int) -> str:
    verb = seeded_choice(VERB_POOLS['docs'], variant, salt_for('docs', topic))
    return f"{verb} {topic}"


def render_style(context: RenderContext, style: str) -> str:
    variant = context.variant
    if context.docs_significant and not context.has_code:
        return render_single(style, 'docs', '', docs_phrase(context.docs_topic, variant), variant)

    primary = context.descriptions[0]
    code_text = phrase(context.change_type, primary, variant)
    if context.docs_significant:
        return render_compound(style, context.change_type, context.scope, code_text,
                               docs_phrase(context.docs_topic, variant), variant)
    return render_single(style, context.change_type, context.scope, code_text, variant)


class CandidateList:
    """Ordered, duplicate-free, capped list of sanitized subjects."""

    def __init__(self, limit: int = MAX_CANDIDATES):
        self.limit = limit
        self.items: list[str] = []

    @property
    def full(self) -> bool:
        return len(self.items) >= self.limit

    def add(self, candidate: str) -> None:
        candidate = sanitize_candidate(candidate)
        if candidate and candidate not in self.items and not self.full:
            self.items.append(candidate)


def alternative_phrases(change_type: str, scope: str, variant: int) -> list[str]:
    """The type's alternative phrases, starting at the seeded entry and wrapping around."""
    pool = ALT_PHRASES.get(change_type, ALT_PHRASES['chore'])
    target = scope or 'codebase'
    start = seeded_index(len(pool), variant, salt_for('alt', change_type, target))
    return [pool[(start + offset) % len(pool)].format(target=target) for offset in range(len(pool))]


def render_candidates(context: RenderContext, style: str, limit: int = MAX_CANDIDATES) -> list[str]:
    """Render every requested style, then top up from other descriptions and alternative phrases."""
    styles = expand_style(style)
    candidates = CandidateList(limit)

    if context.descriptions or (context.docs_significant and not context.has_code):
        for each in styles:
            candidates.add(render_style(context, each))

    fill_style = styles[0]
    if context.docs_significant and not context.has_code:
        fill_type, fill_scope = 'docs', ''
    else:
        fill_type, fill_scope = context.change_type, context.scope

    for description in context.descriptions[1:]:
        if candidates.full:
            break
        text = phrase(fill_type, description, context.variant)
        candidates.add(render_single(fill_style, fill_type, fill_scope, text, context.variant))

    for text in alternative_phrases(fill_type, fill_scope, context.variant):
        if candidates.full:
            break
        candidates.add(render_single(fill_style, fill_type, fill_scope, text, context.variant))

    return candidates.items or [FALLBACK_CANDIDATE]
