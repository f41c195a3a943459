"""Description Builder - ranked (verb, noun) candidates from independent strategies.

Strategies, in order: entity-driven, focus-driven, category-driven and a
count fallback. A strong focus (new or restructured engines) moves the
focus strategy to the front. Nouns are deduplicated case-insensitively,
including near-duplicates where one noun contains the other.
"""

from types import MappingProxyType

from gac.git.analyzer import FileChange
from gac.heuristic.categorizer import rank_categories, pretty_category
from gac.heuristic.entities import find_replacements
from gac.heuristic.focus import engine_phrase, join_names
from gac.heuristic.models import Description, ExtractedEntities, FocusKind, PrimaryFocus, FOCUS_WEIGHTS

TYPE_VERBS = MappingProxyType({
    'feat': 'add',
    'fix': 'fix',
    'refactor': 'refactor',
    'docs': 'update',
    'test': 'update',
    'style': 'format',
    'chore': 'update',
})

FOCUS_VERBS = MappingProxyType({
    FocusKind.ENGINE_REFACTOR: 'refactor',
    FocusKind.CORE_REFACTOR: 'refactor',
    FocusKind.MULTI_ENGINE: 'update',
    FocusKind.DEPS: 'update',
})

# Foci at least this strong lead the description list
FOCUS_LEAD_WEIGHT = FOCUS_WEIGHTS[FocusKind.MULTI_ENGINE]

MAX_NAMED = 2
MAX_CATEGORIES = 3
GENERIC_CATEGORY_NOUNS = frozenset({'core logic', 'files'})
FALLBACK_DESCRIPTION = Description(verb='update', noun='files')


class DescriptionList:
    """Ordered descriptions that rejects nouns already covered by an earlier one."""

    def __init__(self):
        self.items: list[Description] = []

    def is_distinct(self, noun: str) -> bool:
        candidate = noun.lower()
        for item in self.items:
            existing = item.noun.lower()
            if candidate == existing or candidate in existing or existing in candidate:
                return False
        return True

    def add(self, verb: str, noun: str) -> bool:
        noun = noun.strip()
        if not noun or not self.is_distinct(noun):
            return False
        self.items.append(Description(verb=verb, noun=noun))
        return True

    def extend(self, descriptions: list[Description]) -> None:
        for description in descriptions:
            self.add(description.verb, description.noun)


def _dependency_noun(names: list[str]) -> str:
    if len(names) == 1:
        return f"{names[0]} dependency"
    if len(names) <= 3:
        return f"{join_names(names)} dependencies"
    return f"{len(names)} dependencies"


def dependency_descriptions(entities: ExtractedEntities) -> list[Description]:
    added, removed = entities.dependencies_added, entities.dependencies_removed
    if added and removed:
        return [Description('manage', _dependency_noun(entities.dependencies))]
    if added:
        # A single entry is usually an upgrade; several read as new packages
        verb = 'update' if len(added) == 1 else 'add'
        return [Description(verb, _dependency_noun(added))]
    if removed:
        return [Description('remove', _dependency_noun(removed))]
    return []


def _declaration_noun(entities: ExtractedEntities) -> str:
    for names, singular, plural in (
        (entities.components, 'component', 'components'),
        (entities.classes, 'class', 'classes'),
        (entities.functions, 'function', 'functions'),
    ):
        if names:
            shown = names[:MAX_NAMED]
            return f"{join_names(shown)} {singular if len(shown) == 1 else plural}"
    return ''


def declaration_descriptions(entities: ExtractedEntities, change_type: str) -> list[Description]:
    if change_type == 'fix':
        for names, kind in ((entities.functions, 'function'), (entities.classes, 'class'),
                            (entities.components, 'component')):
            if names:
                problem = 'error' if entities.has_error_handling else 'issue'
                return [Description('fix', f"{problem} in {names[0]} {kind}")]
        return []

    verb = {'feat': 'add', 'refactor': 'refactor'}.get(change_type)
    noun = _declaration_noun(entities)
    if verb and noun:
        return [Description(verb, noun)]
    return []


def entity_descriptions(files: list[FileChange], change_type: str, entities: ExtractedEntities) -> list[Description]:
    descriptions = dependency_descriptions(entities)
    for old, new in find_replacements(files)[:1]:
        descriptions.append(Description('replace', f"{old.stem} with {new.stem}"))
    descriptions.extend(declaration_descriptions(entities, change_type))
    return descriptions


def focus_description(focus: PrimaryFocus, change_type: str) -> list[Description]:
    if focus.kind is FocusKind.GENERIC or not focus.detail:
        return []
    if focus.kind is FocusKind.NEW_ENGINE:
        verb = 'add' if change_type == 'feat' else 'implement'
    else:
        verb = FOCUS_VERBS.get(focus.kind, TYPE_VERBS.get(change_type, 'update'))
    return [Description(verb, focus.detail)]


def category_description(
    files: list[FileChange],
    change_type: str,
    scope: str,
    categories: dict[str, int],
) -> list[Description]:
    top = rank_categories(categories)[:MAX_CATEGORIES]
    if not top:
        return []
    phrase = engine_phrase(files)
    nouns = list(dict.fromkeys(pretty_category(c, phrase) for c in top))
    if len(nouns) == 1 and nouns[0] in GENERIC_CATEGORY_NOUNS and scope:
        nouns = [f"{scope} module"]
    return [Description(TYPE_VERBS.get(change_type, 'update'), join_names(nouns))]


def count_description(files: list[FileChange]) -> list[Description]:
    if not files:
        return []
    count = len(files)
    return [Description('update', f"{count} file{'s' if count != 1 else ''}")]


def rotate(descriptions: list[Description], variant: int) -> list[Description]:
    """Make descriptions[variant mod n] primary, keeping the cyclic order after it."""
    if not descriptions:
        return descriptions
    start = variant % len(descriptions)
    return descriptions[start:] + descriptions[:start]


def build_descriptions(
    files: list[FileChange],
    change_type: str,
    scope: str,
    focus: PrimaryFocus,
    entities: ExtractedEntities,
    categories: dict[str, int],
    variant: int = 0,
) -> list[Description]:
    """Ordered, deduplicated descriptions; never empty."""
    result = DescriptionList()

    entity_based = entity_descriptions(files, change_type, entities)
    focus_based = focus_description(focus, change_type)

    if focus.weight >= FOCUS_LEAD_WEIGHT:
        result.extend(focus_based)
        result.extend(entity_based)
    else:
        result.extend(entity_based)
        result.extend(focus_based)

    result.extend(category_description(files, change_type, scope, categories))

    if not result.items:
        result.extend(count_description(files))
    if not result.items:
        result.items.append(FALLBACK_DESCRIPTION)

    return rotate(result.items, variant)
