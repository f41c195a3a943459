"""Heuristic Engine - deterministic, offline commit subject generation.

Pipeline: entities -> categories -> scope -> focus -> type -> descriptions
-> docs significance -> rendered candidates. Every stage is a pure
function of the ChangeSet, so the same input and variant always yield the
same candidates.
"""

from dataclasses import dataclass, field

from gac import STYLES
from gac.git.analyzer import ChangeSet, FileChange, InvalidInputError
from gac.git.patch import diff_slice
from gac.heuristic.categorizer import categorize_files
from gac.heuristic.classifier import classify_change
from gac.heuristic.descriptions import build_descriptions
from gac.heuristic.docs import (
    ARCHITECTURAL_DOCS_THRESHOLD, DOCS_THRESHOLD, detect_docs_topic, is_docs_significant,
)
from gac.heuristic.entities import extract_entities
from gac.heuristic.focus import SCOPE_DOMINANCE, detect_primary_focus
from gac.heuristic.models import Description, ExtractedEntities, PrimaryFocus
from gac.heuristic.renderer import FALLBACK_CANDIDATE, MAX_CANDIDATES, RenderContext, render_candidates
from gac.heuristic.scope import MAX_SCOPE_LENGTH, MIN_SCOPE_WEIGHT, detect_scope
from gac.logging import get_logger

logger = get_logger("heuristic")


@dataclass(frozen=True)
class HeuristicSettings:
    """Tunable thresholds; the defaults are the engine's reference behavior."""
    docs_threshold: float = DOCS_THRESHOLD
    architectural_docs_threshold: float = ARCHITECTURAL_DOCS_THRESHOLD
    scope_dominance: float = SCOPE_DOMINANCE
    min_scope_weight: int = MIN_SCOPE_WEIGHT
    max_scope_length: int = MAX_SCOPE_LENGTH
    max_candidates: int = MAX_CANDIDATES


DEFAULT_SETTINGS = HeuristicSettings()


@dataclass
class Analysis:
    """Intermediate results of one engine run, kept for rendering and debugging."""
    files: list[FileChange]
    code_files: list[FileChange]
    doc_files: list[FileChange]
    entities: ExtractedEntities
    categories: dict[str, int]
    scope: str
    focus: PrimaryFocus
    change_type: str
    descriptions: list[Description] = field(default_factory=list)
    docs_significant: bool = False
    docs_topic: str = 'documentation'

    @property
    def has_code(self) -> bool:
        return bool(self.code_files)


def _check_variant(variant) -> int:
    if isinstance(variant, bool) or not isinstance(variant, int) or variant < 0:
        raise InvalidInputError(f"variant must be a non-negative integer, got {variant!r}")
    return variant


def analyze(changes: ChangeSet, variant: int = 0, settings: HeuristicSettings = DEFAULT_SETTINGS) -> Analysis:
    """Classify a change set without rendering it."""
    variant = _check_variant(variant)
    files = changes.active_files
    code_files = [f for f in files if not f.is_doc]
    doc_files = [f for f in files if f.is_doc]

    # Ignored files contribute neither records nor diff sections
    active_diff = diff_slice(changes.diff, [f.path for f in files])

    # Code drives classification; docs alone only when there is no code
    working = code_files or files
    working_diff = diff_slice(active_diff, [f.path for f in working]) if code_files else active_diff

    entities = extract_entities(active_diff, files)
    categories = categorize_files(working)
    scope = detect_scope(files, min_weight=settings.min_scope_weight, max_length=settings.max_scope_length)
    focus = detect_primary_focus(working, categories, scope_dominance=settings.scope_dominance)
    change_type = classify_change(working, working_diff, entities, focus)

    logger.debug("categories=%s scope=%r focus=%s(%s) type=%s",
                 categories, scope, focus.kind.value, focus.detail, change_type)

    analysis = Analysis(
        files=files,
        code_files=code_files,
        doc_files=doc_files,
        entities=entities,
        categories=categories,
        scope=scope,
        focus=focus,
        change_type=change_type,
    )
    analysis.descriptions = build_descriptions(working, change_type, scope, focus, entities, categories, variant)
    analysis.docs_significant = is_docs_significant(
        doc_files, code_files, focus,
        threshold=settings.docs_threshold,
        architectural_threshold=settings.architectural_docs_threshold,
    )
    if analysis.docs_significant:
        analysis.docs_topic = detect_docs_topic(active_diff, doc_files)

    logger.debug("descriptions=%s docs_significant=%s topic=%r",
                 [d.text for d in analysis.descriptions], analysis.docs_significant, analysis.docs_topic)
    return analysis


def generate_heuristic(
    changes: ChangeSet,
    style: str = 'mix',
    variant: int = 0,
    settings: HeuristicSettings = DEFAULT_SETTINGS,
) -> list[str]:
    """Return 1-3 distinct commit subjects for the staged changes."""
    if style not in STYLES:
        raise InvalidInputError(f"Unknown style {style!r}; expected one of {', '.join(STYLES)}")

    analysis = analyze(changes, variant, settings)
    if not analysis.files:
        return [FALLBACK_CANDIDATE]

    context = RenderContext(
        change_type=analysis.change_type,
        scope=analysis.scope,
        descriptions=tuple(analysis.descriptions),
        docs_significant=analysis.docs_significant,
        has_code=analysis.has_code,
        docs_topic=analysis.docs_topic,
        variant=variant,
    )
    candidates = render_candidates(context, style, limit=settings.max_candidates)
    logger.debug("heuristic candidates: %s", candidates)
    return candidates
