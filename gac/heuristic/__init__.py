"""Deterministic offline commit message engine"""

from gac.heuristic.engine import Analysis, HeuristicSettings, analyze, generate_heuristic
from gac.heuristic.models import Description, ExtractedEntities, FocusKind, PrimaryFocus
from gac.heuristic.renderer import sanitize_candidate
from gac.heuristic.seeded import seeded_choice

__all__ = [
    "Analysis",
    "HeuristicSettings",
    "analyze",
    "generate_heuristic",
    "Description",
    "ExtractedEntities",
    "FocusKind",
    "PrimaryFocus",
    "sanitize_candidate",
    "seeded_choice",
]
