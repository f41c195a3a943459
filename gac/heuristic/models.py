"""Value types produced by the heuristic engine."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


@dataclass
class ExtractedEntities:
    """Declarations and dependency changes found in a diff.

    Lists behave as ordered sets: first-seen order, no duplicates.
    """
    functions: list[str] = field(default_factory=list)
    classes: list[str] = field(default_factory=list)
    components: list[str] = field(default_factory=list)
    variables: list[str] = field(default_factory=list)
    dependencies_added: list[str] = field(default_factory=list)
    dependencies_removed: list[str] = field(default_factory=list)
    has_error_handling: bool = False

    @property
    def dependencies(self) -> list[str]:
        return list(dict.fromkeys(self.dependencies_added + self.dependencies_removed))

    @property
    def has_dependency_changes(self) -> bool:
        return bool(self.dependencies_added or self.dependencies_removed)

    @property
    def has_new_declarations(self) -> bool:
        return bool(self.functions or self.classes or self.components)


class FocusKind(Enum):
    ENGINE_REFACTOR = "engine-refactor"
    CORE_REFACTOR = "core-refactor"
    NEW_ENGINE = "new-engine"
    MULTI_ENGINE = "multi-engine"
    DEPS = "deps"
    SINGLE_FILE = "single-file"
    SCOPE_SPECIFIC = "scope-specific"
    MULTI_CATEGORY = "multi-category"
    GENERIC = "generic"


FOCUS_WEIGHTS = MappingProxyType({
    FocusKind.ENGINE_REFACTOR: 100,
    FocusKind.CORE_REFACTOR: 90,
    FocusKind.NEW_ENGINE: 80,
    FocusKind.MULTI_ENGINE: 70,
    FocusKind.DEPS: 60,
    FocusKind.SINGLE_FILE: 50,
    FocusKind.SCOPE_SPECIFIC: 40,
    FocusKind.MULTI_CATEGORY: 30,
    FocusKind.GENERIC: 10,
})

ARCHITECTURAL_FOCI = frozenset({FocusKind.ENGINE_REFACTOR, FocusKind.CORE_REFACTOR})


@dataclass(frozen=True)
class PrimaryFocus:
    """Best guess at the architectural shape of a change set."""
    kind: FocusKind
    detail: str
    weight: int

    @classmethod
    def of(cls, kind: FocusKind, detail: str) -> 'PrimaryFocus':
        return cls(kind=kind, detail=detail, weight=FOCUS_WEIGHTS[kind])

    @property
    def is_architectural(self) -> bool:
        return self.kind in ARCHITECTURAL_FOCI


@dataclass(frozen=True)
class Description:
    verb: str
    noun: str

    @property
    def text(self) -> str:
        return f"{self.verb} {self.noun}"
