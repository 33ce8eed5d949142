"""Trade lifecycle and settlement engine: pure derivations and transitions."""

from pachinavi.engine.diff import DiffNotes, NegotiatedTerms, build_diff_notes, diff_trade
from pachinavi.engine.status import (
    TRANSITIONS,
    Transition,
    TransitionRule,
    allowed_transitions,
    apply_transition,
    can_transition,
    find_transition,
)
from pachinavi.engine.todo import (
    Presentation,
    PrimaryAction,
    Section,
    TodoKind,
    derive_presentation,
    group_by_section,
)
from pachinavi.engine.totals import Totals, compute_totals, format_yen

__all__ = [
    "DiffNotes",
    "NegotiatedTerms",
    "Presentation",
    "PrimaryAction",
    "Section",
    "TRANSITIONS",
    "TodoKind",
    "Totals",
    "Transition",
    "TransitionRule",
    "allowed_transitions",
    "apply_transition",
    "build_diff_notes",
    "can_transition",
    "compute_totals",
    "derive_presentation",
    "diff_trade",
    "find_transition",
    "format_yen",
    "group_by_section",
]
