"""
Kanban board: column grouping, drag gating and optimistic status transitions.
"""

from .columns import (
    KANBAN_COLUMNS,
    GroupingAnomaly,
    GroupingResult,
    KanbanColumn,
    column_title,
    group,
    group_with_anomalies,
)
from .drag import NO_DRAG_MARKER, DragGate, should_handle
from .engine import DropOutcome, KanbanBoardEngine, Transition, TransitionState

__all__ = [
    # Columns
    "KANBAN_COLUMNS",
    "KanbanColumn",
    "GroupingAnomaly",
    "GroupingResult",
    "group",
    "group_with_anomalies",
    "column_title",
    # Drag gate
    "NO_DRAG_MARKER",
    "DragGate",
    "should_handle",
    # Engine
    "KanbanBoardEngine",
    "Transition",
    "TransitionState",
    "DropOutcome",
]
