"""
Drag gate: decides whether a pointer-down should start a card drag.

Cards contain interactive controls (menus, buttons, inputs). Any element in
the pointer target's ancestry marked with a ``data-no-dnd`` attribute opts
its subtree out of dragging. The walk follows the parent chain only, so it
is O(depth) and independent of any particular DOM implementation.
"""

import math
from collections.abc import Mapping
from typing import Any, Protocol

NO_DRAG_MARKER = "noDnd"


class DragElement(Protocol):
    """Minimal element shape: a parent link and a data-attribute mapping."""

    @property
    def parent(self) -> "DragElement | None": ...

    @property
    def dataset(self) -> Mapping[str, Any]: ...


def has_no_drag_marker(element: Any) -> bool:
    """Check a single element for a truthy no-drag marker."""
    dataset = getattr(element, "dataset", None)
    return bool(dataset and dataset.get(NO_DRAG_MARKER))


def should_handle(element: DragElement | None) -> bool:
    """
    Decide whether a pointer-down on ``element`` may start a drag.

    Args:
        element: Pointer-down target (None is treated as no target)

    Returns:
        False as soon as the element or an ancestor carries the no-drag
        marker, True when the walk reaches the root without finding one
    """
    seen: set[int] = set()
    current: Any = element
    while current is not None:
        # Malformed cyclic chains end the walk as if the root was reached
        if id(current) in seen:
            break
        seen.add(id(current))
        if has_no_drag_marker(current):
            return False
        current = getattr(current, "parent", None)
    return True


class DragGate:
    """
    Pointer sensor guard combining the marker walk with an activation distance.

    A drag starts only once the pointer has travelled ``activation_distance``
    pixels from the pointer-down position, and only when the pointer-down
    target is not inside a no-drag subtree.
    """

    def __init__(self, activation_distance: float = 3.0) -> None:
        if activation_distance < 0:
            raise ValueError(f"activation_distance must be >= 0, got {activation_distance}")
        self.activation_distance = activation_distance

    def should_handle(self, element: DragElement | None) -> bool:
        return should_handle(element)

    def should_start(self, element: DragElement | None, dx: float, dy: float) -> bool:
        """
        Decide whether a pointer move should begin a drag.

        Args:
            element: Original pointer-down target
            dx: Horizontal travel since pointer-down
            dy: Vertical travel since pointer-down
        """
        if math.hypot(dx, dy) < self.activation_distance:
            return False
        return should_handle(element)
