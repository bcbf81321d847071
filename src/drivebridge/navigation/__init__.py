"""Navigation state and selection exports for drivebridge."""

from __future__ import annotations

from .selection import SelectionSet
from .state import BreadcrumbItem, NavigationState, NavigationStateMachine, Section

__all__ = [
    "Section",
    "BreadcrumbItem",
    "NavigationState",
    "NavigationStateMachine",
    "SelectionSet",
]
