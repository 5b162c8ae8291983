"""
Keyboard-style navigation over a PlanTree.

Selection and scroll position live in an explicit NavigationState so several
sessions can browse their own trees independently.
"""

from dataclasses import dataclass
from typing import List, Optional

from .plan_tree import PlanNodeUI, PlanTree


@dataclass
class NavigationState:
    selected: Optional[int] = None
    scroll_offset: int = 0


@dataclass
class VisibleNode:
    """A row of the flattened, currently visible tree."""
    index: int
    level: int
    expanded: bool
    has_children: bool
    is_selected: bool = False


def visible_nodes(tree: PlanTree, selected: Optional[int] = None) -> List[VisibleNode]:
    """Pre-order flatten of the roots, descending only into expanded nodes."""
    rows: List[VisibleNode] = []

    def visit(indices: List[int], level: int):
        for index in indices:
            if index >= len(tree.nodes):
                continue
            entry = tree.nodes[index]
            rows.append(VisibleNode(
                index=index,
                level=level,
                expanded=entry.expanded,
                has_children=entry.has_children,
                is_selected=index == selected,
            ))
            if entry.expanded and entry.children:
                visit(entry.children, level + 1)

    visit(tree.root_indices, 0)
    return rows


def move_selection(tree: PlanTree, state: NavigationState, delta: int):
    """Move the selection `delta` rows, clamping at either end."""
    rows = visible_nodes(tree)
    if not rows:
        state.selected = None
        return

    positions = [row.index for row in rows]
    if state.selected is None or state.selected not in positions:
        state.selected = positions[0]
        return

    current = positions.index(state.selected)
    new_pos = min(max(current + delta, 0), len(positions) - 1)
    state.selected = positions[new_pos]


def _selected_entry(tree: PlanTree, state: NavigationState) -> Optional[PlanNodeUI]:
    """Entry under the selection; a selection left over from a larger tree is reset."""
    if state.selected is None:
        return None
    if not 0 <= state.selected < len(tree.nodes):
        state.selected = tree.root_indices[0] if tree.root_indices else None
        return None
    return tree.nodes[state.selected]


def expand_selected(tree: PlanTree, state: NavigationState):
    """Open the selected node and step into its first child."""
    if state.selected is None:
        if tree.root_indices:
            state.selected = tree.root_indices[0]
        return

    entry = _selected_entry(tree, state)
    if entry is None or not entry.children:
        return
    entry.expanded = True
    state.selected = entry.children[0]


def collapse_selected(tree: PlanTree, state: NavigationState):
    """Close the selected node, or step out to its parent if already closed."""
    entry = _selected_entry(tree, state)
    if entry is None:
        return

    if entry.expanded and entry.children:
        entry.expanded = False
        return

    parent = tree.find_parent(state.selected)
    if parent is not None:
        state.selected = parent


def toggle_selected(tree: PlanTree, state: NavigationState):
    entry = _selected_entry(tree, state)
    if entry is None:
        return

    entry.expanded = not entry.expanded
    if entry.expanded and entry.children:
        state.selected = entry.children[0]


def scroll_to_selection(tree: PlanTree, state: NavigationState, viewport_height: int):
    """Adjust `state.scroll_offset` so the selected row is inside the viewport."""
    if viewport_height <= 0 or state.selected is None:
        return

    positions = [row.index for row in visible_nodes(tree)]
    if state.selected not in positions:
        return

    row = positions.index(state.selected)
    if row < state.scroll_offset:
        state.scroll_offset = row
    elif row >= state.scroll_offset + viewport_height:
        state.scroll_offset = row - viewport_height + 1

    max_offset = max(0, len(positions) - viewport_height)
    state.scroll_offset = min(state.scroll_offset, max_offset)
