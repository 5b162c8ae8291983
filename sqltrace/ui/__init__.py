"""Plan tree projection and navigation for interactive display."""

from .plan_tree import ExpansionPolicy, PlanNodeUI, PlanTree, build_plan_tree, build_tree, plan_hash
from .navigation import (
    NavigationState,
    VisibleNode,
    collapse_selected,
    expand_selected,
    move_selection,
    scroll_to_selection,
    toggle_selected,
    visible_nodes,
)

__all__ = [
    'ExpansionPolicy',
    'PlanNodeUI',
    'PlanTree',
    'build_plan_tree',
    'build_tree',
    'plan_hash',
    'NavigationState',
    'VisibleNode',
    'collapse_selected',
    'expand_selected',
    'move_selection',
    'scroll_to_selection',
    'toggle_selected',
    'visible_nodes',
]
