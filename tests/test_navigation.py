"""Tests for keyboard-style navigation over a plan tree."""

import pytest

from sqltrace.ui.navigation import (
    NavigationState,
    collapse_selected,
    expand_selected,
    move_selection,
    scroll_to_selection,
    toggle_selected,
    visible_nodes,
)
from sqltrace.ui.plan_tree import PlanTree, build_plan_tree


@pytest.fixture
def tree(join_plan) -> PlanTree:
    # 0 Hash Join -> [1 Seq Scan, 2 Hash -> [3 Seq Scan]]
    return build_plan_tree(join_plan)


class TestVisibleNodes:

    def test_all_rows_visible_by_default(self, tree):
        assert [row.index for row in visible_nodes(tree)] == [0, 1, 2, 3]
        assert [row.level for row in visible_nodes(tree)] == [0, 1, 1, 2]

    def test_collapsed_subtree_hidden(self, tree):
        tree.nodes[2].expanded = False
        assert [row.index for row in visible_nodes(tree)] == [0, 1, 2]

    def test_marks_selected_row(self, tree):
        rows = visible_nodes(tree, selected=2)
        assert [row.is_selected for row in rows] == [False, False, True, False]


class TestMoveSelection:

    def test_first_move_selects_first_row(self, tree):
        state = NavigationState()
        move_selection(tree, state, 1)
        assert state.selected == 0

    def test_moves_and_clamps(self, tree):
        state = NavigationState(selected=0)
        move_selection(tree, state, 1)
        assert state.selected == 1
        move_selection(tree, state, 10)
        assert state.selected == 3
        move_selection(tree, state, -10)
        assert state.selected == 0

    def test_skips_hidden_rows(self, tree):
        tree.nodes[2].expanded = False
        state = NavigationState(selected=1)
        move_selection(tree, state, 5)
        assert state.selected == 2

    def test_hidden_selection_resets_to_first_row(self, tree):
        state = NavigationState(selected=3)
        tree.nodes[2].expanded = False
        move_selection(tree, state, 1)
        assert state.selected == 0

    def test_empty_tree_clears_selection(self):
        state = NavigationState(selected=4)
        move_selection(PlanTree(), state, 1)
        assert state.selected is None


class TestExpandCollapse:

    def test_collapse_then_step_to_parent(self, tree):
        state = NavigationState(selected=0)
        collapse_selected(tree, state)
        assert tree.nodes[0].expanded is False
        assert state.selected == 0

        # collapsed root has no parent to move to
        collapse_selected(tree, state)
        assert state.selected == 0

    def test_collapse_on_leaf_moves_to_parent(self, tree):
        state = NavigationState(selected=3)
        collapse_selected(tree, state)
        assert state.selected == 2
        assert tree.nodes[2].expanded is True

    def test_expand_opens_and_moves_to_first_child(self, tree):
        tree.nodes[0].expanded = False
        state = NavigationState(selected=0)
        expand_selected(tree, state)
        assert tree.nodes[0].expanded is True
        assert state.selected == 1

    def test_expand_on_leaf_is_noop(self, tree):
        state = NavigationState(selected=1)
        expand_selected(tree, state)
        assert state.selected == 1

    def test_expand_without_selection_selects_root(self, tree):
        state = NavigationState()
        expand_selected(tree, state)
        assert state.selected == 0

    def test_toggle(self, tree):
        state = NavigationState(selected=2)
        toggle_selected(tree, state)
        assert tree.nodes[2].expanded is False
        assert state.selected == 2

        toggle_selected(tree, state)
        assert tree.nodes[2].expanded is True
        assert state.selected == 3


class TestScroll:

    def test_scrolls_down_to_selection(self, tree):
        state = NavigationState(selected=3)
        scroll_to_selection(tree, state, viewport_height=2)
        assert state.scroll_offset == 2

    def test_scrolls_up_to_selection(self, tree):
        state = NavigationState(selected=0, scroll_offset=2)
        scroll_to_selection(tree, state, viewport_height=2)
        assert state.scroll_offset == 0

    def test_offset_clamped_when_tree_shrinks(self, tree):
        state = NavigationState(selected=0, scroll_offset=3)
        tree.collapse_all()
        scroll_to_selection(tree, state, viewport_height=2)
        assert state.scroll_offset == 0


class TestSelectionAfterRebuild:
    """A captured plan replaces the tree while a selection is still held."""

    @pytest.mark.parametrize("action", [collapse_selected, expand_selected, toggle_selected])
    def test_stale_selection_resets_to_root(self, tree, simple_scan_plan, action):
        state = NavigationState(selected=3)
        assert tree.update(simple_scan_plan)
        assert len(tree.nodes) == 1

        action(tree, state)

        assert state.selected == 0
        assert tree.nodes[0].expanded is True

    def test_negative_selection_resets(self, tree):
        state = NavigationState(selected=-1)
        collapse_selected(tree, state)
        assert state.selected == 0
        assert tree.nodes[0].expanded is True
