"""Tests for the sibling-group reorder computation."""

import pytest

from promptadmin.services.reorder import changed_orders, renumber, reorder
from promptadmin.services.tree_assembler import build_tree


@pytest.fixture
def abc(make_category):
    return build_tree([make_category("A", 1), make_category("B", 2), make_category("C", 3)], [])


def names_in_order(siblings, assignments):
    by_id = {node.id: node.name for node in siblings}
    return [by_id[node_id] for node_id, _ in sorted(assignments, key=lambda item: item[1])]


class TestReorder:
    def test_move_last_to_front(self, abc):
        result = reorder(abc, abc[2].id, 0)

        assert names_in_order(abc, result) == ["C", "A", "B"]
        assert [order for _, order in result] == [1, 2, 3]

    def test_move_first_to_end(self, abc):
        result = reorder(abc, abc[0].id, 2)

        assert names_in_order(abc, result) == ["B", "C", "A"]

    def test_target_index_is_clamped(self, abc):
        assert names_in_order(abc, reorder(abc, abc[1].id, 99)) == ["A", "C", "B"]
        assert names_in_order(abc, reorder(abc, abc[1].id, -5)) == ["B", "A", "C"]

    def test_unknown_id_rejected(self, abc, make_category):
        with pytest.raises(ValueError):
            reorder(abc, make_category("X", 1).id, 0)

    def test_result_is_contiguous_and_keeps_ids(self, make_category):
        # gapped and duplicated input
        siblings = build_tree(
            [make_category(name, order) for name, order in [("A", 3), ("B", 3), ("C", 10), ("D", 40)]],
            []
        )

        for moved in siblings:
            for target in range(len(siblings)):
                result = reorder(siblings, moved.id, target)
                assert len(result) == len(siblings)
                assert {node_id for node_id, _ in result} == {node.id for node in siblings}
                assert sorted(order for _, order in result) == [1, 2, 3, 4]

    def test_single_node(self, make_category):
        only = build_tree([make_category("Only", 7)], [])

        assert reorder(only, only[0].id, 3) == [(only[0].id, 1)]


class TestRenumber:
    def test_positions_become_sort_orders(self):
        assert renumber(["x", "y", "z"]) == [("x", 1), ("y", 2), ("z", 3)]

    def test_changed_orders_skips_unchanged(self, abc):
        result = reorder(abc, abc[2].id, 1)

        changes = changed_orders(abc, result)

        assert changes == [(abc[2].id, 2), (abc[1].id, 3)]
