import logging
from unittest.mock import Mock

import pytest

from pageindex_sdk.observability import names
from pageindex_sdk.tree.indexer import (
    create_node_mapping,
    flatten_tree,
    node_map,
    page_range_map,
    parse_tree,
)
from pageindex_sdk.tree.models import PageRangeEntry, TreeNode


@pytest.fixture
def simple_tree() -> dict:
    return {
        "node_id": "r",
        "page_index": 1,
        "nodes": [
            {"node_id": "a", "page_index": 1},
            {"node_id": "b", "page_index": 3},
        ],
    }


@pytest.fixture
def deep_forest() -> list[dict]:
    """Two roots; the first has a grandchild and an id-less child."""
    return [
        {
            "node_id": "0000",
            "page_index": 1,
            "title": "Intro",
            "nodes": [
                {
                    "node_id": "0001",
                    "page_index": 2,
                    "nodes": [{"node_id": "0002", "page_index": 4}],
                },
                {"page_index": 6, "title": "untitled"},
            ],
        },
        {"node_id": "0003", "page_index": 9, "nodes": None},
    ]


class TestFlattenTree:
    def test_pre_order_across_forest(self, deep_forest: list[dict]) -> None:
        order = [n.page_index for n in flatten_tree(deep_forest)]

        assert order == [1, 2, 4, 6, 9]

    def test_single_tree(self, simple_tree: dict) -> None:
        assert [n.node_id for n in flatten_tree(simple_tree)] == ["r", "a", "b"]

    def test_tree_node_input_is_not_copied(self) -> None:
        child = TreeNode(node_id="c")
        root = TreeNode(node_id="r", nodes=[child])

        flat = flatten_tree(root)

        assert flat[0] is root
        assert flat[1] is child

    def test_deep_tree_does_not_recurse(self) -> None:
        root = TreeNode(node_id="0")
        current = root
        for i in range(1, 5000):
            nxt = TreeNode(node_id=str(i))
            current.nodes.append(nxt)
            current = nxt

        assert len(flatten_tree(root)) == 5000

    def test_empty_forest(self) -> None:
        assert flatten_tree([]) == []


class TestNodeMap:
    def test_one_entry_per_id(self, deep_forest: list[dict]) -> None:
        result = node_map(deep_forest)

        assert list(result) == ["0000", "0001", "0002", "0003"]
        assert all(isinstance(n, TreeNode) for n in result.values())

    def test_nodes_without_id_are_excluded(self) -> None:
        result = node_map({"nodes": [{"node_id": ""}, {"node_id": "x"}]})

        assert list(result) == ["x"]

    def test_extra_fields_are_preserved(self, deep_forest: list[dict]) -> None:
        result = node_map(deep_forest)

        assert result["0000"].model_dump()["title"] == "Intro"

    def test_duplicate_id_last_write_wins(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        tree = {
            "node_id": "r",
            "nodes": [
                {"node_id": "dup", "page_index": 1},
                {"node_id": "dup", "page_index": 2},
            ],
        }

        with caplog.at_level(logging.WARNING, logger="pageindex_sdk.tree.indexer"):
            result = node_map(tree)

        assert result["dup"].page_index == 2
        assert "Duplicate node_id 'dup'" in caplog.text

    def test_records_metrics(self, simple_tree: dict) -> None:
        hook = Mock()

        node_map(simple_tree, metrics_hook=hook)

        hook.record_latency.assert_called_once()
        assert hook.record_latency.call_args.args[0] == names.TREE_INDEX_DURATION
        hook.record_gauge.assert_any_call(
            names.TREE_NODES_INDEXED, 3, labels={"kind": "nodes"}
        )


class TestPageRangeMap:
    def test_example_tree(self, simple_tree: dict) -> None:
        result = page_range_map(simple_tree, max_page=10)

        assert {k: (v.start_index, v.end_index) for k, v in result.items()} == {
            "r": (1, 1),
            "a": (1, 3),
            "b": (3, 10),
        }

    def test_end_is_next_node_in_document_order(self, deep_forest: list[dict]) -> None:
        result = page_range_map(deep_forest, max_page=12)

        assert result["0000"].end_index == 2
        assert result["0001"].end_index == 4
        # next node has no id but still bounds the range
        assert result["0002"].end_index == 6
        assert result["0003"].start_index == 9
        assert result["0003"].end_index == 12

    def test_last_node_without_max_page(self, simple_tree: dict) -> None:
        result = page_range_map(simple_tree)

        assert result["b"].end_index is None

    def test_missing_page_index(self) -> None:
        result = page_range_map(
            [{"node_id": "a"}, {"node_id": "b", "page_index": 5}], max_page=8
        )

        assert result["a"] == PageRangeEntry(
            node=result["a"].node, start_index=None, end_index=5
        )
        assert result["b"].end_index == 8

    def test_last_node_overall_without_id(self) -> None:
        result = page_range_map(
            [{"node_id": "a", "page_index": 1}, {"page_index": 4}], max_page=9
        )

        assert list(result) == ["a"]
        assert result["a"].end_index == 4

    def test_entries_reference_nodes(self, simple_tree: dict) -> None:
        result = page_range_map(simple_tree)

        assert result["a"].node.node_id == "a"


class TestCreateNodeMapping:
    def test_defaults_to_plain_nodes(self, simple_tree: dict) -> None:
        result = create_node_mapping(simple_tree)

        assert isinstance(result["r"], TreeNode)

    def test_page_ranges(self, simple_tree: dict) -> None:
        result = create_node_mapping(simple_tree, include_page_ranges=True, max_page=4)

        assert isinstance(result["b"], PageRangeEntry)
        assert result["b"].end_index == 4


class TestParseTree:
    def test_wraps_single_root(self, simple_tree: dict) -> None:
        roots = parse_tree(simple_tree)

        assert len(roots) == 1
        assert roots[0].nodes[1].page_index == 3

    def test_null_children_become_empty(self) -> None:
        assert parse_tree({"node_id": "x", "nodes": None})[0].nodes == []

    def test_does_not_mutate_input(self, simple_tree: dict) -> None:
        before = repr(simple_tree)

        page_range_map(simple_tree, max_page=10)

        assert repr(simple_tree) == before


class TestValuesKeptAsGiven:
    def test_integer_node_id(self) -> None:
        result = node_map({"node_id": 7, "nodes": [{"node_id": "a"}]})

        assert list(result) == [7, "a"]
        assert result[7].node_id == 7

    def test_non_string_text(self) -> None:
        result = node_map({"node_id": "a", "text": {"md": "x"}})

        assert result["a"].text == {"md": "x"}

    def test_string_page_index_is_not_coerced(self) -> None:
        result = page_range_map(
            [{"node_id": "a", "page_index": "3"}, {"node_id": "b", "page_index": "4"}],
            max_page=5,
        )

        assert result["a"].start_index == "3"
        assert result["a"].end_index == "4"
        assert result["b"].start_index == "4"
        assert result["b"].end_index == 5
