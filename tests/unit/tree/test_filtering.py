import pytest

from pageindex_sdk.tree.filtering import remove_fields
from pageindex_sdk.tree.models import TreeNode


@pytest.fixture
def nested() -> dict:
    return {
        "node_id": "0000",
        "text": "root body",
        "meta": {"text": "hidden", "keep": [{"text": "x", "n": 1}, "plain"]},
        "nodes": [{"node_id": "0001", "text": "child body", "nodes": []}],
    }


class TestRemoveFields:
    def test_removes_key_at_every_depth(self, nested: dict) -> None:
        result = remove_fields(nested)

        assert result == {
            "node_id": "0000",
            "meta": {"keep": [{"n": 1}, "plain"]},
            "nodes": [{"node_id": "0001", "nodes": []}],
        }

    def test_multiple_fields(self, nested: dict) -> None:
        result = remove_fields(nested, fields=["text", "nodes", "meta"])

        assert result == {"node_id": "0000"}

    def test_input_is_not_modified(self, nested: dict) -> None:
        remove_fields(nested)

        assert nested["text"] == "root body"
        assert nested["nodes"][0]["text"] == "child body"

    def test_idempotent(self, nested: dict) -> None:
        once = remove_fields(nested, fields=["text", "node_id"])

        assert remove_fields(once, fields=["text", "node_id"]) == once

    def test_scalars_pass_through(self) -> None:
        assert remove_fields(3) == 3
        assert remove_fields(None) is None
        assert remove_fields("text") == "text"

    def test_tuples_become_lists(self) -> None:
        assert remove_fields(({"text": 1, "a": 2},)) == [{"a": 2}]

    def test_tree_node_is_dumped(self) -> None:
        node = TreeNode(node_id="1", text="body", title="T", nodes=[TreeNode(text="c")])

        result = remove_fields(node, fields=["text", "page_index"])

        assert result == {"node_id": "1", "nodes": [{}], "title": "T"}

    def test_parsed_node_keeps_only_supplied_keys(self) -> None:
        raw = {"title": "Appendix", "nodes": [{"title": "Notes", "page_index": 9}]}

        result = remove_fields(TreeNode.model_validate(raw), fields=["page_index"])

        assert result == {"title": "Appendix", "nodes": [{"title": "Notes"}]}
        assert "node_id" not in result["nodes"][0]


class TestTruncation:
    def test_long_strings_are_cut(self) -> None:
        result = remove_fields({"title": "abcdefghij"}, fields=[], max_len=4)

        assert result == {"title": "abcd..."}
        assert len(result["title"]) == 4 + 3

    def test_strings_at_limit_unchanged(self) -> None:
        assert remove_fields(["abcd", "abc"], fields=[], max_len=4) == ["abcd", "abc"]

    def test_nested_strings_are_cut(self) -> None:
        result = remove_fields({"a": [{"b": "0123456789"}]}, fields=[], max_len=5)

        assert result == {"a": [{"b": "01234..."}]}

    def test_keys_are_not_truncated(self) -> None:
        result = remove_fields({"a_very_long_key": 1}, fields=[], max_len=2)

        assert result == {"a_very_long_key": 1}

    def test_no_truncation_by_default(self) -> None:
        long = "x" * 1000

        assert remove_fields(long) == long
