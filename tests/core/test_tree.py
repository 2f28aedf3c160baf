"""Tests for the language tree data model."""

import pytest

from langtranslator.core.tree import (
    Branch,
    Leaf,
    flatten,
    join_path,
    leaf_count,
    same_structure,
    tree_from_data,
    tree_to_data,
)
from langtranslator.errors import FileShapeError


class TestTreeFromData:
    def test_nested_mapping(self):
        tree = tree_from_data({"a": "x", "b": {"c": "y"}})
        assert isinstance(tree["a"], Leaf)
        assert isinstance(tree["b"], Branch)
        assert tree["b"]["c"] == Leaf("y")

    def test_key_order_preserved(self):
        tree = tree_from_data({"z": "1", "a": "2", "m": "3"})
        assert tree.keys() == ["z", "a", "m"]

    def test_list_becomes_indexed_branch(self):
        tree = tree_from_data({"items": ["one", "two"]})
        assert tree["items"].keys() == ["0", "1"]
        assert tree["items"]["1"].value == "two"

    def test_scalars_are_stringified(self):
        tree = tree_from_data({"n": 3, "f": 1.5, "t": True, "no": False, "none": None})
        assert tree_to_data(tree) == {"n": "3", "f": "1.5", "t": "1", "no": "", "none": ""}

    def test_non_mapping_top_level_rejected(self):
        with pytest.raises(FileShapeError):
            tree_from_data("just a string")

    def test_integer_keys_become_strings(self):
        tree = tree_from_data({1: "one"})
        assert tree.keys() == ["1"]


class TestHelpers:
    def test_join_path(self):
        assert join_path("", "a") == "a"
        assert join_path("a.b", "c") == "a.b.c"

    def test_flatten(self):
        tree = tree_from_data({"a": "x", "b": {"c": "y", "d": {"e": "z"}}})
        assert flatten(tree) == {"a": "x", "b.c": "y", "b.d.e": "z"}

    def test_leaf_count(self):
        tree = tree_from_data({"a": "x", "b": {"c": "y", "d": {"e": "z"}}, "empty": {}})
        assert leaf_count(tree) == 3

    def test_leaf_is_empty(self):
        assert Leaf("").is_empty
        assert not Leaf(" ").is_empty


class TestSameStructure:
    def test_equal_trees(self):
        a = tree_from_data({"a": "x", "b": {"c": "y"}})
        b = tree_from_data({"a": "x", "b": {"c": "y"}})
        assert same_structure(a, b)

    def test_order_matters(self):
        a = tree_from_data({"a": "x", "b": "y"})
        b = tree_from_data({"b": "y", "a": "x"})
        assert a == b  # dataclass equality ignores dict order
        assert not same_structure(a, b)

    def test_leaf_vs_branch(self):
        a = tree_from_data({"a": "x"})
        b = tree_from_data({"a": {"x": "x"}})
        assert not same_structure(a, b)
