"""Tests for collecting the leaves that need translation."""

import copy

from langtranslator.core.tree import Leaf, empty_tree, flatten, same_structure
from langtranslator.translation.collector import collect, needs_translation
from langtranslator.translation.rebuilder import rebuild
from tests.conftest import make_tree


class TestNeedsTranslation:
    def test_absent(self):
        assert needs_translation(None, overwrite=False)

    def test_empty_existing(self):
        assert needs_translation(Leaf(""), overwrite=False)

    def test_filled_existing(self):
        assert not needs_translation(Leaf("Hola"), overwrite=False)
        assert needs_translation(Leaf("Hola"), overwrite=True)

    def test_existing_branch_where_leaf_expected(self):
        assert needs_translation(make_tree({"x": "y"}), overwrite=False)


class TestCollect:
    def test_everything_when_no_existing(self):
        source = make_tree({"welcome": "Welcome", "auth": {"failed": "Login failed"}})
        assert collect(source, empty_tree()) == {
            "welcome": "Welcome",
            "auth.failed": "Login failed",
        }

    def test_only_missing_keys(self):
        source = make_tree({"a": "A", "b": "B"})
        existing = make_tree({"b": "existing-B", "c": "C"})
        assert collect(source, existing) == {"a": "A"}

    def test_empty_existing_values_are_retranslated(self):
        source = make_tree({"a": "A", "b": {"c": "C"}})
        existing = make_tree({"a": "", "b": {"c": ""}})
        assert collect(source, existing) == {"a": "A", "b.c": "C"}

    def test_overwrite_sends_everything(self):
        source = make_tree({"a": "A", "b": {"c": "C"}})
        existing = make_tree({"a": "x", "b": {"c": "y"}})
        assert collect(source, existing, overwrite=True) == {"a": "A", "b.c": "C"}

    def test_nothing_to_do(self):
        source = make_tree({"a": "A"})
        existing = make_tree({"a": "x"})
        assert collect(source, existing) == {}

    def test_existing_leaf_where_source_has_branch(self):
        source = make_tree({"a": {"b": "B"}})
        existing = make_tree({"a": "flat"})
        assert collect(source, existing) == {"a.b": "B"}

    def test_traversal_order(self):
        source = make_tree({"z": "1", "a": {"m": "2", "b": "3"}, "c": "4"})
        assert list(collect(source, empty_tree())) == ["z", "a.m", "a.b", "c"]

    def test_prefix(self):
        source = make_tree({"a": "A"})
        assert collect(source, empty_tree(), prefix="root") == {"root.a": "A"}

    def test_eligibility_matches_existing_state(self):
        source = make_tree({
            "keep": "K", "empty": "E", "missing": "M",
            "group": {"keep": "K", "missing": "M"},
        })
        existing = make_tree({"keep": "k", "empty": "", "group": {"keep": "k"}})
        existing_flat = flatten(existing)
        batch = collect(source, existing)
        for path in flatten(source):
            expected = path not in existing_flat or existing_flat[path] == ""
            assert (path in batch) == expected


class TestInputsUnchanged:
    def test_collect_and_rebuild_leave_inputs_intact(self):
        source = make_tree({"a": "A", "b": {"c": "C", "d": ""}, "e": "E"})
        existing = make_tree({"a": "", "b": {"c": "kept", "orphan": {"x": "X"}}, "z": "Z"})
        source_before = copy.deepcopy(source)
        existing_before = copy.deepcopy(existing)

        for overwrite in (False, True):
            batch = collect(source, existing, overwrite)
            tree, _ = rebuild(source, existing, {p: f"t-{t}" for p, t in batch.items()}, overwrite)
            tree["b"]["orphan"]["x"].value = "mutated"

        assert same_structure(source, source_before)
        assert same_structure(existing, existing_before)
