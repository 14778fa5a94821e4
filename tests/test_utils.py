"""
Tests for the dotted-path and merge helpers.
"""

from babele.utils import get_property, merge_object, original_name, set_property


class TestGetProperty:
    def test_nested_path(self):
        data = {"system": {"description": {"value": "A blade."}}}
        assert get_property(data, "system.description.value") == "A blade."

    def test_missing_segment_returns_default(self):
        assert get_property({"system": {}}, "system.description.value") is None
        assert get_property({"system": {}}, "system.description", "n/a") == "n/a"

    def test_list_index(self):
        data = {"faces": [{"name": "Ace"}, {"name": "King"}]}
        assert get_property(data, "faces.1.name") == "King"
        assert get_property(data, "faces.5.name") is None

    def test_scalar_in_the_middle(self):
        assert get_property({"name": "Sword"}, "name.value") is None


class TestSetProperty:
    def test_creates_intermediate_dicts(self):
        data = {}
        set_property(data, "prototypeToken.name", "Trasgo")
        assert data == {"prototypeToken": {"name": "Trasgo"}}

    def test_keeps_siblings(self):
        data = {"system": {"description": {"value": "old", "chat": "x"}}}
        set_property(data, "system.description.value", "new")
        assert data == {"system": {"description": {"value": "new", "chat": "x"}}}


class TestMergeObject:
    def test_deep_merge_does_not_mutate(self):
        original = {"a": {"b": 1, "c": 2}, "d": 3}
        merged = merge_object(original, {"a": {"b": 10}})
        assert merged == {"a": {"b": 10, "c": 2}, "d": 3}
        assert original == {"a": {"b": 1, "c": 2}, "d": 3}

    def test_lists_are_replaced(self):
        merged = merge_object({"items": [1, 2, 3]}, {"items": [4]})
        assert merged == {"items": [4]}

    def test_inplace(self):
        original = {"a": 1}
        result = merge_object(original, {"b": 2}, inplace=True)
        assert result is original
        assert original == {"a": 1, "b": 2}

    def test_merged_values_are_copies(self):
        patch = {"flags": {"babele": {"translated": True}}}
        merged = merge_object({}, patch)
        merged["flags"]["babele"]["translated"] = False
        assert patch["flags"]["babele"]["translated"] is True


class TestOriginalName:
    def test_prefers_original_name(self):
        assert original_name({"name": "Espada", "originalName": "Sword"}) == "Sword"

    def test_reads_flags(self):
        document = {"name": "Espada", "flags": {"babele": {"originalName": "Sword"}}}
        assert original_name(document) == "Sword"

    def test_falls_back_to_name(self):
        assert original_name({"name": "Sword"}) == "Sword"
        assert original_name({}) is None
