"""Tests for schemalens.schema.tree."""

from __future__ import annotations

from schemalens.models import TreeNode
from schemalens.parser.resolver import SchemaResolver
from schemalens.schema.tree import decorate, summarize, to_tree


def _keys(node: TreeNode) -> list[str]:
    keys = [node.key]
    for child in node.children:
        keys.extend(_keys(child))
    return keys


class TestShape:
    def test_single_root(self) -> None:
        nodes = to_tree({"type": "object", "properties": {"a": {"type": "string"}}}, "Pet")
        assert len(nodes) == 1
        assert nodes[0].label == "Pet: object"
        assert [c.label for c in nodes[0].children] == ["a: string"]

    def test_boolean_root(self) -> None:
        nodes = to_tree(False, "Nothing")
        assert nodes == [TreeNode(label="Nothing: never", key="Nothing")]

    def test_required_marker(self) -> None:
        root = to_tree({"required": ["id"], "properties": {"id": {"type": "integer"}, "x": {}}})[0]
        assert [c.label for c in root.children] == ["id *: integer", "x: object"]

    def test_array_items_child(self) -> None:
        root = to_tree({"type": "array", "items": {"type": "string", "format": "uuid"}}, "Ids")[0]
        assert root.children[0].label == "items: string (uuid)"
        assert root.children[0].key == "Ids[]"

    def test_array_without_items_is_any(self) -> None:
        root = to_tree({"type": "array"}, "L")[0]
        assert root.children[0].label == "items: any"

    def test_composition_wrappers(self) -> None:
        root = to_tree({"oneOf": [{"type": "string"}, {"type": "integer"}], "anyOf": []}, "U")[0]
        assert len(root.children) == 1
        wrapper = root.children[0]
        assert wrapper.label == "oneOf"
        assert wrapper.key == "U:oneOf"
        assert [c.label for c in wrapper.children] == ["#1: string", "#2: integer"]
        assert [c.key for c in wrapper.children] == ["U.oneOf[0]", "U.oneOf[1]"]

    def test_additional_properties(self) -> None:
        root = to_tree({"type": "object", "additionalProperties": {"type": "integer"}}, "Map")[0]
        extra = root.children[0]
        assert extra.key == "Map.$additional"
        assert extra.children[0].label == "value: integer"

    def test_keys_are_unique_paths(self) -> None:
        root = to_tree({
            "properties": {
                "tags": {"type": "array", "items": {"properties": {"name": {"type": "string"}}}},
            }
        })[0]
        assert _keys(root) == ["Schema", "Schema.tags", "Schema.tags[]", "Schema.tags[].name"]


class TestRefs:
    def test_ref_leaf_without_resolver(self) -> None:
        root = to_tree({"properties": {"owner": {"$ref": "#/components/schemas/Owner"}}})[0]
        assert root.children[0].label == "owner: $ref: #/components/schemas/Owner"
        assert root.children[0].children == []

    def test_ref_expanded_with_resolver(self, petstore_resolver: SchemaResolver) -> None:
        root = to_tree({"$ref": "#/components/schemas/Error"}, "Error", petstore_resolver)[0]
        assert [c.label for c in root.children] == ["code *: integer", "message: string"]

    def test_cycle_terminates(self, cyclic_resolver: SchemaResolver) -> None:
        root = to_tree({"$ref": "#/components/schemas/A"}, "A", cyclic_resolver)[0]
        b = root.children[0]
        a = b.children[0]
        assert a.label == "a: $ref: #/components/schemas/A"
        assert a.children == []

    def test_alias_and_primary_share_cycle_guard(self, petstore_resolver: SchemaResolver) -> None:
        root = to_tree({"$ref": "#/components/schemas/Pet"}, "Pet", petstore_resolver)[0]
        owner = next(c for c in root.children if c.key.endswith("owner"))
        pets = next(c for c in owner.children if c.key.endswith("pets"))
        (items,) = pets.children
        assert items.children == []


class TestLabels:
    def test_summarize(self) -> None:
        assert summarize({"type": "string", "format": "date", "nullable": True}) == "string (date) nullable"
        assert summarize({"enum": [1, 2]}) == "enum"
        assert summarize({}) == ""

    def test_decorate(self) -> None:
        label = decorate("x: string", {"description": " Name ", "enum": ["a", "b"], "example": "a"})
        assert label == 'x: string - Name [enum:2] ex: "a"'
