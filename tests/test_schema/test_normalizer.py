"""Tests for schemalens.schema.normalizer."""

from __future__ import annotations

import copy
from typing import Any

from schemalens.parser.resolver import SchemaResolver
from schemalens.schema.kinds import PARAM_LOCATION_KEY
from schemalens.schema.normalizer import normalize


class TestBooleansAndMalformed:
    def test_boolean_returned_as_is(self) -> None:
        assert normalize(True) is True
        assert normalize(False) is False

    def test_non_dict_returned_as_is(self) -> None:
        assert normalize("nonsense") == "nonsense"


class TestRefs:
    def test_resolves_ref(self, petstore_resolver: SchemaResolver) -> None:
        result = normalize({"$ref": "#/components/schemas/Error"}, petstore_resolver)
        assert result["type"] == "object"
        assert "code" in result["properties"]

    def test_no_resolver_leaves_ref(self) -> None:
        node = {"$ref": "#/components/schemas/Error"}
        assert normalize(node) == node

    def test_unresolved_ref_returned_unchanged(self, petstore_resolver: SchemaResolver) -> None:
        node = {"$ref": "#/components/schemas/Missing"}
        assert normalize(node, petstore_resolver) is node

    def test_ref_already_in_stack_is_cycle(self, petstore_resolver: SchemaResolver) -> None:
        node = {"$ref": "#/components/schemas/Error"}
        result = normalize(node, petstore_resolver, ["#/components/schemas/Error"])
        assert result is node

    def test_self_referencing_chain_terminates(self) -> None:
        resolver = SchemaResolver.from_document({
            "components": {"schemas": {
                "Loop": {"allOf": [{"$ref": "#/components/schemas/Loop"}]},
            }}
        })
        result = normalize({"$ref": "#/components/schemas/Loop"}, resolver)
        assert isinstance(result, dict)

    def test_cycle_between_two_components_terminates(self, cyclic_resolver: SchemaResolver) -> None:
        result = normalize({"$ref": "#/components/schemas/A"}, cyclic_resolver)
        assert result["properties"]["b"] == {"$ref": "#/components/schemas/B"}

    def test_ref_stack_is_restored(self, petstore_resolver: SchemaResolver) -> None:
        stack: list[str] = []
        normalize({"$ref": "#/components/schemas/NewPet"}, petstore_resolver, stack)
        assert stack == []


class TestAllOf:
    def test_required_is_union_of_branches(self, petstore_resolver: SchemaResolver) -> None:
        result = normalize({"$ref": "#/components/schemas/NewPet"}, petstore_resolver)
        assert set(result["required"]) >= {"id", "name", "nickname"}

    def test_properties_first_registration_wins(self) -> None:
        node = {
            "allOf": [
                {"properties": {"a": {"type": "string"}}},
                {"properties": {"a": {"type": "integer"}, "b": {"type": "boolean"}}},
            ]
        }
        result = normalize(node)
        assert result["properties"]["a"] == {"type": "string"}
        assert result["properties"]["b"] == {"type": "boolean"}
        assert "allOf" not in result

    def test_scalar_fields_first_wins(self) -> None:
        node = {"allOf": [{"description": "first"}, {"type": "object", "description": "second"}]}
        result = normalize(node)
        assert result["description"] == "first"
        assert result["type"] == "object"

    def test_own_fields_win_over_members(self) -> None:
        node = {"type": "object", "allOf": [{"type": "string"}]}
        assert normalize(node)["type"] == "object"

    def test_additional_properties_adopted_when_absent(self) -> None:
        node = {"allOf": [{"additionalProperties": {"type": "integer"}}, {"additionalProperties": False}]}
        assert normalize(node)["additionalProperties"] == {"type": "integer"}


class TestCompositionCollapse:
    def test_one_of_takes_first_branch(self) -> None:
        node = {"oneOf": [{"type": "string"}, {"type": "integer"}]}
        assert normalize(node) == {"type": "string"}

    def test_one_of_checked_before_any_of(self) -> None:
        node = {"anyOf": [{"type": "integer"}], "oneOf": [{"type": "boolean"}]}
        assert normalize(node) == {"type": "boolean"}

    def test_empty_one_of_is_ignored(self) -> None:
        node = {"type": "string", "oneOf": []}
        assert normalize(node)["type"] == "string"


class TestParamLocation:
    def test_inherited_location_attached(self) -> None:
        result = normalize({"type": "string"}, location="query")
        assert result[PARAM_LOCATION_KEY] == "query"

    def test_existing_location_not_overwritten(self) -> None:
        node = {"type": "string", PARAM_LOCATION_KEY: "path"}
        assert normalize(node, location="query")[PARAM_LOCATION_KEY] == "path"

    def test_location_on_ref_flows_to_target(self, petstore_resolver: SchemaResolver) -> None:
        node = {"$ref": "#/components/schemas/Error", PARAM_LOCATION_KEY: "header"}
        assert normalize(node, petstore_resolver)[PARAM_LOCATION_KEY] == "header"


class TestImmutability:
    def test_input_is_not_mutated(self, petstore_raw: dict[str, Any]) -> None:
        snapshot = copy.deepcopy(petstore_raw)
        resolver = SchemaResolver.from_document(petstore_raw)
        for name in resolver:
            normalize(resolver.get(name), resolver, location="query")
        assert petstore_raw == snapshot
