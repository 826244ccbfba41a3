from __future__ import annotations

import pytest

from clientsmith.errors import ModelIndexError, SpecError
from clientsmith.generation.models import (
    IndexModelsResolver,
    ModelBinding,
    ModelEntry,
    ModelIndex,
    NoOpModelsResolver,
    normalize_name,
    schema_name,
    schema_ref,
)


class TestModelIndex:
    def test_builds_from_mappings_and_strings(self) -> None:
        index = ModelIndex.build(
            {
                "User": {"typeName": "User", "importLocation": "app.models"},
                "Pet": "PetModel",
                "Order": {"type_name": "Order", "import_location": "app.orders"},
            }
        )
        assert len(index) == 3
        assert index.lookup("User") == ModelEntry("User", "app.models")
        assert index.lookup("Pet") == ModelEntry("PetModel", None)
        assert index.lookup("Order") == ModelEntry("Order", "app.orders")

    def test_entries_are_read_only(self) -> None:
        index = ModelIndex.build({"User": "User"})
        with pytest.raises(TypeError):
            index.entries["Other"] = ModelEntry("Other")  # type: ignore[index]

    @pytest.mark.parametrize(
        "mapping",
        [
            pytest.param({"User": 1}, id="non-entry"),
            pytest.param({"User": {"importLocation": "app"}}, id="missing-type-name"),
            pytest.param({"User": {"typeName": "not valid"}}, id="invalid-type-name"),
            pytest.param({"User": {"typeName": "User", "importLocation": "app/models"}}, id="invalid-import"),
            pytest.param({"": "User"}, id="empty-name"),
        ],
    )
    def test_malformed_mapping_raises(self, mapping: dict[str, object]) -> None:
        with pytest.raises(ModelIndexError):
            ModelIndex.build(mapping)

    def test_model_index_error_is_fatal_spec_error(self) -> None:
        assert issubclass(ModelIndexError, SpecError)

    def test_from_schemas(self) -> None:
        index = ModelIndex.from_schemas(["User", "Pet"], "app.models")
        assert index.lookup("Pet") == ModelEntry("Pet", "app.models")
        assert "User" in index

    def test_normalized_lookup(self) -> None:
        index = ModelIndex.build({"user_profile": "UserProfile"})
        assert index.lookup("UserProfile") == ModelEntry("UserProfile")
        assert index.lookup("user-profile") == ModelEntry("UserProfile")
        assert index.lookup("Account") is None


class TestResolvers:
    def test_noop_resolver_is_unresolved(self) -> None:
        binding = NoOpModelsResolver().resolve("#/components/schemas/User")
        assert binding == ModelBinding(schema_ref="#/components/schemas/User")
        assert binding.resolved is False

    def test_index_resolver_exact_then_normalized(self) -> None:
        resolver = IndexModelsResolver(
            ModelIndex.build(
                {
                    "User": {"typeName": "User", "importLocation": "app.models"},
                    "pet_tag": {"typeName": "PetTag", "importLocation": "app.models"},
                }
            )
        )
        exact = resolver.resolve("#/components/schemas/User")
        assert exact.resolved
        assert (exact.type_name, exact.import_location) == ("User", "app.models")
        assert resolver.resolve("#/definitions/PetTag").type_name == "PetTag"
        assert resolver.resolve("#/components/schemas/Missing").resolved is False


class TestSchemaRefs:
    def test_schema_name(self) -> None:
        assert schema_name("#/components/schemas/User") == "User"
        assert schema_name("#/definitions/Pet") == "Pet"

    def test_schema_ref_from_literal_ref(self) -> None:
        assert schema_ref({"$ref": "#/definitions/Pet"}) == "#/definitions/Pet"

    def test_schema_ref_from_stamped_schema(self) -> None:
        schema = {"type": "object", "x-clientsmith-schema-name": "User"}
        assert schema_ref(schema) == "#/components/schemas/User"  # type: ignore[arg-type]

    def test_inline_schema_has_no_ref(self) -> None:
        assert schema_ref({"type": "object"}) is None
        assert schema_ref(None) is None

    def test_normalize_name(self) -> None:
        assert normalize_name("User_Profile-V2") == "userprofilev2"
