from __future__ import annotations

from clientsmith.generation.response import ResponseShape, classify_response, success_schema
from clientsmith.ir import MediaTypeIR, ResponseIR


def _json(status: str, schema: dict[str, object] | None) -> ResponseIR:
    return ResponseIR(status=status, description=None, content=(MediaTypeIR("application/json", schema),))


class TestClassifyResponse:
    def test_missing_responses_is_single_object(self) -> None:
        assert classify_response(None) is ResponseShape.SINGLE_OBJECT

    def test_array_schema_is_collection(self) -> None:
        responses = (_json("200", {"type": "array", "items": {"type": "object"}}),)
        assert classify_response(responses) is ResponseShape.COLLECTION_OF_OBJECTS

    def test_object_schema_is_single_object(self) -> None:
        assert classify_response((_json("200", {"type": "object"}),)) is ResponseShape.SINGLE_OBJECT

    def test_no_content_status_wins(self) -> None:
        responses = (
            _json("200", {"type": "array"}),
            ResponseIR(status="204", description=None, content=None),
        )
        assert classify_response(responses) is ResponseShape.EMPTY

    def test_success_without_content_is_empty(self) -> None:
        assert classify_response((ResponseIR("200", "ok", None),)) is ResponseShape.EMPTY
        assert classify_response((ResponseIR("201", "ok", ()),)) is ResponseShape.EMPTY

    def test_no_success_status_is_single_object(self) -> None:
        assert classify_response((_json("default", {"type": "array"}),)) is ResponseShape.SINGLE_OBJECT

    def test_preference_order(self) -> None:
        responses = (
            _json("201", {"type": "object"}),
            _json("200", {"type": "array"}),
        )
        assert classify_response(responses) is ResponseShape.COLLECTION_OF_OBJECTS

    def test_custom_no_content_statuses(self) -> None:
        responses = (_json("200", {"type": "object"}), ResponseIR("205", None, None))
        assert classify_response(responses) is ResponseShape.SINGLE_OBJECT
        assert classify_response(responses, no_content_statuses={"204", "205"}) is ResponseShape.EMPTY


class TestSuccessSchema:
    def test_collection_returns_items(self) -> None:
        responses = (_json("200", {"type": "array", "items": {"type": "object", "title": "Item"}}),)
        assert success_schema(responses) == {"type": "object", "title": "Item"}

    def test_single_returns_schema(self) -> None:
        assert success_schema((_json("200", {"type": "object"}),)) == {"type": "object"}

    def test_empty_returns_none(self) -> None:
        assert success_schema((ResponseIR("204", None, None),)) is None
        assert success_schema(None) is None
