from __future__ import annotations

from typing import cast

import pytest

from clientsmith.errors import SpecError
from clientsmith.ir import HTTP_METHODS, build_ir
from clientsmith.openapi import OpenAPIDocument


def _document(paths: dict[str, object], **extra: object) -> OpenAPIDocument:
    return cast(OpenAPIDocument, {"openapi": "3.1.0", "paths": paths, **extra})


class TestBuildIR:
    def test_operations_follow_document_order(self) -> None:
        document = _document(
            {
                "/orders": {"post": {"operationId": "createOrder"}, "get": {"operationId": "listOrders"}},
                "/orders/{orderId}": {"delete": {"operationId": "cancelOrder"}},
            },
            info={"title": "Shop", "version": "2"},
            components={"schemas": {"Order": {"type": "object"}, "Broken": "not-a-schema"}},
        )
        ir = build_ir(document)
        assert ir.title == "Shop"
        assert [schema.name for schema in ir.schemas] == ["Order"]
        assert [(op.method, op.operation_id) for op in ir.operations] == [
            ("get", "listOrders"),
            ("post", "createOrder"),
            ("delete", "cancelOrder"),
        ]

    @pytest.mark.parametrize("paths", [None, [], "nope"])
    def test_paths_must_be_an_object(self, paths: object) -> None:
        with pytest.raises(SpecError, match="paths"):
            build_ir(cast(OpenAPIDocument, {"openapi": "3.0.3", "paths": paths}))

    def test_untitled_document(self) -> None:
        assert build_ir(_document({}, info={"title": 5})).title == ""

    def test_non_operation_keys_are_ignored(self) -> None:
        ir = build_ir(_document({"/a": {"summary": "x", "servers": [], "get": {}, "patch": "bad"}}))
        assert [op.method for op in ir.operations] == ["get"]
        assert set(HTTP_METHODS) >= {"get", "patch", "trace"}

    def test_path_item_parameters_stay_separate(self) -> None:
        ir = build_ir(
            _document(
                {
                    "/search": {
                        "parameters": [{"name": "lang", "in": "header"}],
                        "get": {"parameters": [{"name": "term", "in": "query", "required": True}, {"in": "query"}]},
                    }
                }
            )
        )
        operation = ir.operations[0]
        assert [(p.name, p.location) for p in operation.path_parameters] == [("lang", "header")]
        assert [(p.name, p.required) for p in operation.parameters] == [("term", True)]

    def test_request_body_and_response_media_types(self) -> None:
        ir = build_ir(
            _document(
                {
                    "/notes": {
                        "put": {
                            "requestBody": {
                                "required": True,
                                "content": {"text/plain": {"schema": {"type": "string"}}, "application/json": {}},
                            },
                            "responses": {"201": {"content": {"application/json": {"schema": {"type": "object"}}}}},
                        }
                    }
                }
            )
        )
        operation = ir.operations[0]
        assert operation.request_body is not None
        assert operation.request_body.required is True
        assert [(m.content_type, m.schema) for m in operation.request_body.content] == [
            ("text/plain", {"type": "string"}),
            ("application/json", None),
        ]
        assert operation.responses is not None
        created = operation.responses[0]
        assert created.status == "201"
        assert created.content is not None
        assert created.content[0].schema == {"type": "object"}

    @pytest.mark.parametrize(
        "responses, expected",
        [
            pytest.param({"204": {"description": "gone"}}, (("204", None),), id="no-content"),
            pytest.param({"200": "junk"}, (("200", None),), id="junk-response"),
        ],
    )
    def test_responses_without_content(self, responses: object, expected: tuple[tuple[str, None], ...]) -> None:
        ir = build_ir(_document({"/ping": {"head": {"responses": responses}}}))
        result = ir.operations[0].responses
        assert result is not None
        assert tuple((r.status, r.content) for r in result) == expected

    def test_missing_responses_is_none(self) -> None:
        ir = build_ir(_document({"/ping": {"get": {"responses": ["200"]}}, "/pong": {"get": {}}}))
        assert [op.responses for op in ir.operations] == [None, None]

    def test_collects_tags_security_and_schemes(self) -> None:
        document = {
            "openapi": "3.0.3",
            "security": [{"bearer": []}],
            "components": {"securitySchemes": {"bearer": {"type": "http", "scheme": "bearer"}}},
            "paths": {
                "/pets": {
                    "get": {
                        "tags": ["pets", "animals"],
                        "deprecated": True,
                        "security": [],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
        }
        ir = build_ir(cast(OpenAPIDocument, document))
        operation = ir.operations[0]
        assert operation.tags == ("pets", "animals")
        assert operation.deprecated is True
        assert operation.security == ()
        assert ir.security == ({"bearer": []},)
        assert "bearer" in ir.security_schemes


class TestSwaggerIR:
    def test_lifts_inline_parameter_types(self) -> None:
        document = {
            "swagger": "2.0",
            "paths": {
                "/pets/{petId}": {
                    "get": {
                        "parameters": [{"name": "petId", "in": "path", "required": True, "type": "integer"}],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
        }
        ir = build_ir(cast(OpenAPIDocument, document))
        param = ir.operations[0].parameters[0]
        assert param.schema == {"type": "integer"}

    def test_body_parameter_becomes_request_body(self) -> None:
        document = {
            "swagger": "2.0",
            "consumes": ["application/json"],
            "definitions": {"Pet": {"type": "object"}},
            "paths": {
                "/pets": {
                    "post": {
                        "parameters": [
                            {"name": "pet", "in": "body", "required": True, "schema": {"type": "object"}},
                        ],
                        "responses": {
                            "200": {"description": "ok", "schema": {"type": "array", "items": {"type": "object"}}}
                        },
                    }
                }
            },
        }
        ir = build_ir(cast(OpenAPIDocument, document))
        operation = ir.operations[0]
        assert ir.schemas[0].name == "Pet"
        assert operation.parameters == ()
        assert operation.request_body is not None
        assert operation.request_body.required is True
        assert [m.content_type for m in operation.request_body.content] == ["application/json"]
        assert operation.responses is not None
        content = operation.responses[0].content
        assert content is not None
        assert content[0].schema == {"type": "array", "items": {"type": "object"}}

    def test_form_parameters_become_form_body(self) -> None:
        document = {
            "swagger": "2.0",
            "paths": {
                "/upload": {
                    "post": {
                        "consumes": ["multipart/form-data"],
                        "parameters": [
                            {"name": "file", "in": "formData", "type": "file", "required": True},
                            {"name": "note", "in": "formData", "type": "string"},
                        ],
                        "responses": {"200": {"description": "ok"}},
                    }
                }
            },
        }
        ir = build_ir(cast(OpenAPIDocument, document))
        body = ir.operations[0].request_body
        assert body is not None
        assert body.required is True
        assert body.content[0].content_type == "multipart/form-data"
        schema = body.content[0].schema
        assert schema is not None
        assert set(schema["properties"]) == {"file", "note"}
