"""Tests for contractlens.parser.swagger -- Swagger 2.0 layout rewrite."""

from __future__ import annotations

from contractlens.models import Document, HTTPMethod, ParameterLocation
from contractlens.parser.swagger import convert_swagger2


# ---------------------------------------------------------------------------
# Raw conversion
# ---------------------------------------------------------------------------


class TestConvertSwagger2:
    def test_servers_from_host_base_path_and_schemes(self) -> None:
        converted = convert_swagger2({
            "swagger": "2.0",
            "host": "api.example.com",
            "basePath": "/v1",
            "schemes": ["https", "http"],
        })
        assert converted["servers"] == [
            {"url": "https://api.example.com/v1"},
            {"url": "http://api.example.com/v1"},
        ]

    def test_host_without_schemes_defaults_to_https(self) -> None:
        converted = convert_swagger2({"swagger": "2.0", "host": "api.example.com"})
        assert converted["servers"] == [{"url": "https://api.example.com"}]

    def test_base_path_only(self) -> None:
        converted = convert_swagger2({"swagger": "2.0", "basePath": "/api"})
        assert converted["servers"] == [{"url": "/api"}]

    def test_no_host_no_servers(self) -> None:
        assert "servers" not in convert_swagger2({"swagger": "2.0", "paths": {}})

    def test_definitions_become_component_schemas(self) -> None:
        converted = convert_swagger2({
            "swagger": "2.0",
            "definitions": {"Pet": {"type": "object"}},
        })
        assert converted["components"]["schemas"] == {"Pet": {"type": "object"}}

    def test_basic_security_becomes_http_basic(self) -> None:
        converted = convert_swagger2({
            "swagger": "2.0",
            "securityDefinitions": {
                "basic_auth": {"type": "basic"},
                "key": {"type": "apiKey", "name": "k", "in": "header"},
            },
        })
        schemes = converted["components"]["securitySchemes"]
        assert schemes["basic_auth"] == {"type": "http", "scheme": "basic"}
        assert schemes["key"]["type"] == "apiKey"

    def test_inline_parameter_types_wrapped_in_schema(self) -> None:
        converted = convert_swagger2({
            "swagger": "2.0",
            "paths": {"/a": {"get": {"parameters": [
                {"name": "n", "in": "query", "type": "integer", "format": "int32", "required": True},
            ]}}},
        })
        param = converted["paths"]["/a"]["get"]["parameters"][0]
        assert param == {
            "name": "n",
            "in": "query",
            "required": True,
            "schema": {"type": "integer", "format": "int32"},
        }

    def test_body_parameter_uses_operation_consumes(self) -> None:
        converted = convert_swagger2({
            "swagger": "2.0",
            "consumes": ["application/json"],
            "paths": {"/a": {"post": {
                "consumes": ["application/xml"],
                "parameters": [{"name": "b", "in": "body", "schema": {"type": "object"}}],
            }}},
        })
        body = converted["paths"]["/a"]["post"]["requestBody"]
        assert body["required"] is False
        assert list(body["content"]) == ["application/xml"]
        assert "parameters" not in converted["paths"]["/a"]["post"]

    def test_form_fields_without_file_are_urlencoded(self) -> None:
        converted = convert_swagger2({
            "swagger": "2.0",
            "paths": {"/login": {"post": {"parameters": [
                {"name": "user", "in": "formData", "type": "string", "required": True},
                {"name": "remember", "in": "formData", "type": "boolean"},
            ]}}},
        })
        body = converted["paths"]["/login"]["post"]["requestBody"]
        schema = body["content"]["application/x-www-form-urlencoded"]["schema"]
        assert body["required"] is True
        assert schema["required"] == ["user"]
        assert list(schema["properties"]) == ["user", "remember"]

    def test_response_schema_moves_under_content(self) -> None:
        converted = convert_swagger2({
            "swagger": "2.0",
            "paths": {"/a": {"get": {"responses": {
                "200": {"description": "ok", "schema": {"type": "string"}},
                "404": {"description": "missing"},
            }}}},
        })
        responses = converted["paths"]["/a"]["get"]["responses"]
        assert responses["200"] == {
            "description": "ok",
            "content": {"application/json": {"schema": {"type": "string"}}},
        }
        assert responses["404"] == {"description": "missing"}

    def test_absent_responses_stay_absent(self) -> None:
        converted = convert_swagger2({"swagger": "2.0", "paths": {"/a": {"get": {}}}})
        assert "responses" not in converted["paths"]["/a"]["get"]

    def test_input_is_not_mutated(self) -> None:
        raw = {
            "swagger": "2.0",
            "paths": {"/a": {"get": {"parameters": [{"name": "n", "in": "query", "type": "string"}]}}},
        }
        convert_swagger2(raw)
        assert raw["paths"]["/a"]["get"]["parameters"] == [
            {"name": "n", "in": "query", "type": "string"}
        ]


# ---------------------------------------------------------------------------
# End to end through parse()
# ---------------------------------------------------------------------------


class TestSwaggerDocument:
    """The Swagger 2.0 fixture parsed into the common document model."""

    def test_version_marker(self, swagger_petstore: Document) -> None:
        assert swagger_petstore.spec_version == "2.0"
        assert swagger_petstore.is_swagger

    def test_servers(self, swagger_petstore: Document) -> None:
        assert [s.url for s in swagger_petstore.servers] == [
            "https://petstore.swagger.io/v2",
            "http://petstore.swagger.io/v2",
        ]

    def test_body_parameter_becomes_request_body(self, swagger_petstore: Document) -> None:
        op = swagger_petstore.paths["/pet"].get(HTTPMethod.POST)
        assert op is not None
        assert op.parameters == []
        assert op.request_body is not None
        assert op.request_body.required is True
        schema = op.request_body.content["application/json"].schema_
        assert schema is not None and schema.required == ["name"]

    def test_array_query_parameter(self, swagger_petstore: Document) -> None:
        op = swagger_petstore.paths["/pet/findByStatus"].get(HTTPMethod.GET)
        assert op is not None
        param = op.parameters[0]
        assert param.location == ParameterLocation.QUERY
        assert param.required is True
        assert param.schema_ is not None
        assert param.schema_.type == "array"
        assert param.schema_.items is not None
        assert param.schema_.items.enum == ["available", "pending", "sold"]

    def test_response_content_per_produces(self, swagger_petstore: Document) -> None:
        op = swagger_petstore.paths["/pet/findByStatus"].get(HTTPMethod.GET)
        assert op is not None
        assert list(op.responses["200"].content) == ["application/xml", "application/json"]

    def test_file_upload_is_multipart(self, swagger_petstore: Document) -> None:
        op = swagger_petstore.paths["/pet/{petId}/uploadImage"].get(HTTPMethod.POST)
        assert op is not None
        assert [p.name for p in op.parameters] == ["petId"]
        assert op.request_body is not None
        assert op.request_body.required is True
        schema = op.request_body.content["multipart/form-data"].schema_
        assert schema is not None
        assert schema.required == ["file"]
        assert schema.properties["file"].type == "file"

    def test_security(self, swagger_petstore: Document) -> None:
        assert swagger_petstore.security == [{"api_key": []}]
        schemes = swagger_petstore.components.security_schemes
        assert list(schemes) == ["api_key", "basic_auth"]
        assert schemes["basic_auth"].type == "http"
        assert schemes["basic_auth"].scheme == "basic"

