"""Tests for openapi2tools.compiler."""

from openapi2tools.compiler import ToolCompiler, display_name_for, extract_base_url, tool_name_for
from openapi2tools.models import ParameterSpec


def compile_users(document):
    return ToolCompiler().compile(document, "custom.acme", "b2")


class TestNaming:
    def test_tool_name_from_integration_and_summary(self) -> None:
        assert tool_name_for("custom.acme", "List users") == "CUSTOM_ACME_LIST_USERS"

    def test_fallback_display_name_uses_method_and_path(self) -> None:
        assert display_name_for("get", "/users/{id}", {}) == "GET /users/{id}"

    def test_distinct_summaries_give_distinct_names(self, users_document) -> None:
        compiled = compile_users(users_document)
        names = [tool.name for tool in compiled.tools]
        assert len(names) == len(set(names))
        assert "CUSTOM_ACME_LIST_USERS" in names
        assert "CUSTOM_ACME_CREATE_USER" in names
        assert "CUSTOM_ACME_GET_/USERS/{ID}/POSTS/{POSTID}" in names


class TestInputSchema:
    def test_params_only(self, users_document) -> None:
        tool = next(t for t in compile_users(users_document).tools if t.name == "CUSTOM_ACME_LIST_USERS")
        assert tool.required_fields == ["params"]
        assert tool.input_schema["required"] == ["params"]
        params = tool.input_schema["properties"]["params"]
        assert set(params["properties"]) == {"limit", "status"}
        assert params["required"] == []
        assert "body" not in tool.input_schema["properties"]

    def test_body_only(self, users_document) -> None:
        tool = next(t for t in compile_users(users_document).tools if t.name == "CUSTOM_ACME_CREATE_USER")
        assert tool.required_fields == ["body"]
        body = tool.input_schema["properties"]["body"]
        assert body["required"] == ["email"]
        assert body["properties"]["nickname"]["type"] == ["string", "null"]

    def test_no_inputs(self, users_document) -> None:
        tool = next(t for t in compile_users(users_document).tools if t.name == "CUSTOM_ACME_HEALTH_CHECK")
        assert tool.required_fields == []
        assert tool.input_schema == {"type": "object", "properties": {}, "required": []}

    def test_params_and_body(self) -> None:
        document = {
            "paths": {
                "/items/{id}": {
                    "put": {
                        "summary": "Update item",
                        "parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}],
                        "requestBody": {"content": {"application/json": {
                            "schema": {"type": "object", "properties": {"name": {"type": "string"}}},
                        }}},
                    }
                }
            }
        }
        tool = ToolCompiler().compile(document, "shop", None).tools[0]
        assert tool.required_fields == ["params", "body"]
        assert tool.input_schema["properties"]["params"]["required"] == ["id"]

    def test_empty_body_schema_is_omitted(self) -> None:
        document = {"paths": {"/ping": {"post": {
            "summary": "Ping",
            "requestBody": {"content": {"application/json": {"schema": {"type": "string"}}}},
        }}}}
        tool = ToolCompiler().compile(document, "svc", None).tools[0]
        assert tool.required_fields == []
        assert "body" not in tool.input_schema["properties"]

    def test_non_json_body_ignored(self) -> None:
        document = {"paths": {"/upload": {"post": {
            "summary": "Upload",
            "requestBody": {"content": {"multipart/form-data": {"schema": {
                "type": "object", "properties": {"file": {"type": "string"}}}}}},
        }}}}
        tool = ToolCompiler().compile(document, "svc", None).tools[0]
        assert tool.required_fields == []


class TestRequestDescriptors:
    def test_request_descriptor_registered_per_tool(self, users_document) -> None:
        compiled = compile_users(users_document)
        assert set(compiled.requests) == {t.name for t in compiled.tools}
        request = compiled.requests["CUSTOM_ACME_LIST_USERS"]
        assert request.method == "get"
        assert request.path == "/users"
        assert request.base_url == "https://api.acme.test/v1"
        assert request.parameters == (
            ParameterSpec("limit", "query", False),
            ParameterSpec("status", "query", False),
        )

    def test_path_item_parameters_merged_and_required(self, users_document) -> None:
        compiled = compile_users(users_document)
        request = compiled.requests["CUSTOM_ACME_GET_/USERS/{ID}/POSTS/{POSTID}"]
        assert {p.name for p in request.parameters} == {"id", "postId"}
        assert all(p.required for p in request.parameters)

    def test_operation_parameter_overrides_path_item(self) -> None:
        document = {"paths": {"/a/{id}": {
            "parameters": [{"name": "id", "in": "path", "description": "old", "schema": {"type": "string"}}],
            "get": {"summary": "Get a", "parameters": [
                {"name": "id", "in": "path", "description": "new", "schema": {"type": "integer"}},
            ]},
        }}}
        tool = ToolCompiler().compile(document, "svc", None).tools[0]
        schema = tool.input_schema["properties"]["params"]["properties"]["id"]
        assert schema["type"] == "integer"
        assert schema["description"] == "new"

    def test_non_method_keys_skipped(self, users_document) -> None:
        users_document["paths"]["/health"]["summary"] = "Path level summary"
        compiled = compile_users(users_document)
        assert len(compiled.tools) == 4

    def test_duplicate_names_last_wins(self) -> None:
        document = {"paths": {
            "/a": {"get": {"summary": "Fetch"}},
            "/b": {"get": {"summary": "Fetch"}},
        }}
        compiled = ToolCompiler().compile(document, "svc", None)
        assert [t.name for t in compiled.tools] == ["SVC_FETCH"]
        assert compiled.requests["SVC_FETCH"].path == "/b"

    def test_description_combines_summary_and_description(self, users_document) -> None:
        tool = compile_users(users_document).tools[0]
        assert tool.description == "List users - Returns a page of users"
        assert tool.to_dict()["isOpenApiTool"] is True
        assert tool.to_dict()["integrationId"] == "b2"


class TestBaseUrl:
    def test_server_variables_substituted(self) -> None:
        document = {"servers": [{"url": "https://{region}.acme.test",
                                 "variables": {"region": {"default": "eu"}}}]}
        assert extract_base_url(document) == "https://eu.acme.test"

    def test_no_servers(self) -> None:
        assert extract_base_url({}) is None


class TestParameterFiltering:
    def test_unsupported_location_skipped(self, caplog) -> None:
        document = {"paths": {"/legacy": {"post": {
            "summary": "Legacy",
            "parameters": [
                {"name": "payload", "in": "body", "schema": {"type": "object"}},
                {"name": "q", "in": "query", "schema": {"type": "string"}},
            ],
        }}}}

        compiled = ToolCompiler().compile(document, "svc", None)

        request = compiled.requests["SVC_LEGACY"]
        assert request.parameters == (ParameterSpec("q", "query", False),)
        assert set(compiled.tools[0].input_schema["properties"]["params"]["properties"]) == {"q"}
        assert "unsupported location 'body'" in caplog.text

    def test_path_required_even_if_marked_optional(self) -> None:
        spec = ParameterSpec.from_openapi({"name": "id", "in": "path", "required": False})
        assert spec.required is True

    def test_undeclared_path_token_warned(self, caplog) -> None:
        document = {"paths": {"/orgs/{org}/users/{id}": {"get": {
            "summary": "Get user",
            "parameters": [{"name": "id", "in": "path", "schema": {"type": "string"}}],
        }}}}

        ToolCompiler().compile(document, "svc", None)

        assert "Missing path parameter definitions for GET /orgs/{org}/users/{id}: ['org']" in caplog.text
