"""Shared fixtures."""

import copy
import json
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from openapi2tools.config import ProxySettings

USERS_DOCUMENT: Dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Acme", "version": "1.0.0"},
    "servers": [{"url": "https://api.acme.test/v1"}],
    "paths": {
        "/users": {
            "get": {
                "summary": "List users",
                "description": "Returns a page of users",
                "parameters": [
                    {"name": "limit", "in": "query", "schema": {"type": "integer"}},
                    {"name": "status", "in": "query", "schema": {"type": "string"}},
                ],
                "responses": {"200": {"description": "ok"}},
            },
            "post": {
                "summary": "Create user",
                "requestBody": {
                    "content": {
                        "application/json": {
                            "schema": {
                                "type": "object",
                                "required": ["email"],
                                "properties": {
                                    "email": {"type": "string"},
                                    "nickname": {"type": "string", "nullable": True},
                                },
                            }
                        }
                    }
                },
                "responses": {"201": {"description": "created"}},
            },
        },
        "/users/{id}/posts/{postId}": {
            "parameters": [
                {"name": "id", "in": "path", "schema": {"type": "string"}},
            ],
            "get": {
                "parameters": [
                    {"name": "postId", "in": "path", "schema": {"type": "string"}},
                ],
                "responses": {"200": {"description": "ok"}},
            },
        },
        "/health": {
            "get": {
                "summary": "Health check",
                "responses": {"200": {"description": "ok"}},
            },
        },
    },
}


@pytest.fixture
def users_document() -> Dict[str, Any]:
    return copy.deepcopy(USERS_DOCUMENT)


@pytest.fixture
def proxy_settings() -> ProxySettings:
    return ProxySettings(base_url="https://proxy.test", project_id="proj-1")


@pytest.fixture
def spec_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "openapi"
    directory.mkdir()
    return directory


def write_spec(directory: Path, file_name: str, document: Dict[str, Any]) -> Path:
    path = directory / file_name
    if file_name.endswith(('.yml', '.yaml')):
        path.write_text(yaml.safe_dump(document), encoding='utf-8')
    else:
        path.write_text(json.dumps(document), encoding='utf-8')
    return path
