"""Compile dereferenced OpenAPI documents into tool descriptors.

Each operation (path + HTTP method) becomes one tool:

- an input schema with at most two top-level properties, ``params`` (every
  declared parameter) and ``body`` (the JSON request body),
- a request descriptor telling the executor how to rebuild the HTTP call,
- a name derived from the integration name and the operation summary.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .models import PARAMETER_LOCATIONS, PATH_TOKEN, ParameterSpec, RequestDescriptor, ToolDescriptor
from .schema import from_parameter, from_schema

logger = logging.getLogger(__name__)

HTTP_METHODS = ('get', 'put', 'post', 'delete', 'options', 'head', 'patch', 'trace')


@dataclass
class CompiledDocument:
    """Tools and their request descriptors produced from one document."""
    integration_name: str
    tools: List[ToolDescriptor] = field(default_factory=list)
    requests: Dict[str, RequestDescriptor] = field(default_factory=dict)


def tool_name_for(integration_name: str, display_name: str) -> str:
    """``custom.acme`` + ``List users`` -> ``CUSTOM_ACME_LIST_USERS``."""
    prefix = '_'.join(integration_name.split('.')).upper()
    suffix = '_'.join(display_name.split(' ')).upper()
    return f"{prefix}_{suffix}"


def display_name_for(method: str, path: str, operation: Dict[str, Any]) -> str:
    summary = operation.get('summary')
    if summary:
        return summary
    return f"{method.upper()} {path}"


def extract_base_url(document: Dict[str, Any]) -> Optional[str]:
    """First server URL with its variables replaced by their defaults."""
    servers = document.get('servers') or []
    if not servers or not servers[0].get('url'):
        return None
    server = servers[0]
    url = server['url']
    for var_name, var_def in (server.get('variables') or {}).items():
        url = url.replace(f'{{{var_name}}}', str(var_def.get('default', '')))
    return url


class ToolCompiler:
    """Turn one dereferenced OpenAPI 3.x document into tools."""

    def compile(self, document: Dict[str, Any], integration_name: str,
                integration_id: Optional[str] = None) -> CompiledDocument:
        compiled = CompiledDocument(integration_name=integration_name)
        paths = document.get('paths') or {}
        base_url = extract_base_url(document)

        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue
            path_params = path_item.get('parameters') or []

            for method, operation in path_item.items():
                if method.lower() not in HTTP_METHODS or not isinstance(operation, dict):
                    continue
                tool, request = self._compile_operation(
                    path, method.lower(), operation, path_params,
                    base_url, integration_name, integration_id,
                )
                if tool.name in compiled.requests:
                    logger.warning(f"Duplicate tool name {tool.name} in {integration_name}, "
                                   f"{method.upper()} {path} replaces the earlier operation")
                    compiled.tools = [t for t in compiled.tools if t.name != tool.name]
                compiled.requests[tool.name] = request
                compiled.tools.append(tool)

        logger.info(f"Compiled {len(compiled.tools)} tools from {len(paths)} paths for {integration_name}")
        return compiled

    def _compile_operation(self, path: str, method: str, operation: Dict[str, Any],
                           path_params: List[Dict[str, Any]], base_url: Optional[str],
                           integration_name: str,
                           integration_id: Optional[str]) -> Tuple[ToolDescriptor, RequestDescriptor]:
        parameters = self._merge_parameters(path_params, operation.get('parameters') or [], method, path)

        params_schema = self._build_params_schema(parameters)
        body_schema = self._build_body_schema(operation.get('requestBody'))

        properties: Dict[str, Any] = {}
        required_fields: List[str] = []
        if params_schema['properties']:
            properties['params'] = params_schema
            required_fields.append('params')
        if body_schema is not None and body_schema.get('properties'):
            properties['body'] = body_schema
            required_fields.append('body')

        display_name = display_name_for(method, path, operation)
        name = tool_name_for(integration_name, display_name)
        description = operation.get('description')

        tool = ToolDescriptor(
            name=name,
            integration_id=integration_id,
            integration_name=integration_name,
            description=f"{display_name} - {description}" if description else display_name,
            input_schema={
                'type': 'object',
                'properties': properties,
                'required': list(required_fields),
            },
            required_fields=required_fields,
        )
        request = RequestDescriptor(
            method=method,
            path=path,
            parameters=tuple(ParameterSpec.from_openapi(p) for p in parameters),
            base_url=base_url,
        )
        return tool, request

    def _merge_parameters(self, path_params: List[Dict[str, Any]],
                          operation_params: List[Dict[str, Any]],
                          method: str, path: str) -> List[Dict[str, Any]]:
        """Path-item parameters overridden by operation parameters of the same name and location."""
        merged: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for param in list(path_params) + list(operation_params):
            name = param.get('name')
            location = param.get('in', 'query')
            if not name:
                continue
            if location not in PARAMETER_LOCATIONS:
                logger.warning(f"Skipping parameter '{name}' of {method.upper()} {path}: "
                               f"unsupported location '{location}'")
                continue
            merged[(name, location)] = param

        declared_path = {name for name, location in merged if location == 'path'}
        missing = set(PATH_TOKEN.findall(path)) - declared_path
        if missing:
            logger.warning(f"Missing path parameter definitions for {method.upper()} {path}: {sorted(missing)}")
        return list(merged.values())

    def _build_params_schema(self, parameters: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            'type': 'object',
            'properties': {p['name']: from_parameter(p) for p in parameters},
            'required': [
                p['name'] for p in parameters
                if p.get('required') or p.get('in') == 'path'
            ],
        }

    def _build_body_schema(self, request_body: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if not isinstance(request_body, dict):
            return None
        content = request_body.get('content') or {}
        if 'application/json' not in content:
            return None
        return from_schema(content['application/json'].get('schema') or {})
