"""Compiled tool and request descriptors."""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

PARAMETER_LOCATIONS = ('query', 'path', 'header', 'cookie')

# {name} tokens in a path template
PATH_TOKEN = re.compile(r'\{(\w+)\}')


@dataclass(frozen=True)
class ParameterSpec:
    """A declared operation parameter, as much as the executor needs of it."""
    name: str
    location: str  # query, path, header, cookie
    required: bool = False

    @classmethod
    def from_openapi(cls, param: Dict[str, Any]) -> "ParameterSpec":
        location = param.get('in', 'query')
        # Path params always required
        required = location == 'path' or bool(param.get('required', False))
        return cls(name=param['name'], location=location, required=required)


@dataclass(frozen=True)
class RequestDescriptor:
    """How to rebuild the HTTP request behind one compiled tool."""
    method: str
    path: str
    parameters: Tuple[ParameterSpec, ...] = ()
    base_url: Optional[str] = None

    def query_parameters(self) -> List[ParameterSpec]:
        return [p for p in self.parameters if p.location == 'query']


@dataclass(frozen=True)
class ToolDescriptor:
    """A uniform, schema-described callable derived from one operation."""
    name: str
    integration_id: Optional[str]
    integration_name: str
    description: str
    input_schema: Dict[str, Any]
    required_fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Orchestrator-facing form."""
        return {
            "isOpenApiTool": True,
            "integrationName": self.integration_name,
            "integrationId": self.integration_id,
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "requiredFields": list(self.required_fields),
        }


@dataclass(frozen=True)
class Action:
    """A runtime invocation target."""
    name: str
    integration_name: str
    integration_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Action":
        return cls(
            name=data['name'],
            integration_name=data['integrationName'],
            integration_id=data.get('integrationId'),
        )


@dataclass
class ActionArguments:
    """Call-time arguments: ``params`` by parameter name plus an optional JSON ``body``."""
    params: Dict[str, Any] = field(default_factory=dict)
    body: Any = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ActionArguments":
        data = data or {}
        return cls(params=dict(data.get('params') or {}), body=data.get('body'))

    def to_dict(self) -> Dict[str, Any]:
        return {"params": self.params, "body": self.body}
