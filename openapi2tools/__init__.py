"""
openapi2tools - OpenAPI specifications as invocable tools

Compiles dereferenced OpenAPI 3.x documents into uniform tool descriptors
(name, description, JSON-Schema input) and executes those tools at runtime
through an authenticated reverse proxy.
"""

from .compiler import CompiledDocument, ToolCompiler
from .config import LoaderSettings, ProxySettings
from .errors import OpenAPIToolsError, SpecParseError, ToolNotFoundError
from .executor import ActionExecutor
from .integrations import CustomIntegration, StandardIntegration, integration_from_dict
from .loader import LoadResult, SpecFailure, SpecLoader, load_tools
from .models import Action, ActionArguments, ParameterSpec, RequestDescriptor, ToolDescriptor
from .registry import RequestRegistry, ToolCatalog

__version__ = "0.1.0"

__all__ = [
    "Action",
    "ActionArguments",
    "ActionExecutor",
    "CompiledDocument",
    "CustomIntegration",
    "LoadResult",
    "LoaderSettings",
    "OpenAPIToolsError",
    "ParameterSpec",
    "ProxySettings",
    "RequestDescriptor",
    "RequestRegistry",
    "SpecFailure",
    "SpecLoader",
    "SpecParseError",
    "StandardIntegration",
    "ToolCatalog",
    "ToolCompiler",
    "ToolDescriptor",
    "ToolNotFoundError",
    "integration_from_dict",
    "load_tools",
]
