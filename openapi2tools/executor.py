"""Execute compiled tools through the authenticated proxy.

The executor never talks to the downstream API. It rebuilds the downstream
URL (path template + query string), hands it to the proxy in a header, and
returns whatever JSON the proxy sends back.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode

import httpx

from .config import ProxySettings
from .integrations import integration_for_action, proxy_route
from .models import PATH_TOKEN, Action, ActionArguments, RequestDescriptor
from .registry import RequestRegistry, ToolCatalog

logger = logging.getLogger(__name__)


def resolve_path(template: str, params: Dict[str, Any]) -> str:
    """Substitute ``{name}`` tokens with raw parameter values.

    Values are inserted verbatim, without URL encoding. Tokens with no value
    are left in place.
    """
    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in params or params[name] is None:
            logger.warning(f"No value for path parameter '{name}' in {template}")
            return match.group(0)
        return _stringify(params[name])

    return PATH_TOKEN.sub(replace, template)


def build_query_string(request: RequestDescriptor, params: Dict[str, Any]) -> str:
    """Query string from the declared query parameters with truthy values."""
    pairs: List[Tuple[str, str]] = [
        (p.name, _stringify(params[p.name]))
        for p in request.query_parameters()
        if params.get(p.name)
    ]
    return urlencode(pairs)


def build_downstream_url(request: RequestDescriptor, params: Dict[str, Any]) -> str:
    url = f"{request.base_url or ''}{resolve_path(request.path, params)}"
    query = build_query_string(request, params)
    return f"{url}?{query}" if query else url


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple)):
        return ','.join(_stringify(v) for v in value)
    return str(value)


class ActionExecutor:
    """Run actions against the registry published in a ToolCatalog."""

    def __init__(self, catalog: Union[ToolCatalog, RequestRegistry], settings: ProxySettings,
                 client: Optional[httpx.AsyncClient] = None):
        if isinstance(catalog, RequestRegistry):
            catalog = ToolCatalog(catalog)
        self.catalog = catalog
        self.settings = settings
        self._client = client

    def build_request(self, action: Union[Action, Dict[str, Any]],
                      args: Union[ActionArguments, Dict[str, Any]], credential: str) -> httpx.Request:
        """Build the proxy request for an action without sending it.

        Raises ToolNotFoundError for an unknown tool.
        """
        if isinstance(action, dict):
            action = Action.from_dict(action)
        if not isinstance(args, ActionArguments):
            args = ActionArguments.from_dict(args)
        request = self.catalog.registry.lookup(action.name)
        params = args.params or {}

        integration = integration_for_action(action.integration_name, action.integration_id)
        proxy_url = proxy_route(integration, self.settings.base_url, self.settings.project_id)
        downstream_url = build_downstream_url(request, params)

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
            self.settings.url_header: downstream_url,
            self.settings.raw_response_header: "true",
        }
        method = request.method.upper()
        # The whole {params, body} envelope goes to the proxy, not just the body
        body = None if method == 'GET' else args.to_dict()

        logger.debug(f"Proxy {method} {proxy_url} -> {downstream_url}")
        return httpx.Request(method, proxy_url, headers=headers, json=body)

    async def execute(self, action: Union[Action, Dict[str, Any]],
                      args: Union[ActionArguments, Dict[str, Any]], credential: str) -> Any:
        """Send the action through the proxy and return the parsed JSON response.

        The response status is not inspected; a body that is not JSON raises.
        """
        http_request = self.build_request(action, args, credential)
        if self._client is not None:
            response = await self._client.send(http_request)
        else:
            async with httpx.AsyncClient(timeout=None) as client:
                response = await client.send(http_request)
        logger.debug(f"Proxy responded {response.status_code} for {http_request.url}")
        return response.json()
