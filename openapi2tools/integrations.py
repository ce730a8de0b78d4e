"""Integration identities and the two decisions made from them.

An integration is either a *standard* one, identified by a type tag such as
``salesforce``, or a *custom* one, identified by a human-readable name and an
id. Spec files are matched to integrations by file name, and actions are
routed to the proxy by integration kind.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Union

CUSTOM_PREFIX = "custom."


@dataclass(frozen=True)
class StandardIntegration:
    """A built-in integration keyed by its type tag."""
    type: str
    id: Optional[str] = None


@dataclass(frozen=True)
class CustomIntegration:
    """A user-defined integration keyed by display name."""
    name: str
    id: str

    @property
    def normalized_name(self) -> str:
        return normalize_custom_name(self.name)


Integration = Union[StandardIntegration, CustomIntegration]


def normalize_custom_name(name: str) -> str:
    """Lower-case a custom integration name and strip its spaces."""
    return name.replace(' ', '').lower()


def integration_from_dict(data: Dict[str, Any]) -> Integration:
    """Build an integration from its loosely-typed JSON form.

    Accepts ``{"type": "hubspot", "id": "..."}`` for standard integrations and
    ``{"type": "custom", "id": "...", "customIntegration": {"name": "..."}}``
    (or a flat ``name`` key) for custom ones.
    """
    kind = data.get('type')
    if not kind:
        raise ValueError(f"Integration has no type: {data!r}")
    if kind == 'custom':
        custom = data.get('customIntegration') or {}
        name = custom.get('name', data.get('name'))
        if not name:
            raise ValueError(f"Custom integration {data.get('id')!r} has no name")
        return CustomIntegration(name=name, id=str(data['id']))
    integration_id = data.get('id')
    return StandardIntegration(type=kind, id=str(integration_id) if integration_id is not None else None)


def matches_file(integration: Integration, file_name: str) -> bool:
    """Whether a spec file belongs to the given integration."""
    if isinstance(integration, StandardIntegration):
        return file_name.split('.')[0] == integration.type
    if isinstance(integration, CustomIntegration):
        return f"{CUSTOM_PREFIX}{integration.normalized_name}" in file_name
    raise TypeError(f"Unknown integration kind: {type(integration).__name__}")


def find_matching_integration(integrations: Iterable[Integration],
                              file_name: str) -> Optional[Integration]:
    for integration in integrations:
        if matches_file(integration, file_name):
            return integration
    return None


def integration_for_action(integration_name: str, integration_id: Optional[str]) -> Integration:
    """Classify the integration an action was compiled for.

    Compiled tools carry the integration name taken from the spec file name,
    so custom integrations are recognised by the ``custom.`` prefix.
    """
    if integration_name.startswith(CUSTOM_PREFIX):
        if not integration_id:
            raise ValueError(f"Custom integration {integration_name} requires an integration id")
        return CustomIntegration(name=integration_name[len(CUSTOM_PREFIX):], id=integration_id)
    return StandardIntegration(type=integration_name, id=integration_id)


def proxy_route(integration: Integration, proxy_base: str, project_id: str) -> str:
    """Proxy URL that requests for this integration are sent to."""
    prefix = f"{proxy_base}/projects/{project_id}/sdk/proxy"
    if isinstance(integration, CustomIntegration):
        return f"{prefix}/custom/{integration.id}"
    if isinstance(integration, StandardIntegration):
        return f"{prefix}/{integration.type}"
    raise TypeError(f"Unknown integration kind: {type(integration).__name__}")
