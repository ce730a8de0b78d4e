"""Tool name to request descriptor lookup."""

import logging
import threading
from collections import abc
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .errors import ToolNotFoundError
from .models import RequestDescriptor

logger = logging.getLogger(__name__)


class RequestRegistry(abc.Mapping):
    """Read-only mapping of tool name to RequestDescriptor.

    Built once per load cycle; never mutated afterwards.
    """

    def __init__(self, requests: Optional[Mapping[str, RequestDescriptor]] = None):
        self._requests = MappingProxyType(dict(requests or {}))

    def __getitem__(self, tool_name: str) -> RequestDescriptor:
        return self._requests[tool_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._requests)

    def __len__(self) -> int:
        return len(self._requests)

    def __repr__(self) -> str:
        return f"RequestRegistry({len(self)} tools)"

    def lookup(self, tool_name: str) -> RequestDescriptor:
        try:
            return self._requests[tool_name]
        except KeyError:
            raise ToolNotFoundError(tool_name) from None

    @classmethod
    def merge(cls, *parts: Mapping[str, RequestDescriptor]) -> "RequestRegistry":
        """Combine per-document request maps; later entries win on name collision."""
        merged: Dict[str, RequestDescriptor] = {}
        for part in parts:
            for name, request in part.items():
                if name in merged:
                    logger.warning(f"Tool name collision for {name}, keeping the later definition")
                merged[name] = request
        return cls(merged)


class ToolCatalog:
    """Holds the currently published registry.

    A reload publishes a whole new registry; readers take the reference once
    per call and so always see a single consistent snapshot.
    """

    def __init__(self, registry: Optional[RequestRegistry] = None):
        self._registry = registry if registry is not None else RequestRegistry()
        self._lock = threading.Lock()

    @property
    def registry(self) -> RequestRegistry:
        return self._registry

    def publish(self, registry: RequestRegistry) -> RequestRegistry:
        """Swap in a new registry, returning the one it replaced."""
        with self._lock:
            previous, self._registry = self._registry, registry
        logger.info(f"Published registry with {len(registry)} tools (previously {len(previous)})")
        return previous
