"""Environment-backed configuration."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_SPEC_DIR = "openapi"
DEFAULT_PROXY_URL_HEADER = "X-Paragon-Proxy-Url"
DEFAULT_RAW_RESPONSE_HEADER = "X-Paragon-Use-Raw-Response"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ProxySettings:
    """Where action requests are sent and which headers describe them to the proxy."""
    base_url: str
    project_id: str
    url_header: str = DEFAULT_PROXY_URL_HEADER
    raw_response_header: str = DEFAULT_RAW_RESPONSE_HEADER

    @classmethod
    def from_env(cls, base_url: Optional[str] = None,
                 project_id: Optional[str] = None) -> "ProxySettings":
        base_url = base_url or os.getenv("PROXY_BASE_URL")
        project_id = project_id or os.getenv("PROJECT_ID")
        if not base_url:
            raise ValueError("PROXY_BASE_URL is not set")
        if not project_id:
            raise ValueError("PROJECT_ID is not set")
        return cls(
            base_url=base_url.rstrip('/'),
            project_id=project_id,
            url_header=os.getenv("PROXY_URL_HEADER", DEFAULT_PROXY_URL_HEADER),
            raw_response_header=os.getenv("PROXY_RAW_RESPONSE_HEADER", DEFAULT_RAW_RESPONSE_HEADER),
        )


@dataclass(frozen=True)
class LoaderSettings:
    """Spec discovery settings."""
    spec_dir: Path = Path(DEFAULT_SPEC_DIR)
    concurrency: int = 8
    fail_fast: bool = True

    @classmethod
    def from_env(cls) -> "LoaderSettings":
        return cls(
            spec_dir=Path(os.getenv("OPENAPI_SPEC_DIR", DEFAULT_SPEC_DIR)),
            concurrency=max(1, int(os.getenv("OPENAPI_LOAD_CONCURRENCY", "8"))),
            fail_fast=_env_bool("OPENAPI_FAIL_FAST", True),
        )
