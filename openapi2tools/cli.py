#!/usr/bin/env python3
"""
Command line for compiling OpenAPI specs into tools and invoking them

Usage:
    openapi2tools tools --integrations integrations.json --spec-dir openapi
    openapi2tools invoke CUSTOM_ACME_LIST_USERS --integrations integrations.json \\
        --integration-name custom.acme --integration-id 1234 \\
        --params '{"limit": 10}' --token "$PROXY_TOKEN"

The integrations file is a JSON list such as::

    [{"type": "hubspot", "id": "a1"},
     {"type": "custom", "id": "b2", "customIntegration": {"name": "Acme API"}}]
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .config import LoaderSettings, ProxySettings
from .errors import OpenAPIToolsError
from .executor import ActionExecutor
from .integrations import Integration, integration_from_dict
from .loader import SpecLoader
from .models import Action, ActionArguments
from .registry import ToolCatalog

logger = logging.getLogger(__name__)


def read_integrations(path: str) -> List[Integration]:
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Integrations file must contain a JSON list: {path}")
    return [integration_from_dict(item) for item in data]


def _json_argument(value: Optional[str], name: str):
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"--{name} is not valid JSON: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="openapi2tools",
        description="Compile OpenAPI specifications into tools and execute them through a proxy",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging (even more verbose)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_load_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--integrations", type=str, required=True,
                         help="JSON file listing the known integrations")
        sub.add_argument("--spec-dir", type=str,
                         help="Directory of spec files (default: $OPENAPI_SPEC_DIR or ./openapi)")
        sub.add_argument("--concurrency", type=int,
                         help="Maximum number of specs loaded at once")
        sub.add_argument("--keep-going", action="store_true",
                         help="Skip spec files that fail instead of aborting the load")

    tools_parser = subparsers.add_parser("tools", help="Print the compiled tool descriptors as JSON")
    add_load_options(tools_parser)

    invoke_parser = subparsers.add_parser("invoke", help="Execute one tool through the proxy")
    add_load_options(invoke_parser)
    invoke_parser.add_argument("name", type=str, help="Tool name")
    invoke_parser.add_argument("--integration-name", type=str, required=True,
                               help="Integration name of the tool, e.g. custom.acme or hubspot")
    invoke_parser.add_argument("--integration-id", type=str, help="Integration id")
    invoke_parser.add_argument("--params", type=str, help="JSON object of parameters")
    invoke_parser.add_argument("--body", type=str, help="JSON request body")
    invoke_parser.add_argument("--token", type=str, default=os.getenv("PROXY_TOKEN"),
                               help="Bearer credential for the proxy (default: $PROXY_TOKEN)")
    invoke_parser.add_argument("--proxy-url", type=str, help="Proxy base URL (default: $PROXY_BASE_URL)")
    invoke_parser.add_argument("--project-id", type=str, help="Project id (default: $PROJECT_ID)")

    return parser


def loader_settings(args: argparse.Namespace) -> LoaderSettings:
    settings = LoaderSettings.from_env()
    return LoaderSettings(
        spec_dir=Path(args.spec_dir) if args.spec_dir else settings.spec_dir,
        concurrency=args.concurrency or settings.concurrency,
        fail_fast=settings.fail_fast and not args.keep_going,
    )


async def run_tools(args: argparse.Namespace) -> int:
    integrations = read_integrations(args.integrations)
    result = await SpecLoader(loader_settings(args)).load(integrations)

    print(json.dumps([tool.to_dict() for tool in result.tools], indent=2))
    for failure in result.failures:
        print(f"Failed to load {failure.file_name}: {failure.error}", file=sys.stderr)
    return 1 if result.failures else 0


async def run_invoke(args: argparse.Namespace) -> int:
    if not args.token:
        raise ValueError("A proxy credential is required (--token or $PROXY_TOKEN)")

    integrations = read_integrations(args.integrations)
    result = await SpecLoader(loader_settings(args)).load(integrations)
    catalog = ToolCatalog(result.registry)

    executor = ActionExecutor(catalog, ProxySettings.from_env(args.proxy_url, args.project_id))
    action = Action(name=args.name, integration_name=args.integration_name,
                    integration_id=args.integration_id)
    arguments = ActionArguments(params=_json_argument(args.params, "params") or {},
                                body=_json_argument(args.body, "body"))

    response = await executor.execute(action, arguments, args.token)
    print(json.dumps(response, indent=2))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI usage."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=logging.WARNING,
    )
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.verbose:
        logging.getLogger().setLevel(logging.INFO)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    try:
        if args.command == "tools":
            return asyncio.run(run_tools(args))
        return asyncio.run(run_invoke(args))
    except (OpenAPIToolsError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
