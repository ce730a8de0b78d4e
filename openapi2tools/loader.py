"""Discover, parse, dereference and compile the OpenAPI specs of known integrations.

Spec files live in one directory and are named after the integration they
describe: ``<integrationType>.<ext>`` for standard integrations and
``custom.<normalizedName>.<ext>`` for custom ones.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import yaml
from prance.util.resolver import RefResolver

from .compiler import CompiledDocument, ToolCompiler
from .config import LoaderSettings
from .errors import SpecParseError
from .integrations import CustomIntegration, Integration, find_matching_integration
from .models import ToolDescriptor
from .registry import RequestRegistry

logger = logging.getLogger(__name__)

SPEC_EXTENSIONS = ('.json', '.yml', '.yaml')


@dataclass(frozen=True)
class SpecFile:
    """A spec file matched to its integration."""
    path: Path
    integration: Integration

    @property
    def integration_name(self) -> str:
        # File name without its final extension, e.g. custom.acme.yml -> custom.acme
        return self.path.stem

    @property
    def integration_id(self) -> Optional[str]:
        return self.integration.id


@dataclass(frozen=True)
class SpecFailure:
    """A spec file that could not be loaded."""
    file_name: str
    integration_name: str
    error: BaseException


@dataclass
class LoadResult:
    tools: List[ToolDescriptor] = field(default_factory=list)
    registry: RequestRegistry = field(default_factory=RequestRegistry)
    failures: List[SpecFailure] = field(default_factory=list)


def parse_spec_text(content: str, file_name: str) -> Dict[str, Any]:
    """Parse spec text as YAML or JSON depending on the file extension."""
    try:
        if file_name.endswith(('.yaml', '.yml')):
            document = yaml.safe_load(content)
        else:
            document = json.loads(content)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise SpecParseError(file_name, str(e)) from e

    if not isinstance(document, dict):
        raise SpecParseError(file_name, f"expected a mapping, got {type(document).__name__}")
    return document


def _placeholder_on_recursion(limit, parsed_url, recursions=()):
    # Self-referencing schemas are cut off at the recursion point
    return {}


def dereference_spec(document: Dict[str, Any], source: Path) -> Dict[str, Any]:
    """Resolve every $ref in the document with prance.

    ``source`` is the base for relative external references. The document is
    not validated; recursive references resolve to an empty schema.
    """
    resolver = RefResolver(
        document,
        source.absolute().as_uri(),
        recursion_limit_handler=_placeholder_on_recursion,
        strict=False,
    )
    resolver.resolve_references()
    return resolver.specs


class SpecLoader:
    """Turn the spec directory into tools and a request registry."""

    def __init__(self, settings: Optional[LoaderSettings] = None,
                 compiler: Optional[ToolCompiler] = None,
                 dereference: Optional[Callable[[Dict[str, Any], Path], Dict[str, Any]]] = None):
        self.settings = settings or LoaderSettings()
        self.compiler = compiler or ToolCompiler()
        self.dereference = dereference

    def discover(self, integrations: Sequence[Integration]) -> List[SpecFile]:
        """Match spec files to integrations; unmatched files are skipped.

        Raises FileNotFoundError when the spec directory does not exist.
        """
        spec_dir = self.settings.spec_dir
        if not spec_dir.is_dir():
            raise FileNotFoundError(f"Specification directory not found: {spec_dir}")

        spec_files = []
        for path in sorted(spec_dir.iterdir()):
            if not path.is_file() or path.suffix not in SPEC_EXTENSIONS:
                continue
            integration = find_matching_integration(integrations, path.name)
            if integration is None:
                logger.debug(f"Skipping {path.name}: no matching integration")
                continue
            spec_files.append(SpecFile(path=path, integration=integration))
        return spec_files

    def read_spec(self, spec_file: SpecFile) -> Dict[str, Any]:
        content = spec_file.path.read_text(encoding='utf-8')
        return parse_spec_text(content, spec_file.path.name)

    def compile_file(self, spec_file: SpecFile) -> CompiledDocument:
        """Read, dereference and compile one spec file."""
        kind = 'custom' if isinstance(spec_file.integration, CustomIntegration) else 'standard'
        logger.info(f"Loading {kind} spec {spec_file.path.name} as {spec_file.integration_name}")
        document = self.read_spec(spec_file)
        dereference = self.dereference or dereference_spec
        resolved = dereference(document, spec_file.path)
        return self.compiler.compile(resolved, spec_file.integration_name, spec_file.integration_id)

    async def load(self, integrations: Sequence[Integration]) -> LoadResult:
        """Load every matching spec concurrently.

        A missing spec directory yields an empty result. With ``fail_fast``
        the first failing file aborts the whole load and its exception
        propagates; otherwise failures are collected on the result.
        """
        try:
            spec_files = self.discover(integrations)
        except FileNotFoundError as e:
            logger.error(f"Custom OpenAPI tools were enabled, but the spec directory was not found: {e}")
            return LoadResult()

        semaphore = asyncio.Semaphore(self.settings.concurrency)

        async def run(spec_file: SpecFile) -> CompiledDocument:
            async with semaphore:
                return await asyncio.to_thread(self.compile_file, spec_file)

        if self.settings.fail_fast:
            documents = await asyncio.gather(*(run(f) for f in spec_files))
            return self._assemble(documents, [])

        outcomes = await asyncio.gather(*(run(f) for f in spec_files), return_exceptions=True)
        documents = []
        failures = []
        for spec_file, outcome in zip(spec_files, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(f"Failed to load {spec_file.path.name}: {outcome}")
                failures.append(SpecFailure(
                    file_name=spec_file.path.name,
                    integration_name=spec_file.integration_name,
                    error=outcome,
                ))
            else:
                documents.append(outcome)
        return self._assemble(documents, failures)

    def _assemble(self, documents: List[CompiledDocument], failures: List[SpecFailure]) -> LoadResult:
        # Later documents win on tool name collisions, in the registry and the tool list alike
        tools: Dict[str, ToolDescriptor] = {}
        for document in documents:
            for tool in document.tools:
                tools.pop(tool.name, None)
                tools[tool.name] = tool
        registry = RequestRegistry.merge(*(d.requests for d in documents))
        logger.info(f"Loaded {len(tools)} tools from {len(documents)} specs ({len(failures)} failed)")
        return LoadResult(tools=list(tools.values()), registry=registry, failures=failures)


def load_tools(integrations: Sequence[Integration],
               settings: Optional[LoaderSettings] = None) -> LoadResult:
    """Synchronous convenience wrapper around SpecLoader.load."""
    return asyncio.run(SpecLoader(settings).load(integrations))
