"""Route table loading.

The route file is YAML mapping each URL path to a command template::

    /hello:
      command: echo
      args: [hello]
      allow: [args]
    /env:
      command: env
      envs: [FOO=BAR]
      allow: [envs, callback]

The table is built once at startup and is read-only afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml
from pydantic import ValidationError

from cmdgate.domain.models import CommandSpec

logger = logging.getLogger(__name__)


class RouteTable(Mapping[str, CommandSpec]):
    """Immutable path -> CommandSpec mapping.

    Safe to read from any number of concurrent requests.
    """

    def __init__(self, routes: Mapping[str, CommandSpec] | None = None) -> None:
        self._routes: Mapping[str, CommandSpec] = MappingProxyType(dict(routes or {}))

    def __getitem__(self, path: str) -> CommandSpec:
        return self._routes[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({sorted(self._routes)!r})"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RouteTable:
        """Validate raw route definitions into a RouteTable.

        Raises:
            RouteTableError: If a path or a command definition is invalid.
        """
        routes: dict[str, CommandSpec] = {}
        for path, definition in data.items():
            if not isinstance(path, str) or not path.startswith("/"):
                raise RouteTableError(f"Failed to parse config: route {path!r} must start with '/'")
            if isinstance(definition, CommandSpec):
                routes[path] = definition
                continue
            try:
                routes[path] = CommandSpec.model_validate(definition or {})
            except ValidationError as e:
                raise RouteTableError(f"Failed to parse config: route {path}: {e}") from e
        return cls(routes)


def load_route_table(path: Path | str) -> RouteTable:
    """Read and validate the YAML route file at ``path``.

    Raises:
        RouteTableError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise RouteTableError(f"Failed to read config file: {e}") from e

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise RouteTableError(f"Failed to parse config: {e}") from e
    if not isinstance(data, dict):
        raise RouteTableError("Failed to parse config: top level must be a mapping of paths")

    table = RouteTable.from_dict(data)
    logger.info("Loaded %d route(s) from %s", len(table), path)
    return table


class RouteTableError(Exception):
    """Raised when the route file cannot be loaded."""
