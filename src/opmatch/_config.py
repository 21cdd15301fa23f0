"""Config types for config-driven parser construction.

The same JSON/YAML shape loads an operation table or a joiner:
  dict → parse_operation_table() → OperationTableConfig → load_operation_table() → OperationTable
  dict → parse_joiner_config() → JoinerConfig → ParserRegistry.load_joined() → JoinedParser

Operation table shape::

    name: petstore
    operations:
      - operation_id: listPets
        method: GET
        path: /pets
      - operation_id: showPetById
        method: GET
        path: /pets/{petId}
      - operation_id: legacy
        path_regex: /v0/.*

Joiner shape::

    parsers: [petstore, admin]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from opmatch._joiner import ParserError
from opmatch.http._table import OperationRoute, OperationTable

if TYPE_CHECKING:
    from opmatch.http._table import PathType

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Limits
# ═══════════════════════════════════════════════════════════════════════════════

MAX_OPERATIONS = 4096
MAX_PATTERN_LENGTH = 8192
MAX_REGEX_PATTERN_LENGTH = 4096

# ═══════════════════════════════════════════════════════════════════════════════
# Error types
# ═══════════════════════════════════════════════════════════════════════════════


class ConfigParseError(ParserError):
    """Error parsing a config dict into config types."""


class TooManyOperationsError(ParserError):
    """Operation table has too many routes (width-based limit)."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many operations: {count} exceeds maximum {max_}")


class PatternTooLongError(ParserError):
    """A path pattern exceeds the length limit."""

    def __init__(self, length: int, max_: int) -> None:
        self.length = length
        self.max = max_
        super().__init__(f"pattern length {length} exceeds maximum {max_}")


# ═══════════════════════════════════════════════════════════════════════════════
# Config types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class OperationConfig:
    """One operation entry: id, optional method, path rule."""

    operation_id: str
    path: str
    path_type: PathType
    method: str | None = None


@dataclass(frozen=True, slots=True)
class OperationTableConfig:
    """Configuration for an OperationTable."""

    operations: tuple[OperationConfig, ...]
    name: str = "operations"


@dataclass(frozen=True, slots=True)
class JoinerConfig:
    """Ordered names of registered parsers to join."""

    parsers: tuple[str, ...]


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════


def parse_operation_table(data: dict[str, Any]) -> OperationTableConfig:
    """Parse a dict into an OperationTableConfig.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_operations = data.get("operations")
    if raw_operations is None:
        msg = "missing required field 'operations'"
        raise ConfigParseError(msg)
    if not isinstance(raw_operations, list):
        msg = f"'operations' must be a list, got {type(raw_operations).__name__}"
        raise ConfigParseError(msg)

    name = data.get("name", "operations")
    if not isinstance(name, str) or not name:
        msg = f"'name' must be a non-empty string, got {name!r}"
        raise ConfigParseError(msg)

    operations = tuple(_parse_operation(op) for op in raw_operations)
    return OperationTableConfig(operations=operations, name=name)


def parse_joiner_config(data: dict[str, Any]) -> JoinerConfig:
    """Parse a dict into a JoinerConfig.

    Raises:
        ConfigParseError: If the dict is malformed or names no parsers.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_parsers = data.get("parsers")
    if raw_parsers is None:
        msg = "missing required field 'parsers'"
        raise ConfigParseError(msg)
    if not isinstance(raw_parsers, list):
        msg = f"'parsers' must be a list, got {type(raw_parsers).__name__}"
        raise ConfigParseError(msg)
    if not raw_parsers:
        msg = "'parsers' must name at least one parser"
        raise ConfigParseError(msg)

    for name in raw_parsers:
        if not isinstance(name, str) or not name:
            msg = f"parser names must be non-empty strings, got {name!r}"
            raise ConfigParseError(msg)

    return JoinerConfig(parsers=tuple(raw_parsers))


def _parse_operation(data: dict[str, Any]) -> OperationConfig:
    """Parse an operation entry.

    Enforces oneof: exactly one of path or path_regex.
    """
    if not isinstance(data, dict):
        msg = f"operation must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    operation_id = data.get("operation_id")
    if operation_id is None:
        msg = "operation missing required field 'operation_id'"
        raise ConfigParseError(msg)
    if not isinstance(operation_id, str) or not operation_id:
        msg = f"operation_id must be a non-empty string, got {operation_id!r}"
        raise ConfigParseError(msg)

    method = data.get("method")
    if method is not None and not isinstance(method, str):
        msg = f"method must be a string, got {type(method).__name__}"
        raise ConfigParseError(msg)

    has_path = "path" in data
    has_regex = "path_regex" in data
    if has_path and has_regex:
        msg = f"operation {operation_id!r}: exactly one of 'path' or 'path_regex' must be set, got both"
        raise ConfigParseError(msg)
    if not has_path and not has_regex:
        msg = f"operation {operation_id!r}: one of 'path' or 'path_regex' is required"
        raise ConfigParseError(msg)

    path = data["path"] if has_path else data["path_regex"]
    if not isinstance(path, str):
        msg = f"operation {operation_id!r}: path must be a string, got {type(path).__name__}"
        raise ConfigParseError(msg)

    path_type: PathType
    if has_regex:
        path_type = "RegularExpression"
    elif "{" in path or "}" in path:
        path_type = "Template"
    else:
        path_type = "Exact"

    return OperationConfig(
        operation_id=operation_id,
        path=path,
        path_type=path_type,
        method=method,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Loading (config types → runtime)
# ═══════════════════════════════════════════════════════════════════════════════


def load_operation_table(config: OperationTableConfig) -> OperationTable:
    """Load an OperationTable from configuration.

    Raises:
        TooManyOperationsError: too many routes
        PatternTooLongError: a path rule exceeds its length limit
        ParserError: a path rule does not compile
    """
    if len(config.operations) > MAX_OPERATIONS:
        raise TooManyOperationsError(len(config.operations), MAX_OPERATIONS)

    routes = []
    for op in config.operations:
        _check_pattern_length(op.path_type, op.path)
        routes.append(
            OperationRoute(
                operation_id=op.operation_id,
                path=op.path,
                method=op.method,
                path_type=op.path_type,
            )
        )

    table = OperationTable(routes=tuple(routes), name=config.name)
    logger.debug("loaded operation table %r with %d routes", table.name, len(table))
    return table


def _check_pattern_length(path_type: PathType, value: str) -> None:
    if path_type == "RegularExpression":
        if len(value) > MAX_REGEX_PATTERN_LENGTH:
            raise PatternTooLongError(len(value), MAX_REGEX_PATTERN_LENGTH)
    elif len(value) > MAX_PATTERN_LENGTH:
        raise PatternTooLongError(len(value), MAX_PATTERN_LENGTH)
