"""Named parser registry for config-driven joining.

- ParserRegistryBuilder → .build() → ParserRegistry (immutable)
- load_joined() turns a JoinerConfig (ordered names) into a JoinedParser

Example::

    registry = (
        ParserRegistryBuilder()
        .parser("petstore", petstore_table)
        .parser("admin", AdminApiParser)
        .build()
    )
    parser = registry.load_joined(parse_joiner_config({"parsers": ["admin", "petstore"]}))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from opmatch._joiner import JoinedParser, ParserError, join_parsers

if TYPE_CHECKING:
    from opmatch._config import JoinerConfig
    from opmatch._types import RequestParser

logger = logging.getLogger(__name__)

MAX_JOINED_PARSERS = 256


class UnknownParserError(ParserError):
    """A parser name was not found in the registry."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.name = name
        self.available = sorted(available)
        if self.available:
            registered = ", ".join(self.available)
            msg = f"unknown parser: {name!r} (registered: {registered})"
        else:
            msg = f"unknown parser: {name!r} (no parsers are registered)"
        super().__init__(msg)


class DuplicateParserError(ParserError):
    """A parser name was registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"parser {name!r} is already registered")


class TooManyParsersError(ParserError):
    """Joiner config names too many parsers (width-based limit)."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many parsers to join: {count} exceeds maximum {max_}")


class ParserRegistryBuilder[Req]:
    """Builder for constructing a ParserRegistry.

    Register parsers (instances or stateless parser types) under names,
    then call build() to produce an immutable ParserRegistry.
    """

    def __init__(self) -> None:
        self._parsers: dict[str, RequestParser[Req]] = {}

    def parser(self, name: str, parser: RequestParser[Req]) -> ParserRegistryBuilder[Req]:
        """Register a parser under a name."""
        if name in self._parsers:
            raise DuplicateParserError(name)
        self._parsers[name] = parser
        return self

    def build(self) -> ParserRegistry[Req]:
        """Freeze the registry. No further registration is possible."""
        registry = ParserRegistry(_parsers=MappingProxyType(dict(self._parsers)))
        logger.debug("built parser registry: %s", ", ".join(registry.names()))
        return registry


@dataclass(frozen=True, slots=True)
class ParserRegistry[Req]:
    """Immutable name → parser mapping."""

    _parsers: MappingProxyType[str, RequestParser[Req]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def get(self, name: str) -> RequestParser[Req]:
        """Look up a parser by name.

        Raises:
            UnknownParserError: name not registered
        """
        parser = self._parsers.get(name)
        if parser is None:
            raise UnknownParserError(name, list(self._parsers.keys()))
        return parser

    def contains(self, name: str) -> bool:
        return name in self._parsers

    def names(self) -> list[str]:
        """Return all registered parser names (sorted)."""
        return sorted(self._parsers.keys())

    def load_joined(self, config: JoinerConfig) -> JoinedParser[Req]:
        """Join the named parsers in the configured order.

        Raises:
            UnknownParserError: a name is not registered
            TooManyParsersError: too many names
            ParserError: no names given
        """
        if len(config.parsers) > MAX_JOINED_PARSERS:
            raise TooManyParsersError(len(config.parsers), MAX_JOINED_PARSERS)
        return join_parsers(*(self.get(name) for name in config.parsers))

    def __len__(self) -> int:
        return len(self._parsers)
