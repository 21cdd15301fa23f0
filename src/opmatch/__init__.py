"""opmatch — Resolve HTTP requests to API operation identifiers.

All public types are exported from this module for flat imports:

    from opmatch import RequestParser, JoinedParser, join_parsers
"""

__version__ = "0.1.0"

# Config types — see opmatch._config for details
from opmatch._config import (
    MAX_OPERATIONS,
    MAX_PATTERN_LENGTH,
    MAX_REGEX_PATTERN_LENGTH,
    ConfigParseError,
    JoinerConfig,
    OperationConfig,
    OperationTableConfig,
    PatternTooLongError,
    TooManyOperationsError,
    load_operation_table,
    parse_joiner_config,
    parse_operation_table,
)

# Composition
from opmatch._joiner import (
    JoinedParser,
    ParserError,
    first_match,
    join_parsers,
    request_parser_joiner,
)

# Registry — see opmatch._registry for details
from opmatch._registry import (
    MAX_JOINED_PARSERS,
    DuplicateParserError,
    ParserRegistry,
    ParserRegistryBuilder,
    TooManyParsersError,
    UnknownParserError,
)

# Protocols
from opmatch._types import OperationId, ParseResult, RequestParser
from opmatch.stats import OperationStats

__all__ = [
    # Protocols
    "OperationId",
    "ParseResult",
    "RequestParser",
    # Composition
    "JoinedParser",
    "ParserError",
    "first_match",
    "join_parsers",
    "request_parser_joiner",
    # Statistics
    "OperationStats",
    # Config types
    "OperationConfig",
    "OperationTableConfig",
    "JoinerConfig",
    "ConfigParseError",
    "TooManyOperationsError",
    "PatternTooLongError",
    "parse_operation_table",
    "parse_joiner_config",
    "load_operation_table",
    "MAX_OPERATIONS",
    "MAX_PATTERN_LENGTH",
    "MAX_REGEX_PATTERN_LENGTH",
    # Registry
    "ParserRegistryBuilder",
    "ParserRegistry",
    "UnknownParserError",
    "DuplicateParserError",
    "TooManyParsersError",
    "MAX_JOINED_PARSERS",
]
