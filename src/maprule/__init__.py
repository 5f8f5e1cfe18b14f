"""maprule — HTTP mapping rules for API gateway style route matching.

All public types are exported from this module for flat imports:

    from maprule import Method, RestRule

    rule = RestRule.from_pattern("GET", "/accounts/{id}?active={flag}")
    rule.matches_request_line("GET /accounts/42?active=true HTTP/1.1")  # True
"""

__version__ = "0.1.0"

# Config types — see maprule._config for details
from maprule._config import (
    ConfigParseError,
    RuleConfig,
    RuleEntryConfig,
    RuleTableConfig,
    dumps_rule,
    load_rule,
    loads_rule,
    parse_rule_config,
    parse_rule_table_config,
    rule_to_config,
    rule_to_dict,
)

# Pattern compiler
from maprule._escaping import (
    MAX_PATTERN_LENGTH,
    PATH_VALUE_REGEX_S,
    QS_VALUE_REGEX_S,
    START_RE,
    PatternError,
    PatternTooLargeError,
    RegexError,
    coalesce_chars,
    path_regex,
    query_string_regex,
    split_path_n_qs,
)
from maprule._method import Method

# Rules
from maprule._rule import PLACEHOLDER_MARKER, HttpLineError, RestRule, split_request_line

# Rule tables
from maprule._table import (
    MAX_TABLE_ENTRIES,
    RuleTable,
    TableEntry,
    TooManyRulesError,
    load_rule_table,
    read_rule_table,
)

__all__ = [
    # Method
    "Method",
    # Rules
    "RestRule",
    "HttpLineError",
    "PLACEHOLDER_MARKER",
    "split_request_line",
    # Pattern compiler
    "path_regex",
    "query_string_regex",
    "split_path_n_qs",
    "coalesce_chars",
    "PatternError",
    "RegexError",
    "PatternTooLargeError",
    "PATH_VALUE_REGEX_S",
    "QS_VALUE_REGEX_S",
    "START_RE",
    "MAX_PATTERN_LENGTH",
    # Config types
    "RuleConfig",
    "RuleEntryConfig",
    "RuleTableConfig",
    "ConfigParseError",
    "parse_rule_config",
    "parse_rule_table_config",
    "load_rule",
    "rule_to_config",
    "rule_to_dict",
    "dumps_rule",
    "loads_rule",
    # Rule tables
    "TableEntry",
    "RuleTable",
    "TooManyRulesError",
    "load_rule_table",
    "read_rule_table",
    "MAX_TABLE_ENTRIES",
]
