"""Config types for persisted mapping rules and rule tables.

Config-driven construction path:
  dict → parse_rule_config() → RuleConfig → load_rule() → RestRule
  dict → parse_rule_table_config() → RuleTableConfig → load_rule_table() → RuleTable

A persisted rule is the two-field record ``{"method": ..., "pattern": ...}``
where ``pattern`` is what RestRule.pattern() rebuilds. Loading always
recompiles the pattern text; nothing about the compiled state is stored.

The round trip is lossy: placeholder names come back as ``{_}`` and
duplicate slashes are gone. Matching behaviour is what survives.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from maprule._escaping import PatternError, PatternTooLargeError
from maprule._rule import RestRule

A = TypeVar("A")

# ═══════════════════════════════════════════════════════════════════════════════
# Config types
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Persisted mapping rule: method name and template text."""

    method: str
    pattern: str


@dataclass(frozen=True, slots=True)
class RuleEntryConfig(Generic[A]):
    """A rule table entry: the rule plus the action it yields."""

    rule: RuleConfig
    action: A


@dataclass(frozen=True, slots=True)
class RuleTableConfig(Generic[A]):
    """Configuration for a RuleTable, loaded via load_rule_table()."""

    rules: tuple[RuleEntryConfig[A], ...]
    on_no_match: A | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════

_RULE_FIELDS = ("method", "pattern")


class ConfigParseError(Exception):
    """Error parsing or loading a rule config."""


def parse_rule_config(data: Any) -> RuleConfig:
    """Parse a persisted rule.

    Accepts ``{"method": str, "pattern": str}`` or a two-element
    ``[method, pattern]`` sequence.

    Raises:
        ConfigParseError: If the data is malformed.
    """
    if isinstance(data, Mapping):
        unknown = sorted(set(data) - set(_RULE_FIELDS))
        if unknown:
            msg = f"unknown rule field(s): {unknown}"
            raise ConfigParseError(msg)
        for name in _RULE_FIELDS:
            if name not in data:
                msg = f"rule missing required field {name!r}"
                raise ConfigParseError(msg)
        method, pattern = data["method"], data["pattern"]
    elif isinstance(data, Sequence) and not isinstance(data, str | bytes):
        if len(data) != 2:
            msg = f"rule sequence must have 2 elements (method, pattern), got {len(data)}"
            raise ConfigParseError(msg)
        method, pattern = data
    else:
        msg = f"rule must be a dict or a [method, pattern] list, got {type(data).__name__}"
        raise ConfigParseError(msg)

    for name, value in zip(_RULE_FIELDS, (method, pattern), strict=True):
        if not isinstance(value, str):
            msg = f"rule {name!r} must be a string, got {type(value).__name__}"
            raise ConfigParseError(msg)

    return RuleConfig(method=method, pattern=pattern)


def parse_rule_table_config(data: Any) -> RuleTableConfig[Any]:
    """Parse a rule table.

    Expected shape::

        rules:
          - {method: GET, pattern: "/accounts/{id}", action: read_account}
        on_no_match: fallback

    Raises:
        ConfigParseError: If the data is malformed.
    """
    if not isinstance(data, Mapping):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_rules = data.get("rules")
    if raw_rules is None:
        msg = "missing required field 'rules'"
        raise ConfigParseError(msg)
    if not isinstance(raw_rules, list):
        msg = f"'rules' must be a list, got {type(raw_rules).__name__}"
        raise ConfigParseError(msg)

    rules = tuple(_parse_entry(idx, entry) for idx, entry in enumerate(raw_rules))
    return RuleTableConfig(rules=rules, on_no_match=data.get("on_no_match"))


def _parse_entry(idx: int, data: Any) -> RuleEntryConfig[Any]:
    if not isinstance(data, Mapping):
        msg = f"rules[{idx}] must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    if "action" not in data:
        msg = f"rules[{idx}] missing required field 'action'"
        raise ConfigParseError(msg)

    rule_data = {k: v for k, v in data.items() if k != "action"}
    try:
        rule = parse_rule_config(rule_data)
    except ConfigParseError as e:
        msg = f"rules[{idx}]: {e}"
        raise ConfigParseError(msg) from e
    return RuleEntryConfig(rule=rule, action=data["action"])


# ═══════════════════════════════════════════════════════════════════════════════
# Loading and dumping
# ═══════════════════════════════════════════════════════════════════════════════


def load_rule(config: RuleConfig | Any) -> RestRule:
    """Compile a persisted rule.

    Accepts a RuleConfig or anything parse_rule_config() accepts.

    Raises:
        ConfigParseError: If the data is malformed or the pattern does not compile.
    """
    if not isinstance(config, RuleConfig):
        config = parse_rule_config(config)
    try:
        return RestRule.from_pattern(config.method, config.pattern)
    except PatternTooLargeError as e:
        msg = f"regex requires too much memory: {e}"
        raise ConfigParseError(msg) from e
    except PatternError as e:
        msg = f"regex error: {e}"
        raise ConfigParseError(msg) from e


def rule_to_config(rule: RestRule) -> RuleConfig:
    return RuleConfig(method=rule.method.as_str(), pattern=rule.pattern())


def rule_to_dict(rule: RestRule) -> dict[str, str]:
    config = rule_to_config(rule)
    return {"method": config.method, "pattern": config.pattern}


def dumps_rule(rule: RestRule) -> str:
    """Serialize a rule to compact JSON."""
    return json.dumps(rule_to_dict(rule), separators=(",", ":"))


def loads_rule(text: str) -> RestRule:
    """Deserialize and recompile a rule from JSON.

    Raises:
        ConfigParseError: If the JSON is invalid or the rule does not compile.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"invalid JSON: {e}"
        raise ConfigParseError(msg) from e
    return load_rule(data)
