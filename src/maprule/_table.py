"""RuleTable — ordered mapping rules with first-match-wins semantics.

Entries are evaluated in order and the action of the first rule that
matches is returned. If nothing matches, the on_no_match fallback is
returned (None when unset).

Tables are immutable after construction, like the rules they hold.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import yaml

from maprule._config import (
    ConfigParseError,
    RuleTableConfig,
    load_rule,
    parse_rule_table_config,
)
from maprule._method import Method
from maprule._rule import split_request_line

if TYPE_CHECKING:
    from maprule._rule import RestRule

logger = logging.getLogger(__name__)

A = TypeVar("A")

MAX_TABLE_ENTRIES = 4096


class TooManyRulesError(ValueError):
    """A table has more entries than MAX_TABLE_ENTRIES."""

    def __init__(self, count: int, max_: int) -> None:
        self.count = count
        self.max = max_
        super().__init__(f"too many rules: {count} exceeds maximum {max_}")


@dataclass(frozen=True, slots=True)
class TableEntry(Generic[A]):
    """Pairs a compiled rule with the action it yields."""

    rule: RestRule
    action: A


@dataclass(frozen=True, slots=True)
class RuleTable(Generic[A]):
    """Ordered rules, first match wins.

    Raises:
        TooManyRulesError: At construction, if there are too many entries.
    """

    entries: tuple[TableEntry[A], ...]
    on_no_match: A | None = None

    def __post_init__(self) -> None:
        if len(self.entries) > MAX_TABLE_ENTRIES:
            raise TooManyRulesError(len(self.entries), MAX_TABLE_ENTRIES)

    def evaluate(self, method: Method | str, path_n_qs: str) -> A | None:
        method = Method.parse(method)
        for entry in self.entries:
            if entry.rule.matches(method, path_n_qs):
                return entry.action
        return self.on_no_match

    def evaluate_request_line(self, line: str) -> A | None:
        """Evaluate a ``METHOD path?query HTTP/x.y`` line.

        Raises:
            HttpLineError: If the line has no path token.
        """
        method, path_n_qs = split_request_line(line)
        return self.evaluate(method, path_n_qs)

    def matching(self, method: Method | str, path_n_qs: str) -> list[A]:
        """Actions of every matching entry, in table order."""
        method = Method.parse(method)
        return [e.action for e in self.entries if e.rule.matches(method, path_n_qs)]

    def __len__(self) -> int:
        return len(self.entries)


def load_rule_table(config: RuleTableConfig[A]) -> RuleTable[A]:
    """Compile every rule in a table config.

    Raises:
        ConfigParseError: If any rule fails to compile.
        TooManyRulesError: If the table is too large.
    """
    if len(config.rules) > MAX_TABLE_ENTRIES:
        raise TooManyRulesError(len(config.rules), MAX_TABLE_ENTRIES)
    entries = []
    for idx, entry in enumerate(config.rules):
        try:
            rule = load_rule(entry.rule)
        except ConfigParseError as e:
            msg = f"rules[{idx}]: {e}"
            raise ConfigParseError(msg) from e
        entries.append(TableEntry(rule, entry.action))
    logger.debug("loaded rule table with %d entries", len(entries))
    return RuleTable(tuple(entries), config.on_no_match)


def read_rule_table(path: str | Path) -> RuleTable[Any]:
    """Read a rule table from a YAML or JSON file.

    Files ending in ``.json`` are parsed as JSON, everything else as YAML.

    Raises:
        ConfigParseError: If the file cannot be read as UTF-8, cannot be
            parsed, or holds an invalid rule.
    """
    path = Path(path)
    logger.info("reading rule table from %s", path)
    try:
        with path.open(encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        msg = f"cannot parse {path}: {e}"
        raise ConfigParseError(msg) from e
    return load_rule_table(parse_rule_table_config(data))
