"""RestRule — a compiled HTTP mapping rule.

A rule pairs a Method with a compiled path pattern and, optionally, one
compiled pattern per query string template segment. Matching semantics:

- Methods compare with the wildcard-aware relation (ANY matches anything).
- The path pattern is a prefix test unless the template ends in ``$``.
  Candidate paths are slash-coalesced before matching.
- Without a query template every query string matches. With one, each
  template segment, in template order, consumes the first still-unconsumed
  candidate segment it matches. A missing match fails the whole rule.
  Extra candidate segments are ignored.

The query assignment is greedy. With overlapping templates it can reject a
query string that another assignment would accept; this mirrors the
gateway behaviour being approximated.

Rules are immutable after construction and safe to share between threads.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from maprule._escaping import (
    PATH_VALUE_REGEX_S,
    QS_VALUE_REGEX_S,
    START_RE,
    coalesce_chars,
    path_regex,
    query_string_regex,
    split_path_n_qs,
)
from maprule._method import Method

if TYPE_CHECKING:
    import re2

logger = logging.getLogger(__name__)

PLACEHOLDER_MARKER = "{_}"

# Inverse of re.escape, which only ever prefixes a single backslash.
_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


class HttpLineError(ValueError):
    """A request line could not be split into method and path."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"malformed HTTP request line: {line!r}")


@dataclass(frozen=True, slots=True, eq=False)
class RestRule:
    """A compiled mapping rule. Build it with from_pattern or from_path_n_qs."""

    method: Method
    path: re2.Pattern[str]
    qs: tuple[re2.Pattern[str], ...] | None = None

    @classmethod
    def from_pattern(cls, method: Method | str, path_n_qs: str) -> RestRule:
        """Compile a combined ``path?query`` template.

        Raises:
            PatternError: If the template cannot be compiled.
        """
        path, qs = split_path_n_qs(path_n_qs)
        return cls.from_path_n_qs(method, path, qs)

    @classmethod
    def from_path_n_qs(
        cls, method: Method | str, path: str, qs: str | None = None
    ) -> RestRule:
        """Compile a path template and an optional query string template.

        Raises:
            PatternError: If either template cannot be compiled.
        """
        rule = cls(
            method=Method.parse(method),
            path=path_regex(path),
            qs=query_string_regex(qs) if qs is not None else None,
        )
        logger.debug("compiled rule %s %s", rule.method, rule.pattern())
        return rule

    def matches(self, method: Method | str, path_n_qs: str) -> bool:
        return Method.parse(method) == self.method and self.matches_path_with_qs(path_n_qs)

    def matches_request_line(self, line: str) -> bool:
        """Match a ``METHOD path?query HTTP/x.y`` line.

        Only the first two space-separated tokens are used.

        Raises:
            HttpLineError: If the line has no path token.
        """
        method, path_n_qs = split_request_line(line)
        return self.matches(Method(method), path_n_qs)

    def matches_path_with_qs(self, path_n_qs: str) -> bool:
        path, qs = split_path_n_qs(path_n_qs)
        return self.matches_path_n_qs(path, qs)

    def matches_path_n_qs(self, path: str, qs: str | None = None) -> bool:
        return self._matches_qs(qs) and (
            self.path.search(coalesce_chars(path, "/")) is not None
        )

    def _matches_qs(self, qs: str | None) -> bool:
        if self.qs is None:
            return True
        candidates = (qs or "").split("&")
        for regex in self.qs:
            for idx, kv in enumerate(candidates):
                if regex.search(kv) is not None:
                    del candidates[idx]
                    break
            else:
                return False
        return True

    def pattern(self) -> str:
        """Rebuild a template from the compiled patterns.

        Placeholder names are lost and come back as ``{_}``. Query literals
        are unescaped, so recompiling the result matches the same requests.
        """
        pattern = _strip_start(self.path.pattern).replace(
            PATH_VALUE_REGEX_S, PLACEHOLDER_MARKER
        )
        if self.qs:
            segments = (
                _unescape(
                    _strip_start(kv.pattern).replace(QS_VALUE_REGEX_S, PLACEHOLDER_MARKER)
                )
                for kv in self.qs
            )
            pattern = f"{pattern}?{'&'.join(segments)}"
        return pattern

    def __repr__(self) -> str:
        return f"RestRule(method={self.method.as_str()!r}, pattern={self.pattern()!r})"


def _strip_start(pattern: str) -> str:
    return pattern.removeprefix(START_RE)


def _unescape(literal: str) -> str:
    return _UNESCAPE_RE.sub(r"\1", literal)


def split_request_line(line: str) -> tuple[str, str]:
    """Return the method and path tokens of a request line.

    Raises:
        HttpLineError: If the line has no path token.
    """
    tokens = line.split(" ", 2)
    if len(tokens) < 2:
        raise HttpLineError(line)
    return tokens[0], tokens[1]
