"""Pattern compiler and request normalizer for mapping rules.

Templates are literal text interspersed with ``{placeholder}`` spans. The
placeholder name is never validated; only its position matters. Each span is
replaced by a permissive character class and the result is compiled with
``google-re2``, anchored at the start of the text only.

Path rules (an approximation of how API gateways treat route patterns):

1. Duplicate ``/`` are coalesced, because reverse proxies collapse them in
   incoming requests too.
2. Anything between ``{`` and the nearest ``}`` becomes ``PATH_VALUE_REGEX_S``.
3. Literal text is NOT escaped, so a trailing ``$`` requests an exact match
   and ``.`` matches any character.

Query strings work the same way except that literals are escaped and
placeholders cannot swallow ``&``. The merged pattern is split on ``&`` into
one independent pattern per query segment.
"""

from __future__ import annotations

import re

import re2

# Placeholder value in a path: unreserved + sub-delims, plus ':' and '@'.
PATH_VALUE_REGEX_S = r"[0-9a-zA-Z_\-.~%!$&'()*+,;=@:]+"
# Same for query strings, minus the '&' segment delimiter.
QS_VALUE_REGEX_S = r"[0-9a-zA-Z_\-.~%!$'()*+,;=@:]+"
# Implicit anchor to the start of the text used in every compiled pattern.
START_RE = r"\A"

PLACEHOLDER_RE = re2.compile(r"\{.+?\}")

MAX_PATTERN_LENGTH = 32768


class PatternError(Exception):
    """Errors from compiling a mapping rule template."""


class RegexError(PatternError):
    """The expanded template is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f'invalid regex pattern "{pattern}": {reason}')


class PatternTooLargeError(PatternError):
    """The expanded template exceeds the size the compiler accepts.

    ``reason`` is set when RE2 refused the compiled program for size even
    though the text itself is within MAX_PATTERN_LENGTH.
    """

    def __init__(self, length: int, max_: int, reason: str | None = None) -> None:
        self.length = length
        self.max = max_
        self.reason = reason
        if reason is None:
            message = f"expanded pattern length {length} exceeds maximum {max_}"
        else:
            message = f"RE2 program too large for pattern of length {length}: {reason}"
        super().__init__(message)


def path_regex(path: str) -> re2.Pattern[str]:
    """Compile a path template into a start-anchored pattern.

    Raises:
        RegexError: If a raw literal fragment breaks the regex syntax.
        PatternTooLargeError: If the expanded pattern is too large.
    """
    literals = PLACEHOLDER_RE.split(coalesce_chars(path, "/"))
    # No regex escaping for path literals.
    return _compile(PATH_VALUE_REGEX_S.join(literals))


def query_string_regex(qs: str) -> tuple[re2.Pattern[str], ...]:
    """Compile a query string template into one pattern per ``&`` segment.

    Patterns keep the template order. Each one is anchored at the start of a
    segment only.

    Raises:
        RegexError: If a segment fails to compile.
        PatternTooLargeError: If the expanded pattern is too large.
    """
    escaped = [
        "&".join(re.escape(part) for part in literal.split("&"))
        for literal in PLACEHOLDER_RE.split(qs)
    ]
    merged = QS_VALUE_REGEX_S.join(escaped)
    _check_length(len(merged) + len(START_RE))
    return tuple(_compile(segment) for segment in merged.split("&"))


def split_path_n_qs(s: str) -> tuple[str, str | None]:
    """Split at the first ``?``.

    The query string is None when there is no ``?`` and empty when the
    ``?`` is the last character.
    """
    path, sep, qs = s.partition("?")
    if not sep:
        return path, None
    return path, qs


def coalesce_chars(s: str, c: str) -> str:
    """Collapse every run of ``c`` in ``s`` into a single ``c``."""
    out: list[str] = []
    last_matched = False
    for ch in s:
        if ch == c:
            if not last_matched:
                out.append(ch)
            last_matched = True
        else:
            out.append(ch)
            last_matched = False
    return "".join(out)


def _check_length(length: int) -> None:
    if length > MAX_PATTERN_LENGTH:
        raise PatternTooLargeError(length, MAX_PATTERN_LENGTH)


def _compile(literal: str) -> re2.Pattern[str]:
    """Anchor and compile an expanded pattern."""
    pattern = START_RE + literal
    _check_length(len(pattern))
    try:
        return re2.compile(pattern)
    except re2.error as e:
        # RE2 reports its own program size limit as a compile error.
        if "too large" in str(e):
            raise PatternTooLargeError(len(pattern), MAX_PATTERN_LENGTH, str(e)) from e
        raise RegexError(pattern, str(e)) from e
