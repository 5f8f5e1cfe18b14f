"""Method — HTTP method value with wildcard-aware equality.

A Method is one of the nine canonical verbs, the ANY wildcard, or an
"other" method carrying an arbitrary uppercased name.

Equality is NOT structural:
- ANY on either side is equal to every method
- otherwise two methods are equal iff their uppercase names are equal

The relation is reflexive and symmetric but intentionally not transitive:
ANY == GET and ANY == POST, yet GET != POST. Rule matching depends on this,
so do not "fix" it. For the same reason Method is unhashable.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

ANY_NAME = "ANY"

CANONICAL_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"}
)


@dataclass(frozen=True, slots=True, eq=False)
class Method:
    """An HTTP method. ASCII letters in the name are uppercased at construction."""

    name: str

    ANY: ClassVar[Method]
    GET: ClassVar[Method]
    HEAD: ClassVar[Method]
    POST: ClassVar[Method]
    PUT: ClassVar[Method]
    DELETE: ClassVar[Method]
    CONNECT: ClassVar[Method]
    OPTIONS: ClassVar[Method]
    TRACE: ClassVar[Method]
    PATCH: ClassVar[Method]

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            msg = f"method name must be a string, got {type(self.name).__name__}"
            raise TypeError(msg)
        object.__setattr__(self, "name", _ascii_upper(self.name))

    @classmethod
    def parse(cls, value: Method | str) -> Method:
        """Coerce a string (any case) or an existing Method into a Method."""
        if isinstance(value, Method):
            return value
        return cls(value)

    @property
    def is_any(self) -> bool:
        return self.name == ANY_NAME

    @property
    def is_other(self) -> bool:
        """True for methods that are neither canonical verbs nor ANY."""
        return not self.is_any and self.name not in CANONICAL_METHODS

    def as_str(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Method):
            return NotImplemented
        if self.is_any or other.is_any:
            return True
        return self.name == other.name

    __hash__ = None  # type: ignore[assignment]


def _ascii_upper(name: str) -> str:
    # Unicode case mapping folds some non-ASCII names onto canonical verbs.
    return "".join(c.upper() if c.isascii() else c for c in name)


Method.ANY = Method(ANY_NAME)
Method.GET = Method("GET")
Method.HEAD = Method("HEAD")
Method.POST = Method("POST")
Method.PUT = Method("PUT")
Method.DELETE = Method("DELETE")
Method.CONNECT = Method("CONNECT")
Method.OPTIONS = Method("OPTIONS")
Method.TRACE = Method("TRACE")
Method.PATCH = Method("PATCH")
