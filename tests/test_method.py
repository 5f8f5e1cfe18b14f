"""Tests for Method parsing and wildcard-aware equality."""

from __future__ import annotations

import pytest

from maprule import Method, RestRule

CANONICAL = ["GET", "HEAD", "POST", "PUT", "DELETE", "CONNECT", "OPTIONS", "TRACE", "PATCH"]


def all_methods() -> list[Method]:
    return [Method(name) for name in CANONICAL] + [Method("future_method")]


class TestParsing:
    @pytest.mark.parametrize("name", CANONICAL)
    def test_case_insensitive(self, name: str) -> None:
        for variant in (name, name.lower(), name.capitalize()):
            m = Method(variant)
            assert m.as_str() == name
            assert not m.is_any
            assert not m.is_other

    @pytest.mark.parametrize("name", ["any", "ANY", "AnY"])
    def test_any(self, name: str) -> None:
        m = Method(name)
        assert m.is_any
        assert m.as_str() == "ANY"

    def test_other_is_uppercased(self) -> None:
        m = Method("future_method")
        assert m.is_other
        assert m.as_str() == "FUTURE_METHOD"

    def test_str(self) -> None:
        assert str(Method("patch")) == "PATCH"

    def test_parse_passes_methods_through(self) -> None:
        m = Method("get")
        assert Method.parse(m) is m
        assert Method.parse("delete").as_str() == "DELETE"

    def test_constants(self) -> None:
        assert Method.ANY.is_any
        assert Method.GET.as_str() == "GET"
        assert Method.PATCH.as_str() == "PATCH"

    @pytest.mark.parametrize(
        ("name", "expected", "verb"),
        [
            ("po\N{LATIN SMALL LETTER LONG S}t", "PO\N{LATIN SMALL LETTER LONG S}T", Method.POST),
            (
                "opt\N{LATIN SMALL LETTER DOTLESS I}ons",
                "OPT\N{LATIN SMALL LETTER DOTLESS I}ONS",
                Method.OPTIONS,
            ),
        ],
    )
    def test_only_ascii_is_uppercased(self, name: str, expected: str, verb: Method) -> None:
        m = Method(name)
        assert m.as_str() == expected
        assert m.is_other
        assert m != verb

    def test_non_ascii_request_line_does_not_match_verb(self) -> None:
        rule = RestRule.from_pattern("POST", "/")
        assert not rule.matches_request_line("po\N{LATIN SMALL LETTER LONG S}t / HTTP/1.1")

    def test_non_string_rejected(self) -> None:
        with pytest.raises(TypeError):
            Method(42)  # type: ignore[arg-type]


class TestEquality:
    def test_any_matches_every_other_method(self) -> None:
        for other in all_methods():
            assert Method("any") == other
            assert other == Method.ANY

    def test_any_equals_any(self) -> None:
        assert Method.ANY == Method("any")

    def test_other_only_matches_exact_other(self) -> None:
        method = Method("future_method")
        assert method != Method("other_future_method")
        assert method == Method("FUTURE_METHOD")
        assert [m for m in all_methods() if m == method] == [method]

    def test_equality_and_identity(self) -> None:
        methods = all_methods()
        for idx, method in enumerate(methods):
            assert method == methods[idx]
            for oidx, other in enumerate(methods):
                if oidx != idx:
                    assert method != other

    def test_not_transitive(self) -> None:
        """ANY == GET and ANY == POST must not imply GET == POST."""
        assert Method.ANY == Method.GET
        assert Method.ANY == Method.POST
        assert Method.GET != Method.POST

    def test_not_equal_to_strings(self) -> None:
        assert Method.GET != "GET"
        assert Method.ANY != "GET"

    def test_unhashable(self) -> None:
        with pytest.raises(TypeError):
            hash(Method.GET)


class TestRoundTrip:
    @pytest.mark.parametrize("method", [*all_methods(), Method.ANY], ids=str)
    def test_through_strings(self, method: Method) -> None:
        assert Method(method.as_str()) == method
        assert Method(str(method)) == method
        assert Method(method.as_str()).as_str() == method.as_str()
