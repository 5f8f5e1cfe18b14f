"""Command line for compiling mapping rules and checking request lines.

Usage:
    maprule pattern GET "/accounts/{id}?active={flag}"
    maprule check GET "/accounts/{id}" "GET /accounts/42 HTTP/1.1"
    maprule route rules.yaml "POST /orders HTTP/1.1"

Exit codes: 0 when every line matches (check) or was routed (route),
1 when a line did not match, 2 for malformed input or rules.
"""

from __future__ import annotations

import logging
import sys

import click

from maprule._config import ConfigParseError, dumps_rule
from maprule._escaping import PatternError
from maprule._rule import HttpLineError, RestRule
from maprule._table import TooManyRulesError, read_rule_table

EXIT_NO_MATCH = 1
EXIT_BAD_INPUT = 2


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Compile HTTP mapping rules and match request lines against them."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _compile(method: str, pattern: str) -> RestRule:
    try:
        return RestRule.from_pattern(method, pattern)
    except PatternError as e:
        click.echo(f"Invalid pattern {pattern!r}: {e}", err=True)
        sys.exit(EXIT_BAD_INPUT)


@main.command("pattern")
@click.argument("method")
@click.argument("pattern")
def pattern_cmd(method: str, pattern: str) -> None:
    """Compile a rule and print its persisted JSON form."""
    click.echo(dumps_rule(_compile(method, pattern)))


@main.command()
@click.argument("method")
@click.argument("pattern")
@click.argument("request_lines", nargs=-1, required=True)
def check(method: str, pattern: str, request_lines: tuple[str, ...]) -> None:
    """Check request lines against a single rule."""
    rule = _compile(method, pattern)
    exit_code = 0
    for line in request_lines:
        try:
            matched = rule.matches_request_line(line)
        except HttpLineError as e:
            click.echo(f"error     {line}: {e}", err=True)
            exit_code = EXIT_BAD_INPUT
            continue
        click.echo(f"{'match' if matched else 'no match':<9} {line}")
        if not matched and exit_code == 0:
            exit_code = EXIT_NO_MATCH
    sys.exit(exit_code)


@main.command()
@click.argument("table_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("request_lines", nargs=-1, required=True)
def route(table_file: str, request_lines: tuple[str, ...]) -> None:
    """Route request lines through a YAML or JSON rule table."""
    try:
        table = read_rule_table(table_file)
    except (ConfigParseError, TooManyRulesError) as e:
        click.echo(f"Invalid rule table {table_file}: {e}", err=True)
        sys.exit(EXIT_BAD_INPUT)

    exit_code = 0
    for line in request_lines:
        try:
            action = table.evaluate_request_line(line)
        except HttpLineError as e:
            click.echo(f"error {line}: {e}", err=True)
            exit_code = EXIT_BAD_INPUT
            continue
        click.echo(f"{'-' if action is None else action}\t{line}")
        if action is None and exit_code == 0:
            exit_code = EXIT_NO_MATCH
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
