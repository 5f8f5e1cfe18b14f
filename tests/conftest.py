"""Shared fixtures: rule table configs written to disk as YAML and JSON."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest
import yaml

if TYPE_CHECKING:
    from pathlib import Path

ACCOUNTS_TABLE: dict[str, Any] = {
    "rules": [
        {"method": "GET", "pattern": "/accounts/{id}$", "action": "read_account"},
        {"method": "GET", "pattern": "/accounts/{id}/users?active={flag}", "action": "active_users"},
        {"method": "GET", "pattern": "/accounts/{id}/users", "action": "all_users"},
        {"method": "POST", "pattern": "/accounts", "action": "create_account"},
        {"method": "ANY", "pattern": "/health$", "action": "health"},
    ],
    "on_no_match": "not_found",
}


@pytest.fixture
def accounts_table() -> dict[str, Any]:
    return json.loads(json.dumps(ACCOUNTS_TABLE))


@pytest.fixture
def table_yaml(tmp_path: Path) -> Path:
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(ACCOUNTS_TABLE))
    return path


@pytest.fixture
def table_json(tmp_path: Path) -> Path:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(ACCOUNTS_TABLE))
    return path
