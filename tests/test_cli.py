"""Tests for the bizsheets command line."""

from __future__ import annotations

import json

import pytest

import bizsheets.app as app_module
from bizsheets.cli import main


@pytest.fixture(autouse=True)
def wired(services, monkeypatch):
    monkeypatch.setattr(app_module, "_services", services)
    monkeypatch.delenv("BIZSHEETS_CONFIG", raising=False)


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "usage: bizsheets" in capsys.readouterr().out


def test_ranges(capsys) -> None:
    assert main(["ranges"]) == 0

    out = capsys.readouterr().out
    assert "RANGECUSTOMERS" in out
    assert "Id scheme: uuid" in out


def test_list_with_search(capsys) -> None:
    assert main(["list", "customers", "--search", "austin"]) == 0

    records = json.loads(capsys.readouterr().out.strip())
    assert [r["Customer ID"] for r in records] == ["C10001"]


def test_dashboard(capsys) -> None:
    assert main(["dashboard"]) == 0

    assert json.loads(capsys.readouterr().out)["kpis"]["totalPurchases"] == "$1,100"


def test_remote_failure_exits_non_zero(backend, capsys) -> None:
    backend.fail_next(403, "The caller does not have permission")

    assert main(["list", "users"]) == 1
    assert "Error: Google Sheets API error: The caller does not have permission" in capsys.readouterr().err


def test_unknown_entity_is_rejected() -> None:
    with pytest.raises(SystemExit):
        main(["list", "invoices"])
