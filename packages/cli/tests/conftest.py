"""Shared fixtures for prtracker_cli tests."""

import pytest

from prtracker_cli import output


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # Rich falls back to 80 columns when not attached to a terminal, which
    # folds table cells.
    monkeypatch.setattr(output.console, "width", 200)
