"""Shared pytest fixtures for docsql unit tests."""
from __future__ import annotations

import pytest

from docsql.compile.registry import OperatorRegistry
from docsql.statements.select import SelectBuilder


@pytest.fixture()
def registry() -> OperatorRegistry:
    """A fresh plugin registry, isolated from the process-wide default."""
    return OperatorRegistry()


@pytest.fixture()
def active_users() -> SelectBuilder:
    """``SELECT id FROM users WHERE active = ?`` with params ``[True]``."""
    return SelectBuilder("users").query({"active": True}).project(["id"])
