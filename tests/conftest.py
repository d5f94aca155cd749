"""Shared fixtures."""

import os

import pytest

from factories import make_exec_env, make_resolver

_ENV_VARS = (
    "INTELLIIMPORT_PATTERN",
    "INTELLIIMPORT_CASE_SENSITIVE",
    "INTELLIIMPORT_ALLOW_VARIABLE_IN_ALL",
    "INTELLIIMPORT_LAZY_EDIT",
    "INTELLIIMPORT_EXCLUDED_NAMES",
    "INTELLIIMPORT_IMPORT_GROUP_ORDER",
)


@pytest.fixture
def exec_env():
    return make_exec_env()


@pytest.fixture
def resolver():
    return make_resolver()


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without IntelliImport variables."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return os.environ
