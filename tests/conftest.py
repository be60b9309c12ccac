"""Shared fixtures."""

import os

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Run with no PATCH_REPORT_* or CONFIG_PATH variables.

    The loader writes resolved secrets and CONFIG_PATH into os.environ, so
    a private copy keeps those writes out of other tests.
    """
    environ = {
        key: value
        for key, value in os.environ.items()
        if not key.startswith("PATCH_REPORT_") and key != "CONFIG_PATH"
    }
    monkeypatch.setattr(os, "environ", environ)
    return environ
