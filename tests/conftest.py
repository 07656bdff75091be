"""Pytest helpers for path configuration and shared fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from tests.helpers import MINIMAL_DIGEST, SAMPLE_DIGEST  # noqa: E402


@pytest.fixture()
def sample_digest_text() -> str:
    return SAMPLE_DIGEST


@pytest.fixture()
def minimal_digest_text() -> str:
    return MINIMAL_DIGEST


@pytest.fixture()
def repo_root() -> Path:
    return _REPO_ROOT
