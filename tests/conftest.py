"""Pytest configuration for path setup and shared fixtures.

When pytest is executed without the package installed, the repository root
is not automatically added to ``sys.path``.  This file ensures the ``ecloud``
package and the ``tests.helpers`` fakes are importable during collection.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]

root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from tests.helpers.fake_http import SleepRecorder, make_config  # noqa: E402


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def config():
    return make_config()
