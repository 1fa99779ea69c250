"""Shared fixtures for the exporter tests."""

import sys
from pathlib import Path

import numpy as np
import pytest

TESTS_DIR = Path(__file__).parent
PROJECT_DIR = TESTS_DIR.parent

# Ensure tests import this checkout, not an installed package.
if str(PROJECT_DIR) not in sys.path:
    sys.path.insert(0, str(PROJECT_DIR))

from core.volume import VolumeView  # noqa: E402


@pytest.fixture
def make_volume():
    def _make(width=2, height=2, depth=3):
        samples = np.arange(width * height * depth, dtype=np.int16)
        return VolumeView.from_array(samples.reshape(depth, height, width))
    return _make
