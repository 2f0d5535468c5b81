"""Shared fixtures."""

import pytest

from landgrab_geo.config import EngineConfig

from tests.geo_helpers import SQUARE_LOOP, FIGURE_EIGHT, walk


@pytest.fixture
def engine_config():
    return EngineConfig()


@pytest.fixture
def square_walk():
    """12-sample closed loop, 10 s apart."""
    return walk(SQUARE_LOOP)


@pytest.fixture
def figure_eight_walk():
    return walk(FIGURE_EIGHT)
