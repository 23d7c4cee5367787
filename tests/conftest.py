"""Shared fixtures for the ccmkit test suite."""

import logging

import numpy as np
import pytest

from ccmkit.utils.debug_logger import LOGGER_NAME


@pytest.fixture
def ccmkit_log(caplog):
    """Capture records of the ccmkit logger (it does not propagate to root)."""
    logger = logging.getLogger(LOGGER_NAME)
    caplog.handler.setLevel(logging.DEBUG)
    logger.addHandler(caplog.handler)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)


@pytest.fixture
def rng():
    return np.random.default_rng(20240601)


@pytest.fixture
def mixing_matrix():
    """A plausible camera → target mixing; rows sum to 1 so unit inputs stay in [0, 1]."""
    return np.array([
        [0.60, 0.30, 0.10],
        [0.20, 0.70, 0.10],
        [0.05, 0.15, 0.80],
    ])
