"""Shared fixtures for reconciler tests."""

import pytest

from reconciler.logging.context import clear_log_context
from tests.helpers.listings import booli_listing, hemnet_listing


@pytest.fixture
def hemnet_raw():
    """A Hemnet sold card for Vasagatan 12."""
    return hemnet_listing()


@pytest.fixture
def booli_raw():
    """The Booli record for the same sale (final price differs by ~0.33%)."""
    return booli_listing()


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()
