"""Pytest configuration and shared fixtures."""

import os

import django
from django.core.cache import cache
from django.test import Client

import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "digest_service.settings_test")
django.setup()


@pytest.fixture
def api_client():
    """Provide Django test client."""
    return Client()


@pytest.fixture(autouse=True)
def clear_cache():
    """Keep cached processing history from leaking between tests."""
    cache.clear()
    yield
    cache.clear()
