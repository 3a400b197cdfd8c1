"""
Root pytest configuration for the Django project.

This module configures pytest-django and provides project-wide fixtures.
App-specific fixtures are defined in each package's tests/conftest.py.
"""

import os

import django
import pytest

# Ensure Django settings are configured before any tests run
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()


def pytest_collection_modifyitems(items):
    """
    Auto-mark tests based on filename patterns.

    Mapping:
    - test_client.py, test_apps.py, test_*_service.py → integration
      (several collaborators wired together)
    - test_stripe_adapter.py, test_pagination.py, test_types.py, etc. → unit
    - Unmatched files → unit

    Explicit markers on test functions/classes take precedence.
    """
    integration_patterns = [
        "test_client.py",
        "test_apps.py",
        "_service.py",
    ]

    for item in items:
        # Skip if test already has a unit/integration marker
        existing_markers = {m.name for m in item.iter_markers()}
        if existing_markers & {"unit", "integration"}:
            continue

        filename = str(item.fspath).split("/")[-1]

        if any(pattern in filename for pattern in integration_patterns):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
