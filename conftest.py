"""
Root pytest configuration for the Django project.

pytest-django loads config.settings_test (see pyproject.toml), which fills
in the environment the settings module reads. App-specific fixtures are
defined in each app's tests/conftest.py.
"""

import os

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings_test")


def pytest_configure():
    """Configure Django settings before tests run."""
    django.setup()
