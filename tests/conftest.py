"""Shared fixtures."""

from pathlib import Path

import pytest

from omnisearch import template


DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def data_dir() -> Path:
    """Directory holding the sample description documents."""
    return DATA_DIR


@pytest.fixture(autouse=True)
def template_settings():
    """Pin the process-wide template settings for every test."""
    template.set_application_name("omnisearch-tests")
    template.set_language("en_US")
    yield
    template.set_application_name(template.DEFAULT_APPLICATION_NAME)
    template.set_language(None)
