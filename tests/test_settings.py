"""Tests for `strawberry_mapper/settings.py`."""
from django.test import override_settings

from strawberry_mapper import settings


def test_defaults():
    """Test defaults.

    Test that `strawberry_mapper_settings()` provides the default settings if they don't
    exist in the Django settings file.
    """
    assert settings.strawberry_mapper_settings() == settings.DEFAULT_MAPPER_SETTINGS


def test_non_defaults():
    """Test non defaults.

    Test that `strawberry_mapper_settings()` provides the user's settings if they are
    defined in the Django settings file.
    """
    with override_settings(
        STRAWBERRY_MAPPER=settings.StrawberryMapperSettings(
            CACHE_NAME=None,
            CACHE_TIMEOUT=60,
            TYPE_MAPPER_TTL=300.0,
            DISCOVERY_MODULES=["tests.fixtures.shop"],
            VALIDATE_INPUTS=False,
            DESCRIPTION_FROM_DOCSTRING=False,
        ),
    ):
        assert (
            settings.strawberry_mapper_settings()
            == settings.StrawberryMapperSettings(
                CACHE_NAME=None,
                CACHE_TIMEOUT=60,
                TYPE_MAPPER_TTL=300.0,
                DISCOVERY_MODULES=["tests.fixtures.shop"],
                VALIDATE_INPUTS=False,
                DESCRIPTION_FROM_DOCSTRING=False,
            )
        )


def test_partial_settings():
    """Test partial settings.

    Test that keys missing from the user's settings fall back to their defaults.
    """
    with override_settings(STRAWBERRY_MAPPER={"TYPE_MAPPER_TTL": 5}):
        mapper_settings = settings.strawberry_mapper_settings()

    assert mapper_settings["TYPE_MAPPER_TTL"] == 5
    assert mapper_settings["CACHE_NAME"] == "default"
    assert mapper_settings["VALIDATE_INPUTS"]
