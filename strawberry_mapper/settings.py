"""Code for interacting with Django settings."""

from typing import List, Optional, cast

from django.conf import settings
from typing_extensions import TypedDict


class StrawberryMapperSettings(TypedDict):
    """Dictionary defining the shape `settings.STRAWBERRY_MAPPER` should have.

    All settings are optional and have defaults as described in their docstrings and
    defined in `DEFAULT_MAPPER_SETTINGS`.
    """

    #: Name of the Django cache used to memoize the annotations read from each
    #: discovered class. Set to `None` to disable memoization.
    CACHE_NAME: Optional[str]

    #: Timeout passed to the cache when storing class annotations.
    CACHE_TIMEOUT: Optional[int]

    #: Number of seconds after which the type mapping is rebuilt from scratch.
    #: `None` keeps the first build for the lifetime of the process.
    TYPE_MAPPER_TTL: Optional[float]

    #: Modules or packages scanned for annotated classes when no discovery
    #: source is given to the schema factory.
    DISCOVERY_MODULES: List[str]

    #: If True, input objects are validated with `full_clean()` before being
    #: handed to resolvers.
    VALIDATE_INPUTS: bool

    #: If True, type and field descriptions will be fetched from docstrings
    #: when not given explicitly.
    DESCRIPTION_FROM_DOCSTRING: bool


DEFAULT_MAPPER_SETTINGS = StrawberryMapperSettings(
    CACHE_NAME="default",
    CACHE_TIMEOUT=None,
    TYPE_MAPPER_TTL=None,
    DISCOVERY_MODULES=[],
    VALIDATE_INPUTS=True,
    DESCRIPTION_FROM_DOCSTRING=True,
)


def strawberry_mapper_settings() -> StrawberryMapperSettings:
    """Get strawberry mapper settings.

    Return the dictionary from `settings.STRAWBERRY_MAPPER`, with defaults
    for missing keys.

    Preferred to direct access for the type hints and defaults.
    """
    defaults = DEFAULT_MAPPER_SETTINGS
    return cast(
        "StrawberryMapperSettings",
        {**defaults, **getattr(settings, "STRAWBERRY_MAPPER", {})},
    )
