from __future__ import annotations

from typing import Any

from django.db import models
from typing_extensions import Protocol, runtime_checkable

from .settings import strawberry_mapper_settings

__all__ = [
    "DjangoModelValidator",
    "Validator",
]


@runtime_checkable
class Validator(Protocol):
    """Validates the objects built from input types before they are used.

    `validate` raises (usually a `django.core.exceptions.ValidationError`)
    when the object is invalid.
    """

    def is_enabled(self) -> bool: ...

    def validate(self, obj: Any) -> None: ...


class DjangoModelValidator:
    """Run `full_clean()` on Django model instances built from inputs.

    Objects which are not model instances are left alone.
    """

    def __init__(self, *, exclude_unique: bool = True):
        self.exclude_unique = exclude_unique

    def is_enabled(self) -> bool:
        return strawberry_mapper_settings()["VALIDATE_INPUTS"]

    def validate(self, obj: Any) -> None:
        if isinstance(obj, models.Model):
            obj.full_clean(validate_unique=not self.exclude_unique)
