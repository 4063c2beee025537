"""Root type mappers: turn a named Python annotation into a GraphQL type.

Mappers are consulted in order and the first one accepting an annotation
wins. Containers (optional, lists, unions) are handled by the `TypeHandler`
before reaching them.
"""

from __future__ import annotations

import abc
import datetime
import decimal
import enum
import uuid
from typing import TYPE_CHECKING, Any, Optional, Sequence

import strawberry
from strawberry.types import get_object_definition, has_object_definition
from strawberry.types.base import StrawberryType

if TYPE_CHECKING:
    from strawberry_mapper.type import TypeGenerator

    from .glob import GlobTypeMapper

__all__ = [
    "BUILTIN_SCALARS",
    "CompositeRootTypeMapper",
    "EnumTypeMapper",
    "ObjectTypeMapper",
    "RootTypeMapper",
    "ScalarTypeMapper",
    "StrawberryTypeMapper",
]

BUILTIN_SCALARS: dict[Any, str] = {
    str: "String",
    int: "Int",
    float: "Float",
    bool: "Boolean",
    strawberry.ID: "ID",
    datetime.date: "Date",
    datetime.datetime: "DateTime",
    datetime.time: "Time",
    decimal.Decimal: "Decimal",
    uuid.UUID: "UUID",
}


class RootTypeMapper(abc.ABC):
    @abc.abstractmethod
    def can_map(self, annotation: Any, *, is_input: bool) -> bool: ...

    @abc.abstractmethod
    def map(self, annotation: Any, *, is_input: bool) -> StrawberryType | type: ...

    def map_name(self, name: str, *, is_input: bool) -> Optional[StrawberryType | type]:
        """Map a GraphQL type name, for mappers which know types by name."""
        return None


class CompositeRootTypeMapper(RootTypeMapper):
    def __init__(self, mappers: Sequence[RootTypeMapper]):
        self.mappers = list(mappers)

    def can_map(self, annotation, *, is_input):
        return any(m.can_map(annotation, is_input=is_input) for m in self.mappers)

    def map(self, annotation, *, is_input):
        for mapper in self.mappers:
            if mapper.can_map(annotation, is_input=is_input):
                return mapper.map(annotation, is_input=is_input)

        raise LookupError(annotation)

    def map_name(self, name, *, is_input):
        for mapper in self.mappers:
            mapped = mapper.map_name(name, is_input=is_input)
            if mapped is not None:
                return mapped
        return None


class ScalarTypeMapper(RootTypeMapper):
    """Builtin scalars and custom `strawberry.scalar` definitions."""

    def can_map(self, annotation, *, is_input):
        try:
            if annotation in BUILTIN_SCALARS:
                return True
        except TypeError:
            return False
        return getattr(annotation, "_scalar_definition", None) is not None

    def map(self, annotation, *, is_input):
        return annotation


class EnumTypeMapper(RootTypeMapper):
    def can_map(self, annotation, *, is_input):
        return isinstance(annotation, type) and issubclass(annotation, enum.Enum)

    def map(self, annotation, *, is_input):
        if not hasattr(annotation, "__strawberry_definition__"):
            strawberry.enum(annotation)
        return annotation


class StrawberryTypeMapper(RootTypeMapper):
    """Types already declared with strawberry itself."""

    def can_map(self, annotation, *, is_input):
        if isinstance(annotation, StrawberryType):
            return True

        definition = get_object_definition(annotation)
        return definition is not None and definition.is_input == is_input

    def map(self, annotation, *, is_input):
        return annotation


class ObjectTypeMapper(RootTypeMapper):
    """Domain classes, mapped to the types generated from their declarations."""

    def __init__(self, glob_mapper: GlobTypeMapper, type_generator: TypeGenerator):
        self.glob_mapper = glob_mapper
        self.type_generator = type_generator

    def _get_name(self, annotation: Any, *, is_input: bool) -> Optional[str]:
        if not isinstance(annotation, type) or has_object_definition(annotation):
            return None

        if is_input:
            return self.glob_mapper.get_input_name_for_class(annotation)

        type_name = self.glob_mapper.get_type_name_for_class(annotation)
        if type_name is not None:
            return type_name

        # The annotation can be the type class itself
        annotations = self.glob_mapper.get_annotations_for_class(annotation)
        return annotations.type_name if annotations is not None else None

    def can_map(self, annotation, *, is_input):
        return self._get_name(annotation, is_input=is_input) is not None

    def map(self, annotation, *, is_input):
        name = self._get_name(annotation, is_input=is_input)
        assert name is not None
        return self.map_name(name, is_input=is_input)

    def map_name(self, name, *, is_input):
        if is_input:
            if not self.glob_mapper.has_input_name(name):
                return None
            return self.type_generator.get_input_type(name)

        if self.glob_mapper.get_type_class_by_name(name) is None:
            return None
        return self.type_generator.get_output_type(name)
