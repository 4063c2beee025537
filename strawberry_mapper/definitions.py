"""Definitions recorded by the decorators on classes and functions.

Decorators only record what was declared; reading them back is the job of
`strawberry_mapper.discovery.AnnotationReader`.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Literal, Optional

TYPE_DEFINITION_ATTR = "__strawberry_mapper_type__"
EXTEND_TYPE_DEFINITION_ATTR = "__strawberry_mapper_extend_type__"
INPUT_DEFINITIONS_ATTR = "__strawberry_mapper_inputs__"
FACTORY_DEFINITION_ATTR = "__strawberry_mapper_factory__"
DECORATE_DEFINITION_ATTR = "__strawberry_mapper_decorate__"
FIELD_DEFINITION_ATTR = "__strawberry_mapper_field__"

FieldKind = Literal["query", "mutation", "field"]


@dataclasses.dataclass(frozen=True)
class TypeDefinition:
    for_class: Optional[type] = None
    name: Optional[str] = None
    default: bool = True
    description: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ExtendTypeDefinition:
    for_class: Optional[type] = None
    name: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class InputDefinition:
    name: Optional[str] = None
    default: Optional[bool] = None
    description: Optional[str] = None
    update: bool = False


@dataclasses.dataclass(frozen=True)
class FactoryDefinition:
    name: Optional[str] = None
    default: bool = True


@dataclasses.dataclass(frozen=True)
class DecorateDefinition:
    input_name: str


@dataclasses.dataclass(frozen=True)
class FieldDefinition:
    kind: FieldKind
    name: Optional[str] = None
    description: Optional[str] = None
    deprecation_reason: Optional[str] = None


def get_own_definition(cls: type, attr: str) -> Any:
    """Get a definition declared on the class itself, ignoring its bases."""
    return cls.__dict__.get(attr)
