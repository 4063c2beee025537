"""Markers used inside `typing.Annotated` to alter how a parameter is mapped.

>>> @strawberry_mapper.query
... def products(
...     self,
...     repository: Annotated[ProductRepository, Autowire()],
...     limit: Annotated[int, HideParameter()] = 20,
... ) -> list[Product]: ...
"""

from __future__ import annotations

import dataclasses
import inspect
from typing import Any, Callable, Optional, TypeVar

from strawberry.types.arguments import StrawberryArgumentAnnotation

__all__ = [
    "Autowire",
    "HideParameter",
    "ParameterAnnotations",
    "ParameterDeclaration",
    "Prefetch",
    "UseInputType",
]

_A = TypeVar("_A")


@dataclasses.dataclass(frozen=True)
class Autowire:
    """Inject the parameter from the container.

    The container entry is looked up by `identifier` or, when omitted, by the
    identity of the class the parameter is annotated with.
    """

    identifier: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class HideParameter:
    """Do not expose the parameter in the schema; always use its default."""


@dataclasses.dataclass(frozen=True)
class Prefetch:
    """Fill the parameter with the result of a batched prefetch method.

    The method is looked up by name on the class declaring the field. It
    receives the list of every source object resolved in the same wave,
    followed by its own (GraphQL exposed) parameters.
    """

    method_name: str


@dataclasses.dataclass(frozen=True)
class UseInputType:
    """Force the GraphQL input type used for the parameter, by name."""

    input_type: str


class ParameterAnnotations:
    """The `Annotated` metadata found on one parameter."""

    def __init__(self, annotations: tuple[Any, ...] = ()):
        self.annotations = annotations

    def get_annotation_by_type(self, type_: type[_A]) -> _A | None:
        for annotation in self.annotations:
            if isinstance(annotation, type_):
                return annotation
        return None

    def get_annotations_by_type(self, type_: type[_A]) -> list[_A]:
        return [a for a in self.annotations if isinstance(a, type_)]

    @property
    def description(self) -> str | None:
        argument = self.get_annotation_by_type(StrawberryArgumentAnnotation)
        return argument.description if argument is not None else None

    def __repr__(self):
        return f"<ParameterAnnotations {self.annotations!r}>"


@dataclasses.dataclass(frozen=True)
class ParameterDeclaration:
    """Everything known about a parameter before it gets mapped.

    `type_hint` is the evaluated annotation without its `Annotated` wrapper,
    or `inspect.Parameter.empty` when the parameter is not annotated. `owner`
    is the class declaring `function` and `instance` the object the function
    will be bound to, if any.
    """

    parameter: inspect.Parameter
    function: Callable[..., Any]
    type_hint: Any
    annotations: ParameterAnnotations
    description: Optional[str] = None
    owner: Optional[type] = None
    instance: Any = None

    @property
    def name(self) -> str:
        return self.parameter.name

    @property
    def has_default(self) -> bool:
        return self.parameter.default is not inspect.Parameter.empty

    @property
    def default(self) -> Any:
        return self.parameter.default

    @property
    def is_annotated(self) -> bool:
        return self.type_hint is not inspect.Parameter.empty
