"""The chain of middlewares turning a parameter declaration into a `Parameter`.

Each middleware either claims the parameter, returning a `Parameter`, or
hands it to the next one. The chain ends with `TypeHandler.map_parameter`,
exposing the parameter as a GraphQL argument.
"""

from __future__ import annotations

import abc
import functools
import inspect
from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence, get_origin

from strawberry.types import Info

from strawberry_mapper.annotations import Autowire, Prefetch
from strawberry_mapper.exceptions import InvalidPrefetchMethodError, MissingAutowireTypeError
from strawberry_mapper.parameters import (
    ContainerParameter,
    PrefetchDataParameter,
    ResolveInfoParameter,
)
from strawberry_mapper.utils.typing import class_identity, split_optional

if TYPE_CHECKING:
    from strawberry_mapper.annotations import ParameterDeclaration
    from strawberry_mapper.containers import Container
    from strawberry_mapper.parameters import Parameter

__all__ = [
    "ContainerParameterHandler",
    "ParameterMiddleware",
    "ParameterMiddlewarePipe",
    "ParametersMapper",
    "PrefetchParameterMiddleware",
    "ResolveInfoParameterHandler",
]

NextHandler = Callable[["ParameterDeclaration"], "Parameter"]


class ParameterMiddleware(abc.ABC):
    @abc.abstractmethod
    def map_parameter(
        self,
        declaration: ParameterDeclaration,
        next_: NextHandler,
    ) -> Parameter: ...


class ParametersMapper(Protocol):
    def map_parameters(
        self,
        function: Callable[..., Any],
        *,
        owner: type | None = None,
        instance: Any = None,
        skip: int = 0,
    ) -> list[Parameter]: ...


class ParameterMiddlewarePipe:
    def __init__(
        self,
        middlewares: Sequence[ParameterMiddleware],
        terminal: NextHandler,
    ):
        self.middlewares = list(middlewares)
        self.terminal = terminal

    def pipe(self, middleware: ParameterMiddleware) -> None:
        self.middlewares.append(middleware)

    def map_parameter(self, declaration: ParameterDeclaration) -> Parameter:
        return self._call(0, declaration)

    def _call(self, index: int, declaration: ParameterDeclaration) -> Parameter:
        if index >= len(self.middlewares):
            return self.terminal(declaration)

        return self.middlewares[index].map_parameter(
            declaration,
            functools.partial(self._call, index + 1),
        )


class ResolveInfoParameterHandler(ParameterMiddleware):
    """Inject strawberry's `Info` into parameters annotated with it."""

    def map_parameter(self, declaration, next_):
        type_hint = declaration.type_hint
        if type_hint is Info or get_origin(type_hint) is Info:
            return ResolveInfoParameter()
        return next_(declaration)


class ContainerParameterHandler(ParameterMiddleware):
    """Inject parameters marked with `Autowire` from the container."""

    def __init__(self, container: Container):
        self.container = container

    def map_parameter(self, declaration, next_):
        autowire = declaration.annotations.get_annotation_by_type(Autowire)
        if autowire is None:
            return next_(declaration)

        identifier = autowire.identifier
        if identifier is None:
            if not declaration.is_annotated:
                raise MissingAutowireTypeError(declaration.name, declaration.function)

            members = split_optional(declaration.type_hint)[0]
            if len(members) != 1 or members[0] is Any or not isinstance(members[0], type):
                raise MissingAutowireTypeError(
                    declaration.name,
                    declaration.function,
                    declaration.type_hint,
                )
            identifier = class_identity(members[0])

        return ContainerParameter(self.container, identifier)


class PrefetchParameterMiddleware(ParameterMiddleware):
    """Resolve parameters marked with `Prefetch` through a batched method.

    The prefetch method is looked up on the class declaring the field. Its
    first parameter receives the list of sources, the others are mapped like
    any field parameter and exposed as arguments of the field.
    """

    def __init__(self, parameters_mapper: ParametersMapper):
        self.parameters_mapper = parameters_mapper

    def map_parameter(self, declaration, next_):
        prefetch = declaration.annotations.get_annotation_by_type(Prefetch)
        if prefetch is None:
            return next_(declaration)

        method_name = prefetch.method_name
        owner = declaration.owner
        if owner is None:
            raise InvalidPrefetchMethodError(
                declaration.name,
                declaration.function,
                method_name,
                "cannot be used outside of a class",
            )

        try:
            static = inspect.getattr_static(owner, method_name)
        except AttributeError:
            raise InvalidPrefetchMethodError(
                declaration.name,
                declaration.function,
                method_name,
                f"does not exist on {class_identity(owner)}",
            ) from None

        if isinstance(static, (staticmethod, classmethod)):
            batch = getattr(owner, method_name)
        elif inspect.isfunction(static):
            if declaration.instance is None:
                raise InvalidPrefetchMethodError(
                    declaration.name,
                    declaration.function,
                    method_name,
                    "must be a static or class method",
                )
            batch = getattr(declaration.instance, method_name)
        else:
            raise InvalidPrefetchMethodError(
                declaration.name,
                declaration.function,
                method_name,
                "is not a method",
            )

        parameters = self.parameters_mapper.map_parameters(
            static.__func__ if isinstance(static, (staticmethod, classmethod)) else static,
            owner=owner,
            instance=declaration.instance,
            skip=2 if inspect.isfunction(static) or isinstance(static, classmethod) else 1,
        )
        return PrefetchDataParameter(declaration.name, batch, parameters)
