from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, TypeVar, overload

from strawberry.types.field import StrawberryField
from strawberry.utils.await_maybe import await_maybe
from strawberry.utils.inspect import in_async_context

from strawberry_mapper.definitions import FIELD_DEFINITION_ATTR, FieldDefinition, FieldKind
from strawberry_mapper.deferred import Deferred
from strawberry_mapper.parameters import (
    InputTypeParameter,
    Parameter,
    PrefetchDataParameter,
    split_arguments,
)
from strawberry_mapper.resolvers import django_resolver
from strawberry_mapper.utils.typing import get_function

if TYPE_CHECKING:
    from graphql.pyutils import AwaitableOrValue
    from strawberry.types import Info
    from strawberry.types.arguments import StrawberryArgument
    from strawberry.types.base import StrawberryType
    from typing_extensions import Self

__all__ = [
    "MappedField",
    "field",
    "iter_input_parameters",
    "mutation",
    "query",
]

_F = TypeVar("_F")


def iter_input_parameters(parameters: Sequence[Parameter]):
    """Yield every parameter exposed as a GraphQL argument, prefetch included."""
    for parameter in parameters:
        if isinstance(parameter, InputTypeParameter):
            yield parameter
        elif isinstance(parameter, PrefetchDataParameter):
            yield from iter_input_parameters(parameter.parameters)


class MappedField(StrawberryField):
    """A field resolved by calling a mapped method.

    The values of `parameters` are resolved on each call and passed to
    `func`. When some of them are deferred (prefetched values) they are
    waited for before calling it, or awaited in async execution.
    """

    def __init__(
        self,
        func: Optional[Callable[..., Any]] = None,
        parameters: Sequence[Parameter] = (),
        mapped_type: StrawberryType | type | None = None,
        **kwargs,
    ):
        self.func = func
        self.parameters = list(parameters)
        self.mapped_type = mapped_type
        self._mapped_arguments: Optional[list[StrawberryArgument]] = None
        super().__init__(**kwargs)

    def __copy__(self) -> Self:
        new_field = super().__copy__()
        new_field.func = self.func
        new_field.parameters = self.parameters
        new_field.mapped_type = self.mapped_type
        return new_field

    @property
    def is_basic_field(self) -> bool:
        return False

    @property
    def arguments(self) -> list[StrawberryArgument]:
        if self._mapped_arguments is None:
            arguments: dict[str, StrawberryArgument] = {}
            for parameter in iter_input_parameters(self.parameters):
                arguments.setdefault(parameter.name, parameter.to_argument())
            self._mapped_arguments = list(arguments.values())
        return self._mapped_arguments

    @arguments.setter
    def arguments(self, value: list[StrawberryArgument]):
        args_prop = super(MappedField, self.__class__).arguments
        return args_prop.fset(self, value)  # type: ignore

    def get_result(
        self,
        source: Any,
        info: Info | None,
        args: list[Any],
        kwargs: dict[str, Any],
    ) -> AwaitableOrValue[Any]:
        assert self.func is not None
        context = info.context if info is not None else None
        values = [p.resolve(source, kwargs, context, info) for p in self.parameters]

        if any(isinstance(v, Deferred) for v in values):
            deferred = Deferred.gather(values)
            if in_async_context():
                return self._call_async(deferred)
            values = deferred.wait()

        return self._call(values)

    async def _call_async(self, deferred: Deferred[list[Any]]) -> Any:
        values = await deferred
        return await await_maybe(self._call(values))

    def _call(self, values: list[Any]) -> AwaitableOrValue[Any]:
        assert self.func is not None
        args, kwargs = split_arguments(self.parameters, values)
        return django_resolver(self.func)(*args, **kwargs)


def _mark(
    kind: FieldKind,
    f: Any,
    name: Optional[str],
    description: Optional[str],
    deprecation_reason: Optional[str],
):
    definition = FieldDefinition(
        kind=kind,
        name=name,
        description=description,
        deprecation_reason=deprecation_reason,
    )

    def wrapper(func: _F) -> _F:
        target = get_function(func) or func
        setattr(target, FIELD_DEFINITION_ATTR, definition)
        return func

    if f is not None:
        return wrapper(f)

    return wrapper


@overload
def field(f: _F) -> _F: ...


@overload
def field(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    deprecation_reason: Optional[str] = None,
) -> Callable[[_F], _F]: ...


def field(
    f=None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    deprecation_reason: Optional[str] = None,
):
    """Expose a method of a type (or type extension) as a GraphQL field.

    Examples
    --------
        >>> @strawberry_mapper.type(for_class=Product)
        ... class ProductType:
        ...     @strawberry_mapper.field
        ...     def name(self, product: Product) -> str:
        ...         return product.name

    """
    return _mark("field", f, name, description, deprecation_reason)


@overload
def query(f: _F) -> _F: ...


@overload
def query(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    deprecation_reason: Optional[str] = None,
) -> Callable[[_F], _F]: ...


def query(
    f=None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    deprecation_reason: Optional[str] = None,
):
    """Expose a controller method as a field of the `Query` type."""
    return _mark("query", f, name, description, deprecation_reason)


@overload
def mutation(f: _F) -> _F: ...


@overload
def mutation(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    deprecation_reason: Optional[str] = None,
) -> Callable[[_F], _F]: ...


def mutation(
    f=None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    deprecation_reason: Optional[str] = None,
):
    """Expose a controller method as a field of the `Mutation` type."""
    return _mark("mutation", f, name, description, deprecation_reason)
