from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar, overload

from .definitions import (
    DECORATE_DEFINITION_ATTR,
    FACTORY_DEFINITION_ATTR,
    DecorateDefinition,
    FactoryDefinition,
)
from .utils.typing import get_function

__all__ = [
    "decorate",
    "factory",
]

_F = TypeVar("_F")


def _set_definition(func: Any, attr: str, definition: Any) -> None:
    target = get_function(func) or func
    setattr(target, attr, definition)


@overload
def factory(f: _F) -> _F: ...


@overload
def factory(
    *,
    name: Optional[str] = None,
    default: bool = True,
) -> Callable[[_F], _F]: ...


def factory(
    f=None,
    *,
    name: Optional[str] = None,
    default: bool = True,
):
    """Declare a method building domain objects from an input type.

    The return annotation is the class of the built objects and the
    parameters are the fields of the input type, named `name` or
    `<ReturnClass>Input`. Only default factories are used implicitly when a
    parameter is annotated with the built class. Factories must be declared
    on a discovered class.

    Examples
    --------
        >>> class ProductFactory:
        ...     @strawberry_mapper.factory
        ...     @staticmethod
        ...     def create_product(name: str, price: float) -> Product:
        ...         return Product(name=name, price=price)

    """
    definition = FactoryDefinition(name=name, default=default)

    def wrapper(func: _F) -> _F:
        _set_definition(func, FACTORY_DEFINITION_ATTR, definition)
        return func

    if f is not None:
        return wrapper(f)

    return wrapper


def decorate(input_name: str) -> Callable[[_F], _F]:
    """Declare a method post-processing objects built from an input type.

    The first parameter receives the built object, the other ones are added
    as fields of the input type. The returned value replaces the object,
    unless it is `None`.
    """
    definition = DecorateDefinition(input_name=input_name)

    def wrapper(func: _F) -> _F:
        _set_definition(func, DECORATE_DEFINITION_ATTR, definition)
        return func

    return wrapper
