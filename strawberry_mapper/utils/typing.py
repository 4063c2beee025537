from __future__ import annotations

import collections.abc
import types
import typing
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    TypeVar,
    Union,
    get_args,
    get_origin,
    overload,
)

from strawberry.types.base import StrawberryContainer, StrawberryType
from strawberry.utils.typing import is_classvar
from typing_extensions import Annotated

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

_T = TypeVar("_T")
_Type = TypeVar("_Type", bound="StrawberryType | type")

ClassIdentity: TypeAlias = str

LIST_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.Iterable,
    collections.abc.Collection,
    collections.abc.Set,
)


def class_identity(cls: type) -> ClassIdentity:
    """Return the identity used to index a class: `module.QualName`."""
    return f"{cls.__module__}.{cls.__qualname__}"


def split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split `Annotated[T, *metadata]` into `(T, metadata)`."""
    if get_origin(annotation) is Annotated:
        args = get_args(annotation)
        return args[0], tuple(args[1:])
    return annotation, ()


def is_union(annotation: Any) -> bool:
    if isinstance(annotation, types.UnionType):
        return True
    return get_origin(annotation) is Union


def split_optional(annotation: Any) -> tuple[list[Any], bool]:
    """Return the members of a union (or `[annotation]`) and its nullability."""
    if not is_union(annotation):
        if annotation is None or annotation is type(None):
            return [], True
        return [annotation], False

    members = []
    nullable = False
    for arg in get_args(annotation):
        if arg is type(None):
            nullable = True
        else:
            members.append(arg)
    return members, nullable


def list_item_type(annotation: Any) -> Any | None:
    """Return the item annotation of a list-like annotation, or None."""
    origin = get_origin(annotation)
    if origin is None:
        return None

    if origin in LIST_ORIGINS:
        args = get_args(annotation)
        if origin is tuple and (len(args) != 2 or args[1] is not Ellipsis):  # noqa: PLR2004
            return None
        return args[0] if args else Any

    return None


def get_type_hints(obj: Any) -> dict[str, Any]:
    """Evaluate the annotations of a function or class, keeping `Annotated`."""
    if isinstance(obj, type):
        hints: dict[str, Any] = {}
        for c in reversed(obj.__mro__):
            if c is object:
                continue
            own = c.__dict__.get("__annotations__", {})
            if not own:
                continue
            resolved = typing.get_type_hints(c, include_extras=True)
            for k in own:
                if not is_classvar(c, resolved[k]):
                    hints[k] = resolved[k]
        return hints

    func = getattr(obj, "__func__", obj)
    return typing.get_type_hints(func, include_extras=True)


@overload
def unwrap_type(type_: StrawberryContainer) -> StrawberryType | type: ...


@overload
def unwrap_type(type_: _Type) -> _Type: ...


def unwrap_type(type_):
    while isinstance(type_, StrawberryContainer):
        type_ = type_.of_type

    return type_


def get_function(obj: Any) -> Callable[..., Any] | None:
    """Return the plain function behind a function, staticmethod or classmethod."""
    if isinstance(obj, (staticmethod, classmethod)):
        return obj.__func__
    if isinstance(obj, types.FunctionType):
        return obj
    return None
