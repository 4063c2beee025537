"""Bindings turning the value of a generated input type into a domain object."""

from __future__ import annotations

import abc
import dataclasses
import inspect
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Sequence

from strawberry import UNSET

from .parameters import InputTypeParameter, Parameter, split_arguments

if TYPE_CHECKING:
    from strawberry.types import Info

__all__ = [
    "ClassInputBinding",
    "FactoryInputBinding",
    "InputBinding",
    "InputDecorator",
    "get_input_binding",
    "input_values",
]

INPUT_BINDING_ATTR = "__strawberry_mapper_input_binding__"


def get_input_binding(type_: Any) -> Optional[InputBinding]:
    return getattr(type_, INPUT_BINDING_ATTR, None) if isinstance(type_, type) else None


def input_values(value: Any) -> dict[str, Any]:
    """The fields of an input type instance which were actually given."""
    if isinstance(value, Mapping):
        items = value.items()
    elif dataclasses.is_dataclass(value):
        items = ((f.name, getattr(value, f.name)) for f in dataclasses.fields(value))
    else:
        items = vars(value).items()

    return {k: v for k, v in items if v is not UNSET}


class InputDecorator:
    """A function receiving the built object and extra input fields."""

    def __init__(self, func: Callable[..., Any], parameters: Sequence[Parameter] = ()):
        self.func = func
        self.parameters = list(parameters)

    def apply(
        self,
        obj: Any,
        args: dict[str, Any],
        context: Any,
        info: Optional[Info],
    ) -> Any:
        values = [p.resolve(None, args, context, info) for p in self.parameters]
        func_args, func_kwargs = split_arguments(self.parameters, values)
        result = self.func(obj, *func_args, **func_kwargs)
        return obj if result is None else result


class InputBinding(abc.ABC):
    def __init__(
        self,
        input_name: str,
        parameters: Sequence[Parameter],
        *,
        description: Optional[str] = None,
    ):
        self.input_name = input_name
        self.parameters = list(parameters)
        self.description = description
        self.decorators: list[InputDecorator] = []

    def __repr__(self):
        return f"<{type(self).__name__} {self.input_name!r}>"

    @property
    def is_update(self) -> bool:
        return False

    def add_decorator(self, decorator: InputDecorator) -> None:
        self.decorators.append(decorator)

    def get_fields(self) -> list[InputTypeParameter]:
        """Every parameter exposed as a field of the input type."""
        fields: dict[str, InputTypeParameter] = {}
        parameters = [
            *self.parameters,
            *(p for d in self.decorators for p in d.parameters),
        ]
        for parameter in parameters:
            if isinstance(parameter, InputTypeParameter):
                fields.setdefault(parameter.name, parameter)
        return list(fields.values())

    def build(self, value: Any, context: Any, info: Optional[Info]) -> Any:
        args = input_values(value)
        obj = self.create(args, context, info)
        for decorator in self.decorators:
            obj = decorator.apply(obj, args, context, info)
        return obj

    @abc.abstractmethod
    def create(self, args: dict[str, Any], context: Any, info: Optional[Info]) -> Any: ...


class FactoryInputBinding(InputBinding):
    """Build the object by calling a factory with the input fields."""

    def __init__(
        self,
        input_name: str,
        factory: Callable[..., Any],
        parameters: Sequence[Parameter],
    ):
        super().__init__(input_name, parameters)
        self.factory = factory

    def create(self, args, context, info):
        values = [p.resolve(None, args, context, info) for p in self.parameters]
        factory_args, factory_kwargs = split_arguments(self.parameters, values)
        return self.factory(*factory_args, **factory_kwargs)


class ClassInputBinding(InputBinding):
    """Build the object from its class.

    Fields matching a constructor parameter are passed to the constructor,
    every other field is set as an attribute afterwards. Fields absent from
    the input are not touched, letting the class defaults apply.
    """

    def __init__(
        self,
        input_name: str,
        cls: type,
        fields: Mapping[str, Parameter],
        *,
        description: Optional[str] = None,
        is_update: bool = False,
    ):
        super().__init__(input_name, list(fields.values()), description=description)
        self.cls = cls
        self.fields = dict(fields)
        self._is_update = is_update

    @property
    def is_update(self) -> bool:
        return self._is_update

    def create(self, args, context, info):
        values = {}
        for name, parameter in self.fields.items():
            if isinstance(parameter, InputTypeParameter) and name not in args:
                continue
            values[name] = parameter.resolve(None, args, context, info)

        signature = inspect.signature(self.cls)
        if any(p.kind == p.VAR_KEYWORD for p in signature.parameters.values()):
            return self.cls(**values)

        init_kwargs = {k: v for k, v in values.items() if k in signature.parameters}
        obj = self.cls(**init_kwargs)
        for k, v in values.items():
            if k not in init_kwargs:
                setattr(obj, k, v)
        return obj
