from __future__ import annotations

import builtins
import dataclasses
import logging
import types
from typing import TYPE_CHECKING, Any, Callable, Optional, TypeVar, overload

import strawberry
from strawberry import UNSET
from strawberry.types.base import StrawberryOptional

from .definitions import (
    EXTEND_TYPE_DEFINITION_ATTR,
    INPUT_DEFINITIONS_ATTR,
    TYPE_DEFINITION_ATTR,
    ExtendTypeDefinition,
    InputDefinition,
    TypeDefinition,
    get_own_definition,
)
from .inputs import (
    INPUT_BINDING_ATTR,
    ClassInputBinding,
    FactoryInputBinding,
    InputBinding,
    InputDecorator,
)
from .utils.docstrings import get_summary
from .utils.typing import get_function

if TYPE_CHECKING:
    from .fields.builder import FieldsBuilder
    from .fields.field import MappedField
    from .mappers.cache import MethodRef
    from .mappers.glob import GlobTypeMapper
    from .parameters import InputTypeParameter

logger = logging.getLogger(__name__)

__all__ = [
    "GeneratedType",
    "TypeGenerator",
    "extend_type",
    "get_generated_type",
    "input",
    "type",
]

_T = TypeVar("_T", bound=builtins.type)

GENERATED_TYPE_ATTR = "__strawberry_mapper_generated__"


@overload
def type(cls: _T) -> _T: ...  # noqa: A001


@overload
def type(  # noqa: A001
    *,
    for_class: Optional[builtins.type] = None,
    name: Optional[str] = None,
    default: bool = True,
    description: Optional[str] = None,
) -> Callable[[_T], _T]: ...


def type(  # noqa: A001
    cls=None,
    *,
    for_class: Optional[builtins.type] = None,
    name: Optional[str] = None,
    default: bool = True,
    description: Optional[str] = None,
):
    """Declare a GraphQL output type.

    Without `for_class` the decorated class is its own domain class and its
    `field` methods are called on the domain objects. With `for_class` the
    decorated class maps another class, and its `field` methods receive the
    domain object as their first argument.

    Examples
    --------
        >>> @strawberry_mapper.type(for_class=Product)
        ... class ProductType:
        ...     @strawberry_mapper.field
        ...     def name(self, product: Product) -> str:
        ...         return product.name

    """
    definition = TypeDefinition(
        for_class=for_class,
        name=name,
        default=default,
        description=description,
    )

    def wrapper(cls: _T) -> _T:
        setattr(cls, TYPE_DEFINITION_ATTR, definition)
        return cls

    if cls is not None:
        return wrapper(cls)

    return wrapper


def extend_type(
    *,
    for_class: Optional[builtins.type] = None,
    name: Optional[str] = None,
) -> Callable[[_T], _T]:
    """Add the `field` methods of the decorated class to an existing type.

    The type is selected either by its domain class or by its GraphQL name.
    """
    if for_class is None and name is None:
        raise TypeError("extend_type() requires either for_class or name")

    definition = ExtendTypeDefinition(for_class=for_class, name=name)

    def wrapper(cls: _T) -> _T:
        setattr(cls, EXTEND_TYPE_DEFINITION_ATTR, definition)
        return cls

    return wrapper


@overload
def input(cls: _T) -> _T: ...  # noqa: A001


@overload
def input(  # noqa: A001
    *,
    name: Optional[str] = None,
    default: Optional[bool] = None,
    description: Optional[str] = None,
    update: bool = False,
) -> Callable[[_T], _T]: ...


def input(  # noqa: A001
    cls=None,
    *,
    name: Optional[str] = None,
    default: Optional[bool] = None,
    description: Optional[str] = None,
    update: bool = False,
):
    """Declare a GraphQL input type building instances of the decorated class.

    The annotated public attributes of the class become the input fields.
    Can be stacked to declare several inputs for the same class. The input
    is the default input of the class when `default` is true or, when not
    given, when the input has no explicit name.

    With `update=True`, every field is optional and fields absent from the
    input are not set on the object.
    """
    definition = InputDefinition(
        name=name,
        default=default,
        description=description,
        update=update,
    )

    def wrapper(cls: _T) -> _T:
        existing = get_own_definition(cls, INPUT_DEFINITIONS_ATTR) or ()
        # Decorators run bottom up, keep the declaration order
        setattr(cls, INPUT_DEFINITIONS_ATTR, (definition, *existing))
        return cls

    if cls is not None:
        return wrapper(cls)

    return wrapper


@dataclasses.dataclass(frozen=True)
class GeneratedType:
    name: str
    is_input: bool


def get_generated_type(type_: Any) -> Optional[GeneratedType]:
    if not isinstance(type_, builtins.type):
        return None
    return type_.__dict__.get(GENERATED_TYPE_ATTR)


class TypeGenerator:
    """Create the strawberry types of the mapped GraphQL types.

    Types are handed out as placeholder classes as soon as they are
    referenced, so types can reference each other. `finalize()` then fills
    every placeholder with its fields and processes it with strawberry.
    """

    def __init__(
        self,
        glob_mapper: GlobTypeMapper,
        *,
        description_from_docstring: bool = True,
    ):
        self.glob_mapper = glob_mapper
        self.description_from_docstring = description_from_docstring
        self.fields_builder: Optional[FieldsBuilder] = None
        self._output_types: dict[str, builtins.type] = {}
        self._input_types: dict[str, builtins.type] = {}
        self._pending: list[builtins.type] = []

    def get_output_type(self, type_name: str) -> builtins.type:
        cls = self._output_types.get(type_name)
        if cls is None:
            cls = self._output_types[type_name] = self._placeholder(type_name, is_input=False)
        return cls

    def get_input_type(self, input_name: str) -> builtins.type:
        cls = self._input_types.get(input_name)
        if cls is None:
            cls = self._input_types[input_name] = self._placeholder(input_name, is_input=True)
        return cls

    def get_output_types(self) -> list[builtins.type]:
        return list(self._output_types.values())

    def finalize(self) -> None:
        while self._pending:
            cls = self._pending.pop(0)
            generated = get_generated_type(cls)
            assert generated is not None
            logger.debug("Generating type %s", generated.name)
            if generated.is_input:
                self._finalize_input(cls, generated.name)
            else:
                self._finalize_output(cls, generated.name)

    def _placeholder(self, name: str, *, is_input: bool) -> builtins.type:
        cls = types.new_class(name, (), {}, lambda ns: ns.update(__module__=__name__))
        setattr(cls, GENERATED_TYPE_ATTR, GeneratedType(name=name, is_input=is_input))
        self._pending.append(cls)
        return cls

    def _description(self, declared: Optional[str], obj: Any) -> Optional[str]:
        if declared is None and self.description_from_docstring:
            return get_summary(obj)
        return declared

    def _finalize_output(self, cls: builtins.type, type_name: str) -> None:
        assert self.fields_builder is not None
        type_class = self.glob_mapper.get_type_class_by_name(type_name)
        assert type_class is not None
        definition: TypeDefinition = get_own_definition(type_class, TYPE_DEFINITION_ATTR)
        domain_class = definition.for_class or type_class

        fields: dict[str, MappedField] = {}
        for f in self.fields_builder.get_fields(
            type_class,
            external=definition.for_class is not None,
        ):
            fields[f.python_name] = f

        for extend_class in self.glob_mapper.get_extend_types(type_name, domain_class):
            for f in self.fields_builder.get_fields(extend_class, external=True):
                if f.python_name in fields:
                    logger.debug(
                        "Field %s of %s replaced by %s",
                        f.python_name,
                        type_name,
                        extend_class.__qualname__,
                    )
                fields[f.python_name] = f

        annotations = cls.__dict__.get("__annotations__", {})
        cls.__annotations__ = annotations
        for python_name, f in fields.items():
            annotations[python_name] = f.mapped_type
            setattr(cls, python_name, f)

        def is_type_of(obj, info):
            return isinstance(obj, (cls, domain_class))

        cls.is_type_of = is_type_of

        strawberry.type(
            cls,
            name=type_name,
            description=self._description(definition.description, type_class),
        )

    def _finalize_input(self, cls: builtins.type, input_name: str) -> None:
        binding = self._create_input_binding(input_name)
        for ref in self.glob_mapper.get_decorators_by_input_name(input_name):
            binding.add_decorator(self._create_input_decorator(ref))

        annotations = cls.__dict__.get("__annotations__", {})
        cls.__annotations__ = annotations
        for parameter in binding.get_fields():
            type_, field = self._input_field(parameter, is_update=binding.is_update)
            annotations[parameter.name] = type_
            setattr(cls, parameter.name, field)

        setattr(cls, INPUT_BINDING_ATTR, binding)
        strawberry.input(cls, name=input_name, description=binding.description)

    def _input_field(self, parameter: InputTypeParameter, *, is_update: bool):
        type_ = parameter.type
        if is_update:
            if not isinstance(type_, StrawberryOptional):
                type_ = StrawberryOptional(type_)
            return type_, strawberry.field(default=UNSET, description=parameter.description)

        if not parameter.has_default:
            return type_, strawberry.field(description=parameter.description)

        default = parameter.default
        if isinstance(default, (list, dict, set)):
            return type_, strawberry.field(
                default_factory=lambda: default.copy(),
                description=parameter.description,
            )
        return type_, strawberry.field(default=default, description=parameter.description)

    def _bind_method(self, ref: MethodRef) -> tuple[Callable[..., Any], Any, int, Any]:
        """Return the callable, function, bound argument count and instance."""
        assert self.fields_builder is not None
        cls, value = self.glob_mapper.get_method(ref)
        function = get_function(value)
        assert function is not None

        if isinstance(value, staticmethod):
            return function, function, 0, None
        if isinstance(value, classmethod):
            return getattr(cls, ref.method_name), function, 1, None

        instance = self.fields_builder.get_instance(cls)
        return getattr(instance, ref.method_name), function, 1, instance

    def _create_input_binding(self, input_name: str) -> InputBinding:
        assert self.fields_builder is not None
        factory_ref = self.glob_mapper.get_factory_by_input_name(input_name)
        if factory_ref is not None:
            func, function, skip, instance = self._bind_method(factory_ref)
            return FactoryInputBinding(
                input_name,
                func,
                self.fields_builder.map_parameters(
                    function,
                    owner=self.glob_mapper.get_class(factory_ref.class_name),
                    instance=instance,
                    skip=skip,
                ),
            )

        named_input = self.glob_mapper.get_input_by_input_name(input_name)
        assert named_input is not None
        input_class = self.glob_mapper.get_class(named_input.input_class)
        return ClassInputBinding(
            input_name,
            input_class,
            self.fields_builder.map_input_fields(input_class),
            description=self._description(named_input.description, input_class),
            is_update=named_input.is_update,
        )

    def _create_input_decorator(self, ref: MethodRef) -> InputDecorator:
        assert self.fields_builder is not None
        func, function, skip, instance = self._bind_method(ref)
        return InputDecorator(
            func,
            self.fields_builder.map_parameters(
                function,
                owner=self.glob_mapper.get_class(ref.class_name),
                instance=instance,
                # The first parameter receives the object being decorated
                skip=skip + 1,
            ),
        )
