from __future__ import annotations

import dataclasses
import inspect
import logging
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from strawberry.annotation import StrawberryAnnotation

from strawberry_mapper.annotations import ParameterAnnotations, ParameterDeclaration
from strawberry_mapper.definitions import FIELD_DEFINITION_ATTR, FieldDefinition, FieldKind
from strawberry_mapper.mappers.parameters import (
    ContainerParameterHandler,
    ParameterMiddleware,
    ParameterMiddlewarePipe,
    PrefetchParameterMiddleware,
    ResolveInfoParameterHandler,
)
from strawberry_mapper.parameters import SourceParameter
from strawberry_mapper.utils.docstrings import get_arguments_descriptions, get_summary
from strawberry_mapper.utils.typing import (
    class_identity,
    get_function,
    get_type_hints,
    split_annotated,
)

from .field import MappedField

if TYPE_CHECKING:
    from strawberry_mapper.containers import Container
    from strawberry_mapper.mappers.type_handler import TypeHandler
    from strawberry_mapper.parameters import Parameter

logger = logging.getLogger(__name__)

__all__ = ["FieldsBuilder"]


def get_field_definition(value: Any) -> Optional[FieldDefinition]:
    func = get_function(value)
    return getattr(func, FIELD_DEFINITION_ATTR, None) if func is not None else None


def _attribute_default(cls: type, name: str) -> Any:
    dataclass_fields = getattr(cls, "__dataclass_fields__", None)
    if dataclass_fields is not None and name in dataclass_fields:
        f = dataclass_fields[name]
        if f.default is not dataclasses.MISSING:
            return f.default
        if f.default_factory is not dataclasses.MISSING:
            return f.default_factory()
        return inspect.Parameter.empty

    return getattr(cls, name, inspect.Parameter.empty)


class FieldsBuilder:
    """Create the fields of root, object and input types from mapped methods."""

    def __init__(
        self,
        type_handler: TypeHandler,
        container: Container,
        *,
        middlewares: Sequence[ParameterMiddleware] = (),
        description_from_docstring: bool = True,
    ):
        self.type_handler = type_handler
        self.container = container
        self.description_from_docstring = description_from_docstring
        self.parameter_pipe = ParameterMiddlewarePipe(
            [
                *middlewares,
                ResolveInfoParameterHandler(),
                PrefetchParameterMiddleware(self),
                ContainerParameterHandler(container),
            ],
            terminal=type_handler.map_parameter,
        )
        self._instances: dict[type, Any] = {}

    def get_instance(self, cls: type) -> Any:
        """The instance of a controller or external type class."""
        try:
            return self._instances[cls]
        except KeyError:
            pass

        identity = class_identity(cls)
        instance = self.container.get(identity) if self.container.has(identity) else cls()
        self._instances[cls] = instance
        return instance

    def get_queries(self, controller: type) -> list[MappedField]:
        return self._get_root_fields(controller, "query")

    def get_mutations(self, controller: type) -> list[MappedField]:
        return self._get_root_fields(controller, "mutation")

    def get_fields(self, type_class: type, *, external: bool) -> list[MappedField]:
        """The fields declared by a type class or a type extension.

        Methods of external types and extensions receive the domain object as
        first argument after `self`. Methods of self types are called on the
        domain object itself.
        """
        members = self._get_members(type_class, "field")
        if not members:
            return []

        instance = self.get_instance(type_class) if external else None
        fields = []
        for name, value, definition in members:
            if external:
                pass_source = True
            else:
                pass_source = not isinstance(value, (staticmethod, classmethod))
            fields.append(
                self._create_field(
                    type_class,
                    name,
                    value,
                    definition,
                    instance=instance,
                    pass_source=pass_source,
                ),
            )
        return fields

    def map_parameters(
        self,
        function: Callable[..., Any],
        *,
        owner: Optional[type] = None,
        instance: Any = None,
        skip: int = 0,
    ) -> list[Parameter]:
        """Map the parameters of `function`, ignoring the first `skip` ones."""
        signature = inspect.signature(function)
        hints = get_type_hints(function)
        descriptions = get_arguments_descriptions(function)

        parameters = []
        for parameter in list(signature.parameters.values())[skip:]:
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                continue

            type_hint, metadata = split_annotated(
                hints.get(parameter.name, inspect.Parameter.empty),
            )
            mapped = self.parameter_pipe.map_parameter(
                ParameterDeclaration(
                    parameter=parameter,
                    function=function,
                    type_hint=type_hint,
                    annotations=ParameterAnnotations(metadata),
                    description=descriptions.get(parameter.name),
                    owner=owner,
                    instance=instance,
                ),
            )
            if parameter.kind == parameter.KEYWORD_ONLY:
                mapped.keyword = parameter.name
            parameters.append(mapped)

        return parameters

    def map_input_fields(self, cls: type) -> dict[str, Parameter]:
        """Map the annotated public attributes of an input class."""
        fields = {}
        for name, hint in get_type_hints(cls).items():
            if name.startswith("_"):
                continue

            type_hint, metadata = split_annotated(hint)
            fields[name] = self.parameter_pipe.map_parameter(
                ParameterDeclaration(
                    parameter=inspect.Parameter(
                        name,
                        inspect.Parameter.KEYWORD_ONLY,
                        default=_attribute_default(cls, name),
                    ),
                    function=cls,
                    type_hint=type_hint,
                    annotations=ParameterAnnotations(metadata),
                    owner=cls,
                ),
            )
        return fields

    def _get_members(
        self,
        cls: type,
        kind: FieldKind,
    ) -> list[tuple[str, Any, FieldDefinition]]:
        members: dict[str, tuple[str, Any, FieldDefinition]] = {}
        for base in reversed(cls.__mro__):
            for name, value in base.__dict__.items():
                definition = get_field_definition(value)
                if definition is not None and definition.kind == kind:
                    members[name] = (name, value, definition)
                elif name in members:
                    # Overridden without being mapped again
                    del members[name]
        return list(members.values())

    def _get_root_fields(self, controller: type, kind: FieldKind) -> list[MappedField]:
        members = self._get_members(controller, kind)
        if not members:
            return []

        logger.debug("Mapping %s fields of %s", kind, class_identity(controller))
        instance = self.get_instance(controller)
        return [
            self._create_field(
                controller,
                name,
                value,
                definition,
                instance=instance,
                pass_source=False,
            )
            for name, value, definition in members
        ]

    def _create_field(
        self,
        cls: type,
        name: str,
        value: Any,
        definition: FieldDefinition,
        *,
        instance: Any,
        pass_source: bool,
    ) -> MappedField:
        function = get_function(value)
        assert function is not None

        if isinstance(value, staticmethod):
            func, skip = function, 0
        elif isinstance(value, classmethod):
            func, skip = getattr(cls, name), 1
        elif instance is not None:
            func, skip = getattr(instance, name), 1
        else:
            # Self types: the source object is `self`
            func, skip = function, 0

        parameters: list[Parameter] = []
        if pass_source:
            parameters.append(SourceParameter())
            skip += 1

        parameters.extend(
            self.map_parameters(function, owner=cls, instance=instance, skip=skip),
        )
        mapped_type = self.type_handler.map_return_type(function)

        description = definition.description
        if description is None and self.description_from_docstring:
            description = get_summary(function)

        return MappedField(
            func=func,
            parameters=parameters,
            mapped_type=mapped_type,
            python_name=name,
            graphql_name=definition.name,
            type_annotation=StrawberryAnnotation(mapped_type),
            description=description,
            deprecation_reason=definition.deprecation_reason,
        )
