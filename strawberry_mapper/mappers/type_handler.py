from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from strawberry import UNSET
from strawberry.annotation import StrawberryAnnotation
from strawberry.types import get_object_definition
from strawberry.types.base import StrawberryList, StrawberryOptional
from strawberry.types.union import StrawberryUnion

from strawberry_mapper.annotations import HideParameter, UseInputType
from strawberry_mapper.exceptions import (
    CannotHideParameterRuntimeError,
    CannotMapTypeError,
    callable_name,
)
from strawberry_mapper.parameters import DefaultValueParameter, InputTypeParameter
from strawberry_mapper.type import get_generated_type
from strawberry_mapper.utils.typing import (
    get_type_hints,
    list_item_type,
    split_annotated,
    split_optional,
)

from .root import BUILTIN_SCALARS

if TYPE_CHECKING:
    from strawberry.types.base import StrawberryType

    from strawberry_mapper.annotations import ParameterDeclaration
    from strawberry_mapper.arguments import ArgumentResolver
    from strawberry_mapper.parameters import Parameter

    from .root import RootTypeMapper

logger = logging.getLogger(__name__)

__all__ = [
    "TypeHandler",
    "graphql_type_name",
    "named_type_name",
]


def named_type_name(type_: Any) -> str:
    """The GraphQL name of a named (non wrapping) type."""
    if isinstance(type_, StrawberryUnion):
        return type_.graphql_name or "Union"

    generated = get_generated_type(type_)
    if generated is not None:
        return generated.name

    try:
        if type_ in BUILTIN_SCALARS:
            return BUILTIN_SCALARS[type_]
    except TypeError:
        pass

    scalar_definition = getattr(type_, "_scalar_definition", None)
    if scalar_definition is not None:
        return scalar_definition.name

    definition = getattr(type_, "__strawberry_definition__", None)
    if definition is not None:
        name = getattr(definition, "name", None)
        if name:
            return name

    return getattr(type_, "__name__", repr(type_))


def graphql_type_name(type_: Any) -> str:
    """Render a mapped type the way GraphQL prints it, e.g. `[Int!]!`."""
    if isinstance(type_, StrawberryOptional):
        name = graphql_type_name(type_.of_type)
        return name[:-1] if name.endswith("!") else name

    if isinstance(type_, StrawberryList):
        return f"[{graphql_type_name(type_.of_type)}]!"

    return f"{named_type_name(type_)}!"


class TypeHandler:
    """Map return types and parameters of mapped methods to GraphQL types.

    Named types are delegated to the root type mapper. Nullability, lists and
    unions are handled here.
    """

    def __init__(self, root_mapper: RootTypeMapper, argument_resolver: ArgumentResolver):
        self.root_mapper = root_mapper
        self.argument_resolver = argument_resolver
        self._unions: dict[str, StrawberryUnion] = {}

    def map_return_type(self, function: Callable[..., Any]) -> StrawberryType | type:
        hints = get_type_hints(function)
        if "return" not in hints:
            raise CannotMapTypeError.for_missing_return_annotation(function)

        return self.map_type(
            hints["return"],
            is_input=False,
            function=function,
            where="return type",
        )

    def map_parameter(self, declaration: ParameterDeclaration) -> Parameter:
        annotations = declaration.annotations

        if annotations.get_annotation_by_type(HideParameter) is not None:
            if not declaration.has_default:
                raise CannotHideParameterRuntimeError(declaration.name, declaration.function)
            return DefaultValueParameter(declaration.default)

        if not declaration.is_annotated:
            raise CannotMapTypeError.for_missing_parameter_annotation(
                declaration.function,
                declaration.name,
            )

        where = f'parameter "{declaration.name}"'
        use_input_type = annotations.get_annotation_by_type(UseInputType)
        if use_input_type is not None:
            named = self.root_mapper.map_name(use_input_type.input_type, is_input=True)
            if named is None:
                raise CannotMapTypeError.for_unknown_type(
                    use_input_type.input_type,
                    where=f"{where} of {callable_name(declaration.function)}",
                    function=declaration.function,
                )
            type_ = self.map_type(
                declaration.type_hint,
                is_input=True,
                function=declaration.function,
                where=where,
                named=named,
            )
        else:
            type_ = self.map_type(
                declaration.type_hint,
                is_input=True,
                function=declaration.function,
                where=where,
            )

        if declaration.has_default:
            default = declaration.default
        elif isinstance(type_, StrawberryOptional):
            default = None
        else:
            default = UNSET

        return InputTypeParameter(
            declaration.name,
            type_,
            self.argument_resolver,
            description=annotations.description or declaration.description,
            default=default,
        )

    def map_type(
        self,
        annotation: Any,
        *,
        is_input: bool,
        function: Optional[Callable[..., Any]] = None,
        where: str = "return type",
        named: Optional[StrawberryType | type] = None,
    ) -> StrawberryType | type:
        """Map an annotation, keeping its nullability.

        `named` replaces the innermost named type, leaving the list and
        nullability wrappers of the annotation around it.
        """
        annotation, _ = split_annotated(annotation)
        members, nullable = split_optional(annotation)

        if not members:
            if is_input:
                raise CannotMapTypeError.for_unknown_type(
                    annotation,
                    where=self._where(where, function),
                    function=function,
                )
            return type(None)

        if len(members) > 1:
            type_ = self._map_union(members, is_input=is_input, function=function, where=where)
        else:
            type_ = self._map_non_null(
                members[0],
                is_input=is_input,
                function=function,
                where=where,
                named=named,
            )

        return StrawberryOptional(type_) if nullable else type_

    def is_object_type(self, type_: Any) -> bool:
        generated = get_generated_type(type_)
        if generated is not None:
            return not generated.is_input

        definition = get_object_definition(type_)
        return (
            definition is not None
            and not definition.is_input
            and not definition.is_interface
        )

    def _where(self, where: str, function: Optional[Callable[..., Any]]) -> str:
        return f"{where} of {callable_name(function)}" if function is not None else where

    def _map_non_null(
        self,
        annotation: Any,
        *,
        is_input: bool,
        function: Optional[Callable[..., Any]],
        where: str,
        named: Optional[StrawberryType | type] = None,
    ) -> StrawberryType | type:
        item = list_item_type(annotation)
        if item is not None:
            return StrawberryList(
                self.map_type(
                    item,
                    is_input=is_input,
                    function=function,
                    where=where,
                    named=named,
                ),
            )

        if named is not None:
            return named

        if not self.root_mapper.can_map(annotation, is_input=is_input):
            raise CannotMapTypeError.for_unknown_type(
                annotation,
                where=self._where(where, function),
                function=function,
            )
        return self.root_mapper.map(annotation, is_input=is_input)

    def _map_union(
        self,
        members: list[Any],
        *,
        is_input: bool,
        function: Optional[Callable[..., Any]],
        where: str,
    ) -> StrawberryUnion:
        mapped = [
            self._map_non_null(m, is_input=is_input, function=function, where=where)
            for m in members
        ]

        invalid = [
            graphql_type_name(t)
            for t in mapped
            if is_input or not self.is_object_type(t)
        ]
        if invalid:
            raise CannotMapTypeError.for_union_members(function, invalid, where=where)

        name = "Union" + "".join(named_type_name(t) for t in mapped)
        union = self._unions.get(name)
        if union is None:
            logger.debug("Creating union %s", name)
            union = self._unions[name] = StrawberryUnion(
                name=name,
                type_annotations=tuple(StrawberryAnnotation(t) for t in mapped),
            )
        return union
