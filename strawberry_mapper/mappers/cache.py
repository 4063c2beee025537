from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple, Optional

from strawberry_mapper.exceptions import DuplicateMappingError

if TYPE_CHECKING:
    from strawberry_mapper.discovery import ClassAnnotations, ExtendClassAnnotations
    from strawberry_mapper.utils.typing import ClassIdentity


class MethodRef(NamedTuple):
    class_name: ClassIdentity
    method_name: str


class DefaultInput(NamedTuple):
    input_class: ClassIdentity
    input_name: str
    description: Optional[str]
    is_update: bool


class NamedInput(NamedTuple):
    input_class: ClassIdentity
    description: Optional[str]
    is_update: bool


class TypeMapperCache:
    """The aggregated declarations of every discovered class.

    Filled once per build through `register_annotations` and only read
    afterwards. Lookups return `None` on a miss so callers can fall back to
    other mapping strategies.
    """

    def __init__(self):
        # domain class => GraphQL type class
        self._class_to_type: dict[ClassIdentity, ClassIdentity] = {}
        # GraphQL type name => GraphQL type class
        self._name_to_type: dict[str, ClassIdentity] = {}
        # domain class => default factory
        self._class_to_factory: dict[ClassIdentity, MethodRef] = {}
        # GraphQL input type name => factory
        self._input_name_to_factory: dict[str, MethodRef] = {}
        # GraphQL input type name => decorators, in registration order
        self._input_name_to_decorators: dict[str, list[MethodRef]] = {}
        # domain class => default input
        self._class_to_input: dict[ClassIdentity, DefaultInput] = {}
        # GraphQL input type name => input
        self._name_to_input: dict[str, NamedInput] = {}

    def register_annotations(
        self,
        source_class: ClassIdentity,
        annotations: ClassAnnotations,
    ) -> None:
        """Merge the declarations of one class into the cache.

        Raises `DuplicateMappingError` as soon as a conflict is found.
        """
        type_class_name = annotations.type_class_name
        if type_class_name is not None:
            if annotations.is_default:
                existing = self._class_to_type.get(type_class_name)
                if existing is not None:
                    raise DuplicateMappingError.for_type(
                        type_class_name,
                        existing,
                        source_class,
                    )
                self._class_to_type[type_class_name] = source_class

            if annotations.type_name is not None:
                self._name_to_type[annotations.type_name] = source_class

        for factory in annotations.factories:
            ref = MethodRef(factory.declaring_class, factory.method_name)
            # Only the default factory is the implicit constructor of its class
            if factory.is_default:
                existing_ref = self._class_to_factory.get(factory.input_class_name)
                if existing_ref is not None:
                    raise DuplicateMappingError.for_factory(
                        factory.input_class_name,
                        existing_ref.class_name,
                        existing_ref.method_name,
                        ref.class_name,
                        ref.method_name,
                    )
                self._class_to_factory[factory.input_class_name] = ref

            self._input_name_to_factory[factory.input_name] = ref

        for input_ in annotations.inputs:
            if input_.is_default:
                existing_input = self._class_to_input.get(input_.input_class_name)
                if existing_input is not None:
                    raise DuplicateMappingError.for_default_input(
                        input_.input_class_name,
                        existing_input.input_class,
                        source_class,
                    )
                self._class_to_input[input_.input_class_name] = DefaultInput(
                    source_class,
                    input_.input_name,
                    input_.description,
                    input_.is_update,
                )

            existing_named = self._name_to_input.get(input_.input_name)
            if existing_named is not None:
                raise DuplicateMappingError.for_two_inputs(
                    input_.input_name,
                    existing_named.input_class,
                    input_.input_class_name,
                )
            self._name_to_input[input_.input_name] = NamedInput(
                input_.input_class_name,
                input_.description,
                input_.is_update,
            )

        for decorator in annotations.decorators:
            self._input_name_to_decorators.setdefault(decorator.input_name, []).append(
                MethodRef(decorator.declaring_class, decorator.method_name),
            )

    def get_type_by_object_class(self, class_name: ClassIdentity) -> Optional[ClassIdentity]:
        return self._class_to_type.get(class_name)

    def get_supported_classes(self) -> list[ClassIdentity]:
        return list(self._class_to_type)

    def get_type_names(self) -> list[str]:
        return list(self._name_to_type)

    def get_type_by_graphql_type_name(self, graphql_type_name: str) -> Optional[ClassIdentity]:
        return self._name_to_type.get(graphql_type_name)

    def get_factory_by_object_class(self, class_name: ClassIdentity) -> Optional[MethodRef]:
        return self._class_to_factory.get(class_name)

    def get_factory_by_graphql_input_type_name(
        self,
        graphql_type_name: str,
    ) -> Optional[MethodRef]:
        return self._input_name_to_factory.get(graphql_type_name)

    def get_decorators_by_graphql_input_type_name(
        self,
        graphql_type_name: str,
    ) -> Optional[list[MethodRef]]:
        decorators = self._input_name_to_decorators.get(graphql_type_name)
        return list(decorators) if decorators is not None else None

    def get_input_by_object_class(self, class_name: ClassIdentity) -> Optional[DefaultInput]:
        return self._class_to_input.get(class_name)

    def get_input_by_graphql_input_type_name(
        self,
        graphql_type_name: str,
    ) -> Optional[NamedInput]:
        return self._name_to_input.get(graphql_type_name)

    def get_input_names(self) -> list[str]:
        return list(self._name_to_input) + [
            name for name in self._input_name_to_factory if name not in self._name_to_input
        ]


class ExtendTypeMapperCache:
    """Type extenders indexed by domain class and by GraphQL type name."""

    def __init__(self):
        self._class_to_extend_types: dict[ClassIdentity, dict[ClassIdentity, None]] = {}
        self._name_to_extend_types: dict[str, dict[ClassIdentity, None]] = {}

    def register_annotations(
        self,
        source_class: ClassIdentity,
        annotations: ExtendClassAnnotations,
    ) -> None:
        if annotations.extend_type_class_name is not None:
            self._class_to_extend_types.setdefault(
                annotations.extend_type_class_name,
                {},
            )[source_class] = None

        if annotations.extend_type_name is not None:
            self._name_to_extend_types.setdefault(
                annotations.extend_type_name,
                {},
            )[source_class] = None

    def get_extend_types_by_object_class(
        self,
        class_name: ClassIdentity,
    ) -> Optional[list[ClassIdentity]]:
        extenders = self._class_to_extend_types.get(class_name)
        return list(extenders) if extenders is not None else None

    def get_extend_types_by_graphql_type_name(
        self,
        graphql_type_name: str,
    ) -> Optional[list[ClassIdentity]]:
        extenders = self._name_to_extend_types.get(graphql_type_name)
        return list(extenders) if extenders is not None else None
