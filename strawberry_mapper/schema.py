from __future__ import annotations

import logging
import types
from typing import TYPE_CHECKING, Any, Iterable, Optional, Sequence

import strawberry
from asgiref.sync import async_to_sync
from strawberry.utils.inspect import in_async_context

from .arguments import ArgumentResolver
from .containers import SimpleContainer
from .discovery import ClassDiscovery
from .extensions import PrefetchContextExtension
from .fields.builder import FieldsBuilder
from .mappers.glob import GlobTypeMapper
from .mappers.root import (
    CompositeRootTypeMapper,
    EnumTypeMapper,
    ObjectTypeMapper,
    RootTypeMapper,
    ScalarTypeMapper,
    StrawberryTypeMapper,
)
from .mappers.type_handler import TypeHandler
from .settings import strawberry_mapper_settings
from .type import TypeGenerator
from .validators import DjangoModelValidator

if TYPE_CHECKING:
    from strawberry.extensions import SchemaExtension
    from strawberry.types import ExecutionResult

    from .containers import Container
    from .fields.field import MappedField
    from .mappers.parameters import ParameterMiddleware
    from .validators import Validator

logger = logging.getLogger(__name__)

__all__ = ["MappedSchema", "SchemaFactory"]


class MappedSchema(strawberry.Schema):
    """A `strawberry.Schema` batching prefetched values in sync execution too.

    `execute_sync` runs `execute` in an event loop through asgiref's
    `async_to_sync`, so that sibling fields waiting for the same prefetched
    value share one batch call. Mapped resolvers keep running in the calling
    thread, through `django_resolver`. From a thread already running an event
    loop, the regular sync execution is used instead.
    """

    def execute_sync(
        self,
        query: Optional[str],
        *args: Any,
        **kwargs: Any,
    ) -> ExecutionResult:
        if in_async_context():
            return super().execute_sync(query, *args, **kwargs)
        return async_to_sync(self.execute)(query, *args, **kwargs)


class SchemaFactory:
    """Build a `strawberry.Schema` from the discovered classes.

    Examples
    --------
        >>> factory = SchemaFactory(ClassDiscovery(modules=["shop.graphql"]))
        >>> schema = factory.create_schema()
        >>> schema.execute_sync("{ products { name } }")

    """

    def __init__(
        self,
        discovery: Optional[Iterable[type]] = None,
        *,
        container: Optional[Container] = None,
        validator: Optional[Validator] = None,
        type_mappers: Sequence[RootTypeMapper] = (),
        parameter_middlewares: Sequence[ParameterMiddleware] = (),
        extensions: Sequence[type[SchemaExtension] | SchemaExtension] = (),
        glob_mapper: Optional[GlobTypeMapper] = None,
    ):
        settings = strawberry_mapper_settings()
        if discovery is None:
            discovery = ClassDiscovery(modules=settings["DISCOVERY_MODULES"])

        self.discovery = discovery
        self.container = container if container is not None else SimpleContainer()
        self.validator = validator if validator is not None else DjangoModelValidator()
        self.type_mappers = list(type_mappers)
        self.parameter_middlewares = list(parameter_middlewares)
        self.extensions = list(extensions)
        self.glob_mapper = (
            glob_mapper if glob_mapper is not None else GlobTypeMapper(discovery)
        )
        self.description_from_docstring = settings["DESCRIPTION_FROM_DOCSTRING"]

    def create_schema(self, **kwargs: Any) -> MappedSchema:
        """Create the schema. Extra arguments are passed to `strawberry.Schema`."""
        type_generator = TypeGenerator(
            self.glob_mapper,
            description_from_docstring=self.description_from_docstring,
        )
        root_mapper = CompositeRootTypeMapper(
            [
                *self.type_mappers,
                ScalarTypeMapper(),
                EnumTypeMapper(),
                StrawberryTypeMapper(),
                ObjectTypeMapper(self.glob_mapper, type_generator),
            ],
        )
        type_handler = TypeHandler(root_mapper, ArgumentResolver(self.validator))
        fields_builder = FieldsBuilder(
            type_handler,
            self.container,
            middlewares=self.parameter_middlewares,
            description_from_docstring=self.description_from_docstring,
        )
        type_generator.fields_builder = fields_builder

        queries: list[MappedField] = []
        mutations: list[MappedField] = []
        for cls in self.discovery:
            queries.extend(fields_builder.get_queries(cls))
            mutations.extend(fields_builder.get_mutations(cls))

        for type_name in self.glob_mapper.get_type_names():
            type_generator.get_output_type(type_name)

        type_generator.finalize()
        logger.debug(
            "Creating schema with %d queries, %d mutations and %d types",
            len(queries),
            len(mutations),
            len(type_generator.get_output_types()),
        )

        return MappedSchema(
            query=self._root_type("Query", queries),
            mutation=self._root_type("Mutation", mutations) if mutations else None,
            types=type_generator.get_output_types(),
            extensions=[PrefetchContextExtension, *self.extensions],
            **kwargs,
        )

    def _root_type(self, name: str, fields: list[MappedField]) -> type:
        cls = types.new_class(name, (), {}, lambda ns: ns.update(__module__=__name__))
        annotations: dict[str, Any] = {}
        for f in fields:
            annotations[f.python_name] = f.mapped_type
            setattr(cls, f.python_name, f)
        cls.__annotations__ = annotations
        return strawberry.type(cls, name=name)
