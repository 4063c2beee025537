import dataclasses
from typing import Any, Dict, Optional, Sequence

import strawberry
from asgiref.sync import async_to_sync
from strawberry.types import ExecutionResult

from strawberry_mapper.arguments import ArgumentResolver
from strawberry_mapper.containers import Container, SimpleContainer
from strawberry_mapper.discovery import AnnotationReader
from strawberry_mapper.fields.builder import FieldsBuilder
from strawberry_mapper.mappers.glob import GlobTypeMapper
from strawberry_mapper.mappers.parameters import ParameterMiddleware
from strawberry_mapper.mappers.root import (
    CompositeRootTypeMapper,
    EnumTypeMapper,
    ObjectTypeMapper,
    ScalarTypeMapper,
    StrawberryTypeMapper,
)
from strawberry_mapper.mappers.type_handler import TypeHandler
from strawberry_mapper.type import TypeGenerator
from strawberry_mapper.validators import Validator


@dataclasses.dataclass
class Mapping:
    glob_mapper: GlobTypeMapper
    type_generator: TypeGenerator
    type_handler: TypeHandler
    fields_builder: FieldsBuilder


def build_mapping(
    *classes: type,
    container: Optional[Container] = None,
    middlewares: Sequence[ParameterMiddleware] = (),
    validator: Optional[Validator] = None,
) -> Mapping:
    """Wire the mappers the same way `SchemaFactory` does, without the schema."""
    glob_mapper = GlobTypeMapper(classes, reader=AnnotationReader())
    type_generator = TypeGenerator(glob_mapper)
    root_mapper = CompositeRootTypeMapper(
        [
            ScalarTypeMapper(),
            EnumTypeMapper(),
            StrawberryTypeMapper(),
            ObjectTypeMapper(glob_mapper, type_generator),
        ],
    )
    type_handler = TypeHandler(root_mapper, ArgumentResolver(validator))
    fields_builder = FieldsBuilder(
        type_handler,
        container if container is not None else SimpleContainer(),
        middlewares=middlewares,
    )
    type_generator.fields_builder = fields_builder
    return Mapping(glob_mapper, type_generator, type_handler, fields_builder)


class GraphQLTestClient:
    """Run operations on a schema, either with `execute_sync` or `execute`."""

    def __init__(self, schema: strawberry.Schema, *, is_async: bool = False):
        self.schema = schema
        self.is_async = is_async

    def query(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        context: Any = None,
        *,
        assert_no_errors: bool = True,
    ) -> ExecutionResult:
        if self.is_async:
            result = async_to_sync(self.schema.execute)(
                query,
                variable_values=variables,
                context_value=context,
            )
        else:
            result = self.schema.execute_sync(
                query,
                variable_values=variables,
                context_value=context,
            )

        if assert_no_errors:
            assert result.errors is None, result.errors
        return result
