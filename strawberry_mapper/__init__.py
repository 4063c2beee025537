from .annotations import Autowire, HideParameter, Prefetch, UseInputType
from .containers import Container, SimpleContainer
from .context import Context, get_context
from .deferred import Deferred
from .discovery import AnnotationReader, ClassDiscovery
from .exceptions import (
    CannotHideParameterRuntimeError,
    CannotMapTypeError,
    DuplicateMappingError,
    EntryNotFoundError,
    InvalidPrefetchMethodError,
    MissingArgumentError,
    MissingAutowireTypeError,
)
from .extensions import PrefetchContextExtension
from .factories import decorate, factory
from .fields.field import field, mutation, query
from .mappers.glob import GlobTypeMapper
from .resolvers import django_resolver
from .schema import MappedSchema, SchemaFactory
from .type import extend_type, input, type  # noqa: A004
from .validators import DjangoModelValidator, Validator

__all__ = [
    "AnnotationReader",
    "Autowire",
    "CannotHideParameterRuntimeError",
    "CannotMapTypeError",
    "ClassDiscovery",
    "Container",
    "Context",
    "Deferred",
    "DjangoModelValidator",
    "DuplicateMappingError",
    "EntryNotFoundError",
    "GlobTypeMapper",
    "HideParameter",
    "InvalidPrefetchMethodError",
    "MappedSchema",
    "MissingArgumentError",
    "MissingAutowireTypeError",
    "Prefetch",
    "PrefetchContextExtension",
    "SchemaFactory",
    "SimpleContainer",
    "UseInputType",
    "Validator",
    "decorate",
    "django_resolver",
    "extend_type",
    "factory",
    "field",
    "get_context",
    "input",
    "mutation",
    "query",
    "type",
]
