"""Runtime parameters: how each argument of a mapped method gets its value.

Every parameter exposes `resolve(source, args, context, info)`, called once
per field resolution. `args` are the GraphQL arguments of the field, already
converted by strawberry and keyed by python name.
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Sequence

from strawberry import UNSET
from strawberry.annotation import StrawberryAnnotation
from strawberry.types.arguments import StrawberryArgument
from strawberry.utils.await_maybe import await_maybe

from .context import PrefetchBuffer, get_context
from .deferred import Deferred
from .exceptions import MissingArgumentError
from .resolvers import django_resolver

if TYPE_CHECKING:
    from strawberry.types import Info
    from strawberry.types.base import StrawberryType

    from .arguments import ArgumentResolver
    from .containers import Container

logger = logging.getLogger(__name__)

__all__ = [
    "ContainerParameter",
    "DefaultValueParameter",
    "InputTypeParameter",
    "Parameter",
    "PrefetchDataParameter",
    "ResolveInfoParameter",
    "SourceParameter",
    "ValueParameter",
    "split_arguments",
]


class Parameter(abc.ABC):
    # Set for keyword only parameters, which must be passed by name
    keyword: Optional[str] = None

    @abc.abstractmethod
    def resolve(
        self,
        source: Any,
        args: dict[str, Any],
        context: Any,
        info: Optional[Info],
    ) -> Any: ...


def split_arguments(
    parameters: Sequence[Parameter],
    values: Sequence[Any],
) -> tuple[list[Any], dict[str, Any]]:
    """Split resolved values into positional and keyword arguments."""
    args = []
    kwargs = {}
    for parameter, value in zip(parameters, values):
        if parameter.keyword is None:
            args.append(value)
        else:
            kwargs[parameter.keyword] = value
    return args, kwargs


class ValueParameter(Parameter):
    def __init__(self, value: Any):
        self.value = value

    def resolve(self, source, args, context, info):
        return self.value


class DefaultValueParameter(Parameter):
    """A hidden parameter, always resolved to its declared default."""

    def __init__(self, default: Any):
        self.default = default

    def resolve(self, source, args, context, info):
        return self.default


class SourceParameter(Parameter):
    def resolve(self, source, args, context, info):
        return source


class ResolveInfoParameter(Parameter):
    def resolve(self, source, args, context, info):
        return info


class InputTypeParameter(Parameter):
    """A parameter exposed as a GraphQL argument (or input field)."""

    def __init__(
        self,
        name: str,
        type_: StrawberryType | type,
        argument_resolver: ArgumentResolver,
        *,
        description: Optional[str] = None,
        default: Any = UNSET,
    ):
        self.name = name
        self.type = type_
        self.argument_resolver = argument_resolver
        self.description = description
        self.default = default

    def __repr__(self):
        return f"<InputTypeParameter {self.name!r}: {self.type!r}>"

    @property
    def has_default(self) -> bool:
        return self.default is not UNSET

    def resolve(self, source, args, context, info):
        value = args.get(self.name, UNSET)
        if value is UNSET:
            if not self.has_default:
                raise MissingArgumentError(self.name)
            return self.default

        return self.argument_resolver.resolve(source, value, context, info, self.type)

    def to_argument(self) -> StrawberryArgument:
        return StrawberryArgument(
            python_name=self.name,
            graphql_name=None,
            type_annotation=StrawberryAnnotation(self.type),
            description=self.description,
            default=self.default,
        )


class ContainerParameter(Parameter):
    """Fetch the value from the container on every resolution."""

    def __init__(self, container: Container, identifier: str):
        self.container = container
        self.identifier = identifier

    def resolve(self, source, args, context, info):
        return self.container.get(self.identifier)


class PrefetchDataParameter(Parameter):
    """Batch the computation of one value across every sibling source.

    `resolve` registers the source in the prefetch buffer of the current
    request and returns a `Deferred`. When the first deferred of a group is
    settled, `batch` is called once with every source registered so far with
    the same arguments, followed by the values of its own `parameters`. The
    result is handed to each of these sources; an exception raised by `batch`
    is raised again for each of them.

    Awaited deferreds go through the `DataLoader` of their group, so that the
    sources of one execution wave are loaded together.
    """

    def __init__(
        self,
        field_name: str,
        batch: Callable[..., Any],
        parameters: Sequence[Parameter] = (),
    ):
        self.field_name = field_name
        self.batch = batch
        self.parameters = list(parameters)

    def __repr__(self):
        return f"<PrefetchDataParameter {self.field_name!r}>"

    def resolve(self, source, args, context, info):
        buffer = get_context(context).get_prefetch_buffer(self)
        buffer.register(source, args)

        return Deferred(
            lambda: self._get_result(buffer, source, args, context, info),
            async_executor=lambda: self._load(buffer, source, args, context, info),
        )

    def _batch_arguments(
        self,
        sources: list[Any],
        args: dict[str, Any],
        context: Any,
        info: Optional[Info],
    ) -> list[Any]:
        return [p.resolve(sources[0], args, context, info) for p in self.parameters]

    def _store(
        self,
        buffer: PrefetchBuffer,
        sources: list[Any],
        args: dict[str, Any],
        result: Any,
    ) -> None:
        for source in sources:
            buffer.store_result(source, result, args)

    def _store_error(
        self,
        buffer: PrefetchBuffer,
        sources: list[Any],
        args: dict[str, Any],
        error: Exception,
    ) -> None:
        logger.debug("Prefetch %r failed for %d sources", self, len(sources))
        for source in sources:
            buffer.store_error(source, error, args)

    def _compute(self, buffer, args, context, info) -> None:
        sources = buffer.get_pending_objects(args)
        if not sources:
            return

        logger.debug("Prefetching %r for %d sources", self, len(sources))
        try:
            values = self._batch_arguments(sources, args, context, info)
            batch_args, batch_kwargs = split_arguments(self.parameters, values)
            result = self.batch(sources, *batch_args, **batch_kwargs)
        except Exception as e:
            self._store_error(buffer, sources, args, e)
        else:
            self._store(buffer, sources, args, result)

    async def _compute_async(self, buffer, args, context, info) -> None:
        sources = buffer.get_pending_objects(args)
        if not sources:
            return

        logger.debug("Prefetching %r for %d sources", self, len(sources))
        try:
            values = self._batch_arguments(sources, args, context, info)
            batch_args, batch_kwargs = split_arguments(self.parameters, values)
            result = await await_maybe(
                django_resolver(self.batch, qs_hook=None)(
                    sources,
                    *batch_args,
                    **batch_kwargs,
                ),
            )
        except Exception as e:
            self._store_error(buffer, sources, args, e)
        else:
            self._store(buffer, sources, args, result)

    def _get_result(self, buffer, source, args, context, info) -> Any:
        if not buffer.has_result(source, args):
            self._compute(buffer, args, context, info)
        return buffer.get_result(source, args)

    def _load(self, buffer, source, args, context, info) -> Awaitable[Any]:
        async def load_fn(sources: list[Any]) -> list[Any]:
            # Stored errors are raised by the loader for their own source
            await self._compute_async(buffer, args, context, info)
            return [buffer.get_outcome(s, args) for s in sources]

        return buffer.get_loader(args, load_fn).load(source)
