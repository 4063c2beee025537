from __future__ import annotations

import contextvars
import dataclasses
import enum
import logging
import weakref
from typing import Any, Awaitable, Callable, Hashable, Mapping, Optional, Sequence

from strawberry.dataloader import DataLoader

logger = logging.getLogger(__name__)

CONTEXT_KEY = "strawberry_mapper"
CONTEXT_ATTR = "_strawberry_mapper_context"

__all__ = [
    "Context",
    "PrefetchBuffer",
    "arguments_key",
    "attach_context",
    "current_context",
    "get_context",
]


def arguments_key(value: Any) -> Hashable:
    """Turn an argument map into a hashable key comparing by value."""
    if isinstance(value, Mapping):
        return tuple(sorted(((str(k), arguments_key(v)) for k, v in value.items())))
    if isinstance(value, (list, tuple)):
        return tuple(arguments_key(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(arguments_key(v) for v in value)
    if isinstance(value, enum.Enum):
        return value
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return (
            type(value),
            tuple(
                (f.name, arguments_key(getattr(value, f.name)))
                for f in dataclasses.fields(value)
            ),
        )
    try:
        hash(value)
    except TypeError:
        return (type(value), repr(value))
    return value


class _Group:
    __slots__ = ("loader", "outcomes", "sources")

    def __init__(self):
        # id(source) => source, in registration order
        self.sources: dict[int, Any] = {}
        # id(source) => (succeeded, result or error)
        self.outcomes: dict[int, tuple[bool, Any]] = {}
        self.loader: Optional[DataLoader[Any, Any]] = None


class PrefetchBuffer:
    """Sources waiting for the same prefetch, grouped by argument values.

    Sources are compared by identity. Each group of sources sharing the exact
    same argument values gets its result (or error) stored once computed, and
    its own `DataLoader` for async execution.
    """

    def __init__(self):
        self._groups: dict[Hashable, _Group] = {}

    def _group(self, arguments: Mapping[str, Any]) -> _Group:
        key = arguments_key(arguments)
        group = self._groups.get(key)
        if group is None:
            group = self._groups[key] = _Group()
        return group

    def register(self, source: Any, arguments: Mapping[str, Any]) -> None:
        self._group(arguments).sources.setdefault(id(source), source)

    def get_objects_by_arguments(self, arguments: Mapping[str, Any]) -> list[Any]:
        group = self._groups.get(arguments_key(arguments))
        return list(group.sources.values()) if group is not None else []

    def get_pending_objects(self, arguments: Mapping[str, Any]) -> list[Any]:
        """Registered sources which have no result yet."""
        group = self._groups.get(arguments_key(arguments))
        if group is None:
            return []
        return [s for i, s in group.sources.items() if i not in group.outcomes]

    def has_result(self, source: Any, arguments: Mapping[str, Any]) -> bool:
        group = self._groups.get(arguments_key(arguments))
        return group is not None and id(source) in group.outcomes

    def get_result(self, source: Any, arguments: Mapping[str, Any]) -> Any:
        """Return the stored result, raising the stored error if the batch failed."""
        succeeded, result = self._group(arguments).outcomes[id(source)]
        if not succeeded:
            raise result
        return result

    def store_result(self, source: Any, result: Any, arguments: Mapping[str, Any]) -> None:
        group = self._group(arguments)
        group.sources.setdefault(id(source), source)
        group.outcomes[id(source)] = (True, result)

    def store_error(
        self,
        source: Any,
        error: Exception,
        arguments: Mapping[str, Any],
    ) -> None:
        group = self._group(arguments)
        group.sources.setdefault(id(source), source)
        group.outcomes[id(source)] = (False, error)

    def get_outcome(self, source: Any, arguments: Mapping[str, Any]) -> Any:
        """Return the stored result, or the stored error if the batch failed."""
        return self._group(arguments).outcomes[id(source)][1]

    def get_loader(
        self,
        arguments: Mapping[str, Any],
        load_fn: Callable[[list[Any]], Awaitable[Sequence[Any]]],
    ) -> DataLoader[Any, Any]:
        """Return the data loader of the group, created on first use.

        Sources are cached by identity, they don't need to be hashable.
        """
        group = self._group(arguments)
        if group.loader is None:
            group.loader = DataLoader(load_fn=load_fn, cache_key_fn=id)
        return group.loader


class Context:
    """Request scoped state shared by the resolvers of one execution."""

    def __init__(self):
        self._prefetch_buffers: weakref.WeakKeyDictionary[Any, PrefetchBuffer] = (
            weakref.WeakKeyDictionary()
        )

    def get_prefetch_buffer(self, parameter: Any) -> PrefetchBuffer:
        buffer = self._prefetch_buffers.get(parameter)
        if buffer is None:
            buffer = self._prefetch_buffers[parameter] = PrefetchBuffer()
        return buffer


# The `Context` of the running execution, set by `PrefetchContextExtension`
current_context: contextvars.ContextVar[Optional[Context]] = contextvars.ContextVar(
    "strawberry-mapper-context",
    default=None,
)


def get_context(context: Any) -> Context:
    """Get the `Context` of the current execution.

    The `Context` of the running execution is used when there is one, whatever
    the context value. Otherwise the execution context value can be a `Context`
    itself, a dict or any object accepting attributes; the `Context` is created
    on first access.
    """
    if isinstance(context, Context):
        return context

    mapper_context = current_context.get()
    if mapper_context is not None:
        return mapper_context

    if isinstance(context, dict):
        mapper_context = context.get(CONTEXT_KEY)
        if not isinstance(mapper_context, Context):
            mapper_context = context[CONTEXT_KEY] = Context()
        return mapper_context

    mapper_context = getattr(context, CONTEXT_ATTR, None)
    if isinstance(mapper_context, Context):
        return mapper_context

    return attach_context(context)


def attach_context(context: Any) -> Context:
    """Attach a new `Context` to the execution context value."""
    mapper_context = Context()
    if isinstance(context, dict):
        context[CONTEXT_KEY] = mapper_context
        return mapper_context

    try:
        setattr(context, CONTEXT_ATTR, mapper_context)
    except AttributeError:
        logger.debug(
            "Cannot attach a context to %r, it is only reachable during the execution",
            type(context),
        )
    return mapper_context
