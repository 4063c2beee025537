from __future__ import annotations

from typing import TYPE_CHECKING

from strawberry.extensions import SchemaExtension

from strawberry_mapper.context import Context, attach_context, current_context

if TYPE_CHECKING:
    from collections.abc import Iterator


class PrefetchContextExtension(SchemaExtension):
    """Give each execution its own `Context`, holding the prefetch buffers.

    The `Context` is the current one for the whole execution, so that resolvers
    find it whatever the context value is. When the execution has no context
    value, the `Context` itself is used as the context value. Otherwise it is
    also attached to the context value, when possible, replacing the one of any
    previous execution sharing the same context value.
    """

    def on_execute(self) -> Iterator[None]:
        execution_context = self.execution_context
        if execution_context.context is None:
            mapper_context = execution_context.context = Context()
        else:
            mapper_context = attach_context(execution_context.context)

        token = current_context.set(mapper_context)
        try:
            yield
        finally:
            current_context.reset(token)
