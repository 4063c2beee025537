from .prefetch_context import PrefetchContextExtension

__all__ = ["PrefetchContextExtension"]
