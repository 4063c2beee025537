from __future__ import annotations

from typing import Any, Mapping, Optional

from typing_extensions import Protocol, runtime_checkable

from .exceptions import EntryNotFoundError
from .utils.typing import class_identity

__all__ = [
    "Container",
    "SimpleContainer",
]


@runtime_checkable
class Container(Protocol):
    """Anything able to hand out services by identifier.

    Class identifiers are the dotted `module.QualName` of the class.
    """

    def get(self, identifier: str) -> Any: ...

    def has(self, identifier: str) -> bool: ...


class SimpleContainer:
    """A `Container` backed by a mapping of identifiers to entries.

    Entries can be given either by identifier or by class, in which case the
    class identity is used as the identifier.
    """

    def __init__(self, entries: Optional[Mapping[Any, Any]] = None):
        self._entries: dict[str, Any] = {}
        for key, value in (entries or {}).items():
            self.set(key, value)

    def set(self, identifier: Any, value: Any) -> None:
        if isinstance(identifier, type):
            identifier = class_identity(identifier)
        self._entries[identifier] = value

    def get(self, identifier: str) -> Any:
        try:
            return self._entries[identifier]
        except KeyError:
            raise EntryNotFoundError(identifier) from None

    def has(self, identifier: str) -> bool:
        return identifier in self._entries
