from __future__ import annotations

import dataclasses
import logging
import threading
import time
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional

from strawberry_mapper.discovery import AnnotationReader
from strawberry_mapper.settings import strawberry_mapper_settings
from strawberry_mapper.utils.typing import ClassIdentity, class_identity

from .cache import (
    DefaultInput,
    ExtendTypeMapperCache,
    MethodRef,
    NamedInput,
    TypeMapperCache,
)

if TYPE_CHECKING:
    from strawberry_mapper.discovery import ClassAnnotations

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class MappingSnapshot:
    """One complete build of the mapping caches."""

    type_cache: TypeMapperCache
    extend_cache: ExtendTypeMapperCache
    classes: dict[ClassIdentity, type]
    annotations: dict[ClassIdentity, ClassAnnotations]
    built_at: float


class GlobTypeMapper:
    """Owns the type mapping of every discovered class.

    The mapping is built on first access and rebuilt once `ttl` seconds have
    passed or after `invalidate()`. A rebuild always produces a new
    `MappingSnapshot` which replaces the previous one in a single assignment,
    so concurrent readers see either the old or the new mapping, never a
    partially merged one.
    """

    def __init__(
        self,
        discovery: Iterable[type],
        *,
        reader: Optional[AnnotationReader] = None,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.discovery = discovery
        self.reader = reader if reader is not None else AnnotationReader.from_settings()
        self.ttl = ttl if ttl is not None else strawberry_mapper_settings()["TYPE_MAPPER_TTL"]
        self.clock = clock
        self._snapshot: Optional[MappingSnapshot] = None
        self._lock = threading.Lock()

    @property
    def snapshot(self) -> MappingSnapshot:
        snapshot = self._snapshot
        if snapshot is not None and not self._is_expired(snapshot):
            return snapshot

        with self._lock:
            snapshot = self._snapshot
            if snapshot is None or self._is_expired(snapshot):
                snapshot = self._build()
                self._snapshot = snapshot

        return snapshot

    @property
    def built_at(self) -> Optional[float]:
        snapshot = self._snapshot
        return snapshot.built_at if snapshot is not None else None

    def invalidate(self) -> None:
        logger.debug("Type mapping invalidated")
        self._snapshot = None

    def _is_expired(self, snapshot: MappingSnapshot) -> bool:
        return self.ttl is not None and self.clock() - snapshot.built_at >= self.ttl

    def _build(self) -> MappingSnapshot:
        type_cache = TypeMapperCache()
        extend_cache = ExtendTypeMapperCache()
        classes: dict[ClassIdentity, type] = {}
        annotations: dict[ClassIdentity, ClassAnnotations] = {}

        for cls in self.discovery:
            identity = class_identity(cls)
            classes[identity] = cls

            class_annotations = self.reader.get_class_annotations(cls)
            if not class_annotations.is_empty:
                annotations[identity] = class_annotations
                type_cache.register_annotations(identity, class_annotations)

            extend_annotations = self.reader.get_extend_class_annotations(cls)
            if extend_annotations is not None:
                extend_cache.register_annotations(identity, extend_annotations)

        logger.debug(
            "Built type mapping from %d classes (%d types)",
            len(classes),
            len(type_cache.get_type_names()),
        )
        return MappingSnapshot(
            type_cache=type_cache,
            extend_cache=extend_cache,
            classes=classes,
            annotations=annotations,
            built_at=self.clock(),
        )

    # Class object lookups

    def get_class(self, identity: ClassIdentity) -> type:
        return self.snapshot.classes[identity]

    def get_method(self, ref: MethodRef) -> tuple[type, Any]:
        cls = self.get_class(ref.class_name)
        return cls, cls.__dict__[ref.method_name]

    def get_annotations(self, identity: ClassIdentity) -> Optional[ClassAnnotations]:
        return self.snapshot.annotations.get(identity)

    def get_annotations_for_class(self, cls: type) -> Optional[ClassAnnotations]:
        snapshot = self.snapshot
        identity = class_identity(cls)
        if snapshot.classes.get(identity) is not cls:
            return None
        return snapshot.annotations.get(identity)

    def can_map_class_to_type(self, cls: type) -> bool:
        return self.snapshot.type_cache.get_type_by_object_class(class_identity(cls)) is not None

    def get_type_name_for_class(self, cls: type) -> Optional[str]:
        snapshot = self.snapshot
        type_class = snapshot.type_cache.get_type_by_object_class(class_identity(cls))
        if type_class is None:
            return None
        return snapshot.annotations[type_class].type_name

    def get_type_class_by_name(self, type_name: str) -> Optional[type]:
        snapshot = self.snapshot
        identity = snapshot.type_cache.get_type_by_graphql_type_name(type_name)
        return snapshot.classes[identity] if identity is not None else None

    def get_domain_class_by_type_name(self, type_name: str) -> Optional[type]:
        snapshot = self.snapshot
        identity = snapshot.type_cache.get_type_by_graphql_type_name(type_name)
        if identity is None:
            return None
        domain = snapshot.annotations[identity].type_class_name
        return snapshot.classes.get(domain) if domain is not None else None

    def get_type_names(self) -> list[str]:
        return self.snapshot.type_cache.get_type_names()

    def get_input_name_for_class(self, cls: type) -> Optional[str]:
        """Name of the default input type building instances of `cls`."""
        type_cache = self.snapshot.type_cache
        identity = class_identity(cls)

        input_: Optional[DefaultInput] = type_cache.get_input_by_object_class(identity)
        if input_ is not None:
            return input_.input_name

        factory = type_cache.get_factory_by_object_class(identity)
        if factory is not None:
            for annotation in self.snapshot.annotations[factory.class_name].factories:
                if annotation.method_name == factory.method_name:
                    return annotation.input_name

        return None

    def get_input_names(self) -> list[str]:
        return self.snapshot.type_cache.get_input_names()

    def has_input_name(self, input_name: str) -> bool:
        type_cache = self.snapshot.type_cache
        return (
            type_cache.get_input_by_graphql_input_type_name(input_name) is not None
            or type_cache.get_factory_by_graphql_input_type_name(input_name) is not None
        )

    def get_factory_by_input_name(self, input_name: str) -> Optional[MethodRef]:
        return self.snapshot.type_cache.get_factory_by_graphql_input_type_name(input_name)

    def get_input_by_input_name(self, input_name: str) -> Optional[NamedInput]:
        return self.snapshot.type_cache.get_input_by_graphql_input_type_name(input_name)

    def get_decorators_by_input_name(self, input_name: str) -> list[MethodRef]:
        return (
            self.snapshot.type_cache.get_decorators_by_graphql_input_type_name(input_name)
            or []
        )

    def get_extend_types(self, type_name: str, domain_class: Optional[type]) -> list[type]:
        snapshot = self.snapshot
        extend_cache = snapshot.extend_cache
        identities = list(extend_cache.get_extend_types_by_graphql_type_name(type_name) or [])
        if domain_class is not None:
            identities.extend(
                identity
                for identity in extend_cache.get_extend_types_by_object_class(
                    class_identity(domain_class),
                )
                or []
                if identity not in identities
            )
        return [snapshot.classes[identity] for identity in identities]
