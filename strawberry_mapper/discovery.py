from __future__ import annotations

import dataclasses
import hashlib
import importlib
import inspect
import logging
import os
import pkgutil
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional, Sequence, Union

from django.core.cache import caches

from .definitions import (
    DECORATE_DEFINITION_ATTR,
    EXTEND_TYPE_DEFINITION_ATTR,
    FACTORY_DEFINITION_ATTR,
    INPUT_DEFINITIONS_ATTR,
    TYPE_DEFINITION_ATTR,
    DecorateDefinition,
    ExtendTypeDefinition,
    FactoryDefinition,
    InputDefinition,
    TypeDefinition,
    get_own_definition,
)
from .exceptions import CannotMapTypeError
from .settings import strawberry_mapper_settings
from .utils.typing import (
    ClassIdentity,
    class_identity,
    get_function,
    get_type_hints,
    split_annotated,
    split_optional,
)

if TYPE_CHECKING:
    from types import ModuleType

    from django.core.cache.backends.base import BaseCache

logger = logging.getLogger(__name__)

__all__ = [
    "AnnotationReader",
    "ClassAnnotations",
    "ClassDiscovery",
    "DecoratorAnnotation",
    "ExtendClassAnnotations",
    "FactoryAnnotation",
    "InputAnnotation",
]


@dataclasses.dataclass(frozen=True)
class FactoryAnnotation:
    method_name: str
    input_name: str
    input_class_name: ClassIdentity
    is_default: bool
    declaring_class: ClassIdentity


@dataclasses.dataclass(frozen=True)
class InputAnnotation:
    input_name: str
    input_class_name: ClassIdentity
    is_default: bool
    description: Optional[str]
    is_update: bool


@dataclasses.dataclass(frozen=True)
class DecoratorAnnotation:
    method_name: str
    input_name: str
    declaring_class: ClassIdentity


@dataclasses.dataclass(frozen=True)
class ClassAnnotations:
    """What one class declares, as read during discovery.

    Only strings and tuples are stored so instances can be kept in the Django
    cache between processes.
    """

    type_class_name: Optional[ClassIdentity] = None
    type_name: Optional[str] = None
    is_default: bool = True
    factories: tuple[FactoryAnnotation, ...] = ()
    inputs: tuple[InputAnnotation, ...] = ()
    decorators: tuple[DecoratorAnnotation, ...] = ()

    @property
    def is_empty(self) -> bool:
        return (
            self.type_class_name is None
            and not self.factories
            and not self.inputs
            and not self.decorators
        )


@dataclasses.dataclass(frozen=True)
class ExtendClassAnnotations:
    extend_type_class_name: Optional[ClassIdentity] = None
    extend_type_name: Optional[str] = None


def output_type_name(cls: type, definition: TypeDefinition) -> str:
    if definition.name:
        return definition.name

    name = cls.__name__
    if definition.for_class is not None and name.endswith("Type") and len(name) > 4:  # noqa: PLR2004
        name = name[:-4]
    return name


def input_type_name(cls: type, name: Optional[str] = None) -> str:
    if name:
        return name

    name = cls.__name__
    return name if name.endswith("Input") else f"{name}Input"


def iter_declared_functions(cls: type) -> Iterator[tuple[str, Any]]:
    """Yield `(name, function)` for functions declared on the class itself."""
    for name, value in list(cls.__dict__.items()):
        func = get_function(value)
        if func is not None:
            yield name, func


def _factory_return_class(func) -> type:
    hints = get_type_hints(func)
    if "return" not in hints:
        raise CannotMapTypeError.for_missing_return_annotation(func)

    return_type, _ = split_annotated(hints["return"])
    members, _ = split_optional(return_type)
    if len(members) != 1 or not isinstance(members[0], type):
        raise CannotMapTypeError.for_unknown_type(
            return_type,
            where=f"return type of factory {func.__qualname__}",
            function=func,
        )
    return members[0]


class AnnotationReader:
    """Read the declarations of a class into a `ClassAnnotations`.

    When a Django cache is given, results are memoized by class identity and
    the modification time of the file declaring the class, so a changed file
    is read again. Classes declared inside functions are never memoized.
    """

    def __init__(
        self,
        cache: Optional[BaseCache] = None,
        timeout: Optional[int] = None,
    ):
        self.cache = cache
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> AnnotationReader:
        settings = strawberry_mapper_settings()
        cache_name = settings["CACHE_NAME"]
        return cls(
            cache=caches[cache_name] if cache_name is not None else None,
            timeout=settings["CACHE_TIMEOUT"],
        )

    def get_class_annotations(self, cls: type) -> ClassAnnotations:
        return self._cached(cls, "annotations", self.read_class_annotations)

    def get_extend_class_annotations(
        self,
        cls: type,
    ) -> Optional[ExtendClassAnnotations]:
        return self._cached(cls, "extend", self.read_extend_class_annotations)

    def read_class_annotations(self, cls: type) -> ClassAnnotations:
        identity = class_identity(cls)

        type_class_name = None
        type_name = None
        is_default = True
        type_definition: Optional[TypeDefinition] = get_own_definition(
            cls,
            TYPE_DEFINITION_ATTR,
        )
        if type_definition is not None:
            target = type_definition.for_class or cls
            type_class_name = class_identity(target)
            type_name = output_type_name(cls, type_definition)
            is_default = type_definition.default

        factories = []
        decorators = []
        for method_name, func in iter_declared_functions(cls):
            factory: Optional[FactoryDefinition] = getattr(
                func,
                FACTORY_DEFINITION_ATTR,
                None,
            )
            if factory is not None:
                return_class = _factory_return_class(func)
                factories.append(
                    FactoryAnnotation(
                        method_name=method_name,
                        input_name=input_type_name(return_class, factory.name),
                        input_class_name=class_identity(return_class),
                        is_default=factory.default,
                        declaring_class=identity,
                    ),
                )

            decorate: Optional[DecorateDefinition] = getattr(
                func,
                DECORATE_DEFINITION_ATTR,
                None,
            )
            if decorate is not None:
                decorators.append(
                    DecoratorAnnotation(
                        method_name=method_name,
                        input_name=decorate.input_name,
                        declaring_class=identity,
                    ),
                )

        inputs = []
        input_definitions: Sequence[InputDefinition] = (
            get_own_definition(cls, INPUT_DEFINITIONS_ATTR) or ()
        )
        for definition in input_definitions:
            is_input_default = (
                definition.default
                if definition.default is not None
                else definition.name is None
            )
            inputs.append(
                InputAnnotation(
                    input_name=input_type_name(cls, definition.name),
                    input_class_name=identity,
                    is_default=is_input_default,
                    description=definition.description,
                    is_update=definition.update,
                ),
            )

        return ClassAnnotations(
            type_class_name=type_class_name,
            type_name=type_name,
            is_default=is_default,
            factories=tuple(factories),
            inputs=tuple(inputs),
            decorators=tuple(decorators),
        )

    def read_extend_class_annotations(
        self,
        cls: type,
    ) -> Optional[ExtendClassAnnotations]:
        definition: Optional[ExtendTypeDefinition] = get_own_definition(
            cls,
            EXTEND_TYPE_DEFINITION_ATTR,
        )
        if definition is None:
            return None

        return ExtendClassAnnotations(
            extend_type_class_name=(
                class_identity(definition.for_class)
                if definition.for_class is not None
                else None
            ),
            extend_type_name=definition.name,
        )

    def _cache_key(self, cls: type, kind: str) -> Optional[str]:
        if "<locals>" in cls.__qualname__:
            return None

        try:
            filename = inspect.getsourcefile(cls)
        except TypeError:
            filename = None
        if filename is None:
            return None

        try:
            mtime = os.path.getmtime(filename)
        except OSError:
            return None

        digest = hashlib.md5(  # noqa: S324
            f"{class_identity(cls)}:{mtime}".encode(),
        ).hexdigest()
        return f"strawberry_mapper.{kind}.{digest}"

    def _cached(self, cls: type, kind: str, read):
        key = self._cache_key(cls, kind) if self.cache is not None else None
        if key is None:
            return read(cls)

        assert self.cache is not None
        if self.cache.has_key(key):
            logger.debug("Using cached %s for %s", kind, class_identity(cls))
            return self.cache.get(key)

        result = read(cls)
        self.cache.set(key, result, timeout=self.timeout)
        return result


class ClassDiscovery:
    """A finite, replayable sequence of classes to build the schema from.

    Explicitly given classes come first, then every class defined in the
    given modules (packages are walked recursively), in definition order.
    """

    def __init__(
        self,
        modules: Iterable[Union[str, ModuleType]] = (),
        classes: Iterable[type] = (),
    ):
        self.modules = list(modules)
        self.classes = list(classes)

    def __iter__(self) -> Iterator[type]:
        seen: set[int] = set()
        for cls in self._iter_classes():
            if id(cls) in seen:
                continue
            seen.add(id(cls))
            yield cls

    def _iter_classes(self) -> Iterator[type]:
        yield from self.classes

        for module in self._iter_modules():
            for value in list(vars(module).values()):
                if isinstance(value, type) and value.__module__ == module.__name__:
                    yield value

    def _iter_modules(self) -> Iterator[ModuleType]:
        for module in self.modules:
            if isinstance(module, str):
                module = importlib.import_module(module)  # noqa: PLW2901

            yield module

            path = getattr(module, "__path__", None)
            if path is None:
                continue

            submodules = sorted(
                info.name
                for info in pkgutil.walk_packages(path, prefix=f"{module.__name__}.")
            )
            for name in submodules:
                logger.debug("Scanning module %s", name)
                yield importlib.import_module(name)
