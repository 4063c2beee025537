from __future__ import annotations

from functools import cached_property
from typing import TYPE_CHECKING, Any, Callable, Sequence

from strawberry.exceptions.exception import StrawberryException
from strawberry.exceptions.utils.source_finder import SourceFinder

if TYPE_CHECKING:
    from strawberry.exceptions.exception_source import ExceptionSource
    from typing_extensions import Self


def callable_name(func: Callable[..., Any]) -> str:
    """Return the dotted `module.Qual.name` of a function or method."""
    func = getattr(func, "__func__", func)
    return f"{func.__module__}.{func.__qualname__}"


class DuplicateMappingError(StrawberryException):
    """Two classes claim the same default mapping or the same input name.

    Both the class that already holds the mapping and the new claimant are
    available as `existing` and `claimant`.
    """

    def __init__(self, message: str, *, existing: str, claimant: str):
        self.existing = existing
        self.claimant = claimant

        self.message = message
        self.rich_message = message
        self.suggestion = (
            "To fix this error, pass `default=False` to one of the declarations "
            "or give them different names"
        )
        self.annotation_message = "duplicate mapping"

        super().__init__(self.message)

    @classmethod
    def for_type(cls, domain_class: str, existing: str, claimant: str) -> Self:
        return cls(
            f'The domain class "{domain_class}" is mapped by two GraphQL types: '
            f'"{existing}" and "{claimant}". Only one type can be the default '
            "type of a class.",
            existing=existing,
            claimant=claimant,
        )

    @classmethod
    def for_factory(
        cls,
        domain_class: str,
        existing_class: str,
        existing_method: str,
        claimant_class: str,
        claimant_method: str,
    ) -> Self:
        existing = f"{existing_class}.{existing_method}"
        claimant = f"{claimant_class}.{claimant_method}"
        return cls(
            f'The domain class "{domain_class}" has two default factories: '
            f'"{existing}" and "{claimant}". Only one factory can be the default '
            "factory of a class.",
            existing=existing,
            claimant=claimant,
        )

    @classmethod
    def for_default_input(
        cls,
        domain_class: str,
        existing: str,
        claimant: str,
    ) -> Self:
        return cls(
            f'The domain class "{domain_class}" has two default inputs: '
            f'"{existing}" and "{claimant}". Only one input can be the default '
            "input of a class.",
            existing=existing,
            claimant=claimant,
        )

    @classmethod
    def for_two_inputs(cls, input_name: str, existing: str, claimant: str) -> Self:
        return cls(
            f'The input type "{input_name}" is declared by two classes: '
            f'"{existing}" and "{claimant}".',
            existing=existing,
            claimant=claimant,
        )

    @cached_property
    def exception_source(self) -> ExceptionSource | None:  # pragma: no cover
        return None


class CannotMapTypeError(StrawberryException):
    def __init__(
        self,
        message: str,
        *,
        function: Callable[..., Any] | None = None,
        type_names: Sequence[str] = (),
    ):
        self.function = function
        self.type_names = list(type_names)

        self.message = message
        self.rich_message = message
        self.annotation_message = "cannot map type"

        super().__init__(self.message)

    @classmethod
    def for_union_members(
        cls,
        function: Callable[..., Any] | None,
        type_names: Sequence[str],
        *,
        where: str = "return type",
    ) -> Self:
        if function is not None:
            where = f"{where} of {callable_name(function)}"
        return cls(
            f"For {where}, in GraphQL, you can only "
            "use union types between objects. These types cannot be used in "
            f"union types: {', '.join(type_names)}",
            function=function,
            type_names=type_names,
        )

    @classmethod
    def for_missing_return_annotation(cls, function: Callable[..., Any]) -> Self:
        return cls(
            f"For return type of {callable_name(function)}, a return type "
            "annotation is required",
            function=function,
        )

    @classmethod
    def for_missing_parameter_annotation(
        cls,
        function: Callable[..., Any],
        parameter_name: str,
    ) -> Self:
        return cls(
            f'For parameter "{parameter_name}" of {callable_name(function)}, a '
            "type annotation is required",
            function=function,
        )

    @classmethod
    def for_unknown_type(
        cls,
        annotation: Any,
        *,
        where: str,
        function: Callable[..., Any] | None = None,
    ) -> Self:
        if isinstance(annotation, str):
            name = annotation
        else:
            name = getattr(annotation, "__qualname__", None) or repr(annotation)
        return cls(
            f'For {where}, cannot map "{name}" to a known GraphQL type. Check '
            "that the class is annotated with a type, input or factory "
            "declaration and that it was discovered.",
            function=function,
            type_names=[name],
        )

    @cached_property
    def exception_source(self) -> ExceptionSource | None:  # pragma: no cover
        if self.function is None:
            return None

        source_finder = SourceFinder()
        return source_finder.find_function_from_object(self.function)  # type: ignore


class _ParameterError(StrawberryException):
    def __init__(self, message: str, *, parameter_name: str, function: Any):
        self.parameter_name = parameter_name
        self.function = function

        self.message = message
        self.rich_message = message

        super().__init__(self.message)

    @cached_property
    def exception_source(self) -> ExceptionSource | None:  # pragma: no cover
        source_finder = SourceFinder()

        return source_finder.find_argument_from_object(
            self.function,  # type: ignore
            self.parameter_name,
        )


class MissingAutowireTypeError(_ParameterError):
    def __init__(
        self,
        parameter_name: str,
        function: Callable[..., Any],
        type_hint: Any = None,
    ):
        if type_hint is None:
            reason = "a type annotation on the parameter."
        else:
            reason = f"a type annotation naming a single class, got `{type_hint}`."

        super().__init__(
            f'For parameter "{parameter_name}" of method '
            f'"{callable_name(function)}", the Autowire annotation needs either '
            f"an explicit identifier or {reason}",
            parameter_name=parameter_name,
            function=function,
        )
        self.type_hint = type_hint
        self.suggestion = (
            "To fix this error, annotate the parameter with a class or pass "
            "`Autowire(identifier=...)`"
        )
        self.annotation_message = "missing autowire type"


class CannotHideParameterRuntimeError(_ParameterError):
    def __init__(self, parameter_name: str, function: Callable[..., Any]):
        super().__init__(
            f'For parameter "{parameter_name}" of method '
            f'"{callable_name(function)}", cannot use the HideParameter '
            "annotation. The parameter needs to provide a default value.",
            parameter_name=parameter_name,
            function=function,
        )
        self.suggestion = "To fix this error, give the parameter a default value"
        self.annotation_message = "hidden parameter without default"


class InvalidPrefetchMethodError(_ParameterError):
    def __init__(
        self,
        parameter_name: str,
        function: Callable[..., Any],
        method_name: str,
        reason: str,
    ):
        super().__init__(
            f'For parameter "{parameter_name}" of method '
            f'"{callable_name(function)}", the prefetch method "{method_name}" '
            f"{reason}.",
            parameter_name=parameter_name,
            function=function,
        )
        self.method_name = method_name
        self.annotation_message = "invalid prefetch method"


class MissingArgumentError(Exception):
    """A required argument was not provided when resolving a field."""

    def __init__(self, argument_name: str):
        self.argument_name = argument_name
        super().__init__(f'Expected argument "{argument_name}" was not provided')


class EntryNotFoundError(LookupError):
    """The container has no entry for the requested identifier."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f'No entry was found in the container for "{identifier}"')
