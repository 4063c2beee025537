import pytest

from strawberry_mapper.discovery import (
    ClassAnnotations,
    DecoratorAnnotation,
    ExtendClassAnnotations,
    FactoryAnnotation,
    InputAnnotation,
)
from strawberry_mapper.exceptions import DuplicateMappingError
from strawberry_mapper.mappers.cache import (
    DefaultInput,
    ExtendTypeMapperCache,
    MethodRef,
    NamedInput,
    TypeMapperCache,
)


def _type(domain: str, name: str, *, default: bool = True) -> ClassAnnotations:
    return ClassAnnotations(type_class_name=domain, type_name=name, is_default=default)


def _factory(
    declaring_class: str,
    method_name: str,
    input_name: str,
    *,
    default: bool = True,
) -> ClassAnnotations:
    return ClassAnnotations(
        factories=(
            FactoryAnnotation(
                method_name=method_name,
                input_name=input_name,
                input_class_name="app.Domain",
                is_default=default,
                declaring_class=declaring_class,
            ),
        ),
    )


def _input(
    input_class: str,
    input_name: str,
    *,
    default: bool = True,
    description=None,
    update: bool = False,
) -> ClassAnnotations:
    return ClassAnnotations(
        inputs=(
            InputAnnotation(
                input_name=input_name,
                input_class_name=input_class,
                is_default=default,
                description=description,
                is_update=update,
            ),
        ),
    )


def test_register_type_round_trip():
    cache = TypeMapperCache()
    cache.register_annotations("app.C", _type("app.C", "Foo"))

    assert cache.get_type_by_object_class("app.C") == "app.C"
    assert cache.get_type_by_graphql_type_name("Foo") == "app.C"
    assert cache.get_supported_classes() == ["app.C"]
    assert cache.get_type_names() == ["Foo"]


def test_lookups_return_none_on_miss():
    cache = TypeMapperCache()

    assert cache.get_type_by_object_class("app.Missing") is None
    assert cache.get_type_by_graphql_type_name("Missing") is None
    assert cache.get_factory_by_object_class("app.Missing") is None
    assert cache.get_factory_by_graphql_input_type_name("Missing") is None
    assert cache.get_decorators_by_graphql_input_type_name("Missing") is None
    assert cache.get_input_by_object_class("app.Missing") is None
    assert cache.get_input_by_graphql_input_type_name("Missing") is None


@pytest.mark.parametrize(
    ("first", "second"),
    [("app.TypeA", "app.TypeB"), ("app.TypeB", "app.TypeA")],
)
def test_two_default_types_conflict(first, second):
    cache = TypeMapperCache()
    cache.register_annotations(first, _type("app.Domain", first.split(".")[1]))

    with pytest.raises(DuplicateMappingError) as exc_info:
        cache.register_annotations(second, _type("app.Domain", second.split(".")[1]))

    assert exc_info.value.existing == first
    assert exc_info.value.claimant == second
    assert "app.TypeA" in str(exc_info.value)
    assert "app.TypeB" in str(exc_info.value)
    assert "app.Domain" in str(exc_info.value)


def test_non_default_type_does_not_conflict():
    cache = TypeMapperCache()
    cache.register_annotations("app.TypeA", _type("app.Domain", "A"))
    cache.register_annotations("app.TypeB", _type("app.Domain", "B", default=False))

    assert cache.get_type_by_object_class("app.Domain") == "app.TypeA"
    assert cache.get_type_by_graphql_type_name("B") == "app.TypeB"
    assert cache.get_supported_classes() == ["app.Domain"]


@pytest.mark.parametrize(
    ("first", "second"),
    [("app.FactoryA", "app.FactoryB"), ("app.FactoryB", "app.FactoryA")],
)
def test_two_default_factories_conflict(first, second):
    cache = TypeMapperCache()
    cache.register_annotations(first, _factory(first, "create", "DomainInput"))

    with pytest.raises(DuplicateMappingError) as exc_info:
        cache.register_annotations(second, _factory(second, "build", "OtherInput"))

    assert exc_info.value.existing == f"{first}.create"
    assert exc_info.value.claimant == f"{second}.build"


def test_non_default_factory_is_indexed_by_name_only():
    cache = TypeMapperCache()
    cache.register_annotations(
        "app.Factories",
        _factory("app.Factories", "lookup", "DomainLookup", default=False),
    )

    assert cache.get_factory_by_object_class("app.Domain") is None
    assert cache.get_factory_by_graphql_input_type_name("DomainLookup") == MethodRef(
        "app.Factories",
        "lookup",
    )
    assert cache.get_input_names() == ["DomainLookup"]


@pytest.mark.parametrize(
    ("first", "second"),
    [("app.InputA", "app.InputB"), ("app.InputB", "app.InputA")],
)
def test_two_default_inputs_conflict(first, second):
    cache = TypeMapperCache()
    annotations = ClassAnnotations(
        inputs=(
            InputAnnotation(
                input_name=f"{first}Input",
                input_class_name="app.Domain",
                is_default=True,
                description=None,
                is_update=False,
            ),
        ),
    )
    cache.register_annotations(first, annotations)

    conflicting = ClassAnnotations(
        inputs=(
            InputAnnotation(
                input_name=f"{second}Input",
                input_class_name="app.Domain",
                is_default=True,
                description=None,
                is_update=False,
            ),
        ),
    )
    with pytest.raises(DuplicateMappingError) as exc_info:
        cache.register_annotations(second, conflicting)

    assert exc_info.value.existing == first
    assert exc_info.value.claimant == second


@pytest.mark.parametrize(
    ("first", "second"),
    [("app.InputA", "app.InputB"), ("app.InputB", "app.InputA")],
)
def test_two_inputs_with_the_same_name_conflict(first, second):
    cache = TypeMapperCache()
    cache.register_annotations(first, _input(first, "SharedInput", default=False))

    with pytest.raises(DuplicateMappingError) as exc_info:
        cache.register_annotations(second, _input(second, "SharedInput", default=False))

    assert exc_info.value.existing == first
    assert exc_info.value.claimant == second
    assert '"SharedInput"' in str(exc_info.value)


def test_inputs_lookups():
    cache = TypeMapperCache()
    cache.register_annotations(
        "app.Domain",
        _input("app.Domain", "DomainInput", description="A domain"),
    )
    cache.register_annotations(
        "app.Domain2",
        _input("app.Domain2", "DomainPatch", default=False, update=True),
    )

    assert cache.get_input_by_object_class("app.Domain") == DefaultInput(
        "app.Domain",
        "DomainInput",
        "A domain",
        False,
    )
    assert cache.get_input_by_object_class("app.Domain2") is None
    assert cache.get_input_by_graphql_input_type_name("DomainPatch") == NamedInput(
        "app.Domain2",
        None,
        True,
    )
    assert cache.get_input_names() == ["DomainInput", "DomainPatch"]


def test_decorators_keep_registration_order():
    cache = TypeMapperCache()
    for class_name in ["app.First", "app.Second"]:
        cache.register_annotations(
            class_name,
            ClassAnnotations(
                decorators=(
                    DecoratorAnnotation(
                        method_name="decorate",
                        input_name="DomainInput",
                        declaring_class=class_name,
                    ),
                ),
            ),
        )

    assert cache.get_decorators_by_graphql_input_type_name("DomainInput") == [
        MethodRef("app.First", "decorate"),
        MethodRef("app.Second", "decorate"),
    ]


def test_extend_type_cache():
    cache = ExtendTypeMapperCache()
    cache.register_annotations(
        "app.ByClass",
        ExtendClassAnnotations(extend_type_class_name="app.Domain"),
    )
    cache.register_annotations(
        "app.ByName",
        ExtendClassAnnotations(extend_type_name="Domain"),
    )
    cache.register_annotations(
        "app.ByClass",
        ExtendClassAnnotations(extend_type_class_name="app.Domain"),
    )

    assert cache.get_extend_types_by_object_class("app.Domain") == ["app.ByClass"]
    assert cache.get_extend_types_by_graphql_type_name("Domain") == ["app.ByName"]
    assert cache.get_extend_types_by_object_class("app.Other") is None
    assert cache.get_extend_types_by_graphql_type_name("Other") is None
