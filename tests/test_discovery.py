import pytest
from django.core.cache import caches
from django.test import override_settings

import strawberry_mapper
from strawberry_mapper.discovery import (
    AnnotationReader,
    ClassAnnotations,
    ClassDiscovery,
    DecoratorAnnotation,
    ExtendClassAnnotations,
    FactoryAnnotation,
    InputAnnotation,
)
from strawberry_mapper.exceptions import CannotMapTypeError
from tests.fixtures import objects, shop


class CountingReader(AnnotationReader):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reads = []

    def read_class_annotations(self, cls):
        self.reads.append(cls)
        return super().read_class_annotations(cls)


@pytest.fixture
def cache():
    cache = caches["default"]
    cache.clear()
    yield cache
    cache.clear()


def test_read_external_type():
    annotations = AnnotationReader().get_class_annotations(shop.ProductType)

    assert annotations == ClassAnnotations(
        type_class_name="tests.fixtures.shop.Product",
        type_name="Product",
        is_default=True,
    )


def test_read_self_type():
    annotations = AnnotationReader().get_class_annotations(shop.Category)

    assert annotations.type_class_name == "tests.fixtures.shop.Category"
    assert annotations.type_name == "Category"


def test_read_non_default_type():
    annotations = AnnotationReader().get_class_annotations(objects.TestObjectAlternative)

    assert annotations.type_name == "Renamed"
    assert not annotations.is_default


@pytest.mark.parametrize(
    ("name", "for_class", "expected"),
    [
        ("ThingType", object, "Thing"),
        ("ThingType", None, "ThingType"),
        ("Type", object, "Type"),
        ("Thing", object, "Thing"),
    ],
)
def test_type_name(name, for_class, expected):
    cls = type(name, (), {})
    strawberry_mapper.type(for_class=for_class)(cls)

    assert AnnotationReader().get_class_annotations(cls).type_name == expected


def test_read_inputs():
    reader = AnnotationReader()

    assert reader.get_class_annotations(shop.Review).inputs == (
        InputAnnotation(
            input_name="ReviewInput",
            input_class_name="tests.fixtures.shop.Review",
            is_default=True,
            description="A review written by a customer.",
            is_update=False,
        ),
    )
    (patch,) = reader.get_class_annotations(shop.ProductPatch).inputs
    assert patch.input_name == "ProductPatchInput"
    assert patch.is_update


def test_stacked_inputs_keep_declaration_order():
    @strawberry_mapper.input
    @strawberry_mapper.input(name="CreateThing")
    @strawberry_mapper.input(name="ThingCreation", default=True)
    class Thing:
        name: str

    inputs = AnnotationReader().get_class_annotations(Thing).inputs

    assert [(i.input_name, i.is_default) for i in inputs] == [
        ("ThingInput", True),
        ("CreateThing", False),
        ("ThingCreation", True),
    ]


def test_read_factories():
    reader = AnnotationReader()

    assert reader.get_class_annotations(shop.CustomerFactory).factories == (
        FactoryAnnotation(
            method_name="create_customer",
            input_name="CustomerInput",
            input_class_name="tests.models.Customer",
            is_default=True,
            declaring_class="tests.fixtures.shop.CustomerFactory",
        ),
    )
    (lookup,) = reader.get_class_annotations(shop.ProductFactory).factories
    assert lookup.input_name == "ProductLookup"
    assert lookup.input_class_name == "tests.fixtures.shop.Product"
    assert not lookup.is_default


def test_factory_without_return_annotation():
    class Factories:
        @strawberry_mapper.factory
        @staticmethod
        def create(name: str):
            return name

    with pytest.raises(CannotMapTypeError, match="return type annotation is required"):
        AnnotationReader().get_class_annotations(Factories)


def test_read_decorators():
    annotations = AnnotationReader().get_class_annotations(shop.ReviewDecorators)

    assert annotations.decorators == (
        DecoratorAnnotation(
            method_name="highlight",
            input_name="ReviewInput",
            declaring_class="tests.fixtures.shop.ReviewDecorators",
        ),
    )


def test_read_extend_type():
    reader = AnnotationReader()

    assert reader.get_extend_class_annotations(
        shop.ProductCategoryExtension,
    ) == ExtendClassAnnotations(extend_type_class_name="tests.fixtures.shop.Product")
    assert reader.get_extend_class_annotations(shop.ProductType) is None


def test_extend_type_requires_a_target():
    with pytest.raises(TypeError, match="requires either for_class or name"):
        strawberry_mapper.extend_type()

    with pytest.raises(TypeError):
        strawberry_mapper.extend_type(type("Extension", (), {}))  # type: ignore


def test_plain_class_is_empty():
    assert AnnotationReader().get_class_annotations(shop.ShopController).is_empty
    assert AnnotationReader().get_class_annotations(shop.Product).is_empty


def test_annotations_are_not_inherited():
    class Child(shop.ProductType):
        pass

    assert AnnotationReader().get_class_annotations(Child).is_empty


def test_annotations_are_memoized(cache):
    reader = CountingReader(cache=cache)

    first = reader.get_class_annotations(shop.ProductType)
    second = reader.get_class_annotations(shop.ProductType)
    assert first == second
    assert reader.reads == [shop.ProductType]

    other_reader = CountingReader(cache=cache)
    assert other_reader.get_class_annotations(shop.ProductType) == first
    assert other_reader.reads == []


def test_local_classes_are_not_memoized(cache):
    @strawberry_mapper.type
    class Local:
        pass

    reader = CountingReader(cache=cache)
    reader.get_class_annotations(Local)
    reader.get_class_annotations(Local)

    assert reader.reads == [Local, Local]


def test_no_cache():
    reader = CountingReader()
    reader.get_class_annotations(shop.ProductType)
    reader.get_class_annotations(shop.ProductType)

    assert len(reader.reads) == 2


def test_reader_from_settings():
    assert AnnotationReader.from_settings().cache is caches["default"]

    with override_settings(STRAWBERRY_MAPPER={"CACHE_NAME": None, "CACHE_TIMEOUT": 10}):
        reader = AnnotationReader.from_settings()

    assert reader.cache is None
    assert reader.timeout == 10


def test_discover_module():
    discovered = list(ClassDiscovery(modules=["tests.fixtures.shop"]))

    assert discovered == [
        shop.Availability,
        shop.Category,
        shop.Product,
        shop.Review,
        shop.ProductPatch,
        shop.ShopRepository,
        shop.ProductType,
        shop.ProductCategoryExtension,
        shop.ReviewType,
        shop.CustomerType,
        shop.CustomerFactory,
        shop.ProductFactory,
        shop.ReviewDecorators,
        shop.ShopController,
    ]


def test_discover_explicit_classes_first():
    discovery = ClassDiscovery(modules=[shop], classes=[shop.ShopController])
    discovered = list(discovery)

    assert discovered[0] is shop.ShopController
    assert discovered.count(shop.ShopController) == 1
    assert list(discovery) == discovered


def test_discover_package():
    discovered = list(ClassDiscovery(modules=["tests.fixtures"]))

    assert objects.TestObject in discovered
    assert shop.ShopController in discovered
    assert discovered.index(objects.TestObject) < discovered.index(shop.Availability)
