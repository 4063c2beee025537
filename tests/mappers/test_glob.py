from django.test import override_settings

from strawberry_mapper.discovery import AnnotationReader, ClassDiscovery
from strawberry_mapper.mappers.cache import MethodRef
from strawberry_mapper.mappers.glob import GlobTypeMapper
from tests.fixtures import shop
from tests.models import Customer


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class CountingDiscovery:
    """A discovery counting how many times the mapping was built."""

    def __init__(self, *classes):
        self.classes = classes
        self.builds = 0

    def __iter__(self):
        self.builds += 1
        return iter(self.classes)


def _mapper(discovery, **kwargs):
    return GlobTypeMapper(discovery, reader=AnnotationReader(), **kwargs)


def test_mapping_is_built_lazily():
    discovery = CountingDiscovery(shop.ProductType)
    mapper = _mapper(discovery)

    assert discovery.builds == 0
    assert mapper.built_at is None

    mapper.get_type_names()
    mapper.get_type_names()
    assert discovery.builds == 1


def test_mapping_expires_after_ttl():
    clock = FakeClock()
    discovery = CountingDiscovery(shop.ProductType)
    mapper = _mapper(discovery, ttl=10, clock=clock)

    first = mapper.snapshot
    assert mapper.built_at == 100.0

    clock.now = 109.9
    assert mapper.snapshot is first

    clock.now = 110.0
    second = mapper.snapshot
    assert second is not first
    assert mapper.built_at == 110.0
    assert discovery.builds == 2


def test_mapping_without_ttl_never_expires():
    clock = FakeClock()
    discovery = CountingDiscovery(shop.ProductType)
    mapper = _mapper(discovery, clock=clock)

    first = mapper.snapshot
    clock.now += 10**9
    assert mapper.snapshot is first


def test_ttl_from_settings():
    with override_settings(STRAWBERRY_MAPPER={"TYPE_MAPPER_TTL": 30}):
        mapper = _mapper(CountingDiscovery())

    assert mapper.ttl == 30


def test_invalidate():
    discovery = CountingDiscovery(shop.ProductType)
    mapper = _mapper(discovery)

    first = mapper.snapshot
    mapper.invalidate()
    assert mapper.built_at is None
    assert mapper.snapshot is not first
    assert discovery.builds == 2


def test_type_lookups():
    mapper = _mapper(ClassDiscovery(modules=[shop]))

    assert mapper.can_map_class_to_type(shop.Product)
    assert not mapper.can_map_class_to_type(shop.ShopRepository)
    assert mapper.get_type_name_for_class(shop.Product) == "Product"
    assert mapper.get_type_class_by_name("Product") is shop.ProductType
    assert mapper.get_domain_class_by_type_name("Product") is shop.Product
    assert mapper.get_type_class_by_name("Missing") is None
    assert mapper.get_domain_class_by_type_name("Missing") is None


def test_domain_class_outside_of_discovery():
    mapper = _mapper(ClassDiscovery(modules=[shop]))

    assert mapper.get_type_name_for_class(Customer) == "Customer"
    assert mapper.get_domain_class_by_type_name("Customer") is None


def test_input_lookups():
    mapper = _mapper(ClassDiscovery(modules=[shop]))

    assert mapper.get_input_name_for_class(shop.Review) == "ReviewInput"
    assert mapper.get_input_name_for_class(Customer) == "CustomerInput"
    # Non-default factories are only reachable by name
    assert mapper.get_input_name_for_class(shop.Product) is None
    assert mapper.has_input_name("ProductLookup")
    assert not mapper.has_input_name("ProductInput")

    assert mapper.get_factory_by_input_name("CustomerInput") == MethodRef(
        "tests.fixtures.shop.CustomerFactory",
        "create_customer",
    )
    assert mapper.get_decorators_by_input_name("ReviewInput") == [
        MethodRef("tests.fixtures.shop.ReviewDecorators", "highlight"),
    ]
    assert mapper.get_decorators_by_input_name("CustomerInput") == []


def test_extend_types():
    mapper = _mapper(ClassDiscovery(modules=[shop]))

    assert mapper.get_extend_types("Product", shop.Product) == [
        shop.ProductCategoryExtension,
    ]
    assert mapper.get_extend_types("Review", shop.Review) == []


def test_annotations_for_class():
    mapper = _mapper(ClassDiscovery(modules=[shop]))

    assert mapper.get_annotations_for_class(shop.ProductType).type_name == "Product"
    assert mapper.get_annotations_for_class(shop.ShopController) is None
