import pytest

from strawberry_mapper import ClassDiscovery, SchemaFactory, SimpleContainer
from tests.fixtures import shop
from tests.utils import GraphQLTestClient


@pytest.fixture
def repository():
    categories = [shop.Category(id=1, label="fruits"), shop.Category(id=2, label="tools")]
    products = [
        shop.Product(id=1, name="Strawberry", price=1.5, category_id=1),
        shop.Product(id=2, name="Raspberry", price=2.0, category_id=1),
        shop.Product(
            id=3,
            name="Shovel",
            price=12.0,
            category_id=2,
            availability=shop.Availability.SOLD_OUT,
        ),
    ]
    reviews = {
        1: [
            shop.Review(author="ann", rating=5),
            shop.Review(author="bob", rating=2),
        ],
        3: [shop.Review(author="ann", rating=4)],
    }
    return shop.ShopRepository(categories, products, reviews)


@pytest.fixture
def container(repository):
    return SimpleContainer({shop.ShopRepository: repository})


@pytest.fixture
def schema(container):
    factory = SchemaFactory(
        ClassDiscovery(modules=["tests.fixtures.shop"]),
        container=container,
    )
    return factory.create_schema()


@pytest.fixture(params=["sync", "async"])
def gql_client(request, schema):
    return GraphQLTestClient(schema, is_async=request.param == "async")
