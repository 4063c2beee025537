from typing import Annotated, Optional

import strawberry
from strawberry.types import Info

import strawberry_mapper
from strawberry_mapper import HideParameter


@strawberry_mapper.type
class TestObject:
    __test__ = False

    def __init__(self, test: str):
        self.test = test

    @strawberry_mapper.field
    def get_test(self) -> str:
        return self.test


@strawberry_mapper.type
class TestObject2:
    __test__ = False

    def __init__(self, test: str):
        self.test = test

    @strawberry_mapper.field
    def get_test(self) -> str:
        return self.test


@strawberry_mapper.type(name="Renamed", default=False)
class TestObjectAlternative:
    __test__ = False

    @strawberry_mapper.field
    def get_test(self) -> str:
        return "alternative"


class TestController:
    __test__ = False

    @strawberry_mapper.query
    def test(
        self,
        count: Annotated[int, strawberry.argument(description="How many times")],
        limit: Annotated[int, HideParameter()] = 24,
        label: Optional[str] = None,
    ) -> str:
        """Repeat the label.

        Args:
            count: Ignored, the annotation wins.
            label: The label to repeat.
        """
        return (label or "test") * min(count, limit)

    @strawberry_mapper.query
    def info(self, info: Info) -> str:
        return info.field_name

    @staticmethod
    @strawberry_mapper.query
    def echo(value: str, *, times: int = 1) -> str:
        return value * times
