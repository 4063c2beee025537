import dataclasses

from strawberry_mapper.utils.docstrings import (
    get_arguments_descriptions,
    get_docstring,
    get_summary,
)


def documented(limit, *args, offset=0, **kwargs):
    """Fetch things.

    Only the first `limit` things are returned,
    in insertion order.

    Args:
        limit: The maximum number
            of things.
        offset (int): How many things to skip.
        **kwargs: Forwarded as is.

    Returns:
        The things.
    """


def undocumented(limit):
    pass


@dataclasses.dataclass
class Generated:
    name: str


@dataclasses.dataclass
class Described:
    """A described dataclass."""

    name: str


class Base:
    """The base."""


class Child(Base):
    pass


def test_get_docstring():
    assert get_docstring(undocumented) is None
    assert get_docstring(Described) == "A described dataclass."
    assert get_docstring(documented).startswith("Fetch things.\n\nOnly")


def test_generated_dataclass_docstring_is_ignored():
    assert get_docstring(Generated) is None


def test_docstring_is_not_inherited():
    assert get_docstring(Base) == "The base."
    assert get_docstring(Child) is None


def test_get_summary():
    assert get_summary(documented) == (
        "Fetch things.\n\nOnly the first `limit` things are returned,\nin insertion order."
    )
    assert get_summary(undocumented) is None


def test_get_arguments_descriptions():
    assert get_arguments_descriptions(documented) == {
        "limit": "The maximum number of things.",
        "offset": "How many things to skip.",
        "kwargs": "Forwarded as is.",
    }
    assert get_arguments_descriptions(undocumented) == {}
    assert get_arguments_descriptions(Described) == {}
