import pytest

from strawberry_mapper import Container, SimpleContainer
from strawberry_mapper.exceptions import EntryNotFoundError


class Mailer:
    pass


def test_entries_by_identifier_and_class():
    mailer = Mailer()
    container = SimpleContainer({Mailer: mailer, "settings.debug": True})

    assert container.has("tests.test_containers.Mailer")
    assert container.get("tests.test_containers.Mailer") is mailer
    assert container.get("settings.debug") is True


def test_set_replaces_entry():
    container = SimpleContainer()
    container.set("answer", 41)
    container.set("answer", 42)

    assert container.get("answer") == 42


def test_missing_entry():
    container = SimpleContainer()

    assert not container.has("missing")
    with pytest.raises(EntryNotFoundError, match='"missing"') as exc_info:
        container.get("missing")

    assert exc_info.value.identifier == "missing"
    assert isinstance(exc_info.value, LookupError)


def test_container_protocol():
    class Registry:
        def get(self, identifier):
            return identifier

        def has(self, identifier):
            return True

    assert isinstance(SimpleContainer(), Container)
    assert isinstance(Registry(), Container)
    assert not isinstance(object(), Container)
