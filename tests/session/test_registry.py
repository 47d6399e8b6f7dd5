import pytest

from garden_session import SessionImportError, SessionRegistry
from garden_session.io import export_session
from tests.helpers import build_session


def test_create_get_list_remove():
    registry = SessionRegistry()
    session = registry.create("Workshop", "Fay")
    assert len(registry) == 1
    assert session.id in registry
    assert registry.get(session.id) is session
    assert registry.get(None) is None
    assert registry.list() == [session]
    assert registry.remove(session.id) is session
    assert registry.get(session.id) is None


def test_add_rejects_duplicate_ids():
    registry = SessionRegistry()
    session = registry.add(build_session())
    with pytest.raises(ValueError):
        registry.add(session)


def test_import_keeps_id_when_free():
    session = build_session(["a"])
    registry = SessionRegistry()
    imported = registry.import_json(export_session(session))
    assert imported.id == session.id
    assert imported.title == session.title


def test_import_collision_gets_new_id():
    registry = SessionRegistry()
    original = registry.add(build_session(["a"]))

    imported = registry.import_json(export_session(original))
    assert imported.id != original.id
    assert imported.title == f"{original.title} (imported)"
    assert all(node.session_id == imported.id for node in imported.nodes)
    assert registry.get(original.id) is original
    assert len(registry) == 2


def test_malformed_import_leaves_registry_unchanged():
    registry = SessionRegistry()
    existing = registry.create("Existing")
    with pytest.raises(SessionImportError):
        registry.import_json("{not json")
    assert registry.list() == [existing]


def test_load_sample_registers_session():
    registry = SessionRegistry()
    session = registry.load_sample()
    assert registry.get(session.id) is session
    assert len(session.nodes) == 12
