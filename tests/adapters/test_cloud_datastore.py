"""Tests for CloudDatastore.

Focus: property conversion (error-prone), key conversion, and error
translation against a fake client. Real client interaction only runs when
google-cloud-datastore is installed and an emulator is configured.
"""

import importlib.util
import os
from dataclasses import dataclass, field
from enum import Enum
from types import SimpleNamespace

import pytest

from dskit import Context, LocalDatastore, Query, load, save
from dskit.adapters.cloud_datastore import (
    CloudDatastore,
    _from_native_key,
    _from_properties,
    _to_native_key,
    _to_properties,
)
from dskit.config import DatastoreSettings
from dskit.core.identity import Key
from dskit.errors import (
    AllocationError,
    EntityNotFoundError,
    StoreQueryError,
    StoreReadError,
    StoreWriteError,
)


def _has_module(name):
    try:
        return importlib.util.find_spec(name) is not None
    except ModuleNotFoundError:
        return False


HAS_API_CORE = _has_module("google.api_core")
HAS_GCLOUD = _has_module("google.cloud.datastore")
HAS_EMULATOR = bool(os.environ.get("DATASTORE_EMULATOR_HOST"))


@dataclass
class Address:
    city: str = ""


@dataclass
class Author:
    id: int = 0
    key: Key | None = None
    name: str = ""
    tags: list[str] = field(default_factory=list)
    address: Address = field(default_factory=Address)
    meta: dict[str, int] = field(default_factory=dict)
    editor: Key | None = None


class Color(Enum):
    RED = "red"
    BLUE = "blue"


@dataclass
class Badge:
    id: int = 0
    key: Key | None = None
    color: Color = Color.RED
    address: Address = field(default_factory=Address)


def _native_key(kind, id_or_name, parent=None):
    flat = (*(parent.flat_path if parent else ()), kind, id_or_name)
    return SimpleNamespace(
        kind=kind,
        id_or_name=id_or_name,
        id=id_or_name if isinstance(id_or_name, int) else None,
        parent=parent,
        flat_path=flat,
    )


def test_scalars_and_scalar_lists_are_indexed():
    properties, unindexed = _to_properties(Author(id=1, name="ann", tags=["a", "b"]))

    assert properties["id"] == 1
    assert properties["name"] == "ann"
    assert properties["tags"] == ["a", "b"]
    assert "_json_tags" not in properties
    assert "tags" not in unindexed


def test_complex_values_are_json_and_unindexed():
    """Nested records and dicts cannot be indexed; they travel as JSON."""
    properties, unindexed = _to_properties(
        Author(address=Address(city="Oslo"), meta={"x": 1})
    )

    assert properties["_json_address"] == '{"city": "Oslo"}'
    assert properties["_json_meta"] == '{"x": 1}'
    assert unindexed == {"_json_address", "_json_meta"}


def test_skipped_fields_are_not_stored():
    properties, _ = _to_properties(Author(key=Key("Author", 1)), skip=frozenset({"key"}))

    assert "key" not in properties


def test_key_values_use_converter():
    properties, _ = _to_properties(
        Author(editor=Key("Author", 2)), to_key=lambda k: ("native", k.flat_path())
    )

    assert properties["editor"] == ("native", ("Author", 2))


def test_json_values_are_decoded_on_read():
    properties, _ = _to_properties(Author(name="ann", address=Address(city="Oslo")))

    restored = _from_properties(properties)

    assert restored["name"] == "ann"
    assert restored["address"] == {"city": "Oslo"}


def test_enums_are_stored_by_value():
    properties, unindexed = _to_properties(Badge(color=Color.BLUE))

    assert properties["_json_color"] == '"blue"'
    assert "_json_color" in unindexed


class PropertyStore(LocalDatastore):
    """LocalDatastore that reads back converted properties, as CloudDatastore.get does."""

    def get(self, key):
        properties, _ = _to_properties(super().get(key), skip=frozenset({"key"}))
        return _from_properties(properties)


def test_nested_records_and_enums_survive_load(settings):
    ctx = Context.create(PropertyStore(), settings=settings)
    key = save(ctx, Badge(color=Color.BLUE, address=Address(city="Oslo")))

    loaded = load(ctx, Badge, key)

    assert loaded == Badge(id=key.int_id, key=key, color=Color.BLUE, address=Address(city="Oslo"))
    assert loaded.color is Color.BLUE
    assert isinstance(loaded.address, Address)


def test_native_keys_in_properties_are_converted():
    restored = _from_properties({"editor": _native_key("Author", 2)})

    assert restored["editor"] == Key("Author", 2)


def test_native_key_with_ancestors():
    native = _native_key("Comment", 3, parent=_native_key("Post", "intro"))

    assert _from_native_key(native) == Key("Comment", 3, Key("Post", "intro"))


def test_to_native_key_passes_flat_path():
    client = SimpleNamespace(key=lambda *path: path)

    assert _to_native_key(client, Key("Comment", 3, Key("Post", "intro"))) == (
        "Post",
        "intro",
        "Comment",
        3,
    )
    assert _to_native_key(client, Key.incomplete("Post")) == ("Post",)


class FakeClient:
    """Stands in for google.cloud.datastore.Client."""

    def __init__(self, stored=None, error=None, total=0):
        self.stored = stored or {}
        self.error = error
        self.total = total
        self.queries = []

    def key(self, *path):
        parent = None
        for i in range(0, len(path) - 1, 2):
            parent = _native_key(path[i], path[i + 1], parent)
        if len(path) % 2:
            return SimpleNamespace(kind=path[-1], id_or_name=None, parent=parent, flat_path=path)
        return parent

    def get(self, key):
        if self.error:
            raise self.error
        return self.stored.get(key.flat_path)

    def allocate_ids(self, key, num):
        if self.error:
            raise self.error
        return [_native_key(key.kind, 1000 + i) for i in range(num)]

    def put(self, entity):
        if self.error:
            raise self.error

    def query(self, kind):
        query = SimpleNamespace(kind=kind, filters=[])
        query.add_filter = lambda filter: query.filters.append(filter)
        self.queries.append(query)
        return query

    def aggregation_query(self, query):
        return FakeAggregation(self)


class FakeAggregation:
    """Stands in for an aggregation query returning a single count batch."""

    def __init__(self, client):
        self.client = client
        self.alias = None

    def count(self, alias=None):
        self.alias = alias
        return self

    def fetch(self):
        if self.client.error:
            raise self.client.error
        return iter([[SimpleNamespace(alias=self.alias, value=self.client.total)]])


def _adapter(client):
    return CloudDatastore.from_client(client, DatastoreSettings(_env_file=None))


def test_get_missing_entity_raises_not_found():
    with pytest.raises(EntityNotFoundError):
        _adapter(FakeClient()).get(Key("Author", 1))


def test_get_decodes_stored_properties():
    client = FakeClient(stored={("Author", 1): {"name": "ann", "_json_meta": '{"x": 1}'}})

    assert _adapter(client).get(Key("Author", 1)) == {"name": "ann", "meta": {"x": 1}}


def test_allocate_id_returns_first_allocated_id():
    assert _adapter(FakeClient()).allocate_id("Author") == 1000


@pytest.mark.skipif(not HAS_API_CORE, reason="google-api-core not installed")
def test_api_errors_are_translated():
    """Native call errors surface as dskit store errors."""
    from google.api_core.exceptions import ServiceUnavailable

    adapter = _adapter(FakeClient(error=ServiceUnavailable("down")))

    with pytest.raises(StoreReadError, match="down"):
        adapter.get(Key("Author", 1))
    with pytest.raises(AllocationError, match="down"):
        adapter.allocate_id("Author")


@pytest.mark.skipif(not HAS_GCLOUD, reason="google-cloud-datastore not installed")
def test_count_uses_server_side_aggregation():
    client = FakeClient(total=3)

    assert _adapter(client).count(Query("Post").filter("slug", "hello")) == 3
    assert len(client.queries[0].filters) == 1


@pytest.mark.skipif(not HAS_GCLOUD, reason="google-cloud-datastore not installed")
def test_count_failure_raises_query_error():
    from google.api_core.exceptions import ServiceUnavailable

    adapter = _adapter(FakeClient(error=ServiceUnavailable("down")))

    with pytest.raises(StoreQueryError, match="down"):
        adapter.count(Query("Post"))


@pytest.mark.skipif(not HAS_GCLOUD, reason="google-cloud-datastore not installed")
def test_unencodable_values_fail_the_write():
    adapter = _adapter(FakeClient())

    with pytest.raises(StoreWriteError, match="put"):
        adapter.put(Key("Author", 1), {"meta": {"handle": object()}})


# Integration tests with the real client (optional dependency)


@pytest.mark.skipif(not (HAS_GCLOUD and HAS_EMULATOR), reason="datastore emulator not available")
def test_save_exists_roundtrip_against_emulator():
    """Full save/exists/load cycle through the emulator."""
    from dskit import exists_in_datastore

    settings = DatastoreSettings(_env_file=None, project="dskit-test")
    ctx = Context.create(CloudDatastore.from_settings(settings), settings=settings)
    author = Author(name="ann", tags=["x"], address=Address(city="Oslo"))

    key = save(ctx, author)

    assert exists_in_datastore(ctx, author)
    loaded = load(ctx, Author, key)
    assert loaded.name == "ann"
    assert loaded.tags == ["x"]
    assert loaded.address == Address(city="Oslo")
    assert loaded.key == key
