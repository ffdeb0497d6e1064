from __future__ import annotations

from packstore import ObjectStore, ObjectStoreBuilder, StoreConfig, qualified_name

from graph_fixtures import Empty, Leaf, Node


def test_builder_defaults_match_plain_store():
    store = ObjectStore.builder().build()

    assert isinstance(ObjectStore.builder(), ObjectStoreBuilder)
    assert store.pack(Leaf(1)) == ObjectStore().pack(Leaf(1))


def test_builder_methods_chain():
    builder = ObjectStoreBuilder()

    assert builder.with_builtin_types({}) is builder
    assert builder.with_types([]) is builder
    assert builder.with_type_renames({}) is builder
    assert builder.with_objects({}) is builder
    assert builder.with_json_document({}) is builder
    assert builder.with_config(StoreConfig()) is builder
    assert builder.with_type_resolver(lambda name: None) is builder
    assert builder.with_type_name_aliases({}) is builder


def test_seeded_objects_are_packed_and_keep_their_ids():
    existing = Leaf(42)
    store = ObjectStore.builder().with_objects({"7": existing}).build()

    doc = store.pack(Node("root", children=[existing, Leaf(1)]))

    assert doc["root"]["ref"] == "8"
    assert doc["objects"]["7"]["value"] == 42
    assert doc["objects"]["8"]["children"][0]["ref"] == "7"
    assert doc["objects"]["8"]["children"][1]["ref"] == "9"


def test_seeded_types_keep_their_ids():
    store = ObjectStore.builder().with_types([(Leaf, "12")]).build()

    doc = store.pack(Node("root", children=[Leaf(1)]))

    assert doc["objects"]["2"]["isa"] == {"type": "12"}
    assert doc["types"]["12"] == {"type": "12", "fullname": qualified_name(Leaf)}
    assert doc["types"]["13"] == {"type": "13", "fullname": qualified_name(Node)}


def test_document_types_are_loaded_on_build():
    doc = ObjectStore().pack(Node("root", children=[Leaf(3)]))

    store = ObjectStore.builder().with_json_document(doc).build()

    assert store.types.resolve("1") is Node
    assert store.types.resolve("2") is Leaf
    assert store.unpack_root().children[0].value == 3


def test_custom_resolver_and_aliases():
    doc = {
        "version": 2,
        "root": {"ref": "1", "type": "1"},
        "objects": {"1": {"value": 6, "isa": {"type": "1"}}},
        "types": {"1": {"type": "1", "fullname": "old_game.items:Crystal"}},
    }

    store = (
        ObjectStore.builder()
        .with_json_document(doc)
        .with_type_name_aliases({"old_game.items:Crystal": qualified_name(Leaf)})
        .build()
    )
    assert store.unpack_root().value == 6

    store = ObjectStore.builder().with_json_document(doc).with_type_resolver(lambda name: Leaf).build()
    assert isinstance(store.unpack_root(), Leaf)


def test_config_is_passed_through():
    store = ObjectStore.builder().with_config(StoreConfig(format_version=3)).build()

    assert store.config.format_version == 3
    assert store.pack(Empty())["version"] == 3
