import struct

import base58
import pytest

from acct_coder.errors import EncodeError, LayoutResolutionFailure, MalformedInput
from acct_coder.idl import Idl
from acct_coder.registry import LayoutRegistry

AUTHORITY = base58.b58encode(bytes(range(32))).decode("ascii")

KITCHEN_SINK_IDL = {
    "accounts": [
        {
            "name": "kitchenSink",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "flag", "type": "bool"},
                    {"name": "small", "type": "i8"},
                    {"name": "wide", "type": "u128"},
                    {"name": "signed_wide", "type": "i128"},
                    {"name": "ratio", "type": "f64"},
                    {"name": "label", "type": "string"},
                    {"name": "blob", "type": "bytes"},
                    {"name": "authority", "type": "publicKey"},
                    {"name": "scores", "type": {"vec": "u16"}},
                    {"name": "seed", "type": {"array": ["u8", 4]}},
                    {"name": "maybe", "type": {"option": "u32"}},
                    {"name": "point", "type": {"defined": "Point"}},
                    {"name": "mode", "type": {"defined": "Mode"}},
                ],
            },
        },
        {
            "name": "config",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "admin", "type": "publicKey"},
                    {"name": "fee", "type": {"option": "u16"}},
                    {"name": "mode", "type": {"defined": "Mode"}},
                    {"name": "origin", "type": {"defined": "Point"}},
                ],
            },
        },
        {
            "name": "tree",
            "type": {"kind": "struct", "fields": [{"name": "root", "type": {"defined": "Node"}}]},
        },
    ],
    "types": [
        {
            "name": "Point",
            "type": {"kind": "struct", "fields": [{"name": "x", "type": "i32"}, {"name": "y", "type": "i32"}]},
        },
        {
            "name": "Mode",
            "type": {
                "kind": "enum",
                "variants": [
                    {"name": "Idle"},
                    {"name": "Limited", "fields": [{"name": "cap", "type": "u32"}]},
                    {"name": "Pair", "fields": ["u8", "u8"]},
                ],
            },
        },
        {
            "name": "Node",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "value", "type": "u8"},
                    {"name": "children", "type": {"vec": {"defined": "Node"}}},
                ],
            },
        },
    ],
}


@pytest.fixture
def registry():
    return LayoutRegistry(Idl.from_dict(KITCHEN_SINK_IDL))


def sink_value(**overrides):
    value = {
        "flag": True,
        "small": -5,
        "wide": 2**100 + 7,
        "signed_wide": -(2**90),
        "ratio": 0.25,
        "label": "héllo",
        "blob": b"\x00\xff\x10",
        "authority": AUTHORITY,
        "scores": [1, 2, 65535],
        "seed": [9, 8, 7, 6],
        "maybe": 77,
        "point": {"x": -1, "y": 2},
        "mode": {"Limited": {"cap": 10}},
    }
    value.update(overrides)
    return value


def test_registry_lookup(registry):
    assert sorted(registry.names()) == ["config", "kitchenSink", "tree"]
    assert "config" in registry
    assert len(registry) == 3
    assert registry.get("missing") is None


def test_round_trip_every_kind(registry):
    layout = registry.get("kitchenSink")
    value = sink_value()
    assert layout.decode(layout.encode(value)) == value


@pytest.mark.parametrize("mode", [{"Idle": None}, {"Limited": {"cap": 3}}, {"Pair": [1, 2]}])
def test_enum_variants(registry, mode):
    layout = registry.get("kitchenSink")
    assert layout.decode(layout.encode(sink_value(mode=mode)))["mode"] == mode


def test_enum_unit_variant_by_name(registry):
    layout = registry.get("kitchenSink")
    assert layout.decode(layout.encode(sink_value(mode="Idle")))["mode"] == {"Idle": None}


def test_option_none_and_missing(registry):
    layout = registry.get("kitchenSink")
    assert layout.decode(layout.encode(sink_value(maybe=None)))["maybe"] is None

    value = sink_value()
    del value["maybe"]
    assert layout.decode(layout.encode(value))["maybe"] is None


def test_borsh_wire_format(registry):
    layout = registry.get("config")
    data = layout.encode({"admin": AUTHORITY, "fee": 300, "mode": {"Pair": [4, 5]}, "origin": {"x": 1, "y": -1}})
    assert data == (
        bytes(range(32))
        + b"\x01" + struct.pack("<H", 300)
        + b"\x02\x04\x05"
        + struct.pack("<ii", 1, -1)
    )


def test_encode_is_length_exact(registry):
    layout = registry.get("config")
    data = layout.encode({"admin": AUTHORITY, "fee": None, "mode": "Idle", "origin": {"x": 0, "y": 0}})
    assert len(data) == 32 + 1 + 1 + 8


def test_recursive_type(registry):
    layout = registry.get("tree")
    value = {"root": {"value": 1, "children": [{"value": 2, "children": []}, {"value": 3, "children": []}]}}
    assert layout.decode(layout.encode(value)) == value
    assert layout.max_size is None


def test_max_size(registry):
    # publicKey + option<u16> + enum (1 + largest variant u32) + Point
    assert registry.get("config").max_size == 32 + 3 + 5 + 8
    assert registry.get("kitchenSink").max_size is None


def test_decode_ignores_trailing_bytes(registry):
    layout = registry.get("config")
    value = {"admin": AUTHORITY, "fee": 1, "mode": {"Idle": None}, "origin": {"x": 3, "y": 4}}
    assert layout.decode(layout.encode(value) + b"\x00" * 16) == value


def test_decode_short_body_is_malformed(registry):
    layout = registry.get("config")
    with pytest.raises(MalformedInput):
        layout.decode(bytes(20))


def test_decode_bad_enum_index_is_malformed(registry):
    layout = registry.get("config")
    data = bytearray(layout.encode({"admin": AUTHORITY, "fee": None, "mode": "Idle", "origin": {"x": 0, "y": 0}}))
    data[33] = 9
    with pytest.raises(MalformedInput):
        layout.decode(bytes(data))


@pytest.mark.parametrize(
    "overrides",
    [
        {"small": 1000},
        {"seed": [1, 2, 3]},
        {"mode": {"Unknown": None}},
        {"authority": base58.b58encode(b"short").decode("ascii")},
        {"authority": 12345},
        {"flag": 1},
        {"blob": 5},
        {"blob": "not base64!"},
    ],
)
def test_encode_rejects_bad_values(registry, overrides):
    layout = registry.get("kitchenSink")
    with pytest.raises(EncodeError):
        layout.encode(sink_value(**overrides))


def test_encode_rejects_missing_field(registry):
    layout = registry.get("kitchenSink")
    value = sink_value()
    del value["label"]
    with pytest.raises(EncodeError):
        layout.encode(value)


def test_unresolvable_type_fails_construction():
    idl = Idl.from_dict({
        "accounts": [
            {"name": "broken", "type": {"kind": "struct", "fields": [{"name": "x", "type": {"defined": "Missing"}}]}}
        ]
    })
    with pytest.raises(LayoutResolutionFailure):
        LayoutRegistry(idl)


def test_unknown_primitive_fails_construction():
    idl = Idl.from_dict({
        "accounts": [{"name": "broken", "type": {"kind": "struct", "fields": [{"name": "x", "type": "u256"}]}}]
    })
    with pytest.raises(LayoutResolutionFailure):
        LayoutRegistry(idl)


def test_empty_idl_is_an_empty_registry():
    registry = LayoutRegistry(Idl.from_dict({}))
    assert len(registry) == 0
    assert registry.get("anything") is None


def test_accounts_listed_by_name_resolve_from_types():
    idl = Idl.from_dict({
        "accounts": [{"name": "Point"}],
        "types": KITCHEN_SINK_IDL["types"],
    })
    layout = LayoutRegistry(idl).get("Point")
    assert layout.decode(layout.encode({"x": 5, "y": 6})) == {"x": 5, "y": 6}


def test_underscore_prefixed_fields_round_trip():
    idl = Idl.from_dict({
        "accounts": [
            {
                "name": "pool",
                "type": {
                    "kind": "struct",
                    "fields": [
                        {"name": "amount", "type": "u64"},
                        {"name": "_reserved", "type": {"array": ["u8", 4]}},
                    ],
                },
            }
        ]
    })
    layout = LayoutRegistry(idl).get("pool")
    value = {"amount": 5, "_reserved": [1, 2, 3, 4]}
    assert layout.decode(layout.encode(value)) == value


def test_account_without_definition_fails_construction():
    idl = Idl.from_dict({"accounts": [{"name": "ghost"}]})
    with pytest.raises(LayoutResolutionFailure):
        LayoutRegistry(idl)


def test_bool_byte_must_be_zero_or_one(registry):
    layout = registry.get("kitchenSink")
    data = bytearray(layout.encode(sink_value()))
    data[0] = 2
    with pytest.raises(MalformedInput):
        layout.decode(bytes(data))


def test_bytes_accept_base64_text(registry):
    layout = registry.get("kitchenSink")
    from_text = layout.encode(sink_value(blob="AP8Q"))
    assert from_text == layout.encode(sink_value())
    assert layout.decode(from_text)["blob"] == b"\x00\xff\x10"
