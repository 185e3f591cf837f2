"""Borsh-compatible field layouts compiled from IDL type definitions.

Every account body is a construct ``Struct`` built from the IDL field list.
Values go in and come out as plain Python objects: dicts for structs,
lists for vec/array, ``None`` for an empty option, base58 strings for public
keys, and ``{"Variant": payload}`` for enums. ``bytes`` values also
accept base64 text on encode, the same text form ``json_default`` writes.
"""
from __future__ import annotations

import base64
import binascii
from typing import Any

import base58
from construct import (
    Adapter,
    Array,
    BytesInteger,
    Bytes,
    Construct,
    ConstructError,
    Error,
    Float32l,
    Float64l,
    GreedyBytes,
    If,
    Int8sl,
    Int8ul,
    Int16sl,
    Int16ul,
    Int32sl,
    Int32ul,
    Int64sl,
    Int64ul,
    LazyBound,
    PascalString,
    Pass,
    Prefixed,
    PrefixedArray,
    Sequence,
    Struct,
    Switch,
    ValidationError,
    this,
)

from acct_core.protocol import ENUM_TAG_SIZE, OPTION_TAG_SIZE, PUBLIC_KEY_SIZE

from .errors import EncodeError, LayoutResolutionFailure, MalformedInput
from .idl import Idl, IdlEnumVariant, IdlField, IdlType, IdlTypeDef


class BoolAdapter(Adapter):
    """Single byte restricted to 0 or 1."""

    def _decode(self, obj, context, path):
        if obj not in (0, 1):
            raise ValidationError(f"invalid bool byte {obj}", path=path)
        return obj == 1

    def _encode(self, obj, context, path):
        if not isinstance(obj, bool):
            raise ValidationError(f"bool value expected, got {obj!r}", path=path)
        return int(obj)


class BytesAdapter(Adapter):
    """u32-prefixed raw bytes; base64 text is accepted when building."""

    def _decode(self, obj, context, path):
        return obj

    def _encode(self, obj, context, path):
        if isinstance(obj, (bytes, bytearray)):
            return bytes(obj)
        if isinstance(obj, str):
            try:
                return base64.b64decode(obj, validate=True)
            except binascii.Error as e:
                raise ValidationError(f"invalid base64 bytes value: {e}", path=path) from e
        raise ValidationError(f"bytes value expected, got {obj!r}", path=path)


PRIMITIVES: dict[str, Construct] = {
    "bool": BoolAdapter(Int8ul),
    "u8": Int8ul,
    "i8": Int8sl,
    "u16": Int16ul,
    "i16": Int16sl,
    "u32": Int32ul,
    "i32": Int32sl,
    "u64": Int64ul,
    "i64": Int64sl,
    "u128": BytesInteger(16, signed=False, swapped=True),
    "i128": BytesInteger(16, signed=True, swapped=True),
    "f32": Float32l,
    "f64": Float64l,
    "string": PascalString(Int32ul, "utf8"),
    "bytes": BytesAdapter(Prefixed(Int32ul, GreedyBytes)),
}

PRIMITIVE_SIZES: dict[str, int | None] = {
    "bool": 1,
    "u8": 1,
    "i8": 1,
    "u16": 2,
    "i16": 2,
    "u32": 4,
    "i32": 4,
    "f32": 4,
    "u64": 8,
    "i64": 8,
    "f64": 8,
    "u128": 16,
    "i128": 16,
    "publicKey": PUBLIC_KEY_SIZE,
    "string": None,
    "bytes": None,
}


class PublicKeyAdapter(Adapter):
    """32 raw bytes on the wire, base58 text in Python."""

    def _decode(self, obj, context, path):
        return base58.b58encode(obj).decode("ascii")

    def _encode(self, obj, context, path):
        if isinstance(obj, (bytes, bytearray)):
            return bytes(obj)
        if isinstance(obj, str):
            return base58.b58decode(obj)
        raise ValidationError(f"public key must be base58 text or bytes, got {obj!r}", path=path)


class OptionAdapter(Adapter):
    """u8 tag (0 none, 1 some) followed by the value when present."""

    def __init__(self, subcon: Construct):
        super().__init__(Struct("tag" / Int8ul, "value" / If(this.tag == 1, subcon)))
        # A missing optional field builds as none.
        self.flagbuildnone = True

    def _decode(self, obj, context, path):
        if obj.tag not in (0, 1):
            raise ValidationError(f"invalid option tag {obj.tag}", path=path)
        return obj.value if obj.tag == 1 else None

    def _encode(self, obj, context, path):
        if obj is None:
            return {"tag": 0, "value": None}
        return {"tag": 1, "value": obj}


class EnumAdapter(Adapter):
    """u8 variant index followed by the variant payload."""

    def __init__(self, variants: list[tuple[str, Construct]]):
        self.variant_names = [name for name, _ in variants]
        cases = {i: sub for i, (_, sub) in enumerate(variants)}
        super().__init__(Struct("index" / Int8ul, "payload" / Switch(this.index, cases, default=Error)))

    def _decode(self, obj, context, path):
        return {self.variant_names[obj.index]: obj.payload}

    def _encode(self, obj, context, path):
        if isinstance(obj, str):
            name, payload = obj, None
        elif isinstance(obj, dict) and len(obj) == 1:
            ((name, payload),) = obj.items()
        else:
            raise ValidationError(f"enum value must be a variant name or single-key dict, got {obj!r}", path=path)
        if name not in self.variant_names:
            raise ValidationError(f"unknown enum variant {name!r}", path=path)
        return {"index": self.variant_names.index(name), "payload": payload}


def _plain(obj: Any) -> Any:
    """Strip construct containers down to builtin dicts and lists."""
    if isinstance(obj, dict):
        # Parsed containers carry the source stream under "_io".
        return {k: _plain(v) for k, v in obj.items() if k != "_io"}
    if isinstance(obj, list):
        return [_plain(v) for v in obj]
    return obj


def json_default(obj: Any) -> Any:
    """JSON text form of decoded values: ``bytes`` become base64."""
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    raise TypeError(f"{type(obj).__name__} is not JSON serializable")


class AccountLayout:
    """Encode/decode capability for one account type."""

    def __init__(self, name: str, con: Construct, max_size: int | None):
        self.name = name
        self.con = con
        self.max_size = max_size

    def encode(self, value: Any) -> bytes:
        try:
            return self.con.build(value)
        except (ConstructError, KeyError, TypeError, ValueError) as e:
            raise EncodeError(f"{self.name}: {e}") from e

    def decode(self, data: bytes) -> Any:
        try:
            return _plain(self.con.parse(bytes(data)))
        except (ConstructError, ValueError) as e:
            raise MalformedInput(f"{self.name}: {e}") from e

    def __repr__(self) -> str:
        return f"AccountLayout({self.name!r}, max_size={self.max_size})"


class LayoutCompiler:
    """Compiles IDL type expressions into constructs, memoized per defined type."""

    def __init__(self, idl: Idl):
        self.idl = idl
        self._defined: dict[str, Construct] = {}
        self._resolving: set[str] = set()

    def typedef_layout(self, typedef: IdlTypeDef) -> AccountLayout:
        con = self._typedef_construct(typedef)
        return AccountLayout(typedef.name, con, typedef_size(self.idl, typedef))

    def _typedef_construct(self, typedef: IdlTypeDef) -> Construct:
        if typedef.kind == "enum":
            return EnumAdapter([(v.name, self._variant_construct(v)) for v in typedef.variants])
        return self._fields_construct(typedef.fields)

    def _fields_construct(self, fields: tuple[IdlField, ...]) -> Construct:
        return Struct(*[f.name / self.type_construct(f.type) for f in fields])

    def _variant_construct(self, variant: IdlEnumVariant) -> Construct:
        if not variant.fields:
            return Pass
        if variant.named:
            return self._fields_construct(variant.fields)
        return Sequence(*[self.type_construct(t) for t in variant.fields])

    def type_construct(self, ty: IdlType) -> Construct:
        if isinstance(ty, str):
            if ty == "publicKey":
                return PublicKeyAdapter(Bytes(PUBLIC_KEY_SIZE))
            if ty not in PRIMITIVES:
                raise LayoutResolutionFailure(f"unknown primitive type {ty!r}")
            return PRIMITIVES[ty]
        if "vec" in ty:
            return PrefixedArray(Int32ul, self.type_construct(ty["vec"]))
        if "option" in ty:
            return OptionAdapter(self.type_construct(ty["option"]))
        if "array" in ty:
            inner, length = ty["array"]
            return Array(int(length), self.type_construct(inner))
        if "defined" in ty:
            return self._defined_construct(_defined_name(ty))
        raise LayoutResolutionFailure(f"unsupported type expression {ty!r}")

    def _defined_construct(self, name: str) -> Construct:
        if name in self._defined:
            return self._defined[name]
        if name in self._resolving:
            # Self-referencing type; bound once the outer definition finishes.
            return LazyBound(lambda: self._defined[name])
        typedef = self.idl.find_type(name)
        if typedef is None:
            raise LayoutResolutionFailure(f"type {name!r} is not defined")
        self._resolving.add(name)
        try:
            con = self._typedef_construct(typedef)
        finally:
            self._resolving.discard(name)
        self._defined[name] = con
        return con


def _defined_name(ty: dict) -> str:
    defined = ty["defined"]
    # Newer IDLs write {"defined": {"name": "Foo"}}.
    return defined["name"] if isinstance(defined, dict) else defined


def type_size(idl: Idl, ty: IdlType, _seen: frozenset[str] = frozenset()) -> int | None:
    """Statically known maximum encoded size of a type, or None if variable."""
    if isinstance(ty, str):
        if ty not in PRIMITIVE_SIZES:
            raise LayoutResolutionFailure(f"unknown primitive type {ty!r}")
        return PRIMITIVE_SIZES[ty]
    if "vec" in ty:
        return None
    if "option" in ty:
        inner = type_size(idl, ty["option"], _seen)
        return None if inner is None else OPTION_TAG_SIZE + inner
    if "array" in ty:
        inner_ty, length = ty["array"]
        inner = type_size(idl, inner_ty, _seen)
        return None if inner is None else inner * int(length)
    if "defined" in ty:
        name = _defined_name(ty)
        if name in _seen:
            return None
        typedef = idl.find_type(name)
        if typedef is None:
            raise LayoutResolutionFailure(f"type {name!r} is not defined")
        return typedef_size(idl, typedef, _seen | {name})
    raise LayoutResolutionFailure(f"unsupported type expression {ty!r}")


def _sum_sizes(idl: Idl, types: list[IdlType], seen: frozenset[str]) -> int | None:
    total = 0
    for t in types:
        size = type_size(idl, t, seen)
        if size is None:
            return None
        total += size
    return total


def typedef_size(idl: Idl, typedef: IdlTypeDef, _seen: frozenset[str] = frozenset()) -> int | None:
    seen = _seen | {typedef.name}
    if typedef.kind != "enum":
        return _sum_sizes(idl, [f.type for f in typedef.fields], seen)

    largest = 0
    for v in typedef.variants:
        fields = v.fields or ()
        types = [f.type for f in fields] if v.named else list(fields)
        size = _sum_sizes(idl, types, seen)
        if size is None:
            return None
        largest = max(largest, size)
    return ENUM_TAG_SIZE + largest
