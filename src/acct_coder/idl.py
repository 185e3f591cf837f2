"""In-memory IDL model: account and type definitions loaded from JSON."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

# A type expression is kept exactly as written in the IDL JSON:
# "u64", {"vec": "u8"}, {"option": ...}, {"array": ["u8", 32]}, {"defined": "Name"}
IdlType = Union[str, dict]


@dataclass(frozen=True)
class IdlField:
    name: str
    type: IdlType


@dataclass(frozen=True)
class IdlEnumVariant:
    name: str
    # Named fields, tuple types, or None for a unit variant.
    fields: tuple[IdlField, ...] | tuple[IdlType, ...] | None = None

    @property
    def named(self) -> bool:
        return bool(self.fields) and isinstance(self.fields[0], IdlField)


@dataclass(frozen=True)
class IdlTypeDef:
    name: str
    kind: str  # "struct", "enum", or "ref" for an account listed by name only
    fields: tuple[IdlField, ...] = ()
    variants: tuple[IdlEnumVariant, ...] = ()


@dataclass(frozen=True)
class Idl:
    accounts: tuple[IdlTypeDef, ...] = ()
    types: tuple[IdlTypeDef, ...] = ()
    layout_version: int | None = None
    name: str = ""
    version: str = ""
    _type_index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        index: dict[str, IdlTypeDef] = {}
        for td in self.types + self.accounts:
            if td.kind == "ref":
                continue
            index.setdefault(td.name, td)
        object.__setattr__(self, "_type_index", index)

    @property
    def versioned(self) -> bool:
        return self.layout_version is not None

    def find_type(self, name: str) -> IdlTypeDef | None:
        """Look a user-defined type up by name, falling back to account definitions."""
        return self._type_index.get(name)

    @classmethod
    def from_dict(cls, obj: dict[str, Any]) -> "Idl":
        types = tuple(_typedef_from_dict(t) for t in obj.get("types") or [])

        accounts: list[IdlTypeDef] = []
        for acc in obj.get("accounts") or []:
            if "type" in acc:
                accounts.append(_typedef_from_dict(acc))
            else:
                # Newer IDLs list accounts by name and describe them under "types".
                accounts.append(IdlTypeDef(name=acc["name"], kind="ref"))

        return cls(
            accounts=tuple(accounts),
            types=types,
            layout_version=obj.get("layoutVersion"),
            name=obj.get("name", ""),
            version=obj.get("version", ""),
        )


def _field_from_dict(obj: dict[str, Any]) -> IdlField:
    return IdlField(name=obj["name"], type=obj["type"])


def _variant_from_dict(obj: dict[str, Any]) -> IdlEnumVariant:
    raw = obj.get("fields")
    if not raw:
        return IdlEnumVariant(name=obj["name"])
    if isinstance(raw[0], dict) and "name" in raw[0] and "type" in raw[0]:
        return IdlEnumVariant(name=obj["name"], fields=tuple(_field_from_dict(f) for f in raw))
    return IdlEnumVariant(name=obj["name"], fields=tuple(raw))


def _typedef_from_dict(obj: dict[str, Any]) -> IdlTypeDef:
    ty = obj["type"]
    kind = ty.get("kind", "struct")
    if kind == "enum":
        return IdlTypeDef(
            name=obj["name"],
            kind="enum",
            variants=tuple(_variant_from_dict(v) for v in ty.get("variants", [])),
        )
    return IdlTypeDef(
        name=obj["name"],
        kind="struct",
        fields=tuple(_field_from_dict(f) for f in ty.get("fields", [])),
    )


def load_idl(path: Path) -> Idl:
    return Idl.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))
