"""Per-type layout lookup built once from the IDL."""
from __future__ import annotations

from types import MappingProxyType
from typing import Iterator, Mapping

from .errors import LayoutResolutionFailure
from .idl import Idl, IdlTypeDef
from .layout import AccountLayout, LayoutCompiler


class LayoutRegistry:
    """Maps account type name -> AccountLayout.

    All layouts are compiled eagerly in the constructor. An IDL that refers to
    an undefined type raises LayoutResolutionFailure here, never later during
    encode/decode. The mapping is read-only afterwards.
    """

    def __init__(self, idl: Idl):
        self._layouts: Mapping[str, AccountLayout] = MappingProxyType(self.build(idl))

    @staticmethod
    def build(idl: Idl) -> dict[str, AccountLayout]:
        compiler = LayoutCompiler(idl)
        return {acc.name: compiler.typedef_layout(_resolve_account(idl, acc)) for acc in idl.accounts}

    def get(self, type_name: str) -> AccountLayout | None:
        return self._layouts.get(type_name)

    def names(self) -> list[str]:
        return list(self._layouts)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._layouts

    def __iter__(self) -> Iterator[str]:
        return iter(self._layouts)

    def __len__(self) -> int:
        return len(self._layouts)


def _resolve_account(idl: Idl, acc: IdlTypeDef) -> IdlTypeDef:
    if acc.kind != "ref":
        return acc
    typedef = idl.find_type(acc.name)
    if typedef is None:
        raise LayoutResolutionFailure(f"account {acc.name!r} has no type definition")
    return typedef
