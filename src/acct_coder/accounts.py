"""Encodes and decodes account records: 8-byte header followed by the body."""
from __future__ import annotations

from typing import Any

import base58

from acct_core.protocol import DEFAULT_NAMESPACE

from .errors import DiscriminatorMismatch, MalformedInput, UnknownType
from .header import AccountHeader
from .idl import Idl
from .layout import AccountLayout
from .registry import LayoutRegistry


class AccountsCoder:
    """Account codec for every account type an IDL declares.

    Two decode entry points:

    - ``decode`` checks the discriminator before decoding (untrusted bytes).
    - ``decode_unchecked`` skips that check. Use it only for bytes already
      classified by other means, e.g. returned by a memcmp-filtered query.
    """

    def __init__(self, idl: Idl, namespace: str = DEFAULT_NAMESPACE):
        self.idl = idl
        self.layouts = LayoutRegistry(idl)
        self.header = AccountHeader(idl, namespace)

    def _layout(self, type_name: str) -> AccountLayout:
        layout = self.layouts.get(type_name)
        if layout is None:
            raise UnknownType(type_name)
        return layout

    def encode(self, type_name: str, value: Any) -> bytes:
        layout = self._layout(type_name)
        body = layout.encode(value)
        return self.header.encode(type_name) + body

    def decode(self, type_name: str, data: bytes) -> Any:
        self._layout(type_name)
        expected = self.header.discriminator(type_name)
        given = self.header.parse_discriminator(data)
        if expected != given:
            raise DiscriminatorMismatch(type_name, expected, given)
        return self.decode_unchecked(type_name, data)

    def decode_unchecked(self, type_name: str, data: bytes) -> Any:
        layout = self._layout(type_name)
        if len(data) < AccountHeader.size():
            raise MalformedInput(f"{len(data)} bytes, header needs {AccountHeader.size()}")
        # Chop off the header.
        return layout.decode(data[AccountHeader.size():])

    def account_discriminator(self, type_name: str) -> bytes:
        self._layout(type_name)
        return self.header.discriminator(type_name)

    def classify(self, data: bytes) -> str | None:
        """Name of the first registered type whose discriminator tags ``data``."""
        given = self.header.parse_discriminator(data)
        for name in self.layouts:
            if self.header.discriminator(name) == given:
                return name
        return None

    def decode_any(self, data: bytes) -> tuple[str, Any]:
        name = self.classify(data)
        if name is None:
            raise UnknownType(self.header.parse_discriminator(data).hex())
        return name, self.decode_unchecked(name, data)

    def memcmp_filter(self, type_name: str) -> dict[str, Any]:
        return {
            "offset": self.header.discriminator_offset(),
            "bytes": base58.b58encode(self.account_discriminator(type_name)).decode("ascii"),
        }

    def memcmp(self, type_name: str) -> dict[str, Any]:
        """Remote-query filter matching records of ``type_name``."""
        return {"memcmp": self.memcmp_filter(type_name)}

    def memcmp_data_offset(self) -> int:
        return AccountHeader.size()

    def size(self, type_name: str) -> int:
        """Header plus the static maximum body size (0 if the body is variable)."""
        return AccountHeader.size() + (self._layout(type_name).max_size or 0)
