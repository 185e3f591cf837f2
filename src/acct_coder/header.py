"""Account header: version metadata and discriminator in a fixed 8-byte prefix."""
from __future__ import annotations

import struct
from typing import NamedTuple

from acct_core.ids import account_discriminator
from acct_core.protocol import (
    ACCOUNT_DISCRIMINATOR_SIZE,
    ACCOUNT_HEADER_SIZE,
    DEFAULT_NAMESPACE,
    DEPRECATED_ACCOUNT_DISCRIMINATOR_SIZE,
    DEPRECATED_DISCRIMINATOR_OFFSET,
    DISCRIMINATOR_OFFSET,
    HEADER_BUMP,
    HEADER_UNUSED,
    HEADER_VERSION,
    VERSIONED_HEADER_FMT,
)

from .errors import MalformedInput
from .idl import Idl


class HeaderFields(NamedTuple):
    version: int | None
    bump: int | None
    discriminator: bytes


class AccountHeader:
    """Header codec for one IDL.

    The format is fixed at construction: an IDL with ``layoutVersion`` gets the
    versioned header, anything else the legacy 8-byte discriminator. Nothing
    outside this class branches on the format.
    """

    def __init__(self, idl: Idl, namespace: str = DEFAULT_NAMESPACE):
        self.versioned = idl.versioned
        self.namespace = namespace

    @staticmethod
    def size() -> int:
        """Byte size of the account header."""
        return ACCOUNT_HEADER_SIZE

    def discriminator_size(self) -> int:
        return ACCOUNT_DISCRIMINATOR_SIZE if self.versioned else DEPRECATED_ACCOUNT_DISCRIMINATOR_SIZE

    def discriminator_offset(self) -> int:
        """Index in the account data at which the discriminator starts."""
        return DISCRIMINATOR_OFFSET if self.versioned else DEPRECATED_DISCRIMINATOR_OFFSET

    def discriminator(self, type_name: str, namespace: str | None = None) -> bytes:
        return account_discriminator(
            type_name,
            size=self.discriminator_size(),
            namespace=namespace if namespace is not None else self.namespace,
        )

    def encode(self, type_name: str, namespace: str | None = None) -> bytes:
        disc = self.discriminator(type_name, namespace)
        if not self.versioned:
            return disc
        return struct.pack(VERSIONED_HEADER_FMT, HEADER_VERSION, HEADER_BUMP, disc, HEADER_UNUSED)

    def parse_discriminator(self, data: bytes) -> bytes:
        if len(data) < ACCOUNT_HEADER_SIZE:
            raise MalformedInput(f"{len(data)} bytes, header needs {ACCOUNT_HEADER_SIZE}")
        start = self.discriminator_offset()
        return bytes(data[start:start + self.discriminator_size()])

    def parse(self, data: bytes) -> HeaderFields:
        disc = self.parse_discriminator(data)
        if not self.versioned:
            return HeaderFields(None, None, disc)
        version, bump, _, _ = struct.unpack(VERSIONED_HEADER_FMT, bytes(data[:ACCOUNT_HEADER_SIZE]))
        return HeaderFields(version, bump, disc)
