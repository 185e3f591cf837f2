from __future__ import annotations

import base64
import hashlib
import json
from pathlib import Path
from typing import Iterator
from warnings import warn

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from acct_coder.accounts import AccountsCoder
from acct_coder.errors import MalformedInput
from acct_coder.idl import load_idl
from acct_coder.layout import json_default
from acct_core.protocol import ACCOUNT_HEADER_SIZE

ACCOUNTS_TABLE = "accounts.parquet"

ACCOUNTS_SCHEMA = pa.schema(
    [
        ("pubkey", pa.string()),
        ("account_type", pa.string()),
        ("discriminator", pa.string()),
        ("length", pa.int64()),
        ("content_hash", pa.string()),
        ("value_json", pa.string()),
    ]
)

CANONICAL_JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}


class RecordScanner:
    """Classifies raw account records by discriminator and decodes them.

    - Each record is matched against every account type of the IDL.
    - Matched records are decoded without a second discriminator check.
    - Unknown or truncated records are warned about and counted, or fatal
      when ``strict`` is set.
    """

    def __init__(self, coder: AccountsCoder, strict: bool = False):
        self.coder = coder
        self.strict = strict
        self.scan_stats = {
            "records": 0,
            "decoded": 0,
            "unknown": 0,
            "malformed": 0,
        }

    def _reject(self, kind: str, message: str) -> None:
        if self.strict:
            raise ValueError(f"FATAL: {message}")
        self.scan_stats[kind] += 1
        warn(message)

    def scan(self, records_path: Path, type_name: str | None = None) -> Iterator[dict]:
        with open(records_path, "rb") as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                rec = json.loads(line)
                self.scan_stats["records"] += 1
                data = base64.b64decode(rec["data"])
                pubkey = rec.get("pubkey", "")

                # 1. Header length check
                if len(data) < ACCOUNT_HEADER_SIZE:
                    self._reject("malformed", f"Truncated account {pubkey!r} at line {lineno}: {len(data)} bytes")
                    continue

                # 2. Classification
                name = self.coder.classify(data)
                if name is None:
                    disc = self.coder.header.parse_discriminator(data).hex()
                    self._reject("unknown", f"Unknown discriminator {disc} for account {pubkey!r} at line {lineno}")
                    continue
                if type_name is not None and name != type_name:
                    continue

                # 3. Body decode
                try:
                    value = self.coder.decode_unchecked(name, data)
                except MalformedInput as e:
                    self._reject("malformed", f"Undecodable {name} account {pubkey!r} at line {lineno}: {e}")
                    continue

                self.scan_stats["decoded"] += 1
                yield {
                    "pubkey": pubkey,
                    "account_type": name,
                    "discriminator": self.coder.header.parse_discriminator(data).hex(),
                    "length": len(data),
                    "content_hash": hashlib.sha256(data).hexdigest(),
                    "value_json": json.dumps(value, default=json_default, **CANONICAL_JSON_KW),
                }

    def get_scan_stats(self) -> dict:
        return dict(self.scan_stats)


def compile_accounts_table(
    idl_path: Path,
    records_path: Path,
    out_path: Path,
    strict: bool = False,
    type_name: str | None = None,
) -> dict:
    """Build accounts.parquet from a JSONL dump of raw account records."""
    coder = AccountsCoder(load_idl(idl_path))
    if type_name is not None and type_name not in coder.layouts:
        raise ValueError(f"FATAL: Unknown account type {type_name!r}")

    scanner = RecordScanner(coder, strict=strict)
    rows = sorted(scanner.scan(records_path, type_name), key=lambda r: r["pubkey"])

    Path(out_path).mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(rows, columns=ACCOUNTS_SCHEMA.names)
    table = pa.Table.from_pandas(df, schema=ACCOUNTS_SCHEMA, preserve_index=False)
    pq.write_table(table, Path(out_path) / ACCOUNTS_TABLE)
    return scanner.get_scan_stats()
