"""Account Dump - raw account records to a parquet table."""
from __future__ import annotations

from pathlib import Path

import click

from acct_dump.records import ACCOUNTS_TABLE, compile_accounts_table


@click.command()
@click.argument("idl", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("records", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(path_type=Path))
@click.option("--strict", is_flag=True, help="Fail on unknown or truncated records instead of skipping them")
@click.option("--type", "type_name", default=None, help="Keep only accounts of this type")
def main(idl: Path, records: Path, out: Path, strict: bool, type_name: str | None) -> None:
    """Decode a JSONL dump of account records into OUT/accounts.parquet."""
    print(f"Dumping records: {records}")
    try:
        stats = compile_accounts_table(idl, records, out, strict=strict, type_name=type_name)
    except Exception as e:
        # Fail closed, with a single-line reason.
        msg = str(e)
        print(msg if msg.startswith("FATAL") else f"FATAL: {msg}")
        raise SystemExit(1)

    print(f"PASS: Table generated at {out / ACCOUNTS_TABLE}")
    print(f"  Records: {stats['records']}")
    print(f"  Decoded: {stats['decoded']}")
    print(f"  Unknown: {stats['unknown']}")
    print(f"  Malformed: {stats['malformed']}")


if __name__ == "__main__":
    main()
