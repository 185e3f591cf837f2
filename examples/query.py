"""Query a decoded account table - list accounts of one type."""
from __future__ import annotations

import json
import sys
from pathlib import Path

import duckdb


def main() -> None:
    if len(sys.argv) < 3:
        print("Usage: python query.py <dump_path> <account_type>")
        print("Example: python query.py dump/ vault")
        sys.exit(1)

    dump = Path(sys.argv[1])
    account_type = sys.argv[2]

    con = duckdb.connect(":memory:")
    con.execute(f"CREATE VIEW accounts AS SELECT * FROM '{dump}/accounts.parquet'")

    sql = """
    SELECT
        pubkey,
        length,
        content_hash,
        value_json
    FROM accounts
    WHERE account_type = ?
    ORDER BY pubkey
    """

    print(f"--- Accounts: {account_type} ---\n")

    df = con.execute(sql, [account_type]).fetchdf()
    if df.empty:
        print("No accounts of this type.")
    else:
        for _, row in df.iterrows():
            print(f"ACCOUNT: {row['pubkey']}")
            print(f"  Length: {row['length']}")
            print(f"  Hash: {row['content_hash'][:16]}...")
            print(f"  Value: {json.dumps(json.loads(row['value_json']), sort_keys=True)[:80]}")
            print()


if __name__ == "__main__":
    main()
