import base64
import json
import os
import random
from pathlib import Path

import base58

from acct_coder.accounts import AccountsCoder
from acct_coder.idl import Idl

DEMO_IDL = {
    "name": "demo_vault",
    "version": "0.1.0",
    "accounts": [
        {
            "name": "counter",
            "type": {"kind": "struct", "fields": [{"name": "n", "type": "u64"}]},
        },
        {
            "name": "vault",
            "type": {
                "kind": "struct",
                "fields": [
                    {"name": "authority", "type": "publicKey"},
                    {"name": "balance", "type": "u64"},
                    {"name": "label", "type": "string"},
                    {"name": "delegate", "type": {"option": "publicKey"}},
                    {"name": "history", "type": {"vec": "i64"}},
                    {"name": "state", "type": {"defined": "VaultState"}},
                ],
            },
        },
    ],
    "types": [
        {
            "name": "VaultState",
            "type": {
                "kind": "enum",
                "variants": [
                    {"name": "Open"},
                    {"name": "Frozen", "fields": [{"name": "until", "type": "i64"}]},
                    {"name": "Closed"},
                ],
            },
        }
    ],
}


def random_pubkey() -> str:
    return base58.b58encode(os.urandom(32)).decode("ascii")


def random_vault() -> dict:
    state = random.choice([
        {"Open": None},
        {"Frozen": {"until": random.randint(1_700_000_000, 1_800_000_000)}},
        {"Closed": None},
    ])
    return {
        "authority": random_pubkey(),
        "balance": random.randint(0, 10**12),
        "label": random.choice(["treasury", "payroll", "escrow", "ops"]),
        "delegate": random.choice([None, random_pubkey()]),
        "history": [random.randint(-1000, 1000) for _ in range(random.randint(0, 5))],
        "state": state,
    }


def generate_dump(output_dir: str, records: int = 10, legacy: bool = False, stray: bool = False) -> Path:
    idl_obj = dict(DEMO_IDL)
    if not legacy:
        idl_obj["layoutVersion"] = 0
    coder = AccountsCoder(Idl.from_dict(idl_obj))

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    (out / "idl.json").write_text(json.dumps(idl_obj, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")

    lines = []
    for _ in range(records):
        if random.random() < 0.5:
            data = coder.encode("counter", {"n": random.randint(0, 2**64 - 1)})
        else:
            data = coder.encode("vault", random_vault())
        lines.append({"pubkey": random_pubkey(), "data": base64.b64encode(data).decode("ascii")})

    if stray:
        # A record owned by some other program: 8 random header bytes.
        lines.append({"pubkey": random_pubkey(), "data": base64.b64encode(os.urandom(24)).decode("ascii")})

    with open(out / "records.jsonl", "wb") as f:
        for rec in lines:
            line = json.dumps(rec, sort_keys=True, separators=(',', ':'), ensure_ascii=False)
            f.write(line.encode("utf-8") + b"\n")

    print(f"GENERATED: {out}")
    return out


if __name__ == "__main__":
    import sys

    # Usage:
    #   python tools/sim_accounts.py OUT_DIR [--records N] [--legacy] [--stray]

    args = [a for a in sys.argv[1:] if a]

    def pop_flag(arg_list: list[str], flag: str) -> tuple[bool, list[str]]:
        """Remove a boolean flag from an argv-style list."""
        if flag in arg_list:
            return True, [a for a in arg_list if a != flag]
        return False, arg_list

    legacy, args = pop_flag(args, "--legacy")
    stray, args = pop_flag(args, "--stray")

    records = 10
    if "--records" in args:
        i = args.index("--records")
        if i + 1 >= len(args):
            raise SystemExit("--records requires a value")
        records = int(args[i + 1])
        args = args[:i] + args[i + 2:]

    out = args[0] if len(args) > 0 else "simulated_accounts"
    generate_dump(out, records=records, legacy=legacy, stray=stray)
