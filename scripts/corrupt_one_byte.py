import base64
import json
import sys
from pathlib import Path

def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_one_byte.py <records.jsonl>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    lines = p.read_bytes().splitlines()
    if not lines:
        print("No records to corrupt.")
        raise SystemExit(2)

    rec = json.loads(lines[0])
    b = bytearray(base64.b64decode(rec["data"]))
    if len(b) < 8:
        print("Record too small to corrupt safely.")
        raise SystemExit(2)

    # Byte 3 lies inside the discriminator in both header formats
    # (legacy [0, 8), versioned [2, 6)).
    idx = 3
    b[idx] ^= 0x01
    rec["data"] = base64.b64encode(bytes(b)).decode("ascii")
    lines[0] = json.dumps(rec, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    p.write_bytes(b"\n".join(lines) + b"\n")
    print(f"Corrupted 1 byte at offset {idx} of the first record in {p}")

if __name__ == "__main__":
    main()
