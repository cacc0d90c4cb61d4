#!/usr/bin/env python3
# tools/invariants_runner.py
#
# Codec invariants (property tests) over randomly generated value trees.
#
# This runner:
# - generates random values (dict/list/str/int) within limits
# - checks round-trip, canonical-order and stability invariants
# - checks that all three byte sources decode identically
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import os, sys, io, json, random
from typing import Any, Dict

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.join(ROOT, "implementations", "python"))

import bencodec

SEED = int(os.environ.get("BENCODEC_SEED", "1337"))
TRIALS = int(os.environ.get("BENCODEC_TRIALS", "2000"))
MAX_GEN_DEPTH = int(os.environ.get("BENCODEC_GEN_MAX_DEPTH", "6"))
MAX_KEYS = int(os.environ.get("BENCODEC_GEN_MAX_KEYS", "6"))
MAX_LIST = int(os.environ.get("BENCODEC_GEN_MAX_LIST", "6"))
MAX_STR = int(os.environ.get("BENCODEC_GEN_MAX_STR", "24"))

random.seed(SEED)

def rand_utf8_string() -> str:
    # Generate scalars excluding surrogate range; include multi-byte chars occasionally.
    out = []
    n = random.randint(0, MAX_STR)
    for _ in range(n):
        r = random.random()
        if r < 0.70:
            out.append(chr(random.randint(0x20, 0x7E)))
        elif r < 0.85:
            out.append(chr(random.randint(0xA0, 0xFF)))
        elif r < 0.95:
            out.append(chr(random.randint(0x0100, 0xD7FF)))
        else:
            out.append(chr(random.randint(0x10000, 0x10FFFF)))
    return "".join(out)

def rand_int() -> int:
    r = random.random()
    if r < 0.5:
        return random.randint(-1000, 1000)
    if r < 0.9:
        return random.randint(bencodec.INT64_MIN, bencodec.INT64_MAX)
    return random.choice([0, bencodec.INT64_MIN, bencodec.INT64_MAX, -1, 1])

def gen_scalar() -> Any:
    return rand_utf8_string() if random.random() < 0.6 else rand_int()

def gen_value(depth: int) -> Any:
    if depth >= MAX_GEN_DEPTH:
        return gen_scalar()
    r = random.random()
    if r < 0.35:
        n = random.randint(0, MAX_KEYS)
        d: Dict[str, Any] = {}
        for _ in range(n):
            d[rand_utf8_string()] = gen_value(depth + 1)
        return d
    if r < 0.65:
        n = random.randint(0, MAX_LIST)
        return [gen_value(depth + 1) for _ in range(n)]
    return gen_scalar()

def shuffled(v: Any) -> Any:
    """Same value, every dict rebuilt in a random insertion order."""
    if isinstance(v, dict):
        items = list(v.items())
        random.shuffle(items)
        return {k: shuffled(x) for k, x in items}
    if isinstance(v, list):
        return [shuffled(x) for x in v]
    return v

def keys_sorted(raw: bytes) -> bool:
    """Walk decoded dicts in wire order and check ascending raw key bytes."""
    class Check(bencodec.Visitor):
        def visit_str(self, value): return True
        def visit_int(self, value): return True
        def visit_list(self, access):
            ok = True
            while True:
                item = access.next_element(Check())
                if item is bencodec.END:
                    return ok
                ok = item and ok
        def visit_dict(self, access):
            prev = None
            ok = True
            while True:
                k = access.next_key()
                if k is bencodec.END:
                    return ok
                kb = k.encode("utf-8")
                if prev is not None and prev >= kb:
                    ok = False
                prev = kb
                ok = access.next_value(Check()) and ok
    return bencodec.from_slice(raw, Check())

def fail(msg: str, ctx: Any) -> int:
    print("INVARIANT FAIL:", msg)
    print("CTX:", json.dumps(ctx, ensure_ascii=False)[:2000])
    return 1

def main() -> int:
    for t in range(TRIALS):
        v = gen_value(0)

        # (1) Round-trip
        raw = bencodec.to_bytes(v)
        if bencodec.from_slice(raw) != v:
            return fail("round-trip", {"trial": t})

        # (2) Encode stability
        if bencodec.to_bytes(v) != raw:
            return fail("encode stability", {"trial": t})

        # (3) Insertion-order invariance
        if bencodec.to_bytes(shuffled(v)) != raw:
            return fail("insertion-order invariance", {"trial": t})

        # (4) Canonical key order on the wire
        if not keys_sorted(raw):
            return fail("canonical key order", {"trial": t})

        # (5) Byte-source parity
        text = raw.decode("utf-8")
        if bencodec.from_string(text) != v:
            return fail("string source parity", {"trial": t})
        if bencodec.from_reader(io.BytesIO(raw)) != v:
            return fail("stream source parity", {"trial": t})

    print(f"OK: invariants passed for TRIALS={TRIALS} seed={SEED}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
