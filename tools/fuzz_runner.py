#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Decoder fuzzing.
#
# Generates three fuzz categories:
#   A) valid encodings, mutated byte-wise (flip / insert / delete / truncate)
#   B) random token soup built from bencode's own alphabet
#   C) deeply nested openers to probe the depth ceiling
#
# Every input must either decode or raise BencodeError.  Any other exception
# (IndexError, RecursionError, ...) prints a minimal repro payload and exits
# non-zero.  Inputs that decode must re-encode and decode to the same value.

import os, sys, random, traceback
from typing import Any

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.join(ROOT, "implementations", "python"))

import bencodec

SEED = int(os.environ.get("BENCODEC_SEED", "4242"))
ROUNDS = int(os.environ.get("BENCODEC_FUZZ_ROUNDS", "5000"))

random.seed(SEED)

ALPHABET = b"dlie:-0123456789" + b"abc\xc3\xa9\xff"

SEEDS = [
    b"d8:announce15:http://t/a:80/x4:infod6:lengthi1024e4:name5:a.bin12:piece lengthi16384eee",
    b"l4:spam4:eggsi-42ee",
    b"d3:cow3:moo4:spam4:eggse",
    b"lli1eeli2eeldee",
    b"i9223372036854775807e",
]

def mutate(raw: bytes) -> bytes:
    b = bytearray(raw)
    op = random.random()
    if op < 0.3 and b:
        b[random.randrange(len(b))] = random.choice(ALPHABET)
    elif op < 0.55:
        b.insert(random.randint(0, len(b)), random.choice(ALPHABET))
    elif op < 0.8 and b:
        del b[random.randrange(len(b))]
    else:
        b = b[:random.randint(0, len(b))]
    return bytes(b)

def soup() -> bytes:
    return bytes(random.choice(ALPHABET) for _ in range(random.randint(0, 40)))

def nested() -> bytes:
    n = random.randint(1, 5000)
    opener = random.choice([b"l", b"d1:a"])
    return opener * n + b"e" * random.randint(0, n)

def check(label: str, raw: bytes) -> None:
    try:
        v = bencodec.from_slice(raw)
    except bencodec.BencodeError:
        return
    except Exception:
        print("CRASH:", label)
        print("INPUT:", raw[:400])
        traceback.print_exc()
        raise SystemExit(1)

    # Whatever decodes must survive a round-trip.
    try:
        again = bencodec.from_slice(bencodec.to_bytes(v))
    except Exception:
        print("RE-ENCODE FAILED:", label)
        print("INPUT:", raw[:400])
        traceback.print_exc()
        raise SystemExit(1)
    if again != v:
        print("ROUND-TRIP MISMATCH:", label)
        print("INPUT:", raw[:400])
        raise SystemExit(1)

def main() -> int:
    for r in range(ROUNDS):
        base = random.choice(SEEDS)
        for _ in range(random.randint(1, 3)):
            base = mutate(base)
        check("A/mutate round {}".format(r), base)
        check("B/soup round {}".format(r), soup())
        if r % 50 == 0:
            check("C/nested round {}".format(r), nested())
    print(f"OK: fuzz passed for ROUNDS={ROUNDS} seed={SEED}")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
