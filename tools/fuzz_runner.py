#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Mutation fuzzing for the bsonpeek decoder.
#
# Generates random well-formed documents, then corrupts them four ways:
#   A) bit flips and byte overwrites
#   B) truncation
#   C) random byte insertion
#   D) length-field corruption (top-level or any nested int32)
#
# For every input the decoder must not raise, its events must cover the
# input exactly, decoding twice must agree, and OPEN/CLOSE must balance.
# Well-formed inputs must also decode without a single error.
#
# Any violation prints a minimal repro payload and exits non-zero.

import os, sys, json, random, struct
from typing import Any, Dict, List, Optional

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from bsonpeek import decode, errors_in, reassemble

SEED = int(os.environ.get("BSONPEEK_SEED", "4242"))
ROUNDS = int(os.environ.get("BSONPEEK_FUZZ_ROUNDS", "5000"))
MAX_GEN_DEPTH = int(os.environ.get("BSONPEEK_GEN_MAX_DEPTH", "4"))

# --- generators ---

def _i32(n: int) -> bytes:
    return struct.pack("<i", n)

def _cstr(rng: random.Random, nmax: int) -> bytes:
    n = rng.randint(0, nmax)
    return "".join(chr(rng.randint(0x20, 0x7E)) for _ in range(n)).encode("utf-8") + b"\x00"

def _string(rng: random.Random) -> bytes:
    body = _cstr(rng, 12)
    return _i32(len(body)) + body

def _document(rng: random.Random, depth: int) -> bytes:
    parts = []
    for _ in range(rng.randint(0, 5)):
        tag, payload = _value(rng, depth)
        parts.append(bytes([tag]) + _cstr(rng, 6) + payload)
    body = b"".join(parts)
    return _i32(len(body) + 5) + body + b"\x00"

def _value(rng: random.Random, depth: int):
    nested = depth < MAX_GEN_DEPTH
    choices = [0x01, 0x02, 0x05, 0x06, 0x07, 0x08, 0x09, 0x0A, 0x0B,
               0x0C, 0x0D, 0x0E, 0x10, 0x11, 0x12, 0x7F, 0xFF]
    if nested:
        choices += [0x03, 0x04, 0x0F]
    tag = rng.choice(choices)
    if tag in (0x01, 0x09, 0x11, 0x12):
        return tag, bytes(rng.getrandbits(8) for _ in range(8))
    if tag == 0x10:
        return tag, bytes(rng.getrandbits(8) for _ in range(4))
    if tag == 0x07:
        return tag, bytes(rng.getrandbits(8) for _ in range(12))
    if tag == 0x08:
        return tag, bytes([rng.randint(0, 1)])
    if tag in (0x02, 0x0D, 0x0E):
        return tag, _string(rng)
    if tag == 0x0B:
        return tag, _cstr(rng, 6) + _cstr(rng, 3)
    if tag == 0x0C:
        return tag, _string(rng) + bytes(rng.getrandbits(8) for _ in range(12))
    if tag == 0x05:
        data = bytes(rng.getrandbits(8) for _ in range(rng.randint(0, 16)))
        if rng.random() < 0.3:
            return tag, _i32(len(data) + 4) + b"\x02" + _i32(len(data)) + data
        return tag, _i32(len(data)) + bytes([rng.choice([0x00, 0x04, 0x80])]) + data
    if tag in (0x03, 0x04):
        return tag, _document(rng, depth + 1)
    if tag == 0x0F:
        body = _string(rng) + _document(rng, depth + 1)
        return tag, _i32(len(body) + 4) + body
    return tag, b""

# --- mutations ---

def _mutate(rng: random.Random, doc: bytes) -> bytes:
    data = bytearray(doc)
    r = rng.random()
    if r < 0.35:
        for _ in range(rng.randint(1, 3)):
            i = rng.randrange(len(data))
            data[i] = data[i] ^ (1 << rng.randrange(8)) if rng.random() < 0.5 else rng.randrange(256)
    elif r < 0.55:
        del data[rng.randint(0, len(data) - 1):]
    elif r < 0.75:
        i = rng.randint(0, len(data))
        data[i:i] = bytes(rng.getrandbits(8) for _ in range(rng.randint(1, 4)))
    else:
        # Overwrite a 4-byte window with a hostile length.
        i = rng.randrange(max(1, len(data) - 3))
        data[i:i + 4] = _i32(rng.choice([-1, 0, 1, 4, 5, 13, 14, len(data), len(data) + 1, 2**31 - 1]))
    return bytes(data)

# --- checks ---

def violation(label: str, data: bytes, ctx: Dict[str, Any]) -> None:
    print("VIOLATION:", label)
    print("INPUT:", data.hex())
    print("CTX:", json.dumps(ctx)[:4000])
    raise SystemExit(1)

def check(data: bytes, well_formed: bool, ctx: Dict[str, Any]) -> Optional[List[str]]:
    try:
        events = decode(data)
    except Exception as e:
        violation("decoder raised {}: {}".format(type(e).__name__, e), data, ctx)
    if reassemble(events) != data:
        violation("events do not cover the input", data, ctx)
    if decode(data) != events:
        violation("decoding is not deterministic", data, ctx)
    opens = sum(1 for ev in events if ev.kind == "OPEN")
    closes = sum(1 for ev in events if ev.kind == "CLOSE")
    if opens != closes:
        violation("unbalanced containers ({} open, {} close)".format(opens, closes), data, ctx)
    codes = errors_in(events)
    if well_formed and codes:
        violation("errors on well-formed input: {}".format(codes), data, ctx)
    return codes

def run(rounds: int = ROUNDS, seed: int = SEED) -> int:
    """Run `rounds` fuzz rounds; return the number of inputs checked."""
    rng = random.Random(seed)
    checked = 0
    for i in range(rounds):
        doc = _document(rng, 0)
        check(doc, True, {"round": i, "case": "valid"})
        mutated = _mutate(rng, doc)
        check(mutated, False, {"round": i, "case": "mutated", "original": doc.hex()})
        checked += 2
    return checked

def main() -> int:
    checked = run()
    print(f"OK: fuzz rounds={ROUNDS} seed={SEED} inputs={checked} (no violations)")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
