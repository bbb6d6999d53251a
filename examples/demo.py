"""
laravel_encryptor — Live Demo
=============================
Run:  python examples/demo.py

Encrypts with both encryptors, shows the wire payload, decrypts across
them, and shows how tampering is reported.
"""

import sys, os, time, json, base64, asyncio, logging
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from laravel_encryptor import (AsyncEncryptor, Encryptor, EncryptorError,
                               generate_random_key)

LINE = "═" * 70
KEY  = "LQUcxdgHIEiBAixaJ8BInmXRHdKLOacDXMEBLU0Ci/o="
TEXT = "resistance is futile"
OBJ  = {"foo": "bar"}

def header(name):
    print(f"\n{LINE}")
    print(f"  {name}")
    print(LINE)

def ok(label, value=""):
    print(f"  ✓  {label}{f': {value}' if value else ''}")

logging.basicConfig(level=logging.WARNING, format=" %(name)s: %(message)s")

# ─────────────────────────────────────────────────────────────────────────────
print(f"\n{LINE}")
print("  laravel_encryptor — Laravel-compatible payload demo")
print(LINE)

# ── Encryptor ────────────────────────────────────────────────────────────────
header("Encryptor (blocking, validated)")
enc = Encryptor(key=KEY)
t0  = time.perf_counter()
payload = enc.encrypt_sync(TEXT)
plain   = enc.decrypt(payload)
elapsed = time.perf_counter() - t0
ok("Algorithm",  repr(enc))
ok("Payload",    payload[:48] + "...")
ok("Envelope",   json.dumps(json.loads(base64.b64decode(payload)))[:60] + "...")
ok("Round-trip", f"{elapsed*1000:.2f} ms")
ok("Decrypted",  plain)
ok("Object",     enc.decrypt(enc.encrypt_sync(OBJ)))

# ── AsyncEncryptor ───────────────────────────────────────────────────────────
header("AsyncEncryptor (asyncio)")

async def async_demo():
    aenc    = AsyncEncryptor(key=KEY)
    payload = await aenc.encrypt(OBJ)
    ok("Async -> async", await aenc.decrypt(payload))
    ok("Async -> sync",  Encryptor(key=KEY).decrypt(payload))
    ok("Fresh key",      await AsyncEncryptor.generate_key())

asyncio.run(async_demo())

# ── Tampering ────────────────────────────────────────────────────────────────
header("Tamper detection")
envelope = json.loads(base64.b64decode(payload))
envelope["mac"] = "0" * 64
tampered = base64.b64encode(json.dumps(envelope).encode()).decode()
try:
    enc.decrypt(tampered)
except EncryptorError as e:
    ok("Rejected", f"{type(e).__name__}: {e}")
try:
    Encryptor(key=generate_random_key()).decrypt(payload)
except EncryptorError as e:
    ok("Wrong key", f"{type(e).__name__}: {e}")

print(f"\n{LINE}\n")
