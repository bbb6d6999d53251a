"""
laravel_encryptor — building blocks: algorithm, IV, MAC, envelope, serializers
===============================================================================
Run with:  python -m pytest tests/ -v
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import base64
import hashlib
import hmac
import json

import pytest
from laravel_encryptor.core.algorithm  import Algorithm, resolve_algorithm
from laravel_encryptor.core.envelope   import (Envelope, encode_envelope,
                                               parse_outer, serialize_outer)
from laravel_encryptor.core.iv         import derive_iv, derive_iv_async, materialize_iv
from laravel_encryptor.core.mac        import compute_mac, verify_mac
from laravel_encryptor.core.primitives import (cipher_decrypt, cipher_encrypt,
                                               constant_time_equal,
                                               generate_random_key)
from laravel_encryptor.errors          import (CipherError, ConfigurationError,
                                               PayloadFormatError,
                                               SerializationError, wrap_error)
from laravel_encryptor.serializers     import (AUTO_DETECT, EXPLICIT,
                                               JsonSerializer, PhpSerializer,
                                               get_serializer, should_decode)

KEY    = "LQUcxdgHIEiBAixaJ8BInmXRHdKLOacDXMEBLU0Ci/o="
SECRET = base64.b64decode(KEY)
IV     = b"0123456789abcdef"
HEX    = set(b"0123456789abcdef")


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


# ── Algorithm ────────────────────────────────────────────────────────────────
def test_algorithm_default_is_aes_256_cbc():
    alg = resolve_algorithm()
    assert alg == Algorithm(key_bits=256)
    assert alg.name == "aes-256-cbc"
    assert alg.key_size == 32

def test_algorithm_key_length_32_is_aes_128_cbc():
    assert resolve_algorithm(32).name == "aes-128-cbc"
    assert resolve_algorithm(64).name == "aes-256-cbc"

@pytest.mark.parametrize("selector", [16, 48, 128, 0, "64", True])
def test_algorithm_rejects_unknown_selector(selector):
    with pytest.raises(ConfigurationError):
        resolve_algorithm(selector)


# ── IV derivation ────────────────────────────────────────────────────────────
def test_iv_materializes_hex_text_not_raw_bytes():
    raw = bytes.fromhex("00ff10ab20cd30ef")
    assert materialize_iv(raw) == b"00ff10ab20cd30ef"

def test_iv_default_is_one_block_of_hex_digits():
    iv = derive_iv()
    assert len(iv) == 16
    assert set(iv) <= HEX

def test_iv_length_follows_random_bytes():
    assert len(derive_iv(4)) == 8
    assert len(derive_iv(16)) == 32

def test_iv_async_matches_sync_shape():
    import asyncio
    iv = asyncio.run(derive_iv_async())
    assert len(iv) == 16
    assert set(iv) <= HEX


# ── Primitives ───────────────────────────────────────────────────────────────
def test_cipher_pads_to_block_boundary():
    alg = resolve_algorithm()
    assert len(cipher_encrypt(alg, SECRET, IV, b"x" * 20)) == 32
    assert len(cipher_encrypt(alg, SECRET, IV, b"x" * 16)) == 32
    assert len(cipher_encrypt(alg, SECRET, IV, b"")) == 16

def test_cipher_roundtrip():
    alg = resolve_algorithm()
    ct  = cipher_encrypt(alg, SECRET, IV, b"resistance is futile")
    assert cipher_decrypt(alg, SECRET, IV, ct) == b"resistance is futile"

def test_cipher_key_size_mismatch_is_cipher_error():
    with pytest.raises(CipherError):
        cipher_encrypt(resolve_algorithm(32), SECRET, IV, b"data")

def test_cipher_bad_iv_is_cipher_error():
    with pytest.raises(CipherError):
        cipher_encrypt(resolve_algorithm(), SECRET, b"short", b"data")

def test_cipher_bad_padding_is_cipher_error():
    alg = resolve_algorithm()
    ct  = cipher_encrypt(alg, SECRET, IV, b"resistance is futile")
    other = base64.b64decode(generate_random_key())
    with pytest.raises(CipherError):
        # wrong key -> garbage padding (1/256 chance of valid padding, so retry a few)
        for _ in range(8):
            cipher_decrypt(alg, other, IV, ct)
            other = base64.b64decode(generate_random_key())

def test_constant_time_equal():
    assert constant_time_equal(b"abc", b"abc") is True
    assert constant_time_equal(b"abc", b"abd") is False

def test_generate_random_key_length():
    assert len(base64.b64decode(generate_random_key())) == 32
    assert len(base64.b64decode(generate_random_key(16))) == 16
    assert generate_random_key() != generate_random_key()


# ── MAC ──────────────────────────────────────────────────────────────────────
def test_mac_is_hmac_sha256_over_base64_text():
    iv_b64, value_b64 = b64(IV), b64(b"\x00" * 16)
    expected = hmac.new(SECRET, (iv_b64 + value_b64).encode(), hashlib.sha256).hexdigest()
    assert compute_mac(SECRET, iv_b64, value_b64) == expected

def test_mac_verify_accepts_good_envelope():
    env = encode_envelope(SECRET, IV, b64(b"\x01" * 16))
    assert verify_mac(SECRET, env) is True

def test_mac_verify_rejects_other_secret():
    env = encode_envelope(SECRET, IV, b64(b"\x01" * 16))
    assert verify_mac(b"\x00" * 32, env) is False

def test_mac_verify_length_mismatch_is_false():
    env = encode_envelope(SECRET, IV, b64(b"\x01" * 16))
    assert verify_mac(SECRET, Envelope(env.iv, env.value, env.mac[:-2])) is False

def test_mac_verify_never_raises():
    assert verify_mac(SECRET, Envelope(None, None, None)) is False
    assert verify_mac(SECRET, Envelope(b64(IV), "x", "é" * 64)) is False


# ── Envelope ─────────────────────────────────────────────────────────────────
def test_envelope_outer_is_base64_of_compact_json():
    env  = encode_envelope(SECRET, IV, b64(b"\x02" * 16))
    text = base64.b64decode(serialize_outer(env)).decode()
    assert " " not in text
    assert list(json.loads(text)) == ["iv", "value", "mac"]
    assert json.loads(text)["iv"] == b64(IV)

def test_envelope_parse_roundtrip():
    env = encode_envelope(SECRET, IV, b64(b"\x02" * 16))
    assert parse_outer(env.serialize_outer()) == env

def test_envelope_parse_tolerates_whitespace_and_missing_padding():
    env = encode_envelope(SECRET, IV, b64(b"\x02" * 16))
    outer = env.serialize_outer().rstrip("=")
    assert parse_outer("  " + outer + "\n") == env

@pytest.mark.parametrize("payload", [
    b64(b"not json"),
    b64(b'"just a string"'),
    b64(b"[1, 2, 3]"),
    b64(b"\xff\xfe"),
    "éé",
])
def test_envelope_parse_garbage_is_format_error(payload):
    with pytest.raises(PayloadFormatError):
        parse_outer(payload)

@pytest.mark.parametrize("obj", [
    {"iv": b64(IV), "value": "AAAA"},
    {"iv": b64(IV), "mac": "00"},
    {"value": "AAAA", "mac": "00"},
    {"iv": b64(b"0123"), "value": "AAAA", "mac": "00"},
    {"iv": b64(IV + b"x"), "value": "AAAA", "mac": "00"},
    {"iv": b64(IV), "value": "AAAA", "mac": 1234},
])
def test_envelope_strict_parse_rejects_bad_structure(obj):
    payload = b64(json.dumps(obj).encode())
    with pytest.raises(PayloadFormatError):
        parse_outer(payload)

def test_envelope_lenient_parse_fills_missing_fields():
    payload = b64(json.dumps({"value": "AAAA"}).encode())
    assert parse_outer(payload, strict=False) == Envelope(iv="", value="AAAA", mac="")


# ── Serializers ──────────────────────────────────────────────────────────────
def test_php_encode_matches_php_serialize():
    php = PhpSerializer()
    assert php.encode({"foo": "bar"}) == 'a:1:{s:3:"foo";s:3:"bar";}'
    assert php.encode("resistance is futile") == 's:20:"resistance is futile";'
    assert php.encode(1) == "i:1;"

def test_php_decode_structures():
    php = PhpSerializer()
    assert php.decode('a:1:{s:3:"foo";s:3:"bar";}') == {"foo": "bar"}
    assert php.decode('a:2:{i:0;s:1:"a";i:1;s:1:"b";}') == ["a", "b"]
    assert php.decode("N;") is None
    assert php.decode("b:1;") is True

def test_php_decode_counts_utf8_bytes():
    php = PhpSerializer()
    assert php.decode(php.encode("café")) == "café"
    assert php.encode("café") == 's:5:"café";'

def test_php_decode_malformed_is_serialization_error():
    with pytest.raises(SerializationError):
        PhpSerializer().decode("x:1;")

def test_php_looks_serialized():
    php = PhpSerializer()
    assert php.looks_serialized('s:3:"abc";')
    assert php.looks_serialized('a:1:{s:3:"foo";s:3:"bar";}')
    assert not php.looks_serialized("resistance is futile")
    assert not php.looks_serialized("1")
    assert not php.looks_serialized('s:99:"abc";')
    assert not php.looks_serialized(None)

def test_php_trailing_data_is_not_serialized():
    php = PhpSerializer()
    assert php.looks_serialized("i:1;garbage") is False
    assert php.looks_serialized('s:3:"abc"; and then some more text') is False
    assert php.looks_serialized('a:1:{s:3:"foo";s:3:"bar";}}') is False
    with pytest.raises(SerializationError):
        php.decode("i:1;garbage")
    assert php.decode("i:1;") == 1

def test_php_encode_unsupported_is_serialization_error():
    with pytest.raises(SerializationError):
        PhpSerializer().encode(object())

def test_json_serializer():
    js = JsonSerializer()
    assert js.encode({"foo": "bar"}) == '{"foo":"bar"}'
    assert js.decode('{"foo":"bar"}') == {"foo": "bar"}
    assert js.looks_serialized('{"foo":"bar"}')
    assert js.looks_serialized("[1,2]")
    assert not js.looks_serialized("1")
    assert not js.looks_serialized('"text"')
    assert not js.looks_serialized("{broken")
    with pytest.raises(SerializationError):
        js.decode("{broken")

def test_get_serializer():
    assert isinstance(get_serializer(), PhpSerializer)
    assert isinstance(get_serializer("json"), JsonSerializer)
    with pytest.raises(ConfigurationError):
        get_serializer("xml")

def test_policies_stay_distinct():
    php = PhpSerializer()
    assert should_decode(EXPLICIT, True, "plain text", php) is True
    assert should_decode(EXPLICIT, False, 's:1:"a";', php) is False
    assert should_decode(AUTO_DETECT, None, 's:1:"a";', php) is True
    assert should_decode(AUTO_DETECT, None, "plain text", php) is False


# ── Errors ───────────────────────────────────────────────────────────────────
def test_wrap_error_passes_typed_errors_through():
    err = PayloadFormatError("bad")
    assert wrap_error(err, CipherError) is err

def test_wrap_error_wraps_foreign_errors():
    wrapped = wrap_error(ValueError("boom"), CipherError)
    assert isinstance(wrapped, CipherError)
    assert str(wrapped) == "boom"
    assert str(wrap_error(KeyError(), CipherError, "custom")) == "custom"


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
