# MIT License © 2025 Motohiro Suzuki
"""
tests/test_kdf_lifecycle.py

Contract:
- create() fails closed: unsupported PRF / hash / self-test -> no instance.
- Length boundaries: 0 -> b"", > output limit -> ERR_LENGTH_EXCEEDED.
- Unknown parameter kinds are rejected, state unchanged.
- destroy() zeroes key and salt; nothing is legal afterwards.
"""

import pytest
from cryptography.hazmat.primitives import hashes

import prfplus.kdf as kdf_mod
from prfplus import (
    FailureCode,
    HashPrimitiveProvider,
    InvalidParameter,
    Key,
    KeyDerivationFunction,
    LengthExceeded,
    PseudoRandomFunction,
    Result,
    Salt,
    UnsupportedAlgorithm,
    create,
    create_kdf,
)


class _BogusHash(hashes.HashAlgorithm):
    name = "bogus-hash"
    digest_size = 32
    block_size = 64


class _BogusProvider(HashPrimitiveProvider):
    """Hands out a hash the primitive cannot run (self-test must catch it)."""

    def resolve(self, name):
        return Result.Ok(_BogusHash())


def _sha256():
    return create(PseudoRandomFunction.HMAC_SHA2_256).unwrap()


def test_get_type_and_output_limit():
    kdf = _sha256()
    assert kdf.get_type() is KeyDerivationFunction.PRF_PLUS
    assert str(kdf.get_type()) == "prf+"
    assert kdf.get_output_limit() == 255 * 32
    assert create(PseudoRandomFunction.HMAC_SHA2_512).unwrap().get_output_limit() == 255 * 64


@pytest.mark.parametrize(
    "prf",
    [
        PseudoRandomFunction.AES128_XCBC,
        PseudoRandomFunction.AES128_CMAC,
        PseudoRandomFunction.HMAC_TIGER,
        99,
        "prfnope",
        None,
    ],
)
def test_unsupported_prf_yields_no_instance(prf):
    r = create(prf)
    assert r.ok is False
    assert r.value is None
    assert r.code is FailureCode.ERR_UNSUPPORTED_ALGORITHM
    with pytest.raises(UnsupportedAlgorithm):
        r.unwrap()


def test_disabled_hash_yields_no_instance():
    r = create(PseudoRandomFunction.HMAC_SHA2_256, HashPrimitiveProvider(disabled=["sha256"]))
    assert r.ok is False
    assert r.code is FailureCode.ERR_UNSUPPORTED_ALGORITHM
    assert "sha256" in r.failure.detail


def test_self_test_failure_yields_no_instance():
    r = create(PseudoRandomFunction.HMAC_SHA2_256, _BogusProvider())
    assert r.ok is False
    assert r.value is None
    assert r.code is FailureCode.ERR_UNSUPPORTED_ALGORITHM
    assert "self-test" in r.failure.detail


def test_create_kdf_only_knows_prf_plus():
    assert create_kdf(KeyDerivationFunction.PRF_PLUS, PseudoRandomFunction.HMAC_SHA1).ok is True
    assert create_kdf("prf+", "prfsha256").ok is True
    for t in (KeyDerivationFunction.PRF, KeyDerivationFunction.UNDEFINED, "hkdf"):
        r = create_kdf(t, PseudoRandomFunction.HMAC_SHA2_256)
        assert r.code is FailureCode.ERR_UNSUPPORTED_ALGORITHM


def test_zero_length_output():
    kdf = _sha256()
    r = kdf.derive(0)
    assert r.ok is True
    assert r.value == b""
    assert kdf.expand(0, bytearray()).ok is True


def test_length_above_limit_fails_without_truncation():
    kdf = _sha256()
    assert len(kdf.derive(kdf.get_output_limit()).unwrap()) == 255 * 32

    r = kdf.derive(kdf.get_output_limit() + 1)
    assert r.ok is False
    assert r.value is None
    assert r.code is FailureCode.ERR_LENGTH_EXCEEDED
    with pytest.raises(LengthExceeded):
        r.unwrap()


@pytest.mark.parametrize("length", [-1, 1.5, "32", True])
def test_bad_length_is_invalid_parameter(length):
    assert _sha256().derive(length).code is FailureCode.ERR_INVALID_PARAMETER


def test_expand_rejects_short_or_readonly_buffer():
    kdf = _sha256()
    assert kdf.expand(32, bytearray(16)).code is FailureCode.ERR_INVALID_PARAMETER
    assert kdf.expand(32, bytes(32)).code is FailureCode.ERR_INVALID_PARAMETER


def test_unknown_parameter_kind_is_rejected_and_state_kept():
    kdf = _sha256()
    kdf.set_parameter(Key(bytes(32))).unwrap()
    kdf.set_parameter(Salt(b"test")).unwrap()
    before = kdf.derive(32).unwrap()

    r = kdf.set_parameter(("seed", b"x"))
    assert r.ok is False
    assert r.code is FailureCode.ERR_INVALID_PARAMETER
    with pytest.raises(InvalidParameter):
        r.unwrap()

    assert kdf.set_parameter(Salt("not bytes")).code is FailureCode.ERR_INVALID_PARAMETER
    assert kdf.derive(32).unwrap() == before


def test_primitive_failure_reports_and_wipes(monkeypatch):
    kdf = _sha256()

    class _Broken:
        def __init__(self, **kw):
            pass

        def derive(self, key_material):
            raise ValueError("provider rejected key")

    monkeypatch.setattr(kdf_mod, "HKDFExpand", _Broken)

    buf = bytearray(b"\xaa" * 16)
    r = kdf.expand(16, buf)
    assert r.code is FailureCode.ERR_PRIMITIVE_FAILURE
    assert buf == bytearray(16)

    r2 = kdf.derive(16)
    assert r2.ok is False
    assert r2.value is None
    assert r2.code is FailureCode.ERR_PRIMITIVE_FAILURE


def test_fresh_context_per_call(monkeypatch):
    created = []
    real = kdf_mod.HKDFExpand

    def _spy(**kw):
        ctx = real(**kw)
        created.append((id(ctx), kw["info"]))
        return ctx

    kdf = _sha256()
    monkeypatch.setattr(kdf_mod, "HKDFExpand", _spy)
    kdf.set_salt(b"A").unwrap()
    kdf.derive(16).unwrap()
    kdf.set_salt(b"B").unwrap()
    kdf.derive(16).unwrap()

    assert [info for _, info in created] == [b"A", b"B"]


def test_destroy_zeroes_key_and_salt():
    kdf = _sha256()
    kdf.set_key(b"\x5a" * 32).unwrap()
    kdf.set_salt(b"session-context").unwrap()
    key_storage = kdf._key._buf
    salt_storage = kdf._salt._buf

    kdf.destroy()

    assert key_storage == bytearray(32)
    assert salt_storage == bytearray(len(b"session-context"))
    assert kdf.destroyed is True
    assert kdf._key.released and kdf._salt.released


def test_key_replacement_zeroes_previous_storage():
    kdf = _sha256()
    kdf.set_key(b"\x11" * 32).unwrap()
    old = kdf._key._buf
    kdf.set_key(b"\x22" * 16).unwrap()
    assert old == bytearray(32)
    assert kdf._key.bytes() == b"\x22" * 16


def test_no_operation_after_destroy():
    kdf = _sha256()
    kdf.destroy()
    kdf.destroy()  # idempotent

    assert kdf.derive(16).code is FailureCode.ERR_DESTROYED
    assert kdf.expand(16, bytearray(16)).code is FailureCode.ERR_DESTROYED
    assert kdf.set_key(b"k").code is FailureCode.ERR_DESTROYED


def test_context_manager_destroys():
    with _sha256() as kdf:
        kdf.set_key(bytes(32)).unwrap()
        storage = kdf._key._buf
    assert kdf.destroyed is True
    assert storage == bytearray(32)
