# MIT License © 2025 Motohiro Suzuki
import pytest
from cryptography.hazmat.primitives import hashes

from prfplus import (
    FailureCode,
    HashAlgorithm,
    HashPrimitiveProvider,
    PseudoRandomFunction,
    hasher_from_prf,
    resolve_hash_name,
)


@pytest.mark.parametrize(
    "prf, name",
    [
        (PseudoRandomFunction.HMAC_MD5, "md5"),
        (PseudoRandomFunction.HMAC_SHA1, "sha1"),
        (PseudoRandomFunction.HMAC_SHA2_256, "sha256"),
        (PseudoRandomFunction.HMAC_SHA2_384, "sha384"),
        (PseudoRandomFunction.HMAC_SHA2_512, "sha512"),
    ],
)
def test_resolve_hash_name(prf, name):
    assert resolve_hash_name(prf).unwrap() == name


def test_cipher_based_prfs_have_no_hash():
    assert hasher_from_prf(PseudoRandomFunction.AES128_XCBC) is HashAlgorithm.UNKNOWN
    assert hasher_from_prf(PseudoRandomFunction.AES128_CMAC) is HashAlgorithm.UNKNOWN
    r = resolve_hash_name(PseudoRandomFunction.AES128_CMAC)
    assert r.code is FailureCode.ERR_UNSUPPORTED_ALGORITHM


def test_prf_name_parsing():
    assert PseudoRandomFunction.from_name("prfsha256") is PseudoRandomFunction.HMAC_SHA2_256
    assert PseudoRandomFunction.from_name("HMAC_SHA2_384") is PseudoRandomFunction.HMAC_SHA2_384
    assert PseudoRandomFunction.from_name(" hmac-sha1 ") is PseudoRandomFunction.HMAC_SHA1
    assert PseudoRandomFunction.from_name("prfaesxcbc") is PseudoRandomFunction.AES128_XCBC
    assert PseudoRandomFunction.from_name("sha256") is None


def test_prf_coerce():
    assert PseudoRandomFunction.coerce(7) is PseudoRandomFunction.HMAC_SHA2_512
    assert PseudoRandomFunction.coerce(0) is None
    assert PseudoRandomFunction.coerce(True) is None
    assert PseudoRandomFunction.coerce(b"prfsha1") is None


def test_provider_resolves_cryptography_hashes():
    p = HashPrimitiveProvider()
    h = p.resolve("SHA256").unwrap()
    assert isinstance(h, hashes.SHA256)
    assert h.digest_size == 32


def test_provider_rejects_unknown_and_disabled():
    p = HashPrimitiveProvider(disabled=["SHA1"])
    assert p.resolve("whirlpool").code is FailureCode.ERR_UNSUPPORTED_ALGORITHM
    assert p.resolve("sha1").code is FailureCode.ERR_UNSUPPORTED_ALGORITHM
    assert p.resolve("sha512").ok is True
