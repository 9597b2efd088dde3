# MIT License © 2025 Motohiro Suzuki
"""
prfplus/hashes.py

Hash primitive provider backed by `cryptography`.

Fail-closed:
- unknown short name        -> ERR_UNSUPPORTED_ALGORITHM
- disabled in this provider -> ERR_UNSUPPORTED_ALGORITHM
- disabled in the OpenSSL build (e.g. md5 under FIPS) -> ERR_UNSUPPORTED_ALGORITHM
"""

from __future__ import annotations

from typing import Iterable, Optional

from cryptography.exceptions import UnsupportedAlgorithm as _CryptoUnsupported
from cryptography.hazmat.primitives import hashes

from prfplus.failure import FailureCode
from prfplus.result import Result

_HASH_CLASSES = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha3_256": hashes.SHA3_256,
    "sha3_384": hashes.SHA3_384,
    "sha3_512": hashes.SHA3_512,
}


def supported_names() -> list[str]:
    return sorted(_HASH_CLASSES)


class HashPrimitiveProvider:
    """
    resolve(name) -> Result[hashes.HashAlgorithm]

    `disabled` models a build where some hash algorithms were switched off at
    configuration time.
    """

    def __init__(self, disabled: Optional[Iterable[str]] = None) -> None:
        self.disabled = frozenset(n.strip().lower() for n in (disabled or ()))

    def resolve(self, name: str) -> Result[hashes.HashAlgorithm]:
        n = name.strip().lower()
        cls = _HASH_CLASSES.get(n)
        if cls is None:
            return Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"unknown hash: {name}")
        if n in self.disabled:
            return Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"hash disabled: {n}")

        algorithm = cls()
        try:
            hashes.Hash(algorithm)
        except _CryptoUnsupported as e:
            return Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"hash unavailable: {n} ({e})")
        return Result.Ok(algorithm)


_DEFAULT = HashPrimitiveProvider()


def default_provider() -> HashPrimitiveProvider:
    return _DEFAULT
