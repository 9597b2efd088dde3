# MIT License © 2025 Motohiro Suzuki
"""
prfplus/algorithms.py

Identifier tables:
- PseudoRandomFunction: IKEv2 transform type 2 (PRF) ids
- HashAlgorithm: hash families and their short names
- KeyDerivationFunction: KDF constructions

resolve_hash_name() is the resolver used by the KDF factory:
  prf id -> hash short name (understood by hashes.HashPrimitiveProvider)
It is pure and stateless.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Any, Optional

from prfplus.failure import FailureCode
from prfplus.result import Result


class KeyDerivationFunction(str, Enum):
    UNDEFINED = "undefined"
    PRF = "prf"
    PRF_PLUS = "prf+"

    def __str__(self) -> str:
        return self.value


class PseudoRandomFunction(IntEnum):
    HMAC_MD5 = 1
    HMAC_SHA1 = 2
    HMAC_TIGER = 3
    AES128_XCBC = 4
    HMAC_SHA2_256 = 5
    HMAC_SHA2_384 = 6
    HMAC_SHA2_512 = 7
    AES128_CMAC = 8

    @staticmethod
    def from_name(text: str) -> Optional["PseudoRandomFunction"]:
        """
        Accepts:
          - enum names, any case, '-' or '_' ("HMAC_SHA2_256", "hmac-sha2-256")
          - proposal keywords ("prfsha256", "prfaesxcbc", ...)
          - decimal IKEv2 ids ("5")
        """
        n = text.strip().lower()
        if n in _PROPOSAL_KEYWORDS:
            return _PROPOSAL_KEYWORDS[n]
        if n.isdigit():
            return PseudoRandomFunction.coerce(int(n))
        key = n.replace("-", "_").upper()
        try:
            return PseudoRandomFunction[key]
        except KeyError:
            return None

    @staticmethod
    def coerce(value: Any) -> Optional["PseudoRandomFunction"]:
        """Map an enum member, IKEv2 integer id or name to a member (None if unknown)."""
        if isinstance(value, PseudoRandomFunction):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            try:
                return PseudoRandomFunction(value)
            except ValueError:
                return None
        if isinstance(value, str):
            return PseudoRandomFunction.from_name(value)
        return None


_PROPOSAL_KEYWORDS = {
    "prfmd5": PseudoRandomFunction.HMAC_MD5,
    "prfsha1": PseudoRandomFunction.HMAC_SHA1,
    "prftiger": PseudoRandomFunction.HMAC_TIGER,
    "prfaesxcbc": PseudoRandomFunction.AES128_XCBC,
    "prfsha256": PseudoRandomFunction.HMAC_SHA2_256,
    "prfsha384": PseudoRandomFunction.HMAC_SHA2_384,
    "prfsha512": PseudoRandomFunction.HMAC_SHA2_512,
    "prfaescmac": PseudoRandomFunction.AES128_CMAC,
}


class HashAlgorithm(IntEnum):
    UNKNOWN = 0
    MD5 = 1
    SHA1 = 2
    SHA224 = 3
    SHA256 = 4
    SHA384 = 5
    SHA512 = 6
    SHA3_256 = 7
    SHA3_384 = 8
    SHA3_512 = 9

    @property
    def short_name(self) -> Optional[str]:
        return _HASH_SHORT_NAMES.get(self)


_HASH_SHORT_NAMES = {
    HashAlgorithm.MD5: "md5",
    HashAlgorithm.SHA1: "sha1",
    HashAlgorithm.SHA224: "sha224",
    HashAlgorithm.SHA256: "sha256",
    HashAlgorithm.SHA384: "sha384",
    HashAlgorithm.SHA512: "sha512",
    HashAlgorithm.SHA3_256: "sha3_256",
    HashAlgorithm.SHA3_384: "sha3_384",
    HashAlgorithm.SHA3_512: "sha3_512",
}

# Only HMAC based PRFs have an underlying hash. XCBC / CMAC are cipher based,
# TIGER has no primitive in the provider.
_HASH_FROM_PRF = {
    PseudoRandomFunction.HMAC_MD5: HashAlgorithm.MD5,
    PseudoRandomFunction.HMAC_SHA1: HashAlgorithm.SHA1,
    PseudoRandomFunction.HMAC_SHA2_256: HashAlgorithm.SHA256,
    PseudoRandomFunction.HMAC_SHA2_384: HashAlgorithm.SHA384,
    PseudoRandomFunction.HMAC_SHA2_512: HashAlgorithm.SHA512,
}


def hasher_from_prf(prf: PseudoRandomFunction) -> HashAlgorithm:
    return _HASH_FROM_PRF.get(prf, HashAlgorithm.UNKNOWN)


def resolve_hash_name(prf: Any) -> Result[str]:
    p = PseudoRandomFunction.coerce(prf)
    if p is None:
        return Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"unknown prf: {prf!r}")

    name = hasher_from_prf(p).short_name
    if name is None:
        return Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"no hash for prf {p.name}")
    return Result.Ok(name)
