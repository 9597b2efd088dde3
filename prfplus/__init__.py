# MIT License © 2025 Motohiro Suzuki
"""
prfplus: prf+ key derivation (HKDF-Expand based) for key-exchange protocols.
"""

from prfplus.algorithms import (
    HashAlgorithm,
    KeyDerivationFunction,
    PseudoRandomFunction,
    hasher_from_prf,
    resolve_hash_name,
)
from prfplus.diagnostics import AuditLog, Logger, LogLevel
from prfplus.errors import (
    ConfigError,
    InvalidParameter,
    KdfDestroyed,
    KdfError,
    LengthExceeded,
    PrimitiveFailure,
    UnsupportedAlgorithm,
)
from prfplus.failure import Failure, FailureCode
from prfplus.hashes import HashPrimitiveProvider, default_provider
from prfplus.kdf import Key, KdfParameter, PrfPlusKdf, Salt, create, create_kdf
from prfplus.result import Result
from prfplus.zeroize import SecureBuffer

__all__ = [
    "AuditLog",
    "ConfigError",
    "Failure",
    "FailureCode",
    "HashAlgorithm",
    "HashPrimitiveProvider",
    "InvalidParameter",
    "KdfDestroyed",
    "KdfError",
    "KdfParameter",
    "Key",
    "KeyDerivationFunction",
    "LengthExceeded",
    "Logger",
    "LogLevel",
    "PrfPlusKdf",
    "PrimitiveFailure",
    "PseudoRandomFunction",
    "Result",
    "Salt",
    "SecureBuffer",
    "UnsupportedAlgorithm",
    "create",
    "create_kdf",
    "default_provider",
    "hasher_from_prf",
    "resolve_hash_name",
]

__version__ = "0.1.0"
