# MIT License © 2025 Motohiro Suzuki
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from prfplus.errors import (
    InvalidParameter,
    KdfDestroyed,
    KdfError,
    LengthExceeded,
    PrimitiveFailure,
    UnsupportedAlgorithm,
)


class FailureCode(str, Enum):
    ERR_UNSUPPORTED_ALGORITHM = "ERR_UNSUPPORTED_ALGORITHM"
    ERR_INVALID_PARAMETER = "ERR_INVALID_PARAMETER"
    ERR_PRIMITIVE_FAILURE = "ERR_PRIMITIVE_FAILURE"
    ERR_LENGTH_EXCEEDED = "ERR_LENGTH_EXCEEDED"
    ERR_DESTROYED = "ERR_DESTROYED"


_EXCEPTIONS = {
    FailureCode.ERR_UNSUPPORTED_ALGORITHM: UnsupportedAlgorithm,
    FailureCode.ERR_INVALID_PARAMETER: InvalidParameter,
    FailureCode.ERR_PRIMITIVE_FAILURE: PrimitiveFailure,
    FailureCode.ERR_LENGTH_EXCEEDED: LengthExceeded,
    FailureCode.ERR_DESTROYED: KdfDestroyed,
}


@dataclass(frozen=True)
class Failure:
    """
    Unified error carrier.
    detail is for diagnostics only and never contains key material.
    """
    code: FailureCode
    detail: Optional[str] = None

    def to_exception(self) -> KdfError:
        exc_type = _EXCEPTIONS.get(self.code, KdfError)
        msg = self.code.value if not self.detail else f"{self.code.value}: {self.detail}"
        return exc_type(msg)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.code.value} ({self.detail})"
        return self.code.value
