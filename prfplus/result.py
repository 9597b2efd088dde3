# MIT License © 2025 Motohiro Suzuki
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from prfplus.failure import Failure, FailureCode

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Return type of every fallible operation:
      - Ok(value)
      - Err(failure)
    Callers MUST check .ok before trusting .value.
    """
    ok: bool
    value: Optional[T] = None
    failure: Optional[Failure] = None

    @staticmethod
    def Ok(v: T = None) -> "Result[T]":
        return Result(ok=True, value=v, failure=None)

    @staticmethod
    def Err(f: Failure) -> "Result[T]":
        return Result(ok=False, value=None, failure=f)

    @staticmethod
    def fail(code: FailureCode, detail: Optional[str] = None) -> "Result[T]":
        return Result.Err(Failure(code=code, detail=detail))

    @property
    def code(self) -> Optional[FailureCode]:
        return None if self.failure is None else self.failure.code

    def unwrap(self) -> T:
        """Return the value, or raise the KdfError matching the failure."""
        if not self.ok:
            if self.failure is None:
                raise RuntimeError("unwrap() on Err without failure")
            raise self.failure.to_exception()
        return self.value  # type: ignore[return-value]

    def unwrap_err(self) -> Failure:
        if self.ok or self.failure is None:
            raise RuntimeError("unwrap_err() on Ok")
        return self.failure
