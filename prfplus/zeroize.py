# MIT License © 2025 Motohiro Suzuki
"""
prfplus/zeroize.py

Best-effort secret zeroization utilities.

Reality check (Python):
- 'bytes' is immutable; cannot guarantee in-place wiping of the original object.
- 'bytearray' / 'memoryview' can be wiped in-place.

SecureBuffer is the owned container for key and salt material: every path
that drops its storage (replace / release / context exit / GC) zeroes it first.
"""

from __future__ import annotations

from typing import Any, Optional


def wipe_bytearray(b: bytearray) -> None:
    """In-place wipe for mutable buffer."""
    for i in range(len(b)):
        b[i] = 0


def wipe_memoryview(m: memoryview) -> None:
    """In-place wipe for writable memoryview."""
    if m.readonly:
        return
    m = m.cast("B")
    m[:] = b"\x00" * len(m)


def wipe_bytes_like(x: Any) -> None:
    """
    Best-effort wipe for arbitrary object:
    - bytearray: wiped in-place
    - memoryview(writable): wiped in-place
    - anything else: ignored (immutable, nothing to wipe)
    """
    try:
        if isinstance(x, bytearray):
            wipe_bytearray(x)
            return
        if isinstance(x, memoryview):
            wipe_memoryview(x)
            return
    except (TypeError, ValueError):
        # zeroize must never raise
        return


def is_bytes_like(x: Any) -> bool:
    return isinstance(x, (bytes, bytearray, memoryview))


class SecureBuffer:
    """
    Owned, wipeable byte buffer.

    The constructor always copies, so the caller's object and the stored
    secret never alias each other.
    """
    __slots__ = ("_buf",)

    def __init__(self, data: bytes | bytearray | memoryview = b"") -> None:
        self._buf: Optional[bytearray] = bytearray(data)

    @property
    def released(self) -> bool:
        return self._buf is None

    def _storage(self) -> bytearray:
        if self._buf is None:
            raise ValueError("SecureBuffer already released")
        return self._buf

    def bytes(self) -> bytes:
        return bytes(self._storage())

    def view(self) -> memoryview:
        return memoryview(self._storage())

    def replace(self, data: bytes | bytearray | memoryview) -> None:
        """Zero the current storage in place, then store a copy of data."""
        new = bytearray(data)
        if self._buf is not None:
            wipe_bytearray(self._buf)
        self._buf = new

    def wipe(self) -> None:
        if self._buf is not None:
            wipe_bytearray(self._buf)

    def release(self) -> None:
        buf = getattr(self, "_buf", None)
        if buf is not None:
            wipe_bytearray(buf)
            self._buf = None

    def __len__(self) -> int:
        return 0 if self._buf is None else len(self._buf)

    def __enter__(self) -> "SecureBuffer":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.release()

    def __del__(self) -> None:
        self.release()

    def __repr__(self) -> str:
        # never show contents
        if self._buf is None:
            return "SecureBuffer(<released>)"
        return f"SecureBuffer(<{len(self._buf)} bytes>)"
