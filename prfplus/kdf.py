# MIT License © 2025 Motohiro Suzuki
"""
prfplus/kdf.py

prf+ key derivation on top of HKDF-Expand (expand-only, no extract phase):
the stored key is treated as an already uniform PRK, the stored salt is the
HKDF "info" field.

Rules:
- key / salt are owned SecureBuffers, replaced as a whole (old value zeroed).
- Every expand() builds a brand-new HKDFExpand object and drops it afterwards.
  The info field is assigned once per context and a context is never reused,
  so nothing from a previous salt can leak into the next derivation.
- create() runs a self-test derivation and fails closed: no instance is
  returned unless the PRF/hash combination actually works in this build.
- Every fallible operation returns a Result; nothing here raises for
  unsupported algorithms, bad parameters or primitive failures.

Not thread-safe: callers serialise set_parameter()/derive() per instance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDFExpand

from prfplus.algorithms import KeyDerivationFunction, PseudoRandomFunction, resolve_hash_name
from prfplus.diagnostics import NULL_LOGGER, AuditLog, Logger, LogLevel
from prfplus.failure import FailureCode
from prfplus.hashes import HashPrimitiveProvider, default_provider
from prfplus.result import Result
from prfplus.zeroize import SecureBuffer, is_bytes_like, wipe_bytearray, wipe_memoryview

# Non-secret placeholder, long enough to be accepted by any HMAC key check.
SELF_TEST_KEY = b"0" * 32
SELF_TEST_LENGTH = 8

# RFC 5869: L <= 255 * HashLen
HKDF_MAX_BLOCKS = 255


@dataclass(frozen=True)
class Key:
    value: bytes | bytearray | memoryview


@dataclass(frozen=True)
class Salt:
    value: bytes | bytearray | memoryview


KdfParameter = Union[Key, Salt]


class PrfPlusKdf:
    """
    prf+ expansion instance. Build it with create(); never directly.

    Lifecycle:
      create() -> set_parameter()/derive() in any order -> destroy()
    """

    def __init__(
        self,
        prf: PseudoRandomFunction,
        hash_primitive: hashes.HashAlgorithm,
        *,
        logger: Optional[Logger] = None,
        audit: Optional[AuditLog] = None,
    ) -> None:
        self.prf = prf
        self._hasher = hash_primitive
        self._key = SecureBuffer(SELF_TEST_KEY)
        self._salt = SecureBuffer(b"")
        self._destroyed = False
        self._logger = logger or NULL_LOGGER
        self._audit = audit

    # -------------------------
    # introspection
    # -------------------------
    @property
    def hash_primitive(self) -> hashes.HashAlgorithm:
        return self._hasher

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def get_type(self) -> KeyDerivationFunction:
        return KeyDerivationFunction.PRF_PLUS

    def get_output_limit(self) -> int:
        return HKDF_MAX_BLOCKS * self._hasher.digest_size

    # -------------------------
    # parameters
    # -------------------------
    def set_parameter(self, param: Any) -> Result[None]:
        if self._destroyed:
            return Result.fail(FailureCode.ERR_DESTROYED, "set_parameter after destroy")

        if isinstance(param, (Key, Salt)) and not is_bytes_like(param.value):
            return Result.fail(
                FailureCode.ERR_INVALID_PARAMETER,
                f"{type(param).__name__} value must be bytes-like, got {type(param.value).__name__}",
            )

        if isinstance(param, Key):
            self._key.replace(param.value)
            self._logger.log(LogLevel.CONTROL | LogLevel.LEVEL2, "%s: key set (%d bytes)", self.prf.name, len(self._key))
            self._logger.log_bytes(LogLevel.PRIVATE | LogLevel.LEVEL3, "prf+ key", self._key.view())
            return Result.Ok(None)

        if isinstance(param, Salt):
            self._salt.replace(param.value)
            self._logger.log(LogLevel.CONTROL | LogLevel.LEVEL2, "%s: salt set (%d bytes)", self.prf.name, len(self._salt))
            self._logger.log_bytes(LogLevel.RAW | LogLevel.LEVEL3, "prf+ salt", self._salt.view())
            return Result.Ok(None)

        self._logger.log(LogLevel.ERROR, "%s: unknown kdf parameter %r", self.prf.name, type(param).__name__)
        return Result.fail(FailureCode.ERR_INVALID_PARAMETER, f"unknown kdf parameter: {type(param).__name__}")

    def set_key(self, value: bytes | bytearray | memoryview) -> Result[None]:
        return self.set_parameter(Key(value))

    def set_salt(self, value: bytes | bytearray | memoryview) -> Result[None]:
        return self.set_parameter(Salt(value))

    # -------------------------
    # derivation
    # -------------------------
    def _check_length(self, output_length: Any) -> Result[None]:
        if isinstance(output_length, bool) or not isinstance(output_length, int):
            return Result.fail(FailureCode.ERR_INVALID_PARAMETER, "output length must be int")
        if output_length < 0:
            return Result.fail(FailureCode.ERR_INVALID_PARAMETER, "output length must be >= 0")
        limit = self.get_output_limit()
        if output_length > limit:
            return Result.fail(
                FailureCode.ERR_LENGTH_EXCEEDED,
                f"requested {output_length} bytes, limit is {limit}",
            )
        return Result.Ok(None)

    def expand(self, output_length: int, buffer: bytearray | memoryview) -> Result[None]:
        """
        Fill buffer[:output_length] with prf+ output for the current key/salt.
        On failure those bytes are zeroed and must not be used.
        """
        if self._destroyed:
            return Result.fail(FailureCode.ERR_DESTROYED, "expand after destroy")

        r = self._check_length(output_length)
        if not r.ok:
            self._derive_failed(output_length, r)
            return r

        try:
            out = memoryview(buffer).cast("B")
        except TypeError:
            return Result.fail(FailureCode.ERR_INVALID_PARAMETER, "buffer must support the buffer protocol")
        if out.readonly or len(out) < output_length:
            return Result.fail(FailureCode.ERR_INVALID_PARAMETER, "buffer must be writable and large enough")

        if output_length == 0:
            return Result.Ok(None)

        try:
            # fresh context per call; info assigned exactly once
            ctx = HKDFExpand(
                algorithm=self._hasher,
                length=output_length,
                info=self._salt.bytes(),
            )
            okm = ctx.derive(self._key.view())
            del ctx
            out[:output_length] = okm
        except Exception as e:  # noqa: BLE001
            wipe_memoryview(out[:output_length])
            r = Result.fail(FailureCode.ERR_PRIMITIVE_FAILURE, f"{type(e).__name__}: {e}")
            self._derive_failed(output_length, r)
            return r
        return Result.Ok(None)

    def derive(self, output_length: int) -> Result[bytes]:
        """Return exactly output_length bytes of prf+ output."""
        if self._destroyed:
            return Result.fail(FailureCode.ERR_DESTROYED, "derive after destroy")

        r = self._check_length(output_length)
        if not r.ok:
            self._derive_failed(output_length, r)
            return Result.Err(r.unwrap_err())

        buf = bytearray(output_length)
        try:
            r = self.expand(output_length, buf)
            if not r.ok:
                return Result.Err(r.unwrap_err())
            okm = bytes(buf)
        finally:
            wipe_bytearray(buf)

        self._logger.log(LogLevel.CONTROL | LogLevel.LEVEL3, "%s: derived %d bytes", self.prf.name, output_length)
        self._logger.log_bytes(LogLevel.PRIVATE | LogLevel.LEVEL3, "prf+ output", okm)
        return Result.Ok(okm)

    def _derive_failed(self, output_length: Any, r: Result) -> None:
        f = r.unwrap_err()
        self._logger.log(LogLevel.ERROR, "%s: derivation of %s bytes failed: %s", self.prf.name, output_length, f)
        if self._audit is not None:
            self._audit.emit(
                "kdf_derive_failed",
                kdf=self.get_type().value,
                prf=self.prf.name,
                length=output_length,
                code=f.code.value,
            )

    # -------------------------
    # teardown
    # -------------------------
    def destroy(self) -> None:
        if self._destroyed:
            return
        self._salt.release()
        self._key.release()
        self._destroyed = True
        self._logger.log(LogLevel.CONTROL | LogLevel.LEVEL2, "%s: kdf destroyed", self.prf.name)
        if self._audit is not None:
            self._audit.emit("kdf_destroyed", kdf=self.get_type().value, prf=self.prf.name)

    def __enter__(self) -> "PrfPlusKdf":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.destroy()

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else "active"
        return f"PrfPlusKdf(prf={self.prf.name}, hash={self._hasher.name}, {state})"


def _creation_failed(prf: Any, r: Result, logger: Logger, audit: Optional[AuditLog]) -> Result:
    f = r.unwrap_err()
    logger.log(LogLevel.ERROR, "prf+ with %s not available: %s", prf, f)
    if audit is not None:
        audit.emit("kdf_create_failed", kdf=KeyDerivationFunction.PRF_PLUS.value, prf=str(prf), code=f.code.value)
    return Result.Err(f)


def create(
    prf: Any,
    provider: Optional[HashPrimitiveProvider] = None,
    *,
    logger: Optional[Logger] = None,
    audit: Optional[AuditLog] = None,
) -> Result[PrfPlusKdf]:
    """
    Build a prf+ instance for the given PRF (enum member, IKEv2 id or name).

    Fails closed with ERR_UNSUPPORTED_ALGORITHM if the PRF is unknown, has no
    underlying hash, the provider cannot supply that hash, or the self-test
    derivation does not succeed.
    """
    lg = logger or NULL_LOGGER
    provider = provider or default_provider()

    p = PseudoRandomFunction.coerce(prf)
    if p is None:
        return _creation_failed(prf, Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"unknown prf: {prf!r}"), lg, audit)

    name = resolve_hash_name(p)
    if not name.ok:
        return _creation_failed(p.name, name, lg, audit)

    hasher = provider.resolve(name.unwrap())
    if not hasher.ok:
        return _creation_failed(p.name, hasher, lg, audit)

    kdf = PrfPlusKdf(p, hasher.unwrap(), logger=lg, audit=audit)

    # some builds disable algorithms; find out now, not deep inside a handshake
    probe = bytearray(SELF_TEST_LENGTH)
    st = kdf.expand(SELF_TEST_LENGTH, probe)
    wipe_bytearray(probe)
    if not st.ok:
        kdf.destroy()
        failed = Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"self-test failed: {st.unwrap_err()}")
        return _creation_failed(p.name, failed, lg, audit)

    lg.log(LogLevel.CONTROL | LogLevel.LEVEL1, "prf+ created: prf=%s hash=%s", p.name, kdf.hash_primitive.name)
    if audit is not None:
        audit.emit("kdf_created", kdf=KeyDerivationFunction.PRF_PLUS.value, prf=p.name, hash=kdf.hash_primitive.name)
    return Result.Ok(kdf)


def create_kdf(
    kdf_type: Any,
    prf: Any,
    provider: Optional[HashPrimitiveProvider] = None,
    *,
    logger: Optional[Logger] = None,
    audit: Optional[AuditLog] = None,
) -> Result[PrfPlusKdf]:
    """
    Factory keyed by KDF construction. Only prf+ is provided here.
    """
    try:
        t = KeyDerivationFunction(kdf_type)
    except ValueError:
        t = KeyDerivationFunction.UNDEFINED

    if t is not KeyDerivationFunction.PRF_PLUS:
        return Result.fail(FailureCode.ERR_UNSUPPORTED_ALGORITHM, f"unsupported kdf: {kdf_type!r}")
    return create(prf, provider, logger=logger, audit=audit)
