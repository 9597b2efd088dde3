# MIT License © 2025 Motohiro Suzuki
from __future__ import annotations


class KdfError(Exception):
    pass


class UnsupportedAlgorithm(KdfError):
    pass


class InvalidParameter(KdfError):
    pass


class PrimitiveFailure(KdfError):
    pass


class LengthExceeded(PrimitiveFailure):
    pass


class KdfDestroyed(KdfError):
    pass


class ConfigError(KdfError):
    pass
