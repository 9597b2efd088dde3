# MIT License © 2025 Motohiro Suzuki
"""
prfplus/config.py

KdfConfig sources, later wins:
  1) defaults
  2) YAML file (top-level mapping, or a `prfplus:` section inside it)
  3) environment: PRFPLUS_PRF, PRFPLUS_LOG_LEVEL, PRFPLUS_LOG_PATH,
     PRFPLUS_LOG_NAME, PRFPLUS_LOG_THREAD_ID, PRFPLUS_AUDIT_LOG_PATH,
     PRFPLUS_DISABLED_HASHES (comma separated)

Unknown keys are ignored.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from prfplus.diagnostics import AuditLog, Logger, LogLevel
from prfplus.errors import ConfigError
from prfplus.hashes import HashPrimitiveProvider

ENV_PREFIX = "PRFPLUS_"

_TRUE = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class KdfConfig:
    prf: str = "hmac-sha2-256"
    log_level: str = "CONTROL|ERROR"
    log_path: Optional[str] = None
    log_name: str = "kdf"
    log_thread_id: bool = False
    audit_log_path: Optional[str] = None
    disabled_hashes: tuple[str, ...] = field(default_factory=tuple)

    def level(self) -> LogLevel:
        try:
            return LogLevel.parse(self.log_level)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def make_logger(self) -> Logger:
        """
        Logger for this config. Without log_path records are discarded;
        with it the file is opened here and the caller owns close().
        """
        if self.log_path:
            return Logger.open(self.log_path, self.log_name, self.level(), log_thread_id=self.log_thread_id)
        return Logger(self.log_name, self.level(), output=None, log_thread_id=self.log_thread_id)

    def make_audit(self) -> Optional[AuditLog]:
        if self.audit_log_path:
            return AuditLog(self.audit_log_path)
        return None

    def make_provider(self) -> HashPrimitiveProvider:
        return HashPrimitiveProvider(disabled=self.disabled_hashes)

    def create_kdf(self, *, logger: Optional[Logger] = None):
        """create() with this config's prf, provider, logger and audit sink."""
        from prfplus.kdf import create

        return create(
            self.prf,
            self.make_provider(),
            logger=logger,
            audit=self.make_audit(),
        )


def _as_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in _TRUE


def _as_names(v: Any) -> tuple[str, ...]:
    if v is None:
        return ()
    if isinstance(v, str):
        items = v.split(",")
    elif isinstance(v, (list, tuple)):
        items = [str(x) for x in v]
    else:
        raise ConfigError(f"disabled_hashes must be a list or comma separated string, got {type(v).__name__}")
    return tuple(x.strip().lower() for x in items if x.strip())


def _coerce(name: str, v: Any) -> Any:
    if name == "log_thread_id":
        return _as_bool(v)
    if name == "disabled_hashes":
        return _as_names(v)
    if name in ("log_path", "audit_log_path"):
        return None if v in (None, "") else str(v)
    if v is None:
        raise ConfigError(f"{name} must not be empty")
    return str(v)


def _apply(cfg: KdfConfig, values: Mapping[str, Any]) -> KdfConfig:
    known = {f.name for f in fields(KdfConfig)}
    updates = {k: _coerce(k, v) for k, v in values.items() if k in known}
    return replace(cfg, **updates) if updates else cfg


def _read_yaml(path: str | Path) -> Mapping[str, Any]:
    p = Path(path)
    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read config: {p}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {p}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {p}")
    section = data.get("prfplus", data)
    if not isinstance(section, dict):
        raise ConfigError(f"'prfplus' section must be a mapping: {p}")
    return section


def _from_env(env: Mapping[str, str]) -> dict[str, str]:
    out = {}
    for f in fields(KdfConfig):
        v = env.get(ENV_PREFIX + f.name.upper())
        if v is not None and v.strip():
            out[f.name] = v.strip()
    return out


def load_config(path: str | Path | None = None, env: Optional[Mapping[str, str]] = None) -> KdfConfig:
    cfg = KdfConfig()
    if path is not None:
        cfg = _apply(cfg, _read_yaml(path))
    cfg = _apply(cfg, _from_env(os.environ if env is None else env))
    cfg.level()  # reject bad level names early
    return cfg
