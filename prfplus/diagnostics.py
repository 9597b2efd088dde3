# MIT License © 2025 Motohiro Suzuki
"""
prfplus/diagnostics.py

Diagnostics sinks consumed by the KDF core.

Logger:
- Levelled, prefixed text records written to an explicitly supplied stream.
    "[<type><detail>] [<name>] <message>"
- Hex dump of raw bytes (16 bytes per row).
- Nothing is opened implicitly. Logger(output=None) discards every record;
  Logger.open(path) is the explicit way to log to a file.
- Fire-and-forget: a failing write never propagates into the caller.

AuditLog:
- JSONL evidence records (one object per line), never containing key material.
"""

from __future__ import annotations

import json
import threading
import time
from enum import IntFlag
from pathlib import Path
from typing import Any, Optional, TextIO


class LogLevel(IntFlag):
    LEVEL0 = 0
    LEVEL1 = 1
    LEVEL2 = 2 | LEVEL1
    LEVEL3 = 4 | LEVEL2
    CONTROL = 8
    ERROR = 16
    RAW = 32
    PRIVATE = 64
    AUDIT = 128
    FULL = LEVEL3 | CONTROL | ERROR | RAW | PRIVATE | AUDIT

    @staticmethod
    def parse(text: str) -> "LogLevel":
        """'CONTROL|ERROR|LEVEL1' -> LogLevel. Raises ValueError on unknown names."""
        level = LogLevel.LEVEL0
        for part in text.replace(",", "|").split("|"):
            p = part.strip().upper()
            if not p:
                continue
            try:
                level |= LogLevel[p]
            except KeyError:
                raise ValueError(f"unknown log level: {part.strip()}") from None
        return level


# ordered: first match wins
_TYPE_CHARS = (
    (LogLevel.CONTROL, "~"),
    (LogLevel.ERROR, "!"),
    (LogLevel.RAW, "#"),
    (LogLevel.PRIVATE, "?"),
    (LogLevel.AUDIT, ">"),
)

_BYTES_PER_ROW = 16

# one hex dump at a time, across all loggers
_dump_lock = threading.Lock()


def _type_char(level: int) -> str:
    for flag, ch in _TYPE_CHARS:
        if level & flag:
            return ch
    return "-"


def _detail_char(level: int) -> str:
    if level & (LogLevel.LEVEL3 & ~LogLevel.LEVEL2):
        return "3"
    if level & (LogLevel.LEVEL2 & ~LogLevel.LEVEL1):
        return "2"
    if level & LogLevel.LEVEL1:
        return "1"
    return "0"


def hexdump_rows(data: bytes) -> list[str]:
    """
    Rows of "[=>] [<offset> ] <hex> <ascii>".
    Non-printable bytes are shown as '*' in the ascii column.
    """
    rows = []
    for off in range(0, len(data), _BYTES_PER_ROW):
        chunk = data[off:off + _BYTES_PER_ROW]
        hex_part = " ".join(f"{b:02X}" for b in chunk)
        ascii_part = "".join(chr(b) if 31 < b < 127 else "*" for b in chunk)
        rows.append(f"[=>] [{off:5d} ] {hex_part:<47} {ascii_part}")
    return rows


class Logger:
    def __init__(
        self,
        name: str = "",
        level: int = LogLevel.CONTROL | LogLevel.ERROR,
        *,
        output: Optional[TextIO] = None,
        log_thread_id: bool = False,
    ) -> None:
        self.name = name or ""
        self.level = LogLevel(level)
        self.output = output
        self.log_thread_id = bool(log_thread_id)
        self._owns_output = False

    @classmethod
    def open(cls, path: str | Path, name: str = "", level: int = LogLevel.CONTROL | LogLevel.ERROR,
             *, log_thread_id: bool = False) -> "Logger":
        """Open (append) a log file explicitly. close() releases it."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        f = p.open("a", encoding="utf-8")
        lg = cls(name, level, output=f, log_thread_id=log_thread_id)
        lg._owns_output = True
        return lg

    def enabled(self, level: int) -> bool:
        return (self.level & level) == level

    def enable_level(self, level: int) -> None:
        self.level |= level

    def disable_level(self, level: int) -> None:
        self.level &= ~LogLevel(level)

    def get_level(self) -> LogLevel:
        return self.level

    def _prefix(self, level: int) -> str:
        tag = f"[{_type_char(level)}{_detail_char(level)}] [{self.name}]"
        if self.log_thread_id:
            return f"{tag} @{threading.get_ident()}"
        return tag

    def _write_lines(self, lines: list[str]) -> None:
        out = self.output
        if out is None:
            return
        try:
            for line in lines:
                out.write(line + "\n")
            out.flush()
        except (OSError, ValueError):
            # diagnostics must NOT break the caller (closed stream, disk full)
            pass

    def log(self, level: int, fmt: str, *args: Any) -> None:
        if not self.enabled(level):
            return
        try:
            msg = fmt % args if args else fmt
        except (TypeError, ValueError):
            msg = f"{fmt} {args!r}"
        self._write_lines([f"{self._prefix(level)} {msg}"])

    def log_bytes(self, level: int, label: str, data: bytes | bytearray | memoryview) -> None:
        if not self.enabled(level):
            return
        raw = bytes(data)
        lines = [f"{self._prefix(level)} {label} ({len(raw)} bytes)"]
        lines.extend(hexdump_rows(raw))
        with _dump_lock:
            self._write_lines(lines)

    def close(self) -> None:
        if self._owns_output and self.output is not None:
            try:
                self.output.close()
            except OSError:
                pass
        self.output = None
        self._owns_output = False

    def __enter__(self) -> "Logger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


NULL_LOGGER = Logger("null", LogLevel.LEVEL0, output=None)


class AuditLog:
    """
    Append-only JSONL audit sink.
    Records are evidence (event name + non-secret fields), one per line.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def emit(self, event: str, **fields: Any) -> None:
        record = {"event": event, "ts": time.time()}
        record.update(fields)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                json.dump(record, f, ensure_ascii=False, default=str)
                f.write("\n")
        except OSError:
            # Must NOT break key derivation due to audit logging
            pass

    def read_records(self) -> list[dict]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
