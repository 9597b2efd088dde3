# MIT License © 2025 Motohiro Suzuki
"""
prfplus/runner.py

Derive prf+ output from the command line (vector checks, interop evidence).

  python -m prfplus.runner --prf prfsha256 --key-hex 00..00 --salt test --length 64

Prints the derived bytes as hex on success (exit 0),
"[FAIL] <code> (<detail>)" on failure (exit 1).
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from typing import Optional, Sequence

from prfplus.config import load_config
from prfplus.diagnostics import Logger, LogLevel
from prfplus.errors import ConfigError


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="prfplus", description="prf+ (HKDF-Expand) key derivation")
    ap.add_argument("--config", help="YAML config file")
    ap.add_argument("--prf", help="PRF name or IKEv2 id (default from config: hmac-sha2-256)")
    ap.add_argument("--key-hex", default="", help="key (PRK) as hex")
    salt = ap.add_mutually_exclusive_group()
    salt.add_argument("--salt", default=None, help="salt / info as UTF-8 text")
    salt.add_argument("--salt-hex", default=None, help="salt / info as hex")
    ap.add_argument("--length", type=int, required=True, help="output length in bytes")
    ap.add_argument("--verbose", "-v", action="store_true", help="log control records to stderr")
    return ap


def _fail(msg: str) -> int:
    print(f"[FAIL] {msg}")
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        return _fail(f"config: {e}")
    if args.prf:
        cfg = replace(cfg, prf=args.prf)

    try:
        key = bytes.fromhex(args.key_hex)
        if args.salt_hex is not None:
            salt = bytes.fromhex(args.salt_hex)
        else:
            salt = (args.salt or "").encode("utf-8")
    except ValueError as e:
        return _fail(f"bad hex input: {e}")

    if args.verbose:
        logger = Logger(cfg.log_name, cfg.level() | LogLevel.CONTROL | LogLevel.LEVEL3, output=sys.stderr)
    else:
        logger = cfg.make_logger()

    with logger:
        r = cfg.create_kdf(logger=logger)
        if not r.ok:
            return _fail(str(r.unwrap_err()))

        with r.unwrap() as kdf:
            for res in (kdf.set_key(key), kdf.set_salt(salt)):
                if not res.ok:
                    return _fail(str(res.unwrap_err()))
            out = kdf.derive(args.length)
            if not out.ok:
                return _fail(str(out.unwrap_err()))
            print(out.unwrap().hex())
    return 0


if __name__ == "__main__":
    sys.exit(main())
