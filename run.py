#!/usr/bin/env python3
"""
Position Codec CLI
==================

Encode and decode 256-bit options position ids
(pool reference + up to four legs).

Usage:
  python run.py pool   <0x address|0x pool key> --tick-spacing 60      Encode a pool reference
  python run.py pool   <0x…> --tick-spacing 60 --vegoid 4               Explicit vegoid
  python run.py encode --pool <id> --leg strike=100,width=10,ratio=1    Build a position id
  python run.py encode --pool <0x address> --tick-spacing 60 --leg …     Pool encoded on the fly
  python run.py decode <position-id>                                    Decode (decimal or 0x hex)
  python run.py check                                                   Verify reference vectors
  python run.py info                                                    Layout + defaults
"""

import sys
import argparse
from pathlib import Path

# ── Imports ───────────────────────────────────────────────────────────────

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from position_codec.central_config import PROJECT_VERSION, PROJECT_NAME
from position_codec.commands import (
    cmd_info,
    cmd_pool,
    cmd_encode,
    cmd_decode,
    cmd_check,
)


# ── CLI Parser ────────────────────────────────────────────────────────────


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="position-codec",
        description=f"{PROJECT_NAME} v{PROJECT_VERSION} — options position id encoder/decoder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py pool 0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640 --tick-spacing 60
  python run.py encode --pool 0x3c0488e6a0c2dd \\
      --leg strike=100,width=10,ratio=1 \\
      --leg strike=-100,width=10,ratio=1,asset=1,type=1,partner=1
  python run.py encode --pool 0x88e6A0c2dDD26FEEb64F039a2c41296FcB3f5640 --tick-spacing 60 \\
      --leg strike=100,width=10,ratio=1
  python run.py decode 0x…
  python run.py check

Leg keys (--leg):
  strike   signed tick (-887272..887272)       required
  width    tick-spacing units (0..4095)         required
  ratio    option ratio (1..127)                required
  asset    0 | 1                                default 0
  long     0 | 1                                default 0 (short)
  type     token type 0 | 1                     default 0
  partner  risk partner slot (0..3)             default = slot
  slot     0..3                                 default = order given
""",
    )
    parser.add_argument(
        "--version", action="version", version=f"{PROJECT_NAME} v{PROJECT_VERSION}"
    )

    sub = parser.add_subparsers(dest="command", help="Available commands")

    pool_p = sub.add_parser("pool", help="Encode a 64-bit pool reference")
    pool_p.add_argument(
        "pool", help="V3 pool address (20 bytes) or V4 pool key hash (32 bytes), 0x…"
    )
    pool_p.add_argument(
        "--tick-spacing", type=int, required=True, help="Pool tick spacing (wraps mod 65536)"
    )
    pool_p.add_argument(
        "--vegoid",
        type=int,
        default=None,
        help="Vegoid byte (wraps mod 256; default from config / POSITION_CODEC_VEGOID)",
    )

    encode_p = sub.add_parser("encode", help="Assemble a position id")
    encode_p.add_argument(
        "--pool",
        required=True,
        help="Encoded pool reference (decimal or 0x hex), or an address / "
        "pool key when --tick-spacing is given",
    )
    encode_p.add_argument(
        "--tick-spacing",
        type=int,
        default=None,
        help="Encode --pool as an address or pool key with this tick spacing",
    )
    encode_p.add_argument(
        "--vegoid", type=int, default=None, help="Vegoid byte (with --tick-spacing)"
    )
    encode_p.add_argument(
        "--leg",
        action="append",
        default=[],
        metavar="KEY=VAL,…",
        help="Leg spec; repeat up to 4 times",
    )

    decode_p = sub.add_parser("decode", help="Decode a position id")
    decode_p.add_argument("position", help="Position id (decimal or 0x hex)")

    sub.add_parser("check", help="Verify the codec against reference vectors")
    sub.add_parser("info", help="Bit layout and defaults")

    return parser


# ── Main ──────────────────────────────────────────────────────────────────


def main(argv=None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "info":
            cmd_info()
            return 0
        if args.command == "check":
            return 0 if cmd_check() else 1
        if args.command == "pool":
            cmd_pool(args.pool, args.tick_spacing, args.vegoid)
            return 0
        if args.command == "encode":
            if not args.leg:
                print("❌ At least one --leg is required.")
                return 1
            cmd_encode(args.pool, args.leg, args.tick_spacing, args.vegoid)
            return 0
        if args.command == "decode":
            cmd_decode(args.position)
            return 0
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    parser.print_help()
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n❌ Cancelled.")
        sys.exit(130)
