# src/dealpin/scripts/pins.py
"""
Operator tool for deal PINs.

Usage:
    python -m dealpin.scripts.pins generate
    python -m dealpin.scripts.pins validate 1829
    python -m dealpin.scripts.pins hash 1829
    python -m dealpin.scripts.pins rotating 42
    python -m dealpin.scripts.pins verify-rotating 42 5081
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from dealpin.core.pin_format import validate_pin_format
from dealpin.core.settings import settings
from dealpin.services.generator import generate_secure_pin
from dealpin.services.rotating_pin import generate_rotating_pin, verify_rotating_pin
from dealpin.services.static_pin import hash_pin


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dealpin", description="Deal PIN utilities")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("generate", help="Generate a secure static PIN")

    validate = sub.add_parser("validate", help="Check a PIN against the format rules")
    validate.add_argument("pin")

    hashed = sub.add_parser("hash", help="Hash a static PIN for storage")
    hashed.add_argument("pin")

    rotating = sub.add_parser("rotating", help="Show the current rotating PIN for a deal")
    rotating.add_argument("deal_id", type=int)

    verify = sub.add_parser("verify-rotating", help="Check a rotating PIN for a deal")
    verify.add_argument("deal_id", type=int)
    verify.add_argument("pin")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return a process exit code."""
    logging.basicConfig(level=logging.DEBUG if settings.debug else logging.WARNING)
    args = build_parser().parse_args(argv)

    if args.command == "generate":
        print(generate_secure_pin())
        return 0

    if args.command == "validate":
        result = validate_pin_format(args.pin)
        print(result.message)
        return 0 if result.is_valid else 1

    if args.command == "hash":
        result = hash_pin(args.pin)
        if not result.success:
            print(result.message, file=sys.stderr)
            return 1
        print(f"hashed_pin: {result.hashed_pin}")
        print(f"salt: {result.salt}")
        print(f"expires_at: {result.expires_at.isoformat() if result.expires_at else '-'}")
        return 0

    if args.command == "rotating":
        rotating = generate_rotating_pin(args.deal_id)
        print(f"current_pin: {rotating.current_pin}")
        print(f"next_rotation_at: {rotating.next_rotation_at.isoformat()}")
        print(f"rotation_interval: {rotating.rotation_interval} minutes")
        return 0

    if args.command == "verify-rotating":
        ok = verify_rotating_pin(args.deal_id, args.pin)
        print("valid" if ok else "invalid")
        return 0 if ok else 1

    return 2


if __name__ == "__main__":
    sys.exit(main())
