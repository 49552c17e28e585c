"""
Interactive CLI for the Wellness Ledger.
Issue entry-point calls as a chosen caller identity, e.g.

    add-bill service_id=XRAY-7 amount=250
    batch-pay-bills service_ids=XRAY-7,TEST-SERVICE-1
"""

import shlex
from dataclasses import fields
from typing import Dict, List, Tuple

from wellness.config import DEPLOYER
from wellness.engine import LedgerEngine
from wellness.errors import LedgerError, InvalidArgument
from wellness.models import to_plain
from wellness.reports import render_bills
from wellness.requests import ENTRY_POINTS, build_request


# ── Parsing ──────────────────────────────────────────────────────────

def coerce_value(annotation, raw: str):
    """Turn the text typed at the prompt into the field's type."""
    if annotation is bool:
        lowered = raw.strip().lower()
        if lowered not in {"true", "false"}:
            raise InvalidArgument(f"Expected true or false, got '{raw}'.")
        return lowered == "true"
    if annotation is int:
        try:
            return int(raw)
        except ValueError:
            raise InvalidArgument(f"Expected an integer, got '{raw}'.") from None
    if annotation == Tuple[str, ...]:
        return tuple(p.strip() for p in raw.split(",") if p.strip())
    return raw


def parse_command(line: str) -> Tuple[str, Dict[str, object]]:
    """Split ``name key=value ...`` into the entry point name and typed arguments."""
    try:
        tokens: List[str] = shlex.split(line)
    except ValueError as e:
        raise InvalidArgument(f"Could not parse command: {e}") from e
    if not tokens:
        raise InvalidArgument("Empty command.")

    name = tokens[0].lower()
    if name not in ENTRY_POINTS:
        raise InvalidArgument(f"Unknown entry point '{name}'.")
    annotations = {f.name: f.type for f in fields(ENTRY_POINTS[name])}

    args: Dict[str, object] = {}
    for token in tokens[1:]:
        key, sep, raw = token.partition("=")
        if not sep:
            raise InvalidArgument(f"Arguments must look like key=value, got '{token}'.")
        if key not in annotations:
            raise InvalidArgument(f"'{name}' takes no argument named '{key}'.")
        args[key] = coerce_value(annotations[key], raw)
    return name, args


def print_help():
    print("\nEntry points:")
    for name, cls in ENTRY_POINTS.items():
        params = " ".join(f"{f.name}=..." for f in fields(cls))
        print(f"  {name} {params}".rstrip())
    print("  report   (billing summary)")
    print("  whoami   (current caller)")
    print("  quit")


def main():
    print("=== Wellness Ledger: interactive console ===\n")

    ledger = LedgerEngine()
    ledger.initialize(DEPLOYER)
    print(f"[init] Genesis admin: {DEPLOYER}")

    # ── Caller ───────────────────────────────────────────────────────
    try:
        caller = input(f"Caller identity [{DEPLOYER}] (or 'quit'): ").strip()
    except (EOFError, KeyboardInterrupt):
        print("\nExiting.")
        return

    if caller.lower() in {"quit", "exit"}:
        print("Goodbye.")
        return
    caller = caller or DEPLOYER
    print(f"\n[auth] Calling as: {caller}")
    print("Type 'help' for the list of entry points.")

    # ── REPL ─────────────────────────────────────────────────────────
    while True:
        try:
            line = input("\nledger> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nExiting.")
            break

        if not line:
            continue
        if line.lower() in {"quit", "exit"}:
            print("Goodbye.")
            break
        if line.lower() == "help":
            print_help()
            continue
        if line.lower() == "whoami":
            print(caller)
            continue
        if line.lower() == "report":
            print(render_bills(ledger.load_bills()))
            continue

        try:
            name, args = parse_command(line)
            result = ledger.execute(caller, build_request(name, args))
        except LedgerError as e:
            print(f"\n[{e.kind}] {e}")
            continue

        print(f"\n[ok] {to_plain(result)}")


if __name__ == "__main__":
    main()
