"""Command line interface for the Legato multiplier proof."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import vectors
from .config import VerificationConfig
from .memory import MEMORY_MODELS
from .program import legato
from .trace_recorder import TraceRecord, save_trace
from .verification import correctness_theorem


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="legato-verify", description="Symbolic proof of Legato's 8-bit multiplier")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    prove_parser = subparsers.add_parser("prove", help="Prove the multiplier correct for all inputs")
    prove_parser.add_argument("--memory", choices=sorted(MEMORY_MODELS), default="dense",
                              help="Memory backing strategy")
    prove_parser.add_argument("--timeout", type=int, help="Solver timeout in milliseconds")
    prove_parser.add_argument("--max-steps", type=int, help="Evaluator step budget")

    run_parser = subparsers.add_parser("run", help="Multiply two concrete bytes through the model")
    run_parser.add_argument("x", type=lambda s: int(s, 0), help="First factor")
    run_parser.add_argument("y", type=lambda s: int(s, 0), help="Second factor")
    run_parser.add_argument("--trace", type=Path, help="Write the execution trace as JSON")

    vectors_parser = subparsers.add_parser("vectors", help="Generate concrete test vectors")
    vectors_parser.add_argument("count", type=int, help="Number of vectors")
    vectors_parser.add_argument("--seed", type=int, help="Random seed")
    vectors_parser.add_argument("--output", "-o", type=Path, help="Write JSON to file instead of stdout")

    subparsers.add_parser("listing", help="Print the assembled program")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.command == "prove":
        options = {"memory_model": args.memory, "timeout_ms": args.timeout}
        if args.max_steps is not None:
            options["max_steps"] = args.max_steps
        result = correctness_theorem(VerificationConfig(**options))
        print(result)
        return 0 if result.proved else 1

    if args.command == "run":
        if not (0 <= args.x < 256 and 0 <= args.y < 256):
            parser.error("factors must fit in a byte")
        record = TraceRecord() if args.trace else None
        vector = vectors.evaluate({"addrX": 0, "x": args.x, "addrY": 1, "y": args.y, "addrLow": 2},
                                  recorder=record)
        hi, lo = vector.outputs["hi"], vector.outputs["lo"]
        print(f"{args.x} * {args.y} = {256 * hi + lo} (hi=0x{hi:02x}, lo=0x{lo:02x})")
        if record is not None:
            save_trace(record, args.trace)
            print(f"[+] trace written to {args.trace}")
        return 0

    if args.command == "vectors":
        generated = vectors.generate_test_vectors(args.count, seed=args.seed)
        if args.output:
            vectors.save_vectors(generated, args.output)
            print(f"[+] {len(generated)} vectors written to {args.output}")
        else:
            print(generated.to_json())
        return 0

    if args.command == "listing":
        print(legato(0, 1, 2).listing())
        return 0

    parser.error("unknown command")


if __name__ == "__main__":
    sys.exit(main())
