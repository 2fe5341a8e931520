"""goflow command line: trace a Go file and print the steps."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from . import constants
from .api import extract_outline, trace_source
from .parser import ParseError
from .run import format_step, run
from .run_types import TraceConfig


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Execution tracer for Go programs")
    parser.add_argument("file", nargs="?", help="Go source file to trace")
    parser.add_argument(
        "--json", action="store_true", help="Print the trace as JSON"
    )
    parser.add_argument(
        "--outline",
        action="store_true",
        help="Only print the static outline (no execution)",
    )
    parser.add_argument(
        "--max-call-depth",
        type=int,
        default=constants.MAX_CALL_DEPTH,
        help=f"Call depth limit (default: {constants.MAX_CALL_DEPTH})",
    )
    parser.add_argument(
        "--max-loop-iterations",
        type=int,
        default=constants.MAX_LOOP_ITERATIONS,
        help=f"Iterations per loop execution (default: {constants.MAX_LOOP_ITERATIONS})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log pipeline stages and print statistics",
    )
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s %(levelname)s %(message)s"
        )

    try:
        config = TraceConfig(
            max_call_depth=args.max_call_depth,
            max_loop_iterations=args.max_loop_iterations,
        )
    except ValueError as e:
        parser.error(str(e))

    if not args.file:
        source = constants.DEMO_SOURCE
        if not args.json and not args.outline:
            print("No file provided. Using built-in demo:\n")
            print(source)
    else:
        with open(args.file) as f:
            source = f.read()

    try:
        if args.outline:
            print(json.dumps(extract_outline(source), indent=2))
            return 0
        if args.json:
            print(json.dumps(trace_source(source, config).to_dict(), indent=2))
            return 0
        result, _ = run(source, config, verbose=args.verbose)
    except ParseError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        return 1

    if not args.verbose:
        print("═══ Trace ═══")
        for step in result.steps:
            print(f"  {format_step(step)}")
        print()
        print("═══ Output ═══")
        print(result.final_output, end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())
