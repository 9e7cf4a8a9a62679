"""
Command-line interface for the tail-call demos.

Each subcommand computes factorial with one or more strategies and reports whether the
run survived. The `-O` level stands in for the compiler optimization flag of a native
build: at level 0 tail calls are real calls, at level 1 and above they are eliminated.
Only the recursive strategies care; the trampoline behaves the same at every level.

Exit codes:
    0   every requested run succeeded
    1   a run exhausted the stack
    2   any other tail-call error (overflow under the strict policy, budget exceeded)
"""

import argparse
import logging
import os
import sys

from tailcall.exceptions import StackExhaustionError, TailCallError
from tailcall.factorial import (
    DEFAULT_BITS,
    STRATEGIES,
    OverflowPolicy,
    factorial_cps,
    factorial_trampoline_run,
)


DEFAULT_N = 200000
DEFAULT_CPS_N = 5
DEBUG_ENV = "TCODEBUG"
RECURSION_LIMIT_ENV = "TCO_RECURSION_LIMIT"

EXIT_OK = 0
EXIT_STACK_EXHAUSTED = 1
EXIT_ERROR = 2


def _configure_logging() -> None:
    if os.environ.get(DEBUG_ENV):
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )


def _positive_int(text: str) -> int:
    """
    Argument type for options that must be at least 1.
    """
    try:
        value = int(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid int value: {text!r}") from e
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return value


def _apply_recursion_limit(limit) -> None:
    if limit is None:
        env_limit = os.environ.get(RECURSION_LIMIT_ENV)
        if not env_limit:
            return
        try:
            limit = _positive_int(env_limit)
        except argparse.ArgumentTypeError as e:
            raise SystemExit(f"{RECURSION_LIMIT_ENV}: {e}") from e
    try:
        sys.setrecursionlimit(limit)
    except RecursionError as e:
        raise SystemExit(f"Recursion limit {limit} is too low: {e}") from e


def _run_one(name: str, args) -> int:
    """
    Run one strategy and print its outcome.
    """
    strategy = STRATEGIES[name]
    print(f"Calculating factorial({args.n}) with {strategy.description}...")
    try:
        if name == "trampoline" and args.trace:
            run = factorial_trampoline_run(args.n, policy=args.policy, bits=args.bits, trace=True)
            result = run.result
            print(f"Trace recorded {len(run.trace)} states over {run.steps} steps.")
        else:
            result = strategy.compute(
                args.n, optimize=args.opt_level > 0, policy=args.policy, bits=args.bits
            )
    except StackExhaustionError as e:
        print(f"{type(e).__name__}: {e}")
        return EXIT_STACK_EXHAUSTED
    except TailCallError as e:
        print(f"{type(e).__name__}: {e}")
        return EXIT_ERROR

    if args.show_result:
        print(f"Result: {result}")
    print("Success! No stack overflow occurred.")
    return EXIT_OK


def cmd_run(args) -> int:
    """Run a single strategy."""
    return _run_one(args.strategy, args)


def cmd_all(args) -> int:
    """Run every strategy in turn and return the worst exit code."""
    worst = EXIT_OK
    for name in STRATEGIES:
        worst = max(worst, _run_one(name, args))
        print()
    return worst


def cmd_cps(args) -> int:
    """Run the continuation-passing demo, printing every step."""
    print(f"Calculating factorial({args.n}) with Continuation-Passing Style...\n")
    try:
        value = factorial_cps(args.n, trampolined=args.trampolined, emit=print)
    except StackExhaustionError as e:
        print(f"{type(e).__name__}: {e}")
        return EXIT_STACK_EXHAUSTED
    print(f"\nFinal Value: {value}")
    return EXIT_OK


def _add_numeric_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-n",
        type=int,
        default=DEFAULT_N,
        help=f"Input to factorial (default: {DEFAULT_N})",
    )
    parser.add_argument(
        "-O", "--opt-level",
        dest="opt_level",
        type=int,
        default=0,
        help="Optimization level; 1 or above eliminates tail calls (default: 0)",
    )
    parser.add_argument(
        "--policy",
        type=OverflowPolicy,
        choices=list(OverflowPolicy),
        default=OverflowPolicy.WRAP,
        help="Accumulator overflow policy: wrap, strict or unbounded (default: wrap)",
    )
    parser.add_argument(
        "--bits",
        type=_positive_int,
        default=DEFAULT_BITS,
        help=f"Accumulator width in bits (default: {DEFAULT_BITS})",
    )
    parser.add_argument(
        "--show-result",
        action="store_true",
        help="Print the computed value",
    )


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="tco",
        description="Tail-call optimization demos: factorial four ways.",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--recursion-limit",
        type=_positive_int,
        default=None,
        help=f"Interpreter recursion limit for the recursive strategies (env: {RECURSION_LIMIT_ENV})",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # run
    p_run = sub.add_parser("run", help="Compute factorial with one strategy")
    p_run.add_argument("strategy", choices=list(STRATEGIES), help="Strategy to run")
    p_run.add_argument(
        "--trace",
        action="store_true",
        help="Record the visited states (trampoline only)",
    )
    _add_numeric_options(p_run)
    p_run.set_defaults(func=cmd_run)

    # all
    p_all = sub.add_parser("all", help="Compute factorial with every strategy")
    _add_numeric_options(p_all)
    p_all.set_defaults(func=cmd_all, trace=False)

    # cps
    p_cps = sub.add_parser("cps", help="Walk through the continuation-passing demo")
    p_cps.add_argument(
        "-n",
        type=int,
        default=DEFAULT_CPS_N,
        help=f"Input to factorial (default: {DEFAULT_CPS_N})",
    )
    p_cps.add_argument(
        "--trampolined",
        action="store_true",
        help="Unwind the continuation chain in constant stack",
    )
    p_cps.set_defaults(func=cmd_cps)

    return parser


def main(argv=None) -> int:
    """
    Entry point for the `tco` command.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "n", 0) < 0:
        parser.error("-n must be non-negative")
    _configure_logging()
    saved_limit = sys.getrecursionlimit()
    _apply_recursion_limit(args.recursion_limit)
    try:
        return args.func(args)
    finally:
        sys.setrecursionlimit(saved_limit)


if __name__ == "__main__":
    sys.exit(main())
