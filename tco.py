"""
Tail-call Demo Runner

This is the main entry point for the tail-call optimization demos.

Workflow:
1. Arguments are parsed: which factorial strategy, the input, the optimization level.
2. The strategy computes factorial, recursively or on the trampoline engine.
3. A success line is printed, or the error that stopped the run, and the exit code
   reflects the outcome.

Set TCODEBUG=1 to log engine activity to stderr.
"""
import sys

from tailcall.cli import main


if __name__ == "__main__":
    sys.exit(main())
