"""Tail-call trampoline engine.

Runs logically recursive computations in constant stack by driving an explicit
state machine from a single loop, with optional tracing of the visited states and a
continuation-passing evaluator for comparison.
"""

from tailcall.continuation import IDENTITY, BaseCase, Continuation, identity, run_cps
from tailcall.decorators import jump, trampolined
from tailcall.engine import Run, Trace, TraceEntry, Trampoline, run, run_traced
from tailcall.exceptions import (
    ArithmeticOverflowError,
    Failure,
    IterationBudgetExceeded,
    StackExhaustionError,
    TailCallError,
)

__version__ = "0.1.0"

__all__ = [
    "ArithmeticOverflowError",
    "BaseCase",
    "Continuation",
    "Failure",
    "IDENTITY",
    "IterationBudgetExceeded",
    "Run",
    "StackExhaustionError",
    "TailCallError",
    "Trace",
    "TraceEntry",
    "Trampoline",
    "identity",
    "jump",
    "run",
    "run_cps",
    "run_traced",
    "trampolined",
]
