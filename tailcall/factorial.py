"""Factorial, four ways.

The same arithmetic expressed with four calling disciplines:

- standard: `n * factorial(n - 1)`. The multiplication is pending after the recursive
  call, so every level holds a stack frame.
- tail-recursive: `helper(n - 1, acc * n)`. Nothing is pending after the call. Whether
  the stack stays flat depends on the call being optimized; `optimize=True` runs the
  helper on the trampoline, `optimize=False` makes a real call per level.
- trampoline: an explicit `FactorialState(n, accumulator)` driven by the engine.
  Constant stack regardless of `optimize`.
- continuation-passing: the pending multiplications become a continuation chain.

Results are kept in a fixed-width accumulator (64 bits by default). The default
`OverflowPolicy.WRAP` lets products wrap modulo 2**bits without complaint, so for large
inputs the value is `n! mod 2**bits`. `STRICT` raises `ArithmeticOverflowError` on the
first product that does not fit, `UNBOUNDED` keeps exact integers.


File: factorial.py
Author: Chris Rowles <christopher.rowles@outlook.com>
Copyright: © 2025 Chris Rowles. All rights reserved.
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, NamedTuple

from tailcall.continuation import IDENTITY, BaseCase, run_cps
from tailcall.decorators import jump, trampolined
from tailcall.engine import Run, Trampoline
from tailcall.exceptions import ArithmeticOverflowError, Failure, StackExhaustionError


DEFAULT_BITS = 64


class OverflowPolicy(Enum):
    """What to do when a product no longer fits the accumulator."""
    WRAP = "wrap"
    STRICT = "strict"
    UNBOUNDED = "unbounded"

    def __str__(self) -> str:
        return self.value


def accumulate(accumulator: int, factor: int, policy=OverflowPolicy.WRAP, bits: int = DEFAULT_BITS) -> int:
    """
    Multiply into a fixed-width unsigned accumulator.

    Raises:
        ArithmeticOverflowError: Under `OverflowPolicy.STRICT`, if the product needs
            more than `bits` bits.
        ValueError: If `bits` is not a positive integer.
    """
    _check_bits(bits)
    if not isinstance(policy, OverflowPolicy):
        policy = OverflowPolicy(policy)
    product = accumulator * factor
    if policy is OverflowPolicy.UNBOUNDED or product >> bits == 0:
        return product
    if policy is OverflowPolicy.STRICT:
        raise ArithmeticOverflowError(product, bits)
    return product & ((1 << bits) - 1)


class FactorialState(NamedTuple):
    """Countdown value and the product accumulated so far."""
    n: int
    accumulator: int


class FactorialMachine:
    """
    Transition, termination and extraction functions for the trampoline.
    """

    def __init__(self, policy=OverflowPolicy.WRAP, bits: int = DEFAULT_BITS):
        _check_bits(bits)
        self.policy = OverflowPolicy(policy)
        self.bits = bits

    def initial(self, n: int) -> FactorialState:
        return FactorialState(n, 1)

    def step(self, state: FactorialState):
        try:
            accumulator = accumulate(state.accumulator, state.n, self.policy, self.bits)
        except ArithmeticOverflowError as e:
            return Failure(e)
        return FactorialState(state.n - 1, accumulator)

    @staticmethod
    def is_done(state: FactorialState) -> bool:
        return state.n <= 1

    @staticmethod
    def result(state: FactorialState) -> int:
        return state.accumulator

    def engine(self, trace: bool = False, max_steps: int | None = None) -> Trampoline:
        """Build a trampoline running this machine."""
        return Trampoline(self.step, self.is_done, self.result, trace=trace, max_steps=max_steps)


def _check_bits(bits):
    if isinstance(bits, bool) or not isinstance(bits, int) or bits < 1:
        raise ValueError(f"Accumulator width must be a positive integer, got {bits!r}")


def _check_input(n, bits=DEFAULT_BITS):
    _check_bits(bits)
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"factorial() expects an integer, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"factorial() is not defined for negative input {n}")


def factorial_standard(n: int, *, policy=OverflowPolicy.WRAP, bits: int = DEFAULT_BITS) -> int:
    """
    Naive recursion. Not tail-recursive; fails for inputs deeper than the stack.

    Raises:
        StackExhaustionError: When the recursion exceeds the interpreter stack.
    """
    _check_input(n, bits)
    policy = OverflowPolicy(policy)

    def factorial(m):
        if m <= 1:
            return 1
        return accumulate(factorial(m - 1), m, policy, bits)

    try:
        return factorial(n)
    except RecursionError as e:
        raise StackExhaustionError("factorial_standard", n) from e


@trampolined
def _factorial_helper(n, accumulator, policy, bits):
    if n <= 1:
        return accumulator
    return jump(n - 1, accumulate(accumulator, n, policy, bits), policy, bits)


def factorial_tail_recursive(
    n: int, *, optimize: bool = False, policy=OverflowPolicy.WRAP, bits: int = DEFAULT_BITS
) -> int:
    """
    Tail-recursive helper with an accumulator.

    Parameters:
        optimize (bool): Eliminate the tail calls. Without it every call is a real
            Python frame and deep inputs exhaust the stack.
    """
    _check_input(n, bits)
    policy = OverflowPolicy(policy)
    if optimize:
        return _factorial_helper(n, 1, policy, bits)
    return _factorial_helper.native(n, 1, policy, bits)


def factorial_trampoline(
    n: int, *, policy=OverflowPolicy.WRAP, bits: int = DEFAULT_BITS, max_steps: int | None = None
) -> int:
    """
    Explicit state machine on the trampoline engine. Constant stack.
    """
    return factorial_trampoline_run(n, policy=policy, bits=bits, max_steps=max_steps).result


def factorial_trampoline_run(
    n: int,
    *,
    policy=OverflowPolicy.WRAP,
    bits: int = DEFAULT_BITS,
    trace: bool = False,
    max_steps: int | None = None,
) -> Run:
    """
    Like `factorial_trampoline`, returning the full `Run` (steps and optional trace).
    """
    _check_input(n, bits)
    machine = FactorialMachine(policy, bits)
    return machine.engine(trace=trace, max_steps=max_steps).evaluate(machine.initial(n))


def factorial_cps(
    n: int,
    k=IDENTITY,
    *,
    trampolined: bool = False,  # pylint: disable=redefined-outer-name
    emit: Callable[[str], None] | None = None,
    policy=OverflowPolicy.WRAP,
    bits: int = DEFAULT_BITS,
) -> int:
    """
    Continuation-passing factorial.

    Each step wraps the current continuation in one that multiplies the sub-result by
    `n` and forwards the product outwards. `emit`, when given, receives one line per
    step and per continuation invocation.
    """
    _check_input(n, bits)
    policy = OverflowPolicy(policy)

    def transition(m, outer):
        if emit is not None:
            emit(f"Entering factorial_cps(n={m})")

        def combine(sub_result):
            if emit is not None:
                emit(
                    f"  Continuation for n={m} received sub_result={sub_result}. "
                    f"Calling outer k({m} * {sub_result})"
                )
            return accumulate(sub_result, m, policy, bits)

        return m - 1, outer.extend(combine)

    def base_value(m):
        if emit is not None:
            emit(f"Entering factorial_cps(n={m})")
            emit("  Base case. Calling continuation k(1)")
        return 1

    base_case = BaseCase(lambda m: m <= 1, base_value)
    return run_cps(n, transition, base_case, k, trampolined=trampolined)


@dataclass(frozen=True)
class Strategy:
    """A named factorial implementation."""
    name: str
    description: str
    stack_safe: bool
    func: Callable[..., int]
    # Keyword through which `func` takes the optimization switch, if it has one.
    optimize_keyword: str | None = None

    def compute(self, n: int, *, optimize: bool = False, policy=OverflowPolicy.WRAP, bits: int = DEFAULT_BITS) -> int:
        """Run the strategy with the options it understands."""
        options = {"policy": policy, "bits": bits}
        if self.optimize_keyword is not None:
            options[self.optimize_keyword] = optimize
        return self.func(n, **options)


STRATEGIES: dict[str, Strategy] = {
    "standard": Strategy("standard", "standard recursion", False, factorial_standard),
    "tail-recursive": Strategy(
        "tail-recursive", "a tail-recursive function", False, factorial_tail_recursive, "optimize"
    ),
    "trampoline": Strategy("trampoline", "a manual trampoline", True, factorial_trampoline),
    "cps": Strategy("cps", "Continuation-Passing Style", False, factorial_cps, "trampolined"),
}
