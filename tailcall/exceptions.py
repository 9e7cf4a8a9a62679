"""Errors.


File: exceptions.py
Author: Chris Rowles <christopher.rowles@outlook.com>
Copyright: © 2025 Chris Rowles. All rights reserved.
Version: 0.1.0
License: MIT
"""


class TailCallError(Exception):
    """
    Base error for the tailcall package.
    """


class StackExhaustionError(TailCallError, RecursionError):
    """
    Error for computations that ran out of physical call stack.
    """
    def __init__(self, strategy, depth=None):
        self.strategy = strategy
        self.depth = depth
        message = f"Stack exhausted in '{strategy}'"
        if depth is not None:
            message += f" for input {depth}"
        super().__init__(message)


class ArithmeticOverflowError(TailCallError, OverflowError):
    """
    Error for accumulators that no longer fit their fixed width.
    """
    def __init__(self, value, bits):
        self.value = value
        self.bits = bits
        super().__init__(f"Value does not fit in {bits} bits")


class IterationBudgetExceeded(TailCallError):
    """
    Error for runs that exhausted their transition budget.
    """
    def __init__(self, max_steps, state=None):
        self.max_steps = max_steps
        self.state = state
        message = f"Iteration budget of {max_steps} steps exceeded"
        if state is not None:
            message += f" at state {state!r}"
        super().__init__(message)


class Failure:
    """
    Failure outcome a transition may return instead of a next state.
    """
    __slots__ = ("error",)

    def __init__(self, error):
        self.error = error

    def __repr__(self) -> str:
        return f"Failure({self.error!r})"
