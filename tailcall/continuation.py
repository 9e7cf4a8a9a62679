"""Continuation-passing evaluation.

Pending work that a recursive function would keep on the call stack ("multiply by n
once the sub-result comes back") is reified as a `Continuation`: a link holding one
`combine` function and a reference to the enclosing, outer continuation. The chain is a
linked list of callbacks, innermost first, ending at the identity continuation.

`run_cps` walks a problem down to its base case, growing the chain by one link per
step, then feeds the base value into the innermost continuation. Links fire from the
innermost outwards, the mirror image of the descent.

Two evaluation modes exist:

- direct: every step and every continuation invocation is a Python call in tail
  position. CPython does not eliminate tail calls, so physical stack grows linearly
  with the input and deep problems end in `StackExhaustionError`.
- trampolined: the descent runs on the engine loop and the chain is unwound with
  `Continuation.resume`, an iterative walk over the links, so stack use is constant.


File: continuation.py
Author: Chris Rowles <christopher.rowles@outlook.com>
Copyright: © 2025 Chris Rowles. All rights reserved.
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging

from typing import Any, Callable, NamedTuple

from tailcall.engine import Trampoline
from tailcall.exceptions import StackExhaustionError


logger = logging.getLogger(__name__)


class Continuation:
    """
    One link of a continuation chain.

    Calling a continuation applies `combine` to the sub-result and forwards the
    combined value to `outer`. A link without `outer` ends the chain.
    """
    __slots__ = ("combine", "outer", "_length")

    def __init__(self, combine: Callable[[Any], Any] | None = None, outer: Continuation | None = None):
        self.combine = combine
        self.outer = outer
        self._length = 0 if outer is None else len(outer) + 1

    @classmethod
    def lift(cls, func) -> Continuation:
        """Wrap a plain callable as the terminal link of a chain."""
        if isinstance(func, Continuation):
            return func
        if not callable(func):
            raise TypeError(f"Continuation expects a callable, got {type(func).__name__}")
        return cls(func)

    def extend(self, combine: Callable[[Any], Any]) -> Continuation:
        """Return a new inner link whose result is forwarded to this one."""
        return Continuation(combine, self)

    def __len__(self) -> int:
        return self._length

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"Continuation(links={self._length})"

    def __call__(self, result):
        value = result if self.combine is None else self.combine(result)
        if self.outer is None:
            return value
        return self.outer(value)

    def resume(self, result):
        """
        Unwind the chain iteratively, feeding `result` into the innermost link.
        """
        k = self
        while k is not None:
            if k.combine is not None:
                result = k.combine(result)
            k = k.outer
        return result


IDENTITY = Continuation()


def identity() -> Continuation:
    """Return the identity continuation."""
    return IDENTITY


class BaseCase(NamedTuple):
    """Base case of a CPS problem: when to stop and which value to start from."""
    test: Callable[[Any], bool]
    value: Callable[[Any], Any]


def _descend(state, k, transition_cps, base_case):
    if base_case.test(state):
        return k(base_case.value(state))
    next_state, next_k = transition_cps(state, k)
    return _descend(next_state, next_k, transition_cps, base_case)


def run_cps(state, transition_cps, base_case: BaseCase, identity_continuation=IDENTITY, *, trampolined=False):
    """
    Evaluate a problem in continuation-passing style.

    Parameters:
        state: The initial state, e.g. `n` for factorial.
        transition_cps (Callable): `(state, k) -> (next_state, next_k)`; builds the
            continuation holding this step's pending work.
        base_case (BaseCase): Stop test and base value.
        identity_continuation: The outermost continuation; plain callables are lifted.
        trampolined (bool): Run in constant stack instead of native recursion.

    Returns:
        The value produced by the outermost continuation.

    Raises:
        StackExhaustionError: In direct mode, when the problem is deeper than the
            interpreter stack allows.
    """
    k = Continuation.lift(identity_continuation)
    logger.debug("CPS run from %r (trampolined=%s)", state, trampolined)
    if trampolined:
        return _run_cps_trampolined(state, k, transition_cps, base_case)

    try:
        return _descend(state, k, transition_cps, base_case)
    except StackExhaustionError:
        raise
    except RecursionError as e:
        raise StackExhaustionError("run_cps", state) from e


def _run_cps_trampolined(state, k, transition_cps, base_case):
    def step(pair):
        return transition_cps(*pair)

    def finish(pair):
        final_state, chain = pair
        if not isinstance(chain, Continuation):
            raise TypeError(
                f"Trampolined CPS needs Continuation links, got {type(chain).__name__}"
            )
        return chain.resume(base_case.value(final_state))

    engine = Trampoline(step, lambda pair: base_case.test(pair[0]), finish)
    return engine.run((state, k))
