"""Trampoline engine.

This is the loop that runs a logically recursive computation in constant stack. The
computation is described as data rather than as nested calls: an initial state, a
transition that produces the next state, a predicate that says when to stop, and an
extractor that turns the final state into a result.

1. Execution Model
A single `current` binding is seeded with the initial state. Each iteration tests the
termination predicate; if it holds the extracted result is returned, otherwise the
binding is replaced by `transition(current)`. Nothing is pushed on the Python call
stack per iteration, so the depth used by the engine never grows with the number of
steps.

2. Trace
When tracing is enabled every state visited, the initial one included, is appended to
a `Trace` as a `TraceEntry(depth, state)` before termination is tested. The trace is
write-only from the computation's point of view; it exists so that tooling can inspect
the "virtual stack depth" of a computation whose physical stack is constant. A finished
trace always holds `steps + 1` entries.

3. Iteration Budget
By default the engine loops until the predicate holds, forever if it never does. A
`max_steps` budget turns a runaway computation into an `IterationBudgetExceeded` error.

4. Error Handling
Exceptions raised by the transition, predicate or extractor propagate unchanged and
abort the loop at the current iteration. A transition may also return a `Failure`
outcome, which the engine raises as a terminal error instead of continuing. Arithmetic
overflow is never inspected here; it is the transition's business.


File: engine.py
Author: Chris Rowles <christopher.rowles@outlook.com>
Copyright: © 2025 Chris Rowles. All rights reserved.
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

import logging

from dataclasses import dataclass
from typing import Any, Callable, Iterator

from tailcall.exceptions import Failure, IterationBudgetExceeded


logger = logging.getLogger(__name__)

Transition = Callable[[Any], Any]
Predicate = Callable[[Any], bool]
Extractor = Callable[[Any], Any]


@dataclass(frozen=True)
class TraceEntry:
    """Snapshot of one visited state."""
    depth: int
    state: Any


class Trace:
    """
    Ordered, append-only record of the states visited by one run.

    Only the engine appends to a trace; callers get read-only sequence access.
    """
    __slots__ = ("_entries",)

    def __init__(self) -> None:
        self._entries: list[TraceEntry] = []

    def _record(self, state) -> TraceEntry:
        entry = TraceEntry(len(self._entries), state)
        self._entries.append(entry)
        return entry

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return tuple(self._entries[index])
        return self._entries[index]

    def __iter__(self) -> Iterator[TraceEntry]:
        return iter(self._entries)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Trace):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Trace({len(self._entries)} entries)"

    def depths(self) -> list[int]:
        """Return the depth of every entry, in order."""
        return [entry.depth for entry in self._entries]

    def states(self) -> list:
        """Return every recorded state, in order."""
        return [entry.state for entry in self._entries]


@dataclass(frozen=True)
class Run:
    """Outcome of a finished run."""
    result: Any
    steps: int
    trace: Trace | None = None


class Trampoline:
    """
    Configured engine that drives a state machine to completion.

    A `Trampoline` keeps no per-run state, so one instance can run any number of
    independent computations.
    """

    def __init__(
        self,
        transition: Transition,
        is_terminal: Predicate,
        extract: Extractor,
        trace: bool = False,
        max_steps: int | None = None,
    ):
        """
        Initialize the engine.

        Parameters:
            transition (Callable): Computes the next state from the current one.
            is_terminal (Callable): Returns True when the loop should stop.
            extract (Callable): Turns the final state into the result.
            trace (bool): Record every visited state into a `Trace`.
            max_steps (int | None): Optional cap on transition applications.
        """
        if max_steps is not None and max_steps < 0:
            raise ValueError(f"max_steps must be non-negative, got {max_steps}")
        self.transition = transition
        self.is_terminal = is_terminal
        self.extract = extract
        self.trace = trace
        self.max_steps = max_steps

    def __repr__(self) -> str:
        name = getattr(self.transition, "__name__", repr(self.transition))
        return f"Trampoline({name}, trace={self.trace}, max_steps={self.max_steps})"

    def run(self, initial_state):
        """
        Run to completion and return the extracted result.
        """
        seed = [initial_state]
        del initial_state
        return self._drive(seed).result

    def evaluate(self, initial_state) -> Run:
        """
        Run to completion and return the result with its step count and trace.

        Raises:
            IterationBudgetExceeded: If `max_steps` transitions were applied without
                reaching a terminal state.
            Exception: Whatever the transition, predicate or extractor raise, or the
                error carried by a returned `Failure`.
        """
        seed = [initial_state]
        del initial_state
        return self._drive(seed)

    def _drive(self, seed: list) -> Run:
        # Popping the seed leaves `current` as the only binding of the initial state.
        transition = self.transition
        is_terminal = self.is_terminal
        max_steps = self.max_steps
        trace = Trace() if self.trace else None
        verbose = trace is not None and logger.isEnabledFor(logging.DEBUG)

        current = seed.pop()
        logger.debug("Starting %r from %r", self, current)
        steps = 0
        while True:
            if trace is not None:
                entry = trace._record(current)  # pylint: disable=protected-access
                if verbose:
                    logger.debug("depth=%d state=%r", entry.depth, entry.state)

            if is_terminal(current):
                result = self.extract(current)
                logger.debug("Finished after %d steps", steps)
                return Run(result, steps, trace)

            if max_steps is not None and steps >= max_steps:
                raise IterationBudgetExceeded(max_steps, current)

            current = transition(current)
            if isinstance(current, Failure):
                logger.debug("Transition failed after %d steps: %r", steps, current.error)
                raise current.error
            steps += 1


def run(initial_state, transition, is_terminal, extract, *, max_steps=None):
    """
    Drive `transition` from `initial_state` until `is_terminal` holds.

    Returns:
        The value of `extract` applied to the first terminal state.
    """
    engine = Trampoline(transition, is_terminal, extract, max_steps=max_steps)
    seed = [initial_state]
    del initial_state
    return engine._drive(seed).result  # pylint: disable=protected-access


def run_traced(initial_state, transition, is_terminal, extract, *, max_steps=None) -> Run:
    """
    Same as `run`, recording every visited state.

    Returns:
        Run: The result, the number of transitions applied and the trace.
    """
    engine = Trampoline(transition, is_terminal, extract, trace=True, max_steps=max_steps)
    seed = [initial_state]
    del initial_state
    return engine._drive(seed)  # pylint: disable=protected-access
