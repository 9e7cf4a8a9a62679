"""
Tests for the debug-trace variant of the engine.
"""
import logging

import pytest

from tailcall.engine import Trace, TraceEntry, Trampoline, run, run_traced
from tailcall.factorial import FactorialMachine, FactorialState


def _traced(n):
    machine = FactorialMachine()
    return run_traced(machine.initial(n), machine.step, machine.is_done, machine.result)


@pytest.mark.parametrize("n", [0, 1, 2, 5, 50])
def test_trace_length_is_steps_plus_one(n):
    outcome = _traced(n)
    assert len(outcome.trace) == outcome.steps + 1


def test_trace_records_every_state_in_order():
    outcome = _traced(4)
    assert outcome.trace.depths() == [0, 1, 2, 3]
    assert outcome.trace.states() == [
        FactorialState(4, 1),
        FactorialState(3, 4),
        FactorialState(2, 12),
        FactorialState(1, 24),
    ]
    assert outcome.trace[0] == TraceEntry(0, FactorialState(4, 1))
    assert outcome.trace[-1].state.accumulator == outcome.result


@pytest.mark.parametrize("n", [0, 1])
def test_boundary_trace_has_single_entry(n):
    outcome = _traced(n)
    assert outcome.result == 1
    assert outcome.steps == 0
    assert list(outcome.trace) == [TraceEntry(0, FactorialState(n, 1))]


@pytest.mark.parametrize("n", [0, 3, 20, 70, 500])
def test_trace_does_not_change_result(n):
    machine = FactorialMachine()
    plain = run(machine.initial(n), machine.step, machine.is_done, machine.result)
    assert _traced(n).result == plain


def test_traced_runs_are_idempotent():
    first = _traced(12)
    second = _traced(12)
    assert first.result == second.result
    assert first.trace == second.trace
    assert first.trace is not second.trace


def test_trace_flag_on_trampoline():
    machine = FactorialMachine()
    on = Trampoline(machine.step, machine.is_done, machine.result, trace=True)
    off = Trampoline(machine.step, machine.is_done, machine.result, trace=False)
    assert len(on.evaluate(machine.initial(6)).trace) == 6
    assert off.evaluate(machine.initial(6)).trace is None


def test_each_run_owns_its_trace():
    engine = FactorialMachine().engine(trace=True)
    short = engine.evaluate(FactorialState(2, 1))
    long = engine.evaluate(FactorialState(8, 1))
    assert len(short.trace) == 2
    assert len(long.trace) == 8


def test_trace_is_read_only():
    trace = _traced(3).trace
    assert not hasattr(trace, "append")
    with pytest.raises(TypeError):
        trace[0] = TraceEntry(0, None)
    with pytest.raises(AttributeError):
        trace[0].depth = 5


def test_trace_slice_returns_tuple():
    trace = _traced(5).trace
    head = trace[:2]
    assert isinstance(head, tuple)
    assert [entry.depth for entry in head] == [0, 1]


def test_traced_run_propagates_transition_error():
    engine = Trampoline(lambda n: n - 1 if n > 2 else 1 // 0, lambda n: n == 0, lambda n: n, trace=True)
    with pytest.raises(ZeroDivisionError):
        engine.evaluate(4)


def test_empty_trace():
    trace = Trace()
    assert len(trace) == 0
    assert trace.depths() == []
    assert trace == Trace()


def test_trace_entries_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="tailcall.engine")
    _traced(3)
    messages = [r.getMessage() for r in caplog.records]
    assert "depth=0 state=FactorialState(n=3, accumulator=1)" in messages
    assert "depth=2 state=FactorialState(n=1, accumulator=6)" in messages
