"""
Tests for continuation-passing evaluation.
"""
import pytest

from tailcall.continuation import IDENTITY, BaseCase, Continuation, identity, run_cps
from tailcall.engine import run
from tailcall.exceptions import StackExhaustionError
from tailcall.factorial import FactorialMachine

FACTORIAL_BASE = BaseCase(lambda n: n <= 1, lambda n: 1)


def multiply_step(n, k):
    return n - 1, k.extend(lambda sub, n=n: n * sub)


def recording_problem(log: list):
    """
    Factorial in CPS, logging every multiplication operand as it fires.
    """
    def step(n, k):
        def combine(sub):
            log.append(n)
            return n * sub
        return n - 1, k.extend(combine)

    def base_value(n):
        log.append(1)
        return 1

    return step, BaseCase(lambda n: n <= 1, base_value)


@pytest.mark.parametrize("trampolined", [False, True])
def test_cps_matches_engine(trampolined):
    machine = FactorialMachine()
    expected = run(machine.initial(5), machine.step, machine.is_done, machine.result)
    result = run_cps(5, multiply_step, FACTORIAL_BASE, IDENTITY, trampolined=trampolined)
    assert result == expected == 120


@pytest.mark.parametrize("trampolined", [False, True])
def test_continuations_fire_base_first_then_reverse_construction(trampolined):
    """
    The base case fires first, then the link built last, out to the one built first.
    """
    log = []
    step, base_case = recording_problem(log)
    assert run_cps(5, step, base_case, identity(), trampolined=trampolined) == 120
    assert log == [1, 2, 3, 4, 5]


@pytest.mark.parametrize("n", [0, 1])
def test_base_case_input_calls_identity_directly(n):
    calls = []

    def outer(result):
        calls.append(result)
        return result

    assert run_cps(n, multiply_step, FACTORIAL_BASE, outer) == 1
    assert calls == [1]


def test_chain_length_equals_transition_steps():
    lengths = []

    def base_value(n):
        return 1

    def step(n, k):
        next_k = k.extend(lambda sub: n * sub)
        lengths.append(len(next_k))
        return n - 1, next_k

    run_cps(6, step, BaseCase(lambda n: n <= 1, base_value))
    assert lengths == [1, 2, 3, 4, 5]


def test_plain_callable_outer_continuation_receives_final_value():
    received = []
    result = run_cps(4, multiply_step, FACTORIAL_BASE, lambda v: received.append(v) or v * 10)
    assert received == [24]
    assert result == 240


def test_direct_mode_exhausts_stack_for_deep_input():
    with pytest.raises(StackExhaustionError) as excinfo:
        run_cps(100_000, multiply_step, FACTORIAL_BASE)
    assert excinfo.value.strategy == "run_cps"
    assert isinstance(excinfo.value, RecursionError)


def test_trampolined_mode_handles_deep_input():
    result = run_cps(
        100_000,
        lambda n, k: (n - 1, k.extend(lambda sub: sub + 1)),
        BaseCase(lambda n: n == 0, lambda n: 0),
        trampolined=True,
    )
    assert result == 100_000


def test_trampolined_mode_requires_continuation_links():
    def bad_step(n, k):
        return n - 1, (lambda sub: k(n * sub))

    with pytest.raises(TypeError, match="Continuation links"):
        run_cps(3, bad_step, FACTORIAL_BASE, trampolined=True)


def test_direct_mode_accepts_plain_callable_links():
    def step(n, k):
        return n - 1, (lambda sub: k(n * sub))

    assert run_cps(5, step, FACTORIAL_BASE) == 120


def test_resume_and_call_agree():
    chain = IDENTITY.extend(lambda x: x + 1).extend(lambda x: x * 2)
    assert len(chain) == 2
    assert chain(5) == chain.resume(5) == 11


def test_identity_returns_input():
    assert IDENTITY(42) == 42
    assert IDENTITY.resume("x") == "x"
    assert len(IDENTITY) == 0


def test_lift():
    assert Continuation.lift(IDENTITY) is IDENTITY
    lifted = Continuation.lift(str)
    assert lifted(3) == "3"
    with pytest.raises(TypeError):
        Continuation.lift(3)


def test_chain_is_released_after_run():
    """
    The chain is only referenced during the run; nothing is retained on the identity.
    """
    run_cps(10, multiply_step, FACTORIAL_BASE)
    assert IDENTITY.outer is None
    assert len(IDENTITY) == 0


def test_continuations_are_truthy_regardless_of_length():
    lifted = Continuation.lift(str)
    assert len(IDENTITY) == 0 and bool(IDENTITY)
    assert len(lifted) == 0 and bool(lifted)
    assert (lifted or IDENTITY) is lifted
