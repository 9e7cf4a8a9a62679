"""
Utility functions shared across tailcall tests.
"""
from pathlib import Path
import inspect
import math
import sys

from tailcall.factorial import FactorialMachine, FactorialState

# Ensure the project root is on the Python path
PROJECT_ROOT = Path(__file__).resolve().parents[2]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.append(str(PROJECT_ROOT))


def reference_factorial(n: int, bits: int = 64) -> int:
    """
    Exact factorial reduced to a fixed-width unsigned accumulator.
    """
    return math.factorial(n) % (2 ** bits)


def frame_depth() -> int:
    """
    Return the number of Python frames below the caller.
    """
    depth = 0
    frame = inspect.currentframe()
    while frame is not None:
        depth += 1
        frame = frame.f_back
    return depth


def depth_recording_machine(depths: list, machine: FactorialMachine | None = None, sample_every: int = 1):
    """
    Return factorial engine functions whose transition records the stack depth
    at every state whose countdown is a multiple of `sample_every`.
    """
    machine = machine if machine is not None else FactorialMachine()

    def step(state: FactorialState):
        if state.n % sample_every == 0:
            depths.append(frame_depth())
        return machine.step(state)

    return step, machine.is_done, machine.result
