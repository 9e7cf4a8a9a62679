"""Self tail calls on the trampoline engine.

A function written in tail-recursive form returns `jump(...)` where it would have
called itself in tail position. Decorated with `@trampolined`, it is driven by the
engine loop: each `jump` becomes the next state and the first non-`jump` return value
is the result. Stack use stays constant however many tail calls are made.

The decorated function also exposes `.native`, which resolves every `jump` with a real
Python call instead. That is the same function "compiled without tail-call
optimization" and it exhausts the stack for deep inputs.

Only self tail calls are handled; a `jump` always targets the decorated function.


File: decorators.py
Author: Chris Rowles <christopher.rowles@outlook.com>
Copyright: © 2025 Chris Rowles. All rights reserved.
Version: 0.1.0
License: MIT
"""

import functools

from tailcall.engine import Trampoline
from tailcall.exceptions import StackExhaustionError


class jump:  # pylint: disable=invalid-name
    """
    Tail-call marker carrying the arguments of the next call.

    Creating a `jump` does nothing by itself; it must be returned.
    """
    __slots__ = ("args", "kwargs")

    def __init__(self, *args, **kwargs):
        self.args = args
        self.kwargs = kwargs

    def __repr__(self) -> str:
        parts = [repr(a) for a in self.args]
        parts += [f"{k}={v!r}" for k, v in self.kwargs.items()]
        return f"jump({', '.join(parts)})"


def _is_result(value) -> bool:
    return not isinstance(value, jump)


def _identity(value):
    return value


def trampolined(func):
    """
    Decorate a tail-recursive function so it runs in constant stack.
    """
    def bounce(call: jump):
        return func(*call.args, **call.kwargs)

    engine = Trampoline(bounce, _is_result, _identity)

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        return engine.run(jump(*args, **kwargs))

    def native(*args, **kwargs):
        result = func(*args, **kwargs)
        if isinstance(result, jump):
            return native(*result.args, **result.kwargs)
        return result

    @functools.wraps(func)
    def native_entry(*args, **kwargs):
        try:
            return native(*args, **kwargs)
        except StackExhaustionError:
            raise
        except RecursionError as e:
            raise StackExhaustionError(func.__name__, args[0] if args else None) from e

    wrapper.native = native_entry
    wrapper.engine = engine
    return wrapper
