import math
import time
from typing import Any, List, Optional

from boxlang.environment import Environment
from boxlang.errors import EvalError
from boxlang.native_function import NativeFunction
from boxlang.types import NULL, ArrayVal, is_number, to_string, type_name
from .console import Console

DEFAULT_PROMPT = 'Enter a value:'


def populate_global_environment(env: Environment, console: Optional[Console] = None) -> Environment:
    """Bind ``print``, ``input``, ``time``, ``length`` and ``null`` as constants in ``env``."""
    if console is None:
        console = Console()

    def std_print(args: List[Any], scope: Environment) -> Any:
        console.write_line(' '.join(to_string(a) for a in args))
        return NULL

    def std_input(args: List[Any], scope: Environment) -> Any:
        if len(args) not in (1, 2):
            raise EvalError('ArityMismatch', 'input(name, prompt) expects 1 or 2 arguments')
        name = args[0]
        if not isinstance(name, str):
            raise EvalError('TypeMismatch', 'input name argument must be a String')
        message = to_string(args[1]) if len(args) == 2 else DEFAULT_PROMPT
        current = scope.lookup(name)
        if is_number(current):
            while True:
                reply = console.prompt(message)
                if reply is None:
                    return NULL
                try:
                    value = float(reply.strip())
                except ValueError:
                    value = None
                if value is not None and math.isfinite(value):
                    break
                console.write_line(f"Error: expected a number for variable '{name}'. Please try again.")
        elif isinstance(current, str):
            value = console.prompt(message)
            if value is None:
                return NULL
        else:
            raise EvalError('TypeMismatch', f'input cannot read into {name} of type {type_name(current)}')
        scope.assign(name, value)
        return NULL

    def std_time(args: List[Any], scope: Environment) -> Any:
        return time.monotonic() * 1000.0

    def std_length(args: List[Any], scope: Environment) -> Any:
        if not isinstance(args[0], ArrayVal):
            raise EvalError('NotAnArray', f'length expects an Array, got {type_name(args[0])}')
        return float(len(args[0].items))

    env.declare('print', NativeFunction('print', None, std_print), is_const=True)
    env.declare('input', NativeFunction('input', None, std_input), is_const=True)
    env.declare('time', NativeFunction('time', 0, std_time), is_const=True)
    env.declare('length', NativeFunction('length', 1, std_length), is_const=True)
    env.declare('null', NULL, is_const=True)
    return env
