"""Tree-walking interpreter for BoxLang.

``Interpreter.evaluate`` is the single entry point: it dispatches on the
node class and returns a runtime value (see ``types.py``), mutating
environments along the way. Statements produce values too; a block's
value is the value of its last statement.

Scoping rules the rest of the language leans on:

* ``if`` branches and ``while`` bodies run in the scope they appear in,
  so a ``while`` body that declares a name fails on its second pass;
* every ``for`` iteration gets a fresh child scope holding the loop
  variable, so closures created in the body keep their own iteration's
  value;
* a call runs in a child of the function's declaration scope, never of
  the caller's scope.

``return`` evaluates its argument like any other statement and does not
leave the function early. A function's result is the value of the last
statement in its body, which is why ``return`` is only meaningful as the
final statement.
"""

from __future__ import annotations

import operator
from typing import Any, List, Optional, Tuple

from .ast import (
    Program, BlockStatement, VariableDeclaration, FunctionDeclaration,
    IfStatement, WhileStatement, ForStatement, ReturnStatement,
    Identifier, NumberLiteral, StringLiteral, BooleanLiteral,
    ArrayLiteral, ArrayAccess, ObjectExpression, BinaryExpression,
    ComparisonExpression, LogicalExpression, UnaryExpression,
    ConditionalExpression, AssignmentExpression, CallExpression, Node,
)
from .environment import Environment
from .errors import BoxError, EvalError
from .native_function import NativeFunction
from .parser import parse_program
from .std import populate_global_environment
from .std.console import Console
from .types import (
    NULL, ArrayVal, ObjectVal, FunctionValue,
    is_number, is_truthy, to_string, type_name,
)


# Both spellings of each operator map to one canonical symbol
ARITHMETIC_OPERATORS = {
    '+': '+', 'add': '+',
    '-': '-', 'subtract': '-',
    '*': '*', 'multiply': '*',
    '/': '/', 'divide': '/',
}

COMPARISON_OPERATORS = {
    '==': operator.eq, 'equals': operator.eq, 'is': operator.eq,
    '!=': operator.ne, '!': operator.ne, 'notEqual': operator.ne,
    '<': operator.lt, 'lessThan': operator.lt,
    '<=': operator.le, 'lessThanOrEquals': operator.le, 'lessThanOrEqual': operator.le,
    '>': operator.gt, 'greaterThan': operator.gt,
    '>=': operator.ge, 'greaterThanOrEquals': operator.ge, 'greaterThanOrEqual': operator.ge,
}

NEGATION_OPERATORS = {'-', 'subtract'}


class Interpreter:
    """Core interpreter that executes BoxLang ASTs."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt', console: Optional[Console] = None):
        self.global_env = Environment()
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp = None
        # the first run truncates the debug file, later runs append to it
        self.debug_mode = 'w'
        populate_global_environment(self.global_env, console)

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Any:
        if env is None:
            env = self.global_env
        if self.debug_level > 0:
            self.debug_fp = open(self.debug_file, self.debug_mode, encoding='utf-8')
            self.debug_mode = 'a'
        self.debug(f"run program ({len(program.body)} statements)")
        try:
            result = self.evaluate(program, env)
            self.debug(f"program finished -> {to_string(result)}")
            return result
        except RecursionError:
            self.debug('error: StackOverflow')
            raise EvalError('StackOverflow', 'maximum call depth exceeded')
        except BoxError as ex:
            self.debug(f"error: {ex}")
            raise
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None

    def execute_block(self, statements: List[Node], env: Environment) -> Any:
        result: Any = NULL
        for stmt in statements:
            result = self.evaluate(stmt, env)
        return result

    def evaluate(self, node: Node, env: Environment) -> Any:
        # Statements
        if isinstance(node, (Program, BlockStatement)):
            return self.execute_block(node.body, env)
        if isinstance(node, VariableDeclaration):
            value = self.evaluate(node.initializer, env) if node.initializer is not None else NULL
            env.declare(node.name, value, node.constant)
            if self.debug_level >= 2:
                kind = 'constant' if node.constant else 'variable'
                self.debug(f"declare {kind} {node.name}: {type_name(value)} = {to_string(value)}")
            return value
        if isinstance(node, FunctionDeclaration):
            func = FunctionValue(node.name, list(node.params), list(node.body.body), env)
            env.declare(node.name, func, is_const=True)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return func
        if isinstance(node, IfStatement):
            return self.execute_if(node, env)
        if isinstance(node, WhileStatement):
            return self.execute_while(node, env)
        if isinstance(node, ForStatement):
            return self.execute_for(node, env)
        if isinstance(node, ReturnStatement):
            return self.evaluate(node.argument, env) if node.argument is not None else NULL

        # Expressions
        if isinstance(node, NumberLiteral):
            return float(node.value)
        if isinstance(node, (StringLiteral, BooleanLiteral)):
            return node.value
        if isinstance(node, Identifier):
            return env.lookup(node.symbol)
        if isinstance(node, ArrayLiteral):
            return ArrayVal([self.evaluate(element, env) for element in node.elements])
        if isinstance(node, ObjectExpression):
            properties = {}
            for prop in node.properties:
                if prop.value is not None:
                    properties[prop.key] = self.evaluate(prop.value, env)
                else:
                    properties[prop.key] = env.lookup(prop.key)
            return ObjectVal(properties)
        if isinstance(node, ArrayAccess):
            array, index = self.index_target(node, env)
            return array.items[index]
        if isinstance(node, AssignmentExpression):
            return self.execute_assignment(node, env)
        if isinstance(node, BinaryExpression):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.operator, left, right)
        if isinstance(node, ComparisonExpression):
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.compare(node.operator, left, right)
        if isinstance(node, LogicalExpression):
            return self.evaluate_logical(node, env)
        if isinstance(node, UnaryExpression):
            operand = self.evaluate(node.argument, env)
            if node.operator not in NEGATION_OPERATORS:
                raise EvalError('UnknownOperator', f'unsupported unary operator {node.operator}')
            if not is_number(operand):
                raise EvalError('TypeMismatch', f'unary {node.operator} expects a Number, got {type_name(operand)}')
            return -operand
        if isinstance(node, ConditionalExpression):
            test = self.evaluate(node.test, env)
            if not isinstance(test, bool):
                raise EvalError('TypeMismatch', f'condition must be a Boolean, got {type_name(test)}')
            return self.evaluate(node.consequent if test else node.alternate, env)
        if isinstance(node, CallExpression):
            callee = self.evaluate(node.callee, env)
            args = [self.evaluate(arg, env) for arg in node.arguments]
            return self.call_function(callee, args, env)
        raise EvalError('UnsupportedNode', f'cannot evaluate node of type {type(node).__name__}')

    def execute_if(self, node: IfStatement, env: Environment) -> Any:
        test = self.evaluate(node.test, env)
        truthy = test if isinstance(test, bool) else is_truthy(test)
        if self.debug_level >= 3:
            self.debug(f"if condition {to_string(test)} -> {truthy}")
        if truthy:
            return self.execute_block(node.consequent.body, env)
        if node.alternate is not None:
            return self.execute_block(node.alternate.body, env)
        return NULL

    def execute_while(self, node: WhileStatement, env: Environment) -> Any:
        while True:
            test = self.evaluate(node.test, env)
            if not isinstance(test, bool):
                raise EvalError('TypeMismatch', f'while condition must be a Boolean, got {type_name(test)}')
            if self.debug_level >= 3:
                self.debug(f"while condition -> {to_string(test)}")
            if not test:
                return NULL
            # same scope every pass: declarations persist across iterations
            self.execute_block(node.body.body, env)

    def execute_for(self, node: ForStatement, env: Environment) -> Any:
        start = self.evaluate(node.start, env)
        end = self.evaluate(node.end, env)
        if not is_number(start) or not is_number(end):
            raise EvalError('TypeMismatch', f'for loop bounds must be Numbers, got {type_name(start)} and {type_name(end)}')
        counter = start
        while counter <= end:
            if self.debug_level >= 3:
                self.debug(f"for {node.loop_var} = {to_string(counter)}")
            loop_env = env.child_scope()
            loop_env.declare(node.loop_var, counter)
            self.execute_block(node.body.body, loop_env)
            counter += 1
        return NULL

    def execute_assignment(self, node: AssignmentExpression, env: Environment) -> Any:
        target = node.target
        if isinstance(target, ArrayAccess):
            array, index = self.index_target(target, env)
            value = self.evaluate(node.value, env)
            array.items[index] = value
            return value
        if isinstance(target, Identifier):
            value = self.evaluate(node.value, env)
            return env.assign(target.symbol, value)
        raise EvalError('TypeMismatch', f'invalid assignment target {type(target).__name__}')

    def index_target(self, node: ArrayAccess, env: Environment) -> Tuple[ArrayVal, int]:
        """Evaluate ``array[index]`` down to a checked (array, position) pair."""
        array = self.evaluate(node.array, env)
        index = self.evaluate(node.index, env)
        if not isinstance(array, ArrayVal):
            raise EvalError('NotAnArray', f'cannot index a value of type {type_name(array)}')
        if not is_number(index) or not index.is_integer():
            raise EvalError('IndexNotNumeric', f'array index must be a whole Number, got {to_string(index)}')
        position = int(index)
        if position < 0 or position >= len(array.items):
            raise EvalError('IndexOutOfBounds', f'array index {position} out of range for length {len(array.items)}')
        return array, position

    def evaluate_logical(self, node: LogicalExpression, env: Environment) -> Any:
        op = node.operator
        left = self.evaluate(node.left, env)
        self.require_boolean(op, left)
        if op == 'not':
            return not left
        if op == 'and':
            if not left:
                return False
        elif op == 'or':
            if left:
                return True
        else:
            raise EvalError('UnknownOperator', f'unsupported logical operator {op}')
        right = self.evaluate(node.right, env)
        self.require_boolean(op, right)
        return right

    def require_boolean(self, op: str, value: Any):
        if not isinstance(value, bool):
            raise EvalError('TypeMismatch', f"logical '{op}' requires Boolean operands, got {type_name(value)}")

    def call_function(self, func: Any, args: List[Any], env: Environment) -> Any:
        if isinstance(func, NativeFunction):
            # Check arity; None means variadic
            if func.arity is not None and len(args) != func.arity:
                raise EvalError('ArityMismatch', f"{func.name} expects {func.arity} arguments, got {len(args)}")
            if self.debug_level >= 4:
                self.debug(f"call native {func.name}({', '.join(to_string(a) for a in args)})")
            return func.fn(args, env)
        if isinstance(func, FunctionValue):
            if self.debug_level >= 4:
                self.debug(f"call {func.name}({', '.join(to_string(a) for a in args)})")
            call_env = func.closure.child_scope()
            # missing arguments are null, extra ones are dropped
            for i, param in enumerate(func.parameters):
                call_env.declare(param, args[i] if i < len(args) else NULL)
            return self.execute_block(func.body, call_env)
        raise EvalError('NotCallable', f'a value of type {type_name(func)} is not callable')

    def apply_binary_op(self, op: str, a: Any, b: Any) -> Any:
        if op in COMPARISON_OPERATORS:
            return self.compare(op, a, b)
        symbol = ARITHMETIC_OPERATORS.get(op)
        if symbol is None:
            raise EvalError('UnknownOperator', f'unknown operator {op}')
        if not is_number(a) or not is_number(b):
            raise EvalError('TypeMismatch', f'unsupported {op} for {type_name(a)} and {type_name(b)}')
        if symbol == '+':
            return a + b
        if symbol == '-':
            return a - b
        if symbol == '*':
            return a * b
        if b == 0:
            raise EvalError('DivisionByZero', 'division by zero')
        return a / b

    def compare(self, op: str, a: Any, b: Any) -> bool:
        fn = COMPARISON_OPERATORS.get(op)
        if fn is None:
            raise EvalError('UnknownOperator', f'unknown comparison operator {op}')
        if not is_number(a) or not is_number(b):
            raise EvalError('TypeMismatch', f'comparison {op} requires Numbers, got {type_name(a)} and {type_name(b)}')
        return fn(a, b)


def run_program(source: str, debug_level: int = 0) -> Any:
    """Convenience function to parse and run a BoxLang program from a source string."""
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    return interpreter.run(ast_program)


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and run a BoxLang file, returning the interpreter for inspection of its globals."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    ast_program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level)
    interpreter.run(ast_program)
    return interpreter
