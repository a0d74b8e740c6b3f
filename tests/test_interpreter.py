import builtins

import pytest

from boxlang.ast import (
    ConditionalExpression, ObjectExpression, Property, BooleanLiteral,
    NumberLiteral, StringLiteral, Identifier,
)
from boxlang.errors import EvalError
from boxlang.interpreter import Interpreter, run_program
from boxlang.parser import parse_program
from boxlang.types import NULL, ArrayVal, ObjectVal, FunctionValue


def run(source):
    interp = Interpreter()
    interp.run(parse_program(source))
    return interp


def lookup(source, name):
    return run(source).global_env.lookup(name)


def fails_with(source, name):
    with pytest.raises(EvalError) as excinfo:
        run(source)
    assert excinfo.value.name == name
    return excinfo.value


def test_declare_then_read():
    assert lookup('box x = 5 end', 'x') == 5.0
    fails_with('box x = 5 end box x = 6 end', 'DuplicateDeclaration')


def test_assignment():
    assert lookup('box x = 5 end x = 6 end', 'x') == 6.0
    fails_with('noChange x = 5 end x = 6 end', 'ConstantViolation')
    fails_with('y = 1 end', 'UnknownVariable')


def test_declaration_without_initializer_is_null():
    assert lookup('box x end', 'x') == NULL


def test_array_element_assignment():
    interp = run('boxes a = [1,2,3] end a[1] = 9 end box b = a[1] end')
    assert interp.global_env.lookup('b') == 9.0
    fails_with('boxes a = [1,2,3] end box c = a[5] end', 'IndexOutOfBounds')
    fails_with('boxes a = [1,2,3] end a[3] = 0 end', 'IndexOutOfBounds')
    fails_with('boxes a = [1,2,3] end box c = a[-1] end', 'IndexOutOfBounds')


def test_arrays_are_shared_by_reference():
    interp = run('boxes a = [1, 2, 3] end box b = a end b[0] = 7 end')
    a = interp.global_env.lookup('a')
    b = interp.global_env.lookup('b')
    assert a is b
    assert a.items == [7.0, 2.0, 3.0]


def test_index_errors():
    fails_with('box n = 4 end box c = n[0] end', 'NotAnArray')
    fails_with('boxes a = [1] end box c = a["0"] end', 'IndexNotNumeric')
    fails_with('boxes a = [1, 2] end box c = a[0.5] end', 'IndexNotNumeric')


def test_for_gives_each_iteration_a_fresh_scope():
    interp = run('box total = 0 end for i = 1 to 3 doIt box y = i end total = total + y end end')
    assert interp.global_env.lookup('total') == 6.0
    assert 'i' not in interp.global_env.values


def test_while_body_shares_one_scope():
    fails_with('box i = 0 end while i < 3 doIt box y = i end i = i + 1 end end', 'DuplicateDeclaration')


def test_while_declaration_persists_after_loop():
    assert lookup('box go = true end while go doIt box seen = 1 end go = false end end', 'seen') == 1.0


def test_for_is_inclusive_and_bounds_evaluated_once():
    interp = run('box n = 2 end boxes hits = [0, 0, 0, 0] end for i = 0 to n doIt hits[i] = 1 end n = 3 end end')
    assert interp.global_env.lookup('hits').items == [1.0, 1.0, 1.0, 0.0]


def test_for_bounds_must_be_numbers():
    fails_with('for i = "a" to 3 doIt end', 'TypeMismatch')


def test_function_call_returns_last_statement():
    src = 'function add(a,b) doIt return a + b end end box r = add(2,3) end'
    assert lookup(src, 'r') == 5.0


def test_return_does_not_leave_the_function_early():
    # only the final statement's value is the result
    src = 'function f() doIt return 1 end return 2 end end box r = f() end'
    assert lookup(src, 'r') == 2.0
    src = 'function g() doIt return 1 end box after = 3 end end box r = g() end'
    assert lookup(src, 'r') == 3.0


def test_missing_arguments_are_null_and_extras_ignored():
    src = 'function pick(a, b) doIt return b end end box r1 = pick(1) end box r2 = pick(1, 2, 3) end'
    interp = run(src)
    assert interp.global_env.lookup('r1') == NULL
    assert interp.global_env.lookup('r2') == 2.0


def test_function_declaration_is_constant():
    fails_with('function f() doIt end f = 1 end', 'ConstantViolation')
    assert isinstance(lookup('function f() doIt end', 'f'), FunctionValue)


def test_calls_use_declaration_scope_not_caller_scope():
    src = (
        'box x = 1 end '
        'function readX() doIt return x end end '
        'function caller() doIt box x = 99 end return readX() end end '
        'box r = caller() end'
    )
    assert lookup(src, 'r') == 1.0


def test_returned_closure_outlives_its_call():
    src = (
        'function makeCounter() doIt '
        '  box count = 0 end '
        '  function next() doIt count = count + 1 end return count end end '
        '  return next end '
        'end '
        'box counter = makeCounter() end '
        'counter() counter() '
        'box r = counter() end'
    )
    assert lookup(src, 'r') == 3.0


def test_if_else():
    src = 'if 1 < 2 doIt box r = true end else doIt box r = false end end'
    assert lookup(src, 'r') is True
    src = 'ifNot 1 < 2 doIt box r = true end else doIt box r = false end end'
    assert lookup(src, 'r') is False


def test_if_without_else_yields_null():
    assert run_program('if false doIt box r = 1 end end') == NULL


def test_if_tolerates_non_boolean_conditions():
    assert lookup('box r = 0 end if 5 doIt r = 1 end end', 'r') == 1.0
    assert lookup('box r = 0 end if "" doIt r = 1 end end', 'r') == 0.0
    assert lookup('box r = 0 end if null doIt r = 1 end end', 'r') == 0.0


def test_while_requires_boolean():
    fails_with('while 1 doIt end', 'TypeMismatch')


def test_while_not_loop():
    assert lookup('box n = 3 end whileNot n == 0 doIt n = n - 1 end end', 'n') == 0.0


def test_division():
    fails_with('box r = 10 / 0 end', 'DivisionByZero')
    assert lookup('box r = 10 / 2 end', 'r') == 5.0
    assert lookup('box r = 7 divide 2 end', 'r') == 3.5


def test_keyword_operators_match_symbols():
    assert lookup('box r = 2 add 3 multiply 4 end', 'r') == 20.0
    assert lookup('box r = 10 subtract 4 end', 'r') == 6.0
    assert lookup('box r = (2 lessThan 3) end', 'r') is True
    assert lookup('box r = (3 greaterThanOrEquals 4) end', 'r') is False
    assert lookup('box r = (3 equals 3) end', 'r') is True
    assert lookup('box r = (3 is 4) end', 'r') is False
    assert lookup('box r = (3 notEqual 4) end', 'r') is True


def test_arithmetic_requires_numbers():
    fails_with('box r = "a" + 1 end', 'TypeMismatch')
    fails_with('box r = true * 2 end', 'TypeMismatch')


def test_comparisons_require_numbers():
    fails_with('box r = ("a" == "a") end', 'TypeMismatch')
    fails_with('if true < 1 doIt end', 'TypeMismatch')


def test_unary_minus():
    assert lookup('box r = -5 end', 'r') == -5.0
    assert lookup('box x = 2 end box r = 10 - -x end', 'r') == 12.0
    fails_with('box r = -"five" end', 'TypeMismatch')


def test_logical_operators():
    assert lookup('box r = (true and false) end', 'r') is False
    assert lookup('box r = (false or true) end', 'r') is True
    assert lookup('box r = not false end', 'r') is True
    fails_with('if 1 and true doIt end', 'TypeMismatch')
    fails_with('if true and 1 doIt end', 'TypeMismatch')
    fails_with('box r = not 0 end', 'TypeMismatch')


def test_logical_operators_short_circuit():
    # the right operand would fail with UnknownVariable if it were evaluated
    assert lookup('box r = (false and missing) end', 'r') is False
    assert lookup('box r = (true or missing) end', 'r') is True
    fails_with('box r = (true and missing) end', 'UnknownVariable')


def test_not_callable():
    fails_with('box x = 1 end x()', 'NotCallable')


def test_call_arguments_evaluated_left_to_right(capsys):
    src = (
        'function say(v) doIt print(v) return v end end '
        'function pair(a, b) doIt return a - b end end '
        'box r = pair(say(1), say(2)) end'
    )
    assert lookup(src, 'r') == -1.0
    assert capsys.readouterr().out == '1\n2\n'


def test_recursion():
    src = (
        'function fact(n) doIt '
        '  if n < 2 doIt box r = 1 end else box r = n * fact(n - 1) end end '
        '  return r end '
        'end '
        'box out = fact(6) end'
    )
    assert lookup(src, 'out') == 720.0


def test_unbounded_recursion_is_stack_overflow():
    fails_with('function f(n) doIt return f(n + 1) end end f(0)', 'StackOverflow')


def test_program_value_is_last_statement():
    assert run_program('box a = 1 end box b = 2 end') == 2.0
    assert run_program('') == NULL


def test_unsupported_node():
    interp = Interpreter()
    with pytest.raises(EvalError) as excinfo:
        interp.evaluate('not a node', interp.global_env)
    assert excinfo.value.name == 'UnsupportedNode'


def test_object_expression():
    interp = Interpreter()
    env = interp.global_env
    env.declare('size', 3.0)
    node = ObjectExpression([Property('name', StringLiteral('box')), Property('size')])
    value = interp.evaluate(node, env)
    assert isinstance(value, ObjectVal)
    assert value.properties == {'name': 'box', 'size': 3.0}


def test_conditional_expression():
    interp = Interpreter()
    env = interp.global_env
    node = ConditionalExpression(BooleanLiteral(False), NumberLiteral(1.0), NumberLiteral(2.0))
    assert interp.evaluate(node, env) == 2.0
    with pytest.raises(EvalError) as excinfo:
        interp.evaluate(ConditionalExpression(Identifier('null'), NumberLiteral(1.0), NumberLiteral(2.0)), env)
    assert excinfo.value.name == 'TypeMismatch'


def test_builtins_are_constant():
    fails_with('print = 1 end', 'ConstantViolation')
    fails_with('box length = 1 end', 'DuplicateDeclaration')


def test_length():
    assert lookup('boxes a = [4, 5, 6] end box n = length(a) end', 'n') == 3.0
    fails_with('box n = length(5) end', 'NotAnArray')
    fails_with('box n = length() end', 'ArityMismatch')


def test_time_is_non_decreasing():
    interp = run('box t1 = time() end box t2 = time() end')
    t1 = interp.global_env.lookup('t1')
    t2 = interp.global_env.lookup('t2')
    assert isinstance(t1, float)
    assert t2 >= t1
    fails_with('box t = time(1) end', 'ArityMismatch')


def test_print_formatting(capsys):
    run('boxes a = [1, 2.5, "x"] end print("n:", 3, true, null, a)')
    assert capsys.readouterr().out == 'n: 3 true null 1, 2.5, x\n'


def test_print_nested_arrays(capsys):
    run('boxes a = [[1, 2] 3] end print(a)')
    assert capsys.readouterr().out == '[1, 2], 3\n'


def test_input_reads_number(monkeypatch):
    prompts = []
    monkeypatch.setattr(builtins, 'input', lambda prompt='': prompts.append(prompt) or '42')
    assert lookup('box n = 0 end input("n", "How many?")', 'n') == 42.0
    assert prompts == ['How many? ']


def test_input_retries_until_number(monkeypatch, capsys):
    replies = iter(['abc', '7'])
    monkeypatch.setattr(builtins, 'input', lambda prompt='': next(replies))
    assert lookup('box n = 0 end input("n")', 'n') == 7.0
    assert "expected a number for variable 'n'" in capsys.readouterr().out


def test_input_reads_string(monkeypatch):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': 'Ada')
    assert lookup('box name = "" end input("name", "Name?")', 'name') == 'Ada'


def test_input_end_of_file_leaves_variable(monkeypatch):
    def no_input(prompt=''):
        raise EOFError
    monkeypatch.setattr(builtins, 'input', no_input)
    assert lookup('box n = 5 end input("n")', 'n') == 5.0


def test_input_errors(monkeypatch):
    monkeypatch.setattr(builtins, 'input', lambda prompt='': '1')
    fails_with('input("nope")', 'UnknownVariable')
    fails_with('noChange n = 0 end input("n")', 'ConstantViolation')
    fails_with('boxes a = [1] end input("a")', 'TypeMismatch')
    fails_with('box n = 0 end input(n)', 'TypeMismatch')
    fails_with('input()', 'ArityMismatch')


def test_closure_in_for_keeps_its_iteration_value():
    src = (
        'boxes fs = [0, 0, 0] end '
        'for i = 0 to 2 doIt function f() doIt return i end end fs[i] = f end end '
        'box g = fs[0] end box r0 = g() end '
        'box h = fs[2] end box r2 = h() end'
    )
    interp = run(src)
    assert interp.global_env.lookup('r0') == 0.0
    assert interp.global_env.lookup('r2') == 2.0


def test_closure_in_while_sees_final_shared_binding():
    src = (
        'box i = 0 end '
        'while i < 1 doIt function f() doIt return i end end i = i + 1 end end '
        'i = 5 end '
        'box r = f() end'
    )
    assert lookup(src, 'r') == 5.0


def test_debug_file_is_opened_only_by_run(tmp_path):
    debug_path = tmp_path / 'debug.txt'
    Interpreter(debug_level=1, debug_file=str(debug_path))
    assert not debug_path.exists()


def test_debug_file_collects_every_run(tmp_path, capsys):
    debug_path = tmp_path / 'debug.txt'
    interp = Interpreter(debug_level=2, debug_file=str(debug_path))
    interp.run(parse_program('box a = 1 end'))
    interp.run(parse_program('box b = 2 end'))
    assert capsys.readouterr().out == ''
    trace = debug_path.read_text(encoding='utf-8')
    assert 'declare variable a' in trace
    assert 'declare variable b' in trace
    assert trace.count('run program') == 2
