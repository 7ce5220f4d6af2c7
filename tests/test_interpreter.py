import pytest

from asalang.ast import (
    Program, FunctionDefine, FunctionCall, Statement, Expression,
    MathExpression, IfStatement, ComparisonExpression, Identifier, Number,
)
from asalang.errors import AsaError
from asalang.interpreter import Interpreter, parse_program, run_program, start_interpreter
from asalang.types import NumberVal, StringVal, BoolVal


def run_error(source):
    with pytest.raises(AsaError) as exc:
        run_program(source)
    return exc.value.err


@pytest.mark.parametrize('source, expected', [
    ('123', NumberVal(123)),
    ('"hello world"', StringVal('hello world')),
    ('true', BoolVal(True)),
    ('false', BoolVal(False)),
    ('let x = 123;', NumberVal(123)),
    ('let x=1;', NumberVal(1)),
    ('let bool = true;', BoolVal(True)),
    ('let string = "Hello World";', StringVal('Hello World')),
    ('let x = 1 + 1;', NumberVal(2)),
])
def test_literals_and_variables(source, expected):
    assert run_program(source) == expected


@pytest.mark.parametrize('source, expected', [
    ('1 + 1', 2),
    ('1+1', 2),
    ('1 - 1', 0),
    ('3 - 10', -7),
    ('2 * 4', 8),
    ('6 / 2', 3),
    ('7 / 2', 3),
    ('(3 - 10) / 2', -3),
    ('2 ^ 4', 16),
    ('2 ^ 0', 1),
    ('0 ^ 0', 1),
    ('2 ^ 3 ^ 2', 64),
    ('10 + 2*6', 22),
    ('((10+2)*6)/4', 18),
    ('2 ^ 30', 1073741824),
])
def test_math(source, expected):
    assert run_program(source) == NumberVal(expected)


def test_division_by_zero_fails():
    err = run_error('5 / 0')
    assert err.name == 'RuntimeError'
    assert err.message == 'division by zero'


@pytest.mark.parametrize('source', ['2147483647 + 1', '2 ^ 31', '65536 * 65536', '0 - 2147483647 - 2'])
def test_overflow_fails(source):
    err = run_error(source)
    assert err.name == 'RuntimeError'
    assert err.message.startswith('integer overflow')


def test_math_on_non_numbers_fails():
    err = run_error('fn main() { let b = true; return b + 1; }')
    assert err.name == 'TypeError'
    assert err.message.startswith('cannot do math on non-numeric operands')


def test_negative_exponent_fails():
    program = Program([Expression([
        MathExpression('^', [Number(2), MathExpression('-', [Number(0), Number(1)])]),
    ])])
    with pytest.raises(AsaError) as exc:
        start_interpreter(program)
    assert exc.value.err.message == 'negative exponent'


def test_undefined_operator_fails():
    program = Program([Expression([MathExpression('%', [Number(7), Number(2)])])])
    with pytest.raises(AsaError) as exc:
        start_interpreter(program)
    assert exc.value.err.name == 'OperatorError'
    assert exc.value.err.message == 'undefined operator: %'


@pytest.mark.parametrize('source, expected', [
    ('2 < 3', True),
    ('2 <= 3', True),
    ('3 <= 3', True),
    ('2 > 3', False),
    ('2 >= 3', False),
    ('3 == 3', True),
    ('3 != 3', False),
    ('fn main() { return 2 < 3; }', True),
    ('fn main() { let a = true; let b = false; return a != b; }', True),
    ('fn main() { let a = false; return a == a; }', True),
])
def test_comparisons(source, expected):
    assert run_program(source) == BoolVal(expected)


def test_comparing_number_with_boolean_fails():
    err = run_error('1 > true')
    assert err.name == 'TypeError'
    assert err.message.startswith('invalid comparison operands')


def test_comparing_strings_fails():
    err = run_error('fn main() { let s = "hi"; return s == s; }')
    assert err.message.startswith('invalid comparison operands')


def test_ordering_booleans_fails():
    err = run_error('fn main() { let a = true; return a < a; }')
    assert err.message == 'invalid comparison for booleans: <'


def test_undefined_variable():
    err = run_error('x')
    assert err.name == 'NameError'
    assert err.message == 'undefined variable: x'


@pytest.mark.parametrize('source', ['foo()', 'foo(a)', 'foo(a,b,c)', 'let x = foo();', 'let x = foo(a,b,c);'])
def test_undefined_function(source):
    # arguments are never evaluated, so `a` does not fail first
    err = run_error(source)
    assert err.name == 'NameError'
    assert err.message == 'undefined function: foo'


def test_define_function():
    assert run_program('fn main(){return foo();} fn foo(){return 5;}') == NumberVal(5)


def test_define_function_args():
    assert run_program('fn main(){return foo(1,2,3);} fn foo(a,b,c){return a+b+c;}') == NumberVal(6)


def test_arguments_are_evaluated_in_callers_frame():
    source = 'fn main() { let x = 4; return double(x + 1); } fn double(n) { return n * 2; }'
    assert run_program(source) == NumberVal(10)


def test_same_names_in_different_frames_do_not_clash():
    source = (
        'fn main() { let x = 1; let y = inner(10); return x + y; }\n'
        'fn inner(x) { let y = x * 2; return y; }'
    )
    assert run_program(source) == NumberVal(21)


def test_callee_variables_do_not_leak_to_caller():
    err = run_error('fn main() { let a = helper(); return y; } fn helper() { let y = 3; return y; }')
    assert err.message == 'undefined variable: y'


def test_excess_arguments_are_ignored_and_not_evaluated():
    assert run_program('fn main() { return one(1, nope); } fn one(a) { return a; }') == NumberVal(1)


def test_missing_arguments_fail():
    err = run_error('fn main() { return two(1); } fn two(a, b) { return a + b; }')
    assert err.name == 'ArgumentError'
    assert err.message == 'two expects 2 arguments, got 1'


def test_parameter_must_be_an_identifier():
    err = run_error('fn f(1) { return 1; } fn main() { return f(2); }')
    assert err.name == 'StructureError'
    assert err.message == 'invalid parameter: Number'


def test_later_definition_overwrites_earlier():
    source = 'fn f() { return 1; } fn f() { return 2; } fn main() { return f(); }'
    assert run_program(source) == NumberVal(2)


def test_top_level_expression_replaces_main():
    assert run_program('fn main() { return 1; } 5') == NumberVal(5)


def test_return_does_not_exit_early():
    # a body evaluates to its last statement
    assert run_program('fn main() { return 1; let x = 2; }') == NumberVal(2)


def test_frames_are_released_after_failure():
    program = parse_program('fn main() { return a(); } fn a() { let v = 1; return b(v); } fn b(n) { return n / 0; }')
    interp = Interpreter()
    with pytest.raises(AsaError):
        interp.execute(program)
    assert len(interp.stack) == 0


def test_execute_is_repeatable():
    program = parse_program('fn main() { let x = 2; return sq(x); } fn sq(n) { return n ^ 2; }')
    interp = Interpreter()
    first = interp.execute(program)
    assert interp.execute(program) == first == NumberVal(4)
    assert start_interpreter(program) == first
    assert len(interp.stack) == 0


def test_program_returns_success_marker():
    interp = Interpreter()
    assert interp.run(parse_program('fn foo() { return 1; }')) == BoolVal(True)
    assert list(interp.functions) == ['foo']


def test_identifier_without_active_frame_fails():
    interp = Interpreter()
    with pytest.raises(AsaError) as exc:
        interp.run(Identifier('x'))
    assert exc.value.err.name == 'NameError'
    assert exc.value.err.message.startswith('undefined variable')


def test_if_statement_is_not_evaluated():
    interp = Interpreter()
    node = IfStatement([ComparisonExpression('<', [Number(1), Number(2)]), Statement([])])
    with pytest.raises(AsaError) as exc:
        interp.run(node)
    assert exc.value.err.message == 'unhandled node: IfStatement'


def test_statement_rejects_other_children():
    err = run_error('if 1 < 2 { return 1; };')
    assert err.name == 'StructureError'
    assert err.message == 'unknown statement: IfStatement'


def test_expression_rejects_other_children():
    interp = Interpreter()
    with pytest.raises(AsaError) as exc:
        interp.run(Expression([Program([])]))
    assert exc.value.err.message == 'unknown expression: Program'


def test_malformed_node_is_a_structure_error():
    interp = Interpreter()
    interp.run(Program([FunctionDefine([Identifier('main')])]))
    with pytest.raises(AsaError) as exc:
        interp.run(FunctionCall('main', []))
    assert exc.value.err.message == 'function main has an empty body'
    with pytest.raises(AsaError) as exc:
        interp.run(MathExpression('+', [Number(1)]))
    assert exc.value.err.name == 'StructureError'


def test_debug_log(tmp_path):
    log = tmp_path / 'debug.txt'
    program = parse_program('fn main() { return foo(1); } fn foo(a) { let b = a; return b; }')
    with Interpreter(debug_level=2, debug_file=str(log)) as interp:
        interp.execute(program)
    text = log.read_text(encoding='utf-8')
    assert 'define function foo' in text
    assert 'call foo(a=Number(1))' in text
    assert 'let b = Number(1)' in text
    assert 'main returned Number(1)' in text


def test_unbounded_recursion_is_a_runtime_error():
    program = parse_program('fn main() { return loop(1); } fn loop(n) { return loop(n + 1); }')
    interp = Interpreter()
    with pytest.raises(AsaError) as exc:
        interp.execute(program)
    assert exc.value.err.name == 'RuntimeError'
    assert exc.value.err.message == 'maximum call depth exceeded'
    assert len(interp.stack) == 0


def test_main_calling_itself_fails():
    err = run_error('fn main(){return main();}')
    assert err.message == 'maximum call depth exceeded'


def test_debug_output_stops_after_close(tmp_path, capsys):
    program = parse_program('fn main() { return 1; }')
    interp = Interpreter(debug_level=3, debug_file=str(tmp_path / 'debug.txt'))
    interp.close()
    assert interp.execute(program) == NumberVal(1)
    assert capsys.readouterr().out == ''
