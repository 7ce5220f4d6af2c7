"""Tree-walking interpreter for the Asa language.

The interpreter evaluates AST nodes produced by `asalang.parser` directly.
Its state is a function table, mapping each function name to the body it
was defined with, and a call stack holding one frame of variables per
active call. Both belong to one `Interpreter` instance and every
evaluation goes through its `run` method.

A program is executed in two steps: running the `Program` node registers
the function definitions (and turns a top level expression or statement
into an implicit `main` function), then `main` is called with no
arguments. `execute` does both.

Runtime failures are raised as `AsaError` and are never caught here; the
frame of every call they pass through is popped on the way out.
"""

from __future__ import annotations

from typing import Dict, List, Optional, TextIO

from .ast import (
    Program, FunctionDefine, FunctionArguments, FunctionCall, FunctionReturn,
    Statement, Expression, VariableDefine, MathExpression, ComparisonExpression,
    Identifier, Number, String, Bool, Node,
)
from .environment import CallStack, Frame
from .errors import AsaError
from .parser import parse_program
from .types import (
    NumberVal, StringVal, BoolVal, ErrorVal, Value,
    check_i32, int_divide, int_power, type_name,
)


# Child kinds an Expression node may wrap
EXPRESSION_KINDS = (
    ComparisonExpression, MathExpression, Number, FunctionCall, String, Bool, Identifier,
)

# Child kinds a Statement node may wrap
STATEMENT_KINDS = (VariableDefine, FunctionReturn)


def structure_error(message: str) -> AsaError:
    return AsaError(ErrorVal('StructureError', message))


def call_depth_error() -> AsaError:
    return AsaError(ErrorVal('RuntimeError', 'maximum call depth exceeded'))


class Interpreter:
    """Core interpreter that executes an Asa AST."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.functions: Dict[str, List[Node]] = {}
        self.stack = CallStack()
        self.debug_level = debug_level
        self.debug_fp: Optional[TextIO] = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def __enter__(self) -> 'Interpreter':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    def debug(self, msg: str, level: int = 1):
        if self.debug_level >= level:
            indent = '  ' * len(self.stack)
            if self.debug_fp:
                self.debug_fp.write(indent + msg + '\n')
                self.debug_fp.flush()

    # Public API
    def execute(self, program: Program) -> Value:
        """Register the program's functions, then call `main` and return its value."""
        try:
            self.run(program)
            return self.run(FunctionCall('main', []))
        except RecursionError:
            # trees loaded from JSON can nest deeper than any call chain
            raise call_depth_error()

    def run(self, node: Node) -> Value:
        self.debug(f"eval {type(node).__name__}", level=3)
        if isinstance(node, Program):
            return self.run_program(node)
        if isinstance(node, FunctionDefine):
            return self.define_function(node)
        if isinstance(node, FunctionCall):
            return self.call_function(node)
        if isinstance(node, FunctionReturn):
            return self.run(self.child(node, 0))
        if isinstance(node, Statement):
            statement = self.child(node, 0)
            if not isinstance(statement, STATEMENT_KINDS):
                raise structure_error(f"unknown statement: {type(statement).__name__}")
            return self.run(statement)
        if isinstance(node, VariableDefine):
            name = self.identifier_name(self.child(node, 0))
            value = self.run(self.child(node, 1))
            self.stack.top.set(name, value)
            self.debug(f"let {name} = {value!r}", level=2)
            return value
        if isinstance(node, Identifier):
            return self.stack.lookup(node.value)
        if isinstance(node, Expression):
            expression = self.child(node, 0)
            if not isinstance(expression, EXPRESSION_KINDS):
                raise structure_error(f"unknown expression: {type(expression).__name__}")
            return self.run(expression)
        if isinstance(node, MathExpression):
            return self.eval_math(node)
        if isinstance(node, ComparisonExpression):
            return self.eval_comparison(node)
        if isinstance(node, Number):
            return NumberVal(node.value)
        if isinstance(node, String):
            return StringVal(node.value)
        if isinstance(node, Bool):
            return BoolVal(node.value)
        # conditionals are parsed but have no evaluation rule
        raise structure_error(f'unhandled node: {type(node).__name__}')

    def run_program(self, program: Program) -> Value:
        for child in program.children:
            if isinstance(child, FunctionDefine):
                self.run(child)
            elif isinstance(child, Expression):
                self.functions['main'] = [FunctionReturn([child])]
                self.debug("define function main (implicit)", level=2)
            elif isinstance(child, Statement):
                self.functions['main'] = [child]
                self.debug("define function main (implicit)", level=2)
        return BoolVal(True)

    def define_function(self, node: FunctionDefine) -> Value:
        name = self.identifier_name(self.child(node, 0))
        self.functions[name] = list(node.children[1:])
        self.debug(f"define function {name}", level=2)
        return BoolVal(True)

    def call_function(self, node: FunctionCall) -> Value:
        body = self.functions.get(node.name)
        if body is None:
            raise AsaError(ErrorVal('NameError', f'undefined function: {node.name}'))
        actuals = node.children
        if actuals and isinstance(actuals[0], FunctionArguments):
            actuals = actuals[0].children
        statements = body
        frame = Frame()
        if body and isinstance(body[0], FunctionArguments):
            params = body[0].children
            statements = body[1:]
            for index, param in enumerate(params):
                if index >= len(actuals):
                    raise AsaError(ErrorVal(
                        'ArgumentError',
                        f'{node.name} expects {len(params)} arguments, got {len(actuals)}'))
                # evaluated in the caller's frame, before the callee's is pushed
                frame.set(self.parameter_name(param), self.run(actuals[index]))
        if not statements:
            raise structure_error(f'function {node.name} has an empty body')

        self.debug(f"call {node.name}({', '.join(f'{k}={v!r}' for k, v in frame.values.items())})")
        result: Optional[Value] = None
        with self.stack.push(frame):
            try:
                for statement in statements:
                    result = self.run(statement)
            except RecursionError:
                raise call_depth_error()
        self.debug(f"{node.name} returned {result!r}")
        return result

    def child(self, node: Node, index: int) -> Node:
        children = node.children
        if index >= len(children):
            raise structure_error(f'{type(node).__name__} is missing child {index}')
        return children[index]

    def identifier_name(self, node: Node) -> str:
        if isinstance(node, Identifier):
            return node.value
        raise structure_error(f'expected an identifier, got {type(node).__name__}')

    def parameter_name(self, node: Node) -> str:
        # formal parameters are parsed as expressions wrapping an identifier
        if isinstance(node, Expression) and len(node.children) == 1:
            node = node.children[0]
        if isinstance(node, Identifier):
            return node.value
        raise structure_error(f'invalid parameter: {type(node).__name__}')

    def eval_math(self, node: MathExpression) -> Value:
        lhs = self.run(self.child(node, 0))
        rhs = self.run(self.child(node, 1))
        if not isinstance(lhs, NumberVal) or not isinstance(rhs, NumberVal):
            raise AsaError(ErrorVal(
                'TypeError',
                f'cannot do math on non-numeric operands: {type_name(lhs)} {node.name} {type_name(rhs)}'))
        a, b = lhs.value, rhs.value
        try:
            if node.name == '+':
                return NumberVal(check_i32(a + b))
            if node.name == '-':
                return NumberVal(check_i32(a - b))
            if node.name == '*':
                return NumberVal(check_i32(a * b))
            if node.name == '/':
                return NumberVal(int_divide(a, b))
            if node.name == '^':
                return NumberVal(int_power(a, b))
        except ZeroDivisionError:
            raise AsaError(ErrorVal('RuntimeError', 'division by zero'))
        except OverflowError:
            raise AsaError(ErrorVal('RuntimeError', f'integer overflow in {a} {node.name} {b}'))
        except ValueError as e:
            raise AsaError(ErrorVal('RuntimeError', str(e)))
        raise AsaError(ErrorVal('OperatorError', f'undefined operator: {node.name}'))

    def eval_comparison(self, node: ComparisonExpression) -> Value:
        left = self.run(self.child(node, 0))
        right = self.run(self.child(node, 1))
        op = node.name
        if isinstance(left, NumberVal) and isinstance(right, NumberVal):
            a, b = left.value, right.value
            if op == '==':
                return BoolVal(a == b)
            if op == '!=':
                return BoolVal(a != b)
            if op == '<=':
                return BoolVal(a <= b)
            if op == '>=':
                return BoolVal(a >= b)
            if op == '<':
                return BoolVal(a < b)
            if op == '>':
                return BoolVal(a > b)
            raise AsaError(ErrorVal('OperatorError', f'undefined operator: {op}'))
        if isinstance(left, BoolVal) and isinstance(right, BoolVal):
            if op == '==':
                return BoolVal(left.value == right.value)
            if op == '!=':
                return BoolVal(left.value != right.value)
            raise AsaError(ErrorVal('TypeError', f'invalid comparison for booleans: {op}'))
        raise AsaError(ErrorVal(
            'TypeError',
            f'invalid comparison operands: {type_name(left)} {op} {type_name(right)}'))


def start_interpreter(program: Program, debug_level: int = 0) -> Value:
    """Execute a parsed program on a fresh interpreter and return `main`'s value."""
    with Interpreter(debug_level=debug_level) as interpreter:
        return interpreter.execute(program)


def run_program(source: str, debug_level: int = 0) -> Value:
    """Convenience function to parse and run an Asa program from a source string."""
    return start_interpreter(parse_program(source), debug_level=debug_level)
