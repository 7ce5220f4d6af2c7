"""Parser for the Asa language.

The parser is a backtracking recursive-descent parser written directly
against the source text; there is no separate tokenizer. A `Parser` holds
the immutable source and a cursor (`pos`). Grammar productions are the
`parse_*` methods and are composed with a handful of combinators:

* `tag`, `one_of`, `take_while` / `take_while1` and `skip` match raw text.
* `choice` is ordered choice: alternatives are tried in the listed order
  and the first one that matches wins.
* `many0`, `many1` and `optional` repeat or optionally apply a production.

A production that fails raises `ParseError`. The combinators restore the
cursor to where the failed attempt started, so a failed alternative never
consumes input. `FatalParseError` is not caught by the combinators and
aborts the whole parse.

Arithmetic uses a four level precedence ladder, lowest binding first:
`+ -`, then `* /`, then `^`, then atoms (calls, numbers, identifiers and
parenthesised expressions). Every level folds its operators to the left,
including `^`, so `2 ^ 3 ^ 2` is `(2 ^ 3) ^ 2`.

`parse` returns the `Program` together with whatever input was left
unparsed; `parse_program` treats leftover input as an error.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from .ast import (
    Program, FunctionDefine, FunctionArguments, FunctionCall, FunctionReturn,
    Statement, Expression, VariableDefine, MathExpression, ComparisonExpression,
    Identifier, Number, String, Bool, IfStatement, ElseStatement, ElseIfStatement,
    Node,
)
from .errors import ParseError, FatalParseError
from .types import I32_MIN, I32_MAX


SPACES = ' '
BLANKS = ' \t\r\n'

COMPARISON_OPERATORS = ('==', '!=', '<=', '>=', '<', '>')

Production = Callable[[], Any]


def is_alphanumeric(c: str) -> bool:
    return c.isascii() and c.isalnum()


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def is_string_char(c: str) -> bool:
    return is_alphanumeric(c) or c == ' '


def describe(production: Production) -> str:
    """Human readable name of a production, used in error messages."""
    name = getattr(production, '__name__', 'input')
    if name.startswith('parse_'):
        name = name[len('parse_'):]
    return name.replace('_', ' ')


class Parser:
    def __init__(self, source: str):
        self.source = source
        self.pos = 0

    @property
    def remaining(self) -> str:
        return self.source[self.pos:]

    def fail(self, expected: str) -> ParseError:
        return ParseError(f"expected {expected}", self.source, self.pos)

    # Text matchers

    def tag(self, literal: str) -> str:
        if self.source.startswith(literal, self.pos):
            self.pos += len(literal)
            return literal
        raise self.fail(repr(literal))

    def one_of(self, *literals: str) -> str:
        for literal in literals:
            if self.source.startswith(literal, self.pos):
                self.pos += len(literal)
                return literal
        raise self.fail('one of ' + ', '.join(repr(l) for l in literals))

    def take_while(self, predicate: Callable[[str], bool]) -> str:
        start = self.pos
        length = len(self.source)
        while self.pos < length and predicate(self.source[self.pos]):
            self.pos += 1
        return self.source[start:self.pos]

    def take_while1(self, predicate: Callable[[str], bool], expected: str) -> str:
        text = self.take_while(predicate)
        if not text:
            raise self.fail(expected)
        return text

    def skip(self, chars: str = SPACES) -> None:
        self.take_while(lambda c: c in chars)

    def skip1(self, chars: str = SPACES) -> None:
        self.take_while1(lambda c: c in chars, 'whitespace')

    # Combinators

    def attempt(self, production: Production) -> Any:
        start = self.pos
        try:
            return production()
        except ParseError:
            self.pos = start
            raise

    def choice(self, *productions: Production) -> Any:
        start = self.pos
        for production in productions:
            try:
                return production()
            except FatalParseError:
                raise
            except ParseError:
                self.pos = start
        expected = ' or '.join(describe(p) for p in productions)
        raise ParseError(f"expected {expected}", self.source, start)

    def many0(self, production: Production) -> List[Any]:
        items: List[Any] = []
        while True:
            start = self.pos
            try:
                item = production()
            except FatalParseError:
                raise
            except ParseError:
                self.pos = start
                return items
            if self.pos == start:
                # an empty match would repeat forever
                return items
            items.append(item)

    def many1(self, production: Production) -> List[Any]:
        first = self.attempt(production)
        return [first] + self.many0(production)

    def optional(self, production: Production) -> Optional[Any]:
        try:
            return self.attempt(production)
        except FatalParseError:
            raise
        except ParseError:
            return None

    # Program structure

    def parse_program(self) -> Program:
        self.skip(BLANKS)
        children = self.many1(self.parse_top_level)
        self.skip(BLANKS)
        return Program(children)

    def parse_top_level(self) -> Node:
        return self.choice(
            self.parse_function_definition,
            self.parse_statement,
            self.parse_expression,
        )

    def parse_function_definition(self) -> FunctionDefine:
        self.tag('fn')
        self.skip1()
        name = self.parse_identifier()
        self.skip()
        self.tag('(')
        self.skip()
        arguments = self.optional(self.parse_arguments)
        self.skip()
        self.tag(')')
        self.skip()
        self.tag('{')
        self.skip(BLANKS)
        statements = self.many1(self.parse_statement)
        self.skip(BLANKS)
        self.tag('}')
        self.skip(BLANKS)
        children: List[Node] = [name]
        if arguments is not None:
            children.append(arguments)
        children.extend(statements)
        return FunctionDefine(children)

    def parse_arguments(self) -> FunctionArguments:
        first = self.parse_expression()
        others = self.many0(self.parse_other_argument)
        return FunctionArguments([first] + others)

    def parse_other_argument(self) -> Expression:
        self.skip()
        self.tag(',')
        self.skip()
        return self.parse_expression()

    # Statements

    def parse_statement(self) -> Statement:
        self.skip(BLANKS)
        node = self.choice(
            self.parse_variable_define,
            self.parse_function_return,
            self.parse_else_if_statement,
            self.parse_else_statement,
            self.parse_if_statement,
        )
        self.skip()
        self.tag(';')
        self.skip(BLANKS)
        return Statement([node])

    def parse_variable_define(self) -> VariableDefine:
        self.tag('let')
        self.skip1()
        name = self.parse_identifier()
        self.skip()
        self.tag('=')
        self.skip()
        value = self.parse_expression()
        return VariableDefine([name, value])

    def parse_function_return(self) -> FunctionReturn:
        self.tag('return')
        self.skip1()
        value = self.choice(
            self.parse_function_call,
            self.parse_expression,
            self.parse_identifier,
        )
        return FunctionReturn([value])

    def parse_block(self) -> Statement:
        """Braced body of a conditional; the statements share one Statement node."""
        self.tag('{')
        self.skip(BLANKS)
        statements = self.many0(self.parse_statement)
        self.skip(BLANKS)
        self.tag('}')
        return Statement(statements)

    def parse_if_statement(self) -> IfStatement:
        self.tag('if')
        self.skip1()
        condition = self.parse_comparison()
        self.skip()
        body = self.parse_block()
        return IfStatement([condition, body])

    def parse_else_statement(self) -> ElseStatement:
        self.tag('else')
        self.skip()
        body = self.parse_block()
        return ElseStatement([body])

    def parse_else_if_statement(self) -> ElseIfStatement:
        self.tag('else')
        self.skip1()
        self.tag('if')
        self.skip1()
        condition = self.parse_comparison()
        self.skip()
        body = self.parse_block()
        return ElseIfStatement([condition, body])

    # Expressions

    def parse_expression(self) -> Expression:
        # booleans go before identifiers and comparisons before arithmetic,
        # otherwise `true` reads as a name and `a < b` stops after `a`
        node = self.choice(
            self.parse_boolean,
            self.parse_comparison,
            self.parse_math_expression,
            self.parse_function_call,
            self.parse_number,
            self.parse_string,
            self.parse_identifier,
        )
        return Expression([node])

    def parse_comparison(self) -> ComparisonExpression:
        left = self.parse_value()
        self.skip()
        operator = self.one_of(*COMPARISON_OPERATORS)
        self.skip()
        right = self.parse_value()
        return ComparisonExpression(operator, [left, right])

    def parse_value(self) -> Node:
        node = self.choice(self.parse_boolean, self.parse_number, self.parse_identifier)
        self.skip()
        return node

    def parse_math_expression(self) -> Node:
        return self.parse_level1()

    def fold_left(self, head: Node, operators: Tuple[str, ...], operand: Production) -> Node:
        def infix() -> Tuple[str, Node]:
            self.skip()
            operator = self.one_of(*operators)
            self.skip()
            return operator, operand()

        for operator, right in self.many0(infix):
            head = MathExpression(operator, [head, right])
        return head

    def parse_level1(self) -> Node:
        return self.fold_left(self.parse_level2(), ('+', '-'), self.parse_level2)

    def parse_level2(self) -> Node:
        return self.fold_left(self.parse_level3(), ('*', '/'), self.parse_level3)

    def parse_level3(self) -> Node:
        return self.fold_left(self.parse_level4(), ('^',), self.parse_level4)

    def parse_level4(self) -> Node:
        return self.choice(
            self.parse_function_call,
            self.parse_number,
            self.parse_identifier,
            self.parse_parenthetical_expression,
        )

    def parse_parenthetical_expression(self) -> Node:
        self.skip()
        self.tag('(')
        self.skip()
        inner = self.parse_level1()
        self.skip()
        self.tag(')')
        self.skip()
        return inner

    def parse_function_call(self) -> FunctionCall:
        name = self.take_while1(is_alphanumeric, 'function name')
        self.tag('(')
        self.skip()
        arguments = self.optional(self.parse_arguments)
        self.skip()
        self.tag(')')
        return FunctionCall(name, [arguments] if arguments is not None else [])

    # Literals

    def parse_identifier(self) -> Identifier:
        return Identifier(self.take_while1(is_alphanumeric, 'identifier'))

    def parse_number(self) -> Number:
        start = self.pos
        digits = self.take_while1(is_digit, 'number')
        value = int(digits)
        if value < I32_MIN or value > I32_MAX:
            raise FatalParseError(f"number {digits} does not fit in a 32-bit integer", self.source, start)
        return Number(value)

    def parse_boolean(self) -> Bool:
        word = self.one_of('true', 'false')
        return Bool(word == 'true')

    def parse_string(self) -> String:
        self.tag('"')
        text = self.take_while(is_string_char)
        self.tag('"')
        return String(text)


def parse(source: str) -> Tuple[Program, str]:
    """Parse Asa source into a Program, returning it with the unparsed rest.

    Raises ParseError when not even one top level item matches, or when
    the input nests deeper than the interpreter's recursion limit.
    """
    parser = Parser(source)
    try:
        program = parser.parse_program()
    except RecursionError:
        raise ParseError('input nested too deeply', source, parser.pos)
    return program, parser.remaining


def parse_program(source: str) -> Program:
    """Parse Asa source code into an AST Program.

    Unlike `parse`, the whole input must be consumed; leftover text is
    reported as a ParseError pointing at the first unparsed character.
    """
    program, remaining = parse(source)
    if remaining:
        raise ParseError('unexpected trailing input', source, len(source) - len(remaining))
    return program
