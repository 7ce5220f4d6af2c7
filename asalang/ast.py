"""Abstract Syntax Tree (AST) definitions for the Asa language.

The parser produces these nodes and the interpreter consumes them. There
is one class per node kind. Most kinds keep their sub-nodes in an ordered
`children` list; the operator nodes and the function call additionally
carry a `name`, and the leaves carry a `value`.

Layout of the composite nodes:

* `FunctionDefine.children`: the name `Identifier`, then an optional
  `FunctionArguments` listing the formal parameters, then the body
  `Statement` nodes.
* `FunctionCall.children`: empty, or a single `FunctionArguments` holding
  the actual argument expressions.
* `VariableDefine.children`: the target `Identifier` and the value
  `Expression`.
* `IfStatement` / `ElseIfStatement`: the `ComparisonExpression` followed
  by a `Statement` whose children are the body statements.
  `ElseStatement` only holds the body `Statement`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class FunctionDefine(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class FunctionArguments(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class FunctionCall(Node):
    name: str
    children: List[Node] = field(default_factory=list)


@dataclass
class FunctionReturn(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class Statement(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class Expression(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class VariableDefine(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class MathExpression(Node):
    name: str  # '+', '-', '*', '/' or '^'
    children: List[Node] = field(default_factory=list)


@dataclass
class ComparisonExpression(Node):
    name: str  # '==', '!=', '<=', '>=', '<' or '>'
    children: List[Node] = field(default_factory=list)


@dataclass
class Identifier(Node):
    value: str


@dataclass
class Number(Node):
    value: int


@dataclass
class String(Node):
    value: str


@dataclass
class Bool(Node):
    value: bool


@dataclass
class IfStatement(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class ElseStatement(Node):
    children: List[Node] = field(default_factory=list)


@dataclass
class ElseIfStatement(Node):
    children: List[Node] = field(default_factory=list)


NODE_TYPES = {
    cls.__name__: cls
    for cls in (
        Program, FunctionDefine, FunctionArguments, FunctionCall,
        FunctionReturn, Statement, Expression, VariableDefine,
        MathExpression, ComparisonExpression, Identifier, Number, String,
        Bool, IfStatement, ElseStatement, ElseIfStatement,
    )
}
