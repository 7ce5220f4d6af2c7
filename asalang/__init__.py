# Asa language package
# This package provides a parser and tree-walking interpreter for the Asa language.
from .errors import AsaError, ParseError
from .interpreter import run_program, start_interpreter, Interpreter
from .parser import parse, parse_program
from .types import NumberVal, StringVal, BoolVal

__all__ = [
    'parse',
    'parse_program',
    'run_program',
    'start_interpreter',
    'Interpreter',
    'AsaError',
    'ParseError',
    'NumberVal',
    'StringVal',
    'BoolVal',
]
