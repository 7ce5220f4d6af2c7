"""CLI entry point for the Asa interpreter.

Usage:
    python -m asalang [-v|-vv|-vvv] <program_file>
    python -m asalang [-v...] -c <source>
    python -m asalang [-v...] --emit-ast <program_file>
    python -m asalang [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  -c SOURCE     Run the given source text instead of a file
  --tree        Print the parse tree as JSON before running
  --emit-ast    Parse the given .asa file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero. The value returned by `main` is printed.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import AsaError, ParseError
from .interpreter import Interpreter
from .parser import parse_program
from .types import to_string


def read_source(path_arg: str) -> str:
    program_file = Path(path_arg)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    with open(program_file, 'r', encoding='utf-8') as f:
        return f.read()


def parse_or_exit(source: str) -> Program:
    try:
        return parse_program(source)
    except ParseError as e:
        print(f"Parse error: {e.message}", file=sys.stderr)
        print(f"Unparsed text: {e.remaining!r}", file=sys.stderr)
        sys.exit(1)


def execute(ast_program: Program, debug_level: int) -> None:
    interpreter = Interpreter(debug_level=debug_level)
    try:
        result = interpreter.execute(ast_program)
    except AsaError as e:
        print(f"Runtime error: {e.err.name}: {e.err.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        interpreter.close()
    print(to_string(result))


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Asa language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--tree', action='store_true', help='print the parse tree as JSON before running')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('-c', metavar='SOURCE', dest='source', help='run SOURCE instead of a program file')
    group.add_argument('--emit-ast', metavar='ASA_FILE', help='emit AST JSON for the given .asa file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Asa program file (.asa) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        ast_program = parse_or_exit(read_source(args.emit_ast))
        obj = ast_to_obj(ast_program)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(obj, out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        if not ast_path.exists():
            print(f"Error: file {ast_path} not found", file=sys.stderr)
            sys.exit(1)
        with open(ast_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        try:
            ast_program = ast_from_obj(data)
        except (TypeError, ValueError) as e:
            print(f"Error: invalid AST file {args.ast}: {e}", file=sys.stderr)
            sys.exit(1)
        if not isinstance(ast_program, Program):
            print(f"Error: {args.ast} does not hold a Program", file=sys.stderr)
            sys.exit(1)
        execute(ast_program, args.v)
        return

    # Default: execute source text or file
    if args.source is not None:
        source = args.source
    elif args.program:
        source = read_source(args.program)
    else:
        parser.error('missing program file; or use -c/--emit-ast/--ast')
    ast_program = parse_or_exit(source)
    if args.tree:
        print(json.dumps(ast_to_obj(ast_program), indent=2))
    execute(ast_program, args.v)


if __name__ == '__main__':
    main()
