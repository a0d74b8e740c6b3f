"""CLI entry point for the BoxLang interpreter.

Usage:
    python -m boxlang [-v|-vv|-vvv|-vvvv] [--debug-file PATH] <program_file>
    python -m boxlang [-v...] --emit-ast <program_file>
    python -m boxlang [-v...] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  --debug-file  Where debug output goes (default: debug.txt)
  --emit-ast    Parse the given .box file and emit an AST JSON file
  --ast         Execute a previously emitted AST JSON file

Debug information is written to the debug file when verbosity is greater
than zero. Any lexing, parsing or runtime error is reported on stderr as
a single line and the process exits with status 1.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from .ast import Program
from .ast_json import ast_to_obj, ast_from_obj
from .errors import BoxError
from .interpreter import Interpreter
from .parser import parse_program


def read_source(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def execute(program: Program, debug_level: int, debug_file: str) -> None:
    interpreter = Interpreter(debug_level=debug_level, debug_file=debug_file)
    try:
        interpreter.run(program)
    except BoxError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(prog='boxlang', description="BoxLang interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('--debug-file', default='debug.txt', help='file that receives debug output')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='BOX_FILE', help='emit AST JSON for the given .box file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='BoxLang program file (.box) to execute')
    args = parser.parse_args(argv)

    # Emit AST mode
    if args.emit_ast:
        program_file = Path(args.emit_ast)
        source = read_source(program_file)
        try:
            ast_program = parse_program(source)
        except BoxError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        out_path = program_file.with_name(program_file.name + '.ast.json')
        with open(out_path, 'w', encoding='utf-8') as out:
            json.dump(ast_to_obj(ast_program), out, ensure_ascii=False, indent=2)
        print(str(out_path))
        return

    # Execute from AST JSON
    if args.ast:
        ast_path = Path(args.ast)
        source = read_source(ast_path)
        try:
            ast_program = ast_from_obj(json.loads(source))
        except (ValueError, TypeError) as e:
            print(f"Error: invalid AST file {ast_path}: {e}", file=sys.stderr)
            sys.exit(1)
        if not isinstance(ast_program, Program):
            print(f"Error: invalid AST file {ast_path}: top-level node is not a Program", file=sys.stderr)
            sys.exit(1)
        execute(ast_program, args.v, args.debug_file)
        return

    # Default: execute source file
    if not args.program:
        parser.error('missing program file; or use --emit-ast/--ast')
    source = read_source(Path(args.program))
    try:
        ast_program = parse_program(source)
    except BoxError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    execute(ast_program, args.v, args.debug_file)


if __name__ == '__main__':
    main()
