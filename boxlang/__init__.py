# BoxLang package
# This package provides the lexer, parser and interpreter for the BoxLang scripting language.
from .errors import BoxError, LexError, ParseError, EvalError
from .interpreter import run_program, run_file, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'BoxError',
    'LexError',
    'ParseError',
    'EvalError',
]
