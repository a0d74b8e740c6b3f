"""Tokenizer for BoxLang.

``tokenize`` turns source text into a flat list of ``lark.Token``
objects ending with an ``EOF`` token. A token's ``type`` is its kind
(one of the upper-case names below) and its ``value`` is the literal
lexeme, so ``add`` and ``+`` share the kind ``PLUS`` but stay
distinguishable by text. String tokens carry their decoded contents.

Scanning order at each position:

1. ``#`` line comments and ``/* ... */`` block comments,
2. ``"`` string literals with the escapes ``\\n \\t \\" \\\\``,
3. the two-character operators ``== != <= >=``,
4. single-character operators and punctuation,
5. numbers (digits with at most one ``.``),
6. identifiers and keywords (a letter, then letters and digits),
7. whitespace.

Anything else is a ``LexError``.
"""

from __future__ import annotations

from typing import Dict, List

from lark import Token

from .errors import LexError


# Token kinds
PLUS = 'PLUS'
MINUS = 'MINUS'
MULTIPLY = 'MULTIPLY'
DIVIDE = 'DIVIDE'
EQUALS = 'EQUALS'
EQUALS_EQUALS = 'EQUALS_EQUALS'
NOT_EQUALS = 'NOT_EQUALS'
LESS_THAN = 'LESS_THAN'
LESS_THAN_OR_EQUALS = 'LESS_THAN_OR_EQUALS'
GREATER_THAN = 'GREATER_THAN'
GREATER_THAN_OR_EQUALS = 'GREATER_THAN_OR_EQUALS'
COMMA = 'COMMA'
OPEN_ARRAY = 'OPEN_ARRAY'
CLOSE_ARRAY = 'CLOSE_ARRAY'
BEGIN_BLOCK = 'BEGIN_BLOCK'
END_BLOCK = 'END_BLOCK'
BEGIN_PARAMS = 'BEGIN_PARAMS'
END_PARAMS = 'END_PARAMS'

BOX = 'BOX'
BOXES = 'BOXES'
NO_CHANGE = 'NO_CHANGE'
DO_IT = 'DO_IT'
END = 'END'
NOT = 'NOT'
AND = 'AND'
OR = 'OR'
IF = 'IF'
IF_NOT = 'IF_NOT'
ELSE = 'ELSE'
WHILE = 'WHILE'
WHILE_NOT = 'WHILE_NOT'
FOR = 'FOR'
TO = 'TO'
FUNCTION = 'FUNCTION'
RETURN = 'RETURN'

NUMBER = 'NUMBER'
STRING = 'STRING'
BOOLEAN = 'BOOLEAN'
IDENT = 'IDENT'
EOF = 'EOF'


KEYWORDS: Dict[str, str] = {
    'box': BOX,
    'boxes': BOXES,
    'noChange': NO_CHANGE,
    'doIt': DO_IT,
    'end': END,
    'true': BOOLEAN,
    'false': BOOLEAN,
    'not': NOT,
    'and': AND,
    'or': OR,
    'if': IF,
    'ifNot': IF_NOT,
    'else': ELSE,
    'while': WHILE,
    'whileNot': WHILE_NOT,
    'for': FOR,
    'to': TO,
    'function': FUNCTION,
    'return': RETURN,
    # word spellings of operators
    'add': PLUS,
    'subtract': MINUS,
    'multiply': MULTIPLY,
    'divide': DIVIDE,
    'equal': EQUALS,
    'equals': EQUALS_EQUALS,
    'is': EQUALS_EQUALS,
    'notEqual': NOT_EQUALS,
    'lessThan': LESS_THAN,
    'lessThanOrEquals': LESS_THAN_OR_EQUALS,
    'greaterThan': GREATER_THAN,
    'greaterThanOrEquals': GREATER_THAN_OR_EQUALS,
}

TWO_CHAR_OPERATORS: Dict[str, str] = {
    '==': EQUALS_EQUALS,
    '!=': NOT_EQUALS,
    '<=': LESS_THAN_OR_EQUALS,
    '>=': GREATER_THAN_OR_EQUALS,
}

SINGLE_CHAR_OPERATORS: Dict[str, str] = {
    '+': PLUS,
    '-': MINUS,
    '*': MULTIPLY,
    '/': DIVIDE,
    '=': EQUALS,
    ',': COMMA,
    '!': NOT_EQUALS,
    '[': OPEN_ARRAY,
    ']': CLOSE_ARRAY,
    '<': LESS_THAN,
    '>': GREATER_THAN,
    '{': BEGIN_BLOCK,
    '}': END_BLOCK,
    '(': BEGIN_PARAMS,
    ')': END_PARAMS,
    ';': END,
}

ESCAPES = {'n': '\n', 't': '\t', '"': '"', '\\': '\\'}


def is_letter(c: str) -> bool:
    return c.isascii() and c.isalpha()


def is_digit(c: str) -> bool:
    return '0' <= c <= '9'


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending in ``EOF``."""
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    length = len(source)

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            if i < length and source[i] == '\n':
                line += 1
                col = 1
            else:
                col += 1
            i += 1

    def emit(kind: str, text: str, start: int, start_line: int, start_col: int):
        tokens.append(Token(kind, text, start_pos=start, line=start_line, column=start_col,
                            end_line=line, end_column=col, end_pos=i))

    while i < length:
        c = source[i]
        start, start_line, start_col = i, line, col

        # Line comment
        if c == '#':
            while i < length and source[i] != '\n':
                advance()
            continue

        # Block comment
        if c == '/' and source[i + 1:i + 2] == '*':
            advance(2)
            while i < length and source[i:i + 2] != '*/':
                advance()
            if i >= length:
                raise LexError('UnterminatedComment', 'unterminated block comment', start_line, start_col)
            advance(2)
            continue

        # String literal
        if c == '"':
            advance()
            chars: List[str] = []
            while i < length and source[i] != '"':
                ch = source[i]
                if ch == '\\':
                    advance()
                    if i >= length:
                        break
                    escape = source[i]
                    if escape not in ESCAPES:
                        raise LexError('InvalidEscape', f"invalid escape sequence '\\{escape}'", line, col - 1)
                    chars.append(ESCAPES[escape])
                else:
                    chars.append(ch)
                advance()
            if i >= length:
                raise LexError('UnterminatedString', 'unterminated string literal', start_line, start_col)
            advance()  # closing quote
            emit(STRING, ''.join(chars), start, start_line, start_col)
            continue

        pair = source[i:i + 2]
        if pair in TWO_CHAR_OPERATORS:
            advance(2)
            emit(TWO_CHAR_OPERATORS[pair], pair, start, start_line, start_col)
            continue

        if c in SINGLE_CHAR_OPERATORS:
            advance()
            emit(SINGLE_CHAR_OPERATORS[c], c, start, start_line, start_col)
            continue

        # Numbers; a leading '.' is accepted so that '.5' lexes and a bare '.' is reported
        if is_digit(c) or c == '.':
            has_dot = False
            while i < length and (is_digit(source[i]) or source[i] == '.'):
                if source[i] == '.':
                    if has_dot:
                        raise LexError('MalformedNumber', 'number has more than one decimal point', line, col)
                    has_dot = True
                advance()
            text = source[start:i]
            if text == '.':
                raise LexError('MalformedNumber', "standalone '.' is not a number", start_line, start_col)
            emit(NUMBER, text, start, start_line, start_col)
            continue

        # Identifiers and keywords
        if is_letter(c):
            while i < length and (is_letter(source[i]) or is_digit(source[i])):
                advance()
            text = source[start:i]
            emit(KEYWORDS.get(text, IDENT), text, start, start_line, start_col)
            continue

        if c.isspace():
            advance()
            continue

        raise LexError('UnexpectedCharacter', f"unexpected character {c!r}", line, col)

    tokens.append(Token(EOF, '', start_pos=i, line=line, column=col))
    return tokens
