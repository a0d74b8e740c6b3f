"""Recursive-descent parser for BoxLang.

The parser reads the token list produced by ``lexer.tokenize`` with one
token of lookahead and builds a ``Program``. It stops at the first
grammar violation with a ``ParseError`` naming the offending token; there
is no recovery and no partial tree.

Statements::

    box <name> [= <expr>] end
    noChange <name> = <expr> end
    boxes <name> = [ <expr> ... ] end
    if|ifNot <cond> doIt <stmt>* [else [doIt] <stmt>*] end
    while|whileNot <cond> doIt <stmt>* end
    for <name> = <expr> to <expr> doIt <stmt>* end
    function <name> ( <name>, ... ) doIt <stmt>* end
    return [<expr>] end
    <name>[<expr>]... = <expr> end
    <name> = <expr> end
    <name>(<expr>, ...)

Expressions come in two flat, left-associative chains. Conditions use
logical (``and``/``or``) over comparison over primary; everywhere else a
generic expression is the arithmetic chain, which also admits the
comparison operators but never ``and``/``or``. Parentheses reopen a
generic expression that may additionally be joined with ``and``/``or``.
``ifNot c`` and ``whileNot c`` are desugared to ``not c``.
"""

from __future__ import annotations

from typing import List, Optional, Union

from lark import Token

from . import lexer as tk
from .ast import (
    Program, BlockStatement, VariableDeclaration, FunctionDeclaration,
    IfStatement, WhileStatement, ForStatement, ReturnStatement,
    Identifier, NumberLiteral, StringLiteral, BooleanLiteral,
    ArrayLiteral, ArrayAccess, BinaryExpression, ComparisonExpression,
    LogicalExpression, UnaryExpression, AssignmentExpression,
    CallExpression, Node,
)
from .errors import BoxError, ParseError
from .lexer import tokenize


ARITHMETIC_OPERATORS = [tk.PLUS, tk.MINUS, tk.MULTIPLY, tk.DIVIDE]
COMPARISON_OPERATORS = [
    tk.EQUALS_EQUALS, tk.NOT_EQUALS, tk.LESS_THAN, tk.LESS_THAN_OR_EQUALS,
    tk.GREATER_THAN, tk.GREATER_THAN_OR_EQUALS,
]
LOGICAL_OPERATORS = [tk.AND, tk.OR]
EXPRESSION_STARTS = [
    tk.IDENT, tk.NUMBER, tk.STRING, tk.BOOLEAN, tk.OPEN_ARRAY,
    tk.BEGIN_PARAMS, tk.MINUS, tk.NOT,
]
OPERATOR_KINDS = ARITHMETIC_OPERATORS + COMPARISON_OPERATORS + [tk.EQUALS]


def describe(token: Token) -> str:
    if token.type == tk.EOF:
        return 'end of input'
    return repr(str(token.value))


def is_word_operator(token: Token) -> bool:
    """True for operators spelled as words (``add``, ``lessThan``...), which double as names."""
    return token.type in OPERATOR_KINDS and str(token.value).isalpha()


class Parser:
    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != tk.EOF:
            raise ValueError('token list must end with an EOF token')
        self.tokens = tokens
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def peek_next(self) -> Token:
        return self.tokens[min(self.pos + 1, len(self.tokens) - 1)]

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type != tk.EOF:
            self.pos += 1
        return token

    def match(self, expected: Union[str, List[str]]) -> bool:
        token = self.peek()
        if isinstance(expected, list):
            return token.type in expected
        return token.type == expected

    def consume(self, expected: str, what: str) -> Token:
        token = self.peek()
        if token.type != expected:
            raise ParseError(f"expected {what}, got {describe(token)}", token)
        return self.advance()

    def consume_name(self, what: str) -> Token:
        # no operator can stand where a name is expected
        if is_word_operator(self.peek()):
            return self.advance()
        return self.consume(tk.IDENT, what)

    def at_end(self) -> bool:
        return self.peek().type == tk.EOF

    def parse_program(self) -> Program:
        statements: List[Node] = []
        while not self.at_end():
            statements.append(self.parse_statement())
        return Program(statements)

    # Statements

    def parse_statement(self) -> Node:
        token = self.peek()
        kind = token.type
        if kind == tk.BOX:
            return self.parse_var_decl()
        if kind == tk.NO_CHANGE:
            return self.parse_const_decl()
        if kind == tk.BOXES:
            return self.parse_array_decl()
        if kind in (tk.IF, tk.IF_NOT):
            return self.parse_if_stmt()
        if kind in (tk.WHILE, tk.WHILE_NOT):
            return self.parse_while_stmt()
        if kind == tk.FOR:
            return self.parse_for_stmt()
        if kind == tk.FUNCTION:
            return self.parse_func_decl()
        if kind == tk.RETURN:
            return self.parse_return_stmt()
        if kind == tk.IDENT or is_word_operator(token):
            return self.parse_assignment_or_call()
        raise ParseError(f"unexpected token {describe(token)} at start of statement", token)

    def parse_body(self, terminators: List[str]) -> BlockStatement:
        """Collect statements until one of ``terminators``, which is left unconsumed."""
        statements: List[Node] = []
        while not self.match(terminators):
            if self.at_end():
                raise ParseError("expected 'end', got end of input", self.peek())
            statements.append(self.parse_statement())
        return BlockStatement(statements)

    def parse_var_decl(self) -> VariableDeclaration:
        self.consume(tk.BOX, "'box'")
        name = self.consume_name('variable name')
        initializer: Optional[Node] = None
        if not self.match(tk.END):
            self.consume(tk.EQUALS, "'=' in box declaration")
            initializer = self.parse_expression()
        self.consume(tk.END, "'end' after box declaration")
        return VariableDeclaration(name.value, initializer)

    def parse_const_decl(self) -> VariableDeclaration:
        self.consume(tk.NO_CHANGE, "'noChange'")
        name = self.consume_name('constant name')
        self.consume(tk.EQUALS, "'=' in noChange declaration")
        initializer = self.parse_expression()
        self.consume(tk.END, "'end' after noChange declaration")
        return VariableDeclaration(name.value, initializer, constant=True)

    def parse_array_decl(self) -> VariableDeclaration:
        self.consume(tk.BOXES, "'boxes'")
        name = self.consume_name('array name')
        self.consume(tk.EQUALS, "'=' in boxes declaration")
        initializer = self.parse_array_literal()
        self.consume(tk.END, "'end' after boxes declaration")
        return VariableDeclaration(name.value, initializer, is_array=True)

    def parse_array_literal(self) -> ArrayLiteral:
        self.consume(tk.OPEN_ARRAY, "'[' to start array literal")
        elements: List[Node] = []
        while not self.match(tk.CLOSE_ARRAY):
            if self.at_end():
                raise ParseError("expected ']' to end array literal, got end of input", self.peek())
            elements.append(self.parse_expression())
            if self.match(tk.COMMA):
                self.advance()
            elif not self.match(tk.CLOSE_ARRAY) and not self.match(EXPRESSION_STARTS):
                # any other separator token is skipped
                self.advance()
        self.consume(tk.CLOSE_ARRAY, "']' to end array literal")
        return ArrayLiteral(elements)

    def parse_if_stmt(self) -> IfStatement:
        negated = self.advance().type == tk.IF_NOT
        test = self.parse_logical()
        if negated:
            test = LogicalExpression('not', test)
        self.consume(tk.DO_IT, "'doIt' after condition")
        consequent = self.parse_body([tk.END, tk.ELSE])
        alternate: Optional[BlockStatement] = None
        if self.match(tk.ELSE):
            self.advance()
            if self.match(tk.DO_IT):
                self.advance()
            alternate = self.parse_body([tk.END])
        self.consume(tk.END, "'end' to close 'if' statement")
        return IfStatement(test, consequent, alternate)

    def parse_while_stmt(self) -> WhileStatement:
        negated = self.advance().type == tk.WHILE_NOT
        test = self.parse_logical()
        if negated:
            test = LogicalExpression('not', test)
        self.consume(tk.DO_IT, "'doIt' after while condition")
        body = self.parse_body([tk.END])
        self.consume(tk.END, "'end' to close 'while' statement")
        return WhileStatement(test, body)

    def parse_for_stmt(self) -> ForStatement:
        self.consume(tk.FOR, "'for'")
        loop_var = self.consume_name('loop variable')
        self.consume(tk.EQUALS, "'=' after loop variable")
        start = self.parse_expression()
        self.consume(tk.TO, "'to'")
        end = self.parse_expression()
        self.consume(tk.DO_IT, "'doIt'")
        body = self.parse_body([tk.END])
        self.consume(tk.END, "'end' to close 'for' loop")
        return ForStatement(loop_var.value, start, end, body)

    def parse_func_decl(self) -> FunctionDeclaration:
        self.consume(tk.FUNCTION, "'function'")
        name = self.consume_name('function name')
        self.consume(tk.BEGIN_PARAMS, "'(' after function name")
        params: List[str] = []
        while not self.match(tk.END_PARAMS):
            params.append(self.consume_name('parameter name').value)
            if self.match(tk.COMMA):
                self.advance()
        self.consume(tk.END_PARAMS, "')' after function parameters")
        self.consume(tk.DO_IT, "'doIt' after function signature")
        body = self.parse_body([tk.END])
        self.consume(tk.END, "'end' to close the function body")
        return FunctionDeclaration(name.value, params, body)

    def parse_return_stmt(self) -> ReturnStatement:
        self.consume(tk.RETURN, "'return'")
        argument: Optional[Node] = None
        if not self.match(tk.END):
            argument = self.parse_expression()
        self.consume(tk.END, "'end' after return")
        return ReturnStatement(argument)

    def parse_assignment_or_call(self) -> Node:
        name = self.consume_name('identifier')
        target = self.parse_postfix(Identifier(name.value))
        if self.match(tk.EQUALS):
            if not isinstance(target, (Identifier, ArrayAccess)):
                raise ParseError('cannot assign to the result of a call', self.peek())
            self.advance()
            value = self.parse_expression()
            self.consume(tk.END, "'end' after assignment")
            return AssignmentExpression(target, value)
        if isinstance(target, CallExpression):
            return target
        token = self.peek()
        raise ParseError(f"unexpected token after identifier: {describe(token)}", token)

    # Expressions

    def parse_logical(self) -> Node:
        node = self.parse_comparison()
        while self.match(LOGICAL_OPERATORS):
            op = self.advance()
            right = self.parse_comparison()
            node = LogicalExpression(op.value, node, right)
        return node

    def parse_comparison(self) -> Node:
        node = self.parse_primary()
        while self.match(COMPARISON_OPERATORS):
            op = self.advance()
            right = self.parse_primary()
            node = ComparisonExpression(op.value, node, right)
        return node

    def parse_expression(self) -> Node:
        node = self.parse_primary()
        while self.match(ARITHMETIC_OPERATORS + COMPARISON_OPERATORS):
            op = self.advance()
            right = self.parse_primary()
            node = BinaryExpression(op.value, node, right)
        return node

    def parse_grouped(self) -> Node:
        self.consume(tk.BEGIN_PARAMS, "'('")
        node = self.parse_expression()
        while self.match(LOGICAL_OPERATORS):
            op = self.advance()
            right = self.parse_expression()
            node = LogicalExpression(op.value, node, right)
        self.consume(tk.END_PARAMS, "')'")
        return node

    def parse_postfix(self, node: Node) -> Node:
        while True:
            if self.match(tk.OPEN_ARRAY):
                self.advance()
                index = self.parse_expression()
                self.consume(tk.CLOSE_ARRAY, "']' after array index")
                node = ArrayAccess(node, index)
                continue
            if self.match(tk.BEGIN_PARAMS):
                node = CallExpression(node, self.parse_arguments())
                continue
            return node

    def parse_arguments(self) -> List[Node]:
        self.consume(tk.BEGIN_PARAMS, "'('")
        args: List[Node] = []
        while not self.match(tk.END_PARAMS):
            if self.at_end():
                raise ParseError("expected ')' after function arguments, got end of input", self.peek())
            args.append(self.parse_expression())
            if self.match(tk.COMMA):
                self.advance()
        self.consume(tk.END_PARAMS, "')' after function arguments")
        return args

    def parse_primary(self) -> Node:
        token = self.peek()
        kind = token.type
        if kind == tk.IDENT:
            self.advance()
            return self.parse_postfix(Identifier(token.value))
        # 'subtract x' is negation; 'subtract(x)' and any other word operator here is a name
        if is_word_operator(token) and (kind != tk.MINUS or self.peek_next().type == tk.BEGIN_PARAMS):
            self.advance()
            return self.parse_postfix(Identifier(token.value))
        if kind == tk.NUMBER:
            self.advance()
            return NumberLiteral(float(token.value))
        if kind == tk.STRING:
            self.advance()
            return StringLiteral(token.value)
        if kind == tk.BOOLEAN:
            self.advance()
            return BooleanLiteral(token.value == 'true')
        if kind == tk.OPEN_ARRAY:
            return self.parse_array_literal()
        if kind == tk.BEGIN_PARAMS:
            return self.parse_grouped()
        if kind == tk.MINUS:
            self.advance()
            return UnaryExpression(token.value, self.parse_primary())
        if kind == tk.NOT:
            self.advance()
            return LogicalExpression('not', self.parse_primary())
        raise ParseError(f"unexpected token in expression: {describe(token)}", token)


def parse_tokens(tokens: List[Token]) -> Program:
    try:
        return Parser(tokens).parse_program()
    except RecursionError:
        raise BoxError('StackOverflow', 'program is nested too deeply to parse') from None


def parse_program(source: str) -> Program:
    """Tokenize and parse BoxLang source into a ``Program``."""
    return parse_tokens(tokenize(source))
