"""Abstract Syntax Tree (AST) definitions for BoxLang.

The parser produces these nodes and the interpreter consumes them; they
are the whole contract between the two stages. Every node is a frozen
dataclass and owns its children exclusively. Operator nodes keep the
operator text exactly as written (``+`` or ``add``) and the interpreter
accepts either spelling.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


# Statements

@dataclass(frozen=True)
class Program(Node):
    body: List[Node]


@dataclass(frozen=True)
class BlockStatement(Node):
    body: List[Node]


@dataclass(frozen=True)
class VariableDeclaration(Node):
    name: str
    initializer: Optional[Node]
    constant: bool = False
    is_array: bool = False  # declared with 'boxes'


@dataclass(frozen=True)
class FunctionDeclaration(Node):
    name: str
    params: List[str]
    body: BlockStatement


@dataclass(frozen=True)
class IfStatement(Node):
    test: Node
    consequent: BlockStatement
    alternate: Optional[BlockStatement] = None


@dataclass(frozen=True)
class WhileStatement(Node):
    test: Node
    body: BlockStatement


@dataclass(frozen=True)
class ForStatement(Node):
    loop_var: str
    start: Node
    end: Node
    body: BlockStatement


@dataclass(frozen=True)
class ReturnStatement(Node):
    argument: Optional[Node]


# Expressions

@dataclass(frozen=True)
class Identifier(Node):
    symbol: str


@dataclass(frozen=True)
class NumberLiteral(Node):
    value: float


@dataclass(frozen=True)
class StringLiteral(Node):
    value: str


@dataclass(frozen=True)
class BooleanLiteral(Node):
    value: bool


@dataclass(frozen=True)
class ArrayLiteral(Node):
    elements: List[Node]


@dataclass(frozen=True)
class ArrayAccess(Node):
    array: Node
    index: Node


@dataclass(frozen=True)
class Property(Node):
    key: str
    value: Optional[Node] = None  # None means shorthand: look up the key as a variable


@dataclass(frozen=True)
class ObjectExpression(Node):
    properties: List[Property] = field(default_factory=list)


@dataclass(frozen=True)
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True)
class ComparisonExpression(Node):
    operator: str
    left: Node
    right: Node


@dataclass(frozen=True)
class LogicalExpression(Node):
    operator: str  # 'and', 'or' or 'not'
    left: Node
    right: Optional[Node] = None  # absent for 'not'


@dataclass(frozen=True)
class UnaryExpression(Node):
    operator: str
    argument: Node


@dataclass(frozen=True)
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@dataclass(frozen=True)
class AssignmentExpression(Node):
    target: Node  # Identifier or ArrayAccess
    value: Node


@dataclass(frozen=True)
class CallExpression(Node):
    callee: Node
    arguments: List[Node]
