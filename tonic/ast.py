"""Abstract Syntax Tree (AST) definitions for the Tonic language.

The AST classes defined in this module describe an already-parsed Tonic
program. Parsing happens outside this package; the interpreter only ever
rejects a tree on semantic grounds while evaluating it. Trees can be built
directly or decoded from JSON with `tonic.ast_json`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Any


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class VarDecl(Node):
    type_name: str  # 'int', 'sound', 'pitch[]', ...
    name: str


@dataclass
class FuncParam:
    name: str
    type_name: Optional[str] = None  # informational; actuals are not checked against it


@dataclass
class FuncDecl(Node):
    name: str
    params: List[FuncParam]
    locals: List[VarDecl]
    body: List[Node]


@dataclass
class Program(Node):
    globals: List[VarDecl]
    functions: List[FuncDecl]


@dataclass
class Block(Node):
    statements: List[Node]


@dataclass
class IfStmt(Node):
    condition: Node
    then_branch: Node
    else_branch: Optional[Node] = None


@dataclass
class WhileStmt(Node):
    condition: Node
    body: Node


@dataclass
class ForStmt(Node):
    init: Optional[Node]
    condition: Optional[Node]
    post: Optional[Node]
    body: Node


@dataclass
class LoopStmt(Node):
    """`for var in array { body }`"""
    var: str
    array: str
    body: Node


@dataclass
class ReturnStmt(Node):
    value: Optional[Node] = None


@dataclass
class ExprStmt(Node):
    expr: Node


@dataclass
class Assign(Node):
    target: Node  # Ident or Index
    value: Node


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class Literal(Node):
    value: Any
    literal_type: str  # 'int', 'double', 'bool', 'pitch'


@dataclass
class Ident(Node):
    name: str


@dataclass
class ArrayLit(Node):
    elements: List[Node]


@dataclass
class Call(Node):
    name: str
    args: List[Node] = field(default_factory=list)


@dataclass
class Index(Node):
    array: str
    indices: List[Node]
