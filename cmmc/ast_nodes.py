"""
Abstract Syntax Tree (AST) Node Definitions for C--

Defines the structure of AST nodes used to represent C-- programs, plus the
`Type` value descriptor shared by both compiler passes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Union


VOID = "void"
BOOL = "bool"
INT = "int"
STRING = "string"
ERROR = "error"

TYPE_NAMES = (VOID, BOOL, INT, STRING)


# ============== Types ==============

@dataclass(frozen=True, eq=False)
class Type:
    """A C-- type: base name, pointer depth and optional array length.

    Two types are equal when name and pointer depth match. The array length
    takes no part in equality, so `int a[10]` and `int b[3]` compare equal.
    """
    name: str
    pointers: int = 0
    array_size: Optional[int] = None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Type):
            return NotImplemented
        return self.name == other.name and self.pointers == other.pointers

    def __hash__(self) -> int:
        return hash((self.name, self.pointers))

    def __str__(self) -> str:
        result = self.name + "*" * self.pointers
        if self.array_size is not None:
            result += f"[{self.array_size}]"
        return result

    @property
    def is_error(self) -> bool:
        return self.name == ERROR

    def element(self) -> "Type":
        """Type of one element of an array of this type."""
        return Type(self.name, self.pointers)


INT_TYPE = Type(INT)
BOOL_TYPE = Type(BOOL)
STRING_TYPE = Type(STRING)
VOID_TYPE = Type(VOID)
ERROR_TYPE = Type(ERROR)


@dataclass
class ASTNode:
    """Base class for all AST nodes"""
    # Location fields (line/column) are required constructor arguments
    # so subclasses' non-default fields don't follow defaults.
    line: int
    column: int


# ============== Expression Nodes ==============

@dataclass
class IntLit(ASTNode):
    """Integer literal"""
    value: int


@dataclass
class StringLit(ASTNode):
    """String literal, kept as raw source text including the quotes"""
    value: str


@dataclass
class Id(ASTNode):
    """Identifier (variable or function name)"""
    name: str


@dataclass
class ArrayExp(ASTNode):
    """Array indexing"""
    array: "Exp"
    index: "Exp"


@dataclass
class CallExp(ASTNode):
    """Function call"""
    name: Id
    args: List["Exp"] = field(default_factory=list)


@dataclass
class UnaryOp(ASTNode):
    """Unary operation"""
    operator: str  # '-', '!', '&', '*'
    operand: "Exp"


@dataclass
class BinaryOp(ASTNode):
    """Binary operation"""
    operator: str  # '+', '-', '*', '/', '%', '&&', '||', '==', '!=', '<', ...
    left: "Exp"
    right: "Exp"


Exp = Union[IntLit, StringLit, Id, ArrayExp, CallExp, UnaryOp, BinaryOp]

ARITHMETIC_OPS = {"+", "-", "*", "/", "%"}
LOGICAL_OPS = {"&&", "||"}
RELATIONAL_OPS = {"<", ">", "<=", ">="}
EQUALITY_OPS = {"==", "!="}


def is_condition(exp: Exp) -> bool:
    """True for expressions that translate to jumps instead of a value."""
    if isinstance(exp, BinaryOp):
        return exp.operator in LOGICAL_OPS | RELATIONAL_OPS | EQUALITY_OPS
    if isinstance(exp, UnaryOp):
        return exp.operator == "!"
    return False


# ============== Declaration Nodes ==============

@dataclass
class VarDecl(ASTNode):
    """Variable declaration"""
    name: str
    type: Type


@dataclass
class FormalDecl(ASTNode):
    """Formal parameter declaration"""
    name: str
    type: Type


@dataclass
class Block(ASTNode):
    """Compound body { decls... stmts... }"""
    decls: List[VarDecl] = field(default_factory=list)
    stmts: List["Stmt"] = field(default_factory=list)


@dataclass
class FnDecl(ASTNode):
    """Function definition"""
    name: str
    return_type: Type
    formals: List[FormalDecl]
    body: Block

    @property
    def param_types(self) -> List[Type]:
        return [f.type for f in self.formals]


@dataclass
class FnPreDecl(ASTNode):
    """Forward-only function declaration (prototype)"""
    name: str
    return_type: Type
    formals: List[FormalDecl]

    @property
    def param_types(self) -> List[Type]:
        return [f.type for f in self.formals]


Decl = Union[VarDecl, FnDecl, FnPreDecl]


# ============== Statement Nodes ==============

@dataclass
class AssignStmt(ASTNode):
    """Assignment statement"""
    lhs: Exp
    exp: Exp


@dataclass
class IfStmt(ASTNode):
    """If statement"""
    exp: Exp
    body: Block


@dataclass
class IfElseStmt(ASTNode):
    """If statement with an else branch"""
    exp: Exp
    then_body: Block
    else_body: Block


@dataclass
class WhileStmt(ASTNode):
    """While loop"""
    exp: Exp
    body: Block


@dataclass
class ForStmt(ASTNode):
    """For loop; init and incr are simple statements"""
    init: "Stmt"
    cond: Exp
    incr: "Stmt"
    body: Block


@dataclass
class CallStmt(ASTNode):
    """Call used as a statement"""
    call: CallExp


@dataclass
class ReturnStmt(ASTNode):
    """Return statement"""
    exp: Optional[Exp] = None


Stmt = Union[AssignStmt, IfStmt, IfElseStmt, WhileStmt, ForStmt, CallStmt, ReturnStmt]


# ============== Program Node ==============

@dataclass
class Program(ASTNode):
    """Root node representing entire program"""
    decls: List[Decl] = field(default_factory=list)
