"""cmmc.semantics

Semantic analysis (the check pass).

- scope tracking (global / function / block), rebuilt from scratch here and
  discarded afterwards; the translate pass builds its own scopes
- duplicate declarations and overload conflicts
- undeclared variables and unresolved function signatures
- operator, assignment, condition and return typing

Every problem is reported through `Diagnostics` and checking continues with
the next node, so one run reports every defect in the program.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from cmmc.ast_nodes import (
    ARITHMETIC_OPS,
    BOOL,
    BOOL_TYPE,
    EQUALITY_OPS,
    ERROR_TYPE,
    INT,
    INT_TYPE,
    LOGICAL_OPS,
    RELATIONAL_OPS,
    STRING_TYPE,
    VOID,
    VOID_TYPE,
    ArrayExp,
    AssignStmt,
    BinaryOp,
    Block,
    CallExp,
    CallStmt,
    Decl,
    Exp,
    FnDecl,
    FnPreDecl,
    ForStmt,
    FormalDecl,
    Id,
    IfElseStmt,
    IfStmt,
    IntLit,
    Program,
    ReturnStmt,
    Stmt,
    StringLit,
    Type,
    UnaryOp,
    VarDecl,
    WhileStmt,
)
from cmmc.errors import CompilingError, Diagnostics, SemanticWarning
from cmmc.symbols import FunctionEntry, SymbolTable, VariableEntry


logger = logging.getLogger(__name__)

READ_CALL = "scanf"
WRITE_CALL = "printf"
SYSTEM_CALLS = {READ_CALL, WRITE_CALL}


def is_system_call(call: CallExp) -> bool:
    return call.name.name in SYSTEM_CALLS


class SemanticAnalyzer:
    """Semantic analyzer for C--"""

    def __init__(self, diagnostics: Optional[Diagnostics] = None):
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def analyze(self, ast: Program) -> Diagnostics:
        """Check the whole program and return the diagnostics collected."""
        globals_ = SymbolTable()
        for decl in ast.decls:
            self._check_decl(decl, globals_)
        logger.debug(
            "check finished: %d error(s), %d warning(s)",
            self.diagnostics.semantic_errors,
            self.diagnostics.semantic_warnings,
        )
        return self.diagnostics

    def _error(self, node, message: str) -> None:
        self.diagnostics.semantic_error(node.line, node.column, message)

    def _declare(self, scope: SymbolTable, name: str, entry, node) -> None:
        try:
            scope.add_entry(name, entry)
        except CompilingError as e:
            self.diagnostics.report(node.line, node.column, e)

    # -----------------
    # Declarations
    # -----------------

    def _check_decl(self, decl: Union[Decl, FormalDecl], scope: SymbolTable) -> None:
        if isinstance(decl, VarDecl):
            if decl.type.name == VOID:
                self.diagnostics.report(
                    decl.line, decl.column, SemanticWarning(f"Variable {decl.name} cannot be of void type")
                )
            self._declare(scope, decl.name, VariableEntry(decl.type), decl)
            return

        if isinstance(decl, FormalDecl):
            if decl.type.name == VOID and decl.type.pointers == 0:
                self._error(decl, f"Variable {decl.name} cannot be of void type")
            self._declare(scope, decl.name, VariableEntry(decl.type), decl)
            return

        if isinstance(decl, FnDecl):
            fn_scope = scope.child()
            for formal in decl.formals:
                self._check_decl(formal, fn_scope)
            entry = FunctionEntry(decl.return_type, tuple(decl.param_types), forward=False)
            self._declare(scope, decl.name, entry, decl)
            # Formals and the body's own declarations share one scope.
            self._check_body(decl.body, fn_scope, decl)
            return

        if isinstance(decl, FnPreDecl):
            # Formals are only checked for void/duplicates; they bind nothing.
            formal_scope = SymbolTable()
            for formal in decl.formals:
                self._check_decl(formal, formal_scope)
            entry = FunctionEntry(decl.return_type, tuple(decl.param_types), forward=True)
            self._declare(scope, decl.name, entry, decl)
            return

        raise TypeError(f"unhandled declaration {type(decl).__name__}")

    def _check_body(self, body: Block, scope: SymbolTable, fn: FnDecl) -> None:
        for decl in body.decls:
            self._check_decl(decl, scope)
        for stmt in body.stmts:
            self._check_stmt(stmt, scope, fn)

    def _check_block(self, body: Block, parent: SymbolTable, fn: FnDecl) -> None:
        self._check_body(body, parent.child(), fn)

    # -----------------
    # Statements
    # -----------------

    def _check_condition(self, exp: Exp, scope: SymbolTable) -> None:
        ty = self.type_of(exp, scope)
        if ty.name != BOOL and not ty.is_error:
            self._error(exp, "Condition expression must be of bool type")

    def _check_stmt(self, stmt: Stmt, scope: SymbolTable, fn: FnDecl) -> None:
        if isinstance(stmt, AssignStmt):
            lhs_ty = self.type_of(stmt.lhs, scope)
            rhs_ty = self.type_of(stmt.exp, scope)
            if lhs_ty.is_error or rhs_ty.is_error:
                return
            if lhs_ty != rhs_ty:
                self._error(stmt.lhs, "Illegal assignment (Both lhs and expression must be of the same type)")
            return

        if isinstance(stmt, IfStmt):
            self._check_condition(stmt.exp, scope)
            self._check_block(stmt.body, scope, fn)
            return

        if isinstance(stmt, IfElseStmt):
            self._check_condition(stmt.exp, scope)
            self._check_block(stmt.then_body, scope, fn)
            self._check_block(stmt.else_body, scope, fn)
            return

        if isinstance(stmt, WhileStmt):
            self._check_condition(stmt.exp, scope)
            self._check_block(stmt.body, scope, fn)
            return

        if isinstance(stmt, ForStmt):
            self._check_stmt(stmt.init, scope, fn)
            self._check_condition(stmt.cond, scope)
            self._check_stmt(stmt.incr, scope, fn)
            self._check_block(stmt.body, scope, fn)
            return

        if isinstance(stmt, CallStmt):
            self.type_of(stmt.call, scope)
            return

        if isinstance(stmt, ReturnStmt):
            if stmt.exp is None:
                if fn.return_type.name != VOID:
                    self._error(stmt, "Illegal return statement")
                return
            ty = self.type_of(stmt.exp, scope)
            if not ty.is_error and ty != fn.return_type:
                self._error(stmt, "Illegal return statement")
            return

        raise TypeError(f"unhandled statement {type(stmt).__name__}")

    # -----------------
    # Expressions
    # -----------------

    def type_of(self, exp: Exp, scope: SymbolTable) -> Type:
        """Infer the type of `exp`, reporting problems found on the way."""
        if isinstance(exp, IntLit):
            return INT_TYPE

        if isinstance(exp, StringLit):
            return STRING_TYPE

        if isinstance(exp, Id):
            try:
                return scope.lookup_variable(exp.name).type
            except CompilingError as e:
                self.diagnostics.report(exp.line, exp.column, e)
                return ERROR_TYPE

        if isinstance(exp, ArrayExp):
            base = self.type_of(exp.array, scope)
            index = self.type_of(exp.index, scope)
            if index.name != INT and not index.is_error:
                self._error(exp, "Index operand must be of int type")
            return base.element()

        if isinstance(exp, CallExp):
            return self._type_of_call(exp, scope)

        if isinstance(exp, UnaryOp):
            operand = self.type_of(exp.operand, scope)
            if exp.operator == "-":
                if operand.name != INT and not operand.is_error:
                    self._error(exp, "Expression must be of int type")
                return INT_TYPE
            if exp.operator == "!":
                if operand.name != BOOL and not operand.is_error:
                    self._error(exp, "Expression must be of bool type")
                return BOOL_TYPE
            if exp.operator in {"&", "*"}:
                if not isinstance(exp.operand, Id):
                    self._error(exp, "Expression must be an identifier")
                return operand
            raise TypeError(f"unhandled unary operator {exp.operator!r}")

        if isinstance(exp, BinaryOp):
            left = self.type_of(exp.left, scope)
            right = self.type_of(exp.right, scope)
            if exp.operator in ARITHMETIC_OPS:
                operand_name, result = INT, INT_TYPE
            elif exp.operator in LOGICAL_OPS:
                operand_name, result = BOOL, BOOL_TYPE
            elif exp.operator in RELATIONAL_OPS | EQUALITY_OPS:
                operand_name, result = INT, BOOL_TYPE
            else:
                raise TypeError(f"unhandled binary operator {exp.operator!r}")
            if left.is_error or right.is_error:
                return result
            if left.name != operand_name or right.name != operand_name:
                self._error(exp, f"Illegal expression (All operands must be of {operand_name} type)")
            return result

        raise TypeError(f"unhandled expression {type(exp).__name__}")

    def _type_of_call(self, call: CallExp, scope: SymbolTable) -> Type:
        arg_types: List[Type] = [self.type_of(a, scope) for a in call.args]

        if is_system_call(call):
            if len(call.args) > 1:
                self._error(call, "Invalid parameters")
            return VOID_TYPE

        if any(t.is_error for t in arg_types):
            return ERROR_TYPE
        try:
            return scope.get_function(call.name.name, arg_types).return_type
        except CompilingError as e:
            self.diagnostics.report(call.line, call.column, e)
            return ERROR_TYPE
