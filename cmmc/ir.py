"""cmmc.ir

Intermediate Representation (IR) for C--: the translate pass.

The IR is a flat list of `IRInstruction`, one per output line:

- `func` / `funci` / `efunc`, `ret` / `retf`, `entry`, `str`
- `move`, `arrs`, `arrg`, `add`, `sub`, `mult`, `div`, `mod`
- `jump`, `jlt`, `jlte`, `jeq`, `jneq`, `arg`, `call`, `callf`
- `read`, `write`, and `label` (rendered as `~N:`)

Operands are plain strings: globals `$N`, constants `?N`, parameters `%N`,
locals `@N`, temporaries `&N`, integer literals, and labels `~N`.

Boolean expressions are translated in "condition" mode: the caller hands
them a true and a false label and they emit jumps to exactly one of them.
They never leave a value behind. Everything else is translated in "value"
mode and returns the operand holding its result.

This pass assumes `SemanticAnalyzer` found no errors. It builds its own
scopes, this time with storage addresses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Union

from cmmc.allocator import AddressAllocator, ScopeTag
from cmmc.ast_nodes import (
    EQUALITY_OPS,
    RELATIONAL_OPS,
    VOID,
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
    Id,
    IfElseStmt,
    IfStmt,
    IntLit,
    Program,
    ReturnStmt,
    Stmt,
    StringLit,
    UnaryOp,
    VarDecl,
    WhileStmt,
    is_condition,
)
from cmmc.errors import Diagnostics, UndeclaredName
from cmmc.semantics import READ_CALL, SemanticAnalyzer, is_system_call
from cmmc.symbols import FunctionEntry, SymbolTable, VariableEntry, mangle_label


logger = logging.getLogger(__name__)

ENTRY_FUNCTION = "main"

ARITHMETIC_MNEMONICS = {"+": "add", "-": "sub", "*": "mult", "/": "div", "%": "mod"}

# operator -> (mnemonic, swap operands)
JUMP_MNEMONICS = {
    "<": ("jlt", False),
    ">": ("jlt", True),
    "<=": ("jlte", False),
    ">=": ("jlte", True),
    "==": ("jeq", False),
    "!=": ("jneq", False),
}


@dataclass
class IRInstruction:
    op: str
    args: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        if self.op == "label":
            return f"{self.args[0]}:"
        if not self.args:
            return self.op
        return f"{self.op} {', '.join(self.args)}"

    def references(self, label: str) -> bool:
        return self.op != "label" and label in self.args


def ins(op: str, *args: Union[str, int]) -> IRInstruction:
    return IRInstruction(op=op, args=[str(a) for a in args])


def label_def(label: str) -> IRInstruction:
    return IRInstruction(op="label", args=[label])


@dataclass
class TranslationResult:
    """Code emitted for a subtree plus the operand holding its value."""
    code: List[IRInstruction] = field(default_factory=list)
    address: str = ""

    def append(self, instr: IRInstruction) -> None:
        self.code.append(instr)

    def extend(self, other: "TranslationResult") -> None:
        self.code.extend(other.code)

    def references(self, label: str) -> bool:
        return any(i.references(label) for i in self.code)


@dataclass(frozen=True)
class Labels:
    """Inherited jump targets, set by a parent right before it recurses."""
    true: str = ""
    false: str = ""
    next: str = ""

    def swapped(self) -> "Labels":
        return replace(self, true=self.false, false=self.true)


class IRGenerator:
    """Generates intermediate representation (3-Address Code)"""

    def __init__(self, allocator: Optional[AddressAllocator] = None):
        self.alloc = allocator if allocator is not None else AddressAllocator()
        # Argument types are needed to pick an overload's label. The program
        # is already checked, so anything this analyzer reports is dropped.
        self._types = SemanticAnalyzer(Diagnostics())

    def generate(self, ast: Program) -> List[IRInstruction]:
        """Generate IR from AST"""
        globals_ = SymbolTable()
        body = TranslationResult()
        for decl in ast.decls:
            body.extend(self._gen_decl(decl, globals_, ScopeTag.GLOBAL))

        out = TranslationResult()
        for value in self.alloc.constants:
            out.append(ins("str", value))
        out.append(ins("entry", mangle_label(ENTRY_FUNCTION, []), self.alloc.count(ScopeTag.GLOBAL)))
        out.extend(body)
        return out.code

    # -------------
    # Declarations
    # -------------

    def _gen_var(self, name: str, decl, scope: SymbolTable, tag: ScopeTag) -> None:
        entry = VariableEntry(decl.type, self.alloc.new_slot(tag), tag)
        scope.add_entry(name, entry)

    def _gen_decl(self, decl: Decl, scope: SymbolTable, tag: ScopeTag) -> TranslationResult:
        if isinstance(decl, VarDecl):
            self._gen_var(decl.name, decl, scope, tag)
            return TranslationResult()

        if isinstance(decl, FnPreDecl):
            scope.add_entry(decl.name, FunctionEntry(decl.return_type, tuple(decl.param_types), forward=True))
            return TranslationResult()

        if isinstance(decl, FnDecl):
            return self._gen_function(decl, scope)

        raise TypeError(f"unhandled declaration {type(decl).__name__}")

    def _gen_function(self, fn: FnDecl, scope: SymbolTable) -> TranslationResult:
        self.alloc.reset_function()
        scope.add_entry(fn.name, FunctionEntry(fn.return_type, tuple(fn.param_types), forward=False))
        label = mangle_label(fn.name, fn.param_types)
        logger.debug("translating function %s", label)

        fn_scope = scope.child()
        for formal in fn.formals:
            self._gen_var(formal.name, formal, fn_scope, ScopeTag.PARAM)
        body = self._gen_body(fn.body, fn_scope, fn)

        out = TranslationResult()
        out.append(ins("func", label))
        out.append(ins("funci", self.alloc.count(ScopeTag.LOCAL), self.alloc.count(ScopeTag.TEMPORARY)))
        out.extend(body)
        out.append(ins("efunc", label))
        return out

    def _gen_body(self, body: Block, scope: SymbolTable, fn: FnDecl) -> TranslationResult:
        for decl in body.decls:
            self._gen_var(decl.name, decl, scope, ScopeTag.LOCAL)
        return self._gen_stmt_list(body.stmts, scope, fn)

    def _gen_block(self, body: Block, parent: SymbolTable, fn: FnDecl) -> TranslationResult:
        return self._gen_body(body, parent.child(), fn)

    # -------------
    # Statements
    # -------------

    def _gen_stmt_list(self, stmts: List[Stmt], scope: SymbolTable, fn: FnDecl) -> TranslationResult:
        out = TranslationResult()
        for stmt in stmts:
            next_label = self.alloc.new_label()
            sub = self._gen_stmt(stmt, scope, fn, Labels(next=next_label))
            out.extend(sub)
            if sub.references(next_label):
                out.append(label_def(next_label))
        return out

    def _gen_stmt(self, stmt: Stmt, scope: SymbolTable, fn: FnDecl, labels: Labels) -> TranslationResult:
        out = TranslationResult()

        if isinstance(stmt, AssignStmt):
            target = stmt.lhs
            if isinstance(target, ArrayExp):
                base = self._gen_value(target.array, scope)
                index = self._gen_value(target.index, scope)
                value = self._gen_value(stmt.exp, scope)
                out.extend(base)
                out.extend(index)
                out.extend(value)
                out.append(ins("arrs", base.address, index.address, value.address))
            else:
                dest = self._gen_value(target, scope)
                value = self._gen_value(stmt.exp, scope)
                out.extend(dest)
                out.extend(value)
                out.append(ins("move", dest.address, value.address))
            out.address = value.address
            return out

        if isinstance(stmt, IfStmt):
            true_label = self.alloc.new_label()
            cond = self._gen_cond(stmt.exp, scope, Labels(true=true_label, false=labels.next))
            body = self._gen_block(stmt.body, scope, fn)
            out.extend(cond)
            out.append(label_def(true_label))
            out.extend(body)
            return out

        if isinstance(stmt, IfElseStmt):
            true_label = self.alloc.new_label()
            false_label = self.alloc.new_label()
            cond = self._gen_cond(stmt.exp, scope, Labels(true=true_label, false=false_label))
            then_body = self._gen_block(stmt.then_body, scope, fn)
            else_body = self._gen_block(stmt.else_body, scope, fn)
            out.extend(cond)
            out.append(label_def(true_label))
            out.extend(then_body)
            out.append(ins("jump", labels.next))
            out.append(label_def(false_label))
            out.extend(else_body)
            return out

        if isinstance(stmt, WhileStmt):
            top = self.alloc.new_label()
            true_label = self.alloc.new_label()
            cond = self._gen_cond(stmt.exp, scope, Labels(true=true_label, false=labels.next))
            body = self._gen_block(stmt.body, scope, fn)
            out.append(label_def(top))
            out.extend(cond)
            out.append(label_def(true_label))
            out.extend(body)
            out.append(ins("jump", top))
            return out

        if isinstance(stmt, ForStmt):
            top = self.alloc.new_label()
            true_label = self.alloc.new_label()
            init = self._gen_stmt(stmt.init, scope, fn, Labels())
            cond = self._gen_cond(stmt.cond, scope, Labels(true=true_label, false=labels.next))
            body = self._gen_block(stmt.body, scope, fn)
            incr = self._gen_stmt(stmt.incr, scope, fn, Labels())
            out.extend(init)
            out.append(label_def(top))
            out.extend(cond)
            out.append(label_def(true_label))
            out.extend(body)
            out.extend(incr)
            out.append(ins("jump", top))
            return out

        if isinstance(stmt, CallStmt):
            return self._gen_call(stmt.call, scope)

        if isinstance(stmt, ReturnStmt):
            label = mangle_label(fn.name, fn.param_types)
            if stmt.exp is None:
                out.append(ins("ret", label))
                return out
            value = self._gen_value(stmt.exp, scope)
            out.extend(value)
            out.append(ins("retf", label, value.address))
            return out

        raise TypeError(f"unhandled statement {type(stmt).__name__}")

    # -------------
    # Expressions
    # -------------

    def _lookup(self, name: str, scope: SymbolTable) -> VariableEntry:
        # Entries left behind by error recovery carry the error type; skip
        # them and keep walking outwards.
        current: Optional[SymbolTable] = scope
        while current is not None:
            try:
                entry = current.get_variable(name)
            except UndeclaredName:
                entry = None
            if entry is not None and not entry.type.is_error:
                return entry
            current = current.parent
        raise UndeclaredName(f"Variable {name} has not been declared")

    def _gen_value(self, exp: Exp, scope: SymbolTable) -> TranslationResult:
        out = TranslationResult()

        if is_condition(exp):
            return self._materialize(exp, scope)

        if isinstance(exp, IntLit):
            out.address = str(exp.value)
            return out

        if isinstance(exp, StringLit):
            out.address = self.alloc.add_constant(exp.value)
            return out

        if isinstance(exp, Id):
            out.address = self._lookup(exp.name, scope).address
            return out

        if isinstance(exp, ArrayExp):
            base = self._gen_value(exp.array, scope)
            index = self._gen_value(exp.index, scope)
            out.extend(base)
            out.extend(index)
            out.address = self.alloc.new_temporary()
            out.append(ins("arrg", out.address, base.address, index.address))
            return out

        if isinstance(exp, CallExp):
            return self._gen_call(exp, scope)

        if isinstance(exp, UnaryOp):
            operand = self._gen_value(exp.operand, scope)
            out.extend(operand)
            if exp.operator == "-":
                out.address = self.alloc.new_temporary()
                out.append(ins("sub", out.address, "0", operand.address))
            else:
                # '&' and '*' are accepted but not lowered yet.
                out.address = operand.address
            return out

        if isinstance(exp, BinaryOp):
            left = self._gen_value(exp.left, scope)
            right = self._gen_value(exp.right, scope)
            out.extend(left)
            out.extend(right)
            out.address = self.alloc.new_temporary()
            out.append(ins(ARITHMETIC_MNEMONICS[exp.operator], out.address, left.address, right.address))
            return out

        raise TypeError(f"unhandled expression {type(exp).__name__}")

    def _materialize(self, exp: Exp, scope: SymbolTable) -> TranslationResult:
        """Turn a jumping expression into a 0/1 value held in a temporary."""
        out = TranslationResult()
        out.address = self.alloc.new_temporary()
        true_label = self.alloc.new_label()
        false_label = self.alloc.new_label()
        end_label = self.alloc.new_label()
        out.extend(self._gen_cond(exp, scope, Labels(true=true_label, false=false_label)))
        out.append(label_def(true_label))
        out.append(ins("move", out.address, "1"))
        out.append(ins("jump", end_label))
        out.append(label_def(false_label))
        out.append(ins("move", out.address, "0"))
        out.append(label_def(end_label))
        return out

    def _gen_cond(self, exp: Exp, scope: SymbolTable, labels: Labels) -> TranslationResult:
        out = TranslationResult()

        if isinstance(exp, BinaryOp) and exp.operator == "&&":
            mid = self.alloc.new_label()
            left = self._gen_cond(exp.left, scope, Labels(true=mid, false=labels.false))
            right = self._gen_cond(exp.right, scope, Labels(true=labels.true, false=labels.false))
            out.extend(left)
            out.append(label_def(mid))
            out.extend(right)
            return out

        if isinstance(exp, BinaryOp) and exp.operator == "||":
            mid = self.alloc.new_label()
            left = self._gen_cond(exp.left, scope, Labels(true=labels.true, false=mid))
            right = self._gen_cond(exp.right, scope, Labels(true=labels.true, false=labels.false))
            out.extend(left)
            out.append(label_def(mid))
            out.extend(right)
            return out

        if isinstance(exp, UnaryOp) and exp.operator == "!":
            return self._gen_cond(exp.operand, scope, labels.swapped())

        if isinstance(exp, BinaryOp) and exp.operator in RELATIONAL_OPS | EQUALITY_OPS:
            left = self._gen_value(exp.left, scope)
            right = self._gen_value(exp.right, scope)
            out.extend(left)
            out.extend(right)
            mnemonic, swap = JUMP_MNEMONICS[exp.operator]
            a, b = (right.address, left.address) if swap else (left.address, right.address)
            out.append(ins(mnemonic, a, b, labels.true))
            out.append(ins("jump", labels.false))
            return out

        # A bool value (variable, element, call result) used as a condition.
        value = self._gen_value(exp, scope)
        out.extend(value)
        out.append(ins("jneq", value.address, "0", labels.true))
        out.append(ins("jump", labels.false))
        return out

    def _gen_call(self, call: CallExp, scope: SymbolTable) -> TranslationResult:
        out = TranslationResult()

        if is_system_call(call):
            value: Optional[TranslationResult] = None
            for arg in call.args:
                value = self._gen_value(arg, scope)
                out.extend(value)
            if value is not None:
                out.append(ins("read" if call.name.name == READ_CALL else "write", value.address))
            return out

        arg_types = [self._types.type_of(a, scope) for a in call.args]
        entry = scope.get_function(call.name.name, arg_types)
        label = mangle_label(call.name.name, entry.param_types)
        for i, arg in enumerate(call.args):
            value = self._gen_value(arg, scope)
            out.extend(value)
            out.append(ins("arg", value.address, i))
        if entry.return_type.name == VOID:
            out.append(ins("call", label, len(call.args)))
        else:
            out.address = self.alloc.new_temporary()
            out.append(ins("callf", out.address, label, len(call.args)))
        return out


def format_ir(instructions: List[IRInstruction]) -> str:
    return "".join(f"{i}\n" for i in instructions)
