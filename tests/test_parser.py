import pytest

from cmmc.ast_nodes import (
    ArrayExp,
    AssignStmt,
    BinaryOp,
    CallStmt,
    FnDecl,
    FnPreDecl,
    ForStmt,
    IfElseStmt,
    IntLit,
    ReturnStmt,
    StringLit,
    Type,
    UnaryOp,
    VarDecl,
    WhileStmt,
)
from cmmc.lexer import Lexer
from cmmc.parser import Parser, ParserError


def _parse(code: str):
    return Parser(Lexer(code).tokenize()).parse()


def test_global_declarations():
    prog = _parse("int x; bool* p; string s[4];")
    assert [d.name for d in prog.decls] == ["x", "p", "s"]
    assert all(isinstance(d, VarDecl) for d in prog.decls)
    assert prog.decls[1].type == Type("bool", 1)
    assert prog.decls[2].type.array_size == 4


def test_prototype_and_definition():
    prog = _parse("int f(int a, bool b); int f(int a, bool b) { return a; }")
    pre, fn = prog.decls
    assert isinstance(pre, FnPreDecl)
    assert isinstance(fn, FnDecl)
    assert [t.name for t in fn.param_types] == ["int", "bool"]
    assert isinstance(fn.body.stmts[0], ReturnStmt)


def test_body_declarations_precede_statements():
    prog = _parse("void main() { int i; int a[3]; a[i] = 2; }")
    body = prog.decls[0].body
    assert [d.name for d in body.decls] == ["i", "a"]
    stmt = body.stmts[0]
    assert isinstance(stmt, AssignStmt)
    assert isinstance(stmt.lhs, ArrayExp)


def test_operator_precedence():
    prog = _parse("void main() { x = 1 + 2 * 3; }")
    exp = prog.decls[0].body.stmts[0].exp
    assert isinstance(exp, BinaryOp) and exp.operator == "+"
    assert isinstance(exp.right, BinaryOp) and exp.right.operator == "*"


def test_logical_precedence():
    prog = _parse("void main() { b = x < 1 || y == 2 && !c; }")
    exp = prog.decls[0].body.stmts[0].exp
    assert exp.operator == "||"
    assert exp.left.operator == "<"
    assert exp.right.operator == "&&"
    assert isinstance(exp.right.right, UnaryOp)


def test_binary_position_is_left_operand():
    prog = _parse("void main() {\n  x =\n    a +\n b; }")
    exp = prog.decls[0].body.stmts[0].exp
    assert (exp.line, exp.column) == (exp.left.line, exp.left.column) == (3, 5)


def test_control_flow_statements():
    code = """
    void main() {
        int i;
        if (i < 1) { i = 1; } else { i = 2; }
        while (i > 0) { i = i - 1; }
        for (i = 0; i < 3; i = i + 1) { printf(i); }
    }
    """
    stmts = _parse(code).decls[0].body.stmts
    assert isinstance(stmts[0], IfElseStmt)
    assert isinstance(stmts[1], WhileStmt)
    loop = stmts[2]
    assert isinstance(loop, ForStmt)
    assert isinstance(loop.init, AssignStmt)
    assert isinstance(loop.body.stmts[0], CallStmt)


def test_literals():
    prog = _parse('void main() { s = "hi"; n = 7; }')
    first, second = prog.decls[0].body.stmts
    assert isinstance(first.exp, StringLit) and first.exp.value == '"hi"'
    assert isinstance(second.exp, IntLit) and second.exp.value == 7


def test_missing_semicolon_is_error():
    with pytest.raises(ParserError):
        _parse("int x")


def test_assignment_to_expression_is_error():
    with pytest.raises(ParserError):
        _parse("void main() { 1 + 2 = x; }")


def test_statement_outside_function_is_error():
    with pytest.raises(ParserError):
        _parse("x = 1;")
