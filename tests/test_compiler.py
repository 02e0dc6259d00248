import io

from cmmc.compiler import FATAL_ABORT, SEMANTIC_ABORT, Compiler


PROGRAM = """
int fact(int n) {
    if (n <= 1) { return 1; }
    return n * fact(n - 1);
}
void main() {
    int x;
    scanf(x);
    printf(fact(x));
}
"""


def test_compile_code_produces_ir():
    out = io.StringIO()
    res = Compiler(stream=out).compile_code(PROGRAM)
    assert res.success, res.errors
    assert res.ir.startswith("entry main, 0\n")
    assert "func fact_int\n" in res.ir
    assert out.getvalue() == "Semantic Error(s): 0. Semantic Warning(s): 0.\n"


def test_compile_file_writes_output(tmp_path):
    src = tmp_path / "fact.cmm"
    dst = tmp_path / "fact.ir"
    src.write_text(PROGRAM)
    res = Compiler().compile_file(str(src), str(dst))
    assert res.success
    assert res.output_file == str(dst)
    assert dst.read_text() == res.ir


def test_semantic_errors_abort_before_translation():
    out = io.StringIO()
    res = Compiler(stream=out).compile_code("void main() {\n  x = 1;\n}\n")
    assert not res.success
    assert res.ir is None
    assert res.errors == ["2:3 **SEMANTIC ERROR** Variable x has not been declared", SEMANTIC_ABORT]
    assert out.getvalue().splitlines() == [
        "2:3 **SEMANTIC ERROR** Variable x has not been declared",
        "Semantic Error(s): 1. Semantic Warning(s): 0.",
        SEMANTIC_ABORT,
    ]


def test_lexical_error_aborts():
    out = io.StringIO()
    res = Compiler(stream=out).compile_code("void main() { int x; x = 1 @ 2; }")
    assert not res.success
    assert res.errors == ["1:28 **ERROR** ignoring illegal character: @", FATAL_ABORT]
    assert "Semantic Error(s)" not in out.getvalue()


def test_syntax_error_aborts():
    res = Compiler().compile_code("void main() { int x }")
    assert not res.success
    assert res.errors[0].startswith("1:21 **ERROR** ")
    assert res.errors[-1] == FATAL_ABORT


def test_warnings_do_not_block_translation():
    res = Compiler().compile_code("void v; void main() { }")
    assert res.success
    assert res.warnings == ["1:1 **SEMANTIC WARNING** Variable v cannot be of void type"]
    assert res.ir.startswith("entry main, 1\n")


def test_check_only_skips_translation():
    res = Compiler().compile_code(PROGRAM, check_only=True)
    assert res.success
    assert res.ir is None


def test_missing_source_file(tmp_path):
    res = Compiler().compile_file(str(tmp_path / "nope.cmm"))
    assert not res.success
    assert res.errors[0].startswith("Failed to read source file")
