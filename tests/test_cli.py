from cmmc.cli import main


def test_cli_prints_only_ir_to_stdout(tmp_path, capsys):
    src = tmp_path / "t.cmm"
    src.write_text("int x; void main() { x = 1 + 2; }\n")
    assert main([str(src)]) == 0
    captured = capsys.readouterr()
    assert captured.out == "entry main, 1\nfunc main\nfunci 0, 1\nadd &0, 1, 2\nmove $0, &0\nefunc main\n"
    assert "Semantic Error(s): 0. Semantic Warning(s): 0." in captured.err


def test_cli_writes_output_file(tmp_path, capsys):
    src = tmp_path / "t.cmm"
    dst = tmp_path / "t.ir"
    src.write_text("void main() { printf(\"hi\"); }\n")
    assert main([str(src), "-o", str(dst)]) == 0
    assert dst.read_text().startswith('str "hi"\nentry main, 0\n')
    out = capsys.readouterr().out
    assert "entry main" not in out
    assert "Semantic Error(s): 0. Semantic Warning(s): 0." in out


def test_cli_check_only(tmp_path, capsys):
    src = tmp_path / "t.cmm"
    src.write_text("void main() { }\n")
    assert main([str(src), "--check-only"]) == 0
    out = capsys.readouterr().out
    assert "func main" not in out
    assert "Semantic Error(s): 0." in out


def test_cli_reports_semantic_errors(tmp_path, capsys):
    src = tmp_path / "t.cmm"
    src.write_text("void main() { y = 1; }\n")
    assert main([str(src)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "1:15 **SEMANTIC ERROR** Variable y has not been declared" in captured.err
    assert "Compile error(s): aborting" in captured.err


def test_cli_ignores_unknown_log_level(tmp_path, capsys, monkeypatch):
    monkeypatch.setenv("CMMC_LOG_LEVEL", "chatty")
    src = tmp_path / "t.cmm"
    src.write_text("void main() { }\n")
    assert main([str(src)]) == 0
    assert "func main" in capsys.readouterr().out


def test_cli_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.cmm")]) == 1
    assert "Failed to read source file" in capsys.readouterr().out
