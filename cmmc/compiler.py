"""
Main Compiler Driver

Orchestrates the compilation pipeline: lex, parse, check, translate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, TextIO

from cmmc.ast_nodes import Program
from cmmc.errors import Diagnostics
from cmmc.ir import IRGenerator, IRInstruction, format_ir
from cmmc.lexer import Lexer, Token
from cmmc.parser import Parser, ParserError
from cmmc.semantics import SemanticAnalyzer


logger = logging.getLogger(__name__)

FATAL_ABORT = "Confused by earlier errors: aborting"
SEMANTIC_ABORT = "Compile error(s): aborting"


@dataclass
class CompilationResult:
    """Result of compilation"""
    success: bool
    output_file: Optional[str] = None
    errors: List[str] = None
    warnings: List[str] = None
    ir: Optional[str] = None
    diagnostics: Optional[Diagnostics] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []
        if self.warnings is None:
            self.warnings = []


class Compiler:
    """Main compiler class orchestrating all compilation stages"""

    def __init__(self, stream: Optional[TextIO] = None):
        # Diagnostics sink; None keeps them in memory only.
        self.stream = stream

    def compile_file(
        self, source_file: str, output_file: Optional[str] = None, *, check_only: bool = False
    ) -> CompilationResult:
        """Compile a source file, writing the IR to `output_file` if given."""
        try:
            with open(source_file, 'r') as f:
                source_code = f.read()
        except OSError as e:
            return CompilationResult(success=False, errors=[f"Failed to read source file: {e}"])
        return self.compile_code(source_code, output_file, source_path=source_file, check_only=check_only)

    def compile_code(
        self,
        source_code: str,
        output_file: Optional[str] = None,
        source_path: str = "<input>",
        *,
        check_only: bool = False,
    ) -> CompilationResult:
        """Compile source code"""
        diagnostics = Diagnostics(self.stream)

        def failed(message: str) -> CompilationResult:
            diagnostics.stream.write(f"{message}\n")
            return CompilationResult(
                success=False,
                errors=diagnostics.errors + [message],
                warnings=diagnostics.warnings,
                diagnostics=diagnostics,
            )

        # Phase 1: Lexical Analysis
        logger.debug("lexing %s", source_path)
        lexer = Lexer(source_code, source_path)
        tokens = lexer.tokenize()
        for w in lexer.warnings:
            diagnostics.warn(w.line, w.column, w.message)
        for e in lexer.get_errors():
            diagnostics.fatal(e.line, e.column, e.message)
        if diagnostics.fatal_error:
            return failed(FATAL_ABORT)

        # Phase 2: Syntax Analysis
        logger.debug("parsing %s", source_path)
        try:
            ast = self.get_ast(tokens)
        except ParserError as e:
            tok = e.token
            diagnostics.fatal(tok.line if tok else 0, tok.column if tok else 0, e.message)
            return failed(FATAL_ABORT)

        # Phase 3: Semantic Analysis
        logger.debug("checking %s", source_path)
        SemanticAnalyzer(diagnostics).analyze(ast)
        diagnostics.stream.write(f"{diagnostics.summary()}\n")
        if diagnostics.semantic_errors:
            return failed(SEMANTIC_ABORT)
        if check_only:
            return CompilationResult(
                success=True, warnings=diagnostics.warnings, diagnostics=diagnostics
            )

        # Phase 4: IR Generation
        logger.debug("translating %s", source_path)
        ir = format_ir(self.get_ir(ast))

        if output_file:
            try:
                with open(output_file, 'w') as f:
                    f.write(ir)
            except OSError as e:
                return CompilationResult(
                    success=False,
                    errors=[f"Failed to write output file: {e}"],
                    warnings=diagnostics.warnings,
                    diagnostics=diagnostics,
                )

        return CompilationResult(
            success=True,
            output_file=output_file,
            ir=ir,
            warnings=diagnostics.warnings,
            diagnostics=diagnostics,
        )

    def get_ast(self, tokens: List[Token]) -> Program:
        """Parse tokens into a Program"""
        return Parser(tokens).parse()

    def get_ir(self, ast: Program) -> List[IRInstruction]:
        """Get IR from an already checked AST"""
        return IRGenerator().generate(ast)
