"""cmmc.errors

Exception taxonomy and the diagnostics reporter.

Semantic problems never unwind the traversal: the symbol table raises one of
the exceptions below, the pass that called it catches it on the spot and
hands it to `Diagnostics.report`, then carries on with the next node.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, TextIO


logger = logging.getLogger(__name__)


class Severity(Enum):
    FATAL = "ERROR"
    WARNING = "WARNING"
    SEMANTIC_ERROR = "SEMANTIC ERROR"
    SEMANTIC_WARNING = "SEMANTIC WARNING"


class CompilingError(Exception):
    """Base class for every defect the compiler reports."""

    severity = Severity.SEMANTIC_ERROR

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        if line is not None:
            super().__init__(f"{message} at {line}:{column}")
        else:
            super().__init__(message)


class LexicalError(CompilingError):
    """Unrecoverable scanner/parser condition"""
    severity = Severity.FATAL


class SemanticError(CompilingError):
    """Recoverable semantic error; counted and reported"""
    severity = Severity.SEMANTIC_ERROR


class DeclarationConflict(SemanticError):
    """Duplicate or incompatible redeclaration"""


class UndeclaredName(SemanticError):
    """Lookup of a variable or function signature failed"""


class SemanticWarning(CompilingError):
    """Advisory semantic problem"""
    severity = Severity.SEMANTIC_WARNING


@dataclass
class Diagnostic:
    line: int
    column: int
    severity: Severity
    message: str

    def __str__(self) -> str:
        return f"{self.line}:{self.column} **{self.severity.value}** {self.message}"


class Diagnostics:
    """Collects diagnostics for one compilation and echoes them to a sink.

    Semantic errors and warnings have independent counters. `fatal_error` is
    only raised for lexical and syntax problems.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream: TextIO = stream if stream is not None else io.StringIO()
        self.items: List[Diagnostic] = []
        self.semantic_errors = 0
        self.semantic_warnings = 0
        self.fatal_error = False

    def _emit(self, diag: Diagnostic) -> None:
        self.items.append(diag)
        self.stream.write(f"{diag}\n")

    def fatal(self, line: int, column: int, message: str) -> None:
        self.fatal_error = True
        self._emit(Diagnostic(line, column, Severity.FATAL, message))

    def warn(self, line: int, column: int, message: str) -> None:
        self._emit(Diagnostic(line, column, Severity.WARNING, message))

    def semantic_error(self, line: int, column: int, message: str) -> None:
        self.semantic_errors += 1
        self._emit(Diagnostic(line, column, Severity.SEMANTIC_ERROR, message))

    def semantic_warn(self, line: int, column: int, message: str) -> None:
        self.semantic_warnings += 1
        self._emit(Diagnostic(line, column, Severity.SEMANTIC_WARNING, message))

    def report(self, line: int, column: int, error: CompilingError) -> None:
        """Record a caught exception at the position of the node that hit it."""
        logger.debug("%s at %d:%d: %s", type(error).__name__, line, column, error.message)
        if error.severity is Severity.SEMANTIC_WARNING:
            self.semantic_warn(line, column, error.message)
        elif error.severity is Severity.FATAL:
            self.fatal(line, column, error.message)
        else:
            self.semantic_error(line, column, error.message)

    @property
    def errors(self) -> List[str]:
        return [str(d) for d in self.items if d.severity in (Severity.FATAL, Severity.SEMANTIC_ERROR)]

    @property
    def warnings(self) -> List[str]:
        return [str(d) for d in self.items if d.severity in (Severity.WARNING, Severity.SEMANTIC_WARNING)]

    def summary(self) -> str:
        return f"Semantic Error(s): {self.semantic_errors}. Semantic Warning(s): {self.semantic_warnings}."
