"""
cmmc - C-- compiler front end

Checks C-- programs and translates them to a three-address intermediate
representation, following the classic lex / parse / check / translate
pipeline.
"""

__version__ = "0.1.0"
__author__ = "cmmc Contributors"
__license__ = "MIT"

from .lexer import Lexer, Token
from .parser import Parser
from .semantics import SemanticAnalyzer
from .ir import IRGenerator
from .compiler import Compiler

__all__ = [
    'Lexer',
    'Token',
    'Parser',
    'SemanticAnalyzer',
    'IRGenerator',
    'Compiler',
]
