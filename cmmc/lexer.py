"""
Lexical Analyzer (Lexer) for C--

Converts source code into a stream of tokens for the parser.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Set

from cmmc.errors import LexicalError


logger = logging.getLogger(__name__)

MAX_INT = 2147483647


class TokenType(Enum):
    """Token types for the C-- lexer"""
    # Literals
    NUMBER = auto()
    STRING = auto()

    # Identifiers and Keywords
    IDENTIFIER = auto()
    KEYWORD = auto()

    # Operators
    PLUS = auto()                # +
    MINUS = auto()               # -
    STAR = auto()                # *
    SLASH = auto()               # /
    PERCENT = auto()             # %
    ASSIGN = auto()              # =
    EQ = auto()                  # ==
    NEQ = auto()                 # !=
    LT = auto()                  # <
    GT = auto()                  # >
    LTE = auto()                 # <=
    GTE = auto()                 # >=
    AMPERSAND = auto()           # &
    LAND = auto()                # &&
    LOR = auto()                 # ||
    BANG = auto()                # !

    # Delimiters
    LPAREN = auto()              # (
    RPAREN = auto()              # )
    LBRACE = auto()              # {
    RBRACE = auto()              # }
    LBRACKET = auto()            # [
    RBRACKET = auto()            # ]
    SEMICOLON = auto()           # ;
    COMMA = auto()               # ,

    # Special
    EOF = auto()


SINGLE_CHAR_TOKENS = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '*': TokenType.STAR,
    '/': TokenType.SLASH,
    '%': TokenType.PERCENT,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
    '{': TokenType.LBRACE,
    '}': TokenType.RBRACE,
    '[': TokenType.LBRACKET,
    ']': TokenType.RBRACKET,
    ';': TokenType.SEMICOLON,
    ',': TokenType.COMMA,
}

# first char -> (second char, two-char type, one-char type or None)
PAIRED_TOKENS = {
    '=': ('=', TokenType.EQ, TokenType.ASSIGN),
    '!': ('=', TokenType.NEQ, TokenType.BANG),
    '<': ('=', TokenType.LTE, TokenType.LT),
    '>': ('=', TokenType.GTE, TokenType.GT),
    '&': ('&', TokenType.LAND, TokenType.AMPERSAND),
    '|': ('|', TokenType.LOR, None),
}

ESCAPES = set('nt"\\\'')


@dataclass
class Token:
    """Represents a lexical token"""
    type: TokenType
    value: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {repr(self.value)}, {self.line}:{self.column})"


class LexerError(LexicalError):
    """Lexer error with line and column information"""
    def __init__(self, message: str, line: int, column: int):
        super().__init__(message, line, column)


class Lexer:
    """Lexical analyzer for C-- source code"""

    KEYWORDS: Set[str] = {
        'int', 'bool', 'string', 'void', 'if', 'else', 'while', 'for', 'return',
    }

    def __init__(self, source: str, filename: str = "<input>"):
        """Initialize lexer with source code"""
        self.source = source
        self.filename = filename
        self.position = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.errors: List[LexerError] = []
        # Recoverable problems, reported as **WARNING**.
        self.warnings: List[LexerError] = []

    def current_char(self) -> Optional[str]:
        """Get current character without consuming"""
        if self.position >= len(self.source):
            return None
        return self.source[self.position]

    def peek_char(self, offset: int = 1) -> Optional[str]:
        """Peek ahead at character"""
        pos = self.position + offset
        if pos >= len(self.source):
            return None
        return self.source[pos]

    def advance(self) -> Optional[str]:
        """Consume and return current character"""
        if self.position >= len(self.source):
            return None

        char = self.source[self.position]
        self.position += 1

        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def skip_whitespace(self) -> None:
        while self.current_char() and self.current_char() in ' \t\r\n\f':
            self.advance()

    def skip_line_comment(self) -> None:
        """Skip `//...` and `#...` comments"""
        while self.current_char() and self.current_char() != '\n':
            self.advance()

    def skip_block_comment(self) -> None:
        """Skip multi-line comment (/* ... */)"""
        line, column = self.line, self.column
        self.advance()  # skip /
        self.advance()  # skip *

        while self.current_char():
            if self.current_char() == '*' and self.peek_char() == '/':
                self.advance()
                self.advance()
                return
            self.advance()

        self.errors.append(LexerError("unterminated comment", line, column))

    def read_string(self, line: int, column: int) -> Optional[str]:
        """Read a string literal; the returned text keeps its quotes and escapes.

        Returns None when the literal is rejected (an error was recorded).
        """
        text = self.advance()  # opening quote
        bad_escape = False

        while True:
            char = self.current_char()
            if char is None or char == '\n':
                self.errors.append(LexerError("ignoring unterminated string literal", line, column))
                return None
            if char == '"':
                text += self.advance()
                break
            if char == '\\':
                text += self.advance()
                nxt = self.current_char()
                if nxt is None or nxt == '\n':
                    continue
                if nxt not in ESCAPES:
                    bad_escape = True
                text += self.advance()
                continue
            text += self.advance()

        if bad_escape:
            self.errors.append(LexerError("ignoring string literal with bad escaped character", line, column))
            return None
        return text

    def read_number(self, line: int, column: int) -> str:
        num_str = ""
        while self.current_char() and self.current_char().isdigit():
            num_str += self.advance()
        if int(num_str) > MAX_INT:
            self.warnings.append(LexerError("integer literal too large; using max value", line, column))
            return str(MAX_INT)
        return num_str

    def read_identifier(self) -> str:
        """Read identifier or keyword"""
        ident = ""
        while self.current_char() and (self.current_char().isalnum() or self.current_char() == '_'):
            ident += self.advance()
        return ident

    def tokenize(self) -> List[Token]:
        """Tokenize entire source code"""
        self.tokens = []
        self.errors = []
        self.warnings = []

        while self.position < len(self.source):
            self.skip_whitespace()

            if self.position >= len(self.source):
                break

            token_line = self.line
            token_column = self.column
            char = self.current_char()

            # Comments
            if char == '#' or (char == '/' and self.peek_char() == '/'):
                self.skip_line_comment()
                continue
            if char == '/' and self.peek_char() == '*':
                self.skip_block_comment()
                continue

            if char == '"':
                value = self.read_string(token_line, token_column)
                if value is not None:
                    self.tokens.append(Token(TokenType.STRING, value, token_line, token_column))

            elif char.isdigit():
                value = self.read_number(token_line, token_column)
                self.tokens.append(Token(TokenType.NUMBER, value, token_line, token_column))

            elif char.isalpha() or char == '_':
                ident = self.read_identifier()
                token_type = TokenType.KEYWORD if ident in self.KEYWORDS else TokenType.IDENTIFIER
                self.tokens.append(Token(token_type, ident, token_line, token_column))

            elif char in PAIRED_TOKENS:
                second, pair_type, single_type = PAIRED_TOKENS[char]
                self.advance()
                if self.current_char() == second:
                    self.advance()
                    self.tokens.append(Token(pair_type, char + second, token_line, token_column))
                elif single_type is not None:
                    self.tokens.append(Token(single_type, char, token_line, token_column))
                else:
                    self.errors.append(LexerError(f"ignoring illegal character: {char}", token_line, token_column))

            elif char in SINGLE_CHAR_TOKENS:
                self.advance()
                self.tokens.append(Token(SINGLE_CHAR_TOKENS[char], char, token_line, token_column))

            else:
                self.errors.append(LexerError(f"ignoring illegal character: {char}", token_line, token_column))
                self.advance()

        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column))
        logger.debug("%s: %d token(s), %d error(s)", self.filename, len(self.tokens), len(self.errors))
        return self.tokens

    def has_errors(self) -> bool:
        """Check if any lexer errors occurred"""
        return len(self.errors) > 0

    def get_errors(self) -> List[LexerError]:
        """Get all lexer errors"""
        return self.errors
