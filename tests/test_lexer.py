"""
Unit tests for the Lexer module
"""

from cmmc.lexer import MAX_INT, Lexer, TokenType


class TestLexerBasics:
    """Test basic lexer functionality"""

    def test_empty_input(self):
        tokens = Lexer("").tokenize()
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_identifiers_and_keywords(self):
        tokens = Lexer("int integer bool string void").tokenize()[:-1]
        assert [t.type for t in tokens] == [
            TokenType.KEYWORD,
            TokenType.IDENTIFIER,
            TokenType.KEYWORD,
            TokenType.KEYWORD,
            TokenType.KEYWORD,
        ]

    def test_positions_track_lines(self):
        tokens = Lexer("x\n  y").tokenize()
        assert (tokens[0].line, tokens[0].column) == (1, 1)
        assert (tokens[1].line, tokens[1].column) == (2, 3)


class TestOperators:
    """Test operator recognition"""

    def test_two_char_operators(self):
        tokens = Lexer("== != <= >= && || = < > ! &").tokenize()[:-1]
        assert [t.type for t in tokens] == [
            TokenType.EQ,
            TokenType.NEQ,
            TokenType.LTE,
            TokenType.GTE,
            TokenType.LAND,
            TokenType.LOR,
            TokenType.ASSIGN,
            TokenType.LT,
            TokenType.GT,
            TokenType.BANG,
            TokenType.AMPERSAND,
        ]

    def test_single_pipe_is_illegal(self):
        lexer = Lexer("a | b")
        tokens = lexer.tokenize()
        assert lexer.has_errors()
        assert lexer.errors[0].message == "ignoring illegal character: |"
        assert [t.value for t in tokens[:-1]] == ["a", "b"]


class TestLiterals:
    """Test literal scanning"""

    def test_string_keeps_quotes_and_escapes(self):
        tokens = Lexer(r'"a\tb\n"').tokenize()
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == r'"a\tb\n"'

    def test_unterminated_string(self):
        lexer = Lexer('"abc\nx')
        lexer.tokenize()
        assert lexer.errors[0].message == "ignoring unterminated string literal"

    def test_bad_escape(self):
        lexer = Lexer(r'"a\qb"')
        tokens = lexer.tokenize()
        assert lexer.errors[0].message == "ignoring string literal with bad escaped character"
        assert tokens[0].type == TokenType.EOF

    def test_large_integer_is_clamped(self):
        lexer = Lexer("99999999999")
        tokens = lexer.tokenize()
        assert tokens[0].value == str(MAX_INT)
        assert not lexer.has_errors()
        assert lexer.warnings[0].message == "integer literal too large; using max value"


class TestComments:
    """Test comment skipping"""

    def test_all_comment_styles(self):
        src = "a // one\n# two\n/* three\n four */ b"
        tokens = Lexer(src).tokenize()[:-1]
        assert [t.value for t in tokens] == ["a", "b"]
        assert tokens[1].line == 4

    def test_unterminated_block_comment(self):
        lexer = Lexer("/* never closed")
        lexer.tokenize()
        assert lexer.has_errors()
