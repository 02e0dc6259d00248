"""cmmc.parser

Recursive-descent parser for C--.

- global variables (scalars and fixed-size arrays), function prototypes and
  function definitions
- function/if/while/for bodies are `{ declarations... statements... }`
- statements: assignment, call, return, if/else, while, for
- expressions with C operator precedence for: ||, &&, equality, relational,
  additive, multiplicative, unary (- ! & *), subscripts and calls

Types are one of `int bool string void` followed by any number of `*`.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Union

from cmmc.ast_nodes import (
    TYPE_NAMES,
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
from cmmc.errors import LexicalError
from cmmc.lexer import Token, TokenType


logger = logging.getLogger(__name__)


class ParserError(LexicalError):
    """Parser error"""
    def __init__(self, message: str, token: Optional[Token] = None):
        self.token = token
        if token:
            super().__init__(message, token.line, token.column)
        else:
            super().__init__(message)


class Parser:
    """Parser for C--"""

    def __init__(self, tokens: List[Token]):
        self.tokens: List[Token] = tokens
        self.position = 0
        self.current_token: Optional[Token] = self.tokens[0] if self.tokens else None

    def parse(self) -> Program:
        """Parse entire program"""
        decls: List[Decl] = []
        while self.current_token is not None and not self._at(TokenType.EOF):
            decls.append(self._parse_external_declaration())
        logger.debug("parsed %d top-level declaration(s)", len(decls))
        return Program(decls=decls, line=1, column=1)

    def advance(self) -> Token:
        """Move to next token"""
        if self.position < len(self.tokens) - 1:
            self.position += 1
            self.current_token = self.tokens[self.position]
        return self.current_token

    # -----------------
    # Helpers
    # -----------------

    def _at(self, t: TokenType) -> bool:
        return self.current_token is not None and self.current_token.type == t

    def _at_keyword(self, kw: str) -> bool:
        tok = self.current_token
        return tok is not None and tok.type == TokenType.KEYWORD and tok.value == kw

    def _match(self, t: TokenType) -> bool:
        if self._at(t):
            self.advance()
            return True
        return False

    def _expect(self, t: TokenType, msg: str) -> Token:
        tok = self.current_token
        if tok is None or tok.type != t:
            raise ParserError(msg, tok)
        self.advance()
        return tok

    def _is_type_specifier(self) -> bool:
        tok = self.current_token
        return tok is not None and tok.type == TokenType.KEYWORD and tok.value in TYPE_NAMES

    def _parse_type(self) -> Type:
        tok = self.current_token
        if not self._is_type_specifier():
            raise ParserError("Expected type specifier", tok)
        self.advance()
        pointers = 0
        while self._match(TokenType.STAR):
            pointers += 1
        return Type(tok.value, pointers)

    # -----------------
    # Declarations
    # -----------------

    def _parse_external_declaration(self) -> Decl:
        start = self.current_token
        ty = self._parse_type()
        name = self._expect(TokenType.IDENTIFIER, "Expected identifier after type")

        if self._match(TokenType.LPAREN):
            formals = self._parse_formals()
            self._expect(TokenType.RPAREN, "Expected ')' after parameters")
            if self._match(TokenType.SEMICOLON):
                return FnPreDecl(name=name.value, return_type=ty, formals=formals, line=start.line, column=start.column)
            body = self._parse_body()
            return FnDecl(name=name.value, return_type=ty, formals=formals, body=body, line=start.line, column=start.column)

        return self._finish_var_decl(start, ty, name)

    def _finish_var_decl(self, start: Token, ty: Type, name: Token) -> VarDecl:
        if self._match(TokenType.LBRACKET):
            size = self._expect(TokenType.NUMBER, "Expected array size")
            self._expect(TokenType.RBRACKET, "Expected ']' after array size")
            ty = Type(ty.name, ty.pointers, int(size.value))
        self._expect(TokenType.SEMICOLON, "Expected ';' after declaration")
        return VarDecl(name=name.value, type=ty, line=start.line, column=start.column)

    def _parse_formals(self) -> List[FormalDecl]:
        formals: List[FormalDecl] = []
        if self._at(TokenType.RPAREN):
            return formals
        while True:
            start = self.current_token
            ty = self._parse_type()
            name = self._expect(TokenType.IDENTIFIER, "Expected parameter name")
            formals.append(FormalDecl(name=name.value, type=ty, line=start.line, column=start.column))
            if not self._match(TokenType.COMMA):
                return formals

    def _parse_body(self) -> Block:
        lbrace = self._expect(TokenType.LBRACE, "Expected '{'")
        decls: List[VarDecl] = []
        while self._is_type_specifier():
            start = self.current_token
            ty = self._parse_type()
            name = self._expect(TokenType.IDENTIFIER, "Expected identifier after type")
            decls.append(self._finish_var_decl(start, ty, name))
        stmts: List[Stmt] = []
        while not self._at(TokenType.RBRACE):
            if self._at(TokenType.EOF):
                raise ParserError("Expected '}' before end of input", self.current_token)
            stmts.append(self._parse_statement())
        self.advance()
        return Block(decls=decls, stmts=stmts, line=lbrace.line, column=lbrace.column)

    # -----------------
    # Statements
    # -----------------

    def _parse_statement(self) -> Stmt:
        tok = self.current_token
        if tok is None:
            raise ParserError("Unexpected end of input")

        if tok.type == TokenType.KEYWORD:
            kw = tok.value
            if kw == "return":
                self.advance()
                if self._match(TokenType.SEMICOLON):
                    return ReturnStmt(exp=None, line=tok.line, column=tok.column)
                val = self._parse_expression()
                self._expect(TokenType.SEMICOLON, "Expected ';' after return")
                return ReturnStmt(exp=val, line=tok.line, column=tok.column)
            if kw == "if":
                self.advance()
                self._expect(TokenType.LPAREN, "Expected '(' after if")
                cond = self._parse_expression()
                self._expect(TokenType.RPAREN, "Expected ')' after if condition")
                then_body = self._parse_body()
                if self._at_keyword("else"):
                    self.advance()
                    else_body = self._parse_body()
                    return IfElseStmt(exp=cond, then_body=then_body, else_body=else_body, line=tok.line, column=tok.column)
                return IfStmt(exp=cond, body=then_body, line=tok.line, column=tok.column)
            if kw == "while":
                self.advance()
                self._expect(TokenType.LPAREN, "Expected '(' after while")
                cond = self._parse_expression()
                self._expect(TokenType.RPAREN, "Expected ')' after while condition")
                body = self._parse_body()
                return WhileStmt(exp=cond, body=body, line=tok.line, column=tok.column)
            if kw == "for":
                self.advance()
                self._expect(TokenType.LPAREN, "Expected '(' after for")
                init = self._parse_simple_statement()
                self._expect(TokenType.SEMICOLON, "Expected ';' after for init")
                cond = self._parse_expression()
                self._expect(TokenType.SEMICOLON, "Expected ';' after for condition")
                incr = self._parse_simple_statement()
                self._expect(TokenType.RPAREN, "Expected ')' after for clauses")
                body = self._parse_body()
                return ForStmt(init=init, cond=cond, incr=incr, body=body, line=tok.line, column=tok.column)
            raise ParserError(f"Unexpected keyword '{kw}'", tok)

        stmt = self._parse_simple_statement()
        self._expect(TokenType.SEMICOLON, "Expected ';' after statement")
        return stmt

    def _parse_simple_statement(self) -> Union[AssignStmt, CallStmt]:
        """Assignment or call, without the trailing ';'"""
        tok = self.current_token
        target = self._parse_unary()
        if isinstance(target, CallExp) and not self._at(TokenType.ASSIGN):
            return CallStmt(call=target, line=tok.line, column=tok.column)
        if not self._is_location(target):
            raise ParserError("Expected assignable location", tok)
        self._expect(TokenType.ASSIGN, "Expected '=' in assignment")
        value = self._parse_expression()
        return AssignStmt(lhs=target, exp=value, line=tok.line, column=tok.column)

    @staticmethod
    def _is_location(exp: Exp) -> bool:
        if isinstance(exp, Id):
            return True
        if isinstance(exp, ArrayExp):
            return Parser._is_location(exp.array)
        return isinstance(exp, UnaryOp) and exp.operator == "*" and isinstance(exp.operand, Id)

    # -----------------
    # Expressions (precedence climbing)
    # -----------------

    def _parse_expression(self) -> Exp:
        return self._parse_logical_or()

    def _parse_binary(self, operand, types) -> Exp:
        expr = operand()
        while self.current_token and self.current_token.type in types:
            op = self.current_token
            self.advance()
            rhs = operand()
            expr = BinaryOp(operator=op.value, left=expr, right=rhs, line=expr.line, column=expr.column)
        return expr

    def _parse_logical_or(self) -> Exp:
        return self._parse_binary(self._parse_logical_and, {TokenType.LOR})

    def _parse_logical_and(self) -> Exp:
        return self._parse_binary(self._parse_equality, {TokenType.LAND})

    def _parse_equality(self) -> Exp:
        return self._parse_binary(self._parse_relational, {TokenType.EQ, TokenType.NEQ})

    def _parse_relational(self) -> Exp:
        return self._parse_binary(
            self._parse_additive, {TokenType.LT, TokenType.GT, TokenType.LTE, TokenType.GTE}
        )

    def _parse_additive(self) -> Exp:
        return self._parse_binary(self._parse_multiplicative, {TokenType.PLUS, TokenType.MINUS})

    def _parse_multiplicative(self) -> Exp:
        return self._parse_binary(self._parse_unary, {TokenType.STAR, TokenType.SLASH, TokenType.PERCENT})

    def _parse_unary(self) -> Exp:
        tok = self.current_token
        if tok and tok.type in {TokenType.MINUS, TokenType.BANG, TokenType.AMPERSAND, TokenType.STAR}:
            self.advance()
            operand = self._parse_unary()
            return UnaryOp(operator=tok.value, operand=operand, line=tok.line, column=tok.column)
        return self._parse_postfix()

    def _parse_postfix(self) -> Exp:
        expr = self._parse_primary()
        while self._match(TokenType.LBRACKET):
            idx = self._parse_expression()
            self._expect(TokenType.RBRACKET, "Expected ']' after subscript")
            expr = ArrayExp(array=expr, index=idx, line=expr.line, column=expr.column)
        return expr

    def _parse_primary(self) -> Exp:
        tok = self.current_token
        if tok is None:
            raise ParserError("Unexpected end of input")

        if tok.type == TokenType.IDENTIFIER:
            self.advance()
            name = Id(name=tok.value, line=tok.line, column=tok.column)
            if self._match(TokenType.LPAREN):
                args: List[Exp] = []
                if not self._at(TokenType.RPAREN):
                    args.append(self._parse_expression())
                    while self._match(TokenType.COMMA):
                        args.append(self._parse_expression())
                self._expect(TokenType.RPAREN, "Expected ')' after call")
                return CallExp(name=name, args=args, line=tok.line, column=tok.column)
            return name
        if tok.type == TokenType.NUMBER:
            self.advance()
            return IntLit(value=int(tok.value), line=tok.line, column=tok.column)
        if tok.type == TokenType.STRING:
            self.advance()
            return StringLit(value=tok.value, line=tok.line, column=tok.column)
        if self._match(TokenType.LPAREN):
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN, "Expected ')' ")
            return expr

        raise ParserError("Expected expression", tok)
