"""Parser for the lim language: recursive descent for statements, Pratt parsing (precedence climbing) for expressions.

Grammar, loosely:

```
<program>    ::= (<statement> <terminator>)*
<statement>  ::= <type> <ident> ["=" <expr>]                  ; int/bool/string declaration
               | <type> "[" "]" <ident> ["=" <expr>]          ; array declaration
               | <ident> ":=" <expr>                          ; declaration with inferred type
               | "fn" <ident> "(" [<param> ("," <param>)*] ")" ["->"] [<type> ["[" "]"]] <block>
               | "if" <expr> <block> ("else" "if" <expr> <block>)* ["else" <block>]
               | "return" [<expr>]
               | <expr>
<param>      ::= <type> ["[" "]"] <ident>
<block>      ::= "{" <statement>* "}"
<terminator> ::= ";" | newline | "}" | end of input           ; not needed after if/fn
```

The parser holds exactly two tokens (cur_token and peek_token). Newlines are statement separators, so ENDOFLINE may sit
in the peek slot (which is what stops an expression at the end of a line) but never becomes cur_token.

Errors never abort the whole parse: each one is recorded as a ParseError, the offending statement is skipped up to
the next statement boundary, and parsing carries on. Check Parser.errors before evaluating the returned Program.
"""

from lim.lang.error import LimException, ParseError
from lim.syntax import ast
from lim.syntax.tokens import DECLARATION_TYPES, TERMINATORS, Token, TokenType

LOWEST = 1
EQUALS = 2       # == !=
LESSGREATER = 3  # < > <= >=
SUM = 4          # + -
PRODUCT = 5      # * / %
PREFIX = 6       # -x !x
CALL = 7         # fn(x)
INDEX = 8        # arr[x]


class Parser:
    """Builds a Program from the tokens of a Lexer."""
    PRECEDENCES = {
        TokenType.EQ: EQUALS,
        TokenType.NOT_EQ: EQUALS,
        TokenType.LT: LESSGREATER,
        TokenType.GT: LESSGREATER,
        TokenType.LTEQ: LESSGREATER,
        TokenType.GTEQ: LESSGREATER,
        TokenType.PLUS: SUM,
        TokenType.MINUS: SUM,
        TokenType.ASTERISK: PRODUCT,
        TokenType.SLASH: PRODUCT,
        TokenType.MODULUS: PRODUCT,
        TokenType.LPAREN: CALL,
        TokenType.LBRACK: INDEX,
    }

    DECLARATIONS = {
        TokenType.KW_INT: ast.IntStatement,
        TokenType.KW_BOOL: ast.BoolStatement,
        TokenType.KW_STRING: ast.StringStatement,
    }

    # leading token of a ':=' initializer -> inferred declaration
    INFERRED = {
        TokenType.INT: ast.IntStatement,
        TokenType.MINUS: ast.IntStatement,
        TokenType.PLUS: ast.IntStatement,
        TokenType.TRUE: ast.BoolStatement,
        TokenType.FALSE: ast.BoolStatement,
        TokenType.BANG: ast.BoolStatement,
        TokenType.STRING: ast.StringStatement,
    }

    UNSUPPORTED = {
        TokenType.KW_FLOAT: "float declarations are not supported",
        TokenType.CONST: "const declarations are not supported",
        TokenType.STRUCT: "struct declarations are not supported",
    }

    def __init__(self, lexer):
        self.lexer = lexer
        self._errors = []
        self._groups = 0  # depth of open ( and [ groups, inside which newlines are insignificant

        self.prefix_parse_fns = {
            TokenType.IDENT: self._parse_identifier,
            TokenType.INT: self._parse_integer_literal,
            TokenType.STRING: self._parse_string_literal,
            TokenType.TRUE: self._parse_boolean,
            TokenType.FALSE: self._parse_boolean,
            TokenType.NULL: self._parse_null,
            TokenType.BANG: self._parse_prefix_expression,
            TokenType.MINUS: self._parse_prefix_expression,
            TokenType.PLUS: self._parse_prefix_expression,
            TokenType.LPAREN: self._parse_grouped_expression,
            TokenType.LBRACK: self._parse_array_literal,
        }

        self.infix_parse_fns = {op: self._parse_infix_expression for op in (
            TokenType.PLUS, TokenType.MINUS, TokenType.ASTERISK, TokenType.SLASH, TokenType.MODULUS,
            TokenType.EQ, TokenType.NOT_EQ, TokenType.LT, TokenType.GT, TokenType.LTEQ, TokenType.GTEQ,
        )}
        self.infix_parse_fns[TokenType.LPAREN] = self._parse_call_expression
        self.infix_parse_fns[TokenType.LBRACK] = self._parse_index_expression

        # read two tokens, so cur_token and peek_token are both set
        self.cur_token = None
        self.peek_token = self.lexer.next_token()
        self._next_token()

    @property
    def errors(self):
        """Lexical and syntactic diagnostics, in source order."""
        return sorted(self.lexer.errors + self._errors, key=lambda error: (error.line, error.start))

    # token cursor

    def _next_token(self):
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()
        while self.cur_token.type is TokenType.ENDOFLINE:
            self.cur_token = self.peek_token
            self.peek_token = self.lexer.next_token()
        self._skip_grouped_newlines()

    def _skip_grouped_newlines(self):
        while self._groups and self.peek_token.type is TokenType.ENDOFLINE:
            self.peek_token = self.lexer.next_token()

    def _open_group(self):
        self._groups += 1
        self._skip_grouped_newlines()

    def _close_group(self):
        self._groups -= 1

    def _cur_is(self, *types):
        return self.cur_token.type in types

    def _peek_is(self, *types):
        return self.peek_token.type in types

    def _expect_peek(self, tok_type, what=None):
        """Advances if the peek token has type tok_type, otherwise records and raises a ParseError."""
        if self._peek_is(tok_type):
            self._next_token()
            return self.cur_token
        raise self._error("expected {}, got {}", (what or f"'{tok_type.value}'", self._describe(self.peek_token)),
                          self.peek_token)

    # errors

    @staticmethod
    def _describe(tok):
        if tok.type is TokenType.EOF:
            return "end of input"
        if tok.type is TokenType.ENDOFLINE:
            return "end of line"
        return f"'{tok.literal}'"

    def _error(self, msg, exprs, tok):
        """Records a ParseError located at tok and returns it so the caller can raise it."""
        if tok.type is TokenType.ILLEGAL:
            return self.lexer.error_at(tok)

        error = ParseError(msg, exprs, source=self.lexer.source_line(tok.line), line=tok.line, start=tok.col,
                           end=tok.col + max(len(tok.literal), 1))
        self._errors.append(error)
        return error

    def _synchronize(self):
        """Skips the rest of a malformed statement, including any braces opened within it. Stops short of a '}' that
        closes an enclosing block, so that block can still be closed.
        """
        depth = 0
        while not self._cur_is(TokenType.EOF):
            if self._cur_is(TokenType.LBRACE):
                depth += 1
            elif self._cur_is(TokenType.RBRACE) and depth:
                depth -= 1
            elif self._cur_is(TokenType.SEMICOLON, TokenType.RBRACE):
                return

            if not depth and self._peek_is(TokenType.ENDOFLINE, TokenType.EOF, TokenType.RBRACE):
                return
            self._next_token()

    def _parse_statement_or_recover(self):
        """Parses one statement. Returns None (after recovering) if it was malformed."""
        groups = self._groups
        try:
            return self._parse_statement()
        except LimException:
            self._groups = groups
            self._synchronize()
            return None

    # statements

    def parse_program(self):
        """Parses the whole token stream. Always returns a Program; it is only meaningful if errors is empty."""
        program = ast.Program()

        while not self._cur_is(TokenType.EOF):
            stmt = self._parse_statement_or_recover()
            if stmt is not None:
                program.statements.append(stmt)
            self._next_token()

        return program

    def _parse_statement(self):
        tok = self.cur_token

        if tok.type is TokenType.ILLEGAL:
            raise self.lexer.error_at(tok)

        if tok.type is TokenType.SEMICOLON:
            return None  # empty statement

        if tok.type in Parser.UNSUPPORTED:
            raise self._error(Parser.UNSUPPORTED[tok.type], None, tok)

        if tok.type in Parser.DECLARATIONS:
            if self._peek_is(TokenType.LBRACK):
                stmt = self._parse_array_statement()
            else:
                stmt = self._parse_declare_statement()
        elif tok.type is TokenType.FUNCTION:
            return self._parse_function_statement()
        elif tok.type is TokenType.IF:
            return self._parse_if_statement()
        elif tok.type is TokenType.RETURN:
            stmt = self._parse_return_statement()
        elif tok.type is TokenType.IDENT and self._peek_is(TokenType.DEFINE):
            stmt = self._parse_define_statement()
        else:
            stmt = self._parse_expression_statement()

        self._end_statement()
        return stmt

    def _end_statement(self):
        """A non-block statement must be followed by a terminator. A ';' is consumed here."""
        if self._peek_is(TokenType.SEMICOLON):
            self._next_token()
        elif not self._peek_is(*TERMINATORS):
            raise self._error("expected end of statement, got {}", self._describe(self.peek_token), self.peek_token)

    def _at_statement_end(self):
        return self._peek_is(*TERMINATORS)

    def _parse_declare_statement(self):
        """int a = 5 / bool b / string s = "x". A missing initializer defaults to the type's zero value."""
        tok = self.cur_token
        name = self._parse_declared_name()

        if self._at_statement_end():
            return Parser.DECLARATIONS[tok.type](tok, name)

        self._expect_peek(TokenType.ASSIGN)
        self._next_token()
        return Parser.DECLARATIONS[tok.type](tok, name, self._parse_expression(LOWEST))

    def _parse_array_statement(self):
        """int []arr = [1, 2, 3]. A missing initializer defaults to an empty array."""
        tok = self.cur_token
        self._expect_peek(TokenType.LBRACK)
        self._expect_peek(TokenType.RBRACK)
        name = self._parse_declared_name()

        if self._at_statement_end():
            return ast.ArrayStatement(tok, tok.literal, name)

        self._expect_peek(TokenType.ASSIGN)
        self._next_token()
        return ast.ArrayStatement(tok, tok.literal, name, self._parse_expression(LOWEST))

    def _parse_declared_name(self):
        tok = self._expect_peek(TokenType.IDENT, "a variable name")
        return ast.Identifier(tok, tok.literal)

    def _parse_define_statement(self):
        """x := <expr>. The declared type is inferred from the first token of <expr>."""
        ident = self.cur_token
        name = ast.Identifier(ident, ident.literal)
        self._next_token()  # :=
        define = self.cur_token
        self._next_token()

        leading = self.cur_token
        if leading.type is TokenType.LBRACK:
            value = self._parse_expression(LOWEST)
            if not isinstance(value, ast.ArrayLiteral):
                raise self._error("cannot infer the type of '{}' from {}", (ident.literal, self._describe(leading)),
                                  leading)
            kind = Parser._infer_array_kind(value)
            return ast.ArrayStatement(Token(TokenType(kind), kind, define.line, define.col), kind, name, value)

        if leading.type not in Parser.INFERRED:
            raise self._error("cannot infer the type of '{}' from {}", (ident.literal, self._describe(leading)),
                              leading)

        cls = Parser.INFERRED[leading.type]
        keyword = Token(TokenType(cls.KIND), cls.KIND, define.line, define.col)
        return cls(keyword, name, self._parse_expression(LOWEST))

    @staticmethod
    def _infer_array_kind(array):
        """Infers the element type of an array literal from the leading token of its first element (int if empty)."""
        if not array.elements:
            return "int"

        first = array.elements[0]
        while isinstance(first, (ast.InfixExpression, ast.IndexExpression, ast.CallExpression)):
            first = first.function if isinstance(first, ast.CallExpression) else first.left

        if first.token.type in Parser.INFERRED:
            return Parser.INFERRED[first.token.type].KIND
        return "int"

    def _parse_return_statement(self):
        tok = self.cur_token
        if self._at_statement_end():
            return ast.ReturnStatement(tok)

        self._next_token()
        return ast.ReturnStatement(tok, self._parse_expression(LOWEST))

    def _parse_expression_statement(self):
        tok = self.cur_token
        return ast.ExpressionStatement(tok, self._parse_expression(LOWEST))

    def _parse_block_statement(self):
        """Parses from the current '{' up to its matching '}'. cur_token is left on the '}'."""
        block = ast.BlockStatement(self.cur_token)
        groups, self._groups = self._groups, 0
        self._next_token()

        while not self._cur_is(TokenType.RBRACE, TokenType.EOF):
            stmt = self._parse_statement_or_recover()
            if stmt is not None:
                block.statements.append(stmt)
            elif self._cur_is(TokenType.RBRACE):
                break
            self._next_token()

        self._groups = groups
        if self._cur_is(TokenType.EOF):
            raise self._error("expected {}, got end of input", "'}'", self.cur_token)
        return block

    def _parse_if_statement(self):
        """Builds the if / else if / else chain as a linked list of IfStatements."""
        root = self._parse_if_link(self.cur_token)
        leaf = root

        while self._peek_is(TokenType.ELSE):
            self._next_token()
            else_tok = self.cur_token

            if self._peek_is(TokenType.LBRACE):
                self._next_token()
                leaf.next_case = ast.IfStatement(else_tok, None, self._parse_block_statement())
                break

            if not self._peek_is(TokenType.IF):
                raise self._error("expected 'if' or '{{' after 'else', got {}", self._describe(self.peek_token),
                                  self.peek_token)

            self._next_token()
            leaf.next_case = self._parse_if_link(self.cur_token)
            leaf = leaf.next_case

        return root

    def _parse_if_link(self, tok):
        self._next_token()
        condition = self._parse_expression(LOWEST)
        self._expect_peek(TokenType.LBRACE)
        return ast.IfStatement(tok, condition, self._parse_block_statement())

    def _parse_function_statement(self):
        tok = self.cur_token
        name = self._expect_peek(TokenType.IDENT, "a function name").literal
        self._expect_peek(TokenType.LPAREN)
        parameters = self._parse_function_parameters()

        if self._peek_is(TokenType.ARROW):
            self._next_token()
            if not self._peek_is(*DECLARATION_TYPES):
                raise self._error("expected a return type, got {}", self._describe(self.peek_token), self.peek_token)

        return_type = None
        if self._peek_is(*DECLARATION_TYPES):
            self._next_token()
            return_type = self._parse_type_name()

        self._expect_peek(TokenType.LBRACE)
        return ast.FunctionStatement(tok, name, parameters, return_type, self._parse_block_statement())

    def _parse_type_name(self):
        """Reads a type keyword at cur_token and an optional '[]' array marker."""
        type_name = self.cur_token.literal
        if self._peek_is(TokenType.LBRACK):
            self._next_token()
            self._expect_peek(TokenType.RBRACK)
            type_name += " []"
        return type_name

    def _parse_function_parameters(self):
        """Parses '(type a, type b)' starting at the '('. Every parameter must declare its type."""
        parameters = []
        self._open_group()

        if self._peek_is(TokenType.RPAREN):
            self._close_group()
            self._next_token()
            return parameters

        while True:
            self._next_token()
            if not self._cur_is(*DECLARATION_TYPES):
                raise self._error("expected a parameter type, got {}", self._describe(self.cur_token),
                                  self.cur_token)
            type_name = self._parse_type_name()
            tok = self._expect_peek(TokenType.IDENT, "a parameter name")
            parameters.append(ast.Identifier(tok, tok.literal, type_name))

            if not self._peek_is(TokenType.COMMA):
                break
            self._next_token()

        self._close_group()
        self._expect_peek(TokenType.RPAREN)
        return parameters

    # expressions

    def _parse_expression(self, precedence):
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            raise self._error("unexpected {}, expected an expression", self._describe(self.cur_token),
                              self.cur_token)

        left = prefix()
        while not self._peek_is(TokenType.SEMICOLON) and precedence < self._peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left

            self._next_token()
            left = infix(left)

        return left

    def _peek_precedence(self):
        return Parser.PRECEDENCES.get(self.peek_token.type, LOWEST)

    def _cur_precedence(self):
        return Parser.PRECEDENCES.get(self.cur_token.type, LOWEST)

    def _parse_identifier(self):
        return ast.Identifier(self.cur_token, self.cur_token.literal)

    def _parse_integer_literal(self):
        tok = self.cur_token
        value = int(tok.literal)
        if value >= 2 ** 63:
            raise self._error("integer literal {} is out of range", tok.literal, tok)
        return ast.IntegerLiteral(tok, value)

    def _parse_string_literal(self):
        return ast.StringVal(self.cur_token, self.cur_token.literal)

    def _parse_boolean(self):
        return ast.Boolean(self.cur_token, self._cur_is(TokenType.TRUE))

    def _parse_null(self):
        return ast.NullLiteral(self.cur_token)

    def _parse_prefix_expression(self):
        tok = self.cur_token
        self._next_token()
        return ast.PrefixExpression(tok, tok.literal, self._parse_expression(PREFIX))

    def _parse_infix_expression(self, left):
        tok = self.cur_token
        precedence = self._cur_precedence()
        self._next_token()
        return ast.InfixExpression(tok, left, tok.literal, self._parse_expression(precedence))

    def _parse_grouped_expression(self):
        self._open_group()
        self._next_token()
        expr = self._parse_expression(LOWEST)
        self._close_group()
        self._expect_peek(TokenType.RPAREN)
        return expr

    def _parse_array_literal(self):
        tok = self.cur_token
        return ast.ArrayLiteral(tok, self._parse_expression_list(TokenType.RBRACK))

    def _parse_call_expression(self, function):
        tok = self.cur_token
        return ast.CallExpression(tok, function, self._parse_expression_list(TokenType.RPAREN))

    def _parse_index_expression(self, left):
        tok = self.cur_token
        self._open_group()
        self._next_token()
        index = self._parse_expression(LOWEST)
        self._close_group()
        self._expect_peek(TokenType.RBRACK)
        return ast.IndexExpression(tok, left, index)

    def _parse_expression_list(self, end):
        """Parses comma-separated expressions from the current opening token up to end."""
        items = []
        self._open_group()

        if self._peek_is(end):
            self._close_group()
            self._next_token()
            return items

        self._next_token()
        items.append(self._parse_expression(LOWEST))
        while self._peek_is(TokenType.COMMA):
            self._next_token()
            self._next_token()
            items.append(self._parse_expression(LOWEST))

        self._close_group()
        self._expect_peek(end)
        return items
