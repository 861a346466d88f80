"""Lexical analysis for the lim language: converts source text into a lazy stream of tokens.

The lexer never looks further ahead than one character. Newlines are significant (they terminate statements) and are
emitted as ENDOFLINE tokens; spaces, tabs, carriage returns and comments are skipped. Malformed input never stops the
lexer: it records a LexicalError and hands an ILLEGAL token to its caller, who decides what to do with it.
"""

from lim.lang.error import LexicalError
from lim.syntax.tokens import Token, TokenType, lookup_ident


class Lexer:
    """Pull-based lim lexer. Call next_token() repeatedly, or iterate to get every token up to and including EOF."""
    WHITESPACE = {" ", "\t", "\r"}

    ONE_CHAR_TOKENS = {
        "=": TokenType.ASSIGN,
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "!": TokenType.BANG,
        "*": TokenType.ASTERISK,
        "/": TokenType.SLASH,
        "%": TokenType.MODULUS,
        "&": TokenType.BITWISE_AND,
        "|": TokenType.BITWISE_OR,
        "<": TokenType.LT,
        ">": TokenType.GT,
        ",": TokenType.COMMA,
        ";": TokenType.SEMICOLON,
        ":": TokenType.COLON,
        ".": TokenType.PERIOD,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
        "[": TokenType.LBRACK,
        "]": TokenType.RBRACK,
    }

    TWO_CHAR_TOKENS = {
        "==": TokenType.EQ,
        "!=": TokenType.NOT_EQ,
        "<=": TokenType.LTEQ,
        ">=": TokenType.GTEQ,
        "+=": TokenType.ADD_ASSIGN,
        "-=": TokenType.SUB_ASSIGN,
        "*=": TokenType.MUL_ASSIGN,
        "/=": TokenType.QUO_ASSIGN,
        "%=": TokenType.REM_ASSIGN,
        "&&": TokenType.AND,
        "||": TokenType.OR,
        "->": TokenType.ARROW,
        ":=": TokenType.DEFINE,
    }

    def __init__(self, source, first_line=1):
        self.source = source
        self.lines = source.split("\n")
        self.first_line = first_line  # lets the shell number lines across inputs

        self.position = 0       # index of self.ch
        self.read_position = 0  # index of the next character to read
        self.ch = None          # None once past the end of input

        self.line = first_line  # line of self.ch
        self.line_start = 0     # index of the first character of self.line

        self.errors = []
        self.warnings = []

        self._read_char()

    def _read_char(self):
        """Advances one character, keeping the line counter and line start in step."""
        if self.ch == "\n":
            self.line += 1
            self.line_start = self.read_position

        if self.read_position >= len(self.source):
            self.ch = None
        else:
            self.ch = self.source[self.read_position]
        self.position = self.read_position
        self.read_position += 1

    def _peek_char(self):
        if self.read_position >= len(self.source):
            return None
        return self.source[self.read_position]

    def source_line(self, line_num):
        """Returns the text of line line_num (as numbered in diagnostics), or '' if there is no such line."""
        idx = line_num - self.first_line
        if 0 <= idx < len(self.lines):
            return self.lines[idx].rstrip("\r")
        return ""

    def error_at(self, tok):
        """Returns the LexicalError recorded for ILLEGAL token tok."""
        for error in self.errors:
            if (error.line, error.col) == (tok.line, tok.col):
                return error
        return LexicalError("illegal token '{}'", tok.literal, source=self.source_line(tok.line), line=tok.line,
                            start=tok.col, end=tok.col + max(len(tok.literal), 1))

    def _diagnostic(self, cls, msg, exprs, line, col, length):
        return cls(msg, exprs, source=self.source_line(line), line=line, start=col, end=col + max(length, 1))

    def _skip_ignored(self):
        """Skips whitespace (but not newlines) and comments."""
        while True:
            while self.ch is not None and self.ch in Lexer.WHITESPACE:
                self._read_char()

            if self.ch == "/" and self._peek_char() == "/":
                while self.ch is not None and self.ch != "\n":
                    self._read_char()  # the newline itself is left for next_token

            elif self.ch == "/" and self._peek_char() == "*":
                line, col = self.line, self.position - self.line_start
                self._read_char()
                self._read_char()
                while self.ch is not None and not (self.ch == "*" and self._peek_char() == "/"):
                    self._read_char()

                if self.ch is None:
                    self.warnings.append(self._diagnostic(LexicalError, "unterminated block comment", None,
                                                          line, col, 2))
                else:
                    self._read_char()
                    self._read_char()
            else:
                return

    def next_token(self):
        """Returns the next token and advances past it. Past the end of input, always returns EOF."""
        self._skip_ignored()

        line, col = self.line, self.position - self.line_start
        ch = self.ch

        if ch is None:
            return Token(TokenType.EOF, "", line, col)

        if ch == "\n":
            self._read_char()
            return Token(TokenType.ENDOFLINE, "\n", line, col)

        peek = self._peek_char()
        if peek is not None and ch + peek in Lexer.TWO_CHAR_TOKENS:
            self._read_char()
            self._read_char()
            return Token(Lexer.TWO_CHAR_TOKENS[ch + peek], ch + peek, line, col)

        if ch in Lexer.ONE_CHAR_TOKENS:
            self._read_char()
            return Token(Lexer.ONE_CHAR_TOKENS[ch], ch, line, col)

        if ch == '"':
            return self._read_string(line, col)

        if Lexer.is_letter(ch):
            word = self._read_word()
            return Token(lookup_ident(word), word, line, col)

        if Lexer.is_digit(ch):
            return self._read_number(line, col)

        self._read_char()
        self.errors.append(self._diagnostic(LexicalError, "illegal character '{}'", ch, line, col, 1))
        return Token(TokenType.ILLEGAL, ch, line, col)

    def _read_word(self):
        start = self.position
        while self.ch is not None and (Lexer.is_letter(self.ch) or Lexer.is_digit(self.ch)):
            self._read_char()
        return self.source[start:self.position]

    def _read_number(self, line, col):
        """Reads a maximal run of digits. Digits running straight into letters form an illegal identifier."""
        start = self.position
        while self.ch is not None and Lexer.is_digit(self.ch):
            self._read_char()

        if self.ch is not None and Lexer.is_letter(self.ch):
            self._read_word()
            word = self.source[start:self.position]
            self.errors.append(self._diagnostic(LexicalError, "identifiers cannot start with a number: '{}'", word,
                                                line, col, len(word)))
            return Token(TokenType.ILLEGAL, word, line, col)

        return Token(TokenType.INT, self.source[start:self.position], line, col)

    def _read_string(self, line, col):
        """Reads a string literal verbatim (no escape sequences) up to the closing quote."""
        self._read_char()  # opening quote
        start = self.position
        while self.ch is not None and self.ch != '"':
            self._read_char()

        value = self.source[start:self.position]
        if self.ch is None:
            self.errors.append(self._diagnostic(LexicalError, "unterminated string literal", None,
                                                line, col, len(self.source_line(line)) - col))
            return Token(TokenType.ILLEGAL, '"' + value, line, col)

        self._read_char()  # closing quote
        return Token(TokenType.STRING, value, line, col)

    @staticmethod
    def is_letter(ch):
        return "a" <= ch <= "z" or "A" <= ch <= "Z" or ch == "_"

    @staticmethod
    def is_digit(ch):
        return "0" <= ch <= "9"

    def __iter__(self):
        while True:
            tok = self.next_token()
            yield tok
            if tok.type is TokenType.EOF:
                return
