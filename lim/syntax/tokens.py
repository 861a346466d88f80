"""Token vocabulary for the lim language.

Every lexeme the lexer can produce has exactly one TokenType. Keywords are plain identifiers that happen to be listed
in KEYWORDS; everything else is decided by the lexer's character dispatch.
"""

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    """All token kinds produced by the lexer."""

    ILLEGAL = "ILLEGAL"
    EOF = "EOF"
    ENDOFLINE = "ENDOFLINE"

    IDENT = "IDENT"

    # literal kinds
    INT = "INT"
    FLOAT = "FLOAT"
    BOOL = "BOOL"
    STRING = "STRING"

    # operators
    ASSIGN = "="
    PLUS = "+"
    MINUS = "-"
    BANG = "!"
    ASTERISK = "*"
    SLASH = "/"
    MODULUS = "%"
    BITWISE_AND = "&"
    BITWISE_OR = "|"

    LT = "<"
    GT = ">"
    LTEQ = "<="
    GTEQ = ">="
    EQ = "=="
    NOT_EQ = "!="
    OR = "||"
    AND = "&&"

    ADD_ASSIGN = "+="
    SUB_ASSIGN = "-="
    MUL_ASSIGN = "*="
    QUO_ASSIGN = "/="
    REM_ASSIGN = "%="

    # delimiters
    COMMA = ","
    SEMICOLON = ";"
    COLON = ":"
    PERIOD = "."
    ARROW = "->"
    DEFINE = ":="

    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACK = "["
    RBRACK = "]"

    # keywords
    KW_INT = "int"
    KW_BOOL = "bool"
    KW_STRING = "string"
    KW_FLOAT = "float"
    FUNCTION = "fn"
    CONST = "const"
    STRUCT = "struct"
    TRUE = "true"
    FALSE = "false"
    IF = "if"
    ELSE = "else"
    RETURN = "return"
    NULL = "null"


@dataclass(frozen=True)
class Token:
    """A single token. line is 1-based, col is the 0-based offset of the first character within its line."""
    type: TokenType
    literal: str
    line: int = 0
    col: int = 0

    def __repr__(self):
        return f"Token({self.type.name}, {self.literal!r}, {self.line}:{self.col})"


KEYWORDS = {
    "fn": TokenType.FUNCTION,
    "true": TokenType.TRUE,
    "false": TokenType.FALSE,
    "if": TokenType.IF,
    "else": TokenType.ELSE,
    "return": TokenType.RETURN,
    "const": TokenType.CONST,
    "null": TokenType.NULL,
    "struct": TokenType.STRUCT,

    "int": TokenType.KW_INT,
    "bool": TokenType.KW_BOOL,
    "string": TokenType.KW_STRING,
    "float": TokenType.KW_FLOAT,
}

# keywords that may start a typed declaration or annotate a parameter/return type
DECLARATION_TYPES = (TokenType.KW_INT, TokenType.KW_BOOL, TokenType.KW_STRING)

# tokens that may legally follow a complete statement
TERMINATORS = (TokenType.SEMICOLON, TokenType.ENDOFLINE, TokenType.EOF, TokenType.RBRACE)


def lookup_ident(word):
    """Returns the keyword kind of word, or IDENT if word is not reserved."""
    return KEYWORDS.get(word, TokenType.IDENT)
