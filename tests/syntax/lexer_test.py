import unittest

from lim.syntax.lexer import Lexer
from lim.syntax.tokens import TokenType


def kinds(source):
    return [(tok.type, tok.literal) for tok in Lexer(source)]


class LexerTestCase(unittest.TestCase):

    def test_declarations(self):
        source = 'int []arr = [1, 2]\nx := "hi" // trailing\n'
        expected = [
            (TokenType.KW_INT, "int"),
            (TokenType.LBRACK, "["),
            (TokenType.RBRACK, "]"),
            (TokenType.IDENT, "arr"),
            (TokenType.ASSIGN, "="),
            (TokenType.LBRACK, "["),
            (TokenType.INT, "1"),
            (TokenType.COMMA, ","),
            (TokenType.INT, "2"),
            (TokenType.RBRACK, "]"),
            (TokenType.ENDOFLINE, "\n"),
            (TokenType.IDENT, "x"),
            (TokenType.DEFINE, ":="),
            (TokenType.STRING, "hi"),
            (TokenType.ENDOFLINE, "\n"),
            (TokenType.EOF, ""),
        ]
        self.assertEqual(expected, kinds(source))

    def test_operators(self):
        cases = {
            "==": TokenType.EQ, "!=": TokenType.NOT_EQ, "<=": TokenType.LTEQ, ">=": TokenType.GTEQ,
            "->": TokenType.ARROW, ":=": TokenType.DEFINE, "&&": TokenType.AND, "||": TokenType.OR,
            "+=": TokenType.ADD_ASSIGN, "-=": TokenType.SUB_ASSIGN, "*=": TokenType.MUL_ASSIGN,
            "/=": TokenType.QUO_ASSIGN, "%=": TokenType.REM_ASSIGN,
            "=": TokenType.ASSIGN, "+": TokenType.PLUS, "-": TokenType.MINUS, "!": TokenType.BANG,
            "*": TokenType.ASTERISK, "/": TokenType.SLASH, "%": TokenType.MODULUS, "<": TokenType.LT,
            ">": TokenType.GT, "&": TokenType.BITWISE_AND, "|": TokenType.BITWISE_OR, ":": TokenType.COLON,
            ".": TokenType.PERIOD, ";": TokenType.SEMICOLON,
        }
        for case, result in cases.items():
            self.assertEqual([(result, case), (TokenType.EOF, "")], kinds(case))

    def test_keywords(self):
        cases = {
            "fn": TokenType.FUNCTION, "if": TokenType.IF, "else": TokenType.ELSE, "return": TokenType.RETURN,
            "true": TokenType.TRUE, "false": TokenType.FALSE, "null": TokenType.NULL, "int": TokenType.KW_INT,
            "bool": TokenType.KW_BOOL, "string": TokenType.KW_STRING, "float": TokenType.KW_FLOAT,
            "const": TokenType.CONST, "struct": TokenType.STRUCT, "fnord": TokenType.IDENT,
            "_under9": TokenType.IDENT,
        }
        for case, result in cases.items():
            self.assertEqual(result, next(iter(Lexer(case))).type)

    def test_positions(self):
        tokens = list(Lexer("a\n  bc"))
        self.assertEqual([(1, 0), (1, 1), (2, 2), (2, 4)], [(tok.line, tok.col) for tok in tokens])

        tokens = list(Lexer("x", first_line=7))
        self.assertEqual(7, tokens[0].line)

    def test_comments(self):
        source = "1 /* spans\nlines */ 2 // gone\n3"
        expected = [
            (TokenType.INT, "1"),
            (TokenType.INT, "2"),
            (TokenType.ENDOFLINE, "\n"),
            (TokenType.INT, "3"),
            (TokenType.EOF, ""),
        ]
        self.assertEqual(expected, kinds(source))

    def test_unterminated_comment(self):
        lexer = Lexer("1 /* never closed")
        self.assertEqual([TokenType.INT, TokenType.EOF], [tok.type for tok in lexer])
        self.assertEqual([], lexer.errors)
        self.assertEqual(["unterminated block comment"], [warning.text for warning in lexer.warnings])

    def test_errors(self):
        cases = {
            "5abc": ("5abc", "identifiers cannot start with a number: '5abc'"),
            '"abc': ('"abc', "unterminated string literal"),
            "@": ("@", "illegal character '@'"),
        }
        for case, (literal, message) in cases.items():
            lexer = Lexer(case)
            tok = lexer.next_token()
            self.assertEqual((TokenType.ILLEGAL, literal), (tok.type, tok.literal))
            self.assertEqual(TokenType.EOF, lexer.next_token().type)
            self.assertEqual([message], [error.text for error in lexer.errors])

    def test_error_location(self):
        lexer = Lexer("int x = 1\nint y = 2 $ 3")
        illegal = next(tok for tok in lexer if tok.type is TokenType.ILLEGAL)
        error, = lexer.errors
        self.assertEqual((2, 10), (error.line, error.col))
        self.assertEqual("int y = 2 $ 3", error.expr)
        self.assertIs(error, lexer.error_at(illegal))

    def test_eof_is_sticky(self):
        lexer = Lexer("")
        self.assertEqual(TokenType.EOF, lexer.next_token().type)
        self.assertEqual(TokenType.EOF, lexer.next_token().type)


if __name__ == '__main__':
    unittest.main()
